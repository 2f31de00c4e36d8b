"""
Logging 설정.

각 모듈은 logging.getLogger(__name__)만 사용하고,
핸들러/포맷 설정은 진입점(app lifespan, 스크립트)에서 한 번만 수행.
"""

import logging
from typing import Any

from src.domain.constants import DEFAULT_LOG_LEVEL, LOG_DATE_FORMAT, LOG_FORMAT


def setup_logging(config: dict[str, Any] | None = None) -> int:
    """
    config의 logging 섹션으로 root 로거 설정.

    Args:
        config: 전체 설정 (logging.level, logging.format 사용)

    Returns:
        적용된 로그 레벨 (int)
    """
    section = (config or {}).get("logging", {}) or {}
    level_name = str(section.get("level", DEFAULT_LOG_LEVEL)).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        # 알 수 없는 레벨 이름 → 기본값
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=section.get("format", LOG_FORMAT),
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger("src").setLevel(level)
    return level
