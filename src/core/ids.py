"""
ID 생성: templateId, location/module/page id

규칙:
- 생성된 id는 수정 금지
- 포맷은 보장하지 않음, 고유성만 보장 (UUID v4)
"""

import uuid
from collections.abc import Callable

IdFactory = Callable[[], str]


def generate_id() -> str:
    """
    엔티티 ID 생성.

    고유성 보장: UUID v4
    포맷: 8-4-4-4-12 hex (예: 3f2b...-...)

    Returns:
        id 문자열
    """
    return str(uuid.uuid4())


def sequential_id_factory(prefix: str = "id") -> IdFactory:
    """
    결정론적 ID 팩토리 (테스트/시드 데이터용).

    호출 순서대로 {prefix}-1, {prefix}-2, ... 반환.
    """
    counter = 0

    def _next() -> str:
        nonlocal counter
        counter += 1
        return f"{prefix}-{counter}"

    return _next
