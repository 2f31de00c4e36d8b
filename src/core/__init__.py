"""
Core layer: 저장소, ID, 로깅.

역할:
- TemplateConfig 문서 저장소 (원자적 쓰기, 문서 락)
- 엔티티 ID 발급
"""

from .ids import generate_id, sequential_id_factory
from .logging import setup_logging
from .store import (
    JsonFileTemplateStore,
    MemoryTemplateStore,
    TemplateStore,
    atomic_write_json,
    build_store,
)

__all__ = [
    # store
    "TemplateStore",
    "MemoryTemplateStore",
    "JsonFileTemplateStore",
    "atomic_write_json",
    "build_store",
    # ids
    "generate_id",
    "sequential_id_factory",
    # logging
    "setup_logging",
]
