"""
Templates layer: 템플릿 구성 엔진.

역할:
- TemplateConfig 문서 CRUD (manager.py)
- location / module / assignment / page 연산 (composer.py)
- assignment 리스트 규칙: 교체, 정렬, cascade (assignments.py)
"""

from .composer import CompositionEngine
from .manager import (
    TemplateManager,
    validate_grid,
    validate_location_span,
    validate_references,
    validate_template_name,
    validate_unique_ids,
)

__all__ = [
    # composer
    "CompositionEngine",
    # manager
    "TemplateManager",
    "validate_template_name",
    "validate_grid",
    "validate_location_span",
    "validate_unique_ids",
    "validate_references",
]
