"""Domain layer: errors and schemas."""

from .errors import (
    CompositionError,
    ConflictError,
    ErrorCodes,
    InvalidArgumentError,
    NotFoundError,
)
from .schemas import (
    Assignment,
    Location,
    Module,
    Page,
    PageType,
    TemplateConfig,
)

__all__ = [
    "CompositionError",
    "NotFoundError",
    "ConflictError",
    "InvalidArgumentError",
    "ErrorCodes",
    "TemplateConfig",
    "Location",
    "Module",
    "Assignment",
    "Page",
    "PageType",
]
