"""
Error definitions for the composition engine.

규칙:
- 조용한 실패 금지 → 타입이 있는 에러로 명시적 실패
- 검증은 store 쓰기 이전에만 수행 (실패 시 저장 상태 불변)
- store 계층 에러는 감싸지 않고 그대로 전파
"""

from typing import Any


class CompositionError(Exception):
    """
    템플릿 구성 엔진의 기본 에러.

    Usage:
        raise NotFoundError(ErrorCodes.LOCATION_NOT_FOUND,
                            f"Location {location_id} not found",
                            location_id=location_id)
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class NotFoundError(CompositionError):
    """template / location / module / page / assignment 없음."""


class ConflictError(CompositionError):
    """이미 존재하는 templateId로 생성 시도."""


class InvalidArgumentError(CompositionError):
    """필수 필드 누락, 잘못된 값."""


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === NotFound ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"
    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"

    # === Conflict ===
    TEMPLATE_EXISTS = "TEMPLATE_EXISTS"

    # === InvalidArgument ===
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_PAGE_TYPE = "INVALID_PAGE_TYPE"
    INVALID_GRID = "INVALID_GRID"
    GRID_OUT_OF_BOUNDS = "GRID_OUT_OF_BOUNDS"
