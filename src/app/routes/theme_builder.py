"""
Theme Builder Routes: 템플릿 구성 API.

- 템플릿 CRUD
- locations / modules / assignments / pages 하위 리소스
- 모든 변경 응답은 갱신된 TemplateConfig 전체

권한 확인은 상위 계층에서 처리됨 (여기서는 하지 않음).
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from src.domain.errors import (
    CompositionError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from src.templates.composer import CompositionEngine

api_router = APIRouter()  # API endpoints


# =============================================================================
# Helpers
# =============================================================================

def get_engine(request: Request) -> CompositionEngine:
    """lifespan에서 생성된 엔진."""
    engine: CompositionEngine = request.app.state.engine
    return engine


def to_http_error(e: CompositionError) -> HTTPException:
    """도메인 에러 → HTTP 상태 코드."""
    if isinstance(e, NotFoundError):
        status_code = 404
    elif isinstance(e, ConflictError):
        status_code = 409
    elif isinstance(e, InvalidArgumentError):
        status_code = 400
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail={"code": e.code, "message": e.message})


# =============================================================================
# Templates
# =============================================================================

@api_router.get("")
async def list_templates(request: Request) -> list[dict[str, Any]]:
    """템플릿 전체 목록."""
    templates = await get_engine(request).list_templates()
    return [t.to_dict() for t in templates]


@api_router.get("/{template_id}")
async def get_template(request: Request, template_id: str) -> dict[str, Any]:
    """템플릿 상세 조회."""
    try:
        config = await get_engine(request).get_template(template_id)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.post("")
async def create_template(
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """
    템플릿 생성.

    body: templateName (필수), templateId, gridRows, gridColumns
    """
    try:
        config = await get_engine(request).create_template(payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.put("/{template_id}")
async def update_template(
    request: Request,
    template_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """템플릿 필드 교체 (grid 변경 포함)."""
    try:
        config = await get_engine(request).update_template(template_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.delete("/{template_id}")
async def delete_template(request: Request, template_id: str) -> dict[str, Any]:
    """템플릿 삭제."""
    try:
        return await get_engine(request).delete_template(template_id)
    except CompositionError as e:
        raise to_http_error(e) from e


# =============================================================================
# Locations
# =============================================================================

@api_router.post("/{template_id}/locations")
async def add_location(
    request: Request,
    template_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    try:
        config = await get_engine(request).add_location(template_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.put("/{template_id}/locations/{location_id}")
async def update_location(
    request: Request,
    template_id: str,
    location_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    try:
        config = await get_engine(request).update_location(template_id, location_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.delete("/{template_id}/locations/{location_id}")
async def delete_location(
    request: Request,
    template_id: str,
    location_id: str,
) -> dict[str, Any]:
    try:
        config = await get_engine(request).delete_location(template_id, location_id)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


# =============================================================================
# Modules
# =============================================================================

@api_router.post("/{template_id}/modules")
async def add_module(
    request: Request,
    template_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    try:
        config = await get_engine(request).add_module(template_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.put("/{template_id}/modules/{module_id}")
async def update_module(
    request: Request,
    template_id: str,
    module_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    try:
        config = await get_engine(request).update_module(template_id, module_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.delete("/{template_id}/modules/{module_id}")
async def delete_module(
    request: Request,
    template_id: str,
    module_id: str,
) -> dict[str, Any]:
    try:
        config = await get_engine(request).delete_module(template_id, module_id)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


# =============================================================================
# Assignments (template defaults)
# =============================================================================

@api_router.post("/{template_id}/assignments")
async def assign_module(
    request: Request,
    template_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """body: locationId, moduleId, order."""
    try:
        config = await get_engine(request).assign_module(template_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.put("/{template_id}/assignments/{location_id}/{module_id}")
async def update_assignment_order(
    request: Request,
    template_id: str,
    location_id: str,
    module_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """body: {"order": int}."""
    try:
        config = await get_engine(request).update_assignment_order(
            template_id, location_id, module_id, payload.get("order")
        )
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.delete("/{template_id}/assignments/{location_id}/{module_id}")
async def unassign_module(
    request: Request,
    template_id: str,
    location_id: str,
    module_id: str,
) -> dict[str, Any]:
    try:
        config = await get_engine(request).unassign_module(template_id, location_id, module_id)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


# =============================================================================
# Pages
# =============================================================================

@api_router.post("/{template_id}/pages")
async def add_page(
    request: Request,
    template_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """body: pageType, pageName, pageId (custom), moduleAssignments."""
    try:
        config = await get_engine(request).add_page(template_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.delete("/{template_id}/pages/{page_id}")
async def delete_page(
    request: Request,
    template_id: str,
    page_id: str,
) -> dict[str, Any]:
    try:
        config = await get_engine(request).delete_page(template_id, page_id)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.post("/{template_id}/pages/{page_id}/assignments")
async def assign_module_to_page(
    request: Request,
    template_id: str,
    page_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    try:
        config = await get_engine(request).assign_module_to_page(template_id, page_id, payload)
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e


@api_router.delete("/{template_id}/pages/{page_id}/assignments/{location_id}/{module_id}")
async def unassign_module_from_page(
    request: Request,
    template_id: str,
    page_id: str,
    location_id: str,
    module_id: str,
) -> dict[str, Any]:
    try:
        config = await get_engine(request).unassign_module_from_page(
            template_id, page_id, location_id, module_id
        )
        return config.to_dict()
    except CompositionError as e:
        raise to_http_error(e) from e
