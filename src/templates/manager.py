"""
템플릿 관리자: TemplateConfig 문서 CRUD.

핵심 규칙:
- templateId는 전역 고유, 생성 후 변경 불가 (update의 templateId는 무시)
- 중복 templateId 생성 시 에러 (fail-fast, 기존 문서 불변)
- templateName 필수
- update는 필드 단위 교체 (deep merge 아님)
- 검증 실패는 store 쓰기 이전에 발생
"""

import logging
from typing import Any

from src.core.ids import IdFactory, generate_id
from src.core.store import TemplateStore
from src.domain.errors import (
    ConflictError,
    ErrorCodes,
    InvalidArgumentError,
    NotFoundError,
)
from src.domain.schemas import Assignment, Location, TemplateConfig
from src.templates.assignments import sort_assignments, sort_by_order

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# create()가 받는 필드
CREATE_FIELDS = ("templateId", "templateName", "gridRows", "gridColumns")

# update()로 교체 가능한 필드 (templateId 제외)
UPDATABLE_FIELDS = (
    "templateName",
    "gridRows",
    "gridColumns",
    "locations",
    "modules",
    "assignments",
    "pages",
)


# =============================================================================
# Validation
# =============================================================================

def validate_template_name(name: Any) -> str:
    """
    templateName 검증.

    Raises:
        InvalidArgumentError: MISSING_REQUIRED_FIELD
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError(
            ErrorCodes.MISSING_REQUIRED_FIELD,
            "templateName is required",
            field="templateName",
        )
    return name


def validate_grid(config: TemplateConfig) -> None:
    """
    gridRows / gridColumns: 있으면 양의 정수.

    Raises:
        InvalidArgumentError: INVALID_GRID
    """
    for key, value in (("gridRows", config.grid_rows), ("gridColumns", config.grid_columns)):
        if value is not None and value < 1:
            raise InvalidArgumentError(
                ErrorCodes.INVALID_GRID,
                f"{key} must be a positive integer",
                field=key,
                value=value,
            )


def validate_location_span(location: Location, config: TemplateConfig) -> None:
    """
    Location 그리드 span 검증.

    규칙 (span 필드가 있을 때만):
    - 1-based, 양 끝 포함
    - start <= end
    - 템플릿에 gridRows/gridColumns가 있으면 end <= grid 크기

    Raises:
        InvalidArgumentError: INVALID_GRID, GRID_OUT_OF_BOUNDS
    """
    if not location.has_span():
        return

    axes = (
        ("Row", location.start_row, location.end_row, config.grid_rows),
        ("Col", location.start_col, location.end_col, config.grid_columns),
    )
    for axis, start, end, limit in axes:
        for key, value in ((f"start{axis}", start), (f"end{axis}", end)):
            if value is None:
                continue
            if value < 1:
                raise InvalidArgumentError(
                    ErrorCodes.INVALID_GRID,
                    f"location.{key} must be >= 1",
                    location_id=location.id,
                    field=key,
                    value=value,
                )
            if limit is not None and value > limit:
                raise InvalidArgumentError(
                    ErrorCodes.GRID_OUT_OF_BOUNDS,
                    f"location.{key}={value} exceeds grid size {limit}",
                    location_id=location.id,
                    field=key,
                    value=value,
                    limit=limit,
                )

        if start is not None and end is not None and start > end:
            raise InvalidArgumentError(
                ErrorCodes.INVALID_GRID,
                f"location.start{axis} must not exceed end{axis}",
                location_id=location.id,
                start=start,
                end=end,
            )


def validate_unique_ids(config: TemplateConfig) -> None:
    """
    location / module / page id는 템플릿 안에서 고유.

    Raises:
        InvalidArgumentError: INVALID_FIELD
    """
    groups = (
        ("locations", [loc.id for loc in config.locations]),
        ("modules", [m.id for m in config.modules]),
        ("pages", [p.id for p in config.pages]),
    )
    for scope, ids in groups:
        seen: set[str] = set()
        for entity_id in ids:
            if entity_id in seen:
                raise InvalidArgumentError(
                    ErrorCodes.INVALID_FIELD,
                    f"Duplicate id {entity_id} in {scope}",
                    scope=scope,
                    id=entity_id,
                )
            seen.add(entity_id)


def _check_references(
    assignments: list[Assignment],
    location_ids: set[str],
    module_ids: set[str],
    scope: str,
) -> None:
    seen: set[tuple[str, str]] = set()
    for a in assignments:
        if a.location_id not in location_ids or a.module_id not in module_ids:
            raise InvalidArgumentError(
                ErrorCodes.INVALID_FIELD,
                f"Assignment ({a.location_id}, {a.module_id}) in {scope} "
                "references an unknown location or module",
                scope=scope,
                location_id=a.location_id,
                module_id=a.module_id,
            )
        if a.key in seen:
            raise InvalidArgumentError(
                ErrorCodes.INVALID_FIELD,
                f"Duplicate assignment ({a.location_id}, {a.module_id}) in {scope}",
                scope=scope,
                location_id=a.location_id,
                module_id=a.module_id,
            )
        seen.add(a.key)


def validate_references(config: TemplateConfig) -> None:
    """
    모든 assignment가 존재하는 location/module을 참조하는지,
    리스트 내 (locationId, moduleId) 중복이 없는지 확인.

    Raises:
        InvalidArgumentError: INVALID_FIELD
    """
    location_ids = {loc.id for loc in config.locations}
    module_ids = {m.id for m in config.modules}

    _check_references(config.assignments, location_ids, module_ids, "assignments")
    for page in config.pages:
        _check_references(
            page.module_assignments, location_ids, module_ids, f"page {page.id}"
        )


def normalize_order(config: TemplateConfig) -> TemplateConfig:
    """locations/modules/assignments 정렬 상태 유지."""
    config.locations = sort_by_order(config.locations)
    config.modules = sort_by_order(config.modules)
    config.assignments = sort_assignments(config.assignments)
    for page in config.pages:
        page.module_assignments = sort_assignments(page.module_assignments)
    return config


# =============================================================================
# Template Manager
# =============================================================================

class TemplateManager:
    """
    TemplateConfig aggregate 저장소.

    store 위에서 문서 전체 단위로 읽고 씀.
    """

    def __init__(self, store: TemplateStore, id_factory: IdFactory = generate_id):
        """
        Args:
            store: 문서 저장소
            id_factory: templateId 생성 함수
        """
        self.store = store
        self.id_factory = id_factory

    # =========================================================================
    # Read
    # =========================================================================

    async def get_all(self) -> list[TemplateConfig]:
        """전체 템플릿 목록."""
        docs = await self.store.find_all()
        return [TemplateConfig.from_dict(doc) for doc in docs]

    async def get(self, template_id: str) -> TemplateConfig:
        """
        템플릿 조회.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND
        """
        doc = await self.store.find_by_id(template_id)
        if doc is None:
            raise NotFoundError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                f"Template {template_id} not found",
                template_id=template_id,
            )
        return TemplateConfig.from_dict(doc)

    # =========================================================================
    # Create
    # =========================================================================

    async def create(self, partial: dict[str, Any]) -> TemplateConfig:
        """
        새 템플릿 생성.

        locations/modules/assignments/pages는 항상 빈 리스트로 시작.
        templateId가 없거나 빈 값이면 새로 발급.

        Args:
            partial: templateName (필수), templateId, gridRows, gridColumns

        Returns:
            저장된 TemplateConfig

        Raises:
            InvalidArgumentError: MISSING_REQUIRED_FIELD, INVALID_GRID
            ConflictError: TEMPLATE_EXISTS
        """
        template_name = validate_template_name(partial.get("templateName"))
        template_id = partial.get("templateId") or self.id_factory()
        if not isinstance(template_id, str):
            raise InvalidArgumentError(
                ErrorCodes.INVALID_FIELD,
                "templateId must be a string",
                field="templateId",
            )

        config = TemplateConfig.from_dict({
            "templateId": template_id,
            "templateName": template_name,
            "gridRows": partial.get("gridRows"),
            "gridColumns": partial.get("gridColumns"),
        })
        validate_grid(config)

        # 중복 체크는 store가 쓰기와 함께 원자적으로 수행
        if not await self.store.insert_one(config.to_dict()):
            raise ConflictError(
                ErrorCodes.TEMPLATE_EXISTS,
                f"Template {template_id} already exists",
                template_id=template_id,
            )

        logger.info(f"Created template: {config.template_name} ({template_id})")
        return config

    # =========================================================================
    # Update
    # =========================================================================

    async def update(self, template_id: str, partial: dict[str, Any]) -> TemplateConfig:
        """
        필드 단위 교체 업데이트.

        partial에 있는 필드만 통째로 교체. templateId는 무시.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND
            InvalidArgumentError: 교체 결과가 유효하지 않을 때
        """
        existing = await self.get(template_id)

        merged = existing.to_dict()
        for key in UPDATABLE_FIELDS:
            if key in partial:
                merged[key] = partial[key]
        merged["templateId"] = template_id

        config = TemplateConfig.from_dict(merged)
        validate_template_name(config.template_name)
        validate_grid(config)
        validate_unique_ids(config)
        for location in config.locations:
            validate_location_span(location, config)
        validate_references(config)

        return await self.save(normalize_order(config))

    async def save(self, config: TemplateConfig) -> TemplateConfig:
        """
        이미 로드/검증된 aggregate를 통째로 저장 (read 없음).

        엔진의 read-modify-write에서 write 단계로 사용.

        Raises:
            NotFoundError: 그 사이 문서가 삭제된 경우
        """
        matched = await self.store.update_one(config.template_id, config.to_dict())
        if not matched:
            raise NotFoundError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                f"Template {config.template_id} not found",
                template_id=config.template_id,
            )
        return config

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete(self, template_id: str) -> dict[str, Any]:
        """
        템플릿 문서 전체 삭제.

        Returns:
            {"success": True, "message": ...}

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND
        """
        deleted = await self.store.delete_one(template_id)
        if deleted == 0:
            raise NotFoundError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                f"Template {template_id} not found",
                template_id=template_id,
            )

        logger.info(f"Deleted template: {template_id}")
        return {
            "success": True,
            "message": f"Template {template_id} deleted successfully",
        }
