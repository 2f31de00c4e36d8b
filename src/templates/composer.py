"""
Composition Engine: 템플릿 구성 aggregate root.

모든 연산의 흐름:
1. TemplateConfig 전체 로드 (read 1회)
2. 메모리에서 검증/변경
3. 문서 전체 저장 (write 1회)
4. 갱신된 TemplateConfig 반환

핵심 규칙:
- assignment는 존재하는 location/module만 참조
- location/module 삭제 → 글로벌 assignments + 모든 페이지 moduleAssignments cascade
- 재할당은 교체 (중복 없음)
- locations/modules는 order 정렬, assignments는 locationId → order 정렬
- 락 없음, 호출 간 상태 없음 (last-writer-wins)
"""

import logging
from typing import Any

from src.core.ids import IdFactory, generate_id
from src.core.store import TemplateStore
from src.domain.errors import ErrorCodes, InvalidArgumentError, NotFoundError
from src.domain.schemas import (
    Assignment,
    Location,
    Module,
    Page,
    TemplateConfig,
)
from src.templates.assignments import (
    cascade_pages,
    drop_references,
    find_assignment,
    remove_assignment,
    sort_assignments,
    sort_by_order,
    upsert_assignment,
)
from src.templates.manager import (
    TemplateManager,
    validate_location_span,
    validate_references,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Validation
# =============================================================================

def _require_order(order: Any) -> int:
    if isinstance(order, bool) or not isinstance(order, int):
        raise InvalidArgumentError(
            ErrorCodes.INVALID_FIELD,
            "order must be an integer",
            field="order",
            value=order,
        )
    return order


def _without_id(data: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidArgumentError(
            ErrorCodes.INVALID_FIELD,
            "request body must be an object",
            value=data,
        )
    return {k: v for k, v in data.items() if k != "id"}


# =============================================================================
# Composition Engine
# =============================================================================

class CompositionEngine:
    """
    템플릿 / location / module / assignment / page 연산.

    상태 없음: store 하나를 주입받아 생성. 전역 싱글턴으로 쓰지 않음.
    """

    def __init__(self, store: TemplateStore, id_factory: IdFactory = generate_id):
        """
        Args:
            store: 문서 저장소
            id_factory: location/module/page/template id 생성 함수
        """
        self.templates = TemplateManager(store, id_factory=id_factory)
        self.id_factory = id_factory

    # =========================================================================
    # Template CRUD
    # =========================================================================

    async def list_templates(self) -> list[TemplateConfig]:
        return await self.templates.get_all()

    async def get_template(self, template_id: str) -> TemplateConfig:
        return await self.templates.get(template_id)

    async def create_template(self, partial: dict[str, Any]) -> TemplateConfig:
        return await self.templates.create(partial)

    async def update_template(
        self, template_id: str, partial: dict[str, Any]
    ) -> TemplateConfig:
        return await self.templates.update(template_id, partial)

    async def delete_template(self, template_id: str) -> dict[str, Any]:
        return await self.templates.delete(template_id)

    # =========================================================================
    # Locations
    # =========================================================================

    async def add_location(
        self, template_id: str, location: dict[str, Any]
    ) -> TemplateConfig:
        """
        Location 추가 (id 발급, order 정렬).

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND
            InvalidArgumentError: name 누락, span 오류
        """
        config = await self.templates.get(template_id)

        new_location = Location.from_dict({**_without_id(location), "id": self.id_factory()})
        validate_location_span(new_location, config)

        config.locations = sort_by_order([*config.locations, new_location])
        return await self.templates.save(config)

    async def update_location(
        self, template_id: str, location_id: str, updates: dict[str, Any]
    ) -> TemplateConfig:
        """
        Location 필드 교체.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, LOCATION_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        current = self._get_location(config, location_id)

        merged = {**current.to_dict(), **_without_id(updates), "id": location_id}
        updated = Location.from_dict(merged)
        validate_location_span(updated, config)

        config.locations = sort_by_order(
            updated if loc.id == location_id else loc for loc in config.locations
        )
        return await self.templates.save(config)

    async def delete_location(self, template_id: str, location_id: str) -> TemplateConfig:
        """
        Location 삭제 + cascade.

        글로벌 assignments와 모든 페이지 moduleAssignments에서
        해당 locationId 참조를 제거하고 한 번에 저장.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, LOCATION_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        self._get_location(config, location_id)

        config.locations = [loc for loc in config.locations if loc.id != location_id]

        before = len(config.assignments)
        config.assignments = drop_references(config.assignments, location_id=location_id)
        removed = before - len(config.assignments)
        removed += cascade_pages(config.pages, location_id=location_id)

        saved = await self.templates.save(config)
        logger.info(
            f"Deleted location {location_id} from template {template_id} "
            f"({removed} assignments removed)"
        )
        return saved

    # =========================================================================
    # Modules
    # =========================================================================

    async def add_module(self, template_id: str, module: dict[str, Any]) -> TemplateConfig:
        """
        Module 추가 (id 발급, order 정렬).

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND
            InvalidArgumentError: type 누락
        """
        config = await self.templates.get(template_id)

        new_module = Module.from_dict({**_without_id(module), "id": self.id_factory()})

        config.modules = sort_by_order([*config.modules, new_module])
        return await self.templates.save(config)

    async def update_module(
        self, template_id: str, module_id: str, updates: dict[str, Any]
    ) -> TemplateConfig:
        """
        Module 필드 교체. props도 통째로 교체 (merge 아님).

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, MODULE_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        current = self._get_module(config, module_id)

        merged = {**current.to_dict(), **_without_id(updates), "id": module_id}
        updated = Module.from_dict(merged)

        config.modules = sort_by_order(
            updated if m.id == module_id else m for m in config.modules
        )
        return await self.templates.save(config)

    async def delete_module(self, template_id: str, module_id: str) -> TemplateConfig:
        """
        Module 삭제 + cascade (delete_location과 같은 범위).

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, MODULE_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        self._get_module(config, module_id)

        config.modules = [m for m in config.modules if m.id != module_id]

        before = len(config.assignments)
        config.assignments = drop_references(config.assignments, module_id=module_id)
        removed = before - len(config.assignments)
        removed += cascade_pages(config.pages, module_id=module_id)

        saved = await self.templates.save(config)
        logger.info(
            f"Deleted module {module_id} from template {template_id} "
            f"({removed} assignments removed)"
        )
        return saved

    # =========================================================================
    # Assignments (template defaults)
    # =========================================================================

    async def assign_module(
        self, template_id: str, assignment: dict[str, Any]
    ) -> TemplateConfig:
        """
        Module을 location에 배치. 같은 쌍이 있으면 교체.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, LOCATION_NOT_FOUND, MODULE_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        new_assignment = self._checked_assignment(config, assignment)

        config.assignments = upsert_assignment(config.assignments, new_assignment)
        return await self.templates.save(config)

    async def unassign_module(
        self, template_id: str, location_id: str, module_id: str
    ) -> TemplateConfig:
        """배치 해제. 없으면 no-op (저장하지 않음)."""
        config = await self.templates.get(template_id)

        if find_assignment(config.assignments, location_id, module_id) is None:
            return config

        config.assignments = remove_assignment(config.assignments, location_id, module_id)
        return await self.templates.save(config)

    async def update_assignment_order(
        self, template_id: str, location_id: str, module_id: str, order: int
    ) -> TemplateConfig:
        """
        배치 순서 변경.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, ASSIGNMENT_NOT_FOUND
            InvalidArgumentError: order가 정수가 아님
        """
        new_order = _require_order(order)
        config = await self.templates.get(template_id)

        assignment = find_assignment(config.assignments, location_id, module_id)
        if assignment is None:
            raise NotFoundError(
                ErrorCodes.ASSIGNMENT_NOT_FOUND,
                f"Assignment ({location_id}, {module_id}) not found",
                template_id=template_id,
                location_id=location_id,
                module_id=module_id,
            )

        assignment.order = new_order
        config.assignments = sort_assignments(config.assignments)
        return await self.templates.save(config)

    # =========================================================================
    # Pages (per-page overrides)
    # =========================================================================

    async def add_page(self, template_id: str, page: dict[str, Any]) -> TemplateConfig:
        """
        페이지 추가 (id 발급).

        입력에 moduleAssignments가 있으면 참조 검증 후 정렬.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND
            InvalidArgumentError: pageType/pageName 오류, 잘못된 참조
        """
        config = await self.templates.get(template_id)

        new_page = Page.from_dict({**_without_id(page), "id": self.id_factory()})
        new_page.module_assignments = sort_assignments(new_page.module_assignments)

        config.pages = [*config.pages, new_page]
        validate_references(config)
        return await self.templates.save(config)

    async def delete_page(self, template_id: str, page_id: str) -> TemplateConfig:
        """
        페이지 삭제. 페이지 밖에는 영향 없음.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, PAGE_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        self._get_page(config, page_id)

        config.pages = [p for p in config.pages if p.id != page_id]
        return await self.templates.save(config)

    async def assign_module_to_page(
        self, template_id: str, page_id: str, assignment: dict[str, Any]
    ) -> TemplateConfig:
        """
        페이지 범위 배치. 규칙은 assign_module과 동일.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, PAGE_NOT_FOUND,
                LOCATION_NOT_FOUND, MODULE_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        page = self._get_page(config, page_id)
        new_assignment = self._checked_assignment(config, assignment)

        page.module_assignments = upsert_assignment(page.module_assignments, new_assignment)
        return await self.templates.save(config)

    async def unassign_module_from_page(
        self, template_id: str, page_id: str, location_id: str, module_id: str
    ) -> TemplateConfig:
        """
        페이지 범위 배치 해제. 쌍이 없으면 no-op.

        Raises:
            NotFoundError: TEMPLATE_NOT_FOUND, PAGE_NOT_FOUND
        """
        config = await self.templates.get(template_id)
        page = self._get_page(config, page_id)

        if find_assignment(page.module_assignments, location_id, module_id) is None:
            return config

        page.module_assignments = remove_assignment(
            page.module_assignments, location_id, module_id
        )
        return await self.templates.save(config)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _get_location(self, config: TemplateConfig, location_id: str) -> Location:
        location = config.find_location(location_id)
        if location is None:
            raise NotFoundError(
                ErrorCodes.LOCATION_NOT_FOUND,
                f"Location {location_id} not found",
                template_id=config.template_id,
                location_id=location_id,
            )
        return location

    def _get_module(self, config: TemplateConfig, module_id: str) -> Module:
        module = config.find_module(module_id)
        if module is None:
            raise NotFoundError(
                ErrorCodes.MODULE_NOT_FOUND,
                f"Module {module_id} not found",
                template_id=config.template_id,
                module_id=module_id,
            )
        return module

    def _get_page(self, config: TemplateConfig, page_id: str) -> Page:
        page = config.find_page(page_id)
        if page is None:
            raise NotFoundError(
                ErrorCodes.PAGE_NOT_FOUND,
                f"Page {page_id} not found",
                template_id=config.template_id,
                page_id=page_id,
            )
        return page

    def _checked_assignment(
        self, config: TemplateConfig, data: dict[str, Any]
    ) -> Assignment:
        """입력 파싱 + location/module 존재 확인 (location 먼저)."""
        assignment = Assignment.from_dict(data)
        self._get_location(config, assignment.location_id)
        self._get_module(config, assignment.module_id)
        return assignment
