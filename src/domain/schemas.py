"""
Data schemas for the composition engine.

규칙:
- 필드명 통일: 저장/전송 형식은 camelCase (templateId, moduleAssignments 등)
- 선택 필드는 None이면 직렬화에서 생략
- Module.props는 불투명(opaque) 맵: 엔진은 내용을 해석하지 않음
- from_dict: 누락된 리스트는 빈 리스트로 정규화
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.domain.constants import (
    PAGE_TYPE_ALBUM,
    PAGE_TYPE_ALBUMS,
    PAGE_TYPE_CUSTOM,
    PAGE_TYPE_HOME,
    PAGE_TYPE_PAGE,
    PAGE_TYPE_SEARCH,
)
from src.domain.errors import ErrorCodes, InvalidArgumentError

# =============================================================================
# Page Type
# =============================================================================

class PageType(str, Enum):
    """페이지 타입 (고정 열거형)."""
    HOME = PAGE_TYPE_HOME
    ALBUMS = PAGE_TYPE_ALBUMS
    ALBUM = PAGE_TYPE_ALBUM
    SEARCH = PAGE_TYPE_SEARCH
    PAGE = PAGE_TYPE_PAGE
    CUSTOM = PAGE_TYPE_CUSTOM  # pageId(slug) 사용


# =============================================================================
# Field Helpers
# =============================================================================

def _invalid(entity: str, key: str, expected: str, value: Any) -> InvalidArgumentError:
    return InvalidArgumentError(
        ErrorCodes.INVALID_FIELD,
        f"{entity}.{key} must be {expected}",
        entity=entity,
        field=key,
        value=value,
    )


def _as_object(data: Any, entity: str) -> dict[str, Any]:
    """엔티티 입력은 JSON object(dict)여야 함."""
    if not isinstance(data, dict):
        raise InvalidArgumentError(
            ErrorCodes.INVALID_FIELD,
            f"{entity} must be an object",
            entity=entity,
            value=data,
        )
    return data


def _list_field(data: dict[str, Any], key: str, entity: str) -> list[Any]:
    """리스트 필드. 누락/None → 빈 리스트, 리스트가 아니면 INVALID_FIELD."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise _invalid(entity, key, "a list", value)
    return value


def _require(data: dict[str, Any], key: str, entity: str) -> str:
    """필수 문자열 필드. 없거나 빈 문자열이면 MISSING_REQUIRED_FIELD."""
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError(
            ErrorCodes.MISSING_REQUIRED_FIELD,
            f"{entity}.{key} is required",
            entity=entity,
            field=key,
        )
    if not isinstance(value, str):
        raise _invalid(entity, key, "a string", value)
    return value


def _optional_str(data: dict[str, Any], key: str, entity: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise _invalid(entity, key, "a string", value)
    return value


def _as_bool(value: Any, key: str, entity: str) -> bool:
    """불리언 필드. "false" 같은 문자열은 변환하지 않고 거부."""
    if not isinstance(value, bool):
        raise _invalid(entity, key, "a boolean", value)
    return value


def _as_int(value: Any, key: str, entity: str) -> int:
    """정수 필드 변환. bool은 거부."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(entity, key, "an integer", value)
    return value


def _optional_int(data: dict[str, Any], key: str, entity: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    return _as_int(value, key, entity)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# Entities
# =============================================================================

@dataclass
class Location:
    """그리드 위의 이름 있는 슬롯."""
    id: str
    name: str
    order: int = 0
    description: str | None = None

    # 그리드 span (1-based, 양 끝 포함)
    start_row: int | None = None
    end_row: int | None = None
    start_col: int | None = None
    end_col: int | None = None

    def has_span(self) -> bool:
        return any(
            v is not None
            for v in (self.start_row, self.end_row, self.start_col, self.end_col)
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "order": self.order,
            "startRow": self.start_row,
            "endRow": self.end_row,
            "startCol": self.start_col,
            "endCol": self.end_col,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        data = _as_object(data, "location")
        return cls(
            id=_require(data, "id", "location"),
            name=_require(data, "name", "location"),
            order=_as_int(data.get("order", 0), "order", "location"),
            description=_optional_str(data, "description", "location"),
            start_row=_optional_int(data, "startRow", "location"),
            end_row=_optional_int(data, "endRow", "location"),
            start_col=_optional_int(data, "startCol", "location"),
            end_col=_optional_int(data, "endCol", "location"),
        )


@dataclass
class Module:
    """
    재사용 가능한 콘텐츠 단위.

    type은 렌더러 선택용 태그, props는 렌더러가 해석하는 임의의 설정.
    엔진은 둘 다 해석하지 않음.
    """
    id: str
    type: str
    order: int = 0
    published: bool = False
    title: str | None = None
    props: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "props": copy.deepcopy(self.props),
            "order": self.order,
            "published": self.published,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Module":
        data = _as_object(data, "module")
        props = data.get("props")
        if props is None:
            props = {}
        if not isinstance(props, dict):
            raise InvalidArgumentError(
                ErrorCodes.INVALID_FIELD,
                "module.props must be an object",
                entity="module",
                field="props",
            )
        return cls(
            id=_require(data, "id", "module"),
            type=_require(data, "type", "module"),
            order=_as_int(data.get("order", 0), "order", "module"),
            published=_as_bool(data.get("published", False), "published", "module"),
            title=_optional_str(data, "title", "module"),
            props=copy.deepcopy(props),
        )


@dataclass
class Assignment:
    """(location, module, order) 배치. (locationId, moduleId)가 복합 키."""
    location_id: str
    module_id: str
    order: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.location_id, self.module_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "locationId": self.location_id,
            "moduleId": self.module_id,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Assignment":
        data = _as_object(data, "assignment")
        return cls(
            location_id=_require(data, "locationId", "assignment"),
            module_id=_require(data, "moduleId", "assignment"),
            order=_as_int(data.get("order", 0), "order", "assignment"),
        )


@dataclass
class Page:
    """페이지 타입별 assignment override 컨테이너."""
    id: str
    page_type: PageType
    page_name: str
    page_id: str | None = None  # custom 페이지 slug
    module_assignments: list[Assignment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "pageType": self.page_type.value,
            "pageName": self.page_name,
            "pageId": self.page_id,
            "moduleAssignments": [a.to_dict() for a in self.module_assignments],
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Page":
        data = _as_object(data, "page")
        raw_type = _require(data, "pageType", "page")
        try:
            page_type = PageType(raw_type)
        except ValueError:
            raise InvalidArgumentError(
                ErrorCodes.INVALID_PAGE_TYPE,
                f"Invalid pageType: {raw_type}",
                page_type=raw_type,
                allowed=[t.value for t in PageType],
            ) from None

        return cls(
            id=_require(data, "id", "page"),
            page_type=page_type,
            page_name=_require(data, "pageName", "page"),
            page_id=_optional_str(data, "pageId", "page"),
            module_assignments=[
                Assignment.from_dict(a)
                for a in _list_field(data, "moduleAssignments", "page")
            ],
        )


# =============================================================================
# Aggregate Root
# =============================================================================

@dataclass
class TemplateConfig:
    """
    템플릿 구성 (aggregate root).

    저장 단위 = 문서 전체. 모든 변경은 문서 전체를 다시 씀.
    """
    template_id: str
    template_name: str
    grid_rows: int | None = None
    grid_columns: int | None = None
    locations: list[Location] = field(default_factory=list)
    modules: list[Module] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)
    pages: list[Page] = field(default_factory=list)

    def find_location(self, location_id: str) -> Location | None:
        return next((loc for loc in self.locations if loc.id == location_id), None)

    def find_module(self, module_id: str) -> Module | None:
        return next((m for m in self.modules if m.id == module_id), None)

    def find_page(self, page_id: str) -> Page | None:
        return next((p for p in self.pages if p.id == page_id), None)

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용. grid 필드는 None이면 생략."""
        return _drop_none({
            "templateId": self.template_id,
            "templateName": self.template_name,
            "gridRows": self.grid_rows,
            "gridColumns": self.grid_columns,
            "locations": [loc.to_dict() for loc in self.locations],
            "modules": [m.to_dict() for m in self.modules],
            "assignments": [a.to_dict() for a in self.assignments],
            "pages": [p.to_dict() for p in self.pages],
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateConfig":
        data = _as_object(data, "template")
        return cls(
            template_id=_require(data, "templateId", "template"),
            template_name=_require(data, "templateName", "template"),
            grid_rows=_optional_int(data, "gridRows", "template"),
            grid_columns=_optional_int(data, "gridColumns", "template"),
            locations=[
                Location.from_dict(d) for d in _list_field(data, "locations", "template")
            ],
            modules=[
                Module.from_dict(d) for d in _list_field(data, "modules", "template")
            ],
            assignments=[
                Assignment.from_dict(d) for d in _list_field(data, "assignments", "template")
            ],
            pages=[Page.from_dict(d) for d in _list_field(data, "pages", "template")],
        )
