"""
Assignment 리스트 연산 (순수 함수).

글로벌 assignments와 page.moduleAssignments 모두 같은 규칙:
- (locationId, moduleId)는 리스트 내 최대 1회 → 재할당은 교체
- 정렬: locationId 사전순 → 같은 location 안에서 order 오름차순
- 입력 리스트는 수정하지 않고 새 리스트 반환
"""

from collections.abc import Iterable
from typing import TypeVar

from src.domain.schemas import Assignment, Location, Module, Page

OrderedT = TypeVar("OrderedT", bound=Location | Module)


def assignment_sort_key(assignment: Assignment) -> tuple[str, int]:
    return (assignment.location_id, assignment.order)


def sort_assignments(assignments: Iterable[Assignment]) -> list[Assignment]:
    """locationId 그룹 → order 오름차순 (stable)."""
    return sorted(assignments, key=assignment_sort_key)


def sort_by_order(items: Iterable[OrderedT]) -> list[OrderedT]:
    """locations/modules를 order 오름차순으로 정렬 (stable)."""
    return sorted(items, key=lambda item: item.order)


def find_assignment(
    assignments: Iterable[Assignment],
    location_id: str,
    module_id: str,
) -> Assignment | None:
    key = (location_id, module_id)
    return next((a for a in assignments if a.key == key), None)


def upsert_assignment(
    assignments: Iterable[Assignment],
    assignment: Assignment,
) -> list[Assignment]:
    """
    같은 (locationId, moduleId)를 제거한 뒤 추가하고 재정렬.

    Args:
        assignments: 기존 리스트
        assignment: 새 assignment

    Returns:
        정렬된 새 리스트
    """
    kept = [a for a in assignments if a.key != assignment.key]
    kept.append(assignment)
    return sort_assignments(kept)


def remove_assignment(
    assignments: Iterable[Assignment],
    location_id: str,
    module_id: str,
) -> list[Assignment]:
    """해당 쌍 제거. 없으면 그대로 (no-op)."""
    key = (location_id, module_id)
    return [a for a in assignments if a.key != key]


def drop_references(
    assignments: Iterable[Assignment],
    *,
    location_id: str | None = None,
    module_id: str | None = None,
) -> list[Assignment]:
    """location 또는 module을 참조하는 assignment 전부 제거 (cascade)."""
    return [
        a for a in assignments
        if not (
            (location_id is not None and a.location_id == location_id)
            or (module_id is not None and a.module_id == module_id)
        )
    ]


def cascade_pages(
    pages: Iterable[Page],
    *,
    location_id: str | None = None,
    module_id: str | None = None,
) -> int:
    """
    모든 페이지의 moduleAssignments에서 참조 제거.

    Page 객체를 제자리에서 수정함 (호출자가 로드한 사본 기준).

    Returns:
        제거된 assignment 수
    """
    removed = 0
    for page in pages:
        before = len(page.module_assignments)
        page.module_assignments = drop_references(
            page.module_assignments,
            location_id=location_id,
            module_id=module_id,
        )
        removed += before - len(page.module_assignments)
    return removed
