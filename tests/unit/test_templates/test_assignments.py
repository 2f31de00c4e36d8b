"""
test_assignments.py - assignment 리스트 규칙 테스트

검증:
- 정렬: locationId 사전순 → order 오름차순
- upsert: 같은 쌍은 교체 (중복 없음)
- remove: 없는 쌍은 no-op
- cascade: location/module 참조 제거, 페이지 전체
"""

from src.domain.schemas import Assignment, Location, Module, Page, PageType
from src.templates.assignments import (
    cascade_pages,
    drop_references,
    find_assignment,
    remove_assignment,
    sort_assignments,
    sort_by_order,
    upsert_assignment,
)


def a(location_id: str, module_id: str, order: int = 0) -> Assignment:
    return Assignment(location_id=location_id, module_id=module_id, order=order)


# =============================================================================
# 정렬
# =============================================================================

class TestSortAssignments:
    """정렬 규칙 테스트."""

    def test_grouped_by_location_then_order(self):
        items = [a("L2", "M1", 1), a("L1", "M2", 5), a("L2", "M3", 0), a("L1", "M1", 2)]

        result = sort_assignments(items)

        assert [(x.location_id, x.order) for x in result] == [
            ("L1", 2), ("L1", 5), ("L2", 0), ("L2", 1),
        ]

    def test_stable_for_equal_order(self):
        """order가 같으면 입력 순서 유지."""
        items = [a("L1", "M2", 0), a("L1", "M1", 0)]

        result = sort_assignments(items)

        assert [x.module_id for x in result] == ["M2", "M1"]

    def test_does_not_mutate_input(self):
        items = [a("L2", "M1"), a("L1", "M1")]

        sort_assignments(items)

        assert [x.location_id for x in items] == ["L2", "L1"]

    def test_sort_by_order(self):
        locs = [Location(id="b", name="B", order=2), Location(id="a", name="A", order=1)]

        assert [loc.id for loc in sort_by_order(locs)] == ["a", "b"]

    def test_sort_by_order_modules(self):
        """Module 리스트도 같은 규칙, 원소 타입 유지."""
        modules = [Module(id="m2", type="html", order=3), Module(id="m1", type="menu", order=0)]

        result = sort_by_order(modules)

        assert [m.id for m in result] == ["m1", "m2"]
        assert all(isinstance(m, Module) for m in result)


# =============================================================================
# upsert / remove / find
# =============================================================================

class TestUpsertAssignment:
    """교체 시맨틱 테스트."""

    def test_append_new(self):
        result = upsert_assignment([a("L1", "M1", 0)], a("L1", "M2", 1))

        assert len(result) == 2

    def test_replace_same_pair(self):
        """같은 (locationId, moduleId) → 1개만, 최신 order."""
        result = upsert_assignment([a("L1", "M1", 0)], a("L1", "M1", 7))

        assert len(result) == 1
        assert result[0].order == 7

    def test_same_module_other_location_kept(self):
        """같은 module이라도 location이 다르면 별개."""
        result = upsert_assignment([a("L1", "M1", 0)], a("L2", "M1", 0))

        assert len(result) == 2

    def test_result_sorted(self):
        result = upsert_assignment([a("L1", "M1", 5)], a("L1", "M2", 1))

        assert [x.module_id for x in result] == ["M2", "M1"]


class TestRemoveAssignment:
    """해제 테스트."""

    def test_remove_existing(self):
        result = remove_assignment([a("L1", "M1"), a("L1", "M2")], "L1", "M1")

        assert [x.module_id for x in result] == ["M2"]

    def test_remove_missing_is_noop(self):
        items = [a("L1", "M1")]

        result = remove_assignment(items, "L9", "M9")

        assert [x.key for x in result] == [("L1", "M1")]

    def test_find(self):
        items = [a("L1", "M1", 3)]

        assert find_assignment(items, "L1", "M1").order == 3
        assert find_assignment(items, "L1", "M2") is None


# =============================================================================
# cascade
# =============================================================================

class TestCascade:
    """참조 제거 테스트."""

    def test_drop_by_location(self):
        items = [a("L1", "M1"), a("L2", "M1"), a("L1", "M2")]

        result = drop_references(items, location_id="L1")

        assert [x.key for x in result] == [("L2", "M1")]

    def test_drop_by_module(self):
        items = [a("L1", "M1"), a("L2", "M1"), a("L1", "M2")]

        result = drop_references(items, module_id="M1")

        assert [x.key for x in result] == [("L1", "M2")]

    def test_drop_without_filter_keeps_all(self):
        items = [a("L1", "M1")]

        assert drop_references(items) == items

    def test_cascade_pages_counts(self):
        pages = [
            Page(id="P1", page_type=PageType.HOME, page_name="Home",
                 module_assignments=[a("L1", "M1"), a("L2", "M2")]),
            Page(id="P2", page_type=PageType.SEARCH, page_name="Search",
                 module_assignments=[a("L3", "M1")]),
            Page(id="P3", page_type=PageType.ALBUM, page_name="Album"),
        ]

        removed = cascade_pages(pages, module_id="M1")

        assert removed == 2
        assert [x.key for x in pages[0].module_assignments] == [("L2", "M2")]
        assert pages[1].module_assignments == []
        assert pages[2].module_assignments == []
