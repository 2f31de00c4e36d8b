"""
test_composition_flow.py - 템플릿 구성 전체 흐름 통합 테스트

검증 포인트:
- Blog 시나리오: 템플릿 → location → module → 배치 → 페이지 override → cascade
- 메모리 / 파일 저장소 동일 동작
- Conflict 시 기존 문서 불변
- 락 없음: 동시 수정은 last-writer-wins
"""

import json

import pytest

from src.core.ids import sequential_id_factory
from src.core.store import JsonFileTemplateStore, MemoryTemplateStore
from src.domain.errors import ConflictError, NotFoundError
from src.templates.composer import CompositionEngine

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(params=["memory", "json"])
def flow_engine(request, tmp_path) -> CompositionEngine:
    """두 저장소 모두에서 같은 흐름 실행."""
    if request.param == "memory":
        store = MemoryTemplateStore()
    else:
        store = JsonFileTemplateStore(tmp_path / "theme_builder", lock_timeout=1.0)
    return CompositionEngine(store, id_factory=sequential_id_factory("id"))


# =============================================================================
# Blog 시나리오
# =============================================================================


class TestBlogScenario:
    """Blog 템플릿 구성 흐름."""

    @pytest.mark.asyncio
    async def test_full_flow(self, flow_engine: CompositionEngine):
        """생성 → 배치 → 페이지 override → module 삭제 cascade → 템플릿 삭제."""
        engine = flow_engine

        # 1. 템플릿 생성
        config = await engine.create_template(
            {"templateName": "Blog", "gridRows": 3, "gridColumns": 2}
        )
        template_id = config.template_id
        assert template_id == "id-1"

        # 2. location 2개 (그리드 span 포함)
        await engine.add_location(
            template_id,
            {"name": "Header", "order": 0, "startRow": 1, "endRow": 1, "startCol": 1, "endCol": 2},
        )
        config = await engine.add_location(
            template_id,
            {"name": "Sidebar", "order": 1, "startRow": 2, "endRow": 3, "startCol": 2, "endCol": 2},
        )
        header, sidebar = (loc.id for loc in config.locations)
        assert (header, sidebar) == ("id-2", "id-3")

        # 3. module 2개
        await engine.add_module(
            template_id, {"type": "menu", "title": "Main", "props": {"items": ["Home"]}}
        )
        config = await engine.add_module(
            template_id, {"type": "html", "order": 1, "props": {"html": "<p>hi</p>"}}
        )
        menu, html = (m.id for m in config.modules)

        # 4. 글로벌 배치
        await engine.assign_module(template_id, {"locationId": header, "moduleId": menu, "order": 0})
        config = await engine.assign_module(
            template_id, {"locationId": sidebar, "moduleId": html, "order": 0}
        )
        assert len(config.assignments) == 2

        # 5. home / search 페이지에 menu override
        await engine.add_page(template_id, {"pageType": "home", "pageName": "Home"})
        config = await engine.add_page(template_id, {"pageType": "search", "pageName": "Search"})
        home, search = (p.id for p in config.pages)
        await engine.assign_module_to_page(
            template_id, home, {"locationId": sidebar, "moduleId": menu, "order": 0}
        )
        await engine.assign_module_to_page(
            template_id, search, {"locationId": header, "moduleId": menu, "order": 0}
        )

        # 6. menu 삭제 → 글로벌 + 두 페이지 모두에서 제거
        config = await engine.delete_module(template_id, menu)
        assert [a.key for a in config.assignments] == [(sidebar, html)]
        assert all(p.module_assignments == [] for p in config.pages)

        # 7. 다시 읽어도 동일
        reloaded = await engine.get_template(template_id)
        assert reloaded.to_dict() == config.to_dict()

        # 8. 템플릿 삭제
        result = await engine.delete_template(template_id)
        assert result["success"] is True
        with pytest.raises(NotFoundError):
            await engine.get_template(template_id)

    @pytest.mark.asyncio
    async def test_conflict_leaves_document(self, flow_engine: CompositionEngine):
        """중복 templateId 생성 → Conflict, 기존 구성 그대로."""
        engine = flow_engine
        await engine.create_template({"templateId": "blog", "templateName": "Blog"})
        await engine.add_location("blog", {"name": "Header"})
        before = (await engine.get_template("blog")).to_dict()

        with pytest.raises(ConflictError):
            await engine.create_template({"templateId": "blog", "templateName": "Other"})

        assert (await engine.get_template("blog")).to_dict() == before

    @pytest.mark.asyncio
    async def test_last_writer_wins(self, flow_engine: CompositionEngine):
        """
        같은 문서를 두 번 로드 후 각자 저장 → 나중 저장이 남음.

        엔진은 문서 단위 잠금을 하지 않으므로 먼저 쓴 변경은 사라짐.
        """
        engine = flow_engine
        await engine.create_template({"templateId": "blog", "templateName": "Blog"})

        first = await engine.templates.get("blog")
        second = await engine.templates.get("blog")

        first.template_name = "First"
        second.template_name = "Second"
        await engine.templates.save(first)
        await engine.templates.save(second)

        assert (await engine.get_template("blog")).template_name == "Second"


# =============================================================================
# 파일 저장소 문서 형태
# =============================================================================


class TestJsonDocumentShape:
    """저장된 JSON 문서 형태."""

    @pytest.mark.asyncio
    async def test_camel_case_document(self, json_store: JsonFileTemplateStore):
        engine = CompositionEngine(json_store, id_factory=sequential_id_factory("x"))
        await engine.create_template({"templateId": "blog", "templateName": "Blog", "gridRows": 2})
        await engine.add_location("blog", {"name": "Header", "startRow": 1, "endRow": 2})
        await engine.add_module("blog", {"type": "menu"})
        await engine.assign_module("blog", {"locationId": "x-1", "moduleId": "x-2", "order": 0})
        await engine.add_page("blog", {"pageType": "custom", "pageName": "About", "pageId": "about"})

        doc = json.loads((json_store.data_dir / "blog.json").read_text(encoding="utf-8"))

        assert doc == {
            "templateId": "blog",
            "templateName": "Blog",
            "gridRows": 2,
            "locations": [{"id": "x-1", "name": "Header", "order": 0, "startRow": 1, "endRow": 2}],
            "modules": [{"id": "x-2", "type": "menu", "props": {}, "order": 0, "published": False}],
            "assignments": [{"locationId": "x-1", "moduleId": "x-2", "order": 0}],
            "pages": [{
                "id": "x-3",
                "pageType": "custom",
                "pageName": "About",
                "pageId": "about",
                "moduleAssignments": [],
            }],
        }
