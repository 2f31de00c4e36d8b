"""
Pytest fixtures for the theme builder tests.

테스트 구성:
- 저장소: MemoryTemplateStore (기본), JsonFileTemplateStore (tmp_path)
- 엔진: 결정론적 ID 팩토리 사용 (id-1, id-2, ...)
"""

from pathlib import Path

import pytest
import yaml

from src.core.ids import sequential_id_factory
from src.core.store import JsonFileTemplateStore, MemoryTemplateStore
from src.templates.composer import CompositionEngine

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def memory_store() -> MemoryTemplateStore:
    """빈 메모리 저장소."""
    return MemoryTemplateStore()


@pytest.fixture
def json_store(tmp_path: Path) -> JsonFileTemplateStore:
    """tmp_path 기반 파일 저장소."""
    return JsonFileTemplateStore(tmp_path / "theme_builder", lock_timeout=1.0)


# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture
def engine(memory_store: MemoryTemplateStore) -> CompositionEngine:
    """메모리 저장소 + 결정론적 ID 엔진."""
    return CompositionEngine(memory_store, id_factory=sequential_id_factory("id"))


@pytest.fixture
def json_engine(json_store: JsonFileTemplateStore) -> CompositionEngine:
    """파일 저장소 엔진."""
    return CompositionEngine(json_store)


# =============================================================================
# Sample Data
# =============================================================================

@pytest.fixture
def sample_location() -> dict:
    """헤더 location 입력."""
    return {"name": "Header", "order": 0}


@pytest.fixture
def sample_module() -> dict:
    """메뉴 module 입력."""
    return {
        "type": "menu",
        "title": "Main Menu",
        "order": 0,
        "published": True,
        "props": {"items": [{"label": "Home", "href": "/"}], "sticky": True},
    }
