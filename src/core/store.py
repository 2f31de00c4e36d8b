"""
Persistence Store: TemplateConfig 문서 저장소.

규칙:
- 저장 단위 = templateId 하나당 문서 하나 (부분 업데이트 없음)
- 원자적 쓰기: temp → rename + fsync (중간 상태 없음)
- 쓰기 실패 시 기존 문서 유지, 에러는 감싸지 않고 전파
- 재시도 없음

동시성:
- 문서 단위 쓰기는 FileLock으로 직렬화
- read-modify-write 사이클은 직렬화하지 않음 (last-writer-wins)
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from filelock import FileLock

from src.domain.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_STORAGE_BACKEND,
    LOCKS_DIRNAME,
    STORAGE_BACKEND_JSON,
    STORAGE_BACKEND_MEMORY,
    TEMPLATE_DOC_SUFFIX,
    TEMPLATE_ID_KEY,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Store Interface
# =============================================================================

class TemplateStore(Protocol):
    """
    TemplateConfig 형태 문서의 비동기 CRUD.

    templateId가 키. 문서는 camelCase dict (TemplateConfig.to_dict()).

    insert_one: 같은 templateId가 이미 있으면 쓰지 않고 False (존재 확인과 쓰기는 원자적).
    update_one: 문서가 없으면 False.
    """

    async def find_all(self) -> list[dict[str, Any]]: ...

    async def find_by_id(self, template_id: str) -> dict[str, Any] | None: ...

    async def insert_one(self, doc: dict[str, Any]) -> bool: ...

    async def update_one(self, template_id: str, doc: dict[str, Any]) -> bool: ...

    async def delete_one(self, template_id: str) -> int: ...


# =============================================================================
# Atomic Write
# =============================================================================


def _fsync_dir(dir_path: Path) -> None:
    """
    디렉토리 fsync (가능한 환경에서).

    rename 후 디렉토리 엔트리까지 내구성을 강화하려면 필요.
    """
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        # O_DIRECTORY 미지원, 권한 문제 등
        logger.warning(
            f"Directory fsync failed for {dir_path}: {e}. "
            f"Rename durability may not be guaranteed."
        )


def atomic_write_json(path: Path, data: dict) -> None:
    """
    원자적 JSON 쓰기.

    동작:
    - temp 파일에 기록 후 os.replace
    - 파일 fsync + 디렉토리 fsync (실패 시 경고만)
    - 실패 시 temp 파일 삭제, 기존 파일은 그대로

    Args:
        path: 저장할 파일 경로
        data: JSON 직렬화할 데이터
    """
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = Path(f.name)
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(
                    f"File fsync failed for {path}: {e}. "
                    f"Data may not be durable on power loss."
                )

        os.replace(temp_path, path)
        _fsync_dir(dir_path)

    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


# =============================================================================
# In-Memory Store
# =============================================================================

class MemoryTemplateStore:
    """
    프로세스 내 dict 저장소 (테스트, 개발용).

    입출력 모두 deepcopy: 호출자가 받은 dict를 수정해도 저장 상태는 불변.
    """

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}

    async def find_all(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self._docs.values()]

    async def find_by_id(self, template_id: str) -> dict[str, Any] | None:
        doc = self._docs.get(template_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert_one(self, doc: dict[str, Any]) -> bool:
        template_id = doc[TEMPLATE_ID_KEY]
        if template_id in self._docs:
            return False
        self._docs[template_id] = copy.deepcopy(doc)
        return True

    async def update_one(self, template_id: str, doc: dict[str, Any]) -> bool:
        if template_id not in self._docs:
            return False
        self._docs[template_id] = copy.deepcopy(doc)
        return True

    async def delete_one(self, template_id: str) -> int:
        return 1 if self._docs.pop(template_id, None) is not None else 0


# =============================================================================
# JSON File Store
# =============================================================================

class JsonFileTemplateStore:
    """
    파일 기반 저장소.

    구조:
    <data_dir>/
    ├── .locks/              # 문서별 FileLock
    └── <templateId>.json    # 문서 (templateId는 URL 인코딩)

    블로킹 파일 I/O는 asyncio.to_thread로 이벤트 루프 밖에서 실행.
    """

    def __init__(self, data_dir: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        """
        Args:
            data_dir: 문서 저장 디렉토리
            lock_timeout: 문서 락 timeout (초)
        """
        self.data_dir = data_dir
        self.lock_timeout = lock_timeout
        self._locks_dir = data_dir / LOCKS_DIRNAME

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def _doc_path(self, template_id: str) -> Path:
        return self.data_dir / f"{quote(template_id, safe='')}{TEMPLATE_DOC_SUFFIX}"

    def _lock(self, template_id: str) -> FileLock:
        self._locks_dir.mkdir(parents=True, exist_ok=True)
        lock_file = self._locks_dir / f"{quote(template_id, safe='')}.lock"
        return FileLock(lock_file, timeout=self.lock_timeout)

    # -------------------------------------------------------------------------
    # Sync implementations
    # -------------------------------------------------------------------------

    def _read(self, path: Path) -> dict[str, Any]:
        data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        return data

    def _find_all_sync(self) -> list[dict[str, Any]]:
        if not self.data_dir.exists():
            return []
        docs = []
        for path in sorted(self.data_dir.glob(f"*{TEMPLATE_DOC_SUFFIX}")):
            docs.append(self._read(path))
        return docs

    def _find_by_id_sync(self, template_id: str) -> dict[str, Any] | None:
        path = self._doc_path(template_id)
        if not path.exists():
            return None
        return self._read(path)

    def _insert_one_sync(self, doc: dict[str, Any]) -> bool:
        template_id = doc[TEMPLATE_ID_KEY]
        path = self._doc_path(template_id)
        # 존재 확인 + 쓰기를 같은 락 안에서
        with self._lock(template_id):
            if path.exists():
                return False
            atomic_write_json(path, doc)
            return True

    def _update_one_sync(self, template_id: str, doc: dict[str, Any]) -> bool:
        path = self._doc_path(template_id)
        with self._lock(template_id):
            if not path.exists():
                return False
            atomic_write_json(path, doc)
            return True

    def _delete_one_sync(self, template_id: str) -> int:
        path = self._doc_path(template_id)
        with self._lock(template_id):
            if not path.exists():
                return 0
            path.unlink()
            return 1

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def find_all(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._find_all_sync)

    async def find_by_id(self, template_id: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._find_by_id_sync, template_id)

    async def insert_one(self, doc: dict[str, Any]) -> bool:
        return await asyncio.to_thread(self._insert_one_sync, doc)

    async def update_one(self, template_id: str, doc: dict[str, Any]) -> bool:
        return await asyncio.to_thread(self._update_one_sync, template_id, doc)

    async def delete_one(self, template_id: str) -> int:
        return await asyncio.to_thread(self._delete_one_sync, template_id)


# =============================================================================
# Factory
# =============================================================================

def build_store(config: dict[str, Any], base_dir: Path) -> TemplateStore:
    """
    config의 storage 섹션으로 저장소 생성.

    Args:
        config: 전체 설정 (storage.backend, storage.data_dir, storage.lock_timeout)
        base_dir: 상대 data_dir의 기준 경로 (프로젝트 루트)

    Returns:
        TemplateStore 구현체

    Raises:
        ValueError: 알 수 없는 backend
    """
    section = (config or {}).get("storage", {}) or {}
    backend = section.get("backend", DEFAULT_STORAGE_BACKEND)

    if backend == STORAGE_BACKEND_MEMORY:
        logger.info("Using in-memory template store")
        return MemoryTemplateStore()

    if backend == STORAGE_BACKEND_JSON:
        data_dir = Path(section.get("data_dir", DEFAULT_DATA_DIR))
        if not data_dir.is_absolute():
            data_dir = base_dir / data_dir
        lock_timeout = float(section.get("lock_timeout", DEFAULT_LOCK_TIMEOUT))
        logger.info(f"Using JSON file template store at {data_dir}")
        return JsonFileTemplateStore(data_dir, lock_timeout=lock_timeout)

    raise ValueError(f"Unknown storage backend: {backend!r}")
