"""
Domain Constants: 구성 엔진 전역 상수.

페이지 타입, 저장소 기본값 등 시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Page Types (페이지 타입)
# =============================================================================
# custom 페이지는 pageId(slug)로 구분됨

PAGE_TYPE_HOME = "home"
PAGE_TYPE_ALBUMS = "albums"
PAGE_TYPE_ALBUM = "album"
PAGE_TYPE_SEARCH = "search"
PAGE_TYPE_PAGE = "page"
PAGE_TYPE_CUSTOM = "custom"

# =============================================================================
# Storage (저장소)
# =============================================================================
# <data_dir>/<templateId>.json 에 문서 단위로 저장

STORAGE_BACKEND_JSON = "json"
STORAGE_BACKEND_MEMORY = "memory"
DEFAULT_STORAGE_BACKEND = STORAGE_BACKEND_JSON
DEFAULT_DATA_DIR = "data/theme_builder"
DEFAULT_LOCK_TIMEOUT = 10.0

TEMPLATE_DOC_SUFFIX = ".json"
LOCKS_DIRNAME = ".locks"

# =============================================================================
# Logging
# =============================================================================

DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# =============================================================================
# Wire keys
# =============================================================================

TEMPLATE_ID_KEY = "templateId"
