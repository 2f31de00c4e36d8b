"""
FastAPI Routes.

API 라우트 (REST)
"""

from . import theme_builder

__all__ = ["theme_builder"]
