"""API routers for GitLearn."""

from .content import router as content_router
from .health import router as health_router
from .records import router as records_router
from .search import router as search_router

__all__ = ["content_router", "health_router", "records_router", "search_router"]
