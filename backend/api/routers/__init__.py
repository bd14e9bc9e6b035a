"""API routers."""

from .files import router as files_router
from .health import router as health_router
from .jobs import router as jobs_router
from .kb import router as kb_router
from .stats import router as stats_router

__all__ = [
    "files_router",
    "health_router",
    "jobs_router",
    "kb_router",
    "stats_router",
]
