"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    files_router,
    health_router,
    jobs_router,
    kb_router,
    stats_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(files_router)
api_router.include_router(jobs_router)
api_router.include_router(kb_router)
api_router.include_router(stats_router)

__all__ = ["api_router"]
