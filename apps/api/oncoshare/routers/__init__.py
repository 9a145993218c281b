"""API routers."""

from oncoshare.routers.analytics import router as analytics_router
from oncoshare.routers.cases import router as cases_router
from oncoshare.routers.dashboard import router as dashboard_router
from oncoshare.routers.feeds import router as feeds_router
from oncoshare.routers.lookups import router as lookups_router

__all__ = [
    "analytics_router",
    "cases_router",
    "dashboard_router",
    "feeds_router",
    "lookups_router",
]
