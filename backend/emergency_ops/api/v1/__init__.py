"""
API Version 1 Router
"""
from fastapi import APIRouter

from . import auth, incidents, live_updates, notifications, reports

router = APIRouter(prefix="/v1")

# Include all routers
router.include_router(auth.router, tags=["authentication"])
router.include_router(incidents.router, tags=["incidents"])
router.include_router(reports.router, tags=["reports"])
router.include_router(notifications.router, tags=["notifications"])
router.include_router(live_updates.router, tags=["live-updates"])
