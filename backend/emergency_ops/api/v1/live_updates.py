"""
Control of the live upvote refresh and the dashboard data reload.
"""
from fastapi import APIRouter, Depends, status

from ...incidents.models import User
from ...services.dashboard import EmergencyService
from ..deps import get_current_user, get_service
from ..schemas import LiveUpdatesResponse

router = APIRouter(prefix="/live-updates")


def _state(service: EmergencyService) -> LiveUpdatesResponse:
    task = service.live_updates
    return LiveUpdatesResponse(running=task.is_running, interval_seconds=task.interval, ticks=task.ticks)


@router.get("", response_model=LiveUpdatesResponse)
async def live_updates_state(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> LiveUpdatesResponse:
    return _state(service)


@router.post("/toggle", response_model=LiveUpdatesResponse)
async def toggle_live_updates(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> LiveUpdatesResponse:
    await service.toggle_live_updates()
    return _state(service)


@router.post("/refresh", status_code=status.HTTP_204_NO_CONTENT)
async def refresh_dashboard(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> None:
    """Pick up reports stored since startup. Admin only."""
    await service.refresh(current_user)
