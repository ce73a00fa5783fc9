"""
Operator notification endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...incidents.models import User
from ...services.dashboard import EmergencyService
from ..deps import get_current_user, get_service
from ..schemas import NotificationResponse, UnreadCountResponse

router = APIRouter(prefix="/notifications")


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False, description="Only unread notifications"),
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[NotificationResponse]:
    return [NotificationResponse.model_validate(n) for n in service.notifications(unread_only=unread_only)]


@router.get("/unread/count", response_model=UnreadCountResponse)
async def unread_count(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread=service.unread_count())


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_read(
    notification_id: str,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> None:
    """Mark one notification as read. Unknown ids are ignored."""
    service.mark_notification_read(notification_id)


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> None:
    service.mark_all_notifications_read()
