"""
Public report intake and the stored report listing.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from ...incidents.models import User
from ...services.dashboard import EmergencyService
from ...store.schemas import ReportResponse
from ..deps import get_current_user, get_service
from ..schemas import IncidentResponse

router = APIRouter(prefix="/reports")


@router.post("", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    payload: Dict[str, Any] = Body(...),
    service: EmergencyService = Depends(get_service),
) -> IncidentResponse:
    """
    Submit an emergency report. Opens an UNVERIFIED incident for it.
    """
    return IncidentResponse.model_validate(await service.submit_report(payload))


@router.get("", response_model=List[ReportResponse])
async def list_reports(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[ReportResponse]:
    """Stored reports, newest first."""
    return [ReportResponse.model_validate(r) for r in await service.list_reports()]
