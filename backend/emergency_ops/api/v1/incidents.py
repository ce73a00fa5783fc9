"""
Incident dashboard endpoints: ranked listing, statistics and the
verification and workflow commands.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...incidents.enums import IncidentSeverity, IncidentStatus, IncidentType
from ...incidents.models import User
from ...incidents.ranking import IncidentFilter
from ...services.dashboard import EmergencyService
from ..deps import get_current_user, get_service
from ..schemas import (
    ActivityResponse,
    AssignDepartmentRequest,
    IncidentResponse,
    MarkDuplicateRequest,
    MarkFalseRequest,
    NoteCreate,
    NoteResponse,
    SeverityChangeRequest,
    StatsResponse,
    StatusChangeRequest,
)

router = APIRouter(prefix="/incidents")


@router.get("", response_model=List[IncidentResponse])
async def list_incidents(
    status_filter: Optional[List[IncidentStatus]] = Query(None, alias="status", description="Filter by status"),
    severity: Optional[List[IncidentSeverity]] = Query(None, description="Filter by severity"),
    incident_type: Optional[List[IncidentType]] = Query(None, alias="type", description="Filter by type"),
    area: Optional[List[str]] = Query(None, description="Filter by area name"),
    search: Optional[str] = Query(None, max_length=200, description="Free-text search"),
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[IncidentResponse]:
    """
    Incidents matching every applied filter, highest priority first.
    """
    criteria = IncidentFilter.build(
        statuses=status_filter,
        severities=severity,
        types=incident_type,
        areas=area,
        search=search,
    )
    return [IncidentResponse.model_validate(i) for i in service.list_incidents(criteria)]


@router.get("/stats", response_model=StatsResponse)
async def incident_stats(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> StatsResponse:
    return StatsResponse.model_validate(service.stats())


@router.get("/alerts", response_model=List[IncidentResponse])
async def incident_alerts(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[IncidentResponse]:
    """Active CRITICAL incidents."""
    return [IncidentResponse.model_validate(i) for i in service.critical_alerts()]


@router.get("/activity", response_model=List[ActivityResponse])
async def activity_feed(
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[ActivityResponse]:
    """Activity across all incidents, newest first."""
    return [ActivityResponse.model_validate(e) for e in service.activity_log()]


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(
    incident_id: str,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(service.get(incident_id))


@router.get("/{incident_id}/activity", response_model=List[ActivityResponse])
async def incident_activity(
    incident_id: str,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[ActivityResponse]:
    service.get(incident_id)
    return [ActivityResponse.model_validate(e) for e in service.activity_log(incident_id)]


@router.get("/{incident_id}/notes", response_model=List[NoteResponse])
async def incident_notes(
    incident_id: str,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[NoteResponse]:
    return [NoteResponse.model_validate(n) for n in service.notes(incident_id)]


@router.post("/{incident_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def add_note(
    incident_id: str,
    body: NoteCreate,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> NoteResponse:
    return NoteResponse.model_validate(service.add_note(current_user, incident_id, body.content))


@router.get("/{incident_id}/duplicate-candidates", response_model=List[IncidentResponse])
async def incident_duplicate_candidates(
    incident_id: str,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> List[IncidentResponse]:
    """Incidents this one could be marked as a duplicate of."""
    return [IncidentResponse.model_validate(i) for i in service.duplicate_candidates(incident_id)]


@router.post("/{incident_id}/verify", response_model=IncidentResponse)
async def verify_incident(
    incident_id: str,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(await service.verify(current_user, incident_id))


@router.post("/{incident_id}/false", response_model=IncidentResponse)
async def mark_false(
    incident_id: str,
    body: MarkFalseRequest,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(await service.mark_as_false(current_user, incident_id, body.reason))


@router.post("/{incident_id}/duplicate", response_model=IncidentResponse)
async def mark_duplicate(
    incident_id: str,
    body: MarkDuplicateRequest,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(
        await service.mark_as_duplicate(current_user, incident_id, body.original_id)
    )


@router.post("/{incident_id}/assign", response_model=IncidentResponse)
async def assign_department(
    incident_id: str,
    body: AssignDepartmentRequest,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(
        await service.assign_department(current_user, incident_id, body.department)
    )


@router.post("/{incident_id}/status", response_model=IncidentResponse)
async def change_status(
    incident_id: str,
    body: StatusChangeRequest,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(await service.set_status(current_user, incident_id, body.status))


@router.post("/{incident_id}/severity", response_model=IncidentResponse)
async def change_severity(
    incident_id: str,
    body: SeverityChangeRequest,
    service: EmergencyService = Depends(get_service),
    current_user: User = Depends(get_current_user),
) -> IncidentResponse:
    return IncidentResponse.model_validate(await service.set_severity(current_user, incident_id, body.severity))
