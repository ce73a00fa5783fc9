"""
Request and response models for the HTTP API.

Responses are read straight off the domain dataclasses
(``from_attributes``).
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..incidents.enums import (
    ActivityAction,
    Department,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    UserRole,
)


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ----------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)


class UserResponse(_FromDomain):
    id: str
    name: str
    email: str
    role: UserRole


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


# ----------------------------------------------------------------------
# Incidents
# ----------------------------------------------------------------------

class LocationResponse(_FromDomain):
    latitude: float
    longitude: float
    area: str
    address: str


class IncidentResponse(_FromDomain):
    id: str
    type: IncidentType
    severity: IncidentSeverity
    status: IncidentStatus
    title: str
    description: str
    location: LocationResponse
    created_at: datetime
    updated_at: datetime
    upvotes: int
    priority: float
    reporter_id: Optional[str] = None
    assigned_department: Optional[Department] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    duplicate_of: Optional[str] = None
    media: List[str] = Field(default_factory=list)
    report_id: Optional[int] = None


class MarkFalseRequest(BaseModel):
    reason: str = Field(..., max_length=2000)


class MarkDuplicateRequest(BaseModel):
    original_id: str = Field(..., min_length=1)


class AssignDepartmentRequest(BaseModel):
    department: Department


class StatusChangeRequest(BaseModel):
    status: IncidentStatus


class SeverityChangeRequest(BaseModel):
    severity: IncidentSeverity


class NoteCreate(BaseModel):
    content: str = Field(..., max_length=5000)


class NoteResponse(_FromDomain):
    id: str
    incident_id: str
    content: str
    author_id: str
    author_name: str
    created_at: datetime


class ActivityResponse(_FromDomain):
    id: str
    incident_id: str
    action: ActivityAction
    details: str
    user_id: str
    user_name: str
    timestamp: datetime


class StatsResponse(_FromDomain):
    total_active: int
    unverified: int
    verified_in_progress: int
    resolved_today: int
    critical_active: int


# ----------------------------------------------------------------------
# Notifications and live updates
# ----------------------------------------------------------------------

class NotificationResponse(_FromDomain):
    id: str
    title: str
    message: str
    created_at: datetime
    read: bool
    incident_id: Optional[str] = None


class UnreadCountResponse(BaseModel):
    unread: int


class LiveUpdatesResponse(BaseModel):
    running: bool
    interval_seconds: float
    ticks: int
