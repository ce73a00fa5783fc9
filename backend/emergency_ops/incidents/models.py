"""
Incident records and the audit entities attached to them.

All records are frozen dataclasses. The transition authority replaces an
incident with a modified copy (``dataclasses.replace``) instead of mutating
it, so a reader holding a snapshot never sees a half-applied change.

Key Features:
- Incident identity and creation time never change once created
- Verification stamps are set once and carried through every later copy
- Notes, activity entries and notifications are append-only
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .enums import (
    ActivityAction,
    Department,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    UserRole,
)


@dataclass(frozen=True)
class Location:
    """Where an incident was reported."""
    latitude: float
    longitude: float
    area: str = ""
    address: str = ""


@dataclass(frozen=True)
class User:
    """
    Authenticated dashboard operator.

    Attributes:
        id: Stable user identifier
        name: Display name written into activity entries
        email: Login email
        role: ADMIN or RESPONDER
    """
    id: str
    name: str
    email: str
    role: UserRole


@dataclass(frozen=True)
class Incident:
    """
    One reported emergency event tracked through its lifecycle.

    Attributes:
        id: Unique, immutable identifier
        type: Incident type
        severity: Current severity (may be overridden until terminal)
        status: Workflow status
        title: Short headline
        description: Reporter's description
        location: Coordinates, area name and address
        created_at: Creation timestamp (immutable)
        updated_at: Timestamp of the last accepted mutation
        upvotes: Community confirmation counter
        priority: Numeric priority score used for ranking
        reporter_id: Reporting user, None if anonymous
        assigned_department: Department handling the incident
        verified_at: Set on verification, never cleared
        verified_by: Verifying user id, never cleared
        duplicate_of: Original incident id when status is DUPLICATE
        media: Ordered media URLs
        report_id: Backing report row in the incident store, if any
    """
    id: str
    type: IncidentType
    severity: IncidentSeverity
    title: str
    description: str
    location: Location
    created_at: datetime
    updated_at: datetime
    status: IncidentStatus = IncidentStatus.UNVERIFIED
    upvotes: int = 0
    priority: float = 0.0
    reporter_id: Optional[str] = None
    assigned_department: Optional[Department] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    duplicate_of: Optional[str] = None
    media: Tuple[str, ...] = field(default_factory=tuple)
    report_id: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def area(self) -> str:
        return self.location.area


@dataclass(frozen=True)
class AdminNote:
    """Operator note attached to an incident. Never edited or deleted."""
    id: str
    incident_id: str
    content: str
    author_id: str
    author_name: str
    created_at: datetime


@dataclass(frozen=True)
class ActivityLogEntry:
    """One accepted mutation of an incident."""
    id: str
    incident_id: str
    action: ActivityAction
    details: str
    user_id: str
    user_name: str
    timestamp: datetime


@dataclass(frozen=True)
class Notification:
    """Operator-facing notification; ``read`` only ever flips to True."""
    id: str
    title: str
    message: str
    created_at: datetime
    read: bool = False
    incident_id: Optional[str] = None
