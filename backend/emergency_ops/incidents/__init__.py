"""
Incident lifecycle engine: records, transitions, ranking and audit.

Usage:
    from emergency_ops.incidents.authority import TransitionAuthority
    from emergency_ops.incidents.ranking import rank, IncidentFilter
"""

from .enums import (
    ActivityAction,
    Department,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    UserRole,
    TERMINAL_STATUSES,
)
from .models import (
    ActivityLogEntry,
    AdminNote,
    Incident,
    Location,
    Notification,
    User,
)

__all__ = [
    # Enums
    "ActivityAction",
    "Department",
    "IncidentSeverity",
    "IncidentStatus",
    "IncidentType",
    "UserRole",
    "TERMINAL_STATUSES",
    # Records
    "ActivityLogEntry",
    "AdminNote",
    "Incident",
    "Location",
    "Notification",
    "User",
]
