"""
Enumerations for incidents, activity records and user roles.
"""

from enum import Enum


class IncidentType(str, Enum):
    """Types of incidents."""
    FIRE = "FIRE"
    MEDICAL = "MEDICAL"
    ACCIDENT = "ACCIDENT"
    INFRASTRUCTURE = "INFRASTRUCTURE"      # Power outage, road collapse
    CRIME = "CRIME"


class IncidentSeverity(str, Enum):
    """Severity levels for incidents, LOW < MEDIUM < HIGH < CRITICAL."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def level(self) -> int:
        return _SEVERITY_LEVELS[self]


_SEVERITY_LEVELS = {
    IncidentSeverity.LOW: 0,
    IncidentSeverity.MEDIUM: 1,
    IncidentSeverity.HIGH: 2,
    IncidentSeverity.CRITICAL: 3,
}


class IncidentStatus(str, Enum):
    """Workflow status for incidents."""
    UNVERIFIED = "UNVERIFIED"      # Initial report received
    VERIFIED = "VERIFIED"          # Confirmed by an operator
    ASSIGNED = "ASSIGNED"          # Handed to a department
    IN_PROGRESS = "IN_PROGRESS"    # Responders on scene
    RESOLVED = "RESOLVED"          # Terminal, completed
    DUPLICATE = "DUPLICATE"        # Terminal, merged into another report
    FALSE = "FALSE"                # Terminal, discarded as false report

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_discarded(self) -> bool:
        return self in (IncidentStatus.DUPLICATE, IncidentStatus.FALSE)

    @property
    def is_verified_stage(self) -> bool:
        """VERIFIED or any later stage of the response workflow."""
        return self in (
            IncidentStatus.VERIFIED,
            IncidentStatus.ASSIGNED,
            IncidentStatus.IN_PROGRESS,
            IncidentStatus.RESOLVED,
        )


TERMINAL_STATUSES = frozenset({
    IncidentStatus.RESOLVED,
    IncidentStatus.DUPLICATE,
    IncidentStatus.FALSE,
})


class Department(str, Enum):
    """Responding departments."""
    POLICE = "POLICE"
    AMBULANCE = "AMBULANCE"
    FIRE_DEPARTMENT = "FIRE_DEPARTMENT"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class ActivityAction(str, Enum):
    """Activity log action types."""
    STATUS_CHANGED = "STATUS_CHANGED"
    SEVERITY_CHANGED = "SEVERITY_CHANGED"
    VERIFIED = "VERIFIED"
    MARKED_FALSE = "MARKED_FALSE"
    MARKED_DUPLICATE = "MARKED_DUPLICATE"
    NOTE_ADDED = "NOTE_ADDED"
    DEPARTMENT_ASSIGNED = "DEPARTMENT_ASSIGNED"


class UserRole(str, Enum):
    """Dashboard operator roles."""
    ADMIN = "ADMIN"
    RESPONDER = "RESPONDER"
