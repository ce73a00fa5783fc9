"""
Demo incidents and notifications used to seed a development dashboard.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..incidents.enums import Department, IncidentSeverity, IncidentStatus, IncidentType
from ..incidents.models import Incident, Location, Notification

SEVERITY_PRIORITY = {
    IncidentSeverity.CRITICAL: 100.0,
    IncidentSeverity.HIGH: 75.0,
    IncidentSeverity.MEDIUM: 50.0,
    IncidentSeverity.LOW: 25.0,
}

# (id, type, severity, status, title, area, address, lat, lng, minutes ago, upvotes, department)
_DEMO_ROWS = (
    ("INC-001", IncidentType.FIRE, IncidentSeverity.CRITICAL, IncidentStatus.UNVERIFIED,
     "Warehouse fire spreading to adjacent buildings", "Industrial District", "14 Foundry Rd",
     28.6139, 77.2090, 12, 34, None),
    ("INC-002", IncidentType.MEDICAL, IncidentSeverity.HIGH, IncidentStatus.VERIFIED,
     "Multiple people collapsed at metro station", "Central Station", "Platform 3, Central Metro",
     28.6328, 77.2197, 25, 21, None),
    ("INC-003", IncidentType.ACCIDENT, IncidentSeverity.HIGH, IncidentStatus.ASSIGNED,
     "Bus and truck collision on ring road", "Ring Road", "Ring Road near Exit 7",
     28.5921, 77.2290, 40, 18, Department.AMBULANCE),
    ("INC-004", IncidentType.INFRASTRUCTURE, IncidentSeverity.MEDIUM, IncidentStatus.IN_PROGRESS,
     "Water main burst flooding underpass", "Old Town", "Market St underpass",
     28.6562, 77.2410, 95, 12, Department.INFRASTRUCTURE),
    ("INC-005", IncidentType.CRIME, IncidentSeverity.MEDIUM, IncidentStatus.UNVERIFIED,
     "Reported break-in at electronics store", "Riverside", "221 River Walk",
     28.5355, 77.3910, 8, 3, None),
    ("INC-006", IncidentType.FIRE, IncidentSeverity.LOW, IncidentStatus.RESOLVED,
     "Small kitchen fire in restaurant", "Old Town", "9 Spice Lane",
     28.6507, 77.2334, 300, 7, Department.FIRE_DEPARTMENT),
    ("INC-007", IncidentType.MEDICAL, IncidentSeverity.CRITICAL, IncidentStatus.UNVERIFIED,
     "Cardiac arrest reported in shopping mall", "Riverside", "Riverside Mall, Level 2",
     28.5402, 77.3861, 4, 9, None),
    ("INC-008", IncidentType.ACCIDENT, IncidentSeverity.LOW, IncidentStatus.UNVERIFIED,
     "Minor fender bender blocking lane", "Ring Road", "Ring Road near Exit 3",
     28.5990, 77.2250, 18, 1, None),
)


def demo_incidents(now: Optional[datetime] = None) -> List[Incident]:
    now = now or datetime.now(timezone.utc)
    incidents = []
    for (incident_id, incident_type, severity, status, title, area, address,
         lat, lng, minutes_ago, upvotes, department) in _DEMO_ROWS:
        created = now - timedelta(minutes=minutes_ago)
        verified = status.is_verified_stage
        incidents.append(Incident(
            id=incident_id,
            type=incident_type,
            severity=severity,
            status=status,
            title=title,
            description=title,
            location=Location(latitude=lat, longitude=lng, area=area, address=address),
            created_at=created,
            updated_at=created,
            upvotes=upvotes,
            priority=SEVERITY_PRIORITY[severity],
            assigned_department=department,
            verified_at=created + timedelta(minutes=2) if verified else None,
            verified_by="admin-001" if verified else None,
        ))
    return incidents


def demo_notifications(now: Optional[datetime] = None) -> List[Notification]:
    now = now or datetime.now(timezone.utc)
    return [
        Notification(
            id="notif-001",
            title="Critical incident reported",
            message="Warehouse fire spreading to adjacent buildings (Industrial District)",
            created_at=now - timedelta(minutes=12),
            incident_id="INC-001",
        ),
        Notification(
            id="notif-002",
            title="Critical incident reported",
            message="Cardiac arrest reported in shopping mall (Riverside)",
            created_at=now - timedelta(minutes=4),
            incident_id="INC-007",
        ),
        Notification(
            id="notif-003",
            title="Incident resolved",
            message="Small kitchen fire in restaurant (Old Town)",
            created_at=now - timedelta(minutes=200),
            read=True,
            incident_id="INC-006",
        ),
    ]
