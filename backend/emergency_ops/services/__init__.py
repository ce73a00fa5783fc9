from .dashboard import EmergencyService, incident_from_report, report_incident_id
from .demo_data import SEVERITY_PRIORITY, demo_incidents, demo_notifications

__all__ = [
    "EmergencyService",
    "incident_from_report",
    "report_incident_id",
    "SEVERITY_PRIORITY",
    "demo_incidents",
    "demo_notifications",
]
