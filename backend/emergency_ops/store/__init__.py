from .report_store import IncidentStore, report_status_for
from .schemas import ReportCreate, ReportLocation, ReportResponse

__all__ = [
    "IncidentStore",
    "report_status_for",
    "ReportCreate",
    "ReportLocation",
    "ReportResponse",
]
