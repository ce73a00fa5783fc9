"""
Report table backing the incident store.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportRecord(Base):
    """
    Raw emergency report as submitted by the public.

    Attributes:
        id: Primary key
        type: Reported incident type
        description: Reporter's description
        latitude: GPS latitude
        longitude: GPS longitude
        title: Optional headline supplied by the reporter
        area: Area or neighbourhood name
        address: Street address
        timestamp: Submission time
        media_url: Optional photo or video URL
        reported_by: Reporter identifier, None if anonymous
        severity_ai: Externally computed severity hint
        status: Workflow status mirrored from the incident
        assigned_to: Assigned department mirrored from the incident
    """

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(32), nullable=False, index=True)
    description = Column(Text, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    title = Column(String(255), nullable=True)
    area = Column(String(128), nullable=True)
    address = Column(String(256), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    media_url = Column(String(1024), nullable=True)
    reported_by = Column(String(128), nullable=True)
    severity_ai = Column(String(32), nullable=True)
    status = Column(String(32), nullable=False, default="Pending")
    assigned_to = Column(String(64), nullable=False, default="Not Assigned")

    def __repr__(self) -> str:
        return f"<ReportRecord(id={self.id}, type={self.type}, status={self.status})>"
