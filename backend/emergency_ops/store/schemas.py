"""
Pydantic schemas for report submission and listing.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.exceptions import ValidationError
from ..incidents.enums import IncidentSeverity, IncidentType

PENDING = "Pending"
NOT_ASSIGNED = "Not Assigned"


class ReportLocation(BaseModel):
    """Coordinates attached to a report."""
    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., ge=-90, le=90)
    long: float = Field(..., ge=-180, le=180)
    area: Optional[str] = Field(None, max_length=128)
    address: Optional[str] = Field(None, max_length=256)


class ReportCreate(BaseModel):
    """Schema for submitting a new emergency report."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: IncidentType
    description: str = Field(..., max_length=5000)
    title: Optional[str] = Field(None, max_length=255)
    location: Optional[ReportLocation] = None
    timestamp: Optional[datetime] = None
    media_url: Optional[str] = Field(None, alias="mediaURL", max_length=1024)
    reported_by: Optional[str] = Field(None, alias="reportedBy", max_length=128)
    severity_ai: Optional[IncidentSeverity] = Field(None, alias="severityAI")
    status: str = PENDING
    assigned_to: str = Field(NOT_ASSIGNED, alias="assignedTo")

    @field_validator("type", "severity_ai", mode="before")
    @classmethod
    def normalize_enum(cls, v):
        if isinstance(v, str):
            return v.strip().upper().replace(" ", "_")
        return v

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be empty")
        return v.strip()

    @field_validator("status")
    @classmethod
    def status_pending(cls, v: str) -> str:
        if v != PENDING:
            raise ValueError(f"new reports must start as {PENDING!r}")
        return v

    @field_validator("assigned_to")
    @classmethod
    def not_assigned(cls, v: str) -> str:
        if v != NOT_ASSIGNED:
            raise ValueError(f"new reports must start as {NOT_ASSIGNED!r}")
        return v

    @classmethod
    def parse_payload(cls, payload: Dict[str, Any]) -> "ReportCreate":
        """
        Validate a loosely-typed payload.

        Raises:
            ValidationError: With per-field messages if the payload is invalid
        """
        try:
            return cls.model_validate(payload)
        except pydantic.ValidationError as e:
            field_errors: Dict[str, List[str]] = {}
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "__root__"
                field_errors.setdefault(location, []).append(error["msg"])
            raise ValidationError("Invalid report payload", field_errors=field_errors)


class ReportResponse(BaseModel):
    """Schema for a stored report."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    type: str
    description: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    title: Optional[str] = None
    area: Optional[str] = None
    address: Optional[str] = None
    timestamp: datetime
    media_url: Optional[str] = Field(None, serialization_alias="mediaURL")
    reported_by: Optional[str] = Field(None, serialization_alias="reportedBy")
    severity_ai: Optional[str] = Field(None, serialization_alias="severityAI")
    status: str
    assigned_to: str = Field(serialization_alias="assignedTo")
