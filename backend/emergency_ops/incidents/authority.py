"""
Transition authority: the only code path that changes an incident.

Every command checks the caller's role, validates against the incident's
current state while holding the repository lock, stores one modified copy
and appends one activity entry. A rejected command raises and leaves both
the incident and the activity log untouched.

State machine::

    UNVERIFIED -> VERIFIED       verify
    VERIFIED   -> ASSIGNED       assign_department
    ASSIGNED   -> IN_PROGRESS    set_status
    IN_PROGRESS-> RESOLVED       set_status
    non-terminal -> FALSE        mark_as_false (reason required)
    non-terminal -> DUPLICATE    mark_as_duplicate (live original required)
    non-terminal -> non-terminal set_status override (admin)

RESOLVED, FALSE and DUPLICATE are terminal. Notes stay allowed on them.
"""

import logging
from dataclasses import replace
from typing import Mapping, Optional

from ..auth.permissions import Capability, require, require_status_change
from ..core.exceptions import InvalidTransitionError, ValidationError
from .audit import AuditSink, Clock, utcnow
from .enums import ActivityAction, Department, IncidentSeverity, IncidentStatus
from .models import AdminNote, Incident, User
from .repository import IncidentRepository

logger = logging.getLogger(__name__)


def _coerce(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = [member.value for member in enum_cls]
        raise ValidationError(
            f"Invalid {field}: {value!r}",
            field_errors={field: [f"must be one of {', '.join(allowed)}"]},
        )


def _ensure_not_terminal(incident: Incident, requested: str) -> None:
    if incident.is_terminal:
        raise InvalidTransitionError(
            f"Incident {incident.id} is {incident.status.value} and can no longer change",
            current_status=incident.status.value,
            requested=requested,
        )


class TransitionAuthority:
    """Validates and applies status, severity and assignment changes."""

    def __init__(
        self,
        repository: IncidentRepository,
        audit: AuditSink,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.audit = audit
        self.clock = clock or audit.clock or utcnow

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def register(self, incident: Incident) -> Incident:
        """Accept a freshly submitted report into the incident set."""
        if incident.status != IncidentStatus.UNVERIFIED:
            raise ValidationError(
                "New incidents must start UNVERIFIED",
                field_errors={"status": [incident.status.value]},
            )
        if incident.upvotes != 0:
            raise ValidationError(
                "New incidents must start with zero upvotes",
                field_errors={"upvotes": [str(incident.upvotes)]},
            )
        self.repository.add(incident)
        logger.info(f"Incident {incident.id} registered ({incident.type.value}, {incident.severity.value})")
        if incident.severity == IncidentSeverity.CRITICAL:
            self.audit.notify(
                "Critical incident reported",
                f"{incident.title} ({incident.area or 'unknown area'})",
                incident_id=incident.id,
            )
        return incident

    # ------------------------------------------------------------------
    # Verification and discard
    # ------------------------------------------------------------------

    def verify(self, user: User, incident_id: str) -> Incident:
        require(user, Capability.VERIFY)
        with self.repository.locked():
            incident = self.repository.get(incident_id)
            if incident.status != IncidentStatus.UNVERIFIED:
                raise InvalidTransitionError(
                    f"Only UNVERIFIED incidents can be verified, {incident.id} is {incident.status.value}",
                    current_status=incident.status.value,
                    requested=IncidentStatus.VERIFIED.value,
                )
            now = self.clock()
            updated = replace(
                incident,
                status=IncidentStatus.VERIFIED,
                verified_at=incident.verified_at or now,
                verified_by=incident.verified_by or user.id,
                updated_at=now,
            )
            self.repository.replace(updated)
            self.audit.record(incident_id, ActivityAction.VERIFIED, f"Incident verified by {user.name}", user)
        return updated

    def mark_as_false(self, user: User, incident_id: str, reason: str) -> Incident:
        require(user, Capability.MARK_FALSE)
        if not reason or not reason.strip():
            raise ValidationError(
                "A reason is required to mark a report as false",
                field_errors={"reason": ["must not be empty"]},
            )
        with self.repository.locked():
            incident = self.repository.get(incident_id)
            _ensure_not_terminal(incident, IncidentStatus.FALSE.value)
            self._ensure_no_linked_duplicates(incident, IncidentStatus.FALSE)
            updated = replace(incident, status=IncidentStatus.FALSE, updated_at=self.clock())
            self.repository.replace(updated)
            self.audit.record(
                incident_id,
                ActivityAction.MARKED_FALSE,
                f"Marked as false report: {reason.strip()}",
                user,
            )
        return updated

    def mark_as_duplicate(self, user: User, incident_id: str, original_id: str) -> Incident:
        require(user, Capability.MARK_DUPLICATE)
        if original_id == incident_id:
            raise ValidationError(
                "An incident cannot be a duplicate of itself",
                field_errors={"original_id": ["must differ from the incident id"]},
            )
        with self.repository.locked():
            incident = self.repository.get(incident_id)
            original = self.repository.get(original_id)
            _ensure_not_terminal(incident, IncidentStatus.DUPLICATE.value)
            if original.status.is_discarded:
                raise InvalidTransitionError(
                    f"Cannot link to {original.id}: it is {original.status.value}",
                    current_status=original.status.value,
                    requested=IncidentStatus.DUPLICATE.value,
                )
            self._ensure_no_linked_duplicates(incident, IncidentStatus.DUPLICATE)
            updated = replace(
                incident,
                status=IncidentStatus.DUPLICATE,
                duplicate_of=original.id,
                updated_at=self.clock(),
            )
            self.repository.replace(updated)
            self.audit.record(
                incident_id,
                ActivityAction.MARKED_DUPLICATE,
                f"Marked as duplicate of {original.id}",
                user,
            )
        return updated

    def _ensure_no_linked_duplicates(self, incident: Incident, requested: IncidentStatus) -> None:
        # Discarding an original would leave its duplicates pointing at a discarded report
        linked = [i.id for i in self.repository.snapshot() if i.duplicate_of == incident.id]
        if linked:
            raise InvalidTransitionError(
                f"Incident {incident.id} is the original of {', '.join(linked)}",
                details={"linked_duplicates": linked},
                current_status=incident.status.value,
                requested=requested.value,
            )

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def assign_department(self, user: User, incident_id: str, department: Department) -> Incident:
        require(user, Capability.ASSIGN_DEPARTMENT)
        department = _coerce(Department, department, "department")
        with self.repository.locked():
            incident = self.repository.get(incident_id)
            _ensure_not_terminal(incident, IncidentStatus.ASSIGNED.value)
            if incident.status == IncidentStatus.UNVERIFIED:
                raise InvalidTransitionError(
                    f"Incident {incident.id} must be verified before assignment",
                    current_status=incident.status.value,
                    requested=IncidentStatus.ASSIGNED.value,
                )
            # Re-assignment keeps ASSIGNED / IN_PROGRESS as they are
            status = IncidentStatus.ASSIGNED if incident.status == IncidentStatus.VERIFIED else incident.status
            updated = replace(
                incident,
                status=status,
                assigned_department=department,
                updated_at=self.clock(),
            )
            self.repository.replace(updated)
            self.audit.record(
                incident_id,
                ActivityAction.DEPARTMENT_ASSIGNED,
                f"Assigned to {department.value}",
                user,
            )
        return updated

    def set_status(self, user: User, incident_id: str, status: IncidentStatus) -> Incident:
        status = _coerce(IncidentStatus, status, "status")
        with self.repository.locked():
            incident = self.repository.get(incident_id)
            _ensure_not_terminal(incident, status.value)
            if status == incident.status:
                raise InvalidTransitionError(
                    f"Incident {incident.id} is already {status.value}",
                    current_status=incident.status.value,
                    requested=status.value,
                )
            if status.is_discarded:
                raise InvalidTransitionError(
                    f"Use the dedicated command to mark an incident {status.value}",
                    current_status=incident.status.value,
                    requested=status.value,
                )
            require_status_change(user, incident.status, status)
            now = self.clock()
            changes = {"status": status, "updated_at": now}
            if status.is_verified_stage and incident.verified_at is None:
                changes["verified_at"] = now
                changes["verified_by"] = user.id
            updated = replace(incident, **changes)
            self.repository.replace(updated)
            self.audit.record(incident_id, ActivityAction.STATUS_CHANGED, f"Status changed to {status.value}", user)
        return updated

    def set_severity(self, user: User, incident_id: str, severity: IncidentSeverity) -> Incident:
        require(user, Capability.SET_SEVERITY)
        severity = _coerce(IncidentSeverity, severity, "severity")
        with self.repository.locked():
            incident = self.repository.get(incident_id)
            _ensure_not_terminal(incident, severity.value)
            updated = replace(incident, severity=severity, updated_at=self.clock())
            self.repository.replace(updated)
            self.audit.record(
                incident_id,
                ActivityAction.SEVERITY_CHANGED,
                f"Severity updated to {severity.value}",
                user,
            )
        if severity == IncidentSeverity.CRITICAL and incident.severity != IncidentSeverity.CRITICAL:
            self.audit.notify(
                "Incident escalated to CRITICAL",
                f"{updated.title} ({updated.area or 'unknown area'})",
                incident_id=incident_id,
            )
        return updated

    def add_note(self, user: User, incident_id: str, content: str) -> AdminNote:
        require(user, Capability.ADD_NOTE)
        if not content or not content.strip():
            raise ValidationError(
                "Note content must not be empty",
                field_errors={"content": ["must not be empty"]},
            )
        with self.repository.locked():
            self.repository.get(incident_id)
            note = self.audit.append_note(incident_id, content.strip(), user)
            self.audit.record(incident_id, ActivityAction.NOTE_ADDED, "Admin note added", user)
        return note

    # ------------------------------------------------------------------
    # Background refresh
    # ------------------------------------------------------------------

    def apply_upvotes(self, increments: Mapping[str, int]) -> int:
        """
        Add community upvotes. Touches nothing but ``upvotes``.

        Terminal incidents, unknown IDs and non-positive increments are
        skipped. Returns the number of incidents changed.
        """
        changed = 0
        with self.repository.locked():
            for incident_id, increment in increments.items():
                incident = self.repository.find(incident_id)
                if incident is None or incident.is_terminal or increment <= 0:
                    continue
                self.repository.replace(replace(incident, upvotes=incident.upvotes + increment))
                changed += 1
        if changed:
            logger.debug(f"Upvotes applied to {changed} incidents")
        return changed
