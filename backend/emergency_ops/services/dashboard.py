"""
Emergency dashboard service: the command surface used by the API layer.

Wires the incident repository, the transition authority, the audit sink,
the identity provider, the report store and the live-update task. The
in-memory incident set is the source of truth for the running session;
the report store is a best-effort mirror.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy.orm import sessionmaker

from ..auth.identity import IdentityProvider
from ..auth.permissions import Capability, require
from ..core.config import Config, get_config
from ..core.exceptions import PersistenceError
from ..core.logging_config import get_logger
from ..core.security import PasswordHasher
from ..db.models import ReportRecord
from ..incidents.audit import AuditSink, Clock, utcnow
from ..incidents.authority import TransitionAuthority
from ..incidents.enums import Department, IncidentSeverity, IncidentStatus, IncidentType
from ..incidents.live_updates import LiveUpdateTask
from ..incidents.models import ActivityLogEntry, AdminNote, Incident, Location, Notification, User
from ..incidents.ranking import (
    DashboardStats,
    IncidentFilter,
    compute_stats,
    critical_alerts,
    duplicate_candidates,
    filter_incidents,
    rank,
)
from ..incidents.repository import IncidentRepository
from ..store.report_store import IncidentStore, ReportPayload
from ..store.schemas import PENDING, NOT_ASSIGNED, ReportCreate
from .demo_data import SEVERITY_PRIORITY, demo_incidents, demo_notifications

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 80


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _title_from(description: str) -> str:
    first_line = description.strip().splitlines()[0] if description.strip() else ""
    if len(first_line) <= TITLE_MAX_LENGTH:
        return first_line
    return first_line[:TITLE_MAX_LENGTH - 3].rstrip() + "..."


def report_incident_id(report_id: int) -> str:
    return f"RPT-{report_id:05d}"


def incident_from_report(record: ReportRecord) -> Incident:
    """Build a fresh UNVERIFIED incident for a stored report."""
    severity = IncidentSeverity(record.severity_ai) if record.severity_ai else IncidentSeverity.MEDIUM
    created = _as_utc(record.timestamp)
    return Incident(
        id=report_incident_id(record.id),
        type=IncidentType(record.type),
        severity=severity,
        title=record.title or _title_from(record.description),
        description=record.description,
        location=Location(
            latitude=record.latitude if record.latitude is not None else 0.0,
            longitude=record.longitude if record.longitude is not None else 0.0,
            area=record.area or "",
            address=record.address or "",
        ),
        created_at=created,
        updated_at=created,
        priority=SEVERITY_PRIORITY[severity],
        reporter_id=record.reported_by,
        media=(record.media_url,) if record.media_url else (),
        report_id=record.id,
    )


class EmergencyService:
    """Facade over the incident lifecycle engine."""

    def __init__(
        self,
        repository: IncidentRepository,
        audit: AuditSink,
        identity: IdentityProvider,
        store: Optional[IncidentStore] = None,
        live_update_interval: float = 10.0,
        live_update_max_increment: int = 1,
        clock: Clock = utcnow,
    ):
        self.clock = clock
        self.repository = repository
        self.audit = audit
        self.identity = identity
        self.store = store
        self.authority = TransitionAuthority(repository, audit, clock=clock)
        self.live_updates = LiveUpdateTask(
            self.authority,
            interval=live_update_interval,
            max_increment=live_update_max_increment,
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        session_factory: Optional[sessionmaker] = None,
        hasher: Optional[PasswordHasher] = None,
    ) -> "EmergencyService":
        config = config or get_config()
        hasher = hasher or PasswordHasher(rounds=config.security.password_hash_rounds)
        audit = AuditSink()
        store = IncidentStore(session_factory, config.store) if session_factory is not None else None
        service = cls(
            repository=IncidentRepository(),
            audit=audit,
            identity=IdentityProvider.with_demo_accounts(hasher),
            store=store,
            live_update_interval=config.live_updates.interval_seconds,
            live_update_max_increment=config.live_updates.max_increment,
        )
        if config.seed_demo_data:
            service.seed()
        return service

    def seed(self) -> None:
        """Load the demo incidents and notifications."""
        now = self.clock()
        self.repository.load(demo_incidents(now))
        self.audit.load(entries=[], notifications=demo_notifications(now))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, live_updates: bool = True) -> None:
        if self.store is not None:
            await self.load_reports()
        if live_updates:
            self.live_updates.start()

    async def stop(self) -> None:
        await self.live_updates.stop()

    async def toggle_live_updates(self) -> bool:
        return await self.live_updates.toggle()

    async def refresh(self, user: User) -> int:
        """
        Pick up reports stored since startup. Admin only.

        Incidents already in memory and the activity log are left as they
        are; only reports not yet known become new UNVERIFIED incidents.
        """
        require(user, Capability.REFRESH)
        loaded = await self.load_reports() if self.store is not None else 0
        get_logger(__name__, {"user_id": user.id}).info(f"Dashboard refreshed, {loaded} new reports")
        return loaded

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def authenticate(self, email: str, password: str) -> User:
        return self.identity.authenticate(email, password)

    # ------------------------------------------------------------------
    # Report ingestion
    # ------------------------------------------------------------------

    async def submit_report(self, payload: ReportPayload) -> Incident:
        """Store a report and open an UNVERIFIED incident for it."""
        report = payload if isinstance(payload, ReportCreate) else ReportCreate.parse_payload(payload)
        if self.store is None:
            raise PersistenceError("No incident store configured", operation="create")
        record = await self.store.acreate(report)
        return self.authority.register(incident_from_report(record))

    async def list_reports(self) -> List[ReportRecord]:
        if self.store is None:
            return []
        return await self.store.alist_all()

    async def load_reports(self) -> int:
        """Bring stored reports not yet in memory into the incident set."""
        records = await self.store.alist_all()
        known = {i.report_id for i in self.repository.snapshot() if i.report_id is not None}
        loaded = 0
        # Oldest first so insertion order follows submission order
        for record in reversed(records):
            if record.id in known:
                continue
            incident = self._restore(record)
            if incident is None:
                continue
            self.repository.add(incident)
            loaded += 1
        if loaded:
            logger.info(f"Loaded {loaded} stored reports")
        return loaded

    def _restore(self, record: ReportRecord) -> Optional[Incident]:
        incident = incident_from_report(record)
        if record.status == PENDING:
            return incident
        try:
            status = IncidentStatus(record.status)
        except ValueError:
            logger.warning(f"Report {record.id} has unknown status {record.status!r}, skipped")
            return None
        if status == IncidentStatus.DUPLICATE:
            # The original's id is not stored on the report row
            logger.warning(f"Report {record.id} is a DUPLICATE without a stored original, skipped")
            return None
        department = None
        if record.assigned_to and record.assigned_to != NOT_ASSIGNED:
            department = Department(record.assigned_to)
        verified = status.is_verified_stage
        return replace(
            incident,
            status=status,
            assigned_department=department,
            verified_at=incident.created_at if verified else None,
            verified_by="report-store" if verified else None,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def verify(self, user: User, incident_id: str) -> Incident:
        return await self._mirror(self.authority.verify(user, incident_id))

    async def mark_as_false(self, user: User, incident_id: str, reason: str) -> Incident:
        return await self._mirror(self.authority.mark_as_false(user, incident_id, reason))

    async def mark_as_duplicate(self, user: User, incident_id: str, original_id: str) -> Incident:
        return await self._mirror(self.authority.mark_as_duplicate(user, incident_id, original_id))

    async def assign_department(self, user: User, incident_id: str, department: Department) -> Incident:
        return await self._mirror(self.authority.assign_department(user, incident_id, department))

    async def set_status(self, user: User, incident_id: str, status: IncidentStatus) -> Incident:
        return await self._mirror(self.authority.set_status(user, incident_id, status))

    async def set_severity(self, user: User, incident_id: str, severity: IncidentSeverity) -> Incident:
        return await self._mirror(self.authority.set_severity(user, incident_id, severity))

    def add_note(self, user: User, incident_id: str, content: str) -> AdminNote:
        return self.authority.add_note(user, incident_id, content)

    async def _mirror(self, incident: Incident) -> Incident:
        if self.store is None or incident.report_id is None:
            return incident
        try:
            await self.store.amirror(incident)
        except PersistenceError:
            # The in-memory transition stays applied
            get_logger(__name__, {"incident_id": incident.id}).exception(
                f"Incident {incident.id} changed in memory but was not persisted"
            )
            raise
        return incident

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, incident_id: str) -> Incident:
        return self.repository.get(incident_id)

    def rank(self, incidents: Iterable[Incident]) -> List[Incident]:
        return rank(incidents)

    def filter(self, incidents: Iterable[Incident], criteria: Optional[IncidentFilter] = None) -> List[Incident]:
        return filter_incidents(incidents, criteria)

    def list_incidents(self, criteria: Optional[IncidentFilter] = None) -> List[Incident]:
        """Current incidents matching ``criteria``, in priority order."""
        return rank(filter_incidents(self.repository.snapshot(), criteria))

    def stats(self) -> DashboardStats:
        return compute_stats(self.repository.snapshot(), now=self.clock())

    def critical_alerts(self) -> List[Incident]:
        return critical_alerts(self.repository.snapshot())

    def duplicate_candidates(self, incident_id: str) -> List[Incident]:
        self.repository.get(incident_id)
        return rank(duplicate_candidates(self.repository.snapshot(), incident_id))

    def activity_log(self, incident_id: Optional[str] = None) -> List[ActivityLogEntry]:
        return self.audit.activity(incident_id)

    def notes(self, incident_id: str) -> List[AdminNote]:
        self.repository.get(incident_id)
        return self.audit.notes(incident_id)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notifications(self, unread_only: bool = False) -> List[Notification]:
        return self.audit.notifications(unread_only=unread_only)

    def mark_notification_read(self, notification_id: str) -> None:
        self.audit.mark_notification_read(notification_id)

    def mark_all_notifications_read(self) -> int:
        return self.audit.mark_all_notifications_read()

    def unread_count(self) -> int:
        return self.audit.unread_count()
