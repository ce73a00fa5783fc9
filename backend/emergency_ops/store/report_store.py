"""
Incident store: append-create and read-all access to submitted reports.

The synchronous methods do the session work. The ``a*`` coroutines run the
same work in a worker thread under a timeout and retry once before giving
up with ``PersistenceError``. A create that timed out is not retried: its
worker thread cannot be stopped and may still commit the row.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.config import StoreConfig, get_config
from ..core.exceptions import PersistenceError
from ..db.models import ReportRecord
from ..db.session import session_scope
from ..incidents.enums import IncidentStatus
from ..incidents.models import Incident
from .schemas import NOT_ASSIGNED, PENDING, ReportCreate

logger = logging.getLogger(__name__)

ReportPayload = Union[ReportCreate, Dict[str, Any]]


def report_status_for(incident: Incident) -> str:
    """Status string stored on the report row for an incident."""
    if incident.status == IncidentStatus.UNVERIFIED:
        return PENDING
    return incident.status.value


class IncidentStore:
    """SQLAlchemy-backed store of raw emergency reports."""

    def __init__(self, session_factory: sessionmaker, config: Optional[StoreConfig] = None):
        self.session_factory = session_factory
        self.config = config or get_config().store

    # ------------------------------------------------------------------
    # Synchronous API
    # ------------------------------------------------------------------

    def create(self, payload: ReportPayload) -> ReportRecord:
        """
        Store a new report.

        Raises:
            ValidationError: If ``type`` or ``description`` is missing or the payload is malformed
            PersistenceError: If the database write fails
        """
        report = self._coerce(payload)
        try:
            return self._create(report)
        except SQLAlchemyError as e:
            logger.error(f"Report create failed: {e}")
            raise PersistenceError("Failed to store report", operation="create") from e

    def list_all(self) -> List[ReportRecord]:
        """All reports, newest first."""
        try:
            return self._list_all()
        except SQLAlchemyError as e:
            logger.error(f"Report listing failed: {e}")
            raise PersistenceError("Failed to list reports", operation="list_all") from e

    def mirror(self, incident: Incident) -> Optional[ReportRecord]:
        """Copy an incident's status and assignment onto its report row."""
        if incident.report_id is None:
            return None
        try:
            return self._mirror(incident.report_id, report_status_for(incident), self._assigned_to(incident))
        except SQLAlchemyError as e:
            logger.error(f"Report mirror failed for incident {incident.id}: {e}")
            raise PersistenceError(f"Failed to persist incident {incident.id}", operation="mirror") from e

    # ------------------------------------------------------------------
    # Asynchronous API
    # ------------------------------------------------------------------

    async def acreate(self, payload: ReportPayload) -> ReportRecord:
        report = self._coerce(payload)
        return await self._run("create", self._create, report, retry_on=(SQLAlchemyError,))

    async def alist_all(self) -> List[ReportRecord]:
        return await self._run("list_all", self._list_all)

    async def amirror(self, incident: Incident) -> Optional[ReportRecord]:
        if incident.report_id is None:
            return None
        return await self._run(
            "mirror",
            self._mirror,
            incident.report_id,
            report_status_for(incident),
            self._assigned_to(incident),
        )

    async def _run(self, operation: str, fn, *args, retry_on=(SQLAlchemyError, asyncio.TimeoutError)):
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=wait_exponential(multiplier=0.1, max=1),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(f"Retrying report store {operation}")
                    return await asyncio.wait_for(
                        asyncio.to_thread(fn, *args),
                        timeout=self.config.timeout_seconds,
                    )
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error(f"Report store {operation} failed: {e!r}")
            raise PersistenceError(f"Report store {operation} failed", operation=operation) from e

    # ------------------------------------------------------------------
    # Session work
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(payload: ReportPayload) -> ReportCreate:
        if isinstance(payload, ReportCreate):
            return payload
        return ReportCreate.parse_payload(payload)

    @staticmethod
    def _assigned_to(incident: Incident) -> str:
        if incident.assigned_department is None:
            return NOT_ASSIGNED
        return incident.assigned_department.value

    def _create(self, report: ReportCreate) -> ReportRecord:
        record = ReportRecord(
            type=report.type.value,
            description=report.description,
            latitude=report.location.lat if report.location else None,
            longitude=report.location.long if report.location else None,
            title=report.title,
            area=report.location.area if report.location else None,
            address=report.location.address if report.location else None,
            media_url=report.media_url,
            reported_by=report.reported_by,
            severity_ai=report.severity_ai.value if report.severity_ai else None,
            status=report.status,
            assigned_to=report.assigned_to,
        )
        if report.timestamp is not None:
            record.timestamp = report.timestamp
        with session_scope(self.session_factory) as db:
            db.add(record)
            db.flush()
        logger.info(f"Report stored: id={record.id} type={record.type}")
        return record

    def _list_all(self) -> List[ReportRecord]:
        with session_scope(self.session_factory) as db:
            query = select(ReportRecord).order_by(ReportRecord.timestamp.desc(), ReportRecord.id.desc())
            return list(db.execute(query).scalars().all())

    def _mirror(self, report_id: int, status: str, assigned_to: str) -> ReportRecord:
        with session_scope(self.session_factory) as db:
            record = db.get(ReportRecord, report_id)
            if record is None:
                # The incident change already happened in memory
                raise PersistenceError(
                    f"Report {report_id} is missing from the store",
                    details={"report_id": report_id},
                    operation="mirror",
                )
            record.status = status
            record.assigned_to = assigned_to
        return record
