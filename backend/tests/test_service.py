"""
Tests for the dashboard service: report ingestion, restore from the
store, and persistence failure handling.
"""

import pytest
from sqlalchemy.exc import OperationalError

from emergency_ops.auth.identity import IdentityProvider
from emergency_ops.core.exceptions import PermissionDeniedError, PersistenceError
from emergency_ops.db.models import ReportRecord
from emergency_ops.db.session import session_scope
from emergency_ops.incidents.audit import AuditSink
from emergency_ops.incidents.enums import (
    ActivityAction,
    Department,
    IncidentSeverity,
    IncidentStatus,
)
from emergency_ops.incidents.ranking import IncidentFilter
from emergency_ops.incidents.repository import IncidentRepository
from emergency_ops.services.dashboard import EmergencyService, incident_from_report, report_incident_id
from emergency_ops.services.demo_data import demo_incidents


def _build(store, hasher, clock, seed=False):
    service = EmergencyService(
        repository=IncidentRepository(),
        audit=AuditSink(clock=clock),
        identity=IdentityProvider.with_demo_accounts(hasher),
        store=store,
        clock=clock,
    )
    if seed:
        service.seed()
    return service


REPORT = {
    "type": "MEDICAL",
    "description": "Man collapsed near the fountain\nBreathing but unresponsive",
    "location": {"lat": 28.54, "long": 77.38, "area": "Riverside", "address": "Riverside Mall"},
    "severityAI": "CRITICAL",
}


class TestDemoData:

    def test_seeded_dashboard(self, hasher, clock):
        service = _build(None, hasher, clock, seed=True)

        assert len(service.repository) == 8
        assert service.unread_count() == 2
        assert service.list_incidents()[0].severity == IncidentSeverity.CRITICAL
        assert [i.id for i in service.critical_alerts()] == ["INC-001", "INC-007"]

    def test_verified_stage_demo_incidents_carry_stamps(self):
        for incident in demo_incidents():
            assert (incident.verified_at is not None) == incident.status.is_verified_stage


class TestSubmitReport:

    async def test_submit_opens_unverified_incident(self, store, hasher, clock):
        service = _build(store, hasher, clock)

        incident = await service.submit_report(REPORT)

        assert incident.status == IncidentStatus.UNVERIFIED
        assert incident.upvotes == 0
        assert incident.title == "Man collapsed near the fountain"
        assert incident.area == "Riverside"
        assert incident.id == f"RPT-{incident.report_id:05d}"
        assert service.get(incident.id) == incident
        assert service.notifications()[0].incident_id == incident.id

    async def test_submit_without_store(self, hasher, clock):
        service = _build(None, hasher, clock)
        with pytest.raises(PersistenceError):
            await service.submit_report(REPORT)

    async def test_commands_are_mirrored_to_store(self, store, hasher, clock, admin):
        service = _build(store, hasher, clock)
        incident = await service.submit_report(REPORT)

        await service.verify(admin, incident.id)
        await service.assign_department(admin, incident.id, Department.AMBULANCE)

        record = (await service.list_reports())[0]
        assert record.status == "ASSIGNED"
        assert record.assigned_to == "AMBULANCE"

    async def test_restart_restores_incidents(self, store, hasher, clock, admin):
        first = _build(store, hasher, clock)
        kept = await first.submit_report(REPORT)
        dropped = await first.submit_report({**REPORT, "severityAI": "LOW"})
        await first.verify(admin, kept.id)
        await first.assign_department(admin, kept.id, Department.AMBULANCE)
        await first.mark_as_duplicate(admin, dropped.id, kept.id)

        second = _build(store, hasher, clock)
        await second.start(live_updates=False)

        restored = second.get(kept.id)
        assert restored.status == IncidentStatus.ASSIGNED
        assert restored.assigned_department == Department.AMBULANCE
        assert restored.verified_at is not None
        assert dropped.id not in second.repository

        # Loading again does not duplicate incidents
        assert await second.load_reports() == 0


class TestPersistenceFailure:

    async def test_failed_mirror_keeps_in_memory_change(self, store, hasher, clock, admin, monkeypatch):
        service = _build(store, hasher, clock)
        incident = await service.submit_report(REPORT)

        def broken(*args):
            raise OperationalError("UPDATE", {}, Exception("disk full"))

        monkeypatch.setattr(store, "_mirror", broken)

        with pytest.raises(PersistenceError):
            await service.verify(admin, incident.id)

        assert service.get(incident.id).status == IncidentStatus.VERIFIED
        assert service.activity_log(incident.id)[0].action == ActivityAction.VERIFIED

    async def test_missing_report_row_surfaces_as_persistence_error(self, store, hasher, clock, admin):
        service = _build(store, hasher, clock)
        incident = await service.submit_report(REPORT)
        with session_scope(store.session_factory) as db:
            db.delete(db.get(ReportRecord, incident.report_id))

        with pytest.raises(PersistenceError) as exc_info:
            await service.verify(admin, incident.id)

        assert exc_info.value.status_code == 503
        assert service.get(incident.id).status == IncidentStatus.VERIFIED


class TestQueries:

    def test_filtered_listing_is_ranked(self, hasher, clock):
        service = _build(None, hasher, clock, seed=True)
        criteria = IncidentFilter.build(areas=["ring road"])

        listed = service.list_incidents(criteria)

        assert {i.id for i in listed} == {"INC-003", "INC-008"}
        assert listed == service.rank(service.filter(service.repository.snapshot(), criteria))

    def test_notes_and_activity(self, hasher, clock, admin):
        service = _build(None, hasher, clock, seed=True)
        note = service.add_note(admin, "INC-006", "Closed out with fire marshal")

        assert service.notes("INC-006") == [note]
        assert service.activity_log()[0].action == ActivityAction.NOTE_ADDED

    def test_incident_from_report_defaults(self, store):
        record = store.create({"type": "CRIME", "description": "Shop window smashed"})
        incident = incident_from_report(record)
        assert incident.severity == IncidentSeverity.MEDIUM
        assert incident.priority == 50.0
        assert incident.location.area == ""


class TestRefresh:

    async def test_refresh_keeps_state_and_history(self, store, hasher, clock, admin):
        service = _build(store, hasher, clock, seed=True)
        await service.mark_as_false(admin, "INC-001", "Controlled burn, permit on file")
        note = service.add_note(admin, "INC-001", "Called the site manager")
        history = service.activity_log()

        assert await service.refresh(admin) == 0

        assert service.get("INC-001").status == IncidentStatus.FALSE
        assert service.activity_log() == history
        assert service.notes("INC-001") == [note]

    async def test_refresh_picks_up_new_reports(self, store, hasher, clock, admin):
        service = _build(store, hasher, clock, seed=True)
        record = store.create(REPORT)

        assert await service.refresh(admin) == 1

        incident = service.get(report_incident_id(record.id))
        assert incident.status == IncidentStatus.UNVERIFIED
        assert len(service.repository) == len(demo_incidents()) + 1

    async def test_responder_cannot_refresh(self, store, hasher, clock, admin, responder):
        service = _build(store, hasher, clock, seed=True)
        await service.mark_as_false(admin, "INC-001", "Controlled burn, permit on file")

        with pytest.raises(PermissionDeniedError):
            await service.refresh(responder)
        assert service.get("INC-001").status == IncidentStatus.FALSE
