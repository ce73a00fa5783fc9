"""
Tests for the report store and report payload validation.
"""

import asyncio
import time
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from emergency_ops.core.config import StoreConfig
from emergency_ops.core.exceptions import PersistenceError, ValidationError
from emergency_ops.incidents.enums import Department, IncidentStatus
from emergency_ops.store.report_store import IncidentStore, report_status_for
from emergency_ops.store.schemas import ReportCreate

from .conftest import make_incident


def _payload(**overrides):
    payload = {
        "type": "fire",
        "description": "Smoke coming out of the warehouse roof",
        "location": {"lat": 28.61, "long": 77.21, "area": "Industrial District"},
        "mediaURL": "https://cdn.example.org/fire.jpg",
        "reportedBy": "citizen-42",
        "severityAI": "HIGH",
    }
    payload.update(overrides)
    return payload


class TestReportCreate:

    def test_normalizes_type_and_aliases(self):
        report = ReportCreate.parse_payload(_payload())
        assert report.type.value == "FIRE"
        assert report.media_url == "https://cdn.example.org/fire.jpg"
        assert report.reported_by == "citizen-42"
        assert report.status == "Pending"
        assert report.assigned_to == "Not Assigned"

    @pytest.mark.parametrize("overrides,field", [
        ({"description": "   "}, "description"),
        ({"type": "earthquake"}, "type"),
        ({"status": "Resolved"}, "status"),
        ({"assignedTo": "POLICE"}, "assignedTo"),
        ({"location": {"lat": 120.0, "long": 0.0}}, "location.lat"),
    ])
    def test_invalid_payloads(self, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            ReportCreate.parse_payload(_payload(**overrides))
        assert field in exc_info.value.details["field_errors"]

    def test_missing_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            ReportCreate.parse_payload({})
        field_errors = exc_info.value.details["field_errors"]
        assert "type" in field_errors
        assert "description" in field_errors


class TestIncidentStore:

    def test_create_and_list_newest_first(self, store):
        base = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
        first = store.create(_payload(timestamp=base.isoformat()))
        second = store.create(_payload(type="MEDICAL", timestamp=(base + timedelta(minutes=5)).isoformat()))

        records = store.list_all()

        assert [r.id for r in records] == [second.id, first.id]
        assert records[0].type == "MEDICAL"
        assert records[1].status == "Pending"
        assert records[1].assigned_to == "Not Assigned"
        assert records[1].area == "Industrial District"

    def test_create_rejects_invalid_payload(self, store):
        with pytest.raises(ValidationError):
            store.create(_payload(description=""))
        assert store.list_all() == []

    def test_mirror_copies_status_and_department(self, store):
        record = store.create(_payload())
        incident = make_incident(
            "RPT-1",
            status=IncidentStatus.ASSIGNED,
            assigned_department=Department.POLICE,
            report_id=record.id,
        )

        store.mirror(incident)

        stored = store.list_all()[0]
        assert stored.status == "ASSIGNED"
        assert stored.assigned_to == "POLICE"

    def test_mirror_without_report_is_noop(self, store):
        assert store.mirror(make_incident("X")) is None

    def test_mirror_missing_row(self, store):
        with pytest.raises(PersistenceError):
            store.mirror(make_incident("X", report_id=999))

    def test_report_status_for(self):
        assert report_status_for(make_incident("X")) == "Pending"
        assert report_status_for(make_incident("X", status=IncidentStatus.FALSE)) == "FALSE"


class TestAsyncStore:

    async def test_acreate_and_alist(self, store):
        record = await store.acreate(_payload())
        records = await store.alist_all()
        assert [r.id for r in records] == [record.id]

    async def test_retries_once_then_succeeds(self, store, monkeypatch):
        calls = []
        real_list = store._list_all

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("SELECT", {}, Exception("database is locked"))
            return real_list()

        monkeypatch.setattr(store, "_list_all", flaky)

        assert await store.alist_all() == []
        assert len(calls) == 2

    async def test_persistent_failure_raises_persistence_error(self, store, monkeypatch):
        calls = []

        def broken():
            calls.append(1)
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(store, "_list_all", broken)

        with pytest.raises(PersistenceError) as exc_info:
            await store.alist_all()
        assert len(calls) == 2
        assert exc_info.value.status_code == 503

    async def test_timeout_raises_persistence_error(self, session_factory, monkeypatch):
        store = IncidentStore(session_factory, StoreConfig(timeout_seconds=0.05, retry_attempts=2))

        def slow():
            time.sleep(0.3)
            return []

        monkeypatch.setattr(store, "_list_all", slow)

        with pytest.raises(PersistenceError):
            await store.alist_all()

    async def test_timed_out_create_is_not_retried(self, session_factory, monkeypatch):
        store = IncidentStore(session_factory, StoreConfig(timeout_seconds=0.1, retry_attempts=2))
        calls = []
        real_create = store._create

        def slow_create(report):
            calls.append(1)
            time.sleep(0.3)
            return real_create(report)

        monkeypatch.setattr(store, "_create", slow_create)

        with pytest.raises(PersistenceError):
            await store.acreate(_payload())
        # Let the abandoned worker thread finish its insert
        await asyncio.sleep(0.5)

        assert len(calls) == 1
        assert len(store.list_all()) == 1

    async def test_create_retries_database_errors(self, store, monkeypatch):
        calls = []
        real_create = store._create

        def flaky_create(report):
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            return real_create(report)

        monkeypatch.setattr(store, "_create", flaky_create)

        record = await store.acreate(_payload())
        assert len(calls) == 2
        assert [r.id for r in store.list_all()] == [record.id]

    async def test_validation_error_is_not_retried(self, store):
        with pytest.raises(ValidationError):
            await store.acreate(_payload(type=""))
        assert await store.alist_all() == []
