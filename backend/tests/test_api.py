"""
Tests for the HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from emergency_ops.main import create_app


@pytest.fixture
def client(app_config):
    with TestClient(create_app(app_config)) as test_client:
        yield test_client


def _login(client, email, password):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, "admin@emergency.gov", "admin123")


@pytest.fixture
def responder_headers(client):
    return _login(client, "responder@emergency.gov", "responder123")


class TestAuth:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_login_and_me(self, client, admin_headers):
        response = client.get("/api/v1/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["role"] == "ADMIN"

    def test_bad_login(self, client):
        response = client.post("/api/v1/auth/login", json={"email": "admin@emergency.gov", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    def test_requires_token(self, client):
        response = client.get("/api/v1/incidents")
        assert response.status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/v1/incidents", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestIncidents:

    def test_listing_is_ranked(self, client, admin_headers):
        incidents = client.get("/api/v1/incidents", headers=admin_headers).json()

        assert len(incidents) == 8
        assert [i["id"] for i in incidents[:2]] == ["INC-001", "INC-007"]

    def test_listing_filters(self, client, admin_headers):
        response = client.get(
            "/api/v1/incidents",
            params=[("status", "UNVERIFIED"), ("severity", "CRITICAL"), ("search", "mall")],
            headers=admin_headers,
        )
        assert [i["id"] for i in response.json()] == ["INC-007"]

    def test_invalid_filter_value(self, client, admin_headers):
        response = client.get("/api/v1/incidents", params={"status": "BOGUS"}, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_stats(self, client, admin_headers):
        stats = client.get("/api/v1/incidents/stats", headers=admin_headers).json()
        assert stats["unverified"] == 4
        assert stats["critical_active"] == 2

    def test_unknown_incident(self, client, admin_headers):
        response = client.get("/api/v1/incidents/INC-999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_verify_then_activity(self, client, admin_headers):
        response = client.post("/api/v1/incidents/INC-001/verify", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "VERIFIED"

        activity = client.get("/api/v1/incidents/INC-001/activity", headers=admin_headers).json()
        assert activity[0]["action"] == "VERIFIED"
        assert activity[0]["details"] == "Incident verified by John Commander"

        again = client.post("/api/v1/incidents/INC-001/verify", headers=admin_headers)
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "INVALID_TRANSITION"

    def test_mark_false_requires_reason(self, client, admin_headers):
        response = client.post("/api/v1/incidents/INC-005/false", json={"reason": ""}, headers=admin_headers)
        assert response.status_code == 422

    def test_responder_cannot_mark_false(self, client, responder_headers):
        response = client.post("/api/v1/incidents/INC-005/false", json={"reason": "prank"}, headers=responder_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    def test_duplicate_and_candidates(self, client, admin_headers):
        candidates = client.get("/api/v1/incidents/INC-008/duplicate-candidates", headers=admin_headers).json()
        assert "INC-003" in [c["id"] for c in candidates]

        response = client.post(
            "/api/v1/incidents/INC-008/duplicate", json={"original_id": "INC-003"}, headers=admin_headers
        )
        assert response.json()["duplicate_of"] == "INC-003"

    def test_assign_status_and_severity(self, client, admin_headers, responder_headers):
        assign = client.post(
            "/api/v1/incidents/INC-002/assign", json={"department": "POLICE"}, headers=admin_headers
        )
        assert assign.json()["status"] == "ASSIGNED"

        progress = client.post(
            "/api/v1/incidents/INC-002/status", json={"status": "IN_PROGRESS"}, headers=responder_headers
        )
        assert progress.json()["status"] == "IN_PROGRESS"

        severity = client.post(
            "/api/v1/incidents/INC-002/severity", json={"severity": "CRITICAL"}, headers=admin_headers
        )
        assert severity.json()["severity"] == "CRITICAL"

    def test_notes(self, client, admin_headers):
        created = client.post(
            "/api/v1/incidents/INC-006/notes", json={"content": "Scene cleared"}, headers=admin_headers
        )
        assert created.status_code == 201

        notes = client.get("/api/v1/incidents/INC-006/notes", headers=admin_headers).json()
        assert [n["content"] for n in notes] == ["Scene cleared"]


class TestReportsAndNotifications:

    def test_submit_report(self, client, admin_headers):
        response = client.post(
            "/api/v1/reports",
            json={"type": "accident", "description": "Car overturned", "location": {"lat": 1.0, "long": 2.0}},
        )
        assert response.status_code == 201
        incident = response.json()
        assert incident["status"] == "UNVERIFIED"

        reports = client.get("/api/v1/reports", headers=admin_headers).json()
        assert reports[0]["status"] == "Pending"
        assert reports[0]["assignedTo"] == "Not Assigned"

        listed = client.get("/api/v1/incidents", params={"search": incident["id"]}, headers=admin_headers).json()
        assert [i["id"] for i in listed] == [incident["id"]]

    def test_submit_invalid_report(self, client):
        response = client.post("/api/v1/reports", json={"type": "FIRE", "description": " "})
        assert response.status_code == 422
        assert "description" in response.json()["error"]["details"]["field_errors"]

    def test_notifications(self, client, admin_headers):
        assert client.get("/api/v1/notifications/unread/count", headers=admin_headers).json() == {"unread": 2}

        response = client.post("/api/v1/notifications/notif-001/read", headers=admin_headers)
        assert response.status_code == 204
        client.post("/api/v1/notifications/notif-unknown/read", headers=admin_headers)

        unread = client.get("/api/v1/notifications", params={"unread_only": True}, headers=admin_headers).json()
        assert [n["id"] for n in unread] == ["notif-002"]

    def test_live_updates_toggle(self, client, admin_headers):
        state = client.get("/api/v1/live-updates", headers=admin_headers).json()
        assert state["running"] is False

        toggled = client.post("/api/v1/live-updates/toggle", headers=admin_headers).json()
        assert toggled["running"] is True

        client.post("/api/v1/live-updates/toggle", headers=admin_headers)
        assert client.get("/api/v1/live-updates", headers=admin_headers).json()["running"] is False

    def test_refresh_is_admin_only_and_keeps_history(self, client, admin_headers, responder_headers):
        client.post("/api/v1/incidents/INC-005/false", json={"reason": "prank call"}, headers=admin_headers)

        denied = client.post("/api/v1/live-updates/refresh", headers=responder_headers)
        assert denied.status_code == 403

        response = client.post("/api/v1/live-updates/refresh", headers=admin_headers)
        assert response.status_code == 204
        incident = client.get("/api/v1/incidents/INC-005", headers=admin_headers).json()
        assert incident["status"] == "FALSE"
        activity = client.get("/api/v1/incidents/INC-005/activity", headers=admin_headers).json()
        assert len(activity) == 1
