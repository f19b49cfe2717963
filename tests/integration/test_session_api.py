"""
Integration Tests - Session API

Drives the HTTP surface end to end: booking, lifecycle, video
credentials and the error contract. Persistence and signing are
replaced with in-memory collaborators.
"""

import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi.testclient import TestClient

from manosetu.api.deps import get_credential_issuer, get_party_directory, get_session_store
from manosetu.config import get_settings
from manosetu.domain.enums import SessionStatus
from manosetu.main import create_application

BASE = "/api/v1/session"


@pytest.fixture
def api(test_settings, store, parties, issuer) -> TestClient:
    app = create_application(test_settings)
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_party_directory] = lambda: parties
    app.dependency_overrides[get_credential_issuer] = lambda: issuer
    return TestClient(app)


@pytest.fixture
def auth(make_token):
    def _auth(party) -> dict:
        return {"Authorization": f"Bearer {make_token(party.id)}"}
    return _auth


def booking(therapist, start="2026-11-02T14:00:00Z", end="2026-11-02T15:00:00Z", minutes=60) -> dict:
    return {
        "therapistId": str(therapist.id),
        "startTime": start,
        "endTime": end,
        "durationMinutes": minutes,
    }


class TestScheduleEndpoint:

    def test_books_session(self, api, auth, client_party, therapist):
        response = api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Session scheduled successfully"
        assert body["session"]["status"] == "scheduled"
        assert body["session"]["therapistId"] == str(therapist.id)
        assert body["session"]["clientId"] == str(client_party.id)
        assert body["session"]["channelIdentity"] is None
        assert body["session"]["therapist"] == {"id": str(therapist.id), "name": "Dr. Mehta"}
        assert body["session"]["client"] == {"id": str(client_party.id), "name": "Asha"}

    def test_overlap_rejected(self, api, auth, client_party, other_client, therapist):
        api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))

        response = api.post(
            f"{BASE}/schedule",
            json=booking(therapist, "2026-11-02T14:30:00Z", "2026-11-02T15:30:00Z"),
            headers=auth(other_client),
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "scheduling_conflict",
            "message": "Therapist is not available at this time",
        }

    def test_back_to_back_accepted(self, api, auth, client_party, other_client, therapist):
        api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))

        response = api.post(
            f"{BASE}/schedule",
            json=booking(therapist, "2026-11-02T15:00:00Z", "2026-11-02T16:00:00Z"),
            headers=auth(other_client),
        )
        assert response.status_code == 201

    def test_invalid_therapist(self, api, auth, client_party, other_client):
        response = api.post(f"{BASE}/schedule", json=booking(other_client), headers=auth(client_party))

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid therapist"

    def test_inverted_window(self, api, auth, client_party, therapist):
        response = api.post(
            f"{BASE}/schedule",
            json=booking(therapist, "2026-11-02T15:00:00Z", "2026-11-02T14:00:00Z"),
            headers=auth(client_party),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_interval"

    def test_malformed_body(self, api, auth, client_party):
        response = api.post(f"{BASE}/schedule", json={"startTime": "soon"}, headers=auth(client_party))

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_requires_authentication(self, api, therapist):
        response = api.post(f"{BASE}/schedule", json=booking(therapist))
        assert response.status_code == 401

    def test_rejects_bad_token(self, api, therapist):
        response = api.post(
            f"{BASE}/schedule",
            json=booking(therapist),
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_rejects_unknown_party(self, api, auth, therapist, client_party, parties):
        headers = auth(client_party)
        del parties.parties[client_party.id]

        response = api.post(f"{BASE}/schedule", json=booking(therapist), headers=headers)
        assert response.status_code == 401


class TestMySessions:

    def test_client_and_therapist_views(self, api, auth, client_party, other_client, therapist):
        api.post(
            f"{BASE}/schedule",
            json=booking(therapist, "2026-11-02T16:00:00Z", "2026-11-02T17:00:00Z"),
            headers=auth(client_party),
        )
        api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(other_client))

        mine = api.get(f"{BASE}/my-sessions", headers=auth(client_party)).json()
        theirs = api.get(f"{BASE}/my-sessions", headers=auth(therapist)).json()

        assert mine["success"] is True
        assert len(mine["sessions"]) == 1
        assert [s["startTime"][:16] for s in theirs["sessions"]] == [
            "2026-11-02T14:00",
            "2026-11-02T16:00",
        ]

    def test_items_carry_party_summaries(self, api, auth, client_party, therapist):
        api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))

        mine = api.get(f"{BASE}/my-sessions", headers=auth(client_party)).json()["sessions"]
        theirs = api.get(f"{BASE}/my-sessions", headers=auth(therapist)).json()["sessions"]

        assert mine[0]["therapist"]["name"] == "Dr. Mehta"
        assert theirs[0]["client"]["name"] == "Asha"

    def test_unknown_party_has_no_name(self, api, auth, store, parties, make_session, client_party, therapist):
        departed = make_session(client_party, therapist, datetime(2026, 11, 3, 9, 0, tzinfo=timezone.utc))
        store.add(departed)
        headers = auth(therapist)
        del parties.parties[client_party.id]

        sessions = api.get(f"{BASE}/my-sessions", headers=headers).json()["sessions"]

        assert sessions[0]["client"] == {"id": str(client_party.id), "name": None}
        assert sessions[0]["therapist"]["name"] == "Dr. Mehta"


class TestLifecycleEndpoints:

    @pytest.fixture
    def session_id(self, api, auth, client_party, therapist) -> str:
        response = api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))
        return response.json()["session"]["id"]

    def test_start_then_end(self, api, auth, client_party, therapist, session_id):
        started = api.post(f"{BASE}/{session_id}/start", headers=auth(therapist))

        assert started.status_code == 200
        body = started.json()
        assert body["channelName"] == f"session-{session_id}"
        assert body["meetingLink"] == body["channelName"]
        assert body["session"]["status"] == "ongoing"

        ended = api.post(f"{BASE}/{session_id}/end", headers=auth(client_party))

        assert ended.status_code == 200
        assert ended.json()["session"]["status"] == "completed"
        assert ended.json()["message"] == "Session ended successfully"

    def test_start_by_non_participant(self, api, auth, other_client, session_id):
        response = api.post(f"{BASE}/{session_id}/start", headers=auth(other_client))

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized"

    def test_start_unknown_session(self, api, auth, client_party):
        response = api.post(f"{BASE}/{uuid4()}/start", headers=auth(client_party))

        assert response.status_code == 404
        assert response.json()["message"] == "Session not found"

    def test_end_scheduled_rejected(self, api, auth, client_party, session_id):
        response = api.post(f"{BASE}/{session_id}/end", headers=auth(client_party))

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_state_transition"

    def test_start_twice_rejected(self, api, auth, client_party, session_id):
        api.post(f"{BASE}/{session_id}/start", headers=auth(client_party))
        response = api.post(f"{BASE}/{session_id}/start", headers=auth(client_party))

        assert response.status_code == 400

    def test_cancel_by_admin(self, api, auth, admin, store, session_id):
        response = api.post(f"{BASE}/{session_id}/cancel", headers=auth(admin))

        assert response.status_code == 200
        assert response.json()["session"]["status"] == "cancelled"
        assert response.json()["session"]["cancelledBy"] == str(admin.id)
        assert all(s.status == SessionStatus.CANCELLED for s in store.sessions.values())

    def test_cancel_ongoing_rejected(self, api, auth, therapist, session_id):
        api.post(f"{BASE}/{session_id}/start", headers=auth(therapist))
        response = api.post(f"{BASE}/{session_id}/cancel", headers=auth(therapist))

        assert response.status_code == 400

    def test_get_session(self, api, auth, therapist, other_client, session_id):
        response = api.get(f"{BASE}/{session_id}", headers=auth(therapist))

        assert response.status_code == 200
        assert response.json()["session"]["client"]["name"] == "Asha"
        assert response.json()["session"]["therapist"]["name"] == "Dr. Mehta"
        assert api.get(f"{BASE}/{session_id}", headers=auth(other_client)).status_code == 403


class TestVideoEndpoints:

    @pytest.fixture
    def ongoing_id(self, api, auth, client_party, therapist) -> str:
        response = api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))
        session_id = response.json()["session"]["id"]
        api.post(f"{BASE}/{session_id}/start", headers=auth(client_party))
        return session_id

    def test_token_for_participant(self, api, auth, client_party, ongoing_id):
        response = api.get(f"{BASE}/{ongoing_id}/token", headers=auth(client_party))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert body["channelName"] == f"session-{ongoing_id}"
        expires_at = datetime.fromisoformat(body["expiresAt"].replace("Z", "+00:00"))
        assert expires_at > datetime.now(expires_at.tzinfo) + timedelta(minutes=59)

    def test_renewal_keeps_identity(self, api, auth, therapist, ongoing_id):
        first = api.get(f"{BASE}/{ongoing_id}/token", headers=auth(therapist)).json()
        second = api.get(f"{BASE}/{ongoing_id}/token", headers=auth(therapist)).json()

        assert first["channelName"] == second["channelName"]
        assert first["uid"] == second["uid"]

    def test_token_for_non_participant(self, api, auth, other_client, ongoing_id):
        response = api.get(f"{BASE}/{ongoing_id}/token", headers=auth(other_client))
        assert response.status_code == 403

    def test_token_for_scheduled_session(self, api, auth, client_party, therapist):
        response = api.post(f"{BASE}/schedule", json=booking(therapist), headers=auth(client_party))
        session_id = response.json()["session"]["id"]

        response = api.get(f"{BASE}/{session_id}/token", headers=auth(client_party))
        assert response.status_code == 400

    def test_token_for_unknown_session(self, api, auth, client_party):
        response = api.get(f"{BASE}/{uuid4()}/token", headers=auth(client_party))
        assert response.status_code == 404

    def test_signing_failure(self, api, auth, client_party, signer, ongoing_id):
        signer.fail_with = RuntimeError("provider down")

        response = api.get(f"{BASE}/{ongoing_id}/token", headers=auth(client_party))

        assert response.status_code == 500
        assert response.json()["error"] == "credential_issuance_failure"
        assert "provider down" not in response.text

    def test_key_returns_app_id_only(self, api, auth, client_party):
        response = api.get(f"{BASE}/key", headers=auth(client_party))

        assert response.status_code == 200
        assert response.json() == {"key": "test-app-id"}
        assert "test-app-certificate" not in response.text


class TestHealth:

    def test_liveness(self, api):
        response = api.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_metrics_exposed(self, api):
        response = api.get("/metrics")

        assert response.status_code == 200
        assert "manosetu_sessions_scheduled_total" in response.text
