"""Integration tests for QR connect endpoints."""

import json

from fastapi.testclient import TestClient

ALICE_ID = "550e8400-e29b-41d4-a716-446655440001"
BOB_ID = "550e8400-e29b-41d4-a716-446655440002"


def qr_data(user_id: str, kind: str = "netwify_connect") -> str:
    return json.dumps({"type": kind, "userId": user_id, "timestamp": 1700000000000})


class TestGetMyQR:
    """Tests for GET /api/v1/connect/qr endpoint."""

    def test_returns_payload_for_caller(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test that the QR payload encodes the caller's id."""
        profile_factory(ALICE_ID, "Alice Ng")

        response = client.get("/api/v1/connect/qr", headers=auth_headers(ALICE_ID))

        assert response.status_code == 200
        data = response.json()
        encoded = json.loads(data["data"])
        assert encoded["type"] == "netwify_connect"
        assert encoded["userId"] == ALICE_ID
        assert data["payload"]["userId"] == ALICE_ID

    def test_requires_profile(self, client: TestClient, auth_headers) -> None:
        """Test that a user without a profile cannot show a code."""
        response = client.get("/api/v1/connect/qr", headers=auth_headers(ALICE_ID))

        assert response.status_code == 404


class TestScan:
    """Tests for POST /api/v1/connect/scan endpoint."""

    def test_previews_scanned_profile(self, client: TestClient, auth_headers, profile_factory, fake_supabase) -> None:
        """Test that scanning shows the other user's card and writes nothing."""
        profile_factory(ALICE_ID, "Alice Ng")
        profile_factory(BOB_ID, "Bob Ruiz", company="Globex", phone="+15550002")

        response = client.post(
            "/api/v1/connect/scan",
            json={"data": qr_data(BOB_ID)},
            headers=auth_headers(ALICE_ID),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["display_name"] == "Bob Ruiz"
        assert "phone" not in data["profile"]
        assert data["already_connected"] is False
        assert data["has_pending_request"] is False
        assert fake_supabase.rows("connection_requests") == []

    def test_rejects_foreign_qr(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test that a QR code from another app is rejected."""
        profile_factory(ALICE_ID, "Alice Ng")

        response = client.post(
            "/api/v1/connect/scan",
            json={"data": "WIFI:S:cafe;T:WPA;P:secret;;"},
            headers=auth_headers(ALICE_ID),
        )

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_payload"

    def test_rejects_own_code(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test that scanning one's own code returns self_connect."""
        profile_factory(ALICE_ID, "Alice Ng")

        response = client.post(
            "/api/v1/connect/scan",
            json={"data": qr_data(ALICE_ID)},
            headers=auth_headers(ALICE_ID),
        )

        assert response.status_code == 422
        assert response.json()["error"] == "self_connect"


class TestConnectFromQR:
    """Tests for POST /api/v1/connect endpoint."""

    def test_sends_request(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test that connecting creates a pending request to the scanned user."""
        profile_factory(ALICE_ID, "Alice Ng", job_title="Engineer")
        profile_factory(BOB_ID, "Bob Ruiz")

        response = client.post(
            "/api/v1/connect",
            json={"data": qr_data(BOB_ID), "message": "Nice meeting you"},
            headers=auth_headers(ALICE_ID),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["from_user_id"] == ALICE_ID
        assert data["to_user_id"] == BOB_ID
        assert data["message"] == "Nice meeting you"
        assert data["from_user_profile"]["job_title"] == "Engineer"

    def test_duplicate_request_conflicts(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test that scanning the same code twice returns 409."""
        profile_factory(ALICE_ID, "Alice Ng")
        profile_factory(BOB_ID, "Bob Ruiz")
        headers = auth_headers(ALICE_ID)

        client.post("/api/v1/connect", json={"data": qr_data(BOB_ID)}, headers=headers)
        response = client.post("/api/v1/connect", json={"data": qr_data(BOB_ID)}, headers=headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_mutual_auto_accept_writes_summary(
        self, client: TestClient, auth_headers, profile_factory, fake_supabase, monkeypatch
    ) -> None:
        """Test that a connection accepted by scanning back still gets its summary."""
        from src.core.config import get_settings

        monkeypatch.setenv("MUTUAL_REQUEST_POLICY", "auto_accept")
        get_settings.cache_clear()
        profile_factory(ALICE_ID, "Alice Ng", job_title="Engineer")
        profile_factory(BOB_ID, "Bob Ruiz", company="Globex")

        client.post("/api/v1/connect", json={"data": qr_data(BOB_ID)}, headers=auth_headers(ALICE_ID))
        response = client.post("/api/v1/connect", json={"data": qr_data(ALICE_ID)}, headers=auth_headers(BOB_ID))

        assert response.status_code == 201
        assert response.json()["status"] == "accepted"
        contacts = fake_supabase.rows("contacts")
        assert len(contacts) == 2
        assert all(c.get("ai_summary") for c in contacts)

    def test_unknown_user(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test that a valid code for a missing profile returns 404."""
        profile_factory(ALICE_ID, "Alice Ng")

        response = client.post(
            "/api/v1/connect",
            json={"data": qr_data(BOB_ID)},
            headers=auth_headers(ALICE_ID),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "profile_not_found"


class TestConnectionStatus:
    """Tests for GET /api/v1/connect/status/{user_id} endpoint."""

    def test_reports_both_directions(self, client: TestClient, auth_headers, profile_factory) -> None:
        """Test outgoing and incoming flags from each side."""
        profile_factory(ALICE_ID, "Alice Ng")
        profile_factory(BOB_ID, "Bob Ruiz")
        client.post("/api/v1/connect", json={"data": qr_data(BOB_ID)}, headers=auth_headers(ALICE_ID))

        alice_view = client.get(f"/api/v1/connect/status/{BOB_ID}", headers=auth_headers(ALICE_ID)).json()
        bob_view = client.get(f"/api/v1/connect/status/{ALICE_ID}", headers=auth_headers(BOB_ID)).json()

        assert alice_view["has_outgoing_request"] is True
        assert alice_view["has_incoming_request"] is False
        assert bob_view["has_outgoing_request"] is False
        assert bob_view["has_incoming_request"] is True
        assert alice_view["already_connected"] is bob_view["already_connected"] is False
