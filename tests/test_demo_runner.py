"""
Tests for the live demo endpoints of the onboarding guide.

The demo is driven through /demo/{action}; Authlete is the stub from
conftest, so each test registers the replies the flow needs.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest

INTERACTION = {
    "action": "INTERACTION",
    "ticket": "T1",
    "client": {"clientName": "Demo Client"},
    "scopes": [{"name": "read"}],
}
LOCATION = {
    "action": "LOCATION",
    "responseContent": "http://localhost:3002/callback?code=CODE1&state=demo123",
}
TOKEN_OK = {
    "action": "OK",
    "resultCode": "A050001",
    "responseContent": json.dumps({
        "access_token": "AT-0123456789abcdefghijklmnopqrstuvwxyz",
        "token_type": "Bearer",
        "expires_in": 3600,
        "scope": "read",
    }),
}
INTROSPECTION_OK = {
    "action": "OK",
    "existent": True,
    "usable": True,
    "clientId": 1234,
    "subject": "user-123",
    "scopes": ["read"],
    "expiresAt": 1700000000000,
}


@pytest.fixture
def full_flow(authlete):
    authlete.respond("/auth/authorization", INTERACTION)
    authlete.respond("/auth/authorization/issue", LOCATION)
    authlete.respond("/auth/token", TOKEN_OK)
    authlete.respond("/auth/introspection", INTROSPECTION_OK)
    return authlete


class TestDemoActions:

    def test_authorization_captures_ticket(self, guide_client, full_flow):
        response = guide_client.post("/demo/authorization")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["next"] == "consent"
        assert data["upstream_status"] == 200
        assert data["state"]["has_ticket"] is True
        assert "T1" in data["output"]
        assert "Demo Client" in data["output"]

        parameters = parse_qs(full_flow.last_json()["parameters"])
        assert parameters["client_id"] == ["client-456"]
        assert parameters["state"] == ["demo123"]

    def test_consent_sends_captured_ticket(self, guide_client, full_flow):
        guide_client.post("/demo/authorization")

        response = guide_client.post("/demo/consent")

        assert response.json()["ok"] is True
        body = full_flow.last_json()
        assert body["ticket"] == "T1"
        assert body["subject"] == "user-123"
        assert json.loads(body["claims"])["name"] == "Sara Wallet"
        assert "CODE1" in response.json()["output"]

    def test_full_flow(self, guide_client, full_flow):
        for action in ["authorization", "consent", "token"]:
            assert guide_client.post(f"/demo/{action}").json()["ok"] is True

        token_parameters = parse_qs(full_flow.last_json()["parameters"])
        assert token_parameters["code"] == ["CODE1"]
        assert token_parameters["grant_type"] == ["authorization_code"]

        response = guide_client.post("/demo/introspection")
        data = response.json()

        assert data["ok"] is True
        assert data["next"] is None
        assert full_flow.last_json() == {"token": "AT-0123456789abcdefghijklmnopqrstuvwxyz"}
        assert "ACTIVE" in data["output"]
        assert "OAuth flow completed successfully" in data["output"]
        assert data["state"]["completed"] == ["authorization", "consent", "token"]

    def test_state_endpoint(self, guide_client, full_flow):
        assert guide_client.get("/demo/state").json()["completed"] == []

        guide_client.post("/demo/authorization")

        assert guide_client.get("/demo/state").json()["completed"] == ["authorization"]


class TestDemoSequencing:

    def test_consent_before_authorization(self, guide_client, authlete):
        response = guide_client.post("/demo/consent")

        assert response.status_code == 400
        data = response.json()
        assert data["ok"] is False
        assert "No ticket available" in data["error"]
        assert authlete.requests == []

    def test_introspection_before_token(self, guide_client, full_flow):
        guide_client.post("/demo/authorization")

        response = guide_client.post("/demo/introspection")

        assert response.status_code == 400
        assert "No access token available" in response.json()["error"]

    def test_reset_forgets_captured_values(self, guide_client, full_flow):
        guide_client.post("/demo/authorization")

        reset = guide_client.post("/demo/reset")

        assert reset.json() == {
            "success": True,
            "state": {
                "completed": [],
                "has_ticket": False,
                "has_authorization_code": False,
                "has_access_token": False,
            },
        }
        assert guide_client.post("/demo/consent").status_code == 400

    def test_unknown_action(self, guide_client):
        assert guide_client.post("/demo/refresh").status_code == 404


class TestDemoFailures:

    def test_unexpected_response_is_shown(self, guide_client, authlete):
        authlete.respond("/auth/authorization", {"action": "BAD_REQUEST", "resultMessage": "bad client"}, 400)

        response = guide_client.post("/demo/authorization")

        data = response.json()
        assert response.status_code == 200
        assert data["ok"] is False
        assert data["next"] is None
        assert data["upstream_status"] == 400
        assert "Unexpected response" in data["output"]
        assert "bad client" in data["output"]

    def test_unreachable_authlete(self, guide_client, authlete):
        authlete.fail("/auth/authorization", httpx.ConnectError("connection refused"))

        response = guide_client.post("/demo/authorization")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Authorization API call failed: connection refused"
        assert "Authorization Error:" in data["output"]

    @pytest.mark.parametrize("client,scopes", [
        ("oops", "read"),
        (["Demo Client"], {"name": "read"}),
        (None, None),
    ])
    def test_odd_client_and_scopes_shapes(self, guide_client, authlete, client, scopes):
        authlete.respond("/auth/authorization", {
            "action": "INTERACTION", "ticket": "T1", "client": client, "scopes": scopes,
        })

        response = guide_client.post("/demo/authorization")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["state"]["has_ticket"] is True
        assert "N/A" in data["output"]

    def test_introspection_scopes_not_a_list(self, guide_client, full_flow):
        full_flow.respond("/auth/introspection", dict(INTROSPECTION_OK, scopes="read"))
        for action in ("authorization", "consent", "token"):
            guide_client.post(f"/demo/{action}")

        response = guide_client.post("/demo/introspection")

        assert response.status_code == 200
        assert response.json()["ok"] is True
