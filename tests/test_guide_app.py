"""
Tests for the onboarding guide pages and helper endpoints.
"""

import json
import re

import pytest


def page_globals(html: str, name: str):
    """Value assigned to window.<name> in the page head."""
    match = re.search(rf"window\.{name} = (.*);\n", html)
    assert match, f"window.{name} not found"
    return json.loads(match.group(1))


class TestGuidePage:

    def test_first_step(self, guide_client):
        response = guide_client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Implementation with Authlete" in response.text
        assert 'id="next-step-btn"' in response.text
        assert 'id="back-step-btn"' not in response.text

    def test_page_rendered_from_index_template(self, guide_client):
        response = guide_client.get("/?step=2")

        assert response.template.name == "index.html"
        assert response.context["request"].url.path == "/"
        assert response.context["current"].id == 2
        assert response.context["neighbours"] == {"back": 1, "next": 3}

    def test_steps_and_credentials_are_inlined(self, guide_client):
        html = guide_client.get("/").text

        steps = page_globals(html, "__ONBOARDING_STEPS__")
        credentials = page_globals(html, "__USER_CREDENTIALS__")

        assert [step["id"] for step in steps] == [1, 2, 3, 4, 5]
        assert steps[4]["title"] == "Live Demo"
        assert credentials == {
            "serviceId": "svc-123",
            "serviceSecret": "svc-secret",
            "clientId": "client-456",
            "clientSecret": "client-secret",
        }
        assert page_globals(html, "__CURRENT_STEP__") == 1

    def test_samples_carry_configured_credentials(self, guide_client):
        steps = page_globals(guide_client.get("/").text, "__ONBOARDING_STEPS__")
        demo = steps[4]

        assert "svc-123" in demo["code"]
        assert "client_id=client-456" in demo["code"]
        assert "redirect_uri=http%3A%2F%2Flocalhost%3A3002%2Fcallback" in demo["curl"]

    def test_demo_step(self, guide_client):
        html = guide_client.get("/?step=5").text

        assert 'id="run-demo-btn"' in html
        assert 'id="output-console"' in html
        assert "POST /api/svc-123/auth/authorization" in html
        assert 'id="next-step-btn"' not in html

        actions = page_globals(html, "__DEMO_ACTIONS__")
        assert set(actions) == {"authorization", "consent", "token", "introspection"}
        assert actions["token"]["endpoint"] == "POST /api/svc-123/auth/token"
        assert "TICKET_FROM_STEP_1" in actions["consent"]["sdk"]

    def test_code_sample_is_escaped_once(self, guide_client):
        html = guide_client.get("/?step=5").text

        assert "response_type=code&amp;client_id=client-456" in html
        assert "&amp;amp;" not in html

    @pytest.mark.parametrize("requested,expected", [(0, 1), (3, 3), (42, 5)])
    def test_step_is_clamped(self, guide_client, requested, expected):
        html = guide_client.get(f"/?step={requested}").text

        assert page_globals(html, "__CURRENT_STEP__") == expected

    def test_navigation_links_follow_navigator(self, guide_client):
        html = guide_client.get("/?step=3").text

        assert 'id="back-step-btn" class="step-nav-btn back" href="/?step=2"' in html
        assert 'id="next-step-btn" class="step-nav-btn next" href="/?step=4"' in html

    def test_project_setup_shows_credentials(self, guide_client):
        html = guide_client.get("/?step=4").text

        assert 'id="final-client-id"' in html
        assert "client-456" in html

    def test_static_assets(self, guide_client):
        assert guide_client.get("/static/guide.js").status_code == 200
        assert guide_client.get("/static/guide.css").status_code == 200

    def test_health(self, guide_client):
        response = guide_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "onboarding-guide"}


class TestSimulatedCreation:

    def test_create_service(self, guide_client):
        response = guide_client.post("/api/create-service", json={"serviceName": "My Service"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "serviceId": "svc-123", "serviceSecret": "svc-secret"}

    def test_create_service_without_body(self, guide_client):
        response = guide_client.post("/api/create-service")

        assert response.json()["serviceId"] == "svc-123"

    def test_create_client(self, guide_client):
        response = guide_client.post("/api/create-client", json={
            "clientName": "My App",
            "redirectUris": ["http://localhost:3002/callback"],
        })

        assert response.json() == {"success": True, "clientId": "client-456", "clientSecret": "client-secret"}

    def test_create_calls_do_not_reach_authlete(self, guide_client, authlete):
        guide_client.post("/api/create-service")
        guide_client.post("/api/create-client")

        assert authlete.requests == []

    def test_debug_button_click(self, guide_client):
        response = guide_client.post("/debug/button-click")

        data = response.json()
        assert data["ok"] is True
        assert "T" in data["at"]


class TestSecurityHeaders:

    def test_page_headers(self, guide_client):
        response = guide_client.get("/")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "no-referrer"
        assert "cache-control" not in response.headers

    def test_api_responses_are_not_cached(self, guide_client):
        response = guide_client.post("/api/create-client")

        assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"
        assert response.headers["pragma"] == "no-cache"

    def test_cors(self, guide_client):
        response = guide_client.options("/oauth/token", headers={
            "Origin": "http://localhost:3002",
            "Access-Control-Request-Method": "POST",
        })

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
