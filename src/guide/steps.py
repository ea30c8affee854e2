"""
Onboarding guide content.

Step pages and code samples are Jinja2 templates rendered with the configured
credentials, so the samples the developer copies already carry their own
service and client identifiers.
"""

from typing import Any, Dict, List
from urllib.parse import quote

from fastapi.templating import Jinja2Templates

from ..shared.config import Settings
from ..shared.tutorial import TutorialStep, render_page_fragment, render_sample

GUIDE_STEPS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "title": "Implementation with Authlete",
        "description": "OAuth 2.0 Flow",
        "icon": "🚀",
        "template": "steps/overview.html",
        "sample": "samples/overview.ts",
    },
    {
        "id": 2,
        "title": "Create a Service",
        "description": "Set up your OAuth 2.0 service",
        "icon": "🔧",
        "template": "steps/create_service.html",
        "sample": "samples/create_service.ts",
    },
    {
        "id": 3,
        "title": "Create a Client",
        "description": "Configure your application client",
        "icon": "📱",
        "template": "steps/create_client.html",
        "sample": "samples/create_client.ts",
    },
    {
        "id": 4,
        "title": "Project Setup",
        "description": "Complete project setup guide",
        "icon": "🔧",
        "template": "steps/project_setup.html",
        "sample": "samples/project_setup.ts",
    },
    {
        "id": 5,
        "title": "Live Demo",
        "description": "See your OAuth flow in action",
        "icon": "🎯",
        "template": "steps/live_demo.html",
        "sample": "samples/demo_authorization.ts",
        "curl": "samples/demo_authorization.sh",
    },
]

DEMO_STEP_ID = 5

# Sidebar entries and code panel content for the live demo actions
DEMO_ACTIONS: Dict[str, Dict[str, str]] = {
    "authorization": {
        "title": "Authorization",
        "endpoint": "POST /api/{service_id}/auth/authorization",
        "button": "Start Authorization Flow",
        "sample": "samples/demo_authorization.ts",
        "curl": "samples/demo_authorization.sh",
    },
    "consent": {
        "title": "Grant Consent",
        "endpoint": "POST /api/{service_id}/auth/authorization/issue",
        "button": "Grant Consent",
        "sample": "samples/demo_consent.ts",
        "curl": "samples/demo_consent.sh",
    },
    "token": {
        "title": "Exchange Token",
        "endpoint": "POST /api/{service_id}/auth/token",
        "button": "Exchange Token",
        "sample": "samples/demo_token.ts",
        "curl": "samples/demo_token.sh",
    },
    "introspection": {
        "title": "Access API",
        "endpoint": "POST /api/{service_id}/auth/introspection",
        "button": "Access API",
        "sample": "samples/demo_introspection.ts",
        "curl": "samples/demo_introspection.sh",
    },
}


def _sample_context(settings: Settings) -> Dict[str, Any]:
    return {
        "credentials": settings.credentials,
        "base_url": settings.authlete_base_url,
        "redirect_uri": settings.redirect_uri,
        "redirect_uri_encoded": quote(settings.redirect_uri, safe=""),
    }


def load_guide_steps(templates: Jinja2Templates, settings: Settings) -> List[TutorialStep]:
    """Render every guide step for the given settings."""
    context = _sample_context(settings)
    context["demo_actions"] = DEMO_ACTIONS

    steps = []
    for definition in GUIDE_STEPS:
        steps.append(TutorialStep(
            id=definition["id"],
            title=definition["title"],
            description=definition["description"],
            icon=definition["icon"],
            html_content=render_page_fragment(templates, definition["template"], context),
            code_sample=render_sample(templates, definition["sample"], context),
            curl_sample=render_sample(templates, definition["curl"], context) if "curl" in definition else "",
        ))
    return steps


def render_demo_actions(templates: Jinja2Templates, settings: Settings) -> Dict[str, Dict[str, str]]:
    """Endpoint label and SDK/cURL samples for each demo action."""
    context = _sample_context(settings)
    rendered = {}
    for action, definition in DEMO_ACTIONS.items():
        rendered[action] = {
            "title": definition["title"],
            "button": definition["button"],
            "endpoint": definition["endpoint"].format(service_id=settings.credentials.service_id),
            "sdk": render_sample(templates, definition["sample"], context),
            "curl": render_sample(templates, definition["curl"], context),
        }
    return rendered
