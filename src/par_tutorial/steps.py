"""PAR walkthrough steps."""

from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import quote

from fastapi import Depends
from fastapi.templating import Jinja2Templates

from ..shared.config import Settings, get_settings
from ..shared.tutorial import TutorialStep, render_page_fragment, render_sample
from .state import PAR_NONCE, PAR_SCOPE, PAR_STATE_PARAM, PAR_SUBJECT

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

PAR_STEPS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "title": "Step 1: Push Authorization Request",
        "description": "Push authorization parameters to Authlete server",
        "icon": "📤",
    },
    {
        "id": 2,
        "title": "Step 2: User Authorization",
        "description": "User authorization with request URI",
        "icon": "👤",
    },
    {
        "id": 3,
        "title": "Step 3: Complete Authorization",
        "description": "Complete authorization with ticket to get authorization code",
        "icon": "✍️",
    },
    {
        "id": 4,
        "title": "Step 4: Token Exchange",
        "description": "Exchange authorization code for access token",
        "icon": "🔑",
    },
]


def load_par_steps(templates: Jinja2Templates, settings: Settings) -> List[TutorialStep]:
    """Render the four PAR steps with the configured credentials."""
    context = {
        "credentials": settings.credentials,
        "base_url": settings.authlete_base_url,
        "redirect_uri": settings.redirect_uri,
        "redirect_uri_encoded": quote(settings.redirect_uri, safe=""),
        "scope": PAR_SCOPE,
        "state_param": PAR_STATE_PARAM,
        "nonce": PAR_NONCE,
        "subject": PAR_SUBJECT,
    }

    steps = []
    for definition in PAR_STEPS:
        step_id = definition["id"]
        steps.append(TutorialStep(
            id=step_id,
            title=definition["title"],
            description=definition["description"],
            icon=definition["icon"],
            html_content=render_page_fragment(templates, f"steps/par_step_{step_id}.html", context),
            code_sample=render_sample(templates, f"samples/par_step_{step_id}.ts", context),
            curl_sample=render_sample(templates, f"samples/par_step_{step_id}.sh", context),
        ))
    return steps


def get_par_steps(settings: Settings = Depends(get_settings)) -> List[TutorialStep]:
    """FastAPI dependency providing the rendered steps."""
    return load_par_steps(templates, settings)
