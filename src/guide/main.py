"""
Authlete Onboarding Guide

This FastAPI application walks a developer through setting up an Authlete
service and client and then running the OAuth 2.0 Authorization Code flow
live against their own credentials.

Key Features:
- Five guide steps rendered from Jinja2 templates
- SDK and cURL samples for every Authlete call
- Relay endpoints forwarding sample requests to Authlete
- Server-side live demo with per-session state
"""

from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from ..shared.config import Settings, get_settings
from ..shared.logging_utils import FlowLogger
from ..shared.security import SecurityHeaders
from ..shared.tutorial import StepNavigator
from .demo import router as demo_router
from .routes import RELAY_ROUTES, relay_router, router
from .steps import DEMO_STEP_ID, load_guide_steps, render_demo_actions

logger = FlowLogger("GUIDE")

app = FastAPI(
    title="Authlete Onboarding Guide",
    description="""
    Interactive onboarding for the Authlete OAuth 2.0 authorization server.

    **Key Endpoints:**
    - `/` - Guide pages (`?step=1..5`)
    - `/oauth/*` - Relays to the Authlete authorization, issue, token and introspection APIs
    - `/par/*` - Relays used by the Pushed Authorization Request walkthrough
    - `/demo/{action}` - Live demo actions run with per-session state
    - `/health` - Health check endpoint
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

templates_dir = Path(__file__).parent / "templates"
static_dir = Path(__file__).parent / "static"

templates = Jinja2Templates(directory=str(templates_dir))
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

app.add_middleware(
    SessionMiddleware,
    secret_key=get_settings().session_secret
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    """Add security headers to every response."""
    response = await call_next(request)

    for header_name, header_value in SecurityHeaders.for_path(request.url.path).items():
        response.headers[header_name] = header_value

    return response


app.include_router(router)
app.include_router(relay_router)
app.include_router(demo_router)


@app.get("/", response_class=HTMLResponse)
async def guide_page(request: Request, step: int = 1, settings: Settings = Depends(get_settings)):
    """
    Render the guide at the requested step.

    The complete step list and the credentials are also serialized into
    window.__ONBOARDING_STEPS__ and window.__USER_CREDENTIALS__ for the page
    scripts (copy buttons, credential display).
    """
    steps = load_guide_steps(templates, settings)
    navigator = StepNavigator(steps, current_id=step)
    current = navigator.current

    return templates.TemplateResponse(request, "index.html", {
        "steps": steps,
        "current": current,
        "buttons": navigator.button_state(),
        "neighbours": navigator.neighbour_ids(),
        "is_demo_step": current.id == DEMO_STEP_ID,
        "demo_actions": render_demo_actions(templates, settings),
        "steps_json": [s.to_browser() for s in steps],
        "credentials_json": settings.credentials.to_browser(),
    })


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "onboarding-guide"}


def main():
    """Run the guide with uvicorn on the configured port."""
    import uvicorn

    settings = get_settings()
    logger.log_startup(settings.port, {
        "authlete": settings.authlete_base_url,
        "relays": ", ".join(RELAY_ROUTES),
    })
    placeholders = settings.placeholders_in_use()
    if placeholders:
        logger.log_error(
            "placeholder_configuration",
            "Placeholder credentials in use; Authlete will reject relayed calls",
            {"missing": ", ".join(placeholders)}
        )

    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
