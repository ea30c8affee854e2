"""
PAR Tutorial

A four-step walkthrough of Pushed Authorization Requests (RFC 9126) against
Authlete. The browser only clicks "Execute"; every Authlete call is made by
this server with the values captured in the browser's session.
"""

from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from ..shared.config import get_settings
from ..shared.logging_utils import FlowLogger
from ..shared.security import SecurityHeaders
from ..shared.tutorial import StepNavigator, TutorialStep
from .routes import router
from .state import ParTutorialState
from .steps import get_par_steps, templates

logger = FlowLogger("PAR-TUTORIAL")

app = FastAPI(
    title="Authlete PAR Tutorial",
    description="""
    Step-by-step Pushed Authorization Request walkthrough.

    **Key Endpoints:**
    - `/` - Tutorial page
    - `/api/execute-step/{step_id}` - Run step 1..4 against Authlete
    - `/api/current-step` - Current step and captured values
    - `/api/reset` - Start over
    - `/api/set-step/{step_id}` - Move to another step
    - `/health` - Health check endpoint
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

static_dir = Path(__file__).parent / "static"
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


@app.get("/", response_class=HTMLResponse)
async def tutorial_page(request: Request,
                        step: Optional[int] = None,
                        steps: List[TutorialStep] = Depends(get_par_steps)):
    """Render the tutorial at the requested step, or where the session left off."""
    state = ParTutorialState.from_session(request.session)
    navigator = StepNavigator(steps, current_id=step or state.current_step)

    return templates.TemplateResponse(request, "index.html", {
        "steps": steps,
        "current": navigator.current,
        "buttons": navigator.button_state(),
        "neighbours": navigator.neighbour_ids(),
        "state": state,
        "steps_json": [s.to_browser() for s in steps],
    })


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "par-tutorial"}


def main():
    """Run the PAR tutorial with uvicorn on the configured port."""
    import uvicorn

    settings = get_settings()
    logger.log_startup(settings.par_port, {
        "authlete": settings.authlete_base_url,
        "service_id": settings.credentials.service_id,
    })
    placeholders = settings.placeholders_in_use()
    if placeholders:
        logger.log_error(
            "placeholder_configuration",
            "Placeholder credentials in use; Authlete will reject tutorial calls",
            {"missing": ", ".join(placeholders)}
        )

    uvicorn.run(app, host="0.0.0.0", port=settings.par_port)


if __name__ == "__main__":
    main()
