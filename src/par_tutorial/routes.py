"""
PAR Tutorial Routes

Server-side execution of the four walkthrough steps. Each step reads the
value captured by the previous one from the session, calls Authlete through
the relay and stores what it got back.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..shared.config import Settings, get_settings
from ..shared.demo_state import DemoSequenceError, extract_authorization_code, parse_token_content
from ..shared.logging_utils import FlowLogger
from ..shared.relay import AuthleteRelay, RelayError, RelayResult
from ..shared.tutorial import StepNavigator, TutorialStep
from .state import (
    PAR_STATE_PARAM,
    PAR_STEP_COUNT,
    TOKEN_SUCCESS_CODE,
    ParTutorialState,
    build_par_authorization_body,
    build_par_issue_body,
    build_par_token_body,
    build_push_body,
)
from .steps import get_par_steps

router = APIRouter(prefix="/api", tags=["par-tutorial"])
logger = FlowLogger("PAR-TUTORIAL")


class StepFailure(Exception):
    """Authlete answered, but without the value the step needs."""

    def __init__(self, message: str, details: Any = None):
        self.details = details
        super().__init__(message)


def get_par_relay(settings: Settings = Depends(get_settings)) -> AuthleteRelay:
    """FastAPI dependency providing the relay client for the PAR tutorial."""
    return AuthleteRelay(settings, component="PAR-TUTORIAL")


async def push_authorization_request(state: ParTutorialState,
                                     settings: Settings,
                                     relay: AuthleteRelay) -> Tuple[Any, RelayResult]:
    result = await relay.call("pushed_authorization", build_push_body(settings.credentials, settings.redirect_uri))
    request_uri = result.field("requestUri")
    if not request_uri:
        raise StepFailure("No request URI received from pushed authorization request", result.body)

    state.record_request_uri(request_uri)
    return result.body, result


async def authorize_with_request_uri(state: ParTutorialState,
                                     settings: Settings,
                                     relay: AuthleteRelay) -> Tuple[Any, RelayResult]:
    body = build_par_authorization_body(state, settings.credentials, settings.redirect_uri)
    result = await relay.call("authorization", body)
    ticket = result.field("ticket")
    if not ticket:
        raise StepFailure("No ticket received from authorization request", result.body)

    state.record_ticket(ticket)
    return {"ticket": ticket, "action": result.field("action")}, result


async def issue_authorization_code(state: ParTutorialState,
                                   settings: Settings,
                                   relay: AuthleteRelay) -> Tuple[Any, RelayResult]:
    result = await relay.call("authorization_issue", build_par_issue_body(state))
    code = extract_authorization_code(result.body) if isinstance(result.body, dict) else None
    if not code:
        raise StepFailure("No authorization code received", result.body)

    state.record_authorization_code(code)
    return {"authorizationCode": code, "state": result.field("state") or PAR_STATE_PARAM}, result


async def exchange_token(state: ParTutorialState,
                         settings: Settings,
                         relay: AuthleteRelay) -> Tuple[Any, RelayResult]:
    body = build_par_token_body(state, settings.credentials, settings.redirect_uri)
    result = await relay.call("token", body)

    result_code = result.field("resultCode")
    if result_code and result_code != TOKEN_SUCCESS_CODE:
        message = result.field("resultMessage") or "Unknown error"
        raise StepFailure(f"Token exchange failed: {message}", result.body)

    token = result.field("accessToken")
    if not token and isinstance(result.body, dict):
        token = parse_token_content(result.body).get("access_token")
    if not token:
        raise StepFailure("No access token received from token exchange", result.body)

    state.record_access_token(token)
    return result.body, result


STEP_RUNNERS: Dict[int, Callable] = {
    1: push_authorization_request,
    2: authorize_with_request_uri,
    3: issue_authorization_code,
    4: exchange_token,
}


def _next_step(step_id: int) -> Optional[int]:
    return step_id + 1 if step_id < PAR_STEP_COUNT else None


@router.post("/execute-step/{step_id}")
async def execute_step(step_id: int,
                       request: Request,
                       settings: Settings = Depends(get_settings),
                       relay: AuthleteRelay = Depends(get_par_relay)):
    """
    Execute one PAR step against Authlete.

    Returns {success, step, result, nextStep}. Missing prerequisites and
    responses without the expected value are 400s; an unreachable Authlete
    is a 500.
    """
    runner = STEP_RUNNERS.get(step_id)
    if runner is None:
        return JSONResponse(status_code=400, content={"error": "Invalid step ID"})

    state = ParTutorialState.from_session(request.session)

    try:
        payload, result = await runner(state, settings, relay)
    except DemoSequenceError as exc:
        logger.log_error("step_sequence", str(exc), {"step": step_id})
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except StepFailure as exc:
        logger.log_error("step_failed", str(exc), {"step": step_id})
        return JSONResponse(status_code=400, content={"error": str(exc), "details": exc.details})
    except RelayError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})

    next_step = _next_step(step_id)
    state.current_step = next_step or step_id
    state.save(request.session)

    logger.log_flow_message(
        "PAR-TUTORIAL", "BROWSER",
        f"Step {step_id} completed",
        {
            "upstream_status": result.status_code,
            "request_uri": state.request_uri,
            "ticket": state.ticket,
            "authorization_code": state.authorization_code,
            "access_token": state.access_token,
        }
    )

    return {"success": True, "step": step_id, "result": payload, "nextStep": next_step}


@router.get("/current-step")
async def current_step(request: Request, steps: List[TutorialStep] = Depends(get_par_steps)):
    """The step the session is on, plus everything captured so far."""
    state = ParTutorialState.from_session(request.session)
    step = StepNavigator(steps, current_id=state.current_step).current
    return {"step": step.to_browser(), "state": state.model_dump()}


@router.post("/reset")
async def reset_tutorial(request: Request):
    """Start the walkthrough over."""
    ParTutorialState().save(request.session)
    logger.log_info("🔄 PAR tutorial state reset")
    return {"success": True}


@router.post("/set-step/{step_id}")
async def set_step(step_id: int, request: Request):
    """Move the session to another step without touching captured values."""
    if not 1 <= step_id <= PAR_STEP_COUNT:
        return JSONResponse(status_code=400, content={"error": "Invalid step ID"})

    state = ParTutorialState.from_session(request.session)
    state.current_step = step_id
    state.save(request.session)

    logger.log_step_change(step_id)
    return {"success": True}
