"""
Live demo runner.

Runs the four demo actions of the onboarding guide on the server: the request
is built from the session's DemoState, forwarded through the relay, the
interesting value is captured back into the session, and a formatted console
message is returned for the page to display.
"""

import json
from datetime import datetime
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ..shared.config import Settings, get_settings
from ..shared.demo_state import (
    DEMO_ORDER,
    DemoSequenceError,
    DemoState,
    build_authorization_body,
    build_consent_body,
    build_introspection_body,
    build_token_body,
    capture_authorization,
    capture_consent,
    capture_token,
    introspection_active,
    next_action,
    parse_token_content,
)
from ..shared.logging_utils import FlowLogger
from ..shared.output_format import format_output
from ..shared.relay import AuthleteRelay, RelayError, RelayResult, get_relay

router = APIRouter(prefix="/demo", tags=["demo"])
logger = FlowLogger("GUIDE")

ERROR_LABELS = {
    "authorization": "Authorization",
    "consent": "Consent",
    "token": "Token",
    "introspection": "API Access",
}


class DemoOutcome:
    """Console lines for one action and whether the expected value was captured."""

    def __init__(self, ok: bool, lines: List[str], result: RelayResult):
        self.ok = ok
        self.lines = lines
        self.result = result


def _unexpected(result: RelayResult) -> DemoOutcome:
    return DemoOutcome(False, ["❌ Unexpected response: " + json.dumps(result.body, indent=2)], result)


def _typed_field(result: RelayResult, name: str, kind: type, default: Any) -> Any:
    # Display only: a value of another shape is shown as missing
    value = result.field(name)
    return value if isinstance(value, kind) else default


def _format_expiry(value: Any) -> str:
    # Authlete reports expiresAt in milliseconds
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M:%S")
    return "N/A"


async def run_authorization(state: DemoState, settings: Settings, relay: AuthleteRelay) -> DemoOutcome:
    result = await relay.call("authorization", build_authorization_body(settings.credentials, settings.redirect_uri))
    if not capture_authorization(state, result.body):
        return _unexpected(result)

    client_name = _typed_field(result, "client", dict, {}).get("clientName") or "N/A"
    scopes = ", ".join(
        f'"{scope.get("name")}"' for scope in _typed_field(result, "scopes", list, []) if isinstance(scope, dict)
    )
    return DemoOutcome(True, [
        "✅ Authorization Response",
        "{",
        f'  "action": "{result.field("action")}",',
        f'  "ticket": "{state.ticket}",',
        f'  "clientName": "{client_name}",',
        f'  "scopes": [{scopes}]',
        "}",
        "",
        "Status: ✅ Ready for user consent",
    ], result)


async def run_consent(state: DemoState, settings: Settings, relay: AuthleteRelay) -> DemoOutcome:
    result = await relay.call("authorization_issue", build_consent_body(state))
    if not capture_consent(state, result.body):
        return _unexpected(result)

    return DemoOutcome(True, [
        "✅ Consent Response",
        "{",
        f'  "action": "{result.field("action") or "LOCATION"}",',
        f'  "authorizationCode": "{state.authorization_code}"',
        "}",
        "",
        f"Redirect URL: {result.field('responseContent') or ''}",
        "",
        "Status: ✅ Ready for token exchange",
    ], result)


async def run_token(state: DemoState, settings: Settings, relay: AuthleteRelay) -> DemoOutcome:
    result = await relay.call("token", build_token_body(state, settings.credentials, settings.redirect_uri))
    if not capture_token(state, result.body):
        return _unexpected(result)

    token_data = parse_token_content(result.body)
    preview = state.access_token[:30] + "..."
    expires_in = token_data.get("expires_in", result.field("expiresIn", 0))
    return DemoOutcome(True, [
        "✅ Token Response",
        "{",
        f'  "action": "{result.field("action")}",',
        f'  "access_token": "{preview}",',
        f'  "token_type": "{token_data.get("token_type", "Bearer")}",',
        f'  "expires_in": {expires_in},',
        f'  "scope": "{token_data.get("scope") or "read"}"',
        "}",
        "",
        f"Access Token: {preview}",
        f"Expires In: {expires_in} seconds",
        "",
        "Status: ✅ Ready for API access",
    ], result)


async def run_introspection(state: DemoState, settings: Settings, relay: AuthleteRelay) -> DemoOutcome:
    result = await relay.call("introspection", build_introspection_body(state))
    if result.field("action") != "OK":
        return _unexpected(result)

    active = introspection_active(result.body)
    existent = result.field("existent")
    usable = result.field("usable")
    scopes = ", ".join(f'"{scope}"' for scope in _typed_field(result, "scopes", list, []))
    expires = _format_expiry(result.field("expiresAt"))
    return DemoOutcome(True, [
        "✅ Introspection Response",
        "{",
        f'  "action": "{result.field("action")}",',
        f'  "existent": {json.dumps(existent)},',
        f'  "usable": {json.dumps(usable)},',
        f'  "clientId": {result.field("clientId")},',
        f'  "subject": "{result.field("subject")}",',
        f'  "scopes": [{scopes}],',
        f'  "expiresAt": "{expires}"',
        "}",
        "",
        "Token Status: " + ("✅ ACTIVE" if active else "❌ INACTIVE"),
        "Token Existent: " + ("✅ YES" if existent else "❌ NO"),
        "Token Usable: " + ("✅ YES" if usable else "❌ NO"),
        f"Expires: {expires}",
        "",
        "Status: ✅ OAuth flow completed successfully!",
    ], result)


RUNNERS = {
    "authorization": run_authorization,
    "consent": run_consent,
    "token": run_token,
    "introspection": run_introspection,
}


def _state_summary(state: DemoState) -> dict:
    return {
        "completed": state.completed_actions(),
        "has_ticket": state.ticket is not None,
        "has_authorization_code": state.authorization_code is not None,
        "has_access_token": state.access_token is not None,
    }


@router.post("/reset")
async def reset_demo(request: Request):
    """Forget every value captured in this browser session."""
    DemoState().save(request.session)
    logger.log_demo_action("reset", {"result": "cleared"})
    return {"success": True, "state": _state_summary(DemoState())}


@router.get("/state")
async def demo_state(request: Request):
    """Which demo actions have completed in this browser session."""
    return _state_summary(DemoState.from_session(request.session))


@router.post("/{action}")
async def run_demo_action(action: str,
                          request: Request,
                          settings: Settings = Depends(get_settings),
                          relay: AuthleteRelay = Depends(get_relay)):
    """
    Run one demo action against Authlete.

    Returns the formatted console output, the next action to offer and a
    summary of the captured state.
    """
    if action not in RUNNERS:
        raise HTTPException(status_code=404, detail=f"Unknown demo action '{action}'. Expected one of {DEMO_ORDER}")

    state = DemoState.from_session(request.session)

    try:
        outcome = await RUNNERS[action](state, settings, relay)
    except DemoSequenceError as exc:
        logger.log_demo_action(action, {"error": str(exc)}, success=False)
        return JSONResponse(status_code=400, content={
            "ok": False,
            "action": action,
            "error": str(exc),
            "output": format_output(f"❌ {exc}"),
        })
    except RelayError as exc:
        logger.log_demo_action(action, {"error": str(exc)}, success=False)
        return JSONResponse(status_code=500, content={
            "ok": False,
            "action": action,
            "error": str(exc),
            "output": format_output(f"❌ {ERROR_LABELS[action]} Error: {exc}"),
        })

    state.save(request.session)
    logger.log_demo_action(action, {
        "captured": outcome.ok,
        "upstream_status": outcome.result.status_code,
        "ticket": state.ticket,
        "authorization_code": state.authorization_code,
        "access_token": state.access_token,
    }, success=outcome.ok)

    return {
        "ok": outcome.ok,
        "action": action,
        "output": format_output(outcome.lines),
        "next": next_action(action) if outcome.ok else None,
        "state": _state_summary(state),
        "upstream_status": outcome.result.status_code,
    }
