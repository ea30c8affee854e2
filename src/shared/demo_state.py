"""
Demo state for the live OAuth walkthrough.

The demo runs four actions in a fixed order. Each one captures a single value
from Authlete's answer (ticket, authorization code, access token) that the
next action's request is built from. The state lives in the browser session,
never in a module-level variable.
"""

import json
import time
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlencode, urlparse

from pydantic import BaseModel

from .config import Credentials

DEMO_ORDER: List[str] = ["authorization", "consent", "token", "introspection"]

SESSION_KEY = "demo_state"

DEMO_SCOPE = "read"
DEMO_STATE_PARAM = "demo123"
DEMO_SUBJECT = "user-123"
DEMO_SUB = "user@example.com"
DEMO_CLAIMS = {"name": "Sara Wallet", "email": "sara@example.com"}


class DemoSequenceError(Exception):
    """A demo action was run before the action that provides its input."""


class DemoState(BaseModel):
    """Values captured so far in the demo, filled in order."""
    ticket: Optional[str] = None
    authorization_code: Optional[str] = None
    access_token: Optional[str] = None

    @classmethod
    def from_session(cls, session: Dict[str, Any], key: str = SESSION_KEY) -> "DemoState":
        return cls(**session.get(key, {}))

    def save(self, session: Dict[str, Any], key: str = SESSION_KEY):
        session[key] = self.model_dump()

    def record_ticket(self, ticket: str):
        """A new ticket starts a new flow, so later values are dropped."""
        self.ticket = ticket
        self.authorization_code = None
        self.access_token = None

    def record_authorization_code(self, code: str):
        if not self.ticket:
            raise DemoSequenceError("No ticket available. Please run the Authorization step first.")
        self.authorization_code = code
        self.access_token = None

    def record_access_token(self, token: str):
        if not self.authorization_code:
            raise DemoSequenceError("No authorization code available. Please run the Grant Consent step first.")
        self.access_token = token

    def completed_actions(self) -> List[str]:
        """Actions whose captured value is present."""
        captured = [self.ticket, self.authorization_code, self.access_token]
        return [action for action, value in zip(DEMO_ORDER, captured) if value]


def next_action(action: str) -> Optional[str]:
    """Action following the given one, or None after the last."""
    if action not in DEMO_ORDER or action == DEMO_ORDER[-1]:
        return None
    return DEMO_ORDER[DEMO_ORDER.index(action) + 1]


# Request builders

def build_authorization_body(credentials: Credentials, redirect_uri: str) -> Dict[str, Any]:
    parameters = urlencode({
        "response_type": "code",
        "client_id": credentials.client_id,
        "redirect_uri": redirect_uri,
        "scope": DEMO_SCOPE,
        "state": DEMO_STATE_PARAM,
    })
    return {"parameters": parameters}


def build_consent_body(state: DemoState, auth_time: Optional[int] = None) -> Dict[str, Any]:
    if not state.ticket:
        raise DemoSequenceError("No ticket available. Please run the Authorization step first.")
    return {
        "ticket": state.ticket,
        "subject": DEMO_SUBJECT,
        "sub": DEMO_SUB,
        "claims": dict(DEMO_CLAIMS),
        "authTime": auth_time if auth_time is not None else int(time.time()),
    }


def build_token_body(state: DemoState, credentials: Credentials, redirect_uri: str) -> Dict[str, Any]:
    if not state.authorization_code:
        raise DemoSequenceError("No authorization code available. Please run the Grant Consent step first.")
    return {
        "grant_type": "authorization_code",
        "code": state.authorization_code,
        "redirect_uri": redirect_uri,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }


def build_introspection_body(state: DemoState) -> Dict[str, Any]:
    if not state.access_token:
        raise DemoSequenceError("No access token available. Please run the Exchange Token step first.")
    return {"token": state.access_token}


# Response capture

def capture_authorization(state: DemoState, body: Any) -> bool:
    """Store the ticket of an INTERACTION response. Returns whether one was found."""
    if isinstance(body, dict) and body.get("action") == "INTERACTION" and body.get("ticket"):
        state.record_ticket(body["ticket"])
        return True
    return False


def extract_authorization_code(body: Dict[str, Any]) -> Optional[str]:
    """Code from the redirect URL in responseContent, else the authorizationCode field."""
    redirect_url = body.get("responseContent")
    if isinstance(redirect_url, str):
        query = urlparse(redirect_url).query
        codes = parse_qs(query).get("code")
        if codes:
            return codes[0]
    return body.get("authorizationCode")


def capture_consent(state: DemoState, body: Any) -> bool:
    """Store the code of a LOCATION response (or any body carrying a redirect URL)."""
    if not isinstance(body, dict):
        return False
    if body.get("action") != "LOCATION" and not isinstance(body.get("responseContent"), str):
        return False

    code = extract_authorization_code(body)
    if not code:
        return False
    state.record_authorization_code(code)
    return True


def parse_token_content(body: Dict[str, Any]) -> Dict[str, Any]:
    """The token endpoint response embedded as a JSON string in responseContent."""
    content = body.get("responseContent")
    if isinstance(content, str):
        try:
            parsed = json.loads(content)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def capture_token(state: DemoState, body: Any) -> bool:
    """Store the access token of an OK token response."""
    if not isinstance(body, dict) or body.get("action") != "OK":
        return False

    token = parse_token_content(body).get("access_token") or body.get("accessToken")
    if not token:
        return False
    state.record_access_token(token)
    return True


def introspection_active(body: Any) -> bool:
    """A token is active when Authlete reports it both existent and usable."""
    return isinstance(body, dict) and body.get("existent") is True and body.get("usable") is True
