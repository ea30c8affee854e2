"""
Session-scoped state of the PAR walkthrough.

Extends the live demo state with the tutorial position and the request URI
returned by the pushed authorization request.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

from pydantic import Field

from ..shared.config import Credentials
from ..shared.demo_state import DemoSequenceError, DemoState

SESSION_KEY = "par_tutorial_state"

PAR_STEP_COUNT = 4
PAR_SCOPE = "openid"
PAR_STATE_PARAM = "abc123"
PAR_NONCE = "xyz789"
PAR_SUBJECT = "user123"

# The only Authlete token result code treated as success
TOKEN_SUCCESS_CODE = "A050001"


class ParTutorialState(DemoState):
    """Tutorial position plus every value captured by the executed steps."""
    current_step: int = Field(default=1, ge=1, le=PAR_STEP_COUNT)
    request_uri: Optional[str] = None

    @classmethod
    def from_session(cls, session: Dict[str, Any], key: str = SESSION_KEY) -> "ParTutorialState":
        return cls(**session.get(key, {}))

    def save(self, session: Dict[str, Any], key: str = SESSION_KEY):
        session[key] = self.model_dump()

    def record_request_uri(self, request_uri: str):
        """A new pushed request starts the walkthrough over."""
        self.request_uri = request_uri
        self.ticket = None
        self.authorization_code = None
        self.access_token = None

    def record_ticket(self, ticket: str):
        if not self.request_uri:
            raise DemoSequenceError("No request URI available. Please complete Step 1 first.")
        super().record_ticket(ticket)


def _authorization_parameters(credentials: Credentials, redirect_uri: str) -> Dict[str, str]:
    return {
        "response_type": "code",
        "client_id": credentials.client_id,
        "redirect_uri": redirect_uri,
        "state": PAR_STATE_PARAM,
        "scope": PAR_SCOPE,
        "nonce": PAR_NONCE,
    }


def build_push_body(credentials: Credentials, redirect_uri: str) -> Dict[str, Any]:
    return {
        "parameters": urlencode(_authorization_parameters(credentials, redirect_uri)),
        "clientId": credentials.client_id,
        "clientSecret": credentials.client_secret,
    }


def build_par_authorization_body(state: ParTutorialState,
                                 credentials: Credentials,
                                 redirect_uri: str) -> Dict[str, Any]:
    if not state.request_uri:
        raise DemoSequenceError("No request URI available. Please complete Step 1 first.")
    parameters = {"request_uri": state.request_uri}
    parameters.update(_authorization_parameters(credentials, redirect_uri))
    return {"parameters": urlencode(parameters)}


def build_par_issue_body(state: ParTutorialState) -> Dict[str, Any]:
    if not state.ticket:
        raise DemoSequenceError("No ticket available. Please complete Step 2 first.")
    return {"ticket": state.ticket, "subject": PAR_SUBJECT}


def build_par_token_body(state: ParTutorialState, credentials: Credentials, redirect_uri: str) -> Dict[str, Any]:
    if not state.authorization_code:
        raise DemoSequenceError("No authorization code available. Please complete Step 3 first.")
    return {
        "grant_type": "authorization_code",
        "code": state.authorization_code,
        "redirect_uri": redirect_uri,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }
