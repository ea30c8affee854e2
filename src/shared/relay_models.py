"""
Pydantic models for the bodies accepted by the relay endpoints.

The models only check that the fields each Authlete operation needs are
present. Values are forwarded as given; all protocol validation happens at
Authlete.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AuthorizationRelayRequest(BaseModel):
    """Body for /oauth/authorize: the raw authorization request query string."""
    parameters: str = Field(..., min_length=1, description="URL-encoded authorization request parameters")


class ConsentRelayRequest(BaseModel):
    """
    Body for /oauth/consent and /par/authorization.

    Issues an authorization code for a ticket once the user has consented.
    """
    ticket: str = Field(..., min_length=1, description="Ticket from the authorization response")
    subject: Optional[str] = Field(default=None, description="Resource owner identifier")
    sub: Optional[str] = Field(default=None, description="Value of the 'sub' claim")
    claims: Optional[Union[Dict[str, Any], str]] = Field(
        default=None,
        description="Claims to embed in the ID token (object or JSON string)"
    )
    authTime: Optional[int] = Field(default=None, description="Authentication time (seconds since epoch)")


class TokenRelayRequest(BaseModel):
    """
    Body for /oauth/token and /par/token.

    Every field other than the client credentials is re-encoded into the
    'parameters' form string sent to Authlete, so unknown fields are kept.
    """
    model_config = ConfigDict(extra="allow")

    grant_type: str = Field(..., min_length=1, description="OAuth grant type")
    client_id: Optional[str] = Field(default=None, description="Client identifier")
    client_secret: Optional[str] = Field(default=None, description="Client secret")

    def token_parameters(self) -> Dict[str, Any]:
        """All fields except the client credentials, in submission order."""
        return {
            key: value
            for key, value in self.model_dump(exclude_none=True).items()
            if key not in ("client_id", "client_secret")
        }


class IntrospectionRelayRequest(BaseModel):
    """Body for /oauth/introspect."""
    token: str = Field(..., min_length=1, description="Access token to introspect")
    scopes: Optional[List[str]] = Field(default=None, description="Scopes the token must cover")
    subject: Optional[str] = Field(default=None, description="Subject the token must belong to")


class PushedAuthRelayRequest(BaseModel):
    """Body for /par/pushed-auth-req. Client credentials default to the configured client."""
    parameters: str = Field(..., min_length=1, description="URL-encoded authorization request parameters")
    clientId: Optional[str] = Field(default=None, description="Client identifier")
    clientSecret: Optional[str] = Field(default=None, description="Client secret")


class RelayErrorResponse(BaseModel):
    """Envelope returned when the provider could not be reached or read."""
    error: str = Field(..., description="Operation and failure message")
    details: Optional[str] = Field(default=None, description="Underlying exception text")
