"""
Forwarding of tutorial requests to the Authlete API.

Every relay endpoint in the tutorials is the same operation: take a JSON body,
reshape it into what one Authlete endpoint expects, POST it with the service
access token, and hand back whatever Authlete answered. This module holds that
operation once, parameterized by a RelayEndpoint description, plus the router
factory that exposes it over HTTP.
"""

import json
from typing import Any, Callable, Dict, Optional, Type
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import Credentials, Settings, get_settings
from .logging_utils import FlowLogger
from .relay_models import (
    AuthorizationRelayRequest,
    ConsentRelayRequest,
    IntrospectionRelayRequest,
    PushedAuthRelayRequest,
    RelayErrorResponse,
    TokenRelayRequest,
)

DEFAULT_SUBJECT = "user-123"


class RelayError(Exception):
    """The provider could not be reached, or its response could not be read."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} API call failed: {cause}")

    def to_response_body(self) -> Dict[str, Any]:
        return RelayErrorResponse(error=str(self), details=repr(self.cause)).model_dump()


class RelayResult:
    """Provider status code and body (parsed JSON, or raw text when not JSON)."""

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body

    @property
    def is_json(self) -> bool:
        return not isinstance(self.body, str)

    def field(self, name: str, default: Any = None) -> Any:
        """Top-level field of a JSON object body; default for anything else."""
        if isinstance(self.body, dict):
            return self.body.get(name, default)
        return default


class RelayEndpoint:
    """
    One Authlete operation reachable through the relay.

    Args:
        name: Short identifier used in routing tables and logs
        title: Human-readable operation name used in error messages
        path: Provider path template; {service_id} is filled from settings
        request_model: Pydantic model listing the required input fields
        reshape: Builds the provider body from the validated input
        method: HTTP method used against the provider
    """

    def __init__(self,
                 name: str,
                 title: str,
                 path: str,
                 request_model: Type[BaseModel],
                 reshape: Callable[[Any, Credentials], Dict[str, Any]],
                 method: str = "POST"):
        self.name = name
        self.title = title
        self.path = path
        self.request_model = request_model
        self.reshape = reshape
        self.method = method

    def provider_path(self, credentials: Credentials) -> str:
        return self.path.format(service_id=credentials.service_id)


def _authorization_body(request: AuthorizationRelayRequest, credentials: Credentials) -> Dict[str, Any]:
    return {"parameters": request.parameters}


def _issue_body(request: ConsentRelayRequest, credentials: Credentials) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "ticket": request.ticket,
        "subject": request.subject or DEFAULT_SUBJECT,
    }
    if request.sub:
        body["sub"] = request.sub
    if request.claims is not None:
        # Authlete takes claims as a JSON string
        body["claims"] = request.claims if isinstance(request.claims, str) else json.dumps(request.claims)
    if request.authTime is not None:
        body["authTime"] = request.authTime
    return body


def _token_body(request: TokenRelayRequest, credentials: Credentials) -> Dict[str, Any]:
    return {
        "parameters": urlencode(request.token_parameters()),
        "clientId": request.client_id or credentials.client_id,
        "clientSecret": request.client_secret or credentials.client_secret,
    }


def _introspection_body(request: IntrospectionRelayRequest, credentials: Credentials) -> Dict[str, Any]:
    return request.model_dump(exclude_none=True)


def _pushed_authorization_body(request: PushedAuthRelayRequest, credentials: Credentials) -> Dict[str, Any]:
    return {
        "parameters": request.parameters,
        "clientId": request.clientId or credentials.client_id,
        "clientSecret": request.clientSecret or credentials.client_secret,
    }


RELAY_ENDPOINTS: Dict[str, RelayEndpoint] = {
    endpoint.name: endpoint
    for endpoint in [
        RelayEndpoint(
            "authorization", "Authorization",
            "/api/{service_id}/auth/authorization",
            AuthorizationRelayRequest, _authorization_body
        ),
        RelayEndpoint(
            "authorization_issue", "Authorization issue",
            "/api/{service_id}/auth/authorization/issue",
            ConsentRelayRequest, _issue_body
        ),
        RelayEndpoint(
            "token", "Token exchange",
            "/api/{service_id}/auth/token",
            TokenRelayRequest, _token_body
        ),
        RelayEndpoint(
            "introspection", "Introspection",
            "/api/{service_id}/auth/introspection",
            IntrospectionRelayRequest, _introspection_body
        ),
        RelayEndpoint(
            "pushed_authorization", "Pushed authorization request",
            "/api/{service_id}/pushed_auth_req",
            PushedAuthRelayRequest, _pushed_authorization_body
        ),
    ]
}


class AuthleteRelay:
    """
    Sends reshaped request bodies to Authlete and returns the raw answer.

    No retries and no interpretation of Authlete result codes: whatever the
    provider returns, including failures inside a 200 body, is handed back.
    """

    def __init__(self,
                 settings: Settings,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 component: str = "GUIDE"):
        self.settings = settings
        self.transport = transport
        self.logger = FlowLogger(component)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.authlete_base_url,
            headers={"Authorization": f"Bearer {self.settings.service_access_token}"},
            transport=self.transport
        )

    async def forward(self, endpoint: RelayEndpoint, request: BaseModel) -> RelayResult:
        """
        Forward a validated request to the endpoint's provider path.

        Raises:
            RelayError: the provider could not be reached
        """
        credentials = self.settings.credentials
        path = endpoint.provider_path(credentials)
        payload = endpoint.reshape(request, credentials)

        self.logger.log_relay_request(endpoint.name, path, payload)

        try:
            async with self._client() as client:
                response = await client.request(endpoint.method, path, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self.logger.log_error(
                "relay_transport_error",
                str(exc),
                {"operation": endpoint.name, "path": path}
            )
            raise RelayError(endpoint.title, exc) from exc

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        self.logger.log_relay_response(endpoint.name, response.status_code, body)
        return RelayResult(response.status_code, body)

    async def call(self, name: str, data: Dict[str, Any]) -> RelayResult:
        """Validate a plain dict against the named endpoint's model and forward it."""
        endpoint = RELAY_ENDPOINTS[name]
        return await self.forward(endpoint, endpoint.request_model(**data))


def get_relay(settings: Settings = Depends(get_settings)) -> AuthleteRelay:
    """FastAPI dependency providing the relay client."""
    return AuthleteRelay(settings)


def _make_relay_handler(endpoint: RelayEndpoint):
    async def relay_handler(body: endpoint.request_model, relay: AuthleteRelay = Depends(get_relay)):
        try:
            result = await relay.forward(endpoint, body)
        except RelayError as exc:
            return JSONResponse(status_code=500, content=exc.to_response_body())
        return JSONResponse(status_code=result.status_code, content=result.body)

    relay_handler.__name__ = f"relay_{endpoint.name}"
    relay_handler.__doc__ = f"Forward the body to Authlete's {endpoint.title} API and relay the answer."
    return relay_handler


def create_relay_router(routes: Dict[str, str], tags: Optional[list] = None) -> APIRouter:
    """
    Build a router exposing relay endpoints.

    Args:
        routes: Mapping of local path to RELAY_ENDPOINTS name
        tags: OpenAPI tags for the generated routes

    Returns:
        APIRouter: One POST route per entry
    """
    router = APIRouter(tags=tags or ["relay"])
    for path, name in routes.items():
        endpoint = RELAY_ENDPOINTS[name]
        router.add_api_route(
            path,
            _make_relay_handler(endpoint),
            methods=["POST"],
            summary=f"Relay to Authlete {endpoint.title} API"
        )
    return router
