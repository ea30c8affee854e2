"""
Onboarding Guide Routes

Relay endpoints used by the "Run Sample" buttons and the simulated service
and client creation calls of steps 2 and 3.
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..shared.config import Settings, get_settings
from ..shared.logging_utils import FlowLogger
from ..shared.relay import create_relay_router

logger = FlowLogger("GUIDE")

# Local path -> relay endpoint name
RELAY_ROUTES = {
    "/oauth/authorize": "authorization",
    "/oauth/consent": "authorization_issue",
    "/oauth/token": "token",
    "/oauth/introspect": "introspection",
    "/par/pushed-auth-req": "pushed_authorization",
    "/par/authorization": "authorization_issue",
    "/par/token": "token",
}

relay_router = create_relay_router(RELAY_ROUTES, tags=["relay"])
router = APIRouter(tags=["onboarding"])


class ServiceCreationRequest(BaseModel):
    """Form values of the Create a Service step. Only echoed to the log."""
    serviceName: Optional[str] = Field(default="Sample Service")
    serviceDescription: Optional[str] = None
    grantTypes: Optional[List[str]] = None
    accessTokenDuration: Optional[int] = None


class ClientCreationRequest(BaseModel):
    """Form values of the Create a Client step. Only echoed to the log."""
    clientName: Optional[str] = Field(default="Sample Client")
    clientDescription: Optional[str] = None
    clientType: Optional[str] = None
    redirectUris: Optional[List[str]] = None
    scopes: Optional[List[str]] = None


@router.post("/api/create-service")
async def create_service(form: Optional[ServiceCreationRequest] = None,
                         settings: Settings = Depends(get_settings)):
    """
    Simulate service creation.

    Nothing is created at Authlete: after a short delay the configured
    service credentials are returned so the guide can continue.
    """
    form = form or ServiceCreationRequest()
    logger.log_flow_message(
        "BROWSER", "GUIDE",
        "Service Creation (simulated)",
        {"service_name": form.serviceName, "grant_types": form.grantTypes}
    )

    await asyncio.sleep(settings.simulated_delay_seconds)

    return {
        "success": True,
        "serviceId": settings.credentials.service_id,
        "serviceSecret": settings.credentials.service_secret,
    }


@router.post("/api/create-client")
async def create_client(form: Optional[ClientCreationRequest] = None,
                        settings: Settings = Depends(get_settings)):
    """Simulate client creation and return the configured client credentials."""
    form = form or ClientCreationRequest()
    logger.log_flow_message(
        "BROWSER", "GUIDE",
        "Client Creation (simulated)",
        {"client_name": form.clientName, "client_type": form.clientType}
    )

    await asyncio.sleep(settings.simulated_delay_seconds)

    return {
        "success": True,
        "clientId": settings.credentials.client_id,
        "clientSecret": settings.credentials.client_secret,
    }


@router.post("/debug/button-click")
async def debug_button_click():
    """Print a line in the server terminal when the Create Service button is pressed."""
    logger.log_info("🛎️ Create Service button clicked (ping received)")
    return {"ok": True, "at": datetime.now(timezone.utc).isoformat()}
