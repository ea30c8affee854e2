"""
Environment configuration for the onboarding tutorials.

Values are read from the process environment (and a local .env file when one
exists). Missing values fall back to placeholder strings so the servers always
start; calls made with placeholders are simply rejected by Authlete.
"""

import os
import secrets
from functools import lru_cache
from typing import Dict, List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

PLACEHOLDER_SERVICE_ID = "YOUR_SERVICE_ID"
PLACEHOLDER_SERVICE_SECRET = "YOUR_SERVICE_SECRET"
PLACEHOLDER_CLIENT_ID = "YOUR_CLIENT_ID"
PLACEHOLDER_CLIENT_SECRET = "YOUR_CLIENT_SECRET"
PLACEHOLDER_ACCESS_TOKEN = "YOUR_SERVICE_ACCESS_TOKEN"


class Credentials(BaseModel):
    """Service and client credentials shown to the user and used by the demo."""
    service_id: str = Field(default=PLACEHOLDER_SERVICE_ID)
    service_secret: str = Field(default=PLACEHOLDER_SERVICE_SECRET)
    client_id: str = Field(default=PLACEHOLDER_CLIENT_ID)
    client_secret: str = Field(default=PLACEHOLDER_CLIENT_SECRET)

    def to_browser(self) -> Dict[str, str]:
        """Shape expected by the page scripts (window.__USER_CREDENTIALS__)."""
        return {
            "serviceId": self.service_id,
            "serviceSecret": self.service_secret,
            "clientId": self.client_id,
            "clientSecret": self.client_secret,
        }


class Settings(BaseModel):
    """Runtime settings for both tutorial servers."""
    authlete_base_url: str = "https://us.authlete.com"
    service_access_token: str = PLACEHOLDER_ACCESS_TOKEN
    credentials: Credentials = Field(default_factory=Credentials)
    port: int = 3004
    par_port: int = 3006
    redirect_uri: str = "http://localhost:3002/callback"
    session_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    simulated_delay_seconds: float = 1.0

    def placeholders_in_use(self) -> List[str]:
        """Names of the settings still holding placeholder values."""
        checks = {
            "AUTHLETE_SERVICE_ID": (self.credentials.service_id, PLACEHOLDER_SERVICE_ID),
            "AUTHLETE_SERVICE_SECRET": (self.credentials.service_secret, PLACEHOLDER_SERVICE_SECRET),
            "AUTHLETE_CLIENT_ID": (self.credentials.client_id, PLACEHOLDER_CLIENT_ID),
            "AUTHLETE_CLIENT_SECRET": (self.credentials.client_secret, PLACEHOLDER_CLIENT_SECRET),
            "AUTHLETE_AUTHLETE": (self.service_access_token, PLACEHOLDER_ACCESS_TOKEN),
        }
        return [name for name, (value, placeholder) in checks.items() if value == placeholder]


def load_settings() -> Settings:
    """Build settings from the environment."""
    credentials = Credentials(
        service_id=os.getenv("AUTHLETE_SERVICE_ID", PLACEHOLDER_SERVICE_ID),
        service_secret=os.getenv("AUTHLETE_SERVICE_SECRET", PLACEHOLDER_SERVICE_SECRET),
        client_id=os.getenv("AUTHLETE_CLIENT_ID", PLACEHOLDER_CLIENT_ID),
        client_secret=os.getenv("AUTHLETE_CLIENT_SECRET", PLACEHOLDER_CLIENT_SECRET),
    )

    return Settings(
        authlete_base_url=os.getenv("AUTHLETE_BASE_URL", "https://us.authlete.com"),
        service_access_token=os.getenv("AUTHLETE_AUTHLETE", PLACEHOLDER_ACCESS_TOKEN),
        credentials=credentials,
        port=int(os.getenv("PORT", "3004")),
        par_port=int(os.getenv("PAR_PORT", "3006")),
        redirect_uri=os.getenv("DEMO_REDIRECT_URI", "http://localhost:3002/callback"),
        session_secret=os.getenv("SESSION_SECRET", secrets.token_urlsafe(32)),
        simulated_delay_seconds=float(os.getenv("SIMULATED_DELAY_SECONDS", "1.0")),
    )


@lru_cache()
def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return load_settings()
