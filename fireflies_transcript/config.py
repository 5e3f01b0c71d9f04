"""Configuration constants, API endpoints, and .env loading.

WHY: Centralizes the Fireflies endpoints, timeouts and credential lookup
so the client, CLI and server read them from one place and tests can
override them through the environment.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values. load_auth_tokens() gives a clear error when the
session tokens are missing.

RULES:
- Both the access token and the refresh token are required for API calls
- Tokens are read from .env / environment, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Fireflies endpoints
# ---------------------------------------------------------------------------

FIREFLIES_APP_URL = os.getenv("FIREFLIES_APP_URL", "https://app.fireflies.ai").rstrip("/")
FIREFLIES_GRAPHQL_URL = os.getenv(
    "FIREFLIES_GRAPHQL_URL", "{}/api/v4/graphql".format(FIREFLIES_APP_URL)
)
FIREFLIES_REQUEST_TIMEOUT_S = float(os.getenv("FIREFLIES_REQUEST_TIMEOUT_S", "30"))

VIEW_PATH_PREFIX = "/view/"
MEETING_VIEW_URL_PREFIX = FIREFLIES_APP_URL + VIEW_PATH_PREFIX
"""Meeting pages live under this prefix; other pages get no copy button."""

# ---------------------------------------------------------------------------
# Copy button lookup
# ---------------------------------------------------------------------------

ANCHOR_WAIT_TIMEOUT_S = float(os.getenv("ANCHOR_WAIT_TIMEOUT_S", "10"))
ANCHOR_POLL_INTERVAL_S = float(os.getenv("ANCHOR_POLL_INTERVAL_S", "0.1"))


@dataclass(frozen=True)
class AuthTokens:
    """The Fireflies web session credentials."""

    auth_token: str
    refresh_token: str


def load_auth_tokens() -> AuthTokens:
    """Load the Fireflies session tokens from the environment.

    WHY: The GraphQL endpoint authenticates with the browser session's
    AUTHORIZATION and REFRESH_TOKEN values. Reading them from the
    environment (via .env) keeps them out of source code.

    RULES:
    - Raises ValueError if either token is missing or empty
    - Never returns a default/placeholder value
    """
    auth_token = os.getenv("FIREFLIES_AUTHORIZATION", "").strip()
    refresh_token = os.getenv("FIREFLIES_REFRESH_TOKEN", "").strip()
    if not auth_token or not refresh_token:
        raise ValueError(
            "Fireflies auth tokens not configured. Add FIREFLIES_AUTHORIZATION "
            "and FIREFLIES_REFRESH_TOKEN (copied from the logged-in browser "
            "session's localStorage) to the .env file."
        )
    return AuthTokens(auth_token=auth_token, refresh_token=refresh_token)
