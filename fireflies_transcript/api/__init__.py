"""Fireflies API client package: async access to the web GraphQL API.

WHY: The copier needs the meeting note behind a Fireflies page. This
package keeps all Fireflies communication behind one async client.

RULES:
- All HTTP calls go through FirefliesClient (no direct httpx usage elsewhere)
- Authentication uses the browser session tokens from config
"""

from fireflies_transcript.api.client import (
    FetchTimeoutError,
    FirefliesAPIError,
    FirefliesClient,
    FirefliesError,
    FirefliesNetworkError,
    MeetingNotFoundError,
    ResponseParseError,
)

__all__ = [
    "FetchTimeoutError",
    "FirefliesAPIError",
    "FirefliesClient",
    "FirefliesError",
    "FirefliesNetworkError",
    "MeetingNotFoundError",
    "ResponseParseError",
]
