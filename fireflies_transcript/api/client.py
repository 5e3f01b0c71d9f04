"""Async HTTP client for the Fireflies.ai web GraphQL API.

WHY: The meeting note (captions, speakerMeta, attendees, title, date)
is only available through the GraphQL endpoint the Fireflies web app
uses. This module hides the request shape, session headers and failure
modes behind one client method so callers (CLI, controller, server,
tests) never touch HTTP details.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. FirefliesClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. fetch_meeting_note() posts the
``fetchNotepadMeeting`` operation and parses ``data.meetingNote`` into a
MeetingRecord.

RULES:
- Always use the async context manager (async with FirefliesClient(...) as client:)
- Auth is the web session: Bearer access token plus X-Refresh-Token
- Each fetch ends in exactly one outcome: a MeetingRecord or one
  FirefliesError subclass (HTTP error, network error, timeout, bad
  response, meeting not found)
- The request timeout defaults to FIREFLIES_REQUEST_TIMEOUT_S
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from fireflies_transcript.config import (
    FIREFLIES_GRAPHQL_URL,
    FIREFLIES_REQUEST_TIMEOUT_S,
    load_auth_tokens,
)
from fireflies_transcript.core.ir import MeetingRecord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# GraphQL operation
# ---------------------------------------------------------------------------

OPERATION_NAME = "fetchNotepadMeeting"

MEETING_NOTE_QUERY = """\
query fetchNotepadMeeting($meetingNoteId: String!) {
  meetingNote(_id: $meetingNoteId) {
    _id
    captions {
      index
      sentence
      speaker_id
      time
      endTime
      __typename
    }
    attendees {
      email
      name
      displayName
      __typename
    }
    title
    date
    speakerMeta
    __typename
  }
}"""


class FirefliesError(Exception):
    """Base class for every failure of a meeting note fetch."""


class FirefliesAPIError(FirefliesError):
    """Raised when the GraphQL endpoint answers with a non-2xx status.

    RULES:
    - Always include status_code and message
    - message is the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Fireflies API error {status_code}: {message}")


class FirefliesNetworkError(FirefliesError):
    """Raised when the request could not be completed (DNS, TLS, reset...)."""


class FetchTimeoutError(FirefliesError):
    """Raised when the request exceeds the configured timeout."""


class ResponseParseError(FirefliesError):
    """Raised when a 2xx response body is not JSON or the meetingNote is malformed."""


class MeetingNotFoundError(FirefliesError):
    """Raised when the response has no ``data.meetingNote`` object.

    GraphQL reports most failures (bad id, expired session) with a 200
    status and an ``errors`` array, so this is the usual outcome for a
    wrong meeting id.
    """

    def __init__(self, meeting_note_id: str, errors: Optional[list] = None) -> None:
        self.meeting_note_id = meeting_note_id
        self.errors = errors or []
        detail = "; ".join(str(e.get("message", e)) for e in self.errors if isinstance(e, dict))
        message = f"meetingNote {meeting_note_id} not found in GraphQL response"
        if detail:
            message += f": {detail}"
        super().__init__(message)


def build_meeting_note_request(meeting_note_id: str) -> Dict[str, Any]:
    """The GraphQL request body for one meeting note."""
    return {
        "operationName": OPERATION_NAME,
        "variables": {"meetingNoteId": meeting_note_id},
        "query": MEETING_NOTE_QUERY,
    }


class FirefliesClient:
    """Async client for the Fireflies meeting note query.

    WHY: Gives the copy workflow a typed, single-call interface to fetch
    a meeting note, with every transport failure mapped to a distinct
    exception the caller can turn into one user-facing message.

    HOW: Wraps httpx.AsyncClient with the session headers. Use as an
    async context manager to ensure the connection pool is closed.

    RULES:
    - Use as: async with FirefliesClient() as client: ...
    - auth_token / refresh_token default to load_auth_tokens() from .env
    - graphql_url defaults to FIREFLIES_GRAPHQL_URL from config
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        auth_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        graphql_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not auth_token or not refresh_token:
            tokens = load_auth_tokens()
            auth_token = auth_token or tokens.auth_token
            refresh_token = refresh_token or tokens.refresh_token
        self._auth_token = auth_token
        self._refresh_token = refresh_token
        self._graphql_url = graphql_url or FIREFLIES_GRAPHQL_URL
        self._timeout_s = timeout_s if timeout_s is not None else FIREFLIES_REQUEST_TIMEOUT_S
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> FirefliesClient:
        self._client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "Accept": "*/*",
                "Authorization": f"Bearer {self._auth_token}",
                "X-Refresh-Token": self._refresh_token,
            },
            timeout=httpx.Timeout(self._timeout_s),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "FirefliesClient must be used as an async context manager: "
                "async with FirefliesClient() as client: ..."
            )
        return self._client

    async def fetch_meeting_note(self, meeting_note_id: str) -> MeetingRecord:
        """Fetch one meeting note and parse it into a MeetingRecord.

        RULES:
        - meeting_note_id must be non-empty (ValueError before any request)
        - Non-2xx → FirefliesAPIError
        - Timeout → FetchTimeoutError; other transport errors → FirefliesNetworkError
        - Body not JSON → ResponseParseError
        - No data.meetingNote → MeetingNotFoundError

        Args:
            meeting_note_id: The id from extract_meeting_note_id().

        Returns:
            The parsed MeetingRecord.
        """
        if not meeting_note_id:
            raise ValueError("meeting_note_id is required")

        client = self._ensure_client()
        logger.info("Fetching transcript for meeting note %s", meeting_note_id)

        try:
            resp = await client.post(
                self._graphql_url,
                json=build_meeting_note_request(meeting_note_id),
            )
        except httpx.TimeoutException as exc:
            logger.error("GraphQL request timed out for meeting note %s", meeting_note_id)
            raise FetchTimeoutError(
                f"Request for meeting note {meeting_note_id} timed out "
                f"after {self._timeout_s:.0f}s"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("GraphQL request error: %s", exc)
            raise FirefliesNetworkError(f"Network error while fetching transcript: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.error("GraphQL request failed. Status: %s", resp.status_code)
            raise FirefliesAPIError(resp.status_code, resp.text)

        logger.debug("GraphQL response received: %s", resp.status_code)
        try:
            payload = resp.json()
        except ValueError as exc:
            logger.error("Error parsing JSON response: %s", resp.text[:500])
            raise ResponseParseError("Could not parse transcript data") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        meeting_note = data.get("meetingNote") if isinstance(data, dict) else None
        if not isinstance(meeting_note, dict):
            errors = payload.get("errors") if isinstance(payload, dict) else None
            logger.error("meetingNote data not found in GraphQL response")
            raise MeetingNotFoundError(meeting_note_id, errors)

        try:
            return MeetingRecord.from_dict(meeting_note)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed meetingNote in GraphQL response: %s", exc)
            raise ResponseParseError(f"Malformed meetingNote data: {exc}") from exc
