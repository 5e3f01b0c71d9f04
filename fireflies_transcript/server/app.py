"""FastAPI application exposing transcript formatting over HTTP.

WHY: Automations (n8n, Slack workflows, curl scripts) need the same
Fireflies transcript text the copy button produces, without a browser.
FastAPI gives request validation and OpenAPI docs for free.

HOW: Three endpoints. POST /transcripts/format formats a meetingNote
posted in the body. GET /meetings/{id}/transcript fetches the note with
the caller's Fireflies session tokens and formats it. GET /health is the
liveness probe. Transcripts are returned as text/plain.

RULES:
- Tokens are taken from the request (Authorization + X-Refresh-Token),
  never from server configuration
- Missing captions/speakerMeta → 422 with the diagnostic as detail
- Upstream failures map to 401/404/502/504, one status per error type
- Error responses use the ErrorResponse schema
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.responses import PlainTextResponse

from fireflies_transcript import __version__
from fireflies_transcript.api.client import (
    FetchTimeoutError,
    FirefliesAPIError,
    FirefliesClient,
    FirefliesNetworkError,
    MeetingNotFoundError,
    ResponseParseError,
)
from fireflies_transcript.core.ir import MeetingRecord
from fireflies_transcript.formatters.plain_text import PlainTextFormatter, is_missing_data
from fireflies_transcript.server.models import ErrorResponse, FormatRequest, HealthResponse

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fireflies Transcript API",
    description=(
        "Formats Fireflies.ai meeting transcripts as plain text: a header "
        "(title, date, meeting URL, attendees) followed by speaker-grouped "
        "dialogue with MM:SS timestamps."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

formatter = PlainTextFormatter()


def _render(record: MeetingRecord, source_location: Optional[str]) -> PlainTextResponse:
    """Format a record, turning the missing-data diagnostic into a 422."""
    output = formatter.format(record, source_location)
    if is_missing_data(output.content):
        raise HTTPException(status_code=422, detail=output.content)
    return PlainTextResponse(content=output.content, media_type=output.media_type)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer":
        return token.strip() or None
    return authorization.strip() or None


# ---------------------------------------------------------------------------
# Endpoints: Transcripts
# ---------------------------------------------------------------------------


@app.post(
    "/transcripts/format",
    response_class=PlainTextResponse,
    tags=["transcripts"],
    summary="Format a meeting note",
    description=(
        "Formats a Fireflies meetingNote object supplied in the request body. "
        "No call to Fireflies is made."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "Captions or speakerMeta missing"},
    },
)
async def format_meeting_note(request: FormatRequest) -> PlainTextResponse:
    try:
        record = MeetingRecord.from_dict(request.meeting_note)
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=422,
            detail="Malformed meetingNote: {}".format(exc),
        ) from exc
    return _render(record, request.source_location)


@app.get(
    "/meetings/{meeting_note_id}/transcript",
    response_class=PlainTextResponse,
    tags=["transcripts"],
    summary="Fetch and format a meeting transcript",
    description=(
        "Fetches the meeting note from Fireflies with the caller's session "
        "tokens and returns the formatted transcript."
    ),
    responses={
        401: {"model": ErrorResponse, "description": "Session tokens missing"},
        404: {"model": ErrorResponse, "description": "Meeting note not found"},
        422: {"model": ErrorResponse, "description": "Captions or speakerMeta missing"},
        502: {"model": ErrorResponse, "description": "Fireflies request failed"},
        504: {"model": ErrorResponse, "description": "Fireflies request timed out"},
    },
)
async def get_meeting_transcript(
    meeting_note_id: str,
    source_location: Optional[str] = Query(
        default=None,
        description="Meeting page URL to print in the header.",
    ),
    authorization: Optional[str] = Header(default=None),
    x_refresh_token: Optional[str] = Header(default=None),
) -> PlainTextResponse:
    auth_token = _bearer_token(authorization)
    if not auth_token or not x_refresh_token:
        raise HTTPException(
            status_code=401,
            detail="Authorization and X-Refresh-Token headers are required.",
        )

    client = FirefliesClient(auth_token=auth_token, refresh_token=x_refresh_token)
    try:
        async with client:
            record = await client.fetch_meeting_note(meeting_note_id)
    except MeetingNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except FetchTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except FirefliesAPIError as exc:
        if exc.status_code in (401, 403):
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except (FirefliesNetworkError, ResponseParseError) as exc:
        logger.exception("Fetching meeting note %s failed", meeting_note_id)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return _render(record, source_location)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the fireflies-transcript-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
