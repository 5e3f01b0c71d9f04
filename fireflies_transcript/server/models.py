"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation and
automatic OpenAPI documentation.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- meeting_note is passed through as the raw Fireflies meetingNote object;
  parsing into the IR happens in the endpoint
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class FormatRequest(BaseModel):
    """A meeting note to format without contacting Fireflies."""

    meeting_note: Dict[str, Any] = Field(
        description="The Fireflies meetingNote object (captions, speakerMeta, "
                    "attendees, title, date) as returned by the GraphQL API.",
    )
    source_location: Optional[str] = Field(
        default=None,
        description="Meeting page URL to print in the header (query string is dropped).",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "meeting_note": {
                    "title": "Standup",
                    "date": "2024-01-01",
                    "attendees": [{"name": "Bo", "email": "b@x.com"}],
                    "speakerMeta": {"1": "Bo", "2": "Amy"},
                    "captions": [
                        {"speaker_id": 0, "sentence": "Hi", "time": 0},
                        {"speaker_id": 0, "sentence": "team", "time": 2},
                        {"speaker_id": 1, "sentence": "Hey", "time": 5},
                    ],
                },
                "source_location": None,
            }
        ]
    }}


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
