"""Shared test fixtures for the fireflies_transcript test suite.

WHY: Formatter, client, controller, CLI and server tests all need the
same small meeting note. Centralizing it here keeps the expected text in
one place.

HOW: STANDUP_NOTE is a raw meetingNote dict shaped like the GraphQL
response; fixtures return fresh copies, the parsed MeetingRecord, and
the full response envelope.

RULES:
- STANDUP_TEXT is the exact document STANDUP_NOTE must produce
- Fixtures return copies so tests may mutate them freely
"""

import copy
from typing import Any, Dict

import pytest

from fireflies_transcript.core.ir import MeetingRecord

STANDUP_NOTE: Dict[str, Any] = {
    "_id": "01HSTANDUP",
    "title": "Standup",
    "date": "2024-01-01",
    "attendees": [
        {"name": "Bo", "email": "b@x.com", "displayName": None, "__typename": "Attendee"},
    ],
    "speakerMeta": {"1": "Bo", "2": "Amy"},
    "captions": [
        {"index": 0, "speaker_id": 0, "sentence": "Hi", "time": 0, "endTime": 1.5, "__typename": "Caption"},
        {"index": 1, "speaker_id": 0, "sentence": "team", "time": 2, "endTime": 2.4, "__typename": "Caption"},
        {"index": 2, "speaker_id": 1, "sentence": "Hey", "time": 5, "endTime": 5.6, "__typename": "Caption"},
    ],
    "__typename": "MeetingNote",
}

STANDUP_TEXT = (
    "Standup | 2024-01-01\n"
    "\n"
    "Bo b@x.com\n"
    "\n"
    "00:00\n"
    "Bo\n"
    "Hi team\n"
    "\n"
    "00:05\n"
    "Amy\n"
    "Hey"
)

MEETING_URL = "https://app.fireflies.ai/view/Standup::01HSTANDUP?ref=recent"


@pytest.fixture
def standup_note():
    """Raw meetingNote dict for the two-speaker standup."""
    return copy.deepcopy(STANDUP_NOTE)


@pytest.fixture
def standup_record(standup_note):
    """The standup note parsed into the IR."""
    return MeetingRecord.from_dict(standup_note)


@pytest.fixture
def graphql_response(standup_note):
    """Full GraphQL response envelope around the standup note."""
    return {"data": {"meetingNote": standup_note}}


@pytest.fixture
def auth_env(monkeypatch):
    """Fireflies session tokens present in the environment."""
    monkeypatch.setenv("FIREFLIES_AUTHORIZATION", "access-token")
    monkeypatch.setenv("FIREFLIES_REFRESH_TOKEN", "refresh-token")
