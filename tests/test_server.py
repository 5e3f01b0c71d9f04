"""Tests for the FastAPI transcript API.

HOW: FastAPI TestClient in-process. FirefliesClient is replaced with a
fake so the fetch endpoint never reaches the network.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from fireflies_transcript.api.client import (
    FetchTimeoutError,
    FirefliesAPIError,
    FirefliesNetworkError,
    MeetingNotFoundError,
    ResponseParseError,
)
from fireflies_transcript.core.ir import MeetingRecord
from fireflies_transcript.formatters.plain_text import MISSING_DATA_MESSAGE
from fireflies_transcript.server.app import app

from conftest import STANDUP_TEXT

AUTH_HEADERS = {"Authorization": "Bearer access-token", "X-Refresh-Token": "refresh-token"}


class FakeClient:

    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def fetch_meeting_note(self, meeting_note_id):
        if self.error is not None:
            raise self.error
        return self.record


@pytest.fixture
def client():
    return TestClient(app)


def _patch_client(fake):
    return patch("fireflies_transcript.server.app.FirefliesClient", new=MagicMock(return_value=fake))


class TestFormatEndpoint:

    def test_formats_note(self, client, standup_note):
        resp = client.post("/transcripts/format", json={"meeting_note": standup_note})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == STANDUP_TEXT

    def test_source_location(self, client, standup_note):
        resp = client.post(
            "/transcripts/format",
            json={"meeting_note": standup_note, "source_location": "https://app.fireflies.ai/view/x?y=1"},
        )
        assert resp.text.startswith("Standup | 2024-01-01\nhttps://app.fireflies.ai/view/x\n\n")

    def test_missing_data(self, client):
        resp = client.post("/transcripts/format", json={"meeting_note": {"title": "T"}})
        assert resp.status_code == 422
        assert resp.json()["detail"] == MISSING_DATA_MESSAGE

    def test_malformed_caption(self, client):
        note = {"captions": [{"sentence": "x"}], "speakerMeta": {}}
        resp = client.post("/transcripts/format", json={"meeting_note": note})
        assert resp.status_code == 422
        assert "Malformed meetingNote" in resp.json()["detail"]

    @pytest.mark.parametrize("note", [
        {"captions": [], "speakerMeta": {}, "attendees": [None]},
        {"captions": [], "speakerMeta": ["Bo"]},
    ])
    def test_wrongly_typed_fields(self, client, note):
        resp = client.post("/transcripts/format", json={"meeting_note": note})
        assert resp.status_code == 422
        assert "Malformed meetingNote" in resp.json()["detail"]

    def test_body_required(self, client):
        resp = client.post("/transcripts/format", json={})
        assert resp.status_code == 422


class TestMeetingTranscriptEndpoint:

    def test_fetch_and_format(self, client, standup_note):
        fake = FakeClient(record=MeetingRecord.from_dict(standup_note))
        with _patch_client(fake) as factory:
            resp = client.get("/meetings/01HSTANDUP/transcript", headers=AUTH_HEADERS)
        assert resp.status_code == 200
        assert resp.text == STANDUP_TEXT
        factory.assert_called_once_with(auth_token="access-token", refresh_token="refresh-token")

    def test_missing_tokens(self, client):
        resp = client.get("/meetings/01HSTANDUP/transcript", headers={"Authorization": "Bearer a"})
        assert resp.status_code == 401

    @pytest.mark.parametrize("error,status", [
        (MeetingNotFoundError("01HSTANDUP"), 404),
        (FetchTimeoutError("slow"), 504),
        (FirefliesAPIError(500, "boom"), 502),
        (FirefliesAPIError(401, "expired"), 401),
        (FirefliesNetworkError("down"), 502),
        (ResponseParseError("garbage"), 502),
    ])
    def test_upstream_errors(self, client, error, status):
        with _patch_client(FakeClient(error=error)):
            resp = client.get("/meetings/01HSTANDUP/transcript", headers=AUTH_HEADERS)
        assert resp.status_code == status
        assert resp.json()["detail"]

    def test_missing_data(self, client):
        record = MeetingRecord(captions=None, speaker_meta=None)
        with _patch_client(FakeClient(record=record)):
            resp = client.get("/meetings/01HSTANDUP/transcript", headers=AUTH_HEADERS)
        assert resp.status_code == 422


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0"}
