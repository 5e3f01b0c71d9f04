"""Tests for the copy workflow and the meeting-view controller.

WHY: The copy button must end every click with exactly one message and
must never paste the missing-data diagnostic. Navigation inside the web
app must add, keep or remove the button without leaving stale waits.

HOW: FakeClient replaces FirefliesClient, FakePage replaces the live
page. Async code runs under asyncio.run inside plain pytest tests.
"""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from fireflies_transcript.api.client import (
    FetchTimeoutError,
    FirefliesAPIError,
    FirefliesClient,
    FirefliesNetworkError,
    MeetingNotFoundError,
    ResponseParseError,
)
from fireflies_transcript.controller import (
    CopyOutcome,
    HostPage,
    ViewController,
    copy_transcript,
)
from fireflies_transcript.core.ir import MeetingRecord
from fireflies_transcript.delivery import DeliveryError
from fireflies_transcript.formatters.plain_text import MISSING_DATA_MESSAGE

from conftest import MEETING_URL, STANDUP_TEXT


class FakeClient:
    """Async-context-manager stand-in for FirefliesClient."""

    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.requested = None
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    async def fetch_meeting_note(self, meeting_note_id):
        self.requested = meeting_note_id
        if self.error is not None:
            raise self.error
        return self.record


class Recorder:
    """Collects delivered texts and notifications."""

    def __init__(self):
        self.delivered = []
        self.notifications = []

    def deliver(self, text):
        self.delivered.append(text)

    def notify(self, message, ok):
        self.notifications.append((message, ok))


def _copy(client, recorder, url=MEETING_URL, **kwargs):
    return asyncio.run(copy_transcript(
        url,
        client_factory=lambda: client,
        deliver=recorder.deliver,
        notify_user=recorder.notify,
        **kwargs,
    ))


# ---------------------------------------------------------------------------
# copy_transcript
# ---------------------------------------------------------------------------


class TestCopyTranscript:

    def test_success(self, standup_record):
        client = FakeClient(record=standup_record)
        recorder = Recorder()
        result = _copy(client, recorder)

        assert result.outcome is CopyOutcome.COPIED
        assert result.ok
        assert client.requested == "01HSTANDUP"
        assert client.closed
        assert recorder.delivered == [result.text]
        assert result.text.startswith(
            "Standup | 2024-01-01\nhttps://app.fireflies.ai/view/Standup::01HSTANDUP\n\nBo b@x.com"
        )
        assert recorder.notifications == [("Transcript copied to clipboard!", True)]

    def test_without_location(self, standup_record):
        recorder = Recorder()
        result = _copy(FakeClient(record=standup_record), recorder, include_location=False)
        assert recorder.delivered == [STANDUP_TEXT]
        assert result.text == STANDUP_TEXT

    def test_success_message_override(self, standup_record):
        recorder = Recorder()
        _copy(FakeClient(record=standup_record), recorder, success_message="Saved.")
        assert recorder.notifications == [("Saved.", True)]

    def test_missing_meeting_id(self):
        recorder = Recorder()

        def factory():
            raise AssertionError("client must not be created without a meeting id")

        result = asyncio.run(copy_transcript(
            "https://app.fireflies.ai/meetings",
            client_factory=factory,
            deliver=recorder.deliver,
            notify_user=recorder.notify,
        ))
        assert result.outcome is CopyOutcome.MISSING_ID
        assert recorder.delivered == []
        assert recorder.notifications == [("Error: Could not determine Meeting ID.", False)]

    def test_missing_auth(self):
        recorder = Recorder()

        def factory():
            raise ValueError("Fireflies auth tokens not configured.")

        result = asyncio.run(copy_transcript(
            MEETING_URL,
            client_factory=factory,
            deliver=recorder.deliver,
            notify_user=recorder.notify,
        ))
        assert result.outcome is CopyOutcome.MISSING_AUTH
        assert recorder.delivered == []
        assert len(recorder.notifications) == 1

    @pytest.mark.parametrize("error,outcome", [
        (FirefliesAPIError(500, "boom"), CopyOutcome.HTTP_ERROR),
        (FetchTimeoutError("slow"), CopyOutcome.TIMEOUT),
        (FirefliesNetworkError("down"), CopyOutcome.NETWORK_ERROR),
        (MeetingNotFoundError("01HSTANDUP"), CopyOutcome.NOT_FOUND),
        (ResponseParseError("garbage"), CopyOutcome.BAD_RESPONSE),
    ])
    def test_fetch_failures(self, error, outcome):
        recorder = Recorder()
        result = _copy(FakeClient(error=error), recorder)
        assert result.outcome is outcome
        assert result.text is None
        assert recorder.delivered == []
        assert recorder.notifications == [(result.message, False)]

    def test_http_error_message_has_status(self):
        recorder = Recorder()
        result = _copy(FakeClient(error=FirefliesAPIError(403, "denied")), recorder)
        assert "403" in result.message

    def test_missing_data_is_not_delivered(self):
        record = MeetingRecord(captions=None, speaker_meta={"1": "Bo"}, title="T")
        recorder = Recorder()
        result = _copy(FakeClient(record=record), recorder)
        assert result.outcome is CopyOutcome.FORMAT_ERROR
        assert recorder.delivered == []
        assert recorder.notifications == [(MISSING_DATA_MESSAGE, False)]

    def test_delivery_failure(self, standup_record):
        recorder = Recorder()

        def deliver(text):
            raise DeliveryError("no clipboard")

        result = asyncio.run(copy_transcript(
            MEETING_URL,
            client_factory=lambda: FakeClient(record=standup_record),
            deliver=deliver,
            notify_user=recorder.notify,
        ))
        assert result.outcome is CopyOutcome.DELIVERY_ERROR
        assert "no clipboard" in result.message
        assert recorder.notifications == [(result.message, False)]

    def test_wrongly_typed_note_is_one_bad_response(self):
        payload = {"data": {"meetingNote": {"captions": [], "speakerMeta": {}, "attendees": [None]}}}
        recorder = Recorder()

        def factory():
            return FirefliesClient(
                auth_token="a",
                refresh_token="r",
                transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
            )

        result = asyncio.run(copy_transcript(
            MEETING_URL,
            client_factory=factory,
            deliver=recorder.deliver,
            notify_user=recorder.notify,
        ))
        assert result.outcome is CopyOutcome.BAD_RESPONSE
        assert recorder.delivered == []
        assert recorder.notifications == [(result.message, False)]

    def test_deliver_for_uses_fetched_record(self, standup_record):
        recorder = Recorder()
        seen = []

        def deliver_for(record):
            seen.append(record.title)
            return lambda text: "/tmp/{}.txt".format(record.title)

        result = _copy(
            FakeClient(record=standup_record),
            recorder,
            deliver_for=deliver_for,
            success_message=lambda written: "Saved to {}".format(written),
        )
        assert seen == ["Standup"]
        assert recorder.delivered == []
        assert result.delivered_to == "/tmp/Standup.txt"
        assert recorder.notifications == [("Saved to /tmp/Standup.txt", True)]

# ---------------------------------------------------------------------------
# ViewController
# ---------------------------------------------------------------------------


class FakePage(HostPage):
    """A page whose anchor appears after ``anchor_after`` lookups."""

    def __init__(self, anchor_after=0):
        self.anchor_after = anchor_after
        self.find_calls = 0
        self.button = None
        self.inserted = 0
        self.removed = 0

    def find_anchor(self):
        self.find_calls += 1
        if self.find_calls > self.anchor_after:
            return "download-button-wrapper"
        return None

    def has_copy_button(self):
        return self.button is not None

    def insert_copy_button(self, anchor, on_click):
        self.button = on_click
        self.inserted += 1

    def remove_copy_button(self):
        if self.button is not None:
            self.removed += 1
        self.button = None


MEETING_A = "https://app.fireflies.ai/view/01HAAA"
MEETING_B = "https://app.fireflies.ai/view/Sync::01HBBB"
NOTEBOOK = "https://app.fireflies.ai/notebook"


def _controller(page, on_copy=None, wait_timeout_s=1.0):
    return ViewController(
        page,
        on_copy=on_copy or AsyncMock(),
        wait_timeout_s=wait_timeout_s,
        poll_interval_s=0.001,
    )


class TestViewController:

    def test_meeting_view_gets_button(self):
        page = FakePage(anchor_after=3)

        async def scenario():
            controller = _controller(page)
            assert controller.location_changed(MEETING_A)
            return await controller.pending_wait

        assert asyncio.run(scenario()) is True
        assert page.inserted == 1
        assert page.find_calls == 4

    def test_same_location_is_ignored(self):
        page = FakePage()

        async def scenario():
            controller = _controller(page)
            controller.location_changed(MEETING_A)
            await controller.pending_wait
            assert controller.location_changed(MEETING_A) is False

        asyncio.run(scenario())
        assert page.inserted == 1

    def test_reinitialize_is_idempotent(self):
        page = FakePage()

        async def scenario():
            controller = _controller(page)
            controller.location_changed(MEETING_A)
            await controller.pending_wait
            controller.reinitialize()
            controller.reinitialize()
            assert controller.pending_wait is None

        asyncio.run(scenario())
        assert page.inserted == 1

    def test_leaving_meeting_view_removes_button(self):
        page = FakePage()

        async def scenario():
            controller = _controller(page)
            controller.location_changed(MEETING_A)
            await controller.pending_wait
            controller.location_changed(NOTEBOOK)
            assert controller.pending_wait is None

        asyncio.run(scenario())
        assert page.button is None
        assert page.removed == 1

    def test_view_page_without_id_removes_button(self):
        page = FakePage()
        page.button = AsyncMock()

        async def scenario():
            controller = _controller(page)
            controller.location_changed("https://app.fireflies.ai/view/Sync::")

        asyncio.run(scenario())
        assert page.button is None

    def test_navigation_cancels_pending_wait(self):
        page = FakePage(anchor_after=10 ** 9)

        async def scenario():
            controller = _controller(page, wait_timeout_s=30.0)
            controller.location_changed(MEETING_A)
            first = controller.pending_wait
            await asyncio.sleep(0.01)
            controller.location_changed(MEETING_B)
            second = controller.pending_wait
            await asyncio.gather(first, return_exceptions=True)
            assert first.cancelled()
            assert second is not first
            assert not second.done()
            controller.close()
            await asyncio.gather(second, return_exceptions=True)
            assert second.cancelled()

        asyncio.run(scenario())
        assert page.inserted == 0

    def test_wait_times_out(self, caplog):
        page = FakePage(anchor_after=10 ** 9)

        async def scenario():
            controller = _controller(page, wait_timeout_s=0.02)
            controller.location_changed(MEETING_A)
            return await controller.pending_wait

        assert asyncio.run(scenario()) is False
        assert page.inserted == 0
        assert "anchor not found" in caplog.text

    def test_click_copies_current_location(self):
        page = FakePage()
        on_copy = AsyncMock(return_value="done")

        async def scenario():
            controller = _controller(page, on_copy=on_copy)
            controller.location_changed(MEETING_A)
            await controller.pending_wait
            return await page.button()

        assert asyncio.run(scenario()) == "done"
        on_copy.assert_awaited_once_with(MEETING_A)
