"""Copy workflow and meeting-view controller.

WHY: The copy button lives in a single-page web app. Navigating between
meetings does not reload the page, so the button has to be added when a
meeting view appears, removed when the user leaves it, and a pending
lookup for the button's anchor must never outlive the page it was
started for. Clicking the button runs the whole fetch → format → copy
workflow and must end in exactly one message to the user.

HOW: Two pieces:
  copy_transcript: async workflow: URL → meeting id → fetch → format →
                    deliver → notify; returns a CopyResult
  ViewController:  owns the last seen location and the pending anchor
                    wait as instance state; location_changed() is the
                    single entry point the host glue calls
The host page itself is abstracted behind HostPage so the controller
can be driven by a browser bridge or by a fake in tests.

RULES:
- Every copy request produces one CopyResult and one notification
- The missing-data diagnostic is reported as a failure and not delivered
- reinitialize() always cancels the previous pending wait first
- Non-meeting pages never keep a copy button
- Re-running reinitialize() for the same page is safe (no duplicate button)
"""

from __future__ import annotations

import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from fireflies_transcript.api.client import (
    FetchTimeoutError,
    FirefliesAPIError,
    FirefliesClient,
    FirefliesNetworkError,
    MeetingNotFoundError,
    ResponseParseError,
)
from fireflies_transcript.config import (
    ANCHOR_POLL_INTERVAL_S,
    ANCHOR_WAIT_TIMEOUT_S,
    MEETING_VIEW_URL_PREFIX,
)
from fireflies_transcript.core.ir import MeetingRecord
from fireflies_transcript.core.meeting_url import extract_meeting_note_id
from fireflies_transcript.delivery import DeliveryError, copy_to_clipboard, notify
from fireflies_transcript.formatters.plain_text import format_transcript, is_missing_data

logger = logging.getLogger(__name__)


class CopyOutcome(str, enum.Enum):
    """Terminal outcome of one copy request."""

    COPIED = "copied"
    MISSING_ID = "missing_id"
    MISSING_AUTH = "missing_auth"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    BAD_RESPONSE = "bad_response"
    FORMAT_ERROR = "format_error"
    DELIVERY_ERROR = "delivery_error"


_OUTCOME_MESSAGES = {
    CopyOutcome.COPIED: "Transcript copied to clipboard!",
    CopyOutcome.MISSING_ID: "Error: Could not determine Meeting ID.",
    CopyOutcome.MISSING_AUTH: "Error: Auth tokens not found. Please ensure you are logged in.",
    CopyOutcome.HTTP_ERROR: "Error fetching transcript: {detail}. Check the log for details.",
    CopyOutcome.NETWORK_ERROR: "Network error while fetching transcript. Check the log for details.",
    CopyOutcome.TIMEOUT: "Request to fetch transcript timed out.",
    CopyOutcome.NOT_FOUND: "Error: Could not retrieve transcript data. Check the log for details.",
    CopyOutcome.BAD_RESPONSE: "Error: Could not parse transcript data. Check the log for details.",
    CopyOutcome.FORMAT_ERROR: "Error: Could not format transcript due to missing data.",
    CopyOutcome.DELIVERY_ERROR: "Error: Could not deliver transcript: {detail}",
}


@dataclass
class CopyResult:
    """What a copy request ended with.

    Attributes:
        outcome: The terminal outcome.
        message: The text shown to the user.
        text: The formatted transcript, when one was produced.
        delivered_to: Whatever the delivery callable returned (a file path
                      for file delivery, None for the clipboard).
    """

    outcome: CopyOutcome
    message: str
    text: Optional[str] = None
    delivered_to: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome is CopyOutcome.COPIED


def _result(outcome: CopyOutcome, detail: Any = "", text: Optional[str] = None) -> CopyResult:
    message = _OUTCOME_MESSAGES[outcome].format(detail=detail)
    return CopyResult(outcome=outcome, message=message, text=text)


async def copy_transcript(
    url: str,
    client_factory: Optional[Callable[[], FirefliesClient]] = None,
    deliver: Callable[[str], Any] = copy_to_clipboard,
    notify_user: Callable[[str, bool], None] = notify,
    include_location: bool = True,
    success_message: Union[str, Callable[[Any], str], None] = None,
    deliver_for: Optional[Callable[[MeetingRecord], Callable[[str], Any]]] = None,
) -> CopyResult:
    """Fetch, format and deliver the transcript of the meeting at ``url``.

    WHY: This is what the copy button does. Each failure mode of the
    pipeline maps to one outcome so the user always gets exactly one
    message, and a diagnostic string is never copied as if it were a
    transcript.

    Args:
        url: The meeting page location.
        client_factory: Builds an (unentered) FirefliesClient; raises
                        ValueError when auth tokens are missing.
                        Defaults to FirefliesClient.
        deliver: Receives the formatted text; raises DeliveryError on failure.
        notify_user: Receives (message, ok) once per call.
        include_location: Print the meeting URL in the header.
        success_message: Replaces the clipboard wording for other delivery
                         targets; a callable receives the delivery's return
                         value (e.g. the path actually written).
        deliver_for: Builds the delivery callable from the fetched record,
                     for targets named after the meeting. Overrides ``deliver``.

    Returns:
        The CopyResult, also passed to ``notify_user``.
    """
    if client_factory is None:
        client_factory = FirefliesClient
    result = await _run_copy(url, client_factory, deliver, deliver_for, include_location)
    if result.ok and success_message:
        if callable(success_message):
            result.message = success_message(result.delivered_to)
        else:
            result.message = success_message
    notify_user(result.message, result.ok)
    return result


async def _run_copy(
    url: str,
    client_factory: Callable[[], FirefliesClient],
    deliver: Callable[[str], Any],
    deliver_for: Optional[Callable[[MeetingRecord], Callable[[str], Any]]],
    include_location: bool,
) -> CopyResult:
    meeting_note_id = extract_meeting_note_id(url)
    if not meeting_note_id:
        logger.error("Failed to get meeting note id for copy request")
        return _result(CopyOutcome.MISSING_ID)

    try:
        client = client_factory()
    except ValueError:
        logger.error("Failed to get auth tokens for copy request")
        return _result(CopyOutcome.MISSING_AUTH)

    try:
        async with client:
            record = await client.fetch_meeting_note(meeting_note_id)
    except FirefliesAPIError as exc:
        return _result(CopyOutcome.HTTP_ERROR, detail=exc.status_code)
    except FetchTimeoutError:
        return _result(CopyOutcome.TIMEOUT)
    except FirefliesNetworkError:
        return _result(CopyOutcome.NETWORK_ERROR)
    except MeetingNotFoundError:
        return _result(CopyOutcome.NOT_FOUND)
    except ResponseParseError:
        return _result(CopyOutcome.BAD_RESPONSE)

    text = format_transcript(record, url if include_location else None)
    if is_missing_data(text):
        return _result(CopyOutcome.FORMAT_ERROR, text=text)

    if deliver_for is not None:
        deliver = deliver_for(record)

    try:
        delivered_to = deliver(text)
    except DeliveryError as exc:
        logger.error("Delivery failed: %s", exc)
        return _result(CopyOutcome.DELIVERY_ERROR, detail=exc, text=text)

    result = _result(CopyOutcome.COPIED, text=text)
    result.delivered_to = delivered_to
    return result


# ---------------------------------------------------------------------------
# Host page abstraction
# ---------------------------------------------------------------------------


class HostPage(ABC):
    """The page the copy button is placed on.

    A browser bridge implements this against the live DOM (clone the
    native download button wrapper, swap its icon, insert after it);
    tests implement it with plain attributes.
    """

    @abstractmethod
    def find_anchor(self) -> Optional[Any]:
        """Return the element the button is inserted after, or None if not rendered yet."""

    @abstractmethod
    def has_copy_button(self) -> bool:
        """True when the copy button is already on the page."""

    @abstractmethod
    def insert_copy_button(self, anchor: Any, on_click: Callable[[], Awaitable[Any]]) -> None:
        """Insert the copy button after ``anchor``, wired to ``on_click``."""

    @abstractmethod
    def remove_copy_button(self) -> None:
        """Remove the copy button if present."""


class ViewController:
    """Keeps the copy button in sync with the current page location.

    WHY: Navigation inside the web app only changes the location. The
    controller turns each change into one re-initialization and keeps
    the state that needs to survive between changes (last location,
    pending anchor wait) on the instance.

    HOW: location_changed() ignores repeats of the last location.
    reinitialize() cancels any pending wait, then either starts a new
    wait for the button anchor (meeting view) or removes the button.
    The wait polls HostPage.find_anchor() until the anchor shows up or
    the timeout elapses.

    RULES:
    - Must be driven from a running event loop (the wait is an asyncio.Task)
    - At most one pending wait exists at any time
    - The click handler copies the location current at click time
    """

    def __init__(
        self,
        page: HostPage,
        on_copy: Callable[[str], Awaitable[Any]],
        wait_timeout_s: float = ANCHOR_WAIT_TIMEOUT_S,
        poll_interval_s: float = ANCHOR_POLL_INTERVAL_S,
    ) -> None:
        self.page = page
        self.on_copy = on_copy
        self.wait_timeout_s = wait_timeout_s
        self.poll_interval_s = poll_interval_s
        self.last_location: Optional[str] = None
        self.pending_wait: Optional[asyncio.Task] = None

    def location_changed(self, url: str) -> bool:
        """Handle a (possible) navigation; returns True if it re-initialized."""
        if url == self.last_location:
            return False
        logger.info("URL changed from %s to %s. Re-initializing.", self.last_location, url)
        self.last_location = url
        self.reinitialize()
        return True

    def reinitialize(self) -> None:
        """Bring the button in line with ``last_location``."""
        self.cancel_pending_wait()
        url = self.last_location or ""

        if not url.startswith(MEETING_VIEW_URL_PREFIX):
            logger.debug("Not a meeting view page. Ensuring button is not present.")
            self.page.remove_copy_button()
            return

        meeting_note_id = extract_meeting_note_id(url)
        if not meeting_note_id:
            logger.info("On a meeting view page, but no valid meeting id found.")
            self.page.remove_copy_button()
            return

        if self.page.has_copy_button():
            logger.debug("Copy Transcript button already exists.")
            return

        logger.info("Meeting view detected (id: %s). Waiting for button anchor.", meeting_note_id)
        self.pending_wait = asyncio.create_task(self.wait_for_anchor())

    def cancel_pending_wait(self) -> None:
        if self.pending_wait is not None and not self.pending_wait.done():
            self.pending_wait.cancel()
            logger.debug("Cleared pending button anchor wait from previous state.")
        self.pending_wait = None

    async def wait_for_anchor(self) -> bool:
        """Poll for the anchor, insert the button, return whether it was found."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.wait_timeout_s
        while True:
            anchor = self.page.find_anchor()
            if anchor is not None:
                self.page.insert_copy_button(anchor, self.handle_click)
                logger.info("Copy Transcript button added to page.")
                return True
            if loop.time() >= deadline:
                logger.warning(
                    "Button anchor not found after %.1f seconds.", self.wait_timeout_s
                )
                return False
            await asyncio.sleep(self.poll_interval_s)

    async def handle_click(self) -> Any:
        logger.info("Copy Transcript button clicked.")
        return await self.on_copy(self.last_location or "")

    def close(self) -> None:
        self.cancel_pending_wait()
