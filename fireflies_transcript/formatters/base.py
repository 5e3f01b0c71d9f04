"""Abstract base formatter and output container.

WHY: The CLI and the HTTP API deliver formatted transcripts to different
places (clipboard, file, response body). A formatter returns its content
together with a file suffix and MIME type so every delivery path can
handle it the same way.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput is a plain dataclass bundling suffix, content
and media type.

RULES:
- ``suffix`` starts with a hyphen, e.g. ``"-transcript.txt"``
- The caller is responsible for prepending the meeting title or id
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from fireflies_transcript.core.ir import MeetingRecord


@dataclass
class FormatterOutput:
    """One formatted document.

    Attributes:
        suffix: File suffix appended to the output stem,
                e.g. ``"-transcript.txt"`` → ``"Standup-transcript.txt"``.
        content: The document text.
        media_type: MIME type for the content, e.g. ``"text/plain"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for meeting transcript formatters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain Text'."""

    @abstractmethod
    def format(
        self,
        record: Optional[MeetingRecord],
        source_location: Optional[str] = None,
    ) -> FormatterOutput:
        """Convert a meeting record into a document.

        Args:
            record: The parsed meeting note.
            source_location: Page URL to print in the header, if any.
        """
