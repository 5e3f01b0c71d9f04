"""Transcript formatters.

WHY: The CLI, the controller and the HTTP API all need the same text
rendering of a meeting record. This package is the single place that
knows how a transcript is laid out.

HOW: ``format_transcript`` is the pure entry point; PlainTextFormatter
wraps it with a file suffix and media type for delivery code.
"""

from fireflies_transcript.formatters.plain_text import (
    MISSING_DATA_MESSAGE,
    PlainTextFormatter,
    format_time,
    format_transcript,
    is_missing_data,
)
from fireflies_transcript.formatters.speakers import resolve_speaker_name

__all__ = [
    "MISSING_DATA_MESSAGE",
    "PlainTextFormatter",
    "format_time",
    "format_transcript",
    "is_missing_data",
    "resolve_speaker_name",
]
