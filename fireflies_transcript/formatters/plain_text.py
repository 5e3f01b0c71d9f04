"""Plain text meeting transcript with header and speaker-grouped turns.

WHY: A Fireflies transcript is a long list of short caption fragments.
Pasted as-is it is unreadable for people and wasteful for LLM prompts.
Grouping consecutive fragments of one speaker into a single paragraph,
stamped with the turn's start time and the speaker's name, gives a
compact document that still preserves who said what and when.

HOW: Two independent parts joined by one blank line:
  header: title | date, meeting URL, attendee lines (each optional)
  body:   one block per speaker turn: "MM:SS", speaker name, text
The body is built in a single pass over the captions. A new turn starts
whenever the caption's speaker id differs from the previous caption's;
fragments inside a turn are joined with single spaces.

RULES:
- Captions are consumed in list order, never sorted by time
- Speaker id 0 is a real speaker; "no speaker yet" is a separate sentinel
- Timestamp of a turn is the start time of its first caption
- Minutes are not wrapped into hours ("61:01" after an hour and a minute)
- Empty fragments still join with a space (legacy output is kept as is)
- Missing captions or speakerMeta → MISSING_DATA_MESSAGE, never an exception
- No leading/trailing whitespace on the final document
- Output suffix: "-transcript.txt", media type: "text/plain"
"""

from __future__ import annotations

import logging
import math
from typing import List, Mapping, Optional, Sequence

from fireflies_transcript.core.ir import Attendee, Caption, MeetingRecord
from fireflies_transcript.core.meeting_url import strip_query
from fireflies_transcript.formatters.base import BaseFormatter, FormatterOutput
from fireflies_transcript.formatters.speakers import resolve_speaker_name

logger = logging.getLogger(__name__)

MISSING_DATA_MESSAGE = "Error: Could not format transcript due to missing data."
OUTPUT_SUFFIX = "-transcript.txt"

# Marks "no turn started yet"; compares unequal to every speaker id, 0 included.
_NO_SPEAKER = object()


def is_missing_data(text: str) -> bool:
    """True when ``text`` is the missing-data diagnostic, not a transcript."""
    return text == MISSING_DATA_MESSAGE


def format_time(total_seconds: float) -> str:
    """Format an offset in seconds as zero-padded ``MM:SS``.

    >>> format_time(65)
    '01:05'
    >>> format_time(3661)
    '61:01'
    """
    minutes = int(math.floor(total_seconds / 60))
    seconds = int(math.floor(total_seconds % 60))
    return "{:02d}:{:02d}".format(minutes, seconds)


def _attendee_line(attendee: Attendee) -> Optional[str]:
    name = attendee.label_name
    email = attendee.email
    if name and email:
        return "{} {}".format(name, email)
    if name:
        return name
    if email:
        return email
    return None


def build_header(
    title: Optional[str] = None,
    date: Optional[str] = None,
    attendees: Sequence[Attendee] = (),
    source_location: Optional[str] = None,
) -> str:
    """Assemble the header block; returns "" when every part is absent.

    RULES:
    - "Title | Date" only when both are present; a date alone is dropped
    - The meeting URL goes on its own line with the query string removed
    - Attendee lines are separated from what precedes them by a blank line
    - Attendees with neither name nor email produce no line
    """
    header = ""
    if title:
        header = title
        if date:
            header += " | {}".format(date)

    if source_location:
        clean_location = strip_query(source_location)
        header = "{}\n{}".format(header, clean_location) if header else clean_location

    lines = [line for line in (_attendee_line(a) for a in attendees) if line]
    if lines:
        attendee_block = "\n".join(lines)
        header = "{}\n\n{}".format(header, attendee_block) if header else attendee_block

    return header


def build_body(captions: Sequence[Caption], speaker_meta: Mapping[str, str]) -> str:
    """Group captions into speaker turns and lay them out as text.

    WHY: Consecutive fragments from one speaker belong to one paragraph;
    a new paragraph starts only when the speaker changes.

    HOW: One pass with three pieces of state: the previous caption's
    speaker (``_NO_SPEAKER`` before the first caption), an accumulator
    holding the current turn's text, and the output built so far. On a
    speaker change the accumulator is flushed (trimmed) and a new
    "MM:SS" + name heading is written, preceded by a blank line unless
    it is the first one.
    """
    output: List[str] = []
    last_speaker_id = _NO_SPEAKER
    accumulator = ""

    for caption in captions:
        speaker_name = resolve_speaker_name(caption.speaker_id, speaker_meta)
        timestamp = format_time(caption.time)

        if caption.speaker_id != last_speaker_id:
            if accumulator:
                output.append(accumulator.strip() + "\n")
            accumulator = ""

            if output:
                output.append("\n")
            output.append("{}\n".format(timestamp))
            output.append("{}\n".format(speaker_name))
            last_speaker_id = caption.speaker_id

        if accumulator:
            accumulator += " " + caption.sentence
        else:
            accumulator = caption.sentence

    if accumulator:
        output.append(accumulator.strip() + "\n")

    return "".join(output).strip()


def format_transcript(
    record: Optional[MeetingRecord],
    source_location: Optional[str] = None,
) -> str:
    """Render a meeting record as the final plain text document.

    Args:
        record: The parsed meeting note. Only ``captions`` and
                ``speaker_meta`` are required.
        source_location: The meeting page URL; printed under the title
                         without its query string.

    Returns:
        The document text, or MISSING_DATA_MESSAGE when the record lacks
        captions or speakerMeta.
    """
    if record is None or record.captions is None or record.speaker_meta is None:
        logger.error("Invalid data provided to format_transcript: captions or speakerMeta missing")
        return MISSING_DATA_MESSAGE

    header = build_header(
        title=record.title,
        date=record.date,
        attendees=record.attendees,
        source_location=source_location,
    )
    body = build_body(record.captions, record.speaker_meta)

    if header:
        return "{}\n\n{}".format(header, body).strip()
    return body


class PlainTextFormatter(BaseFormatter):
    """Formatter that wraps ``format_transcript`` as a text/plain output."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(
        self,
        record: Optional[MeetingRecord],
        source_location: Optional[str] = None,
    ) -> FormatterOutput:
        return FormatterOutput(
            suffix=OUTPUT_SUFFIX,
            content=format_transcript(record, source_location),
            media_type="text/plain",
        )
