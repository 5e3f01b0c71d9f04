"""Intermediate representation dataclasses for a Fireflies meeting note.

WHY: The Fireflies GraphQL API returns a ``meetingNote`` object with
camelCase keys, optional fields and nullable collections. The formatter
needs a well-typed, read-only view of that object that keeps the
difference between "absent" and "empty" intact.

HOW: Three dataclasses form a hierarchy:
  Caption       : one timestamped, speaker-attributed sentence fragment
  Attendee      : one invited participant (name and/or email)
  MeetingRecord : the complete meeting note consumed by the formatter

RULES:
- Captions keep the order of the API response; nothing here sorts them
- speaker_id is zero-based; speakerMeta keys are one-based strings
- captions / speaker_meta are None when absent or null on the wire
  (the formatter reports that as missing data), [] / {} when empty
- attendees defaults to []; an absent list is not an error
- All times are float seconds from meeting start
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Caption:
    """One sentence fragment from the transcript.

    RULES:
    - index: ordinal from the API, informational only (list order wins)
    - speaker_id: zero-based speaker number
    - sentence: the fragment text, may be empty in degenerate input
    - time: start offset in seconds; end_time is not used for formatting
    """

    speaker_id: int
    sentence: str
    time: float
    index: Optional[int] = None
    end_time: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Caption:
        """Parse a caption from the GraphQL ``captions[]`` item."""
        if not isinstance(data, dict):
            raise TypeError("caption must be an object, got {}".format(type(data).__name__))
        end_time = data.get("endTime")
        return cls(
            speaker_id=int(data["speaker_id"]),
            sentence=data.get("sentence") or "",
            time=float(data.get("time") or 0.0),
            index=data.get("index"),
            end_time=float(end_time) if end_time is not None else None,
        )


@dataclass(frozen=True)
class Attendee:
    """A meeting participant as listed in ``attendees[]``."""

    display_name: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Attendee:
        if not isinstance(data, dict):
            raise TypeError("attendee must be an object, got {}".format(type(data).__name__))
        return cls(
            display_name=data.get("displayName"),
            name=data.get("name"),
            email=data.get("email"),
        )

    @property
    def label_name(self) -> Optional[str]:
        """The display name, falling back to the plain name."""
        return self.display_name or self.name or None


@dataclass(frozen=True)
class MeetingRecord:
    """The complete meeting note the formatter consumes.

    WHY: This is the single input of ``format_transcript``. Keeping it
    immutable means the formatter can be called repeatedly and from
    several callers without copying.

    HOW: Built from the ``data.meetingNote`` object of the GraphQL
    response via ``from_dict``, or constructed directly in tests.

    RULES:
    - speaker_meta maps "1", "2", ... to display names and may be sparse
    - captions and speaker_meta are the two required data sources
    - title, date and attendees are optional header material
    """

    captions: Optional[List[Caption]]
    speaker_meta: Optional[Dict[str, str]]
    title: Optional[str] = None
    date: Optional[str] = None
    attendees: List[Attendee] = field(default_factory=list)
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MeetingRecord:
        """Parse a MeetingRecord from a raw ``meetingNote`` dict.

        RULES:
        - ``captions: null`` and a missing key both give captions=None
        - ``speakerMeta`` values are coerced to str; null names are dropped
          so the resolver falls back to "Unknown Speaker N"
        - Wrongly typed captions, speakerMeta or attendees raise TypeError
        - ``date`` may be an epoch number or a string; kept as its str form
        - Unknown keys (``__typename`` etc.) are ignored
        """
        raw_captions = data.get("captions")
        captions = None
        if raw_captions is not None:
            if not isinstance(raw_captions, list):
                raise TypeError("captions must be a list, got {}".format(type(raw_captions).__name__))
            captions = [Caption.from_dict(c) for c in raw_captions]

        raw_meta = data.get("speakerMeta")
        speaker_meta = None
        if raw_meta is not None:
            if not isinstance(raw_meta, dict):
                raise TypeError("speakerMeta must be an object, got {}".format(type(raw_meta).__name__))
            speaker_meta = {str(k): str(v) for k, v in raw_meta.items() if v is not None}

        raw_attendees = data.get("attendees") or []
        if not isinstance(raw_attendees, list):
            raise TypeError("attendees must be a list, got {}".format(type(raw_attendees).__name__))

        return cls(
            captions=captions,
            speaker_meta=speaker_meta,
            title=_optional_str(data.get("title")),
            date=_optional_str(data.get("date")),
            attendees=[Attendee.from_dict(a) for a in raw_attendees],
            id=_optional_str(data.get("_id")),
        )
