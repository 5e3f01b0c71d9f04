"""Meeting note id extraction from Fireflies page URLs.

WHY: The copy workflow only knows the page location. The GraphQL query
needs the opaque meeting note id, which lives in the ``/view/`` path
segment, either bare (``/view/01HXYZ``) or in the legacy composite
form ``/view/Weekly-Sync::01HXYZ``.

HOW: A regex captures the segment after ``view/``. A composite segment
is split on ``::`` and the last part wins. URLs without a ``view/``
segment fall back to any path segment carrying ``::``.

RULES:
- Query string and fragment never leak into the id
- An empty id (``/view/name::``) is treated as no id
- Returns None (and logs a warning) when nothing usable is found
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from fireflies_transcript.config import MEETING_VIEW_URL_PREFIX

logger = logging.getLogger(__name__)

_VIEW_SEGMENT_RE = re.compile(r"view/([^/?#]+)")
_COMPOSITE_SEPARATOR = "::"


def strip_query(url: str) -> str:
    """Drop everything from the first ``?`` on."""
    return url.split("?", 1)[0]


def _id_from_segment(segment: str) -> Optional[str]:
    if _COMPOSITE_SEPARATOR in segment:
        segment = segment.rsplit(_COMPOSITE_SEPARATOR, 1)[1]
    return segment or None


def extract_meeting_note_id(url: str) -> Optional[str]:
    """Return the meeting note id carried by a Fireflies page URL.

    Args:
        url: Full page location, e.g.
             ``https://app.fireflies.ai/view/Weekly-Sync::01HXYZ?ref=nav``.

    Returns:
        The id (``"01HXYZ"``), or None when the URL carries none.
    """
    match = _VIEW_SEGMENT_RE.search(url)
    if match:
        return _id_from_segment(match.group(1))

    for part in strip_query(url).split("/"):
        if _COMPOSITE_SEPARATOR in part:
            return _id_from_segment(part.split("#", 1)[0])

    logger.warning("Could not extract meeting note id from URL: %s", url)
    return None


def is_meeting_view(url: str) -> bool:
    """True when the URL is a meeting page with a usable id."""
    if not url.startswith(MEETING_VIEW_URL_PREFIX):
        return False
    return extract_meeting_note_id(url) is not None
