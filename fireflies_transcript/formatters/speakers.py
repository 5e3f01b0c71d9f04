"""Speaker id to display name resolution.

Fireflies numbers caption speakers from 0 while ``speakerMeta`` is keyed
from "1", so caption speaker 0 is looked up under "1".
"""

from __future__ import annotations

from typing import Mapping

UNKNOWN_SPEAKER_TEMPLATE = "Unknown Speaker {}"


def speaker_meta_key(speaker_id: int) -> str:
    """The one-based ``speakerMeta`` key for a zero-based caption speaker."""
    return str(speaker_id + 1)


def resolve_speaker_name(speaker_id: int, speaker_meta: Mapping[str, str]) -> str:
    """Map a caption's speaker id to its display name.

    RULES:
    - A present key is returned unmodified, even when the name is ""
    - An absent key yields "Unknown Speaker N" with N = speaker_id + 1
    """
    key = speaker_meta_key(speaker_id)
    if key in speaker_meta:
        return speaker_meta[key]
    return UNKNOWN_SPEAKER_TEMPLATE.format(key)
