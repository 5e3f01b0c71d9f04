"""Core data structures and meeting URL parsing.

The IR dataclasses mirror the Fireflies ``meetingNote`` payload and are
the only input the formatters accept.
"""

from fireflies_transcript.core.ir import Attendee, Caption, MeetingRecord
from fireflies_transcript.core.meeting_url import extract_meeting_note_id, is_meeting_view

__all__ = ["Attendee", "Caption", "MeetingRecord", "extract_meeting_note_id", "is_meeting_view"]
