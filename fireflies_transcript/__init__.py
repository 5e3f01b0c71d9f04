"""Fireflies Transcript Copier: meeting transcripts as clean plain text.

WHY: Fireflies.ai stores a meeting transcript as a flat list of
per-caption fragments (speaker id, start time, sentence). Pasting that
into a document, a ticket or an LLM prompt needs one readable text with
a header and speaker-grouped dialogue.

HOW: Three-stage pipeline: fetch (GraphQL client), parse (core IR),
format (plain text formatter). Delivery (clipboard, file, HTTP) and the
view controller sit on top and are independently testable.

RULES:
- The formatter is pure: same MeetingRecord in, same text out
- Missing captions or speakerMeta yield a diagnostic string, not an exception
- The IR is the stable contract between fetching and formatting
"""

__version__ = "0.1.0"
