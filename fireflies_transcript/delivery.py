"""Output delivery: clipboard, files, and user notifications.

WHY: A formatted transcript is only useful once it lands somewhere the
user can paste or open it, and the user needs one clear message saying
whether that worked.

HOW: pyperclip puts text on the system clipboard. Files are written as
UTF-8 next to an existing output with a numeric suffix instead of being
overwritten. Notifications go to stderr so stdout stays pipeable.

RULES:
- Clipboard and filesystem failures surface as DeliveryError
- Existing files are never overwritten (-transcript-2.txt, -3, ...)
- All status messages go to stderr and are also logged
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

import pyperclip

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')


class DeliveryError(Exception):
    """Raised when the transcript could not be delivered."""


def copy_to_clipboard(text: str) -> None:
    """Place ``text`` on the system clipboard."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        raise DeliveryError("Could not access the clipboard: {}".format(exc)) from exc
    logger.info("Formatted transcript copied to clipboard (%d chars)", len(text))


def safe_stem(title: str) -> str:
    """Turn a meeting title into a filename stem."""
    stem = _UNSAFE_FILENAME_CHARS.sub("-", title).strip("-.")
    return stem or "meeting"


def resolve_output_path(path: Path) -> Path:
    """Return ``path``, or the first free ``{stem}-N{suffix}`` sibling.

    RULES:
    - First attempt: the path as given
    - Conflict: counter inserted before the extension, starting at 2
    """
    if not path.exists():
        return path

    counter = 2
    while True:
        candidate = path.with_name("{}-{}{}".format(path.stem, counter, path.suffix))
        if not candidate.exists():
            return candidate
        counter += 1


def write_to_file(text: str, path: Path) -> Path:
    """Write ``text`` as UTF-8 to a conflict-free path and return it."""
    target = resolve_output_path(Path(path))
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise DeliveryError("Could not write {}: {}".format(target, exc)) from exc
    logger.info("Transcript written to %s", target)
    return target


def notify(message: str, ok: bool = True) -> None:
    """Report the outcome of a copy request to the user.

    HOW: Writes to sys.stderr with a flush, and logs at INFO for success
    or ERROR for failure.
    """
    if ok:
        logger.info(message)
    else:
        logger.error(message)
    print(message, file=sys.stderr, flush=True)
