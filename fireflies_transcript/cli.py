"""Command-line interface for the Fireflies Transcript Copier.

WHY: Outside the browser, users want the same one-step copy from a
terminal: paste a meeting URL, get the formatted transcript on the
clipboard, in a file, or on stdout. Saved GraphQL responses can be
formatted offline the same way.

HOW: Uses argparse to accept a meeting URL (or a JSON file with
--from-json) and a delivery target. URL mode runs the async copy
workflow via asyncio.run(); JSON mode parses the file into a
MeetingRecord and formats it locally. Status messages go to stderr.

RULES:
- Positional argument: meeting URL, or JSON path with --from-json
- Delivery: clipboard by default, --output FILE, or --stdout
- --no-url leaves the meeting URL out of the header
- Exit code 0 only when the transcript was delivered
- The missing-data diagnostic is never delivered as a transcript
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

from fireflies_transcript import __version__
from fireflies_transcript.controller import copy_transcript
from fireflies_transcript.core.ir import MeetingRecord
from fireflies_transcript.delivery import (
    DeliveryError,
    copy_to_clipboard,
    notify,
    safe_stem,
    write_to_file,
)
from fireflies_transcript.formatters.plain_text import (
    OUTPUT_SUFFIX,
    PlainTextFormatter,
    is_missing_data,
)

logger = logging.getLogger(__name__)


def _write_stdout(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def load_record(path: Path) -> MeetingRecord:
    """Load a MeetingRecord from a saved JSON file.

    RULES:
    - Accepts a full GraphQL response ({"data": {"meetingNote": ...}})
      or a bare meetingNote object
    - Raises ValueError when the file holds neither
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    if not isinstance(payload, dict):
        raise ValueError("{}: expected a JSON object".format(path))

    data = payload.get("data")
    if isinstance(data, dict) and "meetingNote" in data:
        payload = data["meetingNote"]
        if not isinstance(payload, dict):
            raise ValueError("{}: data.meetingNote is empty".format(path))

    return MeetingRecord.from_dict(payload)


def _output_target(output: Path, record_title: Optional[str], suffix: str) -> Path:
    """A directory target gets a file named after the meeting title."""
    if output.is_dir():
        return output / "{}{}".format(safe_stem(record_title or "meeting"), suffix)
    return output


def _make_deliver(args: argparse.Namespace, title: Optional[str] = None) -> Callable[[str], Any]:
    if args.stdout:
        return _write_stdout
    if args.output:
        target = _output_target(Path(args.output), title, OUTPUT_SUFFIX)
        return lambda text: write_to_file(text, target)
    return copy_to_clipboard


def _success_message(args: argparse.Namespace, written: Optional[Path] = None) -> Optional[str]:
    """Status line for non-clipboard targets; ``written`` is the file actually created."""
    if args.stdout:
        return "Transcript written to stdout."
    if args.output:
        return "Transcript written to {}.".format(written or args.output)
    return None


async def _run_url(args: argparse.Namespace) -> int:
    def written_message(written: Any) -> Optional[str]:
        return _success_message(args, written)

    # Output target depends on the fetched meeting title.
    result = await copy_transcript(
        args.source,
        deliver_for=lambda record: _make_deliver(args, record.title),
        include_location=not args.no_url,
        success_message=written_message if args.output else _success_message(args),
    )
    return 0 if result.ok else 1


def _run_json(args: argparse.Namespace) -> int:
    try:
        record = load_record(Path(args.source))
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.debug("Failed to load %s", args.source, exc_info=True)
        notify("Error: Could not read meeting data from {}: {}".format(args.source, exc), ok=False)
        return 1

    output = PlainTextFormatter().format(record, None if args.no_url else args.url)
    if is_missing_data(output.content):
        notify(output.content, ok=False)
        return 1

    try:
        written = _make_deliver(args, record.title)(output.content)
    except DeliveryError as exc:
        notify("Error: Could not deliver transcript: {}".format(exc), ok=False)
        return 1

    notify(_success_message(args, written) or "Transcript copied to clipboard!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI.

    RULES:
    - Positional: source (required)
    - Optional: --from-json, --url, --output / --stdout, --no-url, --log-level
    """
    parser = argparse.ArgumentParser(
        prog="fireflies-transcript",
        description="Copy a Fireflies.ai meeting transcript as speaker-grouped "
                    "plain text with timestamps.",
    )

    parser.add_argument(
        "source",
        help="Meeting page URL (https://app.fireflies.ai/view/...), or a JSON "
             "file with --from-json.",
    )

    parser.add_argument(
        "--from-json",
        action="store_true",
        help="Treat SOURCE as a saved GraphQL response or meetingNote JSON file.",
    )

    parser.add_argument(
        "--url",
        default=None,
        help="Meeting URL to print in the header when formatting a JSON file.",
    )

    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--output",
        default=None,
        help="Write the transcript to this file (or directory) instead of the clipboard.",
    )
    target.add_argument(
        "--stdout",
        action="store_true",
        help="Print the transcript to stdout instead of the clipboard.",
    )

    parser.add_argument(
        "--no-url",
        action="store_true",
        help="Leave the meeting URL out of the header.",
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: %(default)s).",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns the process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.from_json:
        return _run_json(args)
    return asyncio.run(_run_url(args))


if __name__ == "__main__":
    sys.exit(main())
