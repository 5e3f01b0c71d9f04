"""HTTP API for formatting Fireflies transcripts.

Run with ``fireflies-transcript-api`` or
``uvicorn fireflies_transcript.server.app:app``.
"""
