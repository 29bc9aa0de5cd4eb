"""Parser for the model's ``[MM:SS] Speaker: Text`` transcript output."""

from __future__ import annotations

import re
from collections.abc import Iterable

from audio_scribe.transcription.models import TranscriptSegment

# [MM:SS] or [H:MM:SS], then "Speaker: text"
_LINE_RE = re.compile(r"^\[(\d{1,2}:\d{2}|\d{1,2}:\d{2}:\d{2})\]\s*(.*?):\s*(.*)$")


def parse_model_transcript(raw_text: str) -> list[TranscriptSegment]:
    """Parse generated transcript text into segments.

    Each line of the form ``[00:05] Speaker 1: Hello`` starts a new segment.
    A non-blank line without the bracketed header is a wrapped continuation
    and is appended (space-joined) to the previous segment's text; if no
    segment exists yet it is dropped.

    Never raises. Output without any recognisable structure yields an empty
    list, which callers treat as a best-effort result.
    """
    segments: list[TranscriptSegment] = []

    for line in raw_text.split("\n"):
        line = line.strip()
        if not line:
            continue

        match = _LINE_RE.match(line)
        if match:
            segments.append(
                TranscriptSegment(
                    timestamp=match.group(1),
                    speaker=match.group(2).strip(),
                    text=match.group(3).strip(),
                )
            )
        elif segments:
            previous = segments[-1]
            previous.text = f"{previous.text} {line}" if previous.text else line

    return segments


def format_transcript(segments: Iterable[TranscriptSegment]) -> str:
    """Render segments back to the plain ``[timestamp] speaker: text`` form."""
    return "\n".join(f"[{s.timestamp}] {s.speaker}: {s.text}" for s in segments)


def transcript_filename(source_name: str) -> str:
    """Default download name for the text export of *source_name*."""
    return f"transcript-{source_name}.txt"
