"""Conversion between ``MM:SS`` / ``H:MM:SS`` clock strings and seconds."""

from __future__ import annotations

import math


def parse_to_seconds(text: str) -> int:
    """Convert ``MM:SS`` or ``H:MM:SS`` to whole seconds.

    Any other shape (wrong field count, non-numeric fields) yields ``0``
    so a malformed timestamp degrades to a zero offset instead of failing
    the job.
    """
    parts = text.strip().split(":")
    try:
        fields = [int(p, 10) for p in parts]
    except ValueError:
        return 0
    if len(fields) == 2:
        minutes, seconds = fields
        return minutes * 60 + seconds
    if len(fields) == 3:
        hours, minutes, seconds = fields
        return hours * 3600 + minutes * 60 + seconds
    return 0


def format_from_seconds(total_seconds: float) -> str:
    """Render seconds as ``MM:SS``, or ``H:MM:SS`` once past the first hour.

    Minutes and seconds are zero-padded; hours never are.
    """
    if not math.isfinite(total_seconds) or total_seconds < 0:
        total_seconds = 0
    hours = math.floor(total_seconds / 3600)
    minutes = math.floor((total_seconds % 3600) / 60)
    seconds = math.floor(total_seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def shift_timestamp(timestamp: str, offset_seconds: float) -> str:
    """Move a chunk-relative timestamp onto the absolute timeline."""
    return format_from_seconds(parse_to_seconds(timestamp) + offset_seconds)
