"""Best-effort, time-bounded probe of a media file's playable duration."""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path

logger = logging.getLogger(__name__)


async def probe_duration(
    path: str | Path,
    timeout_seconds: float = 2.0,
    ffprobe: str = "ffprobe",
) -> float:
    """Return the container duration of the whole file in seconds.

    Only metadata is read (``ffprobe -show_entries format=duration``).
    Timeout, a missing ``ffprobe`` binary, a non-zero exit or unparsable
    output all resolve to ``0.0``, which callers treat as "unknown".
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            ffprobe,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        logger.warning("Duration probe unavailable (%s), using fallback duration.", exc)
        return 0.0

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("Media metadata load timed out, using fallback duration.")
        proc.kill()
        await proc.wait()
        return 0.0

    if proc.returncode != 0:
        logger.warning(
            "Duration probe failed for %s (exit %s): %s",
            path,
            proc.returncode,
            stderr.decode("utf-8", errors="replace").strip()[:400],
        )
        return 0.0

    raw = stdout.decode("utf-8", errors="replace").strip()
    try:
        duration = float(raw)
    except ValueError:
        logger.warning("Duration probe returned unparsable output %r for %s", raw[:100], path)
        return 0.0

    if not math.isfinite(duration) or duration < 0:
        return 0.0
    return duration
