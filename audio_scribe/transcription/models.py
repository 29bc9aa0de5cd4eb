"""Data models for the chunked transcription pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

SYSTEM_SPEAKER = "System"


@dataclass
class TranscriptSegment:
    """One timestamped, speaker-attributed line of transcript."""

    timestamp: str
    speaker: str
    text: str


@dataclass(frozen=True)
class Chunk:
    """A ``[start, end)`` byte range of the source file."""

    index: int
    start: int
    end: int
    media_type: str

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class StatusEvent:
    """Progress label; ``is_phase`` is True for coarse phases like ``PROCESSING_MEDIA``."""

    label: str
    is_phase: bool = False


@dataclass(frozen=True)
class TranscriptEvent:
    """Snapshot of the full transcript accumulated so far."""

    segments: list[TranscriptSegment] = field(default_factory=list)


@dataclass(frozen=True)
class CompletedEvent:
    """Terminal success. ``cancelled`` marks a run stopped early by the caller."""

    segments: list[TranscriptSegment] = field(default_factory=list)
    cancelled: bool = False


@dataclass(frozen=True)
class FailedEvent:
    """Terminal job-level failure."""

    message: str
    details: str | None = None


PipelineEvent = Union[StatusEvent, TranscriptEvent, CompletedEvent, FailedEvent]
