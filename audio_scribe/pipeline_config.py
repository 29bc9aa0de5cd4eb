"""Pipeline configuration: job status enum and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from audio_scribe.transcription.client import TRANSCRIPT_INSTRUCTION

if TYPE_CHECKING:
    from audio_scribe.config import Settings

MIB = 1024 * 1024


class TranscriptionStatus(str, Enum):
    """Lifecycle states of a transcription job."""

    IDLE = "IDLE"
    UPLOADING = "UPLOADING"
    PROCESSING_MEDIA = "PROCESSING_MEDIA"
    PROCESSING_CHUNKS = "PROCESSING_CHUNKS"
    GENERATING = "GENERATING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


# Status labels that name a coarse phase; anything else is granular per-chunk text.
COARSE_PHASES: frozenset[str] = frozenset(
    {
        TranscriptionStatus.UPLOADING.value,
        TranscriptionStatus.PROCESSING_MEDIA.value,
        TranscriptionStatus.GENERATING.value,
    }
)


def is_coarse_phase(label: str) -> bool:
    return label in COARSE_PHASES


def status_for_label(label: str) -> TranscriptionStatus:
    """Map a status label to the job state a caller should display.

    Coarse phase labels map to their own state; granular labels such as
    ``"Processing Part 2 of 4"`` all map to ``PROCESSING_CHUNKS``.
    """
    if is_coarse_phase(label):
        return TranscriptionStatus(label)
    return TranscriptionStatus.PROCESSING_CHUNKS


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for the chunked transcription pipeline.

    Defaults keep each request comfortably under the model's inline payload
    limit while bounding a single stalled request to five minutes.
    """

    max_chunk_bytes: int = 10 * MIB
    request_timeout_seconds: float = 300.0
    duration_probe_timeout_seconds: float = 2.0
    inter_chunk_pause_seconds: float = 0.5
    max_file_bytes: int = 2000 * MIB
    ffprobe_path: str = "ffprobe"
    instruction: str = TRANSCRIPT_INSTRUCTION

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            max_chunk_bytes=settings.chunk_size_mb * MIB,
            request_timeout_seconds=settings.request_timeout_seconds,
            duration_probe_timeout_seconds=settings.duration_probe_timeout_seconds,
            inter_chunk_pause_seconds=settings.inter_chunk_pause_seconds,
            max_file_bytes=settings.max_file_size_mb * MIB,
            ffprobe_path=settings.ffprobe_path,
        )
