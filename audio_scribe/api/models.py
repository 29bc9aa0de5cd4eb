"""Pydantic request/response schemas for the Audio Scribe API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from audio_scribe.pipeline_config import TranscriptionStatus, status_for_label
from audio_scribe.transcription.models import (
    CompletedEvent,
    FailedEvent,
    PipelineEvent,
    StatusEvent,
    TranscriptSegment,
)
from audio_scribe.transcription.parsers import format_transcript


class SegmentModel(BaseModel):
    """A single transcript line."""

    timestamp: str
    speaker: str
    text: str

    @classmethod
    def from_segment(cls, segment: TranscriptSegment) -> SegmentModel:
        return cls(timestamp=segment.timestamp, speaker=segment.speaker, text=segment.text)


class TranscribeResponse(BaseModel):
    """Response body for the /api/transcribe endpoint."""

    filename: str
    media_type: str
    num_chunks: int
    segments: list[SegmentModel]
    text: str


class StatusMessage(BaseModel):
    """Streamed progress update. ``status`` is the job state the label maps to."""

    type: Literal["status"] = "status"
    label: str
    status: TranscriptionStatus


class TranscriptMessage(BaseModel):
    """Streamed snapshot of the transcript accumulated so far."""

    type: Literal["transcript"] = "transcript"
    segments: list[SegmentModel]


class CompletedMessage(BaseModel):
    """Terminal streamed message for a finished (or cancelled) job."""

    type: Literal["completed"] = "completed"
    segments: list[SegmentModel]
    text: str
    cancelled: bool = False


class FailedMessage(BaseModel):
    """Terminal streamed message for a job that failed outright."""

    type: Literal["failed"] = "failed"
    message: str
    details: str | None = None


StreamMessage = StatusMessage | TranscriptMessage | CompletedMessage | FailedMessage


def to_stream_message(event: PipelineEvent) -> StreamMessage:
    """Convert a pipeline event into its wire representation."""
    if isinstance(event, StatusEvent):
        return StatusMessage(label=event.label, status=status_for_label(event.label))
    if isinstance(event, CompletedEvent):
        return CompletedMessage(
            segments=[SegmentModel.from_segment(s) for s in event.segments],
            text=format_transcript(event.segments),
            cancelled=event.cancelled,
        )
    if isinstance(event, FailedEvent):
        return FailedMessage(message=event.message, details=event.details)
    return TranscriptMessage(segments=[SegmentModel.from_segment(s) for s in event.segments])
