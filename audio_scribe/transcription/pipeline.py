"""Chunked transcription pipeline: probe -> chunk -> transcribe -> parse -> shift.

The model restarts its clock at zero for every request, so each chunk's
timestamps are moved onto the file's absolute timeline by an accumulated
offset. The offset advances by each chunk's byte-proportional share of the
total duration, never by what the model reported, so it stays monotonic
regardless of output quality. Chunks are processed strictly one after
another: the next chunk's offset depends on the previous one, and only one
chunk is held in memory at a time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from audio_scribe.pipeline_config import PipelineConfig, TranscriptionStatus
from audio_scribe.transcription.chunking import MediaSource, chunk_count, iter_chunks, read_chunk
from audio_scribe.transcription.client import TranscriptionClient, transcribe_with_timeout
from audio_scribe.transcription.duration import probe_duration
from audio_scribe.transcription.errors import TranscriptionError, TranscriptionJobError
from audio_scribe.transcription.models import (
    SYSTEM_SPEAKER,
    CompletedEvent,
    FailedEvent,
    PipelineEvent,
    StatusEvent,
    TranscriptEvent,
    TranscriptSegment,
)
from audio_scribe.transcription.parsers import parse_model_transcript
from audio_scribe.transcription.timecodes import format_from_seconds, shift_timestamp

logger = logging.getLogger(__name__)


def chunk_progress_label(part: int, total: int) -> str:
    return f"Processing Part {part} of {total}"


def chunk_error_segment(part: int, accumulated_seconds: float) -> TranscriptSegment:
    """Placeholder recorded in place of a chunk the model could not transcribe."""
    return TranscriptSegment(
        timestamp=format_from_seconds(accumulated_seconds),
        speaker=SYSTEM_SPEAKER,
        text=f"[Error processing segment {part}. Skipped.]",
    )


class ChunkPipeline:
    """Run one transcription job as a stream of :mod:`events <audio_scribe.transcription.models>`.

    :meth:`run` yields zero or more :class:`StatusEvent` and
    :class:`TranscriptEvent` items followed by exactly one terminal
    :class:`CompletedEvent` or :class:`FailedEvent`.
    """

    def __init__(self, client: TranscriptionClient, config: PipelineConfig | None = None) -> None:
        self.client = client
        self.config = config or PipelineConfig()

    async def run(
        self,
        source: MediaSource,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[PipelineEvent]:
        try:
            async for event in self._process(source, cancel_event):
                yield event
        except Exception as exc:
            logger.exception("Transcription of %s failed", source.name)
            yield FailedEvent(
                message="Processing Failed",
                details=str(exc).strip() or "Unknown error occurred during AI processing.",
            )

    async def _process(
        self,
        source: MediaSource,
        cancel_event: asyncio.Event | None,
    ) -> AsyncIterator[PipelineEvent]:
        cfg = self.config
        yield StatusEvent(TranscriptionStatus.PROCESSING_MEDIA.value, is_phase=True)

        # 1. Duration of the FULL file, once
        total_duration = await self._resolve_duration(source)

        # 2. Chunk count
        count = chunk_count(source.size, cfg.max_chunk_bytes)
        logger.info(
            "Transcribing %s: %d bytes, %d chunk(s), duration %.1fs",
            source.name,
            source.size,
            count,
            total_duration,
        )

        transcript: list[TranscriptSegment] = []
        accumulated = 0.0

        # 3. One chunk, one round trip, one timeline update
        for chunk in iter_chunks(source, cfg.max_chunk_bytes):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Transcription of %s cancelled before part %d", source.name, chunk.index + 1)
                yield CompletedEvent(segments=list(transcript), cancelled=True)
                return

            part = chunk.index + 1
            yield StatusEvent(chunk_progress_label(part, count))

            chunk_duration = (
                (chunk.size / source.size) * total_duration if total_duration > 0 else 0.0
            )

            try:
                data = read_chunk(source, chunk)
                yield StatusEvent(f"Analyzing Part {part} of {count}...")
                text = await transcribe_with_timeout(
                    self.client,
                    data,
                    chunk.media_type,
                    cfg.instruction,
                    cfg.request_timeout_seconds,
                )
            except (TranscriptionError, OSError):
                logger.exception("Error processing chunk %d of %d", part, count)
                transcript.append(chunk_error_segment(part, accumulated))
            else:
                segments = parse_model_transcript(text)
                for seg in segments:
                    seg.timestamp = shift_timestamp(seg.timestamp, accumulated)
                transcript.extend(segments)
                logger.debug("Part %d of %d produced %d segment(s)", part, count, len(segments))

            yield TranscriptEvent(segments=list(transcript))

            # Advance the time cursor whether or not the chunk succeeded
            accumulated += chunk_duration

            if part < count and cfg.inter_chunk_pause_seconds > 0:
                await asyncio.sleep(cfg.inter_chunk_pause_seconds)

        yield CompletedEvent(segments=list(transcript))

    async def _resolve_duration(self, source: MediaSource) -> float:
        try:
            return await probe_duration(
                source.path,
                timeout_seconds=self.config.duration_probe_timeout_seconds,
                ffprobe=self.config.ffprobe_path,
            )
        except Exception:
            logger.warning(
                "Could not determine duration of %s, timestamps may be inaccurate.",
                source.name,
                exc_info=True,
            )
            return 0.0


async def transcribe_media(
    source: MediaSource,
    client: TranscriptionClient,
    config: PipelineConfig | None = None,
    on_status: Callable[[str], None] | None = None,
    on_transcript: Callable[[list[TranscriptSegment]], None] | None = None,
    cancel_event: asyncio.Event | None = None,
) -> list[TranscriptSegment]:
    """Callback-style wrapper around :meth:`ChunkPipeline.run`.

    Returns the final transcript.

    Raises:
        TranscriptionJobError: The job ended with a terminal failure.
    """
    pipeline = ChunkPipeline(client, config)
    async for event in pipeline.run(source, cancel_event):
        if isinstance(event, StatusEvent):
            if on_status is not None:
                on_status(event.label)
        elif isinstance(event, TranscriptEvent):
            if on_transcript is not None:
                on_transcript(event.segments)
        elif isinstance(event, CompletedEvent):
            return event.segments
        else:
            raise TranscriptionJobError(event.message, event.details)

    raise TranscriptionJobError("Processing Failed", "Pipeline ended without a result")
