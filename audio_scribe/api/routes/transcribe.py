"""Transcribe endpoints: upload a media file and get a speaker-labelled transcript."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import StreamingResponse

from audio_scribe.api.models import (
    SegmentModel,
    StatusMessage,
    TranscribeResponse,
    to_stream_message,
)
from audio_scribe.config import settings
from audio_scribe.pipeline_config import PipelineConfig, TranscriptionStatus
from audio_scribe.transcription.chunking import (
    MediaSource,
    chunk_count,
    ensure_within_size_limit,
)
from audio_scribe.transcription.client import GeminiTranscriptionClient, TranscriptionClient
from audio_scribe.transcription.errors import (
    FileTooLargeError,
    TranscriptionConfigError,
    TranscriptionJobError,
)
from audio_scribe.transcription.models import CompletedEvent, FailedEvent
from audio_scribe.transcription.parsers import format_transcript
from audio_scribe.transcription.pipeline import ChunkPipeline, transcribe_media

logger = logging.getLogger(__name__)

router = APIRouter()

# Uploads are copied to disk in blocks of this size so the whole file is never held in memory
SPOOL_BLOCK_BYTES = 1024 * 1024


def _pipeline_config() -> PipelineConfig:
    return PipelineConfig.from_settings(settings)


def _build_client() -> TranscriptionClient:
    """Construct the Gemini client, or 501 if transcription is not configured."""
    if not settings.gemini_api_key:
        raise HTTPException(
            status_code=501,
            detail="Transcription is not configured: GEMINI_API_KEY is not set.",
        )
    try:
        return GeminiTranscriptionClient(settings.gemini_api_key, settings.gemini_model)
    except TranscriptionConfigError as exc:
        raise HTTPException(status_code=501, detail=str(exc)) from exc


async def _spool_upload(file: UploadFile, max_bytes: int) -> Path:
    """Copy *file* to a temporary path, enforcing the size limit while copying.

    Raises:
        HTTPException(413): The upload exceeds *max_bytes*.
    """
    if file.size is not None:
        try:
            ensure_within_size_limit(file.size, max_bytes)
        except FileTooLargeError as exc:
            raise HTTPException(status_code=413, detail=str(exc)) from exc

    filename = file.filename or ""
    suffix = f".{filename.rsplit('.', 1)[-1]}" if "." in filename else ""
    tmp = tempfile.NamedTemporaryFile(prefix="audio-scribe-", suffix=suffix, delete=False)
    path = Path(tmp.name)
    written = 0
    try:
        with tmp:
            while block := await file.read(SPOOL_BLOCK_BYTES):
                written += len(block)
                ensure_within_size_limit(written, max_bytes)
                tmp.write(block)
    except FileTooLargeError as exc:
        path.unlink(missing_ok=True)
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path


def _media_source(path: Path, file: UploadFile) -> MediaSource:
    return MediaSource.from_path(path, declared_type=file.content_type, name=file.filename or path.name)


@router.post("/api/transcribe", response_model=TranscribeResponse)
async def transcribe(file: Annotated[UploadFile, File(...)]) -> TranscribeResponse:
    """Transcribe an uploaded audio/video file and return the full transcript.

    Chunks that the model fails on are kept as ``System`` placeholder lines;
    only a failure outside the per-chunk loop returns 502.
    """
    config = _pipeline_config()
    path = await _spool_upload(file, config.max_file_bytes)
    try:
        client = _build_client()
        source = _media_source(path, file)
        try:
            segments = await transcribe_media(source, client, config)
        except TranscriptionJobError as exc:
            raise HTTPException(
                status_code=502,
                detail=f"Transcription failed: {exc.details or exc.message}",
            ) from exc

        return TranscribeResponse(
            filename=source.name,
            media_type=source.media_type,
            num_chunks=chunk_count(source.size, config.max_chunk_bytes),
            segments=[SegmentModel.from_segment(s) for s in segments],
            text=format_transcript(segments),
        )
    finally:
        path.unlink(missing_ok=True)


@router.post("/api/transcribe/stream")
async def transcribe_stream(
    request: Request,
    file: Annotated[UploadFile, File(...)],
) -> StreamingResponse:
    """Transcribe an uploaded file, streaming progress as newline-delimited JSON.

    Emits ``status`` and ``transcript`` messages as chunks are processed, then
    exactly one terminal ``completed`` or ``failed`` message. If the client
    disconnects, the job stops before its next chunk.
    """
    config = _pipeline_config()
    path = await _spool_upload(file, config.max_file_bytes)
    try:
        client = _build_client()
        source = _media_source(path, file)
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    async def event_stream() -> AsyncIterator[str]:
        cancel_event = asyncio.Event()
        pipeline = ChunkPipeline(client, config)
        try:
            uploading = TranscriptionStatus.UPLOADING
            yield StatusMessage(label=uploading.value, status=uploading).model_dump_json() + "\n"
            async for event in pipeline.run(source, cancel_event):
                yield to_stream_message(event).model_dump_json() + "\n"
                if isinstance(event, (CompletedEvent, FailedEvent)):
                    break
                if await request.is_disconnected():
                    logger.info("Client disconnected; cancelling transcription of %s", source.name)
                    cancel_event.set()
        finally:
            path.unlink(missing_ok=True)

    return StreamingResponse(event_stream(), media_type="application/x-ndjson")
