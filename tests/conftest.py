"""Shared fixtures: a scripted transcription client and small media files."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from audio_scribe.pipeline_config import PipelineConfig


class ScriptedTranscriptionClient:
    """Fake model returning canned output per request, in call order.

    Each script entry is either the text to return, an exception instance to
    raise, or the string ``"<hang>"`` to block until the request times out.
    """

    HANG = "<hang>"

    def __init__(self, script: list[str | Exception]) -> None:
        self.script = list(script)
        self.calls: list[tuple[bytes, str, str]] = []

    async def transcribe(self, data: bytes, mime_type: str, instruction: str) -> str:
        index = len(self.calls)
        self.calls.append((data, mime_type, instruction))
        entry = self.script[index]
        if isinstance(entry, Exception):
            raise entry
        if entry == self.HANG:
            await asyncio.sleep(60)
        return entry


@pytest.fixture
def scripted_client() -> Callable[[list[str | Exception]], ScriptedTranscriptionClient]:
    return ScriptedTranscriptionClient


@pytest.fixture
def fast_config() -> PipelineConfig:
    """100-byte chunks, no pause between chunks, short request timeout."""
    return PipelineConfig(
        max_chunk_bytes=100,
        request_timeout_seconds=0.05,
        duration_probe_timeout_seconds=0.05,
        inter_chunk_pause_seconds=0,
    )


@pytest.fixture
def make_media_file(tmp_path: Path) -> Callable[..., Path]:
    def _make(size: int, name: str = "meeting.mp3") -> Path:
        path = tmp_path / name
        path.write_bytes(bytes(i % 256 for i in range(size)))
        return path

    return _make
