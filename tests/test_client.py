"""Tests for the transcription client boundary (no live Gemini calls)."""

from __future__ import annotations

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from audio_scribe.transcription.client import (
    TRANSCRIPT_INSTRUCTION,
    GeminiTranscriptionClient,
    _extract_text,
    transcribe_with_timeout,
)
from audio_scribe.transcription.errors import (
    EmptyTranscriptionError,
    TranscriptionConfigError,
    TranscriptionError,
    TranscriptionTimeoutError,
)


class TestTranscribeWithTimeout:
    @pytest.mark.asyncio
    async def test_returns_text(self, scripted_client) -> None:
        client = scripted_client(["[00:00] Speaker 1: Hello."])
        text = await transcribe_with_timeout(client, b"abc", "audio/mpeg", "instr", 1.0)
        assert text == "[00:00] Speaker 1: Hello."
        assert client.calls == [(b"abc", "audio/mpeg", "instr")]

    @pytest.mark.asyncio
    async def test_timeout(self, scripted_client) -> None:
        client = scripted_client([scripted_client.HANG])
        with pytest.raises(TranscriptionTimeoutError, match="timed out"):
            await transcribe_with_timeout(client, b"abc", "audio/mpeg", "instr", 0.01)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n"])
    async def test_empty_response(self, scripted_client, text: str) -> None:
        client = scripted_client([text])
        with pytest.raises(EmptyTranscriptionError):
            await transcribe_with_timeout(client, b"abc", "audio/mpeg", "instr", 1.0)

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self, scripted_client) -> None:
        client = scripted_client([ConnectionError("connection reset")])
        with pytest.raises(TranscriptionError, match="connection reset") as exc_info:
            await transcribe_with_timeout(client, b"abc", "audio/mpeg", "instr", 1.0)
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestGeminiTranscriptionClient:
    def test_missing_api_key_is_fatal(self) -> None:
        with pytest.raises(TranscriptionConfigError, match="GEMINI_API_KEY"):
            GeminiTranscriptionClient("")

    @pytest.mark.asyncio
    async def test_sends_instruction_and_inline_media(self) -> None:
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock(
            return_value=SimpleNamespace(text="[00:00] Speaker 1: Hi.")
        )
        with (
            patch("google.generativeai.configure") as mock_configure,
            patch("google.generativeai.GenerativeModel", return_value=mock_model) as mock_cls,
        ):
            client = GeminiTranscriptionClient("fake-key", "gemini-test")
            text = await client.transcribe(b"\x00\x01", "audio/wav", TRANSCRIPT_INSTRUCTION)

        mock_configure.assert_called_once_with(api_key="fake-key")
        mock_cls.assert_called_once_with("gemini-test")
        contents = mock_model.generate_content_async.call_args.args[0]
        assert contents == [TRANSCRIPT_INSTRUCTION, {"mime_type": "audio/wav", "data": b"\x00\x01"}]
        assert text == "[00:00] Speaker 1: Hi."


class TestExtractText:
    def test_blocked_response_is_empty(self) -> None:
        class _Blocked:
            @property
            def text(self) -> str:
                raise ValueError("no valid parts")

        assert _extract_text(_Blocked()) == ""

    def test_none_text_is_empty(self) -> None:
        assert _extract_text(SimpleNamespace(text=None)) == ""


def test_instruction_describes_format() -> None:
    assert "[MM:SS] Speaker: Text" in TRANSCRIPT_INSTRUCTION
    assert '"Speaker 1"' in TRANSCRIPT_INSTRUCTION
    assert "[Music]" in TRANSCRIPT_INSTRUCTION


# --- Expensive test (live Gemini API call) ---
# Run manually with: pytest tests/test_client.py -m expensive


@pytest.mark.expensive
@pytest.mark.asyncio
async def test_live_gemini_transcription() -> None:
    """Transcribe a real sample with Gemini.

    Requires GEMINI_API_KEY and AUDIO_SCRIBE_SAMPLE pointing at a short audio file.
    """
    api_key = os.getenv("GEMINI_API_KEY", "")
    sample = os.getenv("AUDIO_SCRIBE_SAMPLE", "")
    if not api_key or not sample:
        pytest.skip("GEMINI_API_KEY and AUDIO_SCRIBE_SAMPLE are required")

    with open(sample, "rb") as fh:
        data = fh.read()
    client = GeminiTranscriptionClient(api_key)
    text = await transcribe_with_timeout(client, data, "audio/mpeg", TRANSCRIPT_INSTRUCTION, 300)
    assert "Speaker" in text
