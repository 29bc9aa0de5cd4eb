"""Boundary to the external transcription model.

The pipeline only depends on :class:`TranscriptionClient`: submit media bytes
plus an instruction, get generated text back or an exception.
:class:`GeminiTranscriptionClient` is the production implementation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from audio_scribe.transcription.errors import (
    EmptyTranscriptionError,
    TranscriptionConfigError,
    TranscriptionError,
    TranscriptionTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

TRANSCRIPT_INSTRUCTION = """\
Generate a verbatim transcript.

Output Rules:
1. Format: [MM:SS] Speaker: Text
2. No Markdown/JSON. No intro/outro.
3. ID speakers as "Speaker 1", "Speaker 2".
4. Note non-speech as [Music], [Silence].

Example:
[00:00] Speaker 1: Hello.
[00:05] Speaker 2: Hi there.
"""


class TranscriptionClient(Protocol):
    async def transcribe(self, data: bytes, mime_type: str, instruction: str) -> str:
        """Return the model's generated text for one chunk of media."""
        ...


class GeminiTranscriptionClient:
    """Send one inline media payload per request to a Gemini model."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL) -> None:
        if not api_key:
            raise TranscriptionConfigError(
                "Transcription requires GEMINI_API_KEY, which is not configured."
            )

        import google.generativeai as genai

        genai.configure(api_key=api_key)  # type: ignore[attr-defined]
        self.model_name = model_name
        self._model: Any = genai.GenerativeModel(model_name)  # type: ignore[attr-defined]

    async def transcribe(self, data: bytes, mime_type: str, instruction: str) -> str:
        logger.debug("Sending %d bytes (%s) to %s", len(data), mime_type, self.model_name)
        response = await self._model.generate_content_async(
            [instruction, {"mime_type": mime_type, "data": data}]
        )
        return _extract_text(response)


def _extract_text(response: Any) -> str:
    """Return the response text, or ``""`` when the model produced no text part.

    ``response.text`` raises ValueError for blocked or empty candidates.
    """
    try:
        return str(response.text or "")
    except ValueError:
        return ""


async def transcribe_with_timeout(
    client: TranscriptionClient,
    data: bytes,
    mime_type: str,
    instruction: str,
    timeout_seconds: float,
) -> str:
    """Call *client* under a hard timeout and normalise its failures.

    Raises:
        TranscriptionTimeoutError: No answer within *timeout_seconds*.
        EmptyTranscriptionError: The model answered with blank text.
        TranscriptionError: Any other failure from the client.
    """
    try:
        text = await asyncio.wait_for(
            client.transcribe(data, mime_type, instruction),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        raise TranscriptionTimeoutError(
            f"Model request timed out after {timeout_seconds:g}s"
        ) from exc
    except TranscriptionError:
        raise
    except Exception as exc:
        raise TranscriptionError(f"Model request failed: {exc}") from exc

    if not text or not text.strip():
        raise EmptyTranscriptionError("Model returned an empty transcript")
    return text
