"""Exception types raised by the transcription pipeline."""

from __future__ import annotations


class TranscriptionError(RuntimeError):
    """A single model request failed; recoverable at chunk granularity."""


class TranscriptionTimeoutError(TranscriptionError):
    """The model did not answer within the request timeout."""


class EmptyTranscriptionError(TranscriptionError):
    """The model answered with no text."""


class TranscriptionConfigError(RuntimeError):
    """The transcription client cannot be constructed (e.g. missing API key)."""


class TranscriptionJobError(RuntimeError):
    """A job ended with a terminal failure outside the per-chunk loop."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message if details is None else f"{message}: {details}")
        self.message = message
        self.details = details


class FileTooLargeError(ValueError):
    """The source file exceeds the maximum accepted size."""
