"""Byte-range chunking of large media files."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from audio_scribe.transcription.errors import FileTooLargeError
from audio_scribe.transcription.models import Chunk

GENERIC_MEDIA_TYPE = "application/octet-stream"
DEFAULT_MEDIA_TYPE = "audio/mp3"

EXTENSION_MEDIA_TYPES: dict[str, str] = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
}


def resolve_media_type(declared_type: str | None, filename: str | None) -> str:
    """Pick the media type sent to the model for a file and all of its chunks.

    A specific declared type wins. Otherwise the type is inferred from the
    file-name extension, falling back to ``audio/mp3``.
    """
    if declared_type and declared_type.strip().lower() != GENERIC_MEDIA_TYPE:
        return declared_type.strip()
    if not filename or "." not in filename:
        return DEFAULT_MEDIA_TYPE
    ext = filename.rsplit(".", 1)[-1].lower()
    return EXTENSION_MEDIA_TYPES.get(ext, DEFAULT_MEDIA_TYPE)


def ensure_within_size_limit(size: int, max_bytes: int) -> None:
    """Reject files above *max_bytes* before any processing starts."""
    if size > max_bytes:
        raise FileTooLargeError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB."
        )


@dataclass(frozen=True)
class MediaSource:
    """A media file on disk, read lazily one chunk at a time."""

    path: Path
    name: str
    size: int
    media_type: str

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        declared_type: str | None = None,
        name: str | None = None,
    ) -> MediaSource:
        path = Path(path)
        name = name or path.name
        return cls(
            path=path,
            name=name,
            size=path.stat().st_size,
            media_type=resolve_media_type(declared_type, name),
        )


def chunk_count(file_size: int, max_chunk_bytes: int) -> int:
    """Number of chunks needed to cover *file_size* bytes: ``ceil(N / C)``."""
    if max_chunk_bytes <= 0:
        msg = f"max_chunk_bytes must be positive, got {max_chunk_bytes}"
        raise ValueError(msg)
    return math.ceil(file_size / max_chunk_bytes)


def chunk_ranges(
    file_size: int,
    max_chunk_bytes: int,
    media_type: str = DEFAULT_MEDIA_TYPE,
) -> Iterator[Chunk]:
    """Yield contiguous, non-overlapping chunks covering ``[0, file_size)``.

    Chunks are produced lazily in index order; nothing is read from disk.
    """
    for index in range(chunk_count(file_size, max_chunk_bytes)):
        start = index * max_chunk_bytes
        end = min(start + max_chunk_bytes, file_size)
        yield Chunk(index=index, start=start, end=end, media_type=media_type)


def iter_chunks(source: MediaSource, max_chunk_bytes: int) -> Iterator[Chunk]:
    return chunk_ranges(source.size, max_chunk_bytes, source.media_type)


def read_chunk(source: MediaSource, chunk: Chunk) -> bytes:
    """Materialise the bytes of a single chunk."""
    with source.path.open("rb") as fh:
        fh.seek(chunk.start)
        data = fh.read(chunk.size)
    if len(data) != chunk.size:
        msg = (
            f"Short read for chunk {chunk.index} of {source.name}: "
            f"expected {chunk.size} bytes, got {len(data)}"
        )
        raise OSError(msg)
    return data
