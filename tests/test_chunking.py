"""Tests for media type resolution and byte-range chunking."""

from __future__ import annotations

import math

import pytest

from audio_scribe.transcription.chunking import (
    MediaSource,
    chunk_count,
    chunk_ranges,
    ensure_within_size_limit,
    iter_chunks,
    read_chunk,
    resolve_media_type,
)
from audio_scribe.transcription.errors import FileTooLargeError


class TestResolveMediaType:
    def test_declared_type_wins(self) -> None:
        assert resolve_media_type("audio/ogg", "talk.mp3") == "audio/ogg"

    def test_generic_type_falls_back_to_extension(self) -> None:
        assert resolve_media_type("application/octet-stream", "talk.mov") == "video/quicktime"

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("a.mp3", "audio/mpeg"),
            ("a.wav", "audio/wav"),
            ("a.M4A", "audio/mp4"),
            ("a.aac", "audio/aac"),
            ("a.mp4", "video/mp4"),
            ("a.mov", "video/quicktime"),
            ("a.webm", "video/webm"),
        ],
    )
    def test_extension_table(self, filename: str, expected: str) -> None:
        assert resolve_media_type(None, filename) == expected

    def test_unknown_extension_defaults(self) -> None:
        assert resolve_media_type("", "notes.flac") == "audio/mp3"

    def test_no_name_defaults(self) -> None:
        assert resolve_media_type(None, None) == "audio/mp3"

    def test_no_extension_defaults(self) -> None:
        assert resolve_media_type(None, "recording") == "audio/mp3"


class TestChunkRanges:
    @pytest.mark.parametrize(
        ("size", "chunk"),
        [(1, 1), (1, 10), (10, 10), (11, 10), (99, 10), (1000, 7), (10 * 1024 * 1024 + 1, 1024 * 1024)],
    )
    def test_partition_covers_file(self, size: int, chunk: int) -> None:
        chunks = list(chunk_ranges(size, chunk))
        assert len(chunks) == math.ceil(size / chunk) == chunk_count(size, chunk)
        assert chunks[0].start == 0
        assert chunks[-1].end == size
        for prev, nxt in zip(chunks, chunks[1:]):
            assert prev.end == nxt.start
        assert all(0 < c.size <= chunk for c in chunks)
        assert [c.index for c in chunks] == list(range(len(chunks)))

    def test_empty_file_has_no_chunks(self) -> None:
        assert list(chunk_ranges(0, 10)) == []

    def test_invalid_chunk_size(self) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            chunk_count(10, 0)

    def test_media_type_carried(self) -> None:
        chunks = list(chunk_ranges(25, 10, "video/mp4"))
        assert {c.media_type for c in chunks} == {"video/mp4"}


class TestMediaSource:
    def test_from_path(self, make_media_file) -> None:
        path = make_media_file(250, name="clip.webm")
        source = MediaSource.from_path(path)
        assert source.size == 250
        assert source.name == "clip.webm"
        assert source.media_type == "video/webm"

    def test_name_override_used_for_type(self, make_media_file) -> None:
        path = make_media_file(10, name="upload.tmp")
        source = MediaSource.from_path(path, name="talk.wav")
        assert source.media_type == "audio/wav"

    def test_read_chunk_returns_exact_slice(self, make_media_file) -> None:
        path = make_media_file(250)
        source = MediaSource.from_path(path)
        raw = path.read_bytes()
        pieces = [read_chunk(source, c) for c in iter_chunks(source, 100)]
        assert [len(p) for p in pieces] == [100, 100, 50]
        assert b"".join(pieces) == raw

    def test_read_chunk_short_read(self, make_media_file) -> None:
        path = make_media_file(250)
        source = MediaSource.from_path(path)
        path.write_bytes(b"x" * 120)  # truncated after sizing
        last = list(iter_chunks(source, 100))[-1]
        with pytest.raises(OSError, match="Short read"):
            read_chunk(source, last)


class TestSizeLimit:
    def test_within_limit(self) -> None:
        ensure_within_size_limit(2000 * 1024 * 1024, 2000 * 1024 * 1024)

    def test_over_limit(self) -> None:
        with pytest.raises(FileTooLargeError, match="Maximum size is 2000 MB"):
            ensure_within_size_limit(2000 * 1024 * 1024 + 1, 2000 * 1024 * 1024)
