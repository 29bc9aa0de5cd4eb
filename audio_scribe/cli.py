"""Command-line transcription of a local audio/video file.

Run as a module::

    python -m audio_scribe.cli recording.mp3 --output recording.txt

Progress labels are logged as each chunk is processed. The transcript is
written in the ``[MM:SS] Speaker: Text`` form; chunks the model could not
transcribe appear as ``System`` lines rather than aborting the run.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from audio_scribe.config import settings
from audio_scribe.pipeline_config import MIB, PipelineConfig
from audio_scribe.transcription.chunking import MediaSource, ensure_within_size_limit
from audio_scribe.transcription.client import GeminiTranscriptionClient
from audio_scribe.transcription.errors import (
    FileTooLargeError,
    TranscriptionConfigError,
    TranscriptionJobError,
)
from audio_scribe.transcription.models import TranscriptSegment
from audio_scribe.transcription.parsers import format_transcript, transcript_filename
from audio_scribe.transcription.pipeline import transcribe_media

logger = logging.getLogger("audio_scribe.cli")


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="python -m audio_scribe.cli",
        description="Transcribe a large audio/video file in chunks with a Gemini model.",
    )
    parser.add_argument("file", type=Path, help="Audio or video file to transcribe.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        metavar="PATH",
        help="Where to write the transcript (default: transcript-<file name>.txt).",
    )
    parser.add_argument(
        "--media-type",
        default=None,
        help="Override the media type sent to the model (default: inferred from extension).",
    )
    parser.add_argument(
        "--chunk-size-mb",
        type=int,
        default=settings.chunk_size_mb,
        help=f"Maximum bytes per model request, in MiB (default: {settings.chunk_size_mb}).",
    )
    parser.add_argument(
        "--model",
        default=settings.gemini_model,
        help=f"Gemini model name (default: {settings.gemini_model}).",
    )
    return parser


def _log_snapshot(segments: list[TranscriptSegment]) -> None:
    if segments:
        last = segments[-1]
        logger.info("%d segment(s) so far, latest at %s", len(segments), last.timestamp)


async def _run(args: argparse.Namespace) -> int:
    config = dataclasses.replace(
        PipelineConfig.from_settings(settings),
        max_chunk_bytes=args.chunk_size_mb * MIB,
    )

    if not args.file.is_file():
        logger.error("File not found: %s", args.file)
        return 1

    try:
        ensure_within_size_limit(args.file.stat().st_size, config.max_file_bytes)
        client = GeminiTranscriptionClient(settings.gemini_api_key, args.model)
    except (FileTooLargeError, TranscriptionConfigError) as exc:
        logger.error("%s", exc)
        return 1

    source = MediaSource.from_path(args.file, declared_type=args.media_type)
    try:
        segments = await transcribe_media(
            source,
            client,
            config,
            on_status=lambda label: logger.info("%s", label),
            on_transcript=_log_snapshot,
        )
    except TranscriptionJobError as exc:
        logger.error("Transcription failed: %s", exc)
        return 1

    output = args.output or Path(transcript_filename(source.name))
    output.write_text(format_transcript(segments) + "\n", encoding="utf-8")
    logger.info("Wrote %d segment(s) to %s", len(segments), output)
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _build_arg_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
