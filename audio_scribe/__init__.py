"""Chunked, speaker-labelled transcription of large audio and video files."""
