from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    gemini_api_key: str = ""  # Required for transcription; API returns 501 if absent

    # Model
    gemini_model: str = "gemini-2.5-flash"

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Pipeline tuning
    chunk_size_mb: int = 10
    max_file_size_mb: int = 2000
    request_timeout_seconds: float = 300.0
    duration_probe_timeout_seconds: float = 2.0
    inter_chunk_pause_seconds: float = 0.5
    ffprobe_path: str = "ffprobe"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
