"""
Runtime configuration.

Values come from the environment (optionally a ``.env`` file). Every field has
a default so the server and CLI start with no configuration at all.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from slidefetch.retry import RetryPolicy


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass
class Settings:
    """Configuration for the API server and the CLI."""

    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    public_base_url: Optional[str] = None   # Falls back to the request's base URL
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Storage
    downloads_dir: Path = Path("downloads")
    temp_dir: Path = Path("temp_slides")
    retention_seconds: float = 300.0

    # Fetching
    max_concurrent_fetches: int = 20
    fetch_timeout: float = 30.0
    fetch_attempts: int = 3
    fetch_backoff: float = 1.0

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables."""
        if dotenv:
            load_dotenv()

        origins = os.getenv("CORS_ORIGINS", "*")
        public_base_url = os.getenv("PUBLIC_BASE_URL") or None

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 4000),
            public_base_url=public_base_url.rstrip("/") if public_base_url else None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            downloads_dir=Path(os.getenv("DOWNLOADS_DIR", "downloads")),
            temp_dir=Path(os.getenv("TEMP_DIR", "temp_slides")),
            retention_seconds=_env_float("RETENTION_SECONDS", 300.0),
            max_concurrent_fetches=_env_int("MAX_CONCURRENT_FETCHES", 20),
            fetch_timeout=_env_float("FETCH_TIMEOUT", 30.0),
            fetch_attempts=_env_int("FETCH_ATTEMPTS", 3),
            fetch_backoff=_env_float("FETCH_BACKOFF", 1.0),
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.fetch_attempts, base_delay=self.fetch_backoff)
