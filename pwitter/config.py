"""Configuration management."""

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import load_dotenv

from .sources.queries import DEFAULT_QUERY_IDS

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_env(env_path: Optional[Union[str, Path]] = None) -> bool:
    """Load a .env file if it exists.

    Args:
        env_path: Path to the file (default: .env in the working directory)

    Returns:
        True if a file was loaded
    """
    path = Path(env_path) if env_path else Path.cwd() / ".env"
    if path.exists():
        return load_dotenv(path)
    return False


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Install the default log format on the root logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """GraphQL client configuration from environment variables."""

    base_url: str = "https://twitter.com"
    request_timeout: float = 30.0
    backfill_workers: int = 1
    include_thread_participants: bool = False
    log_level: str = "INFO"
    query_ids: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_QUERY_IDS))

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables.

        Reads PWITTER_BASE_URL, PWITTER_REQUEST_TIMEOUT, PWITTER_BACKFILL_WORKERS,
        PWITTER_INCLUDE_THREAD_PARTICIPANTS, PWITTER_LOG_LEVEL and PWITTER_QUERY_IDS
        (a JSON object mapping operation name to query id).
        """
        load_env()

        try:
            request_timeout = float(os.getenv("PWITTER_REQUEST_TIMEOUT", "30"))
            backfill_workers = int(os.getenv("PWITTER_BACKFILL_WORKERS", "1"))
        except ValueError as e:
            raise ValueError(
                f"Invalid numeric setting: {e}\n"
                f"  - PWITTER_REQUEST_TIMEOUT must be a number of seconds\n"
                f"  - PWITTER_BACKFILL_WORKERS must be an integer"
            ) from e

        query_ids = dict(DEFAULT_QUERY_IDS)
        overrides = os.getenv("PWITTER_QUERY_IDS", "")
        if overrides:
            try:
                parsed = json.loads(overrides)
            except json.JSONDecodeError as e:
                raise ValueError(
                    f"Invalid JSON in PWITTER_QUERY_IDS: {e}\n"
                    f'  - Expected an object such as {{"TweetDetail": "<query id>"}}'
                ) from e
            if not isinstance(parsed, dict):
                raise ValueError("PWITTER_QUERY_IDS must be a JSON object")
            query_ids.update({str(k): str(v) for k, v in parsed.items()})

        return cls(
            base_url=os.getenv("PWITTER_BASE_URL", "https://twitter.com"),
            request_timeout=request_timeout,
            backfill_workers=backfill_workers,
            include_thread_participants=_env_bool("PWITTER_INCLUDE_THREAD_PARTICIPANTS", False),
            log_level=os.getenv("PWITTER_LOG_LEVEL", "INFO"),
            query_ids=query_ids,
        )

    def validate(self) -> None:
        """Validate configuration."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("PWITTER_BASE_URL must be an http(s) URL")
        if self.request_timeout <= 0:
            raise ValueError("PWITTER_REQUEST_TIMEOUT must be positive")
        if self.backfill_workers < 1:
            raise ValueError("PWITTER_BACKFILL_WORKERS must be at least 1")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown PWITTER_LOG_LEVEL: {self.log_level}")


@dataclass
class AuthConfig:
    """Guest session tokens from environment variables."""

    bearer_token: str
    guest_id: str
    guest_token: str
    csrf_token: str = ""

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Load tokens from PWITTER_BEARER_TOKEN, PWITTER_GUEST_ID, PWITTER_GUEST_TOKEN
        and the optional PWITTER_CSRF_TOKEN.
        """
        load_env()
        config = cls(
            bearer_token=os.getenv("PWITTER_BEARER_TOKEN", ""),
            guest_id=os.getenv("PWITTER_GUEST_ID", ""),
            guest_token=os.getenv("PWITTER_GUEST_TOKEN", ""),
            csrf_token=os.getenv("PWITTER_CSRF_TOKEN", ""),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration."""
        missing = [
            name
            for name, value in (
                ("PWITTER_BEARER_TOKEN", self.bearer_token),
                ("PWITTER_GUEST_ID", self.guest_id),
                ("PWITTER_GUEST_TOKEN", self.guest_token),
            )
            if not value
        ]
        if missing:
            raise ValueError(
                f"Guest session tokens missing: {', '.join(missing)}\n"
                f"  - Set them in the environment or in a .env file"
            )
