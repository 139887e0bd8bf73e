"""Runtime configuration for the legislator importer.

Settings are read from the environment once, at process start, and passed
down explicitly. Nothing below the CLI or the API lifespan reads os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Final, TypeVar

from tenacity import wait_exponential, wait_random_exponential
from tenacity.wait import wait_base

from .exceptions import ConfigurationError
from .schema import BATCH_PAUSE_SECONDS, BATCH_SIZE, CONGRESS_API_URL, PAGE_SIZE

REQUIRED_ENV_VARS: Final[list[str]] = ["CONGRESS_API_KEY", "DATABASE_URL"]

JITTER_MODES: Final[tuple[str, ...]] = ("full", "none")

USER_AGENT: Final[str] = "legislator-importer/0.1.0"

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"

T = TypeVar("T", int, float)


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff settings for a single logical upstream request."""

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff_multiplier: float = 2.0
    jitter: str = "full"
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(message=f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.jitter not in JITTER_MODES:
            raise ConfigurationError(
                message=f"Unknown jitter mode {self.jitter!r}, expected one of {JITTER_MODES}"
            )

    def wait_strategy(self) -> wait_base:
        """
        Tenacity wait for the delay after each failed attempt.

        The ceiling after attempt n is base_delay * backoff_multiplier^(n-1);
        under full jitter the delay is drawn uniformly from [0, ceiling].
        """
        if self.jitter == "full":
            return wait_random_exponential(
                multiplier=self.base_delay, exp_base=self.backoff_multiplier
            )
        return wait_exponential(multiplier=self.base_delay, exp_base=self.backoff_multiplier)


@dataclass(frozen=True)
class ImporterSettings:
    """Immutable settings injected into the importer at construction."""

    congress_api_key: str
    database_url: str
    api_base_url: str = CONGRESS_API_URL
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    page_size: int = PAGE_SIZE
    batch_size: int = BATCH_SIZE
    batch_pause: float = BATCH_PAUSE_SECONDS
    user_agent: str = USER_AGENT

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        return (
            f"ImporterSettings(api_base_url={self.api_base_url!r}, "
            f"database={redact_database_url(self.database_url)!r}, "
            f"batch_size={self.batch_size}, page_size={self.page_size})"
        )


def redact_database_url(database_url: str) -> str:
    """Strip credentials from a connection URL for display."""
    return database_url.split("@")[-1] if "@" in database_url else database_url


def _parse_number(
    environ: Mapping[str, str], name: str, cast: Callable[[str], T], default: T
) -> T:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(message=f"Invalid value for {name}: {raw!r}") from e


def load_settings(environ: Mapping[str, str] | None = None) -> ImporterSettings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        ImporterSettings populated from the environment

    Raises:
        ConfigurationError: If a required variable is missing or a numeric
            variable cannot be parsed
    """
    environ = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        raise ConfigurationError(message="Missing required environment variables", missing=missing)

    retry = RetryPolicy(
        max_attempts=_parse_number(environ, "IMPORT_MAX_ATTEMPTS", int, 3),
        request_timeout=_parse_number(environ, "IMPORT_REQUEST_TIMEOUT", float, 30.0),
    )

    return ImporterSettings(
        congress_api_key=environ["CONGRESS_API_KEY"],
        database_url=environ["DATABASE_URL"],
        api_base_url=environ.get("CONGRESS_API_URL") or CONGRESS_API_URL,
        retry=retry,
        batch_size=_parse_number(environ, "IMPORT_BATCH_SIZE", int, BATCH_SIZE),
        batch_pause=_parse_number(environ, "IMPORT_BATCH_PAUSE", float, BATCH_PAUSE_SECONDS),
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging; LOG_LEVEL is used when no level is given."""
    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
