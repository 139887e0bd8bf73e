"""Exception hierarchy for the legislator importer."""

from dataclasses import dataclass, field


@dataclass
class ImporterError(Exception):
    """Base exception for legislator import errors."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigurationError(ImporterError):
    """Raised at startup when required settings are missing or invalid."""

    missing: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        if not self.missing:
            return self.message
        return f"{self.message}: {', '.join(self.missing)}"


@dataclass
class LockContentionError(ImporterError):
    """Raised when another import already holds the lock row."""

    lock_key: str

    def __str__(self) -> str:
        return f"Lock already held: {self.lock_key}\n{self.message}"


@dataclass
class FetchError(ImporterError):
    """Raised when an upstream request fails after all retry attempts."""

    url: str
    attempts: int
    status_code: int | None = None
    body: str | None = None

    def __str__(self) -> str:
        msg = f"Failed to fetch {self.url} after {self.attempts} attempts. {self.message}"
        if self.status_code is not None:
            msg += f" (status {self.status_code})"
        return msg


@dataclass
class RecordError(ImporterError):
    """Raised when a single member cannot be mapped or stored."""

    bioguide_id: str | None

    def __str__(self) -> str:
        return f"{self.bioguide_id or 'unknown'}: {self.message}"
