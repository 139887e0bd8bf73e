"""Schema definitions for the Congress.gov legislator import."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Final, TypedDict

# =============================================================================
# SOURCE CONFIGURATION
# =============================================================================

CONGRESS_API_URL: Final[str] = "https://api.congress.gov/v3"

# Congress.gov caps the member endpoint at 250 rows per request
PAGE_SIZE: Final[int] = 250

DEFAULT_START_CONGRESS: Final[int] = 119
DEFAULT_END_CONGRESS: Final[int] = 100

# =============================================================================
# RECONCILIATION SETTINGS
# =============================================================================

BATCH_SIZE: Final[int] = 10
BATCH_PAUSE_SECONDS: Final[float] = 0.5

LOCK_KEY_PREFIX: Final[str] = "import_legislators"

# =============================================================================
# UPSTREAM SHAPE
# =============================================================================
# Every field is optional: Congress.gov omits keys freely, especially for
# historical members.


class RawParty(TypedDict, total=False):
    partyName: str
    partyAbbreviation: str
    startYear: int


class RawTerm(TypedDict, total=False):
    chamber: str
    start: str
    end: str


class RawDepiction(TypedDict, total=False):
    imageUrl: str
    attribution: str


class RawMember(TypedDict, total=False):
    bioguideId: str
    fullName: str
    firstName: str
    lastName: str
    partyHistory: list[RawParty]
    state: str
    terms: list[RawTerm] | dict[str, list[RawTerm]]
    url: str
    depiction: RawDepiction


class RawMemberPage(TypedDict, total=False):
    members: list[RawMember]


# =============================================================================
# STORAGE SCHEMA
# =============================================================================


@dataclass(frozen=True)
class LegislatorRecord:
    """One row of the legislators table, keyed by bioguide_id."""

    bioguide_id: str | None
    full_name: str | None
    first_name: str | None
    last_name: str | None
    party: str | None
    state: str | None
    chamber: str | None
    congress_start_date: str | None
    congress_end_date: str | None
    url: str | None
    image_url: str | None
    last_updated: datetime

    def as_params(self) -> dict[str, Any]:
        """Return the record as named query parameters."""
        return asdict(self)


LEGISLATOR_COLUMNS: Final[list[str]] = [
    "bioguide_id",
    "full_name",
    "first_name",
    "last_name",
    "party",
    "state",
    "chamber",
    "congress_start_date",
    "congress_end_date",
    "url",
    "image_url",
    "last_updated",
]

CREATE_LEGISLATORS_TABLE = """
CREATE TABLE IF NOT EXISTS legislators (
    id BIGSERIAL PRIMARY KEY,
    bioguide_id TEXT UNIQUE NOT NULL,
    full_name TEXT NOT NULL,
    first_name TEXT,
    last_name TEXT,
    party TEXT,
    state TEXT,
    chamber TEXT,
    congress_start_date DATE,
    congress_end_date DATE,
    url TEXT,
    image_url TEXT,
    last_updated TIMESTAMPTZ DEFAULT NOW()
)
"""

CREATE_SYSTEM_LOCKS_TABLE = """
CREATE TABLE IF NOT EXISTS system_locks (
    id BIGSERIAL PRIMARY KEY,
    lock_key TEXT NOT NULL UNIQUE,
    locked_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_legislators_state ON legislators (state)",
    "CREATE INDEX IF NOT EXISTS idx_legislators_party ON legislators (party)",
    "CREATE INDEX IF NOT EXISTS idx_system_locks_locked_at ON system_locks (locked_at)",
]

# xmax is zero only for a row version created by this statement, so the
# upsert itself reports insert vs. update without a second query.
UPSERT_LEGISLATOR = f"""
INSERT INTO legislators ({", ".join(LEGISLATOR_COLUMNS)})
VALUES ({", ".join(f"%({col})s" for col in LEGISLATOR_COLUMNS)})
ON CONFLICT (bioguide_id) DO UPDATE SET
    {", ".join(f"{col} = EXCLUDED.{col}" for col in LEGISLATOR_COLUMNS[1:])}
RETURNING (xmax = 0) AS inserted
"""

ACQUIRE_LOCK = """
INSERT INTO system_locks (lock_key)
VALUES (%s)
ON CONFLICT (lock_key) DO NOTHING
RETURNING lock_key
"""

RELEASE_LOCK = "DELETE FROM system_locks WHERE lock_key = %s"

CLEAR_STALE_LOCKS = """
DELETE FROM system_locks
WHERE locked_at < NOW() - %s
RETURNING lock_key
"""

# =============================================================================
# RUN TYPES
# =============================================================================


@dataclass(frozen=True)
class SessionRange:
    """Inclusive range of Congresses, walked from start down to end."""

    start_congress: int = DEFAULT_START_CONGRESS
    end_congress: int = DEFAULT_END_CONGRESS

    def __post_init__(self) -> None:
        if self.end_congress < 1:
            raise ValueError(f"Congress numbers must be positive, got {self.end_congress}")
        if self.start_congress < self.end_congress:
            raise ValueError(
                f"startCongress ({self.start_congress}) must be >= "
                f"endCongress ({self.end_congress})"
            )

    @property
    def lock_key(self) -> str:
        return f"{LOCK_KEY_PREFIX}_{self.start_congress}_{self.end_congress}"

    def congresses(self) -> list[int]:
        """Congress numbers in processing order (descending)."""
        return list(range(self.start_congress, self.end_congress - 1, -1))


class ImportStatus(Enum):
    """Terminal states of an import run."""

    LOCKED = "locked"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one import run, returned to the caller."""

    status: ImportStatus
    imported: int = 0
    updated: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)
    message: str | None = None

    @classmethod
    def locked(cls) -> ImportResult:
        return cls(status=ImportStatus.LOCKED)

    @classmethod
    def failed(cls, message: str) -> ImportResult:
        return cls(status=ImportStatus.ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON body; an empty error list is omitted."""
        if self.status is ImportStatus.LOCKED:
            return {"status": self.status.value}
        if self.status is ImportStatus.ERROR:
            return {"status": self.status.value, "message": self.message}

        body: dict[str, Any] = {
            "status": self.status.value,
            "imported": self.imported,
            "updated": self.updated,
        }
        if self.errors:
            body["errors"] = list(self.errors)
        return body
