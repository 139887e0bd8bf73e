"""Congress.gov legislator importer.

Pulls member lists for a range of Congresses from the Congress.gov API and
upserts them into the PostgreSQL `legislators` table, keyed on bioguide_id.

Pipeline:
- ImportLock: one run per Congress range, via a row in `system_locks`
- MemberPaginator: offset pages of 250 until a short page
- RetryingFetcher: 3 attempts, exponential backoff with full jitter, 30s timeout
- BatchUpsertEngine: batches of 10 upserted concurrently, 0.5s pause between
- LegislatorImporter: walks the range newest first and aggregates results

Example usage:
    from legislator_importer import SessionRange, load_settings, open_importer

    async with open_importer(load_settings()) as importer:
        result = await importer.run(SessionRange(119, 117))
    print(result.to_dict())
"""

from .config import ImporterSettings, RetryPolicy, configure_logging, load_settings
from .exceptions import (
    ConfigurationError,
    FetchError,
    ImporterError,
    LockContentionError,
    RecordError,
)
from .fetcher import RetryingFetcher
from .lock import ImportLock
from .mapper import to_legislator_record
from .orchestrator import LegislatorImporter, open_importer
from .paginator import MemberPaginator
from .schema import ImportResult, ImportStatus, LegislatorRecord, RawMember, SessionRange
from .store import LegislatorStore, create_pool
from .upsert import BatchUpsertEngine, ReconcileOutcome

__all__ = [
    # Pipeline
    "LegislatorImporter",
    "open_importer",
    "ImportLock",
    "MemberPaginator",
    "RetryingFetcher",
    "BatchUpsertEngine",
    "LegislatorStore",
    "create_pool",
    "to_legislator_record",
    # Configuration
    "ImporterSettings",
    "RetryPolicy",
    "load_settings",
    "configure_logging",
    # Data classes
    "ImportResult",
    "ImportStatus",
    "LegislatorRecord",
    "RawMember",
    "ReconcileOutcome",
    "SessionRange",
    # Exceptions
    "ImporterError",
    "ConfigurationError",
    "FetchError",
    "LockContentionError",
    "RecordError",
]
