"""End-to-end legislator import across a range of Congresses."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from .config import ImporterSettings
from .exceptions import LockContentionError
from .fetcher import RetryingFetcher
from .lock import ImportLock
from .paginator import MemberPaginator
from .schema import ImportResult, ImportStatus, SessionRange
from .store import LegislatorStore, create_pool
from .upsert import BatchUpsertEngine

logger = logging.getLogger(__name__)


class LegislatorImporter:
    """
    Runs one import: lock, walk sessions, reconcile, release.

    Member-level failures are collected and the run continues. A failure
    while paginating a session ends the run with status "error"; the lock is
    released on every path out of the run.
    """

    def __init__(
        self,
        lock: ImportLock,
        paginator: MemberPaginator,
        engine: BatchUpsertEngine,
        log: logging.Logger | None = None,
    ) -> None:
        self.lock = lock
        self.paginator = paginator
        self.engine = engine
        self.log = log or logger

    @property
    def store(self) -> LegislatorStore:
        return self.lock.store

    @classmethod
    def from_settings(
        cls,
        settings: ImporterSettings,
        store: LegislatorStore,
        client: httpx.AsyncClient,
        log: logging.Logger | None = None,
    ) -> LegislatorImporter:
        """Wire the pipeline components around an open store and HTTP client."""
        fetcher = RetryingFetcher(
            client,
            settings.retry,
            api_key=settings.congress_api_key,
            user_agent=settings.user_agent,
            log=log,
        )
        paginator = MemberPaginator(
            fetcher,
            base_url=settings.api_base_url,
            api_key=settings.congress_api_key,
            limit=settings.page_size,
            log=log,
        )
        engine = BatchUpsertEngine(
            store,
            batch_size=settings.batch_size,
            pause=settings.batch_pause,
            log=log,
        )
        return cls(ImportLock(store, log=log), paginator, engine, log=log)

    async def run(self, session_range: SessionRange) -> ImportResult:
        """
        Import legislators for every Congress in the range.

        Args:
            session_range: Congresses to import, walked in descending order

        Returns:
            ImportResult with status "locked", "success" or "error". A store
            failure while taking the lock is reported as "error".
        """
        lock_key = session_range.lock_key
        try:
            async with self.lock.hold(lock_key):
                return await self._import_sessions(session_range)
        except LockContentionError:
            return ImportResult.locked()
        except Exception as e:
            # Raised by acquire, e.g. the database is unreachable
            self.log.exception(
                f"Error acquiring lock {lock_key}: {e}", extra={"lock_key": lock_key}
            )
            return ImportResult.failed(str(e))

    async def _import_sessions(self, session_range: SessionRange) -> ImportResult:
        self.log.info(
            f"Starting legislator import for Congresses {session_range.start_congress} "
            f"down to {session_range.end_congress}",
            extra={"lock_key": session_range.lock_key},
        )
        imported = 0
        updated = 0
        errors: list[str] = []

        try:
            for congress in session_range.congresses():
                self.log.info(
                    f"Processing Congress {congress} for legislators", extra={"congress": congress}
                )
                members = await self.paginator.list_all(congress)
                outcome = await self.engine.reconcile(members, congress=congress)
                imported += outcome.inserted
                updated += outcome.updated
                errors.extend(outcome.errors)
        except Exception as e:
            self.log.exception(
                f"Legislator import failed: {e}", extra={"lock_key": session_range.lock_key}
            )
            return ImportResult.failed(str(e))

        result = ImportResult(
            status=ImportStatus.SUCCESS,
            imported=imported,
            updated=updated,
            errors=tuple(errors),
        )
        self.log.info(
            f"Import completed: {imported} imported, {updated} updated, {len(errors)} errors",
            extra={"imported": imported, "updated": updated, "error_count": len(errors)},
        )
        return result


@asynccontextmanager
async def open_importer(
    settings: ImporterSettings, log: logging.Logger | None = None
) -> AsyncIterator[LegislatorImporter]:
    """
    Open the connection pool and HTTP client, yield a wired importer, then close both.

    Example:
        >>> async with open_importer(load_settings()) as importer:
        ...     result = await importer.run(SessionRange(119, 118))
    """
    pool = create_pool(settings.database_url, max_size=max(settings.batch_size, 2))
    await pool.open()
    try:
        async with httpx.AsyncClient() as client:
            yield LegislatorImporter.from_settings(settings, LegislatorStore(pool), client, log=log)
    finally:
        await pool.close()
