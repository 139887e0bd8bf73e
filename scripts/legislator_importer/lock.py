"""Store-backed advisory lock for import runs."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from .exceptions import LockContentionError
from .store import LegislatorStore

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER = timedelta(minutes=10)


class ImportLock:
    """
    Advisory lock backed by a row in system_locks.

    The row's presence is the lock. Acquisition is a single conditional insert
    against the unique lock_key, so two racing runs cannot both win.
    """

    def __init__(self, store: LegislatorStore, log: logging.Logger | None = None) -> None:
        self.store = store
        self.log = log or logger

    async def acquire(self, lock_key: str) -> bool:
        acquired = await self.store.try_insert_lock(lock_key)
        if acquired:
            self.log.info(f"Lock acquired: {lock_key}", extra={"lock_key": lock_key})
        else:
            self.log.info(
                f"Another import process is running: {lock_key}", extra={"lock_key": lock_key}
            )
        return acquired

    async def release(self, lock_key: str) -> None:
        """Delete the lock row. Failures are logged, never raised."""
        try:
            await self.store.delete_lock(lock_key)
        except Exception:
            self.log.exception(f"Error releasing lock: {lock_key}", extra={"lock_key": lock_key})
        else:
            self.log.info(f"Lock released: {lock_key}", extra={"lock_key": lock_key})

    @asynccontextmanager
    async def hold(self, lock_key: str) -> AsyncIterator[None]:
        """
        Hold the lock for the duration of the block.

        Raises:
            LockContentionError: If the lock is already held
        """
        if not await self.acquire(lock_key):
            raise LockContentionError(message="Another import is in progress", lock_key=lock_key)
        try:
            yield
        finally:
            await self.release(lock_key)

    async def clear_stale(self, older_than: timedelta = DEFAULT_STALE_AFTER) -> list[str]:
        """Remove locks left behind by runs that died without releasing."""
        cleared = await self.store.delete_stale_locks(older_than)
        self.log.info(f"Cleaned up {len(cleared)} stale locks", extra={"lock_keys": cleared})
        return cleared
