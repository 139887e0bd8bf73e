"""Batched, concurrent reconciliation of members into the legislators table."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import RecordError
from .mapper import to_legislator_record
from .schema import BATCH_PAUSE_SECONDS, BATCH_SIZE, RawMember
from .store import LegislatorStore

logger = logging.getLogger(__name__)


class Outcome(Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class ReconcileOutcome:
    """Counters for one session's reconciliation."""

    inserted: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)


class BatchUpsertEngine:
    """Upserts members in fixed-size concurrent batches with a pause between them."""

    def __init__(
        self,
        store: LegislatorStore,
        *,
        batch_size: int = BATCH_SIZE,
        pause: float = BATCH_PAUSE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        log: logging.Logger | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.pause = pause
        self._sleep = sleep
        self.log = log or logger

    async def _reconcile_member(self, member: RawMember) -> tuple[Outcome, RecordError | None]:
        bioguide_id = member.get("bioguideId") if isinstance(member, dict) else None
        try:
            if not isinstance(member, dict):
                raise TypeError(f"member is {type(member).__name__}, expected an object")
            record = to_legislator_record(member)
            inserted = await self.store.upsert_legislator(record)
        except Exception as e:
            error = RecordError(message=str(e) or type(e).__name__, bioguide_id=bioguide_id)
            self.log.error(
                f"Error upserting legislator {error}",
                extra={"bioguide_id": bioguide_id, "error_type": type(e).__name__},
            )
            return Outcome.FAILED, error

        self.log.debug(
            f"Upserted legislator {record.full_name} ({bioguide_id})",
            extra={"bioguide_id": bioguide_id},
        )
        return (Outcome.INSERTED if inserted else Outcome.UPDATED), None

    async def reconcile(
        self, members: list[RawMember], congress: int | None = None
    ) -> ReconcileOutcome:
        """
        Upsert every member, isolating per-member failures.

        Batches run one after another; members inside a batch run
        concurrently. A failed member is recorded in `errors` as
        "<bioguideId>: <message>" and never stops the batch.

        Args:
            members: Raw members for one session
            congress: Congress number, used only for log context

        Returns:
            ReconcileOutcome with inserted/updated counts and error strings
        """
        outcome = ReconcileOutcome()
        total_batches = -(-len(members) // self.batch_size)

        for number, start in enumerate(range(0, len(members), self.batch_size), start=1):
            batch = members[start : start + self.batch_size]
            self.log.info(
                f"Processing batch {number} of {total_batches} for Congress {congress}",
                extra={"congress": congress, "batch": number, "batch_count": total_batches},
            )

            results = await asyncio.gather(*(self._reconcile_member(m) for m in batch))
            for result, error in results:
                if result is Outcome.INSERTED:
                    outcome.inserted += 1
                elif result is Outcome.UPDATED:
                    outcome.updated += 1
                else:
                    outcome.errors.append(str(error))

            await self._sleep(self.pause)

        return outcome
