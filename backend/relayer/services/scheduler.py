"""Queue processing loop.

One pass scans for new transactions and then finalizes every pending item
sequentially. Passes never overlap: the next pass starts ``poll_interval``
seconds after the previous one started, or right away when a pass overran.
Pending and finalized documents are written once, at the end of a pass;
a crash mid-pass simply repeats the work next run.
"""

import asyncio
import logging
from dataclasses import dataclass

from interop.models import UNKNOWN_METADATA, TxMetadata
from relayer.models import FinalizedItem, FinalizeResult, PendingItem, utcnow
from relayer.services.finalizer import Finalizer
from relayer.services.scanner import Scanner
from relayer.storage import Store

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_ITEM_DELAY = 1.0


@dataclass
class PassSummary:
    """Counters for one queue pass."""

    queued: int = 0
    finalized: int = 0
    retrying: int = 0
    dropped: int = 0
    errors: int = 0


class Scheduler:
    """Runs scan + finalize passes forever on a fixed cadence."""

    def __init__(
        self,
        store: Store,
        scanner: Scanner,
        finalizer: Finalizer,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        item_delay: float = DEFAULT_ITEM_DELAY,
        permanent_failure_retries: int = 0,
    ):
        self.store = store
        self.scanner = scanner
        self.finalizer = finalizer
        self.poll_interval = poll_interval
        self.item_delay = item_delay
        self.permanent_failure_retries = permanent_failure_retries

    async def run_forever(self) -> None:
        """Run a pass immediately, then every poll_interval seconds."""
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.run_pass()
            except Exception as e:
                logger.exception(f"Queue pass failed: {e}")
            delay = self.poll_interval - (loop.time() - started)
            await asyncio.sleep(max(delay, 0.0))

    async def run_pass(self) -> PassSummary:
        summary = PassSummary()
        logger.info("Processing queue...")

        try:
            summary.queued = await self.scanner.scan_new_blocks()
        except Exception as e:
            # Cursor was not advanced; the same range is retried next pass
            logger.error(f"Block scan failed: {e}")

        finalized = self.store.load_finalized()
        loaded = self.store.load_pending()
        pending = self._reconcile(loaded, finalized)

        if not pending:
            if loaded:
                self.store.save_pending(pending)
            logger.info("No pending transactions to process")
            return summary

        logger.info(f"Found {len(pending)} pending transaction(s)")
        still_pending: list[PendingItem] = []

        for item in pending:
            kept = await self._process(item, finalized, summary)
            if kept is not None:
                still_pending.append(kept)
            await asyncio.sleep(self.item_delay)

        # History first: a crash in between leaves a duplicate that the next
        # pass reconciles, never a lost item.
        self.store.save_finalized(finalized)
        self.store.save_pending(still_pending)

        logger.info(
            f"Queue updated: {len(still_pending)} remaining "
            f"({summary.finalized} finalized, {summary.dropped} dropped)"
        )
        return summary

    def _reconcile(self, pending: list[PendingItem], finalized: list[FinalizedItem]) -> list[PendingItem]:
        """Drop duplicate and already-finalized entries from the queue."""
        seen = {item.source_hash.lower() for item in finalized}
        result = []
        for item in pending:
            key = item.hash.lower()
            if key in seen:
                logger.info(f"Skipping {item.hash}: already finalized or duplicated in queue")
                continue
            seen.add(key)
            result.append(item)
        return result

    async def _backfill(self, item: PendingItem) -> PendingItem:
        """Fill in action/amount for hand-added entries."""
        try:
            metadata = await self.finalizer.describe(item.hash)
        except Exception as e:
            logger.warning(f"Could not classify {item.hash}: {e}")
            metadata = UNKNOWN_METADATA
        metadata = TxMetadata(
            action=item.action or metadata.action,
            amount=item.amount or metadata.amount,
        )
        logger.info(f"Backfilled metadata for {item.hash}: {metadata.action.value} {metadata.amount}")
        return item.model_copy(update={"action": metadata.action, "amount": metadata.amount})

    async def _process(
        self,
        item: PendingItem,
        finalized: list[FinalizedItem],
        summary: PassSummary,
    ) -> PendingItem | None:
        """Finalize one item; returns the updated item if it stays queued."""
        if item.needs_metadata:
            item = await self._backfill(item)

        try:
            result = await self.finalizer.finalize(item.hash)
        except Exception as e:
            logger.error(f"Error finalizing {item.hash}, will retry: {e}")
            summary.errors += 1
            return item.model_copy(update={
                "failure_count": item.failure_count + 1,
                "last_error": str(e),
                "updated_at": utcnow(),
            })

        if result.success:
            logger.info(f"Removed from queue: {item.hash} ({result.reason.value})")
            finalized.insert(0, self._to_finalized(item, result))
            summary.finalized += 1
            return None

        if result.retryable:
            logger.info(f"Still pending: {item.hash} ({result.reason.value})")
            summary.retrying += 1
            return item.model_copy(update={
                "last_finalize_hash": result.destination_hash or item.last_finalize_hash,
                "updated_at": utcnow(),
            })

        failures = item.failure_count + 1
        if failures <= self.permanent_failure_retries:
            logger.warning(
                f"Failed: {item.hash} ({result.reason.value}), "
                f"attempt {failures}/{self.permanent_failure_retries + 1}"
            )
            summary.retrying += 1
            return item.model_copy(update={
                "failure_count": failures,
                "last_error": result.reason.value,
                "last_finalize_hash": result.destination_hash or item.last_finalize_hash,
                "updated_at": utcnow(),
            })

        logger.error(f"Failed permanently: {item.hash} ({result.reason.value})")
        summary.dropped += 1
        return None

    @staticmethod
    def _to_finalized(item: PendingItem, result: FinalizeResult) -> FinalizedItem:
        return FinalizedItem(
            source_hash=item.hash,
            destination_hash=result.destination_hash,
            finalized_at=utcnow(),
            action=item.action or UNKNOWN_METADATA.action,
            amount=item.amount or UNKNOWN_METADATA.amount,
            reason=result.reason.value,
        )
