"""Source-chain block scanner.

Walks every block after the persisted cursor up to the current head, picks
the executor's transactions that emitted an interop-center message and
queues them. Scanning is sequential: one block, one transaction, one
receipt fetch at a time.
"""

import logging

from interop.errors import RpcError
from interop.gateway import SourceChain
from interop.logs import has_log_from, normalize_address
from interop.metadata import extract_metadata
from interop.models import TransactionReceipt
from relayer.models import PendingItem, ScanState
from relayer.storage import Store

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_LOOKBACK = 5


class Scanner:
    """Finds new interop transactions and enqueues them."""

    def __init__(
        self,
        source: SourceChain,
        store: Store,
        *,
        executor_address: str,
        interop_center: str,
        initial_lookback: int = DEFAULT_INITIAL_LOOKBACK,
    ):
        self.source = source
        self.store = store
        self.executor_address = normalize_address(executor_address)
        self.interop_center = interop_center
        self.initial_lookback = initial_lookback

    def _start_block(self, state: ScanState, head: int) -> int:
        if state.last_block > 0:
            return state.last_block + 1
        # Cold start: only look at the most recent blocks, never from genesis
        return max(head - self.initial_lookback, 0)

    async def _fetch_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        try:
            return await self.source.get_receipt(tx_hash)
        except Exception as e:
            logger.debug(f"Skipping {tx_hash}: receipt unavailable ({e})")
            return None

    async def scan_new_blocks(self) -> int:
        """Scan new blocks and return the number of newly queued transactions.

        Errors fetching the head or a block propagate without moving the
        cursor, so the same range is scanned again next pass.
        """
        state = self.store.load_scan_state()
        head = await self.source.get_block_number()
        start = self._start_block(state, head)

        if start > head:
            return 0

        logger.info(f"Scanning source blocks {start}..{head}")
        candidates: list[PendingItem] = []

        for number in range(start, head + 1):
            block = await self.source.get_block(number)
            if block is None:
                raise RpcError(f"Source block {number} not available")

            for tx in block.transactions:
                if normalize_address(tx.sender) != self.executor_address:
                    continue

                receipt = await self._fetch_receipt(tx.hash)
                if receipt is None or not has_log_from(receipt.l2_to_l1_logs, self.interop_center):
                    continue

                metadata = extract_metadata(receipt, self.interop_center)
                logger.info(
                    f"Interop message in block {number}: {tx.hash} "
                    f"({metadata.action.value} {metadata.amount})"
                )
                candidates.append(PendingItem.from_metadata(tx.hash, metadata))

        added = self.store.enqueue(candidates) if candidates else 0
        self.store.save_scan_state(ScanState(last_block=max(head, state.last_block)))

        if added:
            logger.info(f"Queued {added} new transaction(s) from blocks {start}..{head}")
        return added
