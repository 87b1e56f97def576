"""Source chain (L2) client.

Receipts from the source node already include the native ``l2ToL1Logs``
list, and inclusion proofs come from ``zks_getL2ToL1LogProof``.
"""

import logging

from interop.models import Block, LogProof, TransactionReceipt, to_int
from relayer.clients.rpc import JsonRpcClient

logger = logging.getLogger(__name__)


class SourceChainClient(JsonRpcClient):
    """Read-only client for the source ledger."""

    async def get_block_number(self) -> int:
        return to_int(await self.request("eth_blockNumber"))

    async def get_block(self, number: int) -> Block | None:
        data = await self.request("eth_getBlockByNumber", [hex(number), True])
        if data is None:
            return None
        return Block.model_validate(data)

    async def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        data = await self.request("eth_getTransactionReceipt", [tx_hash])
        if data is None:
            return None
        return TransactionReceipt.model_validate(data)

    async def get_log_proof(self, tx_hash: str, log_index: int) -> LogProof | None:
        data = await self.request("zks_getL2ToL1LogProof", [tx_hash, log_index])
        if not data:
            return None
        return LogProof.model_validate(data)
