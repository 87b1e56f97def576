"""Base-asset withdrawal finalization.

A base-asset withdrawal shares the cross-layer log mechanism with interop
messages, so it has to be finalized on the destination chain before the
interop message of the same transaction can be processed. The phase is
derived from proof availability and the L1 nullifier's
``isWithdrawalFinalized`` flag; finalization calls the nullifier's
``finalizeDeposit`` with the same parameter struct the interop handler uses.
"""

import asyncio
import logging

from interop.calldata import (
    build_finalize_params,
    decode_bool,
    encode_finalize_deposit,
    encode_is_withdrawal_finalized,
)
from interop.errors import BridgeWithdrawalError, ConfigurationError, is_proof_not_ready
from interop.gateway import DestinationChain, SourceChain
from interop.logs import find_log_index
from interop.models import L2ToL1Log, LogProof, TransactionReceipt, WithdrawalPhase
from interop.payload import locate_message

logger = logging.getLogger(__name__)


class BridgeWithdrawals:
    """WithdrawalGateway over the source and destination clients."""

    def __init__(
        self,
        source: SourceChain,
        destination: DestinationChain,
        *,
        chain_id: int,
        base_token_address: str,
        nullifier_address: str,
        wait_timeout: float = 600.0,
        poll_interval: float = 5.0,
    ):
        self.source = source
        self.destination = destination
        self.chain_id = chain_id
        self.base_token_address = base_token_address
        self.nullifier_address = nullifier_address
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval

    def _require_nullifier(self) -> str:
        if not self.nullifier_address:
            raise ConfigurationError("L1_NULLIFIER_ADDRESS is required to finalize base-asset withdrawals")
        return self.nullifier_address

    async def _withdrawal_log(self, tx_hash: str) -> tuple[TransactionReceipt, int, L2ToL1Log] | None:
        receipt = await self.source.get_receipt(tx_hash)
        if receipt is None:
            return None
        index = find_log_index(receipt.l2_to_l1_logs, self.base_token_address)
        if index is None:
            return None
        return receipt, index, receipt.l2_to_l1_logs[index]

    async def _proof(self, tx_hash: str, index: int) -> LogProof | None:
        try:
            return await self.source.get_log_proof(tx_hash, index)
        except Exception as e:
            if is_proof_not_ready(e):
                return None
            raise

    async def _is_finalized(self, proof: LogProof) -> bool:
        data = encode_is_withdrawal_finalized(self.chain_id, proof.batch_number, proof.id)
        result = await self.destination.call(self._require_nullifier(), data)
        return decode_bool(result)

    async def status(self, tx_hash: str) -> WithdrawalPhase:
        found = await self._withdrawal_log(tx_hash)
        if found is None:
            return WithdrawalPhase.UNKNOWN
        _, index, _ = found

        proof = await self._proof(tx_hash, index)
        if proof is None:
            return WithdrawalPhase.L2_PENDING
        if await self._is_finalized(proof):
            return WithdrawalPhase.FINALIZED
        return WithdrawalPhase.READY_TO_FINALIZE

    async def try_finalize(self, tx_hash: str) -> str:
        """Submit the withdrawal finalization and return its hash."""
        found = await self._withdrawal_log(tx_hash)
        if found is None:
            raise BridgeWithdrawalError(f"No base-asset withdrawal log in {tx_hash}")
        receipt, index, log = found

        proof = await self._proof(tx_hash, index)
        if proof is None:
            raise BridgeWithdrawalError(f"Withdrawal proof not available for {tx_hash}")

        message = locate_message(receipt, log, self.base_token_address)
        if not message:
            raise BridgeWithdrawalError(f"Withdrawal message not found in {tx_hash}")

        params = build_finalize_params(self.chain_id, log, proof, message)
        finalize_hash = await self.destination.send_transaction(
            self._require_nullifier(), encode_finalize_deposit(params)
        )
        logger.info(f"Withdrawal finalization sent for {tx_hash}: {finalize_hash}")
        return finalize_hash

    async def wait_finalized(self, tx_hash: str) -> None:
        """Poll until the withdrawal reports FINALIZED."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.wait_timeout
        while True:
            phase = await self.status(tx_hash)
            if phase == WithdrawalPhase.FINALIZED:
                return
            if loop.time() >= deadline:
                raise BridgeWithdrawalError(
                    f"Withdrawal {tx_hash} not finalized after {self.wait_timeout:.0f}s (phase {phase.value})"
                )
            await asyncio.sleep(self.poll_interval)
