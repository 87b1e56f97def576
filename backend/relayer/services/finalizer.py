"""Per-transaction finalization state machine.

For one source transaction:

1. fetch the receipt; missing or failed -> tx_not_found (permanent)
2. no cross-layer logs -> no_logs (done)
3. base-asset withdrawal log present -> the withdrawal must be finalized
   first; not ready yet -> withdrawal_not_ready (retry)
4. no interop-center log -> no_interop_logs (done)
5. fetch the Merkle proof; not available -> proof_not_ready (retry)
6. locate the message payload; missing -> no_message (permanent)
7. submit receiveInteropFromL2 with a bumped gas price; the handler
   reporting the message as consumed -> already_finalized (done)
8. wait for the receipt; timeout -> l1_pending (retry), revert ->
   tx_failed (permanent), success -> finalized

Unexpected errors (RPC failures, unknown proof errors, submission errors)
propagate to the caller, which leaves the item queued.
"""

import logging

from interop.calldata import build_finalize_params, encode_receive_interop
from interop.errors import ConfirmationTimeout, is_already_finalized, is_proof_not_ready
from interop.gateway import DestinationChain, SourceChain, WithdrawalGateway
from interop.logs import find_log_index, has_log_from
from interop.metadata import extract_metadata
from interop.models import UNKNOWN_METADATA, LogProof, TxMetadata, WithdrawalPhase
from interop.payload import locate_message
from relayer.models import FinalizeResult, ReasonCode

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMATION_TIMEOUT = 300.0
DEFAULT_GAS_PRICE_BUMP_PERCENT = 20


class Finalizer:
    """Drives one source transaction through finalization on the destination."""

    def __init__(
        self,
        source: SourceChain,
        destination: DestinationChain,
        withdrawals: WithdrawalGateway,
        *,
        chain_id: int,
        interop_center: str,
        interop_handler: str,
        base_token_address: str,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        gas_price_bump_percent: int = DEFAULT_GAS_PRICE_BUMP_PERCENT,
    ):
        self.source = source
        self.destination = destination
        self.withdrawals = withdrawals
        self.chain_id = chain_id
        self.interop_center = interop_center
        self.interop_handler = interop_handler
        self.base_token_address = base_token_address
        self.confirmation_timeout = confirmation_timeout
        self.gas_price_bump_percent = gas_price_bump_percent

    async def describe(self, tx_hash: str) -> TxMetadata:
        """Action/amount of a transaction; Unknown when the receipt is missing."""
        receipt = await self.source.get_receipt(tx_hash)
        if receipt is None:
            return UNKNOWN_METADATA
        return extract_metadata(receipt, self.interop_center)

    async def finalize(self, tx_hash: str) -> FinalizeResult:
        logger.info(f"Finalizing {tx_hash}")

        receipt = await self.source.get_receipt(tx_hash)
        if receipt is None or not receipt.succeeded:
            logger.warning(f"{tx_hash}: transaction not found or not successful")
            return FinalizeResult(False, ReasonCode.TX_NOT_FOUND)

        logs = receipt.l2_to_l1_logs
        if not logs:
            logger.info(f"{tx_hash}: no cross-layer logs, nothing to finalize")
            return FinalizeResult(True, ReasonCode.NO_LOGS)
        logger.info(f"{tx_hash}: {len(logs)} cross-layer log(s)")

        if has_log_from(logs, self.base_token_address):
            if not await self._complete_withdrawal(tx_hash):
                return FinalizeResult(False, ReasonCode.WITHDRAWAL_NOT_READY)

        index = find_log_index(logs, self.interop_center)
        if index is None:
            logger.info(f"{tx_hash}: no interop-center log, nothing more to finalize")
            return FinalizeResult(True, ReasonCode.NO_INTEROP_LOGS)

        proof = await self._fetch_proof(tx_hash, index)
        if proof is None:
            logger.info(f"{tx_hash}: proof not available yet")
            return FinalizeResult(False, ReasonCode.PROOF_NOT_READY)
        logger.info(f"{tx_hash}: proof for batch {proof.batch_number}, message index {proof.id}")

        log = logs[index]
        message = locate_message(receipt, log, self.interop_center)
        if not message:
            logger.error(f"{tx_hash}: could not extract message payload")
            return FinalizeResult(False, ReasonCode.NO_MESSAGE)

        params = build_finalize_params(self.chain_id, log, proof, message)
        logger.info(f"{tx_hash}: sender {params.l2_sender}, message {len(message)} bytes")
        return await self._submit(tx_hash, encode_receive_interop(params))

    async def _complete_withdrawal(self, tx_hash: str) -> bool:
        """Finalize the base-asset withdrawal if needed; False when not ready yet."""
        phase = await self.withdrawals.status(tx_hash)

        if phase == WithdrawalPhase.FINALIZED:
            logger.info(f"{tx_hash}: base-asset withdrawal already finalized")
            return True

        if phase == WithdrawalPhase.READY_TO_FINALIZE:
            logger.info(f"{tx_hash}: finalizing base-asset withdrawal")
            await self.withdrawals.try_finalize(tx_hash)
            await self.withdrawals.wait_finalized(tx_hash)
            logger.info(f"{tx_hash}: base-asset withdrawal finalized")
            return True

        logger.info(f"{tx_hash}: base-asset withdrawal not ready (phase {phase.value})")
        return False

    async def _fetch_proof(self, tx_hash: str, index: int) -> LogProof | None:
        try:
            return await self.source.get_log_proof(tx_hash, index)
        except Exception as e:
            if is_proof_not_ready(e):
                return None
            raise

    async def _submit(self, tx_hash: str, data: str) -> FinalizeResult:
        base_gas_price = await self.destination.get_gas_price()
        gas_price = base_gas_price * (100 + self.gas_price_bump_percent) // 100
        logger.info(f"{tx_hash}: gas price {base_gas_price} -> {gas_price}")

        try:
            destination_hash = await self.destination.send_transaction(
                self.interop_handler, data, gas_price=gas_price
            )
        except Exception as e:
            if is_already_finalized(e):
                logger.info(f"{tx_hash}: message already finalized on destination")
                return FinalizeResult(True, ReasonCode.ALREADY_FINALIZED)
            raise

        logger.info(f"{tx_hash}: destination tx {destination_hash}, waiting for confirmation")
        try:
            receipt = await self.destination.wait_for_receipt(
                destination_hash, self.confirmation_timeout
            )
        except ConfirmationTimeout:
            logger.info(f"{tx_hash}: destination tx still pending: {destination_hash}")
            return FinalizeResult(False, ReasonCode.L1_PENDING, destination_hash)

        if not receipt.succeeded:
            logger.error(f"{tx_hash}: destination tx reverted: {destination_hash}")
            return FinalizeResult(False, ReasonCode.TX_FAILED, destination_hash)

        logger.info(
            f"{tx_hash}: finalized in block {receipt.block_number} "
            f"(gas used {receipt.gas_used})"
        )
        return FinalizeResult(True, ReasonCode.FINALIZED, destination_hash)
