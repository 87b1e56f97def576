"""Tests for base-asset withdrawal finalization."""

from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from interop.calldata import FINALIZE_DEPOSIT_SIGNATURE, IS_WITHDRAWAL_FINALIZED_SIGNATURE
from interop.errors import BridgeWithdrawalError, ConfigurationError, RpcError
from interop.models import WithdrawalPhase
from relayer.clients import BridgeWithdrawals

from factories import (
    BASE_TOKEN,
    CHAIN_ID,
    NULLIFIER,
    FakeSource,
    base_token_withdrawal,
    deposit_receipt,
    make_proof,
    make_receipt,
    tx_hash,
)

SOURCE_TX = tx_hash(1)
FINALIZE_TX = tx_hash(0xF1)

TRUE = encode(["bool"], [True])
FALSE = encode(["bool"], [False])


def selector(signature: str) -> str:
    return "0x" + function_signature_to_4byte_selector(signature).hex()


@pytest.fixture
def source():
    source = FakeSource()
    base_log, base_event = base_token_withdrawal()
    source.receipts[SOURCE_TX] = make_receipt(SOURCE_TX, l2_logs=[base_log], logs=[base_event])
    source.proofs[SOURCE_TX] = make_proof()
    return source


@pytest.fixture
def destination():
    destination = AsyncMock()
    destination.call.return_value = FALSE
    destination.send_transaction.return_value = FINALIZE_TX
    return destination


def make_bridge(source, destination, nullifier: str = NULLIFIER) -> BridgeWithdrawals:
    return BridgeWithdrawals(
        source,
        destination,
        chain_id=CHAIN_ID,
        base_token_address=BASE_TOKEN,
        nullifier_address=nullifier,
        wait_timeout=0,
        poll_interval=0,
    )


@pytest.fixture
def bridge(source, destination):
    return make_bridge(source, destination)


class TestStatus:
    @pytest.mark.asyncio
    async def test_unknown_transaction(self, bridge):
        assert await bridge.status(tx_hash(404)) == WithdrawalPhase.UNKNOWN

    @pytest.mark.asyncio
    async def test_no_withdrawal_log(self, bridge, source):
        source.receipts[SOURCE_TX] = deposit_receipt(SOURCE_TX)

        assert await bridge.status(SOURCE_TX) == WithdrawalPhase.UNKNOWN

    @pytest.mark.asyncio
    async def test_proof_missing_is_pending(self, bridge, source):
        del source.proofs[SOURCE_TX]

        assert await bridge.status(SOURCE_TX) == WithdrawalPhase.L2_PENDING

    @pytest.mark.asyncio
    async def test_batch_not_executed_is_pending(self, bridge, source):
        source.proof_errors[SOURCE_TX] = RpcError("batch has not been executed yet")

        assert await bridge.status(SOURCE_TX) == WithdrawalPhase.L2_PENDING

    @pytest.mark.asyncio
    async def test_ready(self, bridge, destination):
        assert await bridge.status(SOURCE_TX) == WithdrawalPhase.READY_TO_FINALIZE

        to, data = destination.call.await_args.args
        assert to == NULLIFIER
        assert data.startswith(selector(IS_WITHDRAWAL_FINALIZED_SIGNATURE))

    @pytest.mark.asyncio
    async def test_finalized(self, bridge, destination):
        destination.call.return_value = TRUE

        assert await bridge.status(SOURCE_TX) == WithdrawalPhase.FINALIZED

    @pytest.mark.asyncio
    async def test_missing_nullifier(self, source, destination):
        bridge = make_bridge(source, destination, nullifier="")

        with pytest.raises(ConfigurationError):
            await bridge.status(SOURCE_TX)


class TestTryFinalize:
    @pytest.mark.asyncio
    async def test_sends_finalize_deposit(self, bridge, destination):
        assert await bridge.try_finalize(SOURCE_TX) == FINALIZE_TX

        to, data = destination.send_transaction.await_args.args
        assert to == NULLIFIER
        assert data.startswith(selector(FINALIZE_DEPOSIT_SIGNATURE))

    @pytest.mark.asyncio
    async def test_without_withdrawal_log(self, bridge, source):
        source.receipts[SOURCE_TX] = deposit_receipt(SOURCE_TX)

        with pytest.raises(BridgeWithdrawalError):
            await bridge.try_finalize(SOURCE_TX)

    @pytest.mark.asyncio
    async def test_without_proof(self, bridge, source, destination):
        del source.proofs[SOURCE_TX]

        with pytest.raises(BridgeWithdrawalError):
            await bridge.try_finalize(SOURCE_TX)
        destination.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_message(self, bridge, source):
        base_log, _ = base_token_withdrawal()
        source.receipts[SOURCE_TX] = make_receipt(SOURCE_TX, l2_logs=[base_log])

        with pytest.raises(BridgeWithdrawalError):
            await bridge.try_finalize(SOURCE_TX)


class TestWaitFinalized:
    @pytest.mark.asyncio
    async def test_returns_once_finalized(self, bridge, destination):
        bridge.wait_timeout = 60
        destination.call.side_effect = [FALSE, FALSE, TRUE]

        await bridge.wait_finalized(SOURCE_TX)

        assert destination.call.await_count == 3

    @pytest.mark.asyncio
    async def test_times_out(self, bridge):
        with pytest.raises(BridgeWithdrawalError, match="not finalized"):
            await bridge.wait_finalized(SOURCE_TX)
