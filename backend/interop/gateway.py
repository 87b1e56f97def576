"""Ledger gateway protocols.

The relayer talks to the source chain, the destination chain and the
base-asset bridge only through these protocols, so the scanner and the
finalizer can be driven by in-memory fakes in tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from interop.models import (
    Block,
    DestinationReceipt,
    LogProof,
    TransactionReceipt,
    WithdrawalPhase,
)


@runtime_checkable
class SourceChain(Protocol):
    """Read access to the source ledger and its proof service."""

    async def get_block_number(self) -> int:
        ...

    async def get_block(self, number: int) -> Block | None:
        """Block with full transaction objects, or None if unknown."""
        ...

    async def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """Receipt including cross-layer logs, or None if unknown."""
        ...

    async def get_log_proof(self, tx_hash: str, log_index: int) -> LogProof | None:
        """Merkle proof for a cross-layer log.

        Returns None, or raises an error carrying a not-ready marker, while
        the batch is not executed on the destination chain.
        """
        ...


@runtime_checkable
class DestinationChain(Protocol):
    """Write access to the destination ledger through the executor account."""

    async def get_gas_price(self) -> int:
        ...

    async def send_transaction(
        self, to: str, data: str, *, gas_price: int | None = None, value: int = 0
    ) -> str:
        """Sign and broadcast; returns the transaction hash."""
        ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> DestinationReceipt:
        """Raises ConfirmationTimeout when not mined within timeout."""
        ...

    async def call(self, to: str, data: str) -> bytes:
        ...


@runtime_checkable
class WithdrawalGateway(Protocol):
    """Base-asset withdrawal finalization."""

    async def status(self, tx_hash: str) -> WithdrawalPhase:
        ...

    async def try_finalize(self, tx_hash: str) -> str:
        ...

    async def wait_finalized(self, tx_hash: str) -> None:
        ...
