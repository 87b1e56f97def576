"""Ledger data models.

Cold-path pydantic models for the JSON-RPC payloads the relayer consumes.
Hex quantities (``"0x1a"``) are converted to ``int`` on validation so the
rest of the code never deals with encoding details.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def to_int(value: Any) -> Any:
    """Convert a hex or decimal quantity string to int."""
    if isinstance(value, str):
        value = value.strip()
        if value.startswith(("0x", "0X")):
            return int(value, 16)
        return int(value)
    return value


class TxAction(str, Enum):
    """Classification of an interop transaction for observability."""

    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class TxMetadata:
    """Best-effort action/amount pair extracted from a receipt."""

    action: TxAction = TxAction.UNKNOWN
    amount: str = "0"


UNKNOWN_METADATA = TxMetadata()


class WithdrawalPhase(str, Enum):
    """Lifecycle phase of a base-asset withdrawal."""

    UNKNOWN = "UNKNOWN"
    L2_PENDING = "L2_PENDING"
    READY_TO_FINALIZE = "READY_TO_FINALIZE"
    FINALIZED = "FINALIZED"


class _LedgerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class L2ToL1Log(_LedgerModel):
    """Native cross-layer log entry attached to a source-chain receipt.

    For messages sent through the system messenger the ``sender`` is the
    messenger itself and the originating contract is left-padded into
    ``key``. ``value`` is the keccak hash of the message payload.
    """

    sender: str = ""
    key: str = ""
    value: str = ""
    tx_number_in_block: int = Field(
        default=0,
        validation_alias=AliasChoices(
            "tx_number_in_block", "txNumberInBlock", "txIndexInL1Batch"
        ),
    )

    @field_validator("tx_number_in_block", mode="before")
    @classmethod
    def _parse_int(cls, v):
        return to_int(v) if v is not None else 0

    @field_validator("sender", "key", "value", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""


class RawLog(_LedgerModel):
    """Regular EVM event log."""

    address: str = ""
    data: str = "0x"
    topics: list[str] = []

    @field_validator("data", mode="before")
    @classmethod
    def _default_data(cls, v):
        return v or "0x"


class TransactionReceipt(_LedgerModel):
    """Source-chain receipt augmented with cross-layer logs."""

    transaction_hash: str = Field(
        default="", validation_alias=AliasChoices("transactionHash", "transaction_hash")
    )
    status: int = 0
    block_number: int | None = Field(
        default=None, validation_alias=AliasChoices("blockNumber", "block_number")
    )
    logs: list[RawLog] = []
    l2_to_l1_logs: list[L2ToL1Log] = Field(
        default_factory=list,
        validation_alias=AliasChoices("l2ToL1Logs", "l2_to_l1_logs"),
    )

    @field_validator("status", "block_number", mode="before")
    @classmethod
    def _parse_int(cls, v):
        return to_int(v)

    @field_validator("logs", "l2_to_l1_logs", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return v or []

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class Transaction(_LedgerModel):
    hash: str
    sender: str = Field(default="", validation_alias=AliasChoices("from", "sender"))
    to: str | None = None


class Block(_LedgerModel):
    number: int
    transactions: list[Transaction] = []

    @field_validator("number", mode="before")
    @classmethod
    def _parse_int(cls, v):
        return to_int(v)

    @field_validator("transactions", mode="before")
    @classmethod
    def _full_transactions_only(cls, v):
        # Blocks fetched without full transactions only carry hashes
        return [tx for tx in (v or []) if isinstance(tx, dict)]


class LogProof(_LedgerModel):
    """Merkle inclusion proof for one cross-layer log."""

    batch_number: int = Field(
        validation_alias=AliasChoices("batchNumber", "batch_number", "l1BatchNumber")
    )
    id: int = Field(validation_alias=AliasChoices("id", "messageIndex"))
    proof: list[str] = []
    root: str = ""

    @field_validator("batch_number", "id", mode="before")
    @classmethod
    def _parse_int(cls, v):
        return to_int(v)


class DestinationReceipt(_LedgerModel):
    """Receipt of a transaction mined on the destination chain."""

    tx_hash: str
    status: int
    block_number: int | None = None
    gas_used: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1
