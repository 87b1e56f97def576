"""Finalization outcome model."""

from dataclasses import dataclass
from enum import Enum


class ReasonCode(str, Enum):
    """Why a finalize attempt ended the way it did."""

    TX_NOT_FOUND = "tx_not_found"
    NO_LOGS = "no_logs"
    WITHDRAWAL_NOT_READY = "withdrawal_not_ready"
    NO_INTEROP_LOGS = "no_interop_logs"
    PROOF_NOT_READY = "proof_not_ready"
    NO_MESSAGE = "no_message"
    ALREADY_FINALIZED = "already_finalized"
    L1_PENDING = "l1_pending"
    TX_FAILED = "tx_failed"
    FINALIZED = "finalized"


# Outcomes that keep the item queued for the next pass
RETRYABLE_REASONS = frozenset({
    ReasonCode.PROOF_NOT_READY,
    ReasonCode.L1_PENDING,
    ReasonCode.WITHDRAWAL_NOT_READY,
})


@dataclass(frozen=True)
class FinalizeResult:
    success: bool
    reason: ReasonCode
    destination_hash: str | None = None

    @property
    def retryable(self) -> bool:
        return not self.success and self.reason in RETRYABLE_REASONS
