"""Data models."""

from relayer.models.finalize import RETRYABLE_REASONS, FinalizeResult, ReasonCode
from relayer.models.queue import FinalizedItem, PendingItem, ScanState, utcnow

__all__ = [
    "PendingItem",
    "FinalizedItem",
    "ScanState",
    "utcnow",
    "ReasonCode",
    "FinalizeResult",
    "RETRYABLE_REASONS",
]
