"""Data storage layer."""

from relayer.storage.json_store import (
    FINALIZED_FILE,
    PENDING_FILE,
    SCAN_STATE_FILE,
    Store,
    strip_comments,
)

__all__ = [
    "Store",
    "strip_comments",
    "PENDING_FILE",
    "FINALIZED_FILE",
    "SCAN_STATE_FILE",
]
