"""Matching rules for cross-layer log entries."""

from __future__ import annotations

from collections.abc import Sequence

from interop.models import L2ToL1Log

# Messages relayed through the L1 messenger system contract carry the
# originating contract in the padded ``key`` field instead of ``sender``.
SYSTEM_MESSENGER_ADDRESS = "0x0000000000000000000000000000000000008008"


def normalize_address(address: str | None) -> str:
    return (address or "").lower()


def references_address(log: L2ToL1Log, address: str) -> bool:
    """Check whether a cross-layer log was emitted by or on behalf of address."""
    target = normalize_address(address)
    if not target:
        return False
    if normalize_address(log.sender) == target:
        return True
    return target.removeprefix("0x") in log.key.lower()


def find_log_index(logs: Sequence[L2ToL1Log], address: str) -> int | None:
    """Index of the first log referencing address, or None."""
    for index, log in enumerate(logs):
        if references_address(log, address):
            return index
    return None


def has_log_from(logs: Sequence[L2ToL1Log], address: str) -> bool:
    return find_log_index(logs, address) is not None


def resolve_sender(log: L2ToL1Log) -> str:
    """Recover the source-chain contract that sent the message."""
    if normalize_address(log.sender) == SYSTEM_MESSENGER_ADDRESS and len(log.key) >= 66:
        return "0x" + log.key[-40:].lower()
    return log.sender
