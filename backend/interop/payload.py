"""Locate the raw message payload behind a cross-layer log.

The cross-layer log only carries ``keccak(message)``. The payload itself is
emitted as ABI-encoded ``bytes`` in a regular event log of the same
receipt: 32 bytes of offset, 32 bytes of length, then the padded message.
"""

from __future__ import annotations

from eth_utils import keccak

from interop.logs import normalize_address
from interop.models import L2ToL1Log, RawLog, TransactionReceipt

# "0x" + offset word + length word, in hex characters
MIN_CANDIDATE_DATA_LENGTH = 130

_HEADER_BYTES = 64


def hex_to_bytes(value: str | None) -> bytes | None:
    """Decode a 0x-prefixed hex string, or None when it is not valid hex."""
    if not value:
        return None
    digits = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(digits)
    except ValueError:
        return None


def _segments(entry: RawLog) -> list[bytes]:
    """Candidate payloads of an event log: exact declared length first, then padded tail."""
    raw = hex_to_bytes(entry.data)
    if raw is None or len(raw) <= _HEADER_BYTES:
        return []
    tail = raw[_HEADER_BYTES:]
    declared = int.from_bytes(raw[32:_HEADER_BYTES], "big")
    if 0 < declared < len(tail):
        return [tail[:declared], tail]
    return [tail]


def _candidates(receipt: TransactionReceipt) -> list[RawLog]:
    return [entry for entry in receipt.logs if len(entry.data) > MIN_CANDIDATE_DATA_LENGTH]


def locate_message(
    receipt: TransactionReceipt,
    log: L2ToL1Log,
    fallback_address: str,
) -> bytes | None:
    """Find the message payload whose hash is declared by log.

    Falls back to the first candidate emitted by fallback_address, then to
    the first candidate at all, when no payload matches by hash.
    """
    candidates = _candidates(receipt)
    if not candidates:
        return None

    expected = log.value.lower()
    if expected:
        for entry in candidates:
            for segment in _segments(entry):
                if "0x" + keccak(segment).hex() == expected:
                    return segment

    target = normalize_address(fallback_address)
    chosen = next(
        (entry for entry in candidates if normalize_address(entry.address) == target),
        candidates[0],
    )
    segments = _segments(chosen)
    return segments[0] if segments else None
