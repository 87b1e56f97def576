"""Classify interop transactions for observability.

The interop message is ``abi.encode(address caller, (address,uint256,bytes)[] ops)``.
Only the first operation is inspected: a WETH gateway ``depositETH`` call is a
deposit of the attached value, an Aave pool ``withdraw`` call is a withdrawal
of its amount argument. Anything else, including any decode failure, is
reported as Unknown with amount "0".
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import from_wei, function_signature_to_4byte_selector

from interop.logs import find_log_index
from interop.models import (
    UNKNOWN_METADATA,
    TransactionReceipt,
    TxAction,
    TxMetadata,
)
from interop.payload import hex_to_bytes, locate_message

MESSAGE_TYPES = ("address", "(address,uint256,bytes)[]")

DEPOSIT_SIGNATURE = "depositETH(address,address,uint16)"
WITHDRAW_SIGNATURE = "withdraw(address,uint256,address)"


@dataclass(frozen=True)
class Operation:
    target: str
    value: int
    data: bytes


def format_ether(wei: int) -> str:
    """Render a wei amount as an exact decimal ether string ("1.5", "0")."""
    text = format(Decimal(from_wei(wei, "ether")), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def decode_operations(payload: bytes) -> list[Operation] | None:
    try:
        _, ops = decode(list(MESSAGE_TYPES), payload)
    except (DecodingError, ValueError, OverflowError):
        return None
    return [Operation(target=target, value=value, data=data) for target, value, data in ops]


def decode_call(data: bytes, signature: str) -> tuple | None:
    """Decode call data against signature, or None when it does not match."""
    selector = function_signature_to_4byte_selector(signature)
    if len(data) < 4 or data[:4] != selector:
        return None
    arg_types = signature[signature.index("(") + 1 : -1].split(",")
    try:
        return decode(arg_types, data[4:])
    except (DecodingError, ValueError, OverflowError):
        return None


def classify_operation(op: Operation) -> TxMetadata:
    if decode_call(op.data, DEPOSIT_SIGNATURE) is not None:
        return TxMetadata(TxAction.DEPOSIT, format_ether(op.value))

    withdraw_args = decode_call(op.data, WITHDRAW_SIGNATURE)
    if withdraw_args is not None:
        _, amount, _ = withdraw_args
        return TxMetadata(TxAction.WITHDRAWAL, format_ether(amount))

    return UNKNOWN_METADATA


def extract_metadata(receipt: TransactionReceipt, interop_center: str) -> TxMetadata:
    """Best-effort (action, amount) for a receipt; never raises."""
    logs = receipt.l2_to_l1_logs
    if not logs:
        return UNKNOWN_METADATA

    index = find_log_index(logs, interop_center)
    if index is None:
        return UNKNOWN_METADATA

    log = logs[index]
    payload = locate_message(receipt, log, interop_center) or hex_to_bytes(log.value)
    if not payload:
        return UNKNOWN_METADATA

    ops = decode_operations(payload)
    if not ops:
        return UNKNOWN_METADATA

    return classify_operation(ops[0])
