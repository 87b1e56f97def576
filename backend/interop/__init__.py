"""Cross-layer interop domain logic (no I/O)."""

from interop.calldata import (
    FinalizeParams,
    build_finalize_params,
    encode_finalize_deposit,
    encode_is_withdrawal_finalized,
    encode_receive_interop,
)
from interop.errors import (
    BridgeWithdrawalError,
    ConfigurationError,
    ConfirmationTimeout,
    RelayerError,
    RpcError,
    is_already_finalized,
    is_proof_not_ready,
)
from interop.gateway import DestinationChain, SourceChain, WithdrawalGateway
from interop.logs import find_log_index, has_log_from, references_address, resolve_sender
from interop.metadata import extract_metadata
from interop.models import (
    Block,
    DestinationReceipt,
    L2ToL1Log,
    LogProof,
    RawLog,
    Transaction,
    TransactionReceipt,
    TxAction,
    TxMetadata,
    UNKNOWN_METADATA,
    WithdrawalPhase,
)
from interop.payload import locate_message

__all__ = [
    # Models
    "Block",
    "DestinationReceipt",
    "L2ToL1Log",
    "LogProof",
    "RawLog",
    "Transaction",
    "TransactionReceipt",
    "TxAction",
    "TxMetadata",
    "UNKNOWN_METADATA",
    "WithdrawalPhase",
    # Errors
    "RelayerError",
    "RpcError",
    "ConfirmationTimeout",
    "BridgeWithdrawalError",
    "ConfigurationError",
    "is_already_finalized",
    "is_proof_not_ready",
    # Gateway protocols
    "SourceChain",
    "DestinationChain",
    "WithdrawalGateway",
    # Log handling
    "find_log_index",
    "has_log_from",
    "references_address",
    "resolve_sender",
    "locate_message",
    "extract_metadata",
    # Call encoding
    "FinalizeParams",
    "build_finalize_params",
    "encode_receive_interop",
    "encode_finalize_deposit",
    "encode_is_withdrawal_finalized",
]
