"""Relayer error types and error-message classification."""

from __future__ import annotations

# Substrings the proof service uses while the batch is not executed on L1
PROOF_NOT_READY_MARKERS = ("not been executed yet", "proof not available")

# Substrings the destination handler emits when the message was already consumed
ALREADY_FINALIZED_MARKERS = ("L1ShadowAccount: call failed", "already finalized")


class RelayerError(Exception):
    """Base class for relayer errors."""


class RpcError(RelayerError):
    """JSON-RPC error returned by a ledger endpoint."""

    def __init__(self, message: str, code: int | None = None, data: object = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"{self.message} (code {self.code})"


class ConfirmationTimeout(RelayerError):
    """A submitted transaction was not mined within the wait window."""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"Timed out after {timeout:.0f}s waiting for {tx_hash}")
        self.tx_hash = tx_hash
        self.timeout = timeout


class BridgeWithdrawalError(RelayerError):
    """The base-asset withdrawal pre-step could not be completed."""


class ConfigurationError(RelayerError):
    """Settings are missing or unusable."""


def is_proof_not_ready(error: BaseException) -> bool:
    message = str(error)
    return any(marker in message for marker in PROOF_NOT_READY_MARKERS)


def is_already_finalized(error: BaseException) -> bool:
    message = str(error)
    return any(marker in message for marker in ALREADY_FINALIZED_MARKERS)
