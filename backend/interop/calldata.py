"""Destination-chain call encoding."""

from __future__ import annotations

from dataclasses import dataclass

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

from interop.logs import resolve_sender
from interop.models import L2ToL1Log, LogProof
from interop.payload import hex_to_bytes

# (chainId, l2BatchNumber, l2MessageIndex, l2Sender, l2TxNumberInBatch, message, merkleProof)
FINALIZE_PARAMS_TYPE = "(uint256,uint256,uint256,address,uint16,bytes,bytes32[])"

RECEIVE_INTEROP_SIGNATURE = f"receiveInteropFromL2({FINALIZE_PARAMS_TYPE})"
FINALIZE_DEPOSIT_SIGNATURE = f"finalizeDeposit({FINALIZE_PARAMS_TYPE})"
IS_WITHDRAWAL_FINALIZED_SIGNATURE = "isWithdrawalFinalized(uint256,uint256,uint256)"


@dataclass(frozen=True)
class FinalizeParams:
    """Everything the destination needs to verify and execute one message."""

    chain_id: int
    l2_batch_number: int
    l2_message_index: int
    l2_sender: str
    l2_tx_number_in_batch: int
    message: bytes
    merkle_proof: list[str]

    def as_abi_tuple(self) -> tuple:
        proof = [_proof_node(node) for node in self.merkle_proof]
        return (
            self.chain_id,
            self.l2_batch_number,
            self.l2_message_index,
            self.l2_sender.lower(),
            self.l2_tx_number_in_batch,
            self.message,
            proof,
        )


def _proof_node(node: str) -> bytes:
    """Decode one Merkle proof node; it must be exactly 32 bytes of hex."""
    raw = hex_to_bytes(node)
    if raw is None or len(raw) != 32:
        raise ValueError(f"Malformed Merkle proof node: {node!r}")
    return raw


def build_finalize_params(
    chain_id: int,
    log: L2ToL1Log,
    proof: LogProof,
    message: bytes,
) -> FinalizeParams:
    return FinalizeParams(
        chain_id=chain_id,
        l2_batch_number=proof.batch_number,
        l2_message_index=proof.id,
        l2_sender=resolve_sender(log),
        l2_tx_number_in_batch=log.tx_number_in_block,
        message=message,
        merkle_proof=list(proof.proof),
    )


def _encode(signature: str, arg_types: list[str], args: list) -> str:
    data = function_signature_to_4byte_selector(signature) + encode(arg_types, args)
    return "0x" + data.hex()


def encode_receive_interop(params: FinalizeParams) -> str:
    return _encode(RECEIVE_INTEROP_SIGNATURE, [FINALIZE_PARAMS_TYPE], [params.as_abi_tuple()])


def encode_finalize_deposit(params: FinalizeParams) -> str:
    return _encode(FINALIZE_DEPOSIT_SIGNATURE, [FINALIZE_PARAMS_TYPE], [params.as_abi_tuple()])


def encode_is_withdrawal_finalized(chain_id: int, batch_number: int, message_index: int) -> str:
    return _encode(
        IS_WITHDRAWAL_FINALIZED_SIGNATURE,
        ["uint256", "uint256", "uint256"],
        [chain_id, batch_number, message_index],
    )


def decode_bool(result: bytes) -> bool:
    (value,) = decode(["bool"], result)
    return bool(value)
