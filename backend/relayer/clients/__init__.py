"""Ledger clients."""

from relayer.clients.bridge import BridgeWithdrawals
from relayer.clients.destination_chain import DestinationChainClient
from relayer.clients.rpc import JsonRpcClient
from relayer.clients.source_chain import SourceChainClient

__all__ = [
    "JsonRpcClient",
    "SourceChainClient",
    "DestinationChainClient",
    "BridgeWithdrawals",
]
