"""Wiring of clients, store and services from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eth_account import Account

from interop.errors import ConfigurationError
from relayer.clients import BridgeWithdrawals, DestinationChainClient, SourceChainClient
from relayer.config import Settings
from relayer.services import Finalizer, Scanner, Scheduler
from relayer.storage import Store

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Relayer:
    """All long-lived relayer components for one process."""

    settings: Settings
    store: Store
    source: SourceChainClient
    destination: DestinationChainClient
    scanner: Scanner
    finalizer: Finalizer
    scheduler: Scheduler

    async def aclose(self) -> None:
        for name, client in (("source", self.source), ("destination", self.destination)):
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"Error closing {name} client: {e}")


def build_store(settings: Settings) -> Store:
    return Store(settings.data_dir, history_limit=settings.finalized_history_limit)


def resolve_executor_address(settings: Settings) -> str:
    if not settings.executor_private_key:
        raise ConfigurationError("EXECUTOR_PRIVATE_KEY is not set")
    derived = Account.from_key(settings.executor_private_key).address
    if settings.executor_address and settings.executor_address.lower() != derived.lower():
        raise ConfigurationError(
            f"EXECUTOR_ADDRESS {settings.executor_address} does not match the private key ({derived})"
        )
    return derived


def build_relayer(settings: Settings) -> Relayer:
    """Create every component; raises ConfigurationError on unusable settings."""
    executor_address = resolve_executor_address(settings)
    if not settings.l1_nullifier_address:
        raise ConfigurationError(
            "L1_NULLIFIER_ADDRESS is not set; base-asset withdrawals cannot be finalized"
        )

    store = build_store(settings)
    source = SourceChainClient(settings.source_rpc_url, timeout=settings.rpc_timeout)
    destination = DestinationChainClient(
        settings.destination_rpc_url,
        settings.executor_private_key,
        timeout=settings.rpc_timeout,
    )
    withdrawals = BridgeWithdrawals(
        source,
        destination,
        chain_id=settings.source_chain_id,
        base_token_address=settings.base_token_address,
        nullifier_address=settings.l1_nullifier_address,
        wait_timeout=settings.bridge_wait_timeout,
        poll_interval=settings.bridge_poll_interval,
    )
    scanner = Scanner(
        source,
        store,
        executor_address=executor_address,
        interop_center=settings.interop_center_address,
        initial_lookback=settings.initial_scan_lookback,
    )
    finalizer = Finalizer(
        source,
        destination,
        withdrawals,
        chain_id=settings.source_chain_id,
        interop_center=settings.interop_center_address,
        interop_handler=settings.interop_handler_address,
        base_token_address=settings.base_token_address,
        confirmation_timeout=settings.confirmation_timeout,
        gas_price_bump_percent=settings.gas_price_bump_percent,
    )
    scheduler = Scheduler(
        store,
        scanner,
        finalizer,
        poll_interval=settings.poll_interval,
        item_delay=settings.item_delay,
        permanent_failure_retries=settings.permanent_failure_retries,
    )
    return Relayer(
        settings=settings,
        store=store,
        source=source,
        destination=destination,
        scanner=scanner,
        finalizer=finalizer,
        scheduler=scheduler,
    )
