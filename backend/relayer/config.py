"""Application configuration."""

import re
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Scheduling (seconds)
    poll_interval: float = 30.0
    item_delay: float = 1.0

    # Executor
    executor_private_key: str = ""
    executor_address: str = ""  # derived from the private key when empty

    # RPC endpoints
    source_rpc_url: str = "https://zksync-os-testnet-alpha.zksync.dev/"
    destination_rpc_url: str = "https://eth-sepolia-testnet.api.pocket.network"
    rpc_timeout: float = 30.0
    source_chain_id: int = 8022833

    # Contracts
    interop_center_address: str = "0xc64315efbdcD90B71B0687E37ea741DE0E6cEFac"
    interop_handler_address: str = "0xB0dD4151fdcCaAC990F473533C15BcF8CE10b1de"
    base_token_address: str = "0x000000000000000000000000000000000000800A"
    l1_nullifier_address: str = ""

    # Persistence
    data_dir: Path = Path("data")
    finalized_history_limit: int = 50
    initial_scan_lookback: int = 5

    # Finalization
    confirmation_timeout: float = 300.0
    gas_price_bump_percent: int = 20
    bridge_wait_timeout: float = 600.0
    bridge_poll_interval: float = 5.0
    permanent_failure_retries: int = 0

    # Status server
    status_host: str = "0.0.0.0"
    status_port: int = 4340
    status_allowed_origin: str = "http://localhost:3000"

    log_level: str = "INFO"

    @field_validator(
        "interop_center_address",
        "interop_handler_address",
        "base_token_address",
        "l1_nullifier_address",
        "executor_address",
    )
    @classmethod
    def _check_address(cls, v: str) -> str:
        if v and not _ADDRESS_RE.match(v):
            raise ValueError(f"not a 20-byte hex address: {v!r}")
        return v

    @field_validator("finalized_history_limit", "gas_price_bump_percent", "permanent_failure_retries")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
