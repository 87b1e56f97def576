"""Destination chain (L1) client backed by web3."""

import logging

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted
from web3.providers import AsyncHTTPProvider

from interop.errors import ConfirmationTimeout
from interop.models import DestinationReceipt

logger = logging.getLogger(__name__)

# Safety margin on top of the node's gas estimate
GAS_LIMIT_MULTIPLIER = 1.2


class DestinationChainClient:
    """Signs and submits transactions from the executor account."""

    def __init__(self, rpc_url: str, private_key: str, timeout: float = 30.0):
        self.w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self.account: LocalAccount = Account.from_key(private_key)
        self._chain_id: int | None = None

    @property
    def address(self) -> str:
        return self.account.address

    async def close(self) -> None:
        await self.w3.provider.disconnect()

    async def _get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await self.w3.eth.chain_id
        return self._chain_id

    async def get_gas_price(self) -> int:
        return await self.w3.eth.gas_price

    async def send_transaction(
        self, to: str, data: str, *, gas_price: int | None = None, value: int = 0
    ) -> str:
        """Estimate, sign and broadcast a legacy-priced transaction.

        A reverting call fails here, during gas estimation, with the node's
        revert message (web3 ContractLogicError).
        """
        tx = {
            "from": self.account.address,
            "to": AsyncWeb3.to_checksum_address(to),
            "data": data,
            "value": value,
            "chainId": await self._get_chain_id(),
            "nonce": await self.w3.eth.get_transaction_count(self.account.address, "pending"),
            "gasPrice": gas_price if gas_price is not None else await self.get_gas_price(),
        }
        gas_estimate = await self.w3.eth.estimate_gas(tx)
        tx["gas"] = int(gas_estimate * GAS_LIMIT_MULTIPLIER)

        signed = self.account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        hex_hash = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"Sent {hex_hash} (nonce={tx['nonce']} gas={tx['gas']} gasPrice={tx['gasPrice']})")
        return hex_hash

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> DestinationReceipt:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise ConfirmationTimeout(tx_hash, timeout) from e

        return DestinationReceipt(
            tx_hash=tx_hash,
            status=receipt["status"],
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )

    async def call(self, to: str, data: str) -> bytes:
        result = await self.w3.eth.call({"to": AsyncWeb3.to_checksum_address(to), "data": data})
        return bytes(result)
