"""
Collaborator interfaces for the execution pipeline, with adapters for web3.py and eth-account.

The pipeline only depends on the `ChainClient` and `Wallet` protocols, so tests and alternate
transports can substitute their own implementations.
"""

from collections.abc import Mapping
from typing import Any, Protocol, Self

import eth_account
import tenacity
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.types import TxParams

from clankerkit.exceptions import ClankerKitValueError
from clankerkit.logging import logger
from clankerkit.transaction.types import ContractCall
from clankerkit.types.aliases import ChainId


class Wallet(Protocol):
    @property
    def address(self) -> ChecksumAddress: ...

    @property
    def chain_id(self) -> ChainId | None:
        """
        The chain the signer is bound to, or None if it signs for any chain.
        """

    def sign_transaction(self, transaction: TxParams) -> HexBytes:
        """
        Sign a fully populated transaction and return the raw signed bytes.
        """


class ChainClient(Protocol):
    @property
    def chain_id(self) -> ChainId:
        """
        The chain the client is bound to, known locally without a network request.
        """

    async def estimate_gas(self, call: ContractCall, sender: ChecksumAddress) -> int: ...

    async def call(self, call: ContractCall, sender: ChecksumAddress | None = None) -> HexBytes:
        """
        Execute a dry-run of the call against the latest state and return its raw output.
        """

    async def send_transaction(self, call: ContractCall, wallet: Wallet, gas: int) -> HexBytes:
        """
        Populate, sign with `wallet`, and broadcast the call. Returns the transaction hash.
        """

    async def wait_for_receipt(self, tx_hash: HexBytes, timeout: float) -> Mapping[str, Any]: ...


class LocalWallet:
    """
    A wallet holding a private key in memory.
    """

    def __init__(self, account: LocalAccount, chain_id: ChainId | None = None) -> None:
        self.account = account
        self._chain_id = chain_id

    @classmethod
    def from_key(cls, private_key: str | bytes, chain_id: ChainId | None = None) -> Self:
        return cls(eth_account.Account.from_key(private_key), chain_id=chain_id)

    @property
    def address(self) -> ChecksumAddress:
        return self.account.address

    @property
    def chain_id(self) -> ChainId | None:
        return self._chain_id

    def sign_transaction(self, transaction: TxParams) -> HexBytes:
        signed = self.account.sign_transaction(dict(transaction))
        return HexBytes(signed.raw_transaction)


class Web3ChainClient:
    """
    A `ChainClient` backed by an `AsyncWeb3` instance.
    """

    def __init__(self, w3: AsyncWeb3[Any], chain_id: ChainId) -> None:
        self.w3 = w3
        self._chain_id = chain_id

    @classmethod
    async def connect(cls, rpc_url: str, *, timeout: float = 10.0) -> Self:
        """
        Build a client for the RPC endpoint, waiting up to `timeout` seconds for it to respond. The
        chain ID is read once here and bound to the client.
        """

        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        async_w3_connected_check_with_retry = tenacity.AsyncRetrying(
            stop=tenacity.stop_after_delay(timeout),
            wait=tenacity.wait_exponential_jitter(),
            retry=tenacity.retry_if_result(lambda result: result is False),
        )
        try:
            await async_w3_connected_check_with_retry(w3.is_connected)
        except tenacity.RetryError as exc:
            raise ClankerKitValueError(message="Web3 instance is not connected.") from exc

        return cls(w3, await w3.eth.chain_id)

    @property
    def chain_id(self) -> ChainId:
        return self._chain_id

    async def estimate_gas(self, call: ContractCall, sender: ChecksumAddress) -> int:
        return await self.w3.eth.estimate_gas(call.to_tx_params(sender))

    async def call(self, call: ContractCall, sender: ChecksumAddress | None = None) -> HexBytes:
        return HexBytes(await self.w3.eth.call(call.to_tx_params(sender)))

    async def send_transaction(self, call: ContractCall, wallet: Wallet, gas: int) -> HexBytes:
        transaction = call.to_tx_params(wallet.address)
        transaction["gas"] = gas
        transaction["nonce"] = await self.w3.eth.get_transaction_count(wallet.address, "pending")

        latest_block = await self.w3.eth.get_block("latest")
        max_priority_fee = await self.w3.eth.max_priority_fee
        transaction["maxPriorityFeePerGas"] = max_priority_fee
        transaction["maxFeePerGas"] = 2 * latest_block["baseFeePerGas"] + max_priority_fee

        tx_hash = HexBytes(
            await self.w3.eth.send_raw_transaction(wallet.sign_transaction(transaction))
        )
        logger.debug(f"Broadcast transaction {tx_hash.to_0x_hex()} with nonce {transaction['nonce']}")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: HexBytes, timeout: float) -> Mapping[str, Any]:
        return await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
