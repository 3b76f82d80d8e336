import logging
from collections.abc import Mapping
from typing import Any

import pytest
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.types import TxParams

from clankerkit.checksum_cache import get_checksum_address
from clankerkit.deployments import (
    ClankerV3Deployment,
    ClankerV4Deployment,
    ClankerV4RelatedContracts,
    DeploymentRegistry,
)
from clankerkit.logging import logger
from clankerkit.transaction.types import ContractCall
from clankerkit.v4.vanity import VanityAddress

CHAIN_ID = 8453

TOKEN_ADMIN = get_checksum_address("0x1111111111111111111111111111111111111111")
OTHER_ACCOUNT = get_checksum_address("0x2222222222222222222222222222222222222222")
WRAPPED_NATIVE = get_checksum_address("0x4200000000000000000000000000000000000006")

FACTORY = get_checksum_address("0x00000000000000000000000000000000000000f0")
RELATED = ClankerV4RelatedContracts(
    locker=get_checksum_address("0x00000000000000000000000000000000000000a1"),
    fee_locker=get_checksum_address("0x00000000000000000000000000000000000000a2"),
    vault=get_checksum_address("0x00000000000000000000000000000000000000a3"),
    airdrop=get_checksum_address("0x00000000000000000000000000000000000000a4"),
    devbuy=get_checksum_address("0x00000000000000000000000000000000000000a5"),
    mev_module=get_checksum_address("0x00000000000000000000000000000000000000a6"),
    fee_static_hook=get_checksum_address("0x00000000000000000000000000000000000000a7"),
    fee_dynamic_hook=get_checksum_address("0x00000000000000000000000000000000000000a8"),
)
RELATED_V2 = ClankerV4RelatedContracts(
    locker=RELATED.locker,
    fee_locker=RELATED.fee_locker,
    vault=RELATED.vault,
    airdrop=RELATED.airdrop,
    devbuy=RELATED.devbuy,
    mev_module=RELATED.mev_module,
    fee_static_hook=RELATED.fee_static_hook,
    fee_dynamic_hook=RELATED.fee_dynamic_hook,
    fee_static_hook_v2=get_checksum_address("0x00000000000000000000000000000000000000b7"),
    fee_dynamic_hook_v2=get_checksum_address("0x00000000000000000000000000000000000000b8"),
    mev_module_v2=get_checksum_address("0x00000000000000000000000000000000000000b6"),
    devbuy_v3=get_checksum_address("0x00000000000000000000000000000000000000b5"),
)

V3_FACTORY = get_checksum_address("0x00000000000000000000000000000000000000c0")
V3_LOCKER = get_checksum_address("0x00000000000000000000000000000000000000c1")

# Stand-in creation bytecode, only hashed by the tests
TOKEN_BYTECODE = HexBytes("0x6080604052")


@pytest.fixture(scope="session", autouse=True)
def _set_clankerkit_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def deployment() -> ClankerV4Deployment:
    return ClankerV4Deployment(
        name="Test Clanker V4",
        chain_id=CHAIN_ID,
        address=FACTORY,
        related=RELATED,
        token_bytecode=TOKEN_BYTECODE,
    )


@pytest.fixture
def deployment_v2() -> ClankerV4Deployment:
    return ClankerV4Deployment(
        name="Test Clanker V4.1",
        chain_id=CHAIN_ID,
        address=FACTORY,
        related=RELATED_V2,
        token_bytecode=TOKEN_BYTECODE,
    )


@pytest.fixture
def registry(deployment: ClankerV4Deployment) -> DeploymentRegistry:
    registry = DeploymentRegistry()
    registry.register(deployment, WRAPPED_NATIVE)
    return registry


@pytest.fixture
def registry_v2(deployment_v2: ClankerV4Deployment) -> DeploymentRegistry:
    registry = DeploymentRegistry()
    registry.register(deployment_v2, WRAPPED_NATIVE)
    return registry


@pytest.fixture
def v3_deployment() -> ClankerV3Deployment:
    return ClankerV3Deployment(
        name="Test Clanker V3.1",
        chain_id=CHAIN_ID,
        address=V3_FACTORY,
        locker=V3_LOCKER,
        token_bytecode=TOKEN_BYTECODE,
    )


@pytest.fixture
def v3_registry(v3_deployment: ClankerV3Deployment) -> DeploymentRegistry:
    registry = DeploymentRegistry()
    registry.register_v3(v3_deployment)
    return registry


@pytest.fixture
def minimal_request() -> dict[str, Any]:
    return {
        "name": "Test Token",
        "symbol": "TEST",
        "tokenAdmin": TOKEN_ADMIN,
    }


class FakeChainClient:
    """
    A scripted chain client. Set `*_error` attributes to make the matching call raise.
    """

    def __init__(self, chain_id: int = CHAIN_ID) -> None:
        self.chain_id = chain_id
        self.gas = 100_000
        self.call_result = HexBytes(b"")
        self.tx_hash = HexBytes(b"\x01" * 32)
        self.receipt: Mapping[str, Any] | None = None

        self.estimate_error: BaseException | None = None
        self.call_error: BaseException | None = None
        self.send_error: BaseException | None = None
        self.receipt_error: BaseException | None = None

        self.estimated: list[ContractCall] = []
        self.simulated: list[ContractCall] = []
        self.sent: list[tuple[ContractCall, int]] = []

    async def estimate_gas(self, call: ContractCall, sender: ChecksumAddress) -> int:
        self.estimated.append(call)
        if self.estimate_error is not None:
            raise self.estimate_error
        return self.gas

    async def call(self, call: ContractCall, sender: ChecksumAddress | None = None) -> HexBytes:
        self.simulated.append(call)
        if self.call_error is not None:
            raise self.call_error
        return self.call_result

    async def send_transaction(self, call: ContractCall, wallet: Any, gas: int) -> HexBytes:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((call, gas))
        return self.tx_hash

    async def wait_for_receipt(self, tx_hash: HexBytes, timeout: float) -> Mapping[str, Any]:
        if self.receipt_error is not None:
            raise self.receipt_error
        assert self.receipt is not None
        return self.receipt


class FakeWallet:
    def __init__(
        self,
        address: ChecksumAddress = TOKEN_ADMIN,
        chain_id: int | None = CHAIN_ID,
    ) -> None:
        self._address = address
        self._chain_id = chain_id

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    @property
    def chain_id(self) -> int | None:
        return self._chain_id

    def sign_transaction(self, transaction: TxParams) -> HexBytes:
        return HexBytes(b"\xff")


class FakeOracle:
    def __init__(self, vanity: VanityAddress) -> None:
        self.vanity = vanity
        self.queries: list[dict[str, Any]] = []

    async def resolve(
        self,
        admin: ChecksumAddress,
        deployer: ChecksumAddress,
        init_code_hash: HexBytes,
        suffix: str,
    ) -> VanityAddress:
        self.queries.append(
            {
                "admin": admin,
                "deployer": deployer,
                "init_code_hash": init_code_hash,
                "suffix": suffix,
            }
        )
        return self.vanity


class FakeResponse:
    def __init__(self, payload: Any, error: BaseException | None = None) -> None:
        self.payload = payload
        self.error = error

    async def __aenter__(self) -> "FakeResponse":
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def json(self, content_type: str | None = "application/json") -> Any:
        return self.payload


class FakeHttpSession:
    """
    Stands in for an `aiohttp.ClientSession`, recording each request and replaying one response.
    """

    def __init__(self, payload: Any = None, error: BaseException | None = None) -> None:
        self.payload = payload
        self.error = error
        self.requests: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        return FakeResponse(self.payload, self.error)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)

    async def close(self) -> None:
        return None


@pytest.fixture
def chain_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()
