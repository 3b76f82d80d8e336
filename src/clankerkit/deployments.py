import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.checksum_cache import get_checksum_address
from clankerkit.constants import DEFAULT_SUPPLY
from clankerkit.exceptions import ClankerKitValueError, ConfigurationError
from clankerkit.logging import logger
from clankerkit.types.aliases import ChainId

if TYPE_CHECKING:
    from clankerkit.config import Settings


@dataclass(slots=True, frozen=True, kw_only=True)
class ClankerV4RelatedContracts:
    locker: ChecksumAddress
    fee_locker: ChecksumAddress
    vault: ChecksumAddress
    airdrop: ChecksumAddress
    devbuy: ChecksumAddress
    mev_module: ChecksumAddress
    fee_static_hook: ChecksumAddress
    fee_dynamic_hook: ChecksumAddress
    # Second generation (v4.1) modules, absent on older deployments
    fee_static_hook_v2: ChecksumAddress | None = None
    fee_dynamic_hook_v2: ChecksumAddress | None = None
    mev_module_v2: ChecksumAddress | None = None
    devbuy_v3: ChecksumAddress | None = None

    @property
    def supports_pool_initialization_wrapper(self) -> bool:
        return self.fee_static_hook_v2 is not None or self.fee_dynamic_hook_v2 is not None


@dataclass(slots=True, frozen=True, kw_only=True)
class ClankerV4Deployment:
    name: str
    chain_id: ChainId
    address: ChecksumAddress
    related: ClankerV4RelatedContracts
    token_bytecode: HexBytes | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ClankerV3Deployment:
    """
    A Clanker v3.1 factory, which deploys tokens paired through Uniswap V3 and locks the liquidity
    position in its LP locker.
    """

    name: str
    chain_id: ChainId
    address: ChecksumAddress
    locker: ChecksumAddress
    token_bytecode: HexBytes | None = None


class DeploymentRegistry:
    """
    Per-chain Clanker deployments plus the chain constants needed to compile a deployment.

    A registry is resolved once per deployment attempt and passed explicitly to the compiler, so
    tests and alternate networks can substitute their own.
    """

    def __init__(
        self,
        *,
        default_supply: int = DEFAULT_SUPPLY,
    ) -> None:
        self.default_supply = default_supply
        self._deployments: dict[ChainId, ClankerV4Deployment] = {}
        self._wrapped_native_tokens: dict[ChainId, ChecksumAddress] = {}
        self._v3_deployments: dict[ChainId, ClankerV3Deployment] = {}

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._deployments

    @property
    def chain_ids(self) -> tuple[ChainId, ...]:
        return tuple(self._deployments)

    @property
    def v3_chain_ids(self) -> tuple[ChainId, ...]:
        return tuple(self._v3_deployments)

    def register(
        self,
        deployment: ClankerV4Deployment,
        wrapped_native_token: str,
        *,
        replace: bool = False,
    ) -> None:
        if deployment.chain_id in self._deployments and not replace:
            raise ClankerKitValueError(message="Deployment is already registered.")

        self._deployments[deployment.chain_id] = deployment
        self._wrapped_native_tokens[deployment.chain_id] = get_checksum_address(
            wrapped_native_token
        )

    def get(self, chain_id: ChainId) -> ClankerV4Deployment:
        try:
            return self._deployments[chain_id]
        except KeyError:
            raise ConfigurationError(
                message=f"No clanker v4 configuration for chain {chain_id}"
            ) from None

    def wrapped_native_token(self, chain_id: ChainId) -> ChecksumAddress:
        try:
            return self._wrapped_native_tokens[chain_id]
        except KeyError:
            raise ConfigurationError(
                message=f"No wrapped native token known for chain {chain_id}"
            ) from None

    def attach_token_bytecode(self, chain_id: ChainId, bytecode: bytes | str) -> None:
        """
        Set the token creation bytecode used to hash the token init code for vanity mining.
        """
        self._deployments[chain_id] = dataclasses.replace(
            self.get(chain_id),
            token_bytecode=HexBytes(bytecode),
        )

    def register_v3(self, deployment: ClankerV3Deployment, *, replace: bool = False) -> None:
        if deployment.chain_id in self._v3_deployments and not replace:
            raise ClankerKitValueError(message="Deployment is already registered.")

        self._v3_deployments[deployment.chain_id] = deployment

    def get_v3(self, chain_id: ChainId) -> ClankerV3Deployment:
        try:
            return self._v3_deployments[chain_id]
        except KeyError:
            raise ConfigurationError(
                message=f"No clanker v3.1 configuration for chain {chain_id}"
            ) from None

    def attach_v3_token_bytecode(self, chain_id: ChainId, bytecode: bytes | str) -> None:
        self._v3_deployments[chain_id] = dataclasses.replace(
            self.get_v3(chain_id),
            token_bytecode=HexBytes(bytecode),
        )


# Base --------------- START
BaseClankerV4 = ClankerV4Deployment(
    name="Base Clanker V4",
    chain_id=8453,
    address=get_checksum_address("0xE85A59c628F7d27878ACeB4bf3b35733630083a9"),
    related=ClankerV4RelatedContracts(
        locker=get_checksum_address("0x29d17C1A8D851d7d4cA97FAe97AcAdb398D9cCE0"),
        fee_locker=get_checksum_address("0xF3622742b1E446D92e45E22923Ef11C2fcD55D68"),
        vault=get_checksum_address("0x8E845EAd15737bF71904A30BdDD3aEE76d6ADF6C"),
        airdrop=get_checksum_address("0x56Fa0Da89eD94822e46734e736d34Cab72dF344F"),
        devbuy=get_checksum_address("0x1331f0788F9c08C8F38D52c7a1152250A9dE00be"),
        mev_module=get_checksum_address("0xE143f9872A33c955F23cF442BB4B1EFB3A7402A2"),
        fee_static_hook=get_checksum_address("0xDd5EeaFf7BD481AD55Db083062b13a3cdf0A68CC"),
        fee_dynamic_hook=get_checksum_address("0x34a45c6B61876d739400Bd71228CbcbD4F53E8cC"),
    ),
)
BaseClankerV3_1 = ClankerV3Deployment(
    name="Base Clanker V3.1",
    chain_id=8453,
    address=get_checksum_address("0x2A787b2362021cC3eEa3C24C4748a6cD5B687382"),
    locker=get_checksum_address("0x33e2Eda238edcF470309b8c6D228986A1204c8f9"),
)
BaseWrappedEther = get_checksum_address("0x4200000000000000000000000000000000000006")
# Base --------------- END


def default_registry(settings: "Settings | None" = None) -> DeploymentRegistry:
    """
    Build a registry holding the known deployments, with token bytecode attached from the
    settings' `token_bytecode` and `v3_token_bytecode` paths.
    """

    registry = DeploymentRegistry()
    registry.register(BaseClankerV4, BaseWrappedEther)
    registry.register_v3(BaseClankerV3_1)

    if settings is not None:
        for chain_id, path in settings.token_bytecode.items():
            if chain_id not in registry:
                logger.warning(f"Ignoring token bytecode for unregistered chain {chain_id}")
                continue
            registry.attach_token_bytecode(chain_id, _read_bytecode(path))
        for chain_id, path in settings.v3_token_bytecode.items():
            if chain_id not in registry.v3_chain_ids:
                logger.warning(f"Ignoring v3.1 token bytecode for unregistered chain {chain_id}")
                continue
            registry.attach_v3_token_bytecode(chain_id, _read_bytecode(path))

    return registry


def _read_bytecode(path: Path) -> HexBytes:
    return HexBytes(path.read_text().strip())
