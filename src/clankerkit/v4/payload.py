"""
Assembly of the `deployToken` call from a deployment request.

`compile_deployment` is pure: the same normalized config, deployment and registry always produce
the same payload. `build_deployment_payload` adds the optional vanity address query in front of it.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.abi import DEPLOY_TOKEN, LOCKER_DATA, MEV_SNIPER_AUCTION_DATA
from clankerkit.config import Settings
from clankerkit.config import settings as default_settings
from clankerkit.constants import ZERO_HASH
from clankerkit.deployments import ClankerV4Deployment, DeploymentRegistry
from clankerkit.logging import logger
from clankerkit.transaction.execution import token_address_from_receipt
from clankerkit.transaction.types import DeploymentCall
from clankerkit.types.aliases import BasisPoints, ChainId, Tick
from clankerkit.v4.extensions import Extension, compose_extensions, payload_value
from clankerkit.v4.fees import encode_fee_config
from clankerkit.v4.schema import FEE_IN_TO_INT, DeploymentRequest, NormalizedConfig, normalize
from clankerkit.v4.vanity import (
    AddressMiningOracle,
    HttpAddressMiningOracle,
    VanityAddress,
    mine_vanity_address,
)


@dataclasses.dataclass(slots=True, frozen=True)
class TokenConfig:
    token_admin: ChecksumAddress
    name: str
    symbol: str
    salt: HexBytes
    image: str
    metadata: str
    context: str
    originating_chain_id: ChainId

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.token_admin,
            self.name,
            self.symbol,
            bytes(self.salt),
            self.image,
            self.metadata,
            self.context,
            self.originating_chain_id,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class PoolConfig:
    hook: ChecksumAddress
    paired_token: ChecksumAddress
    tick_if_token0_is_clanker: Tick
    tick_spacing: Tick
    pool_data: HexBytes

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.hook,
            self.paired_token,
            self.tick_if_token0_is_clanker,
            self.tick_spacing,
            bytes(self.pool_data),
        )


@dataclasses.dataclass(slots=True, frozen=True)
class LockerConfig:
    locker: ChecksumAddress
    reward_admins: tuple[ChecksumAddress, ...]
    reward_recipients: tuple[ChecksumAddress, ...]
    reward_bps: tuple[BasisPoints, ...]
    tick_lower: tuple[Tick, ...]
    tick_upper: tuple[Tick, ...]
    position_bps: tuple[BasisPoints, ...]
    locker_data: HexBytes

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.locker,
            list(self.reward_admins),
            list(self.reward_recipients),
            list(self.reward_bps),
            list(self.tick_lower),
            list(self.tick_upper),
            list(self.position_bps),
            bytes(self.locker_data),
        )


@dataclasses.dataclass(slots=True, frozen=True)
class MevModuleConfig:
    mev_module: ChecksumAddress
    mev_module_data: HexBytes

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (self.mev_module, bytes(self.mev_module_data))


@dataclasses.dataclass(slots=True, frozen=True)
class DeploymentConfig:
    token_config: TokenConfig
    pool_config: PoolConfig
    locker_config: LockerConfig
    mev_module_config: MevModuleConfig
    extension_configs: tuple[Extension, ...]

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.token_config.as_abi_tuple(),
            self.pool_config.as_abi_tuple(),
            self.locker_config.as_abi_tuple(),
            self.mev_module_config.as_abi_tuple(),
            [extension.as_abi_tuple() for extension in self.extension_configs],
        )


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class DeploymentPayload(DeploymentCall):
    """
    A v4 `deployToken` call, with the structured config it encodes.
    """

    deployment_config: DeploymentConfig

    def token_address_from_receipt(self, receipt: Mapping[str, Any]) -> ChecksumAddress:
        return token_address_from_receipt(receipt, self.address)


def locker_config(config: NormalizedConfig, deployment: ClankerV4Deployment) -> LockerConfig:
    recipients = config.rewards.recipients
    positions = config.pool.positions
    return LockerConfig(
        locker=(
            deployment.related.locker
            if config.locker.locker == "Locker"
            else config.locker.locker
        ),
        reward_admins=tuple(recipient.admin for recipient in recipients),
        reward_recipients=tuple(recipient.recipient for recipient in recipients),
        reward_bps=tuple(recipient.bps for recipient in recipients),
        tick_lower=tuple(position.tick_lower for position in positions),
        tick_upper=tuple(position.tick_upper for position in positions),
        position_bps=tuple(position.position_bps for position in positions),
        locker_data=HexBytes(
            eth_abi.abi.encode(
                types=LOCKER_DATA,
                args=([FEE_IN_TO_INT[recipient.token] for recipient in recipients],),
            )
        ),
    )


def mev_module_config(config: NormalizedConfig, deployment: ClankerV4Deployment) -> MevModuleConfig:
    """
    Second generation MEV modules take the sniper fee schedule. First generation modules take no
    data.
    """

    if deployment.related.mev_module_v2 is None:
        return MevModuleConfig(mev_module=deployment.related.mev_module, mev_module_data=HexBytes(b""))

    sniper_fees = config.sniper_fees
    return MevModuleConfig(
        mev_module=deployment.related.mev_module_v2,
        mev_module_data=HexBytes(
            eth_abi.abi.encode(
                types=MEV_SNIPER_AUCTION_DATA,
                args=(
                    (
                        sniper_fees.starting_fee,
                        sniper_fees.ending_fee,
                        sniper_fees.seconds_to_decay,
                    ),
                ),
            )
        ),
    )


def compile_deployment(
    config: NormalizedConfig,
    registry: DeploymentRegistry,
    vanity: VanityAddress | None = None,
) -> DeploymentPayload:
    """
    Encode a normalized config into the `deployToken` call for its chain.
    """

    deployment = registry.get(config.chain_id)

    fee_hook = encode_fee_config(config.fees, deployment, config.pool_extension)
    extensions = compose_extensions(config, deployment, registry.default_supply)

    deployment_config = DeploymentConfig(
        token_config=TokenConfig(
            token_admin=config.token_admin,
            name=config.name,
            symbol=config.symbol,
            salt=ZERO_HASH if vanity is None else vanity.salt,
            image=config.image,
            metadata=config.metadata_json,
            context=config.context_json,
            originating_chain_id=config.chain_id,
        ),
        pool_config=PoolConfig(
            hook=fee_hook.hook,
            paired_token=(
                registry.wrapped_native_token(config.chain_id)
                if config.pool.paired_token == "WETH"
                else config.pool.paired_token
            ),
            tick_if_token0_is_clanker=config.pool.tick_if_token0_is_clanker,
            tick_spacing=config.pool.tick_spacing,
            pool_data=fee_hook.pool_data,
        ),
        locker_config=locker_config(config, deployment),
        mev_module_config=mev_module_config(config, deployment),
        extension_configs=extensions,
    )

    payload = DeploymentPayload(
        address=deployment.address,
        function_prototype=DEPLOY_TOKEN,
        args=(deployment_config.as_abi_tuple(),),
        chain_id=config.chain_id,
        value=payload_value(config),
        deployment_config=deployment_config,
        expected_address=None if vanity is None else vanity.address,
    )
    logger.debug(
        f"Compiled {config.symbol} deployment for {deployment.name} with {len(extensions)} "
        f"extensions, value {payload.value}"
    )
    return payload


async def build_deployment_payload(
    request: DeploymentRequest | Mapping[str, Any],
    *,
    registry: DeploymentRegistry,
    oracle: AddressMiningOracle | None = None,
    settings: Settings | None = None,
) -> DeploymentPayload:
    """
    Validate a deployment request and compile it into a `deployToken` payload.

    If the request asks for a vanity address, the oracle is queried for a salt. Without an explicit
    oracle, the HTTP oracle at the configured `vanity_service_url` is used.
    """

    if settings is None:
        settings = default_settings

    config = normalize(request)
    deployment = registry.get(config.chain_id)

    vanity: VanityAddress | None = None
    if config.vanity:
        # Compile errors surface before the oracle is queried
        compile_deployment(config, registry)
        if oracle is None:
            oracle = HttpAddressMiningOracle(
                url=str(settings.vanity_service_url),
                timeout=settings.http.timeout,
            )
        vanity = await mine_vanity_address(
            config=config,
            deployment=deployment,
            oracle=oracle,
            suffix=settings.vanity_suffix,
            total_supply=registry.default_supply,
        )

    return compile_deployment(config, registry, vanity)
