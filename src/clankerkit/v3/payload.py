"""
Assembly of the v3.1 `deployToken` call from a deployment request.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Final

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.abi import TOKEN_CONSTRUCTOR, TRANSFER_EVENT, V3_DEPLOY_TOKEN
from clankerkit.checksum_cache import get_checksum_address
from clankerkit.config import Settings
from clankerkit.config import settings as default_settings
from clankerkit.constants import SECONDS_PER_DAY, ZERO_ADDRESS, ZERO_HASH
from clankerkit.deployments import ClankerV3Deployment, DeploymentRegistry
from clankerkit.exceptions import ConfigurationError, TokenCreatedEventMissing
from clankerkit.functions import eth_to_wei, event_topic
from clankerkit.logging import logger
from clankerkit.transaction.types import DeploymentCall
from clankerkit.types.aliases import ChainId, Tick
from clankerkit.v3.pool import desired_price, starting_tick
from clankerkit.v3.schema import DeploymentRequest, parse_request
from clankerkit.v4.vanity import (
    AddressMiningOracle,
    HttpAddressMiningOracle,
    VanityAddress,
    resolve_vanity_address,
)

# The v3.1 factory always buys through the 1% pool of the paired token
PAIRED_TOKEN_POOL_FEE: Final = 10_000

TRANSFER_TOPIC = event_topic(TRANSFER_EVENT)


@dataclasses.dataclass(slots=True, frozen=True)
class TokenConfig:
    name: str
    symbol: str
    salt: HexBytes
    image: str
    metadata: str
    context: str
    originating_chain_id: ChainId

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.name,
            self.symbol,
            bytes(self.salt),
            self.image,
            self.metadata,
            self.context,
            self.originating_chain_id,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class VaultConfig:
    vault_percentage: int
    vault_duration: int

    def as_abi_tuple(self) -> tuple[int, int]:
        return (self.vault_percentage, self.vault_duration)


@dataclasses.dataclass(slots=True, frozen=True)
class PoolConfig:
    paired_token: ChecksumAddress
    tick_if_token0_is_new_token: Tick

    def as_abi_tuple(self) -> tuple[str, int]:
        return (self.paired_token, self.tick_if_token0_is_new_token)


@dataclasses.dataclass(slots=True, frozen=True)
class InitialBuyConfig:
    paired_token_pool_fee: int
    paired_token_swap_amount_out_minimum: int

    def as_abi_tuple(self) -> tuple[int, int]:
        return (self.paired_token_pool_fee, self.paired_token_swap_amount_out_minimum)


@dataclasses.dataclass(slots=True, frozen=True)
class RewardsConfig:
    creator_reward: int
    creator_admin: ChecksumAddress
    creator_reward_recipient: ChecksumAddress
    interface_admin: ChecksumAddress
    interface_reward_recipient: ChecksumAddress

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.creator_reward,
            self.creator_admin,
            self.creator_reward_recipient,
            self.interface_admin,
            self.interface_reward_recipient,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class DeploymentConfig:
    token_config: TokenConfig
    vault_config: VaultConfig
    pool_config: PoolConfig
    initial_buy_config: InitialBuyConfig
    rewards_config: RewardsConfig

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            self.token_config.as_abi_tuple(),
            self.vault_config.as_abi_tuple(),
            self.pool_config.as_abi_tuple(),
            self.initial_buy_config.as_abi_tuple(),
            self.rewards_config.as_abi_tuple(),
        )


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class DeploymentPayload(DeploymentCall):
    """
    A v3.1 `deployToken` call, with the structured config it encodes.
    """

    deployment_config: DeploymentConfig

    def token_address_from_receipt(self, receipt: Mapping[str, Any]) -> ChecksumAddress:
        """
        The token mints its whole supply in its constructor, so the deployed address is the emitter
        of the first ERC20 mint in the receipt.
        """

        for log in receipt["logs"]:
            topics = log["topics"]
            # ERC721 transfers share the signature, but also index the token ID
            if (
                len(topics) == 3  # noqa: PLR2004
                and HexBytes(topics[0]) == TRANSFER_TOPIC
                and get_checksum_address(HexBytes(topics[1])[-20:]) == ZERO_ADDRESS
            ):
                return get_checksum_address(log["address"])

        raise TokenCreatedEventMissing(tx_hash=receipt["transactionHash"])


def token_init_code(
    request: DeploymentRequest,
    creator_admin: ChecksumAddress,
    bytecode: bytes,
    total_supply: int,
) -> HexBytes:
    return HexBytes(
        bytes(bytecode)
        + eth_abi.abi.encode(
            types=TOKEN_CONSTRUCTOR,
            args=(
                request.name,
                request.symbol,
                total_supply,
                creator_admin,
                request.image,
                request.metadata_json,
                request.context_json,
                request.chain_id,
            ),
        )
    )


def compile_deployment(
    request: DeploymentRequest,
    registry: DeploymentRegistry,
    requestor: ChecksumAddress,
    vanity: VanityAddress | None = None,
) -> DeploymentPayload:
    """
    Encode a v3.1 request into the `deployToken` call for its chain. Admins and reward recipients
    not set in the request fall back to `requestor`.
    """

    deployment = registry.get_v3(request.chain_id)
    rewards = request.rewards

    price, paired_token = desired_price(request.pool.quote_token, request.pool.initial_market_cap)

    deployment_config = DeploymentConfig(
        token_config=TokenConfig(
            name=request.name,
            symbol=request.symbol,
            salt=ZERO_HASH if vanity is None else vanity.salt,
            image=request.image,
            metadata=request.metadata_json,
            context=request.context_json,
            originating_chain_id=request.chain_id,
        ),
        vault_config=VaultConfig(
            vault_percentage=request.vault.percentage,
            vault_duration=int(request.vault.duration_in_days * SECONDS_PER_DAY),
        ),
        pool_config=PoolConfig(
            paired_token=paired_token,
            tick_if_token0_is_new_token=starting_tick(price),
        ),
        initial_buy_config=InitialBuyConfig(
            paired_token_pool_fee=PAIRED_TOKEN_POOL_FEE,
            paired_token_swap_amount_out_minimum=eth_to_wei(request.dev_buy.amount_out_min),
        ),
        rewards_config=RewardsConfig(
            creator_reward=rewards.creator_reward,
            creator_admin=rewards.creator_admin or requestor,
            creator_reward_recipient=rewards.creator_reward_recipient or requestor,
            interface_admin=rewards.interface_admin or requestor,
            interface_reward_recipient=rewards.interface_reward_recipient or requestor,
        ),
    )

    payload = DeploymentPayload(
        address=deployment.address,
        function_prototype=V3_DEPLOY_TOKEN,
        args=(deployment_config.as_abi_tuple(),),
        chain_id=request.chain_id,
        value=eth_to_wei(request.dev_buy.eth_amount),
        deployment_config=deployment_config,
        expected_address=None if vanity is None else vanity.address,
    )
    logger.debug(
        f"Compiled {request.symbol} v3.1 deployment for {deployment.name}, paired with "
        f"{paired_token} at tick {deployment_config.pool_config.tick_if_token0_is_new_token}"
    )
    return payload


async def mine_vanity_address(
    request: DeploymentRequest,
    deployment: ClankerV3Deployment,
    creator_admin: ChecksumAddress,
    oracle: AddressMiningOracle,
    suffix: str,
    total_supply: int,
) -> VanityAddress:
    if deployment.token_bytecode is None:
        raise ConfigurationError(
            message=f"v3.1 token bytecode is not configured for chain {deployment.chain_id}, "
            "vanity addresses cannot be mined."
        )

    return await resolve_vanity_address(
        oracle,
        admin=creator_admin,
        deployer=deployment.address,
        init_code=token_init_code(request, creator_admin, deployment.token_bytecode, total_supply),
        suffix=suffix,
    )


async def build_deployment_payload(
    request: DeploymentRequest | Mapping[str, Any],
    requestor: str,
    *,
    registry: DeploymentRegistry,
    oracle: AddressMiningOracle | None = None,
    settings: Settings | None = None,
) -> DeploymentPayload:
    """
    Validate a v3.1 deployment request and compile it into a `deployToken` payload, mining a
    vanity address unless the request opts out.
    """

    if settings is None:
        settings = default_settings

    requestor = get_checksum_address(requestor)
    request = parse_request(request)
    deployment = registry.get_v3(request.chain_id)

    vanity: VanityAddress | None = None
    if request.vanity:
        if oracle is None:
            oracle = HttpAddressMiningOracle(
                url=str(settings.vanity_service_url),
                timeout=settings.http.timeout,
            )
        vanity = await mine_vanity_address(
            request=request,
            deployment=deployment,
            creator_admin=request.rewards.creator_admin or requestor,
            oracle=oracle,
            suffix=settings.vanity_suffix,
            total_supply=registry.default_supply,
        )

    return compile_deployment(request, registry, requestor, vanity)
