"""
Composition of the optional deployment extensions.

Extensions run in the order they are listed in the deployment config, so the list is always
built as vault, then airdrop, then dev buy. Absent extensions are omitted.
"""

import dataclasses
from typing import Never, NoReturn

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.abi import AIRDROP_DATA, DEVBUY_V3_DATA, DEVBUY_V4_DATA, VAULT_DATA
from clankerkit.constants import DEFAULT_SUPPLY, TOKEN_DECIMALS
from clankerkit.deployments import ClankerV4Deployment
from clankerkit.exceptions import ConfigurationError, ValidationError
from clankerkit.functions import eth_to_wei
from clankerkit.logging import logger
from clankerkit.types.aliases import BasisPoints, Wei
from clankerkit.v4.allocation import allocate_bps
from clankerkit.v4.schema import DevBuyV3, DevBuyV4, NormalizedConfig

# The factory rejects deployments whose extensions claim more than 90% of the supply
MAX_EXTENSION_BPS = 9_000


@dataclasses.dataclass(slots=True, frozen=True)
class Extension:
    extension: ChecksumAddress
    msg_value: Wei
    extension_bps: BasisPoints
    extension_data: HexBytes

    def as_abi_tuple(self) -> tuple[str, int, int, bytes]:
        return (self.extension, self.msg_value, self.extension_bps, bytes(self.extension_data))


def vault_extension(config: NormalizedConfig, deployment: ClankerV4Deployment) -> Extension:
    assert config.vault is not None
    vault = config.vault
    return Extension(
        extension=deployment.related.vault,
        msg_value=0,
        extension_bps=vault.bps,
        extension_data=HexBytes(
            eth_abi.abi.encode(
                types=VAULT_DATA,
                args=(
                    vault.recipient or config.token_admin,
                    vault.lockup_duration,
                    vault.vesting_duration,
                ),
            )
        ),
    )


def airdrop_extension(
    config: NormalizedConfig,
    deployment: ClankerV4Deployment,
    total_supply: int = DEFAULT_SUPPLY,
) -> Extension:
    assert config.airdrop is not None
    airdrop = config.airdrop
    allocation = allocate_bps(
        amount=airdrop.amount * 10**TOKEN_DECIMALS,
        total_supply=total_supply,
    )
    return Extension(
        extension=deployment.related.airdrop,
        msg_value=0,
        extension_bps=allocation.bps,
        extension_data=HexBytes(
            eth_abi.abi.encode(
                types=AIRDROP_DATA,
                args=(
                    airdrop.admin or config.token_admin,
                    bytes(airdrop.merkle_root),
                    airdrop.lockup_duration,
                    airdrop.vesting_duration,
                ),
            )
        ),
    )


def _unsupported_dev_buy(dev_buy: Never) -> NoReturn:
    # Type checkers reject any call site where `dev_buy` could still be a handled variant
    raise ConfigurationError(message=f"Invalid dev buy pool type {type(dev_buy).__name__}")


def dev_buy_extension(config: NormalizedConfig, deployment: ClankerV4Deployment) -> Extension:
    """
    The dev buy consumes native value, not token supply, so its share is always zero.
    """

    assert config.dev_buy is not None
    dev_buy = config.dev_buy

    match dev_buy:
        case DevBuyV4():
            extension = deployment.related.devbuy
            extension_data = eth_abi.abi.encode(
                types=DEVBUY_V4_DATA,
                args=(
                    dev_buy.pool_key.as_abi_tuple(),
                    eth_to_wei(dev_buy.amount_out_min),
                    config.token_admin,
                ),
            )
        case DevBuyV3():
            if deployment.related.devbuy_v3 is None:
                raise ConfigurationError(
                    message=(
                        "V3 devBuy extension is not deployed on this chain. "
                        'Use poolType: "v4" instead.'
                    )
                )
            extension = deployment.related.devbuy_v3
            extension_data = eth_abi.abi.encode(
                types=DEVBUY_V3_DATA,
                args=(
                    dev_buy.v3_pool_fee,
                    eth_to_wei(dev_buy.amount_out_min),
                    config.token_admin,
                ),
            )
        case _:
            _unsupported_dev_buy(dev_buy)

    return Extension(
        extension=extension,
        msg_value=eth_to_wei(dev_buy.eth_amount),
        extension_bps=0,
        extension_data=HexBytes(extension_data),
    )


def compose_extensions(
    config: NormalizedConfig,
    deployment: ClankerV4Deployment,
    total_supply: int = DEFAULT_SUPPLY,
) -> tuple[Extension, ...]:
    """
    Build the ordered extension list for a normalized config.

    Raises `ConfigurationError` if the deployment lacks a requested module, `PrecisionError` if the
    airdrop amount cannot be expressed in basis points, and `ValidationError` if the extensions
    together claim more than 90% of the supply.
    """

    extensions: list[Extension] = []
    if config.vault is not None:
        extensions.append(vault_extension(config, deployment))
    if config.airdrop is not None:
        extensions.append(airdrop_extension(config, deployment, total_supply))
    if config.dev_buy is not None:
        extensions.append(dev_buy_extension(config, deployment))

    if (total_bps := sum(extension.extension_bps for extension in extensions)) > MAX_EXTENSION_BPS:
        raise ValidationError(
            field="extensions",
            reason=f"Extensions allocate {total_bps} bps, more than the {MAX_EXTENSION_BPS} bps maximum",
        )

    logger.debug(
        f"Composed {len(extensions)} extensions: "
        f"{[(extension.extension, extension.extension_bps) for extension in extensions]}"
    )
    return tuple(extensions)


def payload_value(config: NormalizedConfig) -> int:
    """
    The native value attached to the deployment call: the dev buy amount, if any.
    """

    if config.dev_buy is None:
        return 0
    return eth_to_wei(config.dev_buy.eth_amount)
