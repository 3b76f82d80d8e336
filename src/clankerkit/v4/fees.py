import dataclasses
from typing import Never, NoReturn

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.abi import DYNAMIC_FEE_HOOK_DATA, POOL_INITIALIZATION_DATA, STATIC_FEE_HOOK_DATA
from clankerkit.deployments import ClankerV4Deployment
from clankerkit.exceptions import ConfigurationError
from clankerkit.logging import logger
from clankerkit.v4.schema import DynamicFeeConfig, PoolExtension, StaticFeeConfig

# Fee hooks operate in uniBps: 1_000_000 = 100%, so 1 bps = 100 uniBps
UNI_BPS_PER_BPS = 100


@dataclasses.dataclass(slots=True, frozen=True)
class FeeHookConfig:
    hook: ChecksumAddress
    pool_data: HexBytes


def encode_static_fee_data(fees: StaticFeeConfig) -> HexBytes:
    return HexBytes(
        eth_abi.abi.encode(
            types=STATIC_FEE_HOOK_DATA,
            args=(
                fees.clanker_fee * UNI_BPS_PER_BPS,
                fees.paired_fee * UNI_BPS_PER_BPS,
            ),
        )
    )


def encode_dynamic_fee_data(fees: DynamicFeeConfig) -> HexBytes:
    return HexBytes(
        eth_abi.abi.encode(
            types=DYNAMIC_FEE_HOOK_DATA,
            args=(
                fees.base_fee * UNI_BPS_PER_BPS,
                fees.max_fee * UNI_BPS_PER_BPS,
                fees.reference_tick_filter_period,
                fees.reset_period,
                fees.reset_tick_filter,
                fees.fee_control_numerator,
                fees.decay_filter_bps,
            ),
        )
    )


def wrap_pool_initialization_data(extension: PoolExtension, fee_data: bytes) -> HexBytes:
    """
    Combine the fee block with a custom pool extension, as expected by second generation hooks.
    """

    return HexBytes(
        eth_abi.abi.encode(
            types=POOL_INITIALIZATION_DATA,
            args=((extension.address, bytes(extension.init_data), bytes(fee_data)),),
        )
    )


def _unsupported_fee_config(fees: Never) -> NoReturn:
    # Type checkers reject any call site where `fees` could still be a handled variant
    raise ConfigurationError(message=f"Invalid fee config type {type(fees).__name__}")


def encode_fee_config(
    fees: StaticFeeConfig | DynamicFeeConfig,
    deployment: ClankerV4Deployment,
    pool_extension: PoolExtension | None = None,
) -> FeeHookConfig:
    """
    Select the fee hook for the fee variant and encode the pool data passed to it.

    Deployments with a second generation hook for the variant receive the fee block wrapped
    together with the pool extension. Older deployments receive the bare fee block.
    """

    if pool_extension is None:
        pool_extension = PoolExtension()

    related = deployment.related

    match fees:
        case StaticFeeConfig():
            fee_data = encode_static_fee_data(fees)
            hook_v2 = related.fee_static_hook_v2
            hook = related.fee_static_hook
        case DynamicFeeConfig():
            fee_data = encode_dynamic_fee_data(fees)
            hook_v2 = related.fee_dynamic_hook_v2
            hook = related.fee_dynamic_hook
        case _:
            _unsupported_fee_config(fees)

    if hook_v2 is not None:
        logger.debug(f"Using {fees.type} fee hook {hook_v2} with pool initialization wrapper")
        return FeeHookConfig(
            hook=hook_v2,
            pool_data=wrap_pool_initialization_data(pool_extension, fee_data),
        )

    logger.debug(f"Using {fees.type} fee hook {hook}")
    return FeeHookConfig(hook=hook, pool_data=fee_data)
