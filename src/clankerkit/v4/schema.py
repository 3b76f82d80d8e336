"""
Schema and defaulting for Clanker v4 deployment requests.

A raw request (a mapping, typically decoded from JSON with camelCase keys) is turned into a
`NormalizedConfig` in three steps:

    1. Field-level validation by pydantic: types, ranges, enum membership, unknown keys.
    2. Cross-field validation: sums, tick alignment, fee ordering. These run only after every
       field-level check has passed.
    3. Sibling-dependent defaults, e.g. reward recipients falling back to the token admin.

The first violated constraint is reported as a `ValidationError`. No partially normalized
configuration is ever exposed.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated, Any, Final, Literal

import pydantic
from hexbytes import HexBytes
from pydantic import AfterValidator, BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator
from pydantic.alias_generators import to_camel

from clankerkit.constants import (
    BPS_DENOMINATOR,
    DEFAULT_SUPPLY,
    MAX_INT24,
    MAX_UINT128,
    POOL_POSITIONS,
    SECONDS_PER_DAY,
    TOKEN_DECIMALS,
    ZERO_ADDRESS,
)
from clankerkit.exceptions import ValidationError
from clankerkit.functions import eth_to_wei
from clankerkit.logging import logger
from clankerkit.validation.evm_values import (
    AddressField,
    Bytes32Field,
    HexBytesField,
    ValidatedInt24,
    ValidatedUint24,
    ValidatedUint256,
)

type Bps = Annotated[int, Field(strict=True, ge=0, le=BPS_DENOMINATOR)]
type Seconds = Annotated[int, Field(strict=True, ge=0)]
type FeeIn = Literal["Both", "Paired", "Clanker"]

FEE_IN_TO_INT: Final[dict[str, int]] = {
    "Both": 0,
    "Paired": 1,
    "Clanker": 2,
}

MIN_VAULT_LOCKUP: Final = 7 * SECONDS_PER_DAY
MIN_AIRDROP_LOCKUP: Final = SECONDS_PER_DAY
MAX_VAULT_PERCENTAGE: Final = 90
# Airdrop amounts are whole tokens, bounded between 25 bps and 9_000 bps of the default supply
MIN_AIRDROP_AMOUNT: Final = DEFAULT_SUPPLY * 25 // BPS_DENOMINATOR // 10**TOKEN_DECIMALS
MAX_AIRDROP_AMOUNT: Final = DEFAULT_SUPPLY * 9_000 // BPS_DENOMINATOR // 10**TOKEN_DECIMALS

DEFAULT_STARTING_TICK: Final = -230400
DEFAULT_TICK_SPACING: Final = 200


class RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )


class SocialMediaUrl(RequestModel):
    platform: str
    url: str


class TokenMetadata(RequestModel):
    description: str | None = None
    social_media_urls: tuple[SocialMediaUrl, ...] | None = None
    audit_urls: tuple[str, ...] | None = None


class TokenContext(RequestModel):
    """
    Social provenance for the token.
    """

    interface: str = "SDK"
    platform: str | None = None
    message_id: str | None = None
    id: str | None = None


class PoolExtension(RequestModel):
    """
    A custom pool initialization extension. Only used by deployments with second generation hooks.
    """

    address: AddressField = ZERO_ADDRESS
    init_data: HexBytesField = HexBytes(b"")


class PoolPosition(RequestModel):
    tick_lower: ValidatedInt24
    tick_upper: ValidatedInt24
    position_bps: Bps


class PoolConfig(RequestModel):
    paired_token: Literal["WETH"] | AddressField = "WETH"
    tick_if_token0_is_clanker: ValidatedInt24 = DEFAULT_STARTING_TICK
    tick_spacing: Annotated[int, Field(strict=True, gt=0, le=MAX_INT24)] = DEFAULT_TICK_SPACING
    positions: Annotated[tuple[PoolPosition, ...], Field(min_length=1)] = tuple(
        PoolPosition(
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            position_bps=position.position_bps,
        )
        for position in POOL_POSITIONS["Standard"]
    )


class LockerSelection(RequestModel):
    # "Locker" selects the deployment's default locker
    locker: Literal["Locker"] | AddressField = "Locker"


class VaultConfig(RequestModel):
    # Percent of the supply, to basis point precision
    percentage: Annotated[Decimal, Field(ge=0, le=MAX_VAULT_PERCENTAGE)]
    lockup_duration: Annotated[int, Field(strict=True, ge=MIN_VAULT_LOCKUP)]
    vesting_duration: Seconds = 0
    recipient: AddressField | None = None

    @field_validator("percentage", mode="after")
    def validate_percentage(
        cls,  # noqa: N805
        percentage: Decimal,
    ) -> Decimal:
        if (percentage * 100) % 1 != 0:
            msg = f"Vault percentage {percentage} is not a whole number of basis points"
            raise ValueError(msg)
        return percentage

    @property
    def bps(self) -> int:
        return int(self.percentage * 100)


class AirdropConfig(RequestModel):
    admin: AddressField | None = None
    merkle_root: Bytes32Field
    lockup_duration: Annotated[int, Field(strict=True, ge=MIN_AIRDROP_LOCKUP)]
    vesting_duration: Seconds = 0
    # Whole tokens, without the 18 decimals
    amount: Annotated[int, Field(ge=MIN_AIRDROP_AMOUNT, le=MAX_AIRDROP_AMOUNT)]


class PoolKey(RequestModel):
    currency0: AddressField
    currency1: AddressField
    fee: ValidatedUint24
    tick_spacing: ValidatedInt24
    hooks: AddressField

    def as_abi_tuple(self) -> tuple[str, str, int, int, str]:
        return (self.currency0, self.currency1, self.fee, self.tick_spacing, self.hooks)


# Used when the token is paired with WETH, so no ETH -> paired token swap is needed
NULL_DEVBUY_POOL_KEY: Final = PoolKey(
    currency0=ZERO_ADDRESS,
    currency1=ZERO_ADDRESS,
    fee=0,
    tick_spacing=0,
    hooks=ZERO_ADDRESS,
)


def _check_amount_out_min(amount_out_min: Decimal) -> Decimal:
    if eth_to_wei(amount_out_min) > MAX_UINT128:
        msg = f"Minimum amount out {amount_out_min} does not fit in a uint128"
        raise ValueError(msg)
    return amount_out_min


# Whole tokens, encoded as a uint128 amount of 18 decimal base units
AmountOutMin = Annotated[Decimal, Field(ge=0), AfterValidator(_check_amount_out_min)]


class DevBuyV4(RequestModel):
    """
    Buy the token in the deployment transaction, routing ETH -> paired token through a V4 pool.
    """

    pool_type: Literal["v4"] = "v4"
    eth_amount: Annotated[Decimal, Field(gt=0)]
    pool_key: PoolKey = NULL_DEVBUY_POOL_KEY
    amount_out_min: AmountOutMin = Decimal(0)


class DevBuyV3(RequestModel):
    """
    Buy the token in the deployment transaction, routing ETH -> paired token through a V3 pool.
    """

    pool_type: Literal["v3"]
    eth_amount: Annotated[Decimal, Field(gt=0)]
    v3_pool_fee: Literal[100, 500, 3000, 10000]
    amount_out_min: AmountOutMin = Decimal(0)


class StaticFeeConfig(RequestModel):
    """
    A flat fee on the clanker token and on the paired token. Units are in bps.
    """

    type: Literal["static"] = "static"
    clanker_fee: Annotated[int, Field(strict=True, ge=0, le=2_000)]
    paired_fee: Annotated[int, Field(strict=True, ge=0, le=2_000)]


class DynamicFeeConfig(RequestModel):
    """
    A fee that rises with volatility above a baseline.
    """

    type: Literal["dynamic"]
    base_fee: Annotated[int, Field(strict=True, ge=25, le=2_000)]
    max_fee: Annotated[int, Field(strict=True, ge=0, le=3_000)]
    reference_tick_filter_period: ValidatedUint256
    reset_period: ValidatedUint256
    reset_tick_filter: ValidatedInt24
    fee_control_numerator: ValidatedUint256
    # Decay rate for previous volatility, e.g. 9500 = 95%
    decay_filter_bps: ValidatedUint24


def _tag_with_default(discriminator: str, default: str) -> Any:
    alias = to_camel(discriminator)

    def get_tag(value: Any) -> str:
        if isinstance(value, Mapping):
            return value.get(alias, value.get(discriminator, default))
        return getattr(value, discriminator, default)

    return Discriminator(get_tag)


type DevBuyConfig = Annotated[
    Annotated[DevBuyV4, Tag("v4")] | Annotated[DevBuyV3, Tag("v3")],
    _tag_with_default("pool_type", "v4"),
]
type FeeConfig = Annotated[
    Annotated[StaticFeeConfig, Tag("static")] | Annotated[DynamicFeeConfig, Tag("dynamic")],
    _tag_with_default("type", "static"),
]


class SniperFeeConfig(RequestModel):
    """
    Anti-sniper fee that decays from `starting_fee` to `ending_fee`. Units are in uniBps.
    """

    starting_fee: Annotated[int, Field(strict=True, ge=30_000, le=800_000)] = 666_777
    ending_fee: Annotated[int, Field(strict=True, ge=30_000, le=800_000)] = 41_673
    seconds_to_decay: Annotated[int, Field(strict=True, ge=1, le=120)] = 15


class RewardRecipient(RequestModel):
    admin: AddressField
    recipient: AddressField
    bps: Bps
    token: FeeIn


class RewardsConfig(RequestModel):
    recipients: Annotated[tuple[RewardRecipient, ...], Field(min_length=1)]


class DeploymentRequest(RequestModel):
    """
    A user-authored Clanker v4 token deployment.
    """

    name: str
    symbol: str
    image: str = ""
    chain_id: Annotated[int, Field(strict=True, gt=0)] = 8453
    token_admin: AddressField
    metadata: TokenMetadata | None = None
    context: TokenContext = TokenContext()
    pool_extension: PoolExtension = PoolExtension()
    pool: PoolConfig = PoolConfig()
    locker: LockerSelection = LockerSelection()
    vault: VaultConfig | None = None
    airdrop: AirdropConfig | None = None
    dev_buy: DevBuyConfig | None = None
    fees: FeeConfig = StaticFeeConfig(clanker_fee=100, paired_fee=100)
    sniper_fees: SniperFeeConfig = SniperFeeConfig()
    rewards: RewardsConfig | None = None
    vanity: bool = False

    @field_validator("token_admin", mode="after")
    def validate_token_admin(
        cls,  # noqa: N805
        token_admin: str,
    ) -> str:
        if token_admin == ZERO_ADDRESS:
            msg = "Admin cannot be zero address"
            raise ValueError(msg)
        return token_admin


class NormalizedConfig(DeploymentRequest):
    """
    A validated request with every default resolved.
    """

    rewards: RewardsConfig

    @property
    def metadata_json(self) -> str:
        if self.metadata is None:
            return ""
        return self.metadata.model_dump_json(by_alias=True, exclude_none=True)

    @property
    def context_json(self) -> str:
        return self.context.model_dump_json(by_alias=True, exclude_none=True)


def parse_request(request: Mapping[str, Any]) -> DeploymentRequest:
    """
    Apply the field-level checks, raising a `ValidationError` for the first violation.
    """

    try:
        return DeploymentRequest.model_validate(request)
    except pydantic.ValidationError as exc:
        first_error = exc.errors()[0]
        field = ".".join(str(part) for part in first_error["loc"]) or "request"
        raise ValidationError(field=field, reason=first_error["msg"]) from exc


def check_cross_field_constraints(request: DeploymentRequest) -> None:
    pool = request.pool

    if sum(position.position_bps for position in pool.positions) != BPS_DENOMINATOR:
        raise ValidationError(field="pool.positions", reason="Positions must sum to 100%")

    if not any(position.tick_lower == pool.tick_if_token0_is_clanker for position in pool.positions):
        raise ValidationError(
            field="pool.positions",
            reason="One position must be touching the starting tick.",
        )

    if not all(
        position.tick_lower % pool.tick_spacing == 0 and position.tick_upper % pool.tick_spacing == 0
        for position in pool.positions
    ):
        raise ValidationError(
            field="pool.positions",
            reason="All positions must have ticks that are multiples of the tick spacing.",
        )

    for i, position in enumerate(pool.positions):
        if position.tick_lower >= position.tick_upper:
            raise ValidationError(
                field=f"pool.positions.{i}",
                reason="Lower tick must be below the upper tick.",
            )

    if request.sniper_fees.ending_fee >= request.sniper_fees.starting_fee:
        raise ValidationError(
            field="sniperFees",
            reason="Ending sniper fees must be less than the starting fees",
        )

    if isinstance(request.fees, DynamicFeeConfig) and request.fees.max_fee < request.fees.base_fee:
        raise ValidationError(field="fees", reason="Max fee must not be below the base fee")

    if request.rewards is not None and (
        sum(recipient.bps for recipient in request.rewards.recipients) != BPS_DENOMINATOR
    ):
        raise ValidationError(
            field="rewards.recipients",
            reason="Recipient amounts must sum to exactly 100%.",
        )


def normalize(request: DeploymentRequest | Mapping[str, Any]) -> NormalizedConfig:
    """
    Validate a deployment request and resolve its defaults.
    """

    if not isinstance(request, DeploymentRequest):
        request = parse_request(request)

    check_cross_field_constraints(request)

    rewards = request.rewards
    if rewards is None:
        rewards = RewardsConfig(
            recipients=(
                RewardRecipient(
                    admin=request.token_admin,
                    recipient=request.token_admin,
                    bps=BPS_DENOMINATOR,
                    token="Both",
                ),
            )
        )
        logger.debug(f"Defaulted rewards to token admin {request.token_admin}")

    return NormalizedConfig.model_validate({**dict(request), "rewards": rewards})
