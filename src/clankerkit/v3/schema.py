"""
Schema and defaulting for Clanker v3.1 deployment requests.

v3.1 requests are flatter than v4 ones: a single creator and interface reward split, a vault
sized in days, and a dev buy without routing. Admins and reward recipients that are not given
fall back to the address requesting the deployment, which is only known when the request is
compiled.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated, Any, Final, Literal

import pydantic
from pydantic import Field

from clankerkit.checksum_cache import get_checksum_address
from clankerkit.exceptions import ValidationError
from clankerkit.v4.schema import AmountOutMin, RequestModel, TokenContext, TokenMetadata
from clankerkit.validation.evm_values import AddressField

BASE_CHAIN_ID: Final = 8453

MAX_VAULT_PERCENTAGE: Final = 30
DEFAULT_CREATOR_REWARD: Final = 40
DEFAULT_INITIAL_MARKET_CAP: Final = 10

WETH: Final = get_checksum_address("0x4200000000000000000000000000000000000006")


class PoolConfig(RequestModel):
    """
    The paired token and the starting market cap, in units of the paired token.
    """

    quote_token: AddressField = WETH
    initial_market_cap: Annotated[float, Field(gt=0)] = DEFAULT_INITIAL_MARKET_CAP


class VaultConfig(RequestModel):
    percentage: Annotated[int, Field(strict=True, ge=0, le=MAX_VAULT_PERCENTAGE)] = 0
    duration_in_days: Annotated[Decimal, Field(ge=0)] = Decimal(0)


class DevBuyConfig(RequestModel):
    eth_amount: Annotated[Decimal, Field(ge=0)] = Decimal(0)
    amount_out_min: AmountOutMin = Decimal(0)


class RewardsConfig(RequestModel):
    # Percent of the LP fees paid to the creator, the remainder going to the interface
    creator_reward: Annotated[int, Field(strict=True, ge=0, le=100)] = DEFAULT_CREATOR_REWARD
    creator_admin: AddressField | None = None
    creator_reward_recipient: AddressField | None = None
    interface_admin: AddressField | None = None
    interface_reward_recipient: AddressField | None = None


class DeploymentRequest(RequestModel):
    """
    A user-authored Clanker v3.1 token deployment.
    """

    name: str
    symbol: str
    image: str = ""
    chain_id: Literal[8453, 2741] = BASE_CHAIN_ID
    metadata: TokenMetadata | None = None
    context: TokenContext = TokenContext()
    pool: PoolConfig = PoolConfig()
    vault: VaultConfig = VaultConfig()
    dev_buy: DevBuyConfig = DevBuyConfig()
    rewards: RewardsConfig = RewardsConfig()
    vanity: bool = True

    @property
    def metadata_json(self) -> str:
        if self.metadata is None:
            return ""
        return self.metadata.model_dump_json(by_alias=True, exclude_none=True)

    @property
    def context_json(self) -> str:
        return self.context.model_dump_json(by_alias=True, exclude_none=True)


def parse_request(request: DeploymentRequest | Mapping[str, Any]) -> DeploymentRequest:
    """
    Validate a v3.1 request, raising a `ValidationError` for the first violation.
    """

    if isinstance(request, DeploymentRequest):
        return request

    try:
        return DeploymentRequest.model_validate(request)
    except pydantic.ValidationError as exc:
        first_error = exc.errors()[0]
        field = ".".join(str(part) for part in first_error["loc"]) or "request"
        raise ValidationError(field=field, reason=first_error["msg"]) from exc
