from decimal import Decimal

import pydantic
import pytest
from eth_utils.address import is_checksum_address

from clankerkit.constants import MAX_UINT128, ZERO_ADDRESS
from clankerkit.exceptions import ValidationError
from clankerkit.v4.schema import (
    DevBuyV3,
    DevBuyV4,
    DynamicFeeConfig,
    NormalizedConfig,
    StaticFeeConfig,
    normalize,
    parse_request,
)

from .conftest import OTHER_ACCOUNT, TOKEN_ADMIN

DYNAMIC_FEES = {
    "type": "dynamic",
    "baseFee": 50,
    "maxFee": 300,
    "referenceTickFilterPeriod": 30,
    "resetPeriod": 120,
    "resetTickFilter": 200,
    "feeControlNumerator": 500_000_000,
    "decayFilterBps": 9_500,
}


def _positions(*bps: int, start: int = -230400, width: int = 2_000) -> list[dict]:
    return [
        {
            "tickLower": start + i * width,
            "tickUpper": start + (i + 1) * width,
            "positionBps": share,
        }
        for i, share in enumerate(bps)
    ]


def test_defaults(minimal_request):
    config = normalize(minimal_request)

    assert isinstance(config, NormalizedConfig)
    assert config.chain_id == 8453
    assert config.image == ""
    assert config.context.interface == "SDK"
    assert config.pool.paired_token == "WETH"
    assert config.pool.tick_if_token0_is_clanker == -230400
    assert config.pool.tick_spacing == 200
    assert len(config.pool.positions) == 1
    assert config.pool.positions[0].position_bps == 10_000
    assert config.locker.locker == "Locker"
    assert config.fees == StaticFeeConfig(clanker_fee=100, paired_fee=100)
    assert config.sniper_fees.starting_fee == 666_777
    assert config.sniper_fees.ending_fee == 41_673
    assert config.sniper_fees.seconds_to_decay == 15
    assert config.vault is None
    assert config.airdrop is None
    assert config.dev_buy is None
    assert config.vanity is False


def test_default_rewards_go_to_token_admin(minimal_request):
    config = normalize(minimal_request)

    (recipient,) = config.rewards.recipients
    assert recipient.admin == TOKEN_ADMIN
    assert recipient.recipient == TOKEN_ADMIN
    assert recipient.bps == 10_000
    assert recipient.token == "Both"


def test_explicit_rewards_are_kept(minimal_request):
    minimal_request["rewards"] = {
        "recipients": [
            {"admin": TOKEN_ADMIN, "recipient": TOKEN_ADMIN, "bps": 6_000, "token": "Paired"},
            {"admin": OTHER_ACCOUNT, "recipient": OTHER_ACCOUNT, "bps": 4_000, "token": "Clanker"},
        ]
    }
    config = normalize(minimal_request)

    assert [recipient.bps for recipient in config.rewards.recipients] == [6_000, 4_000]
    assert [recipient.token for recipient in config.rewards.recipients] == ["Paired", "Clanker"]


def test_snake_case_keys_are_accepted():
    config = normalize({"name": "Test Token", "symbol": "TEST", "token_admin": TOKEN_ADMIN})
    assert config.token_admin == TOKEN_ADMIN


def test_addresses_are_checksummed(minimal_request):
    minimal_request["tokenAdmin"] = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
    config = normalize(minimal_request)
    assert is_checksum_address(config.token_admin)
    assert config.token_admin == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


@pytest.mark.parametrize("bps", [(9_999,), (10_001,), (5_000, 4_999), (5_000, 5_001)])
def test_position_bps_must_sum_to_10000(minimal_request, bps):
    minimal_request["pool"] = {"positions": _positions(*bps)}
    with pytest.raises(ValidationError, match="Positions must sum to 100%") as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "pool.positions"


def test_multiple_positions(minimal_request):
    minimal_request["pool"] = {"positions": _positions(5_000, 3_000, 2_000)}
    config = normalize(minimal_request)
    assert [position.position_bps for position in config.pool.positions] == [5_000, 3_000, 2_000]


def test_position_must_touch_starting_tick(minimal_request):
    minimal_request["pool"] = {"positions": _positions(10_000, start=-230000)}
    with pytest.raises(ValidationError, match="touching the starting tick"):
        normalize(minimal_request)


def test_ticks_must_align_to_spacing(minimal_request):
    minimal_request["pool"] = {
        "positions": [{"tickLower": -230400, "tickUpper": -120050, "positionBps": 10_000}]
    }
    with pytest.raises(ValidationError, match="multiples of the tick spacing"):
        normalize(minimal_request)


def test_lower_tick_must_be_below_upper_tick(minimal_request):
    minimal_request["pool"] = {
        "positions": [{"tickLower": -230400, "tickUpper": -230400, "positionBps": 10_000}]
    }
    with pytest.raises(ValidationError, match="Lower tick") as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "pool.positions.0"


def test_field_checks_run_before_cross_field_checks(minimal_request):
    # Both an out of range bps value and a bad sum; the field-level error wins
    minimal_request["pool"] = {
        "positions": [{"tickLower": -230400, "tickUpper": -120000, "positionBps": 10_001}]
    }
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "pool.positions.0.positionBps"


@pytest.mark.parametrize("bps", [(9_999,), (10_001,), (5_000, 4_000)])
def test_reward_bps_must_sum_to_10000(minimal_request, bps):
    minimal_request["rewards"] = {
        "recipients": [
            {"admin": TOKEN_ADMIN, "recipient": TOKEN_ADMIN, "bps": share, "token": "Both"}
            for share in bps
        ]
    }
    with pytest.raises(ValidationError, match="Recipient amounts must sum") as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "rewards.recipients"


def test_empty_reward_recipients_rejected(minimal_request):
    minimal_request["rewards"] = {"recipients": []}
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "rewards.recipients"


def test_sniper_ending_fee_must_be_below_starting_fee(minimal_request):
    minimal_request["sniperFees"] = {"startingFee": 100_000, "endingFee": 100_000}
    with pytest.raises(ValidationError, match="Ending sniper fees") as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "sniperFees"


@pytest.mark.parametrize("field, value", [("startingFee", 800_001), ("endingFee", 29_999)])
def test_sniper_fee_bounds(minimal_request, field, value):
    minimal_request["sniperFees"] = {field: value}
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == f"sniperFees.{field}"


def test_zero_token_admin_rejected(minimal_request):
    minimal_request["tokenAdmin"] = ZERO_ADDRESS
    with pytest.raises(ValidationError, match="Admin cannot be zero address") as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "tokenAdmin"


def test_invalid_address_rejected(minimal_request):
    minimal_request["tokenAdmin"] = "0x1234"
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "tokenAdmin"


def test_unknown_keys_rejected(minimal_request):
    minimal_request["unexpected"] = True
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "unexpected"


def test_missing_required_field(minimal_request):
    del minimal_request["symbol"]
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "symbol"


@pytest.mark.parametrize("fee", [-1, 2_001])
def test_static_fee_bounds(minimal_request, fee):
    minimal_request["fees"] = {"type": "static", "clankerFee": fee, "pairedFee": 100}
    with pytest.raises(ValidationError):
        normalize(minimal_request)


def test_fee_type_defaults_to_static(minimal_request):
    minimal_request["fees"] = {"clankerFee": 100, "pairedFee": 200}
    config = normalize(minimal_request)
    assert isinstance(config.fees, StaticFeeConfig)
    assert config.fees.paired_fee == 200


def test_dynamic_fees(minimal_request):
    minimal_request["fees"] = DYNAMIC_FEES
    config = normalize(minimal_request)
    assert isinstance(config.fees, DynamicFeeConfig)
    assert config.fees.decay_filter_bps == 9_500


def test_dynamic_max_fee_below_base_fee_rejected(minimal_request):
    minimal_request["fees"] = {**DYNAMIC_FEES, "baseFee": 300, "maxFee": 200}
    with pytest.raises(ValidationError, match="Max fee") as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "fees"


def test_unknown_fee_type_rejected(minimal_request):
    minimal_request["fees"] = {"type": "tiered", "clankerFee": 100, "pairedFee": 100}
    with pytest.raises(ValidationError):
        normalize(minimal_request)


def test_dev_buy_variants(minimal_request):
    minimal_request["devBuy"] = {"ethAmount": "0.5"}
    config = normalize(minimal_request)
    assert isinstance(config.dev_buy, DevBuyV4)
    assert config.dev_buy.eth_amount == Decimal("0.5")

    minimal_request["devBuy"] = {"poolType": "v3", "ethAmount": 1, "v3PoolFee": 500}
    config = normalize(minimal_request)
    assert isinstance(config.dev_buy, DevBuyV3)
    assert config.dev_buy.v3_pool_fee == 500


def test_dev_buy_v3_fee_tier_must_be_known(minimal_request):
    minimal_request["devBuy"] = {"poolType": "v3", "ethAmount": 1, "v3PoolFee": 2_500}
    with pytest.raises(ValidationError):
        normalize(minimal_request)


def test_dev_buy_amount_must_be_positive(minimal_request):
    minimal_request["devBuy"] = {"ethAmount": 0}
    with pytest.raises(ValidationError):
        normalize(minimal_request)


def test_vault_bounds(minimal_request):
    minimal_request["vault"] = {"percentage": 91, "lockupDuration": 7 * 86_400}
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "vault.percentage"

    minimal_request["vault"] = {"percentage": 10, "lockupDuration": 7 * 86_400 - 1}
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "vault.lockupDuration"


def test_vault_bps(minimal_request):
    minimal_request["vault"] = {"percentage": 25, "lockupDuration": 7 * 86_400}
    config = normalize(minimal_request)
    assert config.vault is not None
    assert config.vault.bps == 2_500


def test_vault_fractional_percentage(minimal_request):
    minimal_request["vault"] = {"percentage": "12.34", "lockupDuration": 7 * 86_400}
    config = normalize(minimal_request)
    assert config.vault is not None
    assert config.vault.bps == 1_234

    minimal_request["vault"] = {"percentage": "12.345", "lockupDuration": 7 * 86_400}
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "vault.percentage"


def test_dev_buy_amount_out_min_fits_uint128(minimal_request):
    minimal_request["devBuy"] = {"ethAmount": "0.5", "amountOutMin": "340282366920938463463"}
    config = normalize(minimal_request)
    assert config.dev_buy is not None
    assert config.dev_buy.amount_out_min == Decimal("340282366920938463463")
    assert config.dev_buy.amount_out_min * 10**18 <= MAX_UINT128

    minimal_request["devBuy"] = {"ethAmount": "0.5", "amountOutMin": "340282366920938463464"}
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field.endswith("amountOutMin")

    minimal_request["devBuy"] = {
        "poolType": "v3",
        "ethAmount": 1,
        "v3PoolFee": 500,
        "amountOutMin": 10**40,
    }
    with pytest.raises(ValidationError):
        normalize(minimal_request)


def test_airdrop_merkle_root_must_be_32_bytes(minimal_request):
    minimal_request["airdrop"] = {
        "merkleRoot": "0x1234",
        "lockupDuration": 86_400,
        "amount": 1_000_000_000,
    }
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "airdrop.merkleRoot"


def test_airdrop_amount_bounds(minimal_request):
    minimal_request["airdrop"] = {
        "merkleRoot": "0x" + "ab" * 32,
        "lockupDuration": 86_400,
        "amount": 249_999_999,
    }
    with pytest.raises(ValidationError) as exc_info:
        normalize(minimal_request)
    assert exc_info.value.field == "airdrop.amount"


def test_metadata_and_context_serialization(minimal_request):
    config = normalize(minimal_request)
    assert config.metadata_json == ""
    assert config.context_json == '{"interface":"SDK"}'

    minimal_request["metadata"] = {
        "description": "A test token",
        "socialMediaUrls": [{"platform": "x", "url": "https://x.com/test"}],
    }
    minimal_request["context"] = {"interface": "SDK", "messageId": "42"}
    config = normalize(minimal_request)
    assert config.metadata_json == (
        '{"description":"A test token",'
        '"socialMediaUrls":[{"platform":"x","url":"https://x.com/test"}]}'
    )
    assert config.context_json == '{"interface":"SDK","messageId":"42"}'


def test_parse_request_does_not_apply_cross_field_checks(minimal_request):
    minimal_request["pool"] = {"positions": _positions(9_999)}
    request = parse_request(minimal_request)
    assert request.rewards is None

    with pytest.raises(ValidationError):
        normalize(request)


def test_normalized_config_is_immutable(minimal_request):
    config = normalize(minimal_request)
    with pytest.raises(pydantic.ValidationError):
        config.name = "Other"
