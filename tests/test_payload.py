import eth_abi.abi
import pytest
from hexbytes import HexBytes

from clankerkit.abi import DEPLOYMENT_CONFIG, DEPLOY_TOKEN, LOCKER_DATA, MEV_SNIPER_AUCTION_DATA
from clankerkit.config import Settings
from clankerkit.constants import ZERO_HASH
from clankerkit.exceptions import ConfigurationError, ValidationError
from clankerkit.functions import function_selector
from clankerkit.v4.fees import encode_static_fee_data
from clankerkit.v4.payload import build_deployment_payload, compile_deployment
from clankerkit.v4.schema import StaticFeeConfig, normalize
from clankerkit.v4.vanity import VanityAddress

from .conftest import (
    FACTORY,
    OTHER_ACCOUNT,
    RELATED,
    RELATED_V2,
    TOKEN_ADMIN,
    WRAPPED_NATIVE,
    FakeOracle,
)

SALT = HexBytes(b"\x07" * 32)
VANITY_ADDRESS = "0x0000000000000000000000000000000000004b07"


def _decode(payload):
    assert payload.calldata[:4] == function_selector(DEPLOY_TOKEN)
    (deployment_config,) = eth_abi.abi.decode([DEPLOYMENT_CONFIG], payload.calldata[4:])
    return deployment_config


def _lower(addresses):
    return [address.lower() for address in addresses]


@pytest.fixture
def settings():
    return Settings()


def test_minimal_payload(minimal_request, registry):
    payload = compile_deployment(normalize(minimal_request), registry)

    assert payload.address == FACTORY
    assert payload.function_prototype == DEPLOY_TOKEN
    assert payload.chain_id == 8453
    assert payload.value == 0
    assert payload.expected_address is None

    token, pool, locker, mev, extensions = _decode(payload)

    assert token == (
        TOKEN_ADMIN.lower(),
        "Test Token",
        "TEST",
        bytes(ZERO_HASH),
        "",
        "",
        '{"interface":"SDK"}',
        8453,
    )
    assert pool == (
        RELATED.fee_static_hook.lower(),
        WRAPPED_NATIVE.lower(),
        -230400,
        200,
        bytes(encode_static_fee_data(StaticFeeConfig(clanker_fee=100, paired_fee=100))),
    )

    locker_address, admins, recipients, reward_bps, lower, upper, position_bps, data = locker
    assert locker_address == RELATED.locker.lower()
    assert _lower(admins) == [TOKEN_ADMIN.lower()]
    assert _lower(recipients) == [TOKEN_ADMIN.lower()]
    assert reward_bps == (10_000,)
    assert lower == (-230400,)
    assert upper == (-120000,)
    assert position_bps == (10_000,)
    assert eth_abi.abi.decode(LOCKER_DATA, data) == ((0,),)

    assert mev == (RELATED.mev_module.lower(), b"")
    assert extensions == ()


def test_payload_structure_matches_calldata(minimal_request, registry):
    payload = compile_deployment(normalize(minimal_request), registry)
    assert payload.args == (payload.deployment_config.as_abi_tuple(),)
    assert payload.deployment_config.token_config.salt == ZERO_HASH


def test_locker_fee_preferences(minimal_request, registry):
    minimal_request["rewards"] = {
        "recipients": [
            {"admin": TOKEN_ADMIN, "recipient": TOKEN_ADMIN, "bps": 5_000, "token": "Clanker"},
            {"admin": TOKEN_ADMIN, "recipient": OTHER_ACCOUNT, "bps": 3_000, "token": "Paired"},
            {"admin": OTHER_ACCOUNT, "recipient": OTHER_ACCOUNT, "bps": 2_000, "token": "Both"},
        ]
    }
    _, _, locker, _, _ = _decode(compile_deployment(normalize(minimal_request), registry))

    _, admins, recipients, reward_bps, _, _, _, data = locker
    assert _lower(admins) == _lower([TOKEN_ADMIN, TOKEN_ADMIN, OTHER_ACCOUNT])
    assert _lower(recipients) == _lower([TOKEN_ADMIN, OTHER_ACCOUNT, OTHER_ACCOUNT])
    assert reward_bps == (5_000, 3_000, 2_000)
    assert eth_abi.abi.decode(LOCKER_DATA, data) == ((2, 1, 0),)


def test_custom_locker_and_paired_token(minimal_request, registry):
    minimal_request["locker"] = {"locker": OTHER_ACCOUNT}
    minimal_request["pool"] = {"pairedToken": OTHER_ACCOUNT}
    _, pool, locker, _, _ = _decode(compile_deployment(normalize(minimal_request), registry))

    assert pool[1] == OTHER_ACCOUNT.lower()
    assert locker[0] == OTHER_ACCOUNT.lower()


def test_second_generation_mev_module(minimal_request, registry_v2):
    minimal_request["sniperFees"] = {"startingFee": 500_000, "endingFee": 40_000, "secondsToDecay": 30}
    _, pool, _, mev, _ = _decode(compile_deployment(normalize(minimal_request), registry_v2))

    assert pool[0] == RELATED_V2.fee_static_hook_v2.lower()
    mev_module, mev_data = mev
    assert mev_module == RELATED_V2.mev_module_v2.lower()
    assert eth_abi.abi.decode(MEV_SNIPER_AUCTION_DATA, mev_data) == ((500_000, 40_000, 30),)


def test_extensions_and_value(minimal_request, registry):
    minimal_request["vault"] = {"percentage": 10, "lockupDuration": 7 * 86_400}
    minimal_request["devBuy"] = {"ethAmount": "0.1"}
    payload = compile_deployment(normalize(minimal_request), registry)

    *_, extensions = _decode(payload)
    assert [extension[0] for extension in extensions] == _lower([RELATED.vault, RELATED.devbuy])
    assert [extension[1] for extension in extensions] == [0, 10**17]
    assert [extension[2] for extension in extensions] == [1_000, 0]
    assert payload.value == 10**17


def test_unknown_chain(minimal_request, registry):
    minimal_request["chainId"] = 1
    with pytest.raises(ConfigurationError, match="No clanker v4 configuration for chain 1"):
        compile_deployment(normalize(minimal_request), registry)


async def test_build_payload_without_vanity(minimal_request, registry, settings):
    oracle = FakeOracle(VanityAddress(salt=SALT, address=VANITY_ADDRESS))
    payload = await build_deployment_payload(
        minimal_request, registry=registry, oracle=oracle, settings=settings
    )

    assert payload.expected_address is None
    assert payload.deployment_config.token_config.salt == ZERO_HASH
    assert oracle.queries == []


async def test_build_payload_with_vanity(minimal_request, registry, settings):
    minimal_request["vanity"] = True
    oracle = FakeOracle(VanityAddress(salt=SALT, address=VANITY_ADDRESS))
    payload = await build_deployment_payload(
        minimal_request, registry=registry, oracle=oracle, settings=settings
    )

    assert payload.expected_address == VANITY_ADDRESS
    assert payload.deployment_config.token_config.salt == SALT
    token, *_ = _decode(payload)
    assert token[3] == bytes(SALT)
    (query,) = oracle.queries
    assert query["suffix"] == settings.vanity_suffix
    assert query["deployer"] == FACTORY


async def test_invalid_request_never_queries_oracle(minimal_request, registry, settings):
    minimal_request["vanity"] = True
    minimal_request["devBuy"] = {"poolType": "v3", "ethAmount": 1, "v3PoolFee": 500}
    oracle = FakeOracle(VanityAddress(salt=SALT, address=VANITY_ADDRESS))

    with pytest.raises(ConfigurationError):
        await build_deployment_payload(
            minimal_request, registry=registry, oracle=oracle, settings=settings
        )
    assert oracle.queries == []

    minimal_request["name"] = 42
    with pytest.raises(ValidationError):
        await build_deployment_payload(
            minimal_request, registry=registry, oracle=oracle, settings=settings
        )
    assert oracle.queries == []
