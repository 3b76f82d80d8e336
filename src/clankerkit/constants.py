__all__ = (
    "BPS_DENOMINATOR",
    "DEFAULT_SUPPLY",
    "MAX_INT24",
    "MAX_UINT24",
    "MAX_UINT128",
    "MAX_UINT256",
    "MIN_INT24",
    "MIN_UINT24",
    "MIN_UINT256",
    "POOL_POSITIONS",
    "SECONDS_PER_DAY",
    "TOKEN_DECIMALS",
    "ZERO_ADDRESS",
    "ZERO_HASH",
)

import typing

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clankerkit.checksum_cache import get_checksum_address


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


def _min_int(bits: int) -> int:
    return typing.cast("int", -(2 ** (bits - 1)))


def _max_int(bits: int) -> int:
    return typing.cast("int", (2 ** (bits - 1)) - 1)


MIN_INT24 = _min_int(24)
MAX_INT24 = _max_int(24)



MIN_UINT24 = _min_uint(24)
MAX_UINT24 = _max_uint(24)

MAX_UINT128 = _max_uint(128)

MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")
ZERO_HASH = HexBytes(b"\x00" * 32)

BPS_DENOMINATOR = 10_000
TOKEN_DECIMALS = 18
DEFAULT_SUPPLY = 100_000_000_000 * 10**TOKEN_DECIMALS
SECONDS_PER_DAY = 24 * 60 * 60


class PoolPosition(typing.NamedTuple):
    tick_lower: int
    tick_upper: int
    position_bps: int


# Liquidity position presets for a pool starting at tick -230400 with a tick spacing of 200
POOL_POSITIONS: dict[str, tuple[PoolPosition, ...]] = {
    "Standard": (PoolPosition(tick_lower=-230400, tick_upper=-120000, position_bps=10_000),),
}
