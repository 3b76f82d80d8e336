"""
Starting price of a v3.1 token against its quote token.

Prices are the amount of quote token per new token, and assume the default supply of 100 billion
tokens. Quote tokens other than WETH and Abstract ETH start at a fixed USD market cap, so their
requested market cap is ignored.
"""

import math
from collections.abc import Callable
from typing import Final

from eth_typing import ChecksumAddress

from clankerkit.checksum_cache import get_checksum_address
from clankerkit.logging import logger
from clankerkit.types.aliases import Tick
from clankerkit.v3.schema import WETH

TICK_SPACING: Final = 200
TICK_BASE: Final = 1.0001

SUPPLY_IN_TOKENS: Final = 100_000_000_000
# Market cap in USD for quote tokens priced in dollars
USD_MARKET_CAP: Final = 10_000

DEGEN: Final = get_checksum_address("0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed")
CLANKER: Final = get_checksum_address("0x1bc0c42215582d5A085795f4baDbaC3ff36d1Bcb")
HIGHER: Final = get_checksum_address("0x0578d8A44db98B23BF096A382e016e29a5Ce0ffe")
CB_BTC: Final = get_checksum_address("0xcbB7C0000aB88B473b1f5aFd9ef808440eed33Bf")
ABSTRACT_ETH: Final = get_checksum_address("0x3439153EB7AF838Ad19d56E1571FBD09333C2809")


def _priced_in_usd(
    quote_token_price: float,
    decimals_adjustment: int = 0,
) -> Callable[[float], float]:
    def price(_: float) -> float:
        return USD_MARKET_CAP / quote_token_price / SUPPLY_IN_TOKENS / 10**decimals_adjustment

    return price


def _priced_by_market_cap(market_cap: float) -> float:
    # 1e-11 quote token per token gives a market cap of 1 quote token
    return market_cap * 1e-11


QUOTE_TOKEN_PRICES: Final[dict[ChecksumAddress, Callable[[float], float]]] = {
    WETH: _priced_by_market_cap,
    ABSTRACT_ETH: _priced_by_market_cap,
    DEGEN: lambda _: 0.00000666666667,
    CLANKER: _priced_in_usd(20),
    HIGHER: _priced_in_usd(0.008),
    # cbBTC has 8 decimals
    CB_BTC: _priced_in_usd(105_000, decimals_adjustment=10),
}


def desired_price(quote_token: ChecksumAddress, market_cap: float) -> tuple[float, ChecksumAddress]:
    """
    The starting price and the token actually paired. Unknown quote tokens are replaced by WETH.
    """

    try:
        price = QUOTE_TOKEN_PRICES[quote_token]
    except KeyError:
        logger.warning(f"No starting price known for quote token {quote_token}, pairing with WETH")
        quote_token = WETH
        price = QUOTE_TOKEN_PRICES[WETH]

    return price(market_cap), quote_token


def starting_tick(price: float) -> Tick:
    """
    The tick for the price, rounded down to the tick spacing.
    """

    raw_tick = math.log(price) / math.log(TICK_BASE)
    return math.floor(raw_tick / TICK_SPACING) * TICK_SPACING
