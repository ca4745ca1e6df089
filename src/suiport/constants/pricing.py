"""Price resolution constants."""

from datetime import timedelta
from typing import Final

# Staleness windows. Kept separate: the first gates the cascade's own cache,
# the second decides whether a stored token record is served to callers.
PRICE_CACHE_STALENESS: Final[timedelta] = timedelta(minutes=5)
TOKEN_RECORD_STALENESS: Final[timedelta] = timedelta(hours=1)

# Native asset
SUI_COIN_TYPE: Final[str] = "0x2::sui::SUI"
USDC_COIN_TYPE: Final[str] = (
    "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC"
)

# Coin type -> CoinGecko id for the reference index
REFERENCE_SYMBOLS: Final[dict[str, str]] = {
    SUI_COIN_TYPE: "sui",
}

# Valuation
DEFAULT_DECIMALS: Final[int] = 9

# Retry policy
MAX_ATTEMPTS: Final[int] = 3
BASE_DELAY_SECONDS: Final[float] = 1.0

# DEX reserve stage: coin_b (USDC, 6 decimals) scaled against coin_a (9 decimals)
RESERVE_PRICE_SCALE: Final[int] = 1000
