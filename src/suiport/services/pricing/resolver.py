"""Multi-source price cascade with bounded-staleness caching.

Sources are tried in strict order and the first usable price wins:

1. Price cache (fresh under PRICE_CACHE_STALENESS, non-zero)
2. 7k aggregator
3. CoinGecko, for the native coin and coins with a canonical CoinGecko id
4. Cetus pool reserves (see DexReserveMode)
5. DexScreener, most liquid pair

Every external call runs under the RetryPolicy. A stage that fails after
retries counts as "no price" and the cascade moves on; resolve() itself
never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from suiport.constants.pricing import (
    PRICE_CACHE_STALENESS,
    REFERENCE_SYMBOLS,
    RESERVE_PRICE_SCALE,
    SUI_COIN_TYPE,
    TOKEN_RECORD_STALENESS,
)
from suiport.core.exceptions import ConfigurationError, StorageError
from suiport.core.retry import RetryPolicy
from suiport.core.validation import is_usable_price, validate_coin_type
from suiport.data.models.token import PricedToken, TokenMetadata
from suiport.services.dexscreener.client import best_liquidity_pair

if TYPE_CHECKING:
    from suiport.services.coingecko.client import CoinGeckoClient
    from suiport.services.dexscreener.client import DexScreenerClient
    from suiport.services.pricing.cache import PriceCache
    from suiport.services.sevenk.client import SevenKPriceClient
    from suiport.services.sui.rpc_client import SuiRPCClient

logger = structlog.get_logger(__name__)


class PriceSource(str, Enum):
    """Price sources in cascade order."""

    CACHE = "cache"
    AGGREGATOR_SDK = "7k"
    REFERENCE_INDEX = "coingecko"
    DEX_RESERVES = "cetus"
    MARKET_AGGREGATOR = "dexscreener"


class DexReserveMode(str, Enum):
    """Whether the reserve stage may produce a price.

    COMPUTE_ONLY reads the pool and logs the reserve ratio but yields no
    price; ENABLED returns the ratio.
    """

    COMPUTE_ONLY = "compute_only"
    ENABLED = "enabled"


@dataclass(frozen=True)
class ResolvedPrice:
    """Outcome of one resolve() call.

    ``price`` is a finite positive float or None; ``source`` is None when
    no stage produced a price.
    """

    price: float | None
    source: PriceSource | None
    fetched_at: datetime

    @property
    def found(self) -> bool:
        return self.price is not None


@dataclass(frozen=True)
class PriceQuote:
    """Caller-facing price answer."""

    coin_type: str
    price_usd: float
    from_cache: bool
    last_update: datetime
    metadata: TokenMetadata | None = None


def reserve_price_from_pool(pool: dict[str, Any] | None) -> float | None:
    """Compute ``coin_b_reserve * 1000 / coin_a_reserve`` from a pool object.

    Args:
        pool: The ``data`` member of a ``sui_getObject`` response.

    Returns:
        The ratio, or None when content or reserves are missing or
        ``coin_a_reserve`` is zero.
    """
    content = (pool or {}).get("content")
    if not isinstance(content, dict):
        return None
    fields = content.get("fields")
    if not isinstance(fields, dict):
        return None

    raw_a = fields.get("coin_a_reserve")
    raw_b = fields.get("coin_b_reserve")
    if not raw_a or not raw_b:
        return None

    try:
        reserve_a = int(raw_a)
        reserve_b = int(raw_b)
    except (TypeError, ValueError):
        return None
    if reserve_a == 0:
        return None

    return reserve_b * RESERVE_PRICE_SCALE / reserve_a


class PriceResolver:
    """Resolves a coin type to a USD price through the source cascade.

    There is no in-flight de-duplication: concurrent misses for the same
    coin type may both run the cascade, and the last cache write wins.

    Example:
        resolver = PriceResolver(cache, sevenk, coingecko, sui_rpc, dexscreener)
        result = await resolver.resolve("0x2::sui::SUI")
        if result.found:
            print(result.price, result.source)
    """

    def __init__(
        self,
        cache: PriceCache,
        sevenk: SevenKPriceClient,
        coingecko: CoinGeckoClient,
        sui_rpc: SuiRPCClient,
        dexscreener: DexScreenerClient,
        retry_policy: RetryPolicy | None = None,
        dex_reserve_mode: DexReserveMode | str = DexReserveMode.COMPUTE_ONLY,
        reserve_pool_id: str | None = None,
    ) -> None:
        """Raises ConfigurationError for an unknown reserve mode, or ``enabled`` without a pool."""
        try:
            mode = DexReserveMode(dex_reserve_mode)
        except ValueError as e:
            raise ConfigurationError(f"Unknown DEX_RESERVE_MODE: {dex_reserve_mode!r}") from e
        if mode is DexReserveMode.ENABLED and not reserve_pool_id:
            raise ConfigurationError("DEX_RESERVE_MODE=enabled requires a reserve pool id")

        self._cache = cache
        self._sevenk = sevenk
        self._coingecko = coingecko
        self._sui_rpc = sui_rpc
        self._dexscreener = dexscreener
        self._retry = retry_policy or RetryPolicy()
        self._dex_reserve_mode = mode
        self._reserve_pool_id = reserve_pool_id

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def resolve(self, coin_type: str) -> ResolvedPrice:
        """Resolve a USD price for ``coin_type``.

        Returns:
            ResolvedPrice with a finite positive price, or an empty result.
        """
        try:
            return await self._resolve(coin_type)
        except Exception as e:
            logger.error("price_resolution_failed", coin_type=coin_type, error=str(e))
            return self._absent()

    async def quote(self, coin_type: str) -> PriceQuote | None:
        """Price answer for API callers.

        A non-zero stored record younger than TOKEN_RECORD_STALENESS is
        served as is. Otherwise the cascade runs and its result is stored.

        Raises:
            InvalidInputError: If ``coin_type`` is malformed.
        """
        coin_type = validate_coin_type(coin_type)

        record = await self._read_cache(coin_type)
        if (
            record is not None
            and record.has_price
            and not record.is_stale(TOKEN_RECORD_STALENESS, now=self._cache.now())
        ):
            return PriceQuote(
                coin_type=coin_type,
                price_usd=record.price_usd,
                from_cache=True,
                last_update=record.last_update,
                metadata=record.metadata,
            )

        resolved = await self.resolve(coin_type)
        if resolved.price is None:
            return None

        # resolve() only writes back cascade prices, not reference index ones
        if resolved.source == PriceSource.REFERENCE_INDEX:
            await self._write_back(coin_type, resolved.price)

        return PriceQuote(
            coin_type=coin_type,
            price_usd=resolved.price,
            from_cache=False,
            last_update=resolved.fetched_at,
            metadata=record.metadata if record is not None else None,
        )

    async def _resolve(self, coin_type: str) -> ResolvedPrice:
        cached = await self._read_cache(coin_type)
        if (
            cached is not None
            and cached.has_price
            and not cached.is_stale(PRICE_CACHE_STALENESS, now=self._cache.now())
        ):
            logger.debug("price_cache_hit", coin_type=coin_type, price=cached.price_usd)
            return ResolvedPrice(cached.price_usd, PriceSource.CACHE, cached.last_update)

        is_native = coin_type == SUI_COIN_TYPE

        # The native coin is always priced by the reference index
        if not is_native:
            sdk_price = await self._retry.run(
                lambda: self._sevenk.get_token_price(coin_type),
                name="sevenk_price",
            )
            if is_usable_price(sdk_price):
                return await self._found(coin_type, sdk_price, PriceSource.AGGREGATOR_SDK)
            logger.debug("sevenk_price_unusable", coin_type=coin_type, price=sdk_price)

        symbol = REFERENCE_SYMBOLS.get(coin_type)
        if is_native or symbol is not None:
            reference_id = symbol or REFERENCE_SYMBOLS[SUI_COIN_TYPE]
            price = await self._retry.run(
                lambda: self._coingecko.get_usd_price(reference_id),
                name="coingecko_price",
            )
            if not is_usable_price(price):
                logger.info("reference_price_unavailable", coin_type=coin_type, coin_id=reference_id)
                return self._absent()
            return ResolvedPrice(price, PriceSource.REFERENCE_INDEX, self._cache.now())

        price = await self._retry.run(lambda: self._dex_reserve_price(coin_type), name="dex_reserves")
        if is_usable_price(price):
            return await self._found(coin_type, price, PriceSource.DEX_RESERVES)

        price = await self._retry.run(lambda: self._market_price(coin_type), name="dexscreener_price")
        if is_usable_price(price):
            return await self._found(coin_type, price, PriceSource.MARKET_AGGREGATOR)

        logger.info("price_unavailable", coin_type=coin_type)
        return self._absent()

    async def _dex_reserve_price(self, coin_type: str) -> float | None:
        if not self._reserve_pool_id:
            return None

        pool = await self._sui_rpc.get_object(self._reserve_pool_id, show_content=True)
        price = reserve_price_from_pool(pool)
        logger.debug(
            "dex_reserve_price_computed",
            coin_type=coin_type,
            pool_id=self._reserve_pool_id,
            price=price,
            mode=self._dex_reserve_mode.value,
        )
        if self._dex_reserve_mode is DexReserveMode.COMPUTE_ONLY:
            return None
        return price

    async def _market_price(self, coin_type: str) -> float | None:
        pairs = await self._dexscreener.search_pairs(coin_type)
        best = best_liquidity_pair(pairs)
        if best is None or not best.price_usd:
            logger.debug("dexscreener_no_pairs", coin_type=coin_type)
            return None

        try:
            price = float(best.price_usd)
        except ValueError:
            logger.warning("dexscreener_bad_price", coin_type=coin_type, price=best.price_usd)
            return None

        logger.debug(
            "dexscreener_best_pair",
            coin_type=coin_type,
            dex_id=best.dex_id,
            liquidity_usd=best.liquidity_usd,
            price=price,
        )
        return price

    async def _found(self, coin_type: str, price: float, source: PriceSource) -> ResolvedPrice:
        await self._write_back(coin_type, price)
        logger.info("price_resolved", coin_type=coin_type, price=price, source=source.value)
        return ResolvedPrice(price, source, self._cache.now())

    async def _read_cache(self, coin_type: str) -> PricedToken | None:
        try:
            return await self._cache.get(coin_type)
        except StorageError as e:
            logger.warning("price_cache_read_failed", coin_type=coin_type, error=str(e))
            return None

    async def _write_back(self, coin_type: str, price: float) -> None:
        try:
            await self._cache.put(coin_type, price)
        except StorageError as e:
            logger.warning("price_cache_write_failed", coin_type=coin_type, error=str(e))

    def _absent(self) -> ResolvedPrice:
        return ResolvedPrice(None, None, self._cache.now())
