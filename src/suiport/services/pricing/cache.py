"""Persistent price cache over the tokens table.

Staleness is never stored: it is derived from ``last_update`` and a window
supplied by the caller (see ``suiport.constants.pricing``).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from suiport.core.clock import to_epoch_ms, utc_now
from suiport.data.models.token import PricedToken, TokenMetadata

if TYPE_CHECKING:
    from suiport.data.supabase.repositories.token_repo import TokenRepository

logger = structlog.get_logger(__name__)


class PriceCache:
    """Key-value store of coin type -> (price, metadata, last update).

    Reads and writes go straight to the repository; StorageError propagates.
    Concurrent puts for different coin types are independent; for the same
    coin type the last write wins.
    """

    def __init__(
        self,
        repository: TokenRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._clock = clock

    def now(self) -> datetime:
        """Current time according to the cache's clock."""
        return self._clock()

    async def get(self, coin_type: str) -> PricedToken | None:
        """Stored record for ``coin_type``, or None."""
        return await self._repository.get(coin_type)

    async def is_stale(self, coin_type: str, window: timedelta) -> bool:
        """True when no record exists or it is older than ``window``."""
        record = await self.get(coin_type)
        if record is None:
            return True
        return record.is_stale(window, now=self.now())

    async def put(
        self,
        coin_type: str,
        price: float,
        metadata: TokenMetadata | None = None,
    ) -> None:
        """Upsert the record, stamping ``last_update`` with the current time.

        Passing ``metadata=None`` keeps whatever metadata is already stored.
        """
        await self._repository.upsert(
            coin_type,
            price,
            last_update_ms=to_epoch_ms(self.now()),
            metadata=metadata,
        )
        logger.debug("price_cache_put", coin_type=coin_type, price=price)

    async def put_metadata(self, coin_type: str, metadata: TokenMetadata) -> None:
        """Store metadata for an existing record without refreshing it."""
        await self._repository.update_metadata(coin_type, metadata)

    async def list_tokens(self, limit: int = 100, offset: int = 0) -> list[PricedToken]:
        """Stored records, most recently updated first."""
        return await self._repository.list_tokens(limit=limit, offset=offset)

    async def list_zero_priced(self) -> list[str]:
        """Coin types stored with a price of exactly 0."""
        return await self._repository.list_zero_priced()
