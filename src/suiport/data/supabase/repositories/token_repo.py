"""Token price repository for Supabase.

This module provides a repository for the tokens table, the durable store
behind the price cache.

Table schema expected:
    tokens (
        coin_type TEXT PRIMARY KEY,
        price_usd DOUBLE PRECISION NOT NULL DEFAULT 0,
        last_update BIGINT NOT NULL,      -- epoch milliseconds
        metadata TEXT                     -- JSON-serialized TokenMetadata
    )
"""

import json
from typing import Any

import structlog

from suiport.core.clock import from_epoch_ms
from suiport.core.exceptions import StorageError
from suiport.data.models.token import PricedToken, TokenMetadata
from suiport.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class TokenRepository:
    """Repository for accessing the tokens table in Supabase.

    Every method raises StorageError on failure; deciding whether a storage
    failure is fatal belongs to the caller.

    Example:
        repo = TokenRepository(client)
        await repo.upsert("0x2::sui::SUI", 1.25, last_update_ms=1718000000000)
        token = await repo.get("0x2::sui::SUI")
    """

    TABLE_NAME = "tokens"

    def __init__(self, client: SupabaseClient) -> None:
        """Initialize repository with Supabase client.

        Args:
            client: Connected SupabaseClient instance.
        """
        self._client = client

    async def get(self, coin_type: str) -> PricedToken | None:
        """Get the record for a coin type.

        Returns:
            PricedToken if found, None otherwise.

        Raises:
            StorageError: If the query fails.
        """
        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .select("*")
                .eq("coin_type", coin_type)
                .limit(1)
                .execute()
            )
        except Exception as e:
            log.error("token_get_failed", coin_type=coin_type, error=str(e))
            raise StorageError(f"get {coin_type} failed: {e}", table=self.TABLE_NAME) from e

        rows = result.data or []
        if not rows:
            return None
        return self._to_model(rows[0])

    async def upsert(
        self,
        coin_type: str,
        price_usd: float,
        last_update_ms: int,
        metadata: TokenMetadata | None = None,
    ) -> None:
        """Insert or update the record for a coin type.

        When ``metadata`` is None the stored metadata column is left as is.

        Raises:
            StorageError: If the upsert fails.
        """
        record: dict[str, Any] = {
            "coin_type": coin_type,
            "price_usd": price_usd,
            "last_update": last_update_ms,
        }
        if metadata is not None:
            record["metadata"] = metadata.model_dump_json(by_alias=True)

        try:
            await (
                self._client.client.table(self.TABLE_NAME)
                .upsert(record, on_conflict="coin_type")
                .execute()
            )
        except Exception as e:
            log.error("token_upsert_failed", coin_type=coin_type, error=str(e))
            raise StorageError(f"upsert {coin_type} failed: {e}", table=self.TABLE_NAME) from e

        log.debug("token_upserted", coin_type=coin_type, price_usd=price_usd)

    async def update_metadata(self, coin_type: str, metadata: TokenMetadata) -> None:
        """Replace the metadata column only; price and last_update are untouched.

        Raises:
            StorageError: If the update fails.
        """
        try:
            await (
                self._client.client.table(self.TABLE_NAME)
                .update({"metadata": metadata.model_dump_json(by_alias=True)})
                .eq("coin_type", coin_type)
                .execute()
            )
        except Exception as e:
            log.error("token_metadata_update_failed", coin_type=coin_type, error=str(e))
            raise StorageError(
                f"metadata update {coin_type} failed: {e}", table=self.TABLE_NAME
            ) from e

    async def list_tokens(self, limit: int = 100, offset: int = 0) -> list[PricedToken]:
        """List records, most recently updated first.

        Raises:
            StorageError: If the query fails.
        """
        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .select("*")
                .order("last_update", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            log.error("tokens_list_failed", error=str(e))
            raise StorageError(f"list failed: {e}", table=self.TABLE_NAME) from e

        return [self._to_model(row) for row in result.data or []]

    async def list_zero_priced(self) -> list[str]:
        """Coin types whose stored price is exactly 0.

        Raises:
            StorageError: If the query fails.
        """
        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .select("coin_type")
                .eq("price_usd", 0)
                .execute()
            )
        except Exception as e:
            log.error("tokens_zero_priced_failed", error=str(e))
            raise StorageError(f"zero-price query failed: {e}", table=self.TABLE_NAME) from e

        return [row["coin_type"] for row in result.data or []]

    @staticmethod
    def _to_model(row: dict[str, Any]) -> PricedToken:
        return PricedToken(
            coin_type=row["coin_type"],
            price_usd=float(row.get("price_usd") or 0),
            last_update=from_epoch_ms(row.get("last_update") or 0),
            metadata=_parse_metadata(row.get("coin_type", ""), row.get("metadata")),
        )


def _parse_metadata(coin_type: str, raw: Any) -> TokenMetadata | None:
    """Parse the metadata column; empty objects and bad JSON read as None."""
    if not raw:
        return None
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        if not data:
            return None
        return TokenMetadata.model_validate(data)
    except ValueError as e:
        log.warning("token_metadata_unparseable", coin_type=coin_type, error=str(e))
        return None
