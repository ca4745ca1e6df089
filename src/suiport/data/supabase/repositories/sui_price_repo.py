"""SUI reference price history repository.

Table schema expected:
    sui_price_history (
        id BIGSERIAL PRIMARY KEY,
        price_usd DOUBLE PRECISION NOT NULL,
        created_at BIGINT NOT NULL    -- epoch milliseconds
    )
"""

from datetime import datetime

import structlog

from suiport.core.clock import from_epoch_ms, to_epoch_ms
from suiport.core.exceptions import StorageError
from suiport.data.models.wallet import SuiPriceEntry
from suiport.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class SuiPriceRepository:
    """Append-only store of periodic SUI price samples."""

    TABLE_NAME = "sui_price_history"

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def add(self, price_usd: float, created_at: datetime) -> None:
        """Append a price sample.

        Raises:
            StorageError: If the insert fails.
        """
        record = {"price_usd": price_usd, "created_at": to_epoch_ms(created_at)}
        try:
            await self._client.client.table(self.TABLE_NAME).insert(record).execute()
        except Exception as e:
            log.error("sui_price_insert_failed", price_usd=price_usd, error=str(e))
            raise StorageError(f"insert failed: {e}", table=self.TABLE_NAME) from e

    async def get_since(self, since: datetime) -> list[SuiPriceEntry]:
        """Samples created at or after ``since``, oldest first.

        Raises:
            StorageError: If the query fails.
        """
        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .select("*")
                .gte("created_at", to_epoch_ms(since))
                .order("created_at")
                .execute()
            )
        except Exception as e:
            raise StorageError(f"history query failed: {e}", table=self.TABLE_NAME) from e

        return [
            SuiPriceEntry(
                id=row.get("id"),
                price_usd=float(row["price_usd"]),
                created_at=from_epoch_ms(row["created_at"]),
            )
            for row in result.data or []
        ]
