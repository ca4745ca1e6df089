"""Wallet snapshot and history repository for Supabase.

Table schema expected:
    wallets (
        address TEXT PRIMARY KEY,
        total_value_usd DOUBLE PRECISION NOT NULL,
        last_update BIGINT NOT NULL            -- epoch milliseconds
    )
    wallet_tokens (
        wallet_address TEXT NOT NULL REFERENCES wallets(address),
        coin_type TEXT NOT NULL,
        balance TEXT NOT NULL,                 -- raw integer balance
        price_usd DOUBLE PRECISION,
        value_usd DOUBLE PRECISION NOT NULL,
        UNIQUE (wallet_address, coin_type)
    )
    wallet_history (
        id BIGSERIAL PRIMARY KEY,
        wallet_address TEXT NOT NULL,
        total_value_usd DOUBLE PRECISION NOT NULL,
        percentage_change DOUBLE PRECISION,
        tokens_json TEXT NOT NULL,
        created_at BIGINT NOT NULL             -- epoch milliseconds
    )
"""

from datetime import datetime
from typing import Any

import structlog

from suiport.core.clock import from_epoch_ms, to_epoch_ms
from suiport.core.exceptions import StorageError
from suiport.data.models.wallet import WalletHistoryEntry, WalletPortfolio
from suiport.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class WalletRepository:
    """Repository for the wallets, wallet_tokens and wallet_history tables.

    Example:
        repo = WalletRepository(client)
        await repo.save_snapshot(portfolio)
        last = await repo.get_last_history(portfolio.address, since=midnight)
    """

    TABLE_NAME = "wallets"
    TOKENS_TABLE = "wallet_tokens"
    HISTORY_TABLE = "wallet_history"

    def __init__(self, client: SupabaseClient) -> None:
        """Initialize repository with Supabase client.

        Args:
            client: Connected SupabaseClient instance.
        """
        self._client = client

    async def save_snapshot(self, portfolio: WalletPortfolio) -> None:
        """Upsert the wallet row and its holdings.

        Current holdings are upserted first, then rows for coin types the
        wallet no longer holds are deleted. A failed write leaves the
        previous holdings in place rather than none.

        Raises:
            StorageError: If any write fails.
        """
        wallet_record = {
            "address": portfolio.address,
            "total_value_usd": portfolio.total_value_usd,
            "last_update": to_epoch_ms(portfolio.last_update),
        }
        token_records = [
            {
                "wallet_address": portfolio.address,
                "coin_type": holding.coin_type,
                "balance": holding.balance,
                "price_usd": holding.price_usd,
                "value_usd": holding.value_usd,
            }
            for holding in portfolio.holdings
        ]

        table = self.TABLE_NAME
        try:
            await (
                self._client.client.table(self.TABLE_NAME)
                .upsert(wallet_record, on_conflict="address")
                .execute()
            )
            table = self.TOKENS_TABLE
            if token_records:
                await (
                    self._client.client.table(self.TOKENS_TABLE)
                    .upsert(token_records, on_conflict="wallet_address,coin_type")
                    .execute()
                )
            stale = (
                self._client.client.table(self.TOKENS_TABLE)
                .delete()
                .eq("wallet_address", portfolio.address)
            )
            held = [record["coin_type"] for record in token_records]
            if held:
                stale = stale.not_.in_("coin_type", held)
            await stale.execute()
        except Exception as e:
            log.error(
                "wallet_snapshot_save_failed",
                address=portfolio.address,
                table=table,
                error=str(e),
            )
            raise StorageError(f"save {portfolio.address} failed: {e}", table=table) from e

        log.info(
            "wallet_snapshot_saved",
            address=portfolio.address,
            holdings=len(token_records),
            total_value_usd=portfolio.total_value_usd,
        )

    async def add_history(
        self,
        address: str,
        total_value_usd: float,
        percentage_change: float | None,
        tokens_json: str,
        created_at: datetime,
    ) -> None:
        """Append a wallet history entry.

        Raises:
            StorageError: If the insert fails.
        """
        record = {
            "wallet_address": address,
            "total_value_usd": total_value_usd,
            "percentage_change": percentage_change,
            "tokens_json": tokens_json,
            "created_at": to_epoch_ms(created_at),
        }
        try:
            await self._client.client.table(self.HISTORY_TABLE).insert(record).execute()
        except Exception as e:
            log.error("wallet_history_insert_failed", address=address, error=str(e))
            raise StorageError(f"insert for {address} failed: {e}", table=self.HISTORY_TABLE) from e

    async def get_last_history(self, address: str, since: datetime) -> WalletHistoryEntry | None:
        """Latest history entry created at or after ``since``.

        Raises:
            StorageError: If the query fails.
        """
        try:
            result = await (
                self._client.client.table(self.HISTORY_TABLE)
                .select("*")
                .eq("wallet_address", address)
                .gte("created_at", to_epoch_ms(since))
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StorageError(f"last entry for {address} failed: {e}", table=self.HISTORY_TABLE) from e

        rows = result.data or []
        if not rows:
            return None
        return self._to_history(rows[0])

    async def get_history(
        self,
        address: str,
        start: datetime,
        end: datetime,
    ) -> list[WalletHistoryEntry]:
        """History entries between ``start`` and ``end`` inclusive, oldest first.

        Raises:
            StorageError: If the query fails.
        """
        try:
            result = await (
                self._client.client.table(self.HISTORY_TABLE)
                .select("*")
                .eq("wallet_address", address)
                .gte("created_at", to_epoch_ms(start))
                .lte("created_at", to_epoch_ms(end))
                .order("created_at")
                .execute()
            )
        except Exception as e:
            raise StorageError(f"history for {address} failed: {e}", table=self.HISTORY_TABLE) from e

        return [self._to_history(row) for row in result.data or []]

    @staticmethod
    def _to_history(row: dict[str, Any]) -> WalletHistoryEntry:
        return WalletHistoryEntry(
            id=row.get("id"),
            wallet_address=row["wallet_address"],
            total_value_usd=float(row.get("total_value_usd") or 0),
            percentage_change=row.get("percentage_change"),
            tokens_json=row.get("tokens_json") or "[]",
            created_at=from_epoch_ms(row["created_at"]),
        )
