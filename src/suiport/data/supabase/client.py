"""Supabase connection for SuiPort's tables.

One connection serves every repository:
    tokens             price cache records (TokenRepository)
    wallets            latest wallet snapshot (WalletRepository)
    wallet_tokens      holdings of the latest snapshot
    wallet_history     per-valuation totals and percentage change
    sui_price_history  scheduled SUI price samples (SuiPriceRepository)
"""

from typing import Any

import structlog
from supabase._async.client import AsyncClient
from supabase._async.client import create_client as create_async_client
from supabase.lib.client_options import AsyncClientOptions
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from suiport.config.settings import Settings
from suiport.core.exceptions import DatabaseConnectionError

log = structlog.get_logger(__name__)

SUIPORT_TABLES: tuple[str, ...] = (
    "tokens",
    "wallets",
    "wallet_tokens",
    "wallet_history",
    "sui_price_history",
)


class SupabaseClient:
    """Supabase connection shared by the SuiPort repositories.

    Built by the API lifespan or the MCP server and handed to each
    repository. Repositories reach the query builder through ``client``,
    which raises DatabaseConnectionError until ``connect`` has succeeded.
    """

    def __init__(self, settings: Settings) -> None:
        self._client: AsyncClient | None = None
        self._settings = settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(DatabaseConnectionError),
        reraise=True,
    )
    async def connect(self) -> None:
        """Open the connection on the configured schema.

        Raises:
            DatabaseConnectionError: If the client cannot be created after retries.
        """
        if self._client is not None:
            return

        try:
            self._client = await create_async_client(
                self._settings.supabase_url,
                self._settings.supabase_key.get_secret_value(),
                options=AsyncClientOptions(schema=self._settings.postgres_schema),
            )
        except Exception as e:
            log.error("supabase_connection_failed", url=self._settings.supabase_url, error=str(e))
            raise DatabaseConnectionError(f"Supabase: {e}") from e

        log.info(
            "supabase_connected",
            url=self._settings.supabase_url,
            schema=self._settings.postgres_schema,
        )

    async def disconnect(self) -> None:
        if self._client is not None:
            self._client = None
            log.info("supabase_disconnected")

    @property
    def client(self) -> AsyncClient:
        """Query builder entry point for repositories.

        Raises:
            DatabaseConnectionError: If not connected.
        """
        if self._client is None:
            raise DatabaseConnectionError("Supabase: Client not connected")
        return self._client

    async def health_check(self) -> dict[str, Any]:
        """Probe each SuiPort table with a one-row read.

        Returns:
            ``{"status", "healthy"}``, plus ``unreachable_tables`` and
            ``error`` when any probe fails.
        """
        if self._client is None:
            return {"status": "disconnected", "healthy": False}

        unreachable: list[str] = []
        last_error = ""
        for table in SUIPORT_TABLES:
            try:
                await self._client.table(table).select("*").limit(1).execute()
            except Exception as e:
                unreachable.append(table)
                last_error = str(e)

        if unreachable:
            log.error("supabase_health_check_failed", tables=unreachable, error=last_error)
            return {
                "status": "error",
                "healthy": False,
                "unreachable_tables": unreachable,
                "error": last_error,
            }
        return {"status": "connected", "healthy": True}
