"""Wallet portfolio aggregation.

Enumerates every coin object a wallet owns, merges balances per coin type,
prices and values each coin type, and records the snapshot and its history.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import structlog

from suiport.core.clock import start_of_day
from suiport.core.exceptions import SourceUnavailableError, StorageError
from suiport.core.retry import RetryPolicy
from suiport.core.validation import validate_sui_address
from suiport.data.models.wallet import ValuedHolding, WalletHistoryEntry, WalletPortfolio
from suiport.services.pricing.resolver import PriceSource
from suiport.services.valuation import ValuationEngine, parse_balance

if TYPE_CHECKING:
    from datetime import datetime

    from suiport.data.supabase.repositories.wallet_repo import WalletRepository
    from suiport.services.pricing.cache import PriceCache
    from suiport.services.pricing.resolver import PriceResolver
    from suiport.services.sui.models import CoinBalance
    from suiport.services.sui.rpc_client import SuiRPCClient

log = structlog.get_logger(__name__)


def merge_balances(coins: list[CoinBalance]) -> dict[str, int]:
    """Sum coin object balances per coin type, preserving first-seen order."""
    merged: dict[str, int] = {}
    for coin in coins:
        merged[coin.coin_type] = merged.get(coin.coin_type, 0) + parse_balance(coin.balance)
    return merged


def percentage_change(total: float, previous: WalletHistoryEntry | None) -> float | None:
    """Change of ``total`` vs. a previous history entry, in percent.

    None when there is no previous entry or its total is 0.
    """
    if previous is None or previous.total_value_usd == 0:
        return None
    return (total - previous.total_value_usd) / previous.total_value_usd * 100


class WalletPortfolioService:
    """Builds valued wallet portfolios.

    Per-coin work (metadata, price, valuation, token record) runs
    concurrently, bounded by ``concurrency``. A failure on one coin yields
    a zero-valued holding instead of failing the wallet. Persisting the
    snapshot and history is best-effort.
    """

    def __init__(
        self,
        sui_rpc: SuiRPCClient,
        resolver: PriceResolver,
        cache: PriceCache,
        wallet_repo: WalletRepository,
        valuation: ValuationEngine | None = None,
        retry_policy: RetryPolicy | None = None,
        concurrency: int = 8,
    ) -> None:
        self._sui_rpc = sui_rpc
        self._resolver = resolver
        self._cache = cache
        self._wallet_repo = wallet_repo
        self._valuation = valuation or ValuationEngine()
        self._retry = retry_policy or RetryPolicy()
        self._concurrency = concurrency

    async def get_portfolio(self, address: str) -> WalletPortfolio:
        """Value every coin held by ``address``.

        Raises:
            InvalidInputError: If the address is malformed.
            SourceUnavailableError: If the wallet's coins cannot be listed.
        """
        address = validate_sui_address(address)
        log.info("wallet_portfolio_started", address=address[:10] + "...")

        coins = await self._list_coins(address)
        balances = merge_balances(coins)

        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded(coin_type: str, balance: int) -> ValuedHolding:
            async with semaphore:
                return await self._value_coin(coin_type, balance)

        holdings = list(
            await asyncio.gather(*(bounded(ct, bal) for ct, bal in balances.items()))
        )

        now = self._cache.now()
        total = sum(holding.value_usd for holding in holdings)
        portfolio = WalletPortfolio(
            address=address,
            total_value_usd=total,
            holdings=holdings,
            last_update=now,
        )
        portfolio.percentage_change = await self._record(portfolio, now)

        log.info(
            "wallet_portfolio_completed",
            address=address[:10] + "...",
            coin_types=len(holdings),
            total_value_usd=total,
        )
        return portfolio

    async def get_history(
        self,
        address: str,
        start: datetime,
        end: datetime,
    ) -> list[WalletHistoryEntry]:
        """Stored history entries for ``address`` between ``start`` and ``end``."""
        address = validate_sui_address(address)
        return await self._wallet_repo.get_history(address, start, end)

    async def _list_coins(self, address: str) -> list[CoinBalance]:
        coins: list[CoinBalance] = []
        cursor: str | None = None

        while True:
            page = await self._retry.run(
                lambda: self._sui_rpc.get_all_coins(address, cursor),
                name="sui_get_all_coins",
            )
            if page is None:
                raise SourceUnavailableError("sui_rpc", f"could not list coins for {address}")
            coins.extend(page.data)
            if not page.has_next_page or page.next_cursor is None:
                return coins
            cursor = page.next_cursor

    async def _value_coin(self, coin_type: str, balance: int) -> ValuedHolding:
        try:
            metadata = await self._retry.run(
                lambda: self._sui_rpc.get_coin_metadata(coin_type),
                name="sui_coin_metadata",
            )
            resolved = await self._resolver.resolve(coin_type)
            holding = self._valuation.value_holding(coin_type, balance, resolved.price, metadata)
        except Exception as e:
            log.error("wallet_coin_valuation_failed", coin_type=coin_type, error=str(e))
            return self._valuation.value_holding(coin_type, balance, None)

        # A stored 0 marks the coin for the zero-price sweep. A cached price
        # keeps its last_update so it still ages out.
        try:
            if resolved.source is not PriceSource.CACHE:
                await self._cache.put(coin_type, holding.price_usd, metadata)
            elif metadata is not None:
                await self._cache.put_metadata(coin_type, metadata)
        except StorageError as e:
            log.warning("token_record_save_failed", coin_type=coin_type, error=str(e))

        return holding

    async def _record(self, portfolio: WalletPortfolio, now: datetime) -> float | None:
        """Persist snapshot and history entry, returning the percentage change."""
        try:
            await self._wallet_repo.save_snapshot(portfolio)
        except StorageError as e:
            log.warning("wallet_snapshot_not_saved", address=portfolio.address, error=str(e))

        try:
            previous = await self._wallet_repo.get_last_history(
                portfolio.address, since=start_of_day(now)
            )
            change = percentage_change(portfolio.total_value_usd, previous)
            tokens_json = json.dumps(
                [h.model_dump(mode="json", by_alias=True) for h in portfolio.holdings]
            )
            await self._wallet_repo.add_history(
                portfolio.address,
                portfolio.total_value_usd,
                change,
                tokens_json,
                created_at=now,
            )
        except StorageError as e:
            log.warning("wallet_history_not_saved", address=portfolio.address, error=str(e))
            return None

        return change
