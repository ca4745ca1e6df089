"""Unit tests for WalletPortfolioService.

Tests cover:
- Balance merging across coin objects and pages
- Per-coin valuation with metadata decimals
- Zero-price holdings and per-coin failure isolation
- Snapshot/history persistence and percentage change
- Bounded concurrency of per-coin work
"""

import asyncio
import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from suiport.core.exceptions import InvalidInputError, SourceUnavailableError, StorageError
from suiport.data.models.token import TokenMetadata
from suiport.data.models.wallet import WalletHistoryEntry
from suiport.services.pricing.resolver import PriceResolver, PriceSource, ResolvedPrice
from suiport.services.sui.models import CoinBalance, CoinPage
from suiport.services.wallet.portfolio import (
    WalletPortfolioService,
    merge_balances,
    percentage_change,
)

ADDRESS = "0x" + "ab" * 32
SUI = "0x2::sui::SUI"
USDC = "0xdba3::usdc::USDC"

PRICES = {SUI: 2.0, USDC: 1.0}
METADATA = {
    SUI: TokenMetadata(decimals=9, symbol="SUI"),
    USDC: TokenMetadata(decimals=6, symbol="USDC"),
}


def _coin(coin_type: str, balance: str) -> CoinBalance:
    return CoinBalance(coin_type=coin_type, balance=balance)


def _page(*coins: CoinBalance, next_cursor: str | None = None) -> CoinPage:
    return CoinPage(data=list(coins), next_cursor=next_cursor, has_next_page=next_cursor is not None)


def _history(total: float, clock) -> WalletHistoryEntry:
    return WalletHistoryEntry(
        wallet_address=ADDRESS,
        total_value_usd=total,
        created_at=clock.now - timedelta(hours=1),
    )


@pytest.fixture
def sui_rpc():
    rpc = AsyncMock()
    rpc.get_all_coins.return_value = _page(
        _coin(SUI, "1000000000"),
        _coin(USDC, "2500000"),
        _coin(SUI, "500000000"),
    )
    rpc.get_coin_metadata.side_effect = lambda coin_type: METADATA.get(coin_type)
    return rpc


@pytest.fixture
def resolver(clock):
    resolver = AsyncMock()

    async def resolve(coin_type):
        price = PRICES.get(coin_type)
        source = PriceSource.AGGREGATOR_SDK if price is not None else None
        return ResolvedPrice(price, source, clock.now)

    resolver.resolve.side_effect = resolve
    return resolver


@pytest.fixture
def wallet_repo():
    repo = AsyncMock()
    repo.get_last_history.return_value = None
    return repo


@pytest.fixture
def service(sui_rpc, resolver, price_cache, wallet_repo, retry_policy) -> WalletPortfolioService:
    return WalletPortfolioService(
        sui_rpc, resolver, price_cache, wallet_repo, retry_policy=retry_policy
    )


class TestGetPortfolio:
    """Tests for WalletPortfolioService.get_portfolio()."""

    @pytest.mark.asyncio
    async def test_values_merged_holdings(self, service, resolver, clock):
        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.address == ADDRESS
        assert [h.coin_type for h in portfolio.holdings] == [SUI, USDC]
        sui, usdc = portfolio.holdings
        assert sui.balance == "1500000000"
        assert sui.value_usd == pytest.approx(3.0)
        assert usdc.decimals == 6
        assert usdc.value_usd == pytest.approx(2.5)
        assert portfolio.total_value_usd == pytest.approx(5.5)
        assert portfolio.last_update == clock.now
        # One resolve per coin type, not per coin object
        assert resolver.resolve.await_count == 2

    @pytest.mark.asyncio
    async def test_address_is_normalized(self, service, sui_rpc):
        portfolio = await service.get_portfolio(f"  {ADDRESS.upper().replace('0X', '0x')} ")

        assert portfolio.address == ADDRESS
        assert sui_rpc.get_all_coins.await_args.args[0] == ADDRESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("address", ["", "   ", "not-an-address", "0x" + "g" * 64])
    async def test_invalid_address(self, service, sui_rpc, address):
        with pytest.raises(InvalidInputError):
            await service.get_portfolio(address)
        sui_rpc.get_all_coins.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_follows_pagination(self, service, sui_rpc):
        sui_rpc.get_all_coins.side_effect = [
            _page(_coin(SUI, "1000000000"), next_cursor="cursor-1"),
            _page(_coin(SUI, "1000000000")),
        ]

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.holdings[0].balance == "2000000000"
        cursors = [call.args[1] for call in sui_rpc.get_all_coins.await_args_list]
        assert cursors == [None, "cursor-1"]

    @pytest.mark.asyncio
    async def test_unlistable_wallet_raises(self, service, sui_rpc, retry_policy):
        sui_rpc.get_all_coins.side_effect = RuntimeError("node down")

        with pytest.raises(SourceUnavailableError):
            await service.get_portfolio(ADDRESS)
        assert sui_rpc.get_all_coins.await_count == retry_policy.max_attempts

    @pytest.mark.asyncio
    async def test_empty_wallet(self, service, sui_rpc, wallet_repo):
        sui_rpc.get_all_coins.return_value = _page()

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.holdings == []
        assert portfolio.total_value_usd == 0
        wallet_repo.save_snapshot.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unpriced_coin_is_recorded_at_zero(self, service, sui_rpc, price_cache):
        sui_rpc.get_all_coins.return_value = _page(_coin("0x9::meme::MEME", "42"))

        portfolio = await service.get_portfolio(ADDRESS)

        holding = portfolio.holdings[0]
        assert holding.price_usd == 0.0
        assert holding.value_usd == 0.0
        assert await price_cache.list_zero_priced() == ["0x9::meme::MEME"]

    @pytest.mark.asyncio
    async def test_token_records_carry_price_and_metadata(self, service, token_store):
        await service.get_portfolio(ADDRESS)

        assert token_store.rows[SUI].price_usd == 2.0
        assert token_store.rows[USDC].metadata == METADATA[USDC]

    @pytest.mark.asyncio
    async def test_one_failing_coin_does_not_fail_wallet(self, service, resolver, clock):
        async def resolve(coin_type):
            if coin_type == USDC:
                raise RuntimeError("unexpected")
            return ResolvedPrice(2.0, PriceSource.CACHE, clock.now)

        resolver.resolve.side_effect = resolve

        portfolio = await service.get_portfolio(ADDRESS)

        sui, usdc = portfolio.holdings
        assert sui.value_usd == pytest.approx(3.0)
        assert usdc.value_usd == 0.0
        assert portfolio.total_value_usd == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_missing_metadata_defaults_to_nine_decimals(self, service, sui_rpc):
        sui_rpc.get_coin_metadata.side_effect = lambda coin_type: None

        portfolio = await service.get_portfolio(ADDRESS)

        usdc = portfolio.holdings[1]
        assert usdc.decimals == 9
        assert usdc.metadata is None

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, sui_rpc, price_cache, wallet_repo, retry_policy, clock):
        coin_types = [f"0x{i}::c::C" for i in range(1, 7)]
        sui_rpc.get_all_coins.return_value = _page(*(_coin(ct, "1") for ct in coin_types))
        in_flight = 0
        peak = 0

        async def resolve(coin_type):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return ResolvedPrice(1.0, PriceSource.CACHE, clock.now)

        resolver = AsyncMock()
        resolver.resolve.side_effect = resolve
        service = WalletPortfolioService(
            sui_rpc, resolver, price_cache, wallet_repo, retry_policy=retry_policy, concurrency=2
        )

        portfolio = await service.get_portfolio(ADDRESS)

        assert len(portfolio.holdings) == 6
        assert peak <= 2


class TestCachedPriceFreshness:
    """Wallet refreshes against the real resolver and price cache."""

    DEEP = "0xabc::deep::DEEP"
    DEEP_METADATA = TokenMetadata(decimals=6, symbol="DEEP")

    @pytest.fixture
    def deep_service(self, price_cache, wallet_repo, retry_policy):
        sui_rpc = AsyncMock()
        sui_rpc.get_all_coins.return_value = _page(_coin(self.DEEP, "3000000"))
        sui_rpc.get_coin_metadata.return_value = self.DEEP_METADATA
        sevenk = AsyncMock()
        sevenk.get_token_price.return_value = 1.2
        resolver = PriceResolver(
            price_cache,
            sevenk,
            AsyncMock(),
            AsyncMock(),
            AsyncMock(),
            retry_policy=retry_policy,
        )
        service = WalletPortfolioService(
            sui_rpc, resolver, price_cache, wallet_repo, retry_policy=retry_policy
        )
        return service, sevenk

    @pytest.mark.asyncio
    async def test_cache_hit_does_not_refresh_last_update(self, deep_service, token_store, clock):
        service, sevenk = deep_service
        seeded_at = clock.now
        token_store.seed(self.DEEP, 1.0, seeded_at)

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.holdings[0].price_usd == 1.0
        assert portfolio.holdings[0].value_usd == pytest.approx(3.0)
        sevenk.get_token_price.assert_not_awaited()
        record = token_store.rows[self.DEEP]
        assert record.last_update == seeded_at
        assert record.price_usd == 1.0
        assert record.metadata == self.DEEP_METADATA

    @pytest.mark.asyncio
    async def test_frequent_refreshes_still_let_price_age_out(
        self, deep_service, token_store, clock
    ):
        service, sevenk = deep_service
        token_store.seed(self.DEEP, 1.0, clock.now)

        await service.get_portfolio(ADDRESS)
        clock.advance(timedelta(minutes=4))
        await service.get_portfolio(ADDRESS)
        sevenk.get_token_price.assert_not_awaited()

        clock.advance(timedelta(minutes=4))
        portfolio = await service.get_portfolio(ADDRESS)

        sevenk.get_token_price.assert_awaited_once_with(self.DEEP)
        assert portfolio.holdings[0].price_usd == 1.2
        record = token_store.rows[self.DEEP]
        assert record.price_usd == 1.2
        assert record.last_update == clock.now


class TestHistoryRecording:
    """Snapshot and history persistence."""

    @pytest.mark.asyncio
    async def test_first_snapshot_of_day_has_no_change(self, service, wallet_repo, clock):
        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.percentage_change is None
        wallet_repo.save_snapshot.assert_awaited_once_with(portfolio)
        since = wallet_repo.get_last_history.await_args.kwargs["since"]
        assert since == datetime(2024, 6, 10, tzinfo=UTC)

        args = wallet_repo.add_history.await_args
        assert args.args[:3] == (ADDRESS, pytest.approx(5.5), None)
        assert args.kwargs["created_at"] == clock.now
        tokens = json.loads(args.args[3])
        assert [t["coin_type"] for t in tokens] == [SUI, USDC]
        assert tokens[1]["metadata"]["iconUrl"] is None

    @pytest.mark.asyncio
    async def test_change_against_last_entry_today(self, service, wallet_repo, clock):
        wallet_repo.get_last_history.return_value = _history(5.0, clock)

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.percentage_change == pytest.approx(10.0)
        assert wallet_repo.add_history.await_args.args[2] == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_previous_zero_total_has_no_change(self, service, wallet_repo, clock):
        wallet_repo.get_last_history.return_value = _history(0.0, clock)

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.percentage_change is None

    @pytest.mark.asyncio
    async def test_snapshot_failure_is_not_fatal(self, service, wallet_repo, clock):
        wallet_repo.save_snapshot.side_effect = StorageError("down", table="wallets")
        wallet_repo.get_last_history.return_value = _history(11.0, clock)

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.percentage_change == pytest.approx(-50.0)
        wallet_repo.add_history.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_history_failure_is_not_fatal(self, service, wallet_repo):
        wallet_repo.get_last_history.side_effect = StorageError("down", table="wallet_history")

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.total_value_usd == pytest.approx(5.5)
        assert portfolio.percentage_change is None
        wallet_repo.add_history.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_record_failure_is_not_fatal(self, service, token_store):
        token_store.fail_writes = True

        portfolio = await service.get_portfolio(ADDRESS)

        assert portfolio.total_value_usd == pytest.approx(5.5)


class TestGetHistory:
    @pytest.mark.asyncio
    async def test_delegates_to_repository(self, service, wallet_repo, clock):
        wallet_repo.get_history.return_value = [_history(1.0, clock)]
        start = clock.now - timedelta(hours=1)

        entries = await service.get_history(ADDRESS, start, clock.now)

        assert len(entries) == 1
        wallet_repo.get_history.assert_awaited_once_with(ADDRESS, start, clock.now)


class TestHelpers:
    def test_merge_balances_keeps_first_seen_order(self):
        merged = merge_balances(
            [_coin(USDC, "1"), _coin(SUI, "2"), _coin(USDC, str(2**70))]
        )

        assert list(merged) == [USDC, SUI]
        assert merged[USDC] == 2**70 + 1

    def test_merge_balances_rejects_bad_balance(self):
        with pytest.raises(ValueError):
            merge_balances([_coin(SUI, "lots")])

    @pytest.mark.parametrize(
        "total,previous,expected",
        [(12.0, 10.0, 20.0), (5.0, 10.0, -50.0), (10.0, 10.0, 0.0)],
    )
    def test_percentage_change(self, total, previous, expected, clock):
        assert percentage_change(total, _history(previous, clock)) == pytest.approx(expected)

    def test_percentage_change_without_previous(self):
        assert percentage_change(1.0, None) is None
