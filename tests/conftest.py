"""Shared pytest fixtures for SuiPort tests.

This module provides fixtures for:
- Test environment variables and Settings
- A controllable clock
- An in-memory token store standing in for the tokens table
- A RetryPolicy that never sleeps
- A chainable mock Supabase client

Usage:
    @pytest.mark.asyncio
    async def test_something(price_cache, clock):
        await price_cache.put("0x2::sui::SUI", 1.25)
        clock.advance(timedelta(minutes=6))
"""

import os
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from suiport.config.settings import Settings
from suiport.core.clock import from_epoch_ms, to_epoch_ms
from suiport.core.exceptions import StorageError
from suiport.core.retry import RetryPolicy
from suiport.data.models.token import PricedToken, TokenMetadata
from suiport.services.pricing.cache import PriceCache

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Loads .env file first, then sets defaults for any missing variables.
    """
    from dotenv import load_dotenv

    original_env = os.environ.copy()

    # Load .env file if it exists (won't override existing env vars)
    load_dotenv()

    os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
    os.environ.setdefault("SUPABASE_KEY", "test-key")
    os.environ.setdefault("SCHEDULER_ENABLED", "false")

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def settings() -> Settings:
    """Settings with test values, independent of the environment."""
    return Settings(
        supabase_url="http://localhost:54321",
        supabase_key="test-key",
        retry_base_delay=0,
        scheduler_enabled=False,
    )


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at 2024-06-10 12:00:00 UTC."""
    return FakeClock(datetime(2024, 6, 10, 12, 0, tzinfo=UTC))


# =============================================================================
# Token store
# =============================================================================


class InMemoryTokenRepository:
    """TokenRepository with the same contract, backed by a dict."""

    def __init__(self) -> None:
        self.rows: dict[str, PricedToken] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.upserts: list[tuple[str, float]] = []

    def seed(
        self,
        coin_type: str,
        price: float,
        last_update: datetime,
        metadata: TokenMetadata | None = None,
    ) -> None:
        # Round-trip through epoch ms as the real table does
        self.rows[coin_type] = PricedToken(
            coin_type=coin_type,
            price_usd=price,
            last_update=from_epoch_ms(to_epoch_ms(last_update)),
            metadata=metadata,
        )

    async def get(self, coin_type: str) -> PricedToken | None:
        if self.fail_reads:
            raise StorageError("read failed", table="tokens")
        return self.rows.get(coin_type)

    async def upsert(
        self,
        coin_type: str,
        price_usd: float,
        last_update_ms: int,
        metadata: TokenMetadata | None = None,
    ) -> None:
        if self.fail_writes:
            raise StorageError("write failed", table="tokens")
        existing = self.rows.get(coin_type)
        if metadata is None and existing is not None:
            metadata = existing.metadata
        self.rows[coin_type] = PricedToken(
            coin_type=coin_type,
            price_usd=price_usd,
            last_update=from_epoch_ms(last_update_ms),
            metadata=metadata,
        )
        self.upserts.append((coin_type, price_usd))

    async def update_metadata(self, coin_type: str, metadata: TokenMetadata) -> None:
        if self.fail_writes:
            raise StorageError("write failed", table="tokens")
        existing = self.rows.get(coin_type)
        if existing is not None:
            self.rows[coin_type] = existing.model_copy(update={"metadata": metadata})

    async def list_tokens(self, limit: int = 100, offset: int = 0) -> list[PricedToken]:
        ordered = sorted(self.rows.values(), key=lambda t: t.last_update, reverse=True)
        return ordered[offset : offset + limit]

    async def list_zero_priced(self) -> list[str]:
        if self.fail_reads:
            raise StorageError("read failed", table="tokens")
        return [coin_type for coin_type, row in self.rows.items() if row.price_usd == 0]


@pytest.fixture
def token_store() -> InMemoryTokenRepository:
    """Empty in-memory tokens table."""
    return InMemoryTokenRepository()


@pytest.fixture
def price_cache(token_store: InMemoryTokenRepository, clock: FakeClock) -> PriceCache:
    """PriceCache over the in-memory store and the fake clock."""
    return PriceCache(token_store, clock=clock)  # type: ignore[arg-type]


# =============================================================================
# Retry
# =============================================================================


@pytest.fixture
def retry_policy() -> RetryPolicy:
    """Three-attempt policy whose sleeps are recorded instead of awaited."""
    return RetryPolicy(max_attempts=3, base_delay=1.0, sleep=AsyncMock())


# =============================================================================
# Supabase
# =============================================================================


@pytest.fixture
def mock_supabase_client() -> MagicMock:
    """Create mock Supabase client.

    Query builders are MagicMocks, so any chain of
    ``table().select().eq()...`` ends in a configurable ``execute``.
    """
    client = MagicMock()
    client.client = MagicMock()
    return client
