"""Wiring of clients, repositories and services.

Built once per process by the API lifespan or the MCP server and passed
down explicitly.
"""

from dataclasses import dataclass

import structlog

from suiport.config.settings import Settings
from suiport.core.retry import RetryPolicy
from suiport.data.supabase.client import SupabaseClient
from suiport.data.supabase.repositories import (
    SuiPriceRepository,
    TokenRepository,
    WalletRepository,
)
from suiport.services.coingecko.client import CoinGeckoClient
from suiport.services.dexscreener.client import DexScreenerClient
from suiport.services.pricing import PriceCache, PriceResolver
from suiport.services.sevenk.client import SevenKPriceClient
from suiport.services.sui.rpc_client import SuiRPCClient
from suiport.services.valuation import ValuationEngine
from suiport.services.wallet.portfolio import WalletPortfolioService

log = structlog.get_logger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request handler, job or tool call may need."""

    settings: Settings
    supabase: SupabaseClient
    sui_rpc: SuiRPCClient
    sevenk: SevenKPriceClient
    coingecko: CoinGeckoClient
    dexscreener: DexScreenerClient
    token_repo: TokenRepository
    wallet_repo: WalletRepository
    sui_price_repo: SuiPriceRepository
    retry_policy: RetryPolicy
    cache: PriceCache
    resolver: PriceResolver
    portfolio: WalletPortfolioService

    async def aclose(self) -> None:
        """Close HTTP clients and drop the database connection."""
        for client in (self.sui_rpc, self.sevenk, self.coingecko, self.dexscreener):
            await client.close()
        await self.supabase.disconnect()
        log.info("services_closed")


def build_services(settings: Settings, supabase: SupabaseClient) -> ServiceContainer:
    """Build the service graph around a (connected) Supabase client."""
    retry_policy = RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay,
    )

    sui_rpc = SuiRPCClient(settings)
    sevenk = SevenKPriceClient(settings)
    coingecko = CoinGeckoClient(settings)
    dexscreener = DexScreenerClient(settings)

    token_repo = TokenRepository(supabase)
    wallet_repo = WalletRepository(supabase)
    sui_price_repo = SuiPriceRepository(supabase)

    cache = PriceCache(token_repo)
    resolver = PriceResolver(
        cache=cache,
        sevenk=sevenk,
        coingecko=coingecko,
        sui_rpc=sui_rpc,
        dexscreener=dexscreener,
        retry_policy=retry_policy,
        dex_reserve_mode=settings.dex_reserve_mode,
        reserve_pool_id=settings.cetus_sui_usdc_pool,
    )
    portfolio = WalletPortfolioService(
        sui_rpc=sui_rpc,
        resolver=resolver,
        cache=cache,
        wallet_repo=wallet_repo,
        valuation=ValuationEngine(),
        retry_policy=retry_policy,
        concurrency=settings.wallet_price_concurrency,
    )

    log.debug(
        "services_built",
        dex_reserve_mode=settings.dex_reserve_mode,
        retry_max_attempts=settings.retry_max_attempts,
        wallet_price_concurrency=settings.wallet_price_concurrency,
    )

    return ServiceContainer(
        settings=settings,
        supabase=supabase,
        sui_rpc=sui_rpc,
        sevenk=sevenk,
        coingecko=coingecko,
        dexscreener=dexscreener,
        token_repo=token_repo,
        wallet_repo=wallet_repo,
        sui_price_repo=sui_price_repo,
        retry_policy=retry_policy,
        cache=cache,
        resolver=resolver,
        portfolio=portfolio,
    )


async def create_services(settings: Settings) -> ServiceContainer:
    """Connect to Supabase and build the service graph.

    Raises:
        DatabaseConnectionError: If Supabase is unreachable after retries.
    """
    supabase = SupabaseClient(settings)
    await supabase.connect()
    return build_services(settings, supabase)
