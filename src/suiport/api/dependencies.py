"""FastAPI dependencies for dependency injection.

Services live on ``app.state.services`` (built by the lifespan). Tests
replace ``get_services`` through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from suiport.data.supabase.repositories.sui_price_repo import SuiPriceRepository
from suiport.services.container import ServiceContainer
from suiport.services.pricing.cache import PriceCache
from suiport.services.pricing.resolver import PriceResolver
from suiport.services.wallet.portfolio import WalletPortfolioService


def get_services(request: Request) -> ServiceContainer:
    """Get the service container built at startup."""
    return request.app.state.services


ServicesDep = Annotated[ServiceContainer, Depends(get_services)]


def get_resolver(services: ServicesDep) -> PriceResolver:
    """Get price resolver dependency."""
    return services.resolver


def get_price_cache(services: ServicesDep) -> PriceCache:
    """Get price cache dependency."""
    return services.cache


def get_portfolio_service(services: ServicesDep) -> WalletPortfolioService:
    """Get wallet portfolio service dependency."""
    return services.portfolio


def get_sui_price_repo(services: ServicesDep) -> SuiPriceRepository:
    """Get SUI price history repository dependency."""
    return services.sui_price_repo


ResolverDep = Annotated[PriceResolver, Depends(get_resolver)]
PriceCacheDep = Annotated[PriceCache, Depends(get_price_cache)]
PortfolioDep = Annotated[WalletPortfolioService, Depends(get_portfolio_service)]
SuiPriceRepoDep = Annotated[SuiPriceRepository, Depends(get_sui_price_repo)]
