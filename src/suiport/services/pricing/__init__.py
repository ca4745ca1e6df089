"""Pricing service package."""

from suiport.services.pricing.cache import PriceCache
from suiport.services.pricing.resolver import (
    DexReserveMode,
    PriceQuote,
    PriceResolver,
    PriceSource,
    ResolvedPrice,
    reserve_price_from_pool,
)

__all__ = [
    "DexReserveMode",
    "PriceCache",
    "PriceQuote",
    "PriceResolver",
    "PriceSource",
    "ResolvedPrice",
    "reserve_price_from_pool",
]
