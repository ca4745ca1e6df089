"""DexScreener market data API."""

from suiport.services.dexscreener.client import DexScreenerClient, best_liquidity_pair
from suiport.services.dexscreener.models import TokenPair

__all__ = ["DexScreenerClient", "TokenPair", "best_liquidity_pair"]
