"""CoinGecko reference price API."""

from suiport.services.coingecko.client import CoinGeckoClient

__all__ = ["CoinGeckoClient"]
