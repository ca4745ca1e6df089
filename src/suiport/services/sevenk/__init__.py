"""7k aggregator price API."""

from suiport.services.sevenk.client import SevenKPriceClient

__all__ = ["SevenKPriceClient"]
