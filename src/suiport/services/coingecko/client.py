"""CoinGecko simple-price client.

Used as the reference index of the cascade. Prices are looked up by
CoinGecko coin id (``sui``), not by on-chain coin type.

API Documentation: https://docs.coingecko.com/reference/simple-price
"""

import structlog

from suiport.config.settings import Settings
from suiport.services.base import BaseAPIClient

log = structlog.get_logger(__name__)


class CoinGeckoClient(BaseAPIClient):
    """Client for ``GET /simple/price``.

    Example:
        client = CoinGeckoClient(settings)
        price = await client.get_usd_price("sui")
        await client.close()
    """

    service_name = "coingecko"

    def __init__(self, settings: Settings) -> None:
        """Initialize CoinGecko client with settings."""
        super().__init__(
            base_url=settings.coingecko_api_url,
            timeout=settings.price_request_timeout,
            headers={"Accept": "application/json"},
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=settings.circuit_breaker_cooldown,
        )

    async def get_usd_price(self, coin_id: str) -> float | None:
        """Fetch the USD price of a CoinGecko coin id.

        Returns:
            The price, or None when CoinGecko has no (or a zero) price for the id.

        Raises:
            ExternalServiceError: If the request fails.
        """
        response = await self.get(
            "/simple/price",
            params={"ids": coin_id, "vs_currencies": "usd"},
        )
        data = response.json()

        price = (data.get(coin_id) or {}).get("usd") if isinstance(data, dict) else None
        log.debug("coingecko_price_fetched", coin_id=coin_id, price=price)
        if not price:
            return None
        return float(price)
