"""7k aggregator price API client.

The 7k aggregator publishes USD-denominated prices for Sui coin types
(quoted against native USDC). It is the primary price source of the
cascade and the source of the periodic SUI price samples.

Response format for ``GET /price?ids=<coin_type>&vsCoin=<coin_type>``:
    {"<coin_type>": {"price": 1.2345, "lastUpdated": 1718000000000}}

Unknown coins are either missing from the response or priced 0.
"""

import structlog

from suiport.config.settings import Settings
from suiport.constants.pricing import SUI_COIN_TYPE, USDC_COIN_TYPE
from suiport.services.base import BaseAPIClient

log = structlog.get_logger(__name__)


class SevenKPriceClient(BaseAPIClient):
    """Client for the 7k aggregator price endpoint.

    Example:
        client = SevenKPriceClient(settings)
        price = await client.get_token_price("0x2::sui::SUI")
        await client.close()
    """

    service_name = "sevenk"

    def __init__(self, settings: Settings) -> None:
        """Initialize 7k price client with settings."""
        super().__init__(
            base_url=settings.sevenk_price_url,
            timeout=settings.price_request_timeout,
            headers={"Accept": "application/json"},
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=settings.circuit_breaker_cooldown,
        )

    async def get_token_price(self, coin_type: str, vs_coin: str = USDC_COIN_TYPE) -> float:
        """Fetch the price of ``coin_type`` quoted in ``vs_coin``.

        Returns:
            The reported price, 0.0 when the coin is unknown to the aggregator.

        Raises:
            ExternalServiceError: If the request fails.
        """
        response = await self.get("/price", params={"ids": coin_type, "vsCoin": vs_coin})
        data = response.json()

        entry = data.get(coin_type) if isinstance(data, dict) else None
        price = float((entry or {}).get("price") or 0)
        log.debug("sevenk_price_fetched", coin_type=coin_type, price=price)
        return price

    async def get_sui_price(self) -> float:
        """Fetch the SUI price in USD."""
        return await self.get_token_price(SUI_COIN_TYPE)
