"""DexScreener API client for market-aggregator prices.

This module provides a client for the DexScreener search endpoint, used as
the last stage of the price cascade: every pair matching a coin type is
returned and the most liquid one supplies the price.

API Documentation: https://docs.dexscreener.com/api/reference
Rate Limits: ~300 requests/minute (no auth required)
"""

import structlog

from suiport.config.settings import Settings
from suiport.services.base import BaseAPIClient
from suiport.services.dexscreener.models import TokenPair, TokenPairsResponse

log = structlog.get_logger(__name__)


def best_liquidity_pair(pairs: list[TokenPair]) -> TokenPair | None:
    """Pick the pair with the highest USD liquidity.

    Pairs without reported liquidity rank as 0. Ties keep the first pair.
    """
    if not pairs:
        return None
    return max(pairs, key=lambda pair: pair.liquidity_usd)


class DexScreenerClient(BaseAPIClient):
    """DexScreener API client.

    Endpoints used:
        - GET /latest/dex/search?q={query} - Pairs matching a token address

    Example:
        client = DexScreenerClient(settings)
        try:
            pairs = await client.search_pairs("0x...::coin::COIN")
        finally:
            await client.close()
    """

    service_name = "dexscreener"

    def __init__(self, settings: Settings) -> None:
        """Initialize DexScreener client with settings."""
        super().__init__(
            base_url=settings.dexscreener_api_url,
            timeout=settings.price_request_timeout,
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=settings.circuit_breaker_cooldown,
        )

    async def search_pairs(self, query: str) -> list[TokenPair]:
        """Search pairs for a token address.

        Args:
            query: Token address (coin type).

        Returns:
            Matching pairs, empty if the token is not listed on any DEX.

        Raises:
            ExternalServiceError: If the request fails.
        """
        response = await self.get("/latest/dex/search", params={"q": query})
        pairs_response = TokenPairsResponse.model_validate(response.json())
        pairs = pairs_response.pairs or []

        log.debug("dexscreener_pairs_fetched", query=query, count=len(pairs))
        return pairs
