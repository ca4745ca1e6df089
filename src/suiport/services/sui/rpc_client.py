"""Sui JSON-RPC client for coin enumeration, metadata and object reads.

The client extends BaseAPIClient to inherit:
- Circuit breaker protection
- Lazy httpx client and resource cleanup

Methods raise on failure so that callers can retry them with RetryPolicy.
"""

from typing import Any

import structlog

from suiport.config.settings import Settings
from suiport.core.exceptions import ExternalServiceError
from suiport.data.models.token import TokenMetadata
from suiport.services.base import BaseAPIClient
from suiport.services.sui.models import CoinPage

log = structlog.get_logger(__name__)


class SuiRPCClient(BaseAPIClient):
    """Client for the Sui fullnode JSON-RPC API.

    Example:
        client = SuiRPCClient(settings)
        page = await client.get_all_coins("0x...")
        await client.close()
    """

    service_name = "sui_rpc"

    def __init__(self, settings: Settings) -> None:
        """Initialize Sui RPC client with settings."""
        super().__init__(
            base_url=settings.sui_rpc_url,
            timeout=10.0,
            headers={"Content-Type": "application/json"},
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=settings.circuit_breaker_cooldown,
        )
        self._request_id = 0

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Invoke a JSON-RPC method and return its ``result`` member.

        Raises:
            ExternalServiceError: On transport failure or a JSON-RPC error object.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        response = await self.post("", json=payload)
        data = response.json()

        error = data.get("error")
        if error:
            log.warning("sui_rpc_error", method=method, error=error)
            raise ExternalServiceError(
                service=self.service_name,
                message=f"{method}: {error.get('message', error)}",
            )
        return data.get("result")

    async def get_coin_metadata(self, coin_type: str) -> TokenMetadata | None:
        """Fetch decimals, name, symbol, description and icon for a coin type.

        Returns:
            TokenMetadata, or None if the node has no metadata for the coin.
        """
        result = await self._call("suix_getCoinMetadata", [coin_type])
        if not result:
            log.debug("sui_coin_metadata_missing", coin_type=coin_type)
            return None
        return TokenMetadata.model_validate(result)

    async def get_object(self, object_id: str, show_content: bool = True) -> dict[str, Any] | None:
        """Read an object, returning its ``data`` member or None if it does not exist."""
        result = await self._call(
            "sui_getObject",
            [object_id, {"showContent": show_content}],
        )
        if not result:
            return None
        return result.get("data")

    async def get_all_coins(
        self,
        owner: str,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> CoinPage:
        """Fetch one page of coin objects owned by ``owner``."""
        result = await self._call("suix_getAllCoins", [owner, cursor, limit])
        page = CoinPage.model_validate(result or {})
        log.debug(
            "sui_coins_page_fetched",
            owner=owner[:10] + "...",
            count=len(page.data),
            has_next_page=page.has_next_page,
        )
        return page
