"""Tool implementations exposed over MCP.

Each tool takes the service container and the raw arguments object and
returns ``{"success": true, "data": ...}`` or ``{"success": false, "error": ...}``.
Tools never raise.
"""

from typing import Any

import structlog
from mcp.types import Tool

from suiport.api.schemas import PriceOut, WalletOut
from suiport.core.exceptions import SuiPortError
from suiport.services.container import ServiceContainer

log = structlog.get_logger(__name__)

TOOL_GET_WALLET_BALANCE = "get_wallet_balance"
TOOL_GET_TOKEN_PRICE = "get_token_price"

TOOLS: list[Tool] = [
    Tool(
        name=TOOL_GET_WALLET_BALANCE,
        description=(
            "Get the balance and token holdings of a SUI wallet address. Returns total "
            "USD value and detailed information about each token held."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "The SUI wallet address to query (e.g., 0x...)",
                },
            },
            "required": ["address"],
        },
    ),
    Tool(
        name=TOOL_GET_TOKEN_PRICE,
        description=(
            "Get the current USD price of a token on the SUI blockchain. Supports all "
            "tokens known to the SuiPort price sources."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "coin_type": {
                    "type": "string",
                    "description": "The full coin type (e.g., 0x2::sui::SUI for SUI token)",
                },
                "tokenType": {
                    "type": "string",
                    "description": "Alias of coin_type",
                },
            },
            "anyOf": [{"required": ["coin_type"]}, {"required": ["tokenType"]}],
        },
    ),
]


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


async def get_wallet_balance(services: ServiceContainer, arguments: dict[str, Any]) -> dict[str, Any]:
    """Value a wallet's holdings."""
    address = arguments.get("address")
    if not address:
        return error("Wallet address is required")

    try:
        portfolio = await services.portfolio.get_portfolio(address)
    except SuiPortError as e:
        log.warning("mcp_wallet_balance_failed", address=address, error=str(e))
        return error(str(e))
    except Exception as e:
        log.error("mcp_wallet_balance_error", address=address, error=str(e))
        return error(str(e) or "Failed to fetch wallet balance")

    data = WalletOut.from_portfolio(portfolio).model_dump(by_alias=True)
    data["tokenCount"] = len(portfolio.holdings)
    return ok(data)


async def get_token_price(services: ServiceContainer, arguments: dict[str, Any]) -> dict[str, Any]:
    """Price one coin type."""
    coin_type = arguments.get("coin_type") or arguments.get("tokenType")
    if not coin_type:
        return error("Coin type is required")

    try:
        quote = await services.resolver.quote(coin_type)
    except SuiPortError as e:
        log.warning("mcp_token_price_failed", coin_type=coin_type, error=str(e))
        return error(str(e))
    except Exception as e:
        log.error("mcp_token_price_error", coin_type=coin_type, error=str(e))
        return error(str(e) or "Failed to fetch token price")

    if quote is None:
        return error("Price not available for this token")
    return ok(PriceOut.from_quote(quote).model_dump(by_alias=True))


HANDLERS = {
    TOOL_GET_WALLET_BALANCE: get_wallet_balance,
    TOOL_GET_TOKEN_PRICE: get_token_price,
}


async def dispatch(services: ServiceContainer, name: str, arguments: Any) -> dict[str, Any]:
    """Run the tool called ``name``."""
    if not isinstance(arguments, dict):
        return error("Invalid arguments. Expected an object.")
    handler = HANDLERS.get(name)
    if handler is None:
        return error(f"Unknown tool: {name}")
    return await handler(services, arguments)
