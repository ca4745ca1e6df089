"""MCP server over stdio.

Usage:
    suiport-mcp          # console script
    python -m suiport.mcp_server.server
"""

import asyncio
import json
import sys
from typing import Any

import structlog
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from suiport.config import get_settings
from suiport.config.logging import configure_logging
from suiport.mcp_server.tools import TOOLS, dispatch
from suiport.services.container import ServiceContainer, create_services

log = structlog.get_logger(__name__)

SERVER_NAME = "suiport-mcp"


def create_server(services: ServiceContainer) -> Server:
    """Build an MCP server whose tools run against ``services``."""
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        return TOOLS

    @app.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        log.info("mcp_tool_called", tool=name)
        result = await dispatch(services, name, arguments)
        return [TextContent(type="text", text=json.dumps(result, default=str))]

    return app


async def serve() -> None:
    """Build services and serve MCP requests on stdin/stdout until EOF."""
    settings = get_settings()
    configure_logging(settings, stream=sys.stderr)
    services = await create_services(settings)
    app = create_server(services)

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    finally:
        await services.aclose()


def main() -> None:
    asyncio.run(serve())


if __name__ == "__main__":
    main()
