"""Tool server exposing wallet and price lookups over MCP."""
