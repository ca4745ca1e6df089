"""SuiPort: Sui wallet portfolio valuation and price resolution service."""

__version__ = "1.0.0"
