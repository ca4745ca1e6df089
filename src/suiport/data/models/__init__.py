"""Data models for SuiPort storage and API payloads."""

from suiport.data.models.token import PricedToken, TokenMetadata
from suiport.data.models.wallet import (
    SuiPriceEntry,
    ValuedHolding,
    WalletHistoryEntry,
    WalletPortfolio,
)

__all__ = [
    "PricedToken",
    "SuiPriceEntry",
    "TokenMetadata",
    "ValuedHolding",
    "WalletHistoryEntry",
    "WalletPortfolio",
]
