"""Wallet portfolio service."""

from suiport.services.wallet.portfolio import (
    WalletPortfolioService,
    merge_balances,
    percentage_change,
)

__all__ = ["WalletPortfolioService", "merge_balances", "percentage_change"]
