"""Wallet-related Pydantic models.

This module defines valued holdings, wallet portfolios and the history
records persisted for wallets and the SUI reference price.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from suiport.data.models.token import TokenMetadata


class ValuedHolding(BaseModel):
    """A wallet's balance of one coin type, valued in USD.

    Created fresh per valuation request and never mutated.

    Attributes:
        coin_type: Chain-qualified coin type.
        balance: Raw on-chain balance as an integer string.
        decimals: Decimal places used to scale the balance.
        price_usd: Resolved price, 0 when no price is known.
        value_usd: balance / 10**decimals * price_usd, or 0.
        metadata: Coin metadata if it could be fetched.
    """

    model_config = ConfigDict(frozen=True)

    coin_type: str
    balance: str
    decimals: int
    price_usd: float = 0.0
    value_usd: float = 0.0
    metadata: TokenMetadata | None = None


class WalletPortfolio(BaseModel):
    """Valued snapshot of a wallet.

    Attributes:
        address: Sui wallet address.
        total_value_usd: Sum of holding values.
        percentage_change: Change vs. the latest snapshot taken today (UTC).
        holdings: One entry per coin type held.
        last_update: When the snapshot was computed.
    """

    address: str
    total_value_usd: float = 0.0
    percentage_change: float | None = None
    holdings: list[ValuedHolding] = Field(default_factory=list)
    last_update: datetime


class WalletHistoryEntry(BaseModel):
    """Row of the ``wallet_history`` table."""

    id: int | None = None
    wallet_address: str
    total_value_usd: float
    percentage_change: float | None = None
    tokens_json: str = "[]"
    created_at: datetime


class SuiPriceEntry(BaseModel):
    """Row of the ``sui_price_history`` table."""

    id: int | None = None
    price_usd: float
    created_at: datetime
