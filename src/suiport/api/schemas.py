"""Response models for the HTTP API.

Every response is wrapped in ``{"success": true, "data": ...}``; errors
are rendered by the exception handlers as ``{"success": false, "error": ...}``.
Field names are camelCase on the wire.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from suiport.core.clock import to_epoch_ms
from suiport.data.models.token import PricedToken, TokenMetadata
from suiport.data.models.wallet import (
    SuiPriceEntry,
    ValuedHolding,
    WalletHistoryEntry,
    WalletPortfolio,
)
from suiport.scheduler.jobs import SweepResult
from suiport.services.pricing.resolver import PriceQuote

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, constructible by field name."""

    model_config = ConfigDict(populate_by_name=True)


class Envelope(ApiModel, Generic[T]):
    """Successful response wrapper."""

    success: bool = True
    data: T


class ErrorResponse(ApiModel):
    """Failed response body."""

    success: bool = False
    error: str


class MetadataOut(ApiModel):
    decimals: int
    name: str | None = None
    symbol: str | None = None
    description: str | None = None
    icon_url: str | None = Field(default=None, alias="iconUrl")

    @classmethod
    def from_metadata(cls, metadata: TokenMetadata | None) -> "MetadataOut | None":
        if metadata is None:
            return None
        return cls(**metadata.model_dump())


class PriceOut(ApiModel):
    """Price of one coin type."""

    token_type: str = Field(alias="tokenType")
    price_usd: float = Field(alias="priceUSD")
    from_cache: bool = Field(alias="fromCache")
    last_update: int = Field(alias="lastUpdate", description="Epoch ms")
    metadata: MetadataOut | None = None

    @classmethod
    def from_quote(cls, quote: PriceQuote) -> "PriceOut":
        return cls(
            token_type=quote.coin_type,
            price_usd=quote.price_usd,
            from_cache=quote.from_cache,
            last_update=to_epoch_ms(quote.last_update),
            metadata=MetadataOut.from_metadata(quote.metadata),
        )


class HoldingOut(ApiModel):
    coin_type: str = Field(alias="coinType")
    balance: str
    price: float
    value_usd: float = Field(alias="valueUSD")
    metadata: MetadataOut | None = None

    @classmethod
    def from_holding(cls, holding: ValuedHolding) -> "HoldingOut":
        return cls(
            coin_type=holding.coin_type,
            balance=holding.balance,
            price=holding.price_usd,
            value_usd=holding.value_usd,
            metadata=MetadataOut.from_metadata(holding.metadata),
        )


class WalletOut(ApiModel):
    """Valued wallet portfolio."""

    address: str
    total_value_usd: float = Field(alias="totalValueUSD")
    percentage_change: float | None = Field(alias="percentageChange")
    tokens: list[HoldingOut]
    last_update: int = Field(alias="lastUpdate", description="Epoch ms")

    @classmethod
    def from_portfolio(cls, portfolio: WalletPortfolio) -> "WalletOut":
        return cls(
            address=portfolio.address,
            total_value_usd=portfolio.total_value_usd,
            percentage_change=portfolio.percentage_change,
            tokens=[HoldingOut.from_holding(h) for h in portfolio.holdings],
            last_update=to_epoch_ms(portfolio.last_update),
        )


class WalletHistoryPoint(ApiModel):
    total_value_usd: float = Field(alias="totalValueUSD")
    percentage_change: float | None = Field(alias="percentageChange")
    timestamp: int

    @classmethod
    def from_entry(cls, entry: WalletHistoryEntry) -> "WalletHistoryPoint":
        return cls(
            total_value_usd=entry.total_value_usd,
            percentage_change=entry.percentage_change,
            timestamp=to_epoch_ms(entry.created_at),
        )


class WalletHistoryOut(ApiModel):
    address: str
    history: list[WalletHistoryPoint]


class SuiPricePoint(ApiModel):
    price: float
    timestamp: int

    @classmethod
    def from_entry(cls, entry: SuiPriceEntry) -> "SuiPricePoint":
        return cls(price=entry.price_usd, timestamp=to_epoch_ms(entry.created_at))


class SuiPriceHistoryOut(ApiModel):
    history: list[SuiPricePoint]


class TokenOut(ApiModel):
    coin_type: str = Field(alias="coinType")
    price_usd: float = Field(alias="priceUSD")
    last_update: int = Field(alias="lastUpdate")
    metadata: MetadataOut | None = None

    @classmethod
    def from_token(cls, token: PricedToken) -> "TokenOut":
        return cls(
            coin_type=token.coin_type,
            price_usd=token.price_usd,
            last_update=to_epoch_ms(token.last_update),
            metadata=MetadataOut.from_metadata(token.metadata),
        )


class TokenListOut(ApiModel):
    tokens: list[TokenOut]
    limit: int
    offset: int


class SweepOut(ApiModel):
    checked: int
    updated: int
    failed: int

    @classmethod
    def from_result(cls, result: SweepResult) -> "SweepOut":
        return cls(checked=result.checked, updated=result.updated, failed=result.failed)


class TaskResponse(ApiModel):
    success: bool = True
    message: str
    data: SweepOut
