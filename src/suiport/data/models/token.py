"""Token-related Pydantic models.

This module defines the persisted price record for a coin type and the
coin metadata returned by the Sui RPC node.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from suiport.constants.pricing import DEFAULT_DECIMALS
from suiport.core.clock import utc_now
from suiport.core.validation import is_usable_price


class TokenMetadata(BaseModel):
    """Coin metadata as reported by ``suix_getCoinMetadata``.

    Serialized with aliases (``iconUrl``) when stored in the tokens table.

    Attributes:
        decimals: Number of decimal places of the raw balance.
        name: Human-readable coin name.
        symbol: Ticker symbol.
        description: Free-form description.
        icon_url: Icon URL, if any.
    """

    model_config = ConfigDict(populate_by_name=True)

    decimals: int = Field(default=DEFAULT_DECIMALS, ge=0)
    name: str | None = None
    symbol: str | None = None
    description: str | None = None
    icon_url: str | None = Field(default=None, alias="iconUrl")


class PricedToken(BaseModel):
    """Cached price record for a coin type.

    Maps to the ``tokens`` table, keyed by ``coin_type``. ``last_update`` is
    stored as epoch milliseconds and exposed as an aware UTC datetime.

    A price of exactly 0 marks a coin that could not be priced; such records
    exist so the zero-price sweep can find them, and are never served as
    a real price.

    Example:
        token = PricedToken(
            coin_type="0x2::sui::SUI",
            price_usd=1.25,
            last_update=datetime.now(UTC),
        )
    """

    coin_type: str = Field(description="Chain-qualified coin type (unique)")
    price_usd: float = Field(description="Last known USD price, 0 if unknown")
    last_update: datetime = Field(description="When the price was written")
    metadata: TokenMetadata | None = Field(default=None, description="Coin metadata")

    @property
    def has_price(self) -> bool:
        """True when the stored price is a real, positive price."""
        return is_usable_price(self.price_usd)

    def age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since the record was written."""
        return (now or utc_now()) - self.last_update

    def is_stale(self, window: timedelta, now: datetime | None = None) -> bool:
        """Check whether the record is older than ``window``.

        A record exactly ``window`` old is still fresh.
        """
        return self.age(now) > window
