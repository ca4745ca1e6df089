"""Pydantic models for Sui JSON-RPC responses."""

from pydantic import BaseModel, ConfigDict, Field


class CoinBalance(BaseModel):
    """A single coin object owned by a wallet.

    Attributes:
        coin_type: Chain-qualified coin type.
        coin_object_id: Object id of the coin.
        balance: Raw balance as an integer string.
    """

    model_config = ConfigDict(populate_by_name=True)

    coin_type: str = Field(alias="coinType")
    coin_object_id: str | None = Field(default=None, alias="coinObjectId")
    balance: str


class CoinPage(BaseModel):
    """One page of ``suix_getAllCoins`` results."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[CoinBalance] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")
    has_next_page: bool = Field(default=False, alias="hasNextPage")
