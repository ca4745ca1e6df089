"""Pydantic models for DexScreener API responses.

API Documentation: https://docs.dexscreener.com/api/reference
"""

from pydantic import BaseModel, ConfigDict, Field


class PairToken(BaseModel):
    """Token on one side of a trading pair.

    Attributes:
        address: Token address (coin type on Sui).
        name: Token name.
        symbol: Token ticker symbol.
    """

    address: str | None = None
    name: str | None = None
    symbol: str | None = None


class LiquidityInfo(BaseModel):
    """Liquidity information.

    Attributes:
        usd: Total liquidity in USD.
        base: Liquidity in base token.
        quote: Liquidity in quote token.
    """

    usd: float | None = None
    base: float | None = None
    quote: float | None = None


class TokenPair(BaseModel):
    """Trading pair returned by the search endpoint.

    Attributes:
        chain_id: Blockchain identifier (e.g., "sui").
        dex_id: DEX identifier (e.g., "cetus", "turbos").
        pair_address: Trading pair address.
        base_token: Base token information.
        quote_token: Quote token information.
        price_usd: Base token price in USD, as a decimal string.
        liquidity: Liquidity information.
    """

    model_config = ConfigDict(populate_by_name=True)

    chain_id: str | None = Field(default=None, alias="chainId")
    dex_id: str | None = Field(default=None, alias="dexId")
    pair_address: str | None = Field(default=None, alias="pairAddress")
    base_token: PairToken = Field(default_factory=PairToken, alias="baseToken")
    quote_token: PairToken = Field(default_factory=PairToken, alias="quoteToken")
    price_usd: str | None = Field(default=None, alias="priceUsd")
    liquidity: LiquidityInfo | None = None

    @property
    def liquidity_usd(self) -> float:
        """USD liquidity, 0 when not reported."""
        if self.liquidity is None or self.liquidity.usd is None:
            return 0.0
        return self.liquidity.usd


class TokenPairsResponse(BaseModel):
    """Response from the search endpoint.

    Attributes:
        pairs: Trading pairs matching the query.
    """

    pairs: list[TokenPair] | None = None
