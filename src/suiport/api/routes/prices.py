"""Token price routes."""

from datetime import timedelta

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from suiport.api.dependencies import PriceCacheDep, ResolverDep, SuiPriceRepoDep
from suiport.api.schemas import (
    Envelope,
    ErrorResponse,
    PriceOut,
    SuiPriceHistoryOut,
    SuiPricePoint,
    TokenListOut,
    TokenOut,
)
from suiport.core.clock import utc_now

router = APIRouter(tags=["prices"])

PRICE_UNAVAILABLE = "Price not available for this token"


@router.get(
    "/price/{coin_type}",
    response_model=Envelope[PriceOut],
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_token_price(coin_type: str, resolver: ResolverDep) -> Envelope[PriceOut] | JSONResponse:
    """
    Get the USD price of a coin type.

    Serves the stored price when it is less than an hour old, otherwise
    runs the price cascade.
    """
    quote = await resolver.quote(coin_type)
    if quote is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorResponse(error=PRICE_UNAVAILABLE).model_dump(),
        )
    return Envelope[PriceOut](data=PriceOut.from_quote(quote))


@router.get("/sui-price-history", response_model=Envelope[SuiPriceHistoryOut])
async def get_sui_price_history(
    repo: SuiPriceRepoDep,
    minutes: int = Query(default=60, ge=1, le=60 * 24 * 30),
) -> Envelope[SuiPriceHistoryOut]:
    """SUI price samples of the last ``minutes`` minutes, oldest first."""
    entries = await repo.get_since(utc_now() - timedelta(minutes=minutes))
    return Envelope[SuiPriceHistoryOut](
        data=SuiPriceHistoryOut(history=[SuiPricePoint.from_entry(e) for e in entries])
    )


@router.get("/tokens", response_model=Envelope[TokenListOut])
async def list_tokens(
    cache: PriceCacheDep,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> Envelope[TokenListOut]:
    """List stored token records, most recently updated first."""
    tokens = await cache.list_tokens(limit=limit, offset=offset)
    return Envelope[TokenListOut](
        data=TokenListOut(
            tokens=[TokenOut.from_token(t) for t in tokens],
            limit=limit,
            offset=offset,
        )
    )
