"""Wallet portfolio routes."""

from datetime import timedelta

from fastapi import APIRouter, Query

from suiport.api.dependencies import PortfolioDep
from suiport.api.schemas import Envelope, WalletHistoryOut, WalletHistoryPoint, WalletOut
from suiport.core.clock import utc_now

router = APIRouter(prefix="/wallet", tags=["wallets"])


@router.get("/{address}", response_model=Envelope[WalletOut])
async def get_wallet(address: str, portfolio: PortfolioDep) -> Envelope[WalletOut]:
    """
    Value every coin held by a wallet.

    Balances are merged per coin type, priced through the cascade, and the
    resulting snapshot is recorded with its change since the latest
    snapshot taken today (UTC).
    """
    result = await portfolio.get_portfolio(address)
    return Envelope[WalletOut](data=WalletOut.from_portfolio(result))


@router.get("/{address}/history", response_model=Envelope[WalletHistoryOut])
async def get_wallet_history(
    address: str,
    portfolio: PortfolioDep,
    minutes: int = Query(default=60, ge=1, le=60 * 24 * 30),
) -> Envelope[WalletHistoryOut]:
    """Recorded wallet totals of the last ``minutes`` minutes, oldest first."""
    end = utc_now()
    entries = await portfolio.get_history(address, end - timedelta(minutes=minutes), end)
    return Envelope[WalletHistoryOut](
        data=WalletHistoryOut(
            address=address,
            history=[WalletHistoryPoint.from_entry(e) for e in entries],
        )
    )
