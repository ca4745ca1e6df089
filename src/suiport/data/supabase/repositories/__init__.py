"""Repository pattern implementations."""

from suiport.data.supabase.repositories.sui_price_repo import SuiPriceRepository
from suiport.data.supabase.repositories.token_repo import TokenRepository
from suiport.data.supabase.repositories.wallet_repo import WalletRepository

__all__ = ["SuiPriceRepository", "TokenRepository", "WalletRepository"]
