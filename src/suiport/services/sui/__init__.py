"""Sui RPC client and response models."""

from suiport.services.sui.models import CoinBalance, CoinPage
from suiport.services.sui.rpc_client import SuiRPCClient

__all__ = ["CoinBalance", "CoinPage", "SuiRPCClient"]
