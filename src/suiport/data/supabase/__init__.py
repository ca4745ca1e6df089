"""Supabase data access layer."""

from suiport.data.supabase.client import SupabaseClient

__all__ = ["SupabaseClient"]
