"""Persistence: models and Supabase repositories."""
