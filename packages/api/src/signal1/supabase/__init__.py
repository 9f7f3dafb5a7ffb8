# This project was developed with assistance from AI tools.
"""Async Supabase client (Auth, PostgREST, Storage) built on httpx."""

from .client import SupabaseClient, TableQuery, log_supabase_status
from .errors import SupabaseError

__all__ = ["SupabaseClient", "SupabaseError", "TableQuery", "log_supabase_status"]
