"""
Auth module.

Session provider clients (Supabase and a development mock).
"""

from ideavault.auth.supabase_auth import AuthSession, MockAuth, SupabaseAuth

__all__ = [
    "AuthSession",
    "MockAuth",
    "SupabaseAuth",
]
