"""Supabase clients for auth checks and per-user history queries."""

from supabase import Client, create_client

from genproxy.config import settings
from genproxy.errors import ConfigError

_client: Client | None = None


def _require_config() -> None:
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ConfigError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")


def get_supabase() -> Client:
    """Get or create the anonymous Supabase client (used for token checks)."""
    global _client
    if _client is None:
        _require_config()
        _client = create_client(settings.supabase_url, settings.supabase_anon_key)
    return _client


def get_user_client(access_token: str) -> Client:
    """Create a client whose table queries run as the token's user.

    A fresh client per request, so no request mutates another's auth state.
    """
    _require_config()
    client = create_client(settings.supabase_url, settings.supabase_anon_key)
    client.postgrest.auth(access_token)
    return client
