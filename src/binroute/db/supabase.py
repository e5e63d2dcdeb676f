"""Supabase client for the shared bin store."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


# Expected table layout:
#
# create table kv_store (
#     key text primary key,
#     value text not null,
#     updated_at timestamptz default now()
# );
