# core/supabase_client.py
# Supabase client used by the browser-side registration core

import logging

from django.conf import settings
from supabase import AsyncClient, acreate_client

logger = logging.getLogger("teamreg.supabase")

_supabase_client = None


class SupabaseNotConfigured(RuntimeError):
    pass


async def get_supabase_client() -> AsyncClient:
    """
    Get the async Supabase client instance (singleton pattern).

    Uses the anon key: everything the client may do is decided by the
    project's row-level security policies, never by this process.
    """
    global _supabase_client

    if _supabase_client is None:
        url = settings.SUPABASE_URL
        key = settings.SUPABASE_ANON_KEY

        if not url or not key:
            logger.warning("Supabase credentials not configured")
            raise SupabaseNotConfigured("SUPABASE_URL and SUPABASE_ANON_KEY must be set")

        _supabase_client = await acreate_client(url, key)
        logger.info("Supabase client initialized")

    return _supabase_client


def reset_supabase_client():
    """Drop the cached client (tests, credential rotation)."""
    global _supabase_client
    _supabase_client = None
