"""
Supabase client configuration.
"""

from functools import lru_cache

import structlog
from supabase import Client, create_client

from app.config import get_settings

logger = structlog.get_logger()


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Get a cached Supabase client instance.

    Uses SUPABASE_URL and SUPABASE_SERVICE_KEY. Project membership is
    checked by the API layer, so the service key is used for all queries.
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "Supabase URL and key must be set. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_KEY"
        )

    client = create_client(settings.supabase_url, settings.supabase_service_key)
    logger.info("Supabase client initialized")
    return client


# Convenience alias
supabase = get_supabase_client
