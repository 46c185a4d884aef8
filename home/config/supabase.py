"""Supabase connection and client management."""

import asyncio
from typing import Optional

from supabase import AsyncClient, acreate_client

from home.settings import settings
from home.utils.exceptions import StorageUnavailableError
from home.utils.logging_config import logger

_supabase_admin_client: Optional[AsyncClient] = None
_supabase_admin_lock = asyncio.Lock()


async def supabase_admin() -> AsyncClient:
    global _supabase_admin_client
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
        raise StorageUnavailableError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set for the supabase backend"
        )
    async with _supabase_admin_lock:
        if _supabase_admin_client is None:
            _supabase_admin_client = await acreate_client(
                settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY
            )
    return _supabase_admin_client


async def check_supabase_connection(client: AsyncClient):
    """
    Checks the connection by reading a single row from the users table.
    Raises an exception if the connection fails.
    """
    try:
        await client.table("users").select("id").limit(1).execute()
        logger.info("Supabase connection successful")
    except Exception as e:
        logger.error(f"Supabase connection error: {e}")
        raise
