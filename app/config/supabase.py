"""Supabase connection and client management."""

import asyncio
from typing import Optional

from supabase import AsyncClient, StorageException, acreate_client

from app.settings import settings
from app.utils.logging_config import logger

_supabase_admin_client: Optional[AsyncClient] = None
_supabase_admin_lock = asyncio.Lock()


async def supabase_admin() -> AsyncClient:
    """
    Returns the shared service-role client used for storage and auth admin calls.
    """
    global _supabase_admin_client
    async with _supabase_admin_lock:
        if _supabase_admin_client is None:
            _supabase_admin_client = await acreate_client(
                settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY
            )
    return _supabase_admin_client


async def check_supabase_connection():
    """
    Checks the connection to Supabase by listing storage buckets.
    Raises an exception if the connection fails.
    """
    try:
        supabase_client = await supabase_admin()
        await supabase_client.storage.list_buckets()
        logger.info("Supabase connection successful")
    except StorageException as e:
        logger.error(f"Supabase connection error: {e}")
        raise
