import functools
import logging
import threading
import time
from typing import Callable, TypeVar

import httpx
from supabase import Client, create_client

from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One client per worker thread; pooled HTTP/2 connections are not shared across threads
_thread_local = threading.local()


def init_db():
    """Verify the Supabase connection at startup.

    Note: Schema (tables and the enrollment functions) is applied from
    database/schema.py through Supabase migrations, not here.
    """
    if not settings.supabase_url or not settings.supabase_secret_key:
        logger.warning("Supabase credentials not configured. Database features disabled.")
        return

    try:
        get_db().table("tenant_counters").select("business_id").limit(1).execute()
        logger.info("Supabase connection verified")
    except Exception as e:
        logger.warning(f"Supabase connection check failed: {e}")
        logger.warning("Make sure migrations have been run and credentials are correct.")


def get_db() -> Client:
    """Get the calling thread's Supabase client, creating it on first use."""
    if not settings.supabase_url or not settings.supabase_secret_key:
        raise RuntimeError(
            "Supabase credentials not configured. "
            "Set SUPABASE_URL and SUPABASE_SECRET_KEY environment variables."
        )

    client = getattr(_thread_local, "client", None)
    if client is None:
        client = create_client(settings.supabase_url, settings.supabase_secret_key)
        _thread_local.client = client
    return client


def reset_db() -> None:
    """Drop the calling thread's client so the next call reconnects."""
    if hasattr(_thread_local, "client"):
        delattr(_thread_local, "client")


def with_retry(max_retries: int = 2, delay: float = 0.1) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator that retries database operations on connection errors.

    Only transport failures ("Server disconnected", refused connections) are
    retried; PostgREST errors and business outcomes propagate unchanged.
    A dropped connection does not tell whether the request was applied, so
    only reads and idempotent writes may use it.

    Args:
        max_retries: Maximum number of retry attempts (default 2)
        delay: Delay in seconds between retries (default 0.1)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (httpx.RemoteProtocolError, httpx.ConnectError) as e:
                    if attempt >= max_retries:
                        logger.error(f"Connection error in {func.__name__} after {max_retries} retries: {e}")
                        raise
                    logger.warning(
                        f"Connection error in {func.__name__}, retrying ({attempt + 1}/{max_retries}): {e}"
                    )
                    reset_db()
                    time.sleep(delay)
            raise RuntimeError("unreachable")
        return wrapper
    return decorator
