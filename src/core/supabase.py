"""Supabase client singleton and query execution helpers."""

import logging
from functools import lru_cache
from typing import Any

import httpx
from supabase import Client, create_client
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.api.middleware.error_handler import TransientIOError
from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Backoff for read retries (seconds)
READ_WAIT_MIN_SECONDS = 0.1
READ_WAIT_MAX_SECONDS = 2


@lru_cache
def get_supabase_client() -> Client:
    """Get cached Supabase client singleton for database operations.

    Uses the secret key, which bypasses RLS. Callers are responsible for
    checking that the authenticated user may touch the rows involved.

    Returns:
        Client: Supabase client instance.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
    )


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Database read failed (attempt %d), retrying: %s",
        retry_state.attempt_number,
        exc,
    )


def execute_read(query: Any) -> Any:
    """Execute a read query, retrying transport failures with backoff.

    Args:
        query: A PostgREST request builder (anything with ``execute()``).

    Returns:
        The query response.

    Raises:
        TransientIOError: If the database stays unreachable.
    """
    settings = get_settings()
    retrying = Retrying(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.db_read_max_attempts),
        wait=wait_exponential(multiplier=READ_WAIT_MIN_SECONDS, min=READ_WAIT_MIN_SECONDS, max=READ_WAIT_MAX_SECONDS),
        before_sleep=_log_retry,
        reraise=True,
    )
    try:
        return retrying(query.execute)
    except httpx.TransportError as e:
        logger.error("Database read failed after %d attempts: %s", settings.db_read_max_attempts, e)
        raise TransientIOError() from e


def execute_write(query: Any) -> Any:
    """Execute a write query once.

    Writes are not retried: a request whose response was lost may already
    have been applied, and a blind retry could duplicate rows.

    Raises:
        TransientIOError: If the database could not be reached.
    """
    try:
        return query.execute()
    except httpx.TransportError as e:
        logger.error("Database write failed: %s", e)
        raise TransientIOError() from e


async def check_database_connection() -> dict[str, Any]:
    """Check if database connection is healthy.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    try:
        client = get_supabase_client()
        client.table("profiles").select("user_id").limit(1).execute()
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}
