# =============================================================================
# File: unistay/infra/persistence/pg_client.py
# =============================================================================
# AsyncPG pool helper
# Module-level pool with fetch/fetchrow/fetchval/execute and a transaction
# context that nested calls join through a ContextVar.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import pathlib
import time
from typing import Optional, Any, List, AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar

import asyncpg

from unistay.common.exceptions.exceptions import InfrastructureError
from unistay.config.pg_client_config import get_postgres_config, PostgresConfig

log = logging.getLogger("unistay.infra.pg_client")

# =============================================================================
# Transaction Context (ContextVar for async context)
# =============================================================================

# Connection of the transaction opened by the current task, if any.
# fetch/execute helpers use it so statements inside `transaction()` share it.
_current_transaction_connection: ContextVar[Optional[asyncpg.Connection]] = ContextVar(
    'transaction_connection', default=None
)

_POOL: Optional[asyncpg.Pool] = None
_POOL_LOCK = asyncio.Lock()

SLOW_QUERY_THRESHOLD_MS = 500.0


# =============================================================================
# Pool Lifecycle
# =============================================================================

async def init_db_pool(config: Optional[PostgresConfig] = None, **pool_kwargs: Any) -> asyncpg.Pool:
    """Initialize the pool; safe to call more than once"""
    global _POOL

    config = config or get_postgres_config()

    async with _POOL_LOCK:
        if _POOL is None or _POOL.is_closing():
            dsn = config.dsn.get_secret_value()
            params = config.to_asyncpg_params()
            params.update(pool_kwargs)

            log.info(f"Initializing PostgreSQL pool (hidden DSN): {dsn.split('@')[-1]}")

            try:
                pool = await asyncpg.create_pool(dsn=dsn, **params)
                async with pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")
            except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
                log.critical(f"Failed to init PostgreSQL pool: {e}", exc_info=True)
                raise InfrastructureError(f"PostgreSQL pool init error: {e}") from e

            _POOL = pool
            log.info(
                f"PostgreSQL pool ready. Min/Max size: "
                f"{config.pool_min_size}/{config.pool_max_size}"
            )

    return _POOL  # type: ignore[return-value]


async def get_pool(ensure_initialized: bool = True) -> asyncpg.Pool:
    """Get the global pool, init if needed (default)."""
    if _POOL is None or _POOL.is_closing():
        if not ensure_initialized:
            raise InfrastructureError("PostgreSQL pool not available")
        return await init_db_pool()
    return _POOL


async def close_db_pool() -> None:
    """Close the global pool gracefully."""
    global _POOL

    async with _POOL_LOCK:
        pool, _POOL = _POOL, None
        if pool and not pool.is_closing():
            log.info("Closing PostgreSQL pool...")
            await pool.close()
            log.info("PostgreSQL pool closed.")


# =============================================================================
# Connection Context Manager
# =============================================================================

@asynccontextmanager
async def acquire_connection() -> AsyncIterator[asyncpg.Connection]:
    """Transaction connection if one is open, otherwise a pooled one"""
    transaction_conn = _current_transaction_connection.get()
    if transaction_conn is not None:
        yield transaction_conn
        return

    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


def _log_if_slow(kind: str, query: str, started: float) -> None:
    elapsed_ms = (time.monotonic() - started) * 1000
    if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
        log.warning(f"[SLOW QUERY] {kind} took {elapsed_ms:.1f}ms: {query[:150]}...")


# =============================================================================
# Query Helpers
# =============================================================================

async def fetch(query: str, *args: Any, timeout: Optional[float] = None) -> List[asyncpg.Record]:
    """Execute the query and return all rows."""
    started = time.monotonic()
    async with acquire_connection() as conn:
        rows = await conn.fetch(query, *args, timeout=timeout)
    _log_if_slow("FETCH", query, started)
    return rows


async def fetchrow(query: str, *args: Any, timeout: Optional[float] = None) -> Optional[asyncpg.Record]:
    """Execute query and return single row."""
    started = time.monotonic()
    async with acquire_connection() as conn:
        row = await conn.fetchrow(query, *args, timeout=timeout)
    _log_if_slow("FETCHROW", query, started)
    return row


async def fetchval(query: str, *args: Any, column: int = 0, timeout: Optional[float] = None) -> Any:
    """Execute query and return a single value."""
    started = time.monotonic()
    async with acquire_connection() as conn:
        value = await conn.fetchval(query, *args, column=column, timeout=timeout)
    _log_if_slow("FETCHVAL", query, started)
    return value


async def execute(query: str, *args: Any, timeout: Optional[float] = None) -> str:
    """Execute a statement and return its status string (e.g. 'UPDATE 1')."""
    started = time.monotonic()
    async with acquire_connection() as conn:
        status = await conn.execute(query, *args, timeout=timeout)
    _log_if_slow("EXECUTE", query, started)
    return status


# =============================================================================
# Transaction Context Manager
# =============================================================================

@asynccontextmanager
async def transaction(timeout: Optional[float] = None):
    """
    Create a database transaction context manager.

    Usage:
        async with transaction() as conn:
            await execute("INSERT INTO ...")
            await conn.execute("INSERT INTO ...")

    Statements issued through this module's helpers inside the block use
    the transaction connection. Commits on normal exit, rolls back on
    exception. A nested call joins the outer transaction.

    Yields:
        The connection object (not transaction)
    """
    outer = _current_transaction_connection.get()
    if outer is not None:
        yield outer
        return

    pool = await get_pool()
    conn = await pool.acquire(timeout=timeout)
    token = _current_transaction_connection.set(conn)

    try:
        async with conn.transaction():
            yield conn
    except Exception as e:
        log.error(f"Transaction failed: {e}")
        raise
    finally:
        _current_transaction_connection.reset(token)
        await pool.release(conn)


# =============================================================================
# Schema
# =============================================================================

async def run_schema_from_file(file_path_str: Optional[str] = None) -> None:
    """Execute DDL statements from a SQL file."""
    file_path_str = file_path_str or get_postgres_config().schema_file
    path = pathlib.Path(file_path_str)
    if not path.is_file():
        raise FileNotFoundError(f"Schema file not found: {file_path_str}")

    sql = path.read_text(encoding="utf-8").strip()
    if not sql:
        log.warning(f"Schema file {file_path_str} is empty")
        return

    async with acquire_connection() as conn:
        await conn.execute(sql)
    log.info(f"Schema from {file_path_str} applied successfully")


# =============================================================================
# Health and Diagnostics
# =============================================================================

async def health_check() -> dict:
    """
    PostgreSQL health check.

    Returns:
        dict: status, latency and pool size
    """
    started = time.monotonic()
    try:
        pool = await get_pool(ensure_initialized=False)
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (InfrastructureError, OSError, asyncpg.PostgresError) as e:
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "latency_ms": round((time.monotonic() - started) * 1000, 2),
        "pool_size": pool.get_size(),
        "pool_idle": pool.get_idle_size(),
    }

# =============================================================================
# EOF
# =============================================================================
