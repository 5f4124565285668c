from __future__ import annotations

import asyncpg
import json
import logging
from importlib import resources
from typing import Optional

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


async def _init_conn(conn: asyncpg.Connection) -> None:
    # json/jsonb come back as dict/list, not strings
    await conn.set_type_codec(
        "json",
        schema="pg_catalog",
        encoder=json.dumps,
        decoder=json.loads,
        format="text",
    )
    await conn.set_type_codec(
        "jsonb",
        schema="pg_catalog",
        encoder=json.dumps,
        decoder=json.loads,
        format="text",
    )


async def init_db_pool(
    database_url: str,
    *,
    min_size: int = 1,
    max_size: int = 10,
    command_timeout: float = 30,
) -> asyncpg.Pool:
    global _pool
    if _pool:
        return _pool
    _pool = await asyncpg.create_pool(
        dsn=database_url,
        min_size=min_size,
        max_size=max_size,
        max_inactive_connection_lifetime=60,
        command_timeout=command_timeout,
        init=_init_conn,
    )
    return _pool


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool not initialized")
    return _pool


def peek_pool() -> Optional[asyncpg.Pool]:
    return _pool


async def ensure_schema(pool: asyncpg.Pool) -> None:
    """Apply the packaged schema.sql (idempotent CREATE ... IF NOT EXISTS)."""
    ddl = resources.files("svc_teammate").joinpath("sql/schema.sql").read_text(encoding="utf-8")
    async with pool.acquire() as conn:
        await conn.execute(ddl)
    logger.info("Database schema ensured")


async def close_db_pool() -> None:
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
