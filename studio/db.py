"""
Postgres access for boards and lesson plans.

The pool is created at startup. Queries run inside user_conn(): one
transaction with `app.user_id` set, so the RLS policies on boards and
lesson_plans only expose the caller's rows. An empty `app.user_id`
lifts those policies, so this module never hands out an unscoped
connection.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from studio import config

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """Create the pool. Called once from the app lifespan."""
    global pool
    settings = config.settings
    pool = await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT_SECONDS,
        init=_register_jsonb,
    )


async def close_pool() -> None:
    global pool
    if pool is None:
        return
    await pool.close()
    pool = None


async def _register_jsonb(conn: asyncpg.Connection) -> None:
    # boards.content, boards.subjects and lesson_plans.content read back as dicts and lists
    await conn.set_type_codec("jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog")


@asynccontextmanager
async def user_conn(user_id: str) -> AsyncIterator[asyncpg.Connection]:
    """
    Connection scoped to one user's boards and their lesson plans.

    The scope is transaction-local and ends when the block exits.

        async with user_conn(user.id) as conn:
            row = await conn.fetchrow("SELECT * FROM boards WHERE id = $1", board_id)

    Raises:
        ValueError: If `user_id` is empty
        RuntimeError: If init_pool() has not run
    """
    if not user_id:
        raise ValueError("user_conn needs a user id")
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn, conn.transaction():
        await conn.execute("SELECT set_config('app.user_id', $1, true)", user_id)
        yield conn
