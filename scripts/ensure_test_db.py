"""Creates the local integration test database when it does not exist yet."""

from __future__ import annotations

import asyncio
import re

import asyncpg
from sqlalchemy.engine import make_url

from tournament_hub.core.config import get_settings
from tournament_hub.core.integration_db_safety import find_integration_db_problem

DB_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


async def ensure_database(database_url: str) -> bool:
    """Returns True when the database was created, False when it already existed."""
    problem = find_integration_db_problem(database_url)
    if problem is not None:
        raise RuntimeError(f"Refusing to create database: {problem}.")

    url = make_url(database_url)
    db_name = url.database or ""
    if DB_NAME_RE.fullmatch(db_name) is None:
        raise RuntimeError(f"Unsupported database name {db_name!r}.")

    conn = await asyncpg.connect(
        host=url.host,
        port=int(url.port or 5432),
        user=url.username,
        password=url.password,
        database="postgres",
    )
    try:
        if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name):
            return False
        await conn.execute(f'CREATE DATABASE "{db_name}"')
        return True
    finally:
        await conn.close()


def main() -> int:
    database_url = get_settings().database_url
    created = asyncio.run(ensure_database(database_url))
    state = "created" if created else "exists"
    print(f"ensure_test_db: {state} db={make_url(database_url).database}")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
