from __future__ import annotations

import pytest
from sqlalchemy import text

from tournament_hub.core.integration_db_safety import assert_safe_integration_db
from tournament_hub.db.session import engine

TRUNCATE_TABLES = (
    "tournament_messages",
    "tournament_participants",
    "tournaments",
    "contact_messages",
    "users",
)

TRUNCATE_SQL = f"TRUNCATE TABLE {', '.join(TRUNCATE_TABLES)} RESTART IDENTITY CASCADE"


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    assert_safe_integration_db(str(engine.url))


@pytest.fixture(autouse=True)
async def cleanup_db() -> None:
    # Each test runs on its own event loop; pooled asyncpg connections cannot follow.
    await engine.dispose()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    async with engine.begin() as conn:
        await conn.execute(text(TRUNCATE_SQL))

    yield

    await engine.dispose()
