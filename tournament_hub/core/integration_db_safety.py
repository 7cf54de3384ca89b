from __future__ import annotations

from sqlalchemy.engine import make_url

LOCAL_DB_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "tournament_hub_postgres"})
TEST_DB_MARKER = "test"


def find_integration_db_problem(database_url: str) -> str | None:
    """Returns why the URL must not be truncated by integration tests, or None when it is safe."""
    parsed = make_url(database_url)
    if parsed.get_backend_name() != "postgresql":
        return "integration tests run against PostgreSQL only"

    db_name = (parsed.database or "").strip()
    if TEST_DB_MARKER not in db_name.lower():
        return f"database name {db_name!r} does not contain {TEST_DB_MARKER!r}"

    host = (parsed.host or "").strip().lower()
    if host not in LOCAL_DB_HOSTS:
        return f"host {host!r} is not a local test host"
    return None


def assert_safe_integration_db(database_url: str) -> None:
    problem = find_integration_db_problem(database_url)
    if problem is None:
        return
    raise RuntimeError(
        "Refusing to run destructive integration tests: "
        f"{problem}. Point DATABASE_URL at a local database such as 'tournament_hub_test'."
    )
