"""Pytest configuration and fixtures for Huddle tests.

Test isolation strategy:
- Each test gets its own engine and a freshly created schema
- TEST_DATABASE_URL selects the database; default is in-memory SQLite
  shared across threads through a StaticPool, so the TestClient's worker
  thread and the test body see the same data
- Route tests use auth_client, whose sessions are bound to the same engine
- Tokens come from tests.helpers.auth_headers (real session tokens)
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

# Settings are read lazily, but must be valid before the app is created
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("HUDDLE_ENV", "test")

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from huddle.app import add_request_id_middleware, create_app
from huddle.config import clear_settings_cache
from huddle.db.models import Base
from huddle.db.session import create_session_factory, get_db

SQLITE_MEMORY_URL = "sqlite+pysqlite://"


def get_test_database_url() -> str:
    return os.environ.get("TEST_DATABASE_URL", SQLITE_MEMORY_URL)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create an engine with a fresh schema for one test."""
    url = get_test_database_url()
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(url)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a session on the test engine.

    Factories commit, so rows are visible to requests made through
    auth_client. Call db_session.expire_all() before re-reading rows a
    request has changed.
    """
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


def _override_get_db(engine: Engine):
    session_factory = create_session_factory(engine)

    def override() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return override


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client without authentication.

    Suitable for public endpoints (health, register, login).
    """
    app = create_app(skip_auth_middleware=True)
    app.dependency_overrides[get_db] = _override_get_db(engine)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_client(engine: Engine) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client with auth and request-id middleware.

    Uses the real SessionTokenVerifier; authenticate with
    tests.helpers.auth_headers(user_id).
    """
    app = create_app()
    app.dependency_overrides[get_db] = _override_get_db(engine)
    add_request_id_middleware(app, log_requests=False)
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
