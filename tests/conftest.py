"""
tests/conftest.py -- Shared test fixtures for Jobboard tests.

This module provides:
  - engine: a fresh named shared-memory SQLite database per test
  - user_store / board_store: stores over that engine, seeded with fixtures
  - client: TestClient running the real app with a patched lifespan
  - tokens: pre-signed credentials for the seeded users

Seed data:
  companies c1, c2, c3 with 1, 2, 3 employees
  jobs      j1 (c1, salary 100, equity 0.1), j2 (c1, salary 200, no equity),
            j3 (c2, salary 300, equity 0)
  users     u1 (regular, applied to j1), u2 (regular), admin (admin)
  every password is "password1"

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread.

DEBUG and BCRYPT_WORK_FACTOR must be set before any project import so
get_settings() auto-generates SECRET_KEY and hashing stays fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core import so get_settings() sees them.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.limiter import limiter
from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_token
from board.models import Company, Job
from board.store import BoardStore
from core.config import get_settings
from core.db import make_engine

PASSWORD = "password1"


# ---------------------------------------------------------------------------
# Database and stores
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """A private shared-memory database, dropped when the test finishes."""
    url = f"sqlite:///file:test_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = make_engine(url)
    yield eng
    eng.dispose()


@pytest.fixture
def board_store(engine: Engine) -> BoardStore:
    store = BoardStore(engine)
    for n in (1, 2, 3):
        store.create_company(
            Company(
                handle=f"c{n}",
                name=f"C{n}",
                description=f"Desc{n}",
                num_employees=n,
                logo_url=f"http://c{n}.img",
            )
        )
    store.create_job(Job(title="j1", salary=100, equity=0.1, company_handle="c1"))
    store.create_job(Job(title="j2", salary=200, equity=None, company_handle="c1"))
    store.create_job(Job(title="j3", salary=300, equity=0.0, company_handle="c2"))
    return store


@pytest.fixture
def job_ids(board_store: BoardStore) -> dict[str, int]:
    """Map seeded job titles to their generated ids."""
    return {job.title: job.id for job in board_store.find_all_jobs()}


@pytest.fixture
def user_store(engine: Engine, board_store: BoardStore, job_ids: dict[str, int]) -> UserStore:
    store = UserStore(engine, bcrypt_rounds=get_settings().bcrypt_work_factor)
    for username, is_admin in (("u1", False), ("u2", False), ("admin", True)):
        store.register(
            User(
                username=username,
                first_name=username.upper(),
                last_name="Test",
                email=f"{username}@example.com",
                is_admin=is_admin,
            ),
            PASSWORD,
        )
    store.apply_to_job("u1", job_ids["j1"])
    return store


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


@pytest.fixture
def tokens() -> dict[str, str]:
    """Signed credentials for the seeded users (they need not exist to sign)."""
    secret = get_settings().secret_key
    return {
        "u1": create_token(User("u1", "U1", "Test", "u1@example.com", is_admin=False), secret),
        "u2": create_token(User("u2", "U2", "Test", "u2@example.com", is_admin=False), secret),
        "admin": create_token(User("admin", "ADMIN", "Test", "admin@example.com", is_admin=True), secret),
    }


# ---------------------------------------------------------------------------
# Application client
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine, user_store: UserStore, board_store: BoardStore):
    """Return a lifespan that wires the test stores into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.engine = engine
        app.state.user_store = user_store
        app.state.board_store = board_store
        yield

    return test_lifespan


@pytest.fixture
def client(engine: Engine, user_store: UserStore, board_store: BoardStore) -> Generator[TestClient, None, None]:
    """TestClient over the real app and the seeded per-test database."""
    app.router.lifespan_context = _patch_lifespan(engine, user_store, board_store)
    # The limiter keeps one in-memory counter store for the whole process.
    limiter.reset()
    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client
