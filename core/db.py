"""
core/db.py -- Shared SQLAlchemy Core schema and engine factory.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
board/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change.

All four tables live on one MetaData because applications reference both
users and jobs. auth/store.py and board/store.py each own the queries for
their tables and share one Engine.

Layer rule: core/ is the kernel. No imports from api/, auth/, or board/.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

companies = Table(
    "companies",
    metadata,
    Column("handle", String(25), primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("num_employees", Integer),
    Column("description", Text, nullable=False),
    Column("logo_url", Text),
)

jobs = Table(
    "jobs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("salary", Integer),
    Column("equity", Float),  # fraction in [0, 1]
    Column(
        "company_handle",
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    ),
)

users = Table(
    "users",
    metadata,
    Column("username", String(25), primary_key=True),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("first_name", Text, nullable=False),
    Column("last_name", Text, nullable=False),
    Column("email", Text, nullable=False),
    Column("is_admin", Integer, nullable=False, server_default="0"),
)

applications = Table(
    "applications",
    metadata,
    Column("username", String(25), ForeignKey("users.username", ondelete="CASCADE"), primary_key=True),
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
)


# ---------------------------------------------------------------------------
# SQLite connection pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys=ON is what makes the ON DELETE
    CASCADE clauses above take effect.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str) -> Engine:
    """Create an Engine for db_url and make sure every table exists."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    metadata.create_all(engine)
    return engine
