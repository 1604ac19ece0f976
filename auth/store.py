"""
auth/store.py -- SQLAlchemy Core persistence layer for users and applications.

Pattern: Repository + Data Mapper (same as board/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and
dependency code never touches SQL directly.

Security:
  All queries use bound parameters. The dynamic SET list in update() is
  built by core.sql.sql_for_partial_update() from a fixed column whitelist;
  request input only ever supplies values.

Layer rule: no imports from api/ or board/.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.tokens import hash_password
from core.db import applications, jobs, users
from core.errors import BadRequest, NotFound
from core.sql import bind_positional, sql_for_partial_update

logger = logging.getLogger("jobboard.auth")

# Fields a partial update may touch, input key -> column. isAdmin is absent:
# privilege changes do not go through the self-service path.
_UPDATE_COLUMNS: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "password": "password",
}


class UserStore:
    """Repository for User records and their job applications.

    Usage:
        store = UserStore(make_engine("sqlite:///jobboard.db"))
        store.register(User(username="u1", first_name="U", last_name="One", email="u1@x.io"), "secret")
        user = store.get("u1")
    """

    def __init__(self, engine: Engine, bcrypt_rounds: int = 12) -> None:
        self.engine = engine
        self.bcrypt_rounds = bcrypt_rounds

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def register(self, user: User, password: str) -> User:
        """Insert a new user with a freshly hashed password.

        Raises BadRequest if the username is already taken.
        """
        hashed = hash_password(password, rounds=self.bcrypt_rounds)
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    users.insert().values(
                        username=user.username,
                        password=hashed,
                        first_name=user.first_name,
                        last_name=user.last_name,
                        email=user.email,
                        is_admin=1 if user.is_admin else 0,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise BadRequest(f"Duplicate username: {user.username}") from exc
        logger.info("Registered user %s (admin=%s)", user.username, user.is_admin)
        return User(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
        )

    def get_by_username(self, username: str) -> User | None:
        """Look up a user including the password hash. Returns None if not found.

        Used by the login path only; route handlers use get().
        """
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.username == username)).fetchone()
        return _row_to_user(row, with_hash=True) if row is not None else None

    def get(self, username: str) -> User:
        """Return a user with the ids of jobs they applied to. Raises NotFound."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.username == username)).fetchone()
            if row is None:
                raise NotFound(f"No user: {username}")
            job_ids = conn.execute(
                select(applications.c.job_id)
                .where(applications.c.username == username)
                .order_by(applications.c.job_id)
            ).scalars()
            user = _row_to_user(row)
            user.jobs = list(job_ids)
        return user

    def find_all(self) -> list[User]:
        """Return all users ordered by username."""
        with self.engine.connect() as conn:
            rows = conn.execute(users.select().order_by(users.c.username)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update(self, username: str, data: dict[str, Any]) -> User:
        """Apply a partial update. data uses API keys (firstName, password, ...).

        password is re-hashed before it reaches the database. Raises
        BadRequest for empty or unknown fields and NotFound for an unknown user.
        """
        unknown = set(data) - set(_UPDATE_COLUMNS)
        if unknown:
            raise BadRequest(f"Cannot update fields: {', '.join(sorted(unknown))}")
        data = dict(data)
        if "password" in data:
            data["password"] = hash_password(data["password"], rounds=self.bcrypt_rounds)

        clause = sql_for_partial_update(data, _UPDATE_COLUMNS)
        idx = len(clause.values) + 1
        sql, params = bind_positional(
            f"UPDATE users SET {clause.where_clause} WHERE username = ${idx}",  # noqa: S608
            [*clause.values, username],
        )
        with self.engine.connect() as conn:
            result = conn.execute(text(sql), params)
            conn.commit()
        if result.rowcount == 0:
            raise NotFound(f"No user: {username}")
        return self.get(username)

    def remove(self, username: str) -> None:
        """Delete a user (applications cascade). Raises NotFound."""
        with self.engine.connect() as conn:
            result = conn.execute(users.delete().where(users.c.username == username))
            conn.commit()
        if result.rowcount == 0:
            raise NotFound(f"No user: {username}")

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def apply_to_job(self, username: str, job_id: int) -> int:
        """Record that username applied to job_id and return the job id.

        Raises NotFound for an unknown job or user and BadRequest when the
        application already exists.
        """
        with self.engine.connect() as conn:
            job = conn.execute(select(jobs.c.id).where(jobs.c.id == job_id)).fetchone()
            if job is None:
                raise NotFound(f"No job: {job_id}")
            user = conn.execute(select(users.c.username).where(users.c.username == username)).fetchone()
            if user is None:
                raise NotFound(f"No username: {username}")
            try:
                conn.execute(applications.insert().values(username=username, job_id=job_id))
                conn.commit()
            except IntegrityError as exc:
                raise BadRequest(f"{username} already applied to job {job_id}") from exc
        return job_id


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row, with_hash: bool = False) -> User:
    return User(
        username=row.username,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        is_admin=bool(row.is_admin),
        hashed_password=row.password if with_hash else None,
    )
