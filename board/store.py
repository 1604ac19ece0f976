"""
board/store.py -- SQLAlchemy-backed persistence layer for companies and jobs.

Pattern: Repository + Data Mapper. BoardStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers.

Search filters and partial updates go through core/sql.py. Each entity
declares the filter keys it accepts and the column/operator each key maps to;
anything else is rejected with BadRequest before SQL is built.

Dialect note: the filter templates use PostgreSQL's ILIKE. SQLite has no
ILIKE, but its LIKE is already case-insensitive for ASCII, so the store
rewrites the operator when running on SQLite.

Usage:
    store = BoardStore(make_engine("sqlite:///jobboard.db"))
    store.create_company(Company(handle="acme", name="Acme", description="Anvils"))
    store.find_companies({"name": "ac", "minEmployees": 10})
    store.update_job(3, {"salary": 90000})
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from board.models import Company, Job
from core.db import companies, jobs
from core.errors import BadRequest, NotFound
from core.sql import bind_positional, build_clause, sql_for_partial_update

logger = logging.getLogger("jobboard.board")


def _contains(term: Any) -> str:
    return f"%{term}%"


# ---------------------------------------------------------------------------
# Filter and update whitelists
# ---------------------------------------------------------------------------

COMPANY_FILTERS: dict[str, str] = {
    "name": "name ILIKE",
    "minEmployees": "num_employees >=",
    "maxEmployees": "num_employees <=",
}
_COMPANY_TRANSFORMS = {"name": _contains}

# hasEquity=true becomes "equity > 0"; the store drops hasEquity=false.
JOB_FILTERS: dict[str, str] = {
    "title": "title ILIKE",
    "minSalary": "salary >=",
    "hasEquity": "equity >",
}
_JOB_TRANSFORMS = {"title": _contains, "hasEquity": lambda _flag: 0}

_COMPANY_UPDATE_COLUMNS: dict[str, str] = {
    "name": "name",
    "description": "description",
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

_JOB_UPDATE_COLUMNS: dict[str, str] = {
    "title": "title",
    "salary": "salary",
    "equity": "equity",
}

_COMPANY_COLUMNS = "handle, name, description, num_employees, logo_url"
_JOB_COLUMNS = "id, title, salary, equity, company_handle"


class BoardStore:
    """Repository for Company and Job entities."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _render(self, sql: str) -> str:
        if self.engine.dialect.name == "sqlite":
            return sql.replace(" ILIKE ", " LIKE ")
        return sql

    def _run(self, conn, sql: str, values: list[Any]):
        rewritten, params = bind_positional(self._render(sql), values)
        return conn.execute(text(rewritten), params)

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    def create_company(self, company: Company) -> Company:
        """Insert a company. Raises BadRequest on a duplicate handle or name."""
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    companies.insert().values(
                        handle=company.handle,
                        name=company.name,
                        description=company.description,
                        num_employees=company.num_employees,
                        logo_url=company.logo_url,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise BadRequest(f"Duplicate company: {company.handle}") from exc
        logger.info("Created company %s", company.handle)
        return Company(
            handle=company.handle,
            name=company.name,
            description=company.description,
            num_employees=company.num_employees,
            logo_url=company.logo_url,
        )

    def find_all_companies(self) -> list[Company]:
        """Return every company ordered by name."""
        with self.engine.connect() as conn:
            rows = conn.execute(companies.select().order_by(companies.c.name)).fetchall()
        return [_row_to_company(r) for r in rows]

    def find_companies(self, filters: dict[str, Any]) -> list[Company]:
        """Return companies matching name / minEmployees / maxEmployees.

        Raises BadRequest for unknown keys or minEmployees > maxEmployees.
        """
        if not filters:
            return self.find_all_companies()
        clause = build_clause(filters, COMPANY_FILTERS, _COMPANY_TRANSFORMS)
        sql = f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE {clause.where_clause} ORDER BY name"  # noqa: S608
        with self.engine.connect() as conn:
            rows = self._run(conn, sql, clause.values).fetchall()
        return [_row_to_company(r) for r in rows]

    def get_company(self, handle: str) -> Company:
        """Return a company with its jobs. Raises NotFound."""
        with self.engine.connect() as conn:
            row = conn.execute(companies.select().where(companies.c.handle == handle)).fetchone()
            if row is None:
                raise NotFound(f"No company: {handle}")
            job_rows = conn.execute(
                jobs.select().where(jobs.c.company_handle == handle).order_by(jobs.c.id)
            ).fetchall()
        company = _row_to_company(row)
        company.jobs = [_row_to_job(r) for r in job_rows]
        return company

    def update_company(self, handle: str, data: dict[str, Any]) -> Company:
        """Partially update a company. The handle itself cannot change.

        Raises BadRequest for empty or unknown fields, NotFound for an unknown handle.
        """
        unknown = set(data) - set(_COMPANY_UPDATE_COLUMNS)
        if unknown:
            raise BadRequest(f"Cannot update fields: {', '.join(sorted(unknown))}")
        clause = sql_for_partial_update(data, _COMPANY_UPDATE_COLUMNS)
        idx = len(clause.values) + 1
        try:
            with self.engine.connect() as conn:
                result = self._run(
                    conn,
                    f"UPDATE companies SET {clause.where_clause} WHERE handle = ${idx}",  # noqa: S608
                    [*clause.values, handle],
                )
                conn.commit()
        except IntegrityError as exc:
            raise BadRequest(f"Duplicate company name: {data.get('name')}") from exc
        if result.rowcount == 0:
            raise NotFound(f"No company: {handle}")
        with self.engine.connect() as conn:
            row = conn.execute(companies.select().where(companies.c.handle == handle)).fetchone()
        return _row_to_company(row)

    def remove_company(self, handle: str) -> None:
        """Delete a company and, by cascade, its jobs. Raises NotFound."""
        with self.engine.connect() as conn:
            result = conn.execute(companies.delete().where(companies.c.handle == handle))
            conn.commit()
        if result.rowcount == 0:
            raise NotFound(f"No company: {handle}")
        logger.info("Removed company %s", handle)

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def create_job(self, job: Job) -> Job:
        """Insert a job for an existing company and return it with its new id.

        Raises BadRequest when company_handle does not name a company.
        """
        with self.engine.connect() as conn:
            owner = conn.execute(
                select(companies.c.handle).where(companies.c.handle == job.company_handle)
            ).fetchone()
            if owner is None:
                raise BadRequest(f"No company: {job.company_handle}")
            result = conn.execute(
                jobs.insert().values(
                    title=job.title,
                    salary=job.salary,
                    equity=job.equity,
                    company_handle=job.company_handle,
                )
            )
            conn.commit()
            job_id = result.inserted_primary_key[0]
        return Job(
            id=job_id,
            title=job.title,
            salary=job.salary,
            equity=job.equity,
            company_handle=job.company_handle,
        )

    def find_all_jobs(self) -> list[Job]:
        """Return every job ordered by title."""
        with self.engine.connect() as conn:
            rows = conn.execute(jobs.select().order_by(jobs.c.title, jobs.c.id)).fetchall()
        return [_row_to_job(r) for r in rows]

    def find_jobs(self, filters: dict[str, Any]) -> list[Job]:
        """Return jobs matching title / minSalary / hasEquity.

        hasEquity=false is the same as not filtering on equity at all.
        Raises BadRequest for unknown keys.
        """
        filters = {k: v for k, v in filters.items() if not (k == "hasEquity" and not v)}
        if not filters:
            return self.find_all_jobs()
        clause = build_clause(filters, JOB_FILTERS, _JOB_TRANSFORMS)
        sql = f"SELECT {_JOB_COLUMNS} FROM jobs WHERE {clause.where_clause} ORDER BY title, id"  # noqa: S608
        with self.engine.connect() as conn:
            rows = self._run(conn, sql, clause.values).fetchall()
        return [_row_to_job(r) for r in rows]

    def get_job(self, job_id: int) -> Job:
        """Return a job with its owning company. Raises NotFound."""
        with self.engine.connect() as conn:
            row = conn.execute(jobs.select().where(jobs.c.id == job_id)).fetchone()
            if row is None:
                raise NotFound(f"No job: {job_id}")
            company_row = conn.execute(
                companies.select().where(companies.c.handle == row.company_handle)
            ).fetchone()
        job = _row_to_job(row)
        job.company = _row_to_company(company_row)
        return job

    def update_job(self, job_id: int, data: dict[str, Any]) -> Job:
        """Partially update a job's title, salary or equity.

        A job never moves between companies, so company_handle is rejected
        like any other unknown field.
        """
        unknown = set(data) - set(_JOB_UPDATE_COLUMNS)
        if unknown:
            raise BadRequest(f"Cannot update fields: {', '.join(sorted(unknown))}")
        clause = sql_for_partial_update(data, _JOB_UPDATE_COLUMNS)
        idx = len(clause.values) + 1
        with self.engine.connect() as conn:
            result = self._run(
                conn,
                f"UPDATE jobs SET {clause.where_clause} WHERE id = ${idx}",  # noqa: S608
                [*clause.values, job_id],
            )
            conn.commit()
            if result.rowcount == 0:
                raise NotFound(f"No job: {job_id}")
            row = conn.execute(jobs.select().where(jobs.c.id == job_id)).fetchone()
        return _row_to_job(row)

    def remove_job(self, job_id: int) -> None:
        """Delete a job. Raises NotFound."""
        with self.engine.connect() as conn:
            result = conn.execute(jobs.delete().where(jobs.c.id == job_id))
            conn.commit()
        if result.rowcount == 0:
            raise NotFound(f"No job: {job_id}")


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_company(row) -> Company:
    return Company(
        handle=row.handle,
        name=row.name,
        description=row.description,
        num_employees=row.num_employees,
        logo_url=row.logo_url,
    )


def _row_to_job(row) -> Job:
    return Job(
        id=row.id,
        title=row.title,
        salary=row.salary,
        equity=row.equity,
        company_handle=row.company_handle,
    )
