"""
board/models.py -- Domain dataclasses for companies and job postings.

These are pure data containers with zero logic. All query logic (filters,
partial updates, cascades) lives in board/store.py.

id / jobs / company are filled in by the store; callers creating records
leave them at their defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Job:
    """A job posting owned by one company."""

    title: str
    company_handle: str
    salary: Optional[int] = None
    equity: Optional[float] = None  # fraction of the company, 0..1
    id: Optional[int] = None
    company: Optional["Company"] = None  # set by BoardStore.get_job()


@dataclass
class Company:
    """A hiring company, keyed by its URL-safe handle."""

    handle: str
    name: str
    description: str
    num_employees: Optional[int] = None
    logo_url: Optional[str] = None
    jobs: list[Job] = field(default_factory=list)  # set by BoardStore.get_company()
