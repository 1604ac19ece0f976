"""
core/sql.py -- Parameterized SQL fragment builders for filters and partial updates.

Filter and update endpoints accept a partially populated mapping of fields.
These helpers turn such a mapping into a fragment with positional
placeholders ($1, $2, ...) and the matching ordered value list:

    >>> build_clause({"name": "Apple", "minEmployees": 4}, COMPANY_FILTERS, ...)
    ClauseResult(where_clause='name ILIKE $1 AND num_employees >= $2', values=['%Apple%', 4])

Security:
  Column names and operators come only from the caller-supplied allow-list,
  never from request input. A key missing from the allow-list raises
  BadRequest, so arbitrary columns can never reach generated SQL. Values are
  always bound parameters.

bind_positional() rewrites the $n placeholders as SQLAlchemy named binds so
the fragment can be handed to sqlalchemy.text() on any dialect.

Layer rule: core/ is the kernel. No imports from api/, auth/, or board/.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from core.errors import BadRequest

_PLACEHOLDER_RE = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class ClauseResult:
    """A SQL fragment plus the values bound to its $n placeholders, in order."""

    where_clause: str
    values: list[Any] = field(default_factory=list)


def _check_ranges(fields: Mapping[str, Any]) -> None:
    """Raise BadRequest when any minX value exceeds its maxX counterpart."""
    for key, low in fields.items():
        if not key.startswith("min"):
            continue
        high = fields.get("max" + key[3:])
        if low is None or high is None:
            continue
        try:
            inverted = low > high
        except TypeError as exc:
            raise BadRequest(f"{key} and max{key[3:]} are not comparable") from exc
        if inverted:
            raise BadRequest(f"{key} cannot be greater than max{key[3:]}")


def build_clause(
    fields: Mapping[str, Any],
    allowed: Mapping[str, str],
    transforms: Mapping[str, Callable[[Any], Any]] | None = None,
    joiner: str = " AND ",
) -> ClauseResult:
    """Build a parameterized fragment from an allow-listed field mapping.

    Args:
        fields:     Input key -> requested value. Iteration order decides
                    placeholder order.
        allowed:    Input key -> "<column> <operator>" template, e.g.
                    {"minEmployees": "num_employees >="}.
        transforms: Optional input key -> value transform, e.g. wrapping a
                    partial-match search term in % wildcards.
        joiner:     Separator between fragments (" AND " for filters,
                    ", " for SET lists).

    Raises BadRequest for an unregistered key or an inverted min/max range.
    Both checks run before any fragment is produced.
    """
    unknown = [key for key in fields if key not in allowed]
    if unknown:
        raise BadRequest(f"Invalid filter: {', '.join(unknown)}")
    _check_ranges(fields)

    transforms = transforms or {}
    fragments: list[str] = []
    values: list[Any] = []
    for idx, (key, value) in enumerate(fields.items(), start=1):
        fragments.append(f"{allowed[key]} ${idx}")
        transform = transforms.get(key)
        values.append(transform(value) if transform else value)

    return ClauseResult(where_clause=joiner.join(fragments), values=values)


def sql_for_partial_update(data: Mapping[str, Any], columns: Mapping[str, str]) -> ClauseResult:
    """Build a SET list ("col1 = $1, col2 = $2") from a partial update mapping.

    columns maps camelCase input keys to snake_case column names, e.g.
    {"numEmployees": "num_employees"}. Keys not listed keep their own name,
    so the caller must validate which keys are permitted before calling.

    Raises BadRequest when data is empty.
    """
    if not data:
        raise BadRequest("No data")
    allowed = {key: f"{columns.get(key, key)} =" for key in data}
    return build_clause(data, allowed, joiner=", ")


def bind_positional(sql: str, values: list[Any]) -> tuple[str, dict[str, Any]]:
    """Rewrite $n placeholders as :p<n> named binds for sqlalchemy.text().

    Returns the rewritten SQL and the parameter dict ({"p1": values[0], ...}).
    """
    rewritten = _PLACEHOLDER_RE.sub(lambda m: f":p{m.group(1)}", sql)
    return rewritten, {f"p{idx}": value for idx, value in enumerate(values, start=1)}
