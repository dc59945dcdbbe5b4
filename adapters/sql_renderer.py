"""Regex-based SQL rewriting for single-row fetches, row counts and ``@name`` binding.

These are pattern matches over the statement text, not a SQL parser. The
first ``LIMIT`` anywhere in the text is taken as the statement's limit,
including one inside a subquery, and a projection containing its own
``SELECT ... FROM`` confuses the count rewrite. Callers with such SQL should
write the count or single-row query by hand.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from adapters.errors import MissingParameterError

_FLAGS = re.IGNORECASE | re.DOTALL

LIMIT_RE = re.compile(r"(.*?)\s+LIMIT\s+(\S+)\s*(.*)", _FLAGS)
GROUP_BY_RE = re.compile(r".*\s+GROUP\s+BY\s+.*", _FLAGS)
DISTINCT_RE = re.compile(r"^\s*SELECT\s+DISTINCT\s", _FLAGS)
UNION_RE = re.compile(r"\s+UNION\s+", _FLAGS)
PROJECTION_RE = re.compile(r"^\s*SELECT\s+(.*?)\s+FROM\s", _FLAGS)
AGGREGATE_RE = re.compile(r"\b(?:COUNT|SUM|AVG|MIN|MAX)\s*\(", _FLAGS)
SELECT_FROM_ORDER_RE = re.compile(r"^\s*SELECT\s+.*?\s+FROM\s+(.*)\s+ORDER\s+BY\s+.*$", _FLAGS)
SELECT_FROM_RE = re.compile(r"^\s*SELECT\s+.*?\s+FROM\s+(.*)$", _FLAGS)
NAMED_PARAM_RE = re.compile(r"@([^\s,)]*)")


@dataclass(frozen=True)
class SQLDialect:
    engine: str
    placeholder: str


def get_sql_dialect(db_engine: str) -> SQLDialect:
    engine = (db_engine or "sqlite").strip().lower()
    if engine in {"postgres", "postgresql"}:
        return SQLDialect(engine="postgres", placeholder="%s")
    if engine == "sqlite":
        return SQLDialect(engine="sqlite", placeholder="?")
    if engine == "mysql":
        return SQLDialect(engine="mysql", placeholder="%s")
    return SQLDialect(engine=engine, placeholder="?")


def _strip_terminator(sql: str) -> str:
    return sql.rstrip().rstrip(";").rstrip()


def has_limit(sql: str) -> bool:
    return LIMIT_RE.match(sql) is not None


def limit_one(sql: str) -> str:
    """Rewrite ``sql`` so that fetching its first row is the whole result.

    An existing ``LIMIT`` clause is cut off together with everything after it
    (``OFFSET``, ``FOR UPDATE``); otherwise ``LIMIT 1`` is appended.
    """
    statement = _strip_terminator(sql)
    match = LIMIT_RE.match(statement)
    if match:
        return match.group(1)
    return f"{statement} LIMIT 1"


def _wrap_count(statement: str) -> str:
    return f"SELECT COUNT(1) FROM ({statement}) AS tmp"


def _aggregate_projection(statement: str) -> bool:
    match = PROJECTION_RE.match(statement)
    return match is not None and AGGREGATE_RE.search(match.group(1)) is not None


def count_sql(sql: str) -> str:
    """Turn a SELECT into a query returning its row count.

    The rules are tried in order and the first hit wins:

    1. ``LIMIT``, ``GROUP BY``, ``SELECT DISTINCT``, ``UNION`` or an aggregate
       in the projection: the whole statement becomes a subquery.
    2. ``SELECT ... FROM <rest> ORDER BY ...``: projection and ordering are
       replaced, ``SELECT COUNT(1) FROM <rest>``.
    3. ``SELECT ... FROM <rest>``: projection is replaced.
    4. Anything else (CTEs, ``SELECT`` without ``FROM``) is wrapped as in 1.
    """
    statement = _strip_terminator(sql)
    if (
        has_limit(statement)
        or GROUP_BY_RE.match(statement)
        or DISTINCT_RE.match(statement)
        or UNION_RE.search(statement)
        or _aggregate_projection(statement)
    ):
        return _wrap_count(statement)

    match = SELECT_FROM_ORDER_RE.match(statement)
    if match:
        return f"SELECT COUNT(1) FROM {match.group(1)}"

    match = SELECT_FROM_RE.match(statement)
    if match:
        return f"SELECT COUNT(1) FROM {match.group(1)}"

    return _wrap_count(statement)


def bind_named(
    sql: str,
    args: Optional[Mapping[str, Any]],
    placeholder: str = "?",
) -> Tuple[str, List[Any]]:
    """Replace ``@name`` tokens with positional placeholders.

    Returns the rewritten SQL and the values in order of appearance. Either
    every token resolves or :class:`MissingParameterError` is raised and
    nothing is rewritten. SQL without tokens, or ``args=None``, comes back
    unchanged with no values. With a ``%`` placeholder, literal ``%`` in the
    rest of the text is doubled.
    """
    matches = list(NAMED_PARAM_RE.finditer(sql))
    if not matches or args is None:
        return sql, []

    values: List[Any] = []
    for match in matches:
        name = match.group(1)
        if name not in args:
            raise MissingParameterError(match.group(0))
        values.append(args[name])

    # pyformat clients run ``sql % params``, so literal percent signs are doubled.
    escape = "%" in placeholder
    pieces: List[str] = []
    pos = 0
    for match in matches:
        text = sql[pos:match.start()]
        pieces.append(text.replace("%", "%%") if escape else text)
        pieces.append(placeholder)
        pos = match.end()
    tail = sql[pos:]
    pieces.append(tail.replace("%", "%%") if escape else tail)
    return "".join(pieces), values
