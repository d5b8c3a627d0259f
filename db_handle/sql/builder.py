"""
Statement Builder - CRUD to SQL Translation

Pure functions that turn (table, column map) pairs into parameterized SQL.
Nothing here touches a connection, so every statement can be inspected
before it is sent.

Conventions:
1. Column lists and predicates follow the iteration order of the maps.
2. Values are never interpolated; each one becomes a positional `?`.
3. Table and column names are interpolated, so they must pass the
   identifier allow-list first.
4. UPDATE and DELETE refuse to build without conditions.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..exceptions import (
    EmptyDataError,
    InvalidIdentifierError,
    MissingConditionsError,
    StatementError,
)

Params = Union[Sequence[Any], Mapping[str, Any], None]

# Plain identifier, optionally qualified once (schema.table)
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# Quoted literals are matched first so a '?' or ':' inside them is not taken as a marker
_POSITIONAL = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|`[^`]*`|\?")

POSITIONAL_PREFIX = "_p"


@dataclass(frozen=True)
class Statement:
    """SQL text with `?` placeholders and the values to bind, in order."""

    sql: str
    params: List[Any] = field(default_factory=list)


def validate_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidIdentifierError(name)
    return name


def _equality_terms(columns) -> List[str]:
    return [f"{validate_identifier(col)} = ?" for col in columns]


def build_insert(table: str, data: Mapping[str, Any]) -> Statement:
    validate_identifier(table)
    if not data:
        raise EmptyDataError(f"Nothing to insert into '{table}'.")

    columns = ", ".join(validate_identifier(col) for col in data)
    placeholders = ", ".join("?" for _ in data)
    return Statement(
        sql=f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        params=list(data.values()),
    )


def build_select(table: str, conditions: Optional[Mapping[str, Any]] = None) -> Statement:
    validate_identifier(table)
    sql = f"SELECT * FROM {table}"
    if not conditions:
        return Statement(sql=sql)

    sql += " WHERE " + " AND ".join(_equality_terms(conditions))
    return Statement(sql=sql, params=list(conditions.values()))


def build_update(
    table: str, data: Mapping[str, Any], conditions: Mapping[str, Any]
) -> Statement:
    validate_identifier(table)
    if not data:
        raise EmptyDataError(f"No columns to update in '{table}'.")
    if not conditions:
        # An unconditioned UPDATE would rewrite every row
        raise MissingConditionsError(f"Refusing to update '{table}' without conditions.")

    set_clause = ", ".join(_equality_terms(data))
    where_clause = " AND ".join(_equality_terms(conditions))
    return Statement(
        sql=f"UPDATE {table} SET {set_clause} WHERE {where_clause}",
        params=list(data.values()) + list(conditions.values()),
    )


def build_delete(table: str, conditions: Mapping[str, Any]) -> Statement:
    validate_identifier(table)
    if not conditions:
        raise MissingConditionsError(f"Refusing to delete from '{table}' without conditions.")

    where_clause = " AND ".join(_equality_terms(conditions))
    return Statement(
        sql=f"DELETE FROM {table} WHERE {where_clause}",
        params=list(conditions.values()),
    )


def bind_positional(sql: str, params: Params) -> Tuple[str, Dict[str, Any]]:
    """
    Normalizes caller parameters into the named form SQLAlchemy's text()
    understands.

    - Mapping: bound by name; the SQL is expected to use `:key` markers.
    - Sequence: each `?` outside a quoted literal is rewritten to `:_p0`,
      `:_p1`, ... and the values are keyed to match.

    Colons inside quoted literals are escaped as `\\:` in both cases, so text()
    does not read `'{"a":1}'` or `'note :x'` as bind parameters.

    Raises StatementError when the number of `?` markers and values differ.
    """
    if params is None:
        params = []

    named = isinstance(params, Mapping)
    if not named and isinstance(params, (str, bytes)):
        raise StatementError("Positional parameters must be a sequence, not a string.")

    markers = 0

    def _replace(match: "re.Match[str]") -> str:
        nonlocal markers
        token = match.group(0)
        if token != "?":
            return token.replace(":", "\\:")
        if named:
            return token
        name = f":{POSITIONAL_PREFIX}{markers}"
        markers += 1
        return name

    rewritten = _POSITIONAL.sub(_replace, sql)
    if named:
        return rewritten, dict(params)

    values = list(params)
    if markers != len(values):
        raise StatementError(
            f"Statement has {markers} positional placeholder(s) but {len(values)} value(s) were bound."
        )

    bound = {f"{POSITIONAL_PREFIX}{i}": value for i, value in enumerate(values)}
    return rewritten, bound
