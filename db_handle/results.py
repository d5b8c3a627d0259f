"""
Results - Outcome Types for Handle Operations

Every public operation on the handle returns one of these instead of raising.
They keep the old "empty list / False on failure" shape for callers that only
test truthiness or iterate, while the `status` and `error` fields let newer
callers tell "no rows" apart from "the query failed".
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Optional

from .exceptions import DatabaseError

Row = Dict[str, Any]


class ResultStatus(Enum):
    OK = auto()  # Statement ran (and, for queries, returned rows)
    EMPTY = auto()  # Query ran but matched nothing
    ERROR = auto()  # Statement was not run or failed; see `error`


@dataclass
class QueryResult:
    """
    Rows returned by a read, as column-keyed maps in result order.
    Behaves like a read-only list of those rows.
    """

    status: ResultStatus
    rows: List[Row] = field(default_factory=list)
    error: Optional[DatabaseError] = None

    @classmethod
    def from_rows(cls, rows: List[Row]) -> "QueryResult":
        return cls(status=ResultStatus.OK if rows else ResultStatus.EMPTY, rows=rows)

    @classmethod
    def failed(cls, error: DatabaseError) -> "QueryResult":
        return cls(status=ResultStatus.ERROR, error=error)

    @property
    def ok(self) -> bool:
        """True when the query ran, whether or not it matched rows."""
        return self.status is not ResultStatus.ERROR

    def first(self) -> Optional[Row]:
        return self.rows[0] if self.rows else None

    def raise_for_error(self) -> "QueryResult":
        if self.error is not None:
            raise self.error
        return self

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index):
        return self.rows[index]

    def __bool__(self) -> bool:
        return bool(self.rows)

    def __eq__(self, other: object) -> bool:
        # Lets `db.read(...) == []` keep working for list-shaped callers
        if isinstance(other, list):
            return self.rows == other
        if isinstance(other, QueryResult):
            return (self.status, self.rows, self.error) == (other.status, other.rows, other.error)
        return NotImplemented


@dataclass
class ExecuteResult:
    """
    Outcome of a mutating statement. Truthy on success.
    """

    status: ResultStatus
    rowcount: int = 0
    lastrowid: Optional[Any] = None
    error: Optional[DatabaseError] = None

    @classmethod
    def succeeded(cls, rowcount: int = 0, lastrowid: Optional[Any] = None) -> "ExecuteResult":
        return cls(status=ResultStatus.OK, rowcount=rowcount, lastrowid=lastrowid)

    @classmethod
    def failed(cls, error: DatabaseError) -> "ExecuteResult":
        return cls(status=ResultStatus.ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    def raise_for_error(self) -> "ExecuteResult":
        if self.error is not None:
            raise self.error
        return self

    def __bool__(self) -> bool:
        return self.ok
