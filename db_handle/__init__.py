"""
db_handle

A single-connection database access helper: parameterized `query` /
`execute`, CRUD helpers built from column maps, and explicit result types
that separate "no rows" from "failed".
"""

from db_handle.config import Settings, settings
from db_handle.exceptions import (
    ConnectionFailedError,
    DatabaseError,
    EmptyDataError,
    HandleClosedError,
    InvalidIdentifierError,
    MissingConditionsError,
    QueryBuildError,
    StatementError,
)
from db_handle.results import ExecuteResult, QueryResult, ResultStatus
from db_handle.handle import Database, get_instance, reset_instance

__all__ = [
    # Handle
    "Database",
    "get_instance",
    "reset_instance",
    # Results
    "ExecuteResult",
    "QueryResult",
    "ResultStatus",
    # Errors
    "ConnectionFailedError",
    "DatabaseError",
    "EmptyDataError",
    "HandleClosedError",
    "InvalidIdentifierError",
    "MissingConditionsError",
    "QueryBuildError",
    "StatementError",
    # Configuration
    "Settings",
    "settings",
]
