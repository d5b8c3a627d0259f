"""
Handle Exceptions

Failure causes produced by the Database handle. They are not raised out of
the public operations; each one is caught, logged and stored on the
returned result (see results.py). Call `result.raise_for_error()` to get
the exception back.
"""


class DatabaseError(Exception):
    """Base class for every failure reported by the handle."""
    pass


class ConnectionFailedError(DatabaseError):
    """Raised when the engine cannot be created or the connection cannot be opened."""
    pass


class StatementError(DatabaseError):
    """Raised when preparing, binding or executing a statement fails."""
    pass


class HandleClosedError(DatabaseError):
    """Raised when an operation is attempted on a closed handle."""
    pass


class QueryBuildError(DatabaseError):
    """Raised when a CRUD call cannot be translated into SQL."""
    pass


class InvalidIdentifierError(QueryBuildError):
    """Raised when a table or column name is not a plain SQL identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Invalid SQL identifier: {identifier!r}")


class EmptyDataError(QueryBuildError):
    """Raised when insert/update is called without any column values."""
    pass


class MissingConditionsError(QueryBuildError):
    """Raised when update/delete is called without a WHERE condition."""
    pass
