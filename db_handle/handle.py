"""
Handle - Single-Connection Database Access

The Database handle owns one lazily-opened connection and exposes:
1. Raw access: `query` (rows) and `execute` (mutations).
2. CRUD helpers: `insert`, `read`, `update`, `delete`, built from column maps.
3. A liveness probe: `is_connected`.

No operation raises. Failures are caught where they happen, logged once,
and returned inside a QueryResult / ExecuteResult whose truthiness matches
the classic contract (empty rows / False). Inspect `status` and `error`
to tell "nothing matched" apart from "it failed".

The preferred usage is an explicitly constructed handle passed to whoever
needs it. `get_instance()` keeps the process-wide shared handle for callers
that expect one; its parameters are fixed by the first call.
-----------------------------------------------

The connection is opened on first use and then reused as-is; it is not
re-validated before each statement. When the driver reports a disconnect,
SQLAlchemy invalidates the connection: the failing call returns an error
result and the next call transparently reconnects. Only `close()` ends a
handle for good.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, settings
from .diagnostics import ErrorLogFile
from .exceptions import (
    ConnectionFailedError,
    DatabaseError,
    HandleClosedError,
    StatementError,
)
from .infrastructure.database.connection import build_url, open_engine
from .results import ExecuteResult, QueryResult
from .sql.builder import (
    Params,
    Statement,
    bind_positional,
    build_delete,
    build_insert,
    build_select,
    build_update,
)

logger = logging.getLogger(__name__)


def _describe(error: Exception) -> str:
    # Statement errors render the SQL and bound values; keep only the underlying message
    if isinstance(error, sa_exc.StatementError):
        if error.orig is not None:
            return str(error.orig)
        return str(error.args[0]) if error.args else type(error).__name__
    return str(error)


class Database:
    def __init__(
        self,
        host: Optional[str] = None,
        db_name: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        port: Optional[int] = None,
        driver: Optional[str] = None,
        debug: Optional[bool] = None,
        error_log_path: Optional[Union[str, Path]] = None,
        url: Optional[Union[str, URL]] = None,
    ):
        if url is not None:
            self._url = make_url(url)
            self.host = self._url.host
            self.port = self._url.port
            self.db_name = self._url.database
            self.user = self._url.username
            self.password = self._url.password
            self.driver = self._url.drivername
        else:
            self.host = host if host is not None else settings.DB_HOST
            self.port = port if port is not None else settings.DB_PORT
            self.db_name = db_name if db_name is not None else settings.DB_NAME
            self.user = user if user is not None else settings.DB_USER
            self.password = password if password is not None else settings.DB_PASSWORD
            self.driver = driver or settings.DB_DRIVER
            self._url = build_url(
                self.driver, self.host, self.db_name, self.user, self.password, self.port
            )

        self.debug = settings.DB_DEBUG if debug is None else debug
        self._error_log = ErrorLogFile(error_log_path or settings.DB_ERROR_LOG)

        self._engine: Optional[Engine] = None
        self._conn: Optional[Connection] = None
        self._closed = False

    @classmethod
    def from_url(cls, url: Union[str, URL], **options) -> "Database":
        """Builds a handle from a full SQLAlchemy URL, e.g. 'sqlite://'."""
        return cls(url=url, **options)

    @classmethod
    def from_settings(cls, config: Settings, **options) -> "Database":
        options.setdefault("debug", config.DB_DEBUG)
        options.setdefault("error_log_path", config.DB_ERROR_LOG)
        return cls(
            config.DB_HOST,
            config.DB_NAME,
            config.DB_USER,
            config.DB_PASSWORD,
            port=config.DB_PORT,
            driver=config.DB_DRIVER,
            **options,
        )

    @property
    def url(self) -> URL:
        return self._url

    @property
    def error_log_path(self) -> Path:
        return self._error_log.path

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"Database({self._url.render_as_string(hide_password=True)!r})"

    # --- Connection ---

    def _connection(self) -> Connection:
        """
        Opens the connection on first call and caches it.
        Raises ConnectionFailedError / HandleClosedError; never called by users.
        """
        if self._closed:
            raise HandleClosedError("The database handle has been closed.")

        if self._conn is None:
            try:
                self._engine = open_engine(self._url)
                self._conn = self._engine.connect()
            except (SQLAlchemyError, ImportError) as e:
                message = f"Error connecting to the database: {_describe(e)}"
                self.log_error(message)
                if self._engine is not None:
                    self._engine.dispose()
                    self._engine = None
                raise ConnectionFailedError(message) from e

        return self._conn

    def _rollback(self) -> None:
        if self._conn is None or self._conn.closed:
            return
        try:
            self._conn.rollback()
        except SQLAlchemyError as e:
            self.log_error(f"Error rolling back: {_describe(e)}")

    def is_connected(self) -> bool:
        """Runs `SELECT 1`. True if a row comes back; False on any failure."""
        try:
            conn = self._connection()
            row = conn.execute(text("SELECT 1")).first()
            conn.commit()
            return row is not None
        except (DatabaseError, SQLAlchemyError) as e:
            self.log_error(f"Error checking the connection: {_describe(e)}")
            self._rollback()
            return False

    # --- Raw access ---

    def query(self, sql: str, params: Params = None) -> QueryResult:
        """
        Runs a row-returning statement.

        `params` is either a sequence bound to `?` markers in order, or a
        mapping bound to `:key` markers by name.
        """
        try:
            conn = self._connection()
            sql_text, bound = bind_positional(sql, params)
            result = conn.execute(text(sql_text), bound)
            rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
            # End the implicit transaction so later reads see fresh data
            conn.commit()
            return QueryResult.from_rows(rows)
        except DatabaseError as e:
            self.log_error(f"Error running query: {e}")
            return QueryResult.failed(e)
        except SQLAlchemyError as e:
            message = f"Error running query: {_describe(e)}"
            self.log_error(message)
            self._rollback()
            failure = StatementError(message)
            failure.__cause__ = e
            return QueryResult.failed(failure)

    def execute(self, sql: str, params: Params = None) -> ExecuteResult:
        """Runs a mutating statement and commits it."""
        try:
            conn = self._connection()
            sql_text, bound = bind_positional(sql, params)
            result = conn.execute(text(sql_text), bound)
            rowcount = result.rowcount
            lastrowid = getattr(result, "lastrowid", None)
            conn.commit()
            return ExecuteResult.succeeded(rowcount=rowcount, lastrowid=lastrowid)
        except DatabaseError as e:
            self.log_error(f"Error executing statement: {e}")
            return ExecuteResult.failed(e)
        except SQLAlchemyError as e:
            message = f"Error executing statement: {_describe(e)}"
            self.log_error(message)
            self._rollback()
            failure = StatementError(message)
            failure.__cause__ = e
            return ExecuteResult.failed(failure)

    # --- CRUD ---

    def _run(self, statement: Statement) -> ExecuteResult:
        logger.debug(f"Executing: {statement.sql}")
        return self.execute(statement.sql, statement.params)

    def insert(self, table: str, data: Mapping[str, Any]) -> ExecuteResult:
        try:
            statement = build_insert(table, data)
        except DatabaseError as e:
            self.log_error(f"Error building insert: {e}")
            return ExecuteResult.failed(e)
        return self._run(statement)

    def read(self, table: str, conditions: Optional[Mapping[str, Any]] = None) -> QueryResult:
        try:
            statement = build_select(table, conditions)
        except DatabaseError as e:
            self.log_error(f"Error building select: {e}")
            return QueryResult.failed(e)
        logger.debug(f"Querying: {statement.sql}")
        return self.query(statement.sql, statement.params)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
    ) -> ExecuteResult:
        """
        Updates rows matching every condition.
        Empty `conditions` is refused rather than rewriting the whole table.
        """
        try:
            statement = build_update(table, data, conditions)
        except DatabaseError as e:
            self.log_error(f"Error building update: {e}")
            return ExecuteResult.failed(e)
        return self._run(statement)

    def delete(self, table: str, conditions: Optional[Mapping[str, Any]] = None) -> ExecuteResult:
        """
        Deletes rows matching every condition.
        Empty `conditions` is refused rather than emptying the table.
        """
        try:
            statement = build_delete(table, conditions or {})
        except DatabaseError as e:
            self.log_error(f"Error building delete: {e}")
            return ExecuteResult.failed(e)
        return self._run(statement)

    # --- Diagnostics & lifecycle ---

    def log_error(self, message: str) -> None:
        """
        Reports a failure on the module logger and, when debug is on,
        appends it to the error log file.
        """
        logger.error(message)
        if self.debug:
            self._error_log.append(message)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._error_log.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# Shared handle (Singleton)
_instance: Optional[Database] = None


def get_instance(
    host: Optional[str] = None,
    db_name: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    **options,
) -> Database:
    """
    Returns the process-wide handle, building it on the first call.
    Omitted parameters fall back to `settings`, as for Database().

    Later calls return the same object and ignore their arguments. A warning
    is logged when an argument that was passed differs from the stored one.
    """
    global _instance
    if _instance is None:
        _instance = Database(host, db_name, user, password, **options)
        return _instance

    requested = {"host": host, "db_name": db_name, "user": user, "password": password}
    changed = [
        name
        for name, value in requested.items()
        if value is not None and value != getattr(_instance, name)
    ]
    if changed:
        logger.warning(
            f"get_instance() called with new {', '.join(changed)}; "
            "the existing handle is returned unchanged."
        )
    return _instance


def reset_instance() -> None:
    """Closes and forgets the shared handle."""
    global _instance
    if _instance is not None:
        _instance.close()
        _instance = None
