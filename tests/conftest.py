"""
Pytest configuration and shared fixtures.

Integration tests run against a file-backed SQLite database. The handle
under test and the verification engine use separate connections, so every
assertion reads what was actually committed.
"""

from pathlib import Path
from typing import Iterator, Optional

import pytest
from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel, create_engine, select

from db_handle import Database, reset_instance


class UserDBModel(SQLModel, table=True):
    """Maps 1-to-1 with the 'users' table used by the CRUD tests."""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str
    age: Optional[int] = None


@pytest.fixture(autouse=True)
def _reset_shared_handle() -> Iterator[None]:
    """Make sure no test leaks the process-wide handle into the next one."""
    yield
    reset_instance()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a fresh SQLite database file."""
    return f"sqlite:///{tmp_path / 'app.db'}"


@pytest.fixture
def engine(sqlite_url: str) -> Iterator[Engine]:
    """Verification engine with the schema created."""
    eng = create_engine(sqlite_url, echo=False)
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def error_log(tmp_path: Path) -> Path:
    return tmp_path / "errors.log"


@pytest.fixture
def db(engine: Engine, sqlite_url: str, error_log: Path) -> Iterator[Database]:
    """A handle pointed at the test database (debug off)."""
    handle = Database.from_url(sqlite_url, error_log_path=error_log)
    yield handle
    handle.close()


@pytest.fixture
def seeded_db(db: Database, engine: Engine) -> Database:
    """Handle over a users table holding three rows."""
    with Session(engine) as session:
        session.add(UserDBModel(name="Ana", email="ana@x.com", age=30))
        session.add(UserDBModel(name="Bruno", email="bruno@x.com", age=25))
        session.add(UserDBModel(name="Carla", email="carla@x.com", age=30))
        session.commit()
    return db


@pytest.fixture
def fetch_users(engine: Engine):
    """Returns a callable listing all persisted users, ordered by id, as dicts."""

    def _fetch() -> list:
        with Session(engine) as session:
            users = session.exec(select(UserDBModel).order_by(UserDBModel.id)).all()
            return [user.model_dump() for user in users]

    return _fetch
