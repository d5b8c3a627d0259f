"""
Database Connection Factory.

This module handles the low-level details of turning connection parameters
into a SQLAlchemy URL and an engine. The Database handle calls it lazily,
the first time a statement actually needs a connection.
"""

from typing import Optional, Union

from sqlalchemy.engine import URL, Engine, make_url
from sqlmodel import create_engine


def build_url(
    driver: str,
    host: str,
    db_name: str,
    user: str,
    password: str,
    port: Optional[int] = None,
) -> URL:
    """
    Builds the driver URL (the DSN) from discrete parameters.
    URL.create escapes credentials, so passwords may contain '@' or '/'.
    """
    return URL.create(
        drivername=driver,
        username=user,
        password=password,
        host=host,
        port=port,
        database=db_name,
    )


def open_engine(url: Union[str, URL]) -> Engine:
    # echo=False to avoid leaking bound values into logs
    return create_engine(make_url(url), echo=False)
