"""Engine and URL construction."""

from db_handle.infrastructure.database.connection import build_url, open_engine

__all__ = ["build_url", "open_engine"]
