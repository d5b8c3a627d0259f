"""
SQL - Statement construction for the CRUD helpers.
"""

from db_handle.sql.builder import (
    Statement,
    bind_positional,
    build_delete,
    build_insert,
    build_select,
    build_update,
    validate_identifier,
)

__all__ = [
    "Statement",
    "bind_positional",
    "build_delete",
    "build_insert",
    "build_select",
    "build_update",
    "validate_identifier",
]
