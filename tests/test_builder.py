"""
Unit tests for the statement builder.
"""

import pytest

from db_handle.exceptions import (
    EmptyDataError,
    InvalidIdentifierError,
    MissingConditionsError,
    StatementError,
)
from db_handle.sql.builder import (
    Statement,
    bind_positional,
    build_delete,
    build_insert,
    build_select,
    build_update,
    validate_identifier,
)


class TestBuildInsert:
    """Tests for INSERT construction."""

    def test_insert_example(self) -> None:
        statement = build_insert("users", {"name": "Ana", "email": "ana@x.com"})

        assert statement.sql == "INSERT INTO users (name, email) VALUES (?, ?)"
        assert statement.params == ["Ana", "ana@x.com"]

    @pytest.mark.parametrize(
        "data",
        [
            {"a": 1},
            {"b": None, "a": 2, "c": "x"},
            {"z": 1.5, "y": b"raw", "x": True, "w": 0},
        ],
    )
    def test_one_placeholder_per_column_in_order(self, data: dict) -> None:
        statement = build_insert("t", data)

        assert statement.sql.count("?") == len(data)
        assert statement.params == list(data.values())
        assert statement.sql.startswith(f"INSERT INTO t ({', '.join(data)})")

    def test_empty_data_rejected(self) -> None:
        with pytest.raises(EmptyDataError):
            build_insert("users", {})


class TestBuildSelect:
    """Tests for SELECT construction."""

    def test_select_example(self) -> None:
        statement = build_select("users", {"id": 5})

        assert statement == Statement(sql="SELECT * FROM users WHERE id = ?", params=[5])

    def test_no_conditions_selects_everything(self) -> None:
        assert build_select("users") == Statement(sql="SELECT * FROM users")
        assert build_select("users", {}) == Statement(sql="SELECT * FROM users")

    def test_conditions_are_a_conjunction(self) -> None:
        statement = build_select("users", {"name": "Ana", "age": 30})

        assert statement.sql == "SELECT * FROM users WHERE name = ? AND age = ?"
        assert statement.params == ["Ana", 30]


class TestBuildUpdate:
    """Tests for UPDATE construction."""

    def test_data_then_conditions_binding_order(self) -> None:
        statement = build_update("users", {"name": "Ana", "age": 31}, {"id": 1, "email": "ana@x.com"})

        assert statement.sql == "UPDATE users SET name = ?, age = ? WHERE id = ? AND email = ?"
        assert statement.params == ["Ana", 31, 1, "ana@x.com"]

    def test_empty_conditions_rejected(self) -> None:
        with pytest.raises(MissingConditionsError):
            build_update("users", {"name": "Ana"}, {})

    def test_empty_data_rejected(self) -> None:
        with pytest.raises(EmptyDataError):
            build_update("users", {}, {"id": 1})


class TestBuildDelete:
    """Tests for DELETE construction."""

    def test_delete(self) -> None:
        statement = build_delete("users", {"id": 3, "name": "Carla"})

        assert statement.sql == "DELETE FROM users WHERE id = ? AND name = ?"
        assert statement.params == [3, "Carla"]

    def test_empty_conditions_rejected(self) -> None:
        with pytest.raises(MissingConditionsError):
            build_delete("users", {})


class TestIdentifiers:
    """Tests for the identifier allow-list."""

    @pytest.mark.parametrize("name", ["users", "_tmp", "User2", "app.users"])
    def test_accepts_plain_names(self, name: str) -> None:
        assert validate_identifier(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "1users", "users; DROP TABLE users", "na me", "a.b.c", "name)", "`users`", "users--"],
    )
    def test_rejects_anything_else(self, name: str) -> None:
        with pytest.raises(InvalidIdentifierError) as exc_info:
            validate_identifier(name)
        assert exc_info.value.identifier == name

    def test_column_names_are_checked(self) -> None:
        with pytest.raises(InvalidIdentifierError):
            build_insert("users", {"name) VALUES ('x'); --": "Ana"})

        with pytest.raises(InvalidIdentifierError):
            build_select("users", {"1=1 OR id": 1})

    def test_table_name_is_checked(self) -> None:
        with pytest.raises(InvalidIdentifierError):
            build_delete("users WHERE 1=1 --", {"id": 1})


class TestBindPositional:
    """Tests for placeholder normalization."""

    def test_question_marks_become_named_binds(self) -> None:
        sql, bound = bind_positional("SELECT * FROM users WHERE id = ? AND name = ?", [5, "Ana"])

        assert sql == "SELECT * FROM users WHERE id = :_p0 AND name = :_p1"
        assert bound == {"_p0": 5, "_p1": "Ana"}

    def test_question_marks_inside_literals_are_kept(self) -> None:
        sql, bound = bind_positional("SELECT '?' AS q, \"a?\" AS r WHERE x = ?", (1,))

        assert sql == "SELECT '?' AS q, \"a?\" AS r WHERE x = :_p0"
        assert bound == {"_p0": 1}

    def test_mapping_passes_through(self) -> None:
        sql, bound = bind_positional("SELECT * FROM users WHERE id = :id", {"id": 5})

        assert sql == "SELECT * FROM users WHERE id = :id"
        assert bound == {"id": 5}

    def test_no_params(self) -> None:
        assert bind_positional("SELECT 1", None) == ("SELECT 1", {})

    def test_count_mismatch(self) -> None:
        with pytest.raises(StatementError):
            bind_positional("SELECT * FROM users WHERE id = ?", [])

        with pytest.raises(StatementError):
            bind_positional("SELECT 1", [1])

    def test_string_is_not_a_parameter_list(self) -> None:
        with pytest.raises(StatementError):
            bind_positional("SELECT ?", "a")

    def test_colons_inside_literals_are_escaped(self) -> None:
        sql, bound = bind_positional("SELECT '{\"a\":1}' AS j FROM users WHERE id = ?", [1])

        assert sql == "SELECT '{\"a\\:1}' AS j FROM users WHERE id = :_p0"
        assert bound == {"_p0": 1}

    def test_colons_inside_literals_without_params(self) -> None:
        sql, bound = bind_positional("UPDATE users SET email = 'note :x' WHERE id = 1", None)

        assert sql == "UPDATE users SET email = 'note \\:x' WHERE id = 1"
        assert bound == {}

    def test_named_markers_outside_literals_are_kept(self) -> None:
        sql, bound = bind_positional("SELECT ':id' AS label FROM users WHERE id = :id", {"id": 5})

        assert sql == "SELECT '\\:id' AS label FROM users WHERE id = :id"
        assert bound == {"id": 5}
