"""
Unit tests for merger.py
"""

import pytest

from mysqldumper.exceptions import MalformedStatementError
from mysqldumper.merger import insert_target, is_insert, merge_inserts


class TestMergeInserts:
    """Tests for merge_inserts function."""

    def test_two_rows(self):
        merged = merge_inserts([
            "INSERT INTO `t` VALUES (1,'x');",
            "INSERT INTO `t` VALUES (2,'y');",
        ])
        assert merged == "INSERT INTO `t` VALUES (1,'x'),(2,'y');"

    def test_single_statement(self):
        assert merge_inserts(["INSERT INTO `t` VALUES (1);"]) == "INSERT INTO `t` VALUES (1);"

    def test_preserves_order(self):
        statements = [f"INSERT INTO `t` VALUES ({i},'v{i}');" for i in range(10)]
        merged = merge_inserts(statements)
        expected = ",".join(f"({i},'v{i}')" for i in range(10))
        assert merged == f"INSERT INTO `t` VALUES {expected};"

    def test_tolerates_spacing(self):
        merged = merge_inserts([
            "INSERT INTO `t` VALUES (1, 'a') ;",
            "INSERT INTO `t` VALUES  (2, 'b')  ;",
        ])
        assert merged == "INSERT INTO `t` VALUES (1, 'a'),(2, 'b');"

    def test_empty_input(self):
        with pytest.raises(MalformedStatementError, match="no input provided"):
            merge_inserts([])

    def test_missing_values(self):
        with pytest.raises(MalformedStatementError, match="missing VALUES"):
            merge_inserts([
                "INSERT INTO `t` VALUES (1);",
                "INSERT INTO `t` SET id = 2;",
            ])

    def test_first_statement_missing_values(self):
        with pytest.raises(MalformedStatementError, match="missing VALUES"):
            merge_inserts(["INSERT INTO `t` SET id = 1;", "INSERT INTO `t` VALUES (2);"])

    def test_values_keyword_is_case_sensitive(self):
        with pytest.raises(MalformedStatementError):
            merge_inserts([
                "INSERT INTO `t` VALUES (1);",
                "INSERT INTO `t` values (2);",
            ])

    def test_table_name_containing_values(self):
        merged = merge_inserts([
            "INSERT INTO `price_VALUES` VALUES (1);",
            "INSERT INTO `price_VALUES` VALUES (2);",
        ])
        assert merged == "INSERT INTO `price_VALUES` VALUES (1),(2);"

    def test_quoted_table_named_values(self):
        merged = merge_inserts([
            "INSERT INTO `VALUES` VALUES (1);",
            "INSERT INTO `VALUES` VALUES (2);",
        ])
        assert merged == "INSERT INTO `VALUES` VALUES (1),(2);"

    def test_column_list_containing_values(self):
        merged = merge_inserts([
            "INSERT INTO t (`VALUES`, old_VALUES) VALUES (1,2);",
            "INSERT INTO t (`VALUES`, old_VALUES) VALUES (3,4);",
        ])
        assert merged == "INSERT INTO t (`VALUES`, old_VALUES) VALUES (1,2),(3,4);"

    def test_values_only_in_table_name(self):
        with pytest.raises(MalformedStatementError, match="missing VALUES"):
            merge_inserts([
                "INSERT INTO `price_VALUES` VALUES (1);",
                "INSERT INTO `price_VALUES` SET id = 2;",
            ])

    def test_different_tables_rejected(self):
        with pytest.raises(MalformedStatementError, match="different tables") as exc_info:
            merge_inserts([
                "INSERT INTO `a` VALUES (1);",
                "INSERT INTO `b` VALUES (2);",
            ])
        assert exc_info.value.statement == "INSERT INTO `b` VALUES (2);"


class TestInsertTarget:
    """Tests for insert_target and is_insert."""

    @pytest.mark.parametrize("statement, expected", [
        ("INSERT INTO `users` VALUES (1);", "`users`"),
        ("INSERT INTO users VALUES (1);", "users"),
        ("INSERT INTO users(id) VALUES (1);", "users"),
        ("INSERT INTO `shop`.`users` VALUES (1);", "`shop`.`users`"),
        ("INSERT INTO `we``ird` VALUES (1);", "`we``ird`"),
        ("UPDATE users SET id = 1;", None),
    ])
    def test_insert_target(self, statement, expected):
        assert insert_target(statement) == expected

    def test_is_insert(self):
        assert is_insert("INSERT INTO `t` VALUES (1);")
        assert not is_insert("insert into `t` values (1);")
        assert not is_insert("DROP TABLE IF EXISTS `t`;")
