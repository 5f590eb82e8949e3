"""
Unit tests for models.py
"""

import dataclasses

import pytest

from mysqldumper.exceptions import ConfigError
from mysqldumper.models import (
    ColumnInfo,
    DumpOptions,
    DumpStats,
    SourceOptions,
    SourceStats,
    TableStats,
    canonical_type,
)


class TestCanonicalType:
    """Tests for canonical_type function."""

    @pytest.mark.parametrize("declared, expected", [
        ("int(11)", "INT"),
        ("int(10) unsigned", "INT"),
        ("INT UNSIGNED", "INT"),
        ("bigint(20) unsigned zerofill", "BIGINT"),
        ("varchar(255)", "VARCHAR"),
        ("decimal(10,2)", "DECIMAL"),
        ("enum('a','b c')", "ENUM"),
        ("set('x','y')", "SET"),
        ("datetime(6)", "DATETIME"),
        ("longblob", "LONGBLOB"),
        ("DOUBLE", "DOUBLE"),
    ])
    def test_normalization(self, declared, expected):
        assert canonical_type(declared) == expected


class TestColumnInfo:
    """Tests for ColumnInfo dataclass."""

    def test_column_info_creation(self):
        col = ColumnInfo(
            name="id",
            type="int(11)",
            nullable="NO",
            key="PRI",
            default=None,
            extra="auto_increment"
        )
        assert col.name == "id"
        assert col.type == "int(11)"
        assert col.nullable == "NO"
        assert col.key == "PRI"
        assert col.default is None
        assert col.extra == "auto_increment"
        assert col.canonical_type == "INT"

    def test_column_info_defaults(self):
        col = ColumnInfo("name", "varchar(20)")
        assert col.nullable == "YES"
        assert col.key == ""
        assert col.extra == ""

    def test_column_info_is_immutable(self):
        col = ColumnInfo("name", "varchar(20)")
        with pytest.raises(dataclasses.FrozenInstanceError):
            col.name = "other"


class TestDumpOptions:
    """Tests for DumpOptions dataclass."""

    def test_defaults(self):
        options = DumpOptions()
        assert options.databases == ()
        assert options.all_databases is False
        assert options.tables == ()
        assert options.all_tables is False
        assert options.data is True
        assert options.drop_table is False
        assert options.table_structure is True
        assert options.where == ""
        assert options.output is None
        assert options.zero_primary_key is False

    def test_lists_become_tuples(self):
        options = DumpOptions(databases=["a", "b"], tables=["t"])
        assert options.databases == ("a", "b")
        assert options.tables == ("t",)

    def test_single_string_becomes_tuple(self):
        options = DumpOptions(tables="users")
        assert options.tables == ("users",)

    def test_dump_all_tables_when_none_listed(self):
        assert DumpOptions().dump_all_tables is True

    def test_explicit_tables(self):
        assert DumpOptions(tables=["users"]).dump_all_tables is False

    def test_all_tables_wins(self):
        assert DumpOptions(tables=["users"], all_tables=True).dump_all_tables is True

    def test_invalid_boolean(self):
        with pytest.raises(ConfigError, match="drop_table"):
            DumpOptions(drop_table="yes")

    def test_blank_table_name(self):
        with pytest.raises(ConfigError):
            DumpOptions(tables=["users", " "])

    def test_none_where_is_empty(self):
        assert DumpOptions(where=None).where == ""

    def test_immutable(self):
        options = DumpOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.data = False

    def test_from_configs_priority(self):
        """Later configs override earlier ones; None values are ignored."""
        options = DumpOptions.from_configs(
            {"tables": ["users"], "drop_table": True, "where": "id > 1"},
            {"tables": ["orders"], "drop_table": None}
        )
        assert options.tables == ("orders",)
        assert options.drop_table is True
        assert options.where == "id > 1"

    def test_from_configs_unknown_key(self):
        with pytest.raises(ConfigError, match="row_limit"):
            DumpOptions.from_configs({"row_limit": 10})


class TestSourceOptions:
    """Tests for SourceOptions dataclass."""

    def test_defaults(self):
        options = SourceOptions()
        assert options.dry_run is False
        assert options.merge_insert == 1
        assert options.debug is False

    @pytest.mark.parametrize("value", [0, -5, "10", True, 2.5])
    def test_invalid_merge_insert(self, value):
        with pytest.raises(ConfigError):
            SourceOptions(merge_insert=value)

    def test_from_configs(self):
        options = SourceOptions.from_configs({"merge_insert": 100}, {"dry_run": True})
        assert options.merge_insert == 100
        assert options.dry_run is True


class TestStats:
    """Tests for statistics dataclasses."""

    def test_table_stats_defaults(self):
        stats = TableStats(database="shop", table="users")
        assert stats.rows_dumped == 0

    def test_dump_stats_totals(self):
        stats = DumpStats()
        stats.tables.append(TableStats("shop", "users", rows_dumped=10))
        stats.tables.append(TableStats("shop", "orders", rows_dumped=5))
        assert stats.total_tables == 2
        assert stats.total_rows == 15

    def test_dump_stats_independent_lists(self):
        a = DumpStats()
        b = DumpStats()
        a.databases.append("shop")
        assert b.databases == []

    def test_source_stats_defaults(self):
        stats = SourceStats()
        assert stats.statements_read == 0
        assert stats.statements_executed == 0
        assert stats.inserts_merged == 0
