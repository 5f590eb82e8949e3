"""
Data models for MySQL Dumper.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Optional

from .exceptions import ConfigError


_TYPE_ARGS_PATTERN = re.compile(r'\(.*\)')
_TYPE_MODIFIERS = ('UNSIGNED', 'ZEROFILL')


def canonical_type(declared_type: str) -> str:
    """
    Normalize a declared column type to the key used for literal rendering.

    ``int(10) unsigned`` -> ``INT``, ``enum('a','b')`` -> ``ENUM``.
    """
    name = _TYPE_ARGS_PATTERN.sub('', declared_type.upper())
    for modifier in _TYPE_MODIFIERS:
        name = name.replace(modifier, '')
    return ''.join(name.split())


@dataclass(frozen=True)
class ColumnInfo:
    """Database column metadata."""
    name: str
    type: str
    nullable: str = "YES"
    key: str = ""
    default: Any = None
    extra: str = ""

    @property
    def canonical_type(self) -> str:
        return canonical_type(self.type)


@dataclass(frozen=True)
class DumpOptions:
    """Every recognized dump option with its default."""
    databases: tuple[str, ...] = ()
    all_databases: bool = False
    tables: tuple[str, ...] = ()
    all_tables: bool = False
    data: bool = True
    drop_table: bool = False
    table_structure: bool = True
    where: str = ""
    output: Optional[str] = None
    zero_primary_key: bool = False

    def __post_init__(self):
        # Lists from YAML or argparse are frozen into tuples
        for name in ('databases', 'tables'):
            value = getattr(self, name)
            if isinstance(value, str):
                value = (value,)
            object.__setattr__(self, name, tuple(value or ()))
            for item in getattr(self, name):
                if not isinstance(item, str) or not item.strip():
                    raise ConfigError(f"Invalid entry in '{name}': {item!r}")
        for name in ('all_databases', 'all_tables', 'data', 'drop_table',
                     'table_structure', 'zero_primary_key'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"Option '{name}' must be a boolean")
        if self.where is None:
            object.__setattr__(self, 'where', "")
        if not isinstance(self.where, str):
            raise ConfigError("Option 'where' must be a string")

    @property
    def dump_all_tables(self) -> bool:
        """All tables are dumped when asked for, or when none are listed."""
        return self.all_tables or not self.tables

    @classmethod
    def from_configs(cls, *configs: dict[str, Any]) -> "DumpOptions":
        """
        Create DumpOptions by merging configs, later ones taking priority.

        Keys set to None are treated as absent so unset CLI flags do not
        override values from the configuration file.
        """
        return cls(**_merge_known(cls, configs))


@dataclass(frozen=True)
class SourceOptions:
    """Every recognized source option with its default."""
    dry_run: bool = False
    merge_insert: int = 1
    debug: bool = False

    def __post_init__(self):
        if not isinstance(self.merge_insert, int) or isinstance(self.merge_insert, bool):
            raise ConfigError("Option 'merge_insert' must be an integer")
        if self.merge_insert < 1:
            raise ConfigError(
                f"Option 'merge_insert' must be at least 1, got {self.merge_insert}"
            )
        for name in ('dry_run', 'debug'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"Option '{name}' must be a boolean")

    @classmethod
    def from_configs(cls, *configs: dict[str, Any]) -> "SourceOptions":
        """Create SourceOptions by merging configs, later ones taking priority."""
        return cls(**_merge_known(cls, configs))


def _merge_known(cls, configs: tuple[dict[str, Any], ...]) -> dict[str, Any]:
    known = {f.name for f in fields(cls)}
    settings = {}
    for config in configs:
        for key, value in (config or {}).items():
            if key not in known:
                raise ConfigError(f"Unknown option '{key}' for {cls.__name__}")
            if value is not None:
                settings[key] = value
    return settings


@dataclass
class TableStats:
    """Statistics for a single table dump."""
    database: str
    table: str
    rows_dumped: int = 0


@dataclass
class DumpStats:
    """Overall dump statistics."""
    databases: list[str] = field(default_factory=list)
    tables: list[TableStats] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def total_tables(self) -> int:
        return len(self.tables)

    @property
    def total_rows(self) -> int:
        return sum(t.rows_dumped for t in self.tables)


@dataclass
class SourceStats:
    """Statistics for a source run."""
    statements_read: int = 0
    statements_executed: int = 0
    inserts_merged: int = 0
    elapsed: float = 0.0
