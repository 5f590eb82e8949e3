"""
MySQL Dumper
============
Dump MySQL databases and tables to replayable SQL statements and source
such dumps back into a database, with support for:
- Explicit or all databases and tables
- Optional DROP TABLE and table structure
- WHERE filters on dumped rows
- Streaming, buffered output
- Merged INSERTs inside a single transaction when sourcing
"""

from .config import ConfigLoader
from .connection import DatabaseConnection, get_db_name_from_dsn, parse_dsn
from .database_dumper import DatabaseDumper
from .exceptions import (
    ConfigError,
    DumperConnectionError,
    DumperError,
    ExecutionError,
    MalformedStatementError,
    QueryError,
    ScanError,
    UnsupportedTypeError,
)
from .literals import LiteralEncoder, encode, quote_identifier, quote_string
from .main import main
from .merger import insert_target, merge_inserts
from .models import (
    ColumnInfo,
    DumpOptions,
    DumpStats,
    SourceOptions,
    SourceStats,
    TableStats,
    canonical_type,
)
from .source import StatementReader, StatementReplayer, source
from .table_dumper import TableDumper
from .utils import format_duration, setup_logging
from .writer import BufferedSink, StreamingRowWriter

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "ConfigLoader",
    "DatabaseConnection",
    "DatabaseDumper",
    "TableDumper",
    "LiteralEncoder",
    "BufferedSink",
    "StreamingRowWriter",
    "StatementReader",
    "StatementReplayer",
    # Functions
    "encode",
    "merge_inserts",
    "insert_target",
    "source",
    "parse_dsn",
    "get_db_name_from_dsn",
    "quote_identifier",
    "quote_string",
    "canonical_type",
    # Models
    "ColumnInfo",
    "DumpOptions",
    "DumpStats",
    "SourceOptions",
    "SourceStats",
    "TableStats",
    # Errors
    "DumperError",
    "ConfigError",
    "DumperConnectionError",
    "QueryError",
    "ScanError",
    "UnsupportedTypeError",
    "MalformedStatementError",
    "ExecutionError",
    # Utilities
    "format_duration",
    "setup_logging",
]
