"""
Exception hierarchy for MySQL Dumper.

Every failure aborts the current dump or source run and reaches the caller
as one of these; nothing is retried.
"""

from typing import Optional


class DumperError(Exception):
    """Base class for all dumper errors."""


class ConfigError(DumperError):
    """Invalid or incomplete configuration."""


class DumperConnectionError(DumperError):
    """Opening a connection or switching database failed."""


class QueryError(DumperError):
    """A schema or row query failed."""

    def __init__(self, message: str, query: Optional[str] = None):
        super().__init__(message)
        self.query = query


class ScanError(DumperError):
    """A fetched value could not be decoded for its declared column type."""

    def __init__(self, column: str, column_type: str, value: object):
        super().__init__(
            f"cannot convert value {value!r} of column '{column}' "
            f"({type(value).__name__}) to {column_type}"
        )
        self.column = column
        self.column_type = column_type
        self.value = value


class UnsupportedTypeError(DumperError):
    """The literal encoder has no rendering for a column type."""

    def __init__(self, column_type: str):
        super().__init__(f"unsupported type: {column_type}")
        self.column_type = column_type


class MalformedStatementError(DumperError):
    """A statement handed to the insert merger cannot be merged."""

    def __init__(self, message: str, statement: Optional[str] = None):
        if statement is not None:
            message = f"{message}: {_excerpt(statement)}"
        super().__init__(message)
        self.statement = statement


class ExecutionError(DumperError):
    """A statement failed while sourcing a dump."""

    def __init__(self, statement: str, cause: Exception):
        super().__init__(f"{cause} [statement: {_excerpt(statement)}]")
        self.statement = statement
        self.cause = cause


def _excerpt(statement: str, limit: int = 200) -> str:
    """Shorten a statement for use inside an error message."""
    statement = statement.strip()
    if len(statement) <= limit:
        return statement
    return statement[:limit] + '...'
