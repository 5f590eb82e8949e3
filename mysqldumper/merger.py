"""
Folding of single-row INSERT statements into multi-row INSERTs.

Input::

    INSERT INTO `test` VALUES (1,'a');
    INSERT INTO `test` VALUES (2,'b');

Output::

    INSERT INTO `test` VALUES (1,'a'),(2,'b');
"""

import re
from typing import Optional, Sequence

from .exceptions import MalformedStatementError

INSERT_PREFIX = 'INSERT INTO'
VALUES_KEYWORD = 'VALUES'

_TARGET_PATTERN = re.compile(r'INSERT INTO\s+((?:`(?:[^`]|``)+`|[^\s(`]+)(?:\.(?:`(?:[^`]|``)+`|[^\s(`]+))?)')
# Backtick-quoted identifiers are matched whole so a name containing VALUES is skipped
_VALUES_PATTERN = re.compile(r'`(?:[^`]|``)*`|\bVALUES\b')


def is_insert(statement: str) -> bool:
    return statement.startswith(INSERT_PREFIX)


def insert_target(statement: str) -> Optional[str]:
    """Return the table token of an INSERT INTO statement, or None."""
    match = _TARGET_PATTERN.match(statement)
    return match.group(1) if match else None


def values_end(statement: str) -> Optional[int]:
    """Return the index just past the VALUES keyword, or None when absent."""
    for match in _VALUES_PATTERN.finditer(statement):
        if match.group() == VALUES_KEYWORD:
            return match.end()
    return None


def merge_inserts(statements: Sequence[str]) -> str:
    """
    Merge INSERT statements for one table into a single statement.

    The merge is textual: the VALUES list of every statement after the first
    is appended to the first one.

    Raises:
        MalformedStatementError: Empty input, a statement without VALUES,
            or statements targeting different tables.
    """
    if not statements:
        raise MalformedStatementError("no input provided")

    first = statements[0].strip()
    if values_end(first) is None:
        raise MalformedStatementError("invalid SQL: missing VALUES keyword", first)
    target = insert_target(first)
    parts = [first.removesuffix(';').rstrip()]

    for statement in statements[1:]:
        values_index = values_end(statement)
        if values_index is None:
            raise MalformedStatementError("invalid SQL: missing VALUES keyword", statement)
        if insert_target(statement) != target:
            raise MalformedStatementError(
                f"cannot merge inserts into different tables, expected {target}",
                statement
            )
        values = statement[values_index:]
        parts.append(values.strip().removesuffix(';').strip())

    return ','.join(parts) + ';'
