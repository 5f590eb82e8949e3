"""
Sourcing of SQL dumps back into a database.
"""

import codecs
import logging
import re
import time
from collections import deque
from typing import Iterator, Optional, TextIO

from mysql.connector import Error as MySQLError

from .connection import DatabaseConnection
from .exceptions import ExecutionError
from .merger import insert_target, is_insert, merge_inserts
from .models import SourceOptions, SourceStats
from .utils import format_duration

CHUNK_SIZE = 64 * 1024
_SPECIAL_CHARS = re.compile(r"[;'\"`]")
COMMENT_PREFIXES = ('--', '#')


class StatementReader:
    """Splits a text stream into ';'-terminated statements.

    Statements are yielded trimmed, including their terminating ';'. A ';'
    inside a quoted string or identifier does not end a statement; quotes
    are escaped by doubling them. Comment lines in front of a statement are
    skipped. A non-blank unterminated remainder at end of stream is yielded
    as the last statement.
    """

    def __init__(self, stream: TextIO, chunk_size: int = CHUNK_SIZE):
        self.stream = stream
        self.chunk_size = chunk_size
        self._buffer = ''
        self._eof = False
        self._decoder = codecs.getincrementaldecoder('utf-8')()
        self._pushed_back: deque[str] = deque()

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._pushed_back:
            return self._pushed_back.popleft()
        statement = self._read_statement()
        if statement is None:
            raise StopIteration
        return statement

    def push_back(self, statement: str) -> None:
        """Return a statement so the next read yields it again."""
        self._pushed_back.appendleft(statement)

    def _fill(self) -> bool:
        """Read another chunk into the buffer; False at end of stream."""
        if self._eof:
            return False
        chunk = self.stream.read(self.chunk_size)
        if not chunk:
            self._eof = True
            return False
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk
        return True

    def _skip_leading_comments(self) -> None:
        while True:
            stripped = self._buffer.lstrip()
            if not stripped:
                self._buffer = ''
                if not self._fill():
                    return
                continue
            if len(stripped) < 2 and not self._eof:
                # Too short to tell a comment from a statement yet
                self._buffer = stripped
                if not self._fill():
                    return
                continue
            if not stripped.startswith(COMMENT_PREFIXES):
                self._buffer = stripped
                return
            newline = stripped.find('\n')
            if newline == -1:
                self._buffer = stripped
                if not self._fill():
                    self._buffer = ''
                    return
                continue
            self._buffer = stripped[newline + 1:]

    def _read_statement(self) -> Optional[str]:
        self._skip_leading_comments()
        pos = 0
        quote = None
        while True:
            if pos >= len(self._buffer):
                if not self._fill():
                    break
                continue
            if quote is None:
                match = _SPECIAL_CHARS.search(self._buffer, pos)
                if match is None:
                    pos = len(self._buffer)
                    continue
                if match.group() == ';':
                    statement = self._buffer[:match.end()]
                    self._buffer = self._buffer[match.end():]
                    return statement.strip()
                quote = match.group()
                pos = match.end()
                continue

            end = self._buffer.find(quote, pos)
            if end == -1:
                pos = len(self._buffer)
                continue
            if end + 1 >= len(self._buffer) and self._fill():
                # Need the next character to tell a doubled quote from a closing one
                pos = end
                continue
            if end + 1 < len(self._buffer) and self._buffer[end + 1] == quote:
                pos = end + 2
                continue
            quote = None
            pos = end + 1

        remainder = self._buffer.strip()
        self._buffer = ''
        return remainder or None


class StatementReplayer:
    """Executes a statement stream against a connection inside one transaction."""

    def __init__(self, connection: Optional[DatabaseConnection], options: SourceOptions):
        self.connection = connection
        self.options = options
        self.stats = SourceStats()

    def execute(self, statement: str) -> None:
        """Execute one statement, honoring debug and dry-run modes."""
        if self.options.debug:
            logging.info(f"[debug] [query]\n{statement}")
        if self.options.dry_run:
            logging.debug(f"Dry run, skipping: {statement[:200]}")
            return
        try:
            self.connection.execute(statement)
        except MySQLError as e:
            raise ExecutionError(statement, e) from e

    def replay(self, stream: TextIO) -> SourceStats:
        """
        Execute every statement of the stream in a single transaction.

        Consecutive INSERTs for the same table are merged in batches of
        ``merge_insert`` statements when it is greater than one. On any
        failure the transaction is rolled back before the error is raised.
        """
        reader = StatementReader(stream)

        self.execute("SET autocommit=0;")
        try:
            for statement in reader:
                self.stats.statements_read += 1
                if self.options.merge_insert > 1 and is_insert(statement):
                    statement = self._merge_batch(statement, reader)
                self.execute(statement)
                self.stats.statements_executed += 1
            self.execute("COMMIT;")
        except Exception:
            self._rollback()
            raise
        self.execute("SET autocommit=1;")
        return self.stats

    def _merge_batch(self, first: str, reader: StatementReader) -> str:
        """Collect up to merge_insert INSERTs for the first statement's table."""
        target = insert_target(first)
        batch = [first]
        while len(batch) < self.options.merge_insert:
            statement = next(reader, None)
            if statement is None:
                break
            if not is_insert(statement) or insert_target(statement) != target:
                reader.push_back(statement)
                break
            self.stats.statements_read += 1
            batch.append(statement)
        if len(batch) == 1:
            return first
        self.stats.inserts_merged += len(batch)
        return merge_inserts(batch)

    def _rollback(self) -> None:
        for statement in ("ROLLBACK;", "SET autocommit=1;"):
            try:
                self.execute(statement)
            except ExecutionError as e:
                logging.error(f"Failed to restore session after error: {e}")


def source(
    connection: Optional[DatabaseConnection],
    stream: TextIO,
    options: SourceOptions,
    database: Optional[str] = None
) -> SourceStats:
    """Load a dump from a stream and execute it against the connection.

    The connection may be None for a dry run.
    """
    start = time.monotonic()
    logging.info(f"[source] start at {time.strftime('%Y-%m-%d %H:%M:%S')}")

    if options.dry_run:
        logging.info("DRY RUN MODE - No statements will be executed")

    replayer = StatementReplayer(connection, options)
    if database and not options.dry_run:
        connection.use_database(database)

    try:
        stats = replayer.replay(stream)
    finally:
        replayer.stats.elapsed = time.monotonic() - start
        logging.info(
            f"[source] end at {time.strftime('%Y-%m-%d %H:%M:%S')}, "
            f"cost {format_duration(replayer.stats.elapsed)}"
        )
    return stats
