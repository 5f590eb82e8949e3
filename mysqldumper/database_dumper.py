"""
Main database dumping orchestration for MySQL Dumper.
"""

import logging
import sys
import time
from contextlib import ExitStack
from datetime import datetime
from typing import Any, Callable, Optional, TextIO

from .connection import DatabaseConnection, get_db_name_from_dsn
from .exceptions import ConfigError
from .literals import LiteralEncoder, quote_identifier
from .models import DumpOptions, DumpStats
from .table_dumper import SECTION_RULE, TableDumper
from .utils import format_duration, log_observer
from .writer import BufferedSink

TIME_FORMAT = '%Y-%m-%d %H:%M:%S'

Observer = Callable[[str, dict[str, Any]], None]


class DatabaseDumper:
    """Main class for database dumping operations."""

    def __init__(
        self,
        connection: DatabaseConnection,
        options: DumpOptions,
        dsn: Optional[str] = None,
        writer: Optional[TextIO] = None,
        observer: Optional[Observer] = log_observer
    ):
        self.connection = connection
        self.options = options
        self.dsn = dsn
        self.writer = writer
        self.observer = observer
        self.encoder = LiteralEncoder(zero_primary_key=options.zero_primary_key)
        self.stats = DumpStats()

    def _notify(self, event: str, **payload: Any) -> None:
        if self.observer is not None:
            self.observer(event, payload)

    def run(self) -> DumpStats:
        """Run the dump for every selected database.

        Output already written is left in place when an error aborts the dump.
        """
        start = time.monotonic()
        started_at = datetime.now()
        self._notify('dump_started', started_at=started_at)

        with ExitStack() as stack:
            destination = self.writer
            if destination is None:
                destination = self._open_output(stack)
            sink = stack.enter_context(BufferedSink(destination))

            self._write_header(sink, started_at)

            dumper = TableDumper(self.connection, self.options, self.encoder)
            for database in self._get_databases():
                self._dump_database(dumper, database, sink)

            self.stats.elapsed = time.monotonic() - start
            self._write_footer(sink, self.stats.elapsed)

        self._notify('dump_completed', stats=self.stats)
        return self.stats

    def _open_output(self, stack: ExitStack) -> TextIO:
        """Open the configured output file, or fall back to stdout."""
        if not self.options.output or self.options.output == '-':
            return sys.stdout
        return stack.enter_context(open(self.options.output, 'w', encoding='utf-8'))

    def _get_databases(self) -> list[str]:
        """Resolve the databases to dump; all_databases wins over an explicit list."""
        if self.options.all_databases:
            return self.connection.get_databases()
        if self.options.databases:
            return list(self.options.databases)
        if self.dsn:
            return [get_db_name_from_dsn(self.dsn)]
        if self.connection.database:
            return [self.connection.database]
        raise ConfigError("No database selected for dump")

    def _get_tables(self) -> list[str]:
        """Resolve the tables to dump; all_tables wins over an explicit list."""
        if self.options.dump_all_tables:
            return self.connection.get_tables()
        return list(self.options.tables)

    def _dump_database(self, dumper: TableDumper, database: str, sink: BufferedSink) -> None:
        """Dump every selected table of one database."""
        self.connection.use_database(database)
        tables = self._get_tables()
        logging.info(f"Dumping {len(tables)} table(s) from '{database}'")

        sink.write(f"USE {quote_identifier(database)};\n")
        self.stats.databases.append(database)

        for table in tables:
            table_stats = dumper.dump_table(database, table, sink)
            self.stats.tables.append(table_stats)
            self._notify('table_dumped', table=table_stats)

    def _write_header(self, sink: BufferedSink, started_at: datetime) -> None:
        sink.write(SECTION_RULE)
        sink.write("-- MySQL Database Dump\n")
        sink.write(f"-- Start Time: {started_at.strftime(TIME_FORMAT)}\n")
        sink.write(SECTION_RULE)
        sink.write("\n\n")

    def _write_footer(self, sink: BufferedSink, elapsed: float) -> None:
        sink.write(SECTION_RULE)
        sink.write("-- Dump completed\n")
        sink.write(f"-- Cost Time: {format_duration(elapsed)}\n")
        sink.write(SECTION_RULE)
