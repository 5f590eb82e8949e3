"""
Table dumping functionality for MySQL Dumper.
"""

import logging
from typing import Optional

from mysql.connector import Error as MySQLError

from .connection import DatabaseConnection
from .exceptions import QueryError
from .literals import LiteralEncoder, quote_identifier
from .models import ColumnInfo, DumpOptions, TableStats
from .writer import BufferedSink, StreamingRowWriter

SECTION_RULE = "-- ----------------------------\n"


class TableDumper:
    """Handles dumping of individual tables."""

    def __init__(
        self,
        connection: DatabaseConnection,
        options: DumpOptions,
        encoder: Optional[LiteralEncoder] = None
    ):
        self.connection = connection
        self.options = options
        self.encoder = encoder or LiteralEncoder(zero_primary_key=options.zero_primary_key)

    def dump_table(self, database: str, table: str, sink: BufferedSink) -> TableStats:
        """
        Dump one table to the sink.

        Writes the DROP TABLE statement, the table structure and the table
        records, each according to the dump options.

        Args:
            database: Name of the database the table belongs to.
            table: Name of the table to dump.
            sink: Buffered output shared by the whole dump.

        Returns:
            TableStats with dump statistics.
        """
        stats = TableStats(database=database, table=table)

        if self.options.drop_table:
            sink.write(f"DROP TABLE IF EXISTS {quote_identifier(table)};\n")

        if self.options.table_structure:
            self._write_table_structure(table, sink)

        if self.options.data:
            stats.rows_dumped = self._write_table_data(table, sink)

        return stats

    def _create_table_statement(self, table: str) -> str:
        """Get the CREATE TABLE statement rewritten to be idempotent."""
        statement = self.connection.get_create_table(table)
        return statement.replace("CREATE TABLE", "CREATE TABLE IF NOT EXISTS", 1)

    def _write_table_structure(self, table: str, sink: BufferedSink) -> None:
        sink.write(SECTION_RULE)
        sink.write(f"-- Table structure for {table}\n")
        sink.write(SECTION_RULE)
        sink.write(self._create_table_statement(table))
        sink.write(";\n\n")

    def _build_select_query(self, table: str, columns: list[ColumnInfo]) -> str:
        """Build SELECT query with the optional row filter."""
        quoted_columns = ', '.join(quote_identifier(col.name) for col in columns)
        query = f"SELECT {quoted_columns} FROM {quote_identifier(table)}"

        if self.options.where.strip():
            query += f" WHERE {self.options.where}"

        return query

    def _write_table_data(self, table: str, sink: BufferedSink) -> int:
        """Write table rows as INSERT statements through a streaming writer."""
        sink.write(SECTION_RULE)
        sink.write(f"-- Records of {table}\n")
        sink.write(SECTION_RULE)

        columns = self.connection.get_table_columns(table)
        query = self._build_select_query(table, columns)
        logging.debug(f"Dumping table '{table}' with query: {query[:200]}")

        rows_dumped = 0
        cursor = self.connection.get_cursor()
        try:
            try:
                cursor.execute(query)
            except MySQLError as e:
                raise QueryError(f"Query failed for table '{table}': {e}", query) from e

            try:
                with StreamingRowWriter(sink, name=f"row-writer-{table}") as writer:
                    for row in cursor:
                        # Encoded in full before sending, so a failing row leaves no partial text
                        writer.send(self.encoder.render_insert(table, columns, row))
                        rows_dumped += 1
            except MySQLError as e:
                raise QueryError(f"Fetching rows of '{table}' failed: {e}", query) from e
        except Exception:
            self._discard_cursor(cursor, table)
            raise

        try:
            cursor.close()
        except MySQLError as e:
            raise QueryError(f"Closing cursor for '{table}' failed: {e}", query) from e

        sink.write("\n\n")
        return rows_dumped

    def _discard_cursor(self, cursor, table: str) -> None:
        """Close a cursor after a failure without masking the failure."""
        try:
            cursor.close()
        except MySQLError as e:
            logging.debug(f"Ignoring cursor close failure for '{table}': {e}")
