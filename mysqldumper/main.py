#!/usr/bin/env python3
"""
MySQL Dumper - CLI Entry Point
==============================
Dump MySQL databases and tables to replayable SQL, and source such dumps
back into a database:
- Explicit or all databases and tables
- Optional DROP TABLE and table structure
- WHERE filter on dumped rows
- Merged INSERTs and dry runs when sourcing
"""

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import Optional

import yaml

from .config import ConfigLoader
from .database_dumper import DatabaseDumper
from .exceptions import DumperError
from .source import source
from .utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description='MySQL Dumper - dump databases to SQL and source them back'
    )
    parser.add_argument(
        '-c', '--config',
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dsn',
        help='Connection string, e.g. user:pass@tcp(localhost:3306)/db'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    dump = subparsers.add_parser('dump', help='Dump databases as SQL statements')
    dump.add_argument('-d', '--database', dest='databases', action='append',
                      help='Database to dump (repeatable)')
    dump.add_argument('--all-databases', action='store_true', default=None,
                      help='Dump every database on the server')
    dump.add_argument('-t', '--table', dest='tables', action='append',
                      help='Table to dump (repeatable)')
    dump.add_argument('--all-tables', action='store_true', default=None,
                      help='Dump every table of each database')
    dump.add_argument('--no-data', dest='data', action='store_false', default=None,
                      help='Do not dump table rows')
    dump.add_argument('--no-create', dest='table_structure', action='store_false', default=None,
                      help='Do not dump table structure')
    dump.add_argument('--drop-table', action='store_true', default=None,
                      help='Emit DROP TABLE IF EXISTS before each table')
    dump.add_argument('-w', '--where',
                      help='Row filter injected into the WHERE clause')
    dump.add_argument('-o', '--output',
                      help='Output file (default: stdout)')
    dump.add_argument('--zero-primary-key', action='store_true', default=None,
                      help="Write 0 for integer columns named 'id'")

    src = subparsers.add_parser('source', help='Execute a dump against a database')
    src.add_argument('input', nargs='?',
                     help="Dump file to load, '-' for stdin")
    src.add_argument('--dry-run', action='store_true', default=None,
                     help='Parse and log statements without executing them')
    src.add_argument('--merge-insert', type=int,
                     help='Merge up to N consecutive INSERTs into one (1 disables)')
    src.add_argument('--debug', action='store_true', default=None,
                     help='Log every statement before executing it')
    return parser


def run_dump(config: ConfigLoader, args: argparse.Namespace) -> None:
    """Run the dump sub-command."""
    options = config.get_dump_options({
        'databases': args.databases,
        'all_databases': args.all_databases,
        'tables': args.tables,
        'all_tables': args.all_tables,
        'data': args.data,
        'table_structure': args.table_structure,
        'drop_table': args.drop_table,
        'where': args.where,
        'output': args.output,
        'zero_primary_key': args.zero_primary_key,
    })
    dsn = config.get_dsn(args.dsn)

    with config.create_connection(dsn) as conn:
        DatabaseDumper(conn, options, dsn=dsn).run()


def run_source(config: ConfigLoader, args: argparse.Namespace) -> None:
    """Run the source sub-command."""
    options = config.get_source_options({
        'dry_run': args.dry_run,
        'merge_insert': args.merge_insert,
        'debug': args.debug,
    })
    input_path: Optional[str] = args.input or config.get_source_settings().get('input') or '-'

    with ExitStack() as stack:
        if input_path == '-':
            stream = sys.stdin
        else:
            stream = stack.enter_context(open(input_path, 'r', encoding='utf-8'))

        if options.dry_run:
            source(None, stream, options)
            return
        conn = stack.enter_context(config.create_connection(args.dsn))
        source(conn, stream, options, database=conn.database)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = ConfigLoader(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found", file=sys.stderr)
        return 1
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}", file=sys.stderr)
        return 1
    except DumperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Setup logging
    log_settings = dict(config.get_logging_settings())
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    try:
        if args.command == 'dump':
            run_dump(config, args)
        else:
            run_source(config, args)
    except DumperError as e:
        logging.error(f"Fatal error: {e}")
        return 1
    except OSError as e:
        logging.error(f"Fatal error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
