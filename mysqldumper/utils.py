"""
Utility functions for MySQL Dumper.
"""

import logging
import sys
from pathlib import Path
from typing import Any


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration.

    Logs go to stderr so a dump written to stdout stays clean.
    """
    log_level = getattr(logging, str(log_settings.get('level', 'INFO')).upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def format_duration(seconds: float) -> str:
    """Format elapsed seconds as e.g. ``850ms``, ``12.5s`` or ``1h2m3.0s``."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h{minutes}m{secs:.1f}s"
    if minutes:
        return f"{minutes}m{secs:.1f}s"
    return f"{secs:.1f}s"


def log_observer(event: str, payload: dict[str, Any]) -> None:
    """Default dump observer: report progress through logging."""
    if event == 'dump_started':
        logging.info(f"[dump] start at {payload['started_at']:%Y-%m-%d %H:%M:%S}")
    elif event == 'table_dumped':
        table = payload['table']
        logging.info(f"  ✓ {table.database}.{table.table}: {table.rows_dumped} rows")
    elif event == 'dump_completed':
        stats = payload['stats']
        logging.info(
            f"[dump] end, {stats.total_tables} table(s), {stats.total_rows} rows, "
            f"cost {format_duration(stats.elapsed)}"
        )
