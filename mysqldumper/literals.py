"""
Rendering of column values as MySQL literal text.

Values come either as native Python objects (the default
mysql-connector conversion) or as raw ``bytes``/``bytearray`` from a raw
cursor; both render to the same literal.
"""

import json
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable, Iterable, Sequence

from .exceptions import QueryError, ScanError, UnsupportedTypeError
from .models import ColumnInfo, canonical_type

Encoder = Callable[[Any], str]

NULL = 'NULL'

INTEGER_TYPES = ('TINYINT', 'SMALLINT', 'MEDIUMINT', 'INT', 'INTEGER', 'BIGINT')
FLOAT_TYPES = ('FLOAT', 'DOUBLE', 'REAL')
DECIMAL_TYPES = ('DECIMAL', 'DEC', 'NUMERIC')
CHARACTER_TYPES = ('CHAR', 'VARCHAR', 'TINYTEXT', 'TEXT', 'MEDIUMTEXT', 'LONGTEXT')
BINARY_TYPES = ('BIT', 'BINARY', 'VARBINARY', 'TINYBLOB', 'BLOB', 'MEDIUMBLOB', 'LONGBLOB')

_INTEGER_PATTERN = re.compile(r'[+-]?\d+')
_NUMBER_PATTERN = re.compile(r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


def quote_string(text: str) -> str:
    """Quote text as a string literal, doubling embedded single quotes."""
    return "'" + text.replace("'", "''") + "'"


def quote_identifier(name: str) -> str:
    """Quote an identifier with backticks, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    if isinstance(value, str):
        return value
    raise TypeError(type(value).__name__)


def _numeric_text(value: Any, pattern: re.Pattern) -> str:
    text = _as_text(value).strip()
    if not pattern.fullmatch(text):
        raise ValueError(text)
    return text


def encode_integer(value: Any) -> str:
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return str(int(value))
    return _numeric_text(value, _INTEGER_PATTERN)


def encode_float(value: Any) -> str:
    if isinstance(value, float):
        if value != value or value in (float('inf'), float('-inf')):
            raise ValueError(value)
        return repr(value)
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        return str(value)
    # Raw decimal text is kept as sent by the server to avoid precision drift
    return _numeric_text(value, _NUMBER_PATTERN)


def encode_decimal(value: Any) -> str:
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(value)
        return str(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return encode_float(value)
    return _numeric_text(value, _NUMBER_PATTERN)


def _format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _format_clock(hour: int, minute: int, second: int) -> str:
    return f"{hour:02d}:{minute:02d}:{second:02d}"


def encode_date(value: Any) -> str:
    if isinstance(value, date):
        return f"'{_format_date(value)}'"
    return quote_string(_as_text(value))


def encode_datetime(value: Any) -> str:
    if isinstance(value, datetime):
        clock = _format_clock(value.hour, value.minute, value.second)
        return f"'{_format_date(value)} {clock}'"
    if isinstance(value, date):
        return f"'{_format_date(value)} 00:00:00'"
    return quote_string(_as_text(value))


def encode_time(value: Any) -> str:
    if isinstance(value, timedelta):
        # TIME spans -838:59:59 to 838:59:59, so hours are not wrapped at 24
        sign = '-' if value < timedelta(0) else ''
        seconds = abs(value) // timedelta(seconds=1)
        minutes, second = divmod(seconds, 60)
        hour, minute = divmod(minutes, 60)
        return f"'{sign}{_format_clock(hour, minute, second)}'"
    if isinstance(value, time):
        return f"'{_format_clock(value.hour, value.minute, value.second)}'"
    return quote_string(_as_text(value))


def encode_year(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _numeric_text(value, _INTEGER_PATTERN)


def encode_string(value: Any) -> str:
    return quote_string(_as_text(value))


def encode_binary(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        # BIT columns arrive as integers from the connector
        if value < 0:
            raise ValueError(value)
        value = value.to_bytes(max(1, (value.bit_length() + 7) // 8), 'big')
    elif isinstance(value, str):
        value = value.encode('utf-8')
    elif not isinstance(value, (bytes, bytearray)):
        raise TypeError(type(value).__name__)
    if not value:
        return "X''"
    return '0x' + bytes(value).hex().upper()


def encode_enum(value: Any) -> str:
    if isinstance(value, (set, frozenset)):
        return quote_string(','.join(sorted(_as_text(v) for v in value)))
    return quote_string(_as_text(value))


def encode_bool(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, str)):
        value = int(_numeric_text(value, _INTEGER_PATTERN))
    if not isinstance(value, (bool, int)):
        raise TypeError(type(value).__name__)
    return 'true' if value else 'false'


def encode_json(value: Any) -> str:
    if isinstance(value, (str, bytes, bytearray)):
        return quote_string(_as_text(value))
    return quote_string(json.dumps(value, ensure_ascii=False))


DEFAULT_ENCODERS: tuple[tuple[Sequence[str], Encoder], ...] = (
    (INTEGER_TYPES, encode_integer),
    (FLOAT_TYPES, encode_float),
    (DECIMAL_TYPES, encode_decimal),
    (('DATE',), encode_date),
    (('DATETIME', 'TIMESTAMP'), encode_datetime),
    (('TIME',), encode_time),
    (('YEAR',), encode_year),
    (CHARACTER_TYPES, encode_string),
    (BINARY_TYPES, encode_binary),
    (('ENUM', 'SET'), encode_enum),
    (('BOOL', 'BOOLEAN'), encode_bool),
    (('JSON',), encode_json),
)


class LiteralEncoder:
    """Registry of literal encoders keyed by canonical column type."""

    def __init__(
        self,
        zero_primary_key: bool = False,
        encoders: Iterable[tuple[Sequence[str], Encoder]] = DEFAULT_ENCODERS
    ):
        self.zero_primary_key = zero_primary_key
        self._encoders: dict[str, Encoder] = {}
        for type_names, encoder in encoders:
            self.register(type_names, encoder)

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset(self._encoders)

    def register(self, type_names: Sequence[str], encoder: Encoder) -> None:
        """Register an encoder for one or more canonical type names."""
        if isinstance(type_names, str):
            type_names = (type_names,)
        for name in type_names:
            if not name or canonical_type(name) != name:
                raise ValueError(f"'{name}' is not a canonical type name")
            self._encoders[name] = encoder

    def encode(self, column_type: str, value: Any, column_name: str = "") -> str:
        """
        Render one value as literal text.

        Args:
            column_type: Declared or canonical column type.
            value: Value as returned by the driver, None for SQL NULL.
            column_name: Column name, used for zero_primary_key and errors.

        Raises:
            UnsupportedTypeError: No encoder exists for the type.
            ScanError: The value cannot be rendered as the type.
        """
        if value is None:
            return NULL

        type_name = canonical_type(column_type)
        encoder = self._encoders.get(type_name)
        if encoder is None:
            raise UnsupportedTypeError(type_name)

        if self.zero_primary_key and column_name == 'id' and type_name in INTEGER_TYPES:
            return '0'

        try:
            return encoder(value)
        except (TypeError, ValueError, UnicodeDecodeError, OverflowError) as e:
            raise ScanError(column_name, type_name, value) from e

    def encode_row(self, columns: Sequence[ColumnInfo], row: Sequence[Any]) -> list[str]:
        """Render every value of a row, in column order."""
        if len(columns) != len(row):
            raise QueryError(
                f"Row has {len(row)} values but the table has {len(columns)} columns"
            )
        return [
            self.encode(column.type, value, column.name)
            for column, value in zip(columns, row)
        ]

    def render_insert(
        self,
        table: str,
        columns: Sequence[ColumnInfo],
        row: Sequence[Any]
    ) -> str:
        """Render a row as a single-row INSERT statement, newline-terminated."""
        values = ','.join(self.encode_row(columns, row))
        return f"INSERT INTO {quote_identifier(table)} VALUES ({values});\n"


_default_encoder = LiteralEncoder()
_zero_id_encoder = LiteralEncoder(zero_primary_key=True)


def encode(
    column_type: str,
    value: Any,
    zero_primary_key: bool = False,
    column_name: str = ""
) -> str:
    """Render one value with the default encoder registry."""
    encoder = _zero_id_encoder if zero_primary_key else _default_encoder
    return encoder.encode(column_type, value, column_name)
