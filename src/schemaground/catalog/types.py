"""Logical data types of columns and conversion of values to them.

Rows are stored as schema-less documents, so a value read back
from storage can be of any of the :data:`RowValue` kinds, regardless
of the type currently declared for its column.

When a column changes type, the stored values have to be converted to
the new type. :func:`convert_value` implements the conversion rules:

- ``INTEGER`` and ``BIGINT`` parse the value as a base 10 integer
  and require it to fit in 32 or 64 bits.
- ``DECIMAL`` parses the value as an arbitrary precision decimal.
- ``BOOLEAN`` accepts the ``true`` and ``false`` literals, in any case.
- ``TIMESTAMP`` parses the value with a fixed textual format,
  by default ``YYYY-MM-DD HH:MM:SS`` with optional fractional seconds.
- Any other type passes the value through unchanged.

Conversion never raises, it returns a :class:`Converted` result
on success or a :class:`ConversionFailed` result describing why the
value could not be converted, the caller decides what to do in that case::

    >>> convert_value("42", DataType.INTEGER)
    Converted(value=42)
    >>> convert_value("abc", DataType.INTEGER)
    ConversionFailed(value='abc', reason="'abc' is not a base 10 integer")
"""

import datetime
import enum
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

RowValue = str | int | float | Decimal | bool | datetime.date | datetime.datetime | None
"""Any value that can be stored in a row document."""

_INTEGER_RE = re.compile(r"[+-]?\d+")
_INTEGER_RANGES = {
    "INTEGER": (-(2**31), 2**31 - 1),
    "BIGINT": (-(2**63), 2**63 - 1),
}


class DataType(enum.Enum):
    """Logical types a column can be declared with."""

    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    VARCHAR = "VARCHAR"
    CHAR = "CHAR"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"
    BOOLEAN = "BOOLEAN"
    DECIMAL = "DECIMAL"

    @classmethod
    def from_name(cls, name: str) -> "DataType":
        """Resolve a type name as written in DDL, ``INT`` is an alias of ``INTEGER``."""
        name = name.upper()
        if name == "INT":
            return cls.INTEGER
        return cls(name)

    @property
    def accepts_length(self) -> bool:
        return self in (DataType.VARCHAR, DataType.CHAR)

    @property
    def accepts_precision(self) -> bool:
        return self is DataType.DECIMAL

    @property
    def is_textual(self) -> bool:
        """Types whose DDL default values are written quoted."""
        return self in (
            DataType.VARCHAR,
            DataType.CHAR,
            DataType.DATE,
            DataType.TIMESTAMP,
        )


@dataclass(frozen=True)
class Converted:
    """Successful conversion, carries the converted value."""

    value: RowValue


@dataclass(frozen=True)
class ConversionFailed:
    """The value couldn't be converted to the requested type."""

    value: RowValue
    reason: str


ConversionResult = Converted | ConversionFailed


def convert_value(
    value: RowValue,
    data_type: DataType,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
) -> ConversionResult:
    """Convert a stored value to the given type.

    ``None`` is always converted to ``None``, as there is
    nothing to convert.

    :param value: The value to convert.
    :param data_type: The type the value should be converted to.
    :param timestamp_format: The ``strptime`` format used for ``TIMESTAMP``.
    """
    if value is None:
        return Converted(None)

    if data_type in (DataType.INTEGER, DataType.BIGINT):
        return _convert_integer(value, data_type)
    elif data_type is DataType.DECIMAL:
        return _convert_decimal(value)
    elif data_type is DataType.BOOLEAN:
        return _convert_boolean(value)
    elif data_type is DataType.TIMESTAMP:
        return _convert_timestamp(value, timestamp_format)
    else:
        return Converted(value)


def _convert_integer(value: RowValue, data_type: DataType) -> ConversionResult:
    if isinstance(value, bool):
        return ConversionFailed(value, f"{value!r} is a boolean")
    text = str(value)
    if not _INTEGER_RE.fullmatch(text):
        return ConversionFailed(value, f"{text!r} is not a base 10 integer")
    number = int(text)
    lower, upper = _INTEGER_RANGES[data_type.value]
    if not lower <= number <= upper:
        return ConversionFailed(value, f"{number} is out of range for {data_type.value}")
    return Converted(number)


def _convert_decimal(value: RowValue) -> ConversionResult:
    if isinstance(value, bool):
        return ConversionFailed(value, f"{value!r} is a boolean")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return ConversionFailed(value, f"{value!r} is not a decimal number")
    if not number.is_finite():
        return ConversionFailed(value, f"{value!r} is not a finite number")
    return Converted(number)


def _convert_boolean(value: RowValue) -> ConversionResult:
    if isinstance(value, bool):
        return Converted(value)
    text = str(value).lower()
    if text == "true":
        return Converted(True)
    elif text == "false":
        return Converted(False)
    return ConversionFailed(value, f"{value!r} is not a boolean literal")


def _convert_timestamp(value: RowValue, timestamp_format: str) -> ConversionResult:
    if isinstance(value, datetime.datetime):
        return Converted(value)
    text = str(value)
    for fmt in (timestamp_format, timestamp_format + ".%f"):
        try:
            return Converted(datetime.datetime.strptime(text, fmt))
        except ValueError:
            continue
    return ConversionFailed(value, f"{text!r} doesn't match {timestamp_format!r}")
