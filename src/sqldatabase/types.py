"""
Consolidated type handling for database operations.

This module provides:
- TypeConverter: Convert Python values to SQL-renderable values
- to_text: Render driver values in the server's text form
- Permissive parsers used by the Row accessors. They never raise on
  malformed text: integers and floats parse the longest valid prefix
  (C library rules, locale independent) and fall back to zero.
"""
import datetime
import json
import logging
import math
import re
from decimal import Decimal
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1
_UINT64_DIGITS = len(str(UINT64_MAX))

EPOCH = datetime.datetime(1970, 1, 1)
_EPOCH_ORDINAL = EPOCH.toordinal()

# C isspace() in the "C" locale
_WS = r'[ \t\n\v\f\r]*'

_INTEGER = re.compile(_WS + r'([+-]?)(0[xX][0-9a-fA-F]+|[0-9]+)')

_FLOAT = re.compile(_WS + r"""
    ([+-]?(?:
        (?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?
        |inf(?:inity)?
        |nan
    ))
""", re.IGNORECASE | re.VERBOSE)

_D = _WS + r'([+-]?[0-9]+)'
_TIMESTAMP = re.compile(_D + '-' + _D + '-' + _D + _WS + _D + ':' + _D + ':' + _D)


# Type Converter - Handles Python -> Database value conversion

def _convert_numpy_value(val: Any) -> float | int | datetime.datetime | None:
    """Convert NumPy value to Python type."""
    if isinstance(val, np.floating) and np.isnan(val):
        return None

    if isinstance(val, np.datetime64):
        if np.isnat(val):
            return None
        return val.astype('datetime64[us]').item()

    if isinstance(val, np.bool_):
        return bool(val)

    return val.item()


class TypeConverter:
    """Universal type conversion for values written into SQL text.

    Handles NumPy and Pandas scalars so that rows taken straight from a
    DataFrame can be fed to a batch insert.
    """

    @staticmethod
    def convert_value(value: Any) -> Any:
        """Convert a single value to a plain Python value, None meaning NULL."""
        if value is None:
            return None

        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None

        if value is pd.NaT:
            return None

        if isinstance(value, (np.generic, np.datetime64)):
            value = _convert_numpy_value(value)
            if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
                return None
            return value

        if pd.api.types.is_scalar(value) and pd.isna(value):
            return None

        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()

        return value


def to_text(value: Any) -> str | None:
    """Render a driver value the way the server's text protocol would.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=' ')
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode('utf-8', errors='replace')
    if isinstance(value, dict | list):
        return json.dumps(value, default=str)
    return str(value)


# Permissive parsers - raw text -> Python values

def wrap_integer(value: int, bits: int, signed: bool) -> int:
    """Truncate an integer to `bits` the way a C cast does.
    """
    value &= (1 << bits) - 1
    if signed and value >> (bits - 1):
        value -= 1 << bits
    return value


def parse_integer(text: str, bits: int = 64, signed: bool = True) -> int:
    """Parse the integer prefix of `text`.

    Decimal or 0x-prefixed hexadecimal. Leading zeros stay decimal so that
    zero-filled columns read naturally. The result saturates at the 64-bit
    limits and is then truncated to `bits`. Unsigned parsing of a negative
    number wraps modulo 2**64. Text without a numeric prefix yields 0.
    """
    match = _INTEGER.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    if digits[:2] in {'0x', '0X'}:
        value = int(digits, 16)
    else:
        # past 20 digits the value saturates; skip int() and its digit limit
        digits = digits.lstrip('0') or '0'
        value = int(digits) if len(digits) <= _UINT64_DIGITS else UINT64_MAX + 1
    if signed:
        if sign == '-':
            value = -value
        value = max(INT64_MIN, min(INT64_MAX, value))
    elif value > UINT64_MAX:
        value = UINT64_MAX
    elif sign == '-':
        value = -value % (1 << 64)
    return wrap_integer(value, bits, signed)


def parse_float(text: str, single: bool = False) -> float:
    """Parse the floating point prefix of `text`, 0.0 when there is none.

    With `single` the result is rounded to IEEE single precision.
    """
    match = _FLOAT.match(text)
    if match is None:
        return 0.0
    value = float(match.group(1))
    if single:
        with np.errstate(over='ignore'):
            value = float(np.float32(value))
    return value


def civil_to_epoch(year: int, month: int, day: int,
                   hour: int = 0, minute: int = 0, second: int = 0) -> int:
    """Seconds since the epoch for a civil date and time.

    No time zone or daylight saving adjustment is applied. Out of range
    months, days and times carry over into the next unit.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    days = datetime.date(year, month, 1).toordinal() - _EPOCH_ORDINAL + day - 1
    return ((days * 24 + hour) * 60 + minute) * 60 + second


def parse_timestamp(text: str) -> int | None:
    """Parse `YYYY-MM-DD HH:MM:SS` into epoch seconds, None when malformed.
    """
    match = _TIMESTAMP.match(text)
    if match is None:
        return None
    try:
        return civil_to_epoch(*(int(part) for part in match.groups()))
    except (ValueError, OverflowError):
        logger.debug(f'Timestamp out of range: {text!r}')
        return None


def parse_datetime(text: str) -> datetime.datetime | None:
    """Parse any date/time text dateutil understands, None when it cannot.

    Any UTC offset or zone name is dropped; the result is always naive.
    """
    try:
        return dateutil.parser.parse(text, ignoretz=True)
    except (ValueError, OverflowError):
        return None


def epoch_to_civil(unix_timestamp: int | float) -> datetime.datetime:
    """Inverse of `civil_to_epoch`, naive datetime."""
    return EPOCH + datetime.timedelta(seconds=unix_timestamp)
