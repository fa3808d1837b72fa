"""Unit tests for the permissive text parsers and value rendering.

Tests the public API:
- parse_integer(text, bits, signed) - C-style integer prefix parsing
- parse_float(text, single) - Floating point prefix parsing
- parse_timestamp(text) / civil_to_epoch(...) - Civil time to epoch seconds
- to_text(value) - Driver values rendered as text
- TypeConverter.convert_value(value) - NumPy/Pandas values to Python values
"""
import datetime
import math
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest
from sqldatabase.types import EPOCH, INT64_MAX, INT64_MIN, UINT64_MAX
from sqldatabase.types import TypeConverter, civil_to_epoch, epoch_to_civil
from sqldatabase.types import parse_datetime, parse_float, parse_integer
from sqldatabase.types import parse_timestamp, to_text, wrap_integer


class TestParseInteger:
    """Test integer prefix parsing and width truncation."""

    @pytest.mark.parametrize(('text', 'expected'), [
        ('42', 42),
        ('  -17', -17),
        ('+8', 8),
        ('12abc', 12),
        ('3.9', 3),
        ('0x1F', 31),
        ('0X10', 16),
        ('007', 7),
        ('abc', 0),
        ('', 0),
        ('-', 0),
    ], ids=['plain', 'space_negative', 'plus', 'trailing_text', 'decimal_point',
            'hex', 'hex_upper', 'leading_zeros', 'no_digits', 'empty', 'sign_only'])
    def test_prefix(self, text, expected):
        """Test the longest numeric prefix is parsed."""
        assert parse_integer(text) == expected

    def test_saturates_at_64_bits(self):
        """Test values beyond 64 bits clamp to the limits."""
        assert parse_integer('99999999999999999999') == INT64_MAX
        assert parse_integer('-99999999999999999999') == INT64_MIN
        assert parse_integer('99999999999999999999', signed=False) == UINT64_MAX

    def test_truncates_to_width(self):
        """Test the parsed value wraps like a C cast."""
        assert parse_integer('4294967297', bits=32) == 1
        assert parse_integer('2147483648', bits=32) == -2147483648
        assert parse_integer('65535', bits=16) == -1
        assert parse_integer('65535', bits=16, signed=False) == 65535

    def test_unsigned_negative_wraps(self):
        """Test negative text read as unsigned wraps modulo 2**64."""
        assert parse_integer('-1', signed=False) == UINT64_MAX
        assert parse_integer('-1', bits=32, signed=False) == 4294967295

    def test_wrap_integer(self):
        assert wrap_integer(256, 8, False) == 0
        assert wrap_integer(255, 8, True) == -1
        assert wrap_integer(-1, 16, False) == 65535

    def test_very_long_digit_runs(self):
        """Test digit runs beyond Python's conversion limit saturate"""
        assert parse_integer('9' * 5000) == INT64_MAX
        assert parse_integer('9' * 5000, bits=32) == -1
        assert parse_integer('-' + '9' * 5000) == INT64_MIN
        assert parse_integer('-' + '9' * 5000, bits=32) == 0
        assert parse_integer('9' * 5000, signed=False) == UINT64_MAX

    def test_leading_zeros_do_not_saturate(self):
        """Test zero padding does not count toward the digit limit"""
        assert parse_integer('0' * 5000 + '42') == 42
        assert parse_integer('0' * 30) == 0


class TestParseFloat:
    """Test floating point prefix parsing."""

    @pytest.mark.parametrize(('text', 'expected'), [
        ('1.5', 1.5),
        ('  -2.25', -2.25),
        ('1e3', 1000.0),
        ('.5', 0.5),
        ('5.', 5.0),
        ('3.14xyz', 3.14),
        ('1e', 1.0),
        ('abc', 0.0),
        ('', 0.0),
    ])
    def test_prefix(self, text, expected):
        assert parse_float(text) == expected

    def test_special_values(self):
        assert math.isinf(parse_float('inf'))
        assert math.isinf(parse_float('-Infinity'))
        assert math.isnan(parse_float('nan'))

    def test_single_precision(self):
        """Test single precision rounding matches float32."""
        assert parse_float('0.1', single=True) == float(np.float32(0.1))
        assert parse_float('0.1', single=True) != 0.1
        assert parse_float('0.5', single=True) == 0.5

    def test_single_precision_overflow(self):
        """Test values beyond float32 range become infinite."""
        assert math.isinf(parse_float('1e300', single=True))


class TestTimestamps:
    """Test civil time conversion without time zone adjustment."""

    def test_known_timestamp(self):
        assert parse_timestamp('2007-01-26 10:00:00') == 1169805600

    def test_epoch(self):
        assert parse_timestamp('1970-01-01 00:00:00') == 0

    def test_before_epoch(self):
        assert parse_timestamp('1969-12-31 23:59:59') == -1

    def test_summer_date_has_no_dst_shift(self):
        """Test a summer time differs from midnight by exactly its clock time."""
        midnight = parse_timestamp('2007-07-01 00:00:00')
        assert parse_timestamp('2007-07-01 10:00:00') - midnight == 36000

    def test_lenient_separators(self):
        """Test whitespace around the fields is accepted."""
        assert parse_timestamp(' 2007-01-26  10:00:00') == 1169805600

    @pytest.mark.parametrize('text', ['bad', '', '2007-01-26', '2007/01/26 10:00:00'])
    def test_malformed(self, text):
        assert parse_timestamp(text) is None

    def test_fields_carry_over(self):
        """Test out of range fields normalize like mktime."""
        assert civil_to_epoch(2007, 13, 1) == civil_to_epoch(2008, 1, 1)
        assert civil_to_epoch(2007, 1, 32) == civil_to_epoch(2007, 2, 1)
        assert civil_to_epoch(2007, 1, 1, 24) == civil_to_epoch(2007, 1, 2)

    def test_epoch_to_civil(self):
        assert epoch_to_civil(1169805600) == datetime.datetime(2007, 1, 26, 10, 0, 0)
        assert epoch_to_civil(0) == EPOCH

    def test_parse_datetime(self):
        assert parse_datetime('2007-01-26T10:00:00') == datetime.datetime(2007, 1, 26, 10)
        assert parse_datetime('Jan 26 2007') == datetime.datetime(2007, 1, 26)
        assert parse_datetime('not a date') is None

    def test_parse_datetime_drops_offset(self):
        """Test offsets are dropped so every result is naive"""
        parsed = parse_datetime('2007-01-26 10:00:00+05:00')
        assert parsed == datetime.datetime(2007, 1, 26, 10)
        assert parsed.tzinfo is None
        assert parse_datetime('2007-01-26T10:00:00Z').tzinfo is None
        assert parse_datetime('2007-01-26 10:00:00+05:00') < parse_datetime('2007-01-27')


class TestToText:
    """Test driver values are rendered in the server's text form."""

    @pytest.mark.parametrize(('value', 'expected'), [
        (None, None),
        ('abc', 'abc'),
        (True, '1'),
        (False, '0'),
        (42, '42'),
        (1.5, '1.5'),
        (Decimal('10.50'), '10.50'),
        (datetime.datetime(2007, 1, 26, 10, 0), '2007-01-26 10:00:00'),
        (datetime.date(2007, 1, 26), '2007-01-26'),
        (datetime.time(10, 30), '10:30:00'),
        (b'bytes', 'bytes'),
        ({'a': 1}, '{"a": 1}'),
        ([1, 2], '[1, 2]'),
    ])
    def test_render(self, value, expected):
        assert to_text(value) == expected


class TestTypeConverter:
    """Test NumPy and Pandas values are converted to plain Python values."""

    @pytest.mark.parametrize(('value', 'expected'), [
        (np.int64(5), 5),
        (np.float64(2.5), 2.5),
        (np.bool_(True), True),
        (pd.Timestamp('2007-01-26 10:00:00'), datetime.datetime(2007, 1, 26, 10)),
        (np.datetime64('2007-01-26T10:00:00'), datetime.datetime(2007, 1, 26, 10)),
        ('text', 'text'),
    ])
    def test_convert_value(self, value, expected):
        result = TypeConverter.convert_value(value)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize('value', [
        None, float('nan'), float('inf'), np.float64('nan'), pd.NaT, pd.NA,
        np.datetime64('NaT'),
    ])
    def test_null_values(self, value):
        assert TypeConverter.convert_value(value) is None


if __name__ == '__main__':
    __import__('pytest').main([__file__])
