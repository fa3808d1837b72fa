"""Typed access to one buffered record of a Query.

Every accessor takes either a column index or a field name. Names are
resolved through the owning query, so an unknown name raises FieldError,
and so does an index outside the record.

Plain accessors return a default for SQL NULL (0, 0.0, '' or the epoch);
`get_nullable_*` accessors return None instead. Text is parsed permissively:
a malformed number reads as its longest numeric prefix, or zero.
"""
import datetime
from collections.abc import Iterator
from functools import partial
from typing import TYPE_CHECKING, Any

from sqldatabase.exceptions import FieldError
from sqldatabase.types import EPOCH, parse_datetime, parse_float
from sqldatabase.types import parse_integer, parse_timestamp

from libb import attrdict

if TYPE_CHECKING:
    from sqldatabase.query import Query

Key = int | str

_int16 = partial(parse_integer, bits=16, signed=True)
_uint16 = partial(parse_integer, bits=16, signed=False)
_int32 = partial(parse_integer, bits=32, signed=True)
_uint32 = partial(parse_integer, bits=32, signed=False)
_int64 = partial(parse_integer, bits=64, signed=True)
_uint64 = partial(parse_integer, bits=64, signed=False)
_float32 = partial(parse_float, single=True)


def _char(text: str) -> str:
    return text[:1]


def _string(text: str) -> str:
    return text


class Row:
    """Read-only view of one record.

    Holds the record's values and a strong reference to the owning query,
    which keeps the query's buffer alive for as long as the row is used.
    Copying a row shares both.
    """

    __slots__ = ('query', 'values', '__weakref__')

    def __init__(self, query: 'Query', values: tuple[str | None, ...]) -> None:
        self.query = query
        self.values = values
        tracker = getattr(query, 'tracker', None)
        if tracker is not None:
            tracker.track(self, 'Row')

    def __copy__(self) -> 'Row':
        return Row(self.query, self.values)

    def __repr__(self) -> str:
        return f'Row({self.values!r})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self.query is other.query and self.values == other.values

    def __hash__(self) -> int:
        return hash((id(self.query), self.values))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[str | None]:
        return iter(self.values)

    def __getitem__(self, key: Key) -> str | None:
        """Raw text of a field, None for NULL."""
        return self.values[self._resolve(key)]

    def _resolve(self, key: Key) -> int:
        if isinstance(key, str):
            return self.query.get_index_by_field(key)
        if not 0 <= key < len(self.values):
            raise FieldError(f'Field index {key} out of range', key)
        return key

    def _get(self, key: Key, parse, default: Any) -> Any:
        value = self.values[self._resolve(key)]
        return default if value is None else parse(value)

    def _get_nullable(self, key: Key, parse) -> Any:
        value = self.values[self._resolve(key)]
        return None if value is None else parse(value)

    def get_index_by_field(self, field: str) -> int:
        return self.query.get_index_by_field(field)

    def field_name(self, index: int) -> str:
        return self.query.get_field_by_index(index)

    def is_field_null(self, key: Key) -> bool:
        return self.values[self._resolve(key)] is None

    def to_dict(self) -> dict[str, str | None]:
        return dict(zip(self.query.fields, self.values))

    def to_attrdict(self) -> attrdict:
        return attrdict(self.to_dict())

    # 32-bit integers

    def get_int(self, key: Key) -> int:
        return self._get(key, _int32, 0)

    def get_nullable_int(self, key: Key) -> int | None:
        return self._get_nullable(key, _int32)

    def get_unsigned_int(self, key: Key) -> int:
        return self._get(key, _uint32, 0)

    def get_nullable_unsigned_int(self, key: Key) -> int | None:
        return self._get_nullable(key, _uint32)

    # 16-bit integers

    def get_short(self, key: Key) -> int:
        return self._get(key, _int16, 0)

    def get_nullable_short(self, key: Key) -> int | None:
        return self._get_nullable(key, _int16)

    def get_unsigned_short(self, key: Key) -> int:
        return self._get(key, _uint16, 0)

    def get_nullable_unsigned_short(self, key: Key) -> int | None:
        return self._get_nullable(key, _uint16)

    # 64-bit integers

    def get_long_long(self, key: Key) -> int:
        return self._get(key, _int64, 0)

    def get_nullable_long_long(self, key: Key) -> int | None:
        return self._get_nullable(key, _int64)

    def get_unsigned_long_long(self, key: Key) -> int:
        return self._get(key, _uint64, 0)

    def get_nullable_unsigned_long_long(self, key: Key) -> int | None:
        return self._get_nullable(key, _uint64)

    # Characters and strings

    def get_char(self, key: Key) -> str:
        """First character of the field, '' for NULL or empty text."""
        return self._get(key, _char, '')

    def get_nullable_char(self, key: Key) -> str | None:
        return self._get_nullable(key, _char)

    def get_string(self, key: Key) -> str:
        return self._get(key, _string, '')

    def get_nullable_string(self, key: Key) -> str | None:
        return self._get_nullable(key, _string)

    # Floating point

    def get_float(self, key: Key) -> float:
        """Field as a single precision value widened back to float."""
        return self._get(key, _float32, 0.0)

    def get_nullable_float(self, key: Key) -> float | None:
        return self._get_nullable(key, _float32)

    def get_double(self, key: Key) -> float:
        return self._get(key, parse_float, 0.0)

    def get_nullable_double(self, key: Key) -> float | None:
        return self._get_nullable(key, parse_float)

    # Dates and times

    def get_timestamp(self, key: Key) -> int:
        """Epoch seconds of a `YYYY-MM-DD HH:MM:SS` field.

        The text is read as civil UTC time. NULL and malformed text give 0.
        """
        return self._get(key, parse_timestamp, None) or 0

    def get_nullable_timestamp(self, key: Key) -> int | None:
        """Like `get_timestamp` but None for NULL and malformed text."""
        return self._get_nullable(key, parse_timestamp)

    def get_datetime(self, key: Key) -> datetime.datetime:
        """Field parsed by dateutil, 1970-01-01 for NULL or unparseable text."""
        return self._get(key, parse_datetime, None) or EPOCH

    def get_nullable_datetime(self, key: Key) -> datetime.datetime | None:
        return self._get_nullable(key, parse_datetime)
