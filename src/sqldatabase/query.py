"""
Buffered query results with a forward cursor.

A `Query` executes once, copies every record of the result into memory and
then hands out `Row` views over that buffer. Because the whole result is
held locally the cursor can peek, rewind and reverse without going back to
the server.
"""
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Self

import pandas as pd
from sqldatabase.exceptions import ConnectionFailure, FieldError, QueryError
from sqldatabase.row import Row

if TYPE_CHECKING:
    from sqldatabase.diagnostics import AllocationTracker
    from sqldatabase.result import ResultHandle

logger = logging.getLogger(__name__)


class Query:
    """One executed statement and its fully materialized result.

    Rows handed out by the query keep a reference to it, so the buffered
    data lives as long as any row does.
    """

    def __init__(self, sql: str, connection: Any = None,
                 tracker: 'AllocationTracker | None' = None) -> None:
        self.sql = sql
        self.connection = connection
        self.tracker = tracker
        self._fields: list[str] = []
        self._index: dict[str, int] = {}
        self._rows: list[tuple[str | None, ...]] = []
        self._position = 0
        if tracker is not None:
            tracker.track(self, 'Query')

    def __repr__(self) -> str:
        return f'Query({self.sql!r}, rows={len(self._rows)}, fields={len(self._fields)})'

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        """Iterate the rows remaining after the cursor."""
        while self.has_next_row():
            yield self.get_row()

    def send(self) -> Self:
        """Execute the statement on the connection and buffer its result.
        """
        if self.connection is None:
            raise ConnectionFailure('Query has no connection to send on')
        self.load(self.connection.execute_query(self.sql))
        return self

    def load(self, result: 'ResultHandle') -> Self:
        """Build the field index and buffer every record of `result`.
        """
        fields = [result.field_name(i) for i in range(result.field_count())]
        index: dict[str, int] = {}
        for i, name in enumerate(fields):
            if name in index:
                logger.debug(f'Duplicate field {name!r}, column {i} shadows column {index[name]}')
            index[name] = i

        rows = []
        for record in iter(result.next_record, None):
            if len(record) != len(fields):
                result.close()
                raise QueryError(f'Record has {len(record)} values, expected {len(fields)}',
                                 statement=self.sql)
            rows.append(tuple(record))

        self._fields, self._index, self._rows = fields, index, rows
        self._position = 0
        logger.debug(f'Buffered {len(rows)} rows of {len(fields)} fields')
        return self

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    def num_rows(self) -> int:
        return len(self._rows)

    def num_fields(self) -> int:
        return len(self._fields)

    def get_index_by_field(self, field: str) -> int:
        """Position of `field` in each record.

        Raises FieldError if the result has no such field.
        """
        try:
            return self._index[field]
        except KeyError:
            raise FieldError(f'Field {field!r} not found in query result', field) from None

    def get_field_by_index(self, index: int) -> str:
        """Name of the field at `index`."""
        if not 0 <= index < len(self._fields):
            raise FieldError(f'Field index {index} out of range', index)
        return self._fields[index]

    def has_next_row(self) -> bool:
        return self._position < len(self._rows)

    def _require_row(self) -> None:
        if not self.has_next_row():
            raise IndexError('No more rows in query result')

    def get_row(self) -> Row:
        """Return the row under the cursor and advance."""
        row = self.peek_row()
        self._position += 1
        return row

    def peek_row(self) -> Row:
        """Return the row under the cursor without advancing."""
        self._require_row()
        return Row(self, self._rows[self._position])

    def skip_row(self) -> None:
        self._require_row()
        self._position += 1

    def reset_row_queue(self) -> None:
        """Rewind the cursor to the first row."""
        self._position = 0

    def reverse_rows(self) -> None:
        """Reverse the buffered rows and rewind the cursor.
        """
        self._rows.reverse()
        self._position = 0

    def to_dataframe(self) -> pd.DataFrame:
        """All buffered rows as a DataFrame of raw text (None for NULL)."""
        return pd.DataFrame.from_records(self._rows, columns=self._fields)
