"""
Multi-row INSERT statements assembled by hand.

A `BatchInsertStatement` collects row tuples into the text of one
`INSERT INTO table (c1,c2,...) VALUES (...),(...),...` statement and sends
it whenever the configured number of entries has accumulated, so that
thousands of rows cost a handful of round-trips.

    stmt = BatchInsertStatement(cn, 'person', inserts_per_flush=100)
    stmt.add_field('name')
    stmt.add_field('age')
    stmt.start()
    for name, age in people:
        stmt.begin_entry()
        stmt.put_string(name)
        stmt.put_int(age)
        stmt.end_entry()
    stmt.finish()

Lifecycle: fields are declared, `start()` freezes them and builds the
header, entries are bracketed by `begin_entry()`/`end_entry()`, and
`finish()` sends the remainder and closes the statement. Anything done out
of that order raises ValidationError.
"""
import datetime
import io
import logging
import math
from decimal import Decimal
from typing import Any, Self

from sqldatabase.exceptions import QueryError, TypeConversionError
from sqldatabase.exceptions import ValidationError
from sqldatabase.options import DEFAULT_BATCH_SIZE
from sqldatabase.sql import encode_quote_date
from sqldatabase.strategy import get_db_strategy
from sqldatabase.types import TypeConverter

logger = logging.getLogger(__name__)

NULL = 'NULL'


class BatchInsertStatement:
    """Accumulate row tuples and flush them as multi-row inserts.

    Args:
        connection: Connection that executes the flushed statements
        table: Target table, emitted as given
        inserts_per_flush: Entries per automatic flush. None takes the
            connection's `batch_size` option, 0 disables automatic flushing.
        insert_ignore: Skip rows that violate unique constraints
    """

    def __init__(self, connection: Any, table: str,
                 inserts_per_flush: int | None = None,
                 insert_ignore: bool = False) -> None:
        if inserts_per_flush is None:
            options = getattr(connection, 'options', None)
            inserts_per_flush = getattr(options, 'batch_size', DEFAULT_BATCH_SIZE)
        if inserts_per_flush < 0:
            raise ValidationError('inserts_per_flush cannot be negative')

        self.connection = connection
        self.table = table
        self.inserts_per_flush = inserts_per_flush
        self.insert_ignore = insert_ignore
        self.strategy = get_db_strategy(connection)

        self.fields: list[str] = []
        self.header = ''
        self.has_started = False
        self.closed = False

        self.number_of_inserts = 0
        self.pending = 0
        self.flushes = 0
        self.rows_sent = 0
        self.affected_rows = 0

        self._tuples = io.StringIO()
        self._entry: list[str] | None = None

    def __repr__(self) -> str:
        return (f'BatchInsertStatement({self.table!r}, fields={self.fields}, '
                f'pending={self.pending}, sent={self.rows_sent})')

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Finish on a clean exit; otherwise discard what is pending.
        """
        if self.closed:
            return
        if exc_type is None:
            self.finish()
            return
        if self.pending:
            logger.warning(f'Discarding {self.pending} unsent entries for {self.table}')
        self._clear()
        self._entry = None
        self.closed = True

    def _check_open(self) -> None:
        if self.closed:
            raise ValidationError(f'Batch insert into {self.table} is already finished')

    def _clear(self) -> None:
        self._tuples = io.StringIO()
        self.pending = 0

    # Declaration

    def add_field(self, field: str) -> None:
        """Append a column to the insert's column list."""
        self._check_open()
        if self.has_started:
            raise ValidationError(f'Cannot add field {field!r} after start()')
        self.fields.append(field)

    def start(self) -> None:
        """Freeze the column list and build the statement header.
        """
        self._check_open()
        if self.has_started:
            return
        if not self.fields:
            raise ValidationError(f'No fields declared for batch insert into {self.table}')
        self.header = self.strategy.insert_header(self.table, self.fields, self.insert_ignore)
        self.has_started = True
        logger.debug(f'Batch insert header: {self.header}')

    # Entries

    def begin_entry(self) -> None:
        """Open a new row tuple, starting the statement if needed."""
        self._check_open()
        if not self.has_started:
            self.start()
        if self._entry is not None:
            raise ValidationError('begin_entry() called with an entry already open')
        self._entry = []

    def end_entry(self) -> None:
        """Close the current tuple and flush when the threshold is reached.

        Raises ValidationError unless exactly one value per field was written.
        """
        self._check_open()
        if self._entry is None:
            raise ValidationError('end_entry() called without begin_entry()')
        if len(self._entry) != len(self.fields):
            raise ValidationError(
                f'Entry has {len(self._entry)} values but {len(self.fields)} fields are declared')

        self._tuples.write(',(' if self.pending else '(')
        self._tuples.write(','.join(self._entry))
        self._tuples.write(')')
        self._entry = None
        self.number_of_inserts += 1
        self.pending += 1

        if self.inserts_per_flush and self.pending >= self.inserts_per_flush:
            self.flush()

    def add_entry(self, values: list[Any] | tuple[Any, ...]) -> None:
        """Write a whole tuple of values with `put_value`."""
        self.begin_entry()
        for value in values:
            self.put_value(value)
        self.end_entry()

    # Values

    def add_field_value(self, sql: str) -> None:
        """Append a raw SQL expression (e.g. `NOW()`) as the next value."""
        self._check_open()
        if self._entry is None:
            raise ValidationError('Value written outside of an entry')
        if len(self._entry) >= len(self.fields):
            raise ValidationError(f'Entry already has {len(self.fields)} values')
        self._entry.append(sql)

    def put_null(self) -> None:
        self.add_field_value(NULL)

    def put_string(self, value: str | None) -> None:
        """Append a quoted, escaped string literal; None writes NULL."""
        if value is None:
            self.put_null()
            return
        self.add_field_value(f"'{self.connection.escape(str(value))}'")

    def put_int(self, value: int) -> None:
        self.add_field_value(str(int(value)))

    put_long = put_int

    def put_char(self, value: str) -> None:
        if not isinstance(value, str) or len(value) != 1:
            raise ValidationError(f'put_char() expects a single character, got {value!r}')
        self.put_string(value)

    def put_bool(self, value: bool) -> None:
        self.add_field_value(self.strategy.render_bool(bool(value)))

    def put_double(self, value: float) -> None:
        """Append a float literal; NaN and infinities have no SQL literal and write NULL."""
        value = float(value)
        if math.isnan(value) or math.isinf(value):
            self.put_null()
            return
        self.add_field_value(repr(value))

    def put_value(self, value: Any) -> None:
        """Append any supported Python, NumPy or Pandas value.
        """
        value = TypeConverter.convert_value(value)
        if value is None:
            self.put_null()
        elif isinstance(value, bool):
            self.put_bool(value)
        elif isinstance(value, int):
            self.put_int(value)
        elif isinstance(value, float):
            self.put_double(value)
        elif isinstance(value, Decimal):
            self.add_field_value(str(value))
        elif isinstance(value, datetime.datetime):
            self.put_string(value.isoformat(sep=' '))
        elif isinstance(value, datetime.date | datetime.time):
            self.put_string(value.isoformat())
        elif isinstance(value, bytes | bytearray | memoryview):
            self.add_field_value(self.strategy.render_bytes(bytes(value)))
        elif isinstance(value, str):
            self.put_string(value)
        else:
            raise TypeConversionError(f'Cannot render {type(value).__name__} as a SQL literal')

    def put_timestamp(self, unix_timestamp: int | float) -> None:
        """Append epoch seconds as a quoted `YYYY-MM-DD HH:MM:SS` literal."""
        self.add_field_value(encode_quote_date(unix_timestamp))

    # Transmission

    @property
    def sql(self) -> str:
        """Statement text for the pending tuples."""
        trailer = self.strategy.insert_trailer(self.insert_ignore)
        return f'{self.header} {self._tuples.getvalue()}{trailer}'

    def flush(self) -> int:
        """Send the pending tuples and clear them.

        The header stays, so later entries continue the same logical
        insert. Tuples are cleared before sending: a rejected flush raises
        QueryError and its tuples are not sent again.

        Returns
            Rows affected according to the server, 0 if nothing was pending
        """
        self._check_open()
        if not self.pending:
            return 0

        sql, count = self.sql, self.pending
        self._clear()
        try:
            affected = self.connection.execute_statement(sql)
        except QueryError:
            logger.error(f'Batch insert into {self.table} failed, {count} entries not inserted')
            raise

        self.flushes += 1
        self.rows_sent += count
        if isinstance(affected, int) and affected > 0:
            self.affected_rows += affected
        logger.debug(f'Flushed {count} entries into {self.table} ({self.rows_sent} total)')
        return affected

    def finish(self) -> int:
        """Flush what remains and close the statement.

        Returns
            Number of entries successfully sent over the statement's life
        """
        self._check_open()
        if self._entry is not None:
            raise ValidationError('finish() called with an entry still open')
        try:
            self.flush()
        finally:
            self.closed = True
        return self.rows_sent
