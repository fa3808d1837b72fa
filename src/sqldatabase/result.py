"""Raw result handle produced by a connection for one executed statement."""
import logging
from typing import TYPE_CHECKING, Any

from sqldatabase.exceptions import QueryError
from sqldatabase.types import to_text

if TYPE_CHECKING:
    from sqldatabase.strategy import DatabaseStrategy

logger = logging.getLogger(__name__)


class ResultHandle:
    """Records of an executed DBAPI cursor, rendered as nullable text.

    `next_record()` returns a tuple of `str | None` per record and None
    once the results are exhausted, at which point the cursor is closed.
    A statement that produced no result set has zero fields and no records.
    """

    def __init__(self, cursor: Any, strategy: 'DatabaseStrategy | None' = None,
                 sql: str | None = None) -> None:
        self.cursor = cursor
        self.strategy = strategy
        self.sql = sql
        self.fields = [desc[0] for desc in (cursor.description or [])]
        self._done = not self.fields
        if self._done:
            cursor.close()

    def field_count(self) -> int:
        return len(self.fields)

    def field_name(self, index: int) -> str:
        return self.fields[index]

    def next_record(self) -> tuple[str | None, ...] | None:
        """Fetch the next record as text, None at end-of-results."""
        if self._done:
            return None
        try:
            row = self.cursor.fetchone()
        except self._driver_errors as err:
            self.close()
            errno, text = self.strategy.error_details(err)
            raise QueryError('Error fetching result', errno, text, self.sql) from err
        if row is None:
            self.close()
            return None
        return tuple(to_text(value) for value in row)

    def close(self) -> None:
        if not self._done:
            self._done = True
            self.cursor.close()

    @property
    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return self.strategy.driver_errors if self.strategy else ()
