"""
Base strategy interface for database operations.

Defines the abstract base class that all database-specific strategy implementations
must inherit from. The strategy pattern allows for encapsulating database-specific
behaviors while presenting a consistent interface to the rest of the application.

Each concrete strategy implements operations with database-specific SQL and techniques,
but clients can work with any database through this consistent interface.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqldatabase.exceptions import QueryError
from sqldatabase.sql import escape_string, quote_identifier

if TYPE_CHECKING:
    from sqldatabase.connection import ConnectionWrapper
    from sqldatabase.options import DatabaseOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for database-specific operations.
    """

    #: DBAPI exception classes raised by this dialect's driver
    driver_errors: tuple[type[BaseException], ...] = ()

    @contextmanager
    def _cursor(self, cn: 'ConnectionWrapper', sql: str):
        """Context manager for cursor lifecycle.

        Handles cursor creation, SQL execution, and cleanup. Driver errors
        raised while executing or fetching surface as QueryError.
        """
        cursor = cn.dbapi_connection.cursor()
        try:
            cursor.execute(sql)
            yield cursor
        except self.driver_errors as err:
            errno, text = self.error_details(err)
            raise QueryError('Query failed', errno, text, sql) from err
        finally:
            cursor.close()

    def _select_column_raw(self, cn: 'ConnectionWrapper', sql: str) -> list:
        """Execute SQL and return first column as list.
        """
        with self._cursor(cn, sql) as cursor:
            return [row[0] for row in cursor.fetchall()]

    def _select_scalar_raw(self, cn: 'ConnectionWrapper', sql: str) -> Any:
        """Execute SQL and return the first value of the first row.
        """
        with self._cursor(cn, sql) as cursor:
            row = cursor.fetchone()
            return row[0] if row else None

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the database connection URL for this dialect.

        Args:
            options: DatabaseOptions containing connection parameters

        Returns
            URL suitable for SQLAlchemy create_engine
        """

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.
        """
        return {}

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.

        Returns
            List of field names that must have non-None/non-zero values
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Args:
            options: DatabaseOptions to validate

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    def quote_identifier(self, identifier: str) -> str:
        """Quote a database identifier for this dialect.
        """
        return quote_identifier(identifier, self.dialect_name)

    def escape_string(self, value: str) -> str:
        """Escape text for use inside a single-quoted literal.
        """
        return escape_string(value, self.dialect_name)

    def quote_string(self, value: str) -> str:
        return f"'{self.escape_string(value)}'"

    def render_bool(self, value: bool) -> str:
        """Render a boolean literal.
        """
        return '1' if value else '0'

    def render_bytes(self, value: bytes) -> str:
        """Render a binary literal.
        """
        return f"X'{value.hex()}'"

    def insert_header(self, table: str, fields: list[str], ignore: bool = False) -> str:
        """Build the `INSERT ... VALUES` head of a multi-row insert.

        Table and field names are emitted as given so that qualified names
        (`schema.table`) and pre-quoted names pass through untouched.

        Args:
            table: Target table
            fields: Column names in tuple order
            ignore: Skip rows that violate unique constraints

        Returns
            str: Header text ending with `VALUES`
        """
        return f"INSERT INTO {table} ({','.join(fields)}) VALUES"

    def insert_trailer(self, ignore: bool = False) -> str:
        """Text appended after the last tuple of a multi-row insert.
        """
        return ''

    def error_details(self, exc: BaseException) -> tuple[int | str | None, str]:
        """Extract (error code, error text) from a driver exception.
        """
        return None, str(exc)

    @abstractmethod
    def last_insert_id(self, cn: 'ConnectionWrapper') -> int:
        """Return the id generated by the last insert on this session.
        """

    @abstractmethod
    def get_table_list(self, cn: 'ConnectionWrapper') -> list[str]:
        """List the tables of the connected database.
        """
