"""
SQLite-specific strategy implementation.

This module implements the DatabaseStrategy interface with SQLite-specific operations:
- `INSERT OR IGNORE` for duplicate-tolerant batch inserts
- Standard quote-doubling string escaping
- `last_insert_rowid()` and `sqlite_master` metadata
"""
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqldatabase.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sqldatabase.connection import ConnectionWrapper
    from sqldatabase.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    driver_errors = (sqlite3.Error,)

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        if options.timeout:
            return {'connect_args': {'timeout': options.timeout}}
        return {}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def insert_header(self, table: str, fields: list[str], ignore: bool = False) -> str:
        verb = 'INSERT OR IGNORE INTO' if ignore else 'INSERT INTO'
        return f"{verb} {table} ({','.join(fields)}) VALUES"

    def error_details(self, exc: BaseException) -> tuple[int | str | None, str]:
        """SQLite exposes the extended result code on Python 3.11+."""
        return getattr(exc, 'sqlite_errorcode', None), str(exc)

    def last_insert_id(self, cn: 'ConnectionWrapper') -> int:
        return int(self._select_scalar_raw(cn, 'select last_insert_rowid()') or 0)

    def get_table_list(self, cn: 'ConnectionWrapper') -> list[str]:
        sql = """
select name from sqlite_master where type = 'table' and name not like 'sqlite_%' order by name
"""
        return self._select_column_raw(cn, sql)
