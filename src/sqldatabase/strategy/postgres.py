"""
PostgreSQL-specific strategy implementation.

This module implements the DatabaseStrategy interface with PostgreSQL-specific operations:
- `ON CONFLICT DO NOTHING` in place of an ignore keyword
- `TRUE`/`FALSE` boolean literals and `bytea` hex literals
- SQLSTATE error codes from psycopg
- `lastval()` and `pg_tables` metadata
"""
import logging
from typing import TYPE_CHECKING, Any

import psycopg
import sqlalchemy as sa
from sqldatabase.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sqldatabase.connection import ConnectionWrapper
    from sqldatabase.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    driver_errors = (psycopg.Error,)

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.appname:
            query['application_name'] = options.appname

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port,
            database=options.database,
            query=query
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'database', 'port']

    def render_bool(self, value: bool) -> str:
        return 'TRUE' if value else 'FALSE'

    def render_bytes(self, value: bytes) -> str:
        return f"'\\x{value.hex()}'::bytea"

    def insert_trailer(self, ignore: bool = False) -> str:
        return ' ON CONFLICT DO NOTHING' if ignore else ''

    def error_details(self, exc: BaseException) -> tuple[int | str | None, str]:
        """Use the SQLSTATE and primary diagnostic message when available."""
        diag = getattr(exc, 'diag', None)
        message = getattr(diag, 'message_primary', None) or str(exc)
        return getattr(exc, 'sqlstate', None), message

    def last_insert_id(self, cn: 'ConnectionWrapper') -> int:
        return int(self._select_scalar_raw(cn, 'select lastval()') or 0)

    def get_table_list(self, cn: 'ConnectionWrapper') -> list[str]:
        sql = """
select tablename from pg_catalog.pg_tables where schemaname = current_schema() order by tablename
"""
        return self._select_column_raw(cn, sql)
