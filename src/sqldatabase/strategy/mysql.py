"""
MySQL-specific strategy implementation.

This module implements the DatabaseStrategy interface with MySQL-specific operations:
- `INSERT IGNORE` batch inserts
- Backslash string escaping (mysql_real_escape_string rules)
- Server errno from PyMySQL exceptions
- `LAST_INSERT_ID()` and `SHOW TABLES` metadata
"""
import logging
from typing import TYPE_CHECKING, Any

import pymysql
import sqlalchemy as sa
from sqldatabase.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sqldatabase.connection import ConnectionWrapper
    from sqldatabase.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('mysql')
class MySQLStrategy(DatabaseStrategy):
    """MySQL-specific operations.
    """

    driver_errors = (pymysql.Error,)

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for MySQL."""
        return 'mysql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for MySQL."""
        query = {'charset': 'utf8mb4'}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)

        return sa.URL.create(
            drivername='mysql+pymysql',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or 3306,
            database=options.database,
            query=query
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for MySQL."""
        return {'pool_pre_ping': options.use_pool}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for MySQL connections."""
        return ['hostname', 'username', 'database']

    def insert_header(self, table: str, fields: list[str], ignore: bool = False) -> str:
        verb = 'INSERT IGNORE INTO' if ignore else 'INSERT INTO'
        return f"{verb} {table} ({','.join(fields)}) VALUES"

    def error_details(self, exc: BaseException) -> tuple[int | str | None, str]:
        """PyMySQL errors carry (errno, message) as their args."""
        if len(exc.args) >= 2 and isinstance(exc.args[0], int):
            return exc.args[0], str(exc.args[1])
        return None, str(exc)

    def last_insert_id(self, cn: 'ConnectionWrapper') -> int:
        return int(self._select_scalar_raw(cn, 'SELECT LAST_INSERT_ID()') or 0)

    def get_table_list(self, cn: 'ConnectionWrapper') -> list[str]:
        return self._select_column_raw(cn, 'SHOW TABLES')
