"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for creating new database connections
2. The `ConnectionWrapper` class that executes SQL text for queries and batch inserts
3. Engine creation and management through a thread-safe registry

The ConnectionWrapper is what `Query` and `BatchInsertStatement` talk to:
- execute_query(sql) - Execute SQL and return a raw result handle
- execute_statement(sql) - Execute SQL and return affected row count
- send_query(sql) - Execute SQL and return a buffered Query
- last_insert_id() - Id generated by the last insert on this session
- escape(text) - Escape text for a string literal in this dialect

A connection is one stateful session and is not safe to share between
threads. Nothing here retries; errors are logged and raised to the caller.
"""
import atexit
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import fields
from functools import wraps
from typing import TYPE_CHECKING, Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqldatabase.exceptions import ConnectionFailure, QueryError
from sqldatabase.options import DatabaseOptions
from sqldatabase.query import Query
from sqldatabase.result import ResultHandle
from sqldatabase.strategy import get_db_strategy, get_strategy
from sqldatabase.utils import ensure_commit, get_dialect_name

from libb import load_options

if TYPE_CHECKING:
    from sqldatabase.diagnostics import AllocationTracker
    from sqldatabase.strategy import DatabaseStrategy

__all__ = [
    'ConnectionWrapper',
    'connect',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def dumpsql(func):
    """Decorator for logging SQL text, timing and failures."""
    @wraps(func)
    def wrapper(self, sql: str, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{sql}')
        try:
            return func(self, sql, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{sql}')
            raise
        finally:
            elapsed = time.time() - start
            self.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    return get_strategy(options.drivername).build_connection_url(options)


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = str(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        url = create_url_from_options(options)

        engine_kwargs: dict[str, Any] = {'echo': False}
        engine_kwargs.update(get_strategy(options.drivername).get_engine_kwargs(options))

        if not options.use_pool:
            engine_kwargs['poolclass'] = NullPool
        else:
            engine_kwargs['pool_size'] = options.pool_max_connections
            engine_kwargs['pool_recycle'] = options.pool_max_idle_time
            engine_kwargs['pool_timeout'] = options.pool_wait_timeout
            engine_kwargs['max_overflow'] = 10
            engine_kwargs['pool_pre_ping'] = True
            engine_kwargs['pool_reset_on_return'] = 'rollback'

        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection and executes raw SQL text on it.

    This class provides a thin wrapper around SQLAlchemy connection objects that:
    1. Executes statements through the DBAPI connection, mapping driver errors
       to QueryError with the server's error code and text
    2. Tracks query execution counts and timing
    3. Supports context manager protocol for explicit resource management
    """

    def __init__(self, sa_connection: sa.engine.Connection | None = None,
                 options: DatabaseOptions | None = None) -> None:
        """Initialize a connection wrapper
        """
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine if sa_connection else None
        self.options = options
        self.dbapi_connection = sa_connection.connection if sa_connection else None
        self._dialect = get_dialect_name(sa_connection) if sa_connection else None
        self.calls = 0
        self.time = 0

    def __enter__(self) -> Self:
        """Support for context manager protocol
        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Close the connection when exiting the context manager
        """
        try:
            self.close()
            logger.debug('Closed connection via context manager')
        except Exception as e:
            logger.debug(f'Error closing connection in __exit__: {e}')

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    @property
    def dialect(self) -> str:
        """Return the dialect name ('postgresql', 'sqlite' or 'mysql')."""
        return self._dialect

    @property
    def strategy(self) -> 'DatabaseStrategy':
        return get_db_strategy(self)

    def is_connected(self) -> bool:
        return self.sa_connection is not None and not self.sa_connection.closed

    def _require_connection(self) -> None:
        if not self.is_connected():
            raise ConnectionFailure('Not connected to a database')

    def _query_error(self, message: str, err: BaseException, sql: str) -> QueryError:
        errno, text = self.strategy.error_details(err)
        return QueryError(message, errno, text, sql)

    def commit(self) -> None:
        self._require_connection()
        self.dbapi_connection.commit()

    def rollback(self) -> None:
        self._require_connection()
        self.dbapi_connection.rollback()

    def close(self) -> None:
        """Close the SQLAlchemy connection, committing first
        """
        if self.is_connected():
            ensure_commit(self.dbapi_connection)
            self.sa_connection.close()
            logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')

    def _execute(self, sql: str) -> Any:
        """Run `sql` on a fresh DBAPI cursor, rolling back on failure."""
        self._require_connection()
        cursor = self.dbapi_connection.cursor()
        try:
            cursor.execute(sql)
        except self.strategy.driver_errors as err:
            cursor.close()
            try:
                self.dbapi_connection.rollback()
            except self.strategy.driver_errors as rollback_err:
                logger.debug(f'Rollback after failed statement failed: {rollback_err}')
            raise self._query_error('Query failed', err, sql) from err
        return cursor

    @dumpsql
    def execute_query(self, sql: str) -> ResultHandle:
        """Execute SQL and return its raw result.

        Statements without a result set are committed immediately.
        """
        cursor = self._execute(sql)
        result = ResultHandle(cursor, self.strategy, sql)
        if not result.field_count():
            self.dbapi_connection.commit()
        return result

    @dumpsql
    def execute_statement(self, sql: str, autocommit: bool = True) -> int:
        """Execute SQL, returning the affected row count.

        Commits unless `autocommit` is False, in which case the caller
        finishes the transaction with `commit()` or `rollback()`.
        """
        cursor = self._execute(sql)
        try:
            rowcount = cursor.rowcount
        finally:
            cursor.close()
        if autocommit:
            self.dbapi_connection.commit()
        return rowcount

    def send_query(self, sql: str, tracker: 'AllocationTracker | None' = None) -> Query:
        """Execute SQL and return its result buffered in a Query.
        """
        return Query(sql, self, tracker).send()

    def send_raw_query(self, sql: str) -> None:
        """Execute SQL whose result is not needed.
        """
        self.execute_statement(sql)

    def last_insert_id(self) -> int:
        """Id generated by the last insert on this session.
        """
        self._require_connection()
        return self.strategy.last_insert_id(self)

    def escape(self, text: str) -> str:
        """Escape text for use inside a quoted string literal.
        """
        return self.strategy.escape_string(text)

    def get_table_list(self) -> list[str]:
        """Names of the tables in the connected database.
        """
        self._require_connection()
        return self.strategy.get_table_list(self)


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database

    Raises
        ConnectionFailure: If the database cannot be reached
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = get_engine_for_options(options)

    try:
        sa_connection = engine.connect()
    except sa.exc.DBAPIError as err:
        logger.error(f'Unable to connect to {options.drivername} database {options.database}: {err}')
        raise ConnectionFailure(f'Unable to connect to {options.drivername} database: {err.orig}') from err

    return ConnectionWrapper(sa_connection, options)
