"""
Relational database client access layer for PostgreSQL, SQLite, and MySQL.

Two pieces do the work:
- `Query` buffers a statement's whole result and hands out `Row` views
  with typed, NULL-aware accessors
- `BatchInsertStatement` assembles multi-row INSERT statements and flushes
  them in batches

All operations can be called either as:
- Module functions: db.send_query(cn, sql)
- ConnectionWrapper methods: cn.send_query(sql)

The module functions are facades over the ConnectionWrapper methods.
"""
__version__ = '0.1.0'

from typing import Any

from sqldatabase.batch import BatchInsertStatement
from sqldatabase.connection import ConnectionWrapper, connect
from sqldatabase.diagnostics import AllocationTracker
from sqldatabase.exceptions import ConnectionFailure, DatabaseError, FieldError
from sqldatabase.exceptions import DbConnectionError, IntegrityError
from sqldatabase.exceptions import OperationalError, ProgrammingError
from sqldatabase.exceptions import QueryError, TypeConversionError
from sqldatabase.exceptions import ValidationError, is_retryable_error
from sqldatabase.options import DatabaseOptions
from sqldatabase.query import Query
from sqldatabase.row import Row
from sqldatabase.sql import encode_boolean_int, encode_date, encode_quote_date
from sqldatabase.sql import escape_quote_string, escape_string
from sqldatabase.sql import quote_identifier


def send_query(cn: ConnectionWrapper, sql: str,
               tracker: AllocationTracker | None = None) -> Query:
    """Execute SQL and return its buffered result.
    """
    return cn.send_query(sql, tracker=tracker)


def send_raw_query(cn: ConnectionWrapper, sql: str) -> None:
    """Execute SQL whose result is not needed.
    """
    cn.send_raw_query(sql)


def execute(cn: ConnectionWrapper, sql: str) -> int:
    """Execute SQL and return affected row count.
    """
    return cn.execute_statement(sql)


delete = execute
insert = execute
update = execute


def last_insert_id(cn: ConnectionWrapper) -> int:
    """Id generated by the last insert on the connection.
    """
    return cn.last_insert_id()


def get_table_list(cn: ConnectionWrapper) -> list[str]:
    """Names of the tables in the connected database.
    """
    return cn.get_table_list()


def batch_insert(cn: ConnectionWrapper, table: str, fields: list[str],
                 rows: Any, inserts_per_flush: int | None = None,
                 insert_ignore: bool = False) -> int:
    """Insert an iterable of value sequences through a BatchInsertStatement.

    Returns the number of entries sent.
    """
    stmt = BatchInsertStatement(cn, table, inserts_per_flush, insert_ignore)
    for field in fields:
        stmt.add_field(field)
    with stmt:
        for values in rows:
            stmt.add_entry(values)
    return stmt.rows_sent


__all__ = [
    'connect',
    'ConnectionWrapper',
    'DatabaseOptions',
    'Query',
    'Row',
    'BatchInsertStatement',
    'AllocationTracker',
    'send_query',
    'send_raw_query',
    'execute',
    'delete',
    'insert',
    'update',
    'last_insert_id',
    'get_table_list',
    'batch_insert',
    'escape_string',
    'escape_quote_string',
    'quote_identifier',
    'encode_date',
    'encode_quote_date',
    'encode_boolean_int',
    'is_retryable_error',
    'DatabaseError',
    'ConnectionFailure',
    'QueryError',
    'FieldError',
    'ValidationError',
    'TypeConversionError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
]
