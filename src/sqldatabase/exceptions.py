"""
Database-specific exception classes.
"""
import logging
import re
import sqlite3

import psycopg
import pymysql

logger = logging.getLogger(__name__)

RETRYABLE_PATTERNS = [
    # SSL/TLS errors
    r'ssl',
    r'tls',
    # Connection drops
    r'connection.*(closed|reset|refused|lost|terminated|broken)',
    r'server closed',
    r'server has gone away',
    r'lost connection',
    r'broken pipe',
    # Timeouts
    r'timeout',
    r'timed out',
    r'lock wait',
    # Network issues
    r'could not connect',
    r'can\'t connect',
    r'no route to host',
    r'network.*(unreachable|error)',
    # Database unavailable
    r'database.*(unavailable|locked)',
    r'too many connections',
    r'deadlock',
]

_RETRYABLE_REGEX = re.compile('|'.join(RETRYABLE_PATTERNS), re.IGNORECASE)


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception represents a transient error worth retrying.

    Nothing in this package retries; the classification is offered so the
    caller can decide on its own retry/backoff policy.

    Returns True for errors that are likely transient:
    - SSL/TLS errors
    - Connection drops/resets
    - Timeouts, lock waits and deadlocks
    - Database temporarily unavailable

    Returns False for syntax errors, constraint violations, unknown fields
    and caller contract violations.

    :param exc: The exception to check.
    :returns: True if the error is likely transient and worth retrying.
    """
    if isinstance(exc, (FieldError, ValidationError)):
        return False
    error_msg = str(exc).lower()
    return bool(_RETRYABLE_REGEX.search(error_msg))


class DatabaseError(Exception):
    """Base class for all database module errors.
    """

    kind = 'Database'

    def __init__(self, message: str = '') -> None:
        super().__init__(message)
        self.message = message

    def report(self, log: logging.Logger | None = None) -> None:
        """Write the error to the supplied logger (module logger by default).
        """
        (log or logger).error(f'{self.kind} exception: {self}')


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining database connection.
    """

    kind = 'Connection'


class QueryError(DatabaseError):
    """Server rejected a statement.

    Carries the server error code and text and, when known, the statement
    text that was rejected.
    """

    kind = 'Query'

    def __init__(self, message: str, errno: int | str | None = None,
                 error_text: str | None = None,
                 statement: str | None = None) -> None:
        super().__init__(message)
        self.errno = -1 if errno is None else errno
        self.error_text = error_text
        self.statement = statement

    def __str__(self) -> str:
        text = self.message
        if self.error_text is not None:
            text += f'\n{self.error_text}. (#{self.errno})\n'
            if self.statement:
                text += f'Original query: {self.statement}'
        return text


class FieldError(DatabaseError, LookupError):
    """Unknown field name or index requested from a result.
    """

    kind = 'Field'

    def __init__(self, message: str, field: str | int | None = None) -> None:
        super().__init__(message)
        self.field = field


class TypeConversionError(DatabaseError):
    """Error converting types between Python and database.
    """

    kind = 'TypeConversion'


class ValidationError(DatabaseError, ValueError):
    """Caller violated an API contract (wrong state, wrong value count).
    """

    kind = 'Validation'


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    pymysql.OperationalError,
    pymysql.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    pymysql.IntegrityError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    pymysql.ProgrammingError,
    pymysql.DatabaseError,
    QueryError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    pymysql.OperationalError,
    )
