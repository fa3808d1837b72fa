"""Connection helpers with no internal dependencies.

Safe to import from any sqldatabase module (the strategy registry included)
without creating an import cycle.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)

# DBAPI driver module prefix -> dialect
_DRIVER_DIALECTS = {
    'psycopg': 'postgresql',
    'sqlite3': 'sqlite',
    'pymysql': 'mysql',
}


def get_dialect_name(obj: Any) -> str:
    """Dialect name of a ConnectionWrapper, SQLAlchemy connection/engine or
    raw DBAPI connection.

    Objects with a string `dialect` attribute (test doubles included) are
    taken at their word.
    """
    dialect = getattr(obj, 'dialect', None)
    if isinstance(dialect, str):
        return dialect.lower()
    if dialect is not None and hasattr(dialect, 'name'):
        return str(dialect.name).lower()

    for attr in ('engine', 'sa_connection', 'dbapi_connection', 'driver_connection'):
        inner = getattr(obj, attr, None)
        if inner is not None:
            return get_dialect_name(inner)

    module = type(obj).__module__.split('.')[0]
    if module in _DRIVER_DIALECTS:
        return _DRIVER_DIALECTS[module]

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def ensure_commit(connection: Any) -> None:
    """Commit any open transaction on a DBAPI connection before it is closed.

    A failed commit is logged, not raised.
    """
    try:
        connection.commit()
    except Exception as e:
        logger.warning(f'Could not commit before close: {e}')
