"""
SQL text helpers.

Literal escaping and quoting for the dialects the package speaks, plus the
date and boolean encoders used when SQL text is assembled by hand:

- `escape_string()` - Escape text for use inside a quoted literal
- `escape_quote_string()` - Escape and wrap in single quotes
- `quote_identifier()` - Quote table/column names
- `encode_date()` / `encode_quote_date()` - Epoch seconds to DATETIME text
- `encode_boolean_int()` - Boolean to 1/0
"""
from sqldatabase.types import epoch_to_civil

# mysql_real_escape_string() character map
_MYSQL_ESCAPES = str.maketrans({
    '\0': '\\0',
    '\n': '\\n',
    '\r': '\\r',
    '\\': '\\\\',
    "'": "\\'",
    '"': '\\"',
    '\x1a': '\\Z',
})


def escape_string(value: str, dialect: str = 'postgresql') -> str:
    """Escape text for use inside a single-quoted SQL literal.

    Parameters
        value: Text to escape
        dialect: Database dialect

    Returns
        Escaped text without surrounding quotes

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect == 'mysql':
        return value.translate(_MYSQL_ESCAPES)

    if dialect in {'postgresql', 'sqlite'}:
        return value.replace("'", "''")

    raise ValueError(f'Unknown dialect: {dialect}')


def escape_quote_string(value: str, dialect: str = 'postgresql') -> str:
    """Escape text and wrap it in single quotes.
    """
    return f"'{escape_string(value, dialect)}'"


def quote_identifier(identifier: str, dialect: str = 'postgresql') -> str:
    """Safely quote database identifiers.

    Parameters
        identifier: Table or column name
        dialect: Database dialect

    Returns
        Quoted identifier

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect in {'postgresql', 'sqlite'}:
        return '"' + identifier.replace('"', '""') + '"'

    if dialect == 'mysql':
        return '`' + identifier.replace('`', '``') + '`'

    raise ValueError(f'Unknown dialect: {dialect}')


def encode_date(unix_timestamp: int | float) -> str:
    """Render epoch seconds as `YYYY-MM-DD HH:MM:SS` civil (UTC) time.
    """
    return epoch_to_civil(int(unix_timestamp)).strftime('%Y-%m-%d %H:%M:%S')


def encode_quote_date(unix_timestamp: int | float) -> str:
    return f"'{encode_date(unix_timestamp)}'"


def encode_boolean_int(boolean: bool) -> int:
    return 1 if boolean else 0
