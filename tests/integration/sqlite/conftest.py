"""
Fixtures for SQLite-specific integration tests.
"""
import sqldatabase as db
import pytest


@pytest.fixture
def sqlite_file_conn(tmp_path):
    """File-based SQLite connection for testing persistence across connections."""
    db_file = str(tmp_path / 'test_sqlite.db')

    conn = db.connect({
        'drivername': 'sqlite',
        'database': db_file
    })

    create_table = """
    CREATE TABLE test_table (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        value INTEGER
    )
    """
    db.execute(conn, create_table)

    yield conn, db_file

    conn.close()
