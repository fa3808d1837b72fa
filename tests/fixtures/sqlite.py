import config
import pytest
import sqldatabase as db


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database for testing"""
    conn = db.connect({
        'drivername': 'sqlite',
        'database': ':memory:'
    })

    create_table = """
    CREATE TABLE test_table (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        value INTEGER,
        score REAL,
        created DATETIME
    )
    """
    db.execute(conn, create_table)

    insert_data = """
    INSERT INTO test_table (name, value, score, created) VALUES
    ('Alice', 10, 1.5, '2007-01-26 10:00:00'),
    ('Bob', 20, NULL, NULL),
    ('Charlie', 30, -2.25, 'bad')
    """
    db.execute(conn, insert_data)

    yield conn
    conn.close()


@pytest.fixture
def sqlite_config_conn():
    """In-memory SQLite connection built from the test config module"""
    conn = db.connect('sqlite', config=config)
    yield conn
    conn.close()
