"""
Batch inserts against a real SQLite database.
"""
import datetime

import sqldatabase as db
import numpy as np
import pytest
from sqldatabase import BatchInsertStatement, QueryError


def _names(cn):
    query = db.send_query(cn, 'SELECT name FROM test_table ORDER BY id')
    return [row.get_string('name') for row in query]


def test_batch_insert_round_trip(sqlite_conn):
    """Test entries flushed in several statements all arrive"""
    stmt = BatchInsertStatement(sqlite_conn, 'test_table', inserts_per_flush=2)
    for field in ('name', 'value', 'score', 'created'):
        stmt.add_field(field)
    stmt.start()

    for i, name in enumerate(['Diana', "O'Brien", 'Eve']):
        stmt.begin_entry()
        stmt.put_string(name)
        stmt.put_int(40 + i)
        stmt.put_double(0.5 * i)
        stmt.put_timestamp(1169805600 + i)
        stmt.end_entry()

    assert stmt.finish() == 3
    assert stmt.flushes == 2
    assert stmt.affected_rows == 3

    query = db.send_query(sqlite_conn, 'SELECT * FROM test_table WHERE value >= 40 ORDER BY value')
    rows = list(query)
    assert [r.get_string('name') for r in rows] == ['Diana', "O'Brien", 'Eve']
    assert rows[2].get_double('score') == 1.0
    assert rows[1].get_timestamp('created') == 1169805601
    assert db.last_insert_id(sqlite_conn) == 6


def test_batch_insert_ignore(sqlite_conn):
    """Test duplicate keys are skipped with insert_ignore"""
    sent = db.batch_insert(sqlite_conn, 'test_table', ['name', 'value'],
                           [('Alice', 99), ('Frank', 60)], insert_ignore=True)
    assert sent == 2
    assert _names(sqlite_conn) == ['Alice', 'Bob', 'Charlie', 'Frank']

    query = db.send_query(sqlite_conn, "SELECT value FROM test_table WHERE name = 'Alice'")
    assert query.get_row().get_int('value') == 10


def test_batch_insert_duplicate_fails(sqlite_conn):
    """Test a rejected flush raises and its tuples are not resent"""
    stmt = BatchInsertStatement(sqlite_conn, 'test_table', inserts_per_flush=2)
    stmt.add_field('name')
    stmt.add_field('value')

    stmt.add_entry(['Gina', 70])
    with pytest.raises(QueryError) as exc_info:
        stmt.add_entry(['Alice', 80])
    assert 'UNIQUE' in exc_info.value.error_text

    stmt.add_entry(['Hank', 90])
    assert stmt.finish() == 1
    assert _names(sqlite_conn) == ['Alice', 'Bob', 'Charlie', 'Hank']


def test_batch_insert_values(sqlite_conn):
    """Test NumPy values and NULLs through add_entry"""
    rows = [
        (np.str_('Ivy'), np.int64(7), np.float64('nan'), datetime.datetime(2007, 1, 26, 10)),
        ('Jack', None, np.float32(2.5), None),
    ]
    db.batch_insert(sqlite_conn, 'test_table', ['name', 'value', 'score', 'created'], rows)

    query = db.send_query(sqlite_conn, "SELECT * FROM test_table WHERE name IN ('Ivy', 'Jack') ORDER BY name")
    ivy, jack = list(query)
    assert ivy.get_int('value') == 7
    assert ivy.is_field_null('score')
    assert ivy.get_timestamp('created') == 1169805600
    assert jack.get_nullable_int('value') is None
    assert jack.get_float('score') == 2.5


def test_batch_default_threshold_from_config(sqlite_config_conn):
    """Test the config batch size drives automatic flushing"""
    db.execute(sqlite_config_conn, 'CREATE TABLE t (a INTEGER)')
    stmt = BatchInsertStatement(sqlite_config_conn, 't')
    stmt.add_field('a')
    with stmt:
        for i in range(5):
            stmt.add_entry([i])
    assert stmt.flushes == 3
    assert db.send_query(sqlite_config_conn, 'SELECT a FROM t').num_rows() == 5


if __name__ == '__main__':
    __import__('pytest').main([__file__])
