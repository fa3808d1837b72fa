"""Unit tests for allocation tracking of queries and rows.
"""
import copy
import gc


def _query(cn, tracker):
    cn.add_result('select a', ['a'], [('1',), ('2',)])
    return cn.send_query('select a', tracker=tracker)


def test_tracks_query_and_rows(fake_connection, allocation_tracker):
    cn = fake_connection()
    query = _query(cn, allocation_tracker)
    rows = list(query)

    assert allocation_tracker.allocations['Query'] == 1
    assert allocation_tracker.allocations['Row'] == 2
    assert allocation_tracker.remainder() == 3

    del query, rows
    gc.collect()
    assert allocation_tracker.remainder() == 0
    assert allocation_tracker.deallocations['Row'] == 2


def test_row_keeps_query_alive(fake_connection, allocation_tracker):
    """Test the query outlives its handle while a row refers to it"""
    cn = fake_connection()
    query = _query(cn, allocation_tracker)
    row = query.get_row()
    del query
    gc.collect()

    assert allocation_tracker.remainder('Query') == 1
    assert row.get_int('a') == 1

    del row
    gc.collect()
    assert allocation_tracker.remainder() == 0


def test_copied_row_is_tracked(fake_connection, allocation_tracker):
    cn = fake_connection()
    query = _query(cn, allocation_tracker)
    row = query.get_row()
    clone = copy.copy(row)

    assert clone == row
    assert allocation_tracker.allocations['Row'] == 2
    del query, row, clone
    gc.collect()
    assert allocation_tracker.remainder() == 0


def test_untracked_query(fake_connection, allocation_tracker):
    """Test nothing is counted without a tracker"""
    cn = fake_connection()
    query = _query(cn, None)
    list(query)
    assert allocation_tracker.remainder() == 0
    assert 'Query' not in allocation_tracker.allocations


def test_repr(allocation_tracker):
    class Thing:
        pass

    thing = allocation_tracker.track(Thing())
    assert repr(allocation_tracker) == 'AllocationTracker(Thing=1/0)'
    del thing
    gc.collect()
    assert repr(allocation_tracker) == 'AllocationTracker(Thing=1/1)'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
