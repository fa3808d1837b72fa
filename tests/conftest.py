import pathlib
import site

import pytest
from sqldatabase.diagnostics import AllocationTracker

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture
def allocation_tracker():
    """Fresh allocation counters for each test."""
    return AllocationTracker()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
