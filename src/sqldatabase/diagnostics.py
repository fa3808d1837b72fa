"""Allocation bookkeeping for leak audits of queries and rows.

A tracker is handed to the objects it should count; nothing is counted
process-wide, so each test (or each audited unit of work) gets its own
figures.

    tracker = AllocationTracker()
    query = cn.send_query('select * from t', tracker=tracker)
    ...
    del query
    assert tracker.remainder() == 0
"""
import logging
import weakref
from collections import Counter
from typing import Any

logger = logging.getLogger(__name__)


class AllocationTracker:
    """Count allocations and deallocations per object kind.
    """

    def __init__(self) -> None:
        self.allocations: Counter[str] = Counter()
        self.deallocations: Counter[str] = Counter()

    def track(self, obj: Any, kind: str | None = None) -> Any:
        """Count `obj` as allocated and register its deallocation."""
        kind = kind or type(obj).__name__
        self.allocations[kind] += 1
        weakref.finalize(obj, self._release, kind)
        return obj

    def _release(self, kind: str) -> None:
        self.deallocations[kind] += 1

    def remainder(self, kind: str | None = None) -> int:
        """Objects still alive, for one kind or all kinds."""
        if kind is not None:
            return self.allocations[kind] - self.deallocations[kind]
        return sum(self.allocations.values()) - sum(self.deallocations.values())

    def __repr__(self) -> str:
        kinds = sorted(self.allocations)
        summary = ', '.join(f'{k}={self.allocations[k]}/{self.deallocations[k]}' for k in kinds)
        return f'AllocationTracker({summary})'
