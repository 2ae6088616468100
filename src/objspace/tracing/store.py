"""In-memory bounded dispatch trace store."""

from __future__ import annotations

import threading
from collections import deque

from objspace.tracing.models import DispatchRecord


class InMemoryTraceStore:
    """Keeps the most recent dispatch records in a bounded buffer.

    Args:
        max_records: Buffer size; the oldest record is evicted when full.
    """

    def __init__(self, max_records: int = 1000):
        if max_records < 1:
            raise ValueError("max_records must be positive")
        self._records: deque[DispatchRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def record_dispatch(self, record: DispatchRecord) -> None:
        with self._lock:
            self._records.append(record)

    def records(self) -> list[DispatchRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    @property
    def record_count(self) -> int:
        with self._lock:
            return len(self._records)
