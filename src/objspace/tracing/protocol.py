"""Protocols for tracing infrastructure.

These protocols define the interface for dispatch trace backends, allowing
different implementations (in-memory, file, database).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from objspace.tracing.models import DispatchRecord


@runtime_checkable
class DispatchTracer(Protocol):
    """Protocol for storing dispatch records.

    Usage:
        store = InMemoryTraceStore(max_records=1000)
        space = ObjectSpace(tracer=store)

        # Later, inspect what happened
        for record in store.records():
            print(record.name, record.outcome)

    Thread Safety:
        Implementations should be thread-safe for concurrent access.
    """

    def record_dispatch(self, record: DispatchRecord) -> None:
        """Record a finished dispatch.

        Note:
            Implementations may have bounded storage. Older records may be
            evicted when the limit is reached.
        """
        ...

    def records(self) -> list[DispatchRecord]:
        """Stored records, oldest first."""
        ...

    def clear(self) -> None:
        """Clear all stored records."""
        ...

    @property
    def record_count(self) -> int:
        """Number of records currently stored."""
        ...
