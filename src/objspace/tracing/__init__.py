"""Tracing infrastructure for recording dispatch activity.

This module provides a protocol and data structures for capturing each
dispatch's walk through the state machine, enabling debugging of resolution
and fallback behavior.

Usage:
    from objspace.tracing import InMemoryTraceStore

    store = InMemoryTraceStore(max_records=100)
    space = ObjectSpace(tracer=store)
    space.dispatch(obj, "greet")
    store.records()[-1].outcome  # DispatchState.DONE
"""

from objspace.tracing.models import DispatchRecord, DispatchState
from objspace.tracing.protocol import DispatchTracer
from objspace.tracing.store import InMemoryTraceStore

__all__ = [
    "DispatchRecord",
    "DispatchState",
    "DispatchTracer",
    "InMemoryTraceStore",
]
