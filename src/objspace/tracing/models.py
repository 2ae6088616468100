"""Data models for tracing infrastructure.

These models are storage-agnostic and serialize to plain JSON-compatible dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from objspace.core.identity import EntityId


class DispatchState(Enum):
    """States of a single dispatch request."""

    RESOLVING = "resolving"
    RESOLVED = "resolved"
    INVOKING = "invoking"
    UNRESOLVED = "unresolved"
    FALLBACK_CHECK = "fallback_check"
    HANDLED = "handled"
    UNHANDLED = "unhandled"
    DONE = "done"
    ERROR = "error"

    def is_terminal(self) -> bool:
        return self in (DispatchState.DONE, DispatchState.ERROR)


_TRANSITIONS: dict[DispatchState, frozenset[DispatchState]] = {
    DispatchState.RESOLVING: frozenset(
        {DispatchState.RESOLVED, DispatchState.UNRESOLVED, DispatchState.ERROR}
    ),
    DispatchState.RESOLVED: frozenset({DispatchState.INVOKING, DispatchState.ERROR}),
    DispatchState.INVOKING: frozenset({DispatchState.DONE, DispatchState.ERROR}),
    DispatchState.UNRESOLVED: frozenset({DispatchState.FALLBACK_CHECK}),
    DispatchState.FALLBACK_CHECK: frozenset({DispatchState.HANDLED, DispatchState.UNHANDLED}),
    DispatchState.HANDLED: frozenset({DispatchState.DONE, DispatchState.ERROR}),
    DispatchState.UNHANDLED: frozenset({DispatchState.ERROR}),
    DispatchState.DONE: frozenset(),
    DispatchState.ERROR: frozenset(),
}


def can_transition(source: DispatchState, target: DispatchState) -> bool:
    """Check whether target is a legal successor of source."""
    return target in _TRANSITIONS[source]


@dataclass(slots=True)
class DispatchRecord:
    """Complete record of a single dispatch.

    Attributes:
        receiver: Entity that received the message.
        name: Method name requested.
        argc: Number of positional arguments.
        path: States visited, starting at RESOLVING.
        owner: Behavior that defined the invoked method, if resolved.
        error: Error message when the dispatch ended in ERROR.
        duration_ms: Wall time spent in dispatch, including the body.

    Example:
        record = DispatchRecord(receiver=obj, name="greet", argc=0)
        record.advance(DispatchState.RESOLVED)
    """

    receiver: EntityId
    name: str
    argc: int
    path: list[DispatchState] = field(default_factory=lambda: [DispatchState.RESOLVING])
    owner: EntityId | None = None
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def state(self) -> DispatchState:
        return self.path[-1]

    @property
    def outcome(self) -> DispatchState | None:
        """Terminal state, or None while the dispatch is in flight."""
        return self.state if self.state.is_terminal() else None

    def advance(self, target: DispatchState) -> None:
        """Move to target state.

        Raises:
            ValueError: If the transition is not part of the state machine.
        """
        if not can_transition(self.state, target):
            raise ValueError(f"Illegal dispatch transition {self.state.name} -> {target.name}")
        self.path.append(target)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "receiver": _entity_to_list(self.receiver),
            "name": self.name,
            "argc": self.argc,
            "path": [state.value for state in self.path],
            "duration_ms": self.duration_ms,
        }
        if self.owner is not None:
            result["owner"] = _entity_to_list(self.owner)
        if self.error is not None:
            result["error"] = self.error
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DispatchRecord:
        """Create from dictionary (for deserialization)."""
        owner = data.get("owner")
        return cls(
            receiver=EntityId(*data["receiver"]),
            name=data["name"],
            argc=data["argc"],
            path=[DispatchState(value) for value in data["path"]],
            owner=EntityId(*owner) if owner is not None else None,
            error=data.get("error"),
            duration_ms=data.get("duration_ms", 0.0),
        )


def _entity_to_list(entity: EntityId) -> list[int]:
    return [entity.shard, entity.index, entity.generation]
