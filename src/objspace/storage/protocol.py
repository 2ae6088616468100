"""Storage protocol for swappable backends.

The storage layer owns entity identity and per-entity records (instance
state, nominal class, eigenclass link, behavior tables), enabling:
- Local in-memory (default)
- Persistent or sharded (future)

Usage:
    storage = LocalStorage()
    space = ObjectSpace(storage=storage)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, TypeVar

from objspace.core.identity import EntityId

T = TypeVar("T")


class Storage(Protocol):
    """Abstract storage interface. Implementations handle actual data.

    Accessing a record of a dead entity raises UseAfterFreeError.
    """

    def create_entity(self) -> EntityId:
        """Allocate new entity."""
        ...

    def ensure_entity(self, entity: EntityId) -> None:
        """Make a reserved root id alive, bypassing allocation."""
        ...

    def destroy_entity(self, entity: EntityId) -> None:
        """Remove entity and all its records."""
        ...

    def entity_exists(self, entity: EntityId) -> bool:
        """Check if entity is alive."""
        ...

    def get_record(self, entity: EntityId, record_type: type[T]) -> T | None:
        """Get record from entity (live object, not a copy)."""
        ...

    def set_record(self, entity: EntityId, record: Any) -> None:
        """Set/replace record on entity."""
        ...

    def remove_record(self, entity: EntityId, record_type: type) -> bool:
        """Remove record from entity. Returns True if existed."""
        ...

    def has_record(self, entity: EntityId, record_type: type) -> bool:
        """Check if entity has record."""
        ...

    def record_types(self, entity: EntityId) -> frozenset[type]:
        """Get all record types on entity."""
        ...

    def query(self, *record_types: type) -> Iterator[tuple[EntityId, tuple[Any, ...]]]:
        """Find entities with all specified records."""
        ...
