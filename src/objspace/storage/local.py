"""Local in-memory storage implementation.

Simple dict-based storage suitable for single-process use and testing.

Usage:
    storage = LocalStorage()
    space = ObjectSpace(storage=storage)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, TypeVar, cast

from objspace.core.errors import UseAfterFreeError
from objspace.core.identity import EntityId
from objspace.storage.allocator import EntityAllocator

T = TypeVar("T")


class LocalStorage:
    """Simple in-memory storage using nested dicts.

    Structure:
        _records[entity][record_type] = record_instance

    Records are returned live: the object space mutates method tables and
    instance state in place, so every holder of an id sees the same state.

    Args:
        shard: Shard number for this storage instance (default 0 for local).
    """

    def __init__(self, shard: int = 0):
        self._shard = shard
        self._allocator = EntityAllocator(shard=shard)
        self._records: dict[EntityId, dict[type, Any]] = {}

    def _require_alive(self, entity: EntityId) -> dict[type, Any]:
        records = self._records.get(entity)
        if records is None or not self._allocator.is_alive(entity):
            raise UseAfterFreeError(entity)
        return records

    def create_entity(self) -> EntityId:
        """Create a new entity and return its ID.

        Returns:
            Newly allocated EntityId.
        """
        entity = self._allocator.allocate()
        self._records[entity] = {}
        return entity

    def ensure_entity(self, entity: EntityId) -> None:
        """Make a reserved root id alive.

        Args:
            entity: Reserved EntityId (index inside the reserved range).
        """
        if entity not in self._records:
            self._allocator.reserve(entity)
            self._records[entity] = {}

    def destroy_entity(self, entity: EntityId) -> None:
        """Destroy an entity and remove all its records.

        Args:
            entity: Entity to destroy.

        Raises:
            UseAfterFreeError: If the entity is already dead.
        """
        self._require_alive(entity)
        del self._records[entity]
        self._allocator.deallocate(entity)

    def entity_exists(self, entity: EntityId) -> bool:
        """Check if an entity exists and is alive.

        Args:
            entity: Entity to check.

        Returns:
            True if entity exists and is alive, False otherwise.
        """
        return entity in self._records and self._allocator.is_alive(entity)

    def get_record(self, entity: EntityId, record_type: type[T]) -> T | None:
        """Get a record from an entity.

        Args:
            entity: Entity to query.
            record_type: Type of record to retrieve.

        Returns:
            Record instance or None if not present.

        Raises:
            UseAfterFreeError: If the entity is dead.
        """
        return cast(T | None, self._require_alive(entity).get(record_type))

    def set_record(self, entity: EntityId, record: Any) -> None:
        """Set or replace a record on an entity (type inferred).

        Raises:
            UseAfterFreeError: If the entity is dead.
        """
        self._require_alive(entity)[type(record)] = record

    def remove_record(self, entity: EntityId, record_type: type) -> bool:
        """Remove a record from an entity.

        Returns:
            True if record was removed, False if not present.

        Raises:
            UseAfterFreeError: If the entity is dead.
        """
        records = self._require_alive(entity)
        if record_type in records:
            del records[record_type]
            return True
        return False

    def has_record(self, entity: EntityId, record_type: type) -> bool:
        """Check if an entity has a specific record type.

        Raises:
            UseAfterFreeError: If the entity is dead.
        """
        return record_type in self._require_alive(entity)

    def record_types(self, entity: EntityId) -> frozenset[type]:
        """Get all record types present on an entity.

        Raises:
            UseAfterFreeError: If the entity is dead.
        """
        return frozenset(self._require_alive(entity))

    def query(self, *record_types: type) -> Iterator[tuple[EntityId, tuple[Any, ...]]]:
        """Find entities with all specified records.

        O(n) scan over all entities.

        Yields:
            Tuples of (entity, (record1, record2, ...)) for each match.
        """
        type_set = set(record_types)
        for entity, records in list(self._records.items()):
            if not self._allocator.is_alive(entity):
                continue
            if type_set.issubset(records):
                yield entity, tuple(records[t] for t in record_types)
