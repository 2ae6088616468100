"""Entity identity models.

Usage:
    entity = EntityId(shard=0, index=42, generation=1)
    root = RootEntity.OBJECT
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EntityId:
    """Lightweight entity identifier with generation for safe handle reuse.

    Objects, classes, modules and eigenclasses all share this identity space.
    A recycled index comes back with a higher generation, so a stale id never
    aliases the entity that replaced it.
    """

    shard: int = 0  # 0 = local, >0 = remote shard
    index: int = 0
    generation: int = 0

    def __hash__(self) -> int:
        return hash((self.shard, self.index, self.generation))

    def __repr__(self) -> str:
        return f"EntityId({self.shard}:{self.index}:{self.generation})"

    def is_local(self) -> bool:
        """Check if this entity belongs to the local shard.

        Returns:
            True if entity is on shard 0 (local), False otherwise.
        """
        return self.shard == 0


class RootEntity:
    """Reserved entity IDs for the bootstrap behaviors. Always on shard 0.

    OBJECT is the universal base class. CLASS is its own nominal class, which
    closes the "classes are objects" loop.
    """

    OBJECT = EntityId(shard=0, index=0, generation=0)
    MODULE = EntityId(shard=0, index=1, generation=0)
    CLASS = EntityId(shard=0, index=2, generation=0)

    _RESERVED_COUNT = 16  # First 16 indices reserved

    @classmethod
    def all(cls) -> tuple[EntityId, ...]:
        """All reserved roots in bootstrap order."""
        return (cls.OBJECT, cls.MODULE, cls.CLASS)
