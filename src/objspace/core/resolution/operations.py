"""Pure linearization and lookup functions over the behavior graph.

These functions never mutate anything. They take a ``lookup`` callable that
maps a behavior id to its Behavior record, so they can run against any
storage backend (or a hand-built dict in tests).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from objspace.core.behavior import Behavior, MissingHandler
from objspace.core.identity import EntityId
from objspace.core.resolution.models import Found, NotFound, Resolution

BehaviorLookup = Callable[[EntityId], Behavior]


def _dedupe(ids: Iterable[EntityId]) -> list[EntityId]:
    """Keep the first (most specific) occurrence of each id."""
    seen: set[EntityId] = set()
    ordered: list[EntityId] = []
    for entity in ids:
        if entity not in seen:
            seen.add(entity)
            ordered.append(entity)
    return ordered


def expand_level(behavior: EntityId, lookup: BehaviorLookup) -> list[EntityId]:
    """One hierarchy level: the behavior, then its modules most recent first.

    Each module is expanded depth-first with its own includes before the next
    (older) module, so a module's dependencies sit directly behind it.

    Args:
        behavior: Class, module or eigenclass id.
        lookup: Behavior record accessor.

    Returns:
        Ordered ids for this level, deduplicated.
    """

    def walk(current: EntityId) -> Iterator[EntityId]:
        yield current
        for module in reversed(lookup(current).includes):
            yield from walk(module)

    return _dedupe(walk(behavior))


def superclass_chain(cls: EntityId, lookup: BehaviorLookup) -> list[EntityId]:
    """The class followed by each superclass up to the root."""
    chain: list[EntityId] = []
    current: EntityId | None = cls
    while current is not None:
        chain.append(current)
        current = lookup(current).superclass
    return chain


def linearize_ancestors(behavior: EntityId, lookup: BehaviorLookup) -> list[EntityId]:
    """Full ancestor order of a behavior, most specific first.

    For a class: own table, own modules, then the same for each superclass.
    For a module or eigenclass (no superclass): the expanded single level.
    """
    levels: list[EntityId] = []
    for cls in superclass_chain(behavior, lookup):
        levels.extend(expand_level(cls, lookup))
    return _dedupe(levels)


def build_lookup_chain(
    eigen_levels: Iterable[EntityId],
    nominal: EntityId,
    lookup: BehaviorLookup,
) -> list[EntityId]:
    """Lookup chain of an entity.

    Args:
        eigen_levels: Eigenclasses to search before the nominal class, most
            specific first (the entity's own, then for class objects those of
            its superclasses that exist).
        nominal: The entity's nominal class.
        lookup: Behavior record accessor.

    Returns:
        Deduplicated chain: eigen levels with their modules, then the nominal
        class ancestors.
    """
    chain: list[EntityId] = []
    for eigen in eigen_levels:
        chain.extend(expand_level(eigen, lookup))
    chain.extend(linearize_ancestors(nominal, lookup))
    return _dedupe(chain)


def find_method(chain: Iterable[EntityId], name: str, lookup: BehaviorLookup) -> Resolution:
    """First entry for name along the chain.

    An undef tombstone stops the search: the name is NotFound even if a
    farther behavior defines it.
    """
    for behavior in chain:
        entry = lookup(behavior).methods.get(name)
        if entry is None:
            continue
        if entry.undefined:
            return NotFound(name)
        return Found(entry)
    return NotFound(name)


def find_after(
    chain: list[EntityId], owner: EntityId, name: str, lookup: BehaviorLookup
) -> Resolution:
    """Resolve name starting just past owner in the chain (super semantics)."""
    try:
        start = chain.index(owner) + 1
    except ValueError:
        return NotFound(name)
    return find_method(chain[start:], name, lookup)


def find_missing_handler(
    chain: Iterable[EntityId], lookup: BehaviorLookup
) -> tuple[EntityId, MissingHandler] | None:
    """First behavior in the chain with a registered missing-method handler."""
    for behavior in chain:
        handler = lookup(behavior).missing_handler
        if handler is not None:
            return behavior, handler
    return None


def creates_superclass_cycle(
    cls: EntityId, superclass: EntityId, lookup: BehaviorLookup
) -> bool:
    """Check whether making superclass the parent of cls would close a loop."""
    return cls in superclass_chain(superclass, lookup)


def creates_include_cycle(target: EntityId, module: EntityId, lookup: BehaviorLookup) -> bool:
    """Check whether including module into target would close a loop.

    A loop exists when target is the module itself or is reachable from the
    module through nested includes.
    """
    return target in expand_level(module, lookup)
