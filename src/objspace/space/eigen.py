"""Eigenclass manager: lazily created, exclusively owned singleton classes.

Usage:
    eig = space.eigenclass_of(obj)          # created on first call
    assert space.eigenclass_of(obj) == eig  # same instance afterwards
    space.define_singleton_method(obj, "shout", lambda self: "HEY")

    # Class-level methods are singleton methods on the class object
    space.define_singleton_method(User, "create", lambda cls: ...)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from objspace.core.behavior import BehaviorKind, Singleton
from objspace.core.identity import EntityId
from objspace.core.method import MethodEntry, Visibility
from objspace.core.resolution import expand_level, superclass_chain

if TYPE_CHECKING:
    from objspace.space.space import ObjectSpace

logger = logging.getLogger(__name__)


class EigenclassManager:
    """Creates and tracks the eigenclass of each entity.

    An eigenclass is never shared and never reported as an entity's class.
    Its own nominal class is Class. It lives exactly as long as its owner.

    Args:
        space: Owning ObjectSpace.
    """

    def __init__(self, space: ObjectSpace):
        self._space = space

    def peek(self, entity: EntityId) -> EntityId | None:
        """Eigenclass of entity if it exists, without creating one."""
        singleton = self._space.storage.get_record(entity, Singleton)
        return singleton.eigenclass if singleton is not None else None

    def has_eigenclass(self, entity: EntityId) -> bool:
        return self.peek(entity) is not None

    def eigenclass_of(self, entity: EntityId) -> EntityId:
        """Eigenclass of entity, creating and attaching it on first use.

        Raises:
            UseAfterFreeError: If entity is dead.
        """
        with self._space.lock:
            existing = self.peek(entity)
            if existing is not None:
                return existing
            eigenclass = self._space.graph.new_behavior(BehaviorKind.EIGENCLASS, attached=entity)
            self._space.storage.set_record(entity, Singleton(eigenclass))
            logger.debug("Created eigenclass for %s", self._space.describe(entity))
            return eigenclass

    def define_singleton_method(
        self,
        entity: EntityId,
        name: str,
        body: Callable[..., Any],
        visibility: Visibility = Visibility.PUBLIC,
    ) -> MethodEntry:
        """Define name on entity's eigenclass only."""
        with self._space.lock:
            self._space.require_alive(entity)
            return self._space.graph.define_method(
                self.eigenclass_of(entity), name, body, visibility
            )

    def extend(self, entity: EntityId, module: EntityId) -> None:
        """Mix module into entity alone by including it into the eigenclass.

        Raises:
            TypeError: If module is not a module (no eigenclass is created).
        """
        with self._space.lock:
            record = self._space.graph.behavior(module)
            if not record.is_module():
                raise TypeError(f"{self._space.graph.name_of(module)} is not a module")
            self._space.graph.include(self.eigenclass_of(entity), module)

    def singleton_methods(self, entity: EntityId) -> list[str]:
        """Public and protected names on entity's eigenclass and extended modules."""
        with self._space.lock:
            eigenclass = self.peek(entity)
            if eigenclass is None:
                return []
            names: list[str] = []
            seen: set[str] = set()
            for behavior in expand_level(eigenclass, self._space.graph.behavior):
                for name, entry in self._space.graph.behavior(behavior).methods.items():
                    if name in seen:
                        continue
                    seen.add(name)
                    if not entry.undefined and entry.visibility is not Visibility.PRIVATE:
                        names.append(name)
            return names

    def eigen_levels(self, entity: EntityId) -> list[EntityId]:
        """Eigenclasses searched before the nominal class, most specific first.

        For a class object, the existing eigenclasses of its superclasses
        follow its own, so class-level methods are inherited.
        """
        levels: list[EntityId] = []
        own = self.peek(entity)
        if own is not None:
            levels.append(own)
        record = self._space.graph.behavior_or_none(entity)
        if record is not None and record.is_class():
            for ancestor in superclass_chain(entity, self._space.graph.behavior)[1:]:
                eigenclass = self.peek(ancestor)
                if eigenclass is not None:
                    levels.append(eigenclass)
        return levels
