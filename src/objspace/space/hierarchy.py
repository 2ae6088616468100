"""Module/class graph: superclass links, inclusion lists and method tables.

Usage:
    animal = space.define_class("Animal")
    walker = space.define_module("Walker")
    dog = space.define_class("Dog", superclass=animal)
    space.include(dog, walker)
    space.define_instance_method(dog, "speak", lambda self: "woof")
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from objspace.core.behavior import Behavior, BehaviorKind, InstanceState, MissingHandler, Nominal
from objspace.core.errors import CyclicHierarchyError, MethodNotFoundError
from objspace.core.identity import EntityId, RootEntity
from objspace.core.method import MethodEntry, Visibility, compute_arity
from objspace.core.resolution import (
    NotFound,
    creates_include_cycle,
    creates_superclass_cycle,
    find_method,
    linearize_ancestors,
)
from objspace.space.methods import BoundMethod, UnboundMethod

if TYPE_CHECKING:
    from objspace.space.space import ObjectSpace

logger = logging.getLogger(__name__)

_ROOT_NAMES = {
    RootEntity.OBJECT: "Object",
    RootEntity.MODULE: "Module",
    RootEntity.CLASS: "Class",
}


def _undefined_body(receiver: Any, *args: Any, **kwargs: Any) -> Any:
    """Placeholder body for undef tombstones; resolution stops before calling it."""
    raise MethodNotFoundError("<undefined>", len(args), receiver.id)


class ClassGraph:
    """Owns behavior creation and every mutation of the class/module graph.

    All mutations validate first and write last, under the space lock, so a
    failing call leaves the graph untouched.

    Args:
        space: Owning ObjectSpace.
    """

    def __init__(self, space: ObjectSpace):
        self._space = space
        self._constants: dict[str, EntityId] = {}

    # Bootstrap

    def bootstrap(self) -> None:
        """Create Object, Module and Class; Class is its own nominal class."""
        storage = self._space.storage
        superclasses = {
            RootEntity.OBJECT: None,
            RootEntity.MODULE: RootEntity.OBJECT,
            RootEntity.CLASS: RootEntity.MODULE,
        }
        for root in RootEntity.all():
            if storage.entity_exists(root):
                continue
            storage.ensure_entity(root)
            storage.set_record(root, InstanceState())
            storage.set_record(root, Nominal(RootEntity.CLASS))
            storage.set_record(
                root,
                Behavior(
                    kind=BehaviorKind.CLASS,
                    name=_ROOT_NAMES[root],
                    superclass=superclasses[root],
                ),
            )
            self._constants[_ROOT_NAMES[root]] = root

    def new_behavior(
        self,
        kind: BehaviorKind,
        name: str | None = None,
        superclass: EntityId | None = None,
        attached: EntityId | None = None,
    ) -> EntityId:
        """Allocate an entity carrying a fresh Behavior. Nominal class is Class."""
        storage = self._space.storage
        entity = storage.create_entity()
        storage.set_record(entity, InstanceState())
        storage.set_record(entity, Nominal(RootEntity.CLASS))
        storage.set_record(
            entity, Behavior(kind=kind, name=name, superclass=superclass, attached=attached)
        )
        return entity

    # Validation helpers

    def behavior(self, entity: EntityId) -> Behavior:
        """Behavior record of entity.

        Raises:
            UseAfterFreeError: If entity is dead.
            TypeError: If entity is not a class, module or eigenclass.
        """
        record = self._space.storage.get_record(entity, Behavior)
        if record is None:
            raise TypeError(f"{self._space.describe(entity)} is not a class or module")
        return record

    def behavior_or_none(self, entity: EntityId) -> Behavior | None:
        return self._space.storage.get_record(entity, Behavior)

    def _require_kind(self, entity: EntityId, *kinds: BehaviorKind) -> Behavior:
        record = self.behavior(entity)
        if record.kind not in kinds:
            expected = " or ".join(k.name.lower() for k in kinds)
            raise TypeError(f"{self.name_of(entity)} is not a {expected}")
        return record

    # Definition

    def define_class(
        self, name: str | None = None, superclass: EntityId | None = None
    ) -> EntityId:
        """Create a class, or reopen the class already bound to name.

        Args:
            name: Constant name; None creates an anonymous class.
            superclass: Parent class; defaults to Object.

        Returns:
            The new or reopened class id.

        Raises:
            TypeError: If superclass is not a class, name is bound to a
                non-class, or an explicit superclass conflicts with the
                reopened class's superclass.
        """
        with self._space.lock:
            if superclass is not None:
                self._require_kind(superclass, BehaviorKind.CLASS)
            if name is not None and name in self._constants:
                existing = self._constants[name]
                record = self.behavior(existing)
                if not record.is_class():
                    raise TypeError(f"{name} is not a class")
                if superclass is not None and record.superclass != superclass:
                    raise TypeError(f"superclass mismatch for class {name}")
                logger.debug("Reopened class %s", name)
                return existing

            parent = superclass if superclass is not None else RootEntity.OBJECT
            cls = self.new_behavior(BehaviorKind.CLASS, name=name, superclass=parent)
            if name is not None:
                self._constants[name] = cls
            logger.debug("Defined class %s < %s", self.name_of(cls), self.name_of(parent))
            return cls

    def define_module(self, name: str | None = None) -> EntityId:
        """Create a module, or reopen the module already bound to name.

        Raises:
            TypeError: If name is bound to something other than a module.
        """
        with self._space.lock:
            if name is not None and name in self._constants:
                existing = self._constants[name]
                if not self.behavior(existing).is_module():
                    raise TypeError(f"{name} is not a module")
                logger.debug("Reopened module %s", name)
                return existing

            module = self.new_behavior(BehaviorKind.MODULE, name=name)
            if name is not None:
                self._constants[name] = module
            logger.debug("Defined module %s", self.name_of(module))
            return module

    def reopen(self, behavior: EntityId) -> EntityId:
        """Return behavior itself for further additive mutation."""
        self.behavior(behavior)
        return behavior

    def include(self, target: EntityId, module: EntityId) -> None:
        """Append module to target's inclusion list.

        Re-including follows the configured policy: "keep" leaves the module
        where it is, "move_to_front" makes it the most recently included.

        Raises:
            TypeError: If module is not a module.
            CyclicHierarchyError: If the inclusion would close a loop.
        """
        with self._space.lock:
            record = self.behavior(target)
            self._require_kind(module, BehaviorKind.MODULE)
            if creates_include_cycle(target, module, self.behavior):
                raise CyclicHierarchyError(
                    f"including {self.name_of(module)} into {self.name_of(target)} creates a cycle"
                )
            if module in record.includes:
                if self._space.settings.reinclude == "move_to_front":
                    record.includes.remove(module)
                    record.includes.append(module)
                    logger.debug(
                        "Moved %s to front of %s", self.name_of(module), self.name_of(target)
                    )
                return
            record.includes.append(module)
            logger.debug("Included %s into %s", self.name_of(module), self.name_of(target))

    def set_superclass(self, cls: EntityId, superclass: EntityId) -> None:
        """Relink cls under superclass.

        Raises:
            TypeError: If either side is not a class.
            CyclicHierarchyError: If cls already appears in superclass's chain.
        """
        with self._space.lock:
            record = self._require_kind(cls, BehaviorKind.CLASS)
            self._require_kind(superclass, BehaviorKind.CLASS)
            if creates_superclass_cycle(cls, superclass, self.behavior):
                raise CyclicHierarchyError(
                    f"{self.name_of(superclass)} already descends from {self.name_of(cls)}"
                )
            record.superclass = superclass
            logger.debug("Set superclass of %s to %s", self.name_of(cls), self.name_of(superclass))

    def define_method(
        self,
        behavior: EntityId,
        name: str,
        body: Callable[..., Any] | BoundMethod | UnboundMethod,
        visibility: Visibility = Visibility.PUBLIC,
    ) -> MethodEntry:
        """Insert (or overwrite) name in behavior's method table.

        A BoundMethod or UnboundMethod body is rebound: its body is reused
        with behavior as the new owner.

        Raises:
            TypeError: If a rebound method's class owner is not an ancestor of behavior.
        """
        with self._space.lock:
            record = self.behavior(behavior)
            if isinstance(body, (BoundMethod, UnboundMethod)):
                source = body.entry
                self._check_rebind_target(behavior, record, source)
                entry = MethodEntry(
                    name=name,
                    body=source.body,
                    owner=behavior,
                    visibility=visibility,
                    arity=source.arity,
                )
            else:
                entry = MethodEntry(
                    name=name,
                    body=body,
                    owner=behavior,
                    visibility=visibility,
                    arity=compute_arity(body),
                )

            previous = record.methods.get(name)
            if previous is not None and not previous.undefined:
                if self._space.settings.warn_on_redefine:
                    warnings.warn(
                        f"method redefined; discarding old {name} in {self.name_of(behavior)}",
                        stacklevel=3,
                    )
                logger.debug("Redefined %s#%s", self.name_of(behavior), name)
            else:
                logger.debug("Defined %s#%s", self.name_of(behavior), name)
            record.methods[name] = entry
            return entry

    def _check_rebind_target(self, behavior: EntityId, record: Behavior, source: MethodEntry) -> None:
        source_owner = self.behavior(source.owner)
        if not source_owner.is_class():
            return
        if record.is_eigenclass() and record.attached is not None:
            compatible = self._space.is_a(record.attached, source.owner)
        else:
            compatible = source.owner in linearize_ancestors(behavior, self.behavior)
        if not compatible:
            raise TypeError(
                f"bind argument must be a subclass of {self.name_of(source.owner)}"
            )

    def remove_method(self, behavior: EntityId, name: str) -> None:
        """Drop name from behavior's own table; inherited definitions show through.

        Raises:
            MethodNotFoundError: If behavior's own table lacks name.
        """
        with self._space.lock:
            record = self.behavior(behavior)
            if name not in record.methods:
                raise MethodNotFoundError(name, 0, behavior)
            del record.methods[name]
            logger.debug("Removed %s#%s", self.name_of(behavior), name)

    def undef_method(self, behavior: EntityId, name: str) -> None:
        """Block name for behavior and its descendants, even if ancestors define it.

        Raises:
            MethodNotFoundError: If name does not currently resolve from behavior.
        """
        with self._space.lock:
            record = self.behavior(behavior)
            if isinstance(find_method(self.ancestors(behavior), name, self.behavior), NotFound):
                raise MethodNotFoundError(name, 0, behavior)
            record.methods[name] = MethodEntry(
                name=name, body=_undefined_body, owner=behavior, undefined=True
            )
            logger.debug("Undefined %s#%s", self.name_of(behavior), name)

    def set_visibility(self, behavior: EntityId, name: str, visibility: Visibility) -> MethodEntry:
        """Change visibility of name as seen from behavior.

        An inherited method is copied into behavior's own table with the new
        visibility; the ancestor's entry is left alone.

        Raises:
            MethodNotFoundError: If name does not resolve from behavior.
        """
        with self._space.lock:
            record = self.behavior(behavior)
            own = record.methods.get(name)
            if own is not None and not own.undefined:
                entry = own.with_visibility(visibility)
            else:
                resolution = find_method(self.ancestors(behavior), name, self.behavior)
                if isinstance(resolution, NotFound):
                    raise MethodNotFoundError(name, 0, behavior)
                entry = resolution.entry.rebind_owner(behavior).with_visibility(visibility)
            record.methods[name] = entry
            logger.debug("Set %s#%s %s", self.name_of(behavior), name, visibility.value)
            return entry

    def define_missing_handler(self, behavior: EntityId, handler: MissingHandler) -> None:
        """Register the fallback consulted when resolution fails."""
        with self._space.lock:
            self.behavior(behavior).missing_handler = handler
            logger.debug("Registered missing handler on %s", self.name_of(behavior))

    def remove_missing_handler(self, behavior: EntityId) -> None:
        with self._space.lock:
            self.behavior(behavior).missing_handler = None

    # Constants

    def assign_constant(self, name: str, entity: EntityId) -> None:
        """Bind name to entity. An anonymous behavior takes the name on first binding."""
        with self._space.lock:
            self._space.require_alive(entity)
            if name in self._constants and self._constants[name] != entity:
                warnings.warn(f"already initialized constant {name}", stacklevel=3)
            self._constants[name] = entity
            record = self._space.storage.get_record(entity, Behavior)
            if record is not None and record.name is None and not record.is_eigenclass():
                record.name = name

    def lookup_constant(self, name: str) -> EntityId:
        """Entity bound to name.

        Raises:
            KeyError: If name is unbound.
        """
        try:
            return self._constants[name]
        except KeyError:
            raise KeyError(f"uninitialized constant {name}") from None

    def constants(self) -> dict[str, EntityId]:
        return dict(self._constants)

    # Introspection

    def name_of(self, behavior: EntityId) -> str:
        record = self.behavior(behavior)
        if record.name is not None:
            return record.name
        if record.is_eigenclass() and record.attached is not None:
            return f"#<Class:{self._space.describe(record.attached)}>"
        label = "Module" if record.is_module() else "Class"
        return f"#<{label}:{behavior!r}>"

    def superclass_of(self, cls: EntityId) -> EntityId | None:
        return self.behavior(cls).superclass

    def subclasses(self, cls: EntityId) -> list[EntityId]:
        """Direct subclasses of cls, in creation order."""
        with self._space.lock:
            self._require_kind(cls, BehaviorKind.CLASS)
            return [
                entity
                for entity, (record,) in self._space.storage.query(Behavior)
                if record.is_class() and record.superclass == cls
            ]

    def included_modules(self, behavior: EntityId) -> list[EntityId]:
        """Modules anywhere in behavior's ancestors, most specific first."""
        return [a for a in self.ancestors(behavior) if self.behavior(a).is_module()]

    def ancestors(self, behavior: EntityId) -> list[EntityId]:
        """Linearized ancestor order of a behavior, itself first."""
        with self._space.lock:
            return linearize_ancestors(behavior, self.behavior)

    def _method_names(
        self, behavior: EntityId, inherited: bool, private: bool
    ) -> Iterator[str]:
        seen: set[str] = set()
        sources = self.ancestors(behavior) if inherited else [behavior]
        for source in sources:
            for name, entry in self.behavior(source).methods.items():
                if name in seen:
                    continue
                seen.add(name)
                if entry.undefined:
                    continue
                if (entry.visibility is Visibility.PRIVATE) == private:
                    yield name

    def instance_methods(self, behavior: EntityId, inherited: bool = True) -> list[str]:
        """Public and protected method names reachable from behavior."""
        with self._space.lock:
            return list(self._method_names(behavior, inherited, private=False))

    def private_instance_methods(self, behavior: EntityId, inherited: bool = True) -> list[str]:
        with self._space.lock:
            return list(self._method_names(behavior, inherited, private=True))

    def method_defined(self, behavior: EntityId, name: str) -> bool:
        """True if name resolves from behavior to a public or protected method."""
        with self._space.lock:
            resolution = find_method(self.ancestors(behavior), name, self.behavior)
        if isinstance(resolution, NotFound):
            return False
        return resolution.entry.visibility is not Visibility.PRIVATE
