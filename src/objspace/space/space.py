"""ObjectSpace: central coordinator for entities, classes and dispatch.

Usage:
    space = ObjectSpace()

    # Classes, modules, mixins
    greeter = space.define_module("Greeter")
    space.define_instance_method(greeter, "greet", lambda self: "hi")
    person = space.define_class("Person")
    space.include(person, greeter)

    # Instances and dispatch
    ann = space.instantiate(person)
    space.dispatch(ann, "greet")  # "hi"

    # Per-instance behavior
    space.define_singleton_method(ann, "greet", lambda self: "hello, I'm Ann")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from objspace.config import RuntimeSettings
from objspace.core.behavior import Behavior, InstanceState, MissingHandler, Nominal
from objspace.core.errors import MethodNotFoundError, UseAfterFreeError
from objspace.core.identity import EntityId, RootEntity
from objspace.core.method import MethodEntry, MethodSpec, Visibility
from objspace.core.resolution import NotFound, Resolution, find_method
from objspace.core.types import Copy
from objspace.space.dispatch import Dispatcher
from objspace.space.eigen import EigenclassManager
from objspace.space.handles import ObjectHandle
from objspace.space.hierarchy import ClassGraph
from objspace.space.methods import BoundMethod, UnboundMethod
from objspace.storage.local import LocalStorage
from objspace.storage.protocol import Storage
from objspace.tracing import DispatchTracer, InMemoryTraceStore

logger = logging.getLogger(__name__)


class ObjectSpace:
    """Central object model state and dispatch coordinator.

    Owns the storage backend, the class graph, the eigenclass manager and the
    dispatcher. Every graph mutation is serialized by a single re-entrant
    lock; method bodies run outside it.

    Args:
        settings: Runtime policy; loaded from OBJSPACE_* environment variables
            when omitted.
        storage: Storage backend (default LocalStorage).
        tracer: Dispatch trace sink. When omitted and settings.trace_dispatch
            is set, an InMemoryTraceStore of settings.trace_capacity is used.
    """

    def __init__(
        self,
        settings: RuntimeSettings | None = None,
        storage: Storage | None = None,
        tracer: DispatchTracer | None = None,
    ):
        self._settings = settings or RuntimeSettings()
        self._storage = storage or LocalStorage()
        if tracer is None and self._settings.trace_dispatch:
            tracer = InMemoryTraceStore(max_records=self._settings.trace_capacity)
        self._tracer = tracer
        self._lock = threading.RLock()
        self._graph = ClassGraph(self)
        self._eigen = EigenclassManager(self)
        self._dispatcher = Dispatcher(self)
        self._graph.bootstrap()

    # Services

    @property
    def settings(self) -> RuntimeSettings:
        return self._settings

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def tracer(self) -> DispatchTracer | None:
        return self._tracer

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def graph(self) -> ClassGraph:
        return self._graph

    @property
    def eigen(self) -> EigenclassManager:
        return self._eigen

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # Identity & storage

    def require_alive(self, entity: EntityId) -> None:
        """Raise UseAfterFreeError unless entity is alive."""
        if not self._storage.entity_exists(entity):
            raise UseAfterFreeError(entity)

    def exists(self, entity: EntityId) -> bool:
        return self._storage.entity_exists(entity)

    def create_entity(self, cls: EntityId) -> EntityId:
        """Allocate a bare instance of cls without running initialize.

        Raises:
            TypeError: If cls is a module or eigenclass.
        """
        with self._lock:
            record = self._graph.behavior(cls)
            if record.is_eigenclass():
                raise TypeError("can't create instance of singleton class")
            if not record.is_class():
                raise TypeError(f"{self._graph.name_of(cls)} is a module and cannot be instantiated")
            entity = self._storage.create_entity()
            self._storage.set_record(entity, InstanceState())
            self._storage.set_record(entity, Nominal(cls))
            return entity

    def instantiate(self, cls: EntityId, *args: Any, **kwargs: Any) -> EntityId:
        """Create an instance and run its initialize method, if any.

        If initialize raises, the half-built instance is destroyed and the
        error propagates.
        """
        entity = self.create_entity(cls)
        if self.respond_to(entity, "initialize"):
            try:
                self.dispatch(entity, "initialize", args, kwargs, bypass_visibility=True)
            except Exception:
                self.destroy(entity)
                raise
        return entity

    def destroy(self, entity: EntityId) -> None:
        """Destroy an instance together with its eigenclass.

        Raises:
            TypeError: If entity is a class, module or eigenclass.
            UseAfterFreeError: If entity is already dead.
        """
        with self._lock:
            self.require_alive(entity)
            if self._storage.has_record(entity, Behavior):
                raise TypeError(f"cannot destroy {self.describe(entity)}")
            doomed = [entity]
            eigenclass = self._eigen.peek(entity)
            while eigenclass is not None:
                doomed.append(eigenclass)
                eigenclass = self._eigen.peek(eigenclass)
            for victim in doomed:
                self._storage.destroy_entity(victim)
            logger.debug("Destroyed %r (%d eigenclasses)", entity, len(doomed) - 1)

    def class_of(self, entity: EntityId) -> EntityId:
        """Nominal class of entity. Never returns an eigenclass."""
        nominal = self._storage.get_record(entity, Nominal)
        if nominal is None:
            raise UseAfterFreeError(entity)
        return nominal.cls

    def _state(self, entity: EntityId) -> InstanceState:
        state = self._storage.get_record(entity, InstanceState)
        if state is None:
            state = InstanceState()
            self._storage.set_record(entity, state)
        return state

    def get_state(self, entity: EntityId) -> Copy[dict[str, Any]]:
        """Copy of entity's instance variables (field name -> value)."""
        with self._lock:
            return dict(self._state(entity).fields)

    def set_state(self, entity: EntityId, field: str, value: Any) -> None:
        """Write one instance variable; visible to every holder of entity."""
        with self._lock:
            self._state(entity).fields[field] = value

    def instance_variable_get(self, entity: EntityId, field: str, default: Any = None) -> Any:
        with self._lock:
            return self._state(entity).fields.get(field, default)

    def instance_variables(self, entity: EntityId) -> list[str]:
        with self._lock:
            return list(self._state(entity).fields)

    def remove_instance_variable(self, entity: EntityId, field: str) -> Any:
        """Delete one instance variable and return its value.

        Raises:
            KeyError: If the field is not set.
        """
        with self._lock:
            fields = self._state(entity).fields
            if field not in fields:
                raise KeyError(f"instance variable {field} not defined")
            return fields.pop(field)

    def handle(self, entity: EntityId, caller: EntityId | None = None) -> ObjectHandle:
        """Handle on entity for ergonomic state access and calls."""
        self.require_alive(entity)
        return ObjectHandle(self, entity, caller=caller)

    # Module/class graph

    def define_class(self, name: str | None = None, superclass: EntityId | None = None) -> EntityId:
        return self._graph.define_class(name, superclass)

    def define_module(self, name: str | None = None) -> EntityId:
        return self._graph.define_module(name)

    def reopen(self, behavior: EntityId) -> EntityId:
        return self._graph.reopen(behavior)

    def include(self, target: EntityId, module: EntityId) -> None:
        self._graph.include(target, module)

    def set_superclass(self, cls: EntityId, superclass: EntityId) -> None:
        self._graph.set_superclass(cls, superclass)

    def define_instance_method(
        self,
        behavior: EntityId,
        name: str,
        body: Callable[..., Any] | BoundMethod | UnboundMethod,
        visibility: Visibility = Visibility.PUBLIC,
    ) -> MethodEntry:
        return self._graph.define_method(behavior, name, body, visibility)

    def define_methods(self, behavior: EntityId, *specs: MethodSpec) -> list[MethodEntry]:
        """Define several @method-decorated functions on behavior."""
        return [
            self._graph.define_method(behavior, spec.name, spec.body, spec.visibility)
            for spec in specs
        ]

    def remove_method(self, behavior: EntityId, name: str) -> None:
        self._graph.remove_method(behavior, name)

    def undef_method(self, behavior: EntityId, name: str) -> None:
        self._graph.undef_method(behavior, name)

    def set_visibility(self, behavior: EntityId, name: str, visibility: Visibility) -> MethodEntry:
        return self._graph.set_visibility(behavior, name, visibility)

    def define_missing_handler(self, behavior: EntityId, handler: MissingHandler) -> None:
        self._graph.define_missing_handler(behavior, handler)

    def remove_missing_handler(self, behavior: EntityId) -> None:
        self._graph.remove_missing_handler(behavior)

    def assign_constant(self, name: str, entity: EntityId) -> None:
        self._graph.assign_constant(name, entity)

    def lookup_constant(self, name: str) -> EntityId:
        return self._graph.lookup_constant(name)

    def constants(self) -> dict[str, EntityId]:
        return self._graph.constants()

    def name_of(self, behavior: EntityId) -> str:
        return self._graph.name_of(behavior)

    def superclass_of(self, cls: EntityId) -> EntityId | None:
        return self._graph.superclass_of(cls)

    def subclasses(self, cls: EntityId) -> list[EntityId]:
        return self._graph.subclasses(cls)

    def ancestors(self, behavior: EntityId) -> list[EntityId]:
        return self._graph.ancestors(behavior)

    def included_modules(self, behavior: EntityId) -> list[EntityId]:
        return self._graph.included_modules(behavior)

    def instance_methods(self, behavior: EntityId, inherited: bool = True) -> list[str]:
        return self._graph.instance_methods(behavior, inherited)

    def private_instance_methods(self, behavior: EntityId, inherited: bool = True) -> list[str]:
        return self._graph.private_instance_methods(behavior, inherited)

    def method_defined(self, behavior: EntityId, name: str) -> bool:
        return self._graph.method_defined(behavior, name)

    # Eigenclasses

    def eigenclass_of(self, entity: EntityId) -> EntityId:
        return self._eigen.eigenclass_of(entity)

    def has_eigenclass(self, entity: EntityId) -> bool:
        return self._eigen.has_eigenclass(entity)

    def define_singleton_method(
        self,
        entity: EntityId,
        name: str,
        body: Callable[..., Any],
        visibility: Visibility = Visibility.PUBLIC,
    ) -> MethodEntry:
        return self._eigen.define_singleton_method(entity, name, body, visibility)

    def extend(self, entity: EntityId, module: EntityId) -> None:
        self._eigen.extend(entity, module)

    def singleton_methods(self, entity: EntityId) -> list[str]:
        return self._eigen.singleton_methods(entity)

    # Resolution & dispatch

    def lookup_chain(self, entity: EntityId) -> list[EntityId]:
        return self._dispatcher.lookup_chain(entity)

    def resolve(self, entity: EntityId, name: str) -> Resolution:
        return self._dispatcher.resolve(entity, name)

    def respond_to(self, entity: EntityId, name: str) -> bool:
        return self._dispatcher.respond_to(entity, name)

    def dispatch(
        self,
        entity: EntityId,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        *,
        bypass_visibility: bool = False,
        caller: EntityId | None = None,
    ) -> Any:
        return self._dispatcher.dispatch(
            entity, name, args, kwargs, bypass_visibility=bypass_visibility, caller=caller
        )

    def extract_method(self, entity: EntityId, name: str) -> BoundMethod:
        """Bound reference to name on entity; visibility is not checked.

        Raises:
            MethodNotFoundError: If name does not resolve.
        """
        resolution = self.resolve(entity, name)
        if isinstance(resolution, NotFound):
            raise MethodNotFoundError(name, 0, entity)
        late = self._settings.method_binding == "late"
        return BoundMethod(self, entity, resolution.entry, late=late)

    def instance_method(self, behavior: EntityId, name: str) -> UnboundMethod:
        """Unbound reference to name as resolved from behavior's ancestors.

        Raises:
            MethodNotFoundError: If name does not resolve.
        """
        with self._lock:
            resolution = find_method(self.ancestors(behavior), name, self._graph.behavior)
        if isinstance(resolution, NotFound):
            raise MethodNotFoundError(name, 0, behavior)
        return UnboundMethod(self, resolution.entry)

    def is_a(self, entity: EntityId, behavior: EntityId) -> bool:
        """True if behavior appears in entity's lookup chain."""
        return behavior in self.lookup_chain(entity)

    def each_object(self, behavior: EntityId | None = None) -> list[EntityId]:
        """Live non-behavior entities, optionally only instances of behavior.

        Classes, modules and eigenclasses are skipped.
        """
        with self._lock:
            return [
                entity
                for entity, _ in self._storage.query(Nominal)
                if not self._storage.has_record(entity, Behavior)
                and (behavior is None or self.is_a(entity, behavior))
            ]

    def describe(self, entity: EntityId) -> str:
        """Human-readable label: class name, #<Class:...> or #<Cls EntityId(...)>."""
        if not self._storage.entity_exists(entity):
            return f"#<dead {entity!r}>"
        if self._storage.has_record(entity, Behavior):
            return self._graph.name_of(entity)
        return f"#<{self._graph.name_of(self.class_of(entity))} {entity!r}>"

    # Roots

    @property
    def object_class(self) -> EntityId:
        return RootEntity.OBJECT

    @property
    def module_class(self) -> EntityId:
        return RootEntity.MODULE

    @property
    def class_class(self) -> EntityId:
        return RootEntity.CLASS
