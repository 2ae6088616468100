"""Receiver handles with ergonomic magic methods.

Method bodies receive an ObjectHandle as their first argument. State access
through the handle resolves against the receiver's own storage, not the class
that defined the method.

Usage:
    def greet(self, other):
        self["greeted"] = other           # instance variable write
        return self.call("salutation")    # implicit-receiver call, private allowed

    h = space.handle(obj)
    h["name"] = "Ann"
    if "name" in h:
        h.call("greet", "Bob")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from objspace.core.errors import MethodNotFoundError
from objspace.core.identity import EntityId
from objspace.core.method import MethodEntry
from objspace.core.resolution import NotFound, find_after

if TYPE_CHECKING:
    from objspace.space.methods import BoundMethod
    from objspace.space.space import ObjectSpace


class ObjectHandle:
    """Convenient wrapper for repeated single-entity operations.

    Args:
        space: Owning ObjectSpace.
        entity: Entity this handle addresses.
        caller: Context entity used for visibility checks on calls made
            through this handle (None = outside any method body).
        method: Entry currently executing, for call_super.
        chain: Lookup chain the executing entry was resolved from.
    """

    def __init__(
        self,
        space: ObjectSpace,
        entity: EntityId,
        caller: EntityId | None = None,
        method: MethodEntry | None = None,
        chain: list[EntityId] | None = None,
    ):
        self._space = space
        self._entity = entity
        self._caller = caller
        self._method = method
        self._chain = chain

    @property
    def id(self) -> EntityId:
        """Get the entity ID for this handle."""
        return self._entity

    @property
    def space(self) -> ObjectSpace:
        return self._space

    @property
    def caller(self) -> EntityId | None:
        return self._caller

    @property
    def class_(self) -> EntityId:
        """Nominal class (never the eigenclass)."""
        return self._space.class_of(self._entity)

    @property
    def eigenclass(self) -> EntityId:
        return self._space.eigenclass_of(self._entity)

    def __getitem__(self, field: str) -> Any:
        """Instance variable read: h["name"] -> value or None."""
        return self._space.instance_variable_get(self._entity, field)

    def __setitem__(self, field: str, value: Any) -> None:
        """Instance variable write: h["name"] = value."""
        self._space.set_state(self._entity, field, value)

    def __delitem__(self, field: str) -> None:
        self._space.remove_instance_variable(self._entity, field)

    def __contains__(self, field: str) -> bool:
        return field in self._space.instance_variables(self._entity)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObjectHandle):
            return self._entity == other._entity
        if isinstance(other, EntityId):
            return self._entity == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._entity)

    def __repr__(self) -> str:
        return f"<ObjectHandle {self._space.describe(self._entity)}>"

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Dispatch name with visibility checked against this handle's caller."""
        return self._space.dispatch(self._entity, name, args, kwargs, caller=self._caller)

    def send(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Dispatch name ignoring visibility."""
        return self._space.dispatch(self._entity, name, args, kwargs, bypass_visibility=True)

    def call_super(self, *args: Any, **kwargs: Any) -> Any:
        """Invoke the next definition of the executing method up the chain.

        Raises:
            RuntimeError: If used outside a method body.
            MethodNotFoundError: If no farther behavior defines the name.
        """
        if self._method is None or self._chain is None:
            raise RuntimeError("call_super used outside of a method body")
        lookup = self._space.graph.behavior
        with self._space.lock:
            resolution = find_after(
                self._chain, self._method.defined_in, self._method.name, lookup
            )
        if isinstance(resolution, NotFound):
            raise MethodNotFoundError(self._method.name, len(args), self._entity)
        return self._space.dispatcher.invoke(
            self._entity, resolution.entry, args, kwargs, chain=self._chain
        )

    def handle(self, other: EntityId | ObjectHandle) -> ObjectHandle:
        """Handle on another entity that keeps this handle's caller context."""
        target = other.id if isinstance(other, ObjectHandle) else other
        return ObjectHandle(self._space, target, caller=self._caller)

    def responds_to(self, name: str) -> bool:
        return self._space.respond_to(self._entity, name)

    def method(self, name: str) -> BoundMethod:
        return self._space.extract_method(self._entity, name)
