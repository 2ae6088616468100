"""Extracted method references.

Usage:
    greet = space.extract_method(obj, "greet")
    greet("Ann")                      # obj is the permanent receiver
    unbound = greet.unbind()
    unbound.bind(other_obj)("Bob")    # other_obj must be an instance of the owner
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from objspace.core.errors import MethodNotFoundError
from objspace.core.identity import EntityId
from objspace.core.method import MethodEntry
from objspace.core.resolution import NotFound

if TYPE_CHECKING:
    from objspace.space.space import ObjectSpace


class BoundMethod:
    """Callable capturing a receiver and a method.

    With snapshot binding the entry resolved at extraction time is kept, so
    later redefinitions of the name do not affect this reference. With late
    binding the name is resolved again on every access.

    Args:
        space: Owning ObjectSpace.
        receiver: Permanent implicit receiver.
        entry: Entry resolved at extraction time.
        late: Re-resolve by name on each call instead of using entry.
    """

    def __init__(self, space: ObjectSpace, receiver: EntityId, entry: MethodEntry, late: bool = False):
        self._space = space
        self._receiver = receiver
        self._entry = entry
        self._late = late

    @property
    def receiver(self) -> EntityId:
        return self._receiver

    @property
    def name(self) -> str:
        return self._entry.name

    @property
    def is_late_bound(self) -> bool:
        return self._late

    @property
    def entry(self) -> MethodEntry:
        """Entry this reference will invoke.

        Raises:
            MethodNotFoundError: If late-bound and the name no longer resolves.
        """
        if not self._late:
            return self._entry
        resolution = self._space.resolve(self._receiver, self._entry.name)
        if isinstance(resolution, NotFound):
            raise MethodNotFoundError(self._entry.name, 0, self._receiver)
        return resolution.entry

    @property
    def owner(self) -> EntityId:
        return self.entry.owner

    @property
    def arity(self) -> int:
        return self.entry.arity

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._space.dispatcher.invoke(self._receiver, self.entry, args, kwargs)

    def unbind(self) -> UnboundMethod:
        """Detach the receiver, keeping the current entry."""
        return UnboundMethod(self._space, self.entry)

    def __repr__(self) -> str:
        return (
            f"<BoundMethod {self._space.describe(self._receiver)}"
            f".{self.name} owner={self._space.name_of(self._entry.owner)}>"
        )


class UnboundMethod:
    """Method entry detached from any receiver.

    Args:
        space: Owning ObjectSpace.
        entry: Entry to rebind later.
    """

    def __init__(self, space: ObjectSpace, entry: MethodEntry):
        self._space = space
        self._entry = entry

    @property
    def entry(self) -> MethodEntry:
        return self._entry

    @property
    def name(self) -> str:
        return self._entry.name

    @property
    def owner(self) -> EntityId:
        return self._entry.owner

    @property
    def arity(self) -> int:
        return self._entry.arity

    def bind(self, receiver: EntityId) -> BoundMethod:
        """Attach a new receiver.

        Raises:
            TypeError: If receiver is not an instance of the owner's lineage.
        """
        if not self._space.is_a(receiver, self._entry.owner):
            raise TypeError(
                f"bind argument must be an instance of {self._space.name_of(self._entry.owner)}"
            )
        return BoundMethod(self._space, receiver, self._entry)

    def bind_call(self, receiver: EntityId, *args: Any, **kwargs: Any) -> Any:
        return self.bind(receiver)(*args, **kwargs)

    def __repr__(self) -> str:
        return f"<UnboundMethod {self._space.name_of(self._entry.owner)}#{self.name}>"
