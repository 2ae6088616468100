"""Method models: visibility levels and method table entries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from objspace.core.identity import EntityId


class Visibility(Enum):
    """Access modifier controlling who may call a method."""

    PUBLIC = "public"
    PROTECTED = "protected"  # Caller must be kind_of? the defining owner
    PRIVATE = "private"  # Caller must be the receiver itself


@dataclass(frozen=True, slots=True)
class MethodEntry:
    """A callable stored in exactly one method table (its owner's).

    The body receives the receiver handle as its first argument, followed by
    the call arguments. Entries are immutable; redefinition replaces the table
    slot rather than mutating the entry, so extracted references keep the body
    they captured.
    """

    name: str
    body: Callable[..., Any]
    owner: EntityId
    visibility: Visibility = Visibility.PUBLIC
    arity: int = -1
    undefined: bool = False  # Tombstone written by undef_method
    origin: EntityId | None = None  # Behavior the body was first defined on, if copied

    def with_visibility(self, visibility: Visibility) -> MethodEntry:
        """Copy of this entry with another visibility."""
        return replace(self, visibility=visibility)

    @property
    def defined_in(self) -> EntityId:
        """Behavior whose table first held this body; super lookup continues past it."""
        return self.origin if self.origin is not None else self.owner

    def rebind_owner(self, owner: EntityId) -> MethodEntry:
        """Copy of this entry owned by another behavior, remembering where it came from."""
        return replace(self, owner=owner, origin=self.defined_in)

    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC


@dataclass(frozen=True, slots=True)
class MethodSpec:
    """Method definition not yet attached to a behavior (see @method)."""

    name: str
    body: Callable[..., Any]
    visibility: Visibility = Visibility.PUBLIC
