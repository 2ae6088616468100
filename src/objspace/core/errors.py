"""Error kinds raised by the object space.

All errors are synchronous and propagate to the immediate caller. Only
MethodNotFoundError has a recovery path (the missing-method handler).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from objspace.core.identity import EntityId


class ObjectSpaceError(Exception):
    """Base class for object space errors."""

    pass


class UseAfterFreeError(ObjectSpaceError):
    """Raised when an operation references a destroyed (or never allocated) entity."""

    def __init__(self, entity: EntityId):
        self.entity = entity
        super().__init__(f"Entity {entity!r} is not alive")


class CyclicHierarchyError(ObjectSpaceError):
    """Raised when a superclass link or inclusion would create a cycle."""

    pass


class VisibilityError(ObjectSpaceError):
    """Raised when a protected or private method is called from a disallowed context."""

    def __init__(self, name: str, visibility: str, receiver: EntityId):
        self.name = name
        self.visibility = visibility
        self.receiver = receiver
        super().__init__(f"{visibility} method '{name}' called for {receiver!r}")


class MethodNotFoundError(ObjectSpaceError):
    """Raised when resolution and the missing-method fallback are both exhausted."""

    def __init__(self, name: str, argc: int, receiver: EntityId | None = None):
        self.name = name
        self.argc = argc
        self.receiver = receiver
        target = f" for {receiver!r}" if receiver is not None else ""
        super().__init__(f"undefined method '{name}'{target} (given {argc} arguments)")
