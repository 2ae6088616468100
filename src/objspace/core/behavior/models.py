"""Per-entity records held by storage.

Every entity carries InstanceState and Nominal. Classes, modules and
eigenclasses additionally carry a Behavior; entities whose eigenclass has been
created carry a Singleton pointing at it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from objspace.core.identity import EntityId
from objspace.core.method import MethodEntry

MissingHandler = Callable[..., Any]
"""handler(receiver, name, args, **kwargs) -> value"""


class BehaviorKind(Enum):
    """What a behavior-carrying entity is."""

    CLASS = auto()  # Instantiable, single superclass
    MODULE = auto()  # Mixin only, never instantiated, no superclass
    EIGENCLASS = auto()  # Singleton class attached to exactly one entity


@dataclass(slots=True)
class InstanceState:
    """Instance-variable table of an entity."""

    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Nominal:
    """Nominal class of an entity. Never points at an eigenclass."""

    cls: EntityId


@dataclass(frozen=True, slots=True)
class Singleton:
    """Link from an entity to its eigenclass once created."""

    eigenclass: EntityId


@dataclass(slots=True)
class Behavior:
    """Method-table carrying record for classes, modules and eigenclasses.

    Attributes:
        kind: CLASS, MODULE or EIGENCLASS.
        name: Display/constant name, None while anonymous.
        superclass: Single superclass (CLASS kind only; None for the root).
        includes: Included modules, oldest first.
        methods: Method table keyed by name.
        missing_handler: Fallback consulted when resolution fails.
        attached: Owner entity (EIGENCLASS kind only).
    """

    kind: BehaviorKind
    name: str | None = None
    superclass: EntityId | None = None
    includes: list[EntityId] = field(default_factory=list)
    methods: dict[str, MethodEntry] = field(default_factory=dict)
    missing_handler: MissingHandler | None = None
    attached: EntityId | None = None

    def is_class(self) -> bool:
        return self.kind is BehaviorKind.CLASS

    def is_module(self) -> bool:
        return self.kind is BehaviorKind.MODULE

    def is_eigenclass(self) -> bool:
        return self.kind is BehaviorKind.EIGENCLASS
