"""Resolution result models.

Usage:
    match resolve(entity, "greet"):
        case Found(entry):
            entry.body(receiver)
        case NotFound(name):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass

from objspace.core.method import MethodEntry


@dataclass(frozen=True, slots=True)
class Found:
    """Resolution succeeded with the most specific matching entry."""

    entry: MethodEntry

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class NotFound:
    """No table in the lookup chain defines the name."""

    name: str

    def __bool__(self) -> bool:
        return False


Resolution = Found | NotFound
