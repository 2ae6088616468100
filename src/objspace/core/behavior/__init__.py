"""Behavior records: instance state, nominal class, eigenclass link, method tables."""

from objspace.core.behavior.models import (
    Behavior,
    BehaviorKind,
    InstanceState,
    MissingHandler,
    Nominal,
    Singleton,
)

__all__ = [
    "Behavior",
    "BehaviorKind",
    "InstanceState",
    "MissingHandler",
    "Nominal",
    "Singleton",
]
