"""Entity identity functionality: lightweight IDs and reserved bootstrap entities."""

from objspace.core.identity.models import EntityId, RootEntity

__all__ = [
    "EntityId",
    "RootEntity",
]
