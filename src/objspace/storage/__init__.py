"""Storage backends."""

from objspace.storage.allocator import EntityAllocator
from objspace.storage.local import LocalStorage
from objspace.storage.protocol import Storage

__all__ = [
    "EntityAllocator",
    "Storage",
    "LocalStorage",
]
