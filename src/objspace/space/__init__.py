"""Object space state and dispatch.

Architecture Note:
    space/ is the stateful service layer that coordinates entities, the
    class graph, eigenclasses and dispatch. Unlike core/ (stateless models
    and pure functions), space/ owns runtime state and its lock.
"""

from objspace.space.dispatch import Dispatcher
from objspace.space.eigen import EigenclassManager
from objspace.space.handles import ObjectHandle
from objspace.space.hierarchy import ClassGraph
from objspace.space.methods import BoundMethod, UnboundMethod
from objspace.space.space import ObjectSpace

__all__ = [
    "ObjectSpace",
    "ClassGraph",
    "EigenclassManager",
    "Dispatcher",
    "ObjectHandle",
    "BoundMethod",
    "UnboundMethod",
]
