"""Core functionalities: stateless models and pure functions.

Architecture Note:
    core/ contains pure, stateless building blocks: identities, records,
    method entries and the linearization algorithms. For stateful services
    (allocation, storage, the object space itself), see storage/ and space/.
"""

from objspace.core.behavior import (
    Behavior,
    BehaviorKind,
    InstanceState,
    MissingHandler,
    Nominal,
    Singleton,
)
from objspace.core.errors import (
    CyclicHierarchyError,
    MethodNotFoundError,
    ObjectSpaceError,
    UseAfterFreeError,
    VisibilityError,
)
from objspace.core.identity import EntityId, RootEntity
from objspace.core.method import MethodEntry, MethodSpec, Visibility, compute_arity, method
from objspace.core.resolution import (
    Found,
    NotFound,
    Resolution,
    build_lookup_chain,
    find_method,
    linearize_ancestors,
)
from objspace.core.types import Copy

__all__ = [
    # Types
    "Copy",
    # Identity
    "EntityId",
    "RootEntity",
    # Errors
    "ObjectSpaceError",
    "UseAfterFreeError",
    "CyclicHierarchyError",
    "VisibilityError",
    "MethodNotFoundError",
    # Behavior
    "Behavior",
    "BehaviorKind",
    "InstanceState",
    "MissingHandler",
    "Nominal",
    "Singleton",
    # Method
    "MethodEntry",
    "MethodSpec",
    "Visibility",
    "method",
    "compute_arity",
    # Resolution
    "Found",
    "NotFound",
    "Resolution",
    "build_lookup_chain",
    "find_method",
    "linearize_ancestors",
]
