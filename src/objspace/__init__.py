"""objspace: a runtime object model with eigenclasses, mixins and dynamic dispatch.

Usage:
    from objspace import ObjectSpace, Visibility, method

    space = ObjectSpace()
    greeter = space.define_module("Greeter")
    space.define_instance_method(greeter, "greet", lambda self: f"hi, {self['name']}")

    person = space.define_class("Person")
    space.include(person, greeter)

    @method.private()
    def initialize(self, name):
        self["name"] = name

    space.define_methods(person, initialize)

    ann = space.instantiate(person, "Ann")
    space.dispatch(ann, "greet")  # "hi, Ann"
"""

__version__ = "0.1.0"

# Configuration
from objspace.config import RuntimeSettings

# Core primitives
from objspace.core import (
    Behavior,
    BehaviorKind,
    CyclicHierarchyError,
    EntityId,
    Found,
    MethodEntry,
    MethodNotFoundError,
    MethodSpec,
    NotFound,
    ObjectSpaceError,
    Resolution,
    RootEntity,
    UseAfterFreeError,
    Visibility,
    VisibilityError,
    method,
)

# Object space
from objspace.space import (
    BoundMethod,
    ObjectHandle,
    ObjectSpace,
    UnboundMethod,
)

# Storage
from objspace.storage import (
    LocalStorage,
    Storage,
)

# Tracing (optional)
from objspace.tracing import (
    DispatchRecord,
    DispatchState,
    DispatchTracer,
    InMemoryTraceStore,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EntityId",
    "RootEntity",
    "Behavior",
    "BehaviorKind",
    "MethodEntry",
    "MethodSpec",
    "Visibility",
    "method",
    "Found",
    "NotFound",
    "Resolution",
    # Errors
    "ObjectSpaceError",
    "UseAfterFreeError",
    "CyclicHierarchyError",
    "VisibilityError",
    "MethodNotFoundError",
    # Space
    "ObjectSpace",
    "ObjectHandle",
    "BoundMethod",
    "UnboundMethod",
    # Storage
    "Storage",
    "LocalStorage",
    # Config
    "RuntimeSettings",
    # Tracing
    "DispatchRecord",
    "DispatchState",
    "DispatchTracer",
    "InMemoryTraceStore",
]
