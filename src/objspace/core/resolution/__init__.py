"""Method resolution: tagged results and pure linearization functions."""

from objspace.core.resolution.models import Found, NotFound, Resolution
from objspace.core.resolution.operations import (
    BehaviorLookup,
    build_lookup_chain,
    creates_include_cycle,
    creates_superclass_cycle,
    expand_level,
    find_after,
    find_method,
    find_missing_handler,
    linearize_ancestors,
    superclass_chain,
)

__all__ = [
    # Models
    "Found",
    "NotFound",
    "Resolution",
    # Operations
    "BehaviorLookup",
    "build_lookup_chain",
    "creates_include_cycle",
    "creates_superclass_cycle",
    "expand_level",
    "find_after",
    "find_method",
    "find_missing_handler",
    "linearize_ancestors",
    "superclass_chain",
]
