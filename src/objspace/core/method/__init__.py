"""Method functionality: visibility, table entries, decorator and arity."""

from objspace.core.method.core import compute_arity, method
from objspace.core.method.models import MethodEntry, MethodSpec, Visibility

__all__ = [
    # Models
    "MethodEntry",
    "MethodSpec",
    "Visibility",
    # Core
    "method",
    "compute_arity",
]
