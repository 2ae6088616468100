"""Method decorator and signature helpers.

Usage:
    @method()
    def greet(self, other):
        return f"hi {other}"

    @method.private()
    def secret(self):
        return self["token"]

    space.define_methods(User, greet, secret)
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from objspace.core.method.models import MethodSpec, Visibility


def compute_arity(body: Callable[..., Any]) -> int:
    """Arity of a method body, excluding the leading receiver parameter.

    Follows the Ruby convention: the number of required positional parameters,
    or ``-(required + 1)`` when the body also takes optional or variadic
    positional parameters.

    Args:
        body: Callable whose first positional parameter is the receiver.

    Returns:
        Arity integer; -1 when the signature cannot be inspected.
    """
    try:
        params = list(inspect.signature(body).parameters.values())
    except (TypeError, ValueError):
        return -1

    positional = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    variadic = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)
    if positional:
        positional = positional[1:]  # Receiver
    elif variadic:
        pass  # Receiver swallowed by *args
    else:
        return -1

    required = sum(1 for p in positional if p.default is inspect.Parameter.empty)
    optional = len(positional) - required
    if optional or variadic:
        return -(required + 1)
    return required


class _MethodDecorator:
    """Method decorator factory. Used as @method(...), @method.private() or @method.protected()."""

    def __call__(
        self,
        name: str | None = None,
        visibility: Visibility = Visibility.PUBLIC,
    ) -> Callable[[Callable[..., Any]], MethodSpec]:
        """Wrap a function as a method definition.

        Args:
            name: Method name; defaults to the function's __name__.
            visibility: Access modifier for the method.

        Returns:
            Decorator producing a MethodSpec for ObjectSpace.define_methods().
        """

        def decorator(fn: Callable[..., Any]) -> MethodSpec:
            return MethodSpec(name=name or fn.__name__, body=fn, visibility=visibility)

        return decorator

    def private(self, name: str | None = None) -> Callable[[Callable[..., Any]], MethodSpec]:
        """Private method: callable only with the receiver as caller."""
        return self(name=name, visibility=Visibility.PRIVATE)

    def protected(self, name: str | None = None) -> Callable[[Callable[..., Any]], MethodSpec]:
        """Protected method: callable from instances of the owner's lineage."""
        return self(name=name, visibility=Visibility.PROTECTED)


method = _MethodDecorator()
