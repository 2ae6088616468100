"""Resolution and dispatch engine with the missing-method fallback.

Each dispatch walks a small state machine:

    RESOLVING -> RESOLVED -> INVOKING -> DONE
    RESOLVING -> UNRESOLVED -> FALLBACK_CHECK -> HANDLED -> DONE
                                              -> UNHANDLED -> ERROR

A dead receiver ends RESOLVING -> ERROR and visibility failures end
RESOLVED -> ERROR. An exception raised by a body or handler ends in ERROR
and propagates unchanged.

Usage:
    space.dispatch(obj, "greet", ("Ann",))
    space.respond_to(obj, "greet")
    space.define_missing_handler(Cls, lambda self, name, args: f"caught:{name}")
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from objspace.core.errors import MethodNotFoundError, VisibilityError
from objspace.core.identity import EntityId
from objspace.core.method import MethodEntry, Visibility
from objspace.core.resolution import (
    Found,
    NotFound,
    Resolution,
    build_lookup_chain,
    find_method,
    find_missing_handler,
)
from objspace.space.handles import ObjectHandle
from objspace.tracing import DispatchRecord, DispatchState

if TYPE_CHECKING:
    from objspace.space.space import ObjectSpace

logger = logging.getLogger(__name__)


class Dispatcher:
    """Resolves names along an entity's lookup chain and invokes the result.

    Args:
        space: Owning ObjectSpace.
    """

    def __init__(self, space: ObjectSpace):
        self._space = space

    def lookup_chain(self, entity: EntityId) -> list[EntityId]:
        """Linearized behaviors searched for entity, most specific first.

        Raises:
            UseAfterFreeError: If entity is dead.
        """
        with self._space.lock:
            nominal = self._space.class_of(entity)
            levels = self._space.eigen.eigen_levels(entity)
            return build_lookup_chain(levels, nominal, self._space.graph.behavior)

    def resolve(self, entity: EntityId, name: str) -> Resolution:
        """Most specific entry for name, or NotFound. Never creates anything."""
        with self._space.lock:
            return find_method(self.lookup_chain(entity), name, self._space.graph.behavior)

    def respond_to(self, entity: EntityId, name: str) -> bool:
        """Existence check only; visibility is ignored."""
        return isinstance(self.resolve(entity, name), Found)

    def check_visibility(
        self, entry: MethodEntry, receiver: EntityId, caller: EntityId | None
    ) -> None:
        """Enforce access modifiers.

        PRIVATE requires the caller to be the receiver. PROTECTED requires the
        caller to be an instance of the entry owner's lineage.

        Raises:
            VisibilityError: If the caller context is not allowed.
        """
        if entry.visibility is Visibility.PUBLIC:
            return
        if entry.visibility is Visibility.PRIVATE:
            if caller is not None and caller == receiver:
                return
        elif caller is not None and self._space.is_a(caller, entry.owner):
            return
        raise VisibilityError(entry.name, entry.visibility.value, receiver)

    def dispatch(
        self,
        entity: EntityId,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        *,
        bypass_visibility: bool = False,
        caller: EntityId | None = None,
    ) -> Any:
        """Send name to entity.

        Args:
            entity: Receiver.
            name: Method name.
            args: Positional arguments passed after the receiver.
            kwargs: Keyword arguments.
            bypass_visibility: Skip protected/private checks.
            caller: Context entity of the call site, None from outside.

        Returns:
            Whatever the method body or missing-method handler returns.

        Raises:
            UseAfterFreeError: If entity is dead.
            VisibilityError: If the resolved method is not callable from caller.
            MethodNotFoundError: If nothing resolves and no handler is registered.
        """
        args = tuple(args)
        kwargs = dict(kwargs or {})
        record = DispatchRecord(receiver=entity, name=name, argc=len(args))
        start = time.perf_counter()
        try:
            return self._run(record, entity, name, args, kwargs, bypass_visibility, caller)
        finally:
            record.duration_ms = (time.perf_counter() - start) * 1000
            tracer = self._space.tracer
            if tracer is not None:
                tracer.record_dispatch(record)

    def _run(
        self,
        record: DispatchRecord,
        entity: EntityId,
        name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        bypass_visibility: bool,
        caller: EntityId | None,
    ) -> Any:
        lookup = self._space.graph.behavior
        try:
            with self._space.lock:
                chain = self.lookup_chain(entity)
                resolution = find_method(chain, name, lookup)
        except Exception as exc:
            self._fail(record, exc)
            raise

        match resolution:
            case Found(entry):
                record.advance(DispatchState.RESOLVED)
                record.owner = entry.owner
                if not bypass_visibility:
                    try:
                        self.check_visibility(entry, entity, caller)
                    except VisibilityError as exc:
                        self._fail(record, exc)
                        raise
                record.advance(DispatchState.INVOKING)
                try:
                    result = self.invoke(entity, entry, args, kwargs, chain=chain)
                except Exception as exc:
                    self._fail(record, exc)
                    raise
                record.advance(DispatchState.DONE)
                return result

            case NotFound():
                record.advance(DispatchState.UNRESOLVED)
                record.advance(DispatchState.FALLBACK_CHECK)
                with self._space.lock:
                    found = find_missing_handler(chain, lookup)
                if found is None:
                    record.advance(DispatchState.UNHANDLED)
                    error = MethodNotFoundError(name, len(args), entity)
                    self._fail(record, error)
                    raise error

                owner, handler = found
                record.advance(DispatchState.HANDLED)
                record.owner = owner
                logger.debug(
                    "Missing handler on %s caught '%s' for %s",
                    self._space.name_of(owner),
                    name,
                    self._space.describe(entity),
                )
                receiver = ObjectHandle(self._space, entity, caller=entity)
                try:
                    result = handler(receiver, name, args, **kwargs)
                except Exception as exc:
                    self._fail(record, exc)
                    raise
                record.advance(DispatchState.DONE)
                return result

    @staticmethod
    def _fail(record: DispatchRecord, exc: Exception) -> None:
        record.error = f"{type(exc).__name__}: {exc}"
        record.advance(DispatchState.ERROR)

    def invoke(
        self,
        entity: EntityId,
        entry: MethodEntry,
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
        chain: list[EntityId] | None = None,
    ) -> Any:
        """Run entry's body with entity as the receiver, skipping resolution.

        Args:
            entity: Receiver whose storage the body reads and writes.
            entry: Entry to run.
            args: Positional arguments.
            kwargs: Keyword arguments.
            chain: Lookup chain entry came from; computed when omitted. Used
                by call_super inside the body.
        """
        self._space.require_alive(entity)
        if chain is None:
            chain = self.lookup_chain(entity)
        receiver = ObjectHandle(self._space, entity, caller=entity, method=entry, chain=chain)
        return entry.body(receiver, *args, **kwargs)
