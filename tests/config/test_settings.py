"""Tests for RuntimeSettings environment loading."""

import pytest
from pydantic import ValidationError

from objspace import ObjectSpace, RuntimeSettings


def test_defaults():
    settings = RuntimeSettings()

    assert settings.method_binding == "snapshot"
    assert settings.reinclude == "keep"
    assert settings.warn_on_redefine is False
    assert settings.trace_dispatch is False
    assert settings.trace_capacity == 1000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("OBJSPACE_METHOD_BINDING", "late")
    monkeypatch.setenv("OBJSPACE_REINCLUDE", "move_to_front")
    monkeypatch.setenv("OBJSPACE_TRACE_CAPACITY", "5")

    settings = RuntimeSettings()

    assert settings.method_binding == "late"
    assert settings.reinclude == "move_to_front"
    assert settings.trace_capacity == 5


def test_invalid_policy_rejected():
    with pytest.raises(ValidationError):
        RuntimeSettings(method_binding="eventually")  # type: ignore[arg-type]


def test_trace_dispatch_installs_bounded_store():
    space = ObjectSpace(settings=RuntimeSettings(trace_dispatch=True, trace_capacity=2))
    cls = space.define_class("Traced")
    space.define_instance_method(cls, "ping", lambda self: "pong")
    obj = space.create_entity(cls)

    for _ in range(3):
        space.dispatch(obj, "ping")

    assert space.tracer is not None
    assert space.tracer.record_count == 2


def test_no_tracer_by_default():
    assert ObjectSpace(settings=RuntimeSettings()).tracer is None
