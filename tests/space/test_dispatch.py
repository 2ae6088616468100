"""Tests for dispatch, visibility and the missing-method fallback.

Critical Invariants:
- Dispatch invokes the most specific definition along the lookup chain
- The fallback handler runs only when resolution finds nothing
- respond_to ignores visibility and has no side effects
"""

import pytest

from objspace import MethodNotFoundError, Visibility, VisibilityError


@pytest.fixture
def rex(space, dog):
    return space.create_entity(dog)


def test_dispatch_passes_receiver_and_arguments(space, animal):
    def greet(self, other, punctuation="!"):
        return f"{self['name']} greets {other}{punctuation}"

    space.define_instance_method(animal, "greet", greet)
    obj = space.create_entity(animal)
    space.set_state(obj, "name", "Rex")

    assert space.dispatch(obj, "greet", ("Ann",)) == "Rex greets Ann!"
    assert space.dispatch(obj, "greet", ("Ann",), {"punctuation": "?"}) == "Rex greets Ann?"


def test_inherited_method_reads_receiver_state(space, animal, rex):
    """State access inside an inherited body targets the receiver."""
    space.define_instance_method(animal, "name", lambda self: self["name"])
    space.set_state(rex, "name", "Rex")

    assert space.dispatch(rex, "name") == "Rex"
    assert space.get_state(animal) == {}


def test_subclass_definition_wins(space, dog, rex):
    space.define_instance_method(dog, "speak", lambda self: "woof")

    assert space.dispatch(rex, "speak") == "woof"


def test_module_method_sits_between_class_and_superclass(space, animal, dog, rex):
    loud = space.define_module("Loud")
    space.define_instance_method(loud, "speak", lambda self: "LOUD")
    space.include(dog, loud)

    assert space.dispatch(rex, "speak") == "LOUD"

    space.define_instance_method(dog, "speak", lambda self: "woof")
    assert space.dispatch(rex, "speak") == "woof"


def test_missing_method_error_carries_name_and_argc(space, rex):
    with pytest.raises(MethodNotFoundError, match="undefined method 'fly'") as exc_info:
        space.dispatch(rex, "fly", (1, 2))

    assert exc_info.value.name == "fly"
    assert exc_info.value.argc == 2
    assert exc_info.value.receiver == rex


def test_missing_handler_receives_name_and_args(space, animal, rex):
    """CRITICAL: the fallback is found along the chain and sees the original call."""
    calls = []

    def handler(self, name, args, **kwargs):
        calls.append((self.id, name, args, kwargs))
        return f"caught:{name}"

    space.define_missing_handler(animal, handler)

    assert space.dispatch(rex, "fly", (1,), {"high": True}) == "caught:fly"
    assert calls == [(rex, "fly", (1,), {"high": True})]


def test_handler_not_used_when_method_resolves(space, animal, rex):
    space.define_missing_handler(animal, lambda self, name, args: "fallback")

    assert space.dispatch(rex, "speak") == "..."


def test_most_specific_handler_wins(space, animal, dog, rex):
    space.define_missing_handler(animal, lambda self, name, args: "animal")
    space.define_missing_handler(dog, lambda self, name, args: "dog")

    assert space.dispatch(rex, "fly") == "dog"

    space.remove_missing_handler(dog)
    assert space.dispatch(rex, "fly") == "animal"


def test_handler_on_eigenclass(space, animal):
    obj = space.create_entity(animal)
    other = space.create_entity(animal)
    space.define_missing_handler(space.eigenclass_of(obj), lambda self, name, args: name.upper())

    assert space.dispatch(obj, "hello") == "HELLO"
    with pytest.raises(MethodNotFoundError):
        space.dispatch(other, "hello")


def test_handler_error_propagates(space, animal, rex):
    def handler(self, name, args):
        raise MethodNotFoundError(name, len(args), self.id)

    space.define_missing_handler(animal, handler)

    with pytest.raises(MethodNotFoundError, match="fly"):
        space.dispatch(rex, "fly")


def test_undefined_method_falls_back_to_handler(space, animal, dog, rex):
    space.undef_method(dog, "speak")
    space.define_missing_handler(animal, lambda self, name, args: "fallback")

    assert space.dispatch(rex, "speak") == "fallback"


def test_body_exception_propagates_unchanged(space, animal, rex):
    def explode(self):
        raise ZeroDivisionError("nope")

    space.define_instance_method(animal, "explode", explode)

    with pytest.raises(ZeroDivisionError, match="nope"):
        space.dispatch(rex, "explode")


def test_private_method_rejects_explicit_receiver(space, animal, rex):
    space.define_instance_method(animal, "secret", lambda self: 42, Visibility.PRIVATE)

    with pytest.raises(VisibilityError, match="private method 'secret'"):
        space.dispatch(rex, "secret")


def test_private_method_callable_from_own_body(space, animal, rex):
    space.define_instance_method(animal, "secret", lambda self: 42, Visibility.PRIVATE)
    space.define_instance_method(animal, "reveal", lambda self: self.call("secret"))

    assert space.dispatch(rex, "reveal") == 42


def test_private_method_not_callable_on_other_instance(space, animal, rex):
    other = space.create_entity(animal)
    space.define_instance_method(animal, "secret", lambda self: 42, Visibility.PRIVATE)
    space.define_instance_method(animal, "peek", lambda self, o: self.handle(o).call("secret"))

    with pytest.raises(VisibilityError):
        space.dispatch(rex, "peek", (other,))


def test_protected_method_callable_between_related_instances(space, animal, dog, rex):
    space.define_instance_method(animal, "age", lambda self: self["age"], Visibility.PROTECTED)
    space.define_instance_method(
        animal, "older_than", lambda self, o: self.call("age") > self.handle(o).call("age")
    )
    cat = space.create_entity(animal)
    space.set_state(rex, "age", 5)
    space.set_state(cat, "age", 3)

    assert space.dispatch(rex, "older_than", (cat,)) is True
    with pytest.raises(VisibilityError, match="protected"):
        space.dispatch(rex, "age")


def test_protected_method_rejects_unrelated_caller(space, animal, rex):
    space.define_instance_method(animal, "age", lambda self: 1, Visibility.PROTECTED)
    stranger = space.create_entity(space.define_class("Stranger"))

    with pytest.raises(VisibilityError):
        space.dispatch(rex, "age", caller=stranger)
    assert space.dispatch(rex, "age", caller=rex) == 1


def test_bypass_visibility(space, animal, rex):
    space.define_instance_method(animal, "secret", lambda self: 42, Visibility.PRIVATE)

    assert space.dispatch(rex, "secret", bypass_visibility=True) == 42
    assert space.handle(rex).send("secret") == 42


def test_visibility_error_precedes_fallback(space, animal, rex):
    """A resolved but inaccessible method is an error, not a miss."""
    space.define_instance_method(animal, "secret", lambda self: 42, Visibility.PRIVATE)
    space.define_missing_handler(animal, lambda self, name, args: "fallback")

    with pytest.raises(VisibilityError):
        space.dispatch(rex, "secret")


def test_respond_to_ignores_visibility(space, animal, rex):
    space.define_instance_method(animal, "secret", lambda self: 42, Visibility.PRIVATE)

    assert space.respond_to(rex, "secret")
    assert space.respond_to(rex, "speak")
    assert not space.respond_to(rex, "fly")


def test_respond_to_does_not_consult_handler(space, animal, rex):
    space.define_missing_handler(animal, lambda self, name, args: "anything")

    assert not space.respond_to(rex, "fly")


def test_is_a_follows_the_lookup_chain(space, animal, dog, rex):
    walker = space.define_module("Walker")
    space.include(dog, walker)

    assert space.is_a(rex, dog)
    assert space.is_a(rex, animal)
    assert space.is_a(rex, walker)
    assert not space.is_a(space.create_entity(animal), dog)
