"""Tests for the class/module graph.

Critical Invariants:
- Lookup order: own table, own modules (most recent first), then superclass
- A failing mutation (cycle, wrong kind) leaves the graph unchanged
- Reopening a class is additive
"""

import pytest

from objspace import (
    CyclicHierarchyError,
    MethodNotFoundError,
    ObjectSpace,
    RootEntity,
    RuntimeSettings,
    Visibility,
)


def test_define_class_defaults_to_object(space):
    cls = space.define_class("Plain")

    assert space.superclass_of(cls) == RootEntity.OBJECT
    assert space.ancestors(cls) == [cls, RootEntity.OBJECT]
    assert space.lookup_constant("Plain") == cls


def test_define_class_with_same_name_reopens(space, animal):
    """Reopening returns the same class and keeps existing methods."""
    again = space.define_class("Animal")
    space.define_instance_method(again, "eat", lambda self: "nom")

    assert again == animal
    assert space.instance_methods(animal, inherited=False) == ["speak", "eat"]


def test_reopen_with_conflicting_superclass_fails(space, animal, dog):
    other = space.define_class("Other")

    with pytest.raises(TypeError, match="superclass mismatch"):
        space.define_class("Dog", superclass=other)
    assert space.superclass_of(dog) == animal


def test_define_module_conflicts_with_class_name(space, animal):
    with pytest.raises(TypeError, match="is not a module"):
        space.define_module("Animal")


def test_superclass_must_be_a_class(space):
    module = space.define_module("Mixin")

    with pytest.raises(TypeError):
        space.define_class("Bad", superclass=module)


def test_anonymous_behaviors_have_placeholder_names(space):
    cls = space.define_class()
    module = space.define_module()

    assert space.name_of(cls).startswith("#<Class:")
    assert space.name_of(module).startswith("#<Module:")


def test_ancestors_order(space, animal, dog):
    """CRITICAL: own table, modules most recent first, then superclasses."""
    first = space.define_module("First")
    second = space.define_module("Second")
    space.include(dog, first)
    space.include(dog, second)

    assert space.ancestors(dog) == [dog, second, first, animal, RootEntity.OBJECT]
    assert space.included_modules(dog) == [second, first]


def test_nested_include_sits_behind_its_module(space, animal):
    inner = space.define_module("Inner")
    outer = space.define_module("Outer")
    space.include(outer, inner)
    space.include(animal, outer)

    assert space.ancestors(animal)[:3] == [animal, outer, inner]


def test_module_included_at_two_levels_appears_once(space, animal, dog):
    """A module already reachable from the subclass keeps its first position."""
    walker = space.define_module("Walker")
    space.include(animal, walker)
    space.include(dog, walker)

    ancestors = space.ancestors(dog)
    assert ancestors.count(walker) == 1
    assert ancestors.index(walker) == 1


def test_reinclude_keeps_position_by_default(space, animal):
    a = space.define_module("A")
    b = space.define_module("B")
    space.include(animal, a)
    space.include(animal, b)

    space.include(animal, a)

    assert space.included_modules(animal) == [b, a]


def test_reinclude_move_to_front_policy():
    space = ObjectSpace(settings=RuntimeSettings(reinclude="move_to_front"))
    cls = space.define_class("Thing")
    a = space.define_module("A")
    b = space.define_module("B")
    space.include(cls, a)
    space.include(cls, b)

    space.include(cls, a)

    assert space.included_modules(cls) == [a, b]


def test_include_requires_module(space, animal, dog):
    with pytest.raises(TypeError, match="is not a module"):
        space.include(dog, animal)


def test_include_cycle_rejected_and_graph_unchanged(space):
    """CRITICAL: a rejected inclusion leaves both modules as they were."""
    a = space.define_module("A")
    b = space.define_module("B")
    space.include(a, b)

    with pytest.raises(CyclicHierarchyError):
        space.include(b, a)
    with pytest.raises(CyclicHierarchyError):
        space.include(a, a)

    assert space.ancestors(a) == [a, b]
    assert space.ancestors(b) == [b]


def test_superclass_cycle_rejected_and_graph_unchanged(space, animal, dog):
    with pytest.raises(CyclicHierarchyError):
        space.set_superclass(animal, dog)
    with pytest.raises(CyclicHierarchyError):
        space.set_superclass(animal, animal)

    assert space.superclass_of(animal) == RootEntity.OBJECT
    assert space.superclass_of(dog) == animal


def test_set_superclass_relinks(space, animal):
    base = space.define_class("Base")
    space.define_instance_method(base, "base_only", lambda self: "base")

    space.set_superclass(animal, base)
    obj = space.create_entity(animal)

    assert space.dispatch(obj, "base_only") == "base"


def test_mutations_are_visible_to_existing_instances(space, animal):
    """A method added after instantiation is found by the next dispatch."""
    obj = space.create_entity(animal)
    space.define_instance_method(animal, "sleep", lambda self: "zzz")

    assert space.dispatch(obj, "sleep") == "zzz"


def test_remove_method_exposes_inherited_definition(space, animal, dog):
    space.define_instance_method(dog, "speak", lambda self: "woof")
    obj = space.create_entity(dog)

    space.remove_method(dog, "speak")

    assert space.dispatch(obj, "speak") == "..."
    with pytest.raises(MethodNotFoundError):
        space.remove_method(dog, "speak")


def test_undef_method_blocks_inherited_definition(space, animal, dog):
    obj = space.create_entity(dog)

    space.undef_method(dog, "speak")

    assert not space.respond_to(obj, "speak")
    assert space.respond_to(space.create_entity(animal), "speak")
    assert "speak" not in space.instance_methods(dog)
    with pytest.raises(MethodNotFoundError):
        space.dispatch(obj, "speak")


def test_undef_unknown_method_fails(space, animal):
    with pytest.raises(MethodNotFoundError):
        space.undef_method(animal, "nothing")


def test_redefine_after_undef(space, animal, dog):
    space.undef_method(dog, "speak")
    space.define_instance_method(dog, "speak", lambda self: "woof")

    assert space.dispatch(space.create_entity(dog), "speak") == "woof"


def test_set_visibility_on_inherited_method_copies_entry(space, animal, dog):
    """Making an inherited method private affects only the subclass."""
    space.set_visibility(dog, "speak", Visibility.PRIVATE)

    assert space.private_instance_methods(dog, inherited=False) == ["speak"]
    assert not space.method_defined(dog, "speak")
    assert space.method_defined(animal, "speak")


def test_set_visibility_unknown_method_fails(space, animal):
    with pytest.raises(MethodNotFoundError):
        space.set_visibility(animal, "ghost", Visibility.PRIVATE)


def test_instance_methods_split_by_visibility(space, animal, dog):
    space.define_instance_method(dog, "bark", lambda self: "woof")
    space.define_instance_method(dog, "wag", lambda self: None, Visibility.PRIVATE)
    space.define_instance_method(dog, "sniff", lambda self: None, Visibility.PROTECTED)

    assert space.instance_methods(dog) == ["bark", "sniff", "speak"]
    assert space.instance_methods(dog, inherited=False) == ["bark", "sniff"]
    assert space.private_instance_methods(dog) == ["wag"]


def test_warn_on_redefine():
    space = ObjectSpace(settings=RuntimeSettings(warn_on_redefine=True))
    cls = space.define_class("Noisy")
    space.define_instance_method(cls, "x", lambda self: 1)

    with pytest.warns(UserWarning, match="method redefined"):
        space.define_instance_method(cls, "x", lambda self: 2)


def test_constants_name_anonymous_behaviors(space):
    cls = space.define_class()

    space.assign_constant("Named", cls)

    assert space.name_of(cls) == "Named"
    assert space.constants()["Named"] == cls


def test_reassigning_constant_warns(space, animal):
    other = space.define_class()

    with pytest.warns(UserWarning, match="already initialized constant"):
        space.assign_constant("Animal", other)
    assert space.lookup_constant("Animal") == other
    assert space.name_of(animal) == "Animal"


def test_lookup_unknown_constant(space):
    with pytest.raises(KeyError, match="uninitialized constant"):
        space.lookup_constant("Nope")


def test_non_behavior_rejected(space, animal):
    obj = space.create_entity(animal)

    with pytest.raises(TypeError, match="not a class or module"):
        space.define_instance_method(obj, "x", lambda self: None)


def test_subclasses_lists_direct_children(space, animal, dog):
    cat = space.define_class("Cat", superclass=animal)
    space.define_class("Puppy", superclass=dog)
    space.define_module("Walker")

    assert space.subclasses(animal) == [dog, cat]
    assert animal in space.subclasses(RootEntity.OBJECT)
    with pytest.raises(TypeError, match="is not a class"):
        space.subclasses(space.lookup_constant("Walker"))


def test_subclasses_follow_set_superclass(space, animal, dog):
    base = space.define_class("Base")

    space.set_superclass(dog, base)

    assert space.subclasses(animal) == []
    assert space.subclasses(base) == [dog]
