"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from objspace import ObjectSpace, RuntimeSettings


@pytest.fixture
def space():
    """Fresh ObjectSpace with default policy."""
    return ObjectSpace(settings=RuntimeSettings())


@pytest.fixture
def animal(space):
    """Class Animal with a public `speak` returning "..."."""
    cls = space.define_class("Animal")
    space.define_instance_method(cls, "speak", lambda self: "...")
    return cls


@pytest.fixture
def dog(space, animal):
    """Class Dog < Animal."""
    return space.define_class("Dog", superclass=animal)
