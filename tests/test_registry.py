"""Tests for the variable name registry."""

import pytest

from robot_components.registry import NameRegistry, validate_rapid_name


def test_add_unique_names():
    registry = NameRegistry()

    assert registry.add("tool_a", "tool1")
    assert registry.add("tool_b", "tool2")

    assert len(registry) == 2
    assert "tool1" in registry
    assert registry.name_of("tool_b") == "tool2"
    assert registry.is_unique("tool_a")
    assert registry.pending() == []


def test_duplicate_name_is_pending():
    registry = NameRegistry()
    registry.add("a", "wobj1")

    assert not registry.add("b", "wobj1")

    assert not registry.is_unique("b")
    assert registry.name_of("b") is None
    assert registry.pending() == ["b"]


def test_readding_own_name():
    registry = NameRegistry()
    registry.add("a", "p10")

    assert registry.add("a", "p10")
    assert len(registry) == 1


def test_rename_releases_old_name():
    registry = NameRegistry()
    registry.add("a", "p10")
    registry.add("b", "p10")
    notified = []
    registry.subscribe(notified.append)

    assert registry.rename("a", "p20")

    assert "p20" in registry
    assert notified == [["b"]]
    assert registry.recheck() == ["b"]
    assert registry.name_of("b") == "p10"
    assert registry.pending() == []


def test_remove_notifies_pending_owners():
    registry = NameRegistry()
    registry.add("a", "speed")
    registry.add("b", "speed")
    registry.add("c", "speed")
    notified = []
    registry.subscribe(notified.append)

    registry.remove("a")

    assert notified == [["b", "c"]]
    # Only the first pending owner gets the freed name
    assert registry.recheck() == ["b"]
    assert registry.pending() == ["c"]


def test_remove_without_pending_owners_is_silent():
    registry = NameRegistry()
    registry.add("a", "zone")
    notified = []
    registry.subscribe(notified.append)

    registry.remove("a")
    registry.remove("unknown")

    assert notified == []
    assert len(registry) == 0


def test_remove_pending_owner():
    registry = NameRegistry()
    registry.add("a", "x")
    registry.add("b", "x")

    registry.remove("b")

    assert registry.pending() == []
    assert registry.name_of("a") == "x"


@pytest.mark.parametrize("name, problems", [
    ("tool1", 0),
    ("1tool", 1),
    ("t" * 32, 0),
    ("t" * 33, 1),
    ("1" + "t" * 32, 2),
])
def test_validate_rapid_name(name, problems):
    assert len(validate_rapid_name(name)) == problems
