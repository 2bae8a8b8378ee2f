"""Tests for the callback registry."""

from portus.registry import Registry


def test_emit_in_registration_order():
    registry = Registry()
    calls = []
    registry.watch("k", lambda v: calls.append(("first", v)))
    registry.watch("k", lambda v: calls.append(("second", v)))
    registry.emit("k", 1)
    assert calls == [("first", 1), ("second", 1)]


def test_emit_only_matching_key():
    registry = Registry()
    calls = []
    registry.watch("a", calls.append)
    registry.emit("b", 1)
    assert calls == []


def test_unwatch_is_idempotent_and_exact():
    registry = Registry()
    calls = []
    unwatch_one = registry.watch("k", calls.append)
    registry.watch("k", calls.append)
    unwatch_one()
    unwatch_one()
    registry.emit("k", "x")
    assert calls == ["x"]
    assert registry.keys() == ["k"]


def test_last_unwatch_drops_key():
    registry = Registry()
    unwatch = registry.watch("k", print)
    unwatch()
    assert registry.keys() == []


def test_unwatch_during_emit():
    registry = Registry()
    calls = []
    unwatch = None

    def once(value):
        calls.append(value)
        unwatch()

    unwatch = registry.watch("k", once)
    registry.watch("k", calls.append)
    registry.emit("k", 1)
    registry.emit("k", 2)
    assert calls == [1, 1, 2]
