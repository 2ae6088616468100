"""Tests for dispatch trace records and the dispatch state machine."""

import pytest

from objspace import DispatchRecord, DispatchState, EntityId
from objspace.tracing.models import can_transition


def _record() -> DispatchRecord:
    return DispatchRecord(receiver=EntityId(0, 20, 1), name="greet", argc=1)


def test_new_record_starts_resolving():
    record = _record()

    assert record.state is DispatchState.RESOLVING
    assert record.outcome is None


@pytest.mark.parametrize(
    "path",
    [
        [DispatchState.ERROR],
        [DispatchState.RESOLVED, DispatchState.INVOKING, DispatchState.DONE],
        [DispatchState.RESOLVED, DispatchState.ERROR],
        [DispatchState.RESOLVED, DispatchState.INVOKING, DispatchState.ERROR],
        [
            DispatchState.UNRESOLVED,
            DispatchState.FALLBACK_CHECK,
            DispatchState.HANDLED,
            DispatchState.DONE,
        ],
        [
            DispatchState.UNRESOLVED,
            DispatchState.FALLBACK_CHECK,
            DispatchState.UNHANDLED,
            DispatchState.ERROR,
        ],
    ],
)
def test_legal_paths(path):
    record = _record()

    for state in path:
        record.advance(state)

    assert record.outcome is path[-1]
    assert record.path == [DispatchState.RESOLVING, *path]


@pytest.mark.parametrize(
    ("source", "target"),
    [
        (DispatchState.RESOLVING, DispatchState.DONE),
        (DispatchState.UNRESOLVED, DispatchState.HANDLED),
        (DispatchState.UNHANDLED, DispatchState.DONE),
        (DispatchState.DONE, DispatchState.RESOLVING),
        (DispatchState.ERROR, DispatchState.DONE),
    ],
)
def test_illegal_transitions(source, target):
    assert not can_transition(source, target)


def test_advance_rejects_illegal_transition():
    record = _record()

    with pytest.raises(ValueError, match="RESOLVING -> DONE"):
        record.advance(DispatchState.DONE)
    assert record.path == [DispatchState.RESOLVING]


def test_terminal_states():
    terminal = {state for state in DispatchState if state.is_terminal()}

    assert terminal == {DispatchState.DONE, DispatchState.ERROR}


def test_dict_round_trip():
    record = _record()
    record.advance(DispatchState.UNRESOLVED)
    record.advance(DispatchState.FALLBACK_CHECK)
    record.advance(DispatchState.HANDLED)
    record.advance(DispatchState.DONE)
    record.owner = EntityId(0, 17, 0)
    record.duration_ms = 0.5

    data = record.to_dict()

    assert data["receiver"] == [0, 20, 1]
    assert data["path"][-1] == "done"
    assert "error" not in data
    assert DispatchRecord.from_dict(data) == record
