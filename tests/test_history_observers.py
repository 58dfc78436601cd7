from typing import List

import pytest

from branch_history.history import (
    DuplicateIdentifierError,
    HistoryEvent,
    HistoryTree,
    InvalidTransitionError,
    TelemetryObserver,
)
from branch_history.history import observers as observers_module


def make_tree(events: List[HistoryEvent]) -> HistoryTree:
    return HistoryTree(id_factory=lambda: "root", observers=[events.append])


def test_observers_see_every_cursor_operation() -> None:
    events: List[HistoryEvent] = []
    tree = make_tree(events)

    tree.push({"id": "n1"})
    tree.undo()
    tree.undo()
    tree.redo("n1")

    assert [event.action for event in events] == ["push", "undo", "undo", "redo"]
    assert [(e.previous_id, e.current_id) for e in events] == [
        ("root", "n1"),
        ("n1", "root"),
        ("root", "root"),
        ("root", "n1"),
    ]
    assert [event.moved for event in events] == [True, True, False, True]
    assert set(events[0].nodes) == {"root", "n1"}


def test_failed_operations_do_not_notify() -> None:
    events: List[HistoryEvent] = []
    tree = make_tree(events)
    tree.push({"id": "n1"})
    events.clear()

    with pytest.raises(DuplicateIdentifierError):
        tree.push({"id": "n1"})
    with pytest.raises(InvalidTransitionError):
        tree.redo("missing")

    assert events == []


def test_add_and_remove_observer() -> None:
    events: List[HistoryEvent] = []
    tree = HistoryTree()
    tree.add_observer(events.append)
    tree.push({"id": "n1"})
    tree.remove_observer(events.append)
    tree.undo()

    assert [event.action for event in events] == ["push"]


def test_telemetry_observer_records_structured_event(monkeypatch) -> None:
    calls = []

    def fake_record_event(name, **kwargs):
        calls.append((name, kwargs))

    monkeypatch.setattr(observers_module.telemetry, "record_event", fake_record_event)
    tree = HistoryTree(id_factory=lambda: "root")
    tree.add_observer(TelemetryObserver(level="info", include_nodes=True))

    tree.push({"id": "n1"})

    name, kwargs = calls[-1]
    assert name == "history.push"
    assert kwargs["level"] == "info"
    assert kwargs["data"]["previous"] == "root"
    assert kwargs["data"]["current"] == "n1"
    assert kwargs["data"]["node_count"] == 2
    assert set(kwargs["data"]["nodes"]) == {"root", "n1"}
