from typing import List

from branch_history.adapters.textual import HistoryTreeAdapter, HistoryUIHooks, HistoryView
from branch_history.history import HistoryTree, TextEditRecord


def make_adapter(
    views: List[HistoryView],
    statuses: List[str],
    logs: List[str] | None = None,
) -> HistoryTreeAdapter:
    tree = HistoryTree(id_factory=lambda: "root", root_label="empty")
    hooks = HistoryUIHooks(
        update_tree=views.append,
        update_status=statuses.append,
        log=(logs.append if logs is not None else lambda line: None),
    )
    return HistoryTreeAdapter(tree, hooks)


def edit(node_id: str, text: str) -> TextEditRecord:
    return TextEditRecord(label=node_id, before_text="", after_text=text, id=node_id)


def test_adapter_publishes_initial_view() -> None:
    views: List[HistoryView] = []
    make_adapter(views, [])

    assert len(views) == 1
    (row,) = views[0].rows
    assert row.id == "root"
    assert row.label == "empty"
    assert row.is_current and row.on_path


def test_adapter_records_and_undoes() -> None:
    views: List[HistoryView] = []
    statuses: List[str] = []
    adapter = make_adapter(views, statuses)

    adapter.record(edit("a", "alpha"), label="A")
    adapter.undo()
    adapter.undo()

    assert views[-1].current_id == "root"
    assert statuses == ["recorded A", "undo", "already at root"]
    labels = [row.label for row in views[-1].rows]
    assert labels == ["empty", "A"]


def test_adapter_redo_follows_single_child() -> None:
    views: List[HistoryView] = []
    statuses: List[str] = []
    adapter = make_adapter(views, statuses)
    adapter.record(edit("a", "alpha"))
    adapter.undo()

    assert adapter.redo() == "a"
    assert views[-1].current_id == "a"
    assert adapter.redo() is None
    assert statuses[-1] == "nothing to redo"


def test_adapter_asks_for_choice_at_branch_point() -> None:
    views: List[HistoryView] = []
    statuses: List[str] = []
    adapter = make_adapter(views, statuses)
    adapter.record(edit("a", "alpha"), label="A")
    adapter.undo()
    adapter.record(edit("b", "beta"), label="B")
    adapter.undo()
    published = len(views)

    assert adapter.redo() is None
    assert statuses[-1] == "choose a branch: A, B"
    assert len(views) == published
    assert adapter.tree.current_id == "root"

    assert adapter.redo("b") == "b"
    rows = {row.id: row for row in views[-1].rows}
    assert rows["b"].is_current
    assert rows["root"].on_path and not rows["a"].on_path
    assert rows["root"].child_count == 2


def test_adapter_reports_tree_errors_as_status() -> None:
    views: List[HistoryView] = []
    statuses: List[str] = []
    logs: List[str] = []
    adapter = make_adapter(views, statuses, logs)
    adapter.record(edit("a", "alpha"))

    assert adapter.record(edit("a", "again")) is None
    assert statuses[-1].startswith("error: ")
    assert adapter.redo("root") is None
    assert any(line.startswith("error <-") for line in logs)


def test_adapter_emits_log_lines() -> None:
    logs: List[str] = []
    adapter = make_adapter([], [], logs)

    adapter.record(edit("a", "alpha"))

    assert any(line.startswith("push ->") for line in logs)
    assert any("current='root'" in line for line in logs)
