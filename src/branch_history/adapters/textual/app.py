"""Executable Textual app for browsing and editing a branching history."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Footer, Header, Static, Tree
    from textual.widgets.tree import TreeNode
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use branch_history.adapters.textual.app"
    ) from exc

from branch_history.history import HistoryTree, NodeId, TelemetryObserver, TextEditRecord
from branch_history.runtime import telemetry

from .controller import HistoryTreeAdapter, HistoryUIHooks, HistoryView


@dataclass
class UIState:
    document_text: str = ""
    status_text: str = ""
    edits: int = 0


def create_default_tree(*, validate_redo: bool = True, observe: bool = False) -> HistoryTree:
    observers = [TelemetryObserver()] if observe else []
    return HistoryTree(
        validate_redo=validate_redo, observers=observers, root_label="empty document"
    )


class HistoryApp(App[None]):
    """Document on the left, history tree on the right."""

    CSS = """
	#panes {
		height: 1fr;
	}

	#document-view {
		width: 1fr;
		border: round $accent;
		padding: 1 1;
		overflow: auto;
	}

	#history-tree {
		width: 1fr;
		border: round $secondary;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("a", "append", "Append edit"),
        ("u", "undo", "Undo"),
        ("r", "redo", "Redo"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, tree: Optional[HistoryTree] = None) -> None:
        super().__init__()
        self._state = UIState()
        self.history = tree or create_default_tree()
        self.adapter: HistoryTreeAdapter | None = None
        self._document_widget: Static | None = None
        self._status_widget: Static | None = None
        self._tree_widget: Tree[NodeId] | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="panes"):
            self._document_widget = Static("", id="document-view")
            yield self._document_widget
            self._tree_widget = Tree("history", id="history-tree")
            yield self._tree_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = HistoryUIHooks(
            update_tree=self._update_tree,
            update_status=self._update_status,
            log=self._log_line,
        )
        self.adapter = HistoryTreeAdapter(self.history, hooks)
        if self._tree_widget:
            self._tree_widget.focus()

    def on_unmount(self) -> None:
        self.history.dispose()

    def action_append(self) -> None:
        if not self.adapter:
            return
        self._state.edits += 1
        before = self._state.document_text
        record = TextEditRecord(
            label=f"edit {self._state.edits}",
            before_text=before,
            after_text=f"{before}line {self._state.edits}\n",
        )
        self.adapter.record(record, label=record.label)

    def action_undo(self) -> None:
        if self.adapter:
            self.adapter.undo()

    def action_redo(self) -> None:
        if self.adapter:
            self.adapter.redo()

    def on_tree_node_selected(self, event: Tree.NodeSelected[NodeId]) -> None:
        node_id = event.node.data
        if not self.adapter or node_id is None:
            return
        if node_id == self.history.current_id:
            return
        self.adapter.redo(node_id)
        event.stop()

    def _update_tree(self, view: HistoryView) -> None:
        self._update_document()
        if not self._tree_widget:
            return
        widget = self._tree_widget
        widget.clear()
        parents: Dict[int, TreeNode[NodeId]] = {}
        for row in view.rows:
            marker = "● " if row.is_current else ("· " if row.on_path else "  ")
            label = f"{marker}{row.label}"
            if row.depth == 0:
                widget.root.set_label(label)
                widget.root.data = row.id
                node = widget.root
            else:
                parent = parents[row.depth - 1]
                if row.child_count:
                    node = parent.add(label, data=row.id, expand=True)
                else:
                    node = parent.add_leaf(label, data=row.id)
            parents[row.depth] = node
        widget.root.expand()

    def _update_document(self) -> None:
        record = self.history.current.data
        text = record.apply() if isinstance(record, TextEditRecord) else ""
        self._state.document_text = text
        if self._document_widget:
            self._document_widget.update(text or "(empty)")

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        self.log(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browse a branching undo history.")
    parser.add_argument(
        "--lax-redo",
        action="store_true",
        default=not telemetry.env_flag("VALIDATE_REDO", True),
        help="Allow redo into any node, not only children of the current one",
    )
    parser.add_argument(
        "--observe",
        action="store_true",
        default=telemetry.env_flag("OBSERVE", False),
        help="Emit a telemetry event after every push/undo/redo",
    )
    parser.add_argument(
        "--telemetry-preset",
        choices=telemetry.PRESETS,
        default=None,
        help="Telemetry preset (default: configure from BRANCH_HISTORY_* env vars)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.telemetry_preset:
        telemetry.configure(preset=args.telemetry_preset)
    tree = create_default_tree(validate_redo=not args.lax_redo, observe=args.observe)
    HistoryApp(tree).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
