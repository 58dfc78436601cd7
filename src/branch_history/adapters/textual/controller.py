"""UI-agnostic controller that wires a HistoryTree into Textual callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from branch_history.history import HistoryError, HistoryTree, NodeId


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(frozen=True, slots=True)
class HistoryRow:
    """One display line of the flattened history tree."""

    id: NodeId
    depth: int
    label: str
    is_current: bool
    on_path: bool
    child_count: int


@dataclass(frozen=True, slots=True)
class HistoryView:
    """Render-ready snapshot of the tree for a host widget."""

    root_id: NodeId
    current_id: NodeId
    rows: Tuple[HistoryRow, ...]
    redo_candidates: Tuple[NodeId, ...]

    @classmethod
    def from_tree(cls, tree: HistoryTree) -> "HistoryView":
        path = set(tree.path())
        current = tree.current_id
        rows = tuple(
            HistoryRow(
                id=node.id,
                depth=depth,
                label=node.label or ("root" if node.is_root else node.id[:8]),
                is_current=node.id == current,
                on_path=node.id in path,
                child_count=len(node.children),
            )
            for node, depth in tree.walk()
        )
        return cls(
            root_id=tree.root_id,
            current_id=current,
            rows=rows,
            redo_candidates=tree.redo_candidates(),
        )


@dataclass(slots=True)
class HistoryUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_tree: Callable[[HistoryView], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class HistoryTreeAdapter:
    """Translates UI commands into tree operations and pushes views back out."""

    def __init__(self, tree: HistoryTree, hooks: HistoryUIHooks) -> None:
        self.tree = tree
        self.hooks = hooks
        self._refresh()

    def record(self, record: Any, *, label: Optional[str] = None) -> Optional[NodeId]:
        """Push ``record``; failures are reported as status text."""

        self._log_state("push ->", label=label)
        try:
            node_id = self.tree.push(record, label=label)
        except (HistoryError, ValueError) as exc:
            self._report(exc)
            return None
        self.hooks.update_status(f"recorded {label or node_id}")
        self._refresh()
        return node_id

    def undo(self) -> Optional[NodeId]:
        self._log_state("undo ->")
        try:
            before = self.tree.current_id
            current = self.tree.undo()
        except HistoryError as exc:
            self._report(exc)
            return None
        self.hooks.update_status("undo" if current != before else "already at root")
        self._refresh()
        return current

    def redo(self, child_id: Optional[NodeId] = None) -> Optional[NodeId]:
        """Redo into ``child_id``, or into the only child when none is given.

        At a branch point without an explicit choice nothing moves; the
        candidate ids are listed in the status line for the user to pick from.
        """

        self._log_state("redo ->", target=child_id)
        try:
            if child_id is None:
                candidates = self.tree.redo_candidates()
                if not candidates:
                    self.hooks.update_status("nothing to redo")
                    return None
                if len(candidates) > 1:
                    self.hooks.update_status(
                        "choose a branch: " + ", ".join(self._label(c) for c in candidates)
                    )
                    return None
                child_id = candidates[0]
            current = self.tree.redo(child_id)
        except HistoryError as exc:
            self._report(exc)
            return None
        self.hooks.update_status(f"redo {self._label(current)}")
        self._refresh()
        return current

    def view(self) -> HistoryView:
        return HistoryView.from_tree(self.tree)

    def _label(self, node_id: NodeId) -> str:
        return self.tree.node(node_id).label or node_id

    def _report(self, exc: Exception) -> None:
        self.hooks.update_status(f"error: {exc}")
        self._log_state("error <-", error=type(exc).__name__)

    def _refresh(self) -> None:
        if self.tree.is_disposed:
            return
        self.hooks.update_tree(self.view())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        if self.tree.is_disposed:
            return {"disposed": True}
        return {
            "current": self.tree.current_id,
            "nodes": len(self.tree),
            "can_undo": self.tree.can_undo(),
            "redo_candidates": len(self.tree.redo_candidates()),
        }


__all__ = ["HistoryTreeAdapter", "HistoryUIHooks", "HistoryView", "HistoryRow"]
