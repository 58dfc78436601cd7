"""Branching undo/redo history.

``HistoryTree`` records user operations as a tree instead of a linear stack:
pushing after an undo starts a sibling branch, so the undone future stays
reachable. The tree only stores opaque records; applying or reverting them is
the caller's job.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from branch_history.runtime.telemetry import span

from .errors import (
    DuplicateIdentifierError,
    InvalidTransitionError,
    SnapshotError,
    UseAfterDisposeError,
)
from .ids import Clock, IdFactory, NodeId, new_node_id, now_ms
from .node import HistoryNode, HistoryRecord, HistorySnapshot, NodeMeta, record_id
from .observers import HistoryEvent, HistoryObserver


class HistoryTree(AbstractContextManager["HistoryTree"]):
    """Owns the history nodes and the cursor marking the present state.

    Parameters
    ----------
    id_factory:
        Produces the root identifier. Pushed nodes reuse their record's id.
    clock:
        Returns the creation timestamp (milliseconds) stored in node metadata.
    observers:
        Callables notified with a ``HistoryEvent`` after push, undo and redo.
    validate_redo:
        When true (default) ``redo`` only accepts children of the current
        node. ``False`` restores the permissive behaviour of jumping to any
        node in the tree, e.g. straight into a sibling branch.
    root_label:
        Optional display label for the root node.
    logger_name:
        Telemetry logger used for operation spans.
    """

    def __init__(
        self,
        *,
        id_factory: IdFactory = new_node_id,
        clock: Clock = now_ms,
        observers: Iterable[HistoryObserver] = (),
        validate_redo: bool = True,
        root_label: Optional[str] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self._configure(
            clock=clock,
            observers=observers,
            validate_redo=validate_redo,
            logger_name=logger_name,
        )
        root = HistoryNode(
            id=id_factory(),
            parent_id=None,
            meta=NodeMeta(timestamp=clock(), label=root_label),
        )
        self._nodes: Dict[NodeId, HistoryNode] = {root.id: root}
        self._root_id: Optional[NodeId] = root.id
        self._current_id: Optional[NodeId] = root.id

    def _configure(
        self,
        *,
        clock: Clock,
        observers: Iterable[HistoryObserver],
        validate_redo: bool,
        logger_name: Optional[str],
    ) -> None:
        self._clock = clock
        self._observers: List[HistoryObserver] = list(observers)
        self.validate_redo = validate_redo
        self._logger_name = logger_name

    @classmethod
    def restore(
        cls,
        snapshot: Union[HistorySnapshot, Mapping[str, Any]],
        *,
        clock: Clock = now_ms,
        observers: Iterable[HistoryObserver] = (),
        validate_redo: bool = True,
        logger_name: Optional[str] = None,
    ) -> "HistoryTree":
        """Rebuild a tree, cursor included, from ``snapshot()`` output."""

        if not isinstance(snapshot, HistorySnapshot):
            snapshot = HistorySnapshot.from_dict(snapshot)
        nodes = dict(snapshot.nodes)
        root_id = _check_structure(nodes, snapshot.current_id)

        tree = cls.__new__(cls)
        tree._configure(
            clock=clock,
            observers=observers,
            validate_redo=validate_redo,
            logger_name=logger_name,
        )
        tree._nodes = nodes
        tree._root_id = root_id
        tree._current_id = snapshot.current_id
        return tree

    # ------------------------------------------------------------------
    # Operations

    def push(
        self,
        record: Union[HistoryRecord, Mapping[str, Any]],
        *,
        label: Optional[str] = None,
    ) -> NodeId:
        """Record ``record`` as a new child of the current node and move to it."""

        previous = self._alive("push")
        node_id = record_id(record)
        with span(
            "history::push",
            logger_name=self._logger_name,
            component="history",
            metadata={"node_id": node_id, "parent_id": previous},
        ) as handle:
            if node_id in self._nodes:
                raise DuplicateIdentifierError(node_id)
            parent = self._nodes[previous]
            node = HistoryNode(
                id=node_id,
                parent_id=previous,
                meta=NodeMeta(timestamp=self._clock(), label=label),
                data=record,
            )
            if parent.children:
                handle.add_metadata("branch_count", len(parent.children) + 1)
            self._nodes[previous] = parent.with_child(node_id)
            self._nodes[node_id] = node
            self._current_id = node_id
        self._notify("push", previous)
        return node_id

    def undo(self) -> NodeId:
        """Move the cursor to its parent. At the root this does nothing."""

        previous = self._alive("undo")
        parent_id = self._nodes[previous].parent_id
        with span(
            "history::undo",
            logger_name=self._logger_name,
            component="history",
            metadata={"from": previous},
        ) as handle:
            if parent_id is None:
                handle.add_metadata("at_root", True)
            else:
                self._current_id = parent_id
        self._notify("undo", previous)
        return self._current_id  # type: ignore[return-value]

    def redo(self, child_id: NodeId) -> NodeId:
        """Move the cursor forward into ``child_id``.

        The tree never picks a branch on its own; the caller names the child.
        """

        previous = self._alive("redo")
        with span(
            "history::redo",
            logger_name=self._logger_name,
            component="history",
            metadata={"from": previous, "to": child_id},
        ):
            if child_id not in self._nodes:
                raise InvalidTransitionError(
                    previous, child_id, reason="node does not exist"
                )
            if self.validate_redo and child_id not in self._nodes[previous].children:
                raise InvalidTransitionError(
                    previous, child_id, reason="not a child of the current node"
                )
            self._current_id = child_id
        self._notify("redo", previous)
        return child_id

    def serialize(self) -> Mapping[NodeId, Dict[str, Any]]:
        """Return a read-only ``{id: node_dict}`` view of every node.

        Each ``node_dict`` is freshly built, so editing it never reaches the
        tree. Payloads are passed through by reference.
        """

        self._alive("serialize")
        return MappingProxyType(
            {node_id: node.to_dict() for node_id, node in self._nodes.items()}
        )

    def snapshot(self) -> HistorySnapshot:
        """Capture the nodes together with the cursor for ``restore``."""

        current = self._alive("snapshot")
        return HistorySnapshot(current_id=current, nodes=self._nodes)

    def dispose(self) -> None:
        """Drop every node. The tree cannot be used afterwards."""

        if self._root_id is None:
            return
        with span(
            "history::dispose",
            logger_name=self._logger_name,
            component="history",
            metadata={"node_count": len(self._nodes)},
        ):
            self._nodes.clear()
            self._observers.clear()
            self._root_id = None
            self._current_id = None

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.dispose()
        return False

    # ------------------------------------------------------------------
    # Observers

    def add_observer(self, observer: HistoryObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: HistoryObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, action: str, previous: NodeId) -> None:
        if not self._observers:
            return
        event = HistoryEvent(
            action=action,
            previous_id=previous,
            current_id=self.current_id,
            nodes=self.serialize(),
        )
        for observer in list(self._observers):
            observer(event)

    # ------------------------------------------------------------------
    # Queries

    @property
    def is_disposed(self) -> bool:
        return self._root_id is None

    @property
    def root_id(self) -> NodeId:
        self._alive("read the root")
        return self._root_id  # type: ignore[return-value]

    @property
    def current_id(self) -> NodeId:
        return self._alive("read the cursor")

    @property
    def current(self) -> HistoryNode:
        return self._nodes[self._alive("read the cursor")]

    def node(self, node_id: NodeId) -> HistoryNode:
        self._alive("read nodes")
        try:
            return self._nodes[node_id]
        except KeyError as exc:
            raise KeyError(f"Node '{node_id}' is not in the history tree") from exc

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def children(self, node_id: Optional[NodeId] = None) -> Tuple[NodeId, ...]:
        target = node_id if node_id is not None else self.current_id
        return self.node(target).children

    def parent_id(self, node_id: Optional[NodeId] = None) -> Optional[NodeId]:
        target = node_id if node_id is not None else self.current_id
        return self.node(target).parent_id

    def can_undo(self) -> bool:
        return self.current.parent_id is not None

    def can_redo(self) -> bool:
        return bool(self.current.children)

    def redo_candidates(self) -> Tuple[NodeId, ...]:
        return self.current.children

    def path(self, node_id: Optional[NodeId] = None) -> Tuple[NodeId, ...]:
        """Identifiers from the root down to ``node_id`` (default: cursor)."""

        target: Optional[NodeId] = node_id if node_id is not None else self.current_id
        chain: List[NodeId] = []
        while target is not None:
            chain.append(target)
            target = self.node(target).parent_id
        chain.reverse()
        return tuple(chain)

    def walk(self) -> Iterator[Tuple[HistoryNode, int]]:
        """Yield ``(node, depth)`` pairs in pre-order, children in creation order."""

        stack: List[Tuple[NodeId, int]] = [(self.root_id, 0)]
        while stack:
            node_id, depth = stack.pop()
            node = self._nodes[node_id]
            yield node, depth
            stack.extend((child, depth + 1) for child in reversed(node.children))

    def validate(self) -> None:
        """Raise ``SnapshotError`` if any structural invariant is broken."""

        self._alive("validate")
        _check_structure(self._nodes, self._current_id)

    def _alive(self, operation: str) -> NodeId:
        if self._current_id is None:
            raise UseAfterDisposeError(operation)
        return self._current_id

    def __repr__(self) -> str:
        if self.is_disposed:
            return "HistoryTree(disposed)"
        return f"HistoryTree(nodes={len(self._nodes)}, current={self._current_id!r})"


def _check_structure(
    nodes: Mapping[NodeId, HistoryNode], current_id: Optional[NodeId]
) -> NodeId:
    roots = [node.id for node in nodes.values() if node.parent_id is None]
    if len(roots) != 1:
        raise SnapshotError(f"Expected exactly one root node, found {len(roots)}")

    for node_id, node in nodes.items():
        if node.id != node_id:
            raise SnapshotError(
                f"Node keyed as '{node_id}' reports id '{node.id}'", node_id=node_id
            )
        if len(set(node.children)) != len(node.children):
            raise SnapshotError(f"Node '{node_id}' lists a child twice", node_id=node_id)
        for child_id in node.children:
            child = nodes.get(child_id)
            if child is None or child.parent_id != node_id:
                raise SnapshotError(
                    f"Child '{child_id}' of '{node_id}' does not point back to it",
                    node_id=child_id,
                )
        if node.parent_id is not None:
            parent = nodes.get(node.parent_id)
            if parent is None:
                raise SnapshotError(
                    f"Parent '{node.parent_id}' of '{node_id}' is missing",
                    node_id=node_id,
                )
            if node_id not in parent.children:
                raise SnapshotError(
                    f"Node '{node_id}' is not listed under its parent", node_id=node_id
                )

    reachable = 0
    stack = [roots[0]]
    while stack:
        reachable += 1
        stack.extend(nodes[stack.pop()].children)
    if reachable != len(nodes):
        raise SnapshotError("Some nodes are not reachable from the root")

    if current_id not in nodes:
        raise SnapshotError(
            f"Cursor '{current_id}' does not refer to a node", node_id=current_id
        )
    return roots[0]


__all__ = ["HistoryTree"]
