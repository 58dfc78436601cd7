"""Node, metadata, and snapshot value objects for the history tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from .errors import SnapshotError
from .ids import NodeId


@runtime_checkable
class HistoryRecord(Protocol):
    """Anything the tree can store: only the identifier is ever read."""

    @property
    def id(self) -> NodeId:
        ...


def record_id(record: Union[HistoryRecord, Mapping[str, Any]]) -> NodeId:
    """Return the identifier carried by ``record`` (attribute or ``"id"`` key)."""

    if isinstance(record, Mapping):
        value = record.get("id")
    else:
        value = getattr(record, "id", None)
    if not isinstance(value, str) or not value:
        raise ValueError("History records must carry a non-empty string 'id'")
    return value


@dataclass(frozen=True, slots=True)
class NodeMeta:
    """Display-only metadata attached to a node."""

    timestamp: int
    label: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "label": self.label}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NodeMeta":
        return cls(timestamp=int(data.get("timestamp", 0)), label=data.get("label"))


@dataclass(frozen=True, slots=True)
class HistoryNode:
    """One recorded point in history.

    Nodes are immutable; the tree swaps in an updated copy whenever a child is
    appended, so instances handed to callers never change underneath them.
    """

    id: NodeId
    parent_id: Optional[NodeId]
    meta: NodeMeta
    children: tuple[NodeId, ...] = ()
    data: Any = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_branch_point(self) -> bool:
        return len(self.children) > 1

    @property
    def label(self) -> Optional[str]:
        return self.meta.label

    def with_child(self, child_id: NodeId) -> "HistoryNode":
        return HistoryNode(
            id=self.id,
            parent_id=self.parent_id,
            meta=self.meta,
            children=self.children + (child_id,),
            data=self.data,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "children": list(self.children),
            "meta": self.meta.to_dict(),
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryNode":
        if not isinstance(data, Mapping) or not isinstance(data.get("id"), str):
            raise SnapshotError("Node records must be mappings with a string 'id'")
        raw_meta = data.get("meta") or {}
        if not isinstance(raw_meta, Mapping):
            raise SnapshotError(
                f"Node '{data['id']}' has non-mapping meta", node_id=data["id"]
            )
        try:
            node_id = data["id"]
            parent_id = data.get("parent_id")
            children = tuple(data.get("children") or ())
            meta = NodeMeta.from_dict(raw_meta)
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"Malformed node record: {exc}") from exc
        return cls(
            id=node_id,
            parent_id=parent_id,
            meta=meta,
            children=children,
            data=data.get("data"),
        )


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """Serialized node set plus the cursor needed to resume a tree."""

    current_id: NodeId
    nodes: Mapping[NodeId, HistoryNode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_id": self.current_id,
            "nodes": {node_id: node.to_dict() for node_id, node in self.nodes.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistorySnapshot":
        current_id = data.get("current_id")
        if not isinstance(current_id, str):
            raise SnapshotError("Snapshot is missing 'current_id'")
        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, Mapping):
            raise SnapshotError("Snapshot is missing 'nodes'")
        nodes: dict[NodeId, HistoryNode] = {}
        for key, raw in raw_nodes.items():
            node = HistoryNode.from_dict(raw)
            if node.id != key:
                raise SnapshotError(
                    f"Node keyed as '{key}' reports id '{node.id}'", node_id=key
                )
            nodes[key] = node
        return cls(current_id=current_id, nodes=nodes)


__all__ = [
    "HistoryRecord",
    "HistoryNode",
    "HistorySnapshot",
    "NodeMeta",
    "record_id",
]
