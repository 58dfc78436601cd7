"""Branching history tree, node records, and observer hooks."""

from .errors import (
    DuplicateIdentifierError,
    HistoryError,
    InvalidTransitionError,
    SnapshotError,
    UseAfterDisposeError,
)
from .ids import NodeId, new_node_id, now_ms
from .node import HistoryNode, HistoryRecord, HistorySnapshot, NodeMeta, record_id
from .observers import HistoryEvent, HistoryObserver, TelemetryObserver
from .records import TextEditRecord
from .tree import HistoryTree

__all__ = [
    "HistoryTree",
    "HistoryNode",
    "HistoryRecord",
    "HistorySnapshot",
    "NodeMeta",
    "NodeId",
    "HistoryEvent",
    "HistoryObserver",
    "TelemetryObserver",
    "TextEditRecord",
    "HistoryError",
    "DuplicateIdentifierError",
    "InvalidTransitionError",
    "SnapshotError",
    "UseAfterDisposeError",
    "new_node_id",
    "now_ms",
    "record_id",
]
