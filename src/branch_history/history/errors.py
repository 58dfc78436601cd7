"""Exceptions raised by the history tree."""

from __future__ import annotations


class HistoryError(RuntimeError):
    """Base class for history tree failures."""


class DuplicateIdentifierError(HistoryError):
    """Raised when a pushed record reuses an identifier already in the tree."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' already exists in the history tree")
        self.node_id = node_id


class InvalidTransitionError(HistoryError):
    """Raised when redo targets a node the cursor cannot move to."""

    def __init__(self, current_id: str, target_id: str, *, reason: str) -> None:
        super().__init__(
            f"Cannot redo from '{current_id}' to '{target_id}': {reason}"
        )
        self.current_id = current_id
        self.target_id = target_id
        self.reason = reason


class UseAfterDisposeError(HistoryError):
    """Raised when a disposed tree is used again."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"History tree was disposed; cannot {operation}")
        self.operation = operation


class SnapshotError(HistoryError, ValueError):
    """Raised when a snapshot does not describe a well-formed history tree."""

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        super().__init__(message)
        self.node_id = node_id


__all__ = [
    "HistoryError",
    "DuplicateIdentifierError",
    "InvalidTransitionError",
    "UseAfterDisposeError",
    "SnapshotError",
]
