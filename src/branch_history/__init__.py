"""Branching undo/redo history with telemetry and a Textual front end."""

__all__ = [
    "adapters",
    "history",
    "runtime",
]

__version__ = "0.1.0"
