"""Textual front end for the history tree."""

from .controller import HistoryRow, HistoryTreeAdapter, HistoryUIHooks, HistoryView

__all__ = ["HistoryTreeAdapter", "HistoryUIHooks", "HistoryView", "HistoryRow"]
