"""Identifier and clock sources injected into the history tree."""

from __future__ import annotations

import time
import uuid
from typing import Callable

NodeId = str
IdFactory = Callable[[], NodeId]
Clock = Callable[[], int]


def new_node_id() -> NodeId:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Wall-clock time in integer milliseconds since the epoch."""

    return time.time_ns() // 1_000_000


__all__ = ["NodeId", "IdFactory", "Clock", "new_node_id", "now_ms"]
