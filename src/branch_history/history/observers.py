"""Observer hooks fired after each cursor-moving history operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from branch_history.runtime import telemetry

from .ids import NodeId


@dataclass(frozen=True, slots=True)
class HistoryEvent:
    """What happened, where the cursor went, and the full node set afterwards."""

    action: str
    previous_id: NodeId
    current_id: NodeId
    nodes: Mapping[NodeId, Mapping[str, Any]]

    @property
    def moved(self) -> bool:
        return self.previous_id != self.current_id


HistoryObserver = Callable[[HistoryEvent], None]


class TelemetryObserver:
    """Forwards history events to the telemetry layer as structured events."""

    def __init__(
        self,
        *,
        level: str = "debug",
        logger_name: Optional[str] = None,
        include_nodes: bool = False,
    ) -> None:
        self.level = level
        self.logger_name = logger_name
        self.include_nodes = include_nodes

    def __call__(self, event: HistoryEvent) -> None:
        data: dict[str, Any] = {
            "previous": event.previous_id,
            "current": event.current_id,
            "node_count": len(event.nodes),
        }
        if self.include_nodes:
            data["nodes"] = {key: dict(value) for key, value in event.nodes.items()}
        telemetry.record_event(
            f"history.{event.action}",
            level=self.level,
            data=data,
            logger_name=self.logger_name,
        )


__all__ = ["HistoryEvent", "HistoryObserver", "TelemetryObserver"]
