"""Ready-made history payloads."""

from __future__ import annotations

from dataclasses import dataclass, field

from .ids import NodeId, new_node_id


@dataclass(frozen=True, slots=True)
class TextEditRecord:
    """Whole-text edit: enough to move a plain text document either way."""

    label: str
    before_text: str
    after_text: str
    id: NodeId = field(default_factory=new_node_id)

    def apply(self) -> str:
        return self.after_text

    def revert(self) -> str:
        return self.before_text


__all__ = ["TextEditRecord"]
