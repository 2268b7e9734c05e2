"""Bounded in-memory history of form edits."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional


@dataclass
class ChangeRecord:
    change_type: str                     # move, add, remove, label, value, cell, swap, suggestion
    entity_id: str
    old_value: Any = None
    new_value: Any = None
    scope_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.change_type,
            "entityId": self.entity_id,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "scopeId": self.scope_id,
            "timestamp": self.timestamp,
        }


class ChangeLog:
    """Keeps the most recent `max_entries` changes, oldest dropped first."""

    def __init__(self, max_entries: int = 50):
        self._entries: Deque[ChangeRecord] = deque(maxlen=max(1, max_entries))

    def record(
        self,
        change_type: str,
        entity_id: str,
        old_value: Any = None,
        new_value: Any = None,
        scope_id: Optional[str] = None,
    ) -> ChangeRecord:
        entry = ChangeRecord(change_type, entity_id, old_value, new_value, scope_id)
        self._entries.append(entry)
        return entry

    def entries(self) -> List[ChangeRecord]:
        return list(self._entries)

    def latest(self) -> Optional[ChangeRecord]:
        return self._entries[-1] if self._entries else None

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ChangeRecord", "ChangeLog"]
