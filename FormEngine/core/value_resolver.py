"""Select the renderable string for a field or table cell.

Precedence is fixed: live captured value, then the stored value, then the placeholder, then
the empty string. Calculated entities skip the live value; they take the export-time totals
when given, else their stored value. No arithmetic happens here."""

from __future__ import annotations

from typing import Mapping, Optional

from .entity_store import Entity
from .key_normalizer import KeyNormalizer


def cell_key(row_index: int, column_id: str) -> str:
    """Key under which a live capture map stores a table cell."""
    return f"{row_index}:{column_id}"


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class ValueResolver:
    """Pure resolver over already-available value sources."""

    def resolve(
        self,
        entity: Entity,
        live_map: Optional[Mapping[str, str]] = None,
        calculated: Optional[Mapping[str, str]] = None,
    ) -> str:
        if entity.is_calculated:
            recalculated = _text((calculated or {}).get(entity.id))
            if recalculated:
                return recalculated
        else:
            live = _text((live_map or {}).get(entity.id))
            if live:
                return live
        if entity.value:
            return _text(entity.value)
        if entity.placeholder:
            return _text(entity.placeholder)
        return ""

    def resolve_cell(
        self,
        row: Mapping[str, str],
        row_index: int,
        column: Entity,
        normalizer: KeyNormalizer,
        live_map: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Resolve one cell; `row` is expected to be normalized already."""
        live_map = live_map or {}
        live = _text(live_map.get(cell_key(row_index, column.id)))
        if not live:
            alias = normalizer.alias_of(column.id)
            if alias is not None:
                live = _text(live_map.get(cell_key(row_index, alias)))
        if live:
            return live
        stored = _text(normalizer.lookup(row, column.id))
        if stored:
            return stored
        return _text(column.placeholder)


__all__ = ["ValueResolver", "cell_key"]
