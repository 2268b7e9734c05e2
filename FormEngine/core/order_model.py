"""Per-scope ordering of ids.

OrderModel is the single explicit map of `scope_id -> [id, ...]` handed to composition.
Every operation computes a new list from (current order, operation) and stores it; invalid
operations leave the order untouched and are logged rather than raised."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from loguru import logger


def move_in_order(order: List[str], entity_id: str, target_index: int) -> List[str]:
    """Return `order` with `entity_id` removed and reinserted at `target_index`.

    The input is returned as a copy when the id is absent or the index is outside
    `0 <= target_index < len(order)`."""
    if entity_id not in order:
        return list(order)
    if not isinstance(target_index, int) or not 0 <= target_index < len(order):
        return list(order)
    moved = [item for item in order if item != entity_id]
    moved.insert(target_index, entity_id)
    return moved


def swap_in_order(order: List[str], first_id: str, second_id: str) -> List[str]:
    """Return `order` with the positions of two ids exchanged."""
    if first_id not in order or second_id not in order or first_id == second_id:
        return list(order)
    swapped = list(order)
    i, j = swapped.index(first_id), swapped.index(second_id)
    swapped[i], swapped[j] = swapped[j], swapped[i]
    return swapped


def dedupe_order(order: Iterable[str]) -> List[str]:
    """Keep the first occurrence of each id."""
    seen = set()
    result = []
    for item in order:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


class OrderModel:
    """Order lists for every scope: section fields, table columns, group members, page groups."""

    def __init__(self, orders: Optional[Dict[str, List[str]]] = None):
        self._orders: Dict[str, List[str]] = {
            scope_id: dedupe_order(order) for scope_id, order in (orders or {}).items()
        }

    @classmethod
    def from_store(cls, store) -> "OrderModel":
        """Seed one order per scope from the store's natural (insertion) order."""
        orders: Dict[str, List[str]] = {"page": store.natural_order("page")}
        for scope_id in list(store.groups) + list(store.sections) + list(store.tables):
            orders[scope_id] = store.natural_order(scope_id)
        return cls(orders)

    # ======== External interface ========

    def order_for(self, scope_id: str) -> List[str]:
        """Copy of the scope's order; an unknown scope yields an empty list."""
        return list(self._orders.get(scope_id, []))

    def index_of(self, scope_id: str, entity_id: str) -> int:
        """Position of the id in its scope, or -1."""
        order = self._orders.get(scope_id, [])
        return order.index(entity_id) if entity_id in order else -1

    def apply_move(self, scope_id: str, entity_id: str, target_index: int) -> List[str]:
        """Move an id within its scope and return the resulting order."""
        current = self._orders.get(scope_id)
        if current is None:
            logger.warning(f"Move ignored: scope {scope_id} has no order")
            return []
        if entity_id not in current:
            logger.warning(f"Move ignored: {entity_id} is not in scope {scope_id}")
            return list(current)
        if not isinstance(target_index, int) or not 0 <= target_index < len(current):
            logger.warning(
                f"Move ignored: index {target_index} out of range for scope {scope_id} (size {len(current)})"
            )
            return list(current)
        new_order = move_in_order(current, entity_id, target_index)
        self._orders[scope_id] = new_order
        logger.debug(f"[{scope_id}] moved {entity_id} to {target_index}")
        return list(new_order)

    def insert_append(self, scope_id: str, entity_id: str) -> List[str]:
        """Append a newly created id at the end of its scope."""
        current = self._orders.get(scope_id, [])
        if entity_id in current:
            logger.warning(f"Append ignored: {entity_id} is already in scope {scope_id}")
            return list(current)
        new_order = current + [entity_id]
        self._orders[scope_id] = new_order
        return list(new_order)

    def remove(self, scope_id: str, entity_id: str) -> List[str]:
        current = self._orders.get(scope_id, [])
        new_order = [item for item in current if item != entity_id]
        if scope_id in self._orders:
            self._orders[scope_id] = new_order
        return list(new_order)

    def swap(self, scope_id: str, first_id: str, second_id: str) -> List[str]:
        """Exchange two ids of the same scope; swapping twice restores the order."""
        current = self._orders.get(scope_id, [])
        if first_id not in current or second_id not in current:
            logger.warning(f"Swap ignored: {first_id}/{second_id} not both in scope {scope_id}")
            return list(current)
        new_order = swap_in_order(current, first_id, second_id)
        self._orders[scope_id] = new_order
        return list(new_order)

    def snapshot(self) -> Dict[str, List[str]]:
        """Deep copy of all orders, safe to hand to a composer."""
        return {scope_id: list(order) for scope_id, order in self._orders.items()}


__all__ = ["OrderModel", "move_in_order", "swap_in_order", "dedupe_order"]
