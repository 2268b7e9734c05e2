"""Totals arithmetic that runs before composition.

The calculator reads line item rows and the adjustment fields of the totals section and
returns new values for the calculated entities. The caller writes them into the store, so
ValueResolver only ever sees finished numbers."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional

from loguru import logger

from .entity_store import EntityStore
from .key_normalizer import KeyNormalizer
from .value_resolver import cell_key


def parse_amount(text, currency_symbol: str = "$") -> Optional[Decimal]:
    """Parse `"$1,234.50"`-style money text; blank or unparseable text yields None."""
    if text is None:
        return None
    cleaned = str(text).replace(currency_symbol, "").replace(",", "").strip()
    if not cleaned or not re.fullmatch(r"-?\d+(\.\d+)?|-?\.\d+", cleaned):
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def format_amount(amount: Decimal, currency_symbol: str = "$") -> str:
    quantized = amount.quantize(Decimal("0.01"))
    sign = "-" if quantized < 0 else ""
    return f"{sign}{currency_symbol}{abs(quantized):,.2f}"


class TotalsCalculator:
    """Recompute subtotal and total from the line items.

    Row amount is the row's own amount when it parses, otherwise qty x rate.
    `total = subtotal + sum(adjustments)`."""

    def __init__(
        self,
        line_items_table: str = "line-items",
        totals_section: str = "totals",
        subtotal_field: str = "subtotal",
        total_field: str = "total",
        adjustment_fields=("tax", "shipping", "other"),
        currency_symbol: str = "$",
        normalizer: Optional[KeyNormalizer] = None,
    ):
        self.line_items_table = line_items_table
        self.totals_section = totals_section
        self.subtotal_field = subtotal_field
        self.total_field = total_field
        self.adjustment_fields = tuple(adjustment_fields)
        self.currency_symbol = currency_symbol
        self.normalizer = normalizer or KeyNormalizer()

    def calculate(
        self,
        store: EntityStore,
        snapshot: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> Dict[str, str]:
        """Return `{entity_id: formatted value}` for the calculated totals.

        Nothing is returned when no line item yields an amount, so suggested or typed totals
        on an empty order survive."""
        snapshot = snapshot or {}
        table = store.tables.get(self.line_items_table)
        section = store.sections.get(self.totals_section)
        if table is None or section is None:
            return {}

        live_cells = snapshot.get(self.line_items_table, {})
        subtotal = Decimal("0")
        priced_rows = 0
        for index, raw_row in enumerate(table.rows):
            row = self.normalizer.normalize(self._overlay_live(raw_row, index, live_cells))
            amount = self.row_amount(row)
            if amount is None:
                continue
            subtotal += amount
            priced_rows += 1

        if priced_rows == 0:
            logger.debug("Totals unchanged: no line item has an amount")
            return {}

        live_fields = snapshot.get(self.totals_section, {})
        total = subtotal
        for field_id in self.adjustment_fields:
            entity = section.fields.get(field_id)
            if entity is None:
                continue
            value = live_fields.get(field_id) or entity.value
            adjustment = parse_amount(value, self.currency_symbol)
            if adjustment is not None:
                total += adjustment

        results: Dict[str, str] = {}
        if self.subtotal_field in section.fields:
            results[self.subtotal_field] = format_amount(subtotal, self.currency_symbol)
        if self.total_field in section.fields:
            results[self.total_field] = format_amount(total, self.currency_symbol)
        logger.debug(f"Totals recalculated from {priced_rows} line item(s): {results}")
        return results

    def row_amount(self, row: Mapping[str, str]) -> Optional[Decimal]:
        explicit = parse_amount(self.normalizer.lookup(row, "amount"), self.currency_symbol)
        if explicit is not None:
            return explicit
        qty = parse_amount(self.normalizer.lookup(row, "qty"), self.currency_symbol)
        rate = parse_amount(self.normalizer.lookup(row, "rate"), self.currency_symbol)
        if qty is None or rate is None:
            return None
        return qty * rate

    def _overlay_live(self, row, index, live_cells):
        merged = dict(row)
        for column_id in list(merged.keys()) + list(self.normalizer.aliases.keys()):
            live = live_cells.get(cell_key(index, column_id))
            if live:
                merged[column_id] = live
        return merged


__all__ = ["TotalsCalculator", "parse_amount", "format_amount"]
