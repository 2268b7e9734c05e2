"""Document composer: walks the order scopes top-down and builds the form document IR.

Composition is read-only over the store and the order map. Dangling ids are dropped, scopes
without an order fall back to insertion order, and empty scopes become placeholder nodes so
every renderer sees the same schema-stable shape."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional

from loguru import logger

from ..ir import IR_VERSION
from .entity_store import PAGE_SCOPE, Entity, EntityStore, Page, Section, Table
from .key_normalizer import KeyNormalizer
from .value_resolver import ValueResolver

LiveSnapshot = Mapping[str, Mapping[str, str]]


class DocumentComposer:
    """Turn (Page, EntityStore, order map) into an ordered node tree.

    Function:
        - Page groups, group members, section fields and table columns follow their own scope;
        - Missing references are filtered and logged, never raised;
        - Table rows are normalized before cells are resolved."""

    def compose(
        self,
        page: Page,
        store: EntityStore,
        resolver: ValueResolver,
        normalizer: KeyNormalizer,
        orders: Mapping[str, List[str]],
        snapshot: Optional[LiveSnapshot] = None,
        document_id: Optional[str] = None,
        metadata: Optional[Dict[str, object]] = None,
        calculated: Optional[LiveSnapshot] = None,
    ) -> Dict[str, object]:
        """Build the full document IR.

        Parameters:
            page: page record holding the natural group order.
            store: entity store the ids resolve against.
            resolver: value resolver used for every field and cell.
            normalizer: key normalizer applied to every table row.
            orders: mapping of scope id -> ordered ids.
            snapshot: live values captured per scope at export time.
            document_id: identifier written to the document, generated when absent.
            metadata: extra metadata merged into the document.
            calculated: export-time totals per section, used for calculated fields only.

        Return:
            dict: Document IR that meets the needs of the renderer."""
        snapshot = snapshot or {}
        calculated = calculated or {}
        metadata = dict(metadata or {})

        group_ids = self._ordered_ids(PAGE_SCOPE, orders.get(PAGE_SCOPE), page.groups, store.groups)
        groups = [
            self._compose_group(group_id, store, resolver, normalizer, orders, snapshot, calculated)
            for group_id in group_ids
        ]
        if not groups:
            logger.warning("Page has no groups, emitting an empty page slot")
            groups = [self._placeholder(PAGE_SCOPE, "page")]

        document = {
            "version": IR_VERSION,
            "documentId": document_id or f"form_{datetime.now().strftime('%Y%m%d_%H%M%S')}",
            "metadata": {
                **metadata,
                "title": metadata.get("title") or page.title,
                "generatedAt": metadata.get("generatedAt")
                or datetime.now().isoformat(),
            },
            "groups": groups,
        }
        return document

    # ======== Scopes ========

    def _compose_group(self, group_id, store, resolver, normalizer, orders, snapshot, calculated):
        group = store.groups[group_id]
        known_members = {member_id: True for member_id in list(store.sections) + list(store.tables)}
        member_ids = self._ordered_ids(group_id, orders.get(group_id), group.members, known_members)

        members = []
        for member_id in member_ids:
            if member_id in store.sections:
                members.append(
                    self._compose_section(store.sections[member_id], resolver, orders, snapshot, calculated)
                )
            else:
                members.append(
                    self._compose_table(store.tables[member_id], resolver, normalizer, orders, snapshot)
                )
        if not members:
            members = [self._placeholder(group_id, "group")]

        return {
            "type": "group",
            "groupId": group_id,
            "title": group.title,
            "members": members,
        }

    def _compose_section(self, section: Section, resolver, orders, snapshot, calculated) -> Dict[str, object]:
        field_ids = self._ordered_ids(section.id, orders.get(section.id), section.fields, section.fields)
        live_map = snapshot.get(section.id) or {}
        totals = calculated.get(section.id) or {}
        fields = [
            self._field_node(section.fields[field_id], resolver, live_map, totals) for field_id in field_ids
        ]
        if not fields:
            fields = [self._placeholder(section.id, "section")]
        return {
            "type": "section",
            "sectionId": section.id,
            "title": section.title,
            "fields": fields,
        }

    def _compose_table(self, table: Table, resolver, normalizer, orders, snapshot) -> Dict[str, object]:
        column_ids = self._ordered_ids(table.id, orders.get(table.id), table.columns, table.columns)
        columns = [self._column_node(table.columns[column_id]) for column_id in column_ids]

        rows = []
        if columns:
            live_map = snapshot.get(table.id) or {}
            for index, raw_row in enumerate(table.rows):
                row = normalizer.normalize(raw_row)
                cells = [
                    {
                        "type": "cell",
                        "columnId": column_id,
                        "value": resolver.resolve_cell(
                            row, index, table.columns[column_id], normalizer, live_map
                        ),
                    }
                    for column_id in column_ids
                ]
                rows.append({"type": "row", "index": index, "cells": cells})
        else:
            columns = [self._placeholder(table.id, "table")]

        return {
            "type": "table",
            "tableId": table.id,
            "title": table.title,
            "binding": table.binding,
            "columns": columns,
            "rows": rows,
        }

    # ======== Internal Tools ========

    def _ordered_ids(
        self,
        scope_id: str,
        order: Optional[Iterable[str]],
        natural: Iterable[str],
        known: Mapping[str, object],
    ) -> List[str]:
        """Resolve a scope's order against the ids that actually exist.

        Ids in the order come first in order position; existing ids the order does not mention
        follow in natural order. An empty or missing order means natural order."""
        natural_ids = [item for item in natural if item in known]
        if not order:
            if natural_ids:
                logger.debug(f"[{scope_id}] no order recorded, using insertion order")
            return natural_ids

        result: List[str] = []
        seen = set()
        for item in order:
            if item in seen:
                continue
            if item not in known:
                logger.warning(f"[{scope_id}] dropping missing reference {item}")
                continue
            seen.add(item)
            result.append(item)

        trailing = [item for item in natural_ids if item not in seen]
        if trailing:
            logger.debug(f"[{scope_id}] appending unordered ids {trailing}")
        return result + trailing

    def _field_node(self, entity: Entity, resolver: ValueResolver, live_map, totals) -> Dict[str, object]:
        return {
            "type": "field",
            "fieldId": entity.id,
            "label": entity.label,
            "value": resolver.resolve(entity, live_map, totals),
            "placeholder": entity.placeholder,
            "isTitle": entity.is_title,
            "isCalculated": entity.is_calculated,
            "provenance": entity.provenance,
            "binding": entity.binding,
        }

    def _column_node(self, entity: Entity) -> Dict[str, object]:
        return {
            "type": "column",
            "columnId": entity.id,
            "label": entity.label,
            "provenance": entity.provenance,
            "binding": entity.binding,
        }

    def _placeholder(self, slot: str, scope: str) -> Dict[str, object]:
        logger.debug(f"[{slot}] empty {scope} scope, emitting placeholder")
        return {"type": "placeholder", "slot": slot, "scope": scope}


__all__ = ["DocumentComposer"]
