"""Canonical records for fields, columns, sections, tables and groups.

EntityStore owns identity and content. Ordering lives in OrderModel; the collections here keep
insertion order, which composition falls back to when a scope has no order entry."""

from __future__ import annotations

import itertools
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from loguru import logger

from .errors import ProtectedEntityError, UnknownScopeError

PREDEFINED = "predefined"
CUSTOM = "custom"
CUSTOM_ID_PREFIX = "custom-"
PAGE_SCOPE = "page"


@dataclass
class Entity:
    """A labeled field in a section or a column in a table."""

    id: str
    label: str = ""
    value: str = ""
    placeholder: str = ""
    is_calculated: bool = False
    is_title: bool = False
    provenance: str = PREDEFINED
    # Explicit template-mode variable; derived from the id when unset.
    binding: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class Section:
    """A named block of fields. `main_field` names the free-text field that cannot be removed."""

    id: str
    title: str = ""
    fields: Dict[str, Entity] = field(default_factory=dict)
    main_field: Optional[str] = None


@dataclass
class Table:
    """Columns plus rows; each row maps column id (or alias spelling) to the cell value.

    `binding` names the record sublist the rows come from in template mode. A table without a
    binding is record-level: its single row is bound to plain record variables."""

    id: str
    title: str = ""
    columns: Dict[str, Entity] = field(default_factory=dict)
    rows: List[Dict[str, str]] = field(default_factory=list)
    binding: Optional[str] = None


@dataclass
class Group:
    """A page-level container of sections and/or tables."""

    id: str
    title: str = ""
    members: List[str] = field(default_factory=list)


@dataclass
class Page:
    title: str = ""
    groups: List[str] = field(default_factory=list)


class EntityStore:
    """In-memory store of every entity of one form.

    Scope ids share a single namespace: a section, table or group id is also the id of the
    scope that orders its children, and `PAGE_SCOPE` orders the groups."""

    def __init__(self, title: str = ""):
        self.page = Page(title=title)
        self.sections: Dict[str, Section] = {}
        self.tables: Dict[str, Table] = {}
        self.groups: Dict[str, Group] = {}
        self._counter = itertools.count(1)
        self._issued_ids: set = set()

    # ======== Registration ========

    def add_section(
        self,
        section_id: str,
        title: str = "",
        fields: Optional[List[Entity]] = None,
        main_field: Optional[str] = None,
    ) -> Section:
        self._check_scope_id_free(section_id)
        section = Section(id=section_id, title=title, main_field=main_field)
        for entity in fields or []:
            self._register(section.fields, entity, section_id)
        self.sections[section_id] = section
        return section

    def add_table(
        self,
        table_id: str,
        title: str = "",
        columns: Optional[List[Entity]] = None,
        rows: Optional[List[Dict[str, str]]] = None,
        binding: Optional[str] = None,
    ) -> Table:
        self._check_scope_id_free(table_id)
        table = Table(id=table_id, title=title, binding=binding)
        for entity in columns or []:
            self._register(table.columns, entity, table_id)
        table.rows = [dict(row) for row in rows or []]
        self.tables[table_id] = table
        return table

    def add_group(self, group_id: str, members: List[str], title: str = "") -> Group:
        self._check_scope_id_free(group_id)
        group = Group(id=group_id, title=title, members=list(members))
        self.groups[group_id] = group
        self.page.groups.append(group_id)
        return group

    # ======== Custom entities ========

    def next_custom_id(self, kind: str) -> str:
        """Allocate a fresh custom id such as `custom-field-7`; ids are never handed out twice."""
        while True:
            candidate = f"{CUSTOM_ID_PREFIX}{kind}-{next(self._counter)}"
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def create_custom_field(
        self, section_id: str, label: str, value: str = "", placeholder: str = ""
    ) -> Entity:
        section = self.get_section(section_id)
        entity = Entity(
            id=self.next_custom_id("field"),
            label=label,
            value=value,
            placeholder=placeholder,
            provenance=CUSTOM,
        )
        section.fields[entity.id] = entity
        logger.debug(f"Created custom field {entity.id} ({label!r}) in {section_id}")
        return entity

    def create_custom_column(self, table_id: str, label: str, placeholder: str = "") -> Entity:
        table = self.get_table(table_id)
        entity = Entity(
            id=self.next_custom_id("column"),
            label=label,
            placeholder=placeholder,
            provenance=CUSTOM,
        )
        table.columns[entity.id] = entity
        for row in table.rows:
            row.setdefault(entity.id, "")
        logger.debug(f"Created custom column {entity.id} ({label!r}) in {table_id}")
        return entity

    def add_row(self, table_id: str, values: Optional[Dict[str, str]] = None) -> int:
        """Append a row with an empty cell per column; return its index."""
        table = self.get_table(table_id)
        row = {column_id: "" for column_id in table.columns}
        row.update(values or {})
        table.rows.append(row)
        return len(table.rows) - 1

    # ======== Mutation ========

    def remove_entity(self, scope_id: str, entity_id: str) -> Entity:
        """Remove a field or column. Protected entities raise ProtectedEntityError."""
        collection = self._collection_for(scope_id)
        entity = collection.get(entity_id)
        if entity is None:
            raise KeyError(f"{entity_id} not found in {scope_id}")
        if self.is_protected(scope_id, entity_id):
            raise ProtectedEntityError(scope_id, entity_id)
        del collection[entity_id]
        if scope_id in self.tables:
            for row in self.tables[scope_id].rows:
                row.pop(entity_id, None)
        return entity

    def remove_row(self, table_id: str, row_index: int) -> Dict[str, str]:
        table = self.get_table(table_id)
        if not 0 <= row_index < len(table.rows):
            raise IndexError(f"{table_id} has no row {row_index}")
        return table.rows.pop(row_index)

    def update_label(self, scope_id: str, entity_id: str, label: str) -> Tuple[str, str]:
        entity = self.get_entity(scope_id, entity_id)
        old_label, entity.label = entity.label, label
        return old_label, label

    def update_value(self, scope_id: str, entity_id: str, value: str) -> Tuple[str, str]:
        entity = self.get_entity(scope_id, entity_id)
        old_value, entity.value = entity.value, value
        return old_value, value

    def update_cell(self, table_id: str, row_index: int, column_id: str, value: str) -> Tuple[str, str]:
        table = self.get_table(table_id)
        if not 0 <= row_index < len(table.rows):
            raise IndexError(f"{table_id} has no row {row_index}")
        row = table.rows[row_index]
        old_value = row.get(column_id, "")
        row[column_id] = value
        return old_value, value

    # ======== Lookup ========

    def is_protected(self, scope_id: str, entity_id: str) -> bool:
        entity = self.get_entity(scope_id, entity_id)
        if entity.is_title or entity.is_calculated:
            return True
        section = self.sections.get(scope_id)
        return bool(section and section.main_field == entity_id)

    def has_scope(self, scope_id: str) -> bool:
        return (
            scope_id == PAGE_SCOPE
            or scope_id in self.sections
            or scope_id in self.tables
            or scope_id in self.groups
        )

    def natural_order(self, scope_id: str) -> List[str]:
        """Ids of a scope's children in insertion order."""
        if scope_id == PAGE_SCOPE:
            return list(self.page.groups)
        if scope_id in self.groups:
            return list(self.groups[scope_id].members)
        return list(self._collection_for(scope_id).keys())

    def get_section(self, section_id: str) -> Section:
        try:
            return self.sections[section_id]
        except KeyError:
            raise UnknownScopeError(section_id) from None

    def get_table(self, table_id: str) -> Table:
        try:
            return self.tables[table_id]
        except KeyError:
            raise UnknownScopeError(table_id) from None

    def get_entity(self, scope_id: str, entity_id: str) -> Entity:
        collection = self._collection_for(scope_id)
        try:
            return collection[entity_id]
        except KeyError:
            raise KeyError(f"{entity_id} not found in {scope_id}") from None

    def find_entity(self, entity_id: str) -> Optional[Tuple[str, Entity]]:
        """Locate a field or column by id across all scopes."""
        for scope_id, collection in self._all_collections():
            if entity_id in collection:
                return scope_id, collection[entity_id]
        return None

    def iter_fields(self) -> Iterator[Tuple[str, Entity]]:
        """Yield (section_id, entity) for every section field."""
        for section_id, section in self.sections.items():
            for entity in section.fields.values():
                yield section_id, entity

    # ======== Internal Tools ========

    def _collection_for(self, scope_id: str) -> Dict[str, Entity]:
        if scope_id in self.sections:
            return self.sections[scope_id].fields
        if scope_id in self.tables:
            return self.tables[scope_id].columns
        raise UnknownScopeError(scope_id)

    def _all_collections(self) -> Iterator[Tuple[str, Dict[str, Entity]]]:
        for section_id, section in self.sections.items():
            yield section_id, section.fields
        for table_id, table in self.tables.items():
            yield table_id, table.columns

    def _register(self, collection: Dict[str, Entity], entity: Entity, scope_id: str):
        if entity.provenance == PREDEFINED and entity.id.startswith(CUSTOM_ID_PREFIX):
            raise ValueError(f"Predefined id {entity.id} uses the reserved {CUSTOM_ID_PREFIX!r} prefix")
        if entity.id in collection:
            raise ValueError(f"Duplicate id {entity.id} in {scope_id}")
        collection[entity.id] = entity
        self._issued_ids.add(entity.id)

    def _check_scope_id_free(self, scope_id: str):
        if self.has_scope(scope_id):
            raise ValueError(f"Scope id {scope_id} is already in use")


__all__ = [
    "PREDEFINED",
    "CUSTOM",
    "CUSTOM_ID_PREFIX",
    "PAGE_SCOPE",
    "Entity",
    "Section",
    "Table",
    "Group",
    "Page",
    "EntityStore",
]
