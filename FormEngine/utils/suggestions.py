"""Apply provider suggestions to form entities.

A suggestion key matches an entity by exact id first, then by normalized label. Keys that
match nothing are dropped. Line item keys such as `qty2` address table cells instead."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from ..core.entity_store import Entity
from ..core.key_normalizer import KeyNormalizer

# Provider keys that name a field under a different id
SUGGESTION_KEY_ALIASES: Dict[str, str] = {
    "comments": "comments-main",
    "contactInfo": "contact-main",
}

_ROW_KEY_PATTERN = re.compile(r"^([A-Za-z]+?)(\d+)$")


def normalize_label(text: Any) -> str:
    """`"Company Name:"` -> `"companyname"`: lowercase, quotes and punctuation removed."""
    cleaned = str(text or "").lower()
    cleaned = re.sub(r"[`\"'‘’“”]", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return re.sub(r"[^a-z0-9]+", "", cleaned)


def coerce_to_string(value: Any) -> Optional[str]:
    """Strings pass through, numbers and booleans are stringified, objects give up `value`/`text`."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        for key in ("value", "text"):
            if isinstance(value.get(key), str):
                return value[key]
    return None


def match_suggestions(
    suggestions: Mapping[str, Any],
    entities: Iterable[Entity],
    key_aliases: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Map suggestion keys onto entity ids.

    Return:
        dict: entity id -> suggested string; exact id matches win over label matches"""
    key_aliases = SUGGESTION_KEY_ALIASES if key_aliases is None else key_aliases
    entity_list = list(entities)
    ids = {entity.id for entity in entity_list}
    label_to_id: Dict[str, str] = {}
    for entity in entity_list:
        label_to_id.setdefault(normalize_label(entity.label or entity.id), entity.id)

    by_id: Dict[str, str] = {}
    by_label: Dict[str, str] = {}
    for raw_key, raw_value in (suggestions or {}).items():
        value = coerce_to_string(raw_value)
        if value is None:
            logger.debug(f"Suggestion {raw_key!r} dropped: unsupported value {type(raw_value).__name__}")
            continue
        key = str(raw_key)
        if key in ids:
            by_id[key] = value
            continue
        aliased = key_aliases.get(key)
        if aliased in ids:
            by_id.setdefault(aliased, value)
            continue
        matched = label_to_id.get(normalize_label(key))
        if matched:
            by_label.setdefault(matched, value)
            continue
        logger.debug(f"Suggestion {raw_key!r} dropped: no matching field")

    matches = dict(by_label)
    matches.update(by_id)
    return matches


def apply_suggestions(
    suggestions: Mapping[str, Any],
    entities: Iterable[Entity],
    key_aliases: Optional[Mapping[str, str]] = None,
) -> List[Entity]:
    """Return copies of `entities` with matched suggestions written into `value`.

    Inputs are not modified; unmatched entities are returned unchanged."""
    entity_list = list(entities)
    matches = match_suggestions(suggestions, entity_list, key_aliases)
    return [
        replace(entity, value=matches[entity.id]) if entity.id in matches else entity
        for entity in entity_list
    ]


def match_row_suggestions(
    suggestions: Mapping[str, Any],
    column_ids: Iterable[str],
    row_count: int,
    normalizer: Optional[KeyNormalizer] = None,
    single_row: bool = False,
) -> Dict[Tuple[int, str], str]:
    """Map `<columnId><n>` keys (1-based row number, alias spellings allowed) onto table cells.

    Record-level tables (`single_row`) also accept bare column ids for row 0."""
    normalizer = normalizer or KeyNormalizer()
    columns = set(column_ids)
    cells: Dict[Tuple[int, str], str] = {}
    for raw_key, raw_value in (suggestions or {}).items():
        value = coerce_to_string(raw_value)
        if value is None:
            continue
        key = str(raw_key)
        if single_row:
            canonical = normalizer.canonical(key)
            if canonical in columns and row_count > 0:
                cells[(0, canonical)] = value
                continue
        match = _ROW_KEY_PATTERN.match(key)
        if not match:
            continue
        column_id = normalizer.canonical(match.group(1))
        row_number = int(match.group(2))
        if column_id in columns and 1 <= row_number <= row_count:
            cells[(row_number - 1, column_id)] = value
    return cells


__all__ = [
    "SUGGESTION_KEY_ALIASES",
    "normalize_label",
    "coerce_to_string",
    "match_suggestions",
    "apply_suggestions",
    "match_row_suggestions",
]
