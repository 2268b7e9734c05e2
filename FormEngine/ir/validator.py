"""Composed document structure validator.

The composer output is checked before serialization so a broken tree surfaces as one export
error instead of half-written markup. Lightweight Python checks, no jsonschema dependency."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .schema import (
    ALLOWED_NODE_TYPES,
    CHILD_NODE_TYPES,
    IR_VERSION,
    PROVENANCES,
    REQUIRED_DOCUMENT_KEYS,
    SCOPE_KINDS,
)


class IRValidator:
    """Form document IR validator.

    Description:
        - validate_document returns (whether passed, error list)
        - Error location uses path syntax to facilitate quick tracking
        - Tables are checked for cell/column alignment row by row"""

    def __init__(self, schema_version: str = IR_VERSION):
        self.schema_version = schema_version

    # ======== External interface ========

    def validate_document(self, document: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Verify the top-level slots and every node below them"""
        errors: List[str] = []
        if not isinstance(document, dict):
            return False, ["document must be an object"]

        for key in REQUIRED_DOCUMENT_KEYS:
            if key not in document:
                errors.append(f"missing document.{key}")

        if document.get("version") != self.schema_version:
            errors.append(f"document.version must be {self.schema_version}")

        metadata = document.get("metadata")
        if not isinstance(metadata, dict):
            errors.append("document.metadata must be an object")

        groups = document.get("groups")
        if not isinstance(groups, list) or not groups:
            errors.append("document.groups must be a non-empty array")
            return False, errors

        self._validate_children(groups, "document", "groups", errors)
        return len(errors) == 0, errors

    # ======== Internal Tools ========

    def _validate_children(self, nodes: Any, container: str, path: str, errors: List[str]):
        if not isinstance(nodes, list) or not nodes:
            errors.append(f"{path} must be a non-empty array")
            return
        allowed = CHILD_NODE_TYPES[container]
        for idx, node in enumerate(nodes):
            node_path = f"{path}[{idx}]"
            if not isinstance(node, dict):
                errors.append(f"{node_path} must be an object")
                continue
            if node.get("type") not in allowed:
                errors.append(f"{node_path}.type {node.get('type')} is not allowed in {container}")
                continue
            self._validate_node(node, node_path, errors)
        placeholders = [n for n in nodes if isinstance(n, dict) and n.get("type") == "placeholder"]
        if placeholders and len(nodes) > 1:
            errors.append(f"{path} mixes a placeholder with content")

    def _validate_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        """Call different validators based on node type"""
        node_type = node.get("type")
        if node_type not in ALLOWED_NODE_TYPES:
            errors.append(f"{path}.type is not supported: {node_type}")
            return
        validator = getattr(self, f"_validate_{node_type}_node", None)
        if validator:
            validator(node, path, errors)

    def _validate_group_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        if not node.get("groupId"):
            errors.append(f"{path}.groupId is missing")
        self._validate_children(node.get("members"), "group", f"{path}.members", errors)

    def _validate_section_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        if not node.get("sectionId"):
            errors.append(f"{path}.sectionId is missing")
        self._validate_children(node.get("fields"), "section", f"{path}.fields", errors)

    def _validate_field_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        """field needs an id plus string label/value"""
        if not node.get("fieldId"):
            errors.append(f"{path}.fieldId is missing")
        for key in ("label", "value"):
            if not isinstance(node.get(key), str):
                errors.append(f"{path}.{key} must be a string")
        if node.get("provenance") not in PROVENANCES:
            errors.append(f"{path}.provenance value is illegal")

    def _validate_table_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        """Columns first, then every row must carry one cell per column in column order"""
        if not node.get("tableId"):
            errors.append(f"{path}.tableId is missing")
        columns = node.get("columns")
        self._validate_children(columns, "table", f"{path}.columns", errors)
        column_ids = [
            c.get("columnId") for c in columns or [] if isinstance(c, dict) and c.get("type") == "column"
        ]
        rows = node.get("rows")
        if not isinstance(rows, list):
            errors.append(f"{path}.rows must be an array")
            return
        for r_idx, row in enumerate(rows):
            row_path = f"{path}.rows[{r_idx}]"
            if not isinstance(row, dict) or row.get("type") != "row":
                errors.append(f"{row_path} must be a row object")
                continue
            cells = row.get("cells")
            if not isinstance(cells, list):
                errors.append(f"{row_path}.cells must be an array")
                continue
            cell_ids = [c.get("columnId") if isinstance(c, dict) else None for c in cells]
            if cell_ids != column_ids:
                errors.append(f"{row_path}.cells do not follow the column order")
            for c_idx, cell in enumerate(cells):
                if isinstance(cell, dict) and not isinstance(cell.get("value"), str):
                    errors.append(f"{row_path}.cells[{c_idx}].value must be a string")

    def _validate_column_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        if not node.get("columnId"):
            errors.append(f"{path}.columnId is missing")
        if not isinstance(node.get("label"), str):
            errors.append(f"{path}.label must be a string")

    def _validate_placeholder_node(self, node: Dict[str, Any], path: str, errors: List[str]):
        if not node.get("slot"):
            errors.append(f"{path}.slot is missing")
        if node.get("scope") not in SCOPE_KINDS:
            errors.append(f"{path}.scope value is illegal")


__all__ = ["IRValidator"]
