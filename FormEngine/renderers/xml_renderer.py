"""Render the composed form document to report XML.

Two leaf policies share one walker: `literal` writes resolved values, `template` writes record
placeholders. Nesting and order come straight from the document IR, so both outputs have the
same element structure."""

from __future__ import annotations

import html
import re
from typing import Any, Dict, List, Optional

from loguru import logger

from ..utils.config import Settings, settings as default_settings
from .template_variables import (
    field_variable,
    item_placeholder,
    item_variable,
    record_placeholder,
)

LITERAL = "literal"
TEMPLATE = "template"
RENDER_MODES = (LITERAL, TEMPLATE)

XML_DECLARATION = '<?xml version="1.0"?>'
DOCTYPE = '<!DOCTYPE pdf PUBLIC "-//big.faceless.org//report" "report-1.1.dtd">'

STYLE = """
* { font-family: NotoSans, sans-serif; font-size: 9pt; }
table { width: 100%; border-collapse: collapse; }
.header-title { font-size: 20pt; font-weight: bold; padding: 6px; border: 1px solid #000; }
.section-header { font-weight: bold; padding: 6px; border: 1px solid #000; }
.field-label { font-weight: bold; padding: 4px; }
.field-value { padding: 4px; }
.item-header { font-weight: bold; padding: 8px; border: 1px solid #000; }
.item-cell { padding: 6px; border: 1px solid #000; }
.total-amount { font-weight: bold; padding: 4px; background-color: #ffff99; }
""".strip()

# Characters that are not allowed anywhere in an XML 1.0 document
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


class XMLRenderer:
    """Convert form document IR to report XML.

    - head/body are always written, even for an empty document;
    - empty scopes render as well-formed placeholder elements;
    - every group, section, field, table and column carries its id in a data-* attribute so the
      output can be read back in order."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self.config = config or default_settings

    def render(self, document_ir: Dict[str, Any], mode: str = LITERAL) -> str:
        """Entry: Convert IR to an XML string.

        Parameters:
            document_ir: composed document IR
            mode: "literal" for resolved values, "template" for placeholders

        Return:
            str: XML document text"""
        if mode not in RENDER_MODES:
            raise ValueError(f"Unsupported render mode: {mode}")
        document = document_ir or {}
        metadata = document.get("metadata") or {}
        title = metadata.get("title") or self.config.DOCUMENT_TITLE

        lines: List[str] = [XML_DECLARATION, DOCTYPE, "<pdf>", "<head>"]
        lines.append(f'  <meta name="title" value="{self._escape_attr(title)}"/>')
        if mode == TEMPLATE:
            lines.append('  <meta name="mode" value="template"/>')
        lines.append("  <style>")
        lines.append(self._escape_text(STYLE))
        lines.append("  </style>")
        lines.append("</head>")
        lines.append(
            f'<body padding="{self._escape_attr(self.config.PAGE_PADDING)}" '
            f'size="{self._escape_attr(self.config.PAGE_SIZE)}">'
        )

        groups = document.get("groups") or []
        if not groups:
            groups = [{"type": "placeholder", "slot": "page", "scope": "page"}]
        for node in groups:
            lines.extend(self._render_node(node, 1, mode))

        lines.append("</body>")
        lines.append("</pdf>")
        output = "\n".join(lines) + "\n"
        logger.debug(f"Rendered {mode} XML ({len(output)} characters)")
        return output

    # ===== Node rendering =====

    def _render_node(self, node: Any, depth: int, mode: str) -> List[str]:
        if not isinstance(node, dict):
            return []
        handlers = {
            "group": self._render_group,
            "section": self._render_section,
            "table": self._render_table,
            "placeholder": self._render_placeholder,
        }
        handler = handlers.get(node.get("type"))
        if handler is None:
            logger.warning(f"Skipping unknown node type: {node.get('type')}")
            return []
        return handler(node, depth, mode)

    def _render_group(self, node: Dict[str, Any], depth: int, mode: str) -> List[str]:
        pad = self._indent(depth)
        lines = [f'{pad}<div class="group" data-group="{self._escape_attr(node.get("groupId"))}">']
        for member in node.get("members") or []:
            lines.extend(self._render_node(member, depth + 1, mode))
        lines.append(f"{pad}</div>")
        return lines

    def _render_section(self, node: Dict[str, Any], depth: int, mode: str) -> List[str]:
        pad = self._indent(depth)
        inner = self._indent(depth + 1)
        section_id = self._escape_attr(node.get("sectionId"))
        lines = [f'{pad}<table class="section" data-section="{section_id}">']
        title = node.get("title")
        if title:
            lines.append(
                f'{inner}<tr><td class="section-header" colspan="2">{self._escape_text(title)}</td></tr>'
            )
        for field in node.get("fields") or []:
            if field.get("type") == "placeholder":
                lines.append(f"{inner}{self._placeholder_row(field, 2)}")
            else:
                lines.append(f"{inner}{self._render_field(field, mode)}")
        lines.append(f"{pad}</table>")
        return lines

    def _render_field(self, field: Dict[str, Any], mode: str) -> str:
        field_id = field.get("fieldId") or ""
        value = self._escape_text(self._field_leaf(field, mode))
        attrs = f'data-field="{self._escape_attr(field_id)}"'
        if field.get("provenance") == "custom":
            attrs += ' data-provenance="custom"'
        if field.get("isTitle"):
            return f'<tr {attrs}><td class="header-title" colspan="2">{value}</td></tr>'
        value_class = "total-amount" if field.get("isCalculated") else "field-value"
        label = self._escape_text(field.get("label") or "")
        return (
            f'<tr {attrs}><td class="field-label">{label}</td>'
            f'<td class="{value_class}">{value}</td></tr>'
        )

    def _render_table(self, node: Dict[str, Any], depth: int, mode: str) -> List[str]:
        pad = self._indent(depth)
        inner = self._indent(depth + 1)
        row_pad = self._indent(depth + 2)
        table_id = self._escape_attr(node.get("tableId"))
        columns = node.get("columns") or []
        real_columns = [c for c in columns if c.get("type") == "column"]

        lines = [f'{pad}<table class="data-table" data-table="{table_id}">', f"{inner}<thead>"]
        if real_columns:
            headers = "".join(
                f'<th class="item-header" data-column="{self._escape_attr(c.get("columnId"))}">'
                f'{self._escape_text(c.get("label") or "")}</th>'
                for c in real_columns
            )
            lines.append(f"{row_pad}<tr>{headers}</tr>")
        else:
            placeholder = columns[0] if columns else {"slot": node.get("tableId"), "scope": "table"}
            lines.append(f"{row_pad}{self._placeholder_row(placeholder, 1)}")
        lines.append(f"{inner}</thead>")

        rows = node.get("rows") or []
        if not rows:
            lines.append(f"{inner}<tbody/>")
        else:
            lines.append(f"{inner}<tbody>")
            by_id = {c.get("columnId"): c for c in real_columns}
            for row in rows:
                index = row.get("index", 0)
                cells: List[str] = []
                for cell in row.get("cells") or []:
                    column = by_id.get(cell.get("columnId")) or {}
                    leaf = self._escape_text(self._cell_leaf(node, column, cell, index, mode))
                    cells.append(
                        f'<td class="item-cell" data-column="{self._escape_attr(cell.get("columnId"))}">{leaf}</td>'
                    )
                lines.append(f'{row_pad}<tr data-row-index="{index}">{"".join(cells)}</tr>')
            lines.append(f"{inner}</tbody>")
        lines.append(f"{pad}</table>")
        return lines

    def _render_placeholder(self, node: Dict[str, Any], depth: int, mode: str) -> List[str]:
        return [
            f'{self._indent(depth)}<div class="placeholder" '
            f'data-slot="{self._escape_attr(node.get("slot"))}" '
            f'data-scope="{self._escape_attr(node.get("scope"))}"/>'
        ]

    def _placeholder_row(self, node: Dict[str, Any], colspan: int) -> str:
        return (
            f'<tr class="placeholder" data-slot="{self._escape_attr(node.get("slot"))}" '
            f'data-scope="{self._escape_attr(node.get("scope"))}"><td colspan="{colspan}"/></tr>'
        )

    # ===== Leaf policies =====

    def _field_leaf(self, field: Dict[str, Any], mode: str) -> str:
        if mode == TEMPLATE:
            variable = field_variable(field.get("fieldId") or "", field.get("binding"))
            return record_placeholder(variable, self.config.TEMPLATE_RECORD_NAMESPACE)
        return field.get("value") or ""

    def _cell_leaf(
        self, table: Dict[str, Any], column: Dict[str, Any], cell: Dict[str, Any], index: int, mode: str
    ) -> str:
        column_id = cell.get("columnId") or ""
        if mode == TEMPLATE:
            if table.get("binding"):
                return item_placeholder(
                    item_variable(column_id, column.get("binding")),
                    index,
                    sublist=table.get("binding"),
                    namespace=self.config.TEMPLATE_RECORD_NAMESPACE,
                    default=self.config.EMPTY_CELL_TEXT,
                )
            variable = field_variable(column_id, column.get("binding"))
            return record_placeholder(variable, self.config.TEMPLATE_RECORD_NAMESPACE)
        return cell.get("value") or self.config.EMPTY_CELL_TEXT

    # ===== Tools =====

    @staticmethod
    def _indent(depth: int) -> str:
        return "  " * depth

    @staticmethod
    def _escape_text(text: Any) -> str:
        if text is None:
            return ""
        return html.escape(_INVALID_XML_CHARS.sub("", str(text)), quote=False)

    @staticmethod
    def _escape_attr(text: Any) -> str:
        if text is None:
            return ""
        return html.escape(_INVALID_XML_CHARS.sub("", str(text)), quote=True)


__all__ = ["XMLRenderer", "LITERAL", "TEMPLATE", "RENDER_MODES"]
