"""Node vocabulary of the composed form document.

The document is a plain dict so it can be logged, validated and handed to any renderer:

    {
      "version": IR_VERSION,
      "documentId": "...",
      "metadata": {"title": "...", "generatedAt": "...Z"},
      "groups": [group | placeholder, ...]
    }

group       {"type": "group", "groupId", "title", "members": [section | table | placeholder]}
section     {"type": "section", "sectionId", "title", "fields": [field | placeholder]}
field       {"type": "field", "fieldId", "label", "value", "placeholder", "isTitle",
             "isCalculated", "provenance", "binding"}
table       {"type": "table", "tableId", "title", "binding", "columns": [column | placeholder],
             "rows": [row]}
column      {"type": "column", "columnId", "label", "provenance", "binding"}
row         {"type": "row", "index", "cells": [cell]}
cell        {"type": "cell", "columnId", "value"}
placeholder {"type": "placeholder", "slot": scope id, "scope": scope kind}"""

IR_VERSION = "1.0"

ALLOWED_NODE_TYPES = {
    "group",
    "section",
    "field",
    "table",
    "column",
    "row",
    "cell",
    "placeholder",
}

# Child node types each container may hold; placeholder stands in for an empty scope.
CHILD_NODE_TYPES = {
    "document": {"group", "placeholder"},
    "group": {"section", "table", "placeholder"},
    "section": {"field", "placeholder"},
    "table": {"column", "placeholder"},
}

REQUIRED_DOCUMENT_KEYS = ("version", "documentId", "metadata", "groups")

SCOPE_KINDS = ("page", "group", "section", "table")

PROVENANCES = ("predefined", "custom")

__all__ = [
    "IR_VERSION",
    "ALLOWED_NODE_TYPES",
    "CHILD_NODE_TYPES",
    "REQUIRED_DOCUMENT_KEYS",
    "SCOPE_KINDS",
    "PROVENANCES",
]
