"""Form Engine core tool collection.

This package holds the form model (entities, per-scope order, key aliases), value
resolution, totals arithmetic and the document composer used by every export."""

from .errors import (
    FormEngineError,
    ProtectedEntityError,
    UnknownScopeError,
    ExportComposeError,
)
from .entity_store import Entity, Section, Table, Group, Page, EntityStore
from .order_model import OrderModel
from .key_normalizer import KeyNormalizer
from .value_resolver import ValueResolver, cell_key
from .calculator import TotalsCalculator, parse_amount, format_amount
from .form_template import (
    AVAILABLE_FIELDS,
    build_purchase_order_form,
    check_required_fields,
    palette_labels,
)
from .stitcher import DocumentComposer

__all__ = [
    "FormEngineError",
    "ProtectedEntityError",
    "UnknownScopeError",
    "ExportComposeError",
    "Entity",
    "Section",
    "Table",
    "Group",
    "Page",
    "EntityStore",
    "OrderModel",
    "KeyNormalizer",
    "ValueResolver",
    "cell_key",
    "TotalsCalculator",
    "parse_amount",
    "format_amount",
    "AVAILABLE_FIELDS",
    "build_purchase_order_form",
    "check_required_fields",
    "palette_labels",
    "DocumentComposer",
]
