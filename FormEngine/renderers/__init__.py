"""Form Engine renderer collection.

XMLRenderer writes the literal and template report XML; XMLReader reads the order back."""

from .xml_renderer import XMLRenderer, LITERAL, TEMPLATE, RENDER_MODES
from .xml_reader import XMLReader
from .template_variables import FIELD_VARIABLES, ITEM_VARIABLES, clean_identifier

__all__ = [
    "XMLRenderer",
    "XMLReader",
    "LITERAL",
    "TEMPLATE",
    "RENDER_MODES",
    "FIELD_VARIABLES",
    "ITEM_VARIABLES",
    "clean_identifier",
]
