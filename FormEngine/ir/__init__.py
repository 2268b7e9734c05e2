"""Form Engine's composed document contract (IR) definition and validation tool.

The composer builds this structure, the validator checks it, and every renderer consumes it,
so literal and template output always share one shape."""

from .schema import (
    IR_VERSION,
    ALLOWED_NODE_TYPES,
    CHILD_NODE_TYPES,
    REQUIRED_DOCUMENT_KEYS,
)
from .validator import IRValidator

__all__ = [
    "IR_VERSION",
    "ALLOWED_NODE_TYPES",
    "CHILD_NODE_TYPES",
    "REQUIRED_DOCUMENT_KEYS",
    "IRValidator",
]
