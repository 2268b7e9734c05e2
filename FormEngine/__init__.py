"""Form Engine.

Ordered document composition and export for reorderable business forms: fields, table columns,
sections and groups are composed in their own scope order and serialized to report XML, either
with literal values or as a reusable placeholder template."""

from .agent import FormAgent, create_agent

__version__ = "1.0.0"
__author__ = "Form Engine Team"

__all__ = ["FormAgent", "create_agent"]
