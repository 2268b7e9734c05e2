"""Form Engine exception hierarchy.

Only conditions the caller must react to are raised. Dangling order entries and empty scopes
are recovered during composition and only logged."""


class FormEngineError(Exception):
    """Base class for all Form Engine errors."""


class ProtectedEntityError(FormEngineError):
    """Raised when removing a title field, a calculated total or a section's main field."""

    def __init__(self, scope_id: str, entity_id: str):
        super().__init__(f"{entity_id} in {scope_id} is protected and cannot be removed")
        self.scope_id = scope_id
        self.entity_id = entity_id


class UnknownScopeError(FormEngineError, KeyError):
    """Raised when a store operation names a section, table or group that does not exist."""

    def __init__(self, scope_id: str):
        super().__init__(scope_id)
        self.scope_id = scope_id

    def __str__(self) -> str:
        return f"Unknown scope: {self.scope_id}"


class ExportComposeError(FormEngineError):
    """Any failure inside compose/validate/serialize, wrapped at the export boundary."""


__all__ = [
    "FormEngineError",
    "ProtectedEntityError",
    "UnknownScopeError",
    "ExportComposeError",
]
