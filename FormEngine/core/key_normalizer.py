"""Dual key spellings for table columns.

Line item cells can be addressed by a short key used by the editor (`qty`) or by the longer
name used in exported records (`quantity`). KeyNormalizer fills both spellings so consumers
never need their own `a or b` fallbacks."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

# short (internal) spelling -> long (export) spelling
DEFAULT_ALIASES: Dict[str, str] = {
    "qty": "quantity",
    "rate": "unitPrice",
    "amount": "total",
}


def _present(value: Any) -> bool:
    """A spelling counts as populated when it holds something other than None or blank text."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


class KeyNormalizer:
    """Bidirectional alias table.

    normalize() is idempotent and never erases a populated spelling; when both spellings are
    populated and disagree, the short spelling wins and is copied to the long one."""

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self.aliases: Dict[str, str] = dict(DEFAULT_ALIASES if aliases is None else aliases)
        self._reverse: Dict[str, str] = {long: short for short, long in self.aliases.items()}
        overlap = set(self.aliases) & set(self._reverse)
        if overlap:
            raise ValueError(f"Alias keys cannot be both short and long spellings: {sorted(overlap)}")

    def normalize(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Return a copy of `record` with both spellings populated wherever one of them was."""
        normalized = dict(record)
        for short, long in self.aliases.items():
            short_value = normalized.get(short)
            long_value = normalized.get(long)
            if _present(short_value):
                normalized[long] = short_value
            elif _present(long_value):
                normalized[short] = long_value
        return normalized

    def canonical(self, key: str) -> str:
        """Short spelling for any alias key; other keys are returned unchanged."""
        return self._reverse.get(key, key)

    def alias_of(self, key: str) -> Optional[str]:
        """The other spelling of `key`, if it has one."""
        if key in self.aliases:
            return self.aliases[key]
        return self._reverse.get(key)

    def lookup(self, record: Mapping[str, Any], key: str, default: Any = "") -> Any:
        """Read `key` from a record, falling back to its alias spelling."""
        value = record.get(key)
        if _present(value):
            return value
        alias = self.alias_of(key)
        if alias is not None and _present(record.get(alias)):
            return record.get(alias)
        return value if value is not None else default


__all__ = ["KeyNormalizer", "DEFAULT_ALIASES"]
