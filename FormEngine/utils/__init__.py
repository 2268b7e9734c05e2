"""Form Engine tool module.

Configuration, suggestion payload parsing/matching and the change history."""

from FormEngine.utils.json_parser import (
    RobustJSONParser,
    JSONParseError,
    MalformedSuggestionPayload,
)
from FormEngine.utils.suggestions import (
    apply_suggestions,
    match_suggestions,
    match_row_suggestions,
    normalize_label,
    coerce_to_string,
)
from FormEngine.utils.change_log import ChangeLog, ChangeRecord

__all__ = [
    "RobustJSONParser",
    "JSONParseError",
    "MalformedSuggestionPayload",
    "apply_suggestions",
    "match_suggestions",
    "match_row_suggestions",
    "normalize_label",
    "coerce_to_string",
    "ChangeLog",
    "ChangeRecord",
]
