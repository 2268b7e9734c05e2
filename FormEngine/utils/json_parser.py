"""Suggestion payload JSON parsing and salvage tool.

Provides robust parsing of the flat `{fieldId: value}` objects returned by a suggestion provider:
1. Clean markdown code block marks and thinking content
2. Salvage the first balanced `{...}` span when the reply wraps JSON in prose
3. Local grammar fixes (control character escaping, trailing comma removal)
4. json_repair library as a last resort (off unless enabled)"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from json_repair import repair_json
from loguru import logger


class JSONParseError(ValueError):
    """Exception thrown when JSON parsing fails, with original text attached for easy troubleshooting."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        """Construct an exception and attach raw output for easy location in the log.

        Args:
            message: Human-readable error description.
            raw_text: The complete provider output that triggered the exception."""
        super().__init__(message)
        self.raw_text = raw_text


class MalformedSuggestionPayload(JSONParseError):
    """The suggestion provider reply could not be turned into a JSON object."""


class RobustJSONParser:
    """Robust JSON parser for suggestion payloads.

    Strategies are tried in order and the first candidate that decodes to an object wins:
    - the cleaned reply (fences and thinking content removed)
    - the first balanced object span inside it
    - the locally repaired span
    - json_repair output, when enabled"""

    _THINKING_PATTERNS = [
        r"^\s*<thinking>.*?</thinking>\s*",
        r"^\s*<thought>.*?</thought>\s*",
        r"^\s*<think>.*?</think>\s*",
    ]

    def __init__(self, enable_json_repair: bool = False):
        """
        Args:
            enable_json_repair: whether json_repair may be used after local strategies fail"""
        self.enable_json_repair = enable_json_repair

    def parse(self, raw_text: str, context_name: str = "Suggestions") -> Dict[str, Any]:
        """
        Parse a provider reply into a dictionary.

        Parameters:
            raw_text: provider output (possibly wrapped in ``` or surrounded by prose)
            context_name: context name used in log and error messages

        Return:
            dict: parsed JSON object

        Exceptions:
            MalformedSuggestionPayload: no strategy produced a JSON object
        """
        if not raw_text or not str(raw_text).strip():
            raise MalformedSuggestionPayload(f"{context_name} returned empty content", raw_text=raw_text)

        original_text = str(raw_text)
        candidates = self._build_candidate_payloads(original_text)

        last_error: Optional[Exception] = None
        for i, candidate in enumerate(candidates):
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError as exc:
                last_error = exc
                logger.debug(f"{context_name} candidate {i + 1} failed to parse: {exc}")
                continue
            if isinstance(data, dict):
                if i > 0:
                    logger.warning(f"{context_name} JSON salvaged (candidate {i + 1}/{len(candidates)})")
                return data
            last_error = TypeError(f"expected a JSON object, got {type(data).__name__}")

        if self.enable_json_repair:
            repaired = self._attempt_json_repair(candidates[-1], context_name)
            if repaired:
                try:
                    data = json.loads(repaired)
                    if isinstance(data, dict) and data:
                        logger.info(f"{context_name} JSON repaired with json_repair")
                        return data
                except json.JSONDecodeError as exc:
                    last_error = exc

        error_msg = f"{context_name} JSON parsing failed: {last_error}"
        logger.error(error_msg)
        logger.debug(f"First 200 characters of the original text: {original_text[:200]}")
        raise MalformedSuggestionPayload(error_msg, raw_text=original_text)

    def _build_candidate_payloads(self, raw_text: str) -> List[str]:
        """Build candidate JSON strings from the raw text, from least to most invasive."""
        cleaned = self._clean_response(raw_text)
        candidates = [cleaned]

        extracted = self._extract_first_json_structure(cleaned)
        if extracted not in candidates:
            candidates.append(extracted)

        repaired = self._apply_local_repairs(extracted)
        if repaired not in candidates:
            candidates.append(repaired)

        return candidates

    def _clean_response(self, raw: str) -> str:
        """Remove thinking content and markdown fences."""
        cleaned = raw.strip()

        for pattern in self._THINKING_PATTERNS:
            cleaned = re.sub(pattern, "", cleaned, flags=re.DOTALL | re.IGNORECASE)

        fenced_match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", cleaned)
        if fenced_match:
            cleaned = fenced_match.group(1).strip()
        else:
            if cleaned.startswith("```json"):
                cleaned = cleaned[7:]
            elif cleaned.startswith("```"):
                cleaned = cleaned[3:]
            if cleaned.endswith("```"):
                cleaned = cleaned[:-3]
            cleaned = cleaned.strip()

        return cleaned

    def _extract_first_json_structure(self, text: str) -> str:
        """
        Extract the first complete `{...}` object from the text.

        Parameters:
            text: text that may contain JSON

        Return:
            str: the balanced span, the unterminated tail from the first brace, or the text unchanged
        """
        start = text.find("{")
        if start == -1:
            return text

        depth = 0
        in_string = False
        escaped = False

        for i in range(start, len(text)):
            ch = text[i]

            if escaped:
                escaped = False
                continue

            if ch == "\\":
                escaped = True
                continue

            if ch == '"':
                in_string = not in_string
                continue

            if in_string:
                continue

            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]

        return text[start:]

    def _apply_local_repairs(self, text: str) -> str:
        """Escape raw control characters inside strings and drop trailing commas."""
        repaired, escaped = self._escape_control_characters(text)
        if escaped:
            logger.warning("Unescaped control character detected, automatically converted to escape sequence")
        repaired, trailing_removed = self._remove_trailing_commas(repaired)
        if trailing_removed:
            logger.warning("Trailing comma detected, automatically removed")
        return repaired

    def _escape_control_characters(self, text: str) -> Tuple[str, bool]:
        """Replace naked newlines/tabs/control characters in string literals with JSON-legal escape sequences."""
        if not text:
            return text, False

        result: List[str] = []
        in_string = False
        escaped = False
        mutated = False
        control_map = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}

        for ch in text:
            if escaped:
                result.append(ch)
                escaped = False
                continue

            if ch == "\\":
                result.append(ch)
                escaped = True
                continue

            if ch == '"':
                result.append(ch)
                in_string = not in_string
                continue

            if in_string and ch in control_map:
                result.append(control_map[ch])
                mutated = True
                continue

            if in_string and ord(ch) < 0x20:
                result.append(f"\\u{ord(ch):04x}")
                mutated = True
                continue

            result.append(ch)

        return "".join(result), mutated

    def _remove_trailing_commas(self, text: str) -> Tuple[str, bool]:
        """Remove trailing commas before a closing brace or bracket."""
        if not text:
            return text, False
        new_text = re.sub(r",(\s*[}\]])", r"\1", text)
        return new_text, new_text != text

    def _attempt_json_repair(self, text: str, context_name: str) -> Optional[str]:
        """Use the json_repair library for advanced repair, returning None when it changes nothing."""
        try:
            fixed = repair_json(text)
        except (ValueError, TypeError, RecursionError) as exc:
            logger.debug(f"{context_name} json_repair failed: {exc}")
            return None
        if fixed and fixed != text:
            return fixed
        return None


__all__ = ["RobustJSONParser", "JSONParseError", "MalformedSuggestionPayload"]
