"""Form Agent main class.

This module is the boundary between the interactive form surface and the export pipeline:
1. Owns the entity store, the order map and the change log, and applies reorder/add/remove/edit events;
2. Runs capture → compose → validate → serialize on every export request, in full;
3. Turns pipeline failures and malformed suggestion payloads into user notifications."""

import os
from collections import deque
from typing import Any, Callable, Dict, List, Mapping, Optional

from loguru import logger

from .core import (
    DocumentComposer,
    Entity,
    EntityStore,
    ExportComposeError,
    KeyNormalizer,
    OrderModel,
    ProtectedEntityError,
    TotalsCalculator,
    ValueResolver,
    build_purchase_order_form,
    check_required_fields,
    palette_labels,
)
from .core.entity_store import PAGE_SCOPE
from .ir import IRValidator
from .renderers import LITERAL, TEMPLATE, XMLRenderer
from .state import ExportResult, ExportState, Notification
from .utils.change_log import ChangeLog
from .utils.config import Settings, settings
from .utils.json_parser import MalformedSuggestionPayload, RobustJSONParser
from .utils.suggestions import apply_suggestions, match_row_suggestions

CaptureSource = Callable[[str], Mapping[str, str]]
EventHandler = Callable[[str, Dict[str, Any]], None]

# Log files that already have a sink, so several agents do not write every line twice
_LOG_SINKS: Dict[str, int] = {}


class FormAgent:
    """Form Agent main class.

    Responsible for integrating:
    - EntityStore/OrderModel state and the edit operations on it;
    - DocumentComposer, IRValidator and XMLRenderer for the export pipeline;
    - Suggestion parsing, totals recalculation, change history and notifications."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        store: Optional[EntityStore] = None,
        capture_source: Optional[CaptureSource] = None,
        event_handler: Optional[EventHandler] = None,
    ):
        """Initialize Form Agent.

        Args:
            config: configuration object, the global settings when not provided
            store: entity store to edit, the default purchase order layout when not provided
            capture_source: `captureCurrentValues(scope_id)` of the interactive surface
            event_handler: optional callback receiving (event_type, payload) for notifications"""
        self.config = config or settings
        self._setup_logging()

        self.store = store or build_purchase_order_form(
            title=self.config.DOCUMENT_TITLE,
            line_item_rows=self.config.DEFAULT_LINE_ITEM_ROWS,
            item_sublist=self.config.TEMPLATE_ITEM_NAMESPACE,
        )
        self.orders = OrderModel.from_store(self.store)

        self.normalizer = KeyNormalizer()
        self.resolver = ValueResolver()
        self.composer = DocumentComposer()
        self.validator = IRValidator()
        self.renderer = XMLRenderer(self.config)
        self.calculator = TotalsCalculator(
            currency_symbol=self.config.CURRENCY_SYMBOL,
            normalizer=self.normalizer,
        )
        self.json_parser = RobustJSONParser(enable_json_repair=self.config.ENABLE_JSON_REPAIR)
        self.change_log = ChangeLog(self.config.MAX_CHANGE_HISTORY)

        self.capture_source = capture_source
        self.event_handler = event_handler
        self.state = ExportState(notifications=deque(maxlen=max(1, self.config.MAX_NOTIFICATIONS)))

        logger.info(
            f"Form Agent has been initialized: {len(self.store.sections)} sections, "
            f"{len(self.store.tables)} tables, {len(self.store.groups)} groups"
        )

    def _setup_logging(self):
        """Add a dedicated loguru file sink unless LOG_FILE is empty or already has one."""
        log_file = self.config.LOG_FILE
        if not log_file:
            return
        log_file_path = os.path.abspath(log_file)
        if log_file_path in _LOG_SINKS:
            return
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        _LOG_SINKS[log_file_path] = logger.add(
            log_file_path,
            level="DEBUG",
            enqueue=False,
            encoding="utf-8",
            mode="a",
        )
        logger.debug(f"Added log handler: {log_file_path}")

    # ======== Reorder ========

    def apply_move(self, scope_id: str, entity_id: str, target_index: int) -> List[str]:
        """Move an id to `target_index` within its scope; invalid moves return the unchanged order."""
        before = self.orders.order_for(scope_id)
        old_index = self.orders.index_of(scope_id, entity_id)
        after = self.orders.apply_move(scope_id, entity_id, target_index)
        if after != before:
            self.change_log.record("move", entity_id, old_index, target_index, scope_id)
        return after

    def swap(self, scope_id: str, first_id: str, second_id: str) -> List[str]:
        before = self.orders.order_for(scope_id)
        after = self.orders.swap(scope_id, first_id, second_id)
        if after != before:
            self.change_log.record("swap", first_id, first_id, second_id, scope_id)
        return after

    def swap_groups(self, first_group: str, second_group: str) -> List[str]:
        return self.swap(PAGE_SCOPE, first_group, second_group)

    # ======== Add / remove ========

    def add_field(self, section_id: str, label: str, value: str = "", placeholder: str = "") -> Entity:
        entity = self.store.create_custom_field(section_id, label, value=value, placeholder=placeholder)
        self.orders.insert_append(section_id, entity.id)
        self.change_log.record("add", entity.id, None, label, section_id)
        return entity

    def add_palette_field(self, section_id: str, label: str) -> Entity:
        """Add a field picked from the available-fields palette."""
        if label not in palette_labels():
            raise ValueError(f"{label!r} is not an available field")
        return self.add_field(section_id, label, placeholder=f"Enter {label.lower()}")

    def add_column(self, table_id: str, label: str) -> Entity:
        entity = self.store.create_custom_column(table_id, label, placeholder="")
        self.orders.insert_append(table_id, entity.id)
        self.change_log.record("add", entity.id, None, label, table_id)
        return entity

    def add_row(self, table_id: str) -> int:
        index = self.store.add_row(table_id)
        self.change_log.record("add", f"row-{index}", None, None, table_id)
        return index

    def remove(self, scope_id: str, entity_id: str) -> Entity:
        """Remove a field or column; protected entities raise ProtectedEntityError."""
        try:
            entity = self.store.remove_entity(scope_id, entity_id)
        except ProtectedEntityError as exc:
            logger.warning(str(exc))
            self.notify("warning", str(exc))
            raise
        self.orders.remove(scope_id, entity_id)
        self.change_log.record("remove", entity_id, entity.label, None, scope_id)
        if scope_id in self.store.tables:
            self.recalculate()
        return entity

    def remove_row(self, table_id: str, row_index: int) -> Dict[str, str]:
        row = self.store.remove_row(table_id, row_index)
        self.change_log.record("remove", f"row-{row_index}", row, None, table_id)
        self.recalculate()
        return row

    # ======== Edit ========

    def edit_label(self, scope_id: str, entity_id: str, label: str):
        old_label, _ = self.store.update_label(scope_id, entity_id, label)
        self.change_log.record("label", entity_id, old_label, label, scope_id)

    def edit_value(self, scope_id: str, entity_id: str, value: str):
        old_value, _ = self.store.update_value(scope_id, entity_id, value)
        self.change_log.record("value", entity_id, old_value, value, scope_id)
        self.recalculate()

    def edit_cell(self, table_id: str, row_index: int, column_id: str, value: str):
        old_value, _ = self.store.update_cell(table_id, row_index, column_id, value)
        self.change_log.record("cell", f"{row_index}:{column_id}", old_value, value, table_id)
        self.recalculate()

    def recalculate(self) -> Dict[str, str]:
        """Write the totals arithmetic into the calculated entities."""
        results = self.calculator.calculate(self.store)
        for entity_id, value in results.items():
            located = self.store.find_entity(entity_id)
            if located is None:
                continue
            scope_id, entity = located
            if entity.value != value:
                self.store.update_value(scope_id, entity_id, value)
        return results

    # ======== Suggestions ========

    def apply_suggestion_payload(self, raw_text: str) -> Dict[str, str]:
        """Parse a provider reply and apply it; a malformed reply changes nothing.

        Return:
            dict: what was applied, field id or `table[row].column` -> value"""
        try:
            suggestions = self.json_parser.parse(raw_text, "Suggestions")
        except MalformedSuggestionPayload as exc:
            logger.warning(f"Suggestions rejected: {exc}")
            self.notify("error", f"Could not read suggestions: {exc}")
            return {}
        return self.apply_suggestion_map(suggestions)

    def apply_suggestion_map(self, suggestions: Mapping[str, Any]) -> Dict[str, str]:
        """Apply an already parsed `{key: value}` map to section fields and table cells."""
        applied: Dict[str, str] = {}

        owners = {entity.id: section_id for section_id, entity in self.store.iter_fields()}
        originals = [entity for _, entity in self.store.iter_fields()]
        for original, updated in zip(originals, apply_suggestions(suggestions, originals)):
            if updated is original:
                continue
            scope_id = owners[original.id]
            old_value, _ = self.store.update_value(scope_id, original.id, updated.value)
            self.change_log.record("suggestion", original.id, old_value, updated.value, scope_id)
            applied[original.id] = updated.value

        for table_id, table in self.store.tables.items():
            cells = match_row_suggestions(
                suggestions,
                table.columns.keys(),
                len(table.rows),
                self.normalizer,
                single_row=table.binding is None and len(table.rows) == 1,
            )
            for (row_index, column_id), value in cells.items():
                old_value, _ = self.store.update_cell(table_id, row_index, column_id, value)
                self.change_log.record("suggestion", f"{row_index}:{column_id}", old_value, value, table_id)
                applied[f"{table_id}[{row_index}].{column_id}"] = value

        if applied:
            self.recalculate()
            self.notify("success", f"Applied {len(applied)} suggestion(s)")
        else:
            self.notify("info", "No suggestions matched the form")
        logger.info(f"Applied {len(applied)} suggestion(s)")
        return applied

    # ======== Export ========

    def capture_snapshot(self) -> Dict[str, Dict[str, str]]:
        """Call captureCurrentValues once per section and table scope."""
        if self.capture_source is None:
            return {}
        snapshot: Dict[str, Dict[str, str]] = {}
        for scope_id in list(self.store.sections) + list(self.store.tables):
            values = self.capture_source(scope_id) or {}
            if values:
                snapshot[scope_id] = {str(k): "" if v is None else str(v) for k, v in values.items()}
        return snapshot

    def export(self) -> Optional[ExportResult]:
        """Run the whole pipeline and return both XML documents.

        A failure anywhere in capture/compose/validate/serialize is reported through one
        error notification; the previous result stays in `state.last_result` and None is returned."""
        self.state.mark_processing()
        try:
            snapshot = self.capture_snapshot()
            result = self._run_export(snapshot)
        except Exception as exc:
            error = exc if isinstance(exc, ExportComposeError) else ExportComposeError(str(exc))
            self.state.mark_failed(str(error))
            logger.exception(f"XML generation failed: {error}")
            self.notify("error", f"XML generation failed: {error}")
            return None

        self.state.mark_completed(result)
        logger.success(
            f"Export {result.document.get('documentId')} complete: "
            f"{len(result.literal_xml)} / {len(result.template_xml)} characters"
        )
        self.notify("success", "XML generated")
        if result.warnings:
            self.notify("warning", "; ".join(result.warnings))
        return result

    def _run_export(self, snapshot: Dict[str, Dict[str, str]]) -> ExportResult:
        document = self.composer.compose(
            self.store.page,
            self.store,
            self.resolver,
            self.normalizer,
            self.orders.snapshot(),
            snapshot=snapshot,
            calculated=self._live_totals(snapshot),
        )
        ok, errors = self.validator.validate_document(document)
        if not ok:
            raise ExportComposeError(f"Composed document is invalid: {'; '.join(errors[:5])}")

        literal_xml = self.renderer.render(document, LITERAL)
        template_xml = self.renderer.render(document, TEMPLATE)
        warnings = check_required_fields(self.store, snapshot, self.resolver, self.normalizer)
        return ExportResult(
            literal_xml=literal_xml,
            template_xml=template_xml,
            document=document,
            warnings=warnings,
        )

    def _live_totals(self, snapshot: Dict[str, Dict[str, str]]) -> Dict[str, Dict[str, str]]:
        """Totals over the captured values, grouped by section; the store is left untouched."""
        if not snapshot:
            return {}
        totals: Dict[str, Dict[str, str]] = {}
        for entity_id, value in self.calculator.calculate(self.store, snapshot).items():
            located = self.store.find_entity(entity_id)
            if located is not None:
                totals.setdefault(located[0], {})[entity_id] = value
        return totals

    # ======== Notifications and stats ========

    def notify(self, level: str, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.state.notifications.append(notification)
        if self.event_handler:
            try:
                self.event_handler("notification", notification.to_dict())
            except Exception as callback_error:  # pragma: no cover - log only
                logger.warning(f"Notification callback failed: {callback_error}")
        return notification

    def get_form_stats(self) -> Dict[str, int]:
        fields = [entity for _, entity in self.store.iter_fields()]
        columns = [column for table in self.store.tables.values() for column in table.columns.values()]
        return {
            "groups": len(self.store.groups),
            "sections": len(self.store.sections),
            "tables": len(self.store.tables),
            "fields": len(fields),
            "custom_fields": sum(1 for entity in fields if entity.provenance == "custom"),
            "columns": len(columns),
            "custom_columns": sum(1 for column in columns if column.provenance == "custom"),
            "changes": len(self.change_log),
        }


def create_agent(config_file: Optional[str] = None, **kwargs) -> FormAgent:
    """Convenience function for creating Form Agent instances.

    Args:
        config_file: optional .env file to read settings from instead of the default

    Returns:
        FormAgent instance"""
    config = Settings(_env_file=config_file) if config_file else Settings()
    return FormAgent(config, **kwargs)


__all__ = ["FormAgent", "create_agent"]
