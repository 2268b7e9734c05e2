"""Test EntityStore in FormEngine/core/entity_store.py"""

import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from FormEngine.core import (
    Entity,
    EntityStore,
    ProtectedEntityError,
    UnknownScopeError,
    build_purchase_order_form,
)
from FormEngine.core.entity_store import CUSTOM, PREDEFINED


class TestEntityStore:
    """Test identity, protection and custom entity creation"""

    def setup_method(self):
        """Initialization before each test method"""
        self.store = build_purchase_order_form()

    def test_custom_ids_are_namespaced_and_unique(self):
        first = self.store.create_custom_field("company-info", "Tax ID Number")
        second = self.store.create_custom_field("vendor", "Vendor Tax ID")
        column = self.store.create_custom_column("line-items", "SKU")
        assert first.id.startswith("custom-")
        assert column.id.startswith("custom-column-")
        assert len({first.id, second.id, column.id}) == 3
        assert first.provenance == CUSTOM

    def test_custom_ids_not_reused_after_removal(self):
        first = self.store.create_custom_field("company-info", "Tax ID Number")
        self.store.remove_entity("company-info", first.id)
        second = self.store.create_custom_field("company-info", "Tax ID Number")
        assert second.id != first.id

    def test_predefined_id_cannot_use_custom_prefix(self):
        store = EntityStore()
        with pytest.raises(ValueError):
            store.add_section("s", fields=[Entity(id="custom-field-1", label="x")])

    def test_duplicate_ids_rejected(self):
        store = EntityStore()
        with pytest.raises(ValueError):
            store.add_section("s", fields=[Entity(id="a"), Entity(id="a")])
        store.add_section("t")
        with pytest.raises(ValueError):
            store.add_group("t", [])

    def test_protected_entities_cannot_be_removed(self):
        for scope_id, entity_id in (
            ("purchase-order", "po-title"),
            ("totals", "subtotal"),
            ("totals", "total"),
            ("comments", "comments-main"),
            ("contact", "contact-main"),
        ):
            with pytest.raises(ProtectedEntityError):
                self.store.remove_entity(scope_id, entity_id)
            assert entity_id in self.store.natural_order(scope_id)

    def test_plain_fields_can_be_removed(self):
        removed = self.store.remove_entity("company-info", "company-fax")
        assert removed.provenance == PREDEFINED
        assert "company-fax" not in self.store.natural_order("company-info")

    def test_custom_column_added_to_every_row(self):
        column = self.store.create_custom_column("line-items", "SKU")
        assert all(row[column.id] == "" for row in self.store.tables["line-items"].rows)
        self.store.remove_entity("line-items", column.id)
        assert all(column.id not in row for row in self.store.tables["line-items"].rows)

    def test_add_row_has_cell_per_column(self):
        index = self.store.add_row("line-items", {"qty": "1"})
        row = self.store.tables["line-items"].rows[index]
        assert set(row) == {"itemNumber", "description", "qty", "rate", "amount"}
        assert row["qty"] == "1"

    def test_unknown_scope(self):
        with pytest.raises(UnknownScopeError):
            self.store.create_custom_field("missing", "x")
        with pytest.raises(KeyError):
            self.store.get_entity("missing", "x")

    def test_update_value_returns_old_value(self):
        assert self.store.update_value("company-info", "company-name", "Acme") == ("", "Acme")
        assert self.store.get_entity("company-info", "company-name").value == "Acme"

    def test_find_entity_across_scopes(self):
        assert self.store.find_entity("shipVia")[0] == "shipping-details"
        assert self.store.find_entity("po-number")[0] == "purchase-order"
        assert self.store.find_entity("ghost") is None

    def test_default_layout(self):
        assert self.store.page.groups == [
            "header-group",
            "vendor-ship-to-group",
            "shipping-group",
            "line-items-group",
            "comments-totals-group",
            "contact-group",
        ]
        assert len(self.store.tables["line-items"].rows) == 5
        assert self.store.tables["line-items"].binding == "item"
        assert self.store.tables["shipping-details"].binding is None
