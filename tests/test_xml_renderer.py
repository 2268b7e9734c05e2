"""Test XMLRenderer and XMLReader in FormEngine/renderers

Covers literal/template output sharing one structure, escaping, schema-stable empty slots
and reading the order back from the exported XML."""

import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from FormEngine.core import Entity, EntityStore, OrderModel
from FormEngine.renderers import LITERAL, TEMPLATE, XMLReader, XMLRenderer
from FormEngine.utils.config import Settings
from tests import form_test_data as test_data


class TestXMLRenderer:
    """Test literal and template rendering"""

    def setup_method(self):
        """Initialization before each test method"""
        self.config = Settings(LOG_FILE="")
        self.renderer = XMLRenderer(self.config)
        self.store = test_data.build_company_store()
        self.orders = OrderModel.from_store(self.store)

    def _render(self, mode=LITERAL):
        return self.renderer.render(test_data.compose(self.store, self.orders.snapshot()), mode)

    def test_literal_document_shape(self):
        xml = self._render()
        assert xml.startswith('<?xml version="1.0"?>')
        assert '<!DOCTYPE pdf PUBLIC "-//big.faceless.org//report" "report-1.1.dtd">' in xml
        reader = XMLReader(xml)
        assert reader.has_slot("head")
        assert reader.has_slot("body")
        assert reader.title == "Purchase Order"
        assert reader.group_order() == ["header-group", "items-group"]

    def test_phone_row_precedes_name_row(self):
        reader = XMLReader(self._render())
        assert reader.field_order("company-info") == ["company-phone", "company-name"]
        values = reader.field_values("company-info")
        assert values["company-phone"] == "(555) 123-4567"
        assert values["company-name"] == "Acme Corp"
        assert reader.field_labels("company-info")["company-name"] == "Company Name:"

    def test_field_order_round_trip(self):
        store = EntityStore()
        store.add_section("s", "S", [Entity(id=i, label=i.upper(), value=i) for i in ("a", "b", "c")])
        store.add_group("g", ["s"])
        xml = self.renderer.render(test_data.compose(store), LITERAL)
        assert XMLReader(xml).field_order("s") == ["a", "b", "c"]

    def test_moving_field_leaves_other_section_serialization_alone(self):
        before = XMLReader(self._render())
        self.orders.apply_move("company-info", "company-name", 0)
        after = XMLReader(self._render())
        assert after.field_order("company-info") == ["company-name", "company-phone"]
        assert after.field_order("vendor") == before.field_order("vendor")

    def test_text_is_escaped(self):
        self.store.update_value("company-info", "company-name", 'Smith & Sons <Ltd> "West"')
        self.store.update_label("vendor", "vendor-company", "Vendor <Main>")
        xml = self._render()
        assert "Smith &amp; Sons &lt;Ltd&gt;" in xml
        reader = XMLReader(xml)
        assert reader.field_values("company-info")["company-name"] == 'Smith & Sons <Ltd> "West"'
        assert reader.field_labels("vendor")["vendor-company"] == "Vendor <Main>"

    def test_invalid_xml_characters_dropped(self):
        self.store.update_value("company-info", "company-name", "Acme\x00\x07 Corp")
        reader = XMLReader(self._render())
        assert reader.field_values("company-info")["company-name"] == "Acme Corp"

    def test_table_headers_and_empty_cells(self):
        reader = XMLReader(self._render())
        assert reader.column_order("line-items") == ["itemNumber", "description", "qty"]
        assert reader.column_labels("line-items") == ["Item#", "Description", "Qty"]
        rows = reader.row_values("line-items")
        assert rows[0] == {"itemNumber": "A-1", "description": "Widget", "qty": "3"}
        assert rows[1] == {"itemNumber": "-", "description": "-", "qty": "-"}
        assert reader.row_values("shipping-details")[0] == {
            "requisitioner": "Requisitioner name",
            "shipVia": "Ground",
        }

    def test_template_keeps_structure(self):
        literal = XMLReader(self._render(LITERAL))
        template = XMLReader(self._render(TEMPLATE))
        assert template.group_order() == literal.group_order()
        for group_id in literal.group_order():
            assert template.member_order(group_id) == literal.member_order(group_id)
        for section_id in ("company-info", "vendor"):
            assert template.field_order(section_id) == literal.field_order(section_id)
        for table_id in ("line-items", "shipping-details"):
            assert template.column_order(table_id) == literal.column_order(table_id)
            assert len(template.row_values(table_id)) == len(literal.row_values(table_id))

    def test_template_leaves_are_placeholders(self):
        custom = self.store.create_custom_field("vendor", "Vendor Tax ID")
        self.orders.insert_append("vendor", custom.id)
        reader = XMLReader(self._render(TEMPLATE))
        values = reader.field_values("company-info")
        assert values["company-name"] == "${record.companyname}"
        assert values["company-phone"] == "${record.companyphone}"
        assert reader.field_values("vendor")[custom.id] == "${record." + custom.id.replace("-", "") + "}"
        assert reader.field_labels("company-info")["company-name"] == "Company Name:"

        line_rows = reader.row_values("line-items")
        assert line_rows[0]["qty"] == '${record.item[0].quantity!"-"}'
        assert line_rows[1]["itemNumber"] == '${record.item[1].item!"-"}'
        assert reader.row_values("shipping-details")[0]["shipVia"] == "${record.shipmethod}"

    def test_template_namespace_from_config(self):
        renderer = XMLRenderer(Settings(LOG_FILE="", TEMPLATE_RECORD_NAMESPACE="po"))
        xml = renderer.render(test_data.compose(self.store), TEMPLATE)
        assert XMLReader(xml).field_values("vendor")["vendor-company"] == "${po.billaddresslist}"

    def test_empty_slots_stay_well_formed(self):
        store = EntityStore(title="Empty")
        store.add_section("notes", "Notes")
        store.add_table("extras", "Extras")
        store.add_group("empty-group", [])
        store.add_group("notes-group", ["notes", "extras"])
        for mode in (LITERAL, TEMPLATE):
            reader = XMLReader(self.renderer.render(test_data.compose(store), mode))
            assert reader.group_order() == ["empty-group", "notes-group"]
            assert reader.placeholder_slots() == ["empty-group", "notes", "extras"]
            assert reader.field_order("notes") == []
            assert reader.column_order("extras") == []

    def test_empty_document_keeps_head_and_body(self):
        for document in ({}, test_data.compose(EntityStore())):
            reader = XMLReader(self.renderer.render(document, LITERAL))
            assert reader.has_slot("head")
            assert reader.has_slot("body")
            assert reader.placeholder_slots() == ["page"]

    def test_title_field_rendered_as_heading(self):
        store = EntityStore()
        store.add_section("po", "PO", [Entity(id="po-title", label="Purchase Order", value="Purchase Order", is_title=True)])
        store.add_group("g", ["po"])
        xml = self.renderer.render(test_data.compose(store), LITERAL)
        assert 'class="header-title"' in xml
        assert XMLReader(xml).field_values("po")["po-title"] == "Purchase Order"

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            self.renderer.render(test_data.compose(self.store), "html")

    def test_render_mode_does_not_persist(self):
        document = test_data.compose(self.store, self.orders.snapshot())
        literal = self.renderer.render(document, LITERAL)
        self.renderer.render(document, TEMPLATE)
        assert "mode" not in vars(self.renderer)
        assert self.renderer.render(document) == literal

    def test_ids_with_quotes_read_back(self):
        store = EntityStore()
        store.add_section("o'brien", "Contact", [Entity(id="it's", label="Name:", value="Pat")])
        store.add_table("parts\"list", "Parts", [Entity(id="sku", label="SKU")], rows=[{"sku": "X-1"}])
        store.add_group("group'1", ["o'brien", "parts\"list"])
        reader = XMLReader(self.renderer.render(test_data.compose(store), LITERAL))
        assert reader.member_order("group'1") == ["o'brien", "parts\"list"]
        assert reader.field_values("o'brien") == {"it's": "Pat"}
        assert reader.row_values("parts\"list") == [{"sku": "X-1"}]
