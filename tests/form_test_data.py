"""Form test data

Small stores, provider replies and helpers shared by the Form Engine tests."""

from FormEngine.core import (
    DocumentComposer,
    Entity,
    EntityStore,
    KeyNormalizer,
    OrderModel,
    ValueResolver,
)


def build_company_store():
    """Two groups: header (company-info, vendor) and items (line-items, shipping-details)."""
    store = EntityStore(title="Purchase Order")
    store.add_section("company-info", "Company", [
        Entity(id="company-phone", label="Phone:", value="", placeholder="(555) 123-4567"),
        Entity(id="company-name", label="Company Name:", value="Acme Corp", placeholder="Enter company name"),
    ])
    store.add_section("vendor", "Vendor", [
        Entity(id="vendor-company", label="Company:", value="Globex"),
        Entity(id="vendor-contact", label="Contact:", value="Hank Scorpio"),
        Entity(id="vendor-phone", label="Phone:", placeholder="(555) 123-4567"),
    ])
    store.add_table(
        "line-items",
        "Line Items",
        [
            Entity(id="itemNumber", label="Item#"),
            Entity(id="description", label="Description"),
            Entity(id="qty", label="Qty"),
        ],
        rows=[
            {"itemNumber": "A-1", "description": "Widget", "quantity": "3"},
            {"itemNumber": "", "description": "", "qty": ""},
        ],
        binding="item",
    )
    store.add_table(
        "shipping-details",
        "Shipping Details",
        [
            Entity(id="requisitioner", label="REQUISITIONER", placeholder="Requisitioner name"),
            Entity(id="shipVia", label="SHIP VIA", placeholder="Shipping method"),
        ],
        rows=[{"requisitioner": "", "shipVia": "Ground"}],
    )
    store.add_group("header-group", ["company-info", "vendor"])
    store.add_group("items-group", ["line-items", "shipping-details"])
    return store


def compose(store, orders=None, snapshot=None):
    """Compose a store with its own natural orders unless an order map is given."""
    if orders is None:
        orders = OrderModel.from_store(store).snapshot()
    return DocumentComposer().compose(
        store.page,
        store,
        ValueResolver(),
        KeyNormalizer(),
        orders,
        snapshot=snapshot,
        document_id="form_test",
        metadata={"generatedAt": "2025-01-01T00:00:00Z"},
    )


def section_field_ids(document, section_id):
    for group in document["groups"]:
        for member in group.get("members", []):
            if member.get("type") == "section" and member["sectionId"] == section_id:
                return [f.get("fieldId") for f in member["fields"] if f["type"] == "field"]
    raise KeyError(section_id)


def group_member_ids(document, group_id):
    for group in document["groups"]:
        if group.get("groupId") == group_id:
            return [m.get("sectionId") or m.get("tableId") for m in group["members"]]
    raise KeyError(group_id)


def find_node(document, key, node_id):
    for group in document["groups"]:
        for member in group.get("members", []):
            if member.get(key) == node_id:
                return member
    raise KeyError(node_id)


# ===== Provider replies =====

VALID_PAYLOAD = '{"company-name": "Initech", "PO #": "PO-778", "Phone": "(555) 000-1111"}'

FENCED_PAYLOAD = """```json
{
  "po-number": "PO-2024-17",
  "vendor-company": "Globex"
}
```"""

PROSE_PAYLOAD = 'Here is what I found: {"po-date": "03/14/2025", "note": "ignored"} Let me know if you need more.'

THINKING_PAYLOAD = """<thinking>The invoice header shows the vendor.</thinking>
{"vendor-contact": "Hank Scorpio"}"""

TRAILING_COMMA_PAYLOAD = '{"company-website": "www.initech.com",}'

MALFORMED_PAYLOAD = "not json"

ARRAY_PAYLOAD = '["company-name", "Initech"]'

LINE_ITEM_PAYLOAD = """{
  "qty1": "2",
  "rate1": "$10.00",
  "description1": "Bolts",
  "quantity2": 3,
  "unitPrice2": "4.50",
  "tax": "$1.50",
  "shipVia": "UPS Ground",
  "comments": "Deliver to dock 4"
}"""
