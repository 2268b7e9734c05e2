"""Default purchase order layout and the palette of addable fields.

build_purchase_order_form() seeds an EntityStore with the predefined sections, tables and
groups; the matching OrderModel is derived from it with OrderModel.from_store()."""

from __future__ import annotations

from typing import Dict, List, Optional

from .entity_store import Entity, EntityStore
from .key_normalizer import KeyNormalizer
from .value_resolver import ValueResolver

LINE_ITEMS_TABLE = "line-items"
SHIPPING_TABLE = "shipping-details"

DEFAULT_GROUPS = [
    ("header-group", ["company-info", "purchase-order"]),
    ("vendor-ship-to-group", ["vendor", "ship-to"]),
    ("shipping-group", [SHIPPING_TABLE]),
    ("line-items-group", [LINE_ITEMS_TABLE]),
    ("comments-totals-group", ["comments", "totals"]),
    ("contact-group", ["contact"]),
]

AVAILABLE_FIELDS: List[Dict[str, object]] = [
    {"category": "Company Information", "fields": [
        "Tax ID Number", "DUNS Number", "Business License", "Industry Classification",
        "Year Established", "Employee Count", "Annual Revenue", "Parent Company",
        "Subsidiaries", "Business Type (LLC, Corp, etc.)",
    ]},
    {"category": "Purchase Order Details", "fields": [
        "Delivery Date", "Payment Terms", "Currency", "Purchase Order Type", "Priority Level",
        "Department", "Project Code", "Cost Center", "Approval Status", "Approved By",
    ]},
    {"category": "Vendor Information", "fields": [
        "Vendor Tax ID", "Vendor DUNS", "Vendor Rating", "Payment History", "Contract Terms",
        "Insurance Certificate", "Bond Information", "Quality Rating", "Delivery Performance",
        "Warranty Terms",
    ]},
    {"category": "Shipping & Delivery", "fields": [
        "Expected Delivery", "Carrier Information", "Tracking Number", "Delivery Instructions",
        "Special Handling", "Packaging Requirements", "Delivery Confirmation", "Return Policy",
        "Damage Claims", "Freight Class",
    ]},
    {"category": "Financial Details", "fields": [
        "Discount Percentage", "Early Payment Discount", "Late Payment Penalty",
        "Installment Terms", "Security Deposit", "Performance Bond", "Liquidated Damages",
        "Retention Amount", "Change Order Process", "Budget Approval",
    ]},
    {"category": "Compliance & Legal", "fields": [
        "Regulatory Compliance", "Safety Requirements", "Environmental Standards",
        "Quality Certifications", "Audit Requirements", "Documentation Standards",
        "Record Retention", "Confidentiality Terms", "Non-Compete Clauses", "Dispute Resolution",
    ]},
]

# section id -> field id that must resolve to something other than its placeholder
REQUIRED_FIELDS = [
    ("company-info", "company-name"),
    ("purchase-order", "po-date"),
    ("purchase-order", "po-number"),
]


def _field(field_id: str, label: str, placeholder: str = "", **flags) -> Entity:
    return Entity(id=field_id, label=label, placeholder=placeholder, **flags)


def _money(field_id: str, label: str, calculated: bool = False) -> Entity:
    return Entity(
        id=field_id,
        label=label,
        value="$0.00" if calculated else "",
        placeholder="$0.00",
        is_calculated=calculated,
    )


def palette_labels(category: Optional[str] = None) -> List[str]:
    """Flat list of palette labels, optionally restricted to one category."""
    labels: List[str] = []
    for entry in AVAILABLE_FIELDS:
        if category is None or entry["category"] == category:
            labels.extend(entry["fields"])
    return labels


def build_purchase_order_form(
    title: str = "Purchase Order", line_item_rows: int = 5, item_sublist: str = "item"
) -> EntityStore:
    """Seed a store with the predefined purchase order layout.

    `item_sublist` is the record sublist the line item rows bind to in template mode."""
    store = EntityStore(title=title)

    store.add_section("company-info", "Company", [
        _field("company-name", "Company Name:", "Enter company name"),
        _field("company-address", "Street Address:", "Street address"),
        _field("company-city-state", "City, ST ZIP:", "City, State ZIP"),
        _field("company-phone", "Phone:", "(555) 123-4567"),
        _field("company-fax", "Fax:", "(555) 123-4567"),
        _field("company-website", "Website:", "www.example.com"),
    ])
    store.add_section("purchase-order", "Purchase Order", [
        Entity(id="po-title", label="Purchase Order", value=title, is_title=True),
        _field("po-date", "DATE:", "MM/DD/YYYY"),
        _field("po-number", "PO #:", "PO#123456"),
    ])
    store.add_section("vendor", "Vendor", [
        _field("vendor-company", "Company:", "Vendor name"),
        _field("vendor-contact", "Contact:", "Contact person"),
        _field("vendor-address", "Address:", "Street address"),
        _field("vendor-city-state", "City/State:", "City, ST ZIP"),
        _field("vendor-phone", "Phone:", "(555) 123-4567"),
    ])
    store.add_section("ship-to", "Ship To", [
        _field("ship-to-name", "Name:", "Contact name"),
        _field("ship-to-company", "Company:", "Shipping company"),
        _field("ship-to-address", "Address:", "Street address"),
        _field("ship-to-city-state", "City/State:", "City, ST ZIP"),
        _field("ship-to-phone", "Phone:", "(555) 123-4567"),
    ])

    store.add_table(
        SHIPPING_TABLE,
        "Shipping Details",
        [
            _field("requisitioner", "REQUISITIONER", "Requisitioner name"),
            _field("shipVia", "SHIP VIA", "Shipping method"),
            _field("fob", "F.O.B.", "FOB terms"),
            _field("shippingTerms", "SHIPPING TERMS", "Shipping terms"),
        ],
        rows=[{"requisitioner": "", "shipVia": "", "fob": "", "shippingTerms": ""}],
    )
    line_columns = ["itemNumber", "description", "qty", "rate", "amount"]
    store.add_table(
        LINE_ITEMS_TABLE,
        "Line Items",
        [
            _field("itemNumber", "Item#"),
            _field("description", "Description"),
            _field("qty", "Qty"),
            _field("rate", "Rate"),
            _field("amount", "Amount"),
        ],
        rows=[{column: "" for column in line_columns} for _ in range(line_item_rows)],
        binding=item_sublist,
    )

    store.add_section(
        "comments",
        "Comments",
        [_field("comments-main", "Comments or Special Instructions:", "Enter comments or special instructions...")],
        main_field="comments-main",
    )
    store.add_section("totals", "Totals", [
        _money("subtotal", "SUBTOTAL:", calculated=True),
        _money("tax", "TAX:"),
        _money("shipping", "SHIPPING:"),
        _money("other", "OTHER:"),
        _money("total", "TOTAL:", calculated=True),
    ])
    store.add_section(
        "contact",
        "Contact",
        [_field("contact-main", "Contact Information:", "Enter contact information here")],
        main_field="contact-main",
    )

    for group_id, members in DEFAULT_GROUPS:
        store.add_group(group_id, members)
    return store


def check_required_fields(
    store: EntityStore,
    snapshot: Optional[Dict[str, Dict[str, str]]] = None,
    resolver: Optional[ValueResolver] = None,
    normalizer: Optional[KeyNormalizer] = None,
) -> List[str]:
    """Return human-readable warnings; an empty list means the form is complete enough to send."""
    snapshot = snapshot or {}
    resolver = resolver or ValueResolver()
    normalizer = normalizer or KeyNormalizer()
    warnings: List[str] = []

    for section_id, field_id in REQUIRED_FIELDS:
        section = store.sections.get(section_id)
        if section is None or field_id not in section.fields:
            continue
        entity = section.fields[field_id]
        resolved = resolver.resolve(entity, snapshot.get(section_id))
        if not resolved.strip() or resolved == entity.placeholder:
            warnings.append(f"{entity.label.rstrip(':').strip() or field_id} is required")

    table = store.tables.get(LINE_ITEMS_TABLE)
    if table is not None:
        for index, raw_row in enumerate(table.rows):
            row = normalizer.normalize(raw_row)
            for key, label in (("qty", "Quantity"), ("rate", "Unit price")):
                text = str(normalizer.lookup(row, key)).replace("$", "").replace(",", "").strip()
                if text.startswith("-") and text[1:].replace(".", "", 1).isdigit():
                    warnings.append(f"Line item {index + 1}: {label} cannot be negative")
    return warnings


__all__ = [
    "LINE_ITEMS_TABLE",
    "SHIPPING_TABLE",
    "DEFAULT_GROUPS",
    "AVAILABLE_FIELDS",
    "REQUIRED_FIELDS",
    "palette_labels",
    "build_purchase_order_form",
    "check_required_fields",
]
