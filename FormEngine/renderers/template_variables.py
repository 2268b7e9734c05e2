"""Placeholder variables for template-mode output.

Field and record-level column ids map to fixed record variables; list-bound table columns map
to sublist item variables. Ids without a mapping (custom entities included) fall back to the
id with every non-alphanumeric character removed."""

from __future__ import annotations

import re
from typing import Dict, Optional

FIELD_VARIABLES: Dict[str, str] = {
    # Company
    "company-name": "companyname",
    "company-address": "companyaddress",
    "company-city-state": "companycitystate",
    "company-phone": "companyphone",
    "company-fax": "companyfax",
    "company-website": "companywebsite",
    # Purchase order
    "po-title": "title",
    "po-date": "trandate",
    "po-number": "tranid",
    # Vendor
    "vendor-company": "billaddresslist",
    "vendor-contact": "billcontact",
    "vendor-address": "billaddress",
    "vendor-city-state": "billcitystate",
    "vendor-phone": "billphone",
    # Ship to
    "ship-to-name": "shipcontact",
    "ship-to-company": "shipaddresslist",
    "ship-to-address": "shipaddress",
    "ship-to-city-state": "shipcitystate",
    "ship-to-phone": "shipphone",
    # Shipping details (record-level table)
    "requisitioner": "memo",
    "shipVia": "shipmethod",
    "fob": "fob",
    "shippingTerms": "shippingterms",
    # Totals
    "subtotal": "subtotal",
    "tax": "taxtotal",
    "shipping": "shippingcost",
    "other": "othercost",
    "total": "total",
    # Free text
    "comments-main": "memo",
    "contact-main": "memo",
}

ITEM_VARIABLES: Dict[str, str] = {
    "itemNumber": "item",
    "description": "description",
    "qty": "quantity",
    "quantity": "quantity",
    "rate": "rate",
    "unitPrice": "rate",
    "amount": "amount",
    "total": "amount",
}


def clean_identifier(entity_id: str) -> str:
    """`custom-field-3` -> `customfield3`."""
    return re.sub(r"[^A-Za-z0-9]", "", entity_id or "")


def field_variable(field_id: str, binding: Optional[str] = None) -> str:
    return binding or FIELD_VARIABLES.get(field_id) or clean_identifier(field_id)


def item_variable(column_id: str, binding: Optional[str] = None) -> str:
    return binding or ITEM_VARIABLES.get(column_id) or clean_identifier(column_id)


def record_placeholder(variable: str, namespace: str = "record") -> str:
    return "${" + f"{namespace}.{variable}" + "}"


def item_placeholder(
    variable: str,
    row_index: int,
    sublist: str = "item",
    namespace: str = "record",
    default: Optional[str] = None,
) -> str:
    """`${record.item[0].quantity!"-"}`; the default keeps missing sublist values printable."""
    expression = f"{namespace}.{sublist}[{row_index}].{variable}"
    if default is not None:
        expression += '!"' + default.replace('"', '\\"') + '"'
    return "${" + expression + "}"


__all__ = [
    "FIELD_VARIABLES",
    "ITEM_VARIABLES",
    "clean_identifier",
    "field_variable",
    "item_variable",
    "record_placeholder",
    "item_placeholder",
]
