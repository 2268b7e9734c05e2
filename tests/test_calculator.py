"""Test TotalsCalculator in FormEngine/core/calculator.py"""

import sys
from decimal import Decimal
from pathlib import Path

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from FormEngine.core import TotalsCalculator, build_purchase_order_form, format_amount, parse_amount


class TestTotalsCalculator:
    """Test subtotal/total arithmetic"""

    def setup_method(self):
        """Initialization before each test method"""
        self.store = build_purchase_order_form()
        self.calculator = TotalsCalculator()

    def test_parse_amount(self):
        assert parse_amount("$1,234.50") == Decimal("1234.50")
        assert parse_amount("12") == Decimal("12")
        assert parse_amount("-3.5") == Decimal("-3.5")
        assert parse_amount("") is None
        assert parse_amount("abc") is None
        assert parse_amount(None) is None

    def test_format_amount(self):
        assert format_amount(Decimal("1234.5")) == "$1,234.50"
        assert format_amount(Decimal("0")) == "$0.00"
        assert format_amount(Decimal("-2.5")) == "-$2.50"

    def test_subtotal_and_total(self):
        rows = self.store.tables["line-items"].rows
        rows[0].update({"qty": "2", "rate": "$10.00"})
        rows[1].update({"amount": "$5.00"})
        self.store.update_value("totals", "tax", "$1.50")
        self.store.update_value("totals", "shipping", "2")
        results = self.calculator.calculate(self.store)
        assert results == {"subtotal": "$25.00", "total": "$28.50"}

    def test_alias_spellings_are_read(self):
        self.store.tables["line-items"].rows[0] = {"quantity": "4", "unitPrice": "2.50"}
        assert self.calculator.calculate(self.store)["subtotal"] == "$10.00"

    def test_unpriced_rows_change_nothing(self):
        self.store.tables["line-items"].rows[0].update({"qty": "2"})
        assert self.calculator.calculate(self.store) == {}

    def test_live_cells_overlay_stored_rows(self):
        self.store.tables["line-items"].rows[0].update({"qty": "1", "rate": "10"})
        snapshot = {"line-items": {"0:qty": "3"}}
        assert self.calculator.calculate(self.store, snapshot)["subtotal"] == "$30.00"

    def test_missing_table_or_section(self):
        del self.store.tables["line-items"]
        assert self.calculator.calculate(self.store) == {}
