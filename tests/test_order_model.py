"""Test OrderModel in FormEngine/core/order_model.py

Covers:
1. Moves as remove + reinsert, with no-op on absent ids and out-of-range indexes
2. Append/remove/swap never duplicate or drop ids
3. Every scope keeps its own list"""

import sys
from pathlib import Path

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from FormEngine.core import OrderModel, build_purchase_order_form
from FormEngine.core.order_model import move_in_order, swap_in_order


class TestOrderModel:
    """Test reorder operations of OrderModel"""

    def setup_method(self):
        """Initialization before each test method"""
        self.orders = OrderModel({
            "section-a": ["a", "b", "c"],
            "section-b": ["x", "y", "z"],
            "page": ["group-1", "group-2", "group-3"],
        })

    def test_move_to_current_index_is_noop_for_every_scope(self):
        """Moving an id to where it already is leaves every default scope unchanged"""
        orders = OrderModel.from_store(build_purchase_order_form())
        for scope_id in orders.snapshot():
            before = orders.order_for(scope_id)
            for entity_id in before:
                result = orders.apply_move(scope_id, entity_id, orders.index_of(scope_id, entity_id))
                assert result == before
            assert orders.order_for(scope_id) == before

    def test_move_reinserts_at_target(self):
        assert self.orders.apply_move("section-a", "c", 0) == ["c", "a", "b"]
        assert self.orders.apply_move("section-a", "c", 2) == ["a", "b", "c"]
        assert self.orders.apply_move("section-a", "a", 1) == ["b", "a", "c"]

    def test_move_absent_id_returns_unchanged_order(self):
        assert self.orders.apply_move("section-a", "ghost", 0) == ["a", "b", "c"]
        assert self.orders.order_for("section-a") == ["a", "b", "c"]

    def test_move_out_of_range_returns_unchanged_order(self):
        assert self.orders.apply_move("section-a", "a", 3) == ["a", "b", "c"]
        assert self.orders.apply_move("section-a", "a", -1) == ["a", "b", "c"]
        assert self.orders.order_for("section-a") == ["a", "b", "c"]

    def test_move_in_unknown_scope_is_noop(self):
        assert self.orders.apply_move("missing", "a", 0) == []
        assert "missing" not in self.orders.snapshot()

    def test_move_does_not_touch_other_scopes(self):
        self.orders.apply_move("section-a", "c", 0)
        assert self.orders.order_for("section-b") == ["x", "y", "z"]
        assert self.orders.order_for("page") == ["group-1", "group-2", "group-3"]

    def test_insert_append_never_duplicates(self):
        assert self.orders.insert_append("section-a", "d") == ["a", "b", "c", "d"]
        assert self.orders.insert_append("section-a", "d") == ["a", "b", "c", "d"]

    def test_insert_append_creates_scope(self):
        assert self.orders.insert_append("new-section", "n1") == ["n1"]

    def test_remove_filters_id(self):
        assert self.orders.remove("section-a", "b") == ["a", "c"]
        assert self.orders.remove("section-a", "ghost") == ["a", "c"]

    def test_swap_twice_restores_order(self):
        original = self.orders.order_for("page")
        self.orders.swap("page", "group-1", "group-3")
        assert self.orders.order_for("page") == ["group-3", "group-2", "group-1"]
        self.orders.swap("page", "group-1", "group-3")
        assert self.orders.order_for("page") == original

    def test_swap_with_unknown_id_is_noop(self):
        assert self.orders.swap("page", "group-1", "ghost") == ["group-1", "group-2", "group-3"]

    def test_order_for_returns_copy(self):
        order = self.orders.order_for("section-a")
        order.append("mutated")
        assert self.orders.order_for("section-a") == ["a", "b", "c"]

    def test_constructor_drops_duplicate_ids(self):
        orders = OrderModel({"s": ["a", "b", "a", "c", "b"]})
        assert orders.order_for("s") == ["a", "b", "c"]

    def test_pure_helpers_leave_input_untouched(self):
        order = ["a", "b", "c"]
        assert move_in_order(order, "a", 2) == ["b", "c", "a"]
        assert swap_in_order(order, "a", "c") == ["c", "b", "a"]
        assert order == ["a", "b", "c"]

    def test_snapshot_is_independent(self):
        snapshot = self.orders.snapshot()
        self.orders.apply_move("section-a", "c", 0)
        assert snapshot["section-a"] == ["a", "b", "c"]

    def test_from_store_seeds_every_scope(self):
        store = build_purchase_order_form()
        orders = OrderModel.from_store(store)
        assert orders.order_for("page") == list(store.page.groups)
        assert orders.order_for("header-group") == ["company-info", "purchase-order"]
        assert orders.order_for("line-items") == ["itemNumber", "description", "qty", "rate", "amount"]
        assert orders.order_for("company-info")[0] == "company-name"
