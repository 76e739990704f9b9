"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityChanged, CartItemRemoved


def _make_cart():
    return ShoppingCart.create(customer_id="user-001")


def _expected_total(cart):
    return round(sum(item.quantity * item.unit_price for item in cart.items), 2)


class TestCreateCart:
    def test_cart_id_is_the_owner(self):
        cart = _make_cart()
        assert cart.id == "user-001"
        assert cart.customer_id == "user-001"

    def test_new_cart_is_empty(self):
        cart = _make_cart()
        assert cart.items == []
        assert cart.total_amount == 0.0
        assert cart.item_count == 0
        assert cart.revision == 0


class TestAddItem:
    def test_add_item_snapshots_price(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0, name="Product A")

        assert len(cart.items) == 1
        line = cart.items[0]
        assert line.product_id == "prod-A"
        assert line.quantity == 2
        assert line.unit_price == 100.0
        assert line.name == "Product A"
        assert line.added_at is not None
        assert cart.total_amount == 200.0

    def test_add_same_product_merges_quantities(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.add_item("prod-A", 3, unit_price=100.0)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart.total_amount == 500.0

    def test_repeat_add_keeps_first_price(self):
        cart = _make_cart()
        cart.add_item("prod-A", 1, unit_price=100.0)
        cart.add_item("prod-A", 1, unit_price=150.0)

        assert cart.items[0].unit_price == 100.0
        assert cart.total_amount == 200.0

    def test_lines_keep_insertion_order(self):
        cart = _make_cart()
        cart.add_item("prod-B", 1, unit_price=49.5)
        cart.add_item("prod-A", 1, unit_price=100.0)
        cart.add_item("prod-C", 1, unit_price=10.0)

        assert [item.product_id for item in cart.items] == ["prod-B", "prod-A", "prod-C"]

    def test_non_positive_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError) as exc:
            cart.add_item("prod-A", 0, unit_price=100.0)
        assert "quantity" in exc.value.messages

    def test_add_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)

        events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(events) == 1
        assert events[0].product_id == "prod-A"
        assert events[0].quantity_added == 2
        assert events[0].line_quantity == 2
        assert events[0].total_amount == 200.0

    def test_every_mutation_bumps_revision(self):
        cart = _make_cart()
        cart.add_item("prod-A", 1, unit_price=100.0)
        cart.add_item("prod-A", 1, unit_price=100.0)
        cart.update_item("prod-A", 4)
        assert cart.revision == 3


class TestUpdateItem:
    def test_update_replaces_quantity(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.update_item("prod-A", 7)

        assert cart.items[0].quantity == 7
        assert cart.total_amount == 700.0

    def test_update_to_zero_removes_line(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.update_item("prod-A", 0)

        assert cart.items == []
        assert cart.total_amount == 0.0

    def test_negative_quantity_rejected(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        with pytest.raises(ValidationError):
            cart.update_item("prod-A", -1)
        assert cart.items[0].quantity == 2

    def test_update_missing_line(self):
        cart = _make_cart()
        with pytest.raises(ObjectNotFoundError):
            cart.update_item("prod-A", 1)

    def test_update_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.update_item("prod-A", 3)

        events = [e for e in cart._events if isinstance(e, CartItemQuantityChanged)]
        assert len(events) == 1
        assert events[0].previous_quantity == 2
        assert events[0].new_quantity == 3


class TestRemoveItem:
    def test_remove_line(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.add_item("prod-B", 1, unit_price=49.5)
        cart.remove_item("prod-A")

        assert [item.product_id for item in cart.items] == ["prod-B"]
        assert cart.total_amount == 49.5

    def test_remove_twice_fails_second_time(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.add_item("prod-B", 1, unit_price=49.5)
        cart.remove_item("prod-A")
        snapshot = [(i.product_id, i.quantity) for i in cart.items], cart.total_amount

        with pytest.raises(ObjectNotFoundError):
            cart.remove_item("prod-A")
        assert ([(i.product_id, i.quantity) for i in cart.items], cart.total_amount) == snapshot

    def test_remove_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.remove_item("prod-A")

        events = [e for e in cart._events if isinstance(e, CartItemRemoved)]
        assert len(events) == 1
        assert events[0].total_amount == 0.0


class TestClear:
    def test_clear_empties_cart(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.add_item("prod-B", 1, unit_price=49.5)
        cart.clear()

        assert cart.items == []
        assert cart.total_amount == 0.0
        assert len([e for e in cart._events if isinstance(e, CartCleared)]) == 1

    def test_clear_is_idempotent(self):
        cart = _make_cart()
        cart.add_item("prod-A", 2, unit_price=100.0)
        cart.clear()
        revision = cart.revision
        cart.clear()

        assert cart.items == []
        assert cart.revision == revision
        assert len([e for e in cart._events if isinstance(e, CartCleared)]) == 1


class TestTotalInvariant:
    def test_total_tracks_lines_through_every_mutation(self):
        cart = _make_cart()
        steps = [
            lambda c: c.add_item("prod-A", 2, unit_price=100.0),
            lambda c: c.add_item("prod-B", 3, unit_price=49.5),
            lambda c: c.add_item("prod-A", 1, unit_price=100.0),
            lambda c: c.update_item("prod-B", 1),
            lambda c: c.add_item("prod-C", 4, unit_price=10.0),
            lambda c: c.remove_item("prod-A"),
            lambda c: c.update_item("prod-C", 0),
            lambda c: c.clear(),
        ]
        for step in steps:
            step(cart)
            assert cart.total_amount == _expected_total(cart)

    def test_fractional_prices_round_to_cents(self):
        cart = _make_cart()
        cart.add_item("prod-X", 3, unit_price=0.1)
        assert cart.total_amount == 0.3
