"""
Unit tests for the till cart.
"""

from decimal import Decimal

import pytest

from retail_pos.exceptions import ValidationError
from retail_pos.services.cart import Cart, ProductSnapshot


def snapshot(product_id=1, name='Rice 5kg', price='500.00', stock=10):
    return ProductSnapshot(id=product_id, name=name, sale_price=Decimal(price), stock=stock)


class TestCartAdd:
    """Tests for Cart.add."""

    def test_add_new_product_starts_at_one(self):
        cart = Cart()
        item = cart.add(snapshot())

        assert item.quantity == 1
        assert len(cart) == 1
        assert 1 in cart

    def test_add_existing_product_increments(self):
        cart = Cart()
        cart.add(snapshot())
        cart.add(snapshot())

        assert cart.get(1).quantity == 2

    def test_add_out_of_stock_product_is_rejected(self):
        cart = Cart()

        with pytest.raises(ValidationError):
            cart.add(snapshot(stock=0))

        assert cart.is_empty

    def test_add_beyond_known_stock_leaves_cart_unchanged(self):
        cart = Cart()
        cart.add(snapshot(stock=2))
        cart.add(snapshot(stock=2))

        with pytest.raises(ValidationError) as exc_info:
            cart.add(snapshot(stock=2))

        assert cart.get(1).quantity == 2
        assert exc_info.value.payload['available'] == 2

    def test_add_refreshes_snapshot(self):
        cart = Cart()
        cart.add(snapshot(price='500.00'))
        cart.add(snapshot(price='550.00'))

        assert cart.get(1).product.sale_price == Decimal('550.00')


class TestCartQuantities:
    """Tests for set_quantity, remove and total."""

    def test_set_quantity_zero_removes_line(self):
        cart = Cart()
        cart.add(snapshot())

        cart.set_quantity(1, 0)

        assert 1 not in cart
        assert cart.is_empty

    def test_set_quantity_negative_removes_line(self):
        cart = Cart()
        cart.add(snapshot())

        cart.set_quantity(1, -3)

        assert cart.is_empty

    def test_set_quantity_has_no_upper_clamp(self):
        """The commit step is the authoritative stock guard."""
        cart = Cart()
        cart.add(snapshot(stock=2))

        cart.set_quantity(1, 50)

        assert cart.get(1).quantity == 50

    def test_set_quantity_on_missing_line_is_ignored(self):
        cart = Cart()
        cart.set_quantity(99, 4)
        assert cart.is_empty

    def test_remove_is_unconditional(self):
        cart = Cart()
        cart.add(snapshot())
        cart.remove(1)
        cart.remove(1)

        assert cart.is_empty

    def test_total_sums_lines(self):
        cart = Cart()
        cart.add(snapshot(1, price='500.00'))
        cart.add(snapshot(2, name='Cooking Oil 1L', price='125.50'))
        cart.set_quantity(1, 3)

        assert cart.total() == Decimal('1625.50')

    def test_empty_total_is_zero(self):
        assert Cart().total() == Decimal('0')


class TestCartSerialization:
    """The cart lives in the session cookie."""

    def test_from_dict_restores_lines_in_order(self):
        cart = Cart()
        cart.add(snapshot(2, name='Cooking Oil 1L', price='125.50', stock=4))
        cart.add(snapshot(1))
        cart.set_quantity(2, 3)

        restored = Cart.from_dict(cart.to_dict())

        assert restored.line_items() == [(2, 3), (1, 1)]
        assert restored.total() == cart.total()
        assert restored.get(2).product.stock == 4

    def test_to_dict_uses_strings_for_money(self):
        cart = Cart()
        cart.add(snapshot())

        data = cart.to_dict()

        assert data['total'] == '500.00'
        assert data['items'][0]['subtotal'] == '500.00'

    def test_from_empty_session(self):
        assert Cart.from_dict(None).is_empty
