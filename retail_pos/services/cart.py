"""
In-progress purchase held by the till.

The cart is client-owned state: it lives in the signed session cookie and is
never persisted. Stock limits applied here are advisory; the sale engine
re-checks every line against current stock when the sale is committed.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple

from retail_pos.exceptions import ValidationError


@dataclass(frozen=True)
class ProductSnapshot:
    """What the till knew about a product when it was put in the cart."""
    id: int
    name: str
    sale_price: Decimal
    stock: int

    @classmethod
    def from_product(cls, product) -> 'ProductSnapshot':
        return cls(
            id=int(product.id),
            name=product.name,
            sale_price=Decimal(str(product.sale_price)),
            stock=int(product.stock or 0),
        )


@dataclass
class CartItem:
    product: ProductSnapshot
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.product.sale_price * self.quantity

    def to_dict(self) -> dict:
        return {
            'product_id': self.product.id,
            'name': self.product.name,
            'sale_price': str(self.product.sale_price),
            'stock': self.product.stock,
            'quantity': self.quantity,
            'subtotal': str(self.subtotal),
        }


class Cart:
    """Mapping of product id to desired quantity, in insertion order."""

    def __init__(self, items: Optional[List[CartItem]] = None):
        self._items: Dict[int, CartItem] = {}
        for item in items or []:
            self._items[item.product.id] = item

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(list(self._items.values()))

    def __contains__(self, product_id) -> bool:
        return int(product_id) in self._items

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get(self, product_id) -> Optional[CartItem]:
        return self._items.get(int(product_id))

    def add(self, product) -> CartItem:
        """
        Add one unit of a product.

        Accepts a Product row or a ProductSnapshot. Raises ValidationError and
        leaves the cart unchanged when the known stock does not cover one more unit.
        """
        snapshot = product if isinstance(product, ProductSnapshot) else ProductSnapshot.from_product(product)
        existing = self._items.get(snapshot.id)

        if existing is None:
            if snapshot.stock < 1:
                raise ValidationError(f'"{snapshot.name}" is out of stock')
            item = CartItem(product=snapshot, quantity=1)
            self._items[snapshot.id] = item
            return item

        if existing.quantity + 1 > snapshot.stock:
            raise ValidationError(
                f'Only {snapshot.stock} of "{snapshot.name}" left in stock',
                payload={'product_id': snapshot.id, 'available': snapshot.stock},
            )
        existing.product = snapshot
        existing.quantity += 1
        return existing

    def set_quantity(self, product_id, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        product_id = int(product_id)
        if quantity <= 0:
            self._items.pop(product_id, None)
            return
        item = self._items.get(product_id)
        if item is not None:
            item.quantity = int(quantity)

    def remove(self, product_id) -> None:
        self._items.pop(int(product_id), None)

    def clear(self) -> None:
        self._items.clear()

    def total(self) -> Decimal:
        return sum((item.subtotal for item in self._items.values()), Decimal('0'))

    def line_items(self) -> List[Tuple[int, int]]:
        """(product_id, quantity) pairs handed to the sale engine."""
        return [(item.product.id, item.quantity) for item in self._items.values()]

    def to_dict(self) -> dict:
        return {
            'items': [item.to_dict() for item in self._items.values()],
            'total': str(self.total()),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'Cart':
        items = []
        for raw in (data or {}).get('items', []):
            snapshot = ProductSnapshot(
                id=int(raw['product_id']),
                name=raw['name'],
                sale_price=Decimal(str(raw['sale_price'])),
                stock=int(raw['stock']),
            )
            items.append(CartItem(product=snapshot, quantity=int(raw['quantity'])))
        return cls(items)
