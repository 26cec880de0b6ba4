"""Read-only access to the product catalog and the customer picker."""
import math
from dataclasses import dataclass
from typing import List, Optional

from flask import current_app, has_app_context
from sqlalchemy import func, or_

from retail_pos.models import Customer, Product
from retail_pos.exceptions import NotFoundError

DEFAULT_PAGE_SIZE = 24
MAX_SEARCH_LENGTH = 100
LIKE_ESCAPE = '\\'
MAX_PICKER_RESULTS = 50


@dataclass
class Page:
    items: List
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return math.ceil(self.total / self.per_page)

    def to_dict(self) -> dict:
        return {
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'page': self.page,
            'per_page': self.per_page,
            'pages': self.pages,
        }


def contains_pattern(text: str) -> str:
    """LIKE pattern matching `text` anywhere, with its own wildcards taken literally."""
    for char in (LIKE_ESCAPE, '%', '_'):
        text = text.replace(char, LIKE_ESCAPE + char)
    return f'%{text}%'


def _default_page_size() -> int:
    if has_app_context():
        return int(current_app.config.get('CATALOG_PAGE_SIZE', DEFAULT_PAGE_SIZE))
    return DEFAULT_PAGE_SIZE


def list_products(session, search: str = '', page: int = 1, per_page: Optional[int] = None) -> Page:
    """
    List products ordered by name.

    Args:
        session: SQLAlchemy session
        search: Case-insensitive substring of the name, or an exact barcode
        page: 1-based page number
        per_page: Page size (defaults to CATALOG_PAGE_SIZE)

    Returns:
        Page of Product rows
    """
    per_page = per_page or _default_page_size()
    page = max(int(page or 1), 1)

    query = session.query(Product)

    search = (search or '').strip()[:MAX_SEARCH_LENGTH]
    if search:
        query = query.filter(or_(
            func.lower(Product.name).like(contains_pattern(search.lower()), escape=LIKE_ESCAPE),
            Product.barcode == search
        ))

    total = query.count()
    items = query.order_by(Product.name, Product.id).offset((page - 1) * per_page).limit(per_page).all()

    return Page(items=items, total=total, page=page, per_page=per_page)


def get_product(session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f'Product {product_id} not found')
    return product


def search_customers(session, query: str, limit: int = 10) -> List[Customer]:
    """Customers whose name or phone contains the query, for the till's customer picker."""
    query = (query or '').strip()[:MAX_SEARCH_LENGTH]
    limit = min(max(int(limit or 1), 1), MAX_PICKER_RESULTS)
    customers = session.query(Customer)
    if query:
        customers = customers.filter(or_(
            func.lower(Customer.name).like(contains_pattern(query.lower()), escape=LIKE_ESCAPE),
            Customer.phone.like(contains_pattern(query), escape=LIKE_ESCAPE)
        ))
    return customers.order_by(Customer.name, Customer.id).limit(limit).all()
