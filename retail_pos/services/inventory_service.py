"""Inventory edits made from the back office."""
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from retail_pos.models import Product, SaleItem
from retail_pos.exceptions import ValidationError, NotFoundError

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ('name', 'category', 'barcode', 'stock', 'purchase_price', 'sale_price')


def create_product(session, data: dict) -> Product:
    """Create a product from already-validated form data."""
    _check_amounts(data)
    product = Product(**{field: data[field] for field in PRODUCT_FIELDS if field in data})
    session.add(product)
    _commit(session, f"creating product '{data.get('name')}'")
    logger.info(f"Product created: id={product.id}, name={product.name}, stock={product.stock}")
    return product


def update_product(session, product_id: int, data: dict) -> Product:
    """
    Apply an inventory edit.

    Manual stock edits are absolute values and may not go negative. Sales
    already committed keep their captured prices.
    """
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f'Product {product_id} not found')

    _check_amounts(data)
    for field in PRODUCT_FIELDS:
        if field in data:
            setattr(product, field, data[field])

    _commit(session, f'updating product {product_id}')
    logger.info(f"Product updated: id={product_id}")
    return product


def delete_product(session, product_id: int) -> None:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f'Product {product_id} not found')

    has_history = session.query(SaleItem.id).filter(SaleItem.product_id == product_id).first()
    if has_history:
        raise ValidationError(f'"{product.name}" has sales history and cannot be deleted')

    session.delete(product)
    _commit(session, f'deleting product {product_id}')
    logger.info(f"Product deleted: id={product_id}")


def _check_amounts(data: dict) -> None:
    if data.get('stock') is not None and int(data['stock']) < 0:
        raise ValidationError('Stock cannot be negative')
    for field in ('purchase_price', 'sale_price'):
        if data.get(field) is not None and Decimal(str(data[field])) < 0:
            raise ValidationError(f'{field} cannot be negative')


def _commit(session, action: str) -> None:
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error {action}: {e.orig}")
        raise ValidationError(f'Could not save the product: {e.orig}')
