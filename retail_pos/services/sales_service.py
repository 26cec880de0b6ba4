"""
Sales service with transactional logic.
Turns a finalized cart into a sale: stock, ledger rows and customer loan
balance change together in one database transaction, or not at all.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from retail_pos.database import begin_write_transaction
from retail_pos.models import Customer, Employee, PaymentMethod, Product, Sale, SaleItem
from retail_pos.exceptions import (
    PosError, ValidationError, NotFoundError, StockConflictError, PersistenceError
)

logger = logging.getLogger(__name__)

MONEY = Decimal('0.01')
IDEMPOTENCY_KEY_MAX_LENGTH = 64


@dataclass(frozen=True)
class SaleContext:
    """Who is ringing up the sale, resolved from the login session by the caller."""
    employee_id: Optional[int]
    user_id: Optional[int] = None


@dataclass(frozen=True)
class LineItem:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class SaleResult:
    sale_id: int
    total_amount: Decimal
    payment_method: str
    replayed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sale_id': self.sale_id,
            'total_amount': str(self.total_amount),
            'payment_method': self.payment_method,
            'replayed': self.replayed,
        }


def complete_sale(
    session,
    context: SaleContext,
    customer_id: Optional[int],
    payment_method,
    line_items: Iterable,
    idempotency_key: Optional[str] = None
) -> SaleResult:
    """
    Commit a sale atomically.

    Steps, all inside one transaction:
    1. Lock and re-read every product; fail if any line exceeds current stock.
    2. Price every line at the product's current sale price.
    3. Decrement stock (compare-and-decrement, never below zero).
    4. Insert the sale header and one sale item per line.
    5. For loan sales, add the total to the customer's loan balance.

    Args:
        session: SQLAlchemy session with no uncommitted writes
        context: SaleContext for the logged-in employee
        customer_id: Customer id or None (required for loan sales)
        payment_method: 'cash' or 'loan'
        line_items: LineItem objects, (product_id, quantity) pairs or dicts
        idempotency_key: Optional client token; a repeated key returns the
            original sale instead of writing a new one; reusing it for a
            different employee, customer, method or set of lines is a
            ValidationError

    Returns:
        SaleResult

    Raises:
        ValidationError, NotFoundError, StockConflictError, PersistenceError
    """
    method = normalize_payment_method(payment_method)
    lines = _normalize_line_items(line_items)

    if method is PaymentMethod.LOAN and customer_id is None:
        raise ValidationError('A loan sale requires a customer')

    if context is None or context.employee_id is None:
        raise ValidationError('No employee record is linked to this login; sign in again or contact an administrator')

    key = _normalize_idempotency_key(idempotency_key)

    try:
        begin_write_transaction(session)

        # 1. Idempotency check
        if key:
            existing_sale = _find_by_idempotency_key(session, key)
            if existing_sale is not None:
                _check_same_request(existing_sale, context, customer_id, method, lines)
                replayed = _replayed_result(existing_sale)
                session.rollback()
                logger.info(f"Sale replayed for idempotency key {key}: sale_id={replayed.sale_id}")
                return replayed

        # 2. Resolve references
        employee = session.query(Employee).filter(Employee.id == context.employee_id).first()
        if employee is None:
            raise NotFoundError(f'Employee {context.employee_id} no longer exists')

        customer = None
        if customer_id is not None:
            customer = _lock_customer(session, customer_id)

        # 3. Lock products and validate against current stock
        products = _lock_products(session, [line.product_id for line in lines])

        for line in lines:
            product = products[line.product_id]
            if product.stock < line.quantity:
                raise StockConflictError(product.name, line.quantity, product.stock, product_id=product.id)

        # 4. Price at commit time
        sale_total = sum(
            (Decimal(str(products[line.product_id].sale_price)) * line.quantity for line in lines),
            Decimal('0')
        ).quantize(MONEY)

        # 5. Decrement stock
        for line in lines:
            _decrement_stock(session, products[line.product_id], line.quantity)

        # 6. Create Sale and SaleItems
        sale = Sale(
            created_at=datetime.now(),
            employee_id=employee.id,
            customer_id=customer.id if customer is not None else None,
            total_amount=sale_total,
            payment_method=method.value,
            idempotency_key=key
        )
        session.add(sale)
        session.flush()
        sale_id = sale.id

        for line in lines:
            session.add(SaleItem(
                sale_id=sale_id,
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_sale=Decimal(str(products[line.product_id].sale_price)).quantize(MONEY)
            ))

        # 7. Credit sale: the customer now owes the total
        if method is PaymentMethod.LOAN:
            _charge_loan(session, customer, sale_total)

        session.commit()

    except StockConflictError as e:
        session.rollback()
        logger.warning(f"Sale rejected, stock conflict: {e.message}")
        raise
    except PosError as e:
        session.rollback()
        logger.warning(f"Sale rejected ({e.kind}): {e.message}")
        raise
    except IntegrityError as e:
        session.rollback()
        if key:
            existing_sale = _find_by_idempotency_key(session, key)
            if existing_sale is not None:
                _check_same_request(existing_sale, context, customer_id, method, lines)
                logger.info(f"Concurrent duplicate resolved for idempotency key {key}: sale_id={existing_sale.id}")
                return _replayed_result(existing_sale)
        logger.error(f"Sale commit failed on constraint: {e}", exc_info=True)
        raise PersistenceError(f'Could not save the sale: {getattr(e, "orig", e)}') from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Sale commit failed: {e}", exc_info=True)
        raise PersistenceError(f'Could not save the sale: {getattr(e, "orig", e)}') from e

    logger.info(
        f"Sale {sale_id} completed: total={sale_total}, method={method.value}, "
        f"employee_id={context.employee_id}, customer_id={customer_id}, lines={len(lines)}"
    )
    return SaleResult(sale_id=sale_id, total_amount=sale_total, payment_method=method.value)


def normalize_payment_method(value) -> PaymentMethod:
    """Map user input onto PaymentMethod."""
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(str(value or '').strip().lower())
    except ValueError:
        raise ValidationError(f'Invalid payment method: {value!r}')


def get_sale(session, sale_id: int) -> Sale:
    """Get a committed sale with its items."""
    sale = session.query(Sale).options(
        selectinload(Sale.items).selectinload(SaleItem.product)
    ).filter(Sale.id == sale_id).first()
    if sale is None:
        raise NotFoundError(f'Sale {sale_id} not found')
    return sale


def list_sales(session, limit: int = 50) -> List[Sale]:
    """Newest sales first."""
    return session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _normalize_line_items(line_items: Iterable) -> List[LineItem]:
    """Validate quantities and merge repeated products, keeping first-seen order."""
    merged: Dict[int, int] = {}
    for raw in line_items or []:
        if isinstance(raw, LineItem):
            product_id, quantity = raw.product_id, raw.quantity
        elif isinstance(raw, dict):
            product_id, quantity = raw.get('product_id'), raw.get('quantity')
        else:
            try:
                product_id, quantity = raw
            except (TypeError, ValueError):
                raise ValidationError(f'Invalid line item: {raw!r}')

        product_id = _as_positive_int(product_id, 'product_id')
        quantity = _as_positive_int(quantity, 'quantity')
        merged[product_id] = merged.get(product_id, 0) + quantity

    if not merged:
        raise ValidationError('The cart is empty')

    return [LineItem(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def _as_positive_int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError(f'{field} must be a positive integer')
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f'{field} must be a positive integer')
    if number <= 0:
        raise ValidationError(f'{field} must be a positive integer')
    return number


def _normalize_idempotency_key(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    key = str(value).strip()
    if not key:
        return None
    if len(key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        raise ValidationError(f'idempotency_key must be at most {IDEMPOTENCY_KEY_MAX_LENGTH} characters')
    return key


def _find_by_idempotency_key(session, key: str) -> Optional[Sale]:
    return session.query(Sale).filter(Sale.idempotency_key == key).first()


def _check_same_request(sale: Sale, context: SaleContext, customer_id: Optional[int],
                        method: PaymentMethod, lines: List[LineItem]) -> None:
    """A reused key must describe the sale it was first used for."""
    stored_lines = {item.product_id: item.quantity for item in sale.items}
    requested_lines = {line.product_id: line.quantity for line in lines}

    if (sale.employee_id != context.employee_id
            or sale.customer_id != customer_id
            or sale.payment_method != method.value
            or stored_lines != requested_lines):
        logger.warning(f"Idempotency key {sale.idempotency_key} reused for a different sale (sale_id={sale.id})")
        raise ValidationError(
            'idempotency_key was already used for a different sale',
            payload={'sale_id': sale.id}
        )


def _replayed_result(sale: Sale) -> SaleResult:
    return SaleResult(
        sale_id=sale.id,
        total_amount=Decimal(str(sale.total_amount)).quantize(MONEY),
        payment_method=sale.payment_method,
        replayed=True
    )


def _lock_customer(session, customer_id: int) -> Customer:
    """Lock the customer row FOR UPDATE and return it freshly loaded."""
    customer = session.query(Customer).filter(
        Customer.id == customer_id
    ).populate_existing().with_for_update().first()
    if customer is None:
        raise NotFoundError(f'Customer {customer_id} no longer exists')
    return customer


def _lock_products(session, product_ids: List[int]) -> Dict[int, Product]:
    """
    Lock product rows FOR UPDATE in id order and return current values.

    SQLite ignores FOR UPDATE; there the BEGIN IMMEDIATE write lock already
    serializes the whole transaction.
    """
    products = session.query(Product).filter(
        Product.id.in_(product_ids)
    ).order_by(Product.id).populate_existing().with_for_update().all()

    by_id = {p.id: p for p in products}
    missing = [pid for pid in product_ids if pid not in by_id]
    if missing:
        raise NotFoundError(
            f'Product(s) no longer exist: {", ".join(str(pid) for pid in missing)}',
            payload={'product_ids': missing}
        )
    return by_id


def _decrement_stock(session, product: Product, quantity: int) -> None:
    """Compare-and-decrement; a miss means another sale took the stock first."""
    result = session.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise StockConflictError(product.name, quantity, product.stock, product_id=product.id)


def _charge_loan(session, customer: Customer, amount: Decimal) -> None:
    result = session.execute(
        update(Customer)
        .where(Customer.id == customer.id)
        .values(loan_balance=Customer.loan_balance + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError(f'Customer {customer.id} no longer exists')
