"""Customer service for back-office customer management."""
import logging
from decimal import Decimal

from retail_pos.models import Customer
from retail_pos.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ('name', 'phone', 'address', 'loan_balance')
REQUIRED_CUSTOMER_FIELDS = ('name', 'loan_balance')


def list_customers(session):
    """All customers ordered by name."""
    return session.query(Customer).order_by(Customer.name, Customer.id).all()


def get_customer(session, customer_id: int) -> Customer:
    customer = session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(f'Customer {customer_id} not found')
    return customer


def create_customer(session, data: dict) -> Customer:
    customer = Customer(
        name=data['name'],
        phone=data.get('phone'),
        address=data.get('address'),
        loan_balance=Decimal(str(data.get('loan_balance') or 0))
    )
    session.add(customer)
    session.commit()
    logger.info(f"Customer created: id={customer.id}, name={customer.name}")
    return customer


def update_customer(session, customer_id: int, data: dict) -> Customer:
    """
    Update contact fields.

    A manual loan_balance edit (e.g. recording a repayment) overwrites the
    balance; sales only ever add to it.
    """
    customer = get_customer(session, customer_id)
    # Fields that were sent; a null or blank value clears an optional field
    changes = {field: (None if data[field] == '' else data[field]) for field in CUSTOMER_FIELDS if field in data}
    for field in REQUIRED_CUSTOMER_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationError(f'{field} cannot be cleared')

    for field, value in changes.items():
        setattr(customer, field, value)
    session.commit()
    logger.info(f"Customer updated: id={customer_id}")
    return customer


def delete_customer(session, customer_id: int) -> None:
    """Delete a customer; past sales keep the dangling reference."""
    customer = get_customer(session, customer_id)
    session.delete(customer)
    session.commit()
    logger.info(f"Customer deleted: id={customer_id}")
