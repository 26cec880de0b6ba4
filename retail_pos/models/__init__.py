"""Models package - exports all SQLAlchemy models."""
# Identity
from retail_pos.models.app_user import AppUser
from retail_pos.models.employee import Employee, EmployeeRole

# Catalog and ledger
from retail_pos.models.product import Product
from retail_pos.models.customer import Customer
from retail_pos.models.sale import Sale, PaymentMethod
from retail_pos.models.sale_item import SaleItem

__all__ = [
    'AppUser', 'Employee', 'EmployeeRole',
    'Product', 'Customer',
    'Sale', 'PaymentMethod', 'SaleItem',
]
