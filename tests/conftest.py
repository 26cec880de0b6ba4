import os
import tempfile
from decimal import Decimal

import pytest

# Every test run gets its own SQLite file; must be set before config is imported
_db_dir = tempfile.mkdtemp(prefix='retail_pos_tests_')
os.environ.setdefault('TEST_DATABASE_URL', f"sqlite:///{os.path.join(_db_dir, 'test.sqlite3')}")

from retail_pos import create_app, database
from retail_pos.models import AppUser, Customer, Employee, EmployeeRole, Product
from retail_pos.services.sales_service import SaleContext

PASSWORD = 'password123'


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestingConfig')
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Fresh schema and database session for each test."""
    database.drop_all()
    database.create_all()
    db_session = database.get_session()
    yield db_session
    db_session.rollback()
    db_session.remove()


def _make_employee(session, name, email, role):
    user = AppUser(email=email, active=True)
    user.set_password(PASSWORD)
    session.add(user)
    session.flush()

    employee = Employee(name=name, role=role, user_id=user.id)
    session.add(employee)
    session.commit()
    return employee


@pytest.fixture(scope='function')
def employee(session):
    """Cashier with a login."""
    return _make_employee(session, 'Cashier One', 'cashier@example.com', EmployeeRole.CASHIER.value)


@pytest.fixture(scope='function')
def admin_employee(session):
    return _make_employee(session, 'Admin One', 'admin@example.com', EmployeeRole.ADMIN.value)


@pytest.fixture(scope='function')
def context(employee):
    """Sale context for the cashier."""
    return SaleContext(employee_id=employee.id, user_id=employee.user_id)


@pytest.fixture(scope='function')
def product(session):
    """Product with stock 10 selling at 500."""
    product = Product(
        name='Rice 5kg',
        category='Grocery',
        barcode='7790001',
        stock=10,
        purchase_price=Decimal('350.00'),
        sale_price=Decimal('500.00')
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def second_product(session):
    product = Product(
        name='Cooking Oil 1L',
        category='Grocery',
        stock=4,
        purchase_price=Decimal('90.00'),
        sale_price=Decimal('125.50')
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def customer(session):
    """Customer who already owes 100."""
    customer = Customer(name='Ahmed Karim', phone='07701234567', address='Main St 4',
                        loan_balance=Decimal('100.00'))
    session.add(customer)
    session.commit()
    return customer


def _login(client, user_id):
    with client.session_transaction() as http_session:
        http_session['user_id'] = user_id
    return client


@pytest.fixture(scope='function')
def logged_in_client(client, employee):
    """Test client logged in as the cashier."""
    return _login(client, employee.user_id)


@pytest.fixture(scope='function')
def admin_client(app, admin_employee):
    """Separate test client logged in as the admin."""
    return _login(app.test_client(), admin_employee.user_id)
