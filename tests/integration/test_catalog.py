"""
Integration tests for catalog search, the customer picker and customer edits.
"""

from decimal import Decimal

import pytest

from retail_pos.models import Customer, Product
from retail_pos.exceptions import ValidationError
from retail_pos.services import catalog_service, customer_service


class TestProductSearch:

    def test_wildcards_match_literally(self, session, product, second_product):
        assert catalog_service.list_products(session, '%').total == 0
        assert catalog_service.list_products(session, '_').total == 0

    def test_percent_in_name(self, session, product):
        session.add(Product(name='Discount 50% Soap', stock=3, sale_price=Decimal('2.00')))
        session.commit()

        page = catalog_service.list_products(session, '50%')

        assert [p.name for p in page.items] == ['Discount 50% Soap']


class TestCustomerPicker:

    def test_matches_name_and_phone(self, session, customer):
        customer_id = customer.id

        assert [c.id for c in catalog_service.search_customers(session, 'karim')] == [customer_id]
        assert [c.id for c in catalog_service.search_customers(session, '0770')] == [customer_id]
        assert catalog_service.search_customers(session, 'nobody') == []

    def test_results_are_limited(self, session):
        session.add_all([Customer(name=f'Walk-in {n:02d}') for n in range(15)])
        session.commit()

        assert len(catalog_service.search_customers(session, 'walk-in')) == 10
        assert len(catalog_service.search_customers(session, 'walk-in', limit=3)) == 3

    def test_wildcards_match_literally(self, session, customer):
        assert catalog_service.search_customers(session, '%') == []


class TestCustomerUpdate:

    def test_clear_optional_fields(self, session, customer):
        updated = customer_service.update_customer(session, customer.id, {'phone': None, 'address': ''})

        assert updated.phone is None
        assert updated.address is None
        assert updated.name == 'Ahmed Karim'

    def test_omitted_fields_are_kept(self, session, customer):
        updated = customer_service.update_customer(session, customer.id, {'name': 'Ahmed K.'})

        assert updated.phone == '07701234567'
        assert updated.loan_balance == Decimal('100.00')

    @pytest.mark.parametrize('field', ['name', 'loan_balance'])
    def test_required_fields_cannot_be_cleared(self, session, customer, field):
        customer_id = customer.id

        with pytest.raises(ValidationError):
            customer_service.update_customer(session, customer_id, {'phone': None, field: None})

        session.expire_all()
        assert session.get(Customer, customer_id).phone == '07701234567'
