"""
Integration tests for employee provisioning and login resolution.
"""

import logging

import pytest
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from retail_pos.models import AppUser, Employee
from retail_pos.exceptions import NotFoundError, PersistenceError, UnauthorizedError, ValidationError
from retail_pos.services import auth_service, employee_service


def count(session, model):
    return session.query(func.count(model.id)).scalar()


class TestCreateEmployee:

    def test_creates_login_and_profile(self, session):
        employee = employee_service.create_employee(
            session, name='Sara Ali', email='Sara@Example.com', password='longpassword', role='admin'
        )

        assert employee.role == 'admin'
        assert employee.user.email == 'sara@example.com'
        assert employee.user.check_password('longpassword')

    def test_default_role_is_cashier(self, session):
        employee = employee_service.create_employee(session, 'Omar', 'omar@example.com', 'longpassword')
        assert employee.role == 'cashier'

    def test_invalid_role_rejected_before_any_write(self, session):
        with pytest.raises(ValidationError):
            employee_service.create_employee(session, 'Omar', 'omar@example.com', 'longpassword', role='owner')

        assert count(session, AppUser) == 0

    def test_duplicate_email_rejected(self, session, employee):
        with pytest.raises(ValidationError):
            employee_service.create_employee(session, 'Other', 'cashier@example.com', 'longpassword')

        assert count(session, Employee) == 1

    def test_failed_profile_insert_removes_login(self, session):
        """Name is required; the profile insert fails after the login was committed."""
        with pytest.raises(PersistenceError):
            employee_service.create_employee(session, None, 'ghost@example.com', 'longpassword')

        assert count(session, AppUser) == 0
        assert count(session, Employee) == 0

    def test_failed_compensation_is_logged(self, session, monkeypatch, caplog):
        def failing_delete(db_session, user_id):
            raise SQLAlchemyError('connection lost')

        monkeypatch.setattr(employee_service, 'delete_login', failing_delete)

        with caplog.at_level(logging.ERROR, logger='retail_pos.services.employee_service'):
            with pytest.raises(PersistenceError):
                employee_service.create_employee(session, None, 'ghost@example.com', 'longpassword')

        orphan = session.query(AppUser).filter_by(email='ghost@example.com').one()
        assert any(
            record.levelno == logging.ERROR and f'user_id={orphan.id}' in record.getMessage()
            for record in caplog.records
        )


class TestUpdateAndDeleteEmployee:

    def test_update_name_and_role(self, session, employee):
        updated = employee_service.update_employee(session, employee.id, name='Renamed', role='ADMIN')

        assert updated.name == 'Renamed'
        assert updated.is_admin()

    def test_update_missing(self, session):
        with pytest.raises(NotFoundError):
            employee_service.update_employee(session, 987654, name='x')

    def test_delete_keeps_login(self, session, employee):
        employee_id, user_id = employee.id, employee.user_id

        employee_service.delete_employee(session, employee_id)

        assert session.get(Employee, employee_id) is None
        assert session.get(AppUser, user_id) is not None
        with pytest.raises(ValidationError):
            auth_service.resolve_employee(session, user_id)


class TestAuthService:

    def test_authenticate(self, session, employee):
        user = auth_service.authenticate(session, ' CASHIER@example.com ', 'password123')
        assert user.id == employee.user_id

    def test_wrong_password(self, session, employee):
        with pytest.raises(UnauthorizedError) as exc_info:
            auth_service.authenticate(session, 'cashier@example.com', 'nope')
        assert exc_info.value.status_code == 401

    def test_inactive_login(self, session, employee):
        employee.user.active = False
        session.commit()

        with pytest.raises(UnauthorizedError):
            auth_service.authenticate(session, 'cashier@example.com', 'password123')

    def test_resolve_employee(self, session, employee):
        assert auth_service.resolve_employee(session, employee.user_id).id == employee.id

    def test_delete_missing_login_is_ignored(self, session):
        auth_service.delete_login(session, 987654)
