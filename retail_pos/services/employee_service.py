"""
Employee provisioning.

Creating an employee touches two records that are committed separately: the
login principal and the employee profile. create_employee runs them as a saga;
if the profile cannot be written, the principal is deleted again.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from retail_pos.models import Employee, EmployeeRole
from retail_pos.exceptions import ValidationError, NotFoundError, PersistenceError
from retail_pos.services.auth_service import create_login, delete_login

logger = logging.getLogger(__name__)


def normalize_role(role):
    try:
        return EmployeeRole(str(role or EmployeeRole.CASHIER.value).strip().lower())
    except ValueError:
        raise ValidationError(f'Invalid role: {role!r}')


def list_employees(session):
    return session.query(Employee).order_by(Employee.name, Employee.id).all()


def create_employee(session, name, email, password, role=EmployeeRole.CASHIER.value):
    """
    Provision a login principal and its employee profile.

    Steps:
    1. Create and commit the login principal.
    2. Insert and commit the employee profile.
    3. If step 2 fails, delete the principal (compensation) and raise.

    Raises:
        ValidationError: Bad role, or the email is already registered (step 1)
        PersistenceError: The profile could not be written; no principal is left behind
    """
    role = normalize_role(role)

    # 1. Login principal
    user = create_login(session, email, password)
    user_id = user.id

    # 2. Employee profile
    try:
        employee = _insert_profile(session, user_id, name, role)
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"Employee profile insert failed for user_id={user_id}: {e}")
        _compensate(session, user_id)
        raise PersistenceError(f'Could not create the employee: {getattr(e, "orig", e)}') from e

    logger.info(f"Employee created: id={employee.id}, user_id={user_id}, role={role.value}")
    return employee


def update_employee(session, employee_id, name=None, role=None):
    employee = session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(f'Employee {employee_id} not found')

    if name:
        employee.name = name
    if role:
        employee.role = normalize_role(role).value

    session.commit()
    logger.info(f"Employee updated: id={employee_id}")
    return employee


def delete_employee(session, employee_id):
    """
    Remove an employee profile.

    The login principal stays, but without a profile it can no longer ring up
    sales. Past sales keep the employee id.
    """
    employee = session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(f'Employee {employee_id} not found')

    session.delete(employee)
    session.commit()
    logger.info(f"Employee deleted: id={employee_id}")


def _insert_profile(session, user_id, name, role):
    employee = Employee(name=name, role=role.value, user_id=user_id)
    session.add(employee)
    session.commit()
    return employee


def _compensate(session, user_id):
    try:
        delete_login(session, user_id)
    except SQLAlchemyError:
        session.rollback()
        logger.error(
            f"Compensation failed: login principal user_id={user_id} is orphaned and must be removed manually",
            exc_info=True
        )
