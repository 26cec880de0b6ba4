"""
Authentication service.

Login principals (AppUser) and their link to an employee profile.
"""
import logging

from sqlalchemy.exc import IntegrityError

from retail_pos.models import AppUser, Employee
from retail_pos.exceptions import ValidationError, UnauthorizedError

logger = logging.getLogger(__name__)


def normalize_email(email):
    return (email or '').strip().lower()


def create_login(session, email, password):
    """
    Provision a login principal and commit it.

    Raises:
        ValidationError: If the email is missing or already registered
    """
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError('Email and password are required')

    if session.query(AppUser).filter_by(email=email).first():
        raise ValidationError(f'Email {email} is already registered')

    user = AppUser(email=email, active=True)
    user.set_password(password)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Same email registered concurrently
        session.rollback()
        raise ValidationError(f'Email {email} is already registered')

    logger.info(f"Login created: user_id={user.id}, email={email}")
    return user


def delete_login(session, user_id):
    """Delete a login principal. Missing principals are ignored."""
    user = session.get(AppUser, user_id)
    if user is None:
        return
    session.delete(user)
    session.commit()
    logger.info(f"Login deleted: user_id={user_id}")


def authenticate(session, email, password):
    """
    Check credentials.

    Returns:
        AppUser

    Raises:
        UnauthorizedError (401): Unknown email, wrong password or inactive login
    """
    email = normalize_email(email)
    user = session.query(AppUser).filter_by(email=email).first()
    if user is None or not user.active or not user.check_password(password or ''):
        logger.warning(f"Failed login attempt for {email}")
        raise UnauthorizedError('Invalid email or password', status_code=401)
    return user


def resolve_employee(session, user_id):
    """
    Get the employee profile behind a login principal.

    Raises:
        ValidationError: No employee record for this principal
    """
    employee = session.query(Employee).filter_by(user_id=user_id).first()
    if employee is None:
        raise ValidationError('No employee record is linked to this login')
    return employee
