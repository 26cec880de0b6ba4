"""Middleware for authentication and employee context."""
from functools import wraps
from flask import session, g, current_app
from retail_pos.database import get_session
from retail_pos.models import AppUser, Employee
from retail_pos.exceptions import UnauthorizedError, ValidationError


def load_user_and_employee():
    """
    Load current user and employee into g (Flask's per-request global).

    Called before each request. Sets g.user and g.employee when the session
    holds a valid user_id; either may stay None.
    """
    g.user = None
    g.employee = None

    user_id = session.get('user_id')
    if not user_id:
        return

    db_session = get_session()
    if not db_session:
        return

    user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
    if user is None:
        # Principal deleted or deactivated since login
        session.pop('user_id', None)
        current_app.logger.info(f"Dropped stale session for user_id={user_id}")
        return

    g.user = user
    g.employee = db_session.query(Employee).filter_by(user_id=user.id).first()


def require_login(f):
    """Decorator: reject anonymous requests with 401."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise UnauthorizedError('Login required', status_code=401)
        return f(*args, **kwargs)
    return decorated_function


def require_employee(f):
    """
    Decorator: require an employee profile behind the login.

    Must be used AFTER require_login. A login without a profile is a blocking
    precondition (400), not a crash.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('employee') is None:
            raise ValidationError('No employee record is linked to this login')
        return f(*args, **kwargs)
    return decorated_function


def require_role(role='admin'):
    """
    Decorator: require the employee to hold a role.

    Must be used AFTER require_login. Admins pass every role check.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            employee = g.get('employee')
            if employee is None:
                raise UnauthorizedError('Employee access required')
            if not employee.is_admin() and employee.role != role:
                raise UnauthorizedError(f'The {role} role is required for this action')
            return f(*args, **kwargs)
        return decorated_function
    return decorator
