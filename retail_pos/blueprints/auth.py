"""
Authentication blueprint.
Handles login, logout and the current-user view for the till.
"""

from flask import Blueprint, jsonify, session, g, current_app
from flask_wtf.csrf import generate_csrf
from retail_pos.database import get_session
from retail_pos.forms.pos_forms import LoginForm, validate_form
from retail_pos.middleware import require_login
from retail_pos.services.auth_service import authenticate

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _identity(user, employee):
    return {
        'user': {'id': user.id, 'email': user.email},
        'employee': employee.to_dict() if employee else None,
    }


@auth_bp.route('/login', methods=['POST'])
def login():
    """Check credentials and start a session."""
    form = validate_form(LoginForm)
    db_session = get_session()

    user = authenticate(db_session, form.email.data, form.password.data)

    session.clear()
    session['user_id'] = user.id
    session.permanent = True

    current_app.logger.info(f"User logged in: user_id={user.id}")
    return jsonify({'status': 'success', **_identity(user, user.employee)})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    user_id = session.get('user_id')
    session.clear()
    if user_id:
        current_app.logger.info(f"User logged out: user_id={user_id}")
    return jsonify({'status': 'success'})


@auth_bp.route('/me', methods=['GET'])
@require_login
def me():
    return jsonify(_identity(g.user, g.employee))


@auth_bp.route('/csrf', methods=['GET'])
def csrf_token():
    """Token to send back in the X-CSRFToken header."""
    return jsonify({'csrf_token': generate_csrf()})
