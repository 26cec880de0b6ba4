from flask import Blueprint, jsonify
from retail_pos.database import get_session
from retail_pos.middleware import require_login, require_role
from retail_pos.services.dashboard_service import get_dashboard_data

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


def _jsonable(value):
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if value is not None and not isinstance(value, (str, int, float, bool)):
        return str(value)
    return value


@dashboard_bp.route('/')
@require_login
@require_role('admin')
def index():
    """Revenue, counts, the trailing revenue series and the latest sales."""
    data = get_dashboard_data(get_session())
    return jsonify(_jsonable(data))
