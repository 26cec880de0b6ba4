from flask import Blueprint, request, jsonify
from retail_pos.database import get_session
from retail_pos.forms.pos_forms import CustomerForm, CustomerUpdateForm, submitted_data, validate_form
from retail_pos.middleware import require_login, require_role
from retail_pos.services import customer_service
from retail_pos.services.catalog_service import search_customers
from retail_pos.services.customer_service import CUSTOMER_FIELDS

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


@customers_bp.route('/', methods=['GET'])
@require_login
def list_customers():
    """
    Customers ordered by name.

    With `q` this is the till's customer picker: name or phone matches,
    at most `limit` of them (default 10).
    """
    query = request.args.get('q', '').strip()
    if query:
        limit = request.args.get('limit', 10, type=int)
        customers = search_customers(get_session(), query, limit=limit)
    else:
        customers = customer_service.list_customers(get_session())
    return jsonify({'customers': [c.to_dict() for c in customers]})


@customers_bp.route('/', methods=['POST'])
@require_login
@require_role('admin')
def create_customer():
    form = validate_form(CustomerForm)
    data = {field: form[field].data for field in CUSTOMER_FIELDS}
    customer = customer_service.create_customer(get_session(), data)
    return jsonify(customer.to_dict()), 201


@customers_bp.route('/<int:customer_id>', methods=['PUT'])
@require_login
@require_role('admin')
def update_customer(customer_id):
    form = validate_form(CustomerUpdateForm)
    data = submitted_data(form, CUSTOMER_FIELDS)
    customer = customer_service.update_customer(get_session(), customer_id, data)
    return jsonify(customer.to_dict())


@customers_bp.route('/<int:customer_id>', methods=['DELETE'])
@require_login
@require_role('admin')
def delete_customer(customer_id):
    customer_service.delete_customer(get_session(), customer_id)
    return jsonify({'status': 'success'})
