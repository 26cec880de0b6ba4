"""Catalog blueprint - product listing for the till and inventory edits for admins."""
from flask import Blueprint, request, jsonify, current_app
from retail_pos.database import get_session
from retail_pos.forms.pos_forms import ProductForm, ProductUpdateForm, submitted_data, validate_form
from retail_pos.middleware import require_login, require_role
from retail_pos.services import catalog_service, inventory_service
from retail_pos.services.inventory_service import PRODUCT_FIELDS

catalog_bp = Blueprint('catalog', __name__, url_prefix='/products')


@catalog_bp.route('/', methods=['GET'])
@require_login
def list_products():
    """Paginated product list; `q` searches name or barcode."""
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', type=int)
    search = request.args.get('q', '')

    result = catalog_service.list_products(get_session(), search=search, page=page, per_page=per_page)
    return jsonify(result.to_dict())


@catalog_bp.route('/<int:product_id>', methods=['GET'])
@require_login
def get_product(product_id):
    product = catalog_service.get_product(get_session(), product_id)
    return jsonify(product.to_dict())


@catalog_bp.route('/', methods=['POST'])
@require_login
@require_role('admin')
def create_product():
    form = validate_form(ProductForm)
    data = {field: form[field].data for field in PRODUCT_FIELDS}
    data['stock'] = data['stock'] or 0
    if data['purchase_price'] is None:
        data.pop('purchase_price')

    product = inventory_service.create_product(get_session(), data)
    current_app.logger.info(f"Product {product.id} created via API")
    return jsonify(product.to_dict()), 201


@catalog_bp.route('/<int:product_id>', methods=['PUT'])
@require_login
@require_role('admin')
def update_product(product_id):
    form = validate_form(ProductUpdateForm)
    data = submitted_data(form, PRODUCT_FIELDS)
    if 'name' in data and not data['name']:
        data.pop('name')

    product = inventory_service.update_product(get_session(), product_id, data)
    return jsonify(product.to_dict())


@catalog_bp.route('/<int:product_id>', methods=['DELETE'])
@require_login
@require_role('admin')
def delete_product(product_id):
    inventory_service.delete_product(get_session(), product_id)
    return jsonify({'status': 'success'})
