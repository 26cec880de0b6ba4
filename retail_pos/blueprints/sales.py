"""Sales blueprint for the till: cart management and sale confirmation."""
from flask import Blueprint, request, session, jsonify, current_app, g
from typing import Any, Dict, Optional
from retail_pos.database import get_session
from retail_pos.models import Customer
from retail_pos.services.cart import Cart
from retail_pos.services import catalog_service
from retail_pos.services.sales_service import SaleContext, complete_sale, get_sale, list_sales
from retail_pos.blueprints.metrics import record_sale_completed, record_sale_failure
from retail_pos.middleware import require_login, require_employee
from retail_pos.exceptions import PosError, ValidationError, NotFoundError

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')

CART_KEY = 'cart'
CUSTOMER_KEY = 'cart_customer_id'


def get_cart() -> Cart:
    """Get cart from session."""
    return Cart.from_dict(session.get(CART_KEY))


def save_cart(cart: Cart) -> None:
    """Save cart to session."""
    session[CART_KEY] = cart.to_dict()
    session.modified = True


def clear_cart() -> None:
    session.pop(CART_KEY, None)
    session.pop(CUSTOMER_KEY, None)


def _payload() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _int_field(payload: Dict[str, Any], name: str) -> int:
    value = payload.get(name)
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')


def _selected_customer(db_session) -> Optional[Customer]:
    customer_id = session.get(CUSTOMER_KEY)
    if customer_id is None:
        return None
    return db_session.get(Customer, customer_id)


def _cart_response(cart: Cart):
    customer = _selected_customer(get_session())
    return jsonify({
        'cart': cart.to_dict(),
        'customer': customer.to_dict() if customer else None,
    })


@sales_bp.route('/cart', methods=['GET'])
@require_login
def view_cart():
    return _cart_response(get_cart())


@sales_bp.route('/cart/add', methods=['POST'])
@require_login
def add_to_cart():
    """Add one unit, bounded by the product's current stock."""
    product_id = _int_field(_payload(), 'product_id')
    product = catalog_service.get_product(get_session(), product_id)

    cart = get_cart()
    cart.add(product)
    save_cart(cart)

    return _cart_response(cart)


@sales_bp.route('/cart/update', methods=['POST'])
@require_login
def update_cart_item():
    """Set a line's quantity; zero or less removes it."""
    payload = _payload()
    product_id = _int_field(payload, 'product_id')
    quantity = _int_field(payload, 'quantity')

    cart = get_cart()
    if quantity > 0 and product_id not in cart:
        raise NotFoundError(f'Product {product_id} is not in the cart')
    cart.set_quantity(product_id, quantity)
    save_cart(cart)

    return _cart_response(cart)


@sales_bp.route('/cart/remove', methods=['POST'])
@require_login
def remove_from_cart():
    product_id = _int_field(_payload(), 'product_id')

    cart = get_cart()
    cart.remove(product_id)
    save_cart(cart)

    return _cart_response(cart)


@sales_bp.route('/cart/customer', methods=['POST'])
@require_login
def select_customer():
    """Attach a customer to the cart, or release it with customer_id null."""
    payload = _payload()
    if payload.get('customer_id') is None:
        session.pop(CUSTOMER_KEY, None)
    else:
        customer_id = _int_field(payload, 'customer_id')
        if get_session().get(Customer, customer_id) is None:
            raise NotFoundError(f'Customer {customer_id} not found')
        session[CUSTOMER_KEY] = customer_id

    return _cart_response(get_cart())


@sales_bp.route('/confirm', methods=['POST'])
@require_login
@require_employee
def confirm():
    """
    Commit the cart as a sale.

    On success the cart and customer selection are cleared. On failure both
    stay in the session so the cashier can adjust and retry.
    """
    payload = _payload()
    cart = get_cart()
    context = SaleContext(employee_id=g.employee.id, user_id=g.user.id)

    try:
        result = complete_sale(
            get_session(),
            context,
            customer_id=session.get(CUSTOMER_KEY),
            payment_method=payload.get('payment_method'),
            line_items=cart.line_items(),
            idempotency_key=payload.get('idempotency_key')
        )
    except PosError as e:
        record_sale_failure(e.kind)
        raise

    if not result.replayed:
        record_sale_completed(result.payment_method)
    clear_cart()

    current_app.logger.info(f"Sale {result.sale_id} confirmed by employee {context.employee_id}")
    return jsonify({'status': 'success', **result.to_dict()}), (200 if result.replayed else 201)


@sales_bp.route('/', methods=['GET'])
@require_login
def sales_list():
    limit = min(request.args.get('limit', 50, type=int), 500)
    sales = list_sales(get_session(), limit=limit)
    return jsonify({'sales': [sale.to_dict() for sale in sales]})


@sales_bp.route('/<int:sale_id>', methods=['GET'])
@require_login
def sale_detail(sale_id):
    sale = get_sale(get_session(), sale_id)
    return jsonify(sale.to_dict(include_items=True))
