"""
Point of Sale (POS) Routes
Product lookup, cart, checkout and sales history
"""

from flask import Blueprint, request, jsonify, session, send_file, current_app
from shopdesk.exceptions import ValidationError
from shopdesk.services.cart import Cart
from shopdesk.services.shop_state import get_shop_state
from shopdesk.utils.export import export_sales_report, report_filename
from shopdesk.utils.filters import filter_sales, sales_totals
from shopdesk.utils.helpers import to_int

bp = Blueprint('pos', __name__)


@bp.route('/products')
def search_products():
    """Search products by name for the terminal"""
    state = get_shop_state()
    query = request.args.get('q', request.args.get('search', '')).strip().lower()
    products = [item for item in state.inventory if query in item.name.lower()]

    cart = Cart.from_session(session)
    results = []
    for item in products:
        data = item.to_dict()
        data['inCart'] = cart.quantity_of(item.id)
        results.append(data)

    return jsonify({'success': True, 'products': results})


@bp.route('/cart', methods=['GET'])
def get_cart():
    return jsonify({'success': True, 'cart': Cart.from_session(session).to_dict()})


@bp.route('/cart', methods=['POST'])
def add_to_cart():
    """Add units of a product to the cart"""
    data = request.get_json(silent=True) or {}
    item_id = data.get('itemId')
    if not item_id:
        raise ValidationError('itemId is required')

    product = get_shop_state().get_item(item_id)
    cart = Cart.from_session(session)
    line = cart.add(product, data.get('quantity', 1))
    cart.save(session)

    return jsonify({'success': True, 'line': line.to_dict(), 'cart': cart.to_dict()})


@bp.route('/cart/<int:index>', methods=['DELETE'])
def remove_from_cart(index):
    cart = Cart.from_session(session)
    cart.remove(index)
    cart.save(session)
    return jsonify({'success': True, 'cart': cart.to_dict()})


@bp.route('/cart', methods=['DELETE'])
def clear_cart():
    cart = Cart()
    cart.save(session)
    return jsonify({'success': True, 'cart': cart.to_dict()})


@bp.route('/checkout', methods=['POST'])
def checkout():
    """
    Complete the sale from the cart

    The cart is cleared once the sale has been attempted, whether or not
    every write reached the database.
    """
    cart = Cart.from_session(session)
    if cart.is_empty:
        return jsonify({'success': False, 'error': 'No items in cart'}), 400

    try:
        sale = get_shop_state().complete_sale(cart.lines)
    finally:
        Cart().save(session)

    current_app.logger.info(f"Checkout complete: sale {sale.id}")
    return jsonify({
        'success': True,
        'message': 'Sale recorded successfully!',
        'sale': sale.to_dict()
    }), 201


@bp.route('/sales')
def sales_history():
    """Sales history with item search and date range"""
    state = get_shop_state()
    sales = filter_sales(
        state.sales,
        search=request.args.get('search', ''),
        start_date=request.args.get('start_date'),
        end_date=request.args.get('end_date')
    )

    listed = sales
    limit = request.args.get('limit')
    if limit:
        limit = to_int(limit, 'limit')
        if limit < 1:
            raise ValidationError('limit must be at least 1')
        listed = sales[:limit]

    return jsonify({
        'success': True,
        'sales': [sale.to_dict() for sale in listed],
        'totals': sales_totals(sales)
    })


@bp.route('/sales/<sale_id>')
def sale_detail(sale_id):
    sale = get_shop_state().get_sale(sale_id)
    return jsonify({'success': True, 'sale': sale.to_dict()})


@bp.route('/sales/export')
def export_sales():
    """Export filtered sales history to CSV or Excel"""
    export_format = request.args.get('format', 'csv')
    state = get_shop_state()
    sales = filter_sales(
        state.sales,
        search=request.args.get('search', ''),
        start_date=request.args.get('start_date'),
        end_date=request.args.get('end_date')
    )

    output, mimetype, extension = export_sales_report(sales, format_type=export_format)
    return send_file(
        output,
        mimetype=mimetype,
        as_attachment=True,
        download_name=report_filename('sales', extension)
    )
