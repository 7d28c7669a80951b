"""
Inventory Management Routes
Stock items: list, add, edit, quick stock adjustment, delete and export
"""

from flask import Blueprint, request, jsonify, send_file, current_app
from shopdesk.records import item_fields_from_json
from shopdesk.services.shop_state import get_shop_state
from shopdesk.utils.export import export_inventory_report, report_filename
from shopdesk.utils.filters import search_inventory, inventory_categories

bp = Blueprint('inventory', __name__)


@bp.route('/', methods=['GET'])
def index():
    """Inventory list with optional search"""
    state = get_shop_state()
    search = request.args.get('search', '')
    items = search_inventory(state.inventory, search)

    return jsonify({
        'success': True,
        'items': [item.to_dict() for item in items],
        'count': len(items),
        'categories': inventory_categories(state.inventory)
    })


@bp.route('/', methods=['POST'])
def add_item():
    """Add new inventory item"""
    fields = item_fields_from_json(request.get_json(silent=True))
    item = get_shop_state().add_item(fields)
    return jsonify({'success': True, 'item': item.to_dict()}), 201


@bp.route('/<item_id>', methods=['PUT', 'PATCH'])
def update_item(item_id):
    """Edit fields of an inventory item"""
    state = get_shop_state()
    state.get_item(item_id)
    fields = item_fields_from_json(request.get_json(silent=True), partial=True)
    item = state.update_item(item_id, fields)
    return jsonify({'success': True, 'item': item.to_dict()})


@bp.route('/<item_id>/adjust', methods=['POST'])
def adjust_stock(item_id):
    """Set the stock level of an item to an absolute quantity"""
    data = request.get_json(silent=True) or {}
    state = get_shop_state()
    state.get_item(item_id)
    item = state.adjust_stock(item_id, data.get('quantity'))
    current_app.logger.info(f"Stock adjusted: {item.name} -> {item.quantity}")
    return jsonify({'success': True, 'item': item.to_dict()})


@bp.route('/<item_id>', methods=['DELETE'])
def delete_item(item_id):
    """Delete an inventory item"""
    item = get_shop_state().delete_item(item_id)
    return jsonify({'success': True, 'message': f'{item.name} deleted', 'id': item.id})


@bp.route('/export')
def export():
    """Export inventory to CSV or Excel"""
    export_format = request.args.get('format', 'csv')
    state = get_shop_state()
    items = search_inventory(state.inventory, request.args.get('search', ''))

    output, mimetype, extension = export_inventory_report(items, format_type=export_format)
    return send_file(
        output,
        mimetype=mimetype,
        as_attachment=True,
        download_name=report_filename('inventory', extension)
    )
