"""
Expense Tracking Routes
Record shop expenses and review them with filters and analytics
"""

from flask import Blueprint, request, jsonify, send_file, current_app
from shopdesk.records import expense_fields_from_json
from shopdesk.services.shop_state import get_shop_state
from shopdesk.utils.export import export_expenses_report, report_filename
from shopdesk.utils.filters import ALL_CATEGORIES, filter_expenses, expense_analytics

bp = Blueprint('expenses', __name__)


def _filtered_expenses():
    state = get_shop_state()
    return filter_expenses(
        state.expenses,
        search=request.args.get('search', ''),
        category=request.args.get('category', ALL_CATEGORIES),
        start_date=request.args.get('start_date'),
        end_date=request.args.get('end_date')
    )


@bp.route('/', methods=['GET'])
def index():
    """Expense list with filters and analytics"""
    expenses = _filtered_expenses()

    return jsonify({
        'success': True,
        'expenses': [expense.to_dict() for expense in expenses],
        'analytics': expense_analytics(expenses),
        'categories': current_app.config['EXPENSE_CATEGORIES']
    })


@bp.route('/', methods=['POST'])
def add_expense():
    """Add new expense"""
    fields = expense_fields_from_json(request.get_json(silent=True))
    expense = get_shop_state().add_expense(fields)
    return jsonify({'success': True, 'expense': expense.to_dict()}), 201


@bp.route('/export')
def export():
    """Download the filtered expenses"""
    export_format = request.args.get('format', 'csv')
    output, mimetype, extension = export_expenses_report(_filtered_expenses(), format_type=export_format)
    return send_file(
        output,
        mimetype=mimetype,
        as_attachment=True,
        download_name=report_filename('expenses', extension)
    )
