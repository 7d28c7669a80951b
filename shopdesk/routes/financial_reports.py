"""
Financial Reports Routes
Revenue, gross profit, expenses and net income over a time range
"""

from flask import Blueprint, request, jsonify
from shopdesk.services.shop_state import get_shop_state
from shopdesk.utils.financials import DEFAULT_TIME_RANGE, TIME_RANGES, financial_report

bp = Blueprint('financial_reports', __name__)


@bp.route('/')
def index():
    """
    Financial report for a range

    Query params:
        range: 7d, 30d, 90d, 1y or all (default 30d)
    """
    time_range = request.args.get('range', DEFAULT_TIME_RANGE)
    state = get_shop_state()
    report = financial_report(state.sales, state.expenses, state.inventory, time_range=time_range)

    return jsonify({
        'success': True,
        'ranges': list(TIME_RANGES),
        'report': report
    })
