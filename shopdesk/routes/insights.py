"""
AI Insights Routes
Generate a business report from the current inventory and sales
"""

from flask import Blueprint, jsonify, current_app
from shopdesk import limiter
from shopdesk.services.insights import generate_business_insights
from shopdesk.services.shop_state import get_shop_state

bp = Blueprint('insights', __name__)


@bp.route('/', methods=['POST'])
@limiter.limit(lambda: current_app.config['INSIGHTS_RATE_LIMIT'])
def generate():
    """Generate Business Report"""
    state = get_shop_state()
    analysis = generate_business_insights(state.inventory, state.sales)
    return jsonify({
        'success': True,
        'analysis': analysis,
        'model': current_app.config['GEMINI_MODEL']
    })
