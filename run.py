"""
Application Entry Point
Initializes and runs the Flask application
"""

import os
import logging
from decimal import Decimal
from shopdesk import create_app, db

# Determine configuration environment
config_name = os.environ.get('FLASK_ENV', 'development')
app = create_app(config_name)

# Setup logging
if not os.path.exists(app.config['LOG_FOLDER']):
    os.makedirs(app.config['LOG_FOLDER'])

logging.basicConfig(
    level=getattr(logging, app.config['LOG_LEVEL']),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(os.path.join(app.config['LOG_FOLDER'], 'app.log')),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

DEMO_ITEMS = [
    {'name': 'Rice (5kg)', 'category': 'Groceries', 'quantity': 40,
     'cost_price': Decimal('55.00'), 'sales_price': Decimal('70.00')},
    {'name': 'Cooking Oil (1L)', 'category': 'Groceries', 'quantity': 25,
     'cost_price': Decimal('28.50'), 'sales_price': Decimal('35.00')},
    {'name': 'Bar Soap', 'category': 'Toiletries', 'quantity': 4,
     'cost_price': Decimal('3.20'), 'sales_price': Decimal('5.00')},
    {'name': 'Bottled Water (1.5L)', 'category': 'Beverages', 'quantity': 60,
     'cost_price': Decimal('2.00'), 'sales_price': Decimal('3.50')},
]


@app.shell_context_processor
def make_shell_context():
    """Make database and models available in Flask shell"""
    from shopdesk import models
    from shopdesk.services.shop_state import get_shop_state
    return {
        'db': db,
        'Inventory': models.Inventory,
        'Sale': models.Sale,
        'Expense': models.Expense,
        'ErrorLog': models.ErrorLog,
        'get_shop_state': get_shop_state
    }


@app.cli.command('init-db')
def init_db():
    """Initialize the database tables"""
    logger.info("Initializing database...")
    db.create_all()
    logger.info("Database initialized successfully!")


@app.cli.command('seed-demo')
def seed_demo():
    """Load a few demo inventory items"""
    from shopdesk.services.shop_state import get_shop_state
    db.create_all()
    state = get_shop_state()
    existing = {item.name for item in state.inventory}

    added = 0
    for fields in DEMO_ITEMS:
        if fields['name'] in existing:
            continue
        state.add_item(fields)
        added += 1
    logger.info(f"Demo data loaded: {added} items added")


if __name__ == '__main__':
    # Check if running in development mode
    is_dev = os.environ.get('FLASK_ENV', 'development') == 'development'
    use_reloader = os.environ.get('FLASK_USE_RELOADER', 'true').lower() == 'true'

    with app.app_context():
        # Create tables if they don't exist
        db.create_all()
        logger.info("Database tables created")

    logger.info(f"Starting {app.config['BUSINESS_NAME']} dashboard...")
    logger.info(f"Debug mode: {is_dev}, Auto-reload: {use_reloader}")

    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5001)),
        debug=is_dev,
        use_reloader=use_reloader
    )
