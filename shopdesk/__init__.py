"""
Flask Application Factory
Initializes and configures the Flask application
"""

import os
from flask import Flask, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect, CSRFError, generate_csrf
from config import config
from shopdesk.exceptions import InsightsError, NotFoundError, StoreError, ValidationError
from shopdesk.models import db

# Initialize extensions
migrate = Migrate()
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)


def error_response(message, status_code):
    return jsonify({'success': False, 'error': message}), status_code


def create_app(config_name='default'):
    """
    Application factory pattern
    Creates and configures Flask application
    """
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Validate secret key in production
    if config_name == 'production':
        if not app.config.get('SECRET_KEY') or app.config['SECRET_KEY'] == 'dev-secret-key-change-in-production':
            raise ValueError("Production requires a secure SECRET_KEY. Set it via environment variable.")
        if len(app.config['SECRET_KEY']) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters for production.")

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    # Initialize Sentry if configured
    if app.config.get('SENTRY_DSN'):
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=config_name
        )
        app.logger.info("Sentry error tracking initialized")

    os.makedirs(app.config['LOG_FOLDER'], exist_ok=True)

    # Register blueprints
    from shopdesk.routes.inventory import bp as inventory_bp
    app.register_blueprint(inventory_bp, url_prefix='/inventory')

    from shopdesk.routes.pos import bp as pos_bp
    app.register_blueprint(pos_bp, url_prefix='/pos')

    from shopdesk.routes.expenses import bp as expenses_bp
    app.register_blueprint(expenses_bp, url_prefix='/expenses')

    from shopdesk.routes.financial_reports import bp as financial_reports_bp
    app.register_blueprint(financial_reports_bp, url_prefix='/financial-reports')

    from shopdesk.routes.insights import bp as insights_bp
    app.register_blueprint(insights_bp, url_prefix='/insights')

    # Register main routes
    @app.route('/')
    def index():
        """Dashboard metrics and the low stock list"""
        from shopdesk.services.shop_state import get_shop_state
        from shopdesk.utils.financials import dashboard_metrics

        state = get_shop_state()
        low_stock = [item.to_dict() for item in state.inventory if item.is_low_stock]

        return jsonify({
            'success': True,
            'businessName': app.config['BUSINESS_NAME'],
            'currencySymbol': app.config['CURRENCY_SYMBOL'],
            'metrics': dashboard_metrics(state.inventory, state.sales),
            'lowStock': low_stock
        })

    @app.route('/refresh', methods=['POST'])
    def refresh():
        """Reload inventory, sales and expenses from the database"""
        from shopdesk.services.shop_state import get_shop_state

        state = get_shop_state()
        state.refresh()
        return jsonify({
            'success': True,
            'inventory': len(state.inventory),
            'sales': len(state.sales),
            'expenses': len(state.expenses)
        })

    @app.route('/health')
    def health():
        """Database connectivity for the online/offline indicator"""
        from shopdesk.store import TableStore

        online = TableStore().ping()
        return jsonify({
            'success': online,
            'status': 'online' if online else 'offline'
        }), 200 if online else 503

    @app.route('/csrf-token')
    def csrf_token():
        return jsonify({'csrfToken': generate_csrf()})

    # Error handlers
    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return error_response(str(error), 400)

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return error_response(str(error), 404)

    @app.errorhandler(StoreError)
    def handle_store_error(error):
        app.logger.error(f"Store failure on {error.table} ({error.operation}): {error.message}")
        return error_response(error.message, 500)

    @app.errorhandler(InsightsError)
    def handle_insights_error(error):
        return error_response(str(error), 502)

    @app.errorhandler(404)
    def not_found_error(error):
        return error_response('Not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(429)
    def rate_limited(error):
        return error_response(f'Too many requests: {error.description}', 429)

    @app.errorhandler(500)
    def internal_error(error):
        from shopdesk.utils.error_logger import log_error
        db.session.rollback()
        log_error(getattr(error, 'original_exception', None) or error, status_code=500)
        return error_response('Internal server error', 500)

    # CSRF error handler - returns JSON for API calls
    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        return jsonify({
            'success': False,
            'error': 'CSRF token missing or invalid',
            'message': 'Please refresh the page and try again'
        }), 400

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Permissions-Policy'] = 'geolocation=(), microphone=(), camera=()'
        return response

    return app
