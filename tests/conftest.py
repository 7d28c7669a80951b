"""
Shared pytest fixtures and configuration for all tests.

Provides common fixtures for Flask application testing, database sessions,
record builders and test data initialization.
"""

import pytest
import sys
import os
from decimal import Decimal
from datetime import date, datetime, timedelta

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shopdesk import create_app
from shopdesk.models import db


@pytest.fixture(scope='session')
def app_factory():
    """Factory fixture for creating test app instances."""
    def _create_app(config='testing'):
        app = create_app(config)
        app.config['WTF_CSRF_ENABLED'] = False
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
        return app
    return _create_app


@pytest.fixture(scope='function')
def fresh_app(app_factory):
    """Create a fresh application for each test with clean database."""
    app = app_factory()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(fresh_app):
    """Create a test client for each test."""
    return fresh_app.test_client()


@pytest.fixture(scope='function')
def db_session(fresh_app):
    """Provide a database session for testing."""
    with fresh_app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture(scope='function')
def init_database(fresh_app):
    """
    Initialize database with test data.

    Creates:
    - Inventory (in stock, low stock, out of stock)
    - Two sales (today and ten days ago)
    - Two expenses (today and ten days ago)

    Returns the ids keyed by a short name.
    """
    from shopdesk.models import Inventory, Sale, Expense

    today = datetime.now().replace(hour=10, minute=0, second=0, microsecond=0)
    earlier = today - timedelta(days=10)

    with fresh_app.app_context():
        items = [
            Inventory(
                id='item-rice',
                name='Rice (5kg)',
                category='Groceries',
                quantity=40,
                low_stock_threshold=5,
                cost_price=Decimal('55.00'),
                sales_price=Decimal('70.00'),
                last_updated=earlier
            ),
            Inventory(
                id='item-soap',
                name='Bar Soap',
                category='Toiletries',
                quantity=3,
                low_stock_threshold=5,
                cost_price=Decimal('3.00'),
                sales_price=Decimal('5.00'),
                last_updated=earlier
            ),
            Inventory(
                id='item-water',
                name='Bottled Water',
                category='Beverages',
                quantity=0,
                low_stock_threshold=10,
                cost_price=Decimal('2.00'),
                sales_price=Decimal('3.50'),
                last_updated=earlier
            ),
        ]
        db.session.add_all(items)

        sales = [
            Sale(
                id='sale-today',
                items=[{'itemId': 'item-rice', 'name': 'Rice (5kg)', 'quantity': 2,
                        'priceAtSale': 70.0, 'costAtSale': 55.0}],
                total_amount=Decimal('140.00'),
                total_profit=Decimal('30.00'),
                timestamp=today
            ),
            Sale(
                id='sale-earlier',
                items=[{'itemId': 'item-soap', 'name': 'Bar Soap', 'quantity': 4,
                        'priceAtSale': 5.0, 'costAtSale': 3.0}],
                total_amount=Decimal('20.00'),
                total_profit=Decimal('8.00'),
                timestamp=earlier
            ),
        ]
        db.session.add_all(sales)

        expenses = [
            Expense(id='exp-rent', description='Shop rent', amount=Decimal('100.00'),
                    category='Rent', date=today.date(), recorded_at=today),
            Expense(id='exp-power', description='Electricity bill', amount=Decimal('15.50'),
                    category='Utilities', date=earlier.date(), recorded_at=earlier),
        ]
        db.session.add_all(expenses)
        db.session.commit()

    return {
        'rice': 'item-rice',
        'soap': 'item-soap',
        'water': 'item-water',
        'sale_today': 'sale-today',
        'sale_earlier': 'sale-earlier',
        'today': today,
        'earlier': earlier,
    }


@pytest.fixture
def make_item():
    """Build an InventoryItem with sensible defaults."""
    from shopdesk.records import InventoryItem

    def _make_item(item_id='item-1', name='Widget', quantity=10, cost='2.00', price='5.00',
                   category='General', threshold=5):
        return InventoryItem(
            id=item_id,
            name=name,
            category=category,
            quantity=quantity,
            cost_price=Decimal(cost),
            sales_price=Decimal(price),
            low_stock_threshold=threshold,
            last_updated=datetime(2024, 1, 1, 9, 0)
        )
    return _make_item


@pytest.fixture
def make_sale():
    """Build a SaleRecord from (name, quantity, price, cost) tuples."""
    from shopdesk.records import SaleItem, SaleRecord

    def _make_sale(timestamp, lines=(('Widget', 1, '5.00', '2.00'),), sale_id=None):
        items = [
            SaleItem(item_id=f'item-{name}', name=name, quantity=qty,
                     price_at_sale=Decimal(price), cost_at_sale=Decimal(cost))
            for name, qty, price, cost in lines
        ]
        sale = SaleRecord.create(items, timestamp=timestamp)
        if sale_id:
            sale.id = sale_id
        return sale
    return _make_sale


@pytest.fixture
def make_expense():
    """Build an ExpenseRecord."""
    from shopdesk.records import ExpenseRecord

    def _make_expense(expense_date, amount='10.00', category='Supplies', description='Paper bags'):
        if isinstance(expense_date, datetime):
            expense_date = expense_date.date()
        return ExpenseRecord.create({
            'description': description,
            'amount': Decimal(amount),
            'category': category,
            'date': expense_date,
        })
    return _make_expense


# Pytest configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "api: marks tests as API endpoint tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically add markers based on test module names."""
    for item in items:
        if 'routes' in item.nodeid:
            item.add_marker(pytest.mark.api)
