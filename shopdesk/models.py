"""
Database Models
SQLAlchemy ORM models for the hosted shop tables
"""

from datetime import datetime, date
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Inventory(db.Model):
    """Stock items"""
    __tablename__ = 'inventory'

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(256), nullable=False, index=True)
    category = db.Column(db.String(128), nullable=False, default='')

    # Stock
    quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=5)

    # Pricing
    cost_price = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)
    sales_price = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)

    last_updated = db.Column(db.DateTime, default=datetime.now)

    def __repr__(self):
        return f'<Inventory {self.name}>'


class Sale(db.Model):
    """Sales transactions, line items stored denormalized"""
    __tablename__ = 'sales'

    id = db.Column(db.String(36), primary_key=True)
    # [{"itemId", "name", "quantity", "priceAtSale", "costAtSale"}, ...]
    items = db.Column(db.JSON, nullable=False, default=list)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0.00)
    total_profit = db.Column(db.Numeric(12, 2), nullable=False, default=0.00)
    timestamp = db.Column(db.DateTime, default=datetime.now, index=True)

    def __repr__(self):
        return f'<Sale {self.id} - {self.total_amount}>'


class Expense(db.Model):
    """Shop expenses tracking"""
    __tablename__ = 'expenses'

    id = db.Column(db.String(36), primary_key=True)
    description = db.Column(db.String(256), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(64), nullable=False)
    date = db.Column(db.Date, default=date.today, index=True)
    recorded_at = db.Column(db.DateTime, default=datetime.now)

    def __repr__(self):
        return f'<Expense {self.description} - {self.amount}>'


class ErrorLog(db.Model):
    """Unhandled application errors captured with request context"""
    __tablename__ = 'error_logs'

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.now, index=True)
    error_type = db.Column(db.String(128))
    error_message = db.Column(db.Text)
    traceback = db.Column(db.Text)
    request_url = db.Column(db.String(512))
    request_method = db.Column(db.String(16))
    request_data = db.Column(db.Text)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(512))
    status_code = db.Column(db.Integer)
    blueprint = db.Column(db.String(64))
    endpoint = db.Column(db.String(128))
    is_resolved = db.Column(db.Boolean, default=False)

    def __repr__(self):
        return f'<ErrorLog {self.error_type} {self.status_code}>'
