"""
Shop Records
Plain data records held in the local snapshot, with conversions to and
from store rows (snake_case) and the JSON wire format (camelCase)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from typing import List, Optional

from shopdesk.exceptions import ValidationError
from shopdesk.utils.helpers import (
    generate_id, now, money, to_decimal, to_int, parse_date, parse_timestamp
)

# Wire name -> record attribute for editable inventory fields
ITEM_FIELDS = {
    'name': 'name',
    'category': 'category',
    'quantity': 'quantity',
    'costPrice': 'cost_price',
    'salesPrice': 'sales_price',
    'lowStockThreshold': 'low_stock_threshold',
}

DEFAULT_LOW_STOCK_THRESHOLD = 5

# Largest value an INTEGER stock column holds
MAX_STOCK = 2 ** 31 - 1


def _isoformat(value):
    return value.isoformat() if value else None


@dataclass
class InventoryItem:
    id: str
    name: str
    category: str
    quantity: int
    cost_price: Decimal
    sales_price: Decimal
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    last_updated: Optional[datetime] = None

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    @property
    def stock_value(self) -> Decimal:
        return self.cost_price * self.quantity

    @classmethod
    def create(cls, fields, timestamp=None):
        """Build a new item with a generated id from validated fields"""
        values = {'low_stock_threshold': DEFAULT_LOW_STOCK_THRESHOLD}
        values.update(fields)
        return cls(id=generate_id(), last_updated=timestamp or now(), **values)

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            name=row['name'],
            category=row.get('category') or '',
            quantity=int(row.get('quantity') or 0),
            cost_price=Decimal(str(row.get('cost_price') or 0)),
            sales_price=Decimal(str(row.get('sales_price') or 0)),
            low_stock_threshold=int(row.get('low_stock_threshold') or 0),
            last_updated=row.get('last_updated'),
        )

    def updated(self, changes):
        """Return a copy with the given attribute changes applied"""
        return replace(self, **changes)

    def to_row(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'quantity': self.quantity,
            'cost_price': self.cost_price,
            'sales_price': self.sales_price,
            'low_stock_threshold': self.low_stock_threshold,
            'last_updated': self.last_updated,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'quantity': self.quantity,
            'costPrice': money(self.cost_price),
            'salesPrice': money(self.sales_price),
            'lowStockThreshold': self.low_stock_threshold,
            'lastUpdated': _isoformat(self.last_updated),
            'isLowStock': self.is_low_stock,
        }


@dataclass
class SaleItem:
    item_id: str
    name: str
    quantity: int
    price_at_sale: Decimal
    cost_at_sale: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price_at_sale * self.quantity

    @property
    def line_cost(self) -> Decimal:
        return self.cost_at_sale * self.quantity

    @classmethod
    def from_dict(cls, data):
        return cls(
            item_id=data['itemId'],
            name=data.get('name', ''),
            quantity=int(data['quantity']),
            price_at_sale=Decimal(str(data.get('priceAtSale', 0))),
            cost_at_sale=Decimal(str(data.get('costAtSale', 0))),
        )

    def to_dict(self):
        return {
            'itemId': self.item_id,
            'name': self.name,
            'quantity': self.quantity,
            'priceAtSale': money(self.price_at_sale),
            'costAtSale': money(self.cost_at_sale),
        }


def sale_totals(items):
    """
    Compute the denormalized totals of a sale

    Args:
        items: Iterable of SaleItem

    Returns:
        tuple: (total_amount, total_profit) where
            total_amount = sum(quantity * price_at_sale) and
            total_profit = total_amount - sum(quantity * cost_at_sale)
    """
    total_amount = Decimal('0')
    total_cost = Decimal('0')
    for item in items:
        total_amount += item.line_total
        total_cost += item.line_cost
    return total_amount, total_amount - total_cost


@dataclass
class SaleRecord:
    id: str
    items: List[SaleItem]
    total_amount: Decimal
    total_profit: Decimal
    timestamp: datetime

    @classmethod
    def create(cls, items, timestamp=None):
        """Build a new sale from its line items, computing totals"""
        items = list(items)
        total_amount, total_profit = sale_totals(items)
        return cls(
            id=generate_id(),
            items=items,
            total_amount=total_amount,
            total_profit=total_profit,
            timestamp=timestamp or now(),
        )

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            items=[SaleItem.from_dict(i) for i in (row.get('items') or [])],
            total_amount=Decimal(str(row.get('total_amount') or 0)),
            total_profit=Decimal(str(row.get('total_profit') or 0)),
            timestamp=parse_timestamp(row['timestamp']),
        )

    def to_row(self):
        return {
            'id': self.id,
            'items': [i.to_dict() for i in self.items],
            'total_amount': self.total_amount,
            'total_profit': self.total_profit,
            'timestamp': self.timestamp,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'items': [i.to_dict() for i in self.items],
            'totalAmount': money(self.total_amount),
            'totalProfit': money(self.total_profit),
            'timestamp': _isoformat(self.timestamp),
        }


@dataclass
class ExpenseRecord:
    id: str
    description: str
    amount: Decimal
    category: str
    date: date
    recorded_at: Optional[datetime] = field(default=None)

    @classmethod
    def create(cls, fields, timestamp=None):
        return cls(id=generate_id(), recorded_at=timestamp or now(), **fields)

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            description=row['description'],
            amount=Decimal(str(row.get('amount') or 0)),
            category=row.get('category') or '',
            date=parse_date(row['date']),
            recorded_at=row.get('recorded_at'),
        )

    def to_row(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount': self.amount,
            'category': self.category,
            'date': self.date,
            'recorded_at': self.recorded_at,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount': money(self.amount),
            'category': self.category,
            'date': self.date.isoformat(),
            'recordedAt': _isoformat(self.recorded_at),
        }


# ============================================================
# REQUEST PARSING
# ============================================================

def item_fields_from_json(data, partial=False):
    """
    Validate inventory fields from a JSON body

    Args:
        data: Request JSON (camelCase keys)
        partial: Only validate the keys that are present (updates)

    Returns:
        dict: Record attribute -> value

    Raises:
        ValidationError: on missing or invalid fields
    """
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    fields = {}
    for wire_name, attr in ITEM_FIELDS.items():
        if wire_name not in data:
            if not partial and wire_name in ('name', 'category'):
                raise ValidationError(f'{wire_name} is required')
            continue
        value = data[wire_name]
        if attr in ('name', 'category'):
            value = (value or '').strip() if isinstance(value, str) else ''
            if not value:
                raise ValidationError(f'{wire_name} is required')
        elif attr in ('quantity', 'low_stock_threshold'):
            value = to_int(value, wire_name)
            if value < 0:
                raise ValidationError(f'{wire_name} cannot be negative')
            if value > MAX_STOCK:
                raise ValidationError(f'{wire_name} is too large')
        else:
            value = to_decimal(value, wire_name)
            if value < 0:
                raise ValidationError(f'{wire_name} cannot be negative')
        fields[attr] = value

    if not partial:
        fields.setdefault('quantity', 0)
        fields.setdefault('cost_price', Decimal('0'))
        fields.setdefault('sales_price', Decimal('0'))
    if partial and not fields:
        raise ValidationError('No updatable fields supplied')
    return fields


def expense_fields_from_json(data, today=None):
    """
    Validate a new expense from a JSON body

    description, amount and category are required; date defaults to today.
    """
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    description = data.get('description')
    category = data.get('category')
    if not isinstance(description, str) or not description.strip():
        raise ValidationError('description is required')
    if not isinstance(category, str) or not category.strip():
        raise ValidationError('category is required')
    if data.get('amount') in (None, ''):
        raise ValidationError('amount is required')

    amount = to_decimal(data['amount'], 'amount')
    if amount < 0:
        raise ValidationError('amount cannot be negative')

    expense_date = data.get('date')
    expense_date = parse_date(expense_date) if expense_date else (today or now().date())

    return {
        'description': description.strip(),
        'amount': amount,
        'category': category.strip(),
        'date': expense_date,
    }
