"""
Helper Utilities
Common utility functions used across the application
"""

import uuid
from datetime import datetime, date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from shopdesk.exceptions import ValidationError

TWO_PLACES = Decimal('0.01')


def generate_id():
    """
    Generate a record identifier

    Returns:
        str: Random UUID4 string
    """
    return str(uuid.uuid4())


def now():
    """Local wall-clock time used for every timestamp the shop records"""
    return datetime.now()


def to_decimal(value, field='value'):
    """
    Convert a request value to Decimal

    Raises:
        ValidationError: if the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number')
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f'{field} must be a number')
    if not result.is_finite():
        raise ValidationError(f'{field} must be a number')
    return result


def to_int(value, field='value'):
    """Convert a request value to int, rejecting fractions and booleans"""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a whole number')
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f'{field} must be a whole number')
    if not result.is_finite() or result != result.to_integral_value():
        raise ValidationError(f'{field} must be a whole number')
    return int(result)


def money(value):
    """Round a monetary amount to 2 places and return it as float for JSON"""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def parse_date(value, field='date'):
    """
    Parse a YYYY-MM-DD string (or pass through a date)

    Raises:
        ValidationError: if the string is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], '%Y-%m-%d').date()
    except (ValueError, TypeError):
        raise ValidationError(f'Invalid {field}. Use YYYY-MM-DD')


def parse_timestamp(value):
    """Parse an ISO-8601 timestamp string (or pass through a datetime)"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    # The store keeps naive local timestamps
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed

