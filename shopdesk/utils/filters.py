"""
List Filters
Search and date-range filtering for inventory, sales history and expenses
"""

from datetime import datetime, time
from decimal import Decimal

from shopdesk.utils.helpers import money, parse_date

ALL_CATEGORIES = 'All'


def _matches(term, *values):
    term = term.lower()
    return any(term in (value or '').lower() for value in values)


def search_inventory(inventory, term=''):
    """Items whose name or category contains the term"""
    term = (term or '').strip()
    if not term:
        return list(inventory)
    return [item for item in inventory if _matches(term, item.name, item.category)]


def inventory_categories(inventory):
    """Distinct categories, sorted"""
    return sorted({item.category for item in inventory if item.category})


def filter_sales(sales, search='', start_date=None, end_date=None):
    """
    Filter sales history

    Args:
        sales: SaleRecord list
        search: Matches any line item name
        start_date: Inclusive from the start of this day (date or YYYY-MM-DD)
        end_date: Inclusive until the end of this day

    Returns:
        list: Matching sales, newest first
    """
    search = (search or '').strip()
    start = datetime.combine(parse_date(start_date, 'start date'), time.min) if start_date else None
    end = datetime.combine(parse_date(end_date, 'end date'), time.max) if end_date else None

    result = []
    for sale in sales:
        if search and not any(_matches(search, item.name) for item in sale.items):
            continue
        if start and sale.timestamp < start:
            continue
        if end and sale.timestamp > end:
            continue
        result.append(sale)
    return sorted(result, key=lambda s: s.timestamp, reverse=True)


def sales_totals(sales):
    return {
        'count': len(sales),
        'totalRevenue': money(sum((s.total_amount for s in sales), Decimal('0'))),
        'totalProfit': money(sum((s.total_profit for s in sales), Decimal('0'))),
    }


def filter_expenses(expenses, search='', category=ALL_CATEGORIES, start_date=None, end_date=None):
    """
    Filter expenses by text, category and inclusive date range

    Returns:
        list: Matching expenses, newest date first
    """
    search = (search or '').strip()
    category = category or ALL_CATEGORIES
    start = parse_date(start_date, 'start date') if start_date else None
    end = parse_date(end_date, 'end date') if end_date else None

    result = []
    for expense in expenses:
        if search and not _matches(search, expense.description, expense.category):
            continue
        if category != ALL_CATEGORIES and expense.category != category:
            continue
        if start and expense.date < start:
            continue
        if end and expense.date > end:
            continue
        result.append(expense)
    return sorted(result, key=lambda e: e.date, reverse=True)


def expense_analytics(expenses, days=7):
    """
    Totals for the expense charts

    Args:
        expenses: Filtered expenses, newest first
        days: Number of distinct days kept for the daily chart
    """
    by_category = {}
    by_day = {}
    total = Decimal('0')
    for expense in expenses:
        total += expense.amount
        by_category[expense.category] = by_category.get(expense.category, Decimal('0')) + expense.amount
        key = expense.date.isoformat()
        by_day[key] = by_day.get(key, Decimal('0')) + expense.amount

    average = total / len(expenses) if expenses else Decimal('0')
    # Ties go to the category seen last
    top_category = 'N/A'
    top_value = None
    for name, value in by_category.items():
        if top_value is None or value >= top_value:
            top_category, top_value = name, value

    return {
        'total': money(total),
        'average': money(average),
        'count': len(expenses),
        'topCategory': top_category,
        'byCategory': [{'name': name, 'value': money(value)} for name, value in by_category.items()],
        'daily': [{'date': key, 'amount': money(value)} for key, value in list(by_day.items())[:days]],
    }
