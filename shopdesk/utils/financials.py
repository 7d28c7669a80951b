"""
Financial Aggregation Utilities
Time-window filtering, calendar-day bucketing and summary metrics
for the financial report and the dashboard
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from shopdesk.exceptions import ValidationError
from shopdesk.utils.helpers import money, now as local_now

TIME_RANGES = ('7d', '30d', '90d', '1y', 'all')
DEFAULT_TIME_RANGE = '30d'
RANGE_DAYS = {'7d': 7, '30d': 30, '90d': 90}
EPOCH = datetime(1970, 1, 1)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def window_start(time_range, now=None):
    """
    Start of a report window, truncated to midnight

    Args:
        time_range: One of '7d', '30d', '90d', '1y', 'all'
        now: Reference time (defaults to the current local time)

    Returns:
        datetime: Inclusive lower bound of the window
    """
    if time_range not in TIME_RANGES:
        raise ValidationError(f"Invalid range '{time_range}'. Use one of: {', '.join(TIME_RANGES)}")
    if time_range == 'all':
        return EPOCH

    now = now or local_now()
    if time_range == '1y':
        try:
            start = now.replace(year=now.year - 1)
        except ValueError:
            # 29 February rolls forward like a calendar year does
            start = now.replace(year=now.year - 1, month=3, day=1)
    else:
        start = now - timedelta(days=RANGE_DAYS[time_range])
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def filter_window(sales, expenses, start):
    """Sales and expenses on or after the window start"""
    window_sales = [s for s in sales if s.timestamp >= start]
    window_expenses = [e for e in expenses if e.date >= start.date()]
    return window_sales, window_expenses


@dataclass
class DayBucket:
    date: str
    revenue: Decimal = ZERO
    expense: Decimal = ZERO
    gross_profit: Decimal = ZERO

    @property
    def net_income(self):
        return self.gross_profit - self.expense

    def to_dict(self):
        return {
            'date': self.date,
            'revenue': money(self.revenue),
            'expense': money(self.expense),
            'grossProfit': money(self.gross_profit),
            'netIncome': money(self.net_income),
        }


def daily_buckets(sales, expenses):
    """
    Accumulate sales and expenses per calendar day

    Each sale lands in the bucket of its timestamp's date and each expense
    in the bucket of its date. Buckets only exist for days with records.

    Returns:
        list: DayBucket sorted by date ascending
    """
    buckets = {}

    def bucket_for(key):
        if key not in buckets:
            buckets[key] = DayBucket(date=key)
        return buckets[key]

    for sale in sales:
        bucket = bucket_for(sale.timestamp.date().isoformat())
        bucket.revenue += sale.total_amount
        bucket.gross_profit += sale.total_profit

    for expense in expenses:
        bucket = bucket_for(expense.date.isoformat())
        bucket.expense += expense.amount

    return [buckets[key] for key in sorted(buckets)]


def _percent(part, whole):
    if whole <= 0:
        return 0.0
    return round(float(part / whole * HUNDRED), 2)


def inventory_value(inventory):
    """Stock valued at cost"""
    return sum((item.cost_price * item.quantity for item in inventory), ZERO)


def summarize(sales, expenses, inventory):
    """
    Summary metrics for a period

    COGS is revenue minus gross profit since each sale's profit is already
    price minus cost. Inventory value is the current stock, not windowed.
    """
    total_revenue = sum((s.total_amount for s in sales), ZERO)
    total_gross_profit = sum((s.total_profit for s in sales), ZERO)
    total_expenses = sum((e.amount for e in expenses), ZERO)
    net_income = total_gross_profit - total_expenses

    return {
        'totalRevenue': total_revenue,
        'totalGrossProfit': total_gross_profit,
        'totalCOGS': total_revenue - total_gross_profit,
        'totalExpenses': total_expenses,
        'netIncome': net_income,
        'grossMargin': _percent(total_gross_profit, total_revenue),
        'netMargin': _percent(net_income, total_revenue),
        'expenseRatio': _percent(total_expenses, total_revenue),
        'inventoryValue': inventory_value(inventory),
        'salesCount': len(sales),
        'expenseCount': len(expenses),
    }


def pnl_breakdown(summary):
    """Income statement rows"""
    return [
        {'name': 'Revenue', 'amount': money(summary['totalRevenue'])},
        {'name': 'COGS', 'amount': money(summary['totalCOGS'])},
        {'name': 'Expenses', 'amount': money(summary['totalExpenses'])},
        {'name': 'Net Profit', 'amount': money(summary['netIncome'])},
    ]


def asset_breakdown(summary):
    """Inventory assets and a simplified period cash estimate"""
    return [
        {'name': 'Inventory Assets', 'value': money(summary['inventoryValue'])},
        {'name': 'Est. Cash (Period)', 'value': money(max(ZERO, summary['netIncome']))},
    ]


def _serialize_summary(summary):
    result = {}
    for key, value in summary.items():
        result[key] = money(value) if isinstance(value, Decimal) else value
    return result


def financial_report(sales, expenses, inventory, time_range=DEFAULT_TIME_RANGE, now=None):
    """
    Full financial report for a time range

    Returns:
        dict: range, window start, summary, daily buckets, P&L and assets
    """
    start = window_start(time_range, now=now)
    window_sales, window_expenses = filter_window(sales, expenses, start)
    summary = summarize(window_sales, window_expenses, inventory)

    return {
        'range': time_range,
        'startDate': start.date().isoformat(),
        'summary': _serialize_summary(summary),
        'daily': [bucket.to_dict() for bucket in daily_buckets(window_sales, window_expenses)],
        'pnl': pnl_breakdown(summary),
        'assets': asset_breakdown(summary),
    }


def dashboard_metrics(inventory, sales):
    """All-time headline numbers for the dashboard"""
    return {
        'totalRevenue': money(sum((s.total_amount for s in sales), ZERO)),
        'totalProfit': money(sum((s.total_profit for s in sales), ZERO)),
        'lowStockCount': sum(1 for item in inventory if item.is_low_stock),
        'totalInventoryValue': money(inventory_value(inventory)),
    }
