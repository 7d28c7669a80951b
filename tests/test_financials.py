"""
Tests for financial aggregation.

Tests cover:
- Report window boundaries for every range
- Calendar-day bucketing of sales and expenses
- Summary metrics and margins
- Dashboard metrics
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from shopdesk.exceptions import ValidationError
from shopdesk.utils.financials import (
    EPOCH, window_start, filter_window, daily_buckets, summarize,
    financial_report, dashboard_metrics
)

NOW = datetime(2024, 3, 15, 14, 30)


class TestWindowStart:
    """Tests for window_start."""

    def test_seven_days(self):
        assert window_start('7d', now=NOW) == datetime(2024, 3, 8)

    def test_thirty_days_crosses_leap_february(self):
        assert window_start('30d', now=NOW) == datetime(2024, 2, 14)

    def test_ninety_days(self):
        assert window_start('90d', now=NOW) == datetime(2023, 12, 16)

    def test_one_year(self):
        assert window_start('1y', now=NOW) == datetime(2023, 3, 15)

    def test_one_year_from_leap_day(self):
        assert window_start('1y', now=datetime(2024, 2, 29, 12, 0)) == datetime(2023, 3, 1)

    def test_all(self):
        assert window_start('all', now=NOW) == EPOCH

    def test_invalid_range(self):
        with pytest.raises(ValidationError, match='Invalid range'):
            window_start('2w', now=NOW)


class TestFilterWindow:
    """Tests for the inclusive lower window edge."""

    def test_edges(self, make_sale, make_expense):
        start = datetime(2024, 3, 8)
        at_start = make_sale(datetime(2024, 3, 8, 0, 0), sale_id='at-start')
        just_before = make_sale(datetime(2024, 3, 7, 23, 59, 59), sale_id='before')
        expense_on_start = make_expense(date(2024, 3, 8))
        expense_before = make_expense(date(2024, 3, 7))

        sales, expenses = filter_window(
            [at_start, just_before], [expense_on_start, expense_before], start
        )
        assert [s.id for s in sales] == ['at-start']
        assert expenses == [expense_on_start]


class TestDailyBuckets:
    """Each record lands in exactly one bucket keyed by its calendar day."""

    def test_groups_by_calendar_day(self, make_sale, make_expense):
        sales = [
            make_sale(datetime(2024, 3, 10, 0, 0), [('A', 1, '10.00', '4.00')]),
            make_sale(datetime(2024, 3, 10, 23, 59, 59), [('B', 2, '5.00', '3.00')]),
            make_sale(datetime(2024, 3, 11, 0, 0), [('C', 1, '7.00', '7.00')]),
        ]
        expenses = [make_expense(date(2024, 3, 11), amount='2.50')]

        buckets = daily_buckets(sales, expenses)

        assert [b.date for b in buckets] == ['2024-03-10', '2024-03-11']
        first, second = buckets
        assert first.revenue == Decimal('20.00')
        assert first.gross_profit == Decimal('10.00')
        assert first.expense == Decimal('0')
        assert second.revenue == Decimal('7.00')
        assert second.expense == Decimal('2.50')
        assert second.net_income == Decimal('-2.50')

    def test_expense_only_day_gets_bucket(self, make_expense):
        buckets = daily_buckets([], [make_expense(date(2024, 1, 5), amount='9.99')])
        assert len(buckets) == 1
        assert buckets[0].to_dict() == {
            'date': '2024-01-05',
            'revenue': 0.0,
            'expense': 9.99,
            'grossProfit': 0.0,
            'netIncome': -9.99,
        }

    def test_buckets_sorted_ascending(self, make_sale):
        sales = [make_sale(datetime(2024, 3, d, 12, 0)) for d in (12, 3, 7)]
        assert [b.date for b in daily_buckets(sales, [])] == ['2024-03-03', '2024-03-07', '2024-03-12']

    def test_bucket_sums_equal_totals(self, make_sale, make_expense):
        sales = [
            make_sale(datetime(2024, 3, day, hour, 0), [('X', day % 3 + 1, '3.35', '1.10')])
            for day in range(1, 15) for hour in (0, 11, 23)
        ]
        expenses = [make_expense(date(2024, 3, day), amount=f'{day}.25') for day in range(1, 15, 2)]

        buckets = daily_buckets(sales, expenses)

        assert sum(b.revenue for b in buckets) == sum(s.total_amount for s in sales)
        assert sum(b.gross_profit for b in buckets) == sum(s.total_profit for s in sales)
        assert sum(b.expense for b in buckets) == sum(e.amount for e in expenses)
        assert len(buckets) == 14

    def test_empty(self):
        assert daily_buckets([], []) == []


class TestSummary:
    """Tests for summary metrics."""

    def test_margins(self, make_sale, make_expense, make_item):
        sales = [make_sale(NOW, [('A', 10, '10.00', '6.00')])]
        expenses = [make_expense(NOW, amount='10.00')]
        inventory = [make_item(quantity=4, cost='2.50')]

        summary = summarize(sales, expenses, inventory)

        assert summary['totalRevenue'] == Decimal('100.00')
        assert summary['totalGrossProfit'] == Decimal('40.00')
        assert summary['totalCOGS'] == Decimal('60.00')
        assert summary['totalExpenses'] == Decimal('10.00')
        assert summary['netIncome'] == Decimal('30.00')
        assert summary['grossMargin'] == 40.0
        assert summary['netMargin'] == 30.0
        assert summary['expenseRatio'] == 10.0
        assert summary['inventoryValue'] == Decimal('10.00')
        assert summary['salesCount'] == 1
        assert summary['expenseCount'] == 1

    def test_no_revenue_means_zero_margins(self, make_expense):
        summary = summarize([], [make_expense(NOW, amount='5.00')], [])
        assert summary['grossMargin'] == 0.0
        assert summary['netMargin'] == 0.0
        assert summary['expenseRatio'] == 0.0
        assert summary['netIncome'] == Decimal('-5.00')


class TestFinancialReport:
    """Tests for the full report."""

    @pytest.fixture
    def records(self, make_sale, make_expense, make_item):
        sales = [
            make_sale(datetime(2024, 3, 14, 9, 0), [('A', 2, '10.00', '4.00')]),
            make_sale(datetime(2024, 3, 1, 9, 0), [('B', 1, '50.00', '30.00')]),
            make_sale(datetime(2023, 1, 1, 9, 0), [('C', 1, '99.00', '1.00')]),
        ]
        expenses = [
            make_expense(date(2024, 3, 14), amount='5.00'),
            make_expense(date(2024, 2, 1), amount='100.00'),
        ]
        inventory = [make_item(quantity=10, cost='3.00')]
        return sales, expenses, inventory

    def test_seven_day_window(self, records):
        sales, expenses, inventory = records
        report = financial_report(sales, expenses, inventory, '7d', now=NOW)

        assert report['range'] == '7d'
        assert report['startDate'] == '2024-03-08'
        assert report['summary']['totalRevenue'] == 20.0
        assert report['summary']['totalExpenses'] == 5.0
        assert report['summary']['netIncome'] == 7.0
        assert report['summary']['inventoryValue'] == 30.0
        assert [d['date'] for d in report['daily']] == ['2024-03-14']

    def test_daily_totals_match_summary(self, records):
        sales, expenses, inventory = records
        for time_range in ('7d', '30d', '90d', '1y', 'all'):
            report = financial_report(sales, expenses, inventory, time_range, now=NOW)
            summary = report['summary']
            assert round(sum(d['revenue'] for d in report['daily']), 2) == summary['totalRevenue']
            assert round(sum(d['expense'] for d in report['daily']), 2) == summary['totalExpenses']
            assert round(sum(d['grossProfit'] for d in report['daily']), 2) == summary['totalGrossProfit']

    def test_all_time_includes_everything(self, records):
        sales, expenses, inventory = records
        report = financial_report(sales, expenses, inventory, 'all', now=NOW)
        assert report['summary']['salesCount'] == 3
        assert report['summary']['expenseCount'] == 2
        assert report['startDate'] == '1970-01-01'

    def test_pnl_and_assets(self, records):
        sales, expenses, inventory = records
        report = financial_report(sales, expenses, inventory, '90d', now=NOW)

        pnl = {row['name']: row['amount'] for row in report['pnl']}
        assert pnl == {'Revenue': 70.0, 'COGS': 38.0, 'Expenses': 105.0, 'Net Profit': -73.0}

        assets = {row['name']: row['value'] for row in report['assets']}
        assert assets['Inventory Assets'] == 30.0
        # Negative net income is shown as zero cash
        assert assets['Est. Cash (Period)'] == 0.0


class TestDashboardMetrics:
    """Tests for dashboard_metrics."""

    def test_metrics(self, make_item, make_sale):
        inventory = [
            make_item(item_id='a', quantity=2, threshold=5, cost='1.00'),
            make_item(item_id='b', quantity=50, threshold=5, cost='2.00'),
        ]
        sales = [make_sale(NOW, [('A', 2, '10.00', '4.00')])]

        metrics = dashboard_metrics(inventory, sales)

        assert metrics == {
            'totalRevenue': 20.0,
            'totalProfit': 12.0,
            'lowStockCount': 1,
            'totalInventoryValue': 102.0,
        }
