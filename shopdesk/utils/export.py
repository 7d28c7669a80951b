"""
Export utilities for generating Excel and CSV exports
"""

import csv
import io
from io import BytesIO
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

CSV_MIMETYPE = 'text/csv'
EXCEL_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def export_to_excel(data, columns, title="Report", sheet_name="Data"):
    """
    Export data to Excel format

    Args:
        data: List of dictionaries or list of lists containing the data
        columns: List of column headers or dict mapping keys to display names
        title: Report title for the header
        sheet_name: Name of the worksheet

    Returns:
        BytesIO object containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="1E3A8A", end_color="1E3A8A", fill_type="solid")
    title_font = Font(bold=True, size=14)
    date_font = Font(italic=True, size=10, color="666666")
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    # Title
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = title_font
    title_cell.alignment = Alignment(horizontal='center')

    # Date
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    date_cell = ws.cell(row=2, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    date_cell.font = date_font
    date_cell.alignment = Alignment(horizontal='center')

    # Headers
    header_row = 4
    if isinstance(columns, dict):
        headers = list(columns.values())
        keys = list(columns.keys())
    else:
        headers = columns
        keys = columns

    for col_idx, header in enumerate(headers, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center')
        cell.border = thin_border

    # Data rows
    for row_idx, row_data in enumerate(data, header_row + 1):
        for col_idx, key in enumerate(keys, 1):
            if isinstance(row_data, dict):
                value = row_data.get(key, '')
            else:
                value = row_data[col_idx - 1] if col_idx - 1 < len(row_data) else ''

            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = thin_border
            if isinstance(value, (int, float)):
                cell.alignment = Alignment(horizontal='right')
            else:
                cell.alignment = Alignment(horizontal='left')

    # Adjust column widths
    for col_idx in range(1, len(headers) + 1):
        column_letter = get_column_letter(col_idx)
        max_length = max(
            (len(str(cell.value)) for cell in ws[column_letter][header_row - 1:] if cell.value is not None),
            default=0
        )
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output


def export_to_csv(data, columns, include_header=True):
    """
    Export data to CSV format

    Args:
        data: List of dictionaries or list of lists containing the data
        columns: List of column headers or dict mapping keys to display names
        include_header: Whether to include header row

    Returns:
        BytesIO object containing the CSV file
    """
    if isinstance(columns, dict):
        headers = list(columns.values())
        keys = list(columns.keys())
    else:
        headers = columns
        keys = columns

    text_output = io.StringIO()
    writer = csv.writer(text_output)

    if include_header:
        writer.writerow(headers)

    for row_data in data:
        if isinstance(row_data, dict):
            row = [row_data.get(key, '') for key in keys]
        else:
            row = row_data
        writer.writerow(row)

    output = BytesIO()
    output.write(text_output.getvalue().encode('utf-8-sig'))  # BOM for Excel compatibility
    output.seek(0)
    return output


def export_file(data, columns, title, format_type='csv'):
    """
    Render rows in the requested format

    Returns:
        tuple: (BytesIO, mimetype, file extension)
    """
    if format_type == 'excel':
        return export_to_excel(data, columns, title=title), EXCEL_MIMETYPE, 'xlsx'
    return export_to_csv(data, columns), CSV_MIMETYPE, 'csv'


def report_filename(prefix, extension, today=None):
    """e.g. expenses_report_2026-10-19.csv"""
    today = today or datetime.now().date()
    return f"{prefix}_report_{today.isoformat()}.{extension}"


# Export templates for the shop reports
def export_expenses_report(expenses, format_type='csv'):
    """
    Export expenses

    Args:
        expenses: List of ExpenseRecord
        format_type: 'excel' or 'csv'
    """
    columns = {
        'date': 'Date',
        'description': 'Description',
        'category': 'Category',
        'amount': 'Amount',
        'id': 'ID'
    }

    data = [{
        'date': expense.date.isoformat(),
        'description': expense.description,
        'category': expense.category,
        'amount': f"{expense.amount:.2f}" if format_type == 'csv' else float(expense.amount),
        'id': expense.id
    } for expense in expenses]

    return export_file(data, columns, 'Expenses Report', format_type)


def export_sales_report(sales, format_type='csv'):
    """Export sales history, one row per sale"""
    columns = {
        'date': 'Date',
        'id': 'Sale ID',
        'items': 'Items',
        'units': 'Units',
        'total': 'Total',
        'profit': 'Profit'
    }

    data = [{
        'date': sale.timestamp.strftime('%Y-%m-%d %H:%M'),
        'id': sale.id,
        'items': '; '.join(f"{item.name} x{item.quantity}" for item in sale.items),
        'units': sum(item.quantity for item in sale.items),
        'total': float(sale.total_amount),
        'profit': float(sale.total_profit)
    } for sale in sales]

    return export_file(data, columns, 'Sales Report', format_type)


def export_inventory_report(inventory, format_type='csv'):
    """Export current stock with cost valuation"""
    columns = {
        'name': 'Product Name',
        'category': 'Category',
        'quantity': 'Stock',
        'cost_price': 'Cost Price',
        'sales_price': 'Selling Price',
        'stock_value': 'Stock Value',
        'low_stock': 'Low Stock'
    }

    data = [{
        'name': item.name,
        'category': item.category,
        'quantity': item.quantity,
        'cost_price': float(item.cost_price),
        'sales_price': float(item.sales_price),
        'stock_value': float(item.stock_value),
        'low_stock': 'Yes' if item.is_low_stock else 'No'
    } for item in inventory]

    return export_file(data, columns, 'Inventory Report', format_type)
