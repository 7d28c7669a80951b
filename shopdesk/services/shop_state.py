"""
Shop State Service
Local snapshot of inventory, sales and expenses.

Every mutation is applied to the snapshot first, then written to the
hosted store. When a write fails the snapshot is thrown away and refetched
from the store, and the failure is re-raised with a user-facing message.
Sale completion writes the sale and then each stock decrement separately,
so a failure part-way leaves the store partially updated until the next
write; the refetch makes the snapshot match whatever the store holds.
"""

import logging
import threading
import time
from contextlib import contextmanager

from flask import current_app

from shopdesk.exceptions import NotFoundError, StoreError, ValidationError
from shopdesk.records import MAX_STOCK, InventoryItem, SaleRecord, ExpenseRecord
from shopdesk.store import TableStore
from shopdesk.utils.helpers import now, to_int

logger = logging.getLogger(__name__)

MSG_ADD_ITEM_FAILED = 'Failed to save item to database.'
MSG_UPDATE_ITEM_FAILED = 'Failed to update item in database.'
MSG_DELETE_ITEM_FAILED = 'Failed to delete item from database.'
MSG_SALE_FAILED = 'Error saving sale to database. Please check connection.'
MSG_ADD_EXPENSE_FAILED = 'Failed to save expense to database.'
MSG_INVALID_QUANTITY = 'Please enter a valid non-negative quantity.'


def _load_rows(record_class, rows, table):
    """Convert store rows to records, skipping rows that cannot be read"""
    records = []
    for row in rows:
        try:
            records.append(record_class.from_row(row))
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.warning(f"Skipping unreadable {table} row {row.get('id')}: {e}")
    return records


class ShopState:
    """Optimistic local state reconciled against the hosted store"""

    def __init__(self, store=None, default_low_stock_threshold=5, max_age=None):
        self.store = store or TableStore()
        self.default_low_stock_threshold = default_low_stock_threshold
        # Seconds before a read reloads from the store; None keeps it until a write fails
        self.max_age = max_age
        self.loaded_at = None
        self.inventory = []
        self.sales = []
        self.expenses = []
        self.loaded = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def refresh(self):
        """Replace the snapshot with the authoritative copy from the store"""
        with self._lock:
            inventory = self.store.select('inventory')
            sales = self.store.select('sales', order_by='timestamp', ascending=False)
            expenses = self.store.select('expenses', order_by='date', ascending=False)

            self.inventory = _load_rows(InventoryItem, inventory, 'inventory')
            self.sales = _load_rows(SaleRecord, sales, 'sales')
            self.expenses = _load_rows(ExpenseRecord, expenses, 'expenses')
            self.loaded = True
            self.loaded_at = time.monotonic()
            logger.debug(
                f"Snapshot loaded: {len(self.inventory)} items, "
                f"{len(self.sales)} sales, {len(self.expenses)} expenses"
            )

    def is_stale(self):
        """True when the snapshot is older than max_age seconds"""
        if self.max_age is None or self.loaded_at is None:
            return False
        return time.monotonic() - self.loaded_at >= self.max_age

    def ensure_loaded(self):
        if not self.loaded or self.is_stale():
            self.refresh()

    @contextmanager
    def _reconcile(self, message):
        """Run a store write; on failure refetch the snapshot and re-raise"""
        try:
            yield
        except StoreError as e:
            logger.error(f"{message} ({e.operation} on {e.table})")
            self._resync()
            raise StoreError(e.table, e.operation, message) from e
        except Exception:
            logger.exception(message)
            self.store.session.rollback()
            self._resync()
            raise

    def _resync(self):
        """Drop optimistic changes by reloading from the store"""
        try:
            self.refresh()
        except StoreError as refresh_error:
            # Next access retries the load
            self.loaded = False
            logger.error(f"Refetch after failed write also failed: {refresh_error}")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_item(self, item_id):
        """
        Find an inventory item in the snapshot

        Raises:
            NotFoundError: if no item has this id
        """
        for item in self.inventory:
            if item.id == item_id:
                return item
        raise NotFoundError(f'Item {item_id} not found')

    def get_sale(self, sale_id):
        for sale in self.sales:
            if sale.id == sale_id:
                return sale
        raise NotFoundError(f'Sale {sale_id} not found')

    def _index_of(self, item_id):
        for index, item in enumerate(self.inventory):
            if item.id == item_id:
                return index
        raise NotFoundError(f'Item {item_id} not found')

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def add_item(self, fields):
        """Create an item with a generated id and push it to the store"""
        with self._lock:
            self.ensure_loaded()
            fields = dict(fields)
            fields.setdefault('low_stock_threshold', self.default_low_stock_threshold)
            item = InventoryItem.create(fields)

            self.inventory = self.inventory + [item]

            with self._reconcile(MSG_ADD_ITEM_FAILED):
                self.store.insert('inventory', item.to_row())
            logger.info(f"Inventory item added: {item.name} ({item.id})")
            return item

    def update_item(self, item_id, updates):
        """Merge field updates into an item, stamping last_updated"""
        with self._lock:
            self.ensure_loaded()
            index = self._index_of(item_id)
            changes = dict(updates)
            changes['last_updated'] = now()

            updated = self.inventory[index].updated(changes)
            inventory = list(self.inventory)
            inventory[index] = updated
            self.inventory = inventory

            with self._reconcile(MSG_UPDATE_ITEM_FAILED):
                self.store.update('inventory', item_id, changes)
            return updated

    def adjust_stock(self, item_id, quantity):
        """Set an absolute stock quantity (quick stock adjustment)"""
        try:
            quantity = to_int(quantity, 'quantity')
        except ValidationError:
            raise ValidationError(MSG_INVALID_QUANTITY)
        if quantity < 0 or quantity > MAX_STOCK:
            raise ValidationError(MSG_INVALID_QUANTITY)
        return self.update_item(item_id, {'quantity': quantity})

    def delete_item(self, item_id):
        with self._lock:
            self.ensure_loaded()
            item = self.get_item(item_id)
            self.inventory = [i for i in self.inventory if i.id != item_id]

            with self._reconcile(MSG_DELETE_ITEM_FAILED):
                self.store.delete('inventory', item_id)
            logger.info(f"Inventory item deleted: {item.name} ({item.id})")
            return item

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def complete_sale(self, items):
        """
        Record a sale and decrement stock for every line

        Args:
            items: List of SaleItem (prices captured at sale time)

        Returns:
            SaleRecord: The recorded sale
        """
        with self._lock:
            self.ensure_loaded()
            items = list(items)
            timestamp = now()
            sale = SaleRecord.create(items, timestamp=timestamp)

            # Stock levels before the optimistic decrement
            before = {item.id: item.quantity for item in self.inventory}

            inventory = list(self.inventory)
            for line in items:
                for index, product in enumerate(inventory):
                    if product.id == line.item_id:
                        inventory[index] = product.updated({
                            'quantity': product.quantity - line.quantity,
                            'last_updated': timestamp,
                        })
                        break
            self.inventory = inventory
            self.sales = [sale] + self.sales

            with self._reconcile(MSG_SALE_FAILED):
                self.store.insert('sales', sale.to_row())

                # Not atomic: each decrement is its own write
                for line in items:
                    if line.item_id in before:
                        self.store.update('inventory', line.item_id, {
                            'quantity': before[line.item_id] - line.quantity,
                            'last_updated': timestamp,
                        })

            logger.info(
                f"Sale {sale.id} recorded: {len(items)} lines, "
                f"total {sale.total_amount}, profit {sale.total_profit}"
            )
            return sale

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def add_expense(self, fields):
        with self._lock:
            self.ensure_loaded()
            expense = ExpenseRecord.create(fields)
            self.expenses = [expense] + self.expenses

            with self._reconcile(MSG_ADD_EXPENSE_FAILED):
                self.store.insert('expenses', expense.to_row())
            logger.info(f"Expense recorded: {expense.description} ({expense.amount})")
            return expense


def get_shop_state():
    """
    Get the shop state of the current application, loading it on first use
    """
    state = current_app.extensions.get('shop_state')
    if state is None:
        state = ShopState(
            store=TableStore(),
            default_low_stock_threshold=current_app.config.get('DEFAULT_LOW_STOCK_THRESHOLD', 5),
            max_age=current_app.config.get('SNAPSHOT_MAX_AGE')
        )
        current_app.extensions['shop_state'] = state
    state.ensure_loaded()
    return state
