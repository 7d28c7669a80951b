"""
Point of Sale Cart
Lines captured at the price and cost of the moment they were added
"""

from decimal import Decimal

from shopdesk.exceptions import CartError
from shopdesk.records import SaleItem
from shopdesk.utils.helpers import money, to_int

SESSION_KEY = 'pos_cart'


class Cart:
    """Sale lines being assembled at the terminal"""

    def __init__(self, lines=None):
        self.lines = list(lines or [])

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    @property
    def is_empty(self):
        return not self.lines

    @property
    def total(self):
        return sum((line.line_total for line in self.lines), Decimal('0'))

    def quantity_of(self, item_id):
        """Units of an item already in the cart"""
        return sum(line.quantity for line in self.lines if line.item_id == item_id)

    def add(self, product, quantity):
        """
        Add units of an inventory item, merging with an existing line

        Args:
            product: InventoryItem being sold
            quantity: Units to add

        Returns:
            SaleItem: The new or merged line

        Raises:
            CartError: if the quantity is not positive or exceeds stock
        """
        quantity = to_int(quantity, 'quantity')
        if quantity <= 0:
            raise CartError('Quantity must be greater than 0')
        if quantity > product.quantity:
            raise CartError(f'Not enough stock. Only {product.quantity} available.')

        for line in self.lines:
            if line.item_id == product.id:
                if line.quantity + quantity > product.quantity:
                    raise CartError(
                        f'Cannot add more. Total in cart would exceed stock ({product.quantity}).'
                    )
                line.quantity += quantity
                return line

        line = SaleItem(
            item_id=product.id,
            name=product.name,
            quantity=quantity,
            price_at_sale=product.sales_price,
            cost_at_sale=product.cost_price,
        )
        self.lines.append(line)
        return line

    def remove(self, index):
        """Remove the line at a position"""
        if index < 0 or index >= len(self.lines):
            raise CartError(f'No cart line at position {index}')
        return self.lines.pop(index)

    def clear(self):
        self.lines = []

    # Session persistence

    @classmethod
    def from_session(cls, session):
        return cls(SaleItem.from_dict(data) for data in session.get(SESSION_KEY, []))

    def save(self, session):
        session[SESSION_KEY] = [line.to_dict() for line in self.lines]
        session.modified = True

    def to_dict(self):
        return {
            'items': [line.to_dict() for line in self.lines],
            'count': len(self.lines),
            'total': money(self.total),
        }
