"""
Application Exceptions
Errors raised by the store, the shop state and the POS cart
"""


class ValidationError(ValueError):
    """Invalid user input; the message is safe to show to the user"""


class CartError(ValidationError):
    """A cart change was rejected (bad quantity or not enough stock)"""


class StoreError(Exception):
    """
    A hosted database call failed.

    Args:
        table: Table the call was made against
        operation: select, insert, update or delete
        message: User-facing message (set by the shop state)
    """

    def __init__(self, table, operation, message=None):
        self.table = table
        self.operation = operation
        self.message = message or f'Database {operation} on {table} failed'
        super().__init__(self.message)


class InsightsError(Exception):
    """The generative-AI request failed or returned nothing usable"""


class NotFoundError(LookupError):
    """No record with the requested id exists in the snapshot"""
