"""
Hosted Database Client
Generic select/insert/update/delete calls against the shop tables.
Rows go in and come out as plain dicts keyed by column name.
"""

import logging

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from shopdesk.exceptions import StoreError
from shopdesk.models import db, Inventory, Sale, Expense

logger = logging.getLogger(__name__)

# Errors a driver can raise while binding values, outside SQLAlchemyError
WRITE_ERRORS = (SQLAlchemyError, OverflowError, TypeError, ValueError)

# Table name -> model
TABLES = {
    'inventory': Inventory,
    'sales': Sale,
    'expenses': Expense,
}


def row_to_dict(model, instance):
    """Column values of a model instance as a dict"""
    return {attr.key: getattr(instance, attr.key) for attr in sa.inspect(model).column_attrs}


class TableStore:
    """Thin table client over the Flask-SQLAlchemy session"""

    def __init__(self, tables=None):
        self.tables = tables or TABLES

    @property
    def session(self):
        return db.session

    def _model(self, table):
        try:
            return self.tables[table]
        except KeyError:
            raise StoreError(table, 'lookup', f'Unknown table: {table}')

    def _fail(self, table, operation, error):
        self.session.rollback()
        logger.error(f"Store {operation} on {table} failed: {error}")
        return StoreError(table, operation)

    def select(self, table, order_by=None, ascending=True):
        """
        Fetch all rows of a table

        Args:
            table: Table name
            order_by: Optional column name to sort by
            ascending: Sort direction

        Returns:
            list: Row dicts
        """
        model = self._model(table)
        query = sa.select(model)
        if order_by:
            column = getattr(model, order_by)
            query = query.order_by(column.asc() if ascending else column.desc())
        try:
            rows = self.session.execute(query).scalars().all()
            return [row_to_dict(model, row) for row in rows]
        except SQLAlchemyError as e:
            raise self._fail(table, 'select', e) from e

    def insert(self, table, rows):
        """Insert one row dict or a list of row dicts"""
        model = self._model(table)
        if isinstance(rows, dict):
            rows = [rows]
        try:
            self.session.add_all([model(**row) for row in rows])
            self.session.commit()
        except WRITE_ERRORS as e:
            raise self._fail(table, 'insert', e) from e
        return len(rows)

    def update(self, table, row_id, values):
        """
        Update columns of the row with the given id

        Returns:
            int: Number of rows matched
        """
        model = self._model(table)
        try:
            result = self.session.execute(
                sa.update(model).where(model.id == row_id).values(**values)
            )
            self.session.commit()
        except WRITE_ERRORS as e:
            raise self._fail(table, 'update', e) from e
        return result.rowcount

    def delete(self, table, row_id):
        """Delete the row with the given id, returns rows matched"""
        model = self._model(table)
        try:
            result = self.session.execute(sa.delete(model).where(model.id == row_id))
            self.session.commit()
        except WRITE_ERRORS as e:
            raise self._fail(table, 'delete', e) from e
        return result.rowcount

    def ping(self):
        """Check whether the database answers"""
        try:
            self.session.execute(sa.text('SELECT 1'))
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.debug(f"Database unreachable: {e}")
            return False
