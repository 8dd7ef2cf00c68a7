"""
=======================================
ODBC backend driver (pyodbc).
=======================================

ODBCConnection wraps a pyodbc connection; ODBCAdapter executes builder
statements on it. pyodbc binds ``?`` markers natively, so statements are
executed without any placeholder rewrite. Row limits use ``SELECT TOP n``.

Example:
    >>> import pyodbc
    >>> from drivers.odbc import ODBCAdapter, ODBCConnection
    >>>
    >>> connection = ODBCConnection(pyodbc.connect('DSN=Warehouse;UID=app;PWD=secret'))
    >>> ODBCAdapter(connection).execute_raw('SELECT TOP 1 id FROM orders')
"""

import logging
from typing import Any, List, Optional, Sequence

import pyodbc

from drivers.base import (
    DatabaseConnectionError,
    PreparedStatement,
    drain_result_sets,
    handle_execution_error,
)
from sql.dialects import ODBC, Dialect
from sql.placeholders import coerce_parameters, rewrite_placeholders
from sql.statement import QueryType

logger = logging.getLogger(__name__)


class ODBCConnection:
    """Connection facade over a pyodbc connection."""

    def __init__(self, handle: Optional[pyodbc.Connection]):
        self.handle = handle

    @property
    def closed(self) -> bool:
        return self.handle is None or getattr(self.handle, 'closed', False)

    def cursor(self):
        return self.handle.cursor()

    def is_alive(self) -> bool:
        """ODBC offers no portable ping; a present, open handle counts as alive."""
        return not self.closed

    def set_auto_commit(self, enabled: bool) -> bool:
        try:
            self.handle.autocommit = enabled
            return True
        except pyodbc.Error as e:
            logger.error(f"Failed to set ODBC autocommit={enabled}: {e}")
            return False

    def commit(self) -> bool:
        try:
            self.handle.commit()
            return True
        except pyodbc.Error as e:
            logger.error(f"ODBC commit failed: {e}")
            return False

    def rollback(self) -> bool:
        try:
            self.handle.rollback()
            return True
        except pyodbc.Error as e:
            logger.error(f"ODBC rollback failed: {e}")
            return False

    def close(self) -> bool:
        self.handle.close()
        self.handle = None
        return not self.is_alive()


class ODBCAdapter:
    """Backend adapter for ODBC data sources through pyodbc."""

    def __init__(self, connection: ODBCConnection, dialect: Dialect = ODBC):
        self.connection = connection
        self.dialect = dialect

    def prepare(self, text: str, parameters: Optional[Sequence[Any]] = None) -> PreparedStatement:
        """
        Bind ``parameters`` to a cursor.

        Raises:
            DatabaseConnectionError: If the connection is closed
        """
        if self.connection.closed:
            raise DatabaseConnectionError("ODBC connection is closed")

        params = coerce_parameters(parameters)
        if params and self.dialect.needs_rewrite:
            text = rewrite_placeholders(text, self.dialect.placeholder_style)
        return PreparedStatement(self.connection.cursor(), text, params)

    def execute_raw(
        self,
        text: str,
        parameters: Optional[Sequence[Any]] = None,
        kind: Optional[QueryType] = None
    ) -> List[Any]:
        """
        Execute a statement and return its raw rows.

        Additional result sets (procedures) are drained with nextset() and
        returned as a list of row lists in execution order.

        Raises:
            DatabaseConnectionError: If the connection is closed or died
        """
        prepared = self.prepare(text, parameters)
        try:
            prepared.execute()
            return drain_result_sets(prepared.cursor)
        except pyodbc.Error as e:
            handle_execution_error('ODBC', e, prepared, self.ping())
            return []
        finally:
            if not self.connection.closed:
                prepared.close()

    def ping(self) -> bool:
        return self.connection.is_alive()

    def set_auto_commit(self, enabled: bool) -> bool:
        return self.connection.set_auto_commit(enabled)

    def commit(self) -> bool:
        return self.connection.commit()

    def rollback(self) -> bool:
        return self.connection.rollback()

    def close(self) -> bool:
        """Close the connection. Returns False if it was already closed."""
        if not self.ping():
            return False
        return self.connection.close()
