"""
=======================================
MySQL backend driver (pymysql).
=======================================

MySQLConnection wraps a pymysql connection; MySQLAdapter executes builder
statements on it.

pymysql binds parameters client-side with pyformat ``%s`` markers, so the
adapter rewrites generic ``?`` markers (and doubles literal ``%``) whenever
parameters are present. Stored procedures that return several result sets
are drained in order with ``cursor.nextset()``; the trailing status result
MySQL sends after a CALL carries no columns and is skipped.

Example:
    >>> import pymysql
    >>> from drivers.mysql import MySQLAdapter, MySQLConnection
    >>>
    >>> connection = MySQLConnection(pymysql.connect(host='localhost', user='app', database='shop'))
    >>> adapter = MySQLAdapter(connection)
    >>> adapter.execute_raw('SELECT Id FROM Customers WHERE Id = ?', [17])
    [{'Id': 17}]
"""

import logging
from typing import Any, List, Optional, Sequence

import pymysql

from drivers.base import (
    DatabaseConnectionError,
    PreparedStatement,
    drain_result_sets,
    handle_execution_error,
)
from sql.dialects import MYSQL, Dialect
from sql.placeholders import coerce_parameters, rewrite_placeholders
from sql.statement import QueryType

logger = logging.getLogger(__name__)


class MySQLConnection:
    """Connection facade over a pymysql connection.

    Attributes:
        handle: The pymysql connection object
    """

    def __init__(self, handle: pymysql.connections.Connection):
        self.handle = handle

    @property
    def closed(self) -> bool:
        return not self.handle.open

    def cursor(self):
        return self.handle.cursor()

    def is_alive(self) -> bool:
        """Ping the server without reconnecting."""
        try:
            self.handle.ping(reconnect=False)
            return True
        except pymysql.MySQLError as e:
            logger.debug(f"MySQL ping failed: {e}")
            return False

    def set_auto_commit(self, enabled: bool) -> bool:
        try:
            self.handle.autocommit(enabled)
            return True
        except pymysql.MySQLError as e:
            logger.error(f"Failed to set MySQL autocommit={enabled}: {e}")
            return False

    def commit(self) -> bool:
        try:
            self.handle.commit()
            return True
        except pymysql.MySQLError as e:
            logger.error(f"MySQL commit failed: {e}")
            return False

    def rollback(self) -> bool:
        try:
            self.handle.rollback()
            return True
        except pymysql.MySQLError as e:
            logger.error(f"MySQL rollback failed: {e}")
            return False

    def close(self) -> bool:
        self.handle.close()
        return True


class MySQLAdapter:
    """Backend adapter for MySQL through pymysql."""

    def __init__(self, connection: MySQLConnection, dialect: Dialect = MYSQL):
        self.connection = connection
        self.dialect = dialect

    def prepare(self, text: str, parameters: Optional[Sequence[Any]] = None) -> PreparedStatement:
        """
        Bind ``parameters`` to a cursor with driver-ready text.

        Raises:
            DatabaseConnectionError: If the connection is closed
        """
        if self.connection.closed:
            raise DatabaseConnectionError("MySQL connection is closed")

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

        Returns:
            A flat row list, a list of row lists when a procedure produced
            several row-bearing result sets, or an empty list when nothing
            row-bearing came back or MySQL rejected the statement.

        Raises:
            DatabaseConnectionError: If the connection is closed or died
        """
        prepared = self.prepare(text, parameters)
        try:
            prepared.execute()
            return drain_result_sets(prepared.cursor)
        except pymysql.MySQLError as e:
            handle_execution_error('MySQL', e, prepared, self.ping())
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
        """Close the connection. Returns False if it was already dead."""
        if not self.ping():
            return False
        return self.connection.close()
