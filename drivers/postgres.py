"""
=======================================
PostgreSQL backend driver (psycopg2).
=======================================

PostgresConnection wraps a psycopg2 connection; PostgresAdapter executes
builder statements on it.

Parameter binding:
    PostgreSQL's native markers are ``$1, $2, ...``. psycopg2 cursors only
    understand pyformat, so statements with parameters are rewritten to
    ``$n`` markers and run as a server-side prepared statement:

        PREPARE datamage_stmt_3 AS SELECT * FROM t WHERE a = $1
        EXECUTE datamage_stmt_3 (%s)
        DEALLOCATE datamage_stmt_3

    The server infers every parameter type from its context. CALL is not a
    preparable statement, so procedure calls with parameters are rewritten to
    pyformat markers and executed directly.

Inserts:
    INSERT statements built by StatementBuilder get ``RETURNING *`` appended
    so the inserted row comes back as the result.

Example:
    >>> import psycopg2
    >>> from drivers.postgres import PostgresAdapter, PostgresConnection
    >>>
    >>> connection = PostgresConnection(psycopg2.connect(host='localhost', dbname='shop'))
    >>> PostgresAdapter(connection).execute_raw('SELECT id FROM users WHERE id = ?', [7])
    [{'id': 7}]
"""

import itertools
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import psycopg2
from psycopg2 import sql as pgsql
from psycopg2.extensions import TRANSACTION_STATUS_UNKNOWN

from drivers.base import (
    DatabaseConnectionError,
    PreparedStatement,
    handle_execution_error,
    rows_from_cursor,
)
from sql.dialects import POSTGRES, Dialect
from sql.placeholders import PlaceholderStyle, coerce_parameters, rewrite_placeholders
from sql.statement import QueryType

logger = logging.getLogger(__name__)

_CALL_STATEMENT = re.compile(r'^\s*CALL\b', re.IGNORECASE)
_RETURNING_CLAUSE = re.compile(r'\bRETURNING\b', re.IGNORECASE)


class PostgresConnection:
    """Connection facade over a psycopg2 connection.

    Attributes:
        handle: The psycopg2 connection object
        schema: search_path schema applied on construction, if any
    """

    def __init__(self, handle: psycopg2.extensions.connection, schema: Optional[str] = None):
        self.handle = handle
        self.schema = schema

        if schema:
            self.set_search_path(schema)

    @property
    def closed(self) -> bool:
        return self.handle.closed != 0

    def cursor(self):
        return self.handle.cursor()

    def set_search_path(self, schema: str) -> None:
        """Resolve unqualified table names against ``schema``."""
        with self.handle.cursor() as cursor:
            cursor.execute(pgsql.SQL("SET search_path TO {}").format(pgsql.Identifier(schema)))
        logger.debug(f"PostgreSQL search_path set to {schema}")

    def is_alive(self) -> bool:
        """True while the handle is open and libpq still trusts the link."""
        if self.closed:
            return False
        return self.handle.get_transaction_status() != TRANSACTION_STATUS_UNKNOWN

    def set_auto_commit(self, enabled: bool) -> bool:
        try:
            self.handle.autocommit = enabled
            return True
        except psycopg2.Error as e:
            logger.error(f"Failed to set PostgreSQL autocommit={enabled}: {e}")
            return False

    def commit(self) -> bool:
        try:
            self.handle.commit()
            return True
        except psycopg2.Error as e:
            logger.error(f"PostgreSQL commit failed: {e}")
            return False

    def rollback(self) -> bool:
        try:
            self.handle.rollback()
            return True
        except psycopg2.Error as e:
            logger.error(f"PostgreSQL rollback failed: {e}")
            return False

    def close(self) -> bool:
        self.handle.close()
        return self.closed


@dataclass
class ServerPreparedStatement(PreparedStatement):
    """Statement run through PREPARE / EXECUTE / DEALLOCATE."""

    name: str = ''
    _prepared: bool = False

    def execute(self) -> None:
        logger.debug(f"Preparing {self.name}: {self.text} [{self.signature}]")
        self.cursor.execute(f"PREPARE {self.name} AS {self.text}")
        self._prepared = True

        markers = ', '.join(['%s'] * len(self.parameters))
        self.cursor.execute(f"EXECUTE {self.name} ({markers})", self.parameters)

    def close(self) -> None:
        if self._prepared:
            try:
                self.cursor.execute(f"DEALLOCATE {self.name}")
            except psycopg2.Error as e:
                # Aborted transactions refuse every command until rollback.
                logger.debug(f"Could not deallocate {self.name}: {e}")
        self.cursor.close()


class PostgresAdapter:
    """Backend adapter for PostgreSQL through psycopg2."""

    def __init__(self, connection: PostgresConnection, dialect: Dialect = POSTGRES):
        self.connection = connection
        self.dialect = dialect
        # Unique per session; one adapter owns one connection
        self._statement_names = itertools.count(1)

    def prepare(self, text: str, parameters: Optional[Sequence[Any]] = None) -> PreparedStatement:
        """
        Bind ``parameters`` to a cursor.

        Returns:
            A plain statement when there is nothing to bind, a pyformat
            statement for CALL, otherwise a server-side prepared statement.

        Raises:
            DatabaseConnectionError: If the connection is closed
        """
        if self.connection.closed:
            raise DatabaseConnectionError("PostgreSQL connection is closed")

        params = coerce_parameters(parameters)
        cursor = self.connection.cursor()

        if not params:
            return PreparedStatement(cursor, text, params)

        if _CALL_STATEMENT.match(text):
            return PreparedStatement(cursor, rewrite_placeholders(text, PlaceholderStyle.FORMAT), params)

        return ServerPreparedStatement(
            cursor,
            rewrite_placeholders(text, self.dialect.placeholder_style),
            params,
            name=f"datamage_stmt_{next(self._statement_names)}"
        )

    def execute_raw(
        self,
        text: str,
        parameters: Optional[Sequence[Any]] = None,
        kind: Optional[QueryType] = None
    ) -> List[Any]:
        """
        Execute a statement and return its raw rows.

        psycopg2 exposes a single result set per execution, so the result is
        always a flat row list.

        Raises:
            DatabaseConnectionError: If the connection is closed or died
        """
        if kind is QueryType.INSERT and not _RETURNING_CLAUSE.search(text):
            text = text.rstrip().rstrip(';') + ' RETURNING *'

        prepared = self.prepare(text, parameters)
        try:
            prepared.execute()
            return rows_from_cursor(prepared.cursor)
        except psycopg2.Error as e:
            handle_execution_error('PostgreSQL', e, prepared, self.ping())
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
