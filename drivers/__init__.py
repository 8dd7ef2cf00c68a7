"""
==================================
Backend drivers for DataMage.
==================================

One module per database family. Each provides a connection facade wrapping
the DB-API handle (ping, autocommit, close) and an adapter that executes
StatementBuilder statements on it. Driver modules are imported explicitly so
only the client libraries actually in use get loaded.

Modules:
    base: Prepared statement handle, row extraction, error taxonomy
    mysql: pymysql-backed MySQLConnection / MySQLAdapter
    odbc: pyodbc-backed ODBCConnection / ODBCAdapter
    postgres: psycopg2-backed PostgresConnection / PostgresAdapter

Example:
    >>> from drivers.postgres import PostgresAdapter, PostgresConnection
"""

__version__ = "0.1.0"
__all__ = ['DatabaseConnectionError', 'PreparedStatement']

from .base import DatabaseConnectionError, PreparedStatement
