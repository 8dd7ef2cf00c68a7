"""
==================================================
Connection factories for the supported backends.
==================================================

Opens DB-API connections, wraps them in the driver's connection facade and
wires a StatementBuilder to the matching adapter. Factories never terminate
the process on failure: each returns a ``(value, error)`` tuple where exactly
one side is None, and the caller decides whether to abort.

Connections are opened with autocommit enabled, matching the native
clients' defaults; call ``set_auto_commit(False)`` to manage transactions
explicitly.

Example:
    >>> from utils.database_utils import connect
    >>>
    >>> builder, error = connect()
    >>> if error:
    ...     raise SystemExit(error)
    >>> builder.select('*', 'id').from_('users').query()
"""

import time
from typing import Optional, Tuple

import psycopg2
import pymysql

from core.config import DatabaseConfig, config
from core.logger import get_logger
from drivers.base import DatabaseConnectionError
from drivers.mysql import MySQLAdapter, MySQLConnection
from drivers.postgres import PostgresAdapter, PostgresConnection
from sql.statement import StatementBuilder

logger = get_logger(__name__)

__all__ = [
    'DatabaseConnectionError',
    'open_mysql',
    'open_odbc',
    'open_postgres',
    'open_connection',
    'connect',
    'check_database_available',
    'make_adapter',
    'wait_for_database',
]


def open_mysql(
    host: str = 'localhost',
    port: int = 3306,
    user: str = '',
    password: str = '',
    database: str = ''
) -> Tuple[Optional[MySQLConnection], Optional[str]]:
    """
    Open a MySQL connection through pymysql.

    Returns:
        (MySQLConnection, None) on success, (None, message) on failure
    """
    try:
        handle = pymysql.connect(
            host=host,
            port=port,
            user=user,
            password=password,
            database=database or None,
            autocommit=True
        )
    except pymysql.MySQLError as e:
        message = f"MySQL connection to {host}:{port}/{database} failed: {e}"
        logger.error(message)
        return None, message

    logger.info(f"Connected to MySQL at {host}:{port}/{database}")
    return MySQLConnection(handle), None


def open_odbc(
    dsn: str,
    user: str = '',
    password: str = ''
):
    """
    Open an ODBC connection through pyodbc.

    Args:
        dsn: Data source name (``Warehouse``) or full connection string
            (``DRIVER={...};SERVER=...``)
        user: Username appended as UID when given
        password: Password appended as PWD when given

    Returns:
        (ODBCConnection, None) on success, (None, message) on failure
    """
    # pyodbc links against the unixODBC runtime; load it only for ODBC sources
    import pyodbc

    from drivers.odbc import ODBCConnection

    connection_string = dsn if '=' in dsn else f'DSN={dsn}'
    if user:
        connection_string += f';UID={user}'
    if password:
        connection_string += f';PWD={password}'

    try:
        handle = pyodbc.connect(connection_string, autocommit=True)
    except pyodbc.Error as e:
        message = f"ODBC connection to {dsn.split(';')[0]} failed: {e}"
        logger.error(message)
        return None, message

    logger.info(f"Connected to ODBC data source {dsn.split(';')[0]}")
    return ODBCConnection(handle), None


def open_postgres(
    host: str = 'localhost',
    port: int = 5432,
    user: str = '',
    password: str = '',
    database: str = '',
    schema: Optional[str] = None
) -> Tuple[Optional[PostgresConnection], Optional[str]]:
    """
    Open a PostgreSQL connection through psycopg2.

    Args:
        schema: Optional schema put on the search_path once connected

    Returns:
        (PostgresConnection, None) on success, (None, message) on failure
    """
    try:
        handle = psycopg2.connect(
            host=host,
            port=port,
            user=user,
            password=password,
            dbname=database
        )
    except psycopg2.Error as e:
        message = f"PostgreSQL connection to {host}:{port}/{database} failed: {e}"
        logger.error(message)
        return None, message

    try:
        handle.autocommit = True
        connection = PostgresConnection(handle, schema=schema)
    except psycopg2.Error as e:
        handle.close()
        message = f"PostgreSQL session setup on {host}:{port}/{database} failed: {e}"
        logger.error(message)
        return None, message

    logger.info(f"Connected to PostgreSQL at {host}:{port}/{database}")
    return connection, None


def open_connection(db_config: Optional[DatabaseConfig] = None):
    """
    Open the facade for a configured backend.

    Args:
        db_config: Settings to use (defaults to ``config.db``)

    Returns:
        (facade, None) on success, (None, message) on failure
    """
    db_config = db_config or config.db
    params = db_config.get_connection_params()
    logger.debug(f"Opening {db_config.driver} connection to {db_config.render_url()}")

    if db_config.driver == 'mysql':
        return open_mysql(**params)
    if db_config.driver == 'odbc':
        return open_odbc(**params)
    return open_postgres(**params)


def make_adapter(driver: str, connection):
    """Wrap an open connection facade in the adapter for ``driver``."""
    if driver == 'mysql':
        return MySQLAdapter(connection)
    if driver == 'postgres':
        return PostgresAdapter(connection)

    from drivers.odbc import ODBCAdapter
    return ODBCAdapter(connection)


def connect(db_config: Optional[DatabaseConfig] = None) -> Tuple[Optional[StatementBuilder], Optional[str]]:
    """
    Open a connection and return a StatementBuilder bound to it.

    Returns:
        (StatementBuilder, None) on success, (None, message) on failure

    Example:
        >>> builder, error = connect(DatabaseConfig(driver='postgres', database='shop'))
    """
    db_config = db_config or config.db
    connection, error = open_connection(db_config)
    if error:
        return None, error

    return StatementBuilder(make_adapter(db_config.driver, connection)), None


def check_database_available(db_config: Optional[DatabaseConfig] = None) -> bool:
    """
    Check whether the configured database accepts connections.

    Opens a connection and closes it again.

    Returns:
        True if database is available, False otherwise
    """
    connection, error = open_connection(db_config)
    if error:
        logger.debug(f"Database not available: {error}")
        return False

    connection.close()
    return True


def wait_for_database(
    db_config: Optional[DatabaseConfig] = None,
    max_retries: int = 10,
    retry_delay: int = 2
) -> bool:
    """
    Wait for the configured database to accept connections.

    Args:
        db_config: Settings to use (defaults to ``config.db``)
        max_retries: Maximum number of connection attempts
        retry_delay: Delay between attempts in seconds

    Returns:
        True once the database is available

    Raises:
        DatabaseConnectionError: If the database never becomes available

    Example:
        >>> wait_for_database(max_retries=5, retry_delay=3)
    """
    db_config = db_config or config.db
    target = db_config.render_url()

    logger.info(f"Waiting for {target}...")

    for attempt in range(1, max_retries + 1):
        if check_database_available(db_config):
            logger.info(f"Database is available (attempt {attempt}/{max_retries})")
            return True

        if attempt < max_retries:
            logger.warning(
                f"Database not available yet (attempt {attempt}/{max_retries}), "
                f"retrying in {retry_delay}s..."
            )
            time.sleep(retry_delay)

    error_msg = f"{target} did not become available after {max_retries} attempts"
    logger.error(error_msg)
    raise DatabaseConnectionError(error_msg)
