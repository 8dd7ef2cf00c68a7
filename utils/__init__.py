"""
==========================
Utility Functions Package.
==========================

Connection factories that turn configuration into ready-to-use builders.

Modules:
    database_utils: Backend connection factories, availability checks and
        wait-with-retry
"""

__version__ = "0.1.0"
__all__ = [
    'DatabaseConnectionError',
    'check_database_available',
    'connect',
    'make_adapter',
    'open_connection',
    'open_mysql',
    'open_odbc',
    'open_postgres',
    'wait_for_database',
]

from .database_utils import (
    DatabaseConnectionError,
    check_database_available,
    connect,
    make_adapter,
    open_connection,
    open_mysql,
    open_odbc,
    open_postgres,
    wait_for_database,
)
