"""
==========================================
Shared DB-API plumbing for backend drivers.
==========================================

Helpers every backend adapter composes: the prepared-statement handle that
carries a cursor with its rewritten text and coerced parameters, row
extraction from DB-API cursors, draining of multiple result sets and the
common reaction to a failed execution.

Error taxonomy:
    DatabaseConnectionError: the connection is absent or dead. Raised.
    Execution errors: the backend rejected the statement on a live
        connection. Logged and surfaced as an empty result.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from sql.placeholders import bind_signature
from sql.results import RawRow

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when the database connection is absent or dead."""
    pass


@dataclass
class PreparedStatement:
    """A cursor bound to driver-ready statement text and parameters.

    Attributes:
        cursor: DB-API cursor the statement runs on
        text: Statement text in the driver's marker syntax
        parameters: Coerced parameter values
    """

    cursor: Any
    text: str
    parameters: List[Any] = field(default_factory=list)

    @property
    def signature(self) -> str:
        return bind_signature(self.parameters)

    def execute(self) -> None:
        logger.debug(f"Executing: {self.text} [{self.signature}]")
        if self.parameters:
            self.cursor.execute(self.text, self.parameters)
        else:
            self.cursor.execute(self.text)

    def close(self) -> None:
        self.cursor.close()


def rows_from_cursor(cursor: Any) -> List[RawRow]:
    """
    Fetch the current result set of a cursor as a list of dicts.

    Returns:
        Rows keyed by column name in column order; an empty list when the
        current result has no columns (DML, procedure status results).
    """
    if cursor.description is None:
        return []

    columns = [column[0] for column in cursor.description]
    return [
        row if isinstance(row, dict) else dict(zip(columns, row))
        for row in cursor.fetchall()
    ]


def drain_result_sets(cursor: Any, has_more: Optional[Callable[[], Any]] = None) -> list:
    """
    Collect every row-bearing result set a statement produced.

    Args:
        cursor: Cursor that has just executed the statement
        has_more: Callable advancing to the next result set, returning a
            truthy value when one exists (defaults to ``cursor.nextset``)

    Returns:
        The rows of the single row-bearing set as a flat list, or a list of
        row lists, in execution order, when there is more than one.
    """
    advance = has_more or cursor.nextset
    sets = []

    while True:
        if cursor.description is not None:
            sets.append(rows_from_cursor(cursor))
        if not advance():
            break

    if not sets:
        return []
    if len(sets) == 1:
        return sets[0]
    return sets


def handle_execution_error(
    backend: str,
    exc: Exception,
    prepared: PreparedStatement,
    alive: bool
) -> None:
    """
    React to a driver error raised while executing a statement.

    Raises:
        DatabaseConnectionError: If the connection is no longer alive

    Otherwise the failure is logged and the caller returns an empty result.
    """
    if not alive:
        logger.error(f"{backend} connection lost while executing: {prepared.text}")
        raise DatabaseConnectionError(f"{backend} connection is not alive: {exc}") from exc

    logger.error(
        f"{backend} rejected statement: {exc} | "
        f"SQL: {prepared.text} [{prepared.signature}]"
    )
