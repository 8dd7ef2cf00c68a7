"""
===========================
Fluent statement builder.
===========================

StatementBuilder assembles one SQL statement at a time through chained
calls and executes it through an injected backend adapter. Every chainable
verb returns the builder itself:

    >>> builder = StatementBuilder(MySQLAdapter(connection))
    >>> builder \\
    ...     .select(['Id', 'FirstName', 'LastName'], 'Id') \\
    ...     .from_('Customers') \\
    ...     .where('FirstName = ? AND DoB <= ?') \\
    ...     .vars('John', 2004) \\
    ...     .query()
    >>> customers = builder.get_results()   # {17: {'Id': 17, ...}, ...}

Lifecycle:
    The builder owns a single mutable statement (text, parameters, primary
    key, kind). select/insert/call/update/delete start a new statement by
    resetting it; terminal verbs (query, query_one, query_many,
    query_object) execute it, store the outcome for one destructive read
    and reset it. A builder is meant for one sequential unit of work and is
    not safe to share between threads.

Parameters:
    vars() replaces the parameter list; each execution binds exactly one
    fresh set. Values are bound by inferred type (see sql.placeholders).
"""

import logging
from enum import Enum
from types import SimpleNamespace
from typing import Any, Callable, List, Optional, Protocol, Sequence, Union, runtime_checkable

from sql.dialects import Dialect
from sql.results import RawRow, Results, is_multi_set, materialize_sets, slice_results

logger = logging.getLogger(__name__)


class QueryType(Enum):
    """Kind of top-level statement being assembled."""

    SELECT = 'SELECT'
    INSERT = 'INSERT'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'
    PROCEDURE = 'PROCEDURE'


@runtime_checkable
class BackendAdapter(Protocol):
    """Capabilities the builder needs from a database backend."""

    dialect: Dialect

    def prepare(self, text: str, parameters: Optional[Sequence[Any]] = None) -> Any: ...

    def execute_raw(
        self,
        text: str,
        parameters: Optional[Sequence[Any]] = None,
        kind: Optional[QueryType] = None
    ) -> list: ...

    def ping(self) -> bool: ...

    def set_auto_commit(self, enabled: bool) -> bool: ...

    def commit(self) -> bool: ...

    def rollback(self) -> bool: ...

    def close(self) -> bool: ...


class StatementBuilder:
    """Single-owner fluent builder executing through a backend adapter.

    Attributes:
        adapter: Backend adapter statements execute through
        text: Statement text assembled so far
        parameters: Values bound at execution
        primary_key: Column keying materialized results, if any
        kind: Kind of the statement in progress
    """

    def __init__(self, adapter: BackendAdapter):
        self.adapter = adapter
        self.text = ''
        self.parameters: List[Any] = []
        self.primary_key: Optional[str] = None
        self.kind: Optional[QueryType] = None
        self._results: Results = []

    @property
    def dialect(self) -> Dialect:
        return self.adapter.dialect

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Empty the statement. Does nothing when it is already empty."""
        if not self.text and not self.parameters and self.primary_key is None and self.kind is None:
            return

        self.text = ''
        self.parameters = []
        self.primary_key = None
        self.kind = None

    def _start(self, kind: QueryType, text: str, primary_key: Optional[str] = None) -> 'StatementBuilder':
        self.reset()
        self.kind = kind
        self.text = text
        self.primary_key = primary_key or None
        return self

    # ------------------------------------------------------------------
    # Identifier quoting
    # ------------------------------------------------------------------

    def quote_identifier(self, word: str) -> str:
        """Quote ``word`` if it is reserved in the adapter's dialect."""
        return self.dialect.quote_identifier(word)

    def cols(self, columns: Sequence[str]) -> List[str]:
        """Quote every reserved column name in ``columns``."""
        return self.dialect.quote_identifiers(columns)

    def _column_list(self, columns: Union[Sequence[str], str]) -> str:
        if isinstance(columns, str):
            columns = [columns]
        return ','.join(self.cols(columns))

    # ------------------------------------------------------------------
    # Top-level verbs
    # ------------------------------------------------------------------

    def select(self, columns: Union[Sequence[str], str], primary_key: Optional[str] = None) -> 'StatementBuilder':
        """Start a SELECT of ``columns``, optionally keying results by ``primary_key``."""
        return self._start(QueryType.SELECT, f'SELECT {self._column_list(columns)}', primary_key)

    def insert(self, columns: Sequence[str], table: str) -> 'StatementBuilder':
        """Start an INSERT of one row into ``table``.

        The value group is rendered by the dialect with one marker per column.
        """
        text = (
            f'INSERT INTO {self.quote_identifier(table)} '
            f'({self._column_list(columns)}) VALUES {self.dialect.value_group(len(columns))}'
        )
        return self._start(QueryType.INSERT, text)

    def call(self, procedure: str, primary_key: Optional[str] = None) -> 'StatementBuilder':
        """Start a stored procedure call, e.g. ``call('monthly_totals(?)')``."""
        return self._start(QueryType.PROCEDURE, f'CALL {procedure};', primary_key)

    def update(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> 'StatementBuilder':
        """Start ``UPDATE table SET c1 = ?, ...`` and bind ``values``.

        A following where() with its own markers needs a vars() call carrying
        both the column values and the filter values, since vars() replaces.
        """
        assignments = ', '.join(f'{column} = ?' for column in self.cols(columns))
        self._start(QueryType.UPDATE, f'UPDATE {self.quote_identifier(table)} SET {assignments}')
        return self.vars(*values)

    def delete(self, table: str) -> 'StatementBuilder':
        return self._start(QueryType.DELETE, f'DELETE FROM {self.quote_identifier(table)}')

    # ------------------------------------------------------------------
    # Clauses
    # ------------------------------------------------------------------

    def from_(self, table: str) -> 'StatementBuilder':
        self.text += f' FROM {self.quote_identifier(table)}'
        return self

    def where(self, condition: str) -> 'StatementBuilder':
        """Append a raw WHERE condition. The fragment is trusted as-is."""
        self.text += f' WHERE {condition}'
        return self

    def order(self, order_by: str) -> 'StatementBuilder':
        self.text += f' ORDER BY {order_by}'
        return self

    def limit(self, size: Optional[int] = None) -> 'StatementBuilder':
        """Limit the row count; without ``size`` a marker is bound via vars()."""
        self.text = self.dialect.apply_limit(self.text, size)
        return self

    def offset(self, start: Optional[int] = None) -> 'StatementBuilder':
        """Skip rows; without ``start`` a marker is bound via vars()."""
        self.text = self.dialect.apply_offset(self.text, start)
        return self

    def vars(self, *values: Any) -> 'StatementBuilder':
        """Replace the parameter list with ``values``."""
        self.parameters = list(values)
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def query_raw(self, text: str, parameters: Optional[Sequence[Any]] = None) -> Results:
        """
        Execute ``text`` and materialize its rows with the current primary key.

        Usable directly for hand-written statements. Does not reset.
        """
        raw = self.adapter.execute_raw(text, list(parameters or []), self.kind)
        return materialize_sets(raw, self.primary_key)

    def _run(self, shape: Callable[[Results], Results]) -> 'StatementBuilder':
        kind = self.kind.value if self.kind else 'RAW'
        self.set_results([])
        try:
            results = self.query_raw(self.text, self.parameters)
            self.set_results(shape(results))
            logger.debug(f"{kind} stored {len(self._results)} result entries")
        finally:
            self.reset()
        return self

    def query(self) -> 'StatementBuilder':
        """Execute the statement and store every result."""
        return self._run(lambda results: results)

    def query_one(self) -> 'StatementBuilder':
        """Execute the statement and store only the first entry, key preserved."""
        return self._run(lambda results: slice_results(results, 0, 1))

    def query_many(self, limit: int, offset: int = 0) -> 'StatementBuilder':
        """Execute the statement and store entries ``[offset, offset + limit)``."""
        return self._run(lambda results: slice_results(results, offset, limit))

    def query_object(self, model: Optional[Callable[..., Any]] = None) -> Any:
        """
        Execute the statement and map its first row into ``model``.

        Args:
            model: Callable receiving the row's columns as keyword arguments
                (a class, dataclass, ...). Defaults to SimpleNamespace.

        Returns:
            The mapped object, or None when the statement returned no row.
            Results are not keyed and nothing is stored for get_results().
        """
        self.set_results([])
        try:
            raw = self.adapter.execute_raw(self.text, list(self.parameters), self.kind)
        finally:
            self.reset()

        row = _first_row(raw)
        if row is None:
            return None
        return (model or SimpleNamespace)(**row)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def set_results(self, results: Results) -> None:
        self._results = results

    def get_results(self) -> Results:
        """Return the stored results and clear them."""
        results = self._results
        self._results = []
        return results

    def get_result(self, key: Any) -> RawRow:
        """Return the stored entry under ``key`` and clear all results.

        Returns an empty dict when ``key`` is absent.
        """
        results = self.get_results()

        if isinstance(results, dict):
            return results.get(key, {})
        if isinstance(key, int) and 0 <= key < len(results):
            return results[key]
        return {}

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        return self.adapter.ping()

    def set_auto_commit(self, enabled: bool) -> bool:
        return self.adapter.set_auto_commit(enabled)

    def commit(self) -> bool:
        return self.adapter.commit()

    def rollback(self) -> bool:
        return self.adapter.rollback()

    def close(self) -> bool:
        return self.adapter.close()


def _first_row(raw: list) -> Optional[RawRow]:
    if is_multi_set(raw):
        raw = next((rows for rows in raw if rows), [])
    return raw[0] if raw else None
