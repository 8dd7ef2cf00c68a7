"""
=========================================
SQL assembly package for DataMage.
=========================================

Backend-independent half of the query engine: statement assembly,
placeholder rewriting, dialect fragments and result shaping. Nothing in this
package talks to a database; execution goes through an adapter from the
drivers package.

The package follows a clear organization:
    - placeholders.py: quote-aware '?' rewriting and the binding type rule
    - dialects.py: per-backend reserved words, pagination and value groups
    - results.py: keyed/unkeyed materialization and key-preserving slices
    - statement.py: the fluent StatementBuilder and the adapter protocol

Example:
    >>> from drivers.postgres import PostgresAdapter
    >>> from sql import StatementBuilder
    >>>
    >>> builder = StatementBuilder(PostgresAdapter(connection))
    >>> builder.select(['id', 'name'], 'id').from_('users').where('id = ?').vars(7).query()
    >>> builder.get_result(7)
"""

__version__ = "0.1.0"
__all__ = [
    'StatementBuilder', 'BackendAdapter', 'QueryType',
    'Dialect', 'PaginationStyle', 'UnsupportedClauseError', 'MYSQL', 'ODBC', 'POSTGRES',
    'PlaceholderStyle', 'rewrite_placeholders', 'coerce_parameters', 'infer_param_type',
    'materialize', 'materialize_sets', 'slice_results',
]

from .dialects import MYSQL, ODBC, POSTGRES, Dialect, PaginationStyle, UnsupportedClauseError
from .placeholders import (
    PlaceholderStyle,
    coerce_parameters,
    infer_param_type,
    rewrite_placeholders,
)
from .results import materialize, materialize_sets, slice_results
from .statement import BackendAdapter, QueryType, StatementBuilder
