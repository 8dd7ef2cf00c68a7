"""
Shared fixtures and mocking helpers for drivers/ tests.

Key fixtures:
- cursor_factory: builds FakeCursor instances serving canned result sets.

FakeCursor follows the DB-API surface the adapters use: execute(),
description, fetchall(), nextset() and close().
"""

import pytest


class FakeCursor:
    """
    Mock DB-API cursor serving a queue of result sets.

    Each entry of ``result_sets`` is either ``(columns, rows)`` for a
    row-bearing result or None for a result without columns (DML, procedure
    status). Rows are tuples, as DB-API drivers return them.

    Attributes:
        executed: List of (sql, params) tuples in call order
        closed: True once close() was called
        fail_on: Substring of SQL that triggers ``error``
        error: Exception raised when a statement matches ``fail_on``

    Example:
        >>> cursor = FakeCursor([(['id'], [(1,), (2,)])])
        >>> cursor.execute("SELECT id FROM t")
        >>> cursor.fetchall()
        [(1,), (2,)]
    """
    def __init__(self, result_sets=None, fail_on=None, error=None):
        self.result_sets = list(result_sets or [])
        self.executed = []
        self.closed = False
        self.fail_on = fail_on
        self.error = error
        self._index = 0

    def execute(self, sql_text, params=None):
        self.executed.append((sql_text, params))
        if self.error is not None and (self.fail_on is None or self.fail_on in sql_text):
            raise self.error

    @property
    def description(self):
        if self._index >= len(self.result_sets) or self.result_sets[self._index] is None:
            return None
        columns, _ = self.result_sets[self._index]
        return [(name, None, None, None, None, None, None) for name in columns]

    def fetchall(self):
        if self.description is None:
            return []
        return list(self.result_sets[self._index][1])

    def nextset(self):
        self._index += 1
        if self._index < len(self.result_sets):
            return True
        return None

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


@pytest.fixture
def cursor_factory():
    """Factory building FakeCursor instances."""
    def factory(result_sets=None, **kwargs):
        return FakeCursor(result_sets, **kwargs)
    return factory
