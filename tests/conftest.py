"""
Shared pytest configuration and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'sql', 'drivers', 'utils' without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from sql.dialects import MYSQL  # noqa: E402
from sql.statement import StatementBuilder  # noqa: E402


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")


class FakeAdapter:
    """
    Backend adapter double for StatementBuilder tests.

    Records every execute_raw call and answers with queued raw results
    (a flat row list or a list of row lists).

    Attributes:
        dialect: Dialect the builder renders fragments with
        calls: List of (text, parameters, kind) tuples
        responses: Raw results returned in order; [] once exhausted
    """
    def __init__(self, dialect=MYSQL, responses=None, alive=True):
        self.dialect = dialect
        self.calls = []
        self.responses = list(responses or [])
        self.alive = alive
        self.autocommit = None
        self.closed = False
        self.commits = 0
        self.rollbacks = 0

    def prepare(self, text, parameters=None):
        return text, list(parameters or [])

    def execute_raw(self, text, parameters=None, kind=None):
        self.calls.append((text, list(parameters or []), kind))
        if self.responses:
            return self.responses.pop(0)
        return []

    def ping(self):
        return self.alive

    def set_auto_commit(self, enabled):
        self.autocommit = enabled
        return True

    def commit(self):
        self.commits += 1
        return True

    def rollback(self):
        self.rollbacks += 1
        return True

    def close(self):
        if not self.alive:
            return False
        self.closed = True
        self.alive = False
        return True


@pytest.fixture
def adapter_factory():
    """Factory building FakeAdapter instances."""
    def factory(**kwargs):
        return FakeAdapter(**kwargs)
    return factory


@pytest.fixture
def builder_factory():
    """
    Factory returning (StatementBuilder, FakeAdapter) pairs.

    Example:
        builder, adapter = builder_factory(responses=[[{'id': 1}]])
    """
    def factory(**kwargs):
        adapter = FakeAdapter(**kwargs)
        return StatementBuilder(adapter), adapter
    return factory
