"""
==============================================
Pytest suite for drivers/odbc.py
==============================================

Sections:
---------
1. Unit tests - facade lifecycle, native ? binding, result sets
2. Integration tests - StatementBuilder over ODBCAdapter (TOP-N limits)
3. Edge case tests - rejected statements, closed handles

pyodbc needs the unixODBC runtime to import; the module is skipped where
it is missing.

How to Execute:
---------------
All tests:          python -m pytest tests/tests_drivers/test_odbc.py -v
"""

import pytest

pyodbc = pytest.importorskip('pyodbc')

from drivers.base import DatabaseConnectionError  # noqa: E402
from drivers.odbc import ODBCAdapter, ODBCConnection  # noqa: E402
from sql.dialects import UnsupportedClauseError  # noqa: E402
from sql.statement import BackendAdapter, StatementBuilder  # noqa: E402


class FakePyODBC:
    """Mock pyodbc connection."""
    def __init__(self, cursor=None):
        self.cursor_obj = cursor
        self.closed = False
        self.autocommit = True
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return self.cursor_obj

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


@pytest.fixture
def odbc_adapter(cursor_factory):
    """Factory returning (ODBCAdapter, FakePyODBC, FakeCursor)."""
    def factory(result_sets=None, **cursor_kwargs):
        cursor = cursor_factory(result_sets, **cursor_kwargs)
        handle = FakePyODBC(cursor)
        return ODBCAdapter(ODBCConnection(handle)), handle, cursor
    return factory


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_adapter_satisfies_protocol(odbc_adapter):
    adapter, _, _ = odbc_adapter()

    assert isinstance(adapter, BackendAdapter)


@pytest.mark.unit
def test_missing_handle_is_not_alive():
    adapter = ODBCAdapter(ODBCConnection(None))

    assert adapter.ping() is False
    assert adapter.close() is False


@pytest.mark.unit
def test_close_drops_handle(odbc_adapter):
    adapter, handle, _ = odbc_adapter()

    assert adapter.close() is True
    assert handle.closed is True
    assert adapter.connection.handle is None
    assert adapter.close() is False


@pytest.mark.unit
def test_transaction_control(odbc_adapter):
    adapter, handle, _ = odbc_adapter()

    assert adapter.set_auto_commit(False) is True
    assert adapter.commit() is True
    assert adapter.rollback() is True
    assert handle.autocommit is False
    assert (handle.commits, handle.rollbacks) == (1, 1)


@pytest.mark.unit
def test_prepare_keeps_question_marks(odbc_adapter):
    adapter, _, _ = odbc_adapter()

    prepared = adapter.prepare("SELECT * FROM t WHERE a = ? AND b LIKE '5%'", [True])

    assert prepared.text == "SELECT * FROM t WHERE a = ? AND b LIKE '5%'"
    assert prepared.parameters == [1]


@pytest.mark.unit
def test_execute_raw_multiple_sets(odbc_adapter):
    adapter, _, cursor = odbc_adapter([
        (['id'], [(1,)]),
        (['id'], [(2,), (3,)]),
    ])

    rows = adapter.execute_raw('{CALL two_sets(?)}', [9])

    assert rows == [[{'id': 1}], [{'id': 2}, {'id': 3}]]
    assert cursor.executed == [('{CALL two_sets(?)}', [9])]
    assert cursor.closed is True


# ======================
# 2. INTEGRATION TESTS
# ======================

@pytest.mark.integration
def test_builder_top_n_limit(odbc_adapter):
    adapter, _, cursor = odbc_adapter([(['id', 'user'], [(1, 'ann'), (2, 'bob')])])
    builder = StatementBuilder(adapter)

    builder.select(['id', 'user'], 'id').from_('accounts').limit(2).query()

    assert cursor.executed[0] == ('SELECT TOP 2 id,"user" FROM accounts', None)
    assert builder.get_result(2) == {'id': 2, 'user': 'bob'}


@pytest.mark.integration
def test_builder_placeholder_top(odbc_adapter):
    adapter, _, cursor = odbc_adapter([(['id'], [(1,)])])
    builder = StatementBuilder(adapter)

    builder.select('id').from_('accounts').where('active = ?').limit().vars(5, True).query()

    assert cursor.executed[0] == ('SELECT TOP (?) id FROM accounts WHERE active = ?', [5, 1])


@pytest.mark.edge_case
def test_builder_offset_unsupported(odbc_adapter):
    adapter, _, _ = odbc_adapter()
    builder = StatementBuilder(adapter)

    with pytest.raises(UnsupportedClauseError):
        builder.select('id').from_('accounts').limit(2).offset(4)


# =================
# 3. EDGE CASES
# =================

@pytest.mark.edge_case
def test_rejected_statement_returns_empty(odbc_adapter, caplog):
    adapter, _, cursor = odbc_adapter(error=pyodbc.ProgrammingError('42S02', 'Invalid object name'))

    assert adapter.execute_raw('SELECT * FROM missing') == []
    assert 'ODBC rejected statement' in caplog.text
    assert cursor.closed is True


@pytest.mark.edge_case
def test_closed_handle_raises(odbc_adapter):
    adapter, handle, _ = odbc_adapter()
    handle.closed = True

    with pytest.raises(DatabaseConnectionError):
        adapter.execute_raw('SELECT 1')
