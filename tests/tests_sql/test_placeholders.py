"""
==============================================
Pytest suite for sql/placeholders.py
==============================================

Sections:
---------
1. Unit tests - rewriting per marker style, binding type rule
2. Edge case tests - quoting behavior and known limitations

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          python -m pytest tests/tests_sql/test_placeholders.py -v
By category:        python -m pytest tests/tests_sql/test_placeholders.py -m unit
"""

from decimal import Decimal

import pytest

from sql.placeholders import (
    ParamType,
    PlaceholderStyle,
    bind_signature,
    coerce_parameters,
    infer_param_type,
    rewrite_placeholders,
)

# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_indexed_rewrite_skips_quoted_marker():
    """
    Quoted question marks are left alone and do not advance the counter.
    """
    text = "SELECT * FROM t WHERE a = ? AND b = '?' AND c = ?"

    result = rewrite_placeholders(text, PlaceholderStyle.INDEXED)

    assert result == "SELECT * FROM t WHERE a = $1 AND b = '?' AND c = $2"


@pytest.mark.unit
def test_positional_style_returns_text_unchanged():
    text = "SELECT * FROM t WHERE a = ? AND b = ?"

    assert rewrite_placeholders(text, PlaceholderStyle.POSITIONAL) == text


@pytest.mark.unit
def test_named_numeric_rewrite():
    result = rewrite_placeholders("UPDATE t SET a = ?, b = ?", PlaceholderStyle.NAMED_NUMERIC)

    assert result == "UPDATE t SET a = :1, b = :2"


@pytest.mark.unit
def test_format_rewrite_doubles_literal_percent():
    """
    pyformat drivers interpolate the whole string, so every literal % doubles.
    """
    text = "SELECT * FROM t WHERE name LIKE 'Jo%' AND id = ?"

    result = rewrite_placeholders(text, PlaceholderStyle.FORMAT)

    assert result == "SELECT * FROM t WHERE name LIKE 'Jo%%' AND id = %s"


@pytest.mark.unit
def test_counter_restarts_on_every_call():
    first = rewrite_placeholders("a = ? AND b = ?", PlaceholderStyle.INDEXED)
    second = rewrite_placeholders("c = ?", PlaceholderStyle.INDEXED)

    assert first == "a = $1 AND b = $2"
    assert second == "c = $1"


@pytest.mark.unit
def test_backtick_and_double_quoted_identifiers_are_skipped():
    text = 'SELECT `wh?` , "odd?" FROM t WHERE x = ?'

    result = rewrite_placeholders(text, PlaceholderStyle.INDEXED)

    assert result == 'SELECT `wh?` , "odd?" FROM t WHERE x = $1'


@pytest.mark.unit
@pytest.mark.parametrize("value, expected", [
    (7, ParamType.INTEGER),
    (True, ParamType.INTEGER),
    (2.5, ParamType.FLOAT),
    ('John', ParamType.STRING),
    (Decimal('1.10'), ParamType.STRING),
    (None, ParamType.NULL),
])
def test_infer_param_type(value, expected):
    assert infer_param_type(value) is expected


@pytest.mark.unit
def test_coerce_parameters_applies_binding_rule():
    result = coerce_parameters([1, False, 2.5, 'x', None, Decimal('3.5')])

    assert result == [1, 0, 2.5, 'x', None, '3.5']
    assert type(result[1]) is int


@pytest.mark.unit
def test_coerce_parameters_accepts_none():
    assert coerce_parameters(None) == []


@pytest.mark.unit
def test_bind_signature():
    assert bind_signature(['John', 2004, 1.5, None]) == 'sidn'


# =================
# 2. EDGE CASES
# =================

@pytest.mark.edge_case
def test_consecutive_literals_reopen_cleanly():
    """
    Two separate literals of the same quote type each open and close.
    """
    text = "WHERE a = 'x' AND b = '?' AND c = ?"

    assert rewrite_placeholders(text, PlaceholderStyle.INDEXED) == "WHERE a = 'x' AND b = '?' AND c = $1"


@pytest.mark.edge_case
def test_doubled_quote_reads_as_adjacent_literals():
    text = "WHERE a = 'it''s?' AND b = ?"

    assert rewrite_placeholders(text, PlaceholderStyle.INDEXED) == "WHERE a = 'it''s?' AND b = $1"


@pytest.mark.edge_case
def test_mixed_delimiters_do_not_nest():
    """
    Known limitation: an apostrophe inside a double-quoted identifier opens
    another level, so the scanner never returns to depth zero.
    """
    text = "SELECT \"it's\" FROM t WHERE a = ?"

    assert rewrite_placeholders(text, PlaceholderStyle.INDEXED) == text


@pytest.mark.edge_case
def test_text_without_markers_is_unchanged():
    text = "SELECT 1"

    assert rewrite_placeholders(text, PlaceholderStyle.INDEXED) == text
