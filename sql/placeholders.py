"""
=====================================
Placeholder rewriting and binding.
=====================================

Statements are assembled with a generic ``?`` marker for every bound value.
Drivers that do not accept ``?`` natively need those markers rewritten into
their own syntax before execution, without touching question marks that sit
inside quoted literals or delimited identifiers.

Functions:
- rewrite_placeholders: Quote-aware rewrite of ``?`` into a dialect's markers
- infer_param_type: Binding type for a single value (integer/float/string)
- coerce_parameters: Apply the binding rule to a parameter list
- bind_signature: Compact type string (``i``, ``d``, ``s``) for log output

Known limitation:
    The scanner tracks a single quote depth and the last opened delimiter.
    It has no notion of the SQL doubled-quote escape (``'it''s'`` only works
    because it reads as two adjacent literals) and does not nest mixed
    delimiters: ``"a'b"`` leaves the scanner inside a quote. Malformed
    fragments give undefined output rather than an error.

Usage:
    from sql.placeholders import PlaceholderStyle, rewrite_placeholders

    rewrite_placeholders("SELECT * FROM t WHERE a = ? AND b = '?'", PlaceholderStyle.INDEXED)
    # "SELECT * FROM t WHERE a = $1 AND b = '?'"
"""

from enum import Enum
from typing import Any, List, Optional, Sequence

QUOTE_CHARS = ('"', "'", '`')
PLACEHOLDER = '?'


class PlaceholderStyle(Enum):
    """Native parameter marker syntax of a driver."""

    POSITIONAL = 'qmark'        # ?          (pyodbc)
    INDEXED = 'dollar'          # $1, $2     (PostgreSQL server-side)
    NAMED_NUMERIC = 'numeric'   # :1, :2
    FORMAT = 'format'           # %s         (pymysql, psycopg2)


class ParamType(Enum):
    """Binding type inferred from a parameter value."""

    INTEGER = 'i'
    FLOAT = 'd'
    STRING = 's'
    NULL = 'n'


def _marker(style: PlaceholderStyle, index: int) -> str:
    if style is PlaceholderStyle.INDEXED:
        return f'${index}'
    if style is PlaceholderStyle.NAMED_NUMERIC:
        return f':{index}'
    if style is PlaceholderStyle.FORMAT:
        return '%s'
    return PLACEHOLDER


def _track_quote(char: str, depth: int, last_quote: str):
    # A quote matching the innermost open one closes it, anything else opens.
    if depth > 0 and char == last_quote:
        return depth - 1, last_quote
    return depth + 1, char


def rewrite_placeholders(
    text: str,
    style: PlaceholderStyle,
    marker: str = PLACEHOLDER
) -> str:
    """
    Rewrite generic placeholders into a dialect's native markers.

    The scan keeps a quote depth and the most recently opened quote
    character. Inside a quote, the same character closes it (depth - 1) and
    any other quote character opens another level (depth + 1). Placeholders
    are only replaced at depth zero, numbered from 1 on every call.

    Args:
        text: Statement text containing generic markers
        style: Target marker style
        marker: Generic marker character (default '?')

    Returns:
        Rewritten statement text. POSITIONAL returns the text unchanged.
        FORMAT additionally doubles every literal '%'.
    """
    if style is PlaceholderStyle.POSITIONAL:
        return text

    out: List[str] = []
    depth = 0
    last_quote = ''
    counter = 1

    for char in text:
        if char in QUOTE_CHARS:
            depth, last_quote = _track_quote(char, depth, last_quote)
            out.append(char)
        elif char == marker and depth == 0:
            out.append(_marker(style, counter))
            counter += 1
        elif char == '%' and style is PlaceholderStyle.FORMAT:
            out.append('%%')
        else:
            out.append(char)

    return ''.join(out)


def infer_param_type(value: Any) -> ParamType:
    """
    Infer the binding type of a parameter.

    Rule: bool and int bind as INTEGER, float as FLOAT, None as NULL and
    every other value as STRING. Callers never declare types explicitly.
    """
    if value is None:
        return ParamType.NULL
    if isinstance(value, (bool, int)):
        return ParamType.INTEGER
    if isinstance(value, float):
        return ParamType.FLOAT
    return ParamType.STRING


def coerce_parameters(params: Optional[Sequence[Any]]) -> List[Any]:
    """
    Apply the binding rule to a parameter list.

    Returns:
        New list with ints, floats and None kept, bools as ints and every
        other value converted with str()
    """
    coerced: List[Any] = []
    for value in params or ():
        param_type = infer_param_type(value)
        if param_type is ParamType.INTEGER:
            coerced.append(int(value))
        elif param_type is ParamType.STRING:
            coerced.append(value if isinstance(value, str) else str(value))
        else:
            coerced.append(value)
    return coerced


def bind_signature(params: Optional[Sequence[Any]]) -> str:
    """Render the binding types of a parameter list, e.g. ``'isd'``."""
    return ''.join(infer_param_type(value).value for value in params or ())
