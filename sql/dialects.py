"""
===============================
Backend dialect descriptions.
===============================

A Dialect is the immutable set of syntax rules that differ between the
supported database families: which identifiers are reserved and how they are
quoted, which parameter marker the driver expects, how row limits are
expressed, and how an INSERT value group is written.

Dialects:
- MYSQL: backtick quoting, ``%s`` markers (pymysql), LIMIT/OFFSET
- ODBC: double-quote quoting, native ``?`` markers (pyodbc), SELECT TOP n
- POSTGRES: double-quote quoting, ``$n`` markers, LIMIT/OFFSET

Usage:
    from sql.dialects import POSTGRES

    POSTGRES.quote_identifier('order')      # '"order"'
    POSTGRES.apply_limit('SELECT id FROM t', 10)   # 'SELECT id FROM t LIMIT 10'
    POSTGRES.value_group(3)                 # '($1,$2,$3)'
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

from sql.placeholders import PLACEHOLDER, PlaceholderStyle


class UnsupportedClauseError(ValueError):
    """Exception raised when a dialect cannot express a requested clause."""
    pass


class PaginationStyle(Enum):
    """How a dialect restricts the number of returned rows."""

    LIMIT_OFFSET = 'limit_offset'
    TOP_N = 'top_n'


_LEADING_SELECT = re.compile(r'^SELECT', re.IGNORECASE)


@dataclass(frozen=True)
class Dialect:
    """Syntax rules of one database family.

    Attributes:
        name: Short backend name
        reserved_words: Identifiers that must be quoted (upper-cased)
        identifier_quote: Delimiter wrapped around reserved identifiers
        placeholder_style: Marker syntax the driver binds
        pagination_style: LIMIT/OFFSET or SELECT TOP n
        numbered_value_group: Write INSERT value groups with native
            numbered markers instead of generic '?'
    """

    name: str
    reserved_words: FrozenSet[str]
    identifier_quote: str
    placeholder_style: PlaceholderStyle
    pagination_style: PaginationStyle
    numbered_value_group: bool = False

    @property
    def needs_rewrite(self) -> bool:
        """True when generic '?' markers must be rewritten before execution."""
        return self.placeholder_style is not PlaceholderStyle.POSITIONAL

    def is_reserved(self, word: str) -> bool:
        return word.upper() in self.reserved_words

    def quote_identifier(self, word: str) -> str:
        """Wrap a reserved identifier in the dialect's delimiter.

        Non-reserved identifiers pass through unchanged.
        """
        if self.is_reserved(word):
            return f'{self.identifier_quote}{word}{self.identifier_quote}'
        return word

    def quote_identifiers(self, words: Iterable[str]) -> List[str]:
        return [self.quote_identifier(word) for word in words]

    def apply_limit(self, text: str, size: Optional[int] = None) -> str:
        """
        Restrict the statement to ``size`` rows.

        Args:
            text: Statement text assembled so far
            size: Row count; None emits a placeholder bound later via vars()

        Returns:
            Statement text with the limit applied
        """
        if self.pagination_style is PaginationStyle.TOP_N:
            top = f'TOP {size}' if size is not None else f'TOP ({PLACEHOLDER})'
            return _LEADING_SELECT.sub(f'SELECT {top}', text, count=1)

        return f"{text} LIMIT {size if size is not None else PLACEHOLDER}"

    def apply_offset(self, text: str, start: Optional[int] = None) -> str:
        """
        Skip the first ``start`` rows.

        Raises:
            UnsupportedClauseError: For TOP-N dialects, which have no offset
        """
        if self.pagination_style is PaginationStyle.TOP_N:
            raise UnsupportedClauseError(f"{self.name} dialect does not support OFFSET")

        return f"{text} OFFSET {start if start is not None else PLACEHOLDER}"

    def value_group(self, count: int) -> str:
        """
        Render an INSERT value group with ``count`` markers.

        Example:
            >>> MYSQL.value_group(3)
            '(?,?,?)'
        """
        if self.numbered_value_group and self.placeholder_style is PlaceholderStyle.INDEXED:
            markers = [f'${i}' for i in range(1, count + 1)]
        else:
            markers = [PLACEHOLDER] * count
        return '(' + ','.join(markers) + ')'


MYSQL_RESERVED_WORDS = frozenset(word.upper() for word in (
    'Condition', 'Desc', 'Group', 'Database', 'File', 'Subject', 'Locked',
    'Order', 'Key', 'Index', 'Range', 'Read', 'Select', 'Table', 'Where',
))

ODBC_RESERVED_WORDS = frozenset(word.upper() for word in (
    'user', 'group', 'order', 'key', 'desc', 'table', 'select', 'where',
))

POSTGRES_RESERVED_WORDS = frozenset((
    'ALL', 'ANALYSE', 'ANALYZE', 'AND', 'ANY', 'ARRAY', 'AS', 'ASC', 'ASYMMETRIC',
    'AUTHORIZATION', 'BINARY', 'BOTH', 'CAST', 'CHECK', 'COLLATE', 'COLUMN',
    'CONSTRAINT', 'CREATE', 'CROSS', 'CURRENT_CATALOG', 'CURRENT_DATE',
    'CURRENT_ROLE', 'CURRENT_SCHEMA', 'CURRENT_TIME', 'CURRENT_TIMESTAMP',
    'CURRENT_USER', 'DEFAULT', 'DEFERRABLE', 'DESC', 'DISTINCT', 'DO', 'ELSE',
    'END', 'EXCEPT', 'FETCH', 'FALSE', 'FOR', 'FOREIGN', 'FROM', 'FULL', 'GRANT',
    'GROUP', 'HAVING', 'ILIKE', 'IN', 'INITIALLY', 'INNER', 'INTERSECT', 'INTO',
    'IS', 'ISNULL', 'JOIN', 'LATERAL', 'LEADING', 'LEFT', 'LIKE', 'LIMIT',
    'LOCALTIME', 'LOCALTIMESTAMP', 'NATURAL', 'NOT', 'NOTNULL', 'NULL', 'OFFSET',
    'ON', 'ONLY', 'OR', 'ORDER', 'OUTER', 'OVERLAPS', 'PLACING', 'PRIMARY',
    'REFERENCES', 'RETURNING', 'RIGHT', 'SELECT', 'SESSION_USER', 'SIMILAR',
    'SOME', 'SYMMETRIC', 'SYSTEM_USER', 'TABLE', 'TABLESAMPLE', 'THEN', 'TO',
    'TRAILING', 'TRUE', 'UNION', 'UNIQUE', 'USER', 'USING', 'VERBOSE', 'VARIADIC',
    'WHEN', 'WHERE', 'WINDOW',
))

MYSQL = Dialect(
    name='mysql',
    reserved_words=MYSQL_RESERVED_WORDS,
    identifier_quote='`',
    placeholder_style=PlaceholderStyle.FORMAT,
    pagination_style=PaginationStyle.LIMIT_OFFSET
)

ODBC = Dialect(
    name='odbc',
    reserved_words=ODBC_RESERVED_WORDS,
    identifier_quote='"',
    placeholder_style=PlaceholderStyle.POSITIONAL,
    pagination_style=PaginationStyle.TOP_N
)

POSTGRES = Dialect(
    name='postgres',
    reserved_words=POSTGRES_RESERVED_WORDS,
    identifier_quote='"',
    placeholder_style=PlaceholderStyle.INDEXED,
    pagination_style=PaginationStyle.LIMIT_OFFSET,
    numbered_value_group=True
)
