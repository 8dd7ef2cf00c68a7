"""
=======================
Result materialization.
=======================

Turns raw driver rows into the shape callers consume:

- no primary key declared: the rows as a list, in driver order
- primary key declared: a dict mapping each row's key value to the row

Duplicate key values are not an error; the last row with a given key wins,
exactly as plain dict assignment behaves. A set lacking the key column
(a procedure's summary set, say) is returned unkeyed. Multi-result-set
executions (stored procedures) are materialized set by set, in execution
order.
"""

import logging
from itertools import islice
from typing import Any, Dict, List, Optional, Sequence, Union

RawRow = Dict[str, Any]
ResultSet = Union[List[RawRow], Dict[Any, RawRow]]
Results = Union[ResultSet, List[ResultSet]]

logger = logging.getLogger(__name__)


def materialize(rows: Sequence[RawRow], primary_key: Optional[str] = None) -> ResultSet:
    """
    Materialize one result set.

    Args:
        rows: Raw rows from the driver
        primary_key: Column whose value keys the result

    Returns:
        List of rows, or dict of key value to row (last write wins). A set
        whose rows do not all carry ``primary_key`` stays an unkeyed list.
    """
    if not primary_key:
        return list(rows)

    if any(primary_key not in row for row in rows):
        logger.warning(f"Result set has no '{primary_key}' column, returning it unkeyed")
        return list(rows)

    keyed: Dict[Any, RawRow] = {}
    for row in rows:
        keyed[row[primary_key]] = row
    return keyed


def is_multi_set(raw: Sequence[Any]) -> bool:
    """True when ``raw`` is a list of row lists rather than a list of rows."""
    return bool(raw) and all(isinstance(item, list) for item in raw)


def materialize_sets(raw: Sequence[Any], primary_key: Optional[str] = None) -> Results:
    """
    Materialize a flat row list or a list of row lists.

    Each inner set of a multi-set result is keyed independently; the outer
    order is the execution order.
    """
    if is_multi_set(raw):
        return [materialize(rows, primary_key) for rows in raw]
    return materialize(raw, primary_key)


def slice_results(results: Results, start: int, length: Optional[int] = None) -> Results:
    """
    Slice a result while preserving keys.

    Lists slice positionally. Dicts keep the entries at positions
    ``[start, start + length)`` in insertion order with their original keys.
    """
    stop = None if length is None else start + length

    if isinstance(results, dict):
        return dict(islice(results.items(), start, stop))
    return list(results[start:stop])
