"""
Descriptive statistics over quantitative columns.

Values are read through RowStore.field_as using the store's numeric format,
the same contract any external consumer of the store uses.
"""

import math

from tabstore.errors import KindMismatchError, NotFoundError
from tabstore.store import RowStore


def _column_values(store: RowStore, name: str, what: str) -> list:
    var = store.schema.lookup(name)
    if var is None:
        raise NotFoundError(f"Column {name!r} not in schema")
    if var.is_categorical:
        raise KindMismatchError(f"Cannot compute {what} for categorical column {name!r}")
    return [store.field_as(i, var) for i in range(store.row_count())]


def mean(store: RowStore, name: str) -> float:
    """Arithmetic mean; 0.0 for an empty store."""
    values = _column_values(store, name, "mean")
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def variance(store: RowStore, name: str) -> float:
    """Sample variance (divisor n - 1); 0.0 for fewer than two rows."""
    values = _column_values(store, name, "variance or standard deviation")
    n = len(values)
    if n < 2:
        return 0.0
    m = math.fsum(values) / n
    return math.fsum((v - m) ** 2 for v in values) / (n - 1)


def stdev(store: RowStore, name: str) -> float:
    return math.sqrt(variance(store, name))


__all__ = ["mean", "variance", "stdev"]
