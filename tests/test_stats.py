"""
Tests for descriptive statistics over quantitative columns.
"""

import math

import pytest

from tabstore.errors import KindMismatchError, NotFoundError
from tabstore.model import Schema, VarKind, Variable
from tabstore.stats import mean, stdev, variance
from tabstore.store import RowStore


def make_store(values) -> RowStore:
    store = RowStore(Schema([
        Variable("v", VarKind.QUANTITATIVE, 8),
        Variable("t", VarKind.CATEGORICAL, 2),
    ]))
    for v in values:
        store.append_values([v, "k"])
    return store


class TestMean:
    """Arithmetic mean."""

    def test_mean(self):
        assert mean(make_store([1.0, 2.0, 6.0]), "v") == pytest.approx(3.0)

    def test_empty(self):
        assert mean(make_store([]), "v") == 0.0


class TestVariance:
    """Sample variance and standard deviation."""

    def test_variance(self):
        assert variance(make_store([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]), "v") == pytest.approx(32.0 / 7.0)

    def test_stdev(self):
        store = make_store([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert stdev(store, "v") == pytest.approx(math.sqrt(32.0 / 7.0))

    def test_single_row(self):
        assert variance(make_store([3.0]), "v") == 0.0
        assert stdev(make_store([3.0]), "v") == 0.0


class TestErrors:
    """Statistics need an existing quantitative column."""

    def test_categorical(self):
        with pytest.raises(KindMismatchError):
            mean(make_store([1.0]), "t")
        with pytest.raises(KindMismatchError):
            stdev(make_store([1.0]), "t")

    def test_unknown(self):
        with pytest.raises(NotFoundError):
            variance(make_store([1.0]), "nope")
