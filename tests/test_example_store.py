"""
Test the example store used by the demo.

Validates that the example builder creates the expected layout and that the
store survives an export / inferred re-import cycle.
"""

from tabstore.csv_export import write_csv_string
from tabstore.csv_import import read_csv_string
from tabstore.examples import EXAMPLE_ROWS, build_example_store
from tabstore.model import VarKind, VarRole


def test_example_store_structure():
    store = build_example_store()

    assert store.row_count() == len(EXAMPLE_ROWS)
    assert store.column_names() == ["weight", "cylinders", "body", "mpg"]
    assert store.schema.lookup("mpg").role is VarRole.RESPONSE
    assert store.values(3) == (2210.0, 8.0, "pickup", 19.4)


def test_example_store_reinfers_same_kinds():
    store = build_example_store()
    again = read_csv_string(write_csv_string(store))

    assert [v.kind for v in again.schema] == [v.kind for v in store.schema]
    assert again.schema.lookup("body").kind is VarKind.CATEGORICAL
    assert again.schema.lookup("body").width == 7
    for i in range(store.row_count()):
        assert again.values(i) == store.values(i)
