"""
Example store builder for demos and tests.

Builds a small fuel-economy table with two quantitative measurements, one
categorical explanatory column and a quantitative response.
"""
from typing import Optional

from tabstore.model import Schema, VarKind, VarRole, Variable
from tabstore.settings import StoreSettings, resolve_settings
from tabstore.store import RowStore


EXAMPLE_ROWS = [
    (1320.0, 4.0, "hatch", 41.5),
    (1550.0, 4.0, "sedan", 36.2),
    (1980.0, 6.0, "suv", 27.9),
    (2210.0, 8.0, "pickup", 19.4),
    (1490.0, 4.0, "sedan", 38.0),
]


def build_example_schema(settings: Optional[StoreSettings] = None) -> Schema:
    size = resolve_settings(settings).numeric.size
    return Schema([
        Variable("weight", VarKind.QUANTITATIVE, size),
        Variable("cylinders", VarKind.QUANTITATIVE, size),
        Variable("body", VarKind.CATEGORICAL, 7),
        Variable("mpg", VarKind.QUANTITATIVE, size, role=VarRole.RESPONSE),
    ])


def build_example_store(settings: Optional[StoreSettings] = None) -> RowStore:
    settings = resolve_settings(settings)
    store = RowStore(build_example_schema(settings), settings)
    for values in EXAMPLE_ROWS:
        store.append_values(values)
    return store
