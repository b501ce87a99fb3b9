"""
Demo: infer a schema from CSV, evolve it, report on it and export it again.
"""

import logging
import tempfile
from pathlib import Path

from tabstore.analyzer import analyze_store
from tabstore.csv_export import write_csv_file, write_csv_string
from tabstore.csv_import import read_csv_file
from tabstore.examples import build_example_store
from tabstore.mutate import derive_column, drop_column
from tabstore.serialization import schema_to_yaml


def print_report(report):
    """Pretty-print a StoreReport."""
    print()
    print("=" * 70)
    print(f"STORE REPORT: {report.total_rows} rows x {report.total_columns} columns, "
          f"{report.row_width} bytes/row")
    print("=" * 70)
    for col in report.columns:
        line = f"  {col.name:<12} {col.kind.value:<13} width={col.width:<3} offset={col.offset:<3}"
        if col.mean is not None:
            line += f" mean={col.mean:.2f} stdev={col.stdev:.2f}"
        else:
            line += f" distinct={col.possible_values} longest={col.longest_value}"
        print(line)
    print()
    if report.warnings:
        print("WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("NO WARNINGS")
    print()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "cars.csv"
        write_csv_file(build_example_store(), str(path))

        # Re-import without a schema: column kinds and widths are inferred.
        store = read_csv_file(str(path))
        print(schema_to_yaml(store.schema))

        derive_column(store, "mpg_x10", "mpg", lambda raw: store.settings.numeric.unpack(raw) * 10)
        drop_column(store, "cylinders")

        print_report(analyze_store(store))
        print(write_csv_string(store))
