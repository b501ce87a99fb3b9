"""
Store Analyzer: read-only inventory of a RowStore.

Produces a StoreReport with:
    - Row/column counts and row width
    - Per-column layout, distinct value counts and basic statistics
    - Warning flags for suspicious columns

IMPORTANT: This module does NOT modify the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from tabstore.model import VarKind, VarRole
from tabstore.stats import mean, stdev
from tabstore.store import RowStore


@dataclass
class ColumnSummary:
    """Layout and value metrics for one column."""
    name: str
    role: VarRole
    kind: VarKind
    width: int
    offset: int
    possible_values: int = 0
    mean: Optional[float] = None
    stdev: Optional[float] = None
    longest_value: Optional[int] = None


@dataclass
class StoreReport:
    """Analysis report for a store."""

    total_rows: int = 0
    total_columns: int = 0
    row_width: int = 0
    all_quantitative: bool = False
    all_categorical: bool = False
    columns: List[ColumnSummary] = field(default_factory=list)

    # Warnings and flags
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    def column(self, name: str) -> Optional[ColumnSummary]:
        for summary in self.columns:
            if summary.name == name:
                return summary
        return None


def analyze_store(store: RowStore) -> StoreReport:
    """
    Summarize a store's layout and contents.

    Checks for:
    - Empty stores
    - Categorical columns holding a single distinct value
    - Categorical columns wider than their longest stored value needs

    Returns a StoreReport with metrics and warnings.
    """
    report = StoreReport(
        total_rows=store.row_count(),
        total_columns=store.column_count(),
        row_width=store.row_width(),
        all_quantitative=store.all_quantitative(),
        all_categorical=store.all_categorical(),
    )

    for var in store.schema:
        summary = ColumnSummary(
            name=var.name,
            role=var.role,
            kind=var.kind,
            width=var.width,
            offset=var.offset,
            possible_values=store.possible_values(var.name),
        )
        if var.is_quantitative:
            summary.mean = mean(store, var.name)
            summary.stdev = stdev(store, var.name)
        else:
            lengths = [len(store.field(i, var).split(b"\0", 1)[0]) for i in range(store.row_count())]
            summary.longest_value = max(lengths, default=0)
        report.columns.append(summary)

    # =========================================================================
    # WARNING FLAGS
    # =========================================================================

    if report.total_rows == 0:
        report.add_warning("Store has no rows")

    for summary in report.columns:
        if summary.kind is not VarKind.CATEGORICAL or report.total_rows == 0:
            continue
        if report.total_rows > 1 and summary.possible_values == 1:
            report.add_warning(f"Constant categorical column: {summary.name}")
        if summary.longest_value is not None and summary.longest_value + 1 < summary.width:
            report.add_warning(
                f"Oversized categorical column: {summary.name} is {summary.width} bytes, "
                f"longest value uses {summary.longest_value}"
            )

    return report
