"""Hour accumulators making up the report aggregation lattice.

Cells hold no reference to their task or date range. A cell's row is
implied by which ``ReportRow.cells`` list it sits in and its column by its
index in that list, which matches the index of the report's
``column_ranges`` and ``column_totals``. Per-user lists (``user_data``,
``user_row_totals``) are likewise aligned with the report's ``users``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from trackrecord.reporting.errors import ReportInvariantError


class HourAccumulator:
    """Committed and not-committed hour counters."""

    __slots__ = ("committed", "not_committed")

    def __init__(self) -> None:
        self.reset()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(committed={self.committed!r}, not_committed={self.not_committed!r})"

    def total(self) -> float:
        """Committed plus not-committed hours."""

        return self.committed + self.not_committed

    def has_hours(self) -> bool:
        return self.total() > 0.0

    def add(self, other: HourAccumulator) -> None:
        """Add another accumulator's hours to this one."""

        self.committed += other.committed
        self.not_committed += other.not_committed

    def reset(self) -> None:
        self.committed = 0.0
        self.not_committed = 0.0


class ReportUserData(HourAccumulator):
    """One user's hours within a single cell."""

    __slots__ = ()

    def add_committed_hours(self, hours: float) -> None:
        self.committed += hours

    def add_not_committed_hours(self, hours: float) -> None:
        self.not_committed += hours


class ReportCell(HourAccumulator):
    """Hours for one task over one column's date range."""

    __slots__ = ("user_data",)

    def __init__(self, user_count: int = 0) -> None:
        super().__init__()
        self.user_data: list[ReportUserData] = [ReportUserData() for _ in range(user_count)]

    def add_user_data(self, data: ReportUserData) -> None:
        self.user_data.append(data)
        self.add(data)


class ReportColumnTotal(HourAccumulator):
    """Running total for one column across every row."""

    __slots__ = ()

    def add_cell(self, cell: ReportCell) -> None:
        self.add(cell)


class ReportUserRowTotal(HourAccumulator):
    """One user's hours across all cells of a row."""

    __slots__ = ()

    def calculate(self, row: ReportRow, user_index: int) -> None:
        self.reset()
        for cell in row.cells:
            self.add(cell.user_data[user_index])


class ReportUserColumnTotal(HourAccumulator):
    """One user's hours across every row of the report."""

    __slots__ = ()

    def calculate(self, rows: Sequence[ReportRow], user_index: int) -> None:
        self.reset()
        for row in rows:
            self.add(row.user_row_totals[user_index])


class ReportRow(HourAccumulator):
    """A task's hours over the whole report range."""

    __slots__ = ("task", "cells", "user_row_totals")

    def __init__(self, task: Any) -> None:
        super().__init__()
        self.task = task
        self.cells: list[ReportCell] = []
        self.user_row_totals: list[ReportUserRowTotal] = []

    def add_cell(self, cell: ReportCell) -> None:
        self.cells.append(cell)
        self.add(cell)

    def add_user_row_total(self, user_row_total: ReportUserRowTotal) -> None:
        self.user_row_totals.append(user_row_total)


class ReportSection(HourAccumulator):
    """Totals over a contiguous run of rows sharing a grouping key.

    ``cells`` and ``user_row_totals`` are pre-sized to the report's column
    and user counts. A ``None`` slot has not been touched by any row yet.
    """

    __slots__ = ("cells", "user_row_totals", "row_indices")

    def __init__(self, column_count: int, user_count: int) -> None:
        super().__init__()
        self.cells: list[ReportCell | None] = [None] * column_count
        self.user_row_totals: list[ReportUserRowTotal | None] = [None] * user_count
        self.row_indices: list[int] = []

    def add_row(self, row_index: int, row: ReportRow) -> None:
        if len(row.cells) != len(self.cells):
            raise ReportInvariantError(
                f"Row {row_index} has {len(row.cells)} cells but the report has {len(self.cells)} columns."
            )
        self.row_indices.append(row_index)
        for cell_index, cell in enumerate(row.cells):
            self.add_cell(cell, cell_index)
        for user_index, user_row_total in enumerate(row.user_row_totals):
            self.add_user_row_total(user_row_total, user_index)

    def add_cell(self, cell: ReportCell, cell_index: int) -> None:
        _accumulate(self.cells, cell, cell_index, ReportCell)
        self.add(cell)

    def add_user_row_total(self, user_row_total: ReportUserRowTotal, user_index: int) -> None:
        _accumulate(self.user_row_totals, user_row_total, user_index, ReportUserRowTotal)

    def row_count(self) -> int:
        return len(self.row_indices)


def _accumulate(slots: list, item: HourAccumulator, index: int, factory: type[HourAccumulator]) -> None:
    if not 0 <= index < len(slots):
        raise ReportInvariantError(f"Section slot {index} is outside 0..{len(slots) - 1}.")
    if slots[index] is None:
        slots[index] = factory()
    slots[index].add(item)
