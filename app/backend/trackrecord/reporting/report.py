"""Report compilation: rows of tasks, columns of date ranges, and totals."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Hashable, Sequence
from datetime import date
from typing import Any, Protocol

from trackrecord.reporting.calculators import (
    HourAccumulator,
    ReportColumnTotal,
    ReportRow,
    ReportSection,
    ReportUserColumnTotal,
    ReportUserRowTotal,
)
from trackrecord.reporting.errors import ReportInvariantError
from trackrecord.reporting.periods import (
    DateInterval,
    Granularity,
    GranularityDefinition,
    generate_columns,
    granularity_definition,
    heading_total,
)
from trackrecord.reporting.ranges import RangeSelection, dataset_range, resolve_range
from trackrecord.reporting.sweep import PacketCursor, TimeRecord, calculate_cell

logger = logging.getLogger(__name__)

DEFAULT_FIRST_YEAR = 2008


class RecordSource(Protocol):
    """Supplier of work packets for the tasks being reported on."""

    def date_bounds(self, tasks: Sequence[Any]) -> tuple[date | None, date | None]:
        ...

    def fetch_committed(
        self, task: Any, user_ids: Sequence[Hashable] | None, interval: DateInterval
    ) -> Sequence[TimeRecord]:
        ...

    def fetch_not_committed(
        self, task: Any, user_ids: Sequence[Hashable] | None, interval: DateInterval
    ) -> Sequence[TimeRecord]:
        ...


SectionPredicate = Callable[[Any | None, Any], bool]


def single_section(previous_task: Any | None, task: Any) -> bool:
    """Put every row into one section."""

    return previous_task is None


class ReportState(str, enum.Enum):
    EMPTY = "empty"
    RANGE_RESOLVED = "range_resolved"
    ROWS_BUILT = "rows_built"
    COLUMNS_BUILT = "columns_built"
    TOTALED = "totaled"
    SECTIONED = "sectioned"


class Report(HourAccumulator):
    """A tabular worked-hours report.

    ``tasks`` and ``users`` must already be filtered for visibility and put
    in display order; rows follow ``tasks`` and per-user breakdowns follow
    ``users``. The report's own hour counters are the grand total.

    Call ``compile`` once. Work packets are fetched once per task for the
    whole range and then swept column by column, oldest column first.
    """

    def __init__(
        self,
        *,
        tasks: Sequence[Any] = (),
        users: Sequence[Any] = (),
        granularity: Granularity | int = Granularity.TOTALS,
        selection: RangeSelection | None = None,
        first_year: int = DEFAULT_FIRST_YEAR,
        today: date | None = None,
    ) -> None:
        super().__init__()
        self.tasks: list[Any] = list(tasks)
        self.users: list[Any] = list(users)
        self.granularity = Granularity(granularity)
        self.frequency_data: GranularityDefinition = granularity_definition(self.granularity)
        self.selection = selection or RangeSelection()
        self.first_year = first_year
        self.today = today

        self.state = ReportState.EMPTY
        self.range: DateInterval | None = None
        self.rows: list[ReportRow] = []
        self.sections: list[ReportSection] = []
        self.column_ranges: list[DateInterval] = []
        self.column_totals: list[ReportColumnTotal] = []
        self.user_column_totals: list[ReportUserColumnTotal] = []

        # None for the remaining figures means no task has a planned duration.
        self.total_duration = 0.0
        self.total_actual_remaining: float | None = None
        self.total_potential_remaining: float | None = None

    @property
    def task_ids(self) -> list[Hashable]:
        return [task.id for task in self.tasks]

    @property
    def user_ids(self) -> list[Hashable]:
        return [user.id for user in self.users]

    @property
    def column_count(self) -> int:
        return len(self.column_totals)

    # ---------- Labels ----------
    @property
    def label(self) -> str:
        return self.frequency_data.label

    @property
    def column_title(self) -> str:
        return self.frequency_data.column_title

    def display_range(self) -> str:
        return heading_total(self._require_range())

    def column_heading(self, column_index: int) -> str:
        return self.frequency_data.heading(self.column_ranges[column_index])

    def partial_column(self, column_index: int) -> bool:
        """Whether a column only covers part of its period.

        Known limitation: this compares the column against the report range,
        but column ranges are already clipped to that range, so generated
        columns never report as partial. Detecting a clipped first or last
        period needs the unclipped period bounds, which are not kept.
        """

        column_range = self.column_ranges[column_index]
        report_range = self._require_range()
        return column_range.start < report_range.start or column_range.end > report_range.end

    # ---------- Compilation ----------
    def compile(self, source: RecordSource, is_new_section: SectionPredicate = single_section) -> Report:
        if self.state is not ReportState.EMPTY:
            raise ReportInvariantError(f"Report already compiled (state {self.state.value}).")

        self._rationalise_range(source)
        if not self.tasks:
            self.state = ReportState.SECTIONED
            return self

        self._add_rows()
        self._add_columns(source)
        self._calculate_totals()
        self._calculate_sections(is_new_section)

        logger.info(
            "Compiled %s report for %s: %d rows, %d columns, %d sections",
            self.label,
            self.display_range(),
            len(self.rows),
            self.column_count,
            len(self.sections),
        )
        return self

    def _require_range(self) -> DateInterval:
        if self.range is None:
            raise ReportInvariantError("Report range has not been resolved.")
        return self.range

    def _rationalise_range(self, source: RecordSource) -> None:
        earliest, latest = source.date_bounds(self.tasks)
        default = dataset_range(
            earliest,
            latest,
            first_year=self.first_year,
            today=self.today or date.today(),
        )
        self.range = resolve_range(self.selection, default)
        self.state = ReportState.RANGE_RESOLVED

    def _add_rows(self) -> None:
        self.rows = [ReportRow(task) for task in self.tasks]
        self.state = ReportState.ROWS_BUILT

    def _add_columns(self, source: RecordSource) -> None:
        report_range = self._require_range()
        user_filter = self.user_ids or None

        committed = [
            PacketCursor(source.fetch_committed(task, user_filter, report_range)) for task in self.tasks
        ]
        not_committed = [
            PacketCursor(source.fetch_not_committed(task, user_filter, report_range)) for task in self.tasks
        ]

        self.column_ranges = []
        self.column_totals = []
        for column_range in generate_columns(report_range, self.frequency_data):
            self._add_column(column_range, committed, not_committed)

        for task_index, task in enumerate(self.tasks):
            leftover = len(committed[task_index]) + len(not_committed[task_index])
            if leftover:
                logger.warning(
                    "%d work packets for task %s fell outside %s and were not reported",
                    leftover,
                    task.id,
                    self.display_range(),
                )
        self.state = ReportState.COLUMNS_BUILT

    def _add_column(
        self,
        column_range: DateInterval,
        committed: list[PacketCursor],
        not_committed: list[PacketCursor],
    ) -> None:
        column_total = ReportColumnTotal()
        user_ids = self.user_ids
        for task_index, row in enumerate(self.rows):
            cell = calculate_cell(column_range, committed[task_index], not_committed[task_index], user_ids)
            row.add_cell(cell)
            column_total.add_cell(cell)

        self.column_ranges.append(column_range)
        self.column_totals.append(column_total)

    def _calculate_totals(self) -> None:
        if len(self.rows) != len(self.tasks):
            raise ReportInvariantError(f"{len(self.rows)} rows built for {len(self.tasks)} tasks.")

        self.total_duration = 0.0
        for task in self.tasks:
            self.total_duration += task.duration

        self.total_actual_remaining = None
        self.total_potential_remaining = None
        self.reset()

        for row in self.rows:
            self.add(row)
            if row.task.duration > 0:
                if self.total_actual_remaining is None:
                    self.total_actual_remaining = self.total_duration
                    self.total_potential_remaining = self.total_duration
                self.total_actual_remaining -= row.committed
                self.total_potential_remaining -= row.total()

        for row in self.rows:
            row.user_row_totals = []
            for user_index in range(len(self.users)):
                user_row_total = ReportUserRowTotal()
                user_row_total.calculate(row, user_index)
                row.add_user_row_total(user_row_total)

        self.user_column_totals = []
        for user_index in range(len(self.users)):
            user_column_total = ReportUserColumnTotal()
            user_column_total.calculate(self.rows, user_index)
            self.user_column_totals.append(user_column_total)

        self.state = ReportState.TOTALED

    def _calculate_sections(self, is_new_section: SectionPredicate) -> None:
        self.sections = []
        current_section: ReportSection | None = None
        previous_task = None

        for row_index, row in enumerate(self.rows):
            if is_new_section(previous_task, row.task):
                current_section = ReportSection(self.column_count, len(self.users))
                self.sections.append(current_section)
            if current_section is None:
                raise ReportInvariantError(f"No section is open for row {row_index}.")
            current_section.add_row(row_index, row)
            previous_task = row.task

        self.state = ReportState.SECTIONED


def compile_report(
    source: RecordSource,
    *,
    tasks: Sequence[Any],
    users: Sequence[Any] = (),
    granularity: Granularity | int = Granularity.TOTALS,
    selection: RangeSelection | None = None,
    is_new_section: SectionPredicate = single_section,
    first_year: int = DEFAULT_FIRST_YEAR,
    today: date | None = None,
) -> Report:
    """Build and compile a report in one call."""

    report = Report(
        tasks=tasks,
        users=users,
        granularity=granularity,
        selection=selection,
        first_year=first_year,
        today=today,
    )
    return report.compile(source, is_new_section)
