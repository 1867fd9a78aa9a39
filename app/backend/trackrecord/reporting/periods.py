"""Date intervals, report granularities and column generation."""

from __future__ import annotations

import enum
from calendar import monthrange
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, timedelta

from trackrecord.reporting.errors import ReportInvariantError

ONE_DAY = timedelta(days=1)

# UK tax years run from 6 April to 5 April of the following year.
UK_TAX_YEAR_START_MONTH = 4
UK_TAX_YEAR_START_DAY = 6


@dataclass(frozen=True, slots=True)
class DateInterval:
    """Closed ``[start, end]`` range of days; reversed bounds are swapped."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def __iter__(self) -> Iterator[date]:
        day = self.start
        while True:
            yield day
            if day == self.end:
                return
            day += ONE_DAY

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


# ---------- Period ends ----------
def end_of_week(day: date) -> date:
    """Sunday closing the Monday-based week containing ``day``."""

    days_left = timedelta(days=6 - day.weekday())
    if day > date.max - days_left:
        return date.max
    return day + days_left


def end_of_month(day: date) -> date:
    return date(day.year, day.month, monthrange(day.year, day.month)[1])


def end_of_quarter(day: date) -> date:
    last_month = ((day.month - 1) // 3) * 3 + 3
    return end_of_month(date(day.year, last_month, 1))


def end_of_year(day: date) -> date:
    return date(day.year, 12, 31)


def uk_tax_year(day: date) -> int:
    """Calendar year the tax year containing ``day`` starts in (0 before 6 April of year 1)."""

    if (day.month, day.day) >= (UK_TAX_YEAR_START_MONTH, UK_TAX_YEAR_START_DAY):
        return day.year
    return day.year - 1


def beginning_of_uk_tax_year(day: date) -> date:
    year = uk_tax_year(day)
    if year < MINYEAR:
        return date.min
    return date(year, UK_TAX_YEAR_START_MONTH, UK_TAX_YEAR_START_DAY)


def end_of_uk_tax_year(day: date) -> date:
    year = uk_tax_year(day) + 1
    if year > MAXYEAR:
        return date.max
    return date(year, UK_TAX_YEAR_START_MONTH, UK_TAX_YEAR_START_DAY) - ONE_DAY


# ---------- Column headings ----------
DAY_FORMAT = "%d-%b-%Y"


def heading_total(interval: DateInterval) -> str:
    return f"{interval.start.strftime(DAY_FORMAT)} to {interval.end.strftime(DAY_FORMAT)}"


def heading_tax_year(interval: DateInterval) -> str:
    year = uk_tax_year(interval.start)
    return f"{year} / {year + 1}"


def heading_calendar_year(interval: DateInterval) -> str:
    return str(interval.start.year)


def heading_quarter_and_month(interval: DateInterval) -> str:
    return interval.start.strftime("%b %Y")


def heading_weekly(interval: DateInterval) -> str:
    return f"{interval.start.strftime(DAY_FORMAT)} ({interval.start.isocalendar()[1]})"


# ---------- Granularity registry ----------
class Granularity(int, enum.Enum):
    """Ways a report range is split into columns, by registry index."""

    TOTALS = 0
    TAX_YEAR = 1
    CALENDAR_YEAR = 2
    QUARTER = 3
    MONTH = 4
    WEEK = 5


@dataclass(frozen=True, slots=True)
class GranularityDefinition:
    label: str
    column_title: str
    heading: Callable[[DateInterval], str]
    period_end: Callable[[date], date] | None = None

    @property
    def is_periodic(self) -> bool:
        return self.period_end is not None


GRANULARITY_DEFINITIONS: dict[Granularity, GranularityDefinition] = {
    Granularity.TOTALS: GranularityDefinition("Totals only", "", heading_total),
    Granularity.TAX_YEAR: GranularityDefinition("UK tax year", "UK tax year:", heading_tax_year, end_of_uk_tax_year),
    Granularity.CALENDAR_YEAR: GranularityDefinition("Calendar year", "Year:", heading_calendar_year, end_of_year),
    Granularity.QUARTER: GranularityDefinition(
        "Calendar quarter", "Quarter starting:", heading_quarter_and_month, end_of_quarter
    ),
    Granularity.MONTH: GranularityDefinition("Monthly", "Month:", heading_quarter_and_month, end_of_month),
    Granularity.WEEK: GranularityDefinition("Weekly", "Week starting:", heading_weekly, end_of_week),
}


def granularity_definition(granularity: Granularity | int) -> GranularityDefinition:
    return GRANULARITY_DEFINITIONS[Granularity(granularity)]


def granularity_labels() -> list[str]:
    """Labels in registry order; list position is the granularity index."""

    return [GRANULARITY_DEFINITIONS[item].label for item in Granularity]


# ---------- Column generation ----------
def generate_columns(interval: DateInterval, definition: GranularityDefinition) -> list[DateInterval]:
    """Split ``interval`` into consecutive column ranges.

    Totals reports get one column spanning the whole interval. Periodic
    reports get one column per period; the first and last columns are
    clipped to the interval rather than widened to whole periods.
    """

    if definition.period_end is None:
        return [interval]

    columns: list[DateInterval] = []
    period_start = interval.start
    while True:
        period_end = min(definition.period_end(period_start), interval.end)
        if period_end < period_start:
            raise ReportInvariantError(
                f"Period end {period_end.isoformat()} precedes period start {period_start.isoformat()}."
            )
        columns.append(DateInterval(period_start, period_end))
        if period_end == interval.end:
            return columns
        period_start = period_end + ONE_DAY
