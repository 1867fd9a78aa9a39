from __future__ import annotations

from datetime import date, timedelta

import pytest

from trackrecord.reporting import (
    GRANULARITY_DEFINITIONS,
    DateInterval,
    Granularity,
    GranularityDefinition,
    ReportInvariantError,
    generate_columns,
    granularity_definition,
    granularity_labels,
)
from trackrecord.reporting.periods import (
    beginning_of_uk_tax_year,
    end_of_month,
    end_of_quarter,
    end_of_uk_tax_year,
    end_of_week,
    end_of_year,
    heading_calendar_year,
    heading_quarter_and_month,
    heading_tax_year,
    heading_total,
    heading_weekly,
    uk_tax_year,
)

PERIOD_ENDS = [end_of_uk_tax_year, end_of_year, end_of_quarter, end_of_month, end_of_week]


def test_date_interval_swaps_reversed_bounds() -> None:
    interval = DateInterval(date(2024, 2, 1), date(2024, 1, 1))

    assert interval.start == date(2024, 1, 1)
    assert interval.end == date(2024, 2, 1)
    assert interval.days == 32
    assert date(2024, 1, 15) in interval
    assert date(2024, 2, 2) not in interval


def test_date_interval_iterates_days_inclusive() -> None:
    interval = DateInterval(date(2024, 2, 28), date(2024, 3, 1))

    assert list(interval) == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2024, 1, 1), date(2024, 1, 7)),
        (date(2024, 1, 7), date(2024, 1, 7)),
        (date(2024, 1, 10), date(2024, 1, 14)),
    ],
)
def test_end_of_week_is_sunday(day: date, expected: date) -> None:
    assert end_of_week(day) == expected


def test_end_of_month_handles_leap_years() -> None:
    assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert end_of_month(date(2023, 2, 10)) == date(2023, 2, 28)
    assert end_of_month(date(2024, 12, 1)) == date(2024, 12, 31)


def test_end_of_quarter_and_year() -> None:
    assert end_of_quarter(date(2024, 2, 10)) == date(2024, 3, 31)
    assert end_of_quarter(date(2024, 4, 1)) == date(2024, 6, 30)
    assert end_of_quarter(date(2024, 11, 2)) == date(2024, 12, 31)
    assert end_of_year(date(2024, 6, 15)) == date(2024, 12, 31)


@pytest.mark.parametrize(
    ("day", "start", "end"),
    [
        (date(2024, 4, 5), date(2023, 4, 6), date(2024, 4, 5)),
        (date(2024, 4, 6), date(2024, 4, 6), date(2025, 4, 5)),
        (date(2024, 1, 10), date(2023, 4, 6), date(2024, 4, 5)),
        (date(2024, 12, 31), date(2024, 4, 6), date(2025, 4, 5)),
    ],
)
def test_uk_tax_year_bounds(day: date, start: date, end: date) -> None:
    assert beginning_of_uk_tax_year(day) == start
    assert end_of_uk_tax_year(day) == end


@pytest.mark.parametrize("period_end", PERIOD_ENDS)
def test_period_ends_are_idempotent_and_monotonic(period_end) -> None:
    day = date(2023, 12, 20)
    previous = None
    for _ in range(400):
        end = period_end(day)
        assert end >= day
        assert period_end(end) == end
        if previous is not None:
            assert end >= previous
        previous = end
        day += timedelta(days=1)


def test_headings() -> None:
    interval = DateInterval(date(2024, 1, 15), date(2024, 1, 21))

    assert heading_total(interval) == "15-Jan-2024 to 21-Jan-2024"
    assert heading_tax_year(interval) == "2023 / 2024"
    assert heading_calendar_year(interval) == "2024"
    assert heading_quarter_and_month(interval) == "Jan 2024"
    assert heading_weekly(interval) == "15-Jan-2024 (3)"


def test_registry_covers_every_granularity_in_index_order() -> None:
    assert list(GRANULARITY_DEFINITIONS) == list(Granularity)
    assert [item.value for item in Granularity] == [0, 1, 2, 3, 4, 5]
    assert granularity_labels() == [
        "Totals only",
        "UK tax year",
        "Calendar year",
        "Calendar quarter",
        "Monthly",
        "Weekly",
    ]
    assert granularity_definition(4).column_title == "Month:"
    assert granularity_definition(Granularity.TOTALS).is_periodic is False
    assert all(GRANULARITY_DEFINITIONS[item].is_periodic for item in list(Granularity)[1:])


def test_unknown_granularity_index_is_rejected() -> None:
    with pytest.raises(ValueError):
        granularity_definition(6)


def test_totals_mode_yields_single_column() -> None:
    interval = DateInterval(date(2024, 1, 1), date(2024, 1, 31))

    assert generate_columns(interval, granularity_definition(Granularity.TOTALS)) == [interval]


def test_monthly_columns_are_clipped_to_range() -> None:
    interval = DateInterval(date(2024, 1, 15), date(2024, 2, 10))

    columns = generate_columns(interval, granularity_definition(Granularity.MONTH))

    assert columns == [
        DateInterval(date(2024, 1, 15), date(2024, 1, 31)),
        DateInterval(date(2024, 2, 1), date(2024, 2, 10)),
    ]


def test_tax_year_columns_split_on_sixth_of_april() -> None:
    interval = DateInterval(date(2023, 1, 1), date(2024, 12, 31))

    columns = generate_columns(interval, granularity_definition(Granularity.TAX_YEAR))

    assert [(column.start, column.end) for column in columns] == [
        (date(2023, 1, 1), date(2023, 4, 5)),
        (date(2023, 4, 6), date(2024, 4, 5)),
        (date(2024, 4, 6), date(2024, 12, 31)),
    ]


def test_single_day_range_yields_one_column_for_every_granularity() -> None:
    interval = DateInterval(date(2024, 3, 31), date(2024, 3, 31))

    for granularity in Granularity:
        assert generate_columns(interval, granularity_definition(granularity)) == [interval]


@pytest.mark.parametrize("granularity", list(Granularity))
@pytest.mark.parametrize(
    ("start", "end"),
    [
        (date(2024, 1, 15), date(2024, 2, 10)),
        (date(2022, 4, 6), date(2024, 4, 5)),
        (date(2023, 12, 31), date(2024, 1, 1)),
        (date(2020, 2, 29), date(2021, 3, 1)),
    ],
)
def test_columns_tile_range_without_gaps_or_overlap(granularity: Granularity, start: date, end: date) -> None:
    interval = DateInterval(start, end)

    columns = generate_columns(interval, granularity_definition(granularity))

    assert columns[0].start == interval.start
    assert columns[-1].end == interval.end
    for previous, current in zip(columns, columns[1:]):
        assert current.start == previous.end + timedelta(days=1)
    assert sum(column.days for column in columns) == interval.days


def test_non_advancing_period_function_is_an_invariant_error() -> None:
    interval = DateInterval(date(2024, 1, 1), date(2024, 1, 31))
    broken = GranularityDefinition("Broken", "", heading_total, lambda day: day - timedelta(days=1))

    with pytest.raises(ReportInvariantError):
        generate_columns(interval, broken)


def test_week_end_is_clamped_at_last_representable_day() -> None:
    assert end_of_week(date(9999, 12, 30)) == date.max
    assert list(DateInterval(date(9999, 12, 30), date.max)) == [date(9999, 12, 30), date.max]


def test_uk_tax_year_bounds_at_calendar_edges() -> None:
    assert uk_tax_year(date.min) == 0
    assert beginning_of_uk_tax_year(date(1, 2, 1)) == date.min
    assert end_of_uk_tax_year(date(1, 2, 1)) == date(1, 4, 5)
    assert beginning_of_uk_tax_year(date(9999, 5, 1)) == date(9999, 4, 6)
    assert end_of_uk_tax_year(date(9999, 5, 1)) == date.max
    assert heading_tax_year(DateInterval(date.min, date(1, 2, 1))) == "0 / 1"


@pytest.mark.parametrize("granularity", list(Granularity))
@pytest.mark.parametrize(
    ("start", "end"),
    [
        (date(9999, 12, 20), date.max),
        (date(9998, 3, 1), date.max),
        (date.min, date(1, 2, 1)),
        (date.min, date(2, 5, 1)),
    ],
)
def test_columns_reach_calendar_edges(granularity: Granularity, start: date, end: date) -> None:
    interval = DateInterval(start, end)

    columns = generate_columns(interval, granularity_definition(granularity))

    assert columns[0].start == start
    assert columns[-1].end == end
    assert sum(column.days for column in columns) == interval.days
