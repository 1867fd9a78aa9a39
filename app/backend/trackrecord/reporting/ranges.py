"""Resolution of user-supplied range inputs into one report interval."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from trackrecord.reporting.periods import DAY_FORMAT, DateInterval, end_of_month

logger = logging.getLogger(__name__)

# "YYYY_NN" selectors, e.g. "2024_03" for March 2024 or ISO week 3 of 2024.
SELECTOR_SEPARATOR = "_"

Selector = str | tuple[int, int]
DateInput = str | date


@dataclass(slots=True)
class RangeSelection:
    """Raw range inputs as received from a report form.

    For each endpoint a month selector wins over a week selector, which
    wins over an explicit date. Anything missing or unparsable falls back
    to the dataset-derived default for that endpoint.
    """

    range_start: DateInput | None = None
    range_end: DateInput | None = None
    range_week_start: Selector | None = None
    range_week_end: Selector | None = None
    range_month_start: Selector | None = None
    range_month_end: Selector | None = None


def _blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def unpack_selector(value: Selector) -> tuple[int, int]:
    """Turn ``"2024_03"`` or ``(2024, 3)`` into ``(2024, 3)``."""

    if isinstance(value, str):
        parts = [int(part) for part in value.strip().split(SELECTOR_SEPARATOR)]
    else:
        parts = [int(part) for part in value]
    if len(parts) != 2:
        raise ValueError(f"Expected year and number, got {value!r}.")
    return parts[0], parts[1]


def parse_date(value: DateInput) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.strptime(text, DAY_FORMAT).date()


def _resolve_start(selection: RangeSelection) -> date:
    if not _blank(selection.range_month_start):
        year, month = unpack_selector(selection.range_month_start)
        return date(year, month, 1)
    if not _blank(selection.range_week_start):
        year, week = unpack_selector(selection.range_week_start)
        return date.fromisocalendar(year, week, 1)
    if _blank(selection.range_start):
        raise ValueError("No start of range given.")
    return parse_date(selection.range_start)


def _resolve_end(selection: RangeSelection) -> date:
    if not _blank(selection.range_month_end):
        year, month = unpack_selector(selection.range_month_end)
        return end_of_month(date(year, month, 1))
    if not _blank(selection.range_week_end):
        year, week = unpack_selector(selection.range_week_end)
        return date.fromisocalendar(year, week, 7)
    if _blank(selection.range_end):
        raise ValueError("No end of range given.")
    return parse_date(selection.range_end)


def _resolve_endpoint(resolver: Callable[[RangeSelection], date], selection: RangeSelection, fallback: date) -> date:
    try:
        return resolver(selection)
    except (TypeError, ValueError) as exc:
        logger.debug("Using default report range endpoint %s: %s", fallback.isoformat(), exc)
        return fallback


def dataset_range(
    earliest: date | None,
    latest: date | None,
    *,
    first_year: int,
    today: date,
) -> DateInterval:
    """Default interval spanning the recorded work, or the whole timesheet era."""

    start = earliest if earliest is not None else date(first_year, 1, 1)
    end = latest if latest is not None else today
    return DateInterval(start, end)


def resolve_range(selection: RangeSelection, default: DateInterval) -> DateInterval:
    """Resolve both endpoints independently, swapping them if reversed."""

    start = _resolve_endpoint(_resolve_start, selection, default.start)
    end = _resolve_endpoint(_resolve_end, selection, default.end)
    return DateInterval(start, end)
