"""Single-pass bucketing of time-ordered work packets into report cells.

Each task's packets are fetched once for the whole report range, newest
first. A ``PacketCursor`` walks such a sequence from its tail (the oldest
packet) towards its head without modifying it. Because columns are visited
oldest first and tile the report range without gaps, every packet is
looked at a bounded number of times across all columns of a task.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping, Sequence
from datetime import date, datetime
from typing import Any, Protocol

from trackrecord.reporting.calculators import ReportCell, ReportUserData
from trackrecord.reporting.periods import DateInterval


class TimeRecord(Protocol):
    date: date
    worked_hours: float
    user_id: Any


def record_date(record: TimeRecord) -> date:
    value = record.date
    if isinstance(value, datetime):
        return value.date()
    return value


class PacketCursor:
    """Read position over packets sorted by date descending."""

    __slots__ = ("_packets", "_position")

    def __init__(self, packets: Sequence[TimeRecord]) -> None:
        self._packets = packets
        # Number of packets not yet consumed; the next one sits just before it.
        self._position = len(packets)

    def __len__(self) -> int:
        return self._position

    @property
    def exhausted(self) -> bool:
        return self._position == 0

    def take_within(self, interval: DateInterval) -> Iterator[TimeRecord]:
        """Yield and consume the oldest packets while they fall inside ``interval``."""

        while self._position > 0:
            packet = self._packets[self._position - 1]
            if record_date(packet) not in interval:
                return
            self._position -= 1
            yield packet


def user_positions(user_ids: Sequence[Hashable]) -> dict[Hashable, int]:
    """Map each user id to the first index it appears at."""

    positions: dict[Hashable, int] = {}
    for index, user_id in enumerate(user_ids):
        positions.setdefault(user_id, index)
    return positions


def _sweep(
    interval: DateInterval,
    cursor: PacketCursor,
    positions: Mapping[Hashable, int],
    user_data: list[ReportUserData],
    add_hours,
) -> float:
    total = 0.0
    for packet in cursor.take_within(interval):
        total += packet.worked_hours
        index = positions.get(packet.user_id)
        if index is not None:
            add_hours(user_data[index], packet.worked_hours)
    return total


def calculate_cell(
    interval: DateInterval,
    committed: PacketCursor,
    not_committed: PacketCursor,
    user_ids: Sequence[Hashable] = (),
) -> ReportCell:
    """Build the cell for one task and column, consuming matched packets."""

    positions = user_positions(user_ids)
    cell = ReportCell(len(user_ids))
    cell.committed = _sweep(interval, committed, positions, cell.user_data, ReportUserData.add_committed_hours)
    cell.not_committed = _sweep(
        interval, not_committed, positions, cell.user_data, ReportUserData.add_not_committed_hours
    )
    return cell
