"""Plain stand-ins for tasks, users, work packets and the record source."""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from datetime import date

from trackrecord.reporting import DateInterval


@dataclass(frozen=True)
class FakeTask:
    id: str
    duration: float = 0.0
    project: str = ""


@dataclass(frozen=True)
class FakeUser:
    id: str
    name: str = ""


@dataclass(frozen=True)
class FakePacket:
    date: date
    worked_hours: float
    user_id: str = "u1"


def newest_first(packets: Sequence[FakePacket]) -> list[FakePacket]:
    return sorted(packets, key=lambda packet: packet.date, reverse=True)


@dataclass
class InMemoryRecordSource:
    committed: dict[str, list[FakePacket]] = field(default_factory=dict)
    not_committed: dict[str, list[FakePacket]] = field(default_factory=dict)
    fetch_count: int = 0

    def date_bounds(self, tasks: Sequence[FakeTask]) -> tuple[date | None, date | None]:
        task_ids = {task.id for task in tasks} if tasks else set(self.committed) | set(self.not_committed)
        dates = [
            packet.date
            for packets in (self.committed, self.not_committed)
            for task_id, task_packets in packets.items()
            if task_id in task_ids
            for packet in task_packets
        ]
        if not dates:
            return None, None
        return min(dates), max(dates)

    def _fetch(
        self,
        packets: dict[str, list[FakePacket]],
        task: FakeTask,
        user_ids: Sequence[Hashable] | None,
        interval: DateInterval,
    ) -> list[FakePacket]:
        self.fetch_count += 1
        matching = [
            packet
            for packet in packets.get(task.id, [])
            if packet.date in interval and (user_ids is None or packet.user_id in user_ids)
        ]
        return newest_first(matching)

    def fetch_committed(self, task, user_ids, interval):
        return self._fetch(self.committed, task, user_ids, interval)

    def fetch_not_committed(self, task, user_ids, interval):
        return self._fetch(self.not_committed, task, user_ids, interval)


def by_project(previous_task: FakeTask | None, task: FakeTask) -> bool:
    return previous_task is None or previous_task.project != task.project
