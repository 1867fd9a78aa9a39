"""Repository helpers feeding the report engine."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from trackrecord.models.entities import Customer, Project, Task, User, WorkPacket
from trackrecord.reporting.periods import DateInterval


class ReportRepository:
    """Task and user directories plus the work packet source for reports."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Tasks ----------
    def list_tasks(self, task_ids: Sequence[UUID] | None = None) -> list[Task]:
        """Tasks ordered by customer, project and task title.

        Without explicit ids only active tasks are listed; explicitly requested
        tasks are returned whether active or not.
        """

        statement = (
            select(Task)
            .outerjoin(Project, Project.id == Task.project_id)
            .outerjoin(Customer, Customer.id == Project.customer_id)
            .order_by(Customer.name.asc(), Project.name.asc(), Task.title.asc(), Task.code.asc())
        )
        if task_ids is None:
            statement = statement.where(Task.active.is_(True))
        else:
            statement = statement.where(Task.id.in_(list(task_ids)))
        return list(self.db.scalars(statement).all())

    # ---------- Projects and customers ----------
    def list_projects(self, project_ids: set[UUID]) -> list[Project]:
        if not project_ids:
            return []
        return list(self.db.scalars(select(Project).where(Project.id.in_(project_ids))).all())

    def list_customers(self, customer_ids: set[UUID]) -> list[Customer]:
        if not customer_ids:
            return []
        return list(self.db.scalars(select(Customer).where(Customer.id.in_(customer_ids))).all())

    # ---------- Users ----------
    def list_users(self, user_ids: Sequence[UUID] | None = None) -> list[User]:
        """Active users ordered by name."""

        statement = select(User).where(User.active.is_(True)).order_by(User.name.asc(), User.email.asc())
        if user_ids is not None:
            statement = statement.where(User.id.in_(list(user_ids)))
        return list(self.db.scalars(statement).all())

    # ---------- Work packets ----------
    def date_bounds(self, tasks: Sequence[Task]) -> tuple[date | None, date | None]:
        """Earliest and latest packet dates for the given tasks (all tasks if empty)."""

        statement = select(func.min(WorkPacket.date), func.max(WorkPacket.date))
        if tasks:
            statement = statement.where(WorkPacket.task_id.in_([task.id for task in tasks]))
        earliest, latest = self.db.execute(statement).one()
        return earliest, latest

    def _work_packets(
        self,
        task: Task,
        user_ids: Sequence[UUID] | None,
        interval: DateInterval,
        *,
        committed: bool,
    ) -> list[WorkPacket]:
        conditions = [
            WorkPacket.task_id == task.id,
            WorkPacket.committed.is_(committed),
            WorkPacket.date >= interval.start,
            WorkPacket.date <= interval.end,
        ]
        if user_ids is not None:
            conditions.append(WorkPacket.user_id.in_(list(user_ids)))
        return list(
            self.db.scalars(
                select(WorkPacket)
                .where(and_(*conditions))
                .order_by(WorkPacket.date.desc(), WorkPacket.id.desc())
            ).all()
        )

    def fetch_committed(
        self, task: Task, user_ids: Sequence[UUID] | None, interval: DateInterval
    ) -> list[WorkPacket]:
        """Committed packets in ``interval``, newest first."""

        return self._work_packets(task, user_ids, interval, committed=True)

    def fetch_not_committed(
        self, task: Task, user_ids: Sequence[UUID] | None, interval: DateInterval
    ) -> list[WorkPacket]:
        """Not-committed packets in ``interval``, newest first."""

        return self._work_packets(task, user_ids, interval, committed=False)
