"""Worked-hours report service layer."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from trackrecord.core.config import get_settings
from trackrecord.models.entities import Customer, Project, Task, User
from trackrecord.reporting import (
    GRANULARITY_DEFINITIONS,
    Granularity,
    HourAccumulator,
    RangeSelection,
    Report,
    SectionPredicate,
)
from trackrecord.repositories.report_repository import ReportRepository

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {"csv", "xlsx"}
NO_PROJECT_TITLE = "(No project)"


@dataclass(slots=True)
class ReportRequestData:
    task_ids: list[UUID]
    user_ids: list[UUID] = field(default_factory=list)
    granularity: Granularity | None = None
    selection: RangeSelection = field(default_factory=RangeSelection)


@dataclass(slots=True)
class CompiledReport:
    """A compiled report with the projects and customers its sections are titled from."""

    report: Report
    projects: dict[UUID, Project]
    customers: dict[UUID, Customer]


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def _hours(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 2)


def _serialize_hours(accumulator: HourAccumulator | None) -> dict[str, float]:
    if accumulator is None:
        return {"committed": 0.0, "not_committed": 0.0, "total": 0.0}
    return {
        "committed": _hours(accumulator.committed),
        "not_committed": _hours(accumulator.not_committed),
        "total": _hours(accumulator.total()),
    }


def section_predicate(projects: dict[UUID, Project]) -> SectionPredicate:
    """Start a new section whenever the customer or project changes."""

    def section_key(task: Task) -> tuple[UUID | None, UUID | None]:
        project = projects.get(task.project_id) if task.project_id is not None else None
        customer_id = project.customer_id if project is not None else None
        return customer_id, task.project_id

    def is_new_section(previous_task: Task | None, task: Task) -> bool:
        return previous_task is None or section_key(previous_task) != section_key(task)

    return is_new_section


class ReportService:
    """Service compiling, serializing and exporting worked-hours reports."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ReportRepository(db)
        self.settings = get_settings()

    # ---------- Form options ----------
    @staticmethod
    def list_granularities() -> list[dict[str, object]]:
        return [
            {
                "index": granularity.value,
                "key": granularity.name.lower(),
                "label": definition.label,
                "column_title": definition.column_title,
                "periodic": definition.is_periodic,
            }
            for granularity, definition in GRANULARITY_DEFINITIONS.items()
        ]

    def report_options(self) -> dict[str, object]:
        tasks = self.repo.list_tasks()
        users = self.repo.list_users()
        return {
            "granularities": self.list_granularities(),
            "default_granularity": self.settings.report_default_granularity,
            "tasks": [self.serialize_task(task) for task in tasks],
            "users": [self.serialize_user(user) for user in users],
        }

    # ---------- Serialization ----------
    @staticmethod
    def serialize_task(task: Task) -> dict[str, object]:
        return {
            "id": str(task.id),
            "project_id": str(task.project_id) if task.project_id is not None else None,
            "code": task.code,
            "title": task.title,
            "duration": _hours(task.duration),
            "active": task.active,
        }

    @staticmethod
    def serialize_user(user: User) -> dict[str, object]:
        return {
            "id": str(user.id),
            "name": user.name,
            "email": user.email,
        }

    # ---------- Selection ----------
    def _resolve_tasks(self, task_ids: list[UUID]) -> list[Task]:
        if not task_ids:
            return []
        tasks = self.repo.list_tasks(task_ids)
        found = {task.id for task in tasks}
        unknown = [str(tid) for tid in set(task_ids) if tid not in found]
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown task_id values: {', '.join(sorted(unknown))}",
            )
        return tasks

    def _resolve_users(self, user_ids: list[UUID]) -> list[User]:
        if not user_ids:
            return []
        users = self.repo.list_users(user_ids)
        found = {user.id for user in users}
        unknown = [str(uid) for uid in set(user_ids) if uid not in found]
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown or inactive user_id values: {', '.join(sorted(unknown))}",
            )
        return users

    def _section_context(self, tasks: list[Task]) -> tuple[dict[UUID, Project], dict[UUID, Customer]]:
        projects = {
            project.id: project
            for project in self.repo.list_projects({task.project_id for task in tasks if task.project_id})
        }
        customers = {
            customer.id: customer
            for customer in self.repo.list_customers(
                {project.customer_id for project in projects.values() if project.customer_id}
            )
        }
        return projects, customers

    @staticmethod
    def _section_title(task: Task, projects: dict[UUID, Project], customers: dict[UUID, Customer]) -> str:
        project = projects.get(task.project_id) if task.project_id is not None else None
        if project is None:
            return NO_PROJECT_TITLE
        customer = customers.get(project.customer_id) if project.customer_id is not None else None
        if customer is None:
            return project.name
        return f"{customer.name}: {project.name}"

    # ---------- Compilation ----------
    def compile_report(self, data: ReportRequestData, *, today: date | None = None) -> CompiledReport:
        tasks = self._resolve_tasks(data.task_ids)
        users = self._resolve_users(data.user_ids)
        projects, customers = self._section_context(tasks)
        granularity = data.granularity
        if granularity is None:
            granularity = Granularity(self.settings.report_default_granularity)

        report = Report(
            tasks=tasks,
            users=users,
            granularity=granularity,
            selection=data.selection,
            first_year=self.settings.timesheet_first_year,
            today=today,
        )
        report.compile(self.repo, section_predicate(projects))
        return CompiledReport(report=report, projects=projects, customers=customers)

    def report_payload(self, data: ReportRequestData, *, today: date | None = None) -> dict[str, object]:
        return self.serialize_report(self.compile_report(data, today=today))

    def serialize_report(self, compiled: CompiledReport) -> dict[str, object]:
        report = compiled.report
        projects, customers = compiled.projects, compiled.customers

        columns = [
            {
                "index": index,
                "start": column_range.start.isoformat(),
                "end": column_range.end.isoformat(),
                "heading": report.column_heading(index),
                "partial": report.partial_column(index),
                "totals": _serialize_hours(report.column_totals[index]),
            }
            for index, column_range in enumerate(report.column_ranges)
        ]

        rows = [
            {
                "task": self.serialize_task(row.task),
                "cells": [
                    _serialize_hours(cell) | {"users": [_serialize_hours(data) for data in cell.user_data]}
                    for cell in row.cells
                ],
                "user_totals": [_serialize_hours(total) for total in row.user_row_totals],
                "totals": _serialize_hours(row),
            }
            for row in report.rows
        ]

        sections = [
            {
                "title": self._section_title(report.rows[section.row_indices[0]].task, projects, customers),
                "row_indices": list(section.row_indices),
                "cells": [_serialize_hours(cell) for cell in section.cells],
                "user_totals": [_serialize_hours(total) for total in section.user_row_totals],
                "totals": _serialize_hours(section),
            }
            for section in report.sections
        ]

        return {
            "label": report.label,
            "granularity": report.granularity.value,
            "column_title": report.column_title,
            "state": report.state.value,
            "range": {
                "start": report.range.start.isoformat(),
                "end": report.range.end.isoformat(),
                "display": report.display_range(),
            },
            "users": [self.serialize_user(user) for user in report.users],
            "columns": columns,
            "rows": rows,
            "sections": sections,
            "user_totals": [_serialize_hours(total) for total in report.user_column_totals],
            "totals": _serialize_hours(report),
            "total_duration": _hours(report.total_duration),
            "total_actual_remaining": _hours(report.total_actual_remaining),
            "total_potential_remaining": _hours(report.total_potential_remaining),
        }

    # ---------- Exports ----------
    @staticmethod
    def _flatten_report(report_payload: dict[str, object]) -> list[dict[str, object]]:
        columns = report_payload["columns"]
        section_by_row: dict[int, str] = {}
        for section in report_payload["sections"]:
            for row_index in section["row_indices"]:
                section_by_row[row_index] = section["title"]

        flat_rows: list[dict[str, object]] = []
        for row_index, row in enumerate(report_payload["rows"]):
            task = row["task"]
            for column, cell in zip(columns, row["cells"]):
                flat_rows.append(
                    {
                        "section": section_by_row.get(row_index, ""),
                        "task_code": task["code"],
                        "task_title": task["title"],
                        "column": column["heading"],
                        "start": column["start"],
                        "end": column["end"],
                        "committed": cell["committed"],
                        "not_committed": cell["not_committed"],
                        "total": cell["total"],
                    }
                )
        return flat_rows

    def export_report(
        self,
        data: ReportRequestData,
        *,
        format_name: str,
        today: date | None = None,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in EXPORT_FORMATS:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="format must be one of: csv, xlsx.",
            )

        report_payload = self.report_payload(data, today=today)
        flattened = self._flatten_report(report_payload)
        fieldnames = [
            "section",
            "task_code",
            "task_title",
            "column",
            "start",
            "end",
            "committed",
            "not_committed",
            "total",
        ]
        range_data = report_payload["range"]
        base_filename = f"report-{range_data['start']}-{range_data['end']}"
        logger.info("Exporting %d report lines as %s", len(flattened), normalized_format)

        if normalized_format == "csv":
            sio = io.StringIO()
            writer = csv.DictWriter(sio, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(flattened)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8"),
            )

        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "report"
        sheet.append(fieldnames)
        for row in flattened:
            sheet.append([row.get(column, "") for column in fieldnames])

        output = BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
