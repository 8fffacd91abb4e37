from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.repositories.base import Repository
from app.repositories.jobs import as_date


class TaskRepository(Repository):
    entity = "Task"
    table = "tasks"
    alias = "t"
    id_column = "task_id"
    columns = ("internship_id", "title", "description", "assigned_date", "due_date", "status", "priority")
    required = ("internship_id", "title", "assigned_date")
    filters = {
        "internship_id": "t.internship_id = :internship_id",
        "status": "t.status = :status",
        "priority": "t.priority = :priority",
    }
    search_columns = ("t.title", "t.description")
    select_columns = "t.*, it.title AS internship_title"
    joins = "JOIN internships it ON t.internship_id = it.internship_id"
    order_by = "t.due_date ASC, t.task_id ASC"

    @staticmethod
    def _check_dates(assigned_date, due_date) -> None:
        if assigned_date and due_date and as_date(due_date) < as_date(assigned_date):
            raise ValidationError.for_field("due_date", "Due date cannot be before assigned date")

    def _check_internship(self, db: Session, internship_id: int) -> None:
        if not self.count_where(db, "SELECT COUNT(*) FROM internships WHERE internship_id = :id",
                                {"id": internship_id}):
            raise ValidationError.for_field("internship_id", "Internship not found")

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self._check_dates(payload["assigned_date"], payload.get("due_date"))
        self._check_internship(db, payload["internship_id"])

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        self._check_dates(patch.get("assigned_date", current["assigned_date"]),
                          patch.get("due_date", current["due_date"]))
        if "internship_id" in patch:
            self._check_internship(db, patch["internship_id"])

    def overview(self, db: Session, internship_id: int = None) -> Dict[str, Any]:
        where, params = self.build_where({"internship_id": internship_id})
        by_status = {status: count for status, count in db.execute(
            text(f"SELECT t.status, COUNT(*) {self.from_clause} WHERE {where} GROUP BY t.status"), params
        ).fetchall()}
        by_priority = {priority: count for priority, count in db.execute(
            text(f"SELECT t.priority, COUNT(*) {self.from_clause} WHERE {where} GROUP BY t.priority"), params
        ).fetchall()}
        total = sum(by_status.values())
        completed = by_status.get("Completed", 0)
        return {
            "total": total,
            "by_status": by_status,
            "by_priority": by_priority,
            "completion_rate": round(completed * 100.0 / total, 2) if total else 0.0,
        }


task_repository = TaskRepository()
