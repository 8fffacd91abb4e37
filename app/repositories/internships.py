from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.repositories.base import Repository
from app.repositories.jobs import as_date


def weeks_between(start_date, end_date) -> int:
    return max((as_date(end_date) - as_date(start_date)).days // 7, 1)


class InternshipRepository(Repository):
    """
    Internship records. The intern (student_id) and status are written by the
    transition engine together with the student's availability.
    """

    entity = "Internship"
    table = "internships"
    alias = "it"
    id_column = "internship_id"
    columns = ("company_id", "title", "description", "start_date", "end_date", "duration_weeks",
               "stipend", "supervisor_name", "supervisor_email", "supervisor_phone",
               "requirements", "learning_objectives")
    required = ("company_id", "title", "start_date", "end_date")
    filters = {
        "status": "it.status = :status",
        "company_id": "it.company_id = :company_id",
        "student_id": "it.student_id = :student_id",
    }
    search_columns = ("it.title", "it.supervisor_name", "c.name")
    select_columns = """it.*, c.name AS company_name,
        s.first_name || ' ' || s.last_name AS student_name, s.email AS student_email"""
    joins = """JOIN companies c ON it.company_id = c.company_id
        LEFT JOIN students s ON it.student_id = s.student_id"""
    order_by = "it.start_date DESC, it.internship_id DESC"

    @staticmethod
    def _check_dates(start_date, end_date) -> None:
        if start_date and end_date and as_date(end_date) <= as_date(start_date):
            raise ValidationError.for_field("end_date", "End date must be after start date")

    def _check_company(self, db: Session, company_id: int) -> None:
        if not self.count_where(
            db, "SELECT COUNT(*) FROM companies WHERE company_id = :id AND is_active = TRUE", {"id": company_id}
        ):
            raise ValidationError.for_field("company_id", "Company not found or inactive")

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self._check_dates(payload["start_date"], payload["end_date"])
        self._check_company(db, payload["company_id"])
        if payload.get("duration_weeks") is None:
            payload["duration_weeks"] = weeks_between(payload["start_date"], payload["end_date"])

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        start_date = patch.get("start_date", current["start_date"])
        end_date = patch.get("end_date", current["end_date"])
        self._check_dates(start_date, end_date)
        if "company_id" in patch:
            self._check_company(db, patch["company_id"])
        if ("start_date" in patch or "end_date" in patch) and "duration_weeks" not in patch:
            patch["duration_weeks"] = weeks_between(start_date, end_date)

    def for_student(self, db: Session, student_id: int) -> List[dict]:
        return self.fetch(db, f"{self.select_clause} WHERE it.student_id = :id ORDER BY it.start_date DESC",
                          {"id": student_id})

    def get_details(self, db: Session, internship_id: int) -> dict:
        internship = self.get(db, internship_id)
        internship["tasks"] = self.fetch(db, """
            SELECT task_id, title, status, priority, assigned_date, due_date
            FROM tasks WHERE internship_id = :id ORDER BY due_date ASC, task_id ASC
        """, {"id": internship_id})
        internship["evaluations"] = self.fetch(db, """
            SELECT evaluation_id, evaluator_type, overall_rating, evaluation_date
            FROM evaluations WHERE internship_id = :id ORDER BY evaluation_date DESC, evaluation_id DESC
        """, {"id": internship_id})
        return internship


internship_repository = InternshipRepository()
