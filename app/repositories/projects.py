from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import Repository
from app.repositories.jobs import as_date


class ProjectRepository(Repository):
    entity = "Project"
    table = "projects"
    alias = "p"
    id_column = "project_id"
    columns = ("student_id", "project_name", "project_type", "description", "technologies_used",
               "start_date", "end_date")
    required = ("student_id", "project_name")
    filters = {
        "student_id": "p.student_id = :student_id",
        "project_type": "p.project_type = :project_type",
    }
    search_columns = ("p.project_name", "p.description", "p.technologies_used")
    select_columns = "p.*, s.first_name || ' ' || s.last_name AS student_name"
    joins = "JOIN students s ON p.student_id = s.student_id"
    order_by = "p.start_date DESC, p.project_id DESC"

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id",
                                {"id": payload["student_id"]}):
            raise ValidationError.for_field("student_id", "Student not found")

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        start = patch.get("start_date", current["start_date"])
        end = patch.get("end_date", current["end_date"])
        if start and end and as_date(end) < as_date(start):
            raise ValidationError.for_field("end_date", "End date cannot be before start date")

    def by_student(self, db: Session, student_id: int) -> List[dict]:
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": student_id}):
            raise NotFoundError("Student")
        return self.fetch(db, f"{self.select_clause} WHERE p.student_id = :id ORDER BY {self.order_by}",
                          {"id": student_id})

    def project_types(self, db: Session) -> List[str]:
        rows = self.fetch(db, """
            SELECT DISTINCT project_type FROM projects
            WHERE project_type IS NOT NULL ORDER BY project_type
        """)
        return [row["project_type"] for row in rows]


project_repository = ProjectRepository()
