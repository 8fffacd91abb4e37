from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import Repository
from app.repositories.jobs import as_date


class EducationRepository(Repository):
    entity = "Education record"
    table = "education"
    alias = "e"
    id_column = "education_id"
    columns = ("student_id", "degree", "college", "cgpa", "start_date", "end_date")
    required = ("student_id", "degree", "college")
    filters = {
        "student_id": "e.student_id = :student_id",
        "degree": "LOWER(e.degree) LIKE '%' || LOWER(:degree) || '%'",
        "college": "LOWER(e.college) LIKE '%' || LOWER(:college) || '%'",
    }
    search_columns = ("e.degree", "e.college")
    select_columns = "e.*, s.first_name || ' ' || s.last_name AS student_name"
    joins = "JOIN students s ON e.student_id = s.student_id"
    order_by = "e.start_date DESC, e.education_id DESC"

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id",
                                {"id": payload["student_id"]}):
            raise ValidationError.for_field("student_id", "Student not found")

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        start = patch.get("start_date", current["start_date"])
        end = patch.get("end_date", current["end_date"])
        if start and end and as_date(end) <= as_date(start):
            raise ValidationError.for_field("end_date", "End date must be after start date")

    def by_student(self, db: Session, student_id: int) -> List[dict]:
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": student_id}):
            raise NotFoundError("Student")
        return self.fetch(db, f"{self.select_clause} WHERE e.student_id = :id ORDER BY {self.order_by}",
                          {"id": student_id})


education_repository = EducationRepository()
