from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import Repository
from app.repositories.jobs import as_date


class StudentProfileRepository(Repository):
    """Extended profile, at most one per student and addressed by student id."""

    entity = "Student profile"
    table = "student_profiles"
    alias = "sp"
    id_column = "profile_id"
    columns = ("bio", "linkedin_url", "github_url", "portfolio_url", "resume_url", "profile_picture",
               "availability_start", "availability_end", "salary_expectation")
    select_columns = """sp.*, s.first_name || ' ' || s.last_name AS student_name,
        s.email AS student_email, s.status AS student_status"""
    joins = "JOIN students s ON sp.student_id = s.student_id"

    def _find_for_student(self, db: Session, student_id: int):
        rows = self.fetch(db, f"{self.select_clause} WHERE sp.student_id = :id", {"id": student_id})
        return rows[0] if rows else None

    def get_for_student(self, db: Session, student_id: int) -> dict:
        profile = self._find_for_student(db, student_id)
        if profile is None:
            raise NotFoundError(self.entity)
        return profile

    @staticmethod
    def _check_availability(start, end) -> None:
        if start and end and as_date(end) < as_date(start):
            raise ValidationError.for_field("availability_end", "Availability end cannot be before its start")

    def save(self, db: Session, student_id: int, patch: Dict[str, Any]) -> bool:
        """Create the profile or patch the existing one. Returns True when it was created."""
        values = self._writable(patch)
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": student_id}):
            raise NotFoundError("Student")

        current = self._find_for_student(db, student_id)
        if current is None:
            self._check_availability(values.get("availability_start"), values.get("availability_end"))
            self.insert(db, {**values, "student_id": student_id})
            return True

        if not values:
            raise ValidationError("No fields to update")
        self._check_availability(values.get("availability_start", current["availability_start"]),
                                 values.get("availability_end", current["availability_end"]))
        self.update(db, current["profile_id"], values)
        return False

    def delete_for_student(self, db: Session, student_id: int) -> None:
        result = db.execute(text("DELETE FROM student_profiles WHERE student_id = :id"), {"id": student_id})
        if result.rowcount == 0:
            raise NotFoundError(self.entity)


student_profile_repository = StudentProfileRepository()
