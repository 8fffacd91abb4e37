from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.repositories.base import Repository
from app.services.transitions import OPEN_APPLICATION_STATES, OPEN_INTERNSHIP_STATES


class StudentRepository(Repository):
    entity = "Student"
    table = "students"
    alias = "s"
    id_column = "student_id"
    columns = ("first_name", "middle_name", "last_name", "email", "phone",
               "city", "state", "pin", "age")
    required = ("first_name", "last_name", "email")
    filters = {
        "status": "s.status = :status",
        "city": "LOWER(s.city) = LOWER(:city)",
        "state": "LOWER(s.state) = LOWER(:state)",
    }
    search_columns = ("s.first_name", "s.last_name", "s.email", "s.city")
    order_by = "s.created_at DESC, s.student_id DESC"

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self.ensure_unique(db, "students", "email", payload["email"], self.entity)

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        if "email" in patch:
            self.ensure_unique(db, "students", "email", patch["email"], self.entity,
                               id_column="student_id", exclude_id=current["student_id"])

    def open_commitments(self, db: Session, student_id: int) -> Dict[str, int]:
        app_in, app_params = self.status_params("a", OPEN_APPLICATION_STATES)
        int_in, int_params = self.status_params("i", OPEN_INTERNSHIP_STATES)
        return {
            "applications": self.count_where(
                db,
                f"SELECT COUNT(*) FROM applications WHERE student_id = :id AND status IN ({app_in})",
                {"id": student_id, **app_params},
            ),
            "internships": self.count_where(
                db,
                f"SELECT COUNT(*) FROM internships WHERE student_id = :id AND status IN ({int_in})",
                {"id": student_id, **int_params},
            ),
        }

    def before_delete(self, db: Session, current: dict) -> None:
        open_items = self.open_commitments(db, current["student_id"])
        if open_items["applications"]:
            raise ConflictError("Cannot delete student with active applications")
        if open_items["internships"]:
            raise ConflictError("Cannot delete student with an active internship")

    def get_details(self, db: Session, student_id: int) -> dict:
        """Student with skills and applications, for the profile view."""
        student = self.get(db, student_id)
        student["skills"] = self.fetch(db, """
            SELECT sk.skill_id, sk.skill_name, sk.category, ss.proficiency_level
            FROM student_skills ss JOIN skills sk ON ss.skill_id = sk.skill_id
            WHERE ss.student_id = :id ORDER BY sk.skill_name
        """, {"id": student_id})
        student["applications"] = self.fetch(db, """
            SELECT a.application_id, a.job_id, a.status, a.application_date,
                   j.title AS job_title, c.name AS company_name
            FROM applications a
            JOIN jobs j ON a.job_id = j.job_id
            JOIN companies c ON j.company_id = c.company_id
            WHERE a.student_id = :id ORDER BY a.application_date DESC, a.application_id DESC
        """, {"id": student_id})
        return student


student_repository = StudentRepository()
