from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.repositories.base import Repository


class StudentSkillRepository(Repository):
    """(student, skill) pairs keyed by both ids rather than a surrogate id."""

    entity = "Student skill"
    table = "student_skills"
    alias = "ss"
    filters = {
        "student_id": "ss.student_id = :student_id",
        "skill_id": "ss.skill_id = :skill_id",
        "proficiency_level": "ss.proficiency_level = :proficiency_level",
        "category": "sk.category = :category",
    }
    search_columns = ("sk.skill_name", "s.first_name", "s.last_name")
    select_columns = """ss.student_id, ss.skill_id, ss.proficiency_level, ss.created_at,
        sk.skill_name, sk.category,
        s.first_name || ' ' || s.last_name AS student_name, s.email AS student_email"""
    joins = """JOIN skills sk ON ss.skill_id = sk.skill_id
        JOIN students s ON ss.student_id = s.student_id"""
    order_by = "sk.skill_name ASC, ss.student_id ASC"

    def _check_references(self, db: Session, student_id: int, skill_id: int) -> None:
        errors = []
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": student_id}):
            errors.append({"field": "student_id", "message": "Student not found"})
        if not self.count_where(db, "SELECT COUNT(*) FROM skills WHERE skill_id = :id", {"id": skill_id}):
            errors.append({"field": "skill_id", "message": "Skill not found"})
        if errors:
            raise ValidationError("Validation failed", errors=errors)

    def find_pair(self, db: Session, student_id: int, skill_id: int) -> dict:
        rows = self.fetch(
            db,
            f"{self.select_clause} WHERE ss.student_id = :sid AND ss.skill_id = :kid",
            {"sid": student_id, "kid": skill_id},
        )
        if not rows:
            raise NotFoundError(self.entity)
        return rows[0]

    def assign(self, db: Session, student_id: int, skill_id: int, proficiency_level: str) -> None:
        self._check_references(db, student_id, skill_id)
        if self.count_where(
            db, "SELECT COUNT(*) FROM student_skills WHERE student_id = :sid AND skill_id = :kid",
            {"sid": student_id, "kid": skill_id},
        ):
            raise ConflictError("Skill already assigned to this student")
        try:
            db.execute(
                text("""
                    INSERT INTO student_skills (student_id, skill_id, proficiency_level)
                    VALUES (:sid, :kid, :level)
                """),
                {"sid": student_id, "kid": skill_id, "level": proficiency_level},
            )
        except IntegrityError as e:
            raise ConflictError("Skill already assigned to this student") from e

    def bulk_assign(self, db: Session, student_id: int, items: List[Dict[str, Any]]) -> List[dict]:
        """Assign several skills; already-assigned or unknown skills are reported, not fatal."""
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": student_id}):
            raise NotFoundError("Student")

        results = []
        for item in items:
            skill_id = item["skill_id"]
            if not self.count_where(db, "SELECT COUNT(*) FROM skills WHERE skill_id = :id", {"id": skill_id}):
                results.append({"skill_id": skill_id, "status": "error", "message": "Skill not found"})
                continue
            if self.count_where(
                db, "SELECT COUNT(*) FROM student_skills WHERE student_id = :sid AND skill_id = :kid",
                {"sid": student_id, "kid": skill_id},
            ):
                results.append({"skill_id": skill_id, "status": "skipped", "message": "Already assigned"})
                continue
            db.execute(
                text("""
                    INSERT INTO student_skills (student_id, skill_id, proficiency_level)
                    VALUES (:sid, :kid, :level)
                """),
                {"sid": student_id, "kid": skill_id, "level": item["proficiency_level"]},
            )
            results.append({"skill_id": skill_id, "status": "added", "message": "Assigned"})
        return results

    def update_proficiency(self, db: Session, student_id: int, skill_id: int, proficiency_level: str) -> None:
        self.find_pair(db, student_id, skill_id)
        db.execute(
            text("""
                UPDATE student_skills SET proficiency_level = :level, updated_at = CURRENT_TIMESTAMP
                WHERE student_id = :sid AND skill_id = :kid
            """),
            {"sid": student_id, "kid": skill_id, "level": proficiency_level},
        )

    def remove(self, db: Session, student_id: int, skill_id: int) -> None:
        self.find_pair(db, student_id, skill_id)
        db.execute(
            text("DELETE FROM student_skills WHERE student_id = :sid AND skill_id = :kid"),
            {"sid": student_id, "kid": skill_id},
        )

    def by_student(self, db: Session, student_id: int) -> List[dict]:
        if not self.count_where(db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": student_id}):
            raise NotFoundError("Student")
        return self.fetch(db, f"{self.select_clause} WHERE ss.student_id = :id ORDER BY sk.skill_name",
                          {"id": student_id})

    def by_skill(self, db: Session, skill_id: int) -> List[dict]:
        if not self.count_where(db, "SELECT COUNT(*) FROM skills WHERE skill_id = :id", {"id": skill_id}):
            raise NotFoundError("Skill")
        return self.fetch(db, f"{self.select_clause} WHERE ss.skill_id = :id ORDER BY s.last_name, s.first_name",
                          {"id": skill_id})

    def proficiency_distribution(self, db: Session) -> Dict[str, int]:
        rows = db.execute(text(
            "SELECT proficiency_level, COUNT(*) FROM student_skills GROUP BY proficiency_level"
        )).fetchall()
        return {level: count for level, count in rows}


student_skill_repository = StudentSkillRepository()
