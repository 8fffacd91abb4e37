from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.repositories.base import Repository


class SkillRepository(Repository):
    entity = "Skill"
    table = "skills"
    alias = "sk"
    id_column = "skill_id"
    columns = ("skill_name", "category", "description")
    required = ("skill_name", "category")
    filters = {"category": "sk.category = :category"}
    search_columns = ("sk.skill_name", "sk.description")
    select_columns = """sk.*,
        (SELECT COUNT(*) FROM student_skills ss WHERE ss.skill_id = sk.skill_id) AS student_count,
        (SELECT COUNT(*) FROM job_skills js WHERE js.skill_id = sk.skill_id) AS job_count"""
    order_by = "sk.skill_name ASC"

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self.ensure_unique(db, "skills", "skill_name", payload["skill_name"], self.entity)

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        if "skill_name" in patch:
            self.ensure_unique(db, "skills", "skill_name", patch["skill_name"], self.entity,
                               id_column="skill_id", exclude_id=current["skill_id"])

    def before_delete(self, db: Session, current: dict) -> None:
        if current["student_count"]:
            raise ConflictError("Cannot delete skill assigned to students")
        if current["job_count"]:
            raise ConflictError("Cannot delete skill required by jobs")

    def categories(self, db: Session) -> List[dict]:
        return self.fetch(db, """
            SELECT category, COUNT(*) AS skill_count
            FROM skills GROUP BY category ORDER BY category
        """)


skill_repository = SkillRepository()
