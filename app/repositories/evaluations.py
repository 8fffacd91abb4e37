from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.repositories.base import Repository

RATING_COLUMNS = ("technical_skills", "communication_skills", "teamwork", "punctuality", "overall_rating")


class EvaluationRepository(Repository):
    entity = "Evaluation"
    table = "evaluations"
    alias = "e"
    id_column = "evaluation_id"
    columns = ("internship_id", "evaluator_type", *RATING_COLUMNS, "comments", "evaluation_date")
    required = ("internship_id", "evaluator_type", *RATING_COLUMNS)
    filters = {
        "internship_id": "e.internship_id = :internship_id",
        "evaluator_type": "e.evaluator_type = :evaluator_type",
    }
    search_columns = ("e.comments", "it.title")
    select_columns = """e.*, it.title AS internship_title, it.student_id AS student_id,
        s.first_name || ' ' || s.last_name AS student_name"""
    joins = """JOIN internships it ON e.internship_id = it.internship_id
        LEFT JOIN students s ON it.student_id = s.student_id"""
    order_by = "e.evaluation_date DESC, e.evaluation_id DESC"

    def _check_internship(self, db: Session, internship_id: int) -> None:
        if not self.count_where(db, "SELECT COUNT(*) FROM internships WHERE internship_id = :id",
                                {"id": internship_id}):
            raise ValidationError.for_field("internship_id", "Internship not found")

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self._check_internship(db, payload["internship_id"])

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        if "internship_id" in patch:
            self._check_internship(db, patch["internship_id"])

    def averages(self, db: Session, internship_id: int) -> Dict[str, Any]:
        self._check_internship(db, internship_id)
        averages = ", ".join(f"AVG({col}) AS {col}" for col in RATING_COLUMNS)
        row = self.fetch(
            db,
            f"SELECT COUNT(*) AS evaluation_count, {averages} FROM evaluations WHERE internship_id = :id",
            {"id": internship_id},
        )[0]
        for col in RATING_COLUMNS:
            row[col] = round(float(row[col]), 2) if row[col] is not None else None
        row["internship_id"] = internship_id
        return row


evaluation_repository = EvaluationRepository()
