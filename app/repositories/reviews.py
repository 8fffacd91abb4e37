from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.repositories.base import Repository

SUB_RATINGS = ("work_environment_rating", "learning_opportunity_rating", "management_rating")


class CompanyReviewRepository(Repository):
    entity = "Review"
    table = "company_reviews"
    alias = "r"
    id_column = "review_id"
    columns = ("company_id", "student_id", "rating", "review_text", *SUB_RATINGS, "is_anonymous")
    required = ("company_id", "student_id", "rating")
    filters = {
        "company_id": "r.company_id = :company_id",
        "student_id": "r.student_id = :student_id",
        "rating": "r.rating = :rating",
    }
    search_columns = ("r.review_text", "c.name")
    select_columns = """r.*, c.name AS company_name,
        CASE WHEN r.is_anonymous THEN NULL ELSE s.first_name || ' ' || s.last_name END AS student_name"""
    joins = """JOIN companies c ON r.company_id = c.company_id
        JOIN students s ON r.student_id = s.student_id"""
    order_by = "r.created_at DESC, r.review_id DESC"

    def _check_references(self, db: Session, values: Dict[str, Any]) -> None:
        errors = []
        if "company_id" in values and not self.count_where(
            db, "SELECT COUNT(*) FROM companies WHERE company_id = :id AND is_active = TRUE",
            {"id": values["company_id"]},
        ):
            errors.append({"field": "company_id", "message": "Company not found or inactive"})
        if "student_id" in values and not self.count_where(
            db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": values["student_id"]}
        ):
            errors.append({"field": "student_id", "message": "Student not found"})
        if errors:
            raise ValidationError("Validation failed", errors=errors)

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self._check_references(db, payload)
        if self.count_where(
            db, "SELECT COUNT(*) FROM company_reviews WHERE student_id = :sid AND company_id = :cid",
            {"sid": payload["student_id"], "cid": payload["company_id"]},
        ):
            raise ConflictError("Student has already reviewed this company")

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        if "company_id" in patch or "student_id" in patch:
            raise ValidationError.for_field(
                "company_id" if "company_id" in patch else "student_id",
                "Reviewer and company cannot be changed",
            )

    def company_stats(self, db: Session, company_id: int) -> Dict[str, Any]:
        if not self.count_where(db, "SELECT COUNT(*) FROM companies WHERE company_id = :id", {"id": company_id}):
            raise NotFoundError("Company")
        averages = ", ".join(f"AVG({col}) AS avg_{col}" for col in ("rating", *SUB_RATINGS))
        row = self.fetch(
            db,
            f"SELECT COUNT(*) AS review_count, {averages} FROM company_reviews WHERE company_id = :id",
            {"id": company_id},
        )[0]
        for key, value in list(row.items()):
            if key.startswith("avg_"):
                row[key] = round(float(value), 2) if value is not None else None
        distribution = self.rating_distribution(db, company_id)
        row.update({"company_id": company_id, "rating_distribution": distribution})
        return row

    def rating_distribution(self, db: Session, company_id: int) -> Dict[int, int]:
        rows = self.fetch(
            db,
            "SELECT rating, COUNT(*) AS count FROM company_reviews WHERE company_id = :id GROUP BY rating",
            {"id": company_id},
        )
        distribution = {star: 0 for star in range(1, 6)}
        for row in rows:
            distribution[int(row["rating"])] = row["count"]
        return distribution


review_repository = CompanyReviewRepository()
