from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.repositories.base import Repository
from app.services.transitions import OPEN_APPLICATION_STATES, OPEN_JOB_STATES


class CompanyRepository(Repository):
    """Companies are soft-deleted: inactive rows are invisible to every read."""

    entity = "Company"
    table = "companies"
    alias = "c"
    id_column = "company_id"
    columns = ("name", "industry", "city", "state", "pin", "contact_no",
               "hr_name", "hr_phone", "hr_email", "website")
    required = ("name", "industry", "city", "state", "hr_name", "hr_email")
    filters = {
        "industry": "LOWER(c.industry) = LOWER(:industry)",
        "city": "LOWER(c.city) = LOWER(:city)",
        "state": "LOWER(c.state) = LOWER(:state)",
    }
    search_columns = ("c.name", "c.industry", "c.city", "c.hr_email")
    base_condition = "c.is_active = TRUE"
    order_by = "c.name ASC, c.company_id ASC"

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self.ensure_unique(db, "companies", "name", payload["name"], self.entity, extra="is_active = TRUE")

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        if "name" in patch:
            self.ensure_unique(db, "companies", "name", patch["name"], self.entity,
                               id_column="company_id", exclude_id=current["company_id"],
                               extra="is_active = TRUE")

    def before_delete(self, db: Session, current: dict) -> None:
        job_in, job_params = self.status_params("j", OPEN_JOB_STATES)
        open_jobs = self.count_where(
            db,
            f"SELECT COUNT(*) FROM jobs WHERE company_id = :id AND status IN ({job_in})",
            {"id": current["company_id"], **job_params},
        )
        if open_jobs:
            raise ConflictError("Cannot delete company with active jobs")

        app_in, app_params = self.status_params("a", OPEN_APPLICATION_STATES)
        open_apps = self.count_where(
            db,
            f"""SELECT COUNT(*) FROM applications a JOIN jobs j ON a.job_id = j.job_id
                WHERE j.company_id = :id AND a.status IN ({app_in})""",
            {"id": current["company_id"], **app_params},
        )
        if open_apps:
            raise ConflictError("Cannot delete company with active applications")

    def delete(self, db: Session, entity_id: int) -> None:
        current = self.get(db, entity_id)
        self.before_delete(db, current)
        db.execute(
            text("UPDATE companies SET is_active = FALSE, updated_at = CURRENT_TIMESTAMP WHERE company_id = :id"),
            {"id": entity_id},
        )

    def dropdown(self, db: Session) -> list:
        return self.fetch(db, "SELECT company_id, name FROM companies WHERE is_active = TRUE ORDER BY name")

    def count_by_industry(self, db: Session) -> Dict[str, int]:
        rows = db.execute(text(
            "SELECT industry, COUNT(*) FROM companies WHERE is_active = TRUE GROUP BY industry"
        )).fetchall()
        return {industry: count for industry, count in rows}


company_repository = CompanyRepository()
