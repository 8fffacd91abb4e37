from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ValidationError
from app.repositories.base import Repository
from app.services.transitions import OPEN_APPLICATION_STATES


def as_date(value) -> Optional[date]:
    """Normalize a DATE column value (SQLite hands back ISO strings)."""
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value)[:10])


class JobRepository(Repository):
    entity = "Job"
    table = "jobs"
    alias = "j"
    id_column = "job_id"
    columns = ("company_id", "admin_id", "title", "description", "requirements", "salary",
               "job_type", "city", "state", "pin", "posted_date", "deadline")
    required = ("company_id", "title", "posted_date")
    filters = {
        "status": "j.status = :status",
        "company_id": "j.company_id = :company_id",
        "job_type": "j.job_type = :job_type",
        "city": "LOWER(j.city) = LOWER(:city)",
    }
    search_columns = ("j.title", "j.description", "j.city")
    select_columns = "j.*, c.name AS company_name, c.industry AS company_industry"
    joins = "LEFT JOIN companies c ON j.company_id = c.company_id"
    order_by = "j.posted_date DESC, j.job_id DESC"

    # ------------------------------------------------------------------

    def _check_references(self, db: Session, values: Dict[str, Any]) -> None:
        errors = []
        if "company_id" in values and not self.count_where(
            db, "SELECT COUNT(*) FROM companies WHERE company_id = :id AND is_active = TRUE",
            {"id": values["company_id"]},
        ):
            errors.append({"field": "company_id", "message": "Company not found or inactive"})
        if values.get("admin_id") is not None and not self.count_where(
            db, "SELECT COUNT(*) FROM admins WHERE admin_id = :id AND is_active = TRUE",
            {"id": values["admin_id"]},
        ):
            errors.append({"field": "admin_id", "message": "Admin not found or inactive"})
        if errors:
            raise ValidationError("Validation failed", errors=errors)

    def _check_skills(self, db: Session, skill_ids: Iterable[int]) -> List[int]:
        skill_ids = sorted(set(skill_ids))
        if not skill_ids:
            return []
        placeholders, params = self.status_params("s", skill_ids)
        found = {r[0] for r in db.execute(
            text(f"SELECT skill_id FROM skills WHERE skill_id IN ({placeholders})"), params
        ).fetchall()}
        missing = [s for s in skill_ids if s not in found]
        if missing:
            raise ValidationError.for_field("required_skill_ids", f"Unknown skill ids: {missing}")
        return skill_ids

    def _replace_skills(self, db: Session, job_id: int, skill_ids: List[int]) -> None:
        db.execute(text("DELETE FROM job_skills WHERE job_id = :jid"), {"jid": job_id})
        for skill_id in skill_ids:
            db.execute(
                text("INSERT INTO job_skills (job_id, skill_id) VALUES (:jid, :sid)"),
                {"jid": job_id, "sid": skill_id},
            )

    @staticmethod
    def _check_deadline(posted_date, deadline) -> None:
        posted_date, deadline = as_date(posted_date), as_date(deadline)
        if posted_date and deadline and deadline <= posted_date:
            raise ValidationError.for_field("deadline", "Deadline must be after posted date")

    # ------------------------------------------------------------------

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self._check_deadline(payload.get("posted_date"), payload.get("deadline"))
        self._check_references(db, payload)

    def create(self, db: Session, payload: Dict[str, Any]) -> int:
        payload = dict(payload)
        skill_ids = self._check_skills(db, payload.pop("required_skill_ids", None) or [])
        job_id = super().create(db, payload)
        self._replace_skills(db, job_id, skill_ids)
        return job_id

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        self._check_deadline(patch.get("posted_date", current["posted_date"]),
                             patch.get("deadline", current["deadline"]))
        self._check_references(db, patch)

    def update(self, db: Session, entity_id: int, patch: Dict[str, Any]) -> None:
        patch = dict(patch)
        skill_ids = patch.pop("required_skill_ids", None)
        if skill_ids is not None:
            skill_ids = self._check_skills(db, skill_ids)
            if not patch:
                self.get(db, entity_id)
                self._replace_skills(db, entity_id, skill_ids)
                return
        super().update(db, entity_id, patch)
        if skill_ids is not None:
            self._replace_skills(db, entity_id, skill_ids)

    def before_delete(self, db: Session, current: dict) -> None:
        app_in, app_params = self.status_params("a", OPEN_APPLICATION_STATES)
        if self.count_where(
            db,
            f"SELECT COUNT(*) FROM applications WHERE job_id = :id AND status IN ({app_in})",
            {"id": current["job_id"], **app_params},
        ):
            raise ConflictError("Cannot delete job with active applications")

    # ------------------------------------------------------------------

    def attach_skills(self, db: Session, jobs: List[dict]) -> List[dict]:
        if not jobs:
            return jobs
        placeholders, params = self.status_params("j", [j["job_id"] for j in jobs])
        rows = db.execute(text(f"""
            SELECT js.job_id, sk.skill_name FROM job_skills js
            JOIN skills sk ON js.skill_id = sk.skill_id
            WHERE js.job_id IN ({placeholders}) ORDER BY sk.skill_name
        """), params).fetchall()
        by_job: Dict[int, List[str]] = {}
        for job_id, skill_name in rows:
            by_job.setdefault(job_id, []).append(skill_name)
        for job in jobs:
            job["required_skills"] = by_job.get(job["job_id"], [])
        return jobs

    def list(self, db: Session, filters: Optional[Dict[str, Any]] = None,
             page: int = 1, limit: int = 10) -> Tuple[List[dict], dict]:
        rows, pagination = super().list(db, filters, page, limit)
        return self.attach_skills(db, rows), pagination

    def get(self, db: Session, entity_id: int) -> dict:
        return self.attach_skills(db, [super().get(db, entity_id)])[0]

    def count_by_type(self, db: Session) -> Dict[str, int]:
        rows = db.execute(text("SELECT job_type, COUNT(*) FROM jobs GROUP BY job_type")).fetchall()
        return {job_type: count for job_type, count in rows}


job_repository = JobRepository()
