from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.repositories.base import Repository
from app.services.transitions import OPEN_APPLICATION_STATES


class ApplicationRepository(Repository):
    """
    Applications are created and moved between statuses by the transition
    engine; this repository owns reads, the editable document fields and
    the status history.
    """

    entity = "Application"
    table = "applications"
    alias = "a"
    id_column = "application_id"
    columns = ("cover_letter", "resume_url", "additional_documents")
    filters = {
        "status": "a.status = :status",
        "student_id": "a.student_id = :student_id",
        "job_id": "a.job_id = :job_id",
        "company_id": "j.company_id = :company_id",
    }
    search_columns = ("s.first_name", "s.last_name", "s.email", "j.title", "c.name")
    select_columns = """a.*,
        s.first_name || ' ' || s.last_name AS student_name, s.email AS student_email,
        j.title AS job_title, j.company_id AS company_id, c.name AS company_name"""
    joins = """JOIN students s ON a.student_id = s.student_id
        JOIN jobs j ON a.job_id = j.job_id
        JOIN companies c ON j.company_id = c.company_id"""
    order_by = "a.application_date DESC, a.application_id DESC"

    def find_pair(self, db: Session, student_id: int, job_id: int) -> Optional[dict]:
        rows = self.fetch(
            db,
            "SELECT application_id, status FROM applications WHERE student_id = :sid AND job_id = :jid",
            {"sid": student_id, "jid": job_id},
        )
        return rows[0] if rows else None

    def count_open_for_student(self, db: Session, student_id: int, exclude_id: int = None) -> int:
        app_in, params = self.status_params("a", OPEN_APPLICATION_STATES)
        sql = f"SELECT COUNT(*) FROM applications WHERE student_id = :sid AND status IN ({app_in})"
        params["sid"] = student_id
        if exclude_id is not None:
            sql += " AND application_id != :exclude_id"
            params["exclude_id"] = exclude_id
        return self.count_where(db, sql, params)

    def count_selected_for_student(self, db: Session, student_id: int) -> int:
        return self.count_where(
            db,
            "SELECT COUNT(*) FROM applications WHERE student_id = :sid AND status = :status",
            {"sid": student_id, "status": "Selected"},
        )

    def selected_students_for_job(self, db: Session, job_id: int) -> List[int]:
        rows = self.fetch(
            db,
            "SELECT DISTINCT student_id FROM applications WHERE job_id = :jid AND status = :status",
            {"jid": job_id, "status": "Selected"},
        )
        return [row["student_id"] for row in rows]

    def record_history(self, db: Session, application_id: int, from_status: Optional[str],
                       to_status: str, changed_by: Optional[int] = None, reason: Optional[str] = None) -> None:
        db.execute(
            text("""
                INSERT INTO application_status_history (application_id, from_status, to_status, changed_by, reason)
                VALUES (:aid, :from_status, :to_status, :changed_by, :reason)
            """),
            {"aid": application_id, "from_status": from_status, "to_status": to_status,
             "changed_by": changed_by, "reason": reason},
        )

    def history(self, db: Session, application_id: int) -> List[dict]:
        self.get(db, application_id)
        return self.fetch(db, """
            SELECT h.history_id, h.from_status, h.to_status, h.changed_by, h.reason, h.changed_at,
                   ad.username AS changed_by_username
            FROM application_status_history h
            LEFT JOIN admins ad ON h.changed_by = ad.admin_id
            WHERE h.application_id = :id
            ORDER BY h.changed_at ASC, h.history_id ASC
        """, {"id": application_id})

    def interviews(self, db: Session, application_id: int) -> List[dict]:
        return self.fetch(db, """
            SELECT interview_id, mode, interview_date, status, interview_score, feedback
            FROM interviews WHERE application_id = :id
            ORDER BY interview_date ASC
        """, {"id": application_id})

    def get_details(self, db: Session, application_id: int) -> dict:
        application = self.get(db, application_id)
        application["interviews"] = self.interviews(db, application_id)
        application["history"] = self.history(db, application_id)
        return application

    def stats(self, db: Session, filters: Dict[str, Any] = None) -> Dict[str, int]:
        where, params = self.build_where(filters)
        rows = db.execute(
            text(f"SELECT a.status, COUNT(*) {self.from_clause} WHERE {where} GROUP BY a.status"),
            params,
        ).fetchall()
        return {status: count for status, count in rows}


application_repository = ApplicationRepository()
