from typing import List

from sqlalchemy.orm import Session

from app.repositories.base import Repository


class InterviewRepository(Repository):
    entity = "Interview"
    table = "interviews"
    alias = "i"
    id_column = "interview_id"
    # interview_date moves only through the Rescheduled -> Scheduled transition
    columns = ("mode", "location", "interviewer_name", "interviewer_email", "interview_score", "feedback")
    filters = {
        "status": "i.status = :status",
        "mode": "i.mode = :mode",
        "application_id": "i.application_id = :application_id",
        "student_id": "i.student_id = :student_id",
        "job_id": "a.job_id = :job_id",
        "date_from": "i.interview_date >= :date_from",
        "date_to": "i.interview_date <= :date_to",
    }
    search_columns = ("s.first_name", "s.last_name", "i.interviewer_name", "j.title")
    select_columns = """i.*,
        s.first_name || ' ' || s.last_name AS student_name, s.email AS student_email,
        a.job_id AS job_id, j.title AS job_title, c.name AS company_name"""
    joins = """JOIN applications a ON i.application_id = a.application_id
        JOIN students s ON i.student_id = s.student_id
        JOIN jobs j ON a.job_id = j.job_id
        JOIN companies c ON j.company_id = c.company_id"""
    order_by = "i.interview_date DESC, i.interview_id DESC"

    def upcoming(self, db: Session, limit: int = 10) -> List[dict]:
        return self.fetch(
            db,
            f"{self.select_clause} WHERE i.status = 'Scheduled' AND i.interview_date >= CURRENT_TIMESTAMP "
            f"ORDER BY i.interview_date ASC LIMIT :limit",
            {"limit": limit},
        )

    def score_summary(self, db: Session) -> dict:
        rows = self.fetch(db, """
            SELECT COUNT(*) AS scored, AVG(interview_score) AS average_score,
                   MIN(interview_score) AS min_score, MAX(interview_score) AS max_score
            FROM interviews WHERE status = 'Completed' AND interview_score IS NOT NULL
        """)
        summary = rows[0]
        if summary["average_score"] is not None:
            summary["average_score"] = round(float(summary["average_score"]), 2)
        return summary


interview_repository = InterviewRepository()
