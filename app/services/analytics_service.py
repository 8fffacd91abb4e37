"""
Analytics Aggregator - read-only dashboard and report views.

The main dashboard is built from independent widgets. Each widget runs in
its own read transaction; a widget that fails is reported under `errors`
and rendered as null while the others still come back.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.db.postgres import month_bucket, run_in_transaction
from app.repositories.base import Repository
from app.repositories.companies import company_repository
from app.repositories.interviews import interview_repository
from app.repositories.jobs import job_repository
from app.repositories.reviews import review_repository
from app.repositories.students import student_repository

logger = logging.getLogger(__name__)

fetch = Repository.fetch

TREND_MONTHS = 12
TOP_SKILLS = 10
TOP_LOCATIONS = 10


def trailing_months(today: date, months: int = TREND_MONTHS) -> List[str]:
    """['YYYY-MM', ...] for the last `months` months, oldest first, ending with today's month."""
    year, month = today.year, today.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def _ratio(numerator, denominator) -> Optional[float]:
    return round(numerator * 100.0 / denominator, 2) if denominator else None


# ============================================================
# DASHBOARD WIDGETS
# ============================================================

def overview(db: Session) -> Dict[str, int]:
    return fetch(db, """
        SELECT
            (SELECT COUNT(*) FROM students) AS total_students,
            (SELECT COUNT(*) FROM students WHERE status = 'Available') AS available_students,
            (SELECT COUNT(*) FROM companies WHERE is_active = TRUE) AS total_companies,
            (SELECT COUNT(*) FROM jobs WHERE status = 'Active') AS active_jobs,
            (SELECT COUNT(*) FROM applications) AS total_applications,
            (SELECT COUNT(*) FROM applications WHERE status = 'Selected') AS selected_applications,
            (SELECT COUNT(*) FROM interviews WHERE status = 'Scheduled') AS upcoming_interviews,
            (SELECT COUNT(*) FROM internships WHERE status = 'Active') AS active_internships
    """)[0]


def application_trends(db: Session, today: Optional[date] = None) -> List[dict]:
    months = trailing_months(today or date.today())
    since = date(int(months[0][:4]), int(months[0][5:]), 1)
    bucket = month_bucket(db, "application_date")
    rows = fetch(db, f"""
        SELECT {bucket} AS month,
               COUNT(*) AS applications,
               COUNT(DISTINCT student_id) AS unique_students,
               COUNT(DISTINCT job_id) AS unique_jobs
        FROM applications
        WHERE application_date >= :since
        GROUP BY {bucket}
    """, {"since": since})
    by_month = {row["month"]: row for row in rows}
    return [
        by_month.get(month, {"month": month, "applications": 0, "unique_students": 0, "unique_jobs": 0})
        for month in months
    ]


def skill_demand(db: Session, category: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
    sql = """
        SELECT sk.skill_id, sk.skill_name, sk.category,
               (SELECT COUNT(*) FROM job_skills js WHERE js.skill_id = sk.skill_id) AS jobs_requiring_skill,
               (SELECT COUNT(*) FROM student_skills ss WHERE ss.skill_id = sk.skill_id) AS students_with_skill
        FROM skills sk
    """
    params = {}
    if category:
        sql += " WHERE sk.category = :category"
        params["category"] = category
    rows = [r for r in fetch(db, sql, params) if r["jobs_requiring_skill"] > 0]
    rows.sort(key=lambda r: (-r["jobs_requiring_skill"], r["skill_name"]))
    for row in rows:
        row["supply_demand_ratio"] = _ratio(row["students_with_skill"], row["jobs_requiring_skill"])
    return rows[:limit] if limit else rows


def geographic(db: Session) -> List[dict]:
    rows = fetch(db, """
        SELECT j.city, j.state,
               COUNT(DISTINCT j.job_id) AS total_jobs,
               COUNT(DISTINCT a.application_id) AS total_applications,
               AVG(j.salary) AS avg_salary
        FROM jobs j
        LEFT JOIN applications a ON j.job_id = a.job_id
        WHERE j.status = 'Active'
        GROUP BY j.city, j.state
        ORDER BY total_jobs DESC, j.city ASC
        LIMIT :limit
    """, {"limit": TOP_LOCATIONS})
    for row in rows:
        row["avg_salary"] = round(float(row["avg_salary"]), 2) if row["avg_salary"] is not None else None
    return rows


DASHBOARD_WIDGETS: Dict[str, Callable[[Session], Any]] = {
    "overview": overview,
    "trends": application_trends,
    "top_skills": lambda db: skill_demand(db, limit=TOP_SKILLS),
    "geographic": geographic,
}


def build_dashboard(widgets: Optional[Dict[str, Callable[[Session], Any]]] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    for name, widget in (widgets or DASHBOARD_WIDGETS).items():
        try:
            data[name] = run_in_transaction(widget)
        except Exception as e:
            logger.warning("Dashboard widget '%s' failed: %s", name, e)
            data[name] = None
            errors[name] = "Widget data unavailable"
    data["errors"] = errors
    return data


# ============================================================
# PER-ENTITY VIEWS
# ============================================================

def _status_counts(db: Session, sql: str, params: dict) -> Dict[str, int]:
    return {row["status"]: row["count"] for row in fetch(db, sql, params)}


def student_dashboard(db: Session, student_id: int) -> Dict[str, Any]:
    student = student_repository.get(db, student_id)
    applications = _status_counts(db, """
        SELECT status, COUNT(*) AS count FROM applications WHERE student_id = :id GROUP BY status
    """, {"id": student_id})
    interviews = fetch(db, """
        SELECT COUNT(*) AS total_interviews,
               SUM(CASE WHEN status = 'Completed' THEN 1 ELSE 0 END) AS completed_interviews,
               AVG(interview_score) AS average_score
        FROM interviews WHERE student_id = :id
    """, {"id": student_id})[0]
    skills = fetch(db, "SELECT COUNT(*) AS total FROM student_skills WHERE student_id = :id",
                   {"id": student_id})[0]["total"]
    internships = fetch(db, """
        SELECT it.internship_id, it.title, it.status, c.name AS company_name
        FROM internships it JOIN companies c ON it.company_id = c.company_id
        WHERE it.student_id = :id ORDER BY it.start_date DESC
    """, {"id": student_id})

    total = sum(applications.values())
    return {
        "student_id": student_id,
        "student_name": f"{student['first_name']} {student['last_name']}",
        "email": student["email"],
        "status": student["status"],
        "total_skills": skills,
        "total_applications": total,
        "applications_by_status": applications,
        "selection_rate": _ratio(applications.get("Selected", 0), total),
        "total_interviews": interviews["total_interviews"],
        "completed_interviews": interviews["completed_interviews"] or 0,
        "average_interview_score": (round(float(interviews["average_score"]), 2)
                                    if interviews["average_score"] is not None else None),
        "internships": internships,
    }


def company_dashboard(db: Session, company_id: int) -> Dict[str, Any]:
    company = company_repository.get(db, company_id)
    jobs = _status_counts(db, """
        SELECT status, COUNT(*) AS count FROM jobs WHERE company_id = :id GROUP BY status
    """, {"id": company_id})
    applications = _status_counts(db, """
        SELECT a.status, COUNT(*) AS count
        FROM applications a JOIN jobs j ON a.job_id = j.job_id
        WHERE j.company_id = :id GROUP BY a.status
    """, {"id": company_id})
    internships = _status_counts(db, """
        SELECT status, COUNT(*) AS count FROM internships WHERE company_id = :id GROUP BY status
    """, {"id": company_id})

    total_applications = sum(applications.values())
    reviews = review_repository.company_stats(db, company_id)
    return {
        "company_id": company_id,
        "company_name": company["name"],
        "industry": company["industry"],
        "total_jobs": sum(jobs.values()),
        "jobs_by_status": jobs,
        "total_applications": total_applications,
        "applications_by_status": applications,
        "selection_rate": _ratio(applications.get("Selected", 0), total_applications),
        "internships_by_status": internships,
        "review_count": reviews["review_count"],
        "average_rating": reviews["avg_rating"],
    }


def job_summary(db: Session, job_id: int) -> Dict[str, Any]:
    job = job_repository.get(db, job_id)
    applications = _status_counts(db, """
        SELECT status, COUNT(*) AS count FROM applications WHERE job_id = :id GROUP BY status
    """, {"id": job_id})
    interviews = fetch(db, """
        SELECT COUNT(*) AS total_interviews, AVG(i.interview_score) AS average_score
        FROM interviews i JOIN applications a ON i.application_id = a.application_id
        WHERE a.job_id = :id
    """, {"id": job_id})[0]
    return {
        "job_id": job_id,
        "title": job["title"],
        "company_name": job["company_name"],
        "status": job["status"],
        "required_skills": job["required_skills"],
        "total_applications": sum(applications.values()),
        "applications_by_status": applications,
        "total_interviews": interviews["total_interviews"],
        "average_interview_score": (round(float(interviews["average_score"]), 2)
                                    if interviews["average_score"] is not None else None),
        "matching_students": job_matches(db, job_id),
    }


def job_matches(db: Session, job_id: int, min_match: float = 50.0) -> List[dict]:
    """Students holding at least `min_match` percent of the job's required skills."""
    required = fetch(db, "SELECT COUNT(*) AS total FROM job_skills WHERE job_id = :id", {"id": job_id})[0]["total"]
    if not required:
        return []
    rows = fetch(db, """
        SELECT s.student_id, s.first_name || ' ' || s.last_name AS student_name, s.status,
               COUNT(*) AS matching_skills
        FROM students s
        JOIN student_skills ss ON s.student_id = ss.student_id
        JOIN job_skills js ON ss.skill_id = js.skill_id AND js.job_id = :id
        GROUP BY s.student_id, s.first_name, s.last_name, s.status
    """, {"id": job_id})
    matches = []
    for row in rows:
        row["skill_match_percentage"] = _ratio(row["matching_skills"], required)
        if row["skill_match_percentage"] >= min_match:
            matches.append(row)
    matches.sort(key=lambda r: (-r["skill_match_percentage"], r["student_id"]))
    return matches


def upcoming_interviews(db: Session, limit: int = 10) -> List[dict]:
    return interview_repository.upcoming(db, limit)


def timeline(db: Session, days: int = 30, limit: int = 50) -> List[dict]:
    # stored timestamps are naive UTC (CURRENT_TIMESTAMP)
    since = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days)
    return fetch(db, """
        SELECT h.history_id, h.application_id, h.from_status, h.to_status, h.reason, h.changed_at,
               s.first_name || ' ' || s.last_name AS student_name,
               j.title AS job_title, c.name AS company_name
        FROM application_status_history h
        JOIN applications a ON h.application_id = a.application_id
        JOIN students s ON a.student_id = s.student_id
        JOIN jobs j ON a.job_id = j.job_id
        JOIN companies c ON j.company_id = c.company_id
        WHERE h.changed_at >= :since
        ORDER BY h.changed_at DESC, h.history_id DESC
        LIMIT :limit
    """, {"since": since, "limit": limit})

