"""
Repositories - one per table, all built on `Repository` in base.py.

Each module exposes a ready-to-use singleton:
    from app.repositories import student_repository
    with get_db_session() as db:
        rows, pagination = student_repository.list(db, {"status": "Available"})
"""

from app.repositories.admins import admin_repository
from app.repositories.applications import application_repository
from app.repositories.companies import company_repository
from app.repositories.education import education_repository
from app.repositories.evaluations import evaluation_repository
from app.repositories.internships import internship_repository
from app.repositories.interviews import interview_repository
from app.repositories.jobs import job_repository
from app.repositories.notifications import notification_repository
from app.repositories.projects import project_repository
from app.repositories.reviews import review_repository
from app.repositories.skills import skill_repository
from app.repositories.student_profiles import student_profile_repository
from app.repositories.student_skills import student_skill_repository
from app.repositories.students import student_repository
from app.repositories.tasks import task_repository

__all__ = [
    "admin_repository",
    "application_repository",
    "company_repository",
    "education_repository",
    "evaluation_repository",
    "internship_repository",
    "interview_repository",
    "job_repository",
    "notification_repository",
    "project_repository",
    "review_repository",
    "skill_repository",
    "student_profile_repository",
    "student_skill_repository",
    "student_repository",
    "task_repository",
]
