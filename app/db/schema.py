"""
Relational schema.

Tables are declared once with SQLAlchemy Core so that `create_all` emits the
right DDL for PostgreSQL (production) and SQLite (test suite). All reads and
writes go through parameterized `text()` statements in the repositories.

Status columns are plain strings; legal values and transitions live in
app/services/transitions.py. Rows whose status is moved by the transition
engine carry a `version` column for optimistic concurrency checks.
"""

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text, Boolean, Date, DateTime, Numeric,
    ForeignKey, UniqueConstraint, CheckConstraint, Index, func
)

metadata = MetaData()


def _timestamps():
    return [
        Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
        Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    ]


admins = Table(
    "admins", metadata,
    Column("admin_id", Integer, primary_key=True),
    Column("username", String(100), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False, server_default="admin"),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("last_login", DateTime),
    *_timestamps(),
)

students = Table(
    "students", metadata,
    Column("student_id", Integer, primary_key=True),
    Column("first_name", String(100), nullable=False),
    Column("middle_name", String(100)),
    Column("last_name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("phone", String(20)),
    Column("city", String(100)),
    Column("state", String(100)),
    Column("pin", String(10)),
    Column("age", Integer),
    Column("status", String(20), nullable=False, server_default="Available"),
    Column("version", Integer, nullable=False, server_default="1"),
    *_timestamps(),
)

companies = Table(
    "companies", metadata,
    Column("company_id", Integer, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("industry", String(100), nullable=False),
    Column("city", String(100), nullable=False),
    Column("state", String(100), nullable=False),
    Column("pin", String(10)),
    Column("contact_no", String(20)),
    Column("hr_name", String(100), nullable=False),
    Column("hr_phone", String(20)),
    Column("hr_email", String(255), nullable=False),
    Column("website", String(255)),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    *_timestamps(),
)

jobs = Table(
    "jobs", metadata,
    Column("job_id", Integer, primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.company_id"), nullable=False),
    Column("admin_id", Integer, ForeignKey("admins.admin_id", ondelete="SET NULL")),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("requirements", Text),
    Column("salary", Numeric(12, 2)),
    Column("job_type", String(20), nullable=False, server_default="Full-time"),
    Column("city", String(100)),
    Column("state", String(100)),
    Column("pin", String(10)),
    Column("posted_date", Date, nullable=False),
    Column("deadline", Date),
    Column("status", String(20), nullable=False, server_default="Active"),
    Column("version", Integer, nullable=False, server_default="1"),
    *_timestamps(),
)

skills = Table(
    "skills", metadata,
    Column("skill_id", Integer, primary_key=True),
    Column("skill_name", String(100), nullable=False, unique=True),
    Column("category", String(30), nullable=False),
    Column("description", Text),
    *_timestamps(),
)

job_skills = Table(
    "job_skills", metadata,
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.skill_id"), primary_key=True),
)

student_skills = Table(
    "student_skills", metadata,
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.skill_id"), primary_key=True),
    Column("proficiency_level", String(20), nullable=False, server_default="Intermediate"),
    *_timestamps(),
)

education = Table(
    "education", metadata,
    Column("education_id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
    Column("degree", String(100), nullable=False),
    Column("college", String(200), nullable=False),
    Column("cgpa", Numeric(3, 2)),
    Column("start_date", Date),
    Column("end_date", Date),
    *_timestamps(),
    CheckConstraint("cgpa IS NULL OR (cgpa >= 0 AND cgpa <= 4)", name="ck_education_cgpa"),
)

projects = Table(
    "projects", metadata,
    Column("project_id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
    Column("project_name", String(200), nullable=False),
    Column("project_type", String(50)),
    Column("description", Text),
    Column("technologies_used", Text),
    Column("start_date", Date),
    Column("end_date", Date),
    *_timestamps(),
)

# One extended profile per student
student_profiles = Table(
    "student_profiles", metadata,
    Column("profile_id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False,
           unique=True),
    Column("bio", Text),
    Column("linkedin_url", String(255)),
    Column("github_url", String(255)),
    Column("portfolio_url", String(255)),
    Column("resume_url", String(255)),
    Column("profile_picture", String(255)),
    Column("availability_start", Date),
    Column("availability_end", Date),
    Column("salary_expectation", Numeric(12, 2)),
    *_timestamps(),
)

applications = Table(
    "applications", metadata,
    Column("application_id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False),
    Column("status", String(20), nullable=False, server_default="Pending"),
    Column("application_date", Date, nullable=False),
    Column("cover_letter", Text),
    Column("resume_url", String(500)),
    Column("additional_documents", Text),
    Column("version", Integer, nullable=False, server_default="1"),
    *_timestamps(),
    UniqueConstraint("student_id", "job_id", name="uq_application_student_job"),
)

application_status_history = Table(
    "application_status_history", metadata,
    Column("history_id", Integer, primary_key=True),
    Column("application_id", Integer, ForeignKey("applications.application_id", ondelete="CASCADE"),
           nullable=False),
    Column("from_status", String(20)),
    Column("to_status", String(20), nullable=False),
    Column("changed_by", Integer),
    Column("reason", Text),
    Column("changed_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

interviews = Table(
    "interviews", metadata,
    Column("interview_id", Integer, primary_key=True),
    Column("application_id", Integer, ForeignKey("applications.application_id", ondelete="CASCADE"),
           nullable=False),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
    Column("mode", String(10), nullable=False),
    Column("interview_date", DateTime, nullable=False),
    Column("location", String(255)),
    Column("interviewer_name", String(100)),
    Column("interviewer_email", String(255)),
    Column("interview_score", Integer),
    Column("feedback", Text),
    Column("status", String(20), nullable=False, server_default="Scheduled"),
    Column("version", Integer, nullable=False, server_default="1"),
    *_timestamps(),
    CheckConstraint("interview_score IS NULL OR (interview_score >= 0 AND interview_score <= 100)",
                    name="ck_interview_score_range"),
)

internships = Table(
    "internships", metadata,
    Column("internship_id", Integer, primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.company_id"), nullable=False),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="SET NULL")),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("duration_weeks", Integer),
    Column("stipend", Numeric(12, 2)),
    Column("supervisor_name", String(100)),
    Column("supervisor_email", String(255)),
    Column("supervisor_phone", String(20)),
    Column("requirements", Text),
    Column("learning_objectives", Text),
    Column("status", String(20), nullable=False, server_default="Active"),
    Column("version", Integer, nullable=False, server_default="1"),
    *_timestamps(),
)

tasks = Table(
    "tasks", metadata,
    Column("task_id", Integer, primary_key=True),
    Column("internship_id", Integer, ForeignKey("internships.internship_id", ondelete="CASCADE"),
           nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("assigned_date", Date, nullable=False),
    Column("due_date", Date),
    Column("status", String(20), nullable=False, server_default="Pending"),
    Column("priority", String(10), nullable=False, server_default="Medium"),
    *_timestamps(),
)

evaluations = Table(
    "evaluations", metadata,
    Column("evaluation_id", Integer, primary_key=True),
    Column("internship_id", Integer, ForeignKey("internships.internship_id", ondelete="CASCADE"),
           nullable=False),
    Column("evaluator_type", String(20), nullable=False),
    Column("technical_skills", Integer, nullable=False),
    Column("communication_skills", Integer, nullable=False),
    Column("teamwork", Integer, nullable=False),
    Column("punctuality", Integer, nullable=False),
    Column("overall_rating", Integer, nullable=False),
    Column("comments", Text),
    Column("evaluation_date", Date),
    *_timestamps(),
)

notifications = Table(
    "notifications", metadata,
    Column("notification_id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE")),
    Column("admin_id", Integer, ForeignKey("admins.admin_id", ondelete="SET NULL")),
    Column("message", Text, nullable=False),
    Column("type", String(20), nullable=False, server_default="info"),
    Column("is_read", Boolean, nullable=False, server_default="0"),
    *_timestamps(),
)

company_reviews = Table(
    "company_reviews", metadata,
    Column("review_id", Integer, primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.company_id"), nullable=False),
    Column("student_id", Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
    Column("rating", Integer, nullable=False),
    Column("review_text", Text),
    Column("work_environment_rating", Integer),
    Column("learning_opportunity_rating", Integer),
    Column("management_rating", Integer),
    Column("is_anonymous", Boolean, nullable=False, server_default="0"),
    *_timestamps(),
    UniqueConstraint("student_id", "company_id", name="uq_review_student_company"),
)

Index("ix_applications_status", applications.c.status)
Index("ix_jobs_company_status", jobs.c.company_id, jobs.c.status)
Index("ix_interviews_application", interviews.c.application_id)
Index("ix_notifications_student_read", notifications.c.student_id, notifications.c.is_read)


def init_schema(engine) -> None:
    """Create any missing tables. Safe to call on every startup."""
    metadata.create_all(engine)


def drop_schema(engine) -> None:
    metadata.drop_all(engine)
