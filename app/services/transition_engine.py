"""
Status Transition Engine.

Every status change on an application, interview, job, internship or
student goes through here. A transition is one unit of work:

1. the (from, to) pair is checked against the entity's transition table;
2. inside a single database transaction the row is re-read (locked where
   the store supports it), compared with the caller's `from_state` and
   optional `version`, moved with a compare-and-set UPDATE, and every
   cross-entity side effect (student availability, status history) is
   written;
3. after commit, collected notices are handed to the best-effort
   notification dispatcher, whose failures come back as warnings.

Usage:
    engine = get_transition_engine()
    result = engine.attempt_transition("application", 12, "Pending", "Under Review", actor=admin)
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import ConcurrentModification, ConflictError, NotFoundError, PreconditionFailed, ValidationError
from app.db.postgres import for_update, rows_to_dicts, run_in_transaction
from app.repositories.applications import application_repository
from app.repositories.internships import internship_repository
from app.repositories.interviews import interview_repository
from app.repositories.jobs import job_repository
from app.repositories.students import student_repository
from app.services import email_service
from app.services.notification_service import Notice, dispatcher
from app.services.transitions import (
    TABLES, OPEN_INTERNSHIP_STATES,
)

logger = logging.getLogger(__name__)

# entity -> (table, id column)
ENTITY_TABLES = {
    "application": ("applications", "application_id"),
    "interview": ("interviews", "interview_id"),
    "job": ("jobs", "job_id"),
    "internship": ("internships", "internship_id"),
    "student": ("students", "student_id"),
}

# Student states from which a selection or a new application is allowed
SELECTABLE_STUDENT_STATES = ("Available", "Applied")

# Student states the engine derives from open applications and internships
DERIVED_STUDENT_STATES = ("Available", "Applied", "Selected")


@dataclass
class TransitionResult:
    entity: str
    entity_id: int
    from_state: Optional[str]
    to_state: str
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "entity": self.entity,
            "id": self.entity_id,
            "from_status": self.from_state,
            "status": self.to_state,
            "warnings": self.warnings,
        }


def _actor_id(actor: Optional[dict]) -> Optional[int]:
    return actor.get("admin_id") if actor else None


class TransitionEngine:
    def __init__(self, notifier=dispatcher):
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Row access
    # ------------------------------------------------------------------

    @staticmethod
    def _table(entity: str):
        if entity not in TABLES:
            raise ValidationError.for_field("entity", f"Unknown entity '{entity}'")
        return TABLES[entity]

    def _load(self, db: Session, entity: str, entity_id: int) -> dict:
        table, id_column = ENTITY_TABLES[entity]
        rows = rows_to_dicts(db.execute(
            text(f"SELECT * FROM {table} WHERE {id_column} = :id{for_update(db)}"),
            {"id": entity_id},
        ))
        if not rows:
            raise NotFoundError(entity.capitalize())
        return rows[0]

    def _compare_and_set(self, db: Session, entity: str, row: dict, to_state: str,
                         extra: Optional[Dict[str, Any]] = None) -> None:
        """Move `row` to `to_state` only if nobody changed it since it was read."""
        table, id_column = ENTITY_TABLES[entity]
        extra = extra or {}
        assignments = "".join(f", {col} = :{col}" for col in extra)
        result = db.execute(
            text(
                f"UPDATE {table} SET status = :to_state, version = version + 1, "
                f"updated_at = CURRENT_TIMESTAMP{assignments} "
                f"WHERE {id_column} = :id AND status = :from_state AND version = :version"
            ),
            {**extra, "to_state": to_state, "id": row[id_column],
             "from_state": row["status"], "version": row["version"]},
        )
        if result.rowcount != 1:
            raise ConcurrentModification(entity, row[id_column])

    def _set_student_status(self, db: Session, student_id: int, to_state: str,
                            allowed_from: Optional[tuple] = None) -> Optional[str]:
        """
        Side-effect write of a student's availability. Returns the previous
        status, or None when the student was not in `allowed_from` and was
        therefore left alone.
        """
        student = self._load(db, "student", student_id)
        if allowed_from is not None and student["status"] not in allowed_from:
            return None
        if student["status"] == to_state:
            return student["status"]
        self._compare_and_set(db, "student", student, to_state)
        logger.info("Student %s availability %s -> %s", student_id, student["status"], to_state)
        return student["status"]

    def _refresh_student(self, db: Session, student_id: int) -> Optional[str]:
        """
        Re-derive the status of a student after one of their commitments
        ended. An open internship or a Selected application keeps them
        Selected, an open application keeps them Applied, anything else
        frees them. Inactive and Completed students are left alone.
        """
        open_items = student_repository.open_commitments(db, student_id)
        if open_items["internships"] or application_repository.count_selected_for_student(db, student_id):
            target = "Selected"
        elif open_items["applications"]:
            target = "Applied"
        else:
            target = "Available"
        return self._set_student_status(db, student_id, target, allowed_from=DERIVED_STUDENT_STATES)

    def _is_placeable(self, db: Session, student: dict) -> bool:
        """Available students, and Selected ones not yet bound to an internship."""
        if student["status"] == "Available":
            return True
        if student["status"] != "Selected":
            return False
        open_items = student_repository.open_commitments(db, student["student_id"])
        return not open_items["internships"] and bool(
            application_repository.count_selected_for_student(db, student["student_id"])
        )

    # ------------------------------------------------------------------
    # Generic transition entry points
    # ------------------------------------------------------------------

    def attempt_transition(self, entity: str, entity_id: int, from_state: str, to_state: str,
                           actor: Optional[dict] = None, expected_version: Optional[int] = None,
                           **details) -> TransitionResult:
        self._table(entity).check(from_state, to_state)

        notices = run_in_transaction(
            self._apply, entity, entity_id, from_state, to_state, actor, expected_version, details
        )
        logger.info("%s %s: %s -> %s", entity, entity_id, from_state, to_state)

        result = TransitionResult(entity, entity_id, from_state, to_state)
        result.warnings = self.notifier.dispatch(notices)
        return result

    def change_status(self, entity: str, entity_id: int, to_state: str, actor: Optional[dict] = None,
                      expected_status: Optional[str] = None, expected_version: Optional[int] = None,
                      **details) -> TransitionResult:
        """
        Transition from the caller's expected status, or from the stored one
        when the caller did not say what it expects.
        """
        self._table(entity)
        from_state = expected_status
        if from_state is None:
            from_state = run_in_transaction(self._load, entity, entity_id)["status"]
        return self.attempt_transition(entity, entity_id, from_state, to_state, actor,
                                       expected_version=expected_version, **details)

    def _apply(self, db: Session, entity: str, entity_id: int, from_state: str, to_state: str,
               actor: Optional[dict], expected_version: Optional[int], details: dict) -> List[Notice]:
        row = self._load(db, entity, entity_id)
        if row["status"] != from_state:
            raise ConcurrentModification(entity, entity_id)
        if expected_version is not None and row["version"] != expected_version:
            raise ConcurrentModification(entity, entity_id)

        handler = getattr(self, f"_on_{entity}")
        return handler(db, row, to_state, actor, details)

    # ------------------------------------------------------------------
    # Per-entity side effects
    # ------------------------------------------------------------------

    def _on_application(self, db: Session, row: dict, to_state: str, actor, details) -> List[Notice]:
        student_id = row["student_id"]

        if to_state == "Selected":
            student = self._load(db, "student", student_id)
            if student["status"] not in SELECTABLE_STUDENT_STATES:
                raise PreconditionFailed(
                    f"Student is not available for selection (status '{student['status']}')"
                )

        self._compare_and_set(db, "application", row, to_state)
        application_repository.record_history(
            db, row["application_id"], row["status"], to_state, _actor_id(actor), details.get("reason")
        )

        if to_state == "Selected":
            self._set_student_status(db, student_id, "Selected")
        elif to_state == "Rejected":
            self._refresh_student(db, student_id)

        context = application_repository.get(db, row["application_id"])
        notice_type = {"Selected": "success", "Rejected": "warning"}.get(to_state, "info")
        return [Notice(
            student_id=student_id,
            admin_id=_actor_id(actor),
            type=notice_type,
            message=f"Your application for {context['job_title']} at {context['company_name']} "
                    f"is now '{to_state}'",
            email_to=context["student_email"],
            email=email_service.application_status_email(
                context["student_name"], context["job_title"], context["company_name"], to_state
            ),
        )]

    def _on_interview(self, db: Session, row: dict, to_state: str, actor, details) -> List[Notice]:
        extra: Dict[str, Any] = {}
        if to_state == "Completed":
            if details.get("interview_score") is not None:
                extra["interview_score"] = details["interview_score"]
            if details.get("feedback") is not None:
                extra["feedback"] = details["feedback"]
        elif to_state == "Scheduled":
            if details.get("interview_date") is None:
                raise ValidationError.for_field("interview_date", "A new interview date is required")
            extra["interview_date"] = details["interview_date"]
        elif to_state == "Rescheduled" and details.get("interview_date") is not None:
            extra["interview_date"] = details["interview_date"]

        self._compare_and_set(db, "interview", row, to_state, extra)

        if to_state not in ("Scheduled", "Cancelled", "Rescheduled"):
            return []
        context = interview_repository.get(db, row["interview_id"])
        if to_state == "Scheduled":
            return [Notice(
                student_id=row["student_id"],
                admin_id=_actor_id(actor),
                type="reminder",
                message=f"Interview for {context['job_title']} scheduled on {context['interview_date']}",
                email_to=context["student_email"],
                email=email_service.interview_scheduled_email(
                    context["student_name"], context["job_title"], context["company_name"],
                    context["interview_date"], context["mode"], context["location"],
                ),
            )]
        return [Notice(
            student_id=row["student_id"],
            admin_id=_actor_id(actor),
            type="warning",
            message=f"Interview for {context['job_title']} has been {to_state.lower()}",
        )]

    def _on_job(self, db: Session, row: dict, to_state: str, actor, details) -> List[Notice]:
        self._compare_and_set(db, "job", row, to_state)
        return []

    def _on_internship(self, db: Session, row: dict, to_state: str, actor, details) -> List[Notice]:
        self._compare_and_set(db, "internship", row, to_state)
        if row["student_id"] is None or to_state not in ("Completed", "Cancelled"):
            return []

        if to_state == "Completed":
            self._set_student_status(db, row["student_id"], "Completed", allowed_from=("Selected",))
        else:
            self._refresh_student(db, row["student_id"])
        return [Notice(
            student_id=row["student_id"],
            admin_id=_actor_id(actor),
            type="success" if to_state == "Completed" else "warning",
            message=f"Internship '{row['title']}' is now {to_state.lower()}",
        )]

    def _on_student(self, db: Session, row: dict, to_state: str, actor, details) -> List[Notice]:
        open_items = student_repository.open_commitments(db, row["student_id"])
        if open_items["applications"] or open_items["internships"]:
            raise PreconditionFailed("Student has open applications or an active internship")
        self._compare_and_set(db, "student", row, to_state)
        return []

    # ------------------------------------------------------------------
    # Creation and assignment operations
    # ------------------------------------------------------------------

    def create_application(self, payload: Dict[str, Any], actor: Optional[dict] = None) -> TransitionResult:
        application_id, notices = run_in_transaction(self._create_application, payload, actor)
        logger.info("Application %s created for student %s / job %s",
                    application_id, payload["student_id"], payload["job_id"])
        result = TransitionResult("application", application_id, None, TABLES["application"].initial)
        result.warnings = self.notifier.dispatch(notices)
        return result

    def _create_application(self, db: Session, payload: Dict[str, Any], actor) -> tuple:
        student_id, job_id = payload["student_id"], payload["job_id"]

        student = rows_to_dicts(db.execute(
            text(f"SELECT * FROM students WHERE student_id = :id{for_update(db)}"), {"id": student_id}
        ))
        if not student:
            raise PreconditionFailed("Student not found")
        student = student[0]
        job = application_repository.fetch(
            db,
            "SELECT j.job_id, j.title, j.status, c.name AS company_name FROM jobs j "
            "JOIN companies c ON j.company_id = c.company_id WHERE j.job_id = :id",
            {"id": job_id},
        )
        if not job:
            raise PreconditionFailed("Job not found")
        job = job[0]

        if application_repository.find_pair(db, student_id, job_id):
            raise ConflictError("Student has already applied for this job")
        if job["status"] != "Active":
            raise PreconditionFailed(f"Job is not accepting applications (status '{job['status']}')")
        if student["status"] not in SELECTABLE_STUDENT_STATES:
            raise PreconditionFailed(f"Student is not available (status '{student['status']}')")

        initial = TABLES["application"].initial
        application_id = application_repository.insert(db, {
            "student_id": student_id,
            "job_id": job_id,
            "status": initial,
            "application_date": payload.get("application_date") or date.today(),
            "cover_letter": payload.get("cover_letter"),
            "resume_url": payload.get("resume_url"),
            "additional_documents": payload.get("additional_documents"),
        })
        application_repository.record_history(db, application_id, None, initial, _actor_id(actor),
                                              "Application submitted")
        if student["status"] == "Available":
            self._compare_and_set(db, "student", student, "Applied")

        student_name = f"{student['first_name']} {student['last_name']}"
        notices = [Notice(
            student_id=student_id,
            admin_id=_actor_id(actor),
            message=f"Application for {job['title']} at {job['company_name']} submitted",
            email_to=student["email"],
            email=email_service.application_status_email(
                student_name, job["title"], job["company_name"], initial
            ),
        )]
        return application_id, notices

    def delete_application(self, application_id: int) -> None:
        """Delete an application and re-derive its student's status."""
        run_in_transaction(self._delete_application, application_id)
        logger.info("Application %s deleted", application_id)

    def _delete_application(self, db: Session, application_id: int) -> None:
        row = self._load(db, "application", application_id)
        db.execute(text("DELETE FROM applications WHERE application_id = :id"), {"id": application_id})
        self._refresh_student(db, row["student_id"])

    def delete_job(self, job_id: int) -> None:
        """Delete a job; students selected through it are re-derived."""
        run_in_transaction(self._delete_job, job_id)
        logger.info("Job %s deleted", job_id)

    def _delete_job(self, db: Session, job_id: int) -> None:
        student_ids = application_repository.selected_students_for_job(db, job_id)
        job_repository.delete(db, job_id)
        for student_id in student_ids:
            self._refresh_student(db, student_id)

    def schedule_interview(self, payload: Dict[str, Any], actor: Optional[dict] = None) -> TransitionResult:
        interview_id, notices = run_in_transaction(self._schedule_interview, payload, actor)
        logger.info("Interview %s scheduled for application %s", interview_id, payload["application_id"])
        result = TransitionResult("interview", interview_id, None, TABLES["interview"].initial)
        result.warnings = self.notifier.dispatch(notices)
        return result

    def _schedule_interview(self, db: Session, payload: Dict[str, Any], actor) -> tuple:
        application = application_repository.find(db, payload["application_id"])
        if application is None:
            raise PreconditionFailed("Application not found")
        student_id = payload.get("student_id") or application["student_id"]
        if student_id != application["student_id"]:
            raise PreconditionFailed("Student does not match the application")

        values = {
            key: payload.get(key)
            for key in ("mode", "interview_date", "location", "interviewer_name", "interviewer_email")
        }
        values.update({
            "application_id": application["application_id"],
            "student_id": student_id,
            "status": TABLES["interview"].initial,
        })
        interview_id = interview_repository.insert(db, values)

        notices = [Notice(
            student_id=student_id,
            admin_id=_actor_id(actor),
            type="reminder",
            message=f"Interview for {application['job_title']} scheduled on {values['interview_date']}",
            email_to=application["student_email"],
            email=email_service.interview_scheduled_email(
                application["student_name"], application["job_title"], application["company_name"],
                values["interview_date"], values["mode"], values["location"],
            ),
        )]
        return interview_id, notices

    # ------------------------------------------------------------------
    # Internship assignment
    # ------------------------------------------------------------------

    def create_internship(self, payload: Dict[str, Any], actor: Optional[dict] = None) -> TransitionResult:
        """Create an internship, assigning `student_id` (if given) in the same transaction."""
        internship_id, notices = run_in_transaction(self._create_internship, payload, actor)
        logger.info("Internship %s created", internship_id)
        result = TransitionResult("internship", internship_id, None, TABLES["internship"].initial)
        result.warnings = self.notifier.dispatch(notices)
        return result

    def _create_internship(self, db: Session, payload: Dict[str, Any], actor) -> tuple:
        payload = dict(payload)
        student_id = payload.pop("student_id", None)
        internship_id = internship_repository.create(db, payload)
        notices = []
        if student_id is not None:
            notices = self._assign(db, internship_id, student_id, actor)
        return internship_id, notices

    def assign_intern(self, internship_id: int, student_id: int, actor: Optional[dict] = None,
                      expected_version: Optional[int] = None) -> TransitionResult:
        """Assign (or reassign) the intern; the previous intern is released."""
        notices = run_in_transaction(self._assign, internship_id, student_id, actor, expected_version)
        logger.info("Student %s assigned to internship %s", student_id, internship_id)
        result = TransitionResult("internship", internship_id, None, "Assigned")
        result.warnings = self.notifier.dispatch(notices)
        return result

    def _assign(self, db: Session, internship_id: int, student_id: int, actor,
                expected_version: Optional[int] = None) -> List[Notice]:
        internship = self._load(db, "internship", internship_id)
        if expected_version is not None and internship["version"] != expected_version:
            raise ConcurrentModification("internship", internship_id)
        if internship["status"] not in OPEN_INTERNSHIP_STATES:
            raise PreconditionFailed(f"Internship is {internship['status']}, interns cannot be assigned")
        if internship["student_id"] == student_id:
            raise PreconditionFailed("Student is already assigned to this internship")

        student = rows_to_dicts(db.execute(
            text(f"SELECT * FROM students WHERE student_id = :id{for_update(db)}"), {"id": student_id}
        ))
        if not student:
            raise PreconditionFailed("Student not found")
        student = student[0]
        if not self._is_placeable(db, student):
            raise PreconditionFailed(f"Student is not available (status '{student['status']}')")

        self._bind_student(db, internship, student_id)
        if internship["student_id"] is not None:
            self._refresh_student(db, internship["student_id"])
        self._set_student_status(db, student_id, "Selected")

        company = internship_repository.get(db, internship_id)["company_name"]
        return [Notice(
            student_id=student_id,
            admin_id=_actor_id(actor),
            type="success",
            message=f"You have been assigned to the internship '{internship['title']}' at {company}",
            email_to=student["email"],
            email=email_service.internship_assignment_email(
                f"{student['first_name']} {student['last_name']}", internship["title"], company,
                internship["start_date"], internship["end_date"],
            ),
        )]

    def _bind_student(self, db: Session, internship: dict, student_id: Optional[int]) -> None:
        result = db.execute(
            text("""
                UPDATE internships SET student_id = :sid, version = version + 1, updated_at = CURRENT_TIMESTAMP
                WHERE internship_id = :id AND version = :version
            """),
            {"sid": student_id, "id": internship["internship_id"], "version": internship["version"]},
        )
        if result.rowcount != 1:
            raise ConcurrentModification("internship", internship["internship_id"])

    def release_intern(self, internship_id: int, actor: Optional[dict] = None) -> TransitionResult:
        run_in_transaction(self._release, internship_id)
        logger.info("Intern released from internship %s", internship_id)
        return TransitionResult("internship", internship_id, None, "Unassigned")

    def _release(self, db: Session, internship_id: int) -> None:
        internship = self._load(db, "internship", internship_id)
        if internship["student_id"] is None:
            raise PreconditionFailed("Internship has no assigned student")
        self._bind_student(db, internship, None)
        self._refresh_student(db, internship["student_id"])

    def delete_internship(self, internship_id: int) -> None:
        """Delete an internship; an open one releases its intern first."""
        run_in_transaction(self._delete_internship, internship_id)
        logger.info("Internship %s deleted", internship_id)

    def _delete_internship(self, db: Session, internship_id: int) -> None:
        internship = self._load(db, "internship", internship_id)
        db.execute(text("DELETE FROM internships WHERE internship_id = :id"), {"id": internship_id})
        if internship["student_id"] is not None and internship["status"] in OPEN_INTERNSHIP_STATES:
            self._refresh_student(db, internship["student_id"])

    # ------------------------------------------------------------------
    # Student availability
    # ------------------------------------------------------------------

    def set_student_availability(self, student_id: int, to_state: str, actor: Optional[dict] = None,
                                 expected_version: Optional[int] = None) -> TransitionResult:
        return self.change_status("student", student_id, to_state, actor, expected_version=expected_version)


_engine: Optional[TransitionEngine] = None


def get_transition_engine() -> TransitionEngine:
    global _engine
    if _engine is None:
        _engine = TransitionEngine()
    return _engine
