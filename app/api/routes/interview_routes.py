"""
Interview Routes

GET /interviews - List interviews (filters: status, mode, application_id, student_id, job_id, date range)
GET /interviews/upcoming - Next scheduled interviews
GET /interviews/stats/overview - Counts by status and score summary
GET /interviews/{interview_id} - Get interview
POST /interviews - Schedule an interview for an application
PUT /interviews/{interview_id} - Update interview details
PUT /interviews/{interview_id}/status - Complete, cancel or reschedule
DELETE /interviews/{interview_id} - Delete interview
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.interviews import interview_repository
from app.services.transition_engine import get_transition_engine
from app.schemas.schemas import (
    InterviewCreate, InterviewUpdate, InterviewStatusUpdate, InterviewResponse, InterviewStatus, InterviewMode,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse, TransitionResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.get("", response_model=PageResponse[InterviewResponse])
def list_interviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[InterviewStatus] = Query(None),
    mode: Optional[InterviewMode] = Query(None),
    application_id: Optional[int] = Query(None),
    student_id: Optional[int] = Query(None),
    job_id: Optional[int] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Search student, interviewer or job title"),
):
    """List interviews with filters and pagination."""
    filters = {"status": status, "mode": mode, "application_id": application_id, "student_id": student_id,
               "job_id": job_id, "date_from": date_from, "date_to": date_to, "search": search}
    rows, pagination = run_in_transaction(interview_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/upcoming", response_model=DataResponse[List[InterviewResponse]])
def upcoming_interviews(limit: int = Query(10, ge=1, le=100)):
    return {"data": run_in_transaction(interview_repository.upcoming, limit)}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, Any]])
def interview_stats():
    def _stats(db):
        return {"by_status": interview_repository.count_by_status(db),
                "scores": interview_repository.score_summary(db)}
    return {"data": run_in_transaction(_stats)}


@router.get("/{interview_id}", response_model=DataResponse[InterviewResponse])
def get_interview(interview_id: int):
    return {"data": run_in_transaction(interview_repository.get, interview_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_interview(data: InterviewCreate, admin: dict = Depends(get_current_admin)):
    """Schedule an interview. The application must exist; the student is taken from it."""
    result = get_transition_engine().schedule_interview(data.model_dump(), admin)
    return CreatedResponse(
        message="Interview scheduled successfully",
        data=CreatedData(id=result.entity_id),
        warnings=result.warnings,
    )


@router.put("/{interview_id}", response_model=MessageResponse)
def update_interview(interview_id: int, data: InterviewUpdate, admin: dict = Depends(get_current_admin)):
    """Update interview details. Date and status changes use /status."""
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(interview_repository.update, interview_id, patch)
    return MessageResponse(message="Interview updated successfully")


@router.put("/{interview_id}/status", response_model=TransitionResponse)
def update_interview_status(interview_id: int, data: InterviewStatusUpdate,
                            admin: dict = Depends(get_current_admin)):
    """
    Scheduled -> Completed (with score/feedback), Cancelled or Rescheduled;
    Rescheduled -> Scheduled with a new interview_date. Completing an
    interview does not change the application's status.
    """
    result = get_transition_engine().change_status(
        "interview", interview_id, data.status.value, admin,
        expected_status=data.expected_status, expected_version=data.version,
        interview_date=data.interview_date, interview_score=data.interview_score, feedback=data.feedback,
    )
    return TransitionResponse(message=f"Interview status updated to {result.to_state}", data=result.to_dict())


@router.delete("/{interview_id}", response_model=MessageResponse)
def delete_interview(interview_id: int, admin: dict = Depends(require_delete_role)):
    run_in_transaction(interview_repository.delete, interview_id)
    return MessageResponse(message="Interview deleted successfully")
