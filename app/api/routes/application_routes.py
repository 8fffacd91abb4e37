"""
Application Routes

GET /applications - List applications (filters: status, student_id, job_id, company_id, search)
GET /applications/stats/overview - Application counts by status
GET /applications/{application_id} - Get application with interviews and history
GET /applications/{application_id}/history - Status timeline
POST /applications - Apply a student to an active job
PUT /applications/{application_id} - Update cover letter / documents
PUT /applications/{application_id}/status - Move through the review workflow
DELETE /applications/{application_id} - Delete application
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.applications import application_repository
from app.services.transition_engine import get_transition_engine
from app.schemas.schemas import (
    ApplicationCreate, ApplicationUpdate, ApplicationStatusUpdate, ApplicationResponse,
    ApplicationDetailResponse, ApplicationStatus, StatusHistoryEntry,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse, TransitionResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=PageResponse[ApplicationResponse])
def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[ApplicationStatus] = Query(None),
    student_id: Optional[int] = Query(None),
    job_id: Optional[int] = Query(None),
    company_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Search student, job title or company"),
):
    """List applications with filters and pagination."""
    filters = {"status": status, "student_id": student_id, "job_id": job_id,
               "company_id": company_id, "search": search}
    rows, pagination = run_in_transaction(application_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, int]])
def application_stats(job_id: Optional[int] = Query(None), company_id: Optional[int] = Query(None)):
    """Application counts by status, optionally for one job or company."""
    filters = {"job_id": job_id, "company_id": company_id}
    return {"data": run_in_transaction(application_repository.stats, filters)}


@router.get("/{application_id}", response_model=DataResponse[ApplicationDetailResponse])
def get_application(application_id: int):
    return {"data": run_in_transaction(application_repository.get_details, application_id)}


@router.get("/{application_id}/history", response_model=DataResponse[List[StatusHistoryEntry]])
def get_application_history(application_id: int):
    """Every status change of the application, oldest first."""
    return {"data": run_in_transaction(application_repository.history, application_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_application(data: ApplicationCreate, admin: dict = Depends(get_current_admin)):
    """
    Submit an application.

    The job must be Active and the student must not already have an
    application for it; the student becomes Applied.
    """
    result = get_transition_engine().create_application(data.model_dump(), admin)
    return CreatedResponse(
        message="Application submitted successfully",
        data=CreatedData(id=result.entity_id),
        warnings=result.warnings,
    )


@router.put("/{application_id}", response_model=MessageResponse)
def update_application(application_id: int, data: ApplicationUpdate, admin: dict = Depends(get_current_admin)):
    """Update application documents. Status changes use /status."""
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(application_repository.update, application_id, patch)
    return MessageResponse(message="Application updated successfully")


@router.put("/{application_id}/status", response_model=TransitionResponse)
def update_application_status(application_id: int, data: ApplicationStatusUpdate,
                              admin: dict = Depends(get_current_admin)):
    """
    Pending -> Under Review -> Shortlisted -> Selected, or Rejected from any
    open stage. Selecting marks the student Selected in the same transaction.
    """
    result = get_transition_engine().change_status(
        "application", application_id, data.status.value, admin,
        expected_status=data.expected_status, expected_version=data.version, reason=data.reason,
    )
    return TransitionResponse(message=f"Application status updated to {result.to_state}", data=result.to_dict())


@router.delete("/{application_id}", response_model=MessageResponse)
def delete_application(application_id: int, admin: dict = Depends(require_delete_role)):
    get_transition_engine().delete_application(application_id)
    return MessageResponse(message="Application deleted successfully")
