"""
Job Routes

GET /jobs - List jobs (filters: status, company_id, job_type, city, search)
GET /jobs/stats/overview - Job counts by status and type
GET /jobs/{job_id} - Get job with required skills
POST /jobs - Create job posting (starts Active)
PUT /jobs/{job_id} - Update job details
PUT /jobs/{job_id}/status - Pause, reactivate or close a job
DELETE /jobs/{job_id} - Delete job without open applications
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.jobs import job_repository
from app.services.transition_engine import get_transition_engine
from app.schemas.schemas import (
    JobCreate, JobUpdate, JobStatusUpdate, JobResponse, JobStatus, JobType,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse, TransitionResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=PageResponse[JobResponse])
def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[JobStatus] = Query(None),
    company_id: Optional[int] = Query(None),
    job_type: Optional[JobType] = Query(None),
    city: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search in title, description and city"),
):
    """List job postings with filters and pagination."""
    filters = {"status": status, "company_id": company_id, "job_type": job_type, "city": city, "search": search}
    rows, pagination = run_in_transaction(job_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, Any]])
def job_stats():
    """Job counts by status and by type."""
    def _stats(db):
        return {"by_status": job_repository.count_by_status(db), "by_type": job_repository.count_by_type(db)}
    return {"data": run_in_transaction(_stats)}


@router.get("/{job_id}", response_model=DataResponse[JobResponse])
def get_job(job_id: int):
    return {"data": run_in_transaction(job_repository.get, job_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_job(data: JobCreate, admin: dict = Depends(get_current_admin)):
    """Create a job posting for an active company. Deadline must be after posted date."""
    payload = data.model_dump()
    if payload.get("admin_id") is None:
        payload["admin_id"] = admin["admin_id"]
    job_id = run_in_transaction(job_repository.create, payload)
    logger.info("Job %s created for company %s", job_id, data.company_id)
    return CreatedResponse(message="Job created successfully", data=CreatedData(id=job_id))


@router.put("/{job_id}", response_model=MessageResponse)
def update_job(job_id: int, data: JobUpdate, admin: dict = Depends(get_current_admin)):
    """Update job. Only provided fields are updated; status changes use /status."""
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(job_repository.update, job_id, patch)
    return MessageResponse(message="Job updated successfully")


@router.put("/{job_id}/status", response_model=TransitionResponse)
def update_job_status(job_id: int, data: JobStatusUpdate, admin: dict = Depends(get_current_admin)):
    """Active <-> Paused, and either -> Closed (terminal)."""
    result = get_transition_engine().change_status(
        "job", job_id, data.status.value, admin,
        expected_status=data.expected_status, expected_version=data.version,
    )
    return TransitionResponse(message=f"Job status updated to {result.to_state}", data=result.to_dict())


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(job_id: int, admin: dict = Depends(require_delete_role)):
    """Delete job. Refused while it has open applications."""
    get_transition_engine().delete_job(job_id)
    logger.info("Job %s deleted by admin %s", job_id, admin["admin_id"])
    return MessageResponse(message="Job deleted successfully")
