"""
Internship Routes

GET /internships - List internships (filters: status, company_id, student_id, search)
GET /internships/stats/overview - Internship counts by status
GET /internships/{internship_id} - Get internship with tasks and evaluations
POST /internships - Create internship (optionally assigning an intern)
PUT /internships/{internship_id} - Update internship details
PUT /internships/{internship_id}/status - Hold, resume, complete or cancel
PUT /internships/{internship_id}/assign - Assign or reassign the intern
PUT /internships/{internship_id}/release - Remove the intern
DELETE /internships/{internship_id} - Delete internship (releases an active intern)
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.internships import internship_repository
from app.services.transition_engine import get_transition_engine
from app.schemas.schemas import (
    InternshipCreate, InternshipUpdate, InternshipStatusUpdate, InternAssignment, InternshipResponse,
    InternshipDetailResponse, InternshipStatus,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse, TransitionResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internships", tags=["Internships"])


@router.get("", response_model=PageResponse[InternshipResponse])
def list_internships(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[InternshipStatus] = Query(None),
    company_id: Optional[int] = Query(None),
    student_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Search title, supervisor or company"),
):
    filters = {"status": status, "company_id": company_id, "student_id": student_id, "search": search}
    rows, pagination = run_in_transaction(internship_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, int]])
def internship_stats():
    return {"data": run_in_transaction(internship_repository.count_by_status)}


@router.get("/{internship_id}", response_model=DataResponse[InternshipDetailResponse])
def get_internship(internship_id: int):
    return {"data": run_in_transaction(internship_repository.get_details, internship_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_internship(data: InternshipCreate, admin: dict = Depends(get_current_admin)):
    """
    Create an internship. When student_id is given the student must be
    Available; the internship and the student's new status are written together.
    """
    result = get_transition_engine().create_internship(data.model_dump(), admin)
    return CreatedResponse(
        message="Internship created successfully",
        data=CreatedData(id=result.entity_id),
        warnings=result.warnings,
    )


@router.put("/{internship_id}", response_model=MessageResponse)
def update_internship(internship_id: int, data: InternshipUpdate, admin: dict = Depends(get_current_admin)):
    """Update internship details. Intern and status have their own endpoints."""
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(internship_repository.update, internship_id, patch)
    return MessageResponse(message="Internship updated successfully")


@router.put("/{internship_id}/status", response_model=TransitionResponse)
def update_internship_status(internship_id: int, data: InternshipStatusUpdate,
                             admin: dict = Depends(get_current_admin)):
    """Active <-> On Hold; Completed or Cancelled release the intern back to Available."""
    result = get_transition_engine().change_status(
        "internship", internship_id, data.status.value, admin,
        expected_status=data.expected_status, expected_version=data.version,
    )
    return TransitionResponse(message=f"Internship status updated to {result.to_state}", data=result.to_dict())


@router.put("/{internship_id}/assign", response_model=TransitionResponse)
def assign_intern(internship_id: int, data: InternAssignment, admin: dict = Depends(get_current_admin)):
    result = get_transition_engine().assign_intern(internship_id, data.student_id, admin,
                                                   expected_version=data.version)
    return TransitionResponse(message="Intern assigned successfully", data=result.to_dict())


@router.put("/{internship_id}/release", response_model=TransitionResponse)
def release_intern(internship_id: int, admin: dict = Depends(get_current_admin)):
    result = get_transition_engine().release_intern(internship_id, admin)
    return TransitionResponse(message="Intern released successfully", data=result.to_dict())


@router.delete("/{internship_id}", response_model=MessageResponse)
def delete_internship(internship_id: int, admin: dict = Depends(require_delete_role)):
    get_transition_engine().delete_internship(internship_id)
    return MessageResponse(message="Internship deleted successfully")
