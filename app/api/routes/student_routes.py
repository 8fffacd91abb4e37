"""
Student Routes

GET /students - List students (filters: status, city, state, search)
GET /students/stats/overview - Student counts by status
GET /students/{student_id} - Get student with skills and applications
POST /students - Create student
PUT /students/{student_id} - Update student (status is not writable here)
PUT /students/{student_id}/status - Set availability (Available/Inactive)
DELETE /students/{student_id} - Delete student without open applications
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.students import student_repository
from app.services.transition_engine import get_transition_engine
from app.schemas.schemas import (
    StudentCreate, StudentUpdate, StudentStatusUpdate, StudentResponse, StudentDetailResponse,
    StudentStatus, PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse,
    TransitionResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=PageResponse[StudentResponse])
def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[StudentStatus] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search name, email or city"),
):
    """List students with filters and pagination."""
    filters = {"status": status, "city": city, "state": state, "search": search}
    rows, pagination = run_in_transaction(student_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, int]])
def student_stats():
    """Student counts by status."""
    return {"data": run_in_transaction(student_repository.count_by_status)}


@router.get("/{student_id}", response_model=DataResponse[StudentDetailResponse])
def get_student(student_id: int):
    """Get student with skills and applications."""
    return {"data": run_in_transaction(student_repository.get_details, student_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_student(data: StudentCreate, admin: dict = Depends(get_current_admin)):
    """Create a student. New students start as Available."""
    student_id = run_in_transaction(student_repository.create, data.model_dump())
    logger.info("Student %s created by admin %s", student_id, admin["admin_id"])
    return CreatedResponse(message="Student created successfully", data=CreatedData(id=student_id))


@router.put("/{student_id}", response_model=MessageResponse)
def update_student(student_id: int, data: StudentUpdate, admin: dict = Depends(get_current_admin)):
    """Update student. Only provided fields are updated."""
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(student_repository.update, student_id, patch)
    return MessageResponse(message="Student updated successfully")


@router.put("/{student_id}/status", response_model=TransitionResponse)
def update_student_status(student_id: int, data: StudentStatusUpdate, admin: dict = Depends(get_current_admin)):
    """
    Set a student's availability.

    Only Available <-> Inactive (and Completed -> either) are allowed, and
    never while the student has open applications or an active internship.
    Applied/Selected follow from applications and internships.
    """
    engine = get_transition_engine()
    result = engine.set_student_availability(student_id, data.status.value, admin, expected_version=data.version)
    return TransitionResponse(message=f"Student status updated to {result.to_state}", data=result.to_dict())


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(student_id: int, admin: dict = Depends(require_delete_role)):
    """Delete student. Refused while the student has open applications or an active internship."""
    run_in_transaction(student_repository.delete, student_id)
    logger.info("Student %s deleted by admin %s", student_id, admin["admin_id"])
    return MessageResponse(message="Student deleted successfully")
