"""
Education Routes

GET /education - List education records (filters: student_id, degree, college, search)
GET /education/student/{student_id} - Education history of one student
GET /education/{education_id} - Get education record
POST /education - Add education record for a student
PUT /education/{education_id} - Update education record
DELETE /education/{education_id} - Delete education record
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.education import education_repository
from app.schemas.schemas import (
    EducationCreate, EducationUpdate, EducationResponse,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

router = APIRouter(prefix="/education", tags=["Education"])


@router.get("", response_model=PageResponse[EducationResponse])
def list_education(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    student_id: Optional[int] = Query(None),
    degree: Optional[str] = Query(None, description="Substring match on degree"),
    college: Optional[str] = Query(None, description="Substring match on college"),
    search: Optional[str] = Query(None),
):
    filters = {"student_id": student_id, "degree": degree, "college": college, "search": search}
    rows, pagination = run_in_transaction(education_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/student/{student_id}", response_model=DataResponse[List[EducationResponse]])
def student_education(student_id: int):
    return {"data": run_in_transaction(education_repository.by_student, student_id)}


@router.get("/{education_id}", response_model=DataResponse[EducationResponse])
def get_education(education_id: int):
    return {"data": run_in_transaction(education_repository.get, education_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_education(data: EducationCreate, admin: dict = Depends(get_current_admin)):
    education_id = run_in_transaction(education_repository.create, data.model_dump())
    return CreatedResponse(message="Education record created successfully", data=CreatedData(id=education_id))


@router.put("/{education_id}", response_model=MessageResponse)
def update_education(education_id: int, data: EducationUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True)
    run_in_transaction(education_repository.update, education_id, patch)
    return MessageResponse(message="Education record updated successfully")


@router.delete("/{education_id}", response_model=MessageResponse)
def delete_education(education_id: int, admin: dict = Depends(require_delete_role)):
    run_in_transaction(education_repository.delete, education_id)
    return MessageResponse(message="Education record deleted successfully")
