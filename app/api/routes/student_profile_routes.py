"""
Student Profile Routes

GET /student-profiles/student/{student_id} - Extended profile of a student
POST /student-profiles/student/{student_id} - Create or update the profile
DELETE /student-profiles/student/{student_id} - Delete the profile
"""

import logging

from fastapi import APIRouter, Depends

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.student_profiles import student_profile_repository
from app.schemas.schemas import StudentProfileUpsert, StudentProfileResponse, DataResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student-profiles", tags=["Student Profiles"])


@router.get("/student/{student_id}", response_model=DataResponse[StudentProfileResponse])
def get_student_profile(student_id: int):
    return {"data": run_in_transaction(student_profile_repository.get_for_student, student_id)}


@router.post("/student/{student_id}", response_model=MessageResponse)
def save_student_profile(student_id: int, data: StudentProfileUpsert, admin: dict = Depends(get_current_admin)):
    """URLs are stored as their normalized string form."""
    patch = data.model_dump(mode="json", exclude_unset=True)
    created = run_in_transaction(student_profile_repository.save, student_id, patch)
    verb = "created" if created else "updated"
    logger.info("Profile of student %s %s", student_id, verb)
    return MessageResponse(message=f"Student profile {verb} successfully")


@router.delete("/student/{student_id}", response_model=MessageResponse)
def delete_student_profile(student_id: int, admin: dict = Depends(require_delete_role)):
    run_in_transaction(student_profile_repository.delete_for_student, student_id)
    return MessageResponse(message="Student profile deleted successfully")
