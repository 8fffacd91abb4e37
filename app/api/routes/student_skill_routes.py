"""
Student Skill Routes

GET /student-skills - List (student, skill) assignments (filters: student_id, skill_id, proficiency_level, category)
GET /student-skills/student/{student_id} - Skills of one student
GET /student-skills/skill/{skill_id} - Students holding one skill
GET /student-skills/stats/overview - Assignment counts by proficiency
POST /student-skills - Assign a skill to a student
POST /student-skills/bulk - Assign several skills to a student
PUT /student-skills/{student_id}/{skill_id} - Change proficiency
DELETE /student-skills/{student_id}/{skill_id} - Remove a skill from a student
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin
from app.db.postgres import run_in_transaction
from app.repositories.student_skills import student_skill_repository
from app.schemas.schemas import (
    StudentSkillCreate, StudentSkillBulkCreate, ProficiencyUpdate, StudentSkillResponse, BulkAssignResult,
    ProficiencyLevel, SkillCategory, PageResponse, DataResponse, MessageResponse
)

router = APIRouter(prefix="/student-skills", tags=["Student Skills"])


@router.get("", response_model=PageResponse[StudentSkillResponse])
def list_student_skills(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    student_id: Optional[int] = Query(None),
    skill_id: Optional[int] = Query(None),
    proficiency_level: Optional[ProficiencyLevel] = Query(None),
    category: Optional[SkillCategory] = Query(None),
    search: Optional[str] = Query(None),
):
    filters = {"student_id": student_id, "skill_id": skill_id, "proficiency_level": proficiency_level,
               "category": category, "search": search}
    rows, pagination = run_in_transaction(student_skill_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/student/{student_id}", response_model=DataResponse[List[StudentSkillResponse]])
def skills_of_student(student_id: int):
    return {"data": run_in_transaction(student_skill_repository.by_student, student_id)}


@router.get("/skill/{skill_id}", response_model=DataResponse[List[StudentSkillResponse]])
def students_with_skill(skill_id: int):
    return {"data": run_in_transaction(student_skill_repository.by_skill, skill_id)}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, int]])
def student_skill_stats():
    return {"data": run_in_transaction(student_skill_repository.proficiency_distribution)}


@router.post("", response_model=MessageResponse, status_code=201)
def assign_skill(data: StudentSkillCreate, admin: dict = Depends(get_current_admin)):
    """Assign a skill to a student. Each (student, skill) pair is unique."""
    run_in_transaction(student_skill_repository.assign, data.student_id, data.skill_id,
                       data.proficiency_level.value)
    return MessageResponse(message="Skill assigned successfully")


@router.post("/bulk", response_model=DataResponse[List[BulkAssignResult]], status_code=201)
def bulk_assign_skills(data: StudentSkillBulkCreate, admin: dict = Depends(get_current_admin)):
    """Assign several skills at once; already-assigned or unknown skills are reported per item."""
    items = [{"skill_id": s.skill_id, "proficiency_level": s.proficiency_level.value} for s in data.skills]
    return {"data": run_in_transaction(student_skill_repository.bulk_assign, data.student_id, items)}


@router.put("/{student_id}/{skill_id}", response_model=MessageResponse)
def update_proficiency(student_id: int, skill_id: int, data: ProficiencyUpdate,
                       admin: dict = Depends(get_current_admin)):
    run_in_transaction(student_skill_repository.update_proficiency, student_id, skill_id,
                       data.proficiency_level.value)
    return MessageResponse(message="Proficiency updated successfully")


@router.delete("/{student_id}/{skill_id}", response_model=MessageResponse)
def remove_skill(student_id: int, skill_id: int, admin: dict = Depends(get_current_admin)):
    run_in_transaction(student_skill_repository.remove, student_id, skill_id)
    return MessageResponse(message="Skill removed successfully")
