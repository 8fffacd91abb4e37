"""
Skill Routes

GET /skills - List skills with usage counts (filters: category, search)
GET /skills/categories - Skill counts per category
GET /skills/{skill_id} - Get skill
POST /skills - Create skill (name unique)
PUT /skills/{skill_id} - Update skill
DELETE /skills/{skill_id} - Delete skill not used by students or jobs
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.skills import skill_repository
from app.schemas.schemas import (
    SkillCreate, SkillUpdate, SkillResponse, SkillCategory, SkillCategoryCount,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.get("", response_model=PageResponse[SkillResponse])
def list_skills(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    category: Optional[SkillCategory] = Query(None),
    search: Optional[str] = Query(None),
):
    rows, pagination = run_in_transaction(skill_repository.list, {"category": category, "search": search},
                                          page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/categories", response_model=DataResponse[List[SkillCategoryCount]])
def skill_categories():
    return {"data": run_in_transaction(skill_repository.categories)}


@router.get("/{skill_id}", response_model=DataResponse[SkillResponse])
def get_skill(skill_id: int):
    return {"data": run_in_transaction(skill_repository.get, skill_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_skill(data: SkillCreate, admin: dict = Depends(get_current_admin)):
    skill_id = run_in_transaction(skill_repository.create, data.model_dump())
    return CreatedResponse(message="Skill created successfully", data=CreatedData(id=skill_id))


@router.put("/{skill_id}", response_model=MessageResponse)
def update_skill(skill_id: int, data: SkillUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(skill_repository.update, skill_id, patch)
    return MessageResponse(message="Skill updated successfully")


@router.delete("/{skill_id}", response_model=MessageResponse)
def delete_skill(skill_id: int, admin: dict = Depends(require_delete_role)):
    """Delete skill. Refused while students have it or jobs require it."""
    run_in_transaction(skill_repository.delete, skill_id)
    return MessageResponse(message="Skill deleted successfully")
