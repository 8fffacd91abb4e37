"""
Project Routes

GET /projects - List projects (filters: student_id, project_type, search)
GET /projects/types/list - Distinct project types in use
GET /projects/student/{student_id} - Projects of one student
GET /projects/{project_id} - Get project
POST /projects - Add project for a student
PUT /projects/{project_id} - Update project
DELETE /projects/{project_id} - Delete project
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.projects import project_repository
from app.schemas.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=PageResponse[ProjectResponse])
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    student_id: Optional[int] = Query(None),
    project_type: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search name, description and technologies"),
):
    filters = {"student_id": student_id, "project_type": project_type, "search": search}
    rows, pagination = run_in_transaction(project_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/types/list", response_model=DataResponse[List[str]])
def project_types():
    return {"data": run_in_transaction(project_repository.project_types)}


@router.get("/student/{student_id}", response_model=DataResponse[List[ProjectResponse]])
def student_projects(student_id: int):
    return {"data": run_in_transaction(project_repository.by_student, student_id)}


@router.get("/{project_id}", response_model=DataResponse[ProjectResponse])
def get_project(project_id: int):
    return {"data": run_in_transaction(project_repository.get, project_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_project(data: ProjectCreate, admin: dict = Depends(get_current_admin)):
    project_id = run_in_transaction(project_repository.create, data.model_dump())
    return CreatedResponse(message="Project created successfully", data=CreatedData(id=project_id))


@router.put("/{project_id}", response_model=MessageResponse)
def update_project(project_id: int, data: ProjectUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True)
    run_in_transaction(project_repository.update, project_id, patch)
    return MessageResponse(message="Project updated successfully")


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(project_id: int, admin: dict = Depends(require_delete_role)):
    run_in_transaction(project_repository.delete, project_id)
    return MessageResponse(message="Project deleted successfully")
