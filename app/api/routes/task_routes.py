"""
Task Routes

GET /tasks - List tasks (filters: internship_id, status, priority, search)
GET /tasks/stats/overview - Counts by status/priority and completion rate
GET /tasks/{task_id} - Get task
POST /tasks - Create task for an internship
PUT /tasks/{task_id} - Update task
DELETE /tasks/{task_id} - Delete task
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin
from app.db.postgres import run_in_transaction
from app.repositories.tasks import task_repository
from app.schemas.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, TaskOverview, TaskStatus, TaskPriority,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=PageResponse[TaskResponse])
def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    internship_id: Optional[int] = Query(None),
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    search: Optional[str] = Query(None),
):
    filters = {"internship_id": internship_id, "status": status, "priority": priority, "search": search}
    rows, pagination = run_in_transaction(task_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/stats/overview", response_model=DataResponse[TaskOverview])
def task_stats(internship_id: Optional[int] = Query(None)):
    return {"data": run_in_transaction(task_repository.overview, internship_id)}


@router.get("/{task_id}", response_model=DataResponse[TaskResponse])
def get_task(task_id: int):
    return {"data": run_in_transaction(task_repository.get, task_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_task(data: TaskCreate, admin: dict = Depends(get_current_admin)):
    task_id = run_in_transaction(task_repository.create, data.model_dump())
    return CreatedResponse(message="Task created successfully", data=CreatedData(id=task_id))


@router.put("/{task_id}", response_model=MessageResponse)
def update_task(task_id: int, data: TaskUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(task_repository.update, task_id, patch)
    return MessageResponse(message="Task updated successfully")


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: int, admin: dict = Depends(get_current_admin)):
    run_in_transaction(task_repository.delete, task_id)
    return MessageResponse(message="Task deleted successfully")
