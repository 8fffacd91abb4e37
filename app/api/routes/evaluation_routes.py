"""
Evaluation Routes

GET /evaluations - List evaluations (filters: internship_id, evaluator_type, search)
GET /evaluations/internship/{internship_id}/averages - Average ratings for an internship
GET /evaluations/{evaluation_id} - Get evaluation
POST /evaluations - Create evaluation
PUT /evaluations/{evaluation_id} - Update evaluation
DELETE /evaluations/{evaluation_id} - Delete evaluation
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.evaluations import evaluation_repository
from app.schemas.schemas import (
    EvaluationCreate, EvaluationUpdate, EvaluationResponse, EvaluationAverages, EvaluatorType,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

router = APIRouter(prefix="/evaluations", tags=["Evaluations"])


@router.get("", response_model=PageResponse[EvaluationResponse])
def list_evaluations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    internship_id: Optional[int] = Query(None),
    evaluator_type: Optional[EvaluatorType] = Query(None),
    search: Optional[str] = Query(None),
):
    filters = {"internship_id": internship_id, "evaluator_type": evaluator_type, "search": search}
    rows, pagination = run_in_transaction(evaluation_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/internship/{internship_id}/averages", response_model=DataResponse[EvaluationAverages])
def evaluation_averages(internship_id: int):
    return {"data": run_in_transaction(evaluation_repository.averages, internship_id)}


@router.get("/{evaluation_id}", response_model=DataResponse[EvaluationResponse])
def get_evaluation(evaluation_id: int):
    return {"data": run_in_transaction(evaluation_repository.get, evaluation_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_evaluation(data: EvaluationCreate, admin: dict = Depends(get_current_admin)):
    evaluation_id = run_in_transaction(evaluation_repository.create, data.model_dump())
    return CreatedResponse(message="Evaluation created successfully", data=CreatedData(id=evaluation_id))


@router.put("/{evaluation_id}", response_model=MessageResponse)
def update_evaluation(evaluation_id: int, data: EvaluationUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(evaluation_repository.update, evaluation_id, patch)
    return MessageResponse(message="Evaluation updated successfully")


@router.delete("/{evaluation_id}", response_model=MessageResponse)
def delete_evaluation(evaluation_id: int, admin: dict = Depends(require_delete_role)):
    run_in_transaction(evaluation_repository.delete, evaluation_id)
    return MessageResponse(message="Evaluation deleted successfully")
