"""
Company Review Routes

GET /company-reviews - List reviews (filters: company_id, student_id, rating, search)
GET /company-reviews/company/{company_id}/stats - Rating averages and distribution
GET /company-reviews/{review_id} - Get review
POST /company-reviews - Create review (one per student and company)
PUT /company-reviews/{review_id} - Update review
DELETE /company-reviews/{review_id} - Delete review
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.reviews import review_repository
from app.schemas.schemas import (
    ReviewCreate, ReviewUpdate, ReviewResponse, CompanyRatingStats,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

router = APIRouter(prefix="/company-reviews", tags=["Company Reviews"])


@router.get("", response_model=PageResponse[ReviewResponse])
def list_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    company_id: Optional[int] = Query(None),
    student_id: Optional[int] = Query(None),
    rating: Optional[int] = Query(None, ge=1, le=5),
    search: Optional[str] = Query(None),
):
    filters = {"company_id": company_id, "student_id": student_id, "rating": rating, "search": search}
    rows, pagination = run_in_transaction(review_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/company/{company_id}/stats", response_model=DataResponse[CompanyRatingStats])
def company_review_stats(company_id: int):
    return {"data": run_in_transaction(review_repository.company_stats, company_id)}


@router.get("/{review_id}", response_model=DataResponse[ReviewResponse])
def get_review(review_id: int):
    return {"data": run_in_transaction(review_repository.get, review_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_review(data: ReviewCreate, admin: dict = Depends(get_current_admin)):
    review_id = run_in_transaction(review_repository.create, data.model_dump())
    return CreatedResponse(message="Review created successfully", data=CreatedData(id=review_id))


@router.put("/{review_id}", response_model=MessageResponse)
def update_review(review_id: int, data: ReviewUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(review_repository.update, review_id, patch)
    return MessageResponse(message="Review updated successfully")


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(review_id: int, admin: dict = Depends(require_delete_role)):
    run_in_transaction(review_repository.delete, review_id)
    return MessageResponse(message="Review deleted successfully")
