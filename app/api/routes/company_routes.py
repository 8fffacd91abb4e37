"""
Company Routes

GET /companies - List active companies (filters: industry, city, state, search)
GET /companies/dropdown - Id/name pairs for selects
GET /companies/stats/overview - Company counts by industry
GET /companies/{company_id} - Get company
POST /companies - Create company
PUT /companies/{company_id} - Update company
DELETE /companies/{company_id} - Deactivate company without active jobs/applications
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin, require_delete_role
from app.db.postgres import run_in_transaction
from app.repositories.companies import company_repository
from app.schemas.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse, CompanyOption,
    PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=PageResponse[CompanyResponse])
def list_companies(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    industry: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search name, industry, city or HR email"),
):
    """List active companies with filters and pagination."""
    filters = {"industry": industry, "city": city, "state": state, "search": search}
    rows, pagination = run_in_transaction(company_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/dropdown", response_model=DataResponse[List[CompanyOption]])
def company_dropdown():
    return {"data": run_in_transaction(company_repository.dropdown)}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, int]])
def company_stats():
    """Active company counts by industry."""
    return {"data": run_in_transaction(company_repository.count_by_industry)}


@router.get("/{company_id}", response_model=DataResponse[CompanyResponse])
def get_company(company_id: int):
    return {"data": run_in_transaction(company_repository.get, company_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_company(data: CompanyCreate, admin: dict = Depends(get_current_admin)):
    """Create company. Names are unique among active companies."""
    company_id = run_in_transaction(company_repository.create, data.model_dump())
    logger.info("Company %s created by admin %s", company_id, admin["admin_id"])
    return CreatedResponse(message="Company created successfully", data=CreatedData(id=company_id))


@router.put("/{company_id}", response_model=MessageResponse)
def update_company(company_id: int, data: CompanyUpdate, admin: dict = Depends(get_current_admin)):
    """Update company. Only provided fields are updated."""
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(company_repository.update, company_id, patch)
    return MessageResponse(message="Company updated successfully")


@router.delete("/{company_id}", response_model=MessageResponse)
def delete_company(company_id: int, admin: dict = Depends(require_delete_role)):
    """Soft-delete company. Refused while it has active jobs or open applications."""
    run_in_transaction(company_repository.delete, company_id)
    logger.info("Company %s deactivated by admin %s", company_id, admin["admin_id"])
    return MessageResponse(message="Company deleted successfully")
