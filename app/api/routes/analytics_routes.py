"""
Analytics Routes

Read-only aggregate views over the placement data.

GET /analytics/dashboard - Overview, 12-month trends, top skills, locations
GET /analytics/students/{student_id} - Student dashboard
GET /analytics/companies/{company_id} - Company dashboard
GET /analytics/jobs/{job_id} - Job summary with matching students
GET /analytics/skills - Skill demand vs supply
GET /analytics/interviews/upcoming - Next scheduled interviews
GET /analytics/timeline - Recent application status changes
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query

from app.db.postgres import run_in_transaction
from app.services import analytics_service
from app.schemas.schemas import DashboardData, DataResponse, SkillCategory

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard", response_model=DataResponse[DashboardData])
def dashboard():
    """
    Each widget is computed in its own transaction. A failing widget comes
    back as null and is named in `errors`; the other widgets still render.
    """
    return {"data": analytics_service.build_dashboard()}


@router.get("/students/{student_id}", response_model=DataResponse[Dict[str, Any]])
def student_analytics(student_id: int):
    return {"data": run_in_transaction(analytics_service.student_dashboard, student_id)}


@router.get("/companies/{company_id}", response_model=DataResponse[Dict[str, Any]])
def company_analytics(company_id: int):
    return {"data": run_in_transaction(analytics_service.company_dashboard, company_id)}


@router.get("/jobs/{job_id}", response_model=DataResponse[Dict[str, Any]])
def job_analytics(job_id: int):
    return {"data": run_in_transaction(analytics_service.job_summary, job_id)}


@router.get("/skills", response_model=DataResponse[List[Dict[str, Any]]])
def skill_analytics(
    category: Optional[SkillCategory] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    category_value = category.value if category else None
    return {"data": run_in_transaction(analytics_service.skill_demand, category_value, limit)}


@router.get("/interviews/upcoming", response_model=DataResponse[List[Dict[str, Any]]])
def upcoming_interviews(limit: int = Query(10, ge=1, le=100)):
    return {"data": run_in_transaction(analytics_service.upcoming_interviews, limit)}


@router.get("/timeline", response_model=DataResponse[List[Dict[str, Any]]])
def application_timeline(
    days: int = Query(30, ge=1, le=365),
    limit: int = Query(50, ge=1, le=200),
):
    return {"data": run_in_transaction(analytics_service.timeline, days, limit)}
