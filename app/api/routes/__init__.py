"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.student_routes import router as student_router
from app.api.routes.company_routes import router as company_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.interview_routes import router as interview_router
from app.api.routes.skill_routes import router as skill_router
from app.api.routes.student_skill_routes import router as student_skill_router
from app.api.routes.education_routes import router as education_router
from app.api.routes.project_routes import router as project_router
from app.api.routes.student_profile_routes import router as student_profile_router
from app.api.routes.notification_routes import router as notification_router
from app.api.routes.internship_routes import router as internship_router
from app.api.routes.task_routes import router as task_router
from app.api.routes.evaluation_routes import router as evaluation_router
from app.api.routes.review_routes import router as review_router
from app.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(company_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(interview_router)
api_router.include_router(skill_router)
api_router.include_router(student_skill_router)
api_router.include_router(education_router)
api_router.include_router(project_router)
api_router.include_router(student_profile_router)
api_router.include_router(notification_router)
api_router.include_router(internship_router)
api_router.include_router(task_router)
api_router.include_router(evaluation_router)
api_router.include_router(review_router)
api_router.include_router(analytics_router)
