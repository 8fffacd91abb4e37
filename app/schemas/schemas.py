"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Create/Update pairs: Update models have every field optional and routes
pass `model_dump(exclude_unset=True)` to the repository, so only the
fields a client actually sent are written. Status fields are never part of
Update models; each status change has its own *StatusUpdate request routed
through the transition engine.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, ValidationInfo, field_validator

T = TypeVar("T")


# ============================================================
# ENUMS
# ============================================================

class AdminRole(str, Enum):
    super_admin = "super_admin"
    admin = "admin"
    manager = "manager"


class StudentStatus(str, Enum):
    available = "Available"
    applied = "Applied"
    selected = "Selected"
    completed = "Completed"
    inactive = "Inactive"


class StudentAvailability(str, Enum):
    """The only student states an admin may set directly."""
    available = "Available"
    inactive = "Inactive"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    internship = "Internship"


class JobStatus(str, Enum):
    active = "Active"
    paused = "Paused"
    closed = "Closed"


class ApplicationStatus(str, Enum):
    pending = "Pending"
    under_review = "Under Review"
    shortlisted = "Shortlisted"
    selected = "Selected"
    rejected = "Rejected"


class InterviewMode(str, Enum):
    online = "Online"
    offline = "Offline"
    phone = "Phone"
    video = "Video"


class InterviewStatus(str, Enum):
    scheduled = "Scheduled"
    completed = "Completed"
    cancelled = "Cancelled"
    rescheduled = "Rescheduled"


class InternshipStatus(str, Enum):
    active = "Active"
    on_hold = "On Hold"
    completed = "Completed"
    cancelled = "Cancelled"


class SkillCategory(str, Enum):
    technical = "Technical"
    soft_skills = "Soft Skills"
    language = "Language"
    certification = "Certification"
    other = "Other"


class ProficiencyLevel(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"
    expert = "Expert"


class NotificationType(str, Enum):
    info = "info"
    warning = "warning"
    success = "success"
    error = "error"
    reminder = "reminder"


class RecipientGroup(str, Enum):
    all_students = "all_students"
    available_students = "available_students"
    selected_students = "selected_students"
    specific_students = "specific_students"


class TaskStatus(str, Enum):
    pending = "Pending"
    in_progress = "In Progress"
    completed = "Completed"
    overdue = "Overdue"


class TaskPriority(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    critical = "Critical"


class EvaluatorType(str, Enum):
    supervisor = "supervisor"
    intern = "intern"
    admin = "admin"


def _check_after(value, info: ValidationInfo, earlier_field: str, message: str, allow_equal: bool = False):
    """Compare a date with an earlier date field of the same payload (when both were sent)."""
    earlier = info.data.get(earlier_field)
    if value is None or earlier is None:
        return value
    if value < earlier or (value == earlier and not allow_equal):
        raise ValueError(message)
    return value


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class PageResponse(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    warnings: List[str] = []


class CreatedData(BaseModel):
    id: int


class CreatedResponse(BaseModel):
    success: bool = True
    message: str
    data: CreatedData
    warnings: List[str] = []


class TransitionData(BaseModel):
    entity: str
    id: int
    from_status: Optional[str] = None
    status: str
    warnings: List[str] = []


class TransitionResponse(BaseModel):
    success: bool = True
    message: str
    data: TransitionData


class StatusUpdate(BaseModel):
    """Common body of every status change request."""
    expected_status: Optional[str] = Field(
        None, description="Status the client last saw; the change is refused if it no longer matches"
    )
    version: Optional[int] = Field(None, ge=1, description="Row version the client last saw")
    reason: Optional[str] = Field(None, max_length=500)


class Row(BaseModel):
    """Base for response rows read straight from SQL."""
    model_config = ConfigDict(extra="ignore")


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: AdminRole = AdminRole.admin


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


class AdminResponse(Row):
    admin_id: int
    username: str
    email: str
    role: str
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TokenData(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminResponse


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pin: Optional[str] = Field(None, max_length=10)
    age: Optional[int] = Field(None, ge=16, le=100)


class StudentUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pin: Optional[str] = Field(None, max_length=10)
    age: Optional[int] = Field(None, ge=16, le=100)


class StudentStatusUpdate(BaseModel):
    status: StudentAvailability
    version: Optional[int] = Field(None, ge=1)


class StudentResponse(Row):
    student_id: int
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: str
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pin: Optional[str] = None
    age: Optional[int] = None
    status: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StudentSkillSummary(Row):
    skill_id: int
    skill_name: str
    category: str
    proficiency_level: str


class StudentApplicationSummary(Row):
    application_id: int
    job_id: int
    job_title: str
    company_name: str
    status: str
    application_date: date


class StudentDetailResponse(StudentResponse):
    skills: List[StudentSkillSummary] = []
    applications: List[StudentApplicationSummary] = []


# ============================================================
# EDUCATION / PROJECT / PROFILE SCHEMAS
# ============================================================

class EducationCreate(BaseModel):
    student_id: int
    degree: str = Field(..., min_length=1, max_length=100)
    college: str = Field(..., min_length=1, max_length=200)
    cgpa: Optional[float] = Field(None, ge=0, le=4)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "start_date", "End date must be after start date")


class EducationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    degree: Optional[str] = Field(None, min_length=1, max_length=100)
    college: Optional[str] = Field(None, min_length=1, max_length=200)
    cgpa: Optional[float] = Field(None, ge=0, le=4)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "start_date", "End date must be after start date")


class EducationResponse(Row):
    education_id: int
    student_id: int
    student_name: Optional[str] = None
    degree: str
    college: str
    cgpa: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectCreate(BaseModel):
    student_id: int
    project_name: str = Field(..., min_length=1, max_length=200)
    project_type: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    technologies_used: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "start_date", "End date cannot be before start date",
                            allow_equal=True)


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project_name: Optional[str] = Field(None, min_length=1, max_length=200)
    project_type: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    technologies_used: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "start_date", "End date cannot be before start date",
                            allow_equal=True)


class ProjectResponse(Row):
    project_id: int
    student_id: int
    student_name: Optional[str] = None
    project_name: str
    project_type: Optional[str] = None
    description: Optional[str] = None
    technologies_used: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StudentProfileUpsert(BaseModel):
    """Create-or-update body; only the fields sent are written."""
    model_config = ConfigDict(extra="forbid")

    bio: Optional[str] = Field(None, max_length=1000)
    linkedin_url: Optional[HttpUrl] = None
    github_url: Optional[HttpUrl] = None
    portfolio_url: Optional[HttpUrl] = None
    resume_url: Optional[str] = Field(None, max_length=255)
    profile_picture: Optional[str] = Field(None, max_length=255)
    availability_start: Optional[date] = None
    availability_end: Optional[date] = None
    salary_expectation: Optional[float] = Field(None, ge=0)

    @field_validator("availability_end")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "availability_start", "Availability end cannot be before its start",
                            allow_equal=True)


class StudentProfileResponse(Row):
    profile_id: int
    student_id: int
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    student_status: Optional[str] = None
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None
    profile_picture: Optional[str] = None
    availability_start: Optional[date] = None
    availability_end: Optional[date] = None
    salary_expectation: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    industry: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pin: Optional[str] = Field(None, max_length=10)
    contact_no: Optional[str] = Field(None, max_length=20)
    hr_name: str = Field(..., min_length=1, max_length=100)
    hr_phone: Optional[str] = Field(None, max_length=20)
    hr_email: EmailStr
    website: Optional[str] = Field(None, max_length=255)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    industry: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    pin: Optional[str] = Field(None, max_length=10)
    contact_no: Optional[str] = Field(None, max_length=20)
    hr_name: Optional[str] = Field(None, min_length=1, max_length=100)
    hr_phone: Optional[str] = Field(None, max_length=20)
    hr_email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=255)


class CompanyResponse(Row):
    company_id: int
    name: str
    industry: str
    city: str
    state: str
    pin: Optional[str] = None
    contact_no: Optional[str] = None
    hr_name: str
    hr_phone: Optional[str] = None
    hr_email: str
    website: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyOption(Row):
    company_id: int
    name: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    company_id: int
    admin_id: Optional[int] = None
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    job_type: JobType = JobType.full_time
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pin: Optional[str] = Field(None, max_length=10)
    posted_date: date = Field(default_factory=date.today)
    deadline: Optional[date] = None
    required_skill_ids: List[int] = []

    @field_validator("deadline")
    @classmethod
    def deadline_after_posted(cls, value, info: ValidationInfo):
        return _check_after(value, info, "posted_date", "Deadline must be after posted date")


class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    company_id: Optional[int] = None
    admin_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    job_type: Optional[JobType] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pin: Optional[str] = Field(None, max_length=10)
    posted_date: Optional[date] = None
    deadline: Optional[date] = None
    required_skill_ids: Optional[List[int]] = None

    @field_validator("deadline")
    @classmethod
    def deadline_after_posted(cls, value, info: ValidationInfo):
        return _check_after(value, info, "posted_date", "Deadline must be after posted date")


class JobStatusUpdate(StatusUpdate):
    status: JobStatus


class JobResponse(Row):
    job_id: int
    company_id: int
    company_name: Optional[str] = None
    admin_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary: Optional[float] = None
    job_type: str
    city: Optional[str] = None
    state: Optional[str] = None
    pin: Optional[str] = None
    posted_date: date
    deadline: Optional[date] = None
    status: str
    version: int
    required_skills: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    student_id: int
    job_id: int
    application_date: Optional[date] = None
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = Field(None, max_length=500)
    additional_documents: Optional[str] = None


class ApplicationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cover_letter: Optional[str] = None
    resume_url: Optional[str] = Field(None, max_length=500)
    additional_documents: Optional[str] = None


class ApplicationStatusUpdate(StatusUpdate):
    status: ApplicationStatus


class ApplicationResponse(Row):
    application_id: int
    student_id: int
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    job_id: int
    job_title: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    status: str
    application_date: date
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    additional_documents: Optional[str] = None
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusHistoryEntry(Row):
    history_id: int
    from_status: Optional[str] = None
    to_status: str
    changed_by: Optional[int] = None
    changed_by_username: Optional[str] = None
    reason: Optional[str] = None
    changed_at: datetime


class ApplicationInterviewSummary(Row):
    interview_id: int
    mode: str
    interview_date: datetime
    status: str
    interview_score: Optional[int] = None
    feedback: Optional[str] = None


class ApplicationDetailResponse(ApplicationResponse):
    interviews: List[ApplicationInterviewSummary] = []
    history: List[StatusHistoryEntry] = []


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class InterviewCreate(BaseModel):
    application_id: int
    student_id: Optional[int] = None
    mode: InterviewMode
    interview_date: datetime
    location: Optional[str] = Field(None, max_length=255)
    interviewer_name: Optional[str] = Field(None, max_length=100)
    interviewer_email: Optional[EmailStr] = None


class InterviewUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Optional[InterviewMode] = None
    location: Optional[str] = Field(None, max_length=255)
    interviewer_name: Optional[str] = Field(None, max_length=100)
    interviewer_email: Optional[EmailStr] = None
    interview_score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None


class InterviewStatusUpdate(StatusUpdate):
    status: InterviewStatus
    interview_date: Optional[datetime] = Field(None, description="Required when moving back to Scheduled")
    interview_score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None


class InterviewResponse(Row):
    interview_id: int
    application_id: int
    student_id: int
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    job_id: Optional[int] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    mode: str
    interview_date: datetime
    location: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    interview_score: Optional[int] = None
    feedback: Optional[str] = None
    status: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# SKILL SCHEMAS
# ============================================================

class SkillCreate(BaseModel):
    skill_name: str = Field(..., min_length=1, max_length=100)
    category: SkillCategory
    description: Optional[str] = None


class SkillUpdate(BaseModel):
    skill_name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[SkillCategory] = None
    description: Optional[str] = None


class SkillResponse(Row):
    skill_id: int
    skill_name: str
    category: str
    description: Optional[str] = None
    student_count: int = 0
    job_count: int = 0
    created_at: Optional[datetime] = None


class SkillCategoryCount(Row):
    category: str
    skill_count: int


class StudentSkillCreate(BaseModel):
    student_id: int
    skill_id: int
    proficiency_level: ProficiencyLevel = ProficiencyLevel.intermediate


class SkillAssignment(BaseModel):
    skill_id: int
    proficiency_level: ProficiencyLevel = ProficiencyLevel.intermediate


class StudentSkillBulkCreate(BaseModel):
    student_id: int
    skills: List[SkillAssignment] = Field(..., min_length=1)


class ProficiencyUpdate(BaseModel):
    proficiency_level: ProficiencyLevel


class StudentSkillResponse(Row):
    student_id: int
    skill_id: int
    skill_name: str
    category: str
    proficiency_level: str
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    created_at: Optional[datetime] = None


class BulkAssignResult(BaseModel):
    skill_id: int
    status: str
    message: str


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationCreate(BaseModel):
    student_id: Optional[int] = None
    admin_id: Optional[int] = None
    message: str = Field(..., min_length=1, max_length=2000)
    type: NotificationType = NotificationType.info


class NotificationUpdate(BaseModel):
    message: Optional[str] = Field(None, min_length=1, max_length=2000)
    type: Optional[NotificationType] = None
    is_read: Optional[bool] = None


class BulkNotificationRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    type: NotificationType = NotificationType.info
    target: RecipientGroup
    student_ids: Optional[List[int]] = Field(None, validate_default=True)

    @field_validator("student_ids")
    @classmethod
    def ids_for_specific_target(cls, value, info: ValidationInfo):
        if info.data.get("target") == RecipientGroup.specific_students and not value:
            raise ValueError("student_ids is required when target is specific_students")
        return value


class NotificationResponse(Row):
    notification_id: int
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    admin_id: Optional[int] = None
    admin_username: Optional[str] = None
    message: str
    type: str
    is_read: bool
    created_at: Optional[datetime] = None


class UnreadCount(BaseModel):
    student_id: Optional[int] = None
    unread: int


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    company_id: int
    student_id: Optional[int] = None
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    start_date: date
    end_date: date
    duration_weeks: Optional[int] = Field(None, ge=1)
    stipend: Optional[float] = Field(None, ge=0)
    supervisor_name: Optional[str] = Field(None, max_length=100)
    supervisor_email: Optional[EmailStr] = None
    supervisor_phone: Optional[str] = Field(None, max_length=20)
    requirements: Optional[str] = None
    learning_objectives: Optional[str] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "start_date", "End date must be after start date")


class InternshipUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    company_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration_weeks: Optional[int] = Field(None, ge=1)
    stipend: Optional[float] = Field(None, ge=0)
    supervisor_name: Optional[str] = Field(None, max_length=100)
    supervisor_email: Optional[EmailStr] = None
    supervisor_phone: Optional[str] = Field(None, max_length=20)
    requirements: Optional[str] = None
    learning_objectives: Optional[str] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return _check_after(value, info, "start_date", "End date must be after start date")


class InternshipStatusUpdate(StatusUpdate):
    status: InternshipStatus


class InternAssignment(BaseModel):
    student_id: int
    version: Optional[int] = Field(None, ge=1)


class InternshipResponse(Row):
    internship_id: int
    company_id: int
    company_name: Optional[str] = None
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    title: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    duration_weeks: Optional[int] = None
    stipend: Optional[float] = None
    supervisor_name: Optional[str] = None
    supervisor_email: Optional[str] = None
    supervisor_phone: Optional[str] = None
    requirements: Optional[str] = None
    learning_objectives: Optional[str] = None
    status: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InternshipDetailResponse(InternshipResponse):
    tasks: List[Dict[str, Any]] = []
    evaluations: List[Dict[str, Any]] = []


# ============================================================
# TASK SCHEMAS
# ============================================================

class TaskCreate(BaseModel):
    internship_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    assigned_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = None
    status: TaskStatus = TaskStatus.pending
    priority: TaskPriority = TaskPriority.medium

    @field_validator("due_date")
    @classmethod
    def due_after_assigned(cls, value, info: ValidationInfo):
        return _check_after(value, info, "assigned_date", "Due date cannot be before assigned date",
                            allow_equal=True)


class TaskUpdate(BaseModel):
    internship_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    assigned_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None

    @field_validator("due_date")
    @classmethod
    def due_after_assigned(cls, value, info: ValidationInfo):
        return _check_after(value, info, "assigned_date", "Due date cannot be before assigned date",
                            allow_equal=True)


class TaskResponse(Row):
    task_id: int
    internship_id: int
    internship_title: Optional[str] = None
    title: str
    description: Optional[str] = None
    assigned_date: date
    due_date: Optional[date] = None
    status: str
    priority: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskOverview(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    completion_rate: float


# ============================================================
# EVALUATION SCHEMAS
# ============================================================

class EvaluationCreate(BaseModel):
    internship_id: int
    evaluator_type: EvaluatorType
    technical_skills: int = Field(..., ge=1, le=5)
    communication_skills: int = Field(..., ge=1, le=5)
    teamwork: int = Field(..., ge=1, le=5)
    punctuality: int = Field(..., ge=1, le=5)
    overall_rating: int = Field(..., ge=1, le=5)
    comments: Optional[str] = None
    evaluation_date: date = Field(default_factory=date.today)


class EvaluationUpdate(BaseModel):
    evaluator_type: Optional[EvaluatorType] = None
    technical_skills: Optional[int] = Field(None, ge=1, le=5)
    communication_skills: Optional[int] = Field(None, ge=1, le=5)
    teamwork: Optional[int] = Field(None, ge=1, le=5)
    punctuality: Optional[int] = Field(None, ge=1, le=5)
    overall_rating: Optional[int] = Field(None, ge=1, le=5)
    comments: Optional[str] = None
    evaluation_date: Optional[date] = None


class EvaluationResponse(Row):
    evaluation_id: int
    internship_id: int
    internship_title: Optional[str] = None
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    evaluator_type: str
    technical_skills: int
    communication_skills: int
    teamwork: int
    punctuality: int
    overall_rating: int
    comments: Optional[str] = None
    evaluation_date: Optional[date] = None
    created_at: Optional[datetime] = None


class EvaluationAverages(Row):
    internship_id: int
    evaluation_count: int
    technical_skills: Optional[float] = None
    communication_skills: Optional[float] = None
    teamwork: Optional[float] = None
    punctuality: Optional[float] = None
    overall_rating: Optional[float] = None


# ============================================================
# COMPANY REVIEW SCHEMAS
# ============================================================

class ReviewCreate(BaseModel):
    company_id: int
    student_id: int
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=1000)
    work_environment_rating: Optional[int] = Field(None, ge=1, le=5)
    learning_opportunity_rating: Optional[int] = Field(None, ge=1, le=5)
    management_rating: Optional[int] = Field(None, ge=1, le=5)
    is_anonymous: bool = False


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=1000)
    work_environment_rating: Optional[int] = Field(None, ge=1, le=5)
    learning_opportunity_rating: Optional[int] = Field(None, ge=1, le=5)
    management_rating: Optional[int] = Field(None, ge=1, le=5)
    is_anonymous: Optional[bool] = None


class ReviewResponse(Row):
    review_id: int
    company_id: int
    company_name: Optional[str] = None
    student_id: int
    student_name: Optional[str] = None
    rating: int
    review_text: Optional[str] = None
    work_environment_rating: Optional[int] = None
    learning_opportunity_rating: Optional[int] = None
    management_rating: Optional[int] = None
    is_anonymous: bool = False
    created_at: Optional[datetime] = None


class CompanyRatingStats(Row):
    company_id: int
    review_count: int
    avg_rating: Optional[float] = None
    avg_work_environment_rating: Optional[float] = None
    avg_learning_opportunity_rating: Optional[float] = None
    avg_management_rating: Optional[float] = None
    rating_distribution: Dict[int, int] = {}


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class DashboardData(BaseModel):
    overview: Optional[Dict[str, Any]] = None
    trends: Optional[List[Dict[str, Any]]] = None
    top_skills: Optional[List[Dict[str, Any]]] = None
    geographic: Optional[List[Dict[str, Any]]] = None
    errors: Dict[str, str] = {}
