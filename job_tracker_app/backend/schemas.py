from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, validator


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _required_text(value, field_name: str):
    if value is None or not str(value).strip():
        raise ValueError(f"{field_name} cannot be empty")
    return str(value).strip()


# Enumerations
class ApplicationStatus(str, Enum):
    applied = "applied"
    assessment = "assessment"
    interview = "interview"
    offer = "offer"
    rejected = "rejected"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    internship = "internship"
    freelance = "freelance"


class Priority(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class InterviewType(str, Enum):
    phone = "phone"
    video = "video"
    in_person = "in_person"
    technical = "technical"
    hr = "hr"
    final = "final"


class InterviewStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    rescheduled = "rescheduled"


class ReminderType(str, Enum):
    initial = "initial"
    follow_up = "follow_up"
    thank_you = "thank_you"
    status_check = "status_check"


class NotificationType(str, Enum):
    follow_up = "follow_up"
    interview = "interview"
    deadline = "deadline"
    general = "general"


# Token Schemas
class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    email: Optional[str] = None


# User Schemas
class UserBase(BaseModel):
    email: str


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = None


class User(UserBase):
    id: int
    full_name: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Resume Schemas
class Resume(BaseModel):
    id: int
    user_id: int
    name: str
    file_name: str
    file_path: str
    file_size: int
    file_type: str
    version: str
    is_default: bool
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ResumeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    is_default: Optional[bool] = None

    @validator("name")
    def name_not_blank(cls, v):
        if v is None:
            return v
        return _required_text(v, "name")


class ApplicationResumeLink(BaseModel):
    id: int
    application_id: int
    resume_id: int
    created_at: datetime

    class Config:
        from_attributes = True


# Application Tracker Schemas
class ApplicationBase(BaseModel):
    class Config:
        use_enum_values = True

    company: str = Field(..., example="Acme Corp")
    role: str = Field(..., example="Backend Engineer")
    portal_url: Optional[str] = None
    status: ApplicationStatus = "applied"
    deadline: Optional[date] = None
    notes: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    application_date: Optional[date] = Field(None, example="2024-01-15")
    job_type: JobType = "full-time"
    source: Optional[str] = None
    priority: Priority = "medium"

    @validator("portal_url", "deadline", "notes", "salary", "location",
               "application_date", "source", pre=True)
    def blank_optional_fields(cls, v):
        return _blank_to_none(v)

    @validator("company")
    def company_not_blank(cls, v):
        return _required_text(v, "company")

    @validator("role")
    def role_not_blank(cls, v):
        return _required_text(v, "role")


class ApplicationCreate(ApplicationBase):
    # attach this resume right after creation
    resume_id: Optional[int] = None


class ApplicationUpdate(BaseModel):
    class Config:
        use_enum_values = True

    company: Optional[str] = None
    role: Optional[str] = None
    portal_url: Optional[str] = None
    status: Optional[ApplicationStatus] = None
    deadline: Optional[date] = None
    notes: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    application_date: Optional[date] = None
    job_type: Optional[JobType] = None
    source: Optional[str] = None
    priority: Optional[Priority] = None

    @validator("portal_url", "deadline", "notes", "salary", "location",
               "application_date", "source", pre=True)
    def blank_optional_fields(cls, v):
        return _blank_to_none(v)

    @validator("company")
    def company_not_blank(cls, v):
        if v is None:
            return v
        return _required_text(v, "company")

    @validator("role")
    def role_not_blank(cls, v):
        if v is None:
            return v
        return _required_text(v, "role")


class Application(BaseModel):
    id: int
    user_id: int
    company: str
    role: str
    portal_url: Optional[str] = None
    # stored rows may carry legacy values, so responses are not restricted to the enum
    status: str
    deadline: Optional[date] = None
    notes: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    application_date: Optional[date] = None
    job_type: str
    source: Optional[str] = None
    priority: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ApplicationWithResumes(Application):
    attached_resumes: List[Resume] = []


class ApplicationSummary(BaseModel):
    company: str
    role: str

    class Config:
        from_attributes = True


# Notification Schemas
class NotificationCreate(BaseModel):
    class Config:
        use_enum_values = True

    application_id: Optional[int] = None
    type: NotificationType = "general"
    title: str
    message: str
    scheduled_for: datetime

    @validator("title")
    def title_not_blank(cls, v):
        return _required_text(v, "title")


class Notification(BaseModel):
    id: int
    user_id: int
    application_id: Optional[int] = None
    type: str
    title: str
    message: str
    scheduled_for: datetime
    is_read: bool
    is_sent: bool
    created_at: datetime
    updated_at: datetime
    application: Optional[ApplicationSummary] = None

    class Config:
        from_attributes = True


class InterviewScheduleCreate(BaseModel):
    class Config:
        use_enum_values = True

    application_id: int
    interview_type: InterviewType
    scheduled_date: datetime
    duration_minutes: int = Field(60, gt=0)
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    notes: Optional[str] = None

    @validator("location", "meeting_link", "interviewer_name", "interviewer_email", "notes", pre=True)
    def blank_optional_fields(cls, v):
        return _blank_to_none(v)


class InterviewScheduleUpdate(BaseModel):
    class Config:
        use_enum_values = True

    interview_type: Optional[InterviewType] = None
    scheduled_date: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[InterviewStatus] = None


class InterviewSchedule(BaseModel):
    id: int
    user_id: int
    application_id: int
    interview_type: str
    scheduled_date: datetime
    duration_minutes: int
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime
    application: Optional[ApplicationSummary] = None

    class Config:
        from_attributes = True


class FollowUpReminderCreate(BaseModel):
    class Config:
        use_enum_values = True

    application_id: int
    reminder_type: ReminderType
    scheduled_for: datetime
    notes: Optional[str] = None


class FollowUpReminder(BaseModel):
    id: int
    user_id: int
    application_id: int
    reminder_type: str
    scheduled_for: datetime
    is_completed: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    application: Optional[ApplicationSummary] = None

    class Config:
        from_attributes = True


# Analytics Schemas
class StatusBucket(BaseModel):
    status: str
    count: int
    color: str
    icon: str


class MonthlyTrend(BaseModel):
    month: str = Field(..., example="2024-01")
    count: int


class CompanyCount(BaseModel):
    company: str
    count: int


class AnalyticsSummary(BaseModel):
    total: int
    success_rate: float
    status_distribution: List[StatusBucket]
    monthly_trends: List[MonthlyTrend]
    top_companies: List[CompanyCount]
    # the input records themselves, newest first
    recent_applications: List[Any]
    average_applications_per_month: float


class DashboardStats(BaseModel):
    total_applications: int
    interviews_scheduled: int
    offers_received: int
    rejection_rate: float
    recent_applications: List[Application]
