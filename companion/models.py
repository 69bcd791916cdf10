"""Data models for the Compliance Companion application."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, List

from pydantic import BaseModel, Field, field_validator


class Status(str, Enum):
    COMPLIANT = "compliant"
    PENDING = "pending"
    AT_RISK = "at-risk"


class Tone(str, Enum):
    GENTLE = "gentle"
    FORMAL = "formal"
    ESCALATION = "escalation"


class FileType(str, Enum):
    ATTENDANCE = "attendance"
    SYLLABUS = "syllabus"


class UploadStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PROCESSING = "processing"


class ReminderFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    READ = "read"


class ReportFormat(str, Enum):
    CSV = "csv"
    TXT = "txt"
    XLSX = "xlsx"


class Publication(BaseModel):
    """Research publication embedded in a faculty profile."""
    title: str
    year: int
    journal: Optional[str] = None


class FacultyProfile(BaseModel):
    id: str
    email: str
    full_name: str
    college_name: str = ""
    years_experience: int = 0
    profile_picture_url: Optional[str] = None
    research_publications: List[Publication] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator('college_name', 'years_experience', 'research_publications', mode='before')
    @classmethod
    def null_as_default(cls, value, info):
        # Columns left NULL by the store read back as their defaults
        if value is None:
            return {'college_name': '', 'years_experience': 0, 'research_publications': []}[info.field_name]
        return value


class ProfileUpdate(BaseModel):
    """Explicit edit-save of the profile page."""
    full_name: str
    college_name: str = ""
    years_experience: int = Field(0, ge=0)
    research_publications: List[Publication] = Field(default_factory=list)


class Course(BaseModel):
    id: str
    faculty_id: str
    course_name: str
    course_code: str
    semester: str
    attendance_percentage: float
    syllabus_percentage: float
    compliance_percentage: float
    status: Status
    created_at: datetime
    updated_at: datetime


class AttendanceUpdate(BaseModel):
    new_percentage: float
    reason: str


class AttendanceRecord(BaseModel):
    id: str
    course_id: str
    previous_percentage: float
    new_percentage: float
    reason: str
    modified_by: str
    modified_at: datetime


class CSVUpload(BaseModel):
    id: str
    faculty_id: str
    course_id: Optional[str] = None
    file_name: str
    file_type: FileType
    status: UploadStatus
    error_message: Optional[str] = None
    uploaded_at: datetime


class Reminder(BaseModel):
    id: str
    faculty_id: str
    course_id: Optional[str] = None
    message: str
    tone: Tone
    is_read: bool = False
    created_at: datetime


class ReminderList(BaseModel):
    reminders: List[Reminder]
    unread_count: int


class Announcement(BaseModel):
    id: str
    faculty_id: str
    course_id: Optional[str] = None
    title: str
    content: str
    created_at: datetime


class AnnouncementCreate(BaseModel):
    title: str
    content: str
    course_id: Optional[str] = None


class ComplianceSummary(BaseModel):
    """Averages and status counts over a list of courses."""
    total: int
    avg_attendance: float
    avg_syllabus: float
    avg_compliance: float
    counts: Dict[str, int]
    trends: Dict[str, str]


class DashboardView(BaseModel):
    greeting: str
    summary: ComplianceSummary
    recent_courses: List[Course]


class UploadPageView(BaseModel):
    semesters: List[str]
    default_semester: str
    uploads: List[CSVUpload]


class ReportView(BaseModel):
    summary: ComplianceSummary
    courses: List[Course]


class UploadResponse(BaseModel):
    """Response from the course upload endpoint."""
    success: bool
    message: str
    course: Course


class SessionContext(BaseModel):
    """Current user id and profile, passed explicitly to every operation."""
    user_id: str
    profile: FacultyProfile


class SignUpRequest(BaseModel):
    email: str
    full_name: str
    college_name: str = ""
    years_experience: int = Field(0, ge=0)


class SignInRequest(BaseModel):
    email: str


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: FacultyProfile
