"""FastAPI main application for Compliance Companion."""

import logging
import traceback
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from companion import config
from companion.auth import IdentityService
from companion.errors import ComplianceError, ValidationError
from companion.models import (
    Announcement, AnnouncementCreate, AttendanceRecord, AttendanceUpdate, Course, CSVUpload,
    FacultyProfile, ProfileUpdate, Reminder, ReminderFilter, ReminderList, ReportFormat,
    ReportView, SessionContext, SessionResponse, SignInRequest, SignUpRequest, UploadResponse,
)
from companion.pages import Page, render_page, reports_view
from companion.reports import MEDIA_TYPES, export_report, report_filename
from companion import services
from companion.services import CSVFile
from companion.storage import TableStore, create_store

# ---------------- logging ----------------
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
log = logging.getLogger("compliance-companion")

app = FastAPI(title=config.APP_NAME, version=config.APP_VERSION)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ComplianceError)
async def compliance_error_handler(request: Request, exc: ComplianceError):
    """Surface domain failures as dismissible JSON messages."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "type": type(exc).__name__}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON."""
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON."""
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    error_detail = str(exc)
    if config.DEBUG:
        error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {error_detail}",
            "type": type(exc).__name__
        }
    )


# --------------- Store and identity dependencies ---------------
_store: Optional[TableStore] = None
_identity: Optional[IdentityService] = None


def get_store() -> TableStore:
    global _store
    if _store is None:
        _store = create_store(config.DATABASE_URL)
    return _store


def get_identity(store: TableStore = Depends(get_store)) -> IdentityService:
    global _identity
    if _identity is None:
        _identity = IdentityService(store)
    return _identity


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def get_session(
    token: Optional[str] = Depends(bearer_token),
    identity: IdentityService = Depends(get_identity),
) -> SessionContext:
    return identity.get_session(token)


@app.get("/health")
async def health_check():
    """Health check endpoint to test server connectivity."""
    return JSONResponse(content={"status": "ok", "version": config.APP_VERSION})


# --------------- Auth ----------------
@app.post("/auth/sign-up", response_model=SessionResponse)
def sign_up(request: SignUpRequest, identity: IdentityService = Depends(get_identity)):
    return identity.sign_up(request)


@app.post("/auth/sign-in", response_model=SessionResponse)
def sign_in(request: SignInRequest, identity: IdentityService = Depends(get_identity)):
    return identity.sign_in(request.email)


@app.post("/auth/sign-out")
def sign_out(
    token: Optional[str] = Depends(bearer_token),
    identity: IdentityService = Depends(get_identity),
):
    if token:
        identity.sign_out(token)
    return {"success": True}


@app.get("/auth/session", response_model=SessionContext)
def current_session(ctx: SessionContext = Depends(get_session)):
    return ctx


# --------------- Pages ----------------
@app.get("/pages/{page}")
def page_view(page: Page, ctx: SessionContext = Depends(get_session), store: TableStore = Depends(get_store)):
    return render_page(page, ctx, store)


# --------------- Courses ----------------
@app.get("/courses", response_model=List[Course])
def get_courses(ctx: SessionContext = Depends(get_session), store: TableStore = Depends(get_store)):
    return services.list_courses(ctx, store)


async def _read_csv(file: Optional[UploadFile]) -> Optional[CSVFile]:
    if file is None or not file.filename:
        return None
    if not file.filename.lower().endswith(".csv"):
        raise ValidationError(f"Invalid file type for {file.filename}. Please upload a CSV file")
    content = await file.read()
    if len(content) > config.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {config.MAX_UPLOAD_SIZE_MB}MB"
        )
    return CSVFile(name=file.filename, content=content)


@app.post("/courses/upload", response_model=UploadResponse)
async def upload_course(
    course_name: str = Form(""),
    course_code: str = Form(""),
    semester: str = Form(config.DEFAULT_SEMESTER),
    attendance_file: Optional[UploadFile] = File(None),
    syllabus_file: Optional[UploadFile] = File(None),
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    """Create a course from uploaded attendance and syllabus CSV files."""
    course = services.create_course_from_upload(
        ctx,
        store,
        course_name=course_name,
        course_code=course_code,
        semester=semester,
        attendance_file=await _read_csv(attendance_file),
        syllabus_file=await _read_csv(syllabus_file),
    )
    return UploadResponse(
        success=True,
        message="Course created and CSV files processed successfully!",
        course=course,
    )


@app.patch("/courses/{course_id}/attendance", response_model=Course)
def modify_attendance(
    course_id: str,
    update: AttendanceUpdate,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    return services.update_attendance(ctx, store, course_id, update.new_percentage, update.reason)


@app.get("/courses/{course_id}/attendance", response_model=List[AttendanceRecord])
def attendance_history(
    course_id: str,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    return services.list_attendance_history(ctx, store, course_id)


@app.get("/uploads", response_model=List[CSVUpload])
def upload_history(ctx: SessionContext = Depends(get_session), store: TableStore = Depends(get_store)):
    return services.list_uploads(ctx, store, limit=config.UPLOAD_HISTORY_LIMIT)


# --------------- Reminders ----------------
@app.get("/reminders", response_model=ReminderList)
def get_reminders(
    filter: ReminderFilter = ReminderFilter.ALL,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    return services.list_reminders(ctx, store, filter)


@app.post("/reminders/read-all")
def read_all_reminders(ctx: SessionContext = Depends(get_session), store: TableStore = Depends(get_store)):
    return {"updated": services.mark_all_read(ctx, store)}


@app.post("/reminders/{reminder_id}/read", response_model=Reminder)
def read_reminder(
    reminder_id: str,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    return services.mark_read(ctx, store, reminder_id)


# --------------- Profile ----------------
@app.get("/profile", response_model=FacultyProfile)
def get_profile(ctx: SessionContext = Depends(get_session)):
    return ctx.profile


@app.put("/profile", response_model=FacultyProfile)
def save_profile(
    update: ProfileUpdate,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    return services.update_profile(ctx, store, update)


# --------------- Announcements ----------------
@app.get("/announcements", response_model=List[Announcement])
def get_announcements(ctx: SessionContext = Depends(get_session), store: TableStore = Depends(get_store)):
    return services.list_announcements(ctx, store)


@app.post("/announcements", response_model=Announcement)
def post_announcement(
    item: AnnouncementCreate,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    return services.create_announcement(ctx, store, item)


# --------------- Reports ----------------
@app.get("/reports/summary", response_model=ReportView)
def report_summary(ctx: SessionContext = Depends(get_session), store: TableStore = Depends(get_store)):
    return reports_view(ctx, store)


@app.get("/reports/download")
def download_report(
    format: ReportFormat = ReportFormat.CSV,
    ctx: SessionContext = Depends(get_session),
    store: TableStore = Depends(get_store),
):
    """Download the course list as CSV, plain text or Excel."""
    generated_at = datetime.now()
    courses = services.list_courses(ctx, store)
    content = export_report(format, courses, ctx.profile, generated_at)
    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={
            "Content-Disposition": f"attachment; filename={report_filename(format, generated_at)}"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
