"""Course, upload, reminder, profile and announcement operations."""

import logging
from typing import List, NamedTuple, Optional

from companion.compliance import classify, select_tone
from companion.errors import ComplianceError, NotFoundError, StorageError, ValidationError
from companion.models import (
    Announcement, AnnouncementCreate, AttendanceRecord, Course, CSVUpload, FacultyProfile,
    FileType, ProfileUpdate, Reminder, ReminderFilter, ReminderList, SessionContext, UploadStatus,
)
from companion.parsers import decode_upload, extract_average
from companion.reminder_templates import generate_reminder
from companion.storage import TableStore

log = logging.getLogger(__name__)


class CSVFile(NamedTuple):
    name: str
    content: bytes


def validate_percentage(value: float, label: str = "percentage") -> float:
    """Reject values outside 0-100 before any store call."""
    try:
        val = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Please enter a valid {label} between 0 and 100")
    if val != val or val < 0 or val > 100:
        raise ValidationError(f"Please enter a valid {label} between 0 and 100")
    return val


# ---------------- Courses ----------------

def list_courses(ctx: SessionContext, store: TableStore) -> List[Course]:
    rows = store.select("courses", filters={"faculty_id": ctx.user_id}, order_by="created_at")
    return [Course(**r) for r in rows]


def get_course(ctx: SessionContext, store: TableStore, course_id: str) -> Course:
    row = store.get("courses", course_id)
    if row is None or row["faculty_id"] != ctx.user_id:
        raise NotFoundError("Course not found")
    return Course(**row)


def create_course_from_upload(
    ctx: SessionContext,
    store: TableStore,
    course_name: str,
    course_code: str,
    semester: str,
    attendance_file: Optional[CSVFile] = None,
    syllabus_file: Optional[CSVFile] = None,
) -> Course:
    """
    Create a course from uploaded attendance and syllabus CSV files.

    A missing file contributes 0 to its percentage. Every file given is
    logged in csv_uploads, as 'success' linked to the new course, or as
    'failed' with the error text when parsing or the course insert fails.
    """
    if not course_name.strip() or not course_code.strip():
        raise ValidationError("Course name and code are required")
    if attendance_file is None and syllabus_file is None:
        raise ValidationError("Please upload at least one CSV file")

    files = [(FileType.ATTENDANCE, attendance_file), (FileType.SYLLABUS, syllabus_file)]
    files = [(file_type, f) for file_type, f in files if f is not None]

    try:
        attendance_pct = 0.0
        syllabus_pct = 0.0
        if attendance_file is not None:
            attendance_pct = extract_average(decode_upload(attendance_file.content))
        if syllabus_file is not None:
            syllabus_pct = extract_average(decode_upload(syllabus_file.content))
        attendance_pct = validate_percentage(attendance_pct, "attendance percentage")
        syllabus_pct = validate_percentage(syllabus_pct, "syllabus percentage")

        compliance, status = classify(attendance_pct, syllabus_pct)
        row = store.insert("courses", {
            "faculty_id": ctx.user_id,
            "course_name": course_name.strip(),
            "course_code": course_code.strip(),
            "semester": semester,
            "attendance_percentage": attendance_pct,
            "syllabus_percentage": syllabus_pct,
            "compliance_percentage": compliance,
            "status": status,
        })
    except ComplianceError as e:
        log.warning("Upload for %s failed: %s", course_code, e.message)
        _record_failed_uploads(ctx, store, files, e.message)
        raise

    course = Course(**row)
    for file_type, f in files:
        store.insert("csv_uploads", {
            "faculty_id": ctx.user_id,
            "course_id": course.id,
            "file_name": f.name,
            "file_type": file_type,
            "status": UploadStatus.SUCCESS,
        })

    log.info(
        "Created course %s (%s): attendance %.1f%%, syllabus %.1f%%, compliance %.1f%% (%s)",
        course.course_code, course.id, course.attendance_percentage,
        course.syllabus_percentage, course.compliance_percentage, course.status.value,
    )
    _maybe_remind(ctx, store, course, previous_compliance=None)
    return course


def _record_failed_uploads(ctx: SessionContext, store: TableStore, files, error_message: str):
    for file_type, f in files:
        try:
            store.insert("csv_uploads", {
                "faculty_id": ctx.user_id,
                "file_name": f.name,
                "file_type": file_type,
                "status": UploadStatus.FAILED,
                "error_message": error_message,
            })
        except StorageError as e:
            # The original error is the one surfaced to the user
            log.error("Could not record failed upload of %s: %s", f.name, e.message)


def update_attendance(
    ctx: SessionContext,
    store: TableStore,
    course_id: str,
    new_percentage: float,
    reason: str,
) -> Course:
    """
    Change a course's attendance, keeping an audit record of the edit.

    The audit insert and the course update share one transaction.
    Compliance and status are recomputed from the new attendance.
    """
    new_percentage = validate_percentage(new_percentage, "attendance percentage")
    if not reason or not reason.strip():
        raise ValidationError("Please provide a reason for the update")

    with store.transaction() as tx:
        course = get_course(ctx, tx, course_id)
        compliance, status = classify(new_percentage, course.syllabus_percentage)
        tx.insert("attendance_records", {
            "course_id": course.id,
            "previous_percentage": course.attendance_percentage,
            "new_percentage": new_percentage,
            "reason": reason.strip(),
            "modified_by": ctx.user_id,
        })
        row = tx.update("courses", course.id, {
            "attendance_percentage": new_percentage,
            "compliance_percentage": compliance,
            "status": status,
        })

    updated = Course(**row)
    log.info(
        "Attendance for %s changed %.1f%% -> %.1f%% by %s",
        updated.course_code, course.attendance_percentage, new_percentage, ctx.user_id,
    )
    _maybe_remind(ctx, store, updated, previous_compliance=course.compliance_percentage)
    return updated


def list_attendance_history(ctx: SessionContext, store: TableStore, course_id: str) -> List[AttendanceRecord]:
    course = get_course(ctx, store, course_id)
    rows = store.select("attendance_records", filters={"course_id": course.id}, order_by="modified_at")
    return [AttendanceRecord(**r) for r in rows]


# ---------------- Uploads ----------------

def list_uploads(ctx: SessionContext, store: TableStore, limit: int = 10) -> List[CSVUpload]:
    rows = store.select(
        "csv_uploads", filters={"faculty_id": ctx.user_id}, order_by="uploaded_at", limit=limit
    )
    return [CSVUpload(**r) for r in rows]


# ---------------- Reminders ----------------

def _maybe_remind(ctx: SessionContext, store: TableStore, course: Course, previous_compliance: Optional[float]):
    """Write a reminder when the course lands in a new reminder band."""
    reminder = generate_reminder(course.course_name, course.course_code, course.compliance_percentage)
    if reminder is None:
        return None
    if previous_compliance is not None and select_tone(previous_compliance) == reminder['tone']:
        return None

    row = store.insert("reminders", {
        "faculty_id": ctx.user_id,
        "course_id": course.id,
        "message": reminder['message'],
        "tone": reminder['tone'],
        "is_read": False,
    })
    log.info("Reminder (%s) raised for %s", reminder['tone'].value, course.course_code)
    return Reminder(**row)


def list_reminders(
    ctx: SessionContext,
    store: TableStore,
    reminder_filter: ReminderFilter = ReminderFilter.ALL,
) -> ReminderList:
    rows = store.select("reminders", filters={"faculty_id": ctx.user_id}, order_by="created_at")
    reminders = [Reminder(**r) for r in rows]
    unread_count = sum(1 for r in reminders if not r.is_read)

    if reminder_filter == ReminderFilter.UNREAD:
        reminders = [r for r in reminders if not r.is_read]
    elif reminder_filter == ReminderFilter.READ:
        reminders = [r for r in reminders if r.is_read]

    return ReminderList(reminders=reminders, unread_count=unread_count)


def mark_read(ctx: SessionContext, store: TableStore, reminder_id: str) -> Reminder:
    row = store.get("reminders", reminder_id)
    if row is None or row["faculty_id"] != ctx.user_id:
        raise NotFoundError("Reminder not found")
    return Reminder(**store.update("reminders", reminder_id, {"is_read": True}))


def mark_all_read(ctx: SessionContext, store: TableStore) -> int:
    return store.update_where(
        "reminders", filters={"faculty_id": ctx.user_id, "is_read": False}, values={"is_read": True}
    )


# ---------------- Profile ----------------

def update_profile(ctx: SessionContext, store: TableStore, update: ProfileUpdate) -> FacultyProfile:
    if not update.full_name.strip():
        raise ValidationError("Full name is required")
    row = store.update("profiles", ctx.user_id, {
        "full_name": update.full_name.strip(),
        "college_name": update.college_name.strip(),
        "years_experience": update.years_experience,
        "research_publications": [p.model_dump() for p in update.research_publications],
    })
    if row is None:
        raise NotFoundError("Profile not found")
    return FacultyProfile(**row)


# ---------------- Announcements ----------------

def create_announcement(ctx: SessionContext, store: TableStore, item: AnnouncementCreate) -> Announcement:
    if not item.title.strip() or not item.content.strip():
        raise ValidationError("Announcement title and content are required")
    if item.course_id is not None:
        get_course(ctx, store, item.course_id)
    row = store.insert("announcements", {
        "faculty_id": ctx.user_id,
        "course_id": item.course_id,
        "title": item.title.strip(),
        "content": item.content.strip(),
    })
    return Announcement(**row)


def list_announcements(ctx: SessionContext, store: TableStore) -> List[Announcement]:
    rows = store.select("announcements", filters={"faculty_id": ctx.user_id}, order_by="created_at")
    return [Announcement(**r) for r in rows]
