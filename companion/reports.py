"""Report export: CSV, plain text and Excel renditions of the course list."""

import csv
from datetime import datetime
from io import BytesIO, StringIO
from typing import List, Optional

import pandas as pd

from companion.compliance import COMPLIANT_THRESHOLD, summarize
from companion.models import Course, FacultyProfile, ReportFormat, Status

REPORT_COLUMNS = [
    'Course Name',
    'Course Code',
    'Semester',
    'Attendance %',
    'Syllabus %',
    'Compliance %',
    'Status',
]

MEDIA_TYPES = {
    ReportFormat.CSV: 'text/csv',
    ReportFormat.TXT: 'text/plain',
    ReportFormat.XLSX: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}

RULE = "=" * 40


def report_filename(fmt: ReportFormat, generated_at: datetime) -> str:
    return f"compliance-report-{generated_at.strftime('%Y-%m-%d')}.{fmt.value}"


def _course_row(course: Course) -> list:
    return [
        course.course_name,
        course.course_code,
        course.semester,
        course.attendance_percentage,
        course.syllabus_percentage,
        course.compliance_percentage,
        course.status.value,
    ]


def export_csv(courses: List[Course]) -> bytes:
    output = StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(REPORT_COLUMNS)
    for course in courses:
        writer.writerow(_course_row(course))
    return output.getvalue().encode('utf-8')


def export_xlsx(courses: List[Course]) -> bytes:
    df = pd.DataFrame([_course_row(c) for c in courses], columns=REPORT_COLUMNS)
    output = BytesIO()
    df.to_excel(output, index=False, sheet_name='Compliance', engine='openpyxl')
    return output.getvalue()


def export_text(
    courses: List[Course],
    profile: Optional[FacultyProfile],
    generated_at: datetime,
) -> bytes:
    """Plain-text compliance report with summary, details and recommendations."""
    summary = summarize(courses)

    lines = [
        "COMPLIANCE COMPANION - ACADEMIC COMPLIANCE REPORT",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Faculty: {profile.full_name if profile and profile.full_name else 'N/A'}",
        f"College: {profile.college_name if profile and profile.college_name else 'N/A'}",
        "",
        RULE,
        "SUMMARY STATISTICS",
        RULE,
        f"Total Courses: {summary.total}",
        f"Average Attendance: {summary.avg_attendance:.2f}%",
        f"Average Syllabus Coverage: {summary.avg_syllabus:.2f}%",
        f"Overall Compliance: {summary.avg_compliance:.2f}%",
        "",
        RULE,
        "COURSE DETAILS",
        RULE,
    ]

    for index, course in enumerate(courses, start=1):
        lines.extend([
            "",
            f"{index}. {course.course_name} ({course.course_code})",
            f"   Semester: {course.semester}",
            f"   Attendance: {course.attendance_percentage:.2f}%",
            f"   Syllabus Coverage: {course.syllabus_percentage:.2f}%",
            f"   Overall Compliance: {course.compliance_percentage:.2f}%",
            f"   Status: {course.status.value.upper()}",
            f"   Last Updated: {course.updated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        ])

    if summary.avg_compliance < COMPLIANT_THRESHOLD:
        recommendations = [
            "- Consider reviewing and updating course records for low-compliance courses",
            "- Upload recent attendance and syllabus data",
            "- Address at-risk courses immediately",
        ]
    else:
        recommendations = [
            "- Maintain current compliance levels",
            "- Continue regular updates to course records",
            "- Monitor any courses approaching compliance thresholds",
        ]

    lines.extend([
        "",
        RULE,
        "COMPLIANCE STATUS BREAKDOWN",
        RULE,
        f"Compliant Courses: {summary.counts[Status.COMPLIANT.value]}",
        f"Pending Courses: {summary.counts[Status.PENDING.value]}",
        f"At-Risk Courses: {summary.counts[Status.AT_RISK.value]}",
        "",
        RULE,
        "RECOMMENDATIONS",
        RULE,
        *recommendations,
        "",
        "Report End",
        "",
    ])
    return "\n".join(lines).encode('utf-8')


def export_report(
    fmt: ReportFormat,
    courses: List[Course],
    profile: Optional[FacultyProfile],
    generated_at: datetime,
) -> bytes:
    if fmt == ReportFormat.CSV:
        return export_csv(courses)
    if fmt == ReportFormat.XLSX:
        return export_xlsx(courses)
    return export_text(courses, profile, generated_at)
