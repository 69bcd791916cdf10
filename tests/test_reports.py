"""Unit tests for report export."""

from datetime import datetime
from io import BytesIO

import pandas as pd

from companion.models import ReportFormat
from companion.reports import REPORT_COLUMNS, export_csv, export_report, export_text, export_xlsx, report_filename

GENERATED_AT = datetime(2025, 10, 3, 14, 30, 0)


def sample_courses(make_course):
    return [
        make_course(80.0, 70.0, course_name="Compilers", course_code="CS-410"),
        make_course(40.0, 30.0, id="c2", course_name="Networks, Advanced", course_code="CS-420"),
    ]


def test_report_filename():
    assert report_filename(ReportFormat.CSV, GENERATED_AT) == "compliance-report-2025-10-03.csv"
    assert report_filename(ReportFormat.TXT, GENERATED_AT) == "compliance-report-2025-10-03.txt"


def test_export_csv(make_course):
    lines = export_csv(sample_courses(make_course)).decode("utf-8").splitlines()
    assert lines[0] == "Course Name,Course Code,Semester,Attendance %,Syllabus %,Compliance %,Status"
    assert lines[1] == "Compilers,CS-410,Fall 2025,80.0,70.0,75.0,compliant"
    # Commas inside values are quoted
    assert lines[2].startswith('"Networks, Advanced",CS-420')
    assert lines[2].endswith("at-risk")


def test_export_csv_empty():
    assert export_csv([]).decode("utf-8").strip() == ",".join(REPORT_COLUMNS)


def test_export_xlsx(make_course):
    df = pd.read_excel(BytesIO(export_xlsx(sample_courses(make_course))), engine="openpyxl")
    assert list(df.columns) == REPORT_COLUMNS
    assert df["Course Code"].tolist() == ["CS-410", "CS-420"]
    assert df["Compliance %"].tolist() == [75.0, 35.0]


def test_export_text(ctx, make_course):
    text = export_text(sample_courses(make_course), ctx.profile, GENERATED_AT).decode("utf-8")

    assert text.startswith("COMPLIANCE COMPANION - ACADEMIC COMPLIANCE REPORT")
    assert "Generated: 2025-10-03 14:30:00" in text
    assert "Faculty: Ada Lovelace" in text
    assert "College: Analytical College" in text
    assert "Total Courses: 2" in text
    assert "Average Attendance: 60.00%" in text
    assert "Overall Compliance: 55.00%" in text
    assert "1. Compilers (CS-410)" in text
    assert "Status: AT-RISK" in text
    assert "Compliant Courses: 1" in text
    assert "At-Risk Courses: 1" in text
    assert "- Address at-risk courses immediately" in text
    assert text.rstrip().endswith("Report End")


def test_export_text_without_profile(make_course):
    text = export_text([make_course(90.0, 90.0)], None, GENERATED_AT).decode("utf-8")
    assert "Faculty: N/A" in text
    assert "- Maintain current compliance levels" in text


def test_export_report_dispatch(make_course):
    courses = sample_courses(make_course)
    assert export_report(ReportFormat.CSV, courses, None, GENERATED_AT) == export_csv(courses)
    assert export_report(ReportFormat.TXT, courses, None, GENERATED_AT) == export_text(courses, None, GENERATED_AT)
    assert export_report(ReportFormat.XLSX, courses, None, GENERATED_AT)[:2] == b"PK"
