"""Compliance scoring: classification, reminder tones and summaries."""

from typing import Tuple, Optional, Dict, List, Iterable

import numpy as np
import pandas as pd

from companion.models import Status, Tone, Course, ComplianceSummary

# Shared band edges. Status and reminder tone must agree at 50 and 75.
COMPLIANT_THRESHOLD = 75.0
PENDING_THRESHOLD = 50.0
GENTLE_THRESHOLD = 65.0


def classify(attendance: float, syllabus: float) -> Tuple[float, Status]:
    """
    Compute overall compliance and its status.

    Args:
        attendance: Attendance percentage (0-100)
        syllabus: Syllabus coverage percentage (0-100)

    Returns:
        Tuple of (compliance percentage, status)
    """
    compliance = (attendance + syllabus) / 2
    return compliance, get_status(compliance)


def get_status(compliance: float) -> Status:
    if compliance >= COMPLIANT_THRESHOLD:
        return Status.COMPLIANT
    elif compliance >= PENDING_THRESHOLD:
        return Status.PENDING
    else:
        return Status.AT_RISK


def select_tone(compliance: float) -> Optional[Tone]:
    """
    Pick the reminder urgency for a compliance percentage.

    Returns None when the course is compliant and no reminder is due.
    """
    if compliance >= COMPLIANT_THRESHOLD:
        return None
    elif compliance >= GENTLE_THRESHOLD:
        return Tone.GENTLE
    elif compliance >= PENDING_THRESHOLD:
        return Tone.FORMAL
    else:
        return Tone.ESCALATION


def clean_numeric_value(value) -> float:
    """
    Clean numeric values to ensure JSON compliance.
    Replaces NaN, Infinity, and -Infinity with 0.0.
    """
    if value is None or pd.isna(value):
        return 0.0
    try:
        val = float(value)
        if np.isnan(val) or np.isinf(val):
            return 0.0
        return val
    except (ValueError, TypeError):
        return 0.0


def summarize(courses: Iterable[Course]) -> ComplianceSummary:
    """
    Average the three metrics over a course list and count statuses.

    Averages are 0 for an empty list. A metric trends 'up' when its
    average is at or above the compliant threshold.
    """
    df = pd.DataFrame([c.model_dump() for c in courses])

    counts: Dict[str, int] = {status.value: 0 for status in Status}
    if df.empty:
        averages = {'attendance': 0.0, 'syllabus': 0.0, 'compliance': 0.0}
    else:
        averages = {
            'attendance': clean_numeric_value(df['attendance_percentage'].astype(float).mean()),
            'syllabus': clean_numeric_value(df['syllabus_percentage'].astype(float).mean()),
            'compliance': clean_numeric_value(df['compliance_percentage'].astype(float).mean()),
        }
        for status, n in df['status'].map(lambda s: Status(s).value).value_counts().items():
            counts[status] = int(n)

    trends = {
        metric: 'up' if value >= COMPLIANT_THRESHOLD else 'down'
        for metric, value in averages.items()
    }

    return ComplianceSummary(
        total=len(df),
        avg_attendance=averages['attendance'],
        avg_syllabus=averages['syllabus'],
        avg_compliance=averages['compliance'],
        counts=counts,
        trends=trends,
    )


def greeting(hour: int) -> str:
    if hour < 12:
        return 'Good Morning'
    if hour < 18:
        return 'Good Afternoon'
    return 'Good Evening'


def first_name(full_name: Optional[str]) -> str:
    parts: List[str] = (full_name or '').split()
    return parts[0] if parts else 'Professor'
