"""Reminder message generation for different urgency tones."""

from typing import Optional

from companion.compliance import select_tone
from companion.models import Tone


def generate_reminder(course_name: str, course_code: str, compliance: float) -> Optional[dict]:
    """
    Build the reminder for a course's compliance, or None when none is due.

    Returns a dict with 'tone' and 'message'.
    """
    tone = select_tone(compliance)
    if tone is None:
        return None
    return {'tone': tone, 'message': render_reminder(tone, course_name, course_code, compliance)}


def render_reminder(tone: Tone, course_name: str, course_code: str, compliance: float) -> str:
    """Render the reminder text tailored to the tone."""
    compliance_str = f"{compliance:.1f}"

    if tone == Tone.GENTLE:
        return _gentle_message(course_name, course_code, compliance_str)
    if tone == Tone.FORMAL:
        return _formal_message(course_name, course_code, compliance_str)
    return _escalation_message(course_name, course_code, compliance_str)


def _gentle_message(course_name: str, course_code: str, compliance: str) -> str:
    return (
        f"{course_name} ({course_code}) is at {compliance}% compliance, just under the 75% target. "
        "A quick attendance or syllabus update should bring it back on track."
    )


def _formal_message(course_name: str, course_code: str, compliance: str) -> str:
    return (
        f"Compliance for {course_name} ({course_code}) has fallen to {compliance}%. "
        "Please review attendance records and syllabus coverage and upload current data."
    )


def _escalation_message(course_name: str, course_code: str, compliance: str) -> str:
    return (
        f"{course_name} ({course_code}) is at risk with {compliance}% compliance. "
        "Immediate action is required: update attendance and syllabus records and "
        "contact your department coordinator."
    )
