"""Unit tests for reminder message generation."""

from companion.models import Tone
from companion.reminder_templates import generate_reminder, render_reminder


def test_generate_reminder_none_when_compliant():
    assert generate_reminder("Compilers", "CS-410", 80.0) is None
    assert generate_reminder("Compilers", "CS-410", 75.0) is None


def test_generate_reminder_tones():
    assert generate_reminder("Compilers", "CS-410", 70.0)['tone'] == Tone.GENTLE
    assert generate_reminder("Compilers", "CS-410", 55.0)['tone'] == Tone.FORMAL
    assert generate_reminder("Compilers", "CS-410", 30.0)['tone'] == Tone.ESCALATION


def test_render_reminder_mentions_course():
    for tone in Tone:
        message = render_reminder(tone, "Compilers", "CS-410", 61.25)
        assert "Compilers (CS-410)" in message
        assert "61.2%" in message or "61.3%" in message


def test_escalation_is_urgent():
    assert "Immediate action" in render_reminder(Tone.ESCALATION, "Compilers", "CS-410", 20.0)
