"""Shared fixtures: an in-memory store and a signed-in faculty member."""

import pytest

from companion.auth import IdentityService
from companion.compliance import classify
from companion.models import Course, SignUpRequest
from companion.storage import create_store


@pytest.fixture
def store():
    return create_store("sqlite://")


@pytest.fixture
def identity(store):
    return IdentityService(store)


@pytest.fixture
def session(identity):
    """Signed-in faculty; returns (token, SessionContext)."""
    response = identity.sign_up(SignUpRequest(
        email="ada.lovelace@example.edu",
        full_name="Ada Lovelace",
        college_name="Analytical College",
        years_experience=12,
    ))
    return response.access_token, identity.get_session(response.access_token)


@pytest.fixture
def ctx(session):
    return session[1]


@pytest.fixture
def make_course():
    """Build an in-memory Course whose compliance and status come from classify."""
    def _make(attendance, syllabus, **kwargs):
        compliance, status = classify(attendance, syllabus)
        fields = dict(
            id="c1",
            faculty_id="f1",
            course_name="Data Structures",
            course_code="CS-301",
            semester="Fall 2025",
            attendance_percentage=attendance,
            syllabus_percentage=syllabus,
            compliance_percentage=compliance,
            status=status,
            created_at="2025-09-01T10:00:00",
            updated_at="2025-09-01T10:00:00",
        )
        fields.update(kwargs)
        return Course(**fields)
    return _make
