"""Dashboard pages: a closed set of page ids and the view built for each."""

from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from companion import config
from companion.compliance import first_name, greeting, summarize
from companion.models import (
    Course, DashboardView, ReminderFilter, ReportView, SessionContext, UploadPageView,
)
from companion.services import list_courses, list_reminders, list_uploads
from companion.storage import TableStore


class Page(str, Enum):
    DASHBOARD = "dashboard"
    COURSES = "courses"
    UPLOAD = "upload"
    REMINDERS = "reminders"
    REPORTS = "reports"
    PROFILE = "profile"


class CoursesView(BaseModel):
    total: int
    courses: List[Course]


def dashboard_view(ctx: SessionContext, store: TableStore, now: Optional[datetime] = None) -> DashboardView:
    now = now or datetime.now()
    courses = list_courses(ctx, store)
    return DashboardView(
        greeting=f"{greeting(now.hour)}, {first_name(ctx.profile.full_name)}",
        summary=summarize(courses),
        recent_courses=courses[:6],
    )


def courses_view(ctx: SessionContext, store: TableStore) -> CoursesView:
    courses = list_courses(ctx, store)
    return CoursesView(total=len(courses), courses=courses)


def upload_view(ctx: SessionContext, store: TableStore) -> UploadPageView:
    return UploadPageView(
        semesters=config.SEMESTERS,
        default_semester=config.DEFAULT_SEMESTER,
        uploads=list_uploads(ctx, store, limit=config.UPLOAD_HISTORY_LIMIT),
    )


def reminders_view(ctx: SessionContext, store: TableStore):
    return list_reminders(ctx, store, ReminderFilter.ALL)


def reports_view(ctx: SessionContext, store: TableStore) -> ReportView:
    courses = list_courses(ctx, store)
    return ReportView(summary=summarize(courses), courses=courses)


def profile_view(ctx: SessionContext, store: TableStore):
    return ctx.profile


PAGE_VIEWS: Dict[Page, Callable[[SessionContext, TableStore], BaseModel]] = {
    Page.DASHBOARD: dashboard_view,
    Page.COURSES: courses_view,
    Page.UPLOAD: upload_view,
    Page.REMINDERS: reminders_view,
    Page.REPORTS: reports_view,
    Page.PROFILE: profile_view,
}

_missing = set(Page) - set(PAGE_VIEWS)
if _missing:
    raise RuntimeError(f"No view registered for pages: {sorted(p.value for p in _missing)}")


def render_page(page: Page, ctx: SessionContext, store: TableStore) -> BaseModel:
    return PAGE_VIEWS[Page(page)](ctx, store)
