"""Dashboard metrics derived from a snapshot of the stored companies.

Everything here is recomputed from scratch and never mutates its input.
Records with an unreadable date drop out of the date-based views only.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from jtrack.dates import format_date_for_display, parse_iso_date, today as current_date
from jtrack.models import RESPONSE_STATUSES, Application, ApplicationStatus, Company

DEFAULT_LIMIT = 5
DEFAULT_WEEK_SPAN_DAYS = 6


@dataclass
class ApplicationView:
    """An application together with the company it belongs to."""

    company_id: str
    company_name: str
    application: Application


@dataclass
class WeeklyBucket:
    start: date
    count: int

    @property
    def label(self) -> str:
        return format_date_for_display(self.start)


@dataclass
class SkillCount:
    name: str
    count: int


@dataclass
class DashboardStats:
    total_companies: int = 0
    total_applications: int = 0
    status_breakdown: dict[ApplicationStatus, int] = field(default_factory=dict)
    response_rate: int = 0
    weekly_applications: list[WeeklyBucket] = field(default_factory=list)
    upcoming_follow_ups: list[ApplicationView] = field(default_factory=list)
    recent_applications: list[ApplicationView] = field(default_factory=list)
    top_skills: list[SkillCount] = field(default_factory=list)


def flatten_applications(companies: list[Company]) -> list[ApplicationView]:
    return [
        ApplicationView(company_id=c.id, company_name=c.name, application=app)
        for c in companies
        for app in c.applications
    ]


def status_breakdown(applications: list[Application]) -> dict[ApplicationStatus, int]:
    """Count per status, in enum order, including statuses with no applications."""
    counts = {status: 0 for status in ApplicationStatus}
    for app in applications:
        counts[app.status] += 1
    return counts


def response_rate(breakdown: dict[ApplicationStatus, int]) -> int:
    """Percentage of applications that got any answer, rounded half-up."""
    total = sum(breakdown.values())
    if total == 0:
        return 0
    responses = sum(breakdown.get(s, 0) for s in RESPONSE_STATUSES)
    # Integer half-up rounding; round() would send 12.5 to 12
    return (200 * responses + total) // (2 * total)


def weekly_applications(
    applications: list[Application],
    week_span_days: int = DEFAULT_WEEK_SPAN_DAYS,
) -> list[WeeklyBucket]:
    """Greedy week buckets over the days that actually have applications.

    Days are visited in order; a day more than ``week_span_days`` after the
    current bucket's first day opens a new bucket. Empty weeks are skipped.
    """
    per_day: Counter[date] = Counter()
    for app in applications:
        applied = parse_iso_date(app.date_applied)
        if applied is not None:
            per_day[applied] += 1

    buckets: list[WeeklyBucket] = []
    for day in sorted(per_day):
        if buckets and (day - buckets[-1].start).days <= week_span_days:
            buckets[-1].count += per_day[day]
        else:
            buckets.append(WeeklyBucket(start=day, count=per_day[day]))
    return buckets


def upcoming_follow_ups(
    views: list[ApplicationView],
    today: date,
    limit: int = DEFAULT_LIMIT,
) -> list[ApplicationView]:
    due = []
    for view in views:
        app = view.application
        if app.status != ApplicationStatus.APPLIED or app.followed_up:
            continue
        follow_up = parse_iso_date(app.follow_up_date)
        if follow_up is None or follow_up < today:
            continue
        due.append((follow_up, view))

    due.sort(key=lambda item: item[0])
    return [view for _, view in due[:limit]]


def recent_applications(views: list[ApplicationView], limit: int = DEFAULT_LIMIT) -> list[ApplicationView]:
    dated = []
    for view in views:
        applied = parse_iso_date(view.application.date_applied)
        if applied is not None:
            dated.append((applied, view))
    dated.sort(key=lambda item: item[0], reverse=True)
    return [view for _, view in dated[:limit]]


def top_skills(applications: list[Application], limit: int = DEFAULT_LIMIT) -> list[SkillCount]:
    tally: Counter[str] = Counter()
    for app in applications:
        tally.update(app.skill_list())
    return [SkillCount(name=name, count=count) for name, count in tally.most_common(limit)]


def compute_dashboard(
    companies: list[Company],
    today: date | None = None,
    limit: int = DEFAULT_LIMIT,
    week_span_days: int = DEFAULT_WEEK_SPAN_DAYS,
) -> DashboardStats:
    """Build every dashboard metric from ``companies``."""
    today = today or current_date()
    views = flatten_applications(companies)
    applications = [v.application for v in views]
    breakdown = status_breakdown(applications)

    return DashboardStats(
        total_companies=len(companies),
        total_applications=len(applications),
        status_breakdown=breakdown,
        response_rate=response_rate(breakdown),
        weekly_applications=weekly_applications(applications, week_span_days),
        upcoming_follow_ups=upcoming_follow_ups(views, today, limit),
        recent_applications=recent_applications(views, limit),
        top_skills=top_skills(applications, limit),
    )
