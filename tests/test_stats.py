from __future__ import annotations

from datetime import date

from conftest import make_application, make_company
from jtrack.models import ApplicationStatus
from jtrack.stats import compute_dashboard, response_rate, status_breakdown, weekly_applications

TODAY = date(2025, 1, 15)


def test_empty_store_produces_zeroed_dashboard():
    stats = compute_dashboard([], today=TODAY)

    assert stats.total_companies == 0
    assert stats.total_applications == 0
    assert stats.response_rate == 0
    assert list(stats.status_breakdown.values()) == [0, 0, 0, 0]
    assert stats.weekly_applications == []
    assert stats.upcoming_follow_ups == []
    assert stats.recent_applications == []
    assert stats.top_skills == []


def test_status_breakdown_is_zero_filled_in_order():
    apps = [make_application(status=ApplicationStatus.OFFER), make_application()]
    breakdown = status_breakdown(apps)
    assert list(breakdown) == list(ApplicationStatus)
    assert breakdown[ApplicationStatus.APPLIED] == 1
    assert breakdown[ApplicationStatus.OFFER] == 1
    assert breakdown[ApplicationStatus.INTERVIEW] == 0


def test_response_rate_rounds_half_up():
    apps = [make_application(status=ApplicationStatus.REJECTED)] + [make_application() for _ in range(7)]
    # 1 of 8 = 12.5%
    assert response_rate(status_breakdown(apps)) == 13

    apps = [
        make_application(status=ApplicationStatus.INTERVIEW),
        make_application(status=ApplicationStatus.OFFER),
        make_application(),
    ]
    assert response_rate(status_breakdown(apps)) == 67


def test_weekly_buckets_fold_greedily_from_bucket_start():
    apps = [make_application(date_applied=d) for d in ("2025-01-10", "2025-01-01", "2025-01-03")]
    buckets = weekly_applications(apps)

    assert [(b.start, b.count) for b in buckets] == [(date(2025, 1, 1), 2), (date(2025, 1, 10), 1)]
    assert buckets[0].label == "Jan 1"


def test_weekly_buckets_measure_gap_from_bucket_start_not_previous_day():
    dates = ["2025-01-01", "2025-01-05", "2025-01-07", "2025-01-08", "2025-01-08"]
    buckets = weekly_applications([make_application(date_applied=d) for d in dates])
    # 01-07 is exactly 6 days after 01-01 and stays; 01-08 is 7 days after and starts a new bucket
    assert [(b.start.isoformat(), b.count) for b in buckets] == [("2025-01-01", 3), ("2025-01-08", 2)]


def test_unparseable_dates_are_left_out_of_date_views_only():
    good = make_application("Engineer", date_applied="2025-01-10", skills="Python")
    bad = make_application("Analyst", date_applied="someday", follow_up_date="??", skills="Python")
    stats = compute_dashboard([make_company("Acme", [good, bad])], today=TODAY)

    assert stats.total_applications == 2
    assert stats.status_breakdown[ApplicationStatus.APPLIED] == 2
    assert [b.count for b in stats.weekly_applications] == [1]
    assert [v.application.title for v in stats.recent_applications] == ["Engineer"]
    assert stats.top_skills[0].count == 2


def test_upcoming_follow_ups_filter_and_order():
    apps = [
        make_application("Later", follow_up_date="2025-01-30"),
        make_application("Today", follow_up_date="2025-01-15"),
        make_application("Past", follow_up_date="2025-01-14"),
        make_application("Done", follow_up_date="2025-01-16", followed_up=True),
        make_application("Interviewing", follow_up_date="2025-01-16", status=ApplicationStatus.INTERVIEW),
        make_application("None"),
        make_application("Soon", follow_up_date="2025-01-20"),
    ]
    stats = compute_dashboard([make_company("Acme", apps)], today=TODAY)

    assert [v.application.title for v in stats.upcoming_follow_ups] == ["Today", "Soon", "Later"]
    assert stats.upcoming_follow_ups[0].company_name == "Acme"


def test_lists_are_capped_at_limit():
    apps = [
        make_application(f"Job {i}", date_applied=f"2025-01-{i:02d}", follow_up_date=f"2025-02-{i:02d}")
        for i in range(1, 9)
    ]
    stats = compute_dashboard([make_company("Acme", apps[:4]), make_company("Globex", apps[4:])], today=TODAY)

    assert [v.application.title for v in stats.recent_applications] == ["Job 8", "Job 7", "Job 6", "Job 5", "Job 4"]
    assert [v.application.title for v in stats.upcoming_follow_ups] == ["Job 1", "Job 2", "Job 3", "Job 4", "Job 5"]
    assert stats.recent_applications[0].company_name == "Globex"

    stats = compute_dashboard([make_company("Acme", apps)], today=TODAY, limit=2)
    assert len(stats.recent_applications) == 2


def test_top_skills_tally_trimmed_tokens():
    apps = [
        make_application(skills="Python, SQL, ,Docker"),
        make_application(skills=" python,SQL"),
        make_application(skills="SQL,Go,Rust,Kotlin,Java"),
        make_application(skills=""),
    ]
    stats = compute_dashboard([make_company("Acme", apps)], today=TODAY)

    assert [(s.name, s.count) for s in stats.top_skills] == [
        ("SQL", 3),
        ("Python", 1),
        ("Docker", 1),
        ("python", 1),
        ("Go", 1),
    ]


def test_compute_dashboard_does_not_mutate_input():
    company = make_company("Acme", [make_application(date_applied="2025-01-02"), make_application()])
    snapshot = company.to_dict()
    compute_dashboard([company], today=TODAY)
    assert company.to_dict() == snapshot
