"""Terminal rendering for companies, applications, import results and the dashboard."""

from __future__ import annotations

from jtrack.dates import format_date_for_display, format_long_date
from jtrack.importer import ApplicationImportStats, CompanyImportStats
from jtrack.models import Application, ApplicationStatus, Company
from jtrack.stats import DashboardStats

# ANSI color helpers
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
MAGENTA = "\033[95m"
RESET = "\033[0m"

STATUS_COLORS = {
    ApplicationStatus.APPLIED: CYAN,
    ApplicationStatus.INTERVIEW: YELLOW,
    ApplicationStatus.OFFER: GREEN,
    ApplicationStatus.REJECTED: RED,
}

# Import errors shown before collapsing to "...and N more"
MAX_ERRORS_SHOWN = 5


def _status(status: ApplicationStatus) -> str:
    return f"{STATUS_COLORS[status]}{status.value}{RESET}"


def _truncate(text: str, limit: int) -> str:
    text = text.replace("\n", " ")
    return text if len(text) <= limit else text[: limit - 3] + "..."


def print_company_list(with_apps: list[Company], without_apps: list[Company]) -> None:
    count = len(with_apps)
    if count:
        noun = "company" if count == 1 else "companies"
        print(f"\n{BOLD}{count} {noun} with applications{RESET}")
    else:
        print(f"\n{BOLD}No job applications yet{RESET}")

    for company in with_apps:
        print(f"  {BOLD}{CYAN}{company.name}{RESET} {DIM}({company.id}){RESET}")
        for app in company.applications:
            print(f"    - {app.title} [{_status(app.status)}] applied {format_date_for_display(app.date_applied)}")

    if without_apps:
        print(f"\n{BOLD}Other companies{RESET}")
        for company in without_apps:
            print(f"  {company.name} {DIM}({company.id}){RESET}")


def print_company(company: Company) -> None:
    print(f"\n{'=' * 60}")
    print(f"{BOLD}{CYAN} {company.name}{RESET}")
    print(f"{'=' * 60}")
    print(f"{BOLD}Id:{RESET}         {DIM}{company.id}{RESET}")
    if company.website:
        print(f"{BOLD}Website:{RESET}    {company.website}")
    if company.created_at:
        print(f"{BOLD}Added:{RESET}      {format_long_date(company.created_at)}")
    if company.notes:
        print(f"{BOLD}Notes:{RESET}      {_truncate(company.notes, 300)}")

    if not company.applications:
        print(f"\n{DIM}No applications yet.{RESET}")
        return
    for app in company.applications:
        print_application(app)


def print_application(app: Application) -> None:
    print(f"\n{BOLD}{MAGENTA}{app.title}{RESET}  [{_status(app.status)}]")
    print(f"  {DIM}ID: {app.job_id}  |  {app.id}{RESET}")
    print(f"  Applied {format_long_date(app.date_applied)}", end="")
    if app.follow_up_date:
        done = " (done)" if app.followed_up else ""
        print(f"  |  Follow-up: {format_long_date(app.follow_up_date)}{done}", end="")
    print()

    details = []
    if app.location:
        details.append(app.location)
    if app.remote:
        details.append("Remote")
    if app.salary:
        details.append(app.salary)
    if details:
        print(f"  {' | '.join(details)}")
    if app.skills:
        print(f"  {BOLD}Skills:{RESET} {', '.join(app.skill_list())}")
    if app.description:
        print(f"  {DIM}{_truncate(app.description, 250)}{RESET}")

    for note in app.interview_notes:
        print(
            f"  {YELLOW}* [{note.category.value}]{RESET} {note.title} "
            f"{DIM}({format_date_for_display(note.date)}, {note.id}){RESET}"
        )
        if note.content:
            print(f"      {DIM}{_truncate(note.content, 200)}{RESET}")


def print_company_import(stats: CompanyImportStats) -> None:
    print(f"\n{BOLD}{GREEN}Company import complete{RESET}")
    print(f"  Total:   {stats.total}")
    print(f"  Added:   {stats.added}")
    print(f"  Skipped: {stats.skipped} {DIM}(already on file){RESET}")


def print_application_import(stats: ApplicationImportStats) -> None:
    color = YELLOW if stats.errors else GREEN
    print(f"\n{BOLD}{color}Application import complete{RESET}")
    print(f"  Total:   {stats.total}")
    print(f"  Added:   {stats.added}")
    print(f"  Updated: {stats.updated}")
    print(f"  Failed:  {stats.failed}")
    if stats.errors:
        for error in stats.errors[:MAX_ERRORS_SHOWN]:
            print(f"    {RED}{error}{RESET}")
        if len(stats.errors) > MAX_ERRORS_SHOWN:
            print(f"    {DIM}...and {len(stats.errors) - MAX_ERRORS_SHOWN} more errors{RESET}")


def print_dashboard(stats: DashboardStats) -> None:
    print(f"\n{'=' * 40}")
    print(f"  {BOLD}Dashboard{RESET}")
    print(f"{'=' * 40}")
    print(f"  Companies:     {stats.total_companies}")
    print(f"  Applications:  {stats.total_applications}")
    print(f"  Response rate: {stats.response_rate}%")
    print(f"  Follow-ups:    {len(stats.upcoming_follow_ups)}")

    print(f"\n{BOLD}Status{RESET}")
    for status, count in stats.status_breakdown.items():
        print(f"  {_status(status):<22} {count}")

    print(f"\n{BOLD}Applications per week{RESET}")
    if not stats.weekly_applications:
        print(f"  {DIM}No data yet.{RESET}")
    for bucket in stats.weekly_applications:
        print(f"  {bucket.label:<8} {'#' * bucket.count} {bucket.count}")

    print(f"\n{BOLD}Top skills{RESET}")
    if not stats.top_skills:
        print(f"  {DIM}No skills recorded.{RESET}")
    for skill in stats.top_skills:
        print(f"  {skill.name:<20} {skill.count}")

    print(f"\n{BOLD}Recent applications{RESET}")
    if not stats.recent_applications:
        print(f"  {DIM}None yet.{RESET}")
    for view in stats.recent_applications:
        app = view.application
        print(
            f"  {app.title} at {view.company_name} [{_status(app.status)}] "
            f"{DIM}applied {format_date_for_display(app.date_applied)}{RESET}"
        )

    print(f"\n{BOLD}Upcoming follow-ups{RESET}")
    if not stats.upcoming_follow_ups:
        print(f"  {DIM}Nothing due.{RESET}")
    for view in stats.upcoming_follow_ups:
        app = view.application
        print(f"  {format_date_for_display(app.follow_up_date):<8} {app.title} at {view.company_name}")
    print()
