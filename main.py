#!/usr/bin/env python3
"""jtrack - local job application tracker.

Usage:
    python main.py add-company Acme "Globex Corp"          # Add one or more companies
    python main.py add-application Acme --title "Backend Engineer" --skills "Python, SQL"
    python main.py list --search engineer                  # Companies (filtered)
    python main.py show Acme                               # One company in detail
    python main.py set-status Acme <application-id> Interview
    python main.py import-applications jobs.csv            # Bulk import / update
    python main.py export-applications --out exports/      # Dated CSV export
    python main.py dashboard                               # Aggregate statistics
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from jtrack import report
from jtrack.config_loader import Config, load_config
from jtrack.csv_codec import (
    export_filename,
    parse_applications,
    parse_companies,
    serialize_applications,
    serialize_companies,
)
from jtrack.errors import MalformedInputError, TrackerError
from jtrack.importer import import_applications, import_companies
from jtrack.models import ApplicationStatus, Company, NoteCategory
from jtrack.stats import compute_dashboard
from jtrack.storage import CompanyStore, FileBackend
from jtrack.tracker import JobTracker
from jtrack.utils import setup_logging

logger = logging.getLogger("jtrack")

DEFAULT_CONFIG = Path("config.yaml")


def build_tracker(config: Config) -> JobTracker:
    backend = FileBackend(config.storage.data_dir)
    store = CompanyStore(backend, key=config.storage.key)
    return JobTracker(store, follow_up_days=config.follow_up_days)


def _require_company(tracker: JobTracker, ref: str) -> Company:
    company = tracker.resolve_company(ref)
    if company is None:
        raise TrackerError(f"No company matches {ref!r}")
    return company


def _read_csv(path: str) -> str:
    csv_path = Path(path)
    if not csv_path.exists():
        raise TrackerError(f"File not found: {csv_path}")
    try:
        return csv_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise MalformedInputError(f"{csv_path} is not UTF-8 text") from None


def run_add_company(tracker: JobTracker, args: argparse.Namespace) -> None:
    created = tracker.add_companies(args.names, website=args.website, notes=args.notes)
    for company in created:
        print(f"  Added {company.name} ({company.id})")


def run_edit_company(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    if not tracker.edit_company(company.id, name=args.name, website=args.website, notes=args.notes):
        raise TrackerError(f"Failed to update company {company.name}")
    logger.info("Updated %s.", args.name or company.name)


def run_delete_company(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    tracker.delete_company(company.id)
    print(f"  Deleted {company.name} and {len(company.applications)} application(s).")


def run_list(tracker: JobTracker, args: argparse.Namespace) -> None:
    companies = tracker.search(args.search or "")
    with_apps = [c for c in companies if c.has_applications]
    without_apps = [c for c in companies if not c.has_applications]
    report.print_company_list(with_apps, without_apps)


def run_show(tracker: JobTracker, args: argparse.Namespace) -> None:
    report.print_company(_require_company(tracker, args.company))


def run_add_application(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    application = tracker.add_application(
        company.id,
        title=args.title,
        date_applied=args.date_applied or "",
        job_id=args.job_id or "",
        status=args.status,
        follow_up_date=args.follow_up or "",
        skills=args.skills or "",
        salary=args.salary or "",
        location=args.location or "",
        remote=args.remote,
        description=args.description or "",
        notes=args.notes or "",
    )
    if application is None:
        raise TrackerError("Failed to add job application")
    print(f"  Added {application.title} ({application.job_id}) at {company.name}: {application.id}")


def run_set_status(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    if not tracker.set_status(company.id, args.application_id, args.status):
        raise TrackerError("Failed to update job status")
    logger.info("Status set to %s.", args.status)


def run_follow_up(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    if not tracker.mark_followed_up(company.id, args.application_id, followed_up=not args.undo):
        raise TrackerError("Failed to update follow-up flag")


def run_delete_application(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    if not tracker.delete_application(company.id, args.application_id):
        raise TrackerError("Failed to delete job application")


def run_add_note(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    note = tracker.add_note(
        company.id,
        args.application_id,
        title=args.title,
        content=args.content or "",
        category=args.category,
        date=args.date or "",
    )
    if note is None:
        raise TrackerError("Failed to add note: application not found")
    print(f"  Added note {note.id}")


def run_delete_note(tracker: JobTracker, args: argparse.Namespace) -> None:
    company = _require_company(tracker, args.company)
    if not tracker.delete_note(company.id, args.application_id, args.note_id):
        raise TrackerError("Failed to delete note")


def run_import_companies(tracker: JobTracker, args: argparse.Namespace) -> None:
    parsed = parse_companies(_read_csv(args.file))
    report.print_company_import(import_companies(tracker.store, parsed))


def run_import_applications(tracker: JobTracker, args: argparse.Namespace) -> None:
    parsed = parse_applications(_read_csv(args.file))
    report.print_application_import(import_applications(tracker.store, parsed))


def _write_export(kind: str, text: str, out_dir: str) -> None:
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(kind)
    path.write_text(text, encoding="utf-8")
    logger.info("Exported %s to %s", kind, path)


def run_export_companies(tracker: JobTracker, args: argparse.Namespace) -> None:
    _write_export("companies", serialize_companies(tracker.store.get_all()), args.out)


def run_export_applications(tracker: JobTracker, args: argparse.Namespace) -> None:
    _write_export("applications", serialize_applications(tracker.store.get_all()), args.out)


def run_dashboard(tracker: JobTracker, args: argparse.Namespace, config: Config) -> None:
    stats = compute_dashboard(
        tracker.store.get_all(),
        limit=config.dashboard.limit,
        week_span_days=config.dashboard.week_span_days,
    )
    report.print_dashboard(stats)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="jtrack - local job application tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Companies can be given by id or by (case-insensitive) name.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: config.yaml if present).",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Override the storage directory from the config.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-company", help="Add one or more companies.")
    p.add_argument("names", nargs="+")
    p.add_argument("--website", default="")
    p.add_argument("--notes", default="")

    p = sub.add_parser("edit-company", help="Rename or annotate a company.")
    p.add_argument("company")
    p.add_argument("--name")
    p.add_argument("--website")
    p.add_argument("--notes")

    p = sub.add_parser("delete-company", help="Delete a company and all its applications.")
    p.add_argument("company")

    p = sub.add_parser("list", help="List companies, optionally filtered.")
    p.add_argument("--search", default="", help="Match company name or job title.")

    p = sub.add_parser("show", help="Show a company with its applications.")
    p.add_argument("company")

    statuses = [s.value for s in ApplicationStatus]
    p = sub.add_parser("add-application", help="Record a job application.")
    p.add_argument("company")
    p.add_argument("--title", required=True)
    p.add_argument("--job-id")
    p.add_argument("--status", choices=statuses, default=ApplicationStatus.APPLIED.value)
    p.add_argument("--date-applied", help="YYYY-MM-DD (default: today).")
    p.add_argument("--follow-up", help="YYYY-MM-DD (default: a week after applying).")
    p.add_argument("--skills", help="Comma-separated.")
    p.add_argument("--salary")
    p.add_argument("--location")
    p.add_argument("--remote", action="store_true")
    p.add_argument("--description")
    p.add_argument("--notes")

    p = sub.add_parser("set-status", help="Change an application's status.")
    p.add_argument("company")
    p.add_argument("application_id")
    p.add_argument("status", choices=statuses)

    p = sub.add_parser("follow-up", help="Mark an application as followed up.")
    p.add_argument("company")
    p.add_argument("application_id")
    p.add_argument("--undo", action="store_true", help="Clear the flag instead.")

    p = sub.add_parser("delete-application", help="Delete a job application.")
    p.add_argument("company")
    p.add_argument("application_id")

    p = sub.add_parser("add-note", help="Attach an interview note to an application.")
    p.add_argument("company")
    p.add_argument("application_id")
    p.add_argument("--title", required=True)
    p.add_argument("--content")
    p.add_argument("--category", choices=[c.value for c in NoteCategory], default=NoteCategory.PREPARATION.value)
    p.add_argument("--date", help="YYYY-MM-DD (default: today).")

    p = sub.add_parser("delete-note", help="Delete an interview note.")
    p.add_argument("company")
    p.add_argument("application_id")
    p.add_argument("note_id")

    for kind in ("companies", "applications"):
        p = sub.add_parser(f"import-{kind}", help=f"Import {kind} from a CSV file.")
        p.add_argument("file")
        p = sub.add_parser(f"export-{kind}", help=f"Export {kind} to a dated CSV file.")
        p.add_argument("--out", default=".", help="Output directory (default: current).")

    sub.add_parser("dashboard", help="Show aggregate statistics.")

    return parser.parse_args(argv)


COMMANDS = {
    "add-company": run_add_company,
    "edit-company": run_edit_company,
    "delete-company": run_delete_company,
    "list": run_list,
    "show": run_show,
    "add-application": run_add_application,
    "set-status": run_set_status,
    "follow-up": run_follow_up,
    "delete-application": run_delete_application,
    "add-note": run_add_note,
    "delete-note": run_delete_note,
    "import-companies": run_import_companies,
    "import-applications": run_import_applications,
    "export-companies": run_export_companies,
    "export-applications": run_export_applications,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    config_path = Path(args.config) if args.config else None
    if config_path is None and DEFAULT_CONFIG.exists():
        config_path = DEFAULT_CONFIG

    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    if args.data_dir:
        config.storage.data_dir = Path(args.data_dir)

    setup_logging(verbose=args.verbose, log_dir=config.storage.data_dir)
    tracker = build_tracker(config)

    try:
        if args.command == "dashboard":
            run_dashboard(tracker, args, config)
        else:
            COMMANDS[args.command](tracker, args)
    except TrackerError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
