"""Merge parsed CSV records into the stored collection.

Companies are matched by case-insensitive name and never overwritten;
applications are bound to their company by name and matched to existing
records by ``id`` so a re-imported export updates in place. Bad records are
reported and skipped, the rest are still saved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from jtrack.csv_codec import ParsedApplication
from jtrack.dates import now_timestamp, parse_iso_date
from jtrack.models import Company
from jtrack.storage import CompanyStore

logger = logging.getLogger("jtrack")


@dataclass
class CompanyImportStats:
    total: int = 0
    added: int = 0
    skipped: int = 0


@dataclass
class CompanyReconciliation:
    to_insert: list[Company] = field(default_factory=list)
    stats: CompanyImportStats = field(default_factory=CompanyImportStats)


@dataclass
class ApplicationImportStats:
    total: int = 0
    added: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)


def reconcile_companies(existing: list[Company], parsed: list[Company]) -> CompanyReconciliation:
    """Split ``parsed`` into companies to insert and ones already on file.

    Only names stored before the import count as duplicates; two rows with
    the same name in one file are both inserted.
    """
    existing_names = {c.name.strip().lower() for c in existing}
    to_insert = [c for c in parsed if c.name.strip().lower() not in existing_names]
    stats = CompanyImportStats(
        total=len(parsed),
        added=len(to_insert),
        skipped=len(parsed) - len(to_insert),
    )
    return CompanyReconciliation(to_insert=to_insert, stats=stats)


def import_companies(store: CompanyStore, parsed: list[Company]) -> CompanyImportStats:
    existing = store.get_all()
    result = reconcile_companies(existing, parsed)
    if result.to_insert:
        store.save_all(existing + result.to_insert)

    logger.info(
        "Company import: %d total, %d added, %d skipped as duplicates.",
        result.stats.total,
        result.stats.added,
        result.stats.skipped,
    )
    return result.stats


def reconcile_applications(
    existing: list[Company],
    parsed: list[ParsedApplication],
) -> ApplicationImportStats:
    """Apply parsed rows to ``existing`` in place and report what happened.

    A row whose company isn't on file is recorded in ``errors`` and skipped;
    companies are never created here.
    """
    stats = ApplicationImportStats(total=len(parsed))
    by_name = {}
    owner_of = {}
    for company in existing:
        by_name.setdefault(company.name.strip().lower(), company)
        for app in company.applications:
            owner_of.setdefault(app.id, company)

    for record in parsed:
        incoming = record.application
        company = by_name.get(record.company_name.strip().lower())
        owner = owner_of.get(incoming.id)

        if company is None:
            message = f'Row {record.row_number}: company "{record.company_name}" not found'
        elif owner is not None and owner is not company:
            # Applications never move between companies, and ids stay unique
            message = f'Row {record.row_number}: application {incoming.id} belongs to "{owner.name}"'
        else:
            message = ""
        if message:
            stats.errors.append(message)
            logger.warning("Skipping application %r: %s", incoming.title, message)
            continue

        _warn_on_early_follow_up(record)
        current = company.find_application(incoming.id)

        if current is not None:
            for attr in record.fields:
                setattr(current, attr, getattr(incoming, attr))
            current.touch()
            stats.updated += 1
        else:
            now = now_timestamp()
            if "created_at" not in record.fields:
                incoming.created_at = now
            if "last_updated" not in record.fields:
                incoming.last_updated = now
            company.applications.append(incoming)
            owner_of[incoming.id] = company
            stats.added += 1

    return stats


def import_applications(store: CompanyStore, parsed: list[ParsedApplication]) -> ApplicationImportStats:
    companies = store.get_all()
    stats = reconcile_applications(companies, parsed)
    if stats.changed:
        store.save_all(companies)

    logger.info(
        "Application import: %d total, %d added, %d updated, %d failed.",
        stats.total,
        stats.added,
        stats.updated,
        stats.failed,
    )
    return stats


def _warn_on_early_follow_up(record: ParsedApplication) -> None:
    app = record.application
    applied = parse_iso_date(app.date_applied)
    follow_up = parse_iso_date(app.follow_up_date)
    if applied and follow_up and follow_up < applied:
        logger.warning(
            "Row %d: follow-up date %s is before date applied %s; imported as-is.",
            record.row_number,
            app.follow_up_date,
            app.date_applied,
        )
