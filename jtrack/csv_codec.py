"""CSV import/export for companies and job applications.

Import formats:
  - companies: a header row with ``name``, ``companyName`` or ``company``
    (otherwise the first column is used), one company per row.
  - applications: ``companyName`` and ``jobTitle`` are required; every
    other application field is an optional column.

Export formats mirror what the importers read, so an applications export
can be re-imported to update records in place (matched by ``id``).
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date

from jtrack.dates import today, today_iso
from jtrack.errors import MalformedInputError
from jtrack.models import (
    Application,
    ApplicationStatus,
    Company,
    coerce_bool,
    generate_job_label,
    new_id,
)

logger = logging.getLogger("jtrack")

COMPANY_NAME_COLUMNS = ("name", "companyName", "company")

COMPANY_EXPORT_HEADERS = ["id", "name", "applications", "createdAt"]

APPLICATION_REQUIRED_COLUMNS = ("companyName", "jobTitle")

APPLICATION_EXPORT_HEADERS = [
    "companyName",
    "companyId",
    "id",
    "jobTitle",
    "jobId",
    "status",
    "dateApplied",
    "followUpDate",
    "skills",
    "salary",
    "location",
    "remote",
    "description",
    "notes",
    "createdAt",
    "lastUpdated",
    "followedUp",
]

# CSV column -> Application attribute, for the optional plain-text columns
_TEXT_COLUMNS = {
    "followUpDate": "follow_up_date",
    "skills": "skills",
    "salary": "salary",
    "location": "location",
    "description": "description",
    "notes": "notes",
    "createdAt": "created_at",
    "lastUpdated": "last_updated",
}


@dataclass
class ParsedApplication:
    """One applications-CSV row, not yet bound to a stored company."""

    company_name: str
    application: Application
    # Application attributes the row actually supplied
    fields: set[str] = field(default_factory=set)
    row_number: int = 0


def parse_bool(value: str | None) -> bool:
    return coerce_bool(value)


def _read_rows(text: str) -> tuple[list[str], list[tuple[int, dict[str, str]]]]:
    """Header plus non-empty rows, numbered as they appear in the file (header = 1)."""
    lines = (text or "").lstrip("\ufeff").splitlines(keepends=True)

    # Blank lines above the header would otherwise be read as an empty header
    skipped = 0
    while skipped < len(lines) and not lines[skipped].strip():
        skipped += 1

    reader = csv.DictReader(io.StringIO("".join(lines[skipped:])))
    header = [h.strip() for h in (reader.fieldnames or [])]
    reader.fieldnames = header

    rows = []
    for row in reader:
        values = [v for k, v in row.items() if k is not None]
        if not any((v or "").strip() for v in values):
            continue
        cleaned = {k: (v or "") for k, v in row.items() if k is not None}
        rows.append((reader.line_num + skipped, cleaned))
    return header, rows


def parse_companies(text: str) -> list[Company]:
    """Parse a companies CSV into new Company records.

    Raises MalformedInputError if any row has no usable name; in that case
    nothing is returned.
    """
    header, rows = _read_rows(text)
    companies = []
    for line_num, row in rows:
        name = ""
        for column in COMPANY_NAME_COLUMNS:
            if row.get(column, "").strip():
                name = row[column]
                break
        else:
            if header:
                name = row.get(header[0], "")

        name = name.strip()
        if not name:
            raise MalformedInputError(f"Could not find company name in CSV (line {line_num})")

        companies.append(Company(name=name))

    logger.debug("Parsed %d companies from CSV.", len(companies))
    return companies


def parse_applications(text: str) -> list[ParsedApplication]:
    """Parse an applications CSV.

    The header must contain ``companyName`` and ``jobTitle``. Rows are not
    matched against stored companies here; see ``jtrack.importer``.
    """
    header, rows = _read_rows(text)
    if not header:
        return []

    missing = [c for c in APPLICATION_REQUIRED_COLUMNS if c not in header]
    if missing:
        raise MalformedInputError(
            f"CSV is missing required column(s): {', '.join(missing)}"
        )

    parsed = []
    for line_num, row in rows:
        company_name = row["companyName"].strip()
        title = row["jobTitle"].strip()
        if not company_name or not title:
            raise MalformedInputError(
                f"Line {line_num}: companyName and jobTitle must not be empty"
            )
        parsed.append(_application_from_row(row, line_num, company_name, title))

    logger.debug("Parsed %d applications from CSV.", len(parsed))
    return parsed


def _application_from_row(
    row: dict[str, str],
    line_num: int,
    company_name: str,
    title: str,
) -> ParsedApplication:
    supplied = {"title"}

    def value(column: str) -> str:
        return row.get(column, "").strip()

    application = Application(
        id=value("id") or new_id(),
        title=title,
        job_id=value("jobId") or generate_job_label(),
        status=ApplicationStatus.parse(value("status")),
        date_applied=value("dateApplied") or today_iso(),
    )

    for column, attr in (("jobId", "job_id"), ("status", "status"), ("dateApplied", "date_applied")):
        if value(column):
            supplied.add(attr)

    for column, attr in _TEXT_COLUMNS.items():
        if value(column):
            setattr(application, attr, value(column))
            supplied.add(attr)

    for column, attr in (("remote", "remote"), ("followedUp", "followed_up")):
        if value(column):
            setattr(application, attr, parse_bool(row[column]))
            supplied.add(attr)

    return ParsedApplication(
        company_name=company_name,
        application=application,
        fields=supplied,
        row_number=line_num,
    )


def _write_csv(headers: list[str], rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=headers, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def serialize_companies(companies: list[Company]) -> str:
    return _write_csv(
        COMPANY_EXPORT_HEADERS,
        [
            {
                "id": c.id,
                "name": c.name,
                "applications": len(c.applications),
                "createdAt": c.created_at,
            }
            for c in companies
        ],
    )


def serialize_applications(companies: list[Company]) -> str:
    """One row per application, flattened with its company's name and id."""
    rows = []
    for company in companies:
        for app in company.applications:
            rows.append({
                "companyName": company.name,
                "companyId": company.id,
                "id": app.id,
                "jobTitle": app.title,
                "jobId": app.job_id,
                "status": app.status.value,
                "dateApplied": app.date_applied,
                "followUpDate": app.follow_up_date,
                "skills": app.skills,
                "salary": app.salary,
                "location": app.location,
                "remote": "true" if app.remote else "false",
                "description": app.description,
                "notes": app.notes,
                "createdAt": app.created_at,
                "lastUpdated": app.last_updated,
                "followedUp": "true" if app.followed_up else "false",
            })
    return _write_csv(APPLICATION_EXPORT_HEADERS, rows)


def export_filename(kind: str, on: date | None = None) -> str:
    """Download name such as ``job-tracker-applications-2025-01-31.csv``."""
    return f"job-tracker-{kind}-{(on or today()).isoformat()}.csv"
