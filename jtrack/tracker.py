"""Entry-time workflows on top of the company store.

The store itself accepts whatever it's given. This layer is where names get
checked for duplicates, application defaults get filled in (job label,
follow-up date), and interview notes are managed.
"""

from __future__ import annotations

import logging

from jtrack.dates import add_days, parse_iso_date, today_iso
from jtrack.errors import ValidationError
from jtrack.models import (
    Application,
    ApplicationStatus,
    Company,
    Note,
    NoteCategory,
    generate_job_label,
    same_name,
)
from jtrack.storage import CompanyStore

logger = logging.getLogger("jtrack")

DEFAULT_FOLLOW_UP_DAYS = 7


class JobTracker:
    """Company, application, and note workflows with validation."""

    def __init__(self, store: CompanyStore, follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS):
        self._store = store
        self._follow_up_days = follow_up_days

    @property
    def store(self) -> CompanyStore:
        return self._store

    # --- Companies ---

    def validate_company_names(self, names: list[str]) -> list[str]:
        """Return every problem with adding ``names``; empty means OK."""
        errors = []
        existing = self._store.get_all()
        seen: set[str] = set()

        for index, name in enumerate(names, start=1):
            key = name.strip().lower()
            if not key:
                errors.append(f"Company name #{index} is required")
                continue
            if key in seen:
                errors.append(f'Duplicate company name in batch: "{name.strip()}"')
                continue
            seen.add(key)
            clash = next((c for c in existing if same_name(c.name, name)), None)
            if clash is not None:
                errors.append(f'Company "{name.strip()}" already exists as "{clash.name}"')

        return errors

    def add_companies(self, names: list[str], website: str = "", notes: str = "") -> list[Company]:
        """Validate and add several companies sharing one website/notes value."""
        errors = self.validate_company_names(names)
        if errors:
            raise ValidationError(errors)

        created = [
            Company(name=name.strip(), website=website.strip(), notes=notes.strip())
            for name in names
        ]
        self._store.save_all(self._store.get_all() + created)
        logger.info("Added %d companies.", len(created))
        return created

    def add_company(self, name: str, website: str = "", notes: str = "") -> Company:
        return self.add_companies([name], website=website, notes=notes)[0]

    def edit_company(
        self,
        company_id: str,
        name: str | None = None,
        website: str | None = None,
        notes: str | None = None,
    ) -> bool:
        company = self._store.find_by_id(company_id)
        if company is None:
            return False

        if name is not None:
            if not name.strip():
                raise ValidationError("Company name is required")
            clash = self._store.find_by_name(name)
            if clash is not None and clash.id != company.id:
                raise ValidationError(f'Company "{name.strip()}" already exists')
            company.name = name.strip()
        if website is not None:
            company.website = website.strip()
        if notes is not None:
            company.notes = notes.strip()

        return self._store.update(company)

    def delete_company(self, company_id: str) -> bool:
        removed = self._store.remove(company_id)
        if removed:
            logger.info("Deleted company %s and its applications.", company_id)
        return removed

    def resolve_company(self, ref: str) -> Company | None:
        """Look a company up by id first, then by name."""
        return self._store.find_by_id(ref) or self._store.find_by_name(ref)

    def search(self, term: str = "") -> list[Company]:
        """Companies whose name, or any application title, contains ``term``."""
        companies = self._store.get_all()
        needle = term.strip().lower()
        if not needle:
            return companies
        return [
            c for c in companies
            if needle in c.name.lower()
            or any(needle in a.title.lower() for a in c.applications)
        ]

    # --- Applications ---

    def new_application(
        self,
        title: str,
        date_applied: str = "",
        job_id: str = "",
        status: ApplicationStatus | str = ApplicationStatus.APPLIED,
        follow_up_date: str = "",
        skills: str = "",
        salary: str = "",
        location: str = "",
        remote: bool = False,
        description: str = "",
        notes: str = "",
    ) -> Application:
        """Build a validated Application with defaults filled in."""
        errors = []
        if not title.strip():
            errors.append("Job title is required")

        date_applied = date_applied.strip() or today_iso()
        applied = parse_iso_date(date_applied)
        if applied is None:
            errors.append(f"Date applied is not a valid date: {date_applied}")

        follow_up_date = follow_up_date.strip()
        if follow_up_date:
            follow_up = parse_iso_date(follow_up_date)
            if follow_up is None:
                errors.append(f"Follow-up date is not a valid date: {follow_up_date}")
            elif applied is not None and follow_up < applied:
                errors.append("Follow-up date cannot be before the application date")
        elif applied is not None:
            follow_up_date = add_days(applied, self._follow_up_days).isoformat()

        if errors:
            raise ValidationError(errors)

        return Application(
            title=title.strip(),
            job_id=job_id.strip() or generate_job_label(),
            status=ApplicationStatus.parse(status),
            date_applied=applied.isoformat(),
            follow_up_date=follow_up_date,
            skills=skills,
            salary=salary,
            location=location,
            remote=remote,
            description=description,
            notes=notes,
        )

    def add_application(self, company_id: str, **fields) -> Application | None:
        """Create an application under ``company_id``. ``None`` if the company is gone."""
        application = self.new_application(**fields)
        if not self._store.add_application(company_id, application):
            return None
        logger.info("Added application %r (%s).", application.title, application.job_id)
        return application

    def update_application(self, company_id: str, application: Application) -> bool:
        """Save an edited application after re-checking its dates."""
        applied = parse_iso_date(application.date_applied)
        follow_up = parse_iso_date(application.follow_up_date)
        if not application.title.strip():
            raise ValidationError("Job title is required")
        if applied and follow_up and follow_up < applied:
            raise ValidationError("Follow-up date cannot be before the application date")
        return self._store.update_application(company_id, application)

    def _edit_application(self, company_id: str, application_id: str, edit) -> bool:
        company = self._store.find_by_id(company_id)
        if company is None:
            return False
        application = company.find_application(application_id)
        if application is None:
            return False
        edit(application)
        return self._store.update_application(company_id, application)

    def set_status(self, company_id: str, application_id: str, status: ApplicationStatus | str) -> bool:
        new_status = ApplicationStatus.parse(status)

        def apply(app: Application) -> None:
            app.status = new_status

        return self._edit_application(company_id, application_id, apply)

    def mark_followed_up(self, company_id: str, application_id: str, followed_up: bool = True) -> bool:
        def apply(app: Application) -> None:
            app.followed_up = followed_up

        return self._edit_application(company_id, application_id, apply)

    def delete_application(self, company_id: str, application_id: str) -> bool:
        return self._store.remove_application(company_id, application_id)

    # --- Interview notes ---

    def add_note(
        self,
        company_id: str,
        application_id: str,
        title: str,
        content: str = "",
        category: NoteCategory | str = NoteCategory.PREPARATION,
        date: str = "",
    ) -> Note | None:
        if not title.strip():
            raise ValidationError("Note title is required")
        note = Note(
            title=title.strip(),
            date=date.strip() or today_iso(),
            content=content,
            category=category if isinstance(category, NoteCategory) else NoteCategory.parse(category),
        )

        def apply(app: Application) -> None:
            app.interview_notes.append(note)

        if not self._edit_application(company_id, application_id, apply):
            return None
        return note

    def update_note(
        self,
        company_id: str,
        application_id: str,
        note_id: str,
        title: str | None = None,
        content: str | None = None,
        category: NoteCategory | str | None = None,
        date: str | None = None,
    ) -> bool:
        if title is not None and not title.strip():
            raise ValidationError("Note title is required")

        company = self._store.find_by_id(company_id)
        application = company.find_application(application_id) if company else None
        note = application.find_note(note_id) if application else None
        if note is None:
            return False

        if title is not None:
            note.title = title.strip()
        if content is not None:
            note.content = content
        if category is not None:
            note.category = category if isinstance(category, NoteCategory) else NoteCategory.parse(category)
        if date is not None:
            note.date = date.strip()
        return self._store.update_application(company_id, application)

    def delete_note(self, company_id: str, application_id: str, note_id: str) -> bool:
        company = self._store.find_by_id(company_id)
        application = company.find_application(application_id) if company else None
        if application is None or application.find_note(note_id) is None:
            return False
        application.interview_notes = [n for n in application.interview_notes if n.id != note_id]
        return self._store.update_application(company_id, application)
