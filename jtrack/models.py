"""Data models for companies, job applications, and interview notes.

Applications and notes are embedded in their owner, so a Company is the
whole aggregate that gets persisted. ``to_dict``/``from_dict`` use the
camelCase keys of the stored JSON layout.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from jtrack.dates import now_timestamp


class ApplicationStatus(Enum):
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"

    @classmethod
    def parse(cls, value: Any, default: ApplicationStatus | None = None) -> ApplicationStatus:
        """Case-insensitive lookup; unknown or blank values fall back to ``default`` (Applied)."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for status in cls:
            if status.value.lower() == text:
                return status
        return default or cls.APPLIED


# Statuses that count as hearing back from the company.
RESPONSE_STATUSES = (
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.OFFER,
    ApplicationStatus.REJECTED,
)


class NoteCategory(Enum):
    PREPARATION = "preparation"
    QUESTION = "question"
    FEEDBACK = "feedback"

    @classmethod
    def parse(cls, value: Any) -> NoteCategory:
        text = str(value or "").strip().lower()
        for category in cls:
            if category.value == text:
                return category
        return cls.PREPARATION


def new_id() -> str:
    return str(uuid.uuid4())


TRUTHY = {"true", "yes"}


def coerce_bool(value: Any) -> bool:
    """Booleans pass through; strings count as true only for ``true``/``yes``."""
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def generate_job_label() -> str:
    """Display label for applications entered without a job id."""
    return f"JOB-{random.randint(0, 9999):04d}"


@dataclass
class Note:
    title: str
    date: str
    content: str = ""
    category: NoteCategory = NoteCategory.PREPARATION
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "content": self.content,
            "category": self.category.value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            date=data.get("date", ""),
            content=data.get("content") or "",
            category=NoteCategory.parse(data.get("category")),
            created_at=data.get("createdAt", ""),
        )


@dataclass
class Application:
    title: str
    date_applied: str
    job_id: str = ""
    status: ApplicationStatus = ApplicationStatus.APPLIED
    follow_up_date: str = ""
    followed_up: bool = False
    skills: str = ""
    salary: str = ""
    location: str = ""
    remote: bool = False
    description: str = ""
    notes: str = ""
    interview_notes: list[Note] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_timestamp)
    last_updated: str = field(default_factory=now_timestamp)

    def touch(self) -> None:
        self.last_updated = now_timestamp()

    def find_note(self, note_id: str) -> Note | None:
        return next((n for n in self.interview_notes if n.id == note_id), None)

    def skill_list(self) -> list[str]:
        """Comma-split skills with blanks dropped. Casing and duplicates are kept."""
        return [s.strip() for s in (self.skills or "").split(",") if s.strip()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "jobId": self.job_id,
            "status": self.status.value,
            "dateApplied": self.date_applied,
            "followUpDate": self.follow_up_date,
            "followedUp": self.followed_up,
            "skills": self.skills,
            "salary": self.salary,
            "location": self.location,
            "remote": self.remote,
            "description": self.description,
            "notes": self.notes,
            "interviewNotes": [n.to_dict() for n in self.interview_notes],
            "createdAt": self.created_at,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Application:
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            job_id=data.get("jobId") or "",
            status=ApplicationStatus.parse(data.get("status")),
            date_applied=data.get("dateApplied") or "",
            follow_up_date=data.get("followUpDate") or "",
            followed_up=coerce_bool(data.get("followedUp")),
            skills=data.get("skills") or "",
            salary=data.get("salary") or "",
            location=data.get("location") or "",
            remote=coerce_bool(data.get("remote")),
            description=data.get("description") or "",
            notes=data.get("notes") or "",
            interview_notes=[Note.from_dict(n) for n in data.get("interviewNotes") or []],
            created_at=data.get("createdAt", ""),
            last_updated=data.get("lastUpdated", ""),
        )


@dataclass
class Company:
    name: str
    website: str = ""
    notes: str = ""
    applications: list[Application] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_timestamp)

    @property
    def has_applications(self) -> bool:
        return bool(self.applications)

    def find_application(self, application_id: str) -> Application | None:
        return next((a for a in self.applications if a.id == application_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "website": self.website,
            "notes": self.notes,
            "applications": [a.to_dict() for a in self.applications],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Company:
        return cls(
            id=data["id"],
            name=data["name"],
            website=data.get("website") or "",
            notes=data.get("notes") or "",
            applications=[Application.from_dict(a) for a in data.get("applications") or []],
            created_at=data.get("createdAt", ""),
        )


def same_name(a: str, b: str) -> bool:
    """Company names compare case-insensitively, ignoring surrounding whitespace."""
    return a.strip().lower() == b.strip().lower()
