"""Key-value backed persistence for the company collection.

The whole collection is one JSON blob under a single storage key. Every
successful mutation rewrites the full blob once; reads never raise, and
missing or corrupt data is treated as an empty collection.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from jtrack.models import Application, Company, same_name

logger = logging.getLogger("jtrack")

STORAGE_KEY = "job-tracker-companies"


class StorageBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryBackend:
    """In-process backend, mainly for tests."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1


class FileBackend:
    """One ``<key>.json`` file per key inside ``data_dir``."""

    def __init__(self, data_dir: Path | str = "data"):
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        # Write to a sibling temp file and swap it in so readers never see half a blob
        fd, tmp_path = tempfile.mkstemp(dir=self._data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class CompanyStore:
    """CRUD over the Company aggregate (and the applications nested in it)."""

    def __init__(self, backend: StorageBackend, key: str = STORAGE_KEY):
        self._backend = backend
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def get_all(self) -> list[Company]:
        """Load every company. Unreadable storage yields an empty list."""
        try:
            raw = self._backend.get(self._key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Storage unavailable for %r: %s. Treating as empty.", self._key, e)
            return []
        if not raw:
            return []

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise TypeError(f"expected a list, got {type(payload).__name__}")
            return [Company.from_dict(item) for item in payload]
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Stored data under %r is corrupt: %s. Treating as empty.", self._key, e)
            return []

    def save_all(self, companies: list[Company]) -> None:
        """Overwrite the stored collection in a single write."""
        blob = json.dumps([c.to_dict() for c in companies])
        self._backend.set(self._key, blob)
        logger.debug("Persisted %d companies to %r.", len(companies), self._key)

    def add(self, company: Company) -> None:
        companies = self.get_all()
        companies.append(company)
        self.save_all(companies)

    def update(self, company: Company) -> bool:
        companies = self.get_all()
        for index, existing in enumerate(companies):
            if existing.id == company.id:
                companies[index] = company
                self.save_all(companies)
                return True
        logger.debug("Update skipped: no company with id %s.", company.id)
        return False

    def remove(self, company_id: str) -> bool:
        """Delete a company together with everything embedded in it."""
        companies = self.get_all()
        remaining = [c for c in companies if c.id != company_id]
        if len(remaining) == len(companies):
            return False
        self.save_all(remaining)
        return True

    def find_by_id(self, company_id: str) -> Company | None:
        return next((c for c in self.get_all() if c.id == company_id), None)

    def find_by_name(self, name: str) -> Company | None:
        return next((c for c in self.get_all() if same_name(c.name, name)), None)

    def find_application(self, application_id: str) -> tuple[Company, Application] | None:
        for company in self.get_all():
            application = company.find_application(application_id)
            if application is not None:
                return company, application
        return None

    def add_application(self, company_id: str, application: Application) -> bool:
        company = self.find_by_id(company_id)
        if company is None:
            return False
        company.applications.append(application)
        return self.update(company)

    def update_application(self, company_id: str, application: Application) -> bool:
        company = self.find_by_id(company_id)
        if company is None:
            return False
        for index, existing in enumerate(company.applications):
            if existing.id == application.id:
                application.touch()
                company.applications[index] = application
                return self.update(company)
        return False

    def remove_application(self, company_id: str, application_id: str) -> bool:
        company = self.find_by_id(company_id)
        if company is None or company.find_application(application_id) is None:
            return False
        company.applications = [a for a in company.applications if a.id != application_id]
        return self.update(company)

    def list_with_applications(self) -> list[Company]:
        return [c for c in self.get_all() if c.has_applications]

    def list_without_applications(self) -> list[Company]:
        return [c for c in self.get_all() if not c.has_applications]
