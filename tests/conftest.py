from __future__ import annotations

import pytest

from jtrack.models import Application, ApplicationStatus, Company
from jtrack.storage import CompanyStore, MemoryBackend
from jtrack.tracker import JobTracker


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return CompanyStore(backend)


@pytest.fixture
def tracker(store):
    return JobTracker(store)


def make_application(
    title: str = "Backend Engineer",
    date_applied: str = "2025-01-01",
    status: ApplicationStatus = ApplicationStatus.APPLIED,
    **kwargs,
) -> Application:
    return Application(title=title, date_applied=date_applied, status=status, **kwargs)


def make_company(name: str = "Acme", applications: list[Application] | None = None, **kwargs) -> Company:
    return Company(name=name, applications=list(applications or []), **kwargs)
