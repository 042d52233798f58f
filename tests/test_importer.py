from __future__ import annotations

from conftest import make_application, make_company
from jtrack.csv_codec import parse_applications, parse_companies, serialize_applications
from jtrack.importer import (
    import_applications,
    import_companies,
    reconcile_applications,
    reconcile_companies,
)
from jtrack.models import ApplicationStatus, Note


def test_reconcile_companies_skips_existing_names():
    existing = [make_company("Acme")]
    parsed = parse_companies("name\nACME\nGlobex\n")

    result = reconcile_companies(existing, parsed)

    assert [c.name for c in result.to_insert] == ["Globex"]
    assert (result.stats.total, result.stats.added, result.stats.skipped) == (2, 1, 1)


def test_reconcile_companies_does_not_dedupe_within_batch():
    parsed = parse_companies("name\nInitech\ninitech\n")
    result = reconcile_companies([], parsed)
    assert len(result.to_insert) == 2


def test_import_companies_persists_once(store, backend):
    store.add(make_company("Acme"))
    writes = backend.writes

    stats = import_companies(store, parse_companies("company\nAcme\nGlobex\nHooli\n"))

    assert stats.added == 2 and stats.skipped == 1
    assert backend.writes == writes + 1
    assert [c.name for c in store.get_all()] == ["Acme", "Globex", "Hooli"]


def test_import_companies_with_nothing_new_does_not_write(store, backend):
    store.add(make_company("Acme"))
    writes = backend.writes
    import_companies(store, parse_companies("name\nacme\n"))
    assert backend.writes == writes


def test_unknown_company_is_reported_and_matching_row_still_added(store):
    store.add(make_company("Acme"))
    parsed = parse_applications(
        "companyName,jobTitle\n"
        "Nowhere Ltd,Engineer\n"
    )
    stats = import_applications(store, parsed)
    assert (stats.added, stats.updated) == (0, 0)
    assert len(stats.errors) == 1
    assert "Nowhere Ltd" in stats.errors[0]

    parsed = parse_applications(
        "companyName,jobTitle\n"
        "Nowhere Ltd,Engineer\n"
        "acme,Analyst\n"
    )
    stats = import_applications(store, parsed)
    assert stats.added == 1
    assert stats.updated == 0
    assert len(stats.errors) == 1
    assert [a.title for a in store.find_by_name("Acme").applications] == ["Analyst"]
    # No company gets created for the unknown name
    assert store.find_by_name("Nowhere Ltd") is None


def test_reimporting_an_export_updates_every_record(store):
    store.add(make_company("Acme", [make_application("Engineer"), make_application("Analyst")]))
    store.add(make_company("Globex", [make_application("Designer")]))
    exported = serialize_applications(store.get_all())

    stats = import_applications(store, parse_applications(exported))

    assert stats.total == 3
    assert stats.updated == stats.total
    assert stats.added == 0
    assert stats.errors == []
    assert sum(len(c.applications) for c in store.get_all()) == 3


def test_update_merges_only_supplied_fields():
    app = make_application("Engineer", salary="100k", skills="Python")
    app.interview_notes.append(Note(title="Prep", date="2025-01-02"))
    app.last_updated = "2000-01-01T00:00:00.000Z"
    companies = [make_company("Acme", [app])]

    parsed = parse_applications(
        "companyName,jobTitle,id,status\n"
        f"Acme,Senior Engineer,{app.id},Offer\n"
    )
    stats = reconcile_applications(companies, parsed)

    merged = companies[0].applications[0]
    assert stats.updated == 1
    assert merged is app
    assert merged.title == "Senior Engineer"
    assert merged.status == ApplicationStatus.OFFER
    assert merged.salary == "100k"
    assert merged.skills == "Python"
    assert len(merged.interview_notes) == 1
    assert merged.last_updated > "2000-01-01T00:00:00.000Z"


def test_new_application_with_unknown_id_is_appended():
    companies = [make_company("Acme", [make_application("Engineer")])]
    parsed = parse_applications("companyName,jobTitle,id\nAcme,Analyst,fresh-id\n")

    stats = reconcile_applications(companies, parsed)

    assert stats.added == 1
    assert [a.id for a in companies[0].applications][-1] == "fresh-id"
    assert companies[0].applications[-1].created_at


def test_early_follow_up_is_imported_with_warning(store, caplog):
    store.add(make_company("Acme"))
    parsed = parse_applications(
        "companyName,jobTitle,dateApplied,followUpDate\n"
        "Acme,Engineer,2025-01-10,2025-01-05\n"
    )
    stats = import_applications(store, parsed)

    assert stats.added == 1
    assert store.find_by_name("Acme").applications[0].follow_up_date == "2025-01-05"
    assert "before date applied" in caplog.text


def test_application_cannot_move_to_another_company(store):
    app = make_application("Engineer")
    store.add(make_company("Acme", [app]))
    store.add(make_company("Globex"))

    parsed = parse_applications(f"companyName,jobTitle,id\nGlobex,Engineer,{app.id}\n")
    stats = import_applications(store, parsed)

    assert (stats.added, stats.updated) == (0, 0)
    assert stats.errors == [f'Row 2: application {app.id} belongs to "Acme"']
    assert store.find_by_name("Globex").applications == []
    ids = [a.id for c in store.get_all() for a in c.applications]
    assert ids == [app.id]


def test_same_new_id_under_two_companies_in_one_file():
    companies = [make_company("Acme"), make_company("Globex")]
    parsed = parse_applications(
        "companyName,jobTitle,id\n"
        "Acme,Engineer,shared-id\n"
        "Globex,Analyst,shared-id\n"
    )
    stats = reconcile_applications(companies, parsed)

    assert stats.added == 1
    assert len(stats.errors) == 1
    assert companies[1].applications == []
