from __future__ import annotations

import pytest

from services.fund_affiliation import (
    display_label,
    fund_affiliation_status,
    migrate_fund_affiliations,
    needs_standardization,
    standardize_attendee_attributes,
    standardize_fund_affiliation,
)


@pytest.mark.parametrize("raw,expected", [
    ("buyout", "buyout"),
    ("Fund: Digital Funds", "digital"),
    ("IMPACT", "impact"),
    ("fund:OTHER funds", "other"),
    ("  Buyout Funds ", "buyout"),
    ("Something Else", "other"),
    ("", None),
    (None, None),
])
def test_standardize(raw, expected):
    assert standardize_fund_affiliation(raw) == expected


def test_labels_and_flags():
    assert display_label("digital") == "Digital Funds"
    assert display_label(None) == ""
    assert needs_standardization("Buyout")
    assert not needs_standardization("buyout")
    assert not needs_standardization(None)


def test_standardize_attendee_attributes_leaves_input_untouched():
    attrs = {"fundAffiliation": "Fund: Impact", "ceo": True}
    out = standardize_attendee_attributes(attrs)
    assert out == {"fundAffiliation": "impact", "ceo": True}
    assert attrs["fundAffiliation"] == "Fund: Impact"


def _seed(backend):
    backend.seed(
        "attendees",
        {"id": "1", "attributes": {"fundAffiliation": "Fund: Buyout"}},
        {"id": "2", "attributes": {"fundAffiliation": "digital"}},
        {"id": "3", "attributes": {"fundAffiliation": "Digital Funds"}},
        {"id": "4", "attributes": {}},
    )


def test_status_counts(backend):
    _seed(backend)
    status = fund_affiliation_status(backend)
    assert status == {"total": 4, "needs_migration": 2, "already_standardized": 1, "requires_migration": True}


def test_dry_run_writes_nothing(backend):
    _seed(backend)
    out = migrate_fund_affiliations(backend, dry_run=True)
    assert out["updated"] == 2 and out["dry_run"] is True
    assert backend.rows("attendees")[0]["attributes"]["fundAffiliation"] == "Fund: Buyout"


def test_migration_counts_failures(backend):
    _seed(backend)
    backend.fail("attendees", "update", when=lambda q: ("eq", "id", "3") in q.filters)
    out = migrate_fund_affiliations(backend)
    assert out["updated"] == 1
    assert out["errors"] == 1
    assert backend.rows("attendees")[0]["attributes"]["fundAffiliation"] == "buyout"
