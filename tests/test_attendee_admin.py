from __future__ import annotations

import pytest

from models import AttendeeRecord
from services.attendee_admin import AttendeeAdmin, AttendeeAdminError, merge_attributes


@pytest.fixture()
def admin(backend):
    return AttendeeAdmin(backend)


def _attendee(backend, **kw):
    return backend.seed("attendees", {"id": "a1", "first_name": "Ann", "last_name": "Lee", **kw})[0]


def test_company_edit_restandardizes(admin, backend):
    _attendee(backend, company="Old Co", company_name_standardized="Old Co")
    saved = admin.update_attendee("a1", {"company": "  acme corp "})
    assert saved.company == "acme corp"
    assert saved.company_name_standardized == "Acme Corporation"
    assert backend.rows("attendees")[0]["updated_at"]


def test_explicit_standardized_name_wins(admin, backend):
    _attendee(backend)
    saved = admin.update_attendee("a1", {"company": "acme corp", "company_name_standardized": "Acme"})
    assert saved.company_name_standardized == "Acme"


def test_clearing_company_clears_standardized(admin, backend):
    _attendee(backend, company="Acme", company_name_standardized="Acme")
    saved = admin.update_attendee("a1", {"company": ""})
    assert saved.company is None
    assert saved.company_name_standardized is None


def test_attribute_edit_standardizes_and_mirrors_flags(admin, backend):
    _attendee(backend, attributes={"ceo": True}, is_cfo=True)
    saved = admin.update_attendee("a1", attributes={"fundAffiliation": "Buyout", "apaxEP": True, "ceo": None})
    row = backend.rows("attendees")[0]
    assert row["attributes"] == {"cfo": True, "fundAffiliation": "buyout", "apaxEP": True}
    assert row["is_apax_ep"] is True
    assert row["is_cfo"] is True
    assert row["is_spouse"] is False
    assert saved.attributes["fundAffiliation"] == "buyout"


def test_removing_cfo_attribute_clears_legacy_column(admin, backend):
    _attendee(backend, attributes={"cfo": True}, is_cfo=True)
    admin.update_attendee("a1", attributes={"cfo": None})
    assert backend.rows("attendees")[0]["is_cfo"] is False


def test_merge_attributes_seeds_legacy_flags():
    current = AttendeeRecord(id="a1", attributes={}, is_spouse=True)
    assert merge_attributes(current, {"speaker": True}) == {"spouse": True, "speaker": True}


def test_rejects_unknown_fields_and_empty_edits(admin, backend):
    _attendee(backend)
    with pytest.raises(AttendeeAdminError, match="cannot be edited"):
        admin.update_attendee("a1", {"id": "other"})
    with pytest.raises(AttendeeAdminError, match="Nothing to update"):
        admin.update_attendee("a1", {})
    with pytest.raises(AttendeeAdminError, match="not found"):
        admin.update_attendee("missing", {"title": "CEO"})


def test_delete_attendee(admin, backend):
    _attendee(backend)
    admin.delete_attendee("a1")
    assert backend.rows("attendees") == []
    with pytest.raises(AttendeeAdminError):
        admin.delete_attendee("a1")
