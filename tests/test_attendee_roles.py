from __future__ import annotations

import pytest

from models import AttendeeRecord
from services.attendee_roles import (
    AttendeeRole,
    classify_attendee_role,
    has_spouse,
    is_apax_personnel,
    role_badges,
    role_counts,
)


def _att(**kw) -> AttendeeRecord:
    kw.setdefault("id", "a1")
    return AttendeeRecord(**kw)


def test_ip_takes_priority_over_ep():
    a = _att(attributes={"apaxIP": True, "apaxEP": True})
    assert classify_attendee_role(a) == AttendeeRole.APAX_IP


def test_legacy_columns_count_as_flags():
    assert classify_attendee_role(_att(is_apax_ep=True)) == AttendeeRole.APAX_EP
    assert classify_attendee_role(_att(is_cfo=True)) == AttendeeRole.CFO


def test_default_role_is_other():
    a = _att()
    assert classify_attendee_role(a) == AttendeeRole.OTHER
    assert not is_apax_personnel(a)


@pytest.mark.parametrize("details,expected", [
    (None, False),
    ({}, False),
    ([], False),
    ([{"firstName": "Sam"}], False),
    ({"firstName": "", "lastName": ""}, False),
    ({"firstName": "Sam"}, True),
    ({"lastName": "Lee"}, True),
])
def test_has_spouse(details, expected):
    assert has_spouse(_att(spouse_details=details)) is expected


def test_role_badges_puts_fund_first_and_falls_back():
    a = _att(attributes={"fundAffiliation": "Fund: Buyout Funds", "ceo": True, "speaker": True})
    assert role_badges(a) == ["Buyout Funds", "CEO", "Speaker"]
    assert role_badges(_att()) == ["Guest/Other"]


def test_role_counts():
    counts = role_counts([
        _att(id="1", attributes={"apaxOEP": True}),
        _att(id="2", attributes={"sponsorAttendee": True}),
        _att(id="3"),
    ])
    assert counts["apax_oep"] == 1
    assert counts["sponsor"] == 1
    assert counts["other"] == 1
    assert counts["ceo"] == 0
