from __future__ import annotations

import pytest

from models import AgendaItem, AttendeeRecord, CompanyRecord, DiningOption, Hotel
from services.analytics import (
    EventSnapshot,
    build_event_analytics,
    build_sponsor_report,
    capacity_status,
    company_directory_stats,
    companies_with_no_attendees,
    load_event_snapshot,
    migration_frequency,
)


def _att(id, **kw) -> AttendeeRecord:
    kw.setdefault("registration_status", "confirmed")
    return AttendeeRecord(id=id, **kw)


def _snapshot() -> EventSnapshot:
    return EventSnapshot(
        attendees=[
            _att("1", first_name="Ann", company="Apax", attributes={"apaxIP": True, "apaxEP": True}),
            _att("2", first_name="Bob", company="Apax", is_apax_ep=True),
            _att("3", first_name="Cy", company="Alpha", attributes={"portfolioCompanyExecutive": True, "ceo": True},
                 selected_breakouts=["apax-software-ceo-summit", "track-a-revenue-growth"],
                 hotel_selection="h1", spouse_details={"firstName": "Dee"}),
            _att("4", first_name="Di", company="Beta", company_name_standardized="Beta LLC",
                 attributes={"portfolioCompanyExecutive": True, "cfo": True},
                 selected_breakouts=["track-b-operational-performance"], hotel_selection="h2",
                 spouse_details={}),
            _att("5", first_name="Ed", company="Alpha",
                 dining_selections={"welcome-dinner-0": {"attending": True}, "x": {"attending": True, "eventName": "Maple & Ash Night"}}),
            _att("6", first_name="Flo", company="Gamma", attributes={"sponsorAttendee": True},
                 dining_selections={"welcome-dinner-0": {"attending": False}}),
            _att("7", first_name="Gus", company="Beta", company_name_standardized="Beta LLC"),
        ],
        companies=[
            CompanyRecord(id="c1", name="Alpha", fund_analytics_category="Buyout Funds", logo="alpha.png"),
            CompanyRecord(id="c2", name="Beta LLC", fund_analytics_category="Buyout Funds"),
            CompanyRecord(id="c3", name="Gamma", fund_analytics_category="Sponsors & Vendors"),
            CompanyRecord(id="c4", name="zeta"),
            CompanyRecord(id="c5", name="APAX"),
            CompanyRecord(id="c6", name="Delta", fund_analytics_category="Digital Funds"),
        ],
        hotels=[Hotel(id="h1", name="Four Seasons Chicago"), Hotel(id="h2", name="Park Hyatt")],
        agenda_items=[
            AgendaItem(id="ag1", title="Software CEO Day", capacity=2),
            AgendaItem(id="ag2", title="Opening Remarks", capacity=None),
        ],
        assigned_dining_options=[DiningOption(id="d1", name="Welcome Dinner", capacity=10)],
    )


def test_scalar_counts():
    stats = build_event_analytics(_snapshot())
    assert stats.total_registrations == 7
    assert stats.total_spouses == 1
    assert stats.software_day == 1
    assert stats.track_a_digital == 1
    assert stats.track_b_cfo_ops == 1
    assert stats.welcome_dinner == 1
    assert stats.maple_ash == 1
    assert stats.four_seasons_count == 1
    assert stats.park_hyatt_count == 1
    assert stats.making_own_arrangements_count == 5
    assert stats.portfolio_ceo_count == 1
    assert stats.portfolio_cfo_count == 1


def test_apax_buckets_are_exclusive():
    apax = build_event_analytics(_snapshot()).attendees_by_company_category.apax_attendees
    assert apax.apax_ip == 1
    assert apax.apax_ep == 1
    assert [a.id for a in apax.apax_ip_attendees] == ["1"]
    assert apax.apax_companies_count == 1


def test_fund_buckets_rank_with_stable_ties():
    cat = build_event_analytics(_snapshot()).attendees_by_company_category
    # Alpha and Beta LLC both have two attendees; Alpha was seen first
    assert [(c.company_name, c.attendee_count) for c in cat.buyout_funds] == [("Alpha", 2), ("Beta LLC", 2)]
    assert cat.buyout_funds[0].logo == "alpha.png"
    assert [c.company_name for c in cat.sponsors] == ["Gamma"]
    assert [c.company_name for c in cat.impact_and_other] == ["Apax"]
    assert cat.digital_funds == []


def test_companies_with_no_attendees_is_case_sensitive_and_sorted():
    snap = _snapshot()
    names = [c.company_name for c in companies_with_no_attendees(snap.companies, snap.attendees)]
    assert names == ["APAX", "Delta", "zeta"]


def test_assigned_seating_counts_and_status():
    events = build_event_analytics(_snapshot()).assigned_seating_events
    by_id = {e.id: e for e in events}
    assert by_id["ag1"].registered_count == 1
    assert by_id["ag1"].capacity_status == "available"
    # opening sessions count everyone but spouses
    assert by_id["ag2"].registered_count == 6
    assert by_id["ag2"].capacity_status == "unlimited"
    assert by_id["d1"].type == "dining"
    assert by_id["d1"].registered_count == 1


@pytest.mark.parametrize("registered,capacity,expected", [
    (5, None, "unlimited"),
    (5, 0, "unlimited"),
    (10, 10, "full"),
    (9, 10, "nearly-full"),
    (8, 10, "filling"),
    (7, 10, "available"),
])
def test_capacity_status(registered, capacity, expected):
    assert capacity_status(registered, capacity) == expected


def test_output_is_deterministic():
    assert build_event_analytics(_snapshot()).model_dump() == build_event_analytics(_snapshot()).model_dump()


def test_sponsor_report_groups_and_sorts():
    report = build_sponsor_report(_snapshot())
    assert [c.name for c in report.buyout_funds] == ["Alpha", "Beta LLC"]
    assert [a.first_name for a in report.buyout_funds[0].attendees] == ["Cy", "Ed"]
    assert [c.name for c in report.sponsors] == ["Gamma"]
    assert [a.id for a in report.apax_ip] == ["1"]
    assert [a.id for a in report.apax_ep] == ["2"]


def test_directory_stats():
    companies = [
        CompanyRecord(id="p", name="Parent", is_parent_company=True, sector="Tech", logo="x"),
        CompanyRecord(id="s", name="Sub", parent_company_id="p", sector="Tech"),
        CompanyRecord(id="i", name="Solo"),
    ]
    stats = company_directory_stats(companies, {"p": 2, "i": 1}, {"s": 3})
    assert (stats.parent_companies, stats.subsidiaries, stats.independent_companies) == (1, 1, 1)
    assert stats.total_aliases == 3
    assert stats.total_apax_partners == 3
    assert stats.companies_with_logo == 1
    assert stats.by_sector == {"Tech": 2, "Unclassified": 1}


def test_migration_frequency_top_n():
    attendees = [_att(str(i), company=c) for i, c in enumerate(["B", "A", " A ", "C", "B", ""])]
    freq, top = migration_frequency(attendees, top_n=2)
    assert freq == {"B": 2, "A": 2, "C": 1}
    assert top == [("B", 2), ("A", 2)]


def test_load_event_snapshot_reads_each_table_once(backend):
    backend.seed("attendees",
                 {"id": "1", "first_name": "Zed", "registration_status": "confirmed"},
                 {"id": "2", "first_name": "Amy", "registration_status": "confirmed"},
                 {"id": "3", "first_name": "Bo", "registration_status": "cancelled"})
    backend.seed("standardized_companies", {"name": "Alpha"})
    backend.seed("hotels", {"id": "h1", "name": "Park Hyatt", "is_active": True})
    backend.seed("dining_options",
                 {"id": "d1", "name": "Welcome Dinner", "is_active": True, "seating_type": "assigned"},
                 {"id": "d2", "name": "Lunch", "is_active": True, "seating_type": "open"})
    snap = load_event_snapshot(backend)
    assert [a.first_name for a in snap.attendees] == ["Amy", "Zed"]
    assert [d.id for d in snap.assigned_dining_options] == ["d1"]
    assert len(snap.dining_options) == 2
    assert backend.calls.count(("attendees", "select")) == 1


def test_snapshot_loads_companies_with_loose_parent_flags(backend):
    backend.seed("standardized_companies",
                 {"name": "Acme", "is_parent_company": True, "parent_company_id": "x"},
                 {"name": "Beta", "is_parent_company": None})
    snap = load_event_snapshot(backend)
    by_name = {c.name: c for c in snap.companies}
    assert by_name["Acme"].parent_company_id == "x"
    assert by_name["Beta"].is_parent_company is False
    stats = company_directory_stats(snap.companies)
    assert (stats.parent_companies, stats.subsidiaries, stats.independent_companies) == (1, 0, 1)
