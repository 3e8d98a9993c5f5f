from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from db.repos.attendees_repo import AttendeesRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.events_repo import EventsRepo
from models import AgendaItem, AttendeeRecord, CompanyRecord, DiningOption, Hotel
from models.analytics_result import (
    ApaxAttendeeSummary,
    ApaxBreakdown,
    AssignedSeatingEvent,
    CapacityStatus,
    CompanyAttendeeCount,
    CompanyCategoryBreakdown,
    CompanyWithoutAttendees,
    DirectoryStats,
    EventAnalytics,
    SponsorReport,
    SponsorReportCompany,
)
from ports.backend import BackendPort
from services.attendee_roles import APAX_ROLES, AttendeeRole, classify_attendee_role, has_spouse


logger = logging.getLogger(__name__)


SOFTWARE_DAY_SESSION = "apax-software-ceo-summit"
TRACK_A_SESSION = "track-a-revenue-growth"
TRACK_B_SESSION = "track-b-operational-performance"

DEFAULT_FUND_CATEGORY = "Other Funds"
BUYOUT_FUNDS = "Buyout Funds"
DIGITAL_FUNDS = "Digital Funds"
IMPACT_FUNDS = "Impact Funds"
SPONSORS_AND_VENDORS = "Sponsors & Vendors"
APAX_ATTENDEES_CATEGORY = "Apax Attendees"


@dataclass
class EventSnapshot:
    """Everything the analytics pass reads, fetched once up front."""

    attendees: List[AttendeeRecord] = field(default_factory=list)
    companies: List[CompanyRecord] = field(default_factory=list)
    hotels: List[Hotel] = field(default_factory=list)
    dining_options: List[DiningOption] = field(default_factory=list)
    agenda_items: List[AgendaItem] = field(default_factory=list)
    assigned_dining_options: List[DiningOption] = field(default_factory=list)


def load_event_snapshot(client: BackendPort) -> EventSnapshot:
    events = EventsRepo(client)
    snapshot = EventSnapshot(
        attendees=AttendeesRepo(client).list_confirmed(),
        companies=CompaniesRepo(client).list_all(),
        hotels=events.active_hotels(),
        dining_options=events.active_dining_options(),
        agenda_items=events.assigned_agenda_items(),
        assigned_dining_options=events.assigned_dining_options(),
    )
    logger.info(
        f"snapshot loaded: attendees={len(snapshot.attendees)} companies={len(snapshot.companies)}",
        extra={"step": "load_snapshot", "status": "ok"},
    )
    return snapshot


# --- helpers ---

def _summary(a: AttendeeRecord) -> ApaxAttendeeSummary:
    return ApaxAttendeeSummary(
        id=a.id,
        first_name=a.first_name,
        last_name=a.last_name,
        title=a.title,
        company=a.company,
        attributes=dict(a.attributes),
    )


def _category_lookup(companies: Iterable[CompanyRecord]) -> Dict[str, str]:
    return {c.name.lower(): c.fund_analytics_category or DEFAULT_FUND_CATEGORY for c in companies}


def _logo_lookup(companies: Iterable[CompanyRecord]) -> Dict[str, str]:
    return {c.name.lower(): c.logo for c in companies if c.logo}


def _contains_all(text: Optional[str], *words: str) -> bool:
    if not text or not isinstance(text, str):
        return False
    lower = text.lower()
    return all(w in lower for w in words)


def _attending(dining_selections: Mapping) -> Iterable[Tuple[str, dict]]:
    for key, selection in dining_selections.items():
        if isinstance(selection, dict) and selection.get("attending") is True:
            yield str(key), selection


def _is_welcome_dinner(key: str, selection: dict) -> bool:
    return (
        "welcome-dinner" in key
        or ("welcome" in key and "dinner" in key)
        or _contains_all(selection.get("eventName"), "welcome", "dinner")
    )


def _is_maple_ash(key: str, selection: dict) -> bool:
    return (
        "maple-ash" in key
        or ("maple" in key and "ash" in key)
        or _contains_all(selection.get("eventName"), "maple", "ash")
    )


def _ranked(counts: Dict[str, int], logos: Dict[str, str]) -> List[CompanyAttendeeCount]:
    # sorted() is stable: equal counts keep first-encounter order
    ordered = sorted(counts.items(), key=lambda kv: -kv[1])
    return [
        CompanyAttendeeCount(company_name=name, logo=logos.get(name.lower()), attendee_count=count)
        for name, count in ordered
    ]


def capacity_status(registered: int, capacity: Optional[int]) -> CapacityStatus:
    if not capacity or capacity <= 0:
        return "unlimited"
    pct = registered / capacity * 100
    if pct >= 100:
        return "full"
    if pct >= 90:
        return "nearly-full"
    if pct >= 75:
        return "filling"
    return "available"


def companies_with_no_attendees(
    companies: Iterable[CompanyRecord], attendees: Iterable[AttendeeRecord]
) -> List[CompanyWithoutAttendees]:
    """Directory companies whose name matches no attendee's raw or standardized company.

    Matching is exact and case-sensitive.
    """
    referenced = set()
    for a in attendees:
        if a.company:
            referenced.add(a.company)
        if a.company_name_standardized:
            referenced.add(a.company_name_standardized)
    missing = [c for c in companies if c.name not in referenced]
    missing.sort(key=lambda c: (c.name.casefold(), c.name))
    return [
        CompanyWithoutAttendees(company_name=c.name, logo=c.logo, sector=c.sector, geography=c.geography)
        for c in missing
    ]


# --- main aggregation ---

def _agenda_registrations(item: AgendaItem, stats: EventAnalytics, attendees: List[AttendeeRecord]) -> int:
    title = item.title.lower()
    if "software" in title and "ceo" in title:
        return stats.software_day
    if "track a" in title or "revenue growth" in title or "digital" in title:
        return stats.track_a_digital
    if "track b" in title or "operational performance" in title or "cfo" in title:
        return stats.track_b_cfo_ops
    if any(w in title for w in ("opening", "welcome", "remarks", "keynote")):
        return stats.total_registrations - stats.total_spouses
    return sum(1 for a in attendees if not has_spouse(a) and item.id in a.selected_breakouts)


def _dining_registrations(option: DiningOption, stats: EventAnalytics, attendees: List[AttendeeRecord]) -> int:
    name = option.name.lower()
    if ("maple" in name and "ash" in name) or ("networking" in name and "dinner" in name and "tuesday" in name):
        return stats.maple_ash
    if "welcome" in name and "dinner" in name:
        return stats.welcome_dinner
    count = 0
    for a in attendees:
        for key, selection in _attending(a.dining_selections):
            event_name = selection.get("eventName")
            if key == option.id or option.id in key or (isinstance(event_name, str) and name in event_name.lower()):
                count += 1
    return count


def build_event_analytics(snapshot: EventSnapshot) -> EventAnalytics:
    """Single pass over the snapshot producing the dashboard summary."""
    attendees = snapshot.attendees
    categories = _category_lookup(snapshot.companies)
    logos = _logo_lookup(snapshot.companies)

    four_seasons = next((h for h in snapshot.hotels if "four seasons" in h.name.lower()), None)
    park_hyatt = next((h for h in snapshot.hotels if "park hyatt" in h.name.lower()), None)

    stats = EventAnalytics(total_registrations=len(attendees))
    apax = ApaxBreakdown()
    apax_companies = set()
    buyout: Dict[str, int] = {}
    digital: Dict[str, int] = {}
    impact_other: Dict[str, int] = {}
    sponsors: Dict[str, int] = {}

    for a in attendees:
        company = a.company_key
        attrs = a.attributes
        category = categories.get(company.lower(), DEFAULT_FUND_CATEGORY)

        role = classify_attendee_role(a)
        if role == AttendeeRole.APAX_IP:
            apax.apax_ip += 1
            apax.apax_ip_attendees.append(_summary(a))
        elif role == AttendeeRole.APAX_EP:
            apax.apax_ep += 1
            apax.apax_ep_attendees.append(_summary(a))
        elif role == AttendeeRole.APAX_OEP:
            apax.apax_oep += 1
            apax.apax_oep_attendees.append(_summary(a))
        elif role == AttendeeRole.APAX_OTHER:
            apax.apax_other += 1
            apax.apax_other_attendees.append(_summary(a))
        if role in APAX_ROLES:
            apax_companies.add(company)

        if attrs.get("portfolioCompanyExecutive"):
            if attrs.get("ceo"):
                stats.portfolio_ceo_count += 1
            if attrs.get("cfo") or a.is_cfo:
                stats.portfolio_cfo_count += 1
            if attrs.get("coo"):
                stats.portfolio_coo_count += 1
            if attrs.get("cto_cio"):
                stats.portfolio_cio_cto_count += 1
            if attrs.get("cmo"):
                stats.portfolio_cmo_count += 1

        if category == BUYOUT_FUNDS:
            buyout[company] = buyout.get(company, 0) + 1
        elif category == DIGITAL_FUNDS:
            digital[company] = digital.get(company, 0) + 1
        elif category in (IMPACT_FUNDS, DEFAULT_FUND_CATEGORY):
            impact_other[company] = impact_other.get(company, 0) + 1
        if attrs.get("sponsorAttendee") or category == SPONSORS_AND_VENDORS:
            sponsors[company] = sponsors.get(company, 0) + 1

        if has_spouse(a):
            stats.total_spouses += 1

        breakouts = a.selected_breakouts
        if SOFTWARE_DAY_SESSION in breakouts:
            stats.software_day += 1
        if TRACK_A_SESSION in breakouts:
            stats.track_a_digital += 1
        if TRACK_B_SESSION in breakouts:
            stats.track_b_cfo_ops += 1

        for key, selection in _attending(a.dining_selections):
            if _is_welcome_dinner(key, selection):
                stats.welcome_dinner += 1
            if _is_maple_ash(key, selection):
                stats.maple_ash += 1

        hotel = a.hotel_selection
        if hotel and four_seasons and hotel == four_seasons.id:
            stats.four_seasons_count += 1
        elif hotel and park_hyatt and hotel == park_hyatt.id:
            stats.park_hyatt_count += 1
        else:
            stats.making_own_arrangements_count += 1

    apax.apax_companies_count = len(apax_companies)

    seating: List[AssignedSeatingEvent] = []
    for item in snapshot.agenda_items:
        registered = _agenda_registrations(item, stats, attendees)
        seating.append(AssignedSeatingEvent(
            id=item.id,
            name=item.title,
            type="agenda",
            date=item.date,
            time=item.start_time,
            location=item.location,
            registered_count=registered,
            capacity=item.capacity,
            capacity_status=capacity_status(registered, item.capacity),
        ))
    for option in snapshot.assigned_dining_options:
        registered = _dining_registrations(option, stats, attendees)
        seating.append(AssignedSeatingEvent(
            id=option.id,
            name=option.name,
            type="dining",
            date=option.date,
            time=option.time,
            location=option.location,
            registered_count=registered,
            capacity=option.capacity,
            capacity_status=capacity_status(registered, option.capacity),
        ))

    stats.assigned_seating_events = seating
    stats.companies_with_no_attendees = companies_with_no_attendees(snapshot.companies, attendees)
    stats.attendees_by_company_category = CompanyCategoryBreakdown(
        apax_attendees=apax,
        buyout_funds=_ranked(buyout, logos),
        digital_funds=_ranked(digital, logos),
        impact_and_other=_ranked(impact_other, logos),
        sponsors=_ranked(sponsors, logos),
    )
    return stats


def build_sponsor_report(snapshot: EventSnapshot) -> SponsorReport:
    """Companies with attendees grouped by fund category, plus Apax personnel tiers."""
    by_name = {c.name.lower(): c for c in snapshot.companies}
    groups: Dict[str, List[AttendeeRecord]] = {}
    for a in snapshot.attendees:
        groups.setdefault(a.company_key, []).append(a)

    report = SponsorReport()
    tiers = {
        AttendeeRole.APAX_IP: report.apax_ip,
        AttendeeRole.APAX_EP: report.apax_ep,
        AttendeeRole.APAX_OEP: report.apax_oep,
        AttendeeRole.APAX_OTHER: report.apax_other,
    }
    for company_name, members in groups.items():
        company = by_name.get(company_name.lower())
        category = (company.fund_analytics_category if company else None) or DEFAULT_FUND_CATEGORY
        roles = [classify_attendee_role(a) for a in members]
        for a, role in zip(members, roles):
            if role in tiers:
                tiers[role].append(_summary(a))

        ordered = sorted(members, key=lambda a: f"{a.first_name or ''} {a.last_name or ''}".casefold())
        entry = SponsorReportCompany(
            name=company.name if company else company_name,
            logo=company.logo if company else None,
            description=(company.description if company else None) or "",
            fund_analytics_category=category,
            sector=company.sector if company else None,
            geography=company.geography if company else None,
            attendees=[_summary(a) for a in ordered],
        )
        if category == BUYOUT_FUNDS:
            report.buyout_funds.append(entry)
        elif category == DIGITAL_FUNDS:
            report.digital_funds.append(entry)
        elif category in (IMPACT_FUNDS, DEFAULT_FUND_CATEGORY):
            report.impact_and_other.append(entry)
        elif category == SPONSORS_AND_VENDORS:
            report.sponsors.append(entry)
        elif not any(r in APAX_ROLES for r in roles) and category != APAX_ATTENDEES_CATEGORY:
            report.impact_and_other.append(entry)

    for bucket in (report.buyout_funds, report.digital_funds, report.impact_and_other, report.sponsors):
        bucket.sort(key=lambda c: (c.name.casefold(), c.name))
    return report


def company_directory_stats(
    companies: List[CompanyRecord],
    alias_counts: Optional[Mapping[str, int]] = None,
    partner_counts: Optional[Mapping[str, int]] = None,
) -> DirectoryStats:
    alias_counts = alias_counts or {}
    partner_counts = partner_counts or {}
    stats = DirectoryStats(total_companies=len(companies))
    for c in companies:
        if c.is_parent_company:
            stats.parent_companies += 1
        elif c.parent_company_id:
            stats.subsidiaries += 1
        else:
            stats.independent_companies += 1
        if c.logo:
            stats.companies_with_logo += 1
        sector = c.sector or "Unclassified"
        geography = c.geography or "Unclassified"
        stats.by_sector[sector] = stats.by_sector.get(sector, 0) + 1
        stats.by_geography[geography] = stats.by_geography.get(geography, 0) + 1
        stats.total_aliases += int(alias_counts.get(str(c.id), 0))
        stats.total_apax_partners += int(partner_counts.get(str(c.id), 0))
    return stats


def migration_frequency(
    attendees: Iterable[AttendeeRecord], top_n: int = 5
) -> Tuple[Dict[str, int], List[Tuple[str, int]]]:
    """Attendee count per trimmed raw company name, plus the top-N (ties in first-seen order)."""
    frequency: Dict[str, int] = {}
    for a in attendees:
        company = (a.company or "").strip()
        if company:
            frequency[company] = frequency.get(company, 0) + 1
    top = sorted(frequency.items(), key=lambda kv: -kv[1])[:top_n]
    return frequency, top
