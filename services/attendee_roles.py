from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

from models import AttendeeRecord
from services.fund_affiliation import display_label, standardize_fund_affiliation


class AttendeeRole(str, Enum):
    APAX_IP = "apax_ip"
    APAX_EP = "apax_ep"
    APAX_OEP = "apax_oep"
    APAX_OTHER = "apax_other"
    CEO = "ceo"
    CFO = "cfo"
    SPONSOR = "sponsor"
    PORTFOLIO_EXEC = "portfolio_exec"
    OTHER = "other"


APAX_ROLES = frozenset({
    AttendeeRole.APAX_IP,
    AttendeeRole.APAX_EP,
    AttendeeRole.APAX_OEP,
    AttendeeRole.APAX_OTHER,
})


def _flag(attendee: AttendeeRecord, key: str) -> bool:
    return bool(attendee.attributes.get(key))


# Evaluated top to bottom; the first predicate that holds decides the role
_ROLE_RULES: List[Tuple[AttendeeRole, Callable[[AttendeeRecord], bool]]] = [
    (AttendeeRole.APAX_IP, lambda a: _flag(a, "apaxIP")),
    (AttendeeRole.APAX_EP, lambda a: _flag(a, "apaxEP") or a.is_apax_ep),
    (AttendeeRole.APAX_OEP, lambda a: _flag(a, "apaxOEP")),
    (AttendeeRole.APAX_OTHER, lambda a: _flag(a, "apaxOther")),
    (AttendeeRole.CEO, lambda a: _flag(a, "ceo")),
    (AttendeeRole.CFO, lambda a: _flag(a, "cfo") or a.is_cfo),
    (AttendeeRole.SPONSOR, lambda a: _flag(a, "sponsorAttendee")),
    (AttendeeRole.PORTFOLIO_EXEC, lambda a: _flag(a, "portfolioCompanyExecutive")),
]


def classify_attendee_role(attendee: AttendeeRecord) -> AttendeeRole:
    """Single primary role for an attendee.

    An attendee flagged both apaxIP and apaxEP is APAX_IP; the legacy
    ``is_apax_ep`` column counts as the apaxEP flag and ``is_cfo`` as cfo.
    """
    for role, predicate in _ROLE_RULES:
        if predicate(attendee):
            return role
    return AttendeeRole.OTHER


def is_apax_personnel(attendee: AttendeeRecord) -> bool:
    return classify_attendee_role(attendee) in APAX_ROLES


def has_spouse(attendee: AttendeeRecord) -> bool:
    """True only for spouse_details objects carrying a first or last name.

    ``{}`` and lists do not count, nor does an object whose name fields are empty.
    """
    details: Any = attendee.spouse_details
    if not details or not isinstance(details, dict):
        return False
    return bool(details.get("firstName") or details.get("lastName"))


# (badge label, predicate) in display priority order
_BADGES: List[Tuple[str, Callable[[AttendeeRecord], bool]]] = [
    ("Apax IP", lambda a: _flag(a, "apaxIP")),
    ("Apax EP", lambda a: _flag(a, "apaxEP")),
    ("Apax OEP", lambda a: _flag(a, "apaxOEP")),
    ("Apax Other", lambda a: _flag(a, "apaxOther")),
    ("CEO", lambda a: _flag(a, "ceo")),
    ("CFO", lambda a: _flag(a, "cfo") or a.is_cfo),
    ("CMO", lambda a: _flag(a, "cmo")),
    ("CRO", lambda a: _flag(a, "cro")),
    ("COO", lambda a: _flag(a, "coo")),
    ("CHRO", lambda a: _flag(a, "chro")),
    ("CTO/CIO", lambda a: _flag(a, "cto_cio")),
    ("C-Level Exec", lambda a: _flag(a, "cLevelExec")),
    ("Non C-Level", lambda a: _flag(a, "nonCLevelExec")),
    ("Portco Exec", lambda a: _flag(a, "portfolioCompanyExecutive")),
    ("Sponsor", lambda a: _flag(a, "sponsorAttendee")),
    ("Speaker", lambda a: _flag(a, "speaker")),
    ("Spouse", lambda a: a.is_spouse),
    ("Guest/Other", lambda a: _flag(a, "otherAttendeeType")),
]


def role_badges(attendee: AttendeeRecord) -> List[str]:
    badges: List[str] = []
    fund = attendee.attributes.get("fundAffiliation")
    if fund:
        label = display_label(standardize_fund_affiliation(fund))
        badges.append(label or f"Fund: {fund}")
    matched = [label for label, predicate in _BADGES if predicate(attendee)]
    badges.extend(matched or ["Guest/Other"])
    return badges


def role_counts(attendees: List[AttendeeRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {role.value: 0 for role in AttendeeRole}
    for attendee in attendees:
        counts[classify_attendee_role(attendee).value] += 1
    return counts
