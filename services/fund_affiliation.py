from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from db.errors import BackendError
from db.repos.attendees_repo import AttendeesRepo
from ports.backend import BackendPort


logger = logging.getLogger(__name__)


def _variants(canonical: str) -> List[str]:
    title = canonical.capitalize()
    return [
        canonical,
        title,
        canonical.upper(),
        f"Fund:{canonical}",
        f"Fund: {canonical}",
        f"Fund: {title}",
        f"Fund: {title} Funds",
        f"Fund:{title}",
        f"Fund:{title} Funds",
        f"{canonical} funds",
        f"{title} Funds",
    ]


# (canonical, display label, accepted spellings)
FUND_AFFILIATIONS: List[Tuple[str, str, List[str]]] = [
    ("buyout", "Buyout Funds", _variants("buyout")),
    ("digital", "Digital Funds", _variants("digital")),
    ("impact", "Impact Funds", _variants("impact")),
    ("other", "Other Funds", _variants("other")),
]


def standardize_fund_affiliation(value: Any) -> Optional[str]:
    """Canonical fund key ('buyout', 'digital', 'impact', 'other') or None for blanks.

    Unrecognised non-blank values map to 'other'.
    """
    if not value or not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    for canonical, _label, variants in FUND_AFFILIATIONS:
        if trimmed in variants:
            return canonical
    lower = trimmed.lower()
    for canonical, _label, variants in FUND_AFFILIATIONS:
        if any(v.lower() == lower for v in variants):
            return canonical
    return "other"


def display_label(canonical: Optional[str]) -> str:
    for key, label, _ in FUND_AFFILIATIONS:
        if key == canonical:
            return label
    return ""


def needs_standardization(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return standardize_fund_affiliation(value) != value


def standardize_attendee_attributes(attributes: Any) -> Any:
    if not attributes or not isinstance(attributes, dict):
        return attributes
    out = dict(attributes)
    if attributes.get("fundAffiliation"):
        canonical = standardize_fund_affiliation(attributes["fundAffiliation"])
        if canonical:
            out["fundAffiliation"] = canonical
        else:
            out.pop("fundAffiliation", None)
    return out


def fund_affiliation_status(client: BackendPort) -> Dict[str, Any]:
    repo = AttendeesRepo(client)
    attendees = repo.list_with_attributes()
    needs, done = 0, 0
    for a in attendees:
        value = a.attributes.get("fundAffiliation")
        if not value:
            continue
        if needs_standardization(value):
            needs += 1
        else:
            done += 1
    return {
        "total": len(attendees),
        "needs_migration": needs,
        "already_standardized": done,
        "requires_migration": needs > 0,
    }


def migrate_fund_affiliations(client: BackendPort, dry_run: bool = False) -> Dict[str, Any]:
    """Rewrite attendee fundAffiliation attributes to their canonical key.

    Per-attendee write failures are counted, not raised.
    """
    repo = AttendeesRepo(client)
    updated, errors = 0, 0
    for a in repo.list_with_attributes():
        current = a.attributes.get("fundAffiliation")
        if not current or not needs_standardization(current):
            continue
        canonical = standardize_fund_affiliation(current)
        if not canonical or canonical == current:
            continue
        if dry_run:
            updated += 1
            continue
        try:
            repo.update_attributes(a.id, {**a.attributes, "fundAffiliation": canonical})
            updated += 1
            logger.debug(f"fund affiliation {current!r} -> {canonical!r}", extra={"table": "attendees"})
        except BackendError as e:
            errors += 1
            logger.warning(f"attendee {a.id} not updated: {e.message}", extra={"table": "attendees", "error": e.code})
    message = f"Migration completed: {updated} records updated, {errors} errors"
    logger.info(message, extra={"step": "fund_affiliation", "status": "ok" if not errors else "partial"})
    return {"updated": updated, "errors": errors, "message": message, "dry_run": dry_run}
