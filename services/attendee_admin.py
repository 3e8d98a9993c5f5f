from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from db.repos.attendees_repo import AttendeesRepo
from models import AttendeeRecord
from ports.backend import BackendPort
from services.fund_affiliation import standardize_attendee_attributes
from services.name_standardizer import standardize_company_name


logger = logging.getLogger(__name__)


EDITABLE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "email",
    "title",
    "company",
    "company_name_standardized",
    "registration_status",
    "hotel_selection",
    "selected_breakouts",
    "dining_selections",
    "spouse_details",
    "is_spouse",
})

# Legacy boolean columns mirrored from role attributes on every edit
_LEGACY_FLAGS = {"cfo": "is_cfo", "apaxEP": "is_apax_ep", "spouse": "is_spouse"}


class AttendeeAdminError(Exception):
    """Rejected attendee edit (unknown attendee or field)."""


def merge_attributes(current: AttendeeRecord, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply attribute changes over the stored ones and standardize the result.

    Legacy columns seed their attribute when it is absent; a ``None`` value
    removes the key.
    """
    merged = dict(current.attributes)
    for attr, column in _LEGACY_FLAGS.items():
        if attr not in merged and getattr(current, column):
            merged[attr] = True
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return standardize_attendee_attributes(merged)


class AttendeeAdmin:
    """Admin edits to attendee rows."""

    def __init__(self, client: BackendPort) -> None:
        self.attendees = AttendeesRepo(client)

    def get_attendee(self, attendee_id: str) -> AttendeeRecord:
        attendee = self.attendees.get(attendee_id)
        if attendee is None:
            raise AttendeeAdminError(f"Attendee not found: {attendee_id}")
        return attendee

    def update_attendee(
        self,
        attendee_id: str,
        fields: Optional[Mapping[str, Any]] = None,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> AttendeeRecord:
        fields = dict(fields or {})
        unknown = sorted(set(fields) - EDITABLE_FIELDS)
        if unknown:
            raise AttendeeAdminError(f"Fields cannot be edited: {', '.join(unknown)}")
        if not fields and not attributes:
            raise AttendeeAdminError("Nothing to update")

        current = self.get_attendee(attendee_id)
        updates: Dict[str, Any] = dict(fields)

        if "company" in fields and "company_name_standardized" not in fields:
            company = (fields["company"] or "").strip()
            updates["company"] = company or None
            updates["company_name_standardized"] = standardize_company_name(company) if company else None

        if attributes is not None:
            merged = merge_attributes(current, attributes)
            updates["attributes"] = merged
            updates["is_cfo"] = bool(merged.get("cfo"))
            updates["is_apax_ep"] = bool(merged.get("apaxEP"))
            if "is_spouse" not in fields:
                updates["is_spouse"] = bool(merged.get("spouse"))

        updates["updated_at"] = datetime.now(timezone.utc).isoformat()
        saved = self.attendees.update(attendee_id, updates)
        if saved is None:
            raise AttendeeAdminError(f"Attendee not found: {attendee_id}")
        logger.info(
            f"updated attendee {saved.full_name or attendee_id}",
            extra={"table": "attendees", "status": "ok"},
        )
        return saved

    def delete_attendee(self, attendee_id: str) -> None:
        attendee = self.get_attendee(attendee_id)
        self.attendees.delete(attendee_id)
        logger.info(f"deleted attendee {attendee.full_name or attendee_id}", extra={"table": "attendees", "status": "ok"})
