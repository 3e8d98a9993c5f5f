from __future__ import annotations

from typing import Any, Dict, List, Optional

from models import AttendeeRecord
from ports.backend import BackendPort


TABLE = "attendees"

ANALYTICS_COLUMNS = (
    "id, first_name, last_name, email, title, registration_status, selected_breakouts, "
    "dining_selections, hotel_selection, spouse_details, company, company_name_standardized, "
    "attributes, is_apax_ep, is_cfo, is_spouse"
)


class AttendeesRepo:
    def __init__(self, client: BackendPort):
        self.client = client

    def get(self, attendee_id: str) -> Optional[AttendeeRecord]:
        rows = self.client.table(TABLE).select("*").eq("id", attendee_id).limit(1).execute()
        return AttendeeRecord.model_validate(rows[0]) if rows else None

    def update(self, attendee_id: str, fields: Dict[str, Any]) -> Optional[AttendeeRecord]:
        rows = self.client.table(TABLE).update(fields).eq("id", attendee_id).execute()
        return AttendeeRecord.model_validate(rows[0]) if rows else None

    def delete(self, attendee_id: str) -> None:
        self.client.table(TABLE).delete().eq("id", attendee_id).execute()

    def list_confirmed(self, columns: str = ANALYTICS_COLUMNS) -> List[AttendeeRecord]:
        rows = (
            self.client.table(TABLE)
            .select(columns)
            .eq("registration_status", "confirmed")
            .order("first_name")
            .execute()
        )
        return [AttendeeRecord.model_validate(r) for r in rows]

    def list_with_company(self) -> List[AttendeeRecord]:
        """Attendees whose free-text company is neither null nor empty."""
        rows = (
            self.client.table(TABLE)
            .select("id, company, first_name, last_name, email")
            .not_is("company", None)
            .neq("company", "")
            .execute()
        )
        return [AttendeeRecord.model_validate(r) for r in rows]

    def list_with_attributes(self) -> List[AttendeeRecord]:
        rows = self.client.table(TABLE).select("id, attributes").not_is("attributes", None).execute()
        return [AttendeeRecord.model_validate(r) for r in rows]

    def list_by_standardized_name(self, name: str) -> List[AttendeeRecord]:
        rows = self.client.table(TABLE).select("id, company, company_name_standardized").eq("company_name_standardized", name).execute()
        return [AttendeeRecord.model_validate(r) for r in rows]

    def list_by_company(self, name: str) -> List[AttendeeRecord]:
        rows = self.client.table(TABLE).select("id, company, company_name_standardized").eq("company", name).execute()
        return [AttendeeRecord.model_validate(r) for r in rows]

    def set_standardized_name(self, attendee_id: str, name: str) -> None:
        self.client.table(TABLE).update({"company_name_standardized": name}).eq("id", attendee_id).execute()

    def rename_standardized_company(self, old_name: str, new_name: str) -> int:
        rows = (
            self.client.table(TABLE)
            .update({"company_name_standardized": new_name})
            .eq("company_name_standardized", old_name)
            .execute()
        )
        return len(rows)

    def set_standardized_for_company(self, raw_company: str, name: str) -> int:
        """Point every attendee whose raw company equals ``raw_company`` at ``name``."""
        rows = (
            self.client.table(TABLE)
            .update({"company_name_standardized": name})
            .eq("company", raw_company)
            .execute()
        )
        return len(rows)

    def restore_standardized_names(self, previous: Dict[str, Any]) -> None:
        """Write back per-attendee standardized names captured before a bulk update."""
        for attendee_id, name in previous.items():
            self.client.table(TABLE).update({"company_name_standardized": name}).eq("id", attendee_id).execute()

    def update_attributes(self, attendee_id: str, attributes: Dict[str, Any]) -> None:
        self.client.table(TABLE).update({"attributes": attributes}).eq("id", attendee_id).execute()
