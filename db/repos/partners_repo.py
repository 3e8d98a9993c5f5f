from __future__ import annotations

from typing import Dict, List

from ports.backend import BackendPort


TABLE = "company_apax_partners"


class PartnersRepo:
    """Assignments of Apax relationship owners (attendees) to companies."""

    def __init__(self, client: BackendPort):
        self.client = client

    def attendee_ids(self, company_id: str) -> List[str]:
        rows = self.client.table(TABLE).select("attendee_id").eq("standardized_company_id", company_id).execute()
        return [r["attendee_id"] for r in rows]

    def insert_many(self, company_id: str, attendee_ids: List[str]) -> None:
        if not attendee_ids:
            return
        payload = [{"standardized_company_id": company_id, "attendee_id": a} for a in attendee_ids]
        self.client.table(TABLE).insert(payload).execute()

    def delete_for_company(self, company_id: str) -> None:
        self.client.table(TABLE).delete().eq("standardized_company_id", company_id).execute()

    def delete_assignments(self, company_id: str, attendee_ids: List[str]) -> None:
        if not attendee_ids:
            return
        self.client.table(TABLE).delete().eq("standardized_company_id", company_id).in_("attendee_id", attendee_ids).execute()

    def count_by_company(self) -> Dict[str, int]:
        rows = self.client.table(TABLE).select("standardized_company_id").execute()
        counts: Dict[str, int] = {}
        for r in rows:
            key = str(r.get("standardized_company_id"))
            counts[key] = counts.get(key, 0) + 1
        return counts
