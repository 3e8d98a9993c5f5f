from __future__ import annotations

from typing import Any, Dict, List, Optional

from models import CompanyRecord
from ports.backend import BackendPort


TABLE = "standardized_companies"


class CompaniesRepo:
    def __init__(self, client: BackendPort):
        self.client = client

    def list_all(self, columns: str = "*") -> List[CompanyRecord]:
        rows = self.client.table(TABLE).select(columns).order("name").execute()
        return [CompanyRecord.model_validate(r) for r in rows]

    def get(self, company_id: str) -> Optional[CompanyRecord]:
        rows = self.client.table(TABLE).select("*").eq("id", company_id).limit(1).execute()
        return CompanyRecord.model_validate(rows[0]) if rows else None

    def find_by_name(self, name: str) -> Optional[CompanyRecord]:
        rows = self.client.table(TABLE).select("*").eq("name", name).limit(1).execute()
        return CompanyRecord.model_validate(rows[0]) if rows else None

    def insert(self, fields: Dict[str, Any]) -> CompanyRecord:
        rows = self.client.table(TABLE).insert(fields).execute()
        return CompanyRecord.model_validate(rows[0])

    def update(self, company_id: str, fields: Dict[str, Any]) -> Optional[CompanyRecord]:
        rows = self.client.table(TABLE).update(fields).eq("id", company_id).execute()
        return CompanyRecord.model_validate(rows[0]) if rows else None

    def upsert_by_name(self, fields: Dict[str, Any]) -> CompanyRecord:
        """Insert or update a company using its canonical name as the stable key."""
        rows = self.client.table(TABLE).upsert(fields, on_conflict="name").execute()
        return CompanyRecord.model_validate(rows[0])

    def delete(self, company_id: str) -> None:
        self.client.table(TABLE).delete().eq("id", company_id).execute()

    def update_logo(self, company_id: str, logo_url: str) -> None:
        self.client.table(TABLE).update({"logo": logo_url}).eq("id", company_id).execute()

    def count_children(self, company_id: str) -> int:
        rows = self.client.table(TABLE).select("id").eq("parent_company_id", company_id).execute()
        return len(rows)

    # --- Server-side set operations (opaque RPCs) ---
    def company_statistics(self) -> Any:
        return self.client.rpc("get_company_statistics")

    def companies_by_attendee_count(self, limit_count: int = 1000) -> List[Dict[str, Any]]:
        data = self.client.rpc("get_companies_by_attendee_count", {"limit_count": limit_count})
        return list(data or [])
