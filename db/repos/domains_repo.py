from __future__ import annotations

from typing import Any, Dict, List, Optional

from models import CompanyDomain
from ports.backend import BackendPort


TABLE = "company_domains"


class DomainsRepo:
    def __init__(self, client: BackendPort):
        self.client = client

    def list_for_company(self, company_id: str) -> List[CompanyDomain]:
        """Domains for a company, primary first."""
        rows = (
            self.client.table(TABLE)
            .select("*")
            .eq("standardized_company_id", company_id)
            .order("is_primary", desc=True)
            .order("domain")
            .execute()
        )
        return [CompanyDomain.model_validate(r) for r in rows]

    def insert(self, company_id: str, domain: str, is_primary: bool, source: str = "manual") -> CompanyDomain:
        rows = self.client.table(TABLE).insert({
            "standardized_company_id": company_id,
            "domain": domain,
            "is_primary": is_primary,
            "source": source,
        }).execute()
        return CompanyDomain.model_validate(rows[0])

    def update(self, domain_id: str, fields: Dict[str, Any]) -> None:
        self.client.table(TABLE).update(fields).eq("id", domain_id).execute()

    def update_logo_cache(self, company_id: str, domain: str, logo_url: str, fetched_at: str) -> None:
        (
            self.client.table(TABLE)
            .update({"logo_url": logo_url, "logo_last_fetched": fetched_at})
            .eq("standardized_company_id", company_id)
            .eq("domain", domain)
            .execute()
        )

    def primary(self, company_id: str) -> Optional[CompanyDomain]:
        rows = self.client.table(TABLE).select("*").eq("standardized_company_id", company_id).eq("is_primary", True).execute()
        return CompanyDomain.model_validate(rows[0]) if rows else None

    # --- Server-side set operations (opaque RPCs) ---
    def sync_from_emails(self) -> Any:
        return self.client.rpc("sync_company_domains_from_emails")

    def extract_from_attendee_emails(self) -> Any:
        return self.client.rpc("extract_domains_from_attendee_emails")

    def delete(self, domain_id: str) -> None:
        self.client.table(TABLE).delete().eq("id", domain_id).execute()
