from __future__ import annotations

from typing import Dict, Iterable, List, Set

from models import CompanyAlias
from ports.backend import BackendPort


TABLE = "company_aliases"


class AliasesRepo:
    def __init__(self, client: BackendPort):
        self.client = client

    def list_for_company(self, company_id: str) -> List[CompanyAlias]:
        rows = self.client.table(TABLE).select("*").eq("standardized_company_id", company_id).order("alias").execute()
        return [CompanyAlias.model_validate(r) for r in rows]

    def existing(self, aliases: Iterable[str]) -> Set[str]:
        """Return which of the given alias strings are already registered (any company)."""
        wanted = list(aliases)
        if not wanted:
            return set()
        rows = self.client.table(TABLE).select("alias").in_("alias", wanted).execute()
        return {r["alias"] for r in rows}

    def insert(self, alias: str, company_id: str) -> CompanyAlias:
        rows = self.client.table(TABLE).insert({"alias": alias, "standardized_company_id": company_id}).execute()
        return CompanyAlias.model_validate(rows[0])

    def insert_many(self, aliases: List[str], company_id: str) -> List[CompanyAlias]:
        payload = [{"alias": a, "standardized_company_id": company_id} for a in aliases]
        rows = self.client.table(TABLE).insert(payload).execute()
        return [CompanyAlias.model_validate(r) for r in rows]

    def delete(self, alias_id: str) -> None:
        self.client.table(TABLE).delete().eq("id", alias_id).execute()

    def delete_alias_for_company(self, alias: str, company_id: str) -> None:
        self.client.table(TABLE).delete().eq("alias", alias).eq("standardized_company_id", company_id).execute()

    def orphaned_ids(self) -> List[str]:
        """Aliases no longer attached to any company."""
        rows = self.client.table(TABLE).select("id").is_("standardized_company_id", None).execute()
        return [r["id"] for r in rows]

    def count_by_company(self) -> Dict[str, int]:
        rows = self.client.table(TABLE).select("standardized_company_id").execute()
        counts: Dict[str, int] = {}
        for r in rows:
            key = str(r.get("standardized_company_id"))
            counts[key] = counts.get(key, 0) + 1
        return counts
