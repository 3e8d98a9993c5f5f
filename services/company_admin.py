from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from config.settings import get_settings
from db.errors import BackendError
from db.repos.aliases_repo import AliasesRepo
from db.repos.attendees_repo import AttendeesRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.domains_repo import DomainsRepo
from db.repos.partners_repo import PartnersRepo
from models import AttendeeRecord, CompanyAlias, CompanyDomain, CompanyRecord
from ports.backend import BackendPort
from services.domain_utils import extract_domain


logger = logging.getLogger(__name__)


class CompanyAdminError(Exception):
    """Rejected admin operation (bad input or a violated directory rule)."""


class MergeError(CompanyAdminError):
    """A merge step failed; completed steps were rolled back as far as possible."""

    def __init__(self, message: str, step: str, compensations: List[Tuple[str, bool]]) -> None:
        super().__init__(message)
        self.step = step
        self.compensations = compensations

    @property
    def fully_rolled_back(self) -> bool:
        return all(ok for _name, ok in self.compensations)


@dataclass
class AliasSaveResult:
    saved: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


@dataclass
class MergeResult:
    source_name: str
    target_name: str
    alias_created: bool = False
    attendees_updated: int = 0
    partners_transferred: int = 0
    warnings: List[str] = field(default_factory=list)


class _Saga:
    """Ordered undo log for a multi-request operation."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._undo: List[Tuple[str, Callable[[], None]]] = []

    def register(self, step: str, undo: Callable[[], None]) -> None:
        self._undo.append((step, undo))

    def compensate(self) -> List[Tuple[str, bool]]:
        outcomes: List[Tuple[str, bool]] = []
        for step, undo in reversed(self._undo):
            try:
                undo()
                outcomes.append((step, True))
                logger.info(f"{self.name}: compensated {step}", extra={"step": step, "status": "compensated"})
            except Exception as e:
                outcomes.append((step, False))
                logger.error(f"{self.name}: compensation for {step} failed", extra={"step": step, "status": "error", "error": str(e)})
        return outcomes


def parse_bulk_aliases(text: str, company_name: str) -> List[str]:
    """One alias per line; blanks, duplicates and the company's own name are dropped."""
    out: List[str] = []
    own = (company_name or "").lower()
    for line in (text or "").split("\n"):
        alias = line.strip()
        if alias and alias.lower() != own and alias not in out:
            out.append(alias)
    return out


def eligible_partner_attendees(attendees: Iterable[AttendeeRecord]) -> List[AttendeeRecord]:
    """Confirmed Apax IP/OEP/EP attendees with both names present."""
    return [
        a for a in attendees
        if (a.registration_status in (None, "confirmed"))
        and (a.attributes.get("apaxIP") or a.attributes.get("apaxOEP") or a.is_apax_ep)
        and a.first_name and a.last_name
    ]


class CompanyAdmin:
    """Admin operations on the standardized company directory."""

    def __init__(self, client: BackendPort, max_partners: Optional[int] = None) -> None:
        self.client = client
        self.companies = CompaniesRepo(client)
        self.aliases = AliasesRepo(client)
        self.domains = DomainsRepo(client)
        self.partners = PartnersRepo(client)
        self.attendees = AttendeesRepo(client)
        self.max_partners = max_partners if max_partners is not None else get_settings().max_apax_partners

    def _require(self, company_id: str) -> CompanyRecord:
        company = self.companies.get(company_id)
        if company is None:
            raise CompanyAdminError(f"Company not found: {company_id}")
        return company

    # --- companies ---
    def save_company(self, data: Dict[str, Any], company_id: Optional[str] = None) -> CompanyRecord:
        current: Dict[str, Any] = {}
        if company_id:
            current = self._require(company_id).model_dump()
        try:
            record = CompanyRecord.model_validate({**current, **data, "id": company_id})
        except ValidationError as e:
            raise CompanyAdminError(f"Invalid company data: {e.errors()[0].get('msg')}") from e
        if not record.name.strip():
            raise CompanyAdminError("Company name is required")
        if record.is_parent_company and record.parent_company_id:
            raise CompanyAdminError("A parent company cannot itself reference a parent company")

        parent_id = record.parent_company_id
        if parent_id:
            if company_id and parent_id == company_id:
                raise CompanyAdminError("A company cannot be its own parent")
            parent = self.companies.get(parent_id)
            if parent is None:
                raise CompanyAdminError(f"Parent company not found: {parent_id}")
            if parent.parent_company_id:
                raise CompanyAdminError(f"{parent.name} is itself a subsidiary and cannot be a parent")
            if company_id and self.companies.count_children(company_id):
                raise CompanyAdminError("A company with subsidiaries cannot become a subsidiary")

        fields = record.model_dump(exclude={"id"})
        fields["name"] = record.name.strip()
        if company_id:
            fields = {k: v for k, v in fields.items() if k in data or k == "name"}
            saved = self.companies.update(company_id, fields)
            if saved is None:
                raise CompanyAdminError(f"Company not found: {company_id}")
            logger.info(f"updated company {saved.name}", extra={"table": "standardized_companies", "status": "ok"})
            return saved
        saved = self.companies.insert(fields)
        logger.info(f"created company {saved.name}", extra={"table": "standardized_companies", "status": "ok"})
        return saved

    def delete_company(self, company_id: str) -> None:
        company = self._require(company_id)
        self.companies.delete(company_id)
        logger.info(f"deleted company {company.name}", extra={"table": "standardized_companies", "status": "ok"})

    # --- aliases ---
    def list_aliases(self, company_id: str) -> List[CompanyAlias]:
        return self.aliases.list_for_company(company_id)

    def add_aliases(self, company: CompanyRecord, aliases: Iterable[str]) -> AliasSaveResult:
        result = AliasSaveResult()
        own = company.name.lower()
        candidates: List[str] = []
        for raw in aliases:
            alias = (raw or "").strip()
            if not alias or alias.lower() == own or alias in candidates:
                continue
            candidates.append(alias)
        if not candidates:
            return result

        existing = self.aliases.existing(candidates)
        to_insert = [a for a in candidates if a not in existing]
        result.skipped = [a for a in candidates if a in existing]
        if to_insert:
            self.aliases.insert_many(to_insert, str(company.id))
            result.saved = to_insert
        logger.info(
            f"aliases for {company.name}: saved={len(result.saved)} skipped={len(result.skipped)}",
            extra={"table": "company_aliases", "status": "ok"},
        )
        return result

    def delete_alias(self, alias_id: str) -> None:
        self.aliases.delete(alias_id)

    # --- domains ---
    def list_domains(self, company_id: str) -> List[CompanyDomain]:
        return self.domains.list_for_company(company_id)

    def add_domain(self, company_id: str, raw: str, source: str = "manual") -> Optional[CompanyDomain]:
        """Register a domain; the first one a company gets becomes primary.

        Returns None when the domain is already registered.
        """
        domain = extract_domain(raw)
        if not domain or "." not in domain:
            raise CompanyAdminError(f"Invalid domain: {raw!r}")
        is_primary = not self.domains.list_for_company(company_id)
        try:
            return self.domains.insert(company_id, domain, is_primary, source)
        except BackendError as e:
            if e.is_unique_violation():
                logger.warning(f"domain {domain} already registered", extra={"table": "company_domains", "error": e.code})
                return None
            raise

    def delete_domain(self, domain_id: str) -> None:
        self.domains.delete(domain_id)

    def set_primary_domain(self, company_id: str, domain_id: str) -> CompanyDomain:
        domains = self.domains.list_for_company(company_id)
        target = next((d for d in domains if d.id == domain_id), None)
        if target is None:
            raise CompanyAdminError(f"Domain {domain_id} does not belong to company {company_id}")
        if target.is_primary:
            return target

        saga = _Saga("set_primary_domain")
        try:
            for d in domains:
                if d.is_primary and d.id != domain_id:
                    self.domains.update(str(d.id), {"is_primary": False})
                    saga.register(f"unset:{d.domain}", lambda d=d: self.domains.update(str(d.id), {"is_primary": True}))
            self.domains.update(domain_id, {"is_primary": True})
        except BackendError as e:
            outcomes = saga.compensate()
            restored = all(ok for _step, ok in outcomes)
            raise CompanyAdminError(
                f"Could not switch primary domain: {e.message} (previous primary {'restored' if restored else 'NOT restored'})"
            ) from e
        logger.info(f"primary domain for {company_id} is now {target.domain}", extra={"table": "company_domains", "status": "ok"})
        return target.model_copy(update={"is_primary": True})

    # --- partners ---
    def partner_ids(self, company_id: str) -> List[str]:
        return self.partners.attendee_ids(company_id)

    def assign_partners(self, company_id: str, attendee_ids: Iterable[str]) -> List[str]:
        """Replace a company's relationship owners (at most ``max_partners``)."""
        wanted: List[str] = []
        for a in attendee_ids:
            if a and a not in wanted:
                wanted.append(a)
        if len(wanted) > self.max_partners:
            raise CompanyAdminError(f"Maximum {self.max_partners} Apax partners can be assigned per company")

        previous = self.partners.attendee_ids(company_id)
        self.partners.delete_for_company(company_id)
        try:
            self.partners.insert_many(company_id, wanted)
        except BackendError as e:
            logger.error("partner insert failed, restoring previous set", extra={"table": "company_apax_partners", "error": e.code})
            self.partners.insert_many(company_id, previous)
            raise CompanyAdminError(f"Failed to save partners: {e.message}") from e
        return wanted

    # --- merge ---
    def merge_companies(self, source_id: str, target_id: str) -> MergeResult:
        """Fold ``source`` into ``target``.

        Steps: alias the source name onto the target, repoint attendees,
        transfer partners (up to the cap), delete the source. A failing step
        undoes the completed ones in reverse order and raises MergeError.
        """
        if source_id == target_id:
            raise CompanyAdminError("Cannot merge a company into itself")
        source = self._require(source_id)
        target = self._require(target_id)
        result = MergeResult(source_name=source.name, target_name=target.name)
        saga = _Saga("merge_companies")
        step = "alias"
        try:
            try:
                self.aliases.insert(source.name, target_id)
                result.alias_created = True
                saga.register("alias", lambda: self.aliases.delete_alias_for_company(source.name, target_id))
            except BackendError as e:
                if not e.is_unique_violation():
                    raise
                result.warnings.append(f"Alias {source.name!r} already exists")
                logger.warning(f"alias {source.name} already exists", extra={"table": "company_aliases", "error": e.code})

            step = "attendees"
            affected: Dict[str, Optional[str]] = {}
            for a in self.attendees.list_by_standardized_name(source.name) + self.attendees.list_by_company(source.name):
                affected.setdefault(a.id, a.company_name_standardized)
            if affected:
                saga.register("attendees", lambda: self.attendees.restore_standardized_names(affected))
                self.attendees.rename_standardized_company(source.name, target.name)
                self.attendees.set_standardized_for_company(source.name, target.name)
            result.attendees_updated = len(affected)

            step = "partners"
            source_partners = self.partners.attendee_ids(source_id)
            if source_partners:
                target_partners = self.partners.attendee_ids(target_id)
                room = max(0, self.max_partners - len(target_partners))
                transfer = [p for p in source_partners if p not in target_partners][:room]
                if transfer:
                    self.partners.insert_many(target_id, transfer)
                    saga.register("partners:target", lambda: self.partners.delete_assignments(target_id, transfer))
                self.partners.delete_for_company(source_id)
                saga.register("partners:source", lambda: self.partners.insert_many(source_id, source_partners))
                result.partners_transferred = len(transfer)
                if len(transfer) < len(source_partners):
                    result.warnings.append(f"{len(source_partners) - len(transfer)} partner(s) not transferred (limit {self.max_partners})")

            step = "delete_source"
            self.companies.delete(source_id)
        except BackendError as e:
            outcomes = saga.compensate()
            logger.error(
                f"merge {source.name} -> {target.name} failed at {step}",
                extra={"step": step, "status": "error", "error": e.message},
            )
            raise MergeError(f"Merge failed at step '{step}': {e.message}", step=step, compensations=outcomes) from e

        logger.info(
            f"merged {source.name} into {target.name}",
            extra={"step": "merge_companies", "status": "ok", "table": "standardized_companies"},
        )
        return result

    # --- server-side set operations ---
    def sync_company_domains_from_emails(self) -> Dict[str, Any]:
        try:
            data = self.domains.sync_from_emails()
        except BackendError as e:
            if e.is_unique_violation():
                logger.warning("some domains already existed and were skipped", extra={"table": "company_domains", "error": e.code})
                return {"message": "Some domains already exist and were skipped", "skipped_duplicates": True}
            raise
        if isinstance(data, list):
            data = data[0] if data else {}
        return data if isinstance(data, dict) else {"result": data}

    def extract_domains_from_attendee_emails(self) -> Any:
        return self.domains.extract_from_attendee_emails() or []

    def get_company_statistics(self) -> Any:
        return self.companies.company_statistics() or {}

    def get_companies_by_attendee_count(self, limit_count: int = 1000) -> List[Dict[str, Any]]:
        return self.companies.companies_by_attendee_count(limit_count)
