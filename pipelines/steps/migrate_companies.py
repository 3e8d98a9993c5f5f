from __future__ import annotations

import logging
from typing import Dict, List, Set

from db.errors import BackendError
from db.repos.aliases_repo import AliasesRepo
from db.repos.attendees_repo import AttendeesRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.domains_repo import DomainsRepo
from models import StandardizationPreview
from models.migration_result import TopCompany
from pipelines.runner import RunContext
from ports.backend import BackendPort
from services.analytics import migration_frequency
from services.classifier import classify_company
from services.domain_utils import extract_domain, is_company_email_domain
from services.name_standardizer import needs_alias, standardize_company_name


logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


class LoadAttendeeCompanies:
    def __init__(self, client: BackendPort) -> None:
        self.client = client

    def run(self, ctx: RunContext) -> RunContext:
        ctx.note("Step 1: Analyzing existing company and email data...")
        ctx.attendees = AttendeesRepo(self.client).list_with_company()
        ctx.note(f"Found {len(ctx.attendees)} attendees with company data")
        return ctx


class AnalyzeCompanies:
    def __init__(self, top_n: int = 5) -> None:
        self.top_n = top_n

    def run(self, ctx: RunContext) -> RunContext:
        ctx.note("Step 2: Extracting unique company names and email domains...")
        frequency, top = migration_frequency(ctx.attendees, self.top_n)

        email_domains: Dict[str, List[str]] = {}
        for a in ctx.attendees:
            company = (a.company or "").strip()
            if not company or not a.email or "@" not in a.email:
                continue
            domain = extract_domain(a.email)
            if not is_company_email_domain(domain):
                continue
            bucket = email_domains.setdefault(standardize_company_name(company), [])
            if domain not in bucket:
                bucket.append(domain)

        ctx.meta["frequency"] = frequency
        ctx.meta["email_domains"] = email_domains
        ctx.meta["top_companies"] = [
            TopCompany(
                name=standardize_company_name(name),
                attendee_count=count,
                aliases=1 if needs_alias(name, standardize_company_name(name)) else 0,
            )
            for name, count in top
        ]
        ctx.note(f"Found {len(frequency)} unique company names")
        ctx.note(f"Extracted domains for {len(email_domains)} companies")
        ctx.note("Most common companies:")
        for name, count in top:
            ctx.note(f"   - {name}: {count} attendees")
        by_domains = sorted(email_domains.items(), key=lambda kv: -len(kv[1]))[:self.top_n]
        if by_domains:
            ctx.note("Companies with most email domains:")
            for name, domains in by_domains:
                ctx.note(f"   - {name}: {len(domains)} domains")
        return ctx


class StandardizeCompanies:
    def run(self, ctx: RunContext) -> RunContext:
        ctx.note("Step 3: Applying standardization rules and domain extraction...")
        frequency: Dict[str, int] = ctx.meta.get("frequency") or {}
        email_domains: Dict[str, List[str]] = ctx.meta.get("email_domains") or {}

        previews: List[StandardizationPreview] = []
        seen: Set[str] = set()
        standardized_count = alias_count = domain_count = 0
        for original, count in frequency.items():
            standardized = standardize_company_name(original)
            cls = classify_company(original)
            domains = list(email_domains.get(standardized, []))
            preview = StandardizationPreview(
                original=original,
                standardized=standardized,
                sector=cls.sector,
                geography=cls.geography,
                subsector=cls.subsector,
                attendee_count=count,
                needs_alias=needs_alias(original, standardized),
                domains=domains,
            )
            previews.append(preview)
            if preview.needs_alias:
                alias_count += 1
            domain_count += len(domains)
            if standardized.lower() not in seen:
                seen.add(standardized.lower())
                standardized_count += 1

        ctx.previews = previews
        ctx.meta["standardized_count"] = standardized_count
        ctx.meta["alias_count"] = alias_count
        ctx.meta["domain_count"] = domain_count
        ctx.note(f"Will create {standardized_count} standardized companies")
        ctx.note(f"Will create {alias_count} company aliases")
        ctx.note(f"Will extract {domain_count} company domains")

        if ctx.dry_run:
            ctx.note("Step 4: DRY RUN - Previewing changes (no database modifications)...")
            ctx.note("Sample standardizations:")
            for p in previews[:SAMPLE_SIZE]:
                extra = " + alias" if p.needs_alias else ""
                ctx.note(f'   "{p.original}" -> "{p.standardized}" ({p.sector}, {p.geography}){extra} + {len(p.domains)} domains')
            if len(previews) > SAMPLE_SIZE:
                ctx.note(f"   ... and {len(previews) - SAMPLE_SIZE} more companies")
            ctx.note("DRY RUN COMPLETE - Review results above")
        return ctx


class PersistStandardizedCompanies:
    """Upsert companies by name, then their aliases and email domains."""

    def __init__(self, client: BackendPort, create_aliases: bool = True) -> None:
        self.client = client
        self.create_aliases = create_aliases

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.dry_run:
            return ctx
        ctx.note("Step 4: Creating standardized companies...")
        companies = CompaniesRepo(self.client)
        aliases = AliasesRepo(self.client)
        domains_repo = DomainsRepo(self.client)

        created: Dict[str, str] = {}
        company_count = alias_count = domain_count = errors = warnings = 0
        for p in ctx.previews:
            try:
                company_id = created.get(p.standardized.lower())
                if company_id is None:
                    try:
                        company = companies.upsert_by_name({
                            "name": p.standardized,
                            "sector": p.sector,
                            "geography": p.geography,
                            "subsector": p.subsector,
                            "is_parent_company": False,
                            "parent_company_id": None,
                        })
                    except BackendError as e:
                        ctx.note(f"Error creating {p.standardized}: {e.message}")
                        errors += 1
                        continue
                    company_id = str(company.id)
                    created[p.standardized.lower()] = company_id
                    company_count += 1

                if p.needs_alias and self.create_aliases:
                    try:
                        aliases.insert(p.original, company_id)
                        alias_count += 1
                    except BackendError as e:
                        if not e.is_unique_violation():
                            ctx.note(f"Error creating alias {p.original}: {e.message}")
                            warnings += 1

                if p.domains:
                    has_primary = domains_repo.primary(company_id) is not None
                    for domain in p.domains:
                        try:
                            domains_repo.insert(company_id, domain, not has_primary, source="email_extraction")
                            has_primary = True
                            domain_count += 1
                        except BackendError as e:
                            if not e.is_unique_violation():
                                ctx.note(f"Error adding domain {domain}: {e.message}")
                                warnings += 1
            except BackendError as e:
                ctx.note(f"Error processing {p.original}: {e.message}")
                errors += 1

        ctx.meta["standardized_count"] = company_count
        ctx.meta["alias_count"] = alias_count
        ctx.meta["domain_count"] = domain_count
        ctx.meta["errors"] = errors
        ctx.meta["warnings"] = warnings
        ctx.note(f"Created {company_count} standardized companies")
        ctx.note(f"Created {alias_count} company aliases")
        ctx.note(f"Extracted {domain_count} company domains")
        return ctx


class BackfillAttendees:
    def __init__(self, client: BackendPort) -> None:
        self.client = client

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.dry_run:
            return ctx
        ctx.note("Step 5: Backfilling attendee standardized company names...")
        repo = AttendeesRepo(self.client)
        done = failed = 0
        for a in ctx.attendees:
            try:
                repo.set_standardized_name(a.id, standardize_company_name(a.company))
                done += 1
            except BackendError as e:
                failed += 1
                logger.debug(f"backfill failed for {a.id}: {e.message}", extra={"table": "attendees", "error": e.code})
        ctx.meta["attendees_backfilled"] = done
        ctx.meta["backfill_errors"] = failed
        ctx.note(f"Updated {done} attendee records")
        if failed:
            ctx.note(f"{failed} backfill errors occurred")
        return ctx


class ValidateMigration:
    def __init__(self, client: BackendPort) -> None:
        self.client = client

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.dry_run:
            return ctx
        ctx.note("Step 6: Validating data integrity...")
        orphaned = AliasesRepo(self.client).orphaned_ids()
        ctx.meta["orphaned_aliases"] = len(orphaned)
        if orphaned:
            ctx.note(f"Found {len(orphaned)} orphaned aliases")
        ctx.note("Data validation complete")
        return ctx
