from __future__ import annotations

from typing import Optional

from models import MigrationResult
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import (
    AnalyzeCompanies,
    BackfillAttendees,
    LoadAttendeeCompanies,
    PersistStandardizedCompanies,
    StandardizeCompanies,
    ValidateMigration,
)
from ports.backend import BackendPort


def run_company_migration(
    client: BackendPort,
    dry_run: bool = True,
    create_aliases: bool = True,
    backfill: bool = True,
    validate: bool = True,
    top_n: Optional[int] = None,
) -> MigrationResult:
    """Standardize raw attendee company strings into the company directory.

    In dry-run mode nothing is written; the returned counts are what an
    applied run would create. Attendees are backfilled only when requested.
    """
    if top_n is None:
        from config.settings import get_settings
        top_n = get_settings().analytics_top_n

    steps = [
        LoadAttendeeCompanies(client),
        AnalyzeCompanies(top_n=top_n),
        StandardizeCompanies(),
    ]
    if not dry_run:
        steps.append(PersistStandardizedCompanies(client, create_aliases=create_aliases))
        if backfill:
            steps.append(BackfillAttendees(client))
        if validate:
            steps.append(ValidateMigration(client))

    ctx = Pipeline(steps).run(RunContext(dry_run=dry_run))
    meta = ctx.meta

    standardized = int(meta.get("standardized_count") or 0)
    domains = int(meta.get("domain_count") or 0)
    if dry_run:
        attendees_backfilled = len(ctx.attendees) if backfill else 0
        # Estimate: one logo attempt per company that has at least one domain
        logos = min(domains, standardized)
    else:
        attendees_backfilled = int(meta.get("attendees_backfilled") or 0)
        logos = 0

    return MigrationResult(
        dry_run=dry_run,
        total_companies=len(ctx.previews),
        standardized_companies=standardized,
        aliases_created=int(meta.get("alias_count") or 0) if create_aliases else 0,
        domains_extracted=domains,
        logos_updated=logos,
        attendees_backfilled=attendees_backfilled,
        backfill_errors=int(meta.get("backfill_errors") or 0),
        orphaned_aliases=int(meta.get("orphaned_aliases") or 0),
        errors=int(meta.get("errors") or 0),
        warnings=int(meta.get("warnings") or 0),
        top_companies=list(meta.get("top_companies") or []),
        log=list(ctx.log),
    )
