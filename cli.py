import argparse
import json
import sys
import uuid
from pathlib import Path

import logging
from config.settings import get_settings
from db.connection import get_client
from db.errors import BackendError
from db.repos.attendees_repo import AttendeesRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.aliases_repo import AliasesRepo
from db.repos.partners_repo import PartnersRepo
from pipelines.migrate_companies import run_company_migration
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import BuildEventAnalytics, LoadEventSnapshot
from services.attendee_admin import AttendeeAdmin, AttendeeAdminError
from services.attendee_roles import classify_attendee_role
from services.analytics import company_directory_stats
from services.classifier import classify_company
from services.company_admin import (
    CompanyAdmin,
    CompanyAdminError,
    MergeError,
    eligible_partner_attendees,
    parse_bulk_aliases,
)
from services.csv_export import (
    export_aliases_csv,
    export_companies_csv,
    export_domains_csv,
    export_filename,
    parse_alias_csv,
    parse_domain_csv,
    write_csv,
)
from services.fund_affiliation import fund_affiliation_status, migrate_fund_affiliations
from services.logo_resolver import LogoResolver, batch_update_company_logos
from services.name_standardizer import standardize_company_name
from services.reporting import (
    print_analytics_summary,
    print_logo_batch_summary,
    print_migration_summary,
    print_sponsor_report,
    render_migration_report,
)
from utils.logging_setup import init_logging


logger = logging.getLogger("cli")


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _looks_like_id(ref: str) -> bool:
    try:
        uuid.UUID(ref)
    except ValueError:
        return False
    return True


def _company(admin: CompanyAdmin, ref: str):
    """Look a company up by its exact name, then by id when the reference is a uuid."""
    company = admin.companies.find_by_name(ref)
    if company is None and _looks_like_id(ref):
        company = admin.companies.get(ref)
    if company is None:
        raise CompanyAdminError(f"Company not found: {ref}")
    return company


# --- offline helpers ---

def cmd_standardize(args):
    for raw in args.names:
        print(f"{raw} -> {standardize_company_name(raw)}")


def cmd_classify(args):
    for raw in args.names:
        c = classify_company(raw)
        print(f"{raw}: sector={c.sector} geography={c.geography} subsector={c.subsector}")


def cmd_resolve_logo(args):
    result = LogoResolver().resolve(args.domains)
    _print_json(result.model_dump())


# --- migration ---

def cmd_migrate_companies(args):
    client = get_client()
    result = run_company_migration(
        client,
        dry_run=not args.apply,
        create_aliases=not args.no_aliases,
        backfill=not args.no_backfill,
        validate=not args.no_validate,
    )
    if args.verbose:
        for line in result.log:
            print(line)
    print_migration_summary(result)
    if args.report:
        path = Path(args.report)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_migration_report(result), encoding="utf-8")
        print(f"Report written to {path}")


def cmd_fund_affiliation(args):
    client = get_client()
    if args.action == "status":
        _print_json(fund_affiliation_status(client))
        return
    outcome = migrate_fund_affiliations(client, dry_run=args.dry_run)
    print(outcome["message"] + (" (dry run)" if outcome["dry_run"] else ""))


# --- analytics ---

def _analytics_ctx(include_sponsor_report: bool = False) -> RunContext:
    client = get_client()
    pipeline = Pipeline([
        LoadEventSnapshot(client),
        BuildEventAnalytics(include_sponsor_report=include_sponsor_report),
    ])
    return pipeline.run(RunContext(dry_run=False))


def cmd_analytics(args):
    ctx = _analytics_ctx()
    data = ctx.meta["analytics"]
    if args.json:
        _print_json(data.model_dump())
    else:
        print_analytics_summary(data, top_n=args.top or get_settings().analytics_top_n)


def cmd_sponsor_report(args):
    ctx = _analytics_ctx(include_sponsor_report=True)
    report = ctx.meta["sponsor_report"]
    if args.json:
        _print_json(report.model_dump())
    else:
        print_sponsor_report(report)


def cmd_directory_stats(args):
    client = get_client()
    stats = company_directory_stats(
        CompaniesRepo(client).list_all(),
        AliasesRepo(client).count_by_company(),
        PartnersRepo(client).count_by_company(),
    )
    _print_json(stats.model_dump())


# --- logos ---

def cmd_update_logos(args):
    client = get_client()
    repo = CompaniesRepo(client)
    if args.company:
        companies = [_company(CompanyAdmin(client), args.company)]
    else:
        companies = repo.list_all()
        if args.missing_only:
            companies = [c for c in companies if not c.logo]

    def _progress(cur, total):
        print(f"[{cur}/{total}] logos processed")

    outcome = batch_update_company_logos(
        client, companies, on_progress=_progress if args.progress else None
    )
    print_logo_batch_summary(outcome)


# --- attendees ---

_ATTENDEE_FIELD_ARGS = {
    "first_name": "first_name",
    "last_name": "last_name",
    "email": "email",
    "title": "title",
    "company": "company",
    "standardized_company": "company_name_standardized",
    "status": "registration_status",
    "hotel": "hotel_selection",
}


def _attribute_value(text: str):
    lowered = text.strip().lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    return text


def _attribute_changes(args):
    changes = {}
    for item in args.set_attr or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise AttendeeAdminError(f"Expected KEY=VALUE, got {item!r}")
        changes[key.strip()] = _attribute_value(value)
    for key in args.unset_attr or []:
        changes[key] = None
    if args.fund_affiliation is not None:
        changes["fundAffiliation"] = args.fund_affiliation or None
    return changes


def cmd_attendee(args):
    admin = AttendeeAdmin(get_client())
    if args.action == "show":
        _print_json(admin.get_attendee(args.attendee_id).model_dump())
        return
    if args.action == "delete":
        admin.delete_attendee(args.attendee_id)
        print(f"Deleted attendee {args.attendee_id}")
        return
    fields = {
        column: getattr(args, arg)
        for arg, column in _ATTENDEE_FIELD_ARGS.items()
        if getattr(args, arg) is not None
    }
    attributes = _attribute_changes(args)
    saved = admin.update_attendee(args.attendee_id, fields, attributes or None)
    print(f"Updated {saved.full_name or saved.id}: company={saved.company or '-'} "
          f"standardized={saved.company_name_standardized or '-'} role={classify_attendee_role(saved).value}")


# --- directory admin ---

def cmd_merge_companies(args):
    admin = CompanyAdmin(get_client())
    source = _company(admin, args.source)
    target = _company(admin, args.target)
    try:
        result = admin.merge_companies(str(source.id), str(target.id))
    except MergeError as e:
        undone = ", ".join(f"{step}={'ok' if ok else 'FAILED'}" for step, ok in e.compensations) or "nothing to undo"
        print(f"Rollback: {undone}")
        raise
    print(f"Merged {result.source_name} into {result.target_name}: "
          f"attendees={result.attendees_updated} partners={result.partners_transferred} "
          f"alias={'created' if result.alias_created else 'existing'}")
    for w in result.warnings:
        print(f"Warning: {w}")


def cmd_set_primary_domain(args):
    admin = CompanyAdmin(get_client())
    company = _company(admin, args.company)
    domain = admin.set_primary_domain(str(company.id), args.domain_id)
    print(f"Primary domain for {company.name}: {domain.domain}")


def cmd_assign_partners(args):
    admin = CompanyAdmin(get_client())
    company = _company(admin, args.company)
    assigned = admin.assign_partners(str(company.id), args.attendee_ids)
    print(f"Assigned {len(assigned)} Apax partner(s) to {company.name}")


def cmd_eligible_partners(args):
    for a in eligible_partner_attendees(AttendeesRepo(get_client()).list_confirmed()):
        print(f"{a.id}\t{a.full_name}\t{a.company or ''}")


def cmd_aliases(args):
    client = get_client()
    admin = CompanyAdmin(client)
    if args.action == "import":
        pairs = parse_alias_csv(Path(args.file).read_text(encoding="utf-8"))
        by_company = {}
        for company_name, alias in pairs:
            by_company.setdefault(company_name, []).append(alias)
        for company_name, aliases in by_company.items():
            company = admin.companies.find_by_name(company_name)
            if company is None:
                print(f"Skipping unknown company: {company_name}")
                continue
            res = admin.add_aliases(company, aliases)
            print(f"{company.name}: saved={len(res.saved)} skipped={len(res.skipped)}")
        return

    company = _company(admin, args.company)
    if args.action == "add":
        aliases = list(args.aliases or [])
        if args.file:
            aliases += parse_bulk_aliases(Path(args.file).read_text(encoding="utf-8"), company.name)
        res = admin.add_aliases(company, aliases)
        print(f"Saved {len(res.saved)} alias(es)")
        if res.skipped:
            print(f"Skipped (already exist): {', '.join(res.skipped)}")
    elif args.action == "list":
        for a in admin.list_aliases(str(company.id)):
            print(f"{a.id}\t{a.alias}")
    elif args.action == "export":
        content = export_aliases_csv(company.name, admin.list_aliases(str(company.id)))
        path = write_csv(content, export_filename(company.name, "aliases"), args.out_dir)
        print(f"Wrote {path}")


def cmd_domains(args):
    client = get_client()
    admin = CompanyAdmin(client)
    if args.action == "sync":
        _print_json(admin.sync_company_domains_from_emails())
        return
    if args.action == "extract":
        _print_json(admin.extract_domains_from_attendee_emails())
        return
    if args.action == "import":
        added = skipped = 0
        for company_name, domain in parse_domain_csv(Path(args.file).read_text(encoding="utf-8")):
            company = admin.companies.find_by_name(company_name)
            if company is None:
                print(f"Skipping unknown company: {company_name}")
                skipped += 1
                continue
            if admin.add_domain(str(company.id), domain) is None:
                skipped += 1
            else:
                added += 1
        print(f"Imported {added} domain(s), skipped {skipped}")
        return

    company = _company(admin, args.company)
    if args.action == "add":
        for raw in args.domains or []:
            d = admin.add_domain(str(company.id), raw)
            if d is None:
                print(f"Already registered: {raw}")
            else:
                print(f"Added {d.domain}{' (primary)' if d.is_primary else ''}")
    elif args.action == "list":
        for d in admin.list_domains(str(company.id)):
            print(f"{d.id}\t{d.domain}\t{'primary' if d.is_primary else ''}\t{d.source}")
    elif args.action == "export":
        content = export_domains_csv(company.name, admin.list_domains(str(company.id)))
        path = write_csv(content, export_filename(company.name, "domains"), args.out_dir)
        print(f"Wrote {path}")


def cmd_export_companies(args):
    companies = CompaniesRepo(get_client()).list_all()
    path = write_csv(export_companies_csv(companies), args.filename, args.out_dir)
    print(f"Exported {len(companies)} companies to {path}")


def cmd_company_stats(args):
    _print_json(CompanyAdmin(get_client()).get_company_statistics())


def cmd_companies_by_attendees(args):
    rows = CompanyAdmin(get_client()).get_companies_by_attendee_count(args.limit)
    _print_json(rows)


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Event admin CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_std = sub.add_parser("standardize", help="Show the standardized form of company names")
    p_std.add_argument("names", nargs="+")
    p_std.set_defaults(func=cmd_standardize)

    p_cls = sub.add_parser("classify", help="Show sector/geography/subsector for company names")
    p_cls.add_argument("names", nargs="+")
    p_cls.set_defaults(func=cmd_classify)

    p_mig = sub.add_parser("migrate-companies", help="Standardize attendee companies into the directory (dry run by default)")
    p_mig.add_argument("--apply", action="store_true", help="Write changes (default is a dry run)")
    p_mig.add_argument("--no-aliases", action="store_true", help="Do not create aliases")
    p_mig.add_argument("--no-backfill", action="store_true", help="Do not backfill attendee standardized names")
    p_mig.add_argument("--no-validate", action="store_true", help="Skip the orphaned alias check")
    p_mig.add_argument("--report", default=None, help="Write a plain-text report to this path")
    p_mig.add_argument("--verbose", "-v", action="store_true", help="Print the full migration log")
    p_mig.set_defaults(func=cmd_migrate_companies)

    p_an = sub.add_parser("analytics", help="Event analytics dashboard")
    p_an.add_argument("--json", action="store_true")
    p_an.add_argument("--top", type=int, default=None, help="Companies shown per bucket")
    p_an.set_defaults(func=cmd_analytics)

    p_sp = sub.add_parser("sponsor-report", help="Companies and attendees grouped by fund category")
    p_sp.add_argument("--json", action="store_true")
    p_sp.set_defaults(func=cmd_sponsor_report)

    p_ds = sub.add_parser("directory-stats", help="Company directory totals")
    p_ds.set_defaults(func=cmd_directory_stats)

    p_rl = sub.add_parser("resolve-logo", help="Find a logo for one or more domains")
    p_rl.add_argument("domains", nargs="+")
    p_rl.set_defaults(func=cmd_resolve_logo)

    p_ul = sub.add_parser("update-logos", help="Resolve and store company logos")
    p_ul.add_argument("--company", default=None, help="Company id or exact name (default: all)")
    p_ul.add_argument("--missing-only", action="store_true", help="Only companies without a logo")
    p_ul.add_argument("--progress", action="store_true")
    p_ul.set_defaults(func=cmd_update_logos)

    p_at = sub.add_parser("attendee", help="Show, edit or delete an attendee")
    p_at.add_argument("action", choices=["show", "edit", "delete"])
    p_at.add_argument("attendee_id")
    p_at.add_argument("--first-name", dest="first_name", default=None)
    p_at.add_argument("--last-name", dest="last_name", default=None)
    p_at.add_argument("--email", default=None)
    p_at.add_argument("--title", default=None)
    p_at.add_argument("--company", default=None, help="Raw company; re-standardized unless --standardized-company is given")
    p_at.add_argument("--standardized-company", dest="standardized_company", default=None)
    p_at.add_argument("--status", default=None, help="Registration status")
    p_at.add_argument("--hotel", default=None, help="Hotel id")
    p_at.add_argument("--set", dest="set_attr", action="append", metavar="KEY=VALUE", help="Set a role attribute (repeatable)")
    p_at.add_argument("--unset", dest="unset_attr", action="append", metavar="KEY", help="Remove a role attribute (repeatable)")
    p_at.add_argument("--fund-affiliation", dest="fund_affiliation", default=None)
    p_at.set_defaults(func=cmd_attendee)

    p_mc = sub.add_parser("merge-companies", help="Merge SOURCE into TARGET")
    p_mc.add_argument("source")
    p_mc.add_argument("target")
    p_mc.set_defaults(func=cmd_merge_companies)

    p_pd = sub.add_parser("set-primary-domain", help="Make a domain the company's primary")
    p_pd.add_argument("company")
    p_pd.add_argument("domain_id")
    p_pd.set_defaults(func=cmd_set_primary_domain)

    p_ap = sub.add_parser("assign-partners", help="Replace a company's Apax partners")
    p_ap.add_argument("company")
    p_ap.add_argument("attendee_ids", nargs="*")
    p_ap.set_defaults(func=cmd_assign_partners)

    p_ep = sub.add_parser("eligible-partners", help="List attendees that can be assigned as Apax partners")
    p_ep.set_defaults(func=cmd_eligible_partners)

    p_al = sub.add_parser("aliases", help="Manage company aliases")
    p_al.add_argument("action", choices=["add", "list", "export", "import"])
    p_al.add_argument("company", nargs="?", default=None)
    p_al.add_argument("aliases", nargs="*")
    p_al.add_argument("--file", default=None, help="Newline-separated aliases (add) or CSV (import)")
    p_al.add_argument("--out-dir", default=None)
    p_al.set_defaults(func=cmd_aliases)

    p_dm = sub.add_parser("domains", help="Manage company domains")
    p_dm.add_argument("action", choices=["add", "list", "export", "import", "sync", "extract"])
    p_dm.add_argument("company", nargs="?", default=None)
    p_dm.add_argument("domains", nargs="*")
    p_dm.add_argument("--file", default=None, help="CSV for import")
    p_dm.add_argument("--out-dir", default=None)
    p_dm.set_defaults(func=cmd_domains)

    p_ex = sub.add_parser("export-companies", help="Export the company directory to CSV")
    p_ex.add_argument("--filename", default="companies.csv")
    p_ex.add_argument("--out-dir", default=None)
    p_ex.set_defaults(func=cmd_export_companies)

    p_fa = sub.add_parser("fund-affiliation", help="Fund affiliation status/migration")
    p_fa.add_argument("action", choices=["status", "migrate"])
    p_fa.add_argument("--dry-run", action="store_true")
    p_fa.set_defaults(func=cmd_fund_affiliation)

    p_cs = sub.add_parser("company-stats", help="Server-side company statistics")
    p_cs.set_defaults(func=cmd_company_stats)

    p_cba = sub.add_parser("companies-by-attendees", help="Companies ranked by attendee count")
    p_cba.add_argument("--limit", type=int, default=1000)
    p_cba.set_defaults(func=cmd_companies_by_attendees)

    args = parser.parse_args()
    if args.cmd in ("aliases", "domains") and args.action in ("add", "list", "export") and not args.company:
        parser.error(f"{args.cmd} {args.action} requires a company")
    if args.cmd == "aliases" and args.action == "import" and not args.file:
        parser.error("aliases import requires --file")
    if args.cmd == "domains" and args.action == "import" and not args.file:
        parser.error("domains import requires --file")
    try:
        args.func(args)
    except (BackendError, CompanyAdminError, AttendeeAdminError, RuntimeError) as e:
        logger.error(f"{args.cmd} failed", extra={"step": args.cmd, "status": "error", "error": str(e)})
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
