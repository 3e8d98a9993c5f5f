from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from models import EventAnalytics, MigrationResult, SponsorReport


def print_analytics_summary(data: EventAnalytics, top_n: int = 5) -> None:
    """Print the event dashboard as plain text."""
    cat = data.attendees_by_company_category
    apax = cat.apax_attendees

    print("\n" + "="*60)
    print("EVENT ANALYTICS - SUMMARY")
    print("="*60)
    print(f"Total Registrations: {data.total_registrations}")
    print(f"Spouses: {data.total_spouses}")
    print(f"Software Day: {data.software_day}")
    print(f"Track A (Digital): {data.track_a_digital}")
    print(f"Track B (CFO/Ops): {data.track_b_cfo_ops}")
    print(f"Welcome Dinner: {data.welcome_dinner}")
    print(f"Maple & Ash: {data.maple_ash}")
    print()
    print("Hotels:")
    print(f"  Four Seasons: {data.four_seasons_count}")
    print(f"  Park Hyatt: {data.park_hyatt_count}")
    print(f"  Own Arrangements: {data.making_own_arrangements_count}")
    print()
    print("Portfolio C-Level:")
    print(f"  CEO={data.portfolio_ceo_count} CFO={data.portfolio_cfo_count} COO={data.portfolio_coo_count} "
          f"CIO/CTO={data.portfolio_cio_cto_count} CMO={data.portfolio_cmo_count}")
    print()
    print(f"Apax Personnel ({apax.apax_companies_count} companies):")
    print(f"  IP={apax.apax_ip} EP={apax.apax_ep} OEP={apax.apax_oep} Other={apax.apax_other}")
    for label, bucket in (
        ("Buyout Funds", cat.buyout_funds),
        ("Digital Funds", cat.digital_funds),
        ("Impact & Other", cat.impact_and_other),
        ("Sponsors", cat.sponsors),
    ):
        total = sum(c.attendee_count for c in bucket)
        print(f"{label}: {len(bucket)} companies, {total} attendees")
        for c in bucket[:top_n]:
            print(f"  {c.company_name}: {c.attendee_count}")
    if data.assigned_seating_events:
        print()
        print("Assigned Seating:")
        for ev in data.assigned_seating_events:
            cap = ev.capacity if ev.capacity else "-"
            print(f"  [{ev.type}] {ev.name}: {ev.registered_count}/{cap} ({ev.capacity_status})")
    print()
    print(f"Companies With No Attendees: {len(data.companies_with_no_attendees)}")
    for c in data.companies_with_no_attendees[:top_n]:
        print(f"  {c.company_name}")
    print("="*60)


def print_sponsor_report(report: SponsorReport) -> None:
    print("\n" + "="*60)
    print("SPONSOR REPORT")
    print("="*60)
    print(f"Apax IP: {len(report.apax_ip)}  EP: {len(report.apax_ep)}  "
          f"OEP: {len(report.apax_oep)}  Other: {len(report.apax_other)}")
    for label, bucket in (
        ("Buyout Funds", report.buyout_funds),
        ("Digital Funds", report.digital_funds),
        ("Impact & Other", report.impact_and_other),
        ("Sponsors & Vendors", report.sponsors),
    ):
        print()
        print(f"{label}:")
        for company in bucket:
            names = ", ".join(f"{a.first_name or ''} {a.last_name or ''}".strip() for a in company.attendees)
            print(f"  {company.name} ({len(company.attendees)}): {names}")
    print("="*60)


def _result_lines(result: MigrationResult) -> List[str]:
    return [
        f"Total Companies Processed: {result.total_companies}",
        f"Standardized Companies {'To Create' if result.dry_run else 'Created'}: {result.standardized_companies}",
        f"Aliases {'To Create' if result.dry_run else 'Created'}: {result.aliases_created}",
        f"Domains Extracted: {result.domains_extracted}",
        f"Attendees Backfilled: {result.attendees_backfilled}",
        f"Errors: {result.errors}",
        f"Warnings: {result.warnings}",
        f"Processing Time: {'Preview only' if result.dry_run else 'Just completed'}",
    ]


def render_migration_report(result: MigrationResult, generated_at: Optional[datetime] = None) -> str:
    """Plain-text migration report (summary, top companies, full log)."""
    generated_at = generated_at or datetime.now()
    lines = [
        "Company Data Migration Report",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "Summary:",
        *_result_lines(result),
        "",
        "Top Companies by Attendee Count:",
        *[f"{c.name}: {c.attendee_count} attendees, {c.aliases} aliases" for c in result.top_companies],
        "",
        "Migration Log:",
        *result.log,
    ]
    return "\n".join(lines)


def print_migration_summary(result: MigrationResult) -> None:
    print("\n" + "="*60)
    print("COMPANY MIGRATION - " + ("DRY RUN" if result.dry_run else "APPLIED"))
    print("="*60)
    for line in _result_lines(result):
        print(line)
    if result.top_companies:
        print()
        print("Top Companies:")
        for c in result.top_companies:
            print(f"  {c.name}: {c.attendee_count} attendees, {c.aliases} aliases")
    print("="*60)


def print_logo_batch_summary(outcome: Dict[str, Any]) -> None:
    print(f"Logos updated: {outcome.get('updated', 0)}, failed: {outcome.get('failed', 0)}")
    for r in outcome.get("results", []):
        if not r.success:
            print(f"  {r.company_name}: {r.error}")
