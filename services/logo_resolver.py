from __future__ import annotations

import base64
import concurrent.futures as _fut
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional
from xml.sax.saxutils import escape

import requests

from config.settings import get_settings
from db.repos.companies_repo import CompaniesRepo
from db.repos.domains_repo import DomainsRepo
from models import AttendeeRecord, CompanyRecord, LogoFetchResult, LogoUpdateOutcome
from ports.backend import BackendPort
from services.domain_utils import (
    extract_apex_domain,
    extract_domain,
    is_company_email_domain,
    sort_candidate_domains,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogoProvider:
    name: str
    template: str

    def url_for(self, domain: str, token: str = "") -> str:
        return self.template.format(domain=domain, token=token)


# Priority order: earlier providers win when several return an image
LOGO_PROVIDERS: List[LogoProvider] = [
    LogoProvider("Clearbit", "https://logo.clearbit.com/{domain}"),
    LogoProvider("Logo.dev", "https://img.logo.dev/{domain}?token={token}"),
    LogoProvider("Uplead", "https://logo.uplead.com/{domain}"),
    LogoProvider("Statvoo", "https://api.statvoo.com/favicon/?url={domain}"),
    LogoProvider("Direct Favicon", "https://{domain}/favicon.ico"),
    LogoProvider("Google Favicons", "https://www.google.com/s2/favicons?domain={domain}&sz=128"),
]

_USER_AGENT = "Mozilla/5.0 (compatible; event-admin logo probe)"


def generate_fallback_logo(domain: str) -> str:
    """200x80 SVG badge with the first domain label, as a data URL."""
    label = escape(domain.split(".")[0].upper())
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" width="200" height="80" viewBox="0 0 200 80">'
        '<rect width="200" height="80" fill="#0e1821"/>'
        '<text x="100" y="45" fill="#ffffff" font-family="Inter, sans-serif" font-size="16" '
        f'font-weight="bold" text-anchor="middle">{label}</text>'
        "</svg>"
    )
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")


class LogoResolver:
    """Finds a usable logo URL for a company from its candidate domains.

    ``http`` is anything with a ``requests``-compatible ``get``; the module
    itself is used by default.
    """

    def __init__(
        self,
        http: Any = None,
        timeout: Optional[float] = None,
        concurrency: Optional[int] = None,
        token: Optional[str] = None,
        providers: Optional[List[LogoProvider]] = None,
    ) -> None:
        settings = get_settings()
        self.http = http or requests
        self.timeout = timeout if timeout is not None else settings.logo_probe_timeout_seconds
        self.concurrency = max(1, concurrency or settings.logo_probe_concurrency)
        self.token = token if token is not None else settings.logo_dev_token
        self.providers = providers or LOGO_PROVIDERS

    def probe(self, url: str) -> bool:
        """True when the URL answers 200 with a non-empty image body. Never raises."""
        try:
            resp = self.http.get(url, timeout=self.timeout, headers={"User-Agent": _USER_AGENT}, allow_redirects=True)
        except Exception as e:
            logger.debug(f"logo probe failed for {url}: {e}")
            return False
        content_type = (resp.headers.get("Content-Type") or "").lower()
        ok = resp.status_code == 200 and content_type.startswith("image/") and bool(resp.content)
        if not ok:
            logger.debug(f"logo probe rejected {url}", extra={"status": resp.status_code})
        return ok

    def find_provider_logo(self, domain: str) -> Optional[LogoFetchResult]:
        """Probe every provider for one domain; highest-priority success wins."""
        urls = [p.url_for(domain, self.token) for p in self.providers]
        with _fut.ThreadPoolExecutor(max_workers=min(self.concurrency, len(urls))) as ex:
            outcomes = list(ex.map(self.probe, urls))
        for provider, url, ok in zip(self.providers, urls, outcomes):
            if ok:
                return LogoFetchResult(url=url, source=provider.name, success=True)
        return None

    def fetch_logo_for_domain(self, domain: str) -> LogoFetchResult:
        clean = extract_domain(domain)
        if not clean or len(clean) < 3:
            return LogoFetchResult(url="", source="error", success=False, error="Invalid domain")
        found = self.find_provider_logo(clean)
        if found:
            return found
        return LogoFetchResult(url=generate_fallback_logo(clean), source="fallback", success=True)

    def resolve(self, domains: Iterable[str]) -> LogoFetchResult:
        given = list(domains)
        if not given:
            return LogoFetchResult(url="", source="error", success=False, error="No domains provided")
        candidates = sort_candidate_domains(d for d in given if d)
        first_valid: Optional[str] = None
        for domain in candidates:
            clean = extract_domain(domain)
            if len(clean) < 3:
                continue
            if first_valid is None:
                first_valid = clean
            found = self.find_provider_logo(clean)
            if found:
                logger.info(f"logo for {clean} from {found.source}", extra={"step": "resolve_logo", "status": "ok"})
                return found
        # Nothing real found: placeholder for the preferred usable domain
        if first_valid is None:
            first_valid = extract_domain(candidates[0]) if candidates else ""
        return LogoFetchResult(url=generate_fallback_logo(first_valid), source="fallback", success=True)


def resolve_logo(domains: Iterable[str], resolver: Optional[LogoResolver] = None) -> LogoFetchResult:
    return (resolver or LogoResolver()).resolve(domains)


def _candidate_domains(company: CompanyRecord, domains_repo: DomainsRepo) -> List[str]:
    domains = [d.domain for d in domains_repo.list_for_company(str(company.id))]
    if not domains and company.website:
        apex = extract_apex_domain(company.website)
        if apex:
            domains = [apex]
    return domains


def update_company_logo(
    client: BackendPort,
    company: CompanyRecord,
    resolver: Optional[LogoResolver] = None,
) -> LogoUpdateOutcome:
    """Resolve and persist one company's logo; failures come back in the outcome."""
    resolver = resolver or LogoResolver()
    companies_repo = CompaniesRepo(client)
    domains_repo = DomainsRepo(client)
    company_id = str(company.id)
    try:
        domains = _candidate_domains(company, domains_repo)
        if not domains:
            return LogoUpdateOutcome(company_id=company_id, company_name=company.name, success=False, error="No domains available")
        result = resolver.resolve(domains)
        if not result.success:
            return LogoUpdateOutcome(company_id=company_id, company_name=company.name, success=False, error=result.error or "No logo found")
        companies_repo.update_logo(company_id, result.url)
        fetched_at = datetime.now(timezone.utc).isoformat()
        domains_repo.update_logo_cache(company_id, extract_domain(domains[0]), result.url, fetched_at)
        return LogoUpdateOutcome(
            company_id=company_id,
            company_name=company.name,
            success=True,
            logo_url=result.url,
            source=result.source,
        )
    except Exception as e:
        logger.error(f"logo update failed for {company.name}", extra={"step": "update_logo", "status": "error", "error": str(e)})
        return LogoUpdateOutcome(company_id=company_id, company_name=company.name, success=False, error=str(e))


def batch_update_company_logos(
    client: BackendPort,
    companies: List[CompanyRecord],
    resolver: Optional[LogoResolver] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> Dict[str, Any]:
    resolver = resolver or LogoResolver()
    results: List[LogoUpdateOutcome] = []
    updated = failed = 0
    total = len(companies)
    for idx, company in enumerate(companies, start=1):
        outcome = update_company_logo(client, company, resolver)
        results.append(outcome)
        if outcome.success:
            updated += 1
        else:
            failed += 1
        if on_progress:
            on_progress(idx, total)
    logger.info(
        f"logo batch done: updated={updated} failed={failed}",
        extra={"step": "batch_update_logos", "status": "ok" if not failed else "partial"},
    )
    return {"updated": updated, "failed": failed, "results": results}


def extract_domains_from_attendees(
    attendees: Iterable[AttendeeRecord],
    personal_domains: Optional[Iterable[str]] = None,
) -> Dict[str, List[str]]:
    """Company name -> distinct corporate email domains, in first-seen order."""
    if personal_domains is not None:
        personal_domains = list(personal_domains)
    found: Dict[str, List[str]] = {}
    for a in attendees:
        company = a.company_name_standardized or a.company
        if not a.email or "@" not in a.email or not company:
            continue
        domain = extract_domain(a.email)
        if not is_company_email_domain(domain, personal_domains):
            continue
        bucket = found.setdefault(company, [])
        if domain not in bucket:
            bucket.append(domain)
    return found
