from __future__ import annotations

import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse


_BUSINESS_SUFFIXES = (".com", ".org", ".net")


def extract_domain(value: Optional[str]) -> str:
    """Reduce an email address, URL or bare host to a lowercase domain.

    Examples:
      - "jane@Acme.com" -> "acme.com"
      - "https://www.acme.com/about" -> "acme.com"
      - "www.acme.com/x" -> "acme.com"
    """
    if not value:
        return ""
    text = str(value).strip()
    if "@" in text:
        return text.split("@")[1].lower()
    if text.startswith("http"):
        try:
            host = urlparse(text).hostname
        except ValueError:
            host = None
        if not host:
            return text.lower()
        return host.replace("www.", "", 1).lower()
    return re.sub(r"^(https?://)?(www\.)?", "", text).split("/")[0].lower()


def extract_apex_domain(url_or_domain: Optional[str]) -> Optional[str]:
    """Registrable domain (e.g. "shop.acme.co.uk" -> "acme.co.uk") or None."""
    if not url_or_domain:
        return None
    try:
        import tldextract
        text = str(url_or_domain).strip().lower()
        if not text.startswith('http://') and not text.startswith('https://'):
            text = f"http://{text}"
        ext = tldextract.extract(text)
        if ext.domain and ext.suffix:
            return f"{ext.domain}.{ext.suffix}"
        return None
    except Exception:
        return None


def is_personal_domain(domain: str, personal_domains: Optional[Iterable[str]] = None) -> bool:
    if personal_domains is None:
        from config.settings import get_settings
        personal_domains = get_settings().personal_email_domains
    return domain in set(personal_domains)


def is_company_email_domain(domain: str, personal_domains: Optional[Iterable[str]] = None) -> bool:
    """True for domains worth attributing to a company (not webmail, longer than 3 chars)."""
    return bool(domain) and len(domain) > 3 and not is_personal_domain(domain, personal_domains)


def sort_candidate_domains(domains: Iterable[str]) -> List[str]:
    """Business TLDs first, then shorter domains; stable for ties."""
    return sorted(
        list(domains),
        key=lambda d: (0 if d.endswith(_BUSINESS_SUFFIXES) else 1, len(d)),
    )
