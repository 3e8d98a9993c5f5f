from __future__ import annotations

import csv
import io
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from models import CompanyAlias, CompanyDomain, CompanyRecord


ALIAS_HEADER = ["Company Name", "Alias"]
DOMAIN_HEADER = ["Company Name", "Domain", "Is Primary", "Source", "Logo URL"]
COMPANY_HEADER = [
    "Company Name",
    "Sector",
    "Geography",
    "Subsector",
    "Fund Analytics Category",
    "Website",
    "Is Parent Company",
    "Parent Company ID",
    "Logo",
]


def export_filename(company_name: str, kind: str) -> str:
    """e.g. ("Acme Inc.", "aliases") -> "Acme_Inc._aliases.csv"."""
    safe = re.sub(r"[^\w.-]", "_", company_name)
    return f"{safe}_{kind}.csv"


def _render(header: List[str], rows: Iterable[List[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return buf.getvalue()


def export_aliases_csv(company_name: str, aliases: Iterable[Union[CompanyAlias, str]]) -> str:
    rows = []
    for a in aliases:
        alias = a if isinstance(a, str) else a.alias
        rows.append([company_name, alias])
    return _render(ALIAS_HEADER, rows)


def export_domains_csv(company_name: str, domains: Iterable[CompanyDomain]) -> str:
    return _render(DOMAIN_HEADER, (
        [company_name, d.domain, "Yes" if d.is_primary else "No", d.source, d.logo_url or ""]
        for d in domains
    ))


def export_companies_csv(companies: Iterable[CompanyRecord]) -> str:
    return _render(COMPANY_HEADER, (
        [
            c.name,
            c.sector or "",
            c.geography or "",
            c.subsector or "",
            c.fund_analytics_category or "",
            c.website or "",
            "Yes" if c.is_parent_company else "No",
            c.parent_company_id or "",
            c.logo or "",
        ]
        for c in companies
    ))


def _read_pairs(text: str, second_column: str) -> List[Tuple[str, str]]:
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames or "Company Name" not in reader.fieldnames or second_column not in reader.fieldnames:
        raise ValueError(f"CSV must have 'Company Name' and '{second_column}' columns")
    pairs: List[Tuple[str, str]] = []
    for row in reader:
        company = (row.get("Company Name") or "").strip()
        value = (row.get(second_column) or "").strip()
        if company and value:
            pairs.append((company, value))
    return pairs


def parse_alias_csv(text: str) -> List[Tuple[str, str]]:
    return _read_pairs(text, "Alias")


def parse_domain_csv(text: str) -> List[Tuple[str, str]]:
    return _read_pairs(text, "Domain")


def write_csv(content: str, filename: str, export_dir: Optional[str] = None) -> Path:
    if export_dir is None:
        from config.settings import get_settings
        export_dir = get_settings().export_dir
    out_dir = Path(export_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / filename
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(content)
    return path
