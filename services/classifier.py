from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


# Declaration order matters: the first group with a keyword hit wins
SECTOR_KEYWORDS: Dict[str, List[str]] = {
    "Tech": ["software", "technology", "tech", "data", "cloud", "ai", "saas", "platform"],
    "Healthcare": ["health", "medical", "pharma", "biotech", "hospital", "clinic"],
    "Services": ["consulting", "advisory", "services", "solutions", "management"],
    "Internet & Consumer": ["retail", "consumer", "e-commerce", "marketplace", "media"],
    "Apax Digital": ["apax digital", "fintech", "insurtech"],
    "Apax": ["apax partners", "apax"],
    "Apax OEP": ["apax oep", "oep"],
    "Vendors/Sponsors": ["vendor", "sponsor", "consulting", "advisory", "partner"],
}
DEFAULT_SECTOR = "Other"

GEOGRAPHY_KEYWORDS: Dict[str, List[str]] = {
    "US": ["usa", "united states", "inc.", "corp.", "llc"],
    "EU": ["uk", "united kingdom", "germany", "france", "ltd.", "limited", "gmbh"],
    "ROW": ["asia", "japan", "china", "india", "australia"],
    "Global": ["global", "international", "worldwide"],
}
DEFAULT_GEOGRAPHY = "US"

SUBSECTOR_BY_SECTOR: Dict[str, str] = {
    "Tech": "Software",
    "Healthcare": "Healthcare Services",
    "Services": "Professional Services",
    "Internet & Consumer": "Consumer Goods & Services",
    "Apax Digital": "Software",
    "Apax": "Professional Services",
    "Apax OEP": "Professional Services",
    "Impact": "Professional Services",
    "Other": "Software",
}
DEFAULT_SUBSECTOR = "Software"


@dataclass(frozen=True)
class Classification:
    sector: str
    geography: str
    subsector: str


def _first_matching_group(name: str, table: Dict[str, List[str]], default: str) -> str:
    lower = (name or "").lower()
    for group, keywords in table.items():
        if any(k in lower for k in keywords):
            return group
    return default


def classify_sector(name: str) -> str:
    return _first_matching_group(name, SECTOR_KEYWORDS, DEFAULT_SECTOR)


def classify_geography(name: str) -> str:
    return _first_matching_group(name, GEOGRAPHY_KEYWORDS, DEFAULT_GEOGRAPHY)


def classify_subsector(name: str, sector: str) -> str:
    return SUBSECTOR_BY_SECTOR.get(sector, DEFAULT_SUBSECTOR)


def classify_company(name: str) -> Classification:
    sector = classify_sector(name)
    return Classification(
        sector=sector,
        geography=classify_geography(name),
        subsector=classify_subsector(name, sector),
    )
