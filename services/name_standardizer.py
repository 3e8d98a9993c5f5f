from __future__ import annotations

import re
from typing import Any, List, Tuple


UNKNOWN_COMPANY = "Unknown Company"

# Well-known companies whose canonical form cannot be derived by rules
_EXACT_MATCHES = {
    "microsoft": "Microsoft Corporation",
    "microsoft corp": "Microsoft Corporation",
    "microsoft corporation": "Microsoft Corporation",
    "msft": "Microsoft Corporation",
    "apple": "Apple Inc.",
    "apple inc": "Apple Inc.",
    "google": "Google LLC",
    "alphabet": "Google LLC",
    "amazon": "Amazon.com Inc.",
    "aws": "Amazon.com Inc.",
    "meta": "Meta Platforms Inc.",
    "facebook": "Meta Platforms Inc.",
    "tesla": "Tesla Inc.",
    "netflix": "Netflix Inc.",
    "salesforce": "Salesforce Inc.",
    "oracle": "Oracle Corporation",
    "ibm": "IBM Corporation",
    "intel": "Intel Corporation",
    "cisco": "Cisco Systems Inc.",
    "adobe": "Adobe Inc.",
    "nvidia": "NVIDIA Corporation",
}

# Ordered; only the first matching rule is applied
_SUFFIX_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\b(.*?)\s+(inc\.?|incorporated)$", re.IGNORECASE), r"\1 Inc."),
    (re.compile(r"\b(.*?)\s+(corp\.?|corporation)$", re.IGNORECASE), r"\1 Corporation"),
    (re.compile(r"\b(.*?)\s+(llc\.?)$", re.IGNORECASE), r"\1 LLC"),
    (re.compile(r"\b(.*?)\s+(ltd\.?|limited)$", re.IGNORECASE), r"\1 Ltd."),
    (re.compile(r"\b(.*?)\s+(co\.?)$", re.IGNORECASE), r"\1 Company"),
]

_LOWERCASE_WORDS = {"inc", "corp", "llc", "ltd", "co", "and", "of", "the"}

# Bare suffix tokens get their canonical casing; a token already ending in "." is left alone
_CASE_FIXES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\binc\b(?!\.)", re.IGNORECASE), "Inc."),
    (re.compile(r"\bcorp\b", re.IGNORECASE), "Corporation"),
    (re.compile(r"\bllc\b", re.IGNORECASE), "LLC"),
    (re.compile(r"\bltd\b(?!\.)", re.IGNORECASE), "Ltd."),
]


def _capitalize_word(word: str) -> str:
    if word.lower() in _LOWERCASE_WORDS:
        return word.lower()
    return word[:1].upper() + word[1:].lower()


def standardize_company_name(raw: Any) -> str:
    """Map a free-text company name to its canonical directory form.

    Examples:
      - "msft" -> "Microsoft Corporation"
      - "acme corp" -> "Acme Corporation"
      - "  big   data  llc " -> "Big Data LLC"
    """
    if not raw or not isinstance(raw, str):
        return UNKNOWN_COMPANY
    cleaned = raw.strip()
    if not cleaned:
        return UNKNOWN_COMPANY

    exact = _EXACT_MATCHES.get(cleaned.lower())
    if exact:
        return exact

    standardized = cleaned
    for pattern, replacement in _SUFFIX_RULES:
        if pattern.search(standardized):
            standardized = pattern.sub(replacement, standardized, count=1)
            break

    standardized = re.sub(r"\s+", " ", standardized).strip()
    standardized = " ".join(_capitalize_word(w) for w in standardized.split(" "))
    for pattern, replacement in _CASE_FIXES:
        standardized = pattern.sub(replacement, standardized)
    return standardized


def needs_alias(original: str, standardized: str) -> bool:
    return (original or "").lower() != (standardized or "").lower()
