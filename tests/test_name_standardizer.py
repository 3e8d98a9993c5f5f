from __future__ import annotations

import pytest

from services.name_standardizer import UNKNOWN_COMPANY, needs_alias, standardize_company_name


@pytest.mark.parametrize("raw,expected", [
    ("msft", "Microsoft Corporation"),
    ("  Microsoft Corp ", "Microsoft Corporation"),
    ("APPLE", "Apple Inc."),
    ("alphabet", "Google LLC"),
    ("aws", "Amazon.com Inc."),
    ("Facebook", "Meta Platforms Inc."),
    ("nvidia", "NVIDIA Corporation"),
])
def test_exact_matches_win(raw, expected):
    assert standardize_company_name(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("acme corp", "Acme Corporation"),
    ("acme corp.", "Acme Corporation"),
    ("acme incorporated", "Acme Inc."),
    ("acme inc.", "Acme Inc."),
    ("big   data  llc", "Big Data LLC"),
    ("widgets limited", "Widgets Ltd."),
    ("smith & sons co", "Smith & Sons Company"),
])
def test_suffix_rules(raw, expected):
    assert standardize_company_name(raw) == expected


def test_stop_words_are_lowercased():
    assert standardize_company_name("bank OF the west") == "Bank of the West"


@pytest.mark.parametrize("raw", [None, "", "   ", 42])
def test_blank_or_non_string_is_unknown(raw):
    assert standardize_company_name(raw) == UNKNOWN_COMPANY


def test_idempotent_for_rule_outputs():
    once = standardize_company_name("acme corp")
    assert standardize_company_name(once) == once


def test_needs_alias_ignores_case():
    assert needs_alias("acme corp", "Acme Corporation")
    assert not needs_alias("ACME CORPORATION", "Acme Corporation")
