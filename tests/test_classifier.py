from __future__ import annotations

from services.classifier import (
    classify_company,
    classify_geography,
    classify_sector,
    classify_subsector,
)


def test_sector_first_group_wins():
    assert classify_sector("Acme Software") == "Tech"
    assert classify_sector("City Hospital") == "Healthcare"
    # "consulting" appears in Services before Vendors/Sponsors
    assert classify_sector("Acme Consulting") == "Services"


def test_sector_substring_match_is_naive():
    # "ai" inside "Thailand" still counts as a Tech keyword
    assert classify_sector("Thailand Foods") == "Tech"


def test_apax_groups_in_declaration_order():
    assert classify_sector("Apax Digital") == "Apax Digital"
    assert classify_sector("Apax Partners") == "Apax"
    # "apax" is matched before the OEP group is reached
    assert classify_sector("Apax OEP") == "Apax"


def test_sector_default():
    assert classify_sector("Zebra") == "Other"


def test_geography():
    assert classify_geography("Widgets Ltd.") == "EU"
    assert classify_geography("Acme Inc.") == "US"
    assert classify_geography("Tokyo Japan Holdings") == "ROW"
    assert classify_geography("Worldwide Widgets") == "Global"
    assert classify_geography("Zebra") == "US"


def test_subsector_lookup():
    assert classify_subsector("x", "Healthcare") == "Healthcare Services"
    assert classify_subsector("x", "Vendors/Sponsors") == "Software"


def test_classify_company_bundle():
    c = classify_company("Global Health Ltd.")
    assert (c.sector, c.geography, c.subsector) == ("Healthcare", "EU", "Healthcare Services")
