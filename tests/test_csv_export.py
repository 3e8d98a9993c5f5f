from __future__ import annotations

import pytest

from models import CompanyDomain, CompanyRecord
from services.csv_export import (
    export_aliases_csv,
    export_companies_csv,
    export_domains_csv,
    export_filename,
    parse_alias_csv,
    parse_domain_csv,
    write_csv,
)


def test_alias_export_quotes_commas_and_parses_back():
    text = export_aliases_csv("Acme, Inc.", ["Acme", 'The "Acme" Group'])
    assert text.splitlines()[0] == "Company Name,Alias"
    assert set(parse_alias_csv(text)) == {("Acme, Inc.", "Acme"), ("Acme, Inc.", 'The "Acme" Group')}


def test_domain_export_columns():
    domains = [
        CompanyDomain(standardized_company_id="c1", domain="acme.com", is_primary=True, source="email_extraction"),
        CompanyDomain(standardized_company_id="c1", domain="acme.io", logo_url="https://x/logo.png"),
    ]
    lines = export_domains_csv("Acme", domains).splitlines()
    assert lines == [
        "Company Name,Domain,Is Primary,Source,Logo URL",
        "Acme,acme.com,Yes,email_extraction,",
        "Acme,acme.io,No,manual,https://x/logo.png",
    ]
    assert parse_domain_csv("\n".join(lines)) == [("Acme", "acme.com"), ("Acme", "acme.io")]


def test_company_export():
    text = export_companies_csv([CompanyRecord(name="Acme", sector="Tech", is_parent_company=True)])
    assert text.splitlines()[1] == "Acme,Tech,,,,,Yes,,"


def test_parse_rejects_missing_columns():
    with pytest.raises(ValueError):
        parse_alias_csv("Company,Other\nA,B\n")


def test_parse_skips_blank_cells():
    assert parse_alias_csv("Company Name,Alias\nAcme,\n,x\nAcme, a1 \n") == [("Acme", "a1")]


def test_export_filename():
    assert export_filename("Acme Big  Co", "aliases") == "Acme_Big__Co_aliases.csv"
    assert export_filename("AT&T/DirecTV", "domains") == "AT_T_DirecTV_domains.csv"


def test_write_csv_with_slashed_company_name(tmp_path):
    out_dir = tmp_path / "exports"
    path = write_csv("a,b\n", export_filename("AT&T/DirecTV", "aliases"), str(out_dir))
    assert path.parent == out_dir
    assert path.read_text(encoding="utf-8") == "a,b\n"


def test_write_csv(tmp_path):
    path = write_csv("a,b\n", "out.csv", str(tmp_path / "exports"))
    assert path.read_text(encoding="utf-8") == "a,b\n"
