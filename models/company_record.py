from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator


DomainSource = Literal["manual", "email_extraction", "website"]


class CompanyRecord(BaseModel):
    """Row of `standardized_companies`: the canonical company a free-text name resolves to."""

    id: str | None = None
    name: str
    sector: str | None = None
    geography: str | None = None
    subsector: str | None = None
    logo: str | None = None
    website: str | None = None
    description: str | None = None
    fund_analytics_category: str | None = None
    is_parent_company: bool = False
    parent_company_id: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("is_parent_company", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> bool:
        return bool(value)


class CompanyAlias(BaseModel):
    id: str | None = None
    alias: str
    standardized_company_id: str

    model_config = ConfigDict(extra="ignore")


class CompanyApaxPartner(BaseModel):
    id: str | None = None
    standardized_company_id: str
    attendee_id: str

    model_config = ConfigDict(extra="ignore")


class CompanyDomain(BaseModel):
    id: str | None = None
    standardized_company_id: str
    domain: str
    is_primary: bool = False
    source: DomainSource = "manual"
    logo_url: str | None = None
    logo_last_fetched: str | None = None

    model_config = ConfigDict(extra="ignore")
