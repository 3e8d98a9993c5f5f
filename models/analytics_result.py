from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


CapacityStatus = Literal["unlimited", "full", "nearly-full", "filling", "available"]


class CompanyAttendeeCount(BaseModel):
    company_name: str
    logo: str | None = None
    attendee_count: int


class CompanyWithoutAttendees(BaseModel):
    company_name: str
    logo: str | None = None
    sector: str | None = None
    geography: str | None = None


class ApaxAttendeeSummary(BaseModel):
    """Short attendee projection listed under an Apax personnel tier."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    company: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class ApaxBreakdown(BaseModel):
    apax_ip: int = 0
    apax_ep: int = 0
    apax_oep: int = 0
    apax_other: int = 0
    apax_companies_count: int = 0
    apax_ip_attendees: list[ApaxAttendeeSummary] = Field(default_factory=list)
    apax_ep_attendees: list[ApaxAttendeeSummary] = Field(default_factory=list)
    apax_oep_attendees: list[ApaxAttendeeSummary] = Field(default_factory=list)
    apax_other_attendees: list[ApaxAttendeeSummary] = Field(default_factory=list)


class CompanyCategoryBreakdown(BaseModel):
    apax_attendees: ApaxBreakdown = Field(default_factory=ApaxBreakdown)
    buyout_funds: list[CompanyAttendeeCount] = Field(default_factory=list)
    digital_funds: list[CompanyAttendeeCount] = Field(default_factory=list)
    impact_and_other: list[CompanyAttendeeCount] = Field(default_factory=list)
    sponsors: list[CompanyAttendeeCount] = Field(default_factory=list)


class AssignedSeatingEvent(BaseModel):
    id: str
    name: str
    type: Literal["agenda", "dining"]
    date: str | None = None
    time: str | None = None
    location: str | None = None
    registered_count: int
    capacity: int | None = None
    capacity_status: CapacityStatus


class EventAnalytics(BaseModel):
    """Fixed-shape dashboard summary derived from one event snapshot."""

    total_registrations: int = 0
    total_spouses: int = 0
    software_day: int = 0
    track_a_digital: int = 0
    track_b_cfo_ops: int = 0
    welcome_dinner: int = 0
    maple_ash: int = 0

    assigned_seating_events: list[AssignedSeatingEvent] = Field(default_factory=list)

    four_seasons_count: int = 0
    park_hyatt_count: int = 0
    making_own_arrangements_count: int = 0

    portfolio_ceo_count: int = 0
    portfolio_cfo_count: int = 0
    portfolio_coo_count: int = 0
    portfolio_cio_cto_count: int = 0
    portfolio_cmo_count: int = 0

    companies_with_no_attendees: list[CompanyWithoutAttendees] = Field(default_factory=list)
    attendees_by_company_category: CompanyCategoryBreakdown = Field(default_factory=CompanyCategoryBreakdown)

    model_config = ConfigDict(extra="forbid")


class SponsorReportCompany(BaseModel):
    name: str
    logo: str | None = None
    description: str | None = None
    fund_analytics_category: str = "Other Funds"
    sector: str | None = None
    geography: str | None = None
    attendees: list[ApaxAttendeeSummary] = Field(default_factory=list)


class SponsorReport(BaseModel):
    apax_ip: list[ApaxAttendeeSummary] = Field(default_factory=list)
    apax_ep: list[ApaxAttendeeSummary] = Field(default_factory=list)
    apax_oep: list[ApaxAttendeeSummary] = Field(default_factory=list)
    apax_other: list[ApaxAttendeeSummary] = Field(default_factory=list)
    buyout_funds: list[SponsorReportCompany] = Field(default_factory=list)
    digital_funds: list[SponsorReportCompany] = Field(default_factory=list)
    impact_and_other: list[SponsorReportCompany] = Field(default_factory=list)
    sponsors: list[SponsorReportCompany] = Field(default_factory=list)


class DirectoryStats(BaseModel):
    total_companies: int = 0
    parent_companies: int = 0
    subsidiaries: int = 0
    independent_companies: int = 0
    total_aliases: int = 0
    total_apax_partners: int = 0
    companies_with_logo: int = 0
    by_sector: dict[str, int] = Field(default_factory=dict)
    by_geography: dict[str, int] = Field(default_factory=dict)
