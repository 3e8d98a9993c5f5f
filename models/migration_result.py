from __future__ import annotations

from pydantic import BaseModel, Field


class StandardizationPreview(BaseModel):
    """How one raw company string maps into the standardized directory."""

    original: str
    standardized: str
    sector: str
    geography: str
    subsector: str
    attendee_count: int
    needs_alias: bool
    domains: list[str] = Field(default_factory=list)


class TopCompany(BaseModel):
    name: str
    attendee_count: int
    aliases: int


class MigrationResult(BaseModel):
    dry_run: bool = True
    total_companies: int = 0
    standardized_companies: int = 0
    aliases_created: int = 0
    domains_extracted: int = 0
    logos_updated: int = 0
    attendees_backfilled: int = 0
    backfill_errors: int = 0
    orphaned_aliases: int = 0
    errors: int = 0
    warnings: int = 0
    top_companies: list[TopCompany] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list)
