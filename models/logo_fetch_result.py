from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LogoFetchResult(BaseModel):
    """Outcome of resolving a logo for a set of candidate domains."""

    url: str
    source: str
    success: bool
    error: str | None = None

    model_config = ConfigDict(frozen=True)


class LogoUpdateOutcome(BaseModel):
    """Per-company line of a batch logo refresh."""

    company_id: str
    company_name: str
    success: bool
    logo_url: str | None = None
    source: str | None = None
    error: str | None = None
