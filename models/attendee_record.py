from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttendeeRecord(BaseModel):
    """Row of the `attendees` table (projection used by admin flows)."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    title: str | None = None
    company: str | None = None
    company_name_standardized: str | None = None
    registration_status: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    selected_breakouts: list[str] = Field(default_factory=list)
    dining_selections: dict[str, Any] = Field(default_factory=dict)
    hotel_selection: str | None = None
    # Kept loose on purpose: the spouse predicate must see the raw JSON shape
    spouse_details: Any = None
    is_apax_ep: bool = False
    is_cfo: bool = False
    is_spouse: bool = False

    model_config = ConfigDict(extra="ignore")

    @field_validator("attributes", "dining_selections", mode="before")
    @classmethod
    def _dict_or_empty(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @field_validator("selected_breakouts", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(v) for v in value if v is not None]

    @field_validator("is_apax_ep", "is_cfo", "is_spouse", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> bool:
        return bool(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def company_key(self) -> str:
        """Company name used for grouping: standardized, then raw, then placeholder."""
        return self.company_name_standardized or self.company or "Unknown Company"
