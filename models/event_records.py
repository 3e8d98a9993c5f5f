from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Hotel(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(extra="ignore")


class DiningOption(BaseModel):
    id: str
    name: str
    date: str | None = None
    time: str | None = None
    location: str | None = None
    capacity: int | None = None
    seating_type: str | None = None

    model_config = ConfigDict(extra="ignore")


class AgendaItem(BaseModel):
    id: str
    title: str
    date: str | None = None
    start_time: str | None = None
    location: str | None = None
    capacity: int | None = None
    seating_type: str | None = None

    model_config = ConfigDict(extra="ignore")
