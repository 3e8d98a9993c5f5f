from __future__ import annotations

from typing import List

from models import AgendaItem, DiningOption, Hotel
from ports.backend import BackendPort


class EventsRepo:
    """Read-only access to the event reference tables used by analytics."""

    def __init__(self, client: BackendPort):
        self.client = client

    def active_hotels(self) -> List[Hotel]:
        rows = self.client.table("hotels").select("id, name").eq("is_active", True).execute()
        return [Hotel.model_validate(r) for r in rows]

    def active_dining_options(self) -> List[DiningOption]:
        rows = self.client.table("dining_options").select("id, name").eq("is_active", True).execute()
        return [DiningOption.model_validate(r) for r in rows]

    def assigned_agenda_items(self) -> List[AgendaItem]:
        rows = (
            self.client.table("agenda_items")
            .select("id, title, date, start_time, location, capacity, seating_type")
            .eq("seating_type", "assigned")
            .eq("is_active", True)
            .execute()
        )
        return [AgendaItem.model_validate(r) for r in rows]

    def assigned_dining_options(self) -> List[DiningOption]:
        rows = (
            self.client.table("dining_options")
            .select("id, name, date, time, location, capacity, seating_type")
            .eq("seating_type", "assigned")
            .eq("is_active", True)
            .execute()
        )
        return [DiningOption.model_validate(r) for r in rows]
