from __future__ import annotations

from typing import Any, List, Tuple

import httpx
import pytest
from postgrest.exceptions import APIError

from db.client import BackendClient
from db.errors import BackendError


class _Response:
    def __init__(self, data: Any) -> None:
        self.data = data


class FakeRequest:
    """Records the builder calls made on it, like the supabase request builders."""

    def __init__(self, log: List[Tuple], data: Any = None, exc: Exception = None) -> None:
        self.log = log
        self.data = data
        self.exc = exc

    def __getattr__(self, name):
        def call(*args, **kwargs):
            self.log.append((name, args, kwargs))
            return self
        return call

    @property
    def not_(self):
        self.log.append(("not_", (), {}))
        return self

    def execute(self):
        self.log.append(("execute", (), {}))
        if self.exc:
            raise self.exc
        return _Response(self.data)


class FakeSupabase:
    def __init__(self, data: Any = None, exc: Exception = None) -> None:
        self.log: List[Tuple] = []
        self.data = data
        self.exc = exc

    def table(self, name):
        self.log.append(("table", (name,), {}))
        return FakeRequest(self.log, self.data, self.exc)

    def rpc(self, function, params):
        self.log.append(("rpc", (function, params), {}))
        return FakeRequest(self.log, self.data, self.exc)


def _client(fake: FakeSupabase) -> BackendClient:
    return BackendClient("https://proj.example.co", "anon-key", timeout=3, supabase=fake)


def test_select_replays_filters_order_and_limit():
    fake = FakeSupabase(data=[{"id": "1"}])
    rows = (
        _client(fake).table("attendees")
        .select("id, company")
        .eq("registration_status", "confirmed")
        .neq("company", "")
        .not_is("company", None)
        .is_("parent_company_id", None)
        .in_("id", ("1", "2"))
        .eq("is_active", True)
        .order("first_name")
        .limit(5)
        .execute()
    )
    assert rows == [{"id": "1"}]
    assert fake.log == [
        ("table", ("attendees",), {}),
        ("select", ("id, company",), {}),
        ("eq", ("registration_status", "confirmed"), {}),
        ("neq", ("company", ""), {}),
        ("not_", (), {}),
        ("is_", ("company", "null"), {}),
        ("is_", ("parent_company_id", "null"), {}),
        ("in_", ("id", ["1", "2"]), {}),
        ("eq", ("is_active", "true"), {}),
        ("order", ("first_name",), {"desc": False}),
        ("limit", (5,), {}),
        ("execute", (), {}),
    ]


def test_upsert_passes_conflict_target():
    fake = FakeSupabase(data=[{"id": "1", "name": "Acme"}])
    _client(fake).table("standardized_companies").upsert({"name": "Acme"}, on_conflict="name").execute()
    assert ("upsert", ([{"name": "Acme"}],), {"on_conflict": "name"}) in fake.log


def test_api_error_becomes_backend_error():
    fake = FakeSupabase(exc=APIError({"message": "duplicate key value", "code": "23505", "details": "Key (alias)"}))
    with pytest.raises(BackendError) as excinfo:
        _client(fake).table("company_aliases").insert({"alias": "x"}).execute()
    assert excinfo.value.is_unique_violation()
    assert excinfo.value.details == "Key (alias)"


def test_transport_error_is_wrapped():
    fake = FakeSupabase(exc=httpx.ConnectError("down"))
    with pytest.raises(BackendError) as excinfo:
        _client(fake).rpc("get_company_statistics")
    assert excinfo.value.code == "network"


def test_unfiltered_delete_is_refused():
    fake = FakeSupabase()
    with pytest.raises(BackendError):
        _client(fake).table("company_domains").delete().execute()
    assert fake.log == []


def test_rpc_passes_params():
    fake = FakeSupabase(data=[{"name": "Acme"}])
    out = _client(fake).rpc("get_companies_by_attendee_count", {"limit_count": 10})
    assert out == [{"name": "Acme"}]
    assert fake.log[0] == ("rpc", ("get_companies_by_attendee_count", {"limit_count": 10}), {})


def test_empty_response_is_empty_list():
    fake = FakeSupabase(data=None)
    assert _client(fake).table("company_aliases").delete().eq("id", "1").execute() == []
