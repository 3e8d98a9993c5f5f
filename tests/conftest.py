from __future__ import annotations

import copy
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.analytics'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


from db.errors import BackendError  # noqa: E402
from db.query import Query  # noqa: E402


UNIQUE_KEYS: Dict[str, List[Tuple[str, ...]]] = {
    "standardized_companies": [("name",)],
    "company_aliases": [("alias",)],
    "company_domains": [("standardized_company_id", "domain")],
    "company_apax_partners": [("standardized_company_id", "attendee_id")],
}


def _matches(row: Dict[str, Any], op: str, column: str, value: Any) -> bool:
    current = row.get(column)
    if op == "eq":
        return current == value
    if op == "neq":
        return current is not None and current != value
    if op == "is":
        return current is value
    if op == "not.is":
        return current is not value
    if op == "in":
        return current in value
    raise AssertionError(f"unsupported filter {op}")


class FakeQuery(Query):
    def __init__(self, backend: "FakeBackend", table: str) -> None:
        super().__init__(table)
        self.backend = backend

    def execute(self) -> List[Dict[str, Any]]:
        return self.backend._execute(self)


class FakeBackend:
    """In-memory stand-in for the hosted REST backend.

    Rows live in ``tables``; unique keys follow the real schema so duplicate
    inserts raise code 23505. ``fail(...)`` scripts errors for a given table
    and action.
    """

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.rpc_results: Dict[str, Any] = {}
        self.calls: List[Tuple[str, str]] = []
        self._failures: List[Dict[str, Any]] = []
        self._next_id = 0

    # --- seeding / scripting ---
    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = []
        for row in rows:
            row = dict(row)
            row.setdefault("id", self._new_id(table))
            self.tables.setdefault(table, []).append(row)
            stored.append(row)
        return stored

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def fail(
        self,
        table: str,
        action: str,
        message: str = "boom",
        code: str = "XX000",
        skip: int = 0,
        times: int = 1,
        when: Optional[Callable[[Query], bool]] = None,
    ) -> None:
        self._failures.append({
            "table": table, "action": action, "message": message, "code": code,
            "skip": skip, "times": times, "when": when,
        })

    # --- BackendPort ---
    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append(("rpc", function))
        result = self.rpc_results.get(function)
        if isinstance(result, Exception):
            raise result
        return copy.deepcopy(result)

    # --- internals ---
    def _new_id(self, table: str) -> str:
        self._next_id += 1
        return f"{table[:3]}-{self._next_id}"

    def _maybe_fail(self, query: Query) -> None:
        for f in self._failures:
            if f["table"] != query.table or f["action"] != query.action or f["times"] <= 0:
                continue
            if f["when"] is not None and not f["when"](query):
                continue
            if f["skip"] > 0:
                f["skip"] -= 1
                continue
            f["times"] -= 1
            raise BackendError(f["message"], code=f["code"], status=400)

    def _select(self, query: Query) -> List[Dict[str, Any]]:
        rows = [r for r in self.rows(query.table) if all(_matches(r, *flt) for flt in query.filters)]
        for column, desc in reversed(query.orders):
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else ""), reverse=desc)
        if query.limit_count is not None:
            rows = rows[:query.limit_count]
        return rows

    def _conflict(self, table: str, row: Dict[str, Any], ignore: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        for key in UNIQUE_KEYS.get(table, []):
            for existing in self.rows(table):
                if existing is ignore:
                    continue
                if all(existing.get(k) == row.get(k) for k in key):
                    return existing
        return None

    def _execute(self, query: Query) -> List[Dict[str, Any]]:
        self.calls.append((query.table, query.action))
        self._maybe_fail(query)
        table = query.table
        if query.action == "select":
            return copy.deepcopy(self._select(query))

        if query.action == "insert":
            for i, row in enumerate(query.payload):
                clash = self._conflict(table, row)
                dup_in_batch = any(
                    all(other.get(k) == row.get(k) for k in key)
                    for key in UNIQUE_KEYS.get(table, [])
                    for other in query.payload[:i]
                )
                if clash is not None or dup_in_batch:
                    raise BackendError("duplicate key value violates unique constraint", code="23505", status=409)
            return copy.deepcopy(self.seed(table, *query.payload))

        if query.action == "upsert":
            out = []
            for row in query.payload:
                existing = None
                if query.on_conflict:
                    cols = [c.strip() for c in query.on_conflict.split(",")]
                    existing = next(
                        (r for r in self.rows(table) if all(r.get(c) == row.get(c) for c in cols)), None
                    )
                if existing is not None:
                    existing.update(row)
                    out.append(existing)
                else:
                    out.extend(self.seed(table, row))
            return copy.deepcopy(out)

        if query.action == "update":
            matched = self._select(query)
            for row in matched:
                row.update(query.payload)
            return copy.deepcopy(matched)

        if query.action == "delete":
            matched = self._select(query)
            ids = {id(r) for r in matched}
            self.tables[table] = [r for r in self.rows(table) if id(r) not in ids]
            return copy.deepcopy(matched)

        raise AssertionError(f"unsupported action {query.action}")


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.setenv("RUN_ENV", "test")
    from config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
