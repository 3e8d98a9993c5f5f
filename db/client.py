from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from db.errors import BackendError
from db.query import Query


logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> Any:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def apply_query(table: Any, query: Query) -> Any:
    """Replay a recorded ``Query`` onto a supabase table request builder."""
    if query.action == "select":
        request = table.select(query.columns)
    elif query.action == "insert":
        request = table.insert(query.payload)
    elif query.action == "upsert":
        request = table.upsert(query.payload, on_conflict=query.on_conflict or "")
    elif query.action == "update":
        request = table.update(query.payload)
    elif query.action == "delete":
        request = table.delete()
    else:
        raise BackendError(f"Unsupported action: {query.action}")

    for op, column, value in query.filters:
        if op == "eq":
            request = request.eq(column, _filter_value(value))
        elif op == "neq":
            request = request.neq(column, _filter_value(value))
        elif op == "is":
            request = request.is_(column, _filter_value(value))
        elif op == "not.is":
            request = request.not_.is_(column, _filter_value(value))
        elif op == "in":
            request = request.in_(column, list(value))
        else:
            raise BackendError(f"Unsupported filter: {op}")

    for column, desc in query.orders:
        request = request.order(column, desc=desc)
    if query.limit_count is not None:
        request = request.limit(query.limit_count)
    return request


class SupabaseQuery(Query):
    def __init__(self, client: "BackendClient", table: str) -> None:
        super().__init__(table)
        self.client = client

    def execute(self) -> List[Dict[str, Any]]:
        if self.action in ("update", "delete") and not self.filters:
            # The REST layer rejects unfiltered bulk writes; fail before the round-trip
            raise BackendError(f"Refusing {self.action} on {self.table} without filters")
        request = apply_query(self.client.supabase.table(self.table), self)
        data = self.client.run(request, f"{self.action} {self.table}", table=self.table)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]


class BackendClient:
    """Hosted backend access through the supabase client (tables and RPCs)."""

    def __init__(self, url: str, key: str, timeout: float = 20.0, supabase: Optional[Client] = None) -> None:
        self.supabase = supabase or create_client(
            url, key, options=ClientOptions(postgrest_client_timeout=timeout)
        )

    def table(self, name: str) -> SupabaseQuery:
        return SupabaseQuery(self, name)

    def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.run(self.supabase.rpc(function, params or {}), f"rpc {function}", table=f"rpc:{function}")

    def run(self, request: Any, label: str, table: Optional[str] = None) -> Any:
        """Execute a built request; library errors surface as ``BackendError``."""
        t0 = time.time()
        try:
            response = request.execute()
        except APIError as e:
            err = BackendError.from_api_error(e)
            logger.warning(
                f"{label} rejected: {err.message}",
                extra={"table": table, "status": "error", "duration_ms": int((time.time() - t0) * 1000), "error": err.code},
            )
            raise err from e
        except httpx.HTTPError as e:
            logger.error(f"{label} failed", extra={"table": table, "status": "error", "error": str(e)})
            raise BackendError(f"Backend request failed: {e}", code="network") from e
        logger.debug(label, extra={"table": table, "status": "ok", "duration_ms": int((time.time() - t0) * 1000)})
        return response.data
