from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple


Filter = Tuple[str, str, Any]


def _as_rows(rows: Any) -> List[Dict[str, Any]]:
    if isinstance(rows, dict):
        return [dict(rows)]
    return [dict(r) for r in rows]


class Query:
    """Table query builder mirroring the backend's select/insert/update/delete/upsert surface.

    Builder methods return ``self`` so calls chain; ``execute()`` is supplied by
    the concrete client and returns the affected or selected rows.
    """

    def __init__(self, table: str) -> None:
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.filters: List[Filter] = []
        self.orders: List[Tuple[str, bool]] = []
        self.limit_count: Optional[int] = None
        self.payload: Any = None
        self.on_conflict: Optional[str] = None

    # --- actions ---
    def select(self, columns: str = "*") -> "Query":
        self.action = "select"
        self.columns = columns
        return self

    def insert(self, rows: Any) -> "Query":
        self.action = "insert"
        self.payload = _as_rows(rows)
        return self

    def upsert(self, rows: Any, on_conflict: Optional[str] = None) -> "Query":
        self.action = "upsert"
        self.payload = _as_rows(rows)
        self.on_conflict = on_conflict
        return self

    def update(self, values: Dict[str, Any]) -> "Query":
        self.action = "update"
        self.payload = dict(values)
        return self

    def delete(self) -> "Query":
        self.action = "delete"
        return self

    # --- filters ---
    def eq(self, column: str, value: Any) -> "Query":
        self.filters.append(("eq", column, value))
        return self

    def neq(self, column: str, value: Any) -> "Query":
        self.filters.append(("neq", column, value))
        return self

    def is_(self, column: str, value: Any = None) -> "Query":
        self.filters.append(("is", column, value))
        return self

    def not_is(self, column: str, value: Any = None) -> "Query":
        self.filters.append(("not.is", column, value))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column: str, desc: bool = False) -> "Query":
        self.orders.append((column, desc))
        return self

    def limit(self, count: int) -> "Query":
        self.limit_count = int(count)
        return self

    def execute(self) -> List[Dict[str, Any]]:
        raise NotImplementedError
