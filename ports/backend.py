from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Protocol


class QueryPort(Protocol):
    def select(self, columns: str = "*") -> "QueryPort":
        ...

    def insert(self, rows: Any) -> "QueryPort":
        ...

    def upsert(self, rows: Any, on_conflict: Optional[str] = None) -> "QueryPort":
        ...

    def update(self, values: Dict[str, Any]) -> "QueryPort":
        ...

    def delete(self) -> "QueryPort":
        ...

    def eq(self, column: str, value: Any) -> "QueryPort":
        ...

    def neq(self, column: str, value: Any) -> "QueryPort":
        ...

    def is_(self, column: str, value: Any = None) -> "QueryPort":
        ...

    def not_is(self, column: str, value: Any = None) -> "QueryPort":
        ...

    def in_(self, column: str, values: Iterable[Any]) -> "QueryPort":
        ...

    def order(self, column: str, desc: bool = False) -> "QueryPort":
        ...

    def limit(self, count: int) -> "QueryPort":
        ...

    def execute(self) -> List[Dict[str, Any]]:
        ...


class BackendPort(Protocol):
    def table(self, name: str) -> QueryPort:
        ...

    def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        ...
