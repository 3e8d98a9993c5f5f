from __future__ import annotations

from typing import Any, Optional


UNIQUE_VIOLATION = "23505"


class BackendError(Exception):
    """Failure reported by the hosted backend (API error or transport error)."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status = status

    @classmethod
    def from_api_error(cls, error: Any) -> "BackendError":
        """Build from the client library's API error (message/code/details/hint)."""
        code = getattr(error, "code", None)
        return cls(
            str(getattr(error, "message", None) or error),
            code=str(code) if code is not None else None,
            details=getattr(error, "details", None),
            hint=getattr(error, "hint", None),
        )

    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION or "duplicate key" in (self.message or "")

