from __future__ import annotations

from typing import Optional

from config.settings import get_settings
from db.client import BackendClient


def get_client(url: Optional[str] = None, key: Optional[str] = None, timeout: Optional[float] = None) -> BackendClient:
    """Open a client for the hosted backend.

    Explicit arguments win; otherwise credentials come from settings
    (SUPABASE_URL / SUPABASE_ANON_KEY).
    """
    settings = get_settings()
    if not (url and key):
        url, key = settings.require_backend()
    return BackendClient(url, key, timeout=timeout or settings.http_timeout_seconds)
