from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


PERSONAL_EMAIL_DOMAINS: list[str] = [
    "gmail.com",
    "yahoo.com",
    "hotmail.com",
    "outlook.com",
    "aol.com",
    "icloud.com",
    "me.com",
    "live.com",
    "msn.com",
    "example.com",
    "test.com",
    "temp.com",
    "conference.temp",
]


@dataclass(frozen=True)
class Settings:
    # Hosted backend (PostgREST endpoint of the managed Postgres project)
    supabase_url: str | None
    supabase_key: str | None

    log_level: str
    run_env: str

    # Limits/Timeouts
    http_timeout_seconds: int
    logo_probe_timeout_seconds: float
    logo_probe_concurrency: int
    max_apax_partners: int

    # Output
    export_dir: str
    analytics_top_n: int

    logo_dev_token: str = "pk_X-1ZO13ESEOdEhzIBHMKcQ"
    personal_email_domains: list[str] = field(default_factory=lambda: list(PERSONAL_EMAIL_DOMAINS))

    def require_backend(self) -> tuple[str, str]:
        if not self.supabase_url or not self.supabase_key:
            raise RuntimeError(
                "SUPABASE_URL and SUPABASE_ANON_KEY must be set (env or .env) to reach the backend"
            )
        return self.supabase_url, self.supabase_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        run_env=os.getenv("RUN_ENV", "local"),
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "20")),
        logo_probe_timeout_seconds=float(os.getenv("LOGO_PROBE_TIMEOUT_SECONDS", "5")),
        logo_probe_concurrency=int(os.getenv("LOGO_PROBE_CONCURRENCY", "6")),
        max_apax_partners=int(os.getenv("MAX_APAX_PARTNERS", "3")),
        export_dir=os.getenv("EXPORT_DIR", "exports"),
        analytics_top_n=int(os.getenv("ANALYTICS_TOP_N", "5")),
        logo_dev_token=os.getenv("LOGO_DEV_TOKEN", "pk_X-1ZO13ESEOdEhzIBHMKcQ"),
    )
