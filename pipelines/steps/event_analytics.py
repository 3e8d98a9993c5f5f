from __future__ import annotations

from pipelines.runner import RunContext
from ports.backend import BackendPort
from services.analytics import build_event_analytics, build_sponsor_report, load_event_snapshot


class LoadEventSnapshot:
    def __init__(self, client: BackendPort) -> None:
        self.client = client

    def run(self, ctx: RunContext) -> RunContext:
        ctx.snapshot = load_event_snapshot(self.client)
        ctx.attendees = ctx.snapshot.attendees
        ctx.companies = ctx.snapshot.companies
        return ctx


class BuildEventAnalytics:
    def __init__(self, include_sponsor_report: bool = False) -> None:
        self.include_sponsor_report = include_sponsor_report

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.snapshot is None:
            raise RuntimeError("BuildEventAnalytics requires a loaded event snapshot")
        ctx.meta["analytics"] = build_event_analytics(ctx.snapshot)
        if self.include_sponsor_report:
            ctx.meta["sponsor_report"] = build_sponsor_report(ctx.snapshot)
        return ctx
