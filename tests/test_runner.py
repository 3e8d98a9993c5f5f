from __future__ import annotations

import logging

import pytest

from pipelines.runner import Pipeline, RunContext


class _Note:
    def run(self, ctx: RunContext) -> RunContext:
        ctx.note("hello")
        return ctx


class _Boom:
    def run(self, ctx: RunContext) -> RunContext:
        raise RuntimeError("nope")


def test_pipeline_runs_steps_and_sets_run_id():
    ctx = Pipeline([_Note(), _Note()]).run(RunContext())
    assert ctx.log == ["hello", "hello"]
    assert len(ctx.meta["run_id"]) == 12


def test_pipeline_logs_and_reraises(caplog):
    caplog.set_level(logging.INFO, logger="pipelines.runner")
    with pytest.raises(RuntimeError):
        Pipeline([_Note(), _Boom()]).run(RunContext())
    failed = [r for r in caplog.records if getattr(r, "status", None) == "error"]
    assert failed and failed[0].step == "_Boom"
    assert any(getattr(r, "step", None) == "_Note" and r.status == "ok" for r in caplog.records)
