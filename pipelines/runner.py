from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    dry_run: bool = True
    attendees: list = field(default_factory=list)
    companies: list = field(default_factory=list)
    previews: list = field(default_factory=list)
    snapshot: Optional[Any] = None
    log: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def note(self, message: str) -> None:
        """Append a line to the human-readable run log."""
        self.log.append(message)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        run_id = ctx.meta.setdefault("run_id", uuid.uuid4().hex[:12])
        for step in self.steps:
            name = type(step).__name__
            t0 = time.time()
            try:
                ctx = step.run(ctx)
            except Exception as e:
                logger.error(
                    f"step {name} failed",
                    extra={"step": name, "status": "error", "error": str(e), "run_id": run_id,
                           "duration_ms": int((time.time() - t0) * 1000)},
                )
                raise
            logger.info(
                f"step {name} done",
                extra={"step": name, "status": "ok", "run_id": run_id, "duration_ms": int((time.time() - t0) * 1000)},
            )
        return ctx
