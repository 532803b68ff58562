"""Per-request record of best-effort steps, exposed as a response header."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEBUG_TRAIL_HEADER = "X-Debug-Trail"


@dataclass
class DebugTrail:
    """Ordered ``step=outcome`` pairs; outcomes are ``ok``, ``skipped`` or ``error``."""

    steps: list[tuple[str, str]] = field(default_factory=list)

    def ok(self, step: str) -> None:
        self.steps.append((step, "ok"))

    def skipped(self, step: str) -> None:
        self.steps.append((step, "skipped"))

    def error(self, step: str) -> None:
        logger.warning("Best-effort step failed step=%s", step, exc_info=True)
        self.steps.append((step, "error"))

    def outcome(self, step: str) -> str | None:
        for name, outcome in self.steps:
            if name == step:
                return outcome
        return None

    def header_value(self) -> str:
        return ";".join(f"{name}={outcome}" for name, outcome in self.steps)
