"""
Per-request routing metrics.
Tracks step latency and every specialist attempt made while answering
one patient message.
"""

import time
from typing import Any
from contextvars import ContextVar

from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)

metrics_ctx: ContextVar["MetricsTracker | None"] = ContextVar("metrics", default=None)


class MetricsTracker:
    """
    Collects timings for a single routing request.
    Installs itself as the current tracker on creation.
    """

    def __init__(self):
        self.step_timings: dict[str, list[dict[str, float | None]]] = {}
        self.attempts: list[dict[str, Any]] = []
        self.start_time = time.perf_counter()
        self.total_time = 0.0
        metrics_ctx.set(self)

    def start_step(self, step: str) -> None:
        self.step_timings.setdefault(step, []).append(
            {"start": time.perf_counter(), "end": None}
        )

    def end_step(self, step: str) -> float:
        """
        Stop timing a step and return its elapsed time.

        Raises:
            ValueError: If the step has no open timing
        """
        timings = self.step_timings.get(step)
        if not timings or timings[-1]["end"] is not None:
            raise ValueError(f"No active timing for step '{step}'")

        timings[-1]["end"] = time.perf_counter()
        elapsed = timings[-1]["end"] - timings[-1]["start"]
        logger.debug("step_completed", step=step, elapsed=elapsed)
        return elapsed

    def record_attempt(
        self, agent: str, phase: str, success: bool, elapsed: float,
        error: str | None = None,
    ) -> dict[str, Any]:
        """
        Record one specialist invocation.

        Args:
            agent: Symbolic agent name
            phase: "primary" or "cascade"
            success: Whether the attempt produced a usable answer
            elapsed: Seconds spent on the attempt
            error: Failure detail, if any
        """
        attempt = {
            "agent": agent,
            "phase": phase,
            "success": success,
            "elapsed": elapsed,
            "error": error,
        }
        self.attempts.append(attempt)
        return attempt

    def finalize(self) -> dict[str, Any]:
        """Compute totals and log the request summary."""
        self.total_time = time.perf_counter() - self.start_time

        step_summary = {
            step: {
                "total_time": sum(
                    t["end"] - t["start"] for t in timings if t["end"] is not None
                ),
                "call_count": len(timings),
            }
            for step, timings in self.step_timings.items()
        }

        logger.info(
            "routing_metrics",
            total_time=self.total_time,
            attempts=len(self.attempts),
            step_summary=step_summary,
        )

        return {
            "total_time": self.total_time,
            "attempts": list(self.attempts),
            "step_summary": step_summary,
        }


def get_metrics() -> MetricsTracker | None:
    return metrics_ctx.get()
