"""
Request timing.

One ``PerformanceMonitor`` is created per application and stored on
``app.state``; the HTTP middleware in ``garageops.main`` feeds it.
"""
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class RouteTiming:
    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


class PerformanceMonitor:
    """Per-route request counts and durations."""

    def __init__(self, slow_threshold_ms: float = 1000.0):
        self.slow_threshold_ms = slow_threshold_ms
        self._routes: dict[str, RouteTiming] = {}

    def record(self, route: str, duration_ms: float):
        timing = self._routes.setdefault(route, RouteTiming())
        timing.count += 1
        timing.total_ms += duration_ms
        timing.max_ms = max(timing.max_ms, duration_ms)

        if duration_ms > self.slow_threshold_ms:
            logger.warning("Slow request %s took %.1fms", route, duration_ms)

    def stats(self) -> dict[str, dict[str, float]]:
        """Snapshot of the collected timings, keyed by route."""
        return {
            route: {
                "count": timing.count,
                "averageMs": round(timing.average_ms, 2),
                "maxMs": round(timing.max_ms, 2),
            }
            for route, timing in self._routes.items()
        }

    def reset(self):
        self._routes.clear()
