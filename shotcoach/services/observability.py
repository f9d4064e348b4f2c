from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock


def _status_class(status_code: int) -> str:
    return f"{status_code // 100}xx"


@dataclass
class RouteStats:
    method: str
    path: str
    count: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0
    status_counts: Counter = field(default_factory=Counter)

    def record(self, duration_ms: float, status_code: int) -> None:
        self.count += 1
        self.total_latency_ms += duration_ms
        self.max_latency_ms = max(self.max_latency_ms, duration_ms)
        self.status_counts[_status_class(status_code)] += 1

    @property
    def avg_latency_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_latency_ms / self.count

    def as_dict(self) -> dict[str, object]:
        return {
            "method": self.method,
            "path": self.path,
            "count": self.count,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "max_latency_ms": round(self.max_latency_ms, 2),
            "status_counts": dict(sorted(self.status_counts.items())),
        }


class ObservabilityTracker:
    """In-process counters for requests and coaching activity since startup."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._started_at = datetime.utcnow()
            self._routes: dict[tuple[str, str], RouteStats] = {}
            self._recommendations: Counter = Counter()
            self._follow_through: Counter = Counter()

    def record(self, *, method: str, path: str, status_code: int, duration_ms: float) -> None:
        key = (method, path)
        with self._lock:
            route = self._routes.get(key)
            if route is None:
                route = RouteStats(method=method, path=path)
                self._routes[key] = route
            route.record(duration_ms=duration_ms, status_code=status_code)

    def record_recommendation(self, confidence_level: str) -> None:
        with self._lock:
            self._recommendations[confidence_level] += 1

    def record_follow_through(self, was_followed: bool) -> None:
        with self._lock:
            self._follow_through["followed" if was_followed else "ignored"] += 1

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            now = datetime.utcnow()
            routes = sorted(self._routes.values(), key=lambda item: (item.path, item.method))
            return {
                "generated_at": now,
                "uptime_seconds": int((now - self._started_at).total_seconds()),
                "total_requests": sum(route.count for route in routes),
                "recommendations_by_confidence": dict(self._recommendations),
                "follow_through": {
                    "followed": self._follow_through["followed"],
                    "ignored": self._follow_through["ignored"],
                },
                "routes": [route.as_dict() for route in routes],
            }


observability_tracker = ObservabilityTracker()
