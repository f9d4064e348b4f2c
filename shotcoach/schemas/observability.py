from datetime import datetime

from pydantic import BaseModel


class RouteMetricsRead(BaseModel):
    method: str
    path: str
    count: int
    avg_latency_ms: float
    max_latency_ms: float
    status_counts: dict[str, int]


class FollowThroughCountsRead(BaseModel):
    followed: int
    ignored: int


class ObservabilityMetricsResponse(BaseModel):
    generated_at: datetime
    uptime_seconds: int
    total_requests: int
    recommendations_by_confidence: dict[str, int]
    follow_through: FollowThroughCountsRead
    routes: list[RouteMetricsRead]
