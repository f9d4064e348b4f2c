from fastapi import APIRouter

from shotcoach.schemas.observability import ObservabilityMetricsResponse
from shotcoach.services.observability import observability_tracker

router = APIRouter(prefix="/observability", tags=["observability"])


@router.get("/metrics", response_model=ObservabilityMetricsResponse)
def get_metrics() -> ObservabilityMetricsResponse:
    return ObservabilityMetricsResponse(**observability_tracker.snapshot())
