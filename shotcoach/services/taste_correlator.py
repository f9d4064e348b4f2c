import math

from shotcoach.core.constants import OPTIMAL_EXTRACTION_MAX_SECONDS, OPTIMAL_EXTRACTION_MIN_SECONDS, TastePrimary


def predict_taste(extraction_time_seconds: float | None) -> TastePrimary | None:
    """Expected taste for an extraction time; None when no usable time is known."""
    if extraction_time_seconds is None or extraction_time_seconds <= 0:
        return None
    if extraction_time_seconds < OPTIMAL_EXTRACTION_MIN_SECONDS:
        return TastePrimary.SOUR
    if extraction_time_seconds <= OPTIMAL_EXTRACTION_MAX_SECONDS:
        return TastePrimary.PERFECT
    return TastePrimary.BITTER


def extraction_time_deviation(extraction_time_seconds: float | None) -> int:
    """Signed whole seconds from the nearest edge of the optimal band, 0 inside it."""
    if extraction_time_seconds is None or extraction_time_seconds <= 0:
        return 0
    if extraction_time_seconds < OPTIMAL_EXTRACTION_MIN_SECONDS:
        return math.floor(extraction_time_seconds - OPTIMAL_EXTRACTION_MIN_SECONDS)
    if extraction_time_seconds > OPTIMAL_EXTRACTION_MAX_SECONDS:
        return math.ceil(extraction_time_seconds - OPTIMAL_EXTRACTION_MAX_SECONDS)
    return 0


def is_optimal_extraction_time(extraction_time_seconds: float | None) -> bool:
    return predict_taste(extraction_time_seconds) == TastePrimary.PERFECT
