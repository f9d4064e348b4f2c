"""Grind adjustment recommendations from a single shot.

Policy, highest priority first:

- Explicit taste feedback decides the direction (sour -> finer, bitter ->
  coarser, perfect -> no change) with HIGH confidence.
- Without taste feedback the extraction time is classified against the
  optimal band; confidence is MEDIUM at best and LOW for borderline shots.
- With neither signal the answer is NO_CHANGE at LOW confidence.

The magnitude grows with the timing deviation and the suggested value is
always snapped onto the grinder scale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from shotcoach.core.constants import (
    BAND_EDGE_MARGIN_SECONDS,
    MAJOR_ADJUSTMENT_STEPS,
    MINOR_ADJUSTMENT_STEPS,
    MINOR_DEVIATION_SECONDS,
    MODERATE_ADJUSTMENT_STEPS,
    MODERATE_DEVIATION_SECONDS,
    OPTIMAL_EXTRACTION_MAX_SECONDS,
    OPTIMAL_EXTRACTION_MIN_SECONDS,
    AdjustmentDirection,
    ConfidenceLevel,
    ReasonCode,
    TastePrimary,
    TasteSecondary,
)
from shotcoach.services.grinder_scale import GrinderScale
from shotcoach.services.taste_correlator import extraction_time_deviation, predict_taste


class ShotSignals(Protocol):
    grinder_setting: float
    extraction_time_seconds: int | None
    taste_primary: TastePrimary | None
    taste_secondary: TasteSecondary | None


@dataclass(frozen=True)
class GrindAdjustmentRecommendation:
    previous_grind_setting: float
    suggested_grind_setting: float
    adjustment_direction: AdjustmentDirection
    adjustment_steps: int
    confidence_level: ConfidenceLevel
    extraction_time_deviation: int
    taste_issue: TastePrimary | None
    reason_code: ReasonCode
    clamped: bool = False

    @property
    def has_adjustment(self) -> bool:
        return self.adjustment_direction != AdjustmentDirection.NO_CHANGE


_TASTE_DIRECTIONS: dict[TastePrimary, AdjustmentDirection] = {
    TastePrimary.SOUR: AdjustmentDirection.FINER,
    TastePrimary.BITTER: AdjustmentDirection.COARSER,
    TastePrimary.PERFECT: AdjustmentDirection.NO_CHANGE,
}

_TASTE_REASONS: dict[TastePrimary, ReasonCode] = {
    TastePrimary.SOUR: ReasonCode.TASTE_SOUR,
    TastePrimary.BITTER: ReasonCode.TASTE_BITTER,
    TastePrimary.PERFECT: ReasonCode.TASTE_PERFECT,
}

_TIME_REASONS: dict[TastePrimary, ReasonCode] = {
    TastePrimary.SOUR: ReasonCode.TIME_TOO_FAST,
    TastePrimary.BITTER: ReasonCode.TIME_TOO_SLOW,
    TastePrimary.PERFECT: ReasonCode.TIME_OPTIMAL,
}


def steps_for_deviation(deviation_seconds: int) -> int:
    magnitude = abs(deviation_seconds)
    if magnitude <= MINOR_DEVIATION_SECONDS:
        return MINOR_ADJUSTMENT_STEPS
    if magnitude <= MODERATE_DEVIATION_SECONDS:
        return MODERATE_ADJUSTMENT_STEPS
    return MAJOR_ADJUSTMENT_STEPS


def _steps_for_taste(
    direction: AdjustmentDirection,
    deviation_seconds: int,
    taste_secondary: TasteSecondary | None,
) -> int:
    # Timing only scales the move when it points the same way as the taste.
    timing_agrees = (direction == AdjustmentDirection.FINER and deviation_seconds < 0) or (
        direction == AdjustmentDirection.COARSER and deviation_seconds > 0
    )
    steps = steps_for_deviation(deviation_seconds) if timing_agrees else MINOR_ADJUSTMENT_STEPS

    if taste_secondary == TasteSecondary.STRONG:
        steps += 1
    return min(steps, MAJOR_ADJUSTMENT_STEPS)


def _timing_confidence(extraction_time_seconds: float, deviation_seconds: int) -> ConfidenceLevel:
    if deviation_seconds != 0:
        if abs(deviation_seconds) >= MINOR_DEVIATION_SECONDS:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    distance_to_edge = min(
        extraction_time_seconds - OPTIMAL_EXTRACTION_MIN_SECONDS,
        OPTIMAL_EXTRACTION_MAX_SECONDS - extraction_time_seconds,
    )
    if distance_to_edge >= BAND_EDGE_MARGIN_SECONDS:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _move(
    scale: GrinderScale,
    previous: float,
    direction: AdjustmentDirection,
    steps: int,
) -> tuple[float, int, bool]:
    start = scale.round_to_nearest_step(previous)
    if direction == AdjustmentDirection.NO_CHANGE or steps == 0:
        return start, 0, False

    sign = -1 if direction == AdjustmentDirection.FINER else 1
    target = start + sign * steps * scale.step_size
    clamped = target < scale.scale_min or target > scale.scale_max
    suggested = scale.round_to_nearest_step(target)
    actual_steps = round(abs(suggested - start) / scale.step_size)
    return suggested, actual_steps, clamped


def recommend(shot: ShotSignals, scale: GrinderScale) -> GrindAdjustmentRecommendation:
    scale.ensure_valid()

    extraction_time = shot.extraction_time_seconds
    predicted = predict_taste(extraction_time)
    deviation = extraction_time_deviation(extraction_time)
    taste = shot.taste_primary

    if taste is not None:
        direction = _TASTE_DIRECTIONS[taste]
        reason = _TASTE_REASONS[taste]
        confidence = ConfidenceLevel.HIGH
        steps = 0
        if direction != AdjustmentDirection.NO_CHANGE:
            steps = _steps_for_taste(direction, deviation, shot.taste_secondary)
    elif predicted is not None and extraction_time is not None:
        direction = _TASTE_DIRECTIONS[predicted]
        reason = _TIME_REASONS[predicted]
        confidence = _timing_confidence(extraction_time, deviation)
        steps = 0 if direction == AdjustmentDirection.NO_CHANGE else steps_for_deviation(deviation)
    else:
        direction = AdjustmentDirection.NO_CHANGE
        reason = ReasonCode.NO_SIGNAL
        confidence = ConfidenceLevel.LOW
        steps = 0

    suggested, actual_steps, clamped = _move(scale, shot.grinder_setting, direction, steps)

    return GrindAdjustmentRecommendation(
        previous_grind_setting=shot.grinder_setting,
        suggested_grind_setting=suggested,
        adjustment_direction=direction,
        adjustment_steps=actual_steps,
        confidence_level=confidence,
        extraction_time_deviation=deviation,
        taste_issue=taste,
        reason_code=reason,
        clamped=clamped,
    )
