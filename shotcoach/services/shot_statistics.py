from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from statistics import mean, median, pstdev
from typing import Protocol

from sqlalchemy.orm import Session

from shotcoach.core.constants import (
    ACCEPTABLE_EXTRACTION_MAX_SECONDS,
    ACCEPTABLE_EXTRACTION_MIN_SECONDS,
    ACCEPTABLE_RATIO_MAX,
    ACCEPTABLE_RATIO_MIN,
    CONSISTENT_RATIO_DEVIATION,
    CONSISTENT_TIME_DEVIATION_SECONDS,
    EXCELLENT_QUALITY_SCORE,
    GOOD_QUALITY_SCORE,
    MIN_SHOTS_FOR_DISTRIBUTION,
    MIN_SHOTS_FOR_TRENDS,
    OPTIMAL_EXTRACTION_MAX_SECONDS,
    OPTIMAL_EXTRACTION_MIN_SECONDS,
    OPTIMAL_RATIO_MAX,
    OPTIMAL_RATIO_MIN,
    QUALITY_ACCEPTABLE_RATIO_POINTS,
    QUALITY_ACCEPTABLE_TIME_POINTS,
    QUALITY_CONSISTENT_POINTS,
    QUALITY_DEVIATION_BONUS_POINTS,
    QUALITY_INCONSISTENT_POINTS,
    QUALITY_MAX_SCORE,
    QUALITY_OPTIMAL_TIME_POINTS,
    QUALITY_POOR_RATIO_POINTS,
    QUALITY_POOR_TIME_POINTS,
    QUALITY_TASTE_INFORMATIVE_POINTS,
    QUALITY_TASTE_NEUTRAL_POINTS,
    QUALITY_TASTE_PERFECT_POINTS,
    QUALITY_TREND_THRESHOLD,
    QUALITY_TYPICAL_RATIO_POINTS,
    RECENT_QUALITY_WINDOW,
    STABLE_RATIO_DELTA,
    STABLE_TIME_DELTA_SECONDS,
    TIGHT_RATIO_DEVIATION,
    TIGHT_TIME_DEVIATION_SECONDS,
    TREND_WINDOW_DAYS,
    TYPICAL_RATIO_MAX,
    TYPICAL_RATIO_MIN,
    TastePrimary,
)
from shotcoach.models.shot import Shot
from shotcoach.schemas.statistics import (
    BrewRatioAnalysisRead,
    ExtractionTimeAnalysisRead,
    GrinderSettingAnalysisRead,
    GrinderSettingStatsRead,
    InsufficientDataRead,
    QualityAnalysisRead,
    ShotQualityScoreRead,
    ShotTrendsRead,
)
from shotcoach.services.taste_correlator import is_optimal_extraction_time

_SECONDS_PER_DAY = 86400.0


class ShotRecord(Protocol):
    id: int
    bean_id: int
    dose_grams: float | None
    yield_grams: float | None
    extraction_time_seconds: int | None
    grinder_setting: float
    created_at: datetime
    taste_primary: TastePrimary | None


def _pct(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round(part / whole * 100, 2)


def _pct_change(value: float, baseline: float) -> float:
    if baseline == 0:
        return 0.0
    return round((value - baseline) / baseline * 100, 2)


def _ratio(shot: ShotRecord) -> float | None:
    if shot.dose_grams is None or shot.dose_grams <= 0 or shot.yield_grams is None:
        return None
    return shot.yield_grams / shot.dose_grams


def _time(shot: ShotRecord) -> int | None:
    if shot.extraction_time_seconds is None or shot.extraction_time_seconds <= 0:
        return None
    return shot.extraction_time_seconds


def _insufficient(shot_count: int, required: int) -> InsufficientDataRead:
    return InsufficientDataRead(shot_count=shot_count, required_shot_count=required)


def _time_bucket(seconds: int) -> str:
    if seconds < 20:
        return "under_20"
    if seconds < OPTIMAL_EXTRACTION_MIN_SECONDS:
        return "20_24"
    if seconds <= OPTIMAL_EXTRACTION_MAX_SECONDS:
        return "25_30"
    if seconds <= 35:
        return "31_35"
    return "over_35"


def _distance_to_band(value: float, lower: float, upper: float) -> float:
    if value < lower:
        return lower - value
    if value > upper:
        return value - upper
    return 0.0


def list_shots(db: Session, bean_id: int | None = None) -> list[Shot]:
    query = db.query(Shot)
    if bean_id is not None:
        query = query.filter(Shot.bean_id == bean_id)
    return query.order_by(Shot.created_at.asc(), Shot.id.asc()).all()


def analyze_brew_ratio(shots: Iterable[ShotRecord]) -> BrewRatioAnalysisRead | InsufficientDataRead:
    snapshot = list(shots)
    ratios = [ratio for ratio in (_ratio(shot) for shot in snapshot) if ratio is not None]
    if len(ratios) < MIN_SHOTS_FOR_DISTRIBUTION:
        return _insufficient(len(ratios), MIN_SHOTS_FOR_DISTRIBUTION)

    under = sum(1 for ratio in ratios if ratio < TYPICAL_RATIO_MIN)
    over = sum(1 for ratio in ratios if ratio > TYPICAL_RATIO_MAX)
    typical = len(ratios) - under - over
    optimal = sum(1 for ratio in ratios if OPTIMAL_RATIO_MIN <= ratio <= OPTIMAL_RATIO_MAX)

    return BrewRatioAnalysisRead(
        total_shots=len(ratios),
        excluded_shots=len(snapshot) - len(ratios),
        avg_ratio=mean(ratios),
        median_ratio=median(ratios),
        min_ratio=min(ratios),
        max_ratio=max(ratios),
        under_typical_pct=_pct(under, len(ratios)),
        typical_pct=_pct(typical, len(ratios)),
        optimal_pct=_pct(optimal, len(ratios)),
        over_typical_pct=_pct(over, len(ratios)),
        distribution={
            "under_typical": under,
            "typical": typical,
            "optimal": optimal,
            "over_typical": over,
        },
    )


def analyze_extraction_time(shots: Iterable[ShotRecord]) -> ExtractionTimeAnalysisRead | InsufficientDataRead:
    snapshot = list(shots)
    times = [seconds for seconds in (_time(shot) for shot in snapshot) if seconds is not None]
    if len(times) < MIN_SHOTS_FOR_DISTRIBUTION:
        return _insufficient(len(times), MIN_SHOTS_FOR_DISTRIBUTION)

    too_fast = sum(1 for seconds in times if seconds < OPTIMAL_EXTRACTION_MIN_SECONDS)
    too_slow = sum(1 for seconds in times if seconds > OPTIMAL_EXTRACTION_MAX_SECONDS)
    optimal = len(times) - too_fast - too_slow

    distribution = {"under_20": 0, "20_24": 0, "25_30": 0, "31_35": 0, "over_35": 0}
    for seconds in times:
        distribution[_time_bucket(seconds)] += 1

    return ExtractionTimeAnalysisRead(
        total_shots=len(times),
        excluded_shots=len(snapshot) - len(times),
        avg_time=mean(times),
        median_time=median(times),
        min_time=min(times),
        max_time=max(times),
        optimal_pct=_pct(optimal, len(times)),
        too_fast_pct=_pct(too_fast, len(times)),
        too_slow_pct=_pct(too_slow, len(times)),
        distribution=distribution,
    )


def analyze_trends(
    shots: Iterable[ShotRecord],
    days: int | None = TREND_WINDOW_DAYS,
    until: datetime | None = None,
) -> ShotTrendsRead | InsufficientDataRead:
    """Compare the earlier and later half of the recent shot history.

    The window covers ``days`` days ending at ``until`` (the newest shot when
    omitted); ``days=None`` analyzes the whole history. Only shots with both a
    usable ratio and a usable time take part. With an odd count the later
    half gets the extra shot.
    """
    snapshot = list(shots)
    if days is not None and snapshot:
        window_end = until or max(shot.created_at for shot in snapshot)
        window_start = window_end - timedelta(days=days)
        snapshot = [shot for shot in snapshot if window_start <= shot.created_at <= window_end]

    eligible = [shot for shot in snapshot if _ratio(shot) is not None and _time(shot) is not None]
    if len(eligible) < MIN_SHOTS_FOR_TRENDS:
        return _insufficient(len(eligible), MIN_SHOTS_FOR_TRENDS)

    eligible.sort(key=lambda shot: shot.created_at)
    midpoint = len(eligible) // 2
    first_half = eligible[:midpoint]
    second_half = eligible[midpoint:]

    first_ratio = mean(_ratio(shot) for shot in first_half)
    second_ratio = mean(_ratio(shot) for shot in second_half)
    first_time = mean(_time(shot) for shot in first_half)
    second_time = mean(_time(shot) for shot in second_half)

    ratio_delta = second_ratio - first_ratio
    time_delta = second_time - first_time

    ratio_distances = (
        _distance_to_band(first_ratio, OPTIMAL_RATIO_MIN, OPTIMAL_RATIO_MAX),
        _distance_to_band(second_ratio, OPTIMAL_RATIO_MIN, OPTIMAL_RATIO_MAX),
    )
    time_distances = (
        _distance_to_band(first_time, OPTIMAL_EXTRACTION_MIN_SECONDS, OPTIMAL_EXTRACTION_MAX_SECONDS),
        _distance_to_band(second_time, OPTIMAL_EXTRACTION_MIN_SECONDS, OPTIMAL_EXTRACTION_MAX_SECONDS),
    )

    if abs(ratio_delta) < STABLE_RATIO_DELTA and abs(time_delta) < STABLE_TIME_DELTA_SECONDS:
        trend = "stable"
    elif ratio_distances[0] == ratio_distances[1] and time_distances[0] == time_distances[1]:
        # Movement that neither approaches nor leaves the bands, e.g. drifting inside them.
        trend = "stable"
    elif all(later <= earlier for earlier, later in (ratio_distances, time_distances)):
        trend = "improving"
    else:
        trend = "declining"

    span_days = (eligible[-1].created_at - eligible[0].created_at).total_seconds() / _SECONDS_PER_DAY
    # Shots pulled within a single day still count as one day of history.
    days_analyzed = max(span_days, 1.0)

    return ShotTrendsRead(
        window_days=days,
        total_shots=len(eligible),
        days_analyzed=round(days_analyzed, 2),
        shots_per_day=round(len(eligible) / days_analyzed, 2),
        first_half_avg_ratio=first_ratio,
        second_half_avg_ratio=second_ratio,
        first_half_avg_time=first_time,
        second_half_avg_time=second_time,
        brew_ratio_trend=ratio_delta,
        extraction_time_trend=time_delta,
        trend=trend,
    )


def analyze_grinder_settings(shots: Iterable[ShotRecord]) -> GrinderSettingAnalysisRead | InsufficientDataRead:
    snapshot = list(shots)
    if len(snapshot) < MIN_SHOTS_FOR_DISTRIBUTION:
        return _insufficient(len(snapshot), MIN_SHOTS_FOR_DISTRIBUTION)

    grouped: dict[float, list[ShotRecord]] = {}
    for shot in snapshot:
        grouped.setdefault(round(shot.grinder_setting, 2), []).append(shot)

    settings: list[GrinderSettingStatsRead] = []
    for grinder_setting in sorted(grouped):
        group = grouped[grinder_setting]
        ratios = [ratio for ratio in (_ratio(shot) for shot in group) if ratio is not None]
        times = [seconds for seconds in (_time(shot) for shot in group) if seconds is not None]
        optimal = sum(1 for seconds in times if is_optimal_extraction_time(seconds))
        settings.append(
            GrinderSettingStatsRead(
                grinder_setting=grinder_setting,
                shot_count=len(group),
                avg_ratio=mean(ratios) if ratios else None,
                avg_time=mean(times) if times else None,
                optimal_time_pct=_pct(optimal, len(times)),
            )
        )

    # Ties go to the finer (lower) setting since settings are sorted ascending.
    most_used = max(settings, key=lambda row: row.shot_count)
    best_performing = max(settings, key=lambda row: (row.optimal_time_pct, row.shot_count))

    return GrinderSettingAnalysisRead(
        total_settings=len(settings),
        settings=settings,
        most_used_setting=most_used,
        best_performing_setting=best_performing,
    )


def _quality_tier(score: float) -> str:
    if score >= EXCELLENT_QUALITY_SCORE:
        return "excellent"
    if score >= GOOD_QUALITY_SCORE:
        return "good"
    return "needs_work"


def _time_points(seconds: int) -> int:
    if is_optimal_extraction_time(seconds):
        return QUALITY_OPTIMAL_TIME_POINTS
    if ACCEPTABLE_EXTRACTION_MIN_SECONDS <= seconds <= ACCEPTABLE_EXTRACTION_MAX_SECONDS:
        return QUALITY_ACCEPTABLE_TIME_POINTS
    return QUALITY_POOR_TIME_POINTS


def _ratio_points(ratio: float) -> int:
    if TYPICAL_RATIO_MIN <= ratio <= TYPICAL_RATIO_MAX:
        return QUALITY_TYPICAL_RATIO_POINTS
    if ACCEPTABLE_RATIO_MIN <= ratio <= ACCEPTABLE_RATIO_MAX:
        return QUALITY_ACCEPTABLE_RATIO_POINTS
    return QUALITY_POOR_RATIO_POINTS


def _taste_points(taste: TastePrimary | None) -> int:
    if taste is None:
        return QUALITY_TASTE_NEUTRAL_POINTS
    if taste == TastePrimary.PERFECT:
        return QUALITY_TASTE_PERFECT_POINTS
    return QUALITY_TASTE_INFORMATIVE_POINTS


def score_shot(shot: ShotRecord, avg_ratio: float, avg_time: float) -> int:
    """Score one shot from 0 to 100 against its bean's average ratio and time.

    Timing, ratio and taste feedback score the shot itself; staying close to
    the bean's averages earns the consistency points and a precision bonus.
    """
    ratio = _ratio(shot)
    seconds = _time(shot)
    if ratio is None or seconds is None:
        raise ValueError("Only shots with a usable ratio and time can be scored")

    ratio_deviation = abs(ratio - avg_ratio)
    time_deviation = abs(seconds - avg_time)

    score = _time_points(seconds) + _ratio_points(ratio) + _taste_points(shot.taste_primary)
    if ratio_deviation < CONSISTENT_RATIO_DEVIATION and time_deviation < CONSISTENT_TIME_DEVIATION_SECONDS:
        score += QUALITY_CONSISTENT_POINTS
    else:
        score += QUALITY_INCONSISTENT_POINTS
    if ratio_deviation < TIGHT_RATIO_DEVIATION:
        score += QUALITY_DEVIATION_BONUS_POINTS
    if time_deviation < TIGHT_TIME_DEVIATION_SECONDS:
        score += QUALITY_DEVIATION_BONUS_POINTS
    return min(max(score, 0), QUALITY_MAX_SCORE)


def analyze_quality(shots: Iterable[ShotRecord]) -> QualityAnalysisRead | InsufficientDataRead:
    snapshot = list(shots)
    eligible = [shot for shot in snapshot if _ratio(shot) is not None and _time(shot) is not None]
    if len(eligible) < MIN_SHOTS_FOR_DISTRIBUTION:
        return _insufficient(len(eligible), MIN_SHOTS_FOR_DISTRIBUTION)

    by_bean: dict[int, list[ShotRecord]] = {}
    for shot in eligible:
        by_bean.setdefault(shot.bean_id, []).append(shot)
    bean_averages = {
        bean_id: (mean(_ratio(shot) for shot in group), mean(_time(shot) for shot in group))
        for bean_id, group in by_bean.items()
    }

    eligible.sort(key=lambda shot: (shot.created_at, shot.id))
    scored = [(shot, score_shot(shot, *bean_averages[shot.bean_id])) for shot in eligible]
    scores = [score for _, score in scored]

    overall_average = mean(scores)
    recent_average = mean(scores[-RECENT_QUALITY_WINDOW:])
    if recent_average > overall_average + QUALITY_TREND_THRESHOLD:
        trend = "improving"
    elif recent_average < overall_average - QUALITY_TREND_THRESHOLD:
        trend = "declining"
    else:
        trend = "stable"

    # Inverse coefficient of variation, as a 0-100 score.
    consistency = QUALITY_MAX_SCORE - pstdev(scores) / overall_average * 100 if overall_average > 0 else 0.0
    consistency = min(max(consistency, 0.0), float(QUALITY_MAX_SCORE))

    return QualityAnalysisRead(
        total_shots=len(eligible),
        excluded_shots=len(snapshot) - len(eligible),
        overall_average=round(overall_average, 2),
        recent_average=round(recent_average, 2),
        quality_tier=_quality_tier(recent_average),
        excellent_count=sum(1 for score in scores if score >= EXCELLENT_QUALITY_SCORE),
        good_count=sum(1 for score in scores if GOOD_QUALITY_SCORE <= score < EXCELLENT_QUALITY_SCORE),
        needs_work_count=sum(1 for score in scores if score < GOOD_QUALITY_SCORE),
        trend=trend,
        improvement_rate_pct=_pct_change(recent_average, overall_average),
        consistency_score=round(consistency, 2),
        scores=[
            ShotQualityScoreRead(
                shot_id=shot.id,
                bean_id=shot.bean_id,
                created_at=shot.created_at,
                score=score,
                tier=_quality_tier(score),
            )
            for shot, score in scored
        ],
    )
