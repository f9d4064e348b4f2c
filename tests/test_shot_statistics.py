from datetime import datetime, timedelta
from itertools import count
from statistics import mean, pstdev
from types import SimpleNamespace

import pytest

from shotcoach.core.constants import TastePrimary
from shotcoach.schemas.statistics import (
    BrewRatioAnalysisRead,
    ExtractionTimeAnalysisRead,
    GrinderSettingAnalysisRead,
    InsufficientDataRead,
    QualityAnalysisRead,
    ShotTrendsRead,
)
from shotcoach.services.shot_statistics import (
    analyze_brew_ratio,
    analyze_extraction_time,
    analyze_grinder_settings,
    analyze_quality,
    analyze_trends,
    score_shot,
)

_START = datetime(2026, 10, 1, 8, 0, 0)
_IDS = count(1)


def _shot(
    dose: float | None = 18.0,
    yield_grams: float | None = 36.0,
    seconds: int | None = 27,
    grinder_setting: float = 5.0,
    day: float = 0,
    taste: TastePrimary | None = None,
    bean_id: int = 1,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=next(_IDS),
        bean_id=bean_id,
        dose_grams=dose,
        yield_grams=yield_grams,
        extraction_time_seconds=seconds,
        grinder_setting=grinder_setting,
        created_at=_START + timedelta(days=day),
        taste_primary=taste,
    )


def test_brew_ratio_matches_independent_arithmetic() -> None:
    pairs = [(18.0, 36.0), (18.0, 40.0), (20.0, 50.0), (18.0, 30.0)]
    shots = [_shot(dose=dose, yield_grams=out) for dose, out in pairs]
    shots.append(_shot(dose=0.0, yield_grams=36.0))

    result = analyze_brew_ratio(shots)

    assert isinstance(result, BrewRatioAnalysisRead)
    ratios = sorted(out / dose for dose, out in pairs)
    assert result.status == "computed"
    assert result.total_shots == 4
    assert result.excluded_shots == 1
    assert result.avg_ratio == pytest.approx(sum(ratios) / len(ratios))
    assert result.median_ratio == pytest.approx((ratios[1] + ratios[2]) / 2)
    assert result.min_ratio == pytest.approx(30.0 / 18.0)
    assert result.max_ratio == pytest.approx(2.5)
    assert result.typical_pct == 100.0
    assert result.optimal_pct == 75.0
    assert result.under_typical_pct == 0.0
    assert result.over_typical_pct == 0.0


def test_brew_ratio_bands_outside_typical() -> None:
    shots = [
        _shot(dose=18.0, yield_grams=20.0),
        _shot(dose=18.0, yield_grams=36.0),
        _shot(dose=18.0, yield_grams=60.0),
    ]

    result = analyze_brew_ratio(shots)

    assert isinstance(result, BrewRatioAnalysisRead)
    assert result.distribution == {"under_typical": 1, "typical": 1, "optimal": 1, "over_typical": 1}
    assert result.under_typical_pct == 33.33
    assert result.over_typical_pct == 33.33


def test_brew_ratio_minimum_sample_boundary() -> None:
    below = analyze_brew_ratio([_shot(), _shot(), _shot(dose=None)])
    assert isinstance(below, InsufficientDataRead)
    assert below.status == "insufficient_data"
    assert below.shot_count == 2
    assert below.required_shot_count == 3

    at_threshold = analyze_brew_ratio([_shot(), _shot(), _shot()])
    assert isinstance(at_threshold, BrewRatioAnalysisRead)


def test_extraction_time_statistics_and_buckets() -> None:
    shots = [_shot(seconds=seconds) for seconds in (18, 27, 29, 33, 40)]
    shots.append(_shot(seconds=None))

    result = analyze_extraction_time(shots)

    assert isinstance(result, ExtractionTimeAnalysisRead)
    assert result.total_shots == 5
    assert result.excluded_shots == 1
    assert result.avg_time == pytest.approx(29.4)
    assert result.median_time == 29
    assert result.min_time == 18
    assert result.max_time == 40
    assert result.optimal_pct == 40.0
    assert result.too_fast_pct == 20.0
    assert result.too_slow_pct == 40.0
    assert result.distribution == {"under_20": 1, "20_24": 0, "25_30": 2, "31_35": 1, "over_35": 1}


def test_extraction_time_minimum_sample_boundary() -> None:
    shots = [_shot(seconds=26), _shot(seconds=28)]
    assert isinstance(analyze_extraction_time(shots), InsufficientDataRead)

    shots.append(_shot(seconds=30))
    assert isinstance(analyze_extraction_time(shots), ExtractionTimeAnalysisRead)


def test_trends_need_five_shots() -> None:
    shots = [_shot(day=index) for index in range(4)]
    result = analyze_trends(shots)
    assert isinstance(result, InsufficientDataRead)
    assert result.required_shot_count == 5

    shots.append(_shot(day=4))
    assert isinstance(analyze_trends(shots), ShotTrendsRead)


def test_trends_improving_when_both_halves_move_toward_optimal() -> None:
    shots = [
        _shot(yield_grams=28.8, seconds=18, day=0),
        _shot(yield_grams=30.6, seconds=20, day=1),
        _shot(yield_grams=39.6, seconds=27, day=2),
        _shot(yield_grams=41.4, seconds=28, day=3),
        _shot(yield_grams=39.6, seconds=26, day=4),
    ]

    result = analyze_trends(reversed(shots))

    assert isinstance(result, ShotTrendsRead)
    assert result.trend == "improving"
    assert result.first_half_avg_time == pytest.approx(19.0)
    assert result.second_half_avg_time == pytest.approx(27.0)
    assert result.extraction_time_trend == pytest.approx(8.0)
    assert result.days_analyzed == 4.0
    assert result.shots_per_day == 1.25


def test_trends_declining_when_moving_away() -> None:
    shots = [
        _shot(yield_grams=39.6, seconds=27, day=0),
        _shot(yield_grams=41.4, seconds=28, day=1),
        _shot(yield_grams=30.6, seconds=20, day=2),
        _shot(yield_grams=28.8, seconds=18, day=3),
        _shot(yield_grams=28.8, seconds=19, day=4),
    ]

    result = analyze_trends(shots)

    assert isinstance(result, ShotTrendsRead)
    assert result.trend == "declining"


def test_trends_stable_for_small_changes() -> None:
    shots = [_shot(seconds=27, day=index / 10) for index in range(6)]

    result = analyze_trends(shots)

    assert isinstance(result, ShotTrendsRead)
    assert result.trend == "stable"
    assert result.brew_ratio_trend == pytest.approx(0.0)
    assert result.days_analyzed == 1.0
    assert result.shots_per_day == 6.0


def test_trends_stable_when_both_halves_stay_inside_optimal_bands() -> None:
    shots = [
        _shot(yield_grams=36.0, seconds=27, day=0),
        _shot(yield_grams=36.0, seconds=27, day=1),
        _shot(yield_grams=43.2, seconds=27, day=2),
        _shot(yield_grams=43.2, seconds=27, day=3),
        _shot(yield_grams=43.2, seconds=27, day=4),
    ]

    result = analyze_trends(shots)

    assert isinstance(result, ShotTrendsRead)
    assert result.brew_ratio_trend == pytest.approx(0.4)
    assert result.trend == "stable"


def test_trends_only_use_shots_inside_the_window() -> None:
    old_shots = [_shot(seconds=18, yield_grams=28.8, day=day) for day in range(3)]
    recent_shots = [_shot(seconds=27, day=40 + day) for day in range(5)]

    windowed = analyze_trends(old_shots + recent_shots)
    assert isinstance(windowed, ShotTrendsRead)
    assert windowed.window_days == 30
    assert windowed.total_shots == 5
    assert windowed.trend == "stable"
    assert windowed.days_analyzed == 4.0

    full_history = analyze_trends(old_shots + recent_shots, days=None)
    assert isinstance(full_history, ShotTrendsRead)
    assert full_history.window_days is None
    assert full_history.total_shots == 8
    assert full_history.trend == "improving"


def test_trends_window_ends_at_the_given_time() -> None:
    shots = [_shot(day=day) for day in range(5)]

    stale = analyze_trends(shots, days=7, until=_START + timedelta(days=30))

    assert isinstance(stale, InsufficientDataRead)
    assert stale.shot_count == 0


def test_grinder_setting_analysis() -> None:
    shots = [
        _shot(grinder_setting=5.0, seconds=27),
        _shot(grinder_setting=5.0, seconds=28),
        _shot(grinder_setting=5.0, seconds=20),
        _shot(grinder_setting=5.5, seconds=27),
    ]

    result = analyze_grinder_settings(shots)

    assert isinstance(result, GrinderSettingAnalysisRead)
    assert result.total_settings == 2
    assert [row.grinder_setting for row in result.settings] == [5.0, 5.5]
    assert result.most_used_setting.grinder_setting == 5.0
    assert result.most_used_setting.shot_count == 3
    assert result.most_used_setting.optimal_time_pct == 66.67
    assert result.best_performing_setting.grinder_setting == 5.5


def test_grinder_setting_analysis_needs_three_shots() -> None:
    assert isinstance(analyze_grinder_settings([_shot(), _shot()]), InsufficientDataRead)


def test_analysis_reads_a_snapshot_of_any_iterable() -> None:
    result = analyze_brew_ratio(_shot() for _ in range(3))

    assert isinstance(result, BrewRatioAnalysisRead)
    assert result.total_shots == 3


def test_score_shot_components() -> None:
    ideal = _shot(seconds=28, taste=TastePrimary.PERFECT)
    assert score_shot(ideal, avg_ratio=2.0, avg_time=28) == 100

    assert score_shot(_shot(seconds=28, taste=TastePrimary.SOUR), avg_ratio=2.0, avg_time=28) == 80
    assert score_shot(_shot(seconds=28), avg_ratio=2.0, avg_time=28) == 85
    assert score_shot(_shot(seconds=20), avg_ratio=2.0, avg_time=20) == 75
    assert score_shot(_shot(seconds=15), avg_ratio=2.0, avg_time=15) == 65
    assert score_shot(_shot(yield_grams=25.0, seconds=28), avg_ratio=25.0 / 18.0, avg_time=28) == 77
    assert score_shot(_shot(yield_grams=20.0, seconds=28), avg_ratio=20.0 / 18.0, avg_time=28) == 69


def test_score_shot_penalizes_distance_from_bean_averages() -> None:
    outlier = _shot(yield_grams=50.0, seconds=35)

    assert score_shot(outlier, avg_ratio=(2.0 + 50.0 / 18.0) / 2, avg_time=31.5) == 55


def test_score_shot_rejects_unusable_shots() -> None:
    with pytest.raises(ValueError):
        score_shot(_shot(seconds=None), avg_ratio=2.0, avg_time=27)


def test_quality_needs_three_scorable_shots() -> None:
    result = analyze_quality([_shot(), _shot(), _shot(dose=0.0)])

    assert isinstance(result, InsufficientDataRead)
    assert result.shot_count == 2
    assert result.required_shot_count == 3


def test_quality_for_steady_shots_is_excellent() -> None:
    result = analyze_quality([_shot(day=day) for day in range(3)])

    assert isinstance(result, QualityAnalysisRead)
    assert [row.score for row in result.scores] == [85, 85, 85]
    assert result.quality_tier == "excellent"
    assert result.excellent_count == 3
    assert result.consistency_score == 100.0
    assert result.trend == "stable"
    assert result.improvement_rate_pct == 0.0


def test_quality_mixed_shots() -> None:
    shots = [
        _shot(yield_grams=25.2, seconds=18, taste=TastePrimary.SOUR, day=0),
        _shot(seconds=27, taste=TastePrimary.PERFECT, day=1),
        _shot(seconds=27, taste=TastePrimary.PERFECT, day=2),
        _shot(seconds=None, day=3),
    ]

    result = analyze_quality(reversed(shots))

    assert isinstance(result, QualityAnalysisRead)
    assert result.total_shots == 3
    assert result.excluded_shots == 1
    assert [row.shot_id for row in result.scores] == [shot.id for shot in shots[:3]]
    assert [row.score for row in result.scores] == [32, 90, 90]
    assert [row.tier for row in result.scores] == ["needs_work", "excellent", "excellent"]
    assert result.overall_average == 70.67
    assert result.recent_average == 70.67
    assert result.quality_tier == "good"
    assert (result.excellent_count, result.good_count, result.needs_work_count) == (2, 0, 1)
    assert result.trend == "stable"
    expected_consistency = 100 - pstdev([32, 90, 90]) / mean([32, 90, 90]) * 100
    assert result.consistency_score == pytest.approx(expected_consistency, abs=0.01)


def test_quality_trend_compares_recent_shots_with_overall() -> None:
    early = [_shot(yield_grams=21.6, seconds=18, taste=TastePrimary.SOUR, day=day) for day in range(5)]
    late = [_shot(seconds=27, taste=TastePrimary.PERFECT, day=5 + day) for day in range(5)]

    result = analyze_quality(early + late)

    assert isinstance(result, QualityAnalysisRead)
    assert [row.score for row in result.scores] == [24] * 5 + [80] * 5
    assert result.overall_average == 52.0
    assert result.recent_average == 80.0
    assert result.trend == "improving"
    assert result.improvement_rate_pct == pytest.approx(53.85)
    assert result.quality_tier == "good"
    assert result.needs_work_count == 5
    assert result.good_count == 5


def test_quality_compares_each_shot_with_its_own_bean() -> None:
    shots = [_shot(bean_id=1, day=day) for day in range(2)]
    shots += [_shot(bean_id=2, yield_grams=45.0, seconds=30, day=day) for day in range(2)]

    result = analyze_quality(shots)

    assert isinstance(result, QualityAnalysisRead)
    assert {row.score for row in result.scores} == {85}
