from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class InsufficientDataRead(BaseModel):
    status: Literal["insufficient_data"] = "insufficient_data"
    shot_count: int
    required_shot_count: int


class BrewRatioAnalysisRead(BaseModel):
    status: Literal["computed"] = "computed"
    total_shots: int
    excluded_shots: int
    avg_ratio: float
    median_ratio: float
    min_ratio: float
    max_ratio: float
    under_typical_pct: float
    typical_pct: float
    optimal_pct: float
    over_typical_pct: float
    distribution: dict[str, int]


class ExtractionTimeAnalysisRead(BaseModel):
    status: Literal["computed"] = "computed"
    total_shots: int
    excluded_shots: int
    avg_time: float
    median_time: float
    min_time: int
    max_time: int
    optimal_pct: float
    too_fast_pct: float
    too_slow_pct: float
    distribution: dict[str, int]


class ShotTrendsRead(BaseModel):
    status: Literal["computed"] = "computed"
    window_days: int | None
    total_shots: int
    days_analyzed: float
    shots_per_day: float
    first_half_avg_ratio: float
    second_half_avg_ratio: float
    first_half_avg_time: float
    second_half_avg_time: float
    brew_ratio_trend: float
    extraction_time_trend: float
    trend: Literal["improving", "stable", "declining"]


class GrinderSettingStatsRead(BaseModel):
    grinder_setting: float
    shot_count: int
    avg_ratio: float | None
    avg_time: float | None
    optimal_time_pct: float


class GrinderSettingAnalysisRead(BaseModel):
    status: Literal["computed"] = "computed"
    total_settings: int
    settings: list[GrinderSettingStatsRead]
    most_used_setting: GrinderSettingStatsRead
    best_performing_setting: GrinderSettingStatsRead


BrewRatioResult = Annotated[Union[BrewRatioAnalysisRead, InsufficientDataRead], Field(discriminator="status")]
ExtractionTimeResult = Annotated[Union[ExtractionTimeAnalysisRead, InsufficientDataRead], Field(discriminator="status")]
ShotTrendsResult = Annotated[Union[ShotTrendsRead, InsufficientDataRead], Field(discriminator="status")]
GrinderSettingResult = Annotated[
    Union[GrinderSettingAnalysisRead, InsufficientDataRead],
    Field(discriminator="status"),
]


class ShotQualityScoreRead(BaseModel):
    shot_id: int
    bean_id: int
    created_at: datetime
    score: int
    tier: Literal["excellent", "good", "needs_work"]


class QualityAnalysisRead(BaseModel):
    status: Literal["computed"] = "computed"
    total_shots: int
    excluded_shots: int
    overall_average: float
    recent_average: float
    quality_tier: Literal["excellent", "good", "needs_work"]
    excellent_count: int
    good_count: int
    needs_work_count: int
    trend: Literal["improving", "stable", "declining"]
    improvement_rate_pct: float
    consistency_score: float
    scores: list[ShotQualityScoreRead]


QualityResult = Annotated[Union[QualityAnalysisRead, InsufficientDataRead], Field(discriminator="status")]
