from datetime import datetime

from pydantic import BaseModel, ConfigDict

from shotcoach.core.constants import AdjustmentDirection, ConfidenceLevel, ReasonCode


class ShotRecommendationRead(BaseModel):
    id: int
    shot_id: int
    recommended_grind_setting: float
    adjustment_direction: AdjustmentDirection
    adjustment_steps: int
    confidence_level: ConfidenceLevel
    reason_code: ReasonCode
    was_followed: bool
    evaluated_at: datetime | None
    created_at: datetime
    metadata_json: str | None = None

    model_config = ConfigDict(from_attributes=True)


class NextShotGuidanceRead(BaseModel):
    bean_id: int
    based_on_shot_id: int
    based_on_taste: bool
    target_extraction_time_min: int
    target_extraction_time_max: int
    recommendation: ShotRecommendationRead


class FollowThroughSummaryRead(BaseModel):
    bean_id: int | None
    total_recommendations: int
    evaluated_recommendations: int
    followed_recommendations: int
    follow_rate_pct: float | None
    high_confidence_evaluated: int
    high_confidence_followed: int
    high_confidence_follow_rate_pct: float | None
