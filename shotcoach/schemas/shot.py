from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shotcoach.core.constants import TastePrimary, TasteSecondary
from shotcoach.schemas.recommendation import ShotRecommendationRead


class ShotBase(BaseModel):
    bean_id: int = Field(gt=0)
    dose_grams: float = Field(ge=0.1, le=50.0)
    yield_grams: float = Field(ge=0.1, le=100.0)
    extraction_time_seconds: int | None = Field(default=None, ge=5, le=120)
    grinder_setting: float = Field(ge=0)
    notes: str = Field(default="", max_length=500)
    taste_primary: TastePrimary | None = None
    taste_secondary: TasteSecondary | None = None


class ShotCreate(ShotBase):
    created_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def to_naive_utc(cls, value: datetime | None) -> datetime | None:
        # Stored timestamps are naive UTC.
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    @model_validator(mode="after")
    def check_yield(self) -> "ShotCreate":
        if self.yield_grams < self.dose_grams:
            raise ValueError("Yield must be at least the dose")
        return self


class ShotTasteUpdate(BaseModel):
    taste_primary: TastePrimary | None = None
    taste_secondary: TasteSecondary | None = None


class ShotRead(ShotBase):
    id: int
    created_at: datetime
    brew_ratio: float | None

    model_config = ConfigDict(from_attributes=True)


class RecordedShotRead(BaseModel):
    shot: ShotRead
    recommendation: ShotRecommendationRead
    previous_recommendation: ShotRecommendationRead | None = None
