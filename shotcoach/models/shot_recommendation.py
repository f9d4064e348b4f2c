from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shotcoach.core.constants import AdjustmentDirection, ConfidenceLevel, ReasonCode
from shotcoach.core.database import Base

if TYPE_CHECKING:
    from shotcoach.models.shot import Shot


class ShotRecommendation(Base):
    __tablename__ = "shot_recommendations"
    __table_args__ = (UniqueConstraint("shot_id", name="uq_shot_recommendations_shot_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    shot_id: Mapped[int] = mapped_column(ForeignKey("shots.id", ondelete="CASCADE"), nullable=False)
    recommended_grind_setting: Mapped[float] = mapped_column(Float, nullable=False)
    adjustment_direction: Mapped[AdjustmentDirection] = mapped_column(Enum(AdjustmentDirection), nullable=False)
    adjustment_steps: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    confidence_level: Mapped[ConfidenceLevel] = mapped_column(Enum(ConfidenceLevel), nullable=False)
    reason_code: Mapped[ReasonCode] = mapped_column(Enum(ReasonCode), nullable=False)
    was_followed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    evaluated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    shot: Mapped[Shot] = relationship(back_populates="recommendation")
