from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shotcoach.core.constants import TastePrimary, TasteSecondary
from shotcoach.core.database import Base

if TYPE_CHECKING:
    from shotcoach.models.bean import Bean
    from shotcoach.models.shot_recommendation import ShotRecommendation


class Shot(Base):
    __tablename__ = "shots"
    __table_args__ = (Index("ix_shots_bean_id_created_at", "bean_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    bean_id: Mapped[int] = mapped_column(ForeignKey("beans.id", ondelete="CASCADE"), nullable=False, index=True)
    dose_grams: Mapped[float] = mapped_column(Float, nullable=False)
    yield_grams: Mapped[float] = mapped_column(Float, nullable=False)
    extraction_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grinder_setting: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="")
    taste_primary: Mapped[TastePrimary | None] = mapped_column(Enum(TastePrimary), nullable=True)
    taste_secondary: Mapped[TasteSecondary | None] = mapped_column(Enum(TasteSecondary), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    bean: Mapped[Bean] = relationship(back_populates="shots")
    recommendation: Mapped[ShotRecommendation | None] = relationship(
        back_populates="shot",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    @property
    def brew_ratio(self) -> float | None:
        if not self.dose_grams or self.dose_grams <= 0 or self.yield_grams is None:
            return None
        return self.yield_grams / self.dose_grams
