from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shotcoach.core.database import Base

if TYPE_CHECKING:
    from shotcoach.models.bean import Bean


class GrinderConfiguration(Base):
    __tablename__ = "grinder_configurations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    scale_min: Mapped[float] = mapped_column(Float, nullable=False)
    scale_max: Mapped[float] = mapped_column(Float, nullable=False)
    step_size: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    beans: Mapped[list[Bean]] = relationship(back_populates="grinder_configuration")
