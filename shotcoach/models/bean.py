from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shotcoach.core.database import Base

if TYPE_CHECKING:
    from shotcoach.models.grinder_configuration import GrinderConfiguration
    from shotcoach.models.shot import Shot


class Bean(Base):
    __tablename__ = "beans"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    roast_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    grinder_configuration_id: Mapped[int | None] = mapped_column(
        ForeignKey("grinder_configurations.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    grinder_configuration: Mapped[GrinderConfiguration | None] = relationship(back_populates="beans")
    shots: Mapped[list[Shot]] = relationship(
        back_populates="bean",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
