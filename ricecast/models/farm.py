"""FarmProfile, GrowthCycle and StageBoundaryOverride ORM models.

A farm profile belongs to one user (the JWT subject).  Each profile owns
growth cycles, keyed by planting date, and each cycle may carry a full set of
farmer-supplied stage boundaries that replace the default 130-day timeline.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import (
    Date,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ricecast.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from ricecast.models.enums import PlantingMethodEnum, RiceStageEnum

# ═══════════════════════════════════════════════════════════════════════════
# FarmProfile
# ═══════════════════════════════════════════════════════════════════════════


class FarmProfile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "farm_profiles"
    __table_args__ = (Index("ix_farm_profiles_user_id", "user_id"),)

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    province: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    growth_cycles: Mapped[list[GrowthCycle]] = relationship(
        back_populates="farm_profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<FarmProfile id={self.id} name={self.name!r}>"


# ═══════════════════════════════════════════════════════════════════════════
# GrowthCycle
# ═══════════════════════════════════════════════════════════════════════════


class GrowthCycle(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One planting on a farm profile.

    ``(farm_profile_id, cycle_start_date)`` is unique so that re-submitting a
    planting date updates the existing cycle instead of duplicating it.
    ``cycle_end_date`` is set when the farmer confirms harvest.
    """

    __tablename__ = "growth_cycles"
    __table_args__ = (
        UniqueConstraint(
            "farm_profile_id",
            "cycle_start_date",
            name="uq_growth_cycles_profile_start",
        ),
    )

    farm_profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("farm_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    variety: Mapped[str] = mapped_column(String(128), nullable=False)
    method: Mapped[PlantingMethodEnum] = mapped_column(
        Enum(
            PlantingMethodEnum,
            name="planting_method",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=False,
    )
    cycle_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    cycle_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    farm_profile: Mapped[FarmProfile] = relationship(back_populates="growth_cycles")
    stage_boundaries: Mapped[list[StageBoundaryOverride]] = relationship(
        back_populates="growth_cycle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StageBoundaryOverride.start_date",
    )

    def __repr__(self) -> str:
        return (
            f"<GrowthCycle id={self.id} profile={self.farm_profile_id} "
            f"start={self.cycle_start_date}>"
        )


# ═══════════════════════════════════════════════════════════════════════════
# StageBoundaryOverride
# ═══════════════════════════════════════════════════════════════════════════


class StageBoundaryOverride(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "stage_boundary_overrides"
    __table_args__ = (
        Index("ix_stage_boundary_overrides_cycle_start", "growth_cycle_id", "start_date"),
    )

    growth_cycle_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("growth_cycles.id", ondelete="CASCADE"),
        nullable=False,
    )
    stage: Mapped[RiceStageEnum] = mapped_column(
        Enum(
            RiceStageEnum,
            name="rice_stage",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    growth_cycle: Mapped[GrowthCycle] = relationship(back_populates="stage_boundaries")

    def __repr__(self) -> str:
        return (
            f"<StageBoundaryOverride cycle={self.growth_cycle_id} stage={self.stage} "
            f"{self.start_date}..{self.end_date}>"
        )
