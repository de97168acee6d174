"""PlantingAnalysisRecord ORM model: saved planting-window analyses.

``payload`` holds the full analysis document exactly as the API returned it;
the remaining columns are summary fields copied out of it for listing.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Enum, Float, Index, Integer, SmallInteger, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from ricecast.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from ricecast.models.enums import RiskLevelEnum


class PlantingAnalysisRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "planting_analyses"
    __table_args__ = (Index("ix_planting_analyses_user_created", "user_id", "created_at"),)

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    predicted_yield: Mapped[float] = mapped_column(Float, nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    risk_level: Mapped[RiskLevelEnum] = mapped_column(
        Enum(
            RiskLevelEnum,
            name="risk_level",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=False,
    )
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<PlantingAnalysisRecord id={self.id} {self.location_name!r} "
            f"{self.year}Q{self.quarter}>"
        )
