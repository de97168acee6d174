"""HistoricalRecord ORM model: quarterly yield and weather baselines.

Read-only reference data, loaded by ``scripts/seed_baselines.py``.
"""

from __future__ import annotations

from sqlalchemy import Float, Integer, SmallInteger, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ricecast.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class HistoricalRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "historical_records"
    __table_args__ = (
        UniqueConstraint("quarter", "year", name="uq_historical_records_quarter_year"),
    )

    quarter: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    yield_tonnes_per_ha: Mapped[float] = mapped_column(Float, nullable=False)
    mean_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    total_precipitation: Mapped[float] = mapped_column(Float, nullable=False)
    mean_humidity: Mapped[float] = mapped_column(Float, nullable=False)
    mean_wind: Mapped[float] = mapped_column(Float, nullable=False)
    sample_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<HistoricalRecord Q{self.quarter} {self.year} yield={self.yield_tonnes_per_ha}>"
