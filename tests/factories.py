"""Builders for forecast days, baselines and fake query results."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any
from unittest.mock import MagicMock

from ricecast.schemas.prediction import HistoricalBaseline, WeatherDayPoint


def scalars_result(items: list[Any]) -> MagicMock:
	"""Mimic the ``Result`` returned by ``AsyncSession.execute``."""
	result = MagicMock()
	result.scalars.return_value.all.return_value = items
	result.scalar_one_or_none.return_value = items[0] if items else None
	result.scalar_one.return_value = items[0] if items else None
	result.first.return_value = items[0] if items else None
	return result


def make_day(
	day: date,
	*,
	temperature: float = 28.0,
	humidity: float = 80.0,
	precipitation: float = 8.0,
	wind: float = 6.0,
) -> WeatherDayPoint:
	return WeatherDayPoint(
		date=day,
		temperature=temperature,
		humidity=humidity,
		precipitation=precipitation,
		wind=wind,
	)


def calm_forecast(start: date, days: int = 16) -> list[WeatherDayPoint]:
	return [make_day(start + timedelta(days=i)) for i in range(days)]


def baseline(
	quarter: int,
	year: int,
	*,
	yield_tonnes_per_ha: float = 4.0,
	sample_size: int = 10,
) -> HistoricalBaseline:
	return HistoricalBaseline(
		quarter=quarter,
		year=year,
		yield_tonnes_per_ha=yield_tonnes_per_ha,
		mean_temperature=28.0,
		total_precipitation=720.0,
		mean_humidity=80.0,
		mean_wind=6.0,
		sample_size=sample_size,
	)


def manila_may_forecast() -> list[WeatherDayPoint]:
	"""16 days from 1 May 2025: a calm spell on 8-14 May, storms around it."""
	start = date(2025, 5, 1)
	days = []
	for offset in range(16):
		day = start + timedelta(days=offset)
		if 8 <= day.day <= 14:
			days.append(make_day(day, temperature=28.0, wind=6.0, precipitation=8.0))
		else:
			days.append(
				make_day(
					day,
					temperature=24.0 + (offset % 3) * 3,
					precipitation=60.0 + offset,
					wind=45.0 - offset,
					humidity=92.0,
				)
			)
	return days
