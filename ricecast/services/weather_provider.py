"""Weather data access: Open-Meteo daily forecast and stored quarterly baselines."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import httpx
import structlog
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.config import get_settings
from ricecast.errors import ProviderError
from ricecast.middleware.logging import note_request
from ricecast.models.historical import HistoricalRecord
from ricecast.schemas.prediction import HistoricalBaseline, Location, WeatherDayPoint

logger = structlog.get_logger("ricecast.weather")

PROVIDER_UNAVAILABLE = "Weather service is unavailable, try again later"

# Open-Meteo refuses forecast_days beyond this.
MAX_FORECAST_DAYS = 16

_DAILY_FIELDS = (
	"temperature_2m_max",
	"temperature_2m_min",
	"precipitation_sum",
	"windspeed_10m_max",
	"relative_humidity_2m_max",
	"relative_humidity_2m_min",
)


def parse_daily_forecast(payload: dict[str, Any]) -> list[WeatherDayPoint]:
	"""Turn an Open-Meteo ``daily`` block into ordered day points.

	Temperature and humidity are the mean of the daily max and min; wind is
	the daily maximum in km/h.  Days with any missing value are dropped, which
	leaves a gap the window selector will not bridge.
	"""
	try:
		daily = payload["daily"]
		times = daily["time"]
		columns = {field: daily[field] for field in _DAILY_FIELDS}
	except (KeyError, TypeError) as exc:
		raise ProviderError(PROVIDER_UNAVAILABLE, details=[f"malformed forecast payload: {exc}"]) from exc

	if any(len(values) != len(times) for values in columns.values()):
		raise ProviderError(PROVIDER_UNAVAILABLE, details=["forecast columns have mismatched lengths"])

	points: list[WeatherDayPoint] = []
	for idx, day in enumerate(times):
		row = {field: values[idx] for field, values in columns.items()}
		if any(value is None for value in row.values()):
			continue
		try:
			points.append(
				WeatherDayPoint(
					date=day,
					temperature=round((row["temperature_2m_max"] + row["temperature_2m_min"]) / 2, 2),
					humidity=round((row["relative_humidity_2m_max"] + row["relative_humidity_2m_min"]) / 2, 2),
					precipitation=round(row["precipitation_sum"], 2),
					wind=round(row["windspeed_10m_max"], 2),
				)
			)
		except (TypeError, ValueError) as exc:
			raise ProviderError(PROVIDER_UNAVAILABLE, details=[f"bad forecast value on {day}: {exc}"]) from exc
	points.sort(key=lambda p: p.date)
	return points


class WeatherForecastProvider:
	"""Fetches the forecast horizon and historical baselines.

	Every failure reaching the caller is a ``ProviderError``; nothing here
	degrades silently.
	"""

	def __init__(
		self,
		db: AsyncSession,
		redis_client: Redis | None = None,
		*,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.db = db
		self.redis_client = redis_client
		self.transport = transport
		self.settings = get_settings()

	@property
	def horizon_days(self) -> int:
		"""Configured horizon, capped at what Open-Meteo will serve."""
		return min(self.settings.forecast_horizon_days, MAX_FORECAST_DAYS)

	def _cache_key(self, location: Location, horizon_days: int) -> str:
		today = datetime.now(UTC).date().isoformat()
		return f"forecast:{location.latitude:.2f}:{location.longitude:.2f}:{horizon_days}:{today}"

	async def get_forecast(self, location: Location, horizon_days: int | None = None) -> list[WeatherDayPoint]:
		horizon = min(horizon_days or self.horizon_days, MAX_FORECAST_DAYS)
		cache_key = self._cache_key(location, horizon)

		if self.redis_client is not None:
			cached = await self.redis_client.get(cache_key)
			if cached is not None:
				logger.info("forecast_cache_hit", key=cache_key)
				note_request(forecast_source="cache")
				return [WeatherDayPoint.model_validate(item) for item in json.loads(cached)]

		params = {
			"latitude": location.latitude,
			"longitude": location.longitude,
			"daily": ",".join(_DAILY_FIELDS),
			"timezone": "auto",
			"forecast_days": horizon,
		}
		logger.info("forecast_fetch", latitude=location.latitude, longitude=location.longitude, horizon_days=horizon)
		try:
			async with httpx.AsyncClient(
				timeout=self.settings.weather_timeout_seconds,
				transport=self.transport,
			) as client:
				response = await client.get(self.settings.open_meteo_forecast_url, params=params)
				response.raise_for_status()
				payload = response.json()
		except (httpx.HTTPError, ValueError) as exc:
			logger.warning("provider_failure", source="open_meteo", error=str(exc))
			note_request(forecast_source="open_meteo", provider_outcome="failed")
			raise ProviderError(PROVIDER_UNAVAILABLE, details=[str(exc) or type(exc).__name__]) from exc

		points = parse_daily_forecast(payload)
		note_request(forecast_source="open_meteo", provider_outcome="ok", forecast_days=len(points))

		if self.redis_client is not None:
			await self.redis_client.setex(
				cache_key,
				self.settings.forecast_cache_ttl_seconds,
				json.dumps([p.model_dump(mode="json") for p in points]),
			)
		return points

	async def get_historical(self, quarter: int, year: int) -> HistoricalBaseline | None:
		stmt = select(HistoricalRecord).where(
			HistoricalRecord.quarter == quarter,
			HistoricalRecord.year == year,
		)
		try:
			result = await self.db.execute(stmt)
		except SQLAlchemyError as exc:
			logger.warning("provider_failure", source="historical", error=str(exc))
			raise ProviderError("Historical data is unavailable, try again later") from exc
		record = result.scalar_one_or_none()
		return HistoricalBaseline.model_validate(record) if record is not None else None

	async def list_historical(self) -> list[HistoricalBaseline]:
		stmt = select(HistoricalRecord).order_by(HistoricalRecord.year, HistoricalRecord.quarter)
		try:
			result = await self.db.execute(stmt)
		except SQLAlchemyError as exc:
			logger.warning("provider_failure", source="historical", error=str(exc))
			raise ProviderError("Historical data is unavailable, try again later") from exc
		baselines = [HistoricalBaseline.model_validate(row) for row in result.scalars().all()]
		note_request(baselines=len(baselines))
		return baselines
