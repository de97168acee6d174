"""Planting-window analysis, quarter selection and daily outlook."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, date, datetime

import structlog
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.engine.insights import historical_insights
from ricecast.engine.quarter_selector import estimate_for_selection, select_quarter
from ricecast.engine.quarters import QUARTER_NAMES
from ricecast.engine.recommendations import window_recommendations
from ricecast.engine.windows import select_windows, summarize_forecast
from ricecast.errors import InputError
from ricecast.schemas.prediction import (
	CoverageStatus,
	DailyForecastSummary,
	HistoricalBaseline,
	HistoricalInsights,
	Location,
	PlantingAnalysis,
	PlantingWindowRequest,
	QuarterSelection,
	QuarterSelectionRequest,
	RiskLevel,
	WeatherDayPoint,
)
from ricecast.services.weather_provider import WeatherForecastProvider

logger = structlog.get_logger("ricecast.predictions")

NO_COVERAGE_MESSAGE = "Forecast does not reach that far yet"
INSUFFICIENT_WINDOW_MESSAGE = "Forecast reaches this quarter but does not yet cover a full 7-day window"

LOW_RISK_SCORE = 85.0
HIGH_RISK_SCORE = 70.0


def risk_level_for(weather_score: float | None) -> RiskLevel:
	if weather_score is None:
		return RiskLevel.medium
	if weather_score >= LOW_RISK_SCORE:
		return RiskLevel.low
	if weather_score < HIGH_RISK_SCORE:
		return RiskLevel.high
	return RiskLevel.medium


def build_planting_analysis(
	request: PlantingWindowRequest,
	forecast: Sequence[WeatherDayPoint],
	baselines: Sequence[HistoricalBaseline],
	*,
	horizon_start: date | None = None,
	horizon_days: int = 16,
	generated_at: datetime | None = None,
) -> PlantingAnalysis:
	selection = select_windows(
		forecast,
		request.year,
		request.quarter,
		horizon_start=horizon_start,
		horizon_days=horizon_days,
	)
	estimate = estimate_for_selection(selection, baselines)
	best = selection.best_window

	if selection.status == CoverageStatus.no_forecast_coverage:
		message = NO_COVERAGE_MESSAGE
	elif selection.status == CoverageStatus.insufficient_window:
		message = INSUFFICIENT_WINDOW_MESSAGE
	else:
		message = (
			f"Best planting window in {QUARTER_NAMES[request.quarter]}: "
			f"{best.start_date.isoformat()} to {best.end_date.isoformat()} "
			f"(weather score {best.weather_score:.1f})"
		)
	risk_level = risk_level_for(best.weather_score if best is not None else None)

	return PlantingAnalysis(
		location=request.location,
		year=request.year,
		selected_quarter=request.quarter,
		status=selection.status,
		best_window=best,
		windows=selection.windows,
		estimate=estimate,
		confidence=estimate.confidence_level,
		risk_flags=best.risk_flags if best is not None else [],
		risk_level=risk_level,
		message=message,
		recommendations=window_recommendations(
			request.quarter,
			selection.status,
			selection.windows,
			risk_level,
			estimate.confidence_level,
		),
		generated_at=generated_at or datetime.now(UTC),
	)


class PredictionService:
	"""Fetches the forecast and baselines once per call and runs the engine."""

	def __init__(
		self,
		db: AsyncSession,
		redis_client: Redis | None = None,
		provider: WeatherForecastProvider | None = None,
	):
		self.db = db
		self.provider = provider or WeatherForecastProvider(db, redis_client)

	@property
	def horizon_days(self) -> int:
		return self.provider.horizon_days

	async def analyze_planting_window(
		self,
		request: PlantingWindowRequest,
		reference_date: date | None = None,
	) -> PlantingAnalysis:
		forecast = await self.provider.get_forecast(request.location, self.horizon_days)
		baselines = await self.provider.list_historical()
		analysis = build_planting_analysis(
			request,
			forecast,
			baselines,
			horizon_start=reference_date,
			horizon_days=self.horizon_days,
		)
		logger.info(
			"planting_window_analyzed",
			location=request.location.name,
			year=request.year,
			quarter=request.quarter,
			status=analysis.status.value,
			windows=len(analysis.windows),
			confidence=analysis.confidence,
		)
		return analysis

	async def select_quarter(
		self,
		request: QuarterSelectionRequest,
		reference_date: date | None = None,
	) -> QuarterSelection:
		forecast = await self.provider.get_forecast(request.location, self.horizon_days)
		baselines = await self.provider.list_historical()
		result = select_quarter(
			forecast,
			request.year,
			baselines,
			horizon_start=reference_date,
			horizon_days=self.horizon_days,
		)
		logger.info(
			"quarter_selected",
			location=request.location.name,
			year=request.year,
			optimal_quarter=result.optimal_quarter,
			unscored_quarters=result.unscored_quarters,
		)
		return result

	async def daily_forecast(self, location: Location) -> DailyForecastSummary:
		forecast = await self.provider.get_forecast(location, self.horizon_days)
		return summarize_forecast(forecast, location=location)

	async def historical_insights(
		self,
		quarter: int | None = None,
		year: int | None = None,
	) -> HistoricalInsights:
		"""Quarter performance and trends over the stored baselines.

		``quarter`` and ``year`` together add a focus on that baseline.
		"""
		if (quarter is None) != (year is None):
			raise InputError("quarter and year must be given together")
		baselines = await self.provider.list_historical()
		insights = historical_insights(baselines, quarter=quarter, year=year)
		logger.info(
			"historical_insights_built",
			quarters=len(insights.quarter_performance),
			best_quarter=insights.best_quarter,
			focus=f"Q{quarter} {year}" if insights.focus is not None else None,
		)
		return insights
