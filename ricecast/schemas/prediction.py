"""Pydantic models for planting-window and quarter-selection analysis.

The engine builds and returns these models directly, so a saved
``PlantingAnalysis`` is the same object the API returned.
"""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class RiskFlagKind(StrEnum):
	heavy_rain = "heavy_rain"
	storm_wind = "storm_wind"
	temperature_out_of_band = "temperature_out_of_band"


class CoverageStatus(StrEnum):
	ok = "ok"
	no_forecast_coverage = "no_forecast_coverage"
	insufficient_window = "insufficient_window"


class EstimateBasis(StrEnum):
	forecast = "forecast"
	historical_only = "historical_only"


class YieldTrend(StrEnum):
	improving = "improving"
	stable = "stable"
	declining = "declining"


class RiskLevel(StrEnum):
	low = "low"
	medium = "medium"
	high = "high"


class Location(BaseModel):
	latitude: float = Field(ge=-90, le=90)
	longitude: float = Field(ge=-180, le=180)
	name: str = Field(min_length=1, max_length=255)


class WeatherDayPoint(BaseModel):
	model_config = ConfigDict(frozen=True)

	date: dt.date
	temperature: float
	humidity: float
	precipitation: float
	wind: float


class RiskFlag(BaseModel):
	date: dt.date
	kind: RiskFlagKind
	value: float


class WindowFeatures(BaseModel):
	mean_temperature: float
	total_precipitation: float
	mean_humidity: float
	mean_wind: float
	temperature_variance: float
	wind_variance: float


class CandidateWindow(BaseModel):
	start_date: dt.date
	end_date: dt.date
	days: list[WeatherDayPoint]
	features: WindowFeatures
	stability_score: float
	risk_flags: list[RiskFlag] = Field(default_factory=list)
	weather_score: float


class WindowSelection(BaseModel):
	year: int
	quarter: int
	status: CoverageStatus
	days_expected: int
	days_present: int
	best_window: CandidateWindow | None = None
	windows: list[CandidateWindow] = Field(default_factory=list)


class HistoricalBaseline(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	quarter: int = Field(ge=1, le=4)
	year: int
	yield_tonnes_per_ha: float
	mean_temperature: float
	total_precipitation: float
	mean_humidity: float
	mean_wind: float
	sample_size: int = Field(ge=0)


class HistoricalComparison(BaseModel):
	delta_percent: float
	trend: YieldTrend


class YieldEstimate(BaseModel):
	predicted_yield: float
	baseline_yield: float
	baseline_year: int
	adjustment_factor: float
	confidence_level: float = Field(ge=0, le=1)
	is_estimate: bool
	basis: EstimateBasis
	comparison: HistoricalComparison


class QuarterSummary(BaseModel):
	quarter: int
	rank: int
	basis: EstimateBasis
	coverage_status: CoverageStatus
	window_count: int
	best_window: CandidateWindow | None = None
	estimate: YieldEstimate


class QuarterSelection(BaseModel):
	year: int
	optimal_quarter: int
	quarters: list[QuarterSummary]
	alternative_quarters: list[int] = Field(default_factory=list)
	unscored_quarters: list[int] = Field(default_factory=list)
	recommendations: list[str] = Field(default_factory=list)


class PlantingWindowRequest(BaseModel):
	location: Location
	year: int = Field(ge=2025, le=2100)
	quarter: int = Field(ge=1, le=4)


class QuarterSelectionRequest(BaseModel):
	location: Location
	year: int = Field(ge=2025, le=2100)


class PlantingAnalysis(BaseModel):
	location: Location
	year: int
	selected_quarter: int
	status: CoverageStatus
	best_window: CandidateWindow | None = None
	windows: list[CandidateWindow] = Field(default_factory=list)
	estimate: YieldEstimate
	confidence: float = Field(ge=0, le=1)
	risk_flags: list[RiskFlag] = Field(default_factory=list)
	risk_level: RiskLevel
	message: str
	recommendations: list[str] = Field(default_factory=list)
	generated_at: dt.datetime


class DayOutlook(BaseModel):
	point: WeatherDayPoint
	risk_flags: list[RiskFlag] = Field(default_factory=list)
	plantable: bool


class ForecastTrends(BaseModel):
	temperature: str
	precipitation: str
	wind: str


class DailyForecastSummary(BaseModel):
	location: Location
	days: list[DayOutlook]
	plantable_days: int
	trends: ForecastTrends


class ErrorBody(BaseModel):
	error: str
	details: list[str]


class QuarterPerformance(BaseModel):
	quarter: int
	years: int
	average_yield: float
	best_year: int
	best_yield: float
	worst_year: int
	worst_yield: float


class QuarterTrend(BaseModel):
	quarter: int
	trend: YieldTrend
	change_per_year: float
	years: list[int]
	yields: list[float]


class QuarterInsight(BaseModel):
	"""One quarter/year baseline set against that quarter's history."""

	baseline: HistoricalBaseline
	is_estimate: bool
	comparison: HistoricalComparison
	percentile: float = Field(ge=0, le=100)
	trend: QuarterTrend


class HistoricalInsights(BaseModel):
	quarter_performance: list[QuarterPerformance]
	best_quarter: int
	trends: list[QuarterTrend]
	focus: QuarterInsight | None = None
