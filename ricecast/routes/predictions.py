"""Planting-window, quarter-selection, daily-forecast and historical-insight routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.database import get_db
from ricecast.engine.windows import (
	GERMINATION_BAND,
	RAIN_THRESHOLD_MM,
	STORM_WIND_KMH,
	WINDOW_DAYS,
)
from ricecast.routes.errors import to_http_exception
from ricecast.schemas.prediction import (
	DailyForecastSummary,
	ErrorBody,
	HistoricalInsights,
	Location,
	PlantingAnalysis,
	PlantingWindowRequest,
	QuarterSelection,
	QuarterSelectionRequest,
)
from ricecast.services.prediction_service import NO_COVERAGE_MESSAGE, PredictionService
from ricecast.services.weather_provider import PROVIDER_UNAVAILABLE

router = APIRouter(prefix="/predictions", tags=["predictions"])


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected prediction failure")


def _service(request: Request, db: AsyncSession) -> PredictionService:
	return PredictionService(db, getattr(request.app.state, "redis", None))


@router.post("/planting-window", response_model=PlantingAnalysis)
async def analyze_planting_window(
	payload: PlantingWindowRequest,
	request: Request,
	db: AsyncSession = Depends(get_db),
) -> PlantingAnalysis:
	service = _service(request, db)
	try:
		return await service.analyze_planting_window(payload)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/planting-window/schema")
async def planting_window_schema() -> dict[str, Any]:
	return {
		"request": PlantingWindowRequest.model_json_schema(),
		"response": PlantingAnalysis.model_json_schema(),
		"error": ErrorBody.model_json_schema(),
		"errors": {
			"invalid_input": {"status": 400, "message": "Request is malformed or out of range"},
			"provider_unavailable": {"status": 503, "message": PROVIDER_UNAVAILABLE},
			"not_found": {
				"status": 404,
				"message": "No historical baseline for the requested quarter",
				"quarter_selection": "Only when no quarter has a baseline; quarters missing one are listed in unscored_quarters",
			},
		},
		"coverage": {
			"no_forecast_coverage": NO_COVERAGE_MESSAGE,
		},
		"thresholds": {
			"window_days": WINDOW_DAYS,
			"heavy_rain_mm": RAIN_THRESHOLD_MM,
			"storm_wind_kmh": STORM_WIND_KMH,
			"germination_band_c": list(GERMINATION_BAND),
		},
	}


@router.post("/quarter-selection", response_model=QuarterSelection)
async def select_quarter(
	payload: QuarterSelectionRequest,
	request: Request,
	db: AsyncSession = Depends(get_db),
) -> QuarterSelection:
	service = _service(request, db)
	try:
		return await service.select_quarter(payload)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/daily-forecast", response_model=DailyForecastSummary)
async def daily_forecast(
	request: Request,
	latitude: float = Query(ge=-90, le=90),
	longitude: float = Query(ge=-180, le=180),
	name: str = Query(default="Selected location", min_length=1, max_length=255),
	db: AsyncSession = Depends(get_db),
) -> DailyForecastSummary:
	service = _service(request, db)
	try:
		return await service.daily_forecast(Location(latitude=latitude, longitude=longitude, name=name))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/historical-insights", response_model=HistoricalInsights)
async def historical_insights(
	request: Request,
	quarter: int | None = Query(default=None, ge=1, le=4),
	year: int | None = Query(default=None, ge=1900, le=2100),
	db: AsyncSession = Depends(get_db),
) -> HistoricalInsights:
	service = _service(request, db)
	try:
		return await service.historical_insights(quarter, year)
	except Exception as exc:
		raise _map_error(exc) from exc
