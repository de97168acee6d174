"""Planting-window scoring over a daily forecast horizon.

A candidate window is 7 consecutive forecast days that all fall inside the
target quarter.  Windows are scored on weather stability (low temperature and
wind variance), moisture suitability and per-day risk flags, then ranked.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from statistics import fmean, pvariance

from ricecast.engine.quarters import intersect, quarter_range, validate_quarter
from ricecast.errors import InputError
from ricecast.schemas.prediction import (
    CandidateWindow,
    CoverageStatus,
    DailyForecastSummary,
    DayOutlook,
    ForecastTrends,
    Location,
    RiskFlag,
    RiskFlagKind,
    WeatherDayPoint,
    WindowFeatures,
    WindowSelection,
)

WINDOW_DAYS = 7

# ── Risk thresholds ─────────────────────────────────────────────────────────
RAIN_THRESHOLD_MM = 30.0
STORM_WIND_KMH = 30.0
GERMINATION_BAND = (20.0, 35.0)
PLANTABLE_WIND_KMH = 20.0

# ── Score weights ───────────────────────────────────────────────────────────
TEMP_VARIANCE_CEILING = 25.0
WIND_VARIANCE_CEILING = 50.0
TEMP_STABILITY_WEIGHT = 0.6
WIND_STABILITY_WEIGHT = 0.4
STABILITY_WEIGHT = 0.75
MOISTURE_WEIGHT = 0.25
OPTIMAL_DAILY_RAIN_MM = 10.0
RAIN_TOLERANCE_MM = 20.0
RISK_FLAG_PENALTY = 12.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def day_risk_flags(point: WeatherDayPoint) -> list[RiskFlag]:
    flags: list[RiskFlag] = []
    if point.precipitation > RAIN_THRESHOLD_MM:
        flags.append(RiskFlag(date=point.date, kind=RiskFlagKind.heavy_rain, value=point.precipitation))
    if point.wind > STORM_WIND_KMH:
        flags.append(RiskFlag(date=point.date, kind=RiskFlagKind.storm_wind, value=point.wind))
    low, high = GERMINATION_BAND
    if not low <= point.temperature <= high:
        flags.append(
            RiskFlag(
                date=point.date,
                kind=RiskFlagKind.temperature_out_of_band,
                value=point.temperature,
            )
        )
    return flags


def window_features(days: Sequence[WeatherDayPoint]) -> WindowFeatures:
    temps = [d.temperature for d in days]
    winds = [d.wind for d in days]
    return WindowFeatures(
        mean_temperature=fmean(temps),
        total_precipitation=sum(d.precipitation for d in days),
        mean_humidity=fmean(d.humidity for d in days),
        mean_wind=fmean(winds),
        temperature_variance=pvariance(temps),
        wind_variance=pvariance(winds),
    )


def stability_score(features: WindowFeatures) -> float:
    temp_part = max(0.0, 1 - features.temperature_variance / TEMP_VARIANCE_CEILING)
    wind_part = max(0.0, 1 - features.wind_variance / WIND_VARIANCE_CEILING)
    return 100 * (TEMP_STABILITY_WEIGHT * temp_part + WIND_STABILITY_WEIGHT * wind_part)


def moisture_suitability(features: WindowFeatures, days: int = WINDOW_DAYS) -> float:
    mean_rain = features.total_precipitation / days
    return 100 * max(0.0, 1 - abs(mean_rain - OPTIMAL_DAILY_RAIN_MM) / RAIN_TOLERANCE_MM)


def score_window(days: Sequence[WeatherDayPoint]) -> CandidateWindow:
    features = window_features(days)
    stability = stability_score(features)
    flags = [flag for day in days for flag in day_risk_flags(day)]
    raw = (
        STABILITY_WEIGHT * stability
        + MOISTURE_WEIGHT * moisture_suitability(features, len(days))
        - RISK_FLAG_PENALTY * len(flags)
    )
    return CandidateWindow(
        start_date=days[0].date,
        end_date=days[-1].date,
        days=list(days),
        features=features,
        stability_score=round(stability, 2),
        risk_flags=flags,
        weather_score=round(_clamp(raw, 0.0, 100.0), 2),
    )


def index_forecast(forecast: Sequence[WeatherDayPoint]) -> dict[dt.date, WeatherDayPoint]:
    by_date: dict[dt.date, WeatherDayPoint] = {}
    for point in forecast:
        if point.date in by_date:
            raise InputError(f"Duplicate forecast date: {point.date.isoformat()}")
        by_date[point.date] = point
    return by_date


def select_windows(
    forecast: Sequence[WeatherDayPoint],
    year: int,
    quarter: int,
    *,
    horizon_start: dt.date | None = None,
    horizon_days: int = 16,
) -> WindowSelection:
    """Rank every complete 7-day window of ``quarter`` inside the horizon.

    The horizon runs ``horizon_days`` days from ``horizon_start`` (or from the
    first forecast date).  A quarter entirely outside it yields status
    ``no_forecast_coverage``; a quarter inside it with no gap-free 7-day run
    yields ``insufficient_window``.  Windows are ordered by weather score
    descending, earliest start first on ties.
    """
    validate_quarter(quarter)
    if horizon_days < 1:
        raise InputError(f"horizon_days must be >= 1, got {horizon_days}")
    by_date = index_forecast(forecast)

    first = horizon_start or (min(by_date) if by_date else None)
    span = None
    if first is not None:
        horizon = (first, first + dt.timedelta(days=horizon_days - 1))
        span = intersect(horizon, quarter_range(year, quarter))
    if span is None:
        return WindowSelection(
            year=year,
            quarter=quarter,
            status=CoverageStatus.no_forecast_coverage,
            days_expected=0,
            days_present=0,
        )

    span_start, span_end = span
    span_len = (span_end - span_start).days + 1
    span_dates = [span_start + dt.timedelta(days=i) for i in range(span_len)]
    present = sum(1 for d in span_dates if d in by_date)

    windows: list[CandidateWindow] = []
    for offset in range(span_len - WINDOW_DAYS + 1):
        dates = span_dates[offset : offset + WINDOW_DAYS]
        if all(d in by_date for d in dates):
            windows.append(score_window([by_date[d] for d in dates]))

    windows.sort(key=lambda w: (-w.weather_score, w.start_date))
    return WindowSelection(
        year=year,
        quarter=quarter,
        status=CoverageStatus.ok if windows else CoverageStatus.insufficient_window,
        days_expected=span_len,
        days_present=present,
        best_window=windows[0] if windows else None,
        windows=windows,
    )


# ── Daily outlook ───────────────────────────────────────────────────────────


def _temperature_trend(values: list[float]) -> str:
    if len(values) < 3:
        return "stable"
    mid = len(values) // 2
    diff = fmean(values[mid:]) - fmean(values[:mid])
    if abs(diff) < 1:
        return "stable"
    return "rising" if diff > 0 else "falling"


def _precipitation_trend(values: list[float]) -> str:
    avg = fmean(values)
    if avg < 5:
        return "dry"
    if avg < 15:
        return "moderate"
    return "wet"


def _wind_trend(values: list[float]) -> str:
    avg = fmean(values)
    if avg < 10:
        return "calm"
    if avg < 15:
        return "moderate"
    return "windy"


def summarize_forecast(
    forecast: Sequence[WeatherDayPoint],
    *,
    location: Location,
) -> DailyForecastSummary:
    """Per-day risk flags and a plantable verdict, plus horizon-wide trends."""
    by_date = index_forecast(forecast)
    points = [by_date[d] for d in sorted(by_date)]

    days: list[DayOutlook] = []
    for point in points:
        flags = day_risk_flags(point)
        plantable = not flags and point.wind <= PLANTABLE_WIND_KMH
        days.append(DayOutlook(point=point, risk_flags=flags, plantable=plantable))

    if points:
        trends = ForecastTrends(
            temperature=_temperature_trend([p.temperature for p in points]),
            precipitation=_precipitation_trend([p.precipitation for p in points]),
            wind=_wind_trend([p.wind for p in points]),
        )
    else:
        trends = ForecastTrends(temperature="stable", precipitation="dry", wind="calm")

    return DailyForecastSummary(
        location=location,
        days=days,
        plantable_days=sum(1 for d in days if d.plantable),
        trends=trends,
    )
