"""Yield prediction from a window's weather features and a historical baseline.

The baseline yield for the quarter is scaled by a bounded linear adjustment
on how far the window's weather departs from the baseline quarter's weather.
Confidence multiplies four independent factors so that any single weak
signal (missing forecast days, a thin historical sample, volatile weather, a
substituted baseline year) caps the result.
"""

from __future__ import annotations

from collections.abc import Sequence

from ricecast.engine.quarters import quarter_length, validate_quarter
from ricecast.engine.windows import WINDOW_DAYS
from ricecast.errors import NotFoundError
from ricecast.schemas.prediction import (
    EstimateBasis,
    HistoricalBaseline,
    HistoricalComparison,
    WindowFeatures,
    YieldEstimate,
    YieldTrend,
)

# ── Adjustment model ────────────────────────────────────────────────────────
# (coefficient, scale) per feature; deviation / scale is clamped to ±MAX_DEVIATION
TEMPERATURE_COEFFICIENT = (-0.04, 2.0)
PRECIPITATION_COEFFICIENT = (0.03, 5.0)
HUMIDITY_COEFFICIENT = (-0.01, 10.0)
WIND_COEFFICIENT = (-0.03, 5.0)
MAX_DEVIATION = 2.0
ADJUSTMENT_BOUNDS = (0.5, 1.5)

# ── Confidence model ────────────────────────────────────────────────────────
BASE_CONFIDENCE = 0.95
HISTORICAL_ONLY_COVERAGE = 0.6
FULL_SAMPLE_SIZE = 10
ESTIMATE_PENALTY = 0.8
TEMP_VARIANCE_SCALE = 25.0
WIND_VARIANCE_SCALE = 50.0

TREND_THRESHOLD_PERCENT = 5.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def resolve_baseline(
    records: Sequence[HistoricalBaseline],
    quarter: int,
    year: int,
) -> tuple[HistoricalBaseline, bool]:
    """Baseline for ``(quarter, year)`` and whether it is a substitute.

    Falls back to the nearest year with the same quarter; equally distant
    years resolve to the earlier one.
    """
    validate_quarter(quarter)
    candidates = [r for r in records if r.quarter == quarter]
    if not candidates:
        raise NotFoundError(f"No historical baseline for Q{quarter}")
    for record in candidates:
        if record.year == year:
            return record, False
    nearest = min(candidates, key=lambda r: (abs(r.year - year), r.year))
    return nearest, True


def adjustment_factor(features: WindowFeatures, baseline: HistoricalBaseline) -> float:
    window_daily_rain = features.total_precipitation / WINDOW_DAYS
    baseline_daily_rain = baseline.total_precipitation / quarter_length(baseline.year, baseline.quarter)

    terms = (
        (TEMPERATURE_COEFFICIENT, features.mean_temperature - baseline.mean_temperature),
        (PRECIPITATION_COEFFICIENT, window_daily_rain - baseline_daily_rain),
        (HUMIDITY_COEFFICIENT, features.mean_humidity - baseline.mean_humidity),
        (WIND_COEFFICIENT, features.mean_wind - baseline.mean_wind),
    )
    total = 1.0
    for (coefficient, scale), deviation in terms:
        total += coefficient * _clamp(deviation / scale, -MAX_DEVIATION, MAX_DEVIATION)
    return _clamp(total, *ADJUSTMENT_BOUNDS)


def confidence_level(
    *,
    coverage: float,
    sample_size: int,
    features: WindowFeatures | None,
    is_estimate: bool,
) -> float:
    sample = min(1.0, max(0, sample_size) / FULL_SAMPLE_SIZE)
    if features is None:
        variance = 1.0
    else:
        variance = 1 / (
            1
            + features.temperature_variance / TEMP_VARIANCE_SCALE
            + features.wind_variance / WIND_VARIANCE_SCALE
        )
    penalty = ESTIMATE_PENALTY if is_estimate else 1.0
    return _clamp(BASE_CONFIDENCE * _clamp(coverage, 0.0, 1.0) * sample * variance * penalty, 0.0, 1.0)


def compare_to_baseline(predicted: float, baseline_yield: float) -> HistoricalComparison:
    delta = (predicted - baseline_yield) / baseline_yield * 100 if baseline_yield else 0.0
    if delta > TREND_THRESHOLD_PERCENT:
        trend = YieldTrend.improving
    elif delta < -TREND_THRESHOLD_PERCENT:
        trend = YieldTrend.declining
    else:
        trend = YieldTrend.stable
    return HistoricalComparison(delta_percent=round(delta, 2), trend=trend)


def estimate_yield(
    baseline: HistoricalBaseline,
    *,
    features: WindowFeatures | None,
    days_present: int = 0,
    days_expected: int = 0,
    is_estimate: bool = False,
) -> YieldEstimate:
    """Predict yield for one window, or a historical-only figure when
    ``features`` is None (no window to score).
    """
    if features is None:
        adjustment = 1.0
        coverage = HISTORICAL_ONLY_COVERAGE
        basis = EstimateBasis.historical_only
    else:
        adjustment = adjustment_factor(features, baseline)
        coverage = days_present / days_expected if days_expected > 0 else 0.0
        basis = EstimateBasis.forecast

    predicted = round(baseline.yield_tonnes_per_ha * adjustment, 3)
    confidence = confidence_level(
        coverage=coverage,
        sample_size=baseline.sample_size,
        features=features,
        is_estimate=is_estimate,
    )
    return YieldEstimate(
        predicted_yield=predicted,
        baseline_yield=baseline.yield_tonnes_per_ha,
        baseline_year=baseline.year,
        adjustment_factor=round(adjustment, 4),
        confidence_level=round(confidence, 4),
        is_estimate=is_estimate,
        basis=basis,
        comparison=compare_to_baseline(predicted, baseline.yield_tonnes_per_ha),
    )
